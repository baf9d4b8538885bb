"""Raster area estimation activity.

Derives a pixel-area acreage, and optionally an image-centre location,
from a single-image GeoTIFF buffer without any geospatial library.

Stages:
- **_tiff**: header validation and typed IFD value decoding
- **_geokeys**: GeoKey directory parsing and linear unit resolution

A raster without pixel-scale metadata is rejected; no default scale is
assumed.
"""

from __future__ import annotations

import logging
import math

from field_ingest.activities.estimate_raster_area._constants import (
    KEY_GT_MODEL_TYPE,
    KEY_PROJ_LINEAR_UNITS,
    MIN_TIEPOINT_VALUES,
    MIN_TRANSFORMATION_VALUES,
    MODEL_TYPE_GEOGRAPHIC,
    TAG_GEO_KEY_DIRECTORY,
    TAG_IMAGE_LENGTH,
    TAG_IMAGE_WIDTH,
    TAG_MODEL_PIXEL_SCALE,
    TAG_MODEL_TIEPOINT,
    TAG_MODEL_TRANSFORMATION,
)
from field_ingest.activities.estimate_raster_area._geokeys import (
    parse_geo_keys,
    resolve_linear_unit,
)
from field_ingest.activities.estimate_raster_area._tiff import STAGE, TiffEntry, TiffReader
from field_ingest.core.constants import (
    AREA_DECIMALS,
    CENTROID_DECIMALS,
    PIXEL_SIZE_DECIMALS,
    SQ_METERS_PER_ACRE,
    is_lon_lat,
)
from field_ingest.core.exceptions import FormatError
from field_ingest.models.geometry import LatLon
from field_ingest.models.results import RasterAreaResult

logger = logging.getLogger("field_ingest.activities.estimate_raster_area")

__all__ = [
    "TiffEntry",
    "TiffReader",
    "estimate_raster_area",
    "parse_geo_keys",
    "resolve_linear_unit",
]


def estimate_raster_area(data: bytes) -> RasterAreaResult:
    """Estimate the ground area covered by a GeoTIFF.

    Args:
        data: Complete raster file contents.

    Returns:
        A ``RasterAreaResult`` with area rounded to 2 decimals and pixel
        sizes rounded to 4 decimals.

    Raises:
        FormatError: If the header is invalid, the width or height tag
            is missing or zero, or no pixel scale can be determined.
    """
    reader = TiffReader(data)

    width = _read_dimension(reader, TAG_IMAGE_WIDTH, "width")
    height = _read_dimension(reader, TAG_IMAGE_LENGTH, "height")

    pixel_scale = reader.values(TAG_MODEL_PIXEL_SCALE)
    pixel_size_x, pixel_size_y = _resolve_pixel_size(reader, pixel_scale)

    geo_keys = parse_geo_keys(reader.values(TAG_GEO_KEY_DIRECTORY))
    model_type = geo_keys.get(KEY_GT_MODEL_TYPE)
    unit_factor, units, unit_warning = resolve_linear_unit(geo_keys.get(KEY_PROJ_LINEAR_UNITS))

    warnings: list[str] = []
    if unit_warning:
        logger.warning("%s", unit_warning)
        warnings.append(unit_warning)
    if model_type == MODEL_TYPE_GEOGRAPHIC:
        warnings.append(
            "Raster uses a geographic model; pixel size is in degrees, "
            "so the raster area is not a ground measurement."
        )

    pixel_area_sq_meters = (pixel_size_x * unit_factor) * (pixel_size_y * unit_factor)
    area_sq_meters = width * height * pixel_area_sq_meters
    area_acres = area_sq_meters / SQ_METERS_PER_ACRE

    centroid = None
    tiepoint = reader.values(TAG_MODEL_TIEPOINT)
    if (
        model_type == MODEL_TYPE_GEOGRAPHIC
        and len(tiepoint) >= MIN_TIEPOINT_VALUES
        and len(pixel_scale) >= 2
    ):
        centroid = _image_centre(width, height, tiepoint, pixel_scale)

    logger.info(
        "Raster area estimated | width=%d | height=%d | pixel=(%.4f, %.4f) | "
        "units=%s | area=%.2f m2 | centroid=%s",
        width,
        height,
        pixel_size_x,
        pixel_size_y,
        units,
        area_sq_meters,
        centroid,
    )

    return RasterAreaResult(
        area_sq_meters=round(area_sq_meters, AREA_DECIMALS),
        area_acres=round(area_acres, AREA_DECIMALS),
        width=width,
        height=height,
        pixel_size_x=round(pixel_size_x, PIXEL_SIZE_DECIMALS),
        pixel_size_y=round(pixel_size_y, PIXEL_SIZE_DECIMALS),
        units=units,
        centroid=centroid,
        warnings=warnings,
    )


# ---------------------------------------------------------------------------
# Helpers
# ---------------------------------------------------------------------------


def _read_dimension(reader: TiffReader, tag: int, label: str) -> int:
    values = reader.values(tag)
    if not values or int(values[0]) <= 0:
        msg = f"Could not read TIFF {label}: tag {tag} is missing or zero."
        raise FormatError(msg, stage=STAGE)
    return int(values[0])


def _resolve_pixel_size(
    reader: TiffReader, pixel_scale: tuple[float, ...]
) -> tuple[float, float]:
    """Return ``(x, y)`` pixel size, preferring ModelPixelScale over ModelTransformation."""
    size_x = abs(pixel_scale[0]) if len(pixel_scale) >= 2 else 0.0
    size_y = abs(pixel_scale[1]) if len(pixel_scale) >= 2 else 0.0

    if not (_usable(size_x) and _usable(size_y)):
        transform = reader.values(TAG_MODEL_TRANSFORMATION)
        if len(transform) >= MIN_TRANSFORMATION_VALUES:
            size_x = abs(transform[0])
            size_y = abs(transform[5])

    if not (_usable(size_x) and _usable(size_y)):
        msg = (
            "GeoTIFF missing pixel scale metadata: need a ModelPixelScale tag "
            f"({TAG_MODEL_PIXEL_SCALE}) or a ModelTransformation tag ({TAG_MODEL_TRANSFORMATION})."
        )
        raise FormatError(msg, stage=STAGE)
    return (size_x, size_y)


def _usable(value: float) -> bool:
    return math.isfinite(value) and value > 0


def _image_centre(
    width: int,
    height: int,
    tiepoint: tuple[float, ...],
    pixel_scale: tuple[float, ...],
) -> LatLon | None:
    """Project the image-centre pixel through the first tie point."""
    i0, j0, _k0, x0, y0 = tiepoint[:5]
    lon = x0 + (width / 2 - i0) * pixel_scale[0]
    lat = y0 - (height / 2 - j0) * pixel_scale[1]
    if not is_lon_lat(lon, lat):
        logger.warning("Discarding raster centroid outside WGS 84 bounds: (%s, %s)", lon, lat)
        return None
    return LatLon(lat=round(lat, CENTROID_DECIMALS), lon=round(lon, CENTROID_DECIMALS))
