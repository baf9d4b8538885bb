"""Result records produced by the estimators and the orchestrator.

- ``RasterAreaResult``: pixel-area acreage from a GeoTIFF.
- ``PolygonAreaResult``: boundary acreage and centroid from a polygon file.
- ``FieldAreaResult``: the combined answer; the polygon side is authoritative.

All models are frozen dataclasses that check their invariants in
``__post_init__`` and serialise with ``to_dict()``.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import TYPE_CHECKING

from field_ingest.core.exceptions import IngestError

if TYPE_CHECKING:
    from field_ingest.models.geometry import LatLon, PolygonSource


class ModelValidationError(ValueError, IngestError):
    """Raised when a result model is constructed with invalid field values.

    Attributes:
        model: Name of the model class that failed validation.
        field_name: The field that violated the invariant.
        value: The invalid value.
    """

    default_stage = "model_validation"
    default_code = "MODEL_VALIDATION_FAILED"

    def __init__(self, model: str, field_name: str, value: object, message: str) -> None:
        self.model = model
        self.field_name = field_name
        self.value = value
        formatted = f"{model}.{field_name}={value!r}: {message}"
        IngestError.__init__(self, formatted)


@dataclass(frozen=True, slots=True)
class RasterAreaResult:
    """Area derived from raster dimensions and pixel size.

    Attributes:
        area_sq_meters: ``width * height * pixel area`` in square metres.
        area_acres: ``area_sq_meters`` in international acres.
        width: Raster width in pixels.
        height: Raster height in pixels.
        pixel_size_x: Ground units per pixel along X (declared unit).
        pixel_size_y: Ground units per pixel along Y (declared unit).
        units: Label of the declared linear unit.
        centroid: Image-centre location, only for geographic rasters
            with tie-point metadata.
        warnings: Non-fatal notices, in the order they were raised.
    """

    area_sq_meters: float
    area_acres: float
    width: int
    height: int
    pixel_size_x: float
    pixel_size_y: float
    units: str = "meters"
    centroid: LatLon | None = None
    warnings: list[str] = field(default_factory=list)

    def __post_init__(self) -> None:
        _check_min("RasterAreaResult", "area_sq_meters", self.area_sq_meters, 0)
        _check_min("RasterAreaResult", "area_acres", self.area_acres, 0)
        _check_positive("RasterAreaResult", "width", self.width)
        _check_positive("RasterAreaResult", "height", self.height)
        _check_min("RasterAreaResult", "pixel_size_x", self.pixel_size_x, 0)
        _check_min("RasterAreaResult", "pixel_size_y", self.pixel_size_y, 0)

    def to_dict(self) -> dict[str, object]:
        return {
            "area_sq_meters": self.area_sq_meters,
            "area_acres": self.area_acres,
            "width": self.width,
            "height": self.height,
            "pixel_size_x": self.pixel_size_x,
            "pixel_size_y": self.pixel_size_y,
            "units": self.units,
            "centroid": self.centroid.to_dict() if self.centroid else None,
            "warnings": list(self.warnings),
        }


@dataclass(frozen=True, slots=True)
class PolygonAreaResult:
    """Area and centroid derived from polygon rings.

    Attributes:
        area_sq_meters: Absolute combined area in square metres (always > 0).
        area_acres: ``area_sq_meters`` in international acres.
        centroid_lat: Centroid latitude in WGS 84 degrees.
        centroid_lon: Centroid longitude in WGS 84 degrees.
        ring_count: Number of rings that contributed.
        point_count: Total points across those rings, as read.
        source: Input format the rings came from.
    """

    area_sq_meters: float
    area_acres: float
    centroid_lat: float
    centroid_lon: float
    ring_count: int
    point_count: int
    source: PolygonSource

    def __post_init__(self) -> None:
        _check_positive("PolygonAreaResult", "area_sq_meters", self.area_sq_meters)
        _check_min("PolygonAreaResult", "ring_count", self.ring_count, 1)
        _check_min("PolygonAreaResult", "point_count", self.point_count, 3 * self.ring_count)

    def to_dict(self) -> dict[str, object]:
        return {
            "area_sq_meters": self.area_sq_meters,
            "area_acres": self.area_acres,
            "centroid": {"lat": self.centroid_lat, "lon": self.centroid_lon},
            "ring_count": self.ring_count,
            "point_count": self.point_count,
            "source": self.source.value,
        }


@dataclass(frozen=True, slots=True)
class FieldAreaResult:
    """Combined ingestion result.

    The polygon estimate is the chosen field-level answer; the raster
    estimate is kept for comparison.
    """

    polygon: PolygonAreaResult
    raster: RasterAreaResult
    polygon_file_name: str = ""
    raster_file_name: str = ""

    @property
    def chosen_area_acres(self) -> float:
        return self.polygon.area_acres

    @property
    def chosen_area_sq_meters(self) -> float:
        return self.polygon.area_sq_meters

    @property
    def centroid(self) -> tuple[float, float]:
        """Chosen centroid as ``(lat, lon)``."""
        return (self.polygon.centroid_lat, self.polygon.centroid_lon)

    def to_dict(self) -> dict[str, object]:
        """Serialise to the HTTP response body."""
        raster = self.raster.to_dict()
        raster["file_name"] = self.raster_file_name
        polygon = self.polygon.to_dict()
        polygon["file_name"] = self.polygon_file_name
        return {
            "chosen_area_acres": self.chosen_area_acres,
            "chosen_area_sq_meters": self.chosen_area_sq_meters,
            "centroid": {"lat": self.polygon.centroid_lat, "lon": self.polygon.centroid_lon},
            "raster": raster,
            "polygon": polygon,
        }


# ---------------------------------------------------------------------------
# Validation helpers
# ---------------------------------------------------------------------------


def _check_positive(model: str, field_name: str, value: float) -> None:
    if not value > 0:
        raise ModelValidationError(model, field_name, value, "must be > 0")


def _check_min(model: str, field_name: str, value: float, minimum: float) -> None:
    if not value >= minimum:
        raise ModelValidationError(model, field_name, value, f"must be >= {minimum}")
