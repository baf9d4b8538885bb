"""Field area orchestrator.

Runs the raster and polygon estimators on one request and combines
their results. The two estimators share no data, so their order does
not matter. Either failing aborts the request with that estimator's
error unchanged; no partial result is returned.

The polygon result supplies the field-level area and centroid. The
raster result is reported alongside it for comparison.
"""

from __future__ import annotations

import logging
from typing import TYPE_CHECKING

from field_ingest.activities.estimate_raster_area import estimate_raster_area
from field_ingest.activities.parse_polygon import parse_polygon_upload
from field_ingest.models.results import FieldAreaResult

if TYPE_CHECKING:
    from field_ingest.models.geometry import CoordinateSystem
    from field_ingest.models.upload import UploadedFile

logger = logging.getLogger("field_ingest.orchestrators.field_area")


def estimate_field_area(
    raster: UploadedFile,
    polygon: UploadedFile,
    *,
    coordinate_system: CoordinateSystem | None = None,
) -> FieldAreaResult:
    """Estimate field area from a raster upload and a polygon upload.

    Args:
        raster: GeoTIFF upload.
        polygon: Polygon-source upload.
        coordinate_system: Optional explicit coordinate system for the
            polygon file.

    Returns:
        A ``FieldAreaResult`` whose chosen values come from the polygon.

    Raises:
        FormatError: If the raster is malformed.
        ParseError: If the polygon file cannot yield an area and centroid.
    """
    logger.info(
        "Field area request | raster=%s (%d bytes) | polygon=%s (%d bytes)",
        raster.name,
        raster.size_bytes,
        polygon.name,
        polygon.size_bytes,
    )

    raster_result = estimate_raster_area(raster.content)
    polygon_result = parse_polygon_upload(polygon, coordinate_system=coordinate_system)

    result = FieldAreaResult(
        polygon=polygon_result,
        raster=raster_result,
        polygon_file_name=polygon.name,
        raster_file_name=raster.name,
    )

    logger.info(
        "Field area estimated | chosen=%.2f ac | raster=%.2f ac | centroid=(%.6f, %.6f) | "
        "source=%s",
        result.chosen_area_acres,
        raster_result.area_acres,
        polygon_result.centroid_lat,
        polygon_result.centroid_lon,
        polygon_result.source.value,
    )
    return result
