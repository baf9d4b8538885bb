"""Polygon area estimation activity: composable pipeline.

Turns an uploaded polygon file into an area and a WGS 84 centroid.
Dispatch is by filename extension; each sub-parser produces rings that
all pass through the same ring-combination step.

Stages:
- **_geojson**: ``.geojson`` / ``.json`` documents
- **_table**: ``.csv`` / ``.tsv`` / ``.txt`` longitude/latitude tables
- **_shapefile**: ``.shp`` polygon records
- **_archive**: ``.zip`` bundles holding a shapefile, with optional
  ``.dbf`` (**_dbf**) and ``.prj`` companions
- **_geometry**: coordinate-system decision, area and centroid

Structural failures inside the binary readers surface as ``ParseError``
with the reader's original message.
"""

from __future__ import annotations

import logging
from typing import TYPE_CHECKING

from field_ingest.activities.parse_polygon._archive import iter_archive_members, read_archive
from field_ingest.activities.parse_polygon._constants import (
    ARCHIVE_EXTENSION,
    GEOJSON_EXTENSIONS,
    SHAPEFILE_EXTENSION,
    SUPPORTED_EXTENSIONS_LABEL,
    TABLE_EXTENSIONS,
)
from field_ingest.activities.parse_polygon._dbf import read_dbf_centroid
from field_ingest.activities.parse_polygon._geojson import read_geojson_rings
from field_ingest.activities.parse_polygon._geometry import (
    close_ring,
    combine_rings,
    detect_coordinate_system,
    ring_geodesic_signed_area,
    ring_planar_centroid,
    ring_planar_signed_area,
    unit_factor_from_projection,
)
from field_ingest.activities.parse_polygon._normalization import (
    decode_text,
    find_lon_lat_columns,
    normalize_column_name,
)
from field_ingest.activities.parse_polygon._shapefile import read_shapefile_rings
from field_ingest.activities.parse_polygon._table import detect_delimiter, read_table_ring
from field_ingest.core.exceptions import FormatError, ParseError
from field_ingest.models.geometry import CoordinateSystem, PolygonSource

if TYPE_CHECKING:
    from field_ingest.models.results import PolygonAreaResult
    from field_ingest.models.upload import UploadedFile

logger = logging.getLogger("field_ingest.activities.parse_polygon")

__all__ = [
    "close_ring",
    "combine_rings",
    "decode_text",
    "detect_coordinate_system",
    "detect_delimiter",
    "find_lon_lat_columns",
    "iter_archive_members",
    "normalize_column_name",
    "parse_polygon_upload",
    "read_archive",
    "read_dbf_centroid",
    "read_geojson_rings",
    "read_shapefile_rings",
    "read_table_ring",
    "ring_geodesic_signed_area",
    "ring_planar_centroid",
    "ring_planar_signed_area",
    "unit_factor_from_projection",
]


def parse_polygon_upload(
    upload: UploadedFile,
    *,
    coordinate_system: CoordinateSystem | None = None,
) -> PolygonAreaResult:
    """Estimate area and centroid from an uploaded polygon file.

    Args:
        upload: The uploaded file; its extension selects the parser.
        coordinate_system: Explicit coordinate system of the file's
            points. Detected from point ranges when ``None``.

    Returns:
        A ``PolygonAreaResult`` with area rounded to 2 decimals and the
        centroid rounded to 6 decimals.

    Raises:
        ParseError: If the extension is unsupported, the file is
            malformed, holds no usable rings, lacks longitude/latitude
            columns, has unknown projected units or no centroid source,
            or encloses zero area.
    """
    extension = upload.extension
    if not _is_supported(extension):
        msg = (
            f"Unsupported polygon file type {extension or upload.name!r}. "
            f"Use {SUPPORTED_EXTENSIONS_LABEL}."
        )
        raise ParseError(msg, code="UNSUPPORTED_FILE_TYPE")

    logger.info(
        "Parsing polygon file | name=%s | size=%d bytes | crs=%s",
        upload.name,
        upload.size_bytes,
        coordinate_system.value if coordinate_system else "auto",
    )

    try:
        return _dispatch(upload, extension, coordinate_system)
    except FormatError as exc:
        raise ParseError(exc.message) from exc


def _is_supported(extension: str) -> bool:
    return (
        extension in GEOJSON_EXTENSIONS
        or extension in TABLE_EXTENSIONS
        or extension in (SHAPEFILE_EXTENSION, ARCHIVE_EXTENSION)
    )


def _dispatch(
    upload: UploadedFile,
    extension: str,
    coordinate_system: CoordinateSystem | None,
) -> PolygonAreaResult:
    if extension in GEOJSON_EXTENSIONS:
        rings = read_geojson_rings(decode_text(upload.content, upload.name))
        return combine_rings(rings, PolygonSource.GEOJSON, coordinate_system=coordinate_system)

    if extension in TABLE_EXTENSIONS:
        ring = read_table_ring(decode_text(upload.content, upload.name))
        return combine_rings([ring], PolygonSource.TABLE, coordinate_system=coordinate_system)

    if extension == SHAPEFILE_EXTENSION:
        rings = read_shapefile_rings(upload.content)
        return combine_rings(rings, PolygonSource.SHP, coordinate_system=coordinate_system)

    return _parse_bundle(upload.content, coordinate_system)


def _parse_bundle(
    data: bytes,
    coordinate_system: CoordinateSystem | None,
) -> PolygonAreaResult:
    """Parse the shapefile inside a ZIP bundle, with its companions."""
    members = read_archive(data)
    shapefiles = [name for name in members if name.endswith(SHAPEFILE_EXTENSION)]
    if not shapefiles:
        msg = "ZIP must contain a .shp file."
        raise ParseError(msg, code="NO_RINGS")
    if len(shapefiles) > 1:
        logger.warning("ZIP holds %d .shp files; using %s", len(shapefiles), shapefiles[0])

    shp_name = shapefiles[0]
    base = shp_name[: -len(SHAPEFILE_EXTENSION)]
    dbf = members.get(f"{base}.dbf")
    prj = members.get(f"{base}.prj")

    rings = read_shapefile_rings(members[shp_name].content)
    centroid = read_dbf_centroid(dbf.content) if dbf else None
    prj_text = prj.content.decode("utf-8", errors="replace") if prj else None

    logger.info(
        "Bundle companions | shp=%s | dbf=%s | prj=%s | dbf_centroid=%s",
        shp_name,
        dbf is not None,
        prj is not None,
        centroid,
    )
    return combine_rings(
        rings,
        PolygonSource.ZIP_SHP,
        prj_text=prj_text,
        companion_centroid=centroid,
        coordinate_system=coordinate_system,
    )
