"""Minimal ESRI shapefile (``.shp``) polygon reader.

Walks the record stream after the 100-byte file header and decomposes
every Polygon, PolygonZ and PolygonM record into one ring per part.
Other shape types are skipped. Only the X/Y pair of each point is read;
Z and M arrays that follow the points are ignored.
"""

from __future__ import annotations

import logging
import math
import struct

from field_ingest.activities.parse_polygon._constants import (
    MIN_RING_POINTS,
    SHP_FILE_CODE,
    SHP_HEADER_BYTES,
    SHP_POINT_BYTES,
    SHP_POLYGON_TYPES,
    SHP_RECORD_HEADER_BYTES,
)
from field_ingest.core.exceptions import FormatError
from field_ingest.models.geometry import Ring

logger = logging.getLogger("field_ingest.activities.parse_polygon")

STAGE = "parse_polygon"

_RECORD_HEADER = struct.Struct(">ii")
# shape type, bbox (4 doubles), part count, point count
_POLYGON_HEADER = struct.Struct("<i4dii")


def read_shapefile_rings(data: bytes) -> list[Ring]:
    """Extract polygon rings from a shapefile buffer.

    Rings with fewer than three points, or with a NaN or infinite
    coordinate, are dropped. A record whose declared content runs past
    the end of the buffer ends the walk.

    Raises:
        FormatError: If the header is missing or has the wrong file
            code, or a polygon record's part/point tables overrun it.
    """
    if len(data) < SHP_HEADER_BYTES:
        msg = (
            f"Invalid .shp file: {len(data)} bytes is shorter than the "
            f"{SHP_HEADER_BYTES}-byte header."
        )
        raise FormatError(msg, stage=STAGE)
    (file_code,) = struct.unpack_from(">i", data, 0)
    if file_code != SHP_FILE_CODE:
        msg = f"Invalid shapefile header: file code {file_code}, expected {SHP_FILE_CODE}."
        raise FormatError(msg, stage=STAGE)

    rings: list[Ring] = []
    offset = SHP_HEADER_BYTES
    while offset + SHP_RECORD_HEADER_BYTES <= len(data):
        record_number, content_words = _RECORD_HEADER.unpack_from(data, offset)
        content_start = offset + SHP_RECORD_HEADER_BYTES
        content_end = content_start + content_words * 2
        if content_words < 0 or content_end > len(data):
            logger.warning(
                "Shapefile record %d overruns the file (%d > %d bytes); stopping",
                record_number,
                content_end,
                len(data),
            )
            break

        if content_end - content_start >= 4:
            (shape_type,) = struct.unpack_from("<i", data, content_start)
            if shape_type in SHP_POLYGON_TYPES:
                rings.extend(_polygon_rings(data, content_start, content_end, record_number))
            else:
                logger.debug(
                    "Skipping shapefile record %d of shape type %d", record_number, shape_type
                )

        offset = content_end

    return rings


def _polygon_rings(data: bytes, start: int, end: int, record_number: int) -> list[Ring]:
    if start + _POLYGON_HEADER.size > end:
        _raise_truncated(record_number)
    _shape_type, *_bbox, part_count, point_count = _POLYGON_HEADER.unpack_from(data, start)

    parts_start = start + _POLYGON_HEADER.size
    points_start = parts_start + part_count * 4
    if part_count < 0 or point_count < 0 or points_start + point_count * SHP_POINT_BYTES > end:
        _raise_truncated(record_number)

    parts = struct.unpack_from(f"<{part_count}i", data, parts_start)
    coords = struct.unpack_from(f"<{point_count * 2}d", data, points_start)

    rings: list[Ring] = []
    for index, first in enumerate(parts):
        last = parts[index + 1] if index + 1 < part_count else point_count
        if not 0 <= first <= last <= point_count:
            _raise_truncated(record_number)
        ring = [(coords[2 * i], coords[2 * i + 1]) for i in range(first, last)]
        if not all(math.isfinite(x) and math.isfinite(y) for x, y in ring):
            logger.warning(
                "Dropping part %d of shapefile record %d: non-finite coordinates",
                index,
                record_number,
            )
            continue
        if len(ring) >= MIN_RING_POINTS:
            rings.append(ring)
    return rings


def _raise_truncated(record_number: int) -> None:
    msg = f"Invalid .shp file: polygon record {record_number} has inconsistent part/point tables."
    raise FormatError(msg, stage=STAGE)
