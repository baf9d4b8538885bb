"""Minimal dBASE (``.dbf``) reader for a companion centroid.

Projected shapefile geometry cannot be placed on a map without a
reprojection library, so a bundle may instead carry longitude/latitude
attribute columns. This reader averages every valid pair.
"""

from __future__ import annotations

import logging
import struct

from field_ingest.activities.parse_polygon._constants import (
    DBF_DELETED_MARKER,
    DBF_FIELD_DESCRIPTOR_BYTES,
    DBF_FIELD_LENGTH_OFFSET,
    DBF_FIELD_NAME_BYTES,
    DBF_HEADER_BYTES,
    DBF_HEADER_TERMINATOR,
    DBF_MIN_BYTES,
)
from field_ingest.activities.parse_polygon._normalization import (
    find_lon_lat_columns,
    to_finite_float,
)
from field_ingest.core.constants import is_lon_lat
from field_ingest.models.geometry import LatLon

logger = logging.getLogger("field_ingest.activities.parse_polygon")

_HEADER = struct.Struct("<4xIHH")


def read_dbf_centroid(data: bytes) -> LatLon | None:
    """Return the mean longitude/latitude of a DBF's records.

    Columns are matched against the longitude/latitude synonyms. Deleted
    records, unparseable values and pairs outside WGS 84 bounds are
    ignored.

    Returns:
        The mean location, or ``None`` if the table is too short, has no
        matching columns, declares records shorter than its fields, or
        holds no valid pair.
    """
    if len(data) < DBF_MIN_BYTES:
        return None

    record_count, header_length, record_length = _HEADER.unpack_from(data, 0)
    fields = _read_field_descriptors(data, header_length)
    columns = find_lon_lat_columns([name for name, _length in fields])
    if columns is None:
        logger.info("DBF has no longitude/latitude columns: %s", [name for name, _ in fields])
        return None
    lon_idx, lat_idx = columns

    # Byte offset of each field within a record; byte 0 is the deletion flag.
    starts: list[int] = []
    cursor = 1
    for _name, length in fields:
        starts.append(cursor)
        cursor += length
    if record_length < cursor:
        logger.warning(
            "DBF record length %d is shorter than its fields (%d bytes); ignoring table",
            record_length,
            cursor,
        )
        return None

    lon_sum = 0.0
    lat_sum = 0.0
    count = 0
    for index in range(record_count):
        record_start = header_length + index * record_length
        if record_start + record_length > len(data):
            break
        if data[record_start] == DBF_DELETED_MARKER:
            continue
        lon = to_finite_float(_field_text(data, record_start, starts[lon_idx], fields[lon_idx][1]))
        lat = to_finite_float(_field_text(data, record_start, starts[lat_idx], fields[lat_idx][1]))
        if lon is None or lat is None or not is_lon_lat(lon, lat):
            continue
        lon_sum += lon
        lat_sum += lat
        count += 1

    if count == 0:
        return None
    logger.info("DBF centroid from %d record(s)", count)
    return LatLon(lat=lat_sum / count, lon=lon_sum / count)


def _read_field_descriptors(data: bytes, header_length: int) -> list[tuple[str, int]]:
    fields: list[tuple[str, int]] = []
    offset = DBF_HEADER_BYTES
    while offset + DBF_FIELD_DESCRIPTOR_BYTES <= min(header_length, len(data)):
        if data[offset] == DBF_HEADER_TERMINATOR:
            break
        raw_name = data[offset : offset + DBF_FIELD_NAME_BYTES]
        name = raw_name.split(b"\x00", 1)[0].decode("latin-1").strip().lower()
        fields.append((name, data[offset + DBF_FIELD_LENGTH_OFFSET]))
        offset += DBF_FIELD_DESCRIPTOR_BYTES
    return fields


def _field_text(data: bytes, record_start: int, field_start: int, length: int) -> str:
    start = record_start + field_start
    return data[start : start + length].decode("latin-1").strip()
