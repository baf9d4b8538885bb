"""Delimited longitude/latitude coordinate table parsing."""

from __future__ import annotations

import csv

from field_ingest.activities.parse_polygon._constants import (
    DEFAULT_TABLE_DELIMITER,
    MIN_RING_POINTS,
    TABLE_DELIMITERS,
)
from field_ingest.activities.parse_polygon._normalization import (
    find_lon_lat_columns,
    to_finite_float,
)
from field_ingest.core.exceptions import ParseError
from field_ingest.models.geometry import Ring


def detect_delimiter(header_line: str) -> str:
    """Pick tab, then semicolon, by presence in the header; default to comma."""
    return next((d for d in TABLE_DELIMITERS if d in header_line), DEFAULT_TABLE_DELIMITER)


def read_table_ring(text: str) -> Ring:
    """Read a coordinate table as exactly one ring.

    The first non-blank line is the header. Every later row with two
    parseable numbers in the longitude and latitude columns becomes a
    point; other rows are skipped.

    Raises:
        ParseError: If the table is empty or malformed, has no
            longitude/latitude columns, or yields fewer than three points.
    """
    lines = [line.strip() for line in text.splitlines()]
    lines = [line for line in lines if line]
    if len(lines) < 2:
        msg = "Coordinate table is empty."
        raise ParseError(msg)

    delimiter = detect_delimiter(lines[0])
    rows = csv.reader(lines, delimiter=delimiter)
    try:
        headers = [h.strip() for h in next(rows)]
    except csv.Error as exc:
        msg = f"Malformed coordinate table: {exc}"
        raise ParseError(msg) from exc
    columns = find_lon_lat_columns(headers)
    if columns is None:
        msg = (
            "Could not find longitude/latitude columns in coordinate table "
            f"(header: {', '.join(headers)})."
        )
        raise ParseError(msg, code="COLUMNS_MISSING")
    lon_idx, lat_idx = columns

    ring: Ring = []
    try:
        for row in rows:
            if max(lon_idx, lat_idx) >= len(row):
                continue
            lon = to_finite_float(row[lon_idx])
            lat = to_finite_float(row[lat_idx])
            if lon is None or lat is None:
                continue
            ring.append((lon, lat))
    except csv.Error as exc:
        msg = f"Malformed coordinate table at line {rows.line_num}: {exc}"
        raise ParseError(msg) from exc

    if len(ring) < MIN_RING_POINTS:
        msg = f"Need at least {MIN_RING_POINTS} valid longitude/latitude rows, found {len(ring)}."
        raise ParseError(msg, code="NO_RINGS")
    return ring
