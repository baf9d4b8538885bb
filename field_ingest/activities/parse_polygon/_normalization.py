"""Text and column-name normalization helpers for polygon parsing.

Responsibilities:
- Decode uploaded text files
- Normalise column headers and locate longitude/latitude columns
- Convert raw values to finite floats
"""

from __future__ import annotations

import math
import re
from collections.abc import Sequence

from field_ingest.activities.parse_polygon._constants import LATITUDE_COLUMNS, LONGITUDE_COLUMNS
from field_ingest.core.exceptions import ParseError

_COLUMN_NOISE = re.compile(r"[\s_\-]")


def normalize_column_name(name: str) -> str:
    """Lowercase a header and strip whitespace, underscores and hyphens."""
    return _COLUMN_NOISE.sub("", name.lower())


def find_lon_lat_columns(headers: Sequence[str]) -> tuple[int, int] | None:
    """Return ``(lon_index, lat_index)`` of the first matching headers, or ``None``."""
    normalized = [normalize_column_name(h) for h in headers]
    lon_idx = next((i for i, h in enumerate(normalized) if h in LONGITUDE_COLUMNS), -1)
    lat_idx = next((i for i, h in enumerate(normalized) if h in LATITUDE_COLUMNS), -1)
    if lon_idx < 0 or lat_idx < 0:
        return None
    return (lon_idx, lat_idx)


def to_finite_float(value: object) -> float | None:
    """Convert ``value`` to a finite float, or ``None`` if it is not one."""
    if isinstance(value, bool):
        return None
    if isinstance(value, str):
        value = value.strip()
        if not value:
            return None
    try:
        number = float(value)  # type: ignore[arg-type]
    except (TypeError, ValueError, OverflowError):
        return None
    return number if math.isfinite(number) else None


def decode_text(content: bytes, filename: str) -> str:
    """Decode an uploaded text file as UTF-8, tolerating a byte-order mark.

    Raises:
        ParseError: If the bytes are not valid UTF-8.
    """
    try:
        return content.decode("utf-8-sig")
    except UnicodeDecodeError as exc:
        msg = f"Cannot read {filename!r} as UTF-8 text: {exc.reason} at byte {exc.start}."
        raise ParseError(msg) from exc
