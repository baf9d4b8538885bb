"""GeoKey directory parsing and linear unit resolution."""

from __future__ import annotations

from collections.abc import Sequence

from field_ingest.activities.estimate_raster_area._constants import (
    LINEAR_UNIT_FOOT,
    LINEAR_UNIT_METER,
    LINEAR_UNIT_US_SURVEY_FOOT,
)
from field_ingest.core.constants import METERS_PER_INTERNATIONAL_FOOT, METERS_PER_US_SURVEY_FOOT

_HEADER_VALUES = 4
_KEY_VALUES = 4


def parse_geo_keys(values: Sequence[float]) -> dict[int, int]:
    """Parse a GeoKeyDirectory tag into ``{key_id: value}``.

    The directory is a flat SHORT array: a 4-value header whose last
    element is the key count, then one ``(key_id, location, count,
    value)`` group per key. Only keys stored inline (``location == 0``
    and ``count == 1``) are returned; keys that reference other tags are
    not needed for area estimation.
    """
    keys: dict[int, int] = {}
    if len(values) < _HEADER_VALUES:
        return keys
    key_count = int(values[3])
    for index in range(key_count):
        start = _HEADER_VALUES + index * _KEY_VALUES
        if start + _KEY_VALUES > len(values):
            break
        key_id, location, count, value = (int(v) for v in values[start : start + _KEY_VALUES])
        if location == 0 and count == 1:
            keys[key_id] = value
    return keys


def resolve_linear_unit(code: int | None) -> tuple[float, str, str]:
    """Map an EPSG linear unit code to ``(metres_per_unit, label, warning)``.

    Unknown codes fall back to metres; ``warning`` then names the code,
    otherwise it is empty.
    """
    if code is None or code == LINEAR_UNIT_METER:
        return (1.0, "meters", "")
    if code == LINEAR_UNIT_FOOT:
        return (METERS_PER_INTERNATIONAL_FOOT, "international feet", "")
    if code == LINEAR_UNIT_US_SURVEY_FOOT:
        return (METERS_PER_US_SURVEY_FOOT, "US survey feet", "")
    return (1.0, f"code:{code} (assumed meters)", f"Unknown unit code {code}; assuming meters.")
