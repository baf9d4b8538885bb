"""Shared ingestion constants: single source of truth.

Unit conversion factors and coordinate bounds used by both the raster
and the polygon estimators.
"""

from __future__ import annotations

SQ_METERS_PER_ACRE: float = 4046.8564224
"""International acre in square metres."""

METERS_PER_INTERNATIONAL_FOOT: float = 0.3048
METERS_PER_US_SURVEY_FOOT: float = 0.3048006096012192

EARTH_RADIUS_METERS: float = 6378137.0
"""WGS 84 semi-major axis, used as a spherical radius."""

# WGS 84 coordinate bounds
MIN_LONGITUDE = -180.0
MAX_LONGITUDE = 180.0
MIN_LATITUDE = -90.0
MAX_LATITUDE = 90.0

# Presentation precision
AREA_DECIMALS = 2
PIXEL_SIZE_DECIMALS = 4
CENTROID_DECIMALS = 6


def is_lon_lat(lon: float, lat: float) -> bool:
    """Return True when the pair lies inside WGS 84 degree bounds."""
    return MIN_LONGITUDE <= lon <= MAX_LONGITUDE and MIN_LATITUDE <= lat <= MAX_LATITUDE
