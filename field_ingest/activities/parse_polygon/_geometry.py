"""Ring combination: area and centroid for a set of rings.

Every sub-parser funnels into ``combine_rings``. One coordinate-system
decision is made per file and applied to all rings:

- **Geographic**: signed area per ring from the spherical line integral
  ``sum(dlon * (2 + sin(lat1) + sin(lat2))) * R**2 / 2``. The centroid
  is the planar shoelace centroid of the raw degree values, weighted by
  each ring's area signed relative to the total, so holes pull away.
  Mixing an exact spherical area with a planar centroid is accurate for
  field-sized rings (kilometres); it drifts for rings spanning hundreds
  of kilometres.
- **Projected**: planar shoelace area scaled to square metres by a unit
  factor read from the companion projection text. Projected coordinates
  cannot be turned into a WGS 84 centroid here, so a companion centroid
  (from DBF longitude/latitude columns) is required.

Signed areas are summed before the absolute value is taken, so a hole
wound opposite to its shell is subtracted. Rings are not classified as
shell or hole; a hole wound the same way as its shell adds to the area.
"""

from __future__ import annotations

import logging
import math
from collections.abc import Sequence

from field_ingest.activities.parse_polygon._constants import (
    MIN_RING_POINTS,
    PRJ_FOOT_HINT,
    PRJ_METER_HINTS,
    PRJ_US_FOOT_HINTS,
)
from field_ingest.core.constants import (
    AREA_DECIMALS,
    CENTROID_DECIMALS,
    EARTH_RADIUS_METERS,
    METERS_PER_INTERNATIONAL_FOOT,
    METERS_PER_US_SURVEY_FOOT,
    SQ_METERS_PER_ACRE,
    is_lon_lat,
)
from field_ingest.core.exceptions import ParseError
from field_ingest.models.geometry import CoordinateSystem, LatLon, Point, PolygonSource, Ring
from field_ingest.models.results import PolygonAreaResult

logger = logging.getLogger("field_ingest.activities.parse_polygon")


# ---------------------------------------------------------------------------
# Per-ring primitives
# ---------------------------------------------------------------------------


def close_ring(ring: Sequence[Point]) -> Ring:
    """Return ``ring`` with its first point repeated at the end, if needed."""
    points = list(ring)
    if points and points[0] != points[-1]:
        points.append(points[0])
    return points


def ring_geodesic_signed_area(ring: Sequence[Point]) -> float:
    """Signed spherical area of a lon/lat ring in square metres.

    Clockwise rings are positive, the opposite of the shoelace sign.
    """
    closed = close_ring(ring)
    total = 0.0
    for (lon1, lat1), (lon2, lat2) in zip(closed, closed[1:]):
        total += math.radians(lon2 - lon1) * (
            2 + math.sin(math.radians(lat1)) + math.sin(math.radians(lat2))
        )
    return total * EARTH_RADIUS_METERS * EARTH_RADIUS_METERS / 2


def ring_planar_signed_area(ring: Sequence[Point]) -> float:
    """Signed shoelace area in native units squared. Counter-clockwise is positive."""
    closed = close_ring(ring)
    total = 0.0
    for (x1, y1), (x2, y2) in zip(closed, closed[1:]):
        total += x1 * y2 - x2 * y1
    return total / 2


def ring_planar_centroid(ring: Sequence[Point]) -> Point:
    """Shoelace centroid in native units.

    A degenerate (zero-area) ring returns its first point; callers weight
    centroids by area, so it contributes nothing.
    """
    closed = close_ring(ring)
    twice_area = 0.0
    cx = 0.0
    cy = 0.0
    for (x1, y1), (x2, y2) in zip(closed, closed[1:]):
        cross = x1 * y2 - x2 * y1
        twice_area += cross
        cx += (x1 + x2) * cross
        cy += (y1 + y2) * cross
    if twice_area == 0:
        return closed[0] if closed else (0.0, 0.0)
    return (cx / (3 * twice_area), cy / (3 * twice_area))


# ---------------------------------------------------------------------------
# File-level decisions
# ---------------------------------------------------------------------------


def detect_coordinate_system(rings: Sequence[Sequence[Point]]) -> CoordinateSystem:
    """Guess the coordinate system of a file from its point ranges.

    Every point inside ``[-180, 180] x [-90, 90]`` means geographic
    degrees; anything else means a projected linear unit. A small
    projected survey near the origin is misread as geographic, which is
    why callers may pass an explicit ``CoordinateSystem`` instead.
    """
    for ring in rings:
        for x, y in ring:
            if not is_lon_lat(x, y):
                return CoordinateSystem.PROJECTED
    return CoordinateSystem.GEOGRAPHIC


def unit_factor_from_projection(prj_text: str | None) -> float:
    """Metres per native unit, from the text of a ``.prj`` file.

    Raises:
        ParseError: If the text names neither feet nor metres.
    """
    prj = (prj_text or "").lower()
    if any(hint in prj for hint in PRJ_US_FOOT_HINTS):
        return METERS_PER_US_SURVEY_FOOT
    if PRJ_FOOT_HINT in prj:
        return METERS_PER_INTERNATIONAL_FOOT
    if not prj.strip() or any(hint in prj for hint in PRJ_METER_HINTS):
        return 1.0
    msg = "Projected shapefile units are unknown. Include a .prj with meter or foot units."
    raise ParseError(msg, code="UNITS_UNKNOWN")


# ---------------------------------------------------------------------------
# Combination
# ---------------------------------------------------------------------------


def combine_rings(
    rings: Sequence[Ring],
    source: PolygonSource,
    *,
    prj_text: str | None = None,
    companion_centroid: LatLon | None = None,
    coordinate_system: CoordinateSystem | None = None,
) -> PolygonAreaResult:
    """Combine rings into a single area and centroid.

    Args:
        rings: Rings from one file; rings with fewer than three points
            are ignored.
        source: Input format tag for the result.
        prj_text: Companion projection text, used for projected units.
        companion_centroid: WGS 84 centroid from companion attributes,
            required for projected coordinates.
        coordinate_system: Explicit coordinate system; detected from the
            point ranges when ``None``.

    Raises:
        ParseError: If there are no usable rings, the units are unknown,
            the combined area is zero or not finite, or a projected file has no
            companion centroid.
    """
    usable = [ring for ring in rings if len(ring) >= MIN_RING_POINTS]
    if not usable:
        msg = f"No polygon rings with at least {MIN_RING_POINTS} points found."
        raise ParseError(msg, code="NO_RINGS")

    point_count = sum(len(ring) for ring in usable)
    detected = detect_coordinate_system(usable)
    if coordinate_system is None:
        coordinate_system = detected
    elif (
        coordinate_system is CoordinateSystem.GEOGRAPHIC
        and detected is CoordinateSystem.PROJECTED
    ):
        msg = "Coordinates were declared geographic but fall outside longitude/latitude bounds."
        raise ParseError(msg)

    if coordinate_system is CoordinateSystem.GEOGRAPHIC:
        area, centroid = _combine_geographic(usable)
    else:
        area, centroid = _combine_projected(usable, prj_text, companion_centroid)

    logger.info(
        "Rings combined | source=%s | crs=%s | rings=%d | points=%d | area=%.2f m2 | "
        "centroid=(%.6f, %.6f)",
        source.value,
        coordinate_system.value,
        len(usable),
        point_count,
        area,
        centroid.lat,
        centroid.lon,
    )

    return PolygonAreaResult(
        area_sq_meters=round(area, AREA_DECIMALS),
        area_acres=round(area / SQ_METERS_PER_ACRE, AREA_DECIMALS),
        centroid_lat=round(centroid.lat, CENTROID_DECIMALS),
        centroid_lon=round(centroid.lon, CENTROID_DECIMALS),
        ring_count=len(usable),
        point_count=point_count,
        source=source,
    )


def _combine_geographic(rings: Sequence[Ring]) -> tuple[float, LatLon]:
    areas = [ring_geodesic_signed_area(ring) for ring in rings]
    signed_sum = _signed_total(areas)
    total = _require_area(signed_sum)

    # Weight each ring by its area relative to the dominant winding.
    sign = math.copysign(1.0, signed_sum)
    weighted_lon = 0.0
    weighted_lat = 0.0
    for ring, area in zip(rings, areas):
        lon, lat = ring_planar_centroid(ring)
        weighted_lon += lon * area * sign
        weighted_lat += lat * area * sign
    return (total, LatLon(lat=weighted_lat / total, lon=weighted_lon / total))


def _combine_projected(
    rings: Sequence[Ring],
    prj_text: str | None,
    companion_centroid: LatLon | None,
) -> tuple[float, LatLon]:
    factor = unit_factor_from_projection(prj_text)
    signed_sum = _signed_total(
        [ring_planar_signed_area(ring) * factor * factor for ring in rings]
    )

    total = _require_area(signed_sum)
    if companion_centroid is None:
        msg = (
            "Polygon is projected. Add longitude/latitude columns to the .dbf "
            "or use WGS84 geometry."
        )
        raise ParseError(msg, code="CENTROID_UNAVAILABLE")
    return (total, companion_centroid)


def _signed_total(areas: Sequence[float]) -> float:
    try:
        return math.fsum(areas)
    except (OverflowError, ValueError):
        return math.nan


def _require_area(signed_sum: float) -> float:
    total = abs(signed_sum)
    if not math.isfinite(total):
        msg = "Polygon area is not a finite number; coordinates are too large or not finite."
        raise ParseError(msg, code="AREA_NOT_FINITE")
    if round(total, AREA_DECIMALS) == 0:
        msg = "Polygon area is zero."
        raise ParseError(msg, code="ZERO_AREA")
    return total
