"""Geometry primitives shared by the estimators.

- ``Ring``: ordered sequence of ``(x, y)`` points in a single coordinate
  space, implicitly closed.
- ``CoordinateSystem``: the per-file decision between geographic degrees
  and a projected linear unit.
- ``PolygonSource``: which input format produced a polygon result.
- ``LatLon``: a WGS 84 location.
"""

from __future__ import annotations

import enum
from dataclasses import dataclass

Point = tuple[float, float]
Ring = list[Point]


class CoordinateSystem(enum.Enum):
    """Coordinate space of every ring in one uploaded file.

    Values:
        GEOGRAPHIC: Longitude/latitude in decimal degrees.
        PROJECTED:  Planar coordinates in a linear unit (metres or feet).
    """

    GEOGRAPHIC = "geographic"
    PROJECTED = "projected"


class PolygonSource(enum.Enum):
    """Input format a polygon result was parsed from.

    Values:
        TABLE:   Delimited longitude/latitude coordinate table.
        GEOJSON: Loose GeoJSON document.
        SHP:     Single shapefile geometry (``.shp``) upload.
        ZIP_SHP: Shapefile geometry bundled in a ZIP archive.
    """

    TABLE = "table"
    GEOJSON = "geojson"
    SHP = "shp"
    ZIP_SHP = "zip-shp"


@dataclass(frozen=True, slots=True)
class LatLon:
    """A WGS 84 location in decimal degrees."""

    lat: float
    lon: float

    def to_dict(self) -> dict[str, float]:
        return {"lat": self.lat, "lon": self.lon}
