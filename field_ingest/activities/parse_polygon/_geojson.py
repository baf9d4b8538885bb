"""GeoJSON ring extraction.

Collects every polygon ring from a document, whatever wraps it: a bare
geometry, a Feature, a FeatureCollection or a GeometryCollection.
"""

from __future__ import annotations

import json
import logging

from field_ingest.activities.parse_polygon._constants import MIN_RING_POINTS
from field_ingest.activities.parse_polygon._normalization import to_finite_float
from field_ingest.core.exceptions import ParseError
from field_ingest.models.geometry import Ring

logger = logging.getLogger("field_ingest.activities.parse_polygon")


def read_geojson_rings(text: str) -> list[Ring]:
    """Parse GeoJSON text into a flat list of rings.

    Raises:
        ParseError: If the text is not valid JSON.
    """
    try:
        document = json.loads(text)
    except json.JSONDecodeError as exc:
        msg = f"Not valid JSON: {exc.msg} at line {exc.lineno} column {exc.colno}."
        raise ParseError(msg) from exc

    rings: list[Ring] = []
    _collect(document, rings)
    return rings


def _collect(node: object, rings: list[Ring]) -> None:
    if not isinstance(node, dict):
        return
    kind = node.get("type")
    if kind == "FeatureCollection":
        for feature in node.get("features") or []:
            _collect(feature, rings)
    elif kind == "Feature":
        _collect(node.get("geometry"), rings)
    elif kind == "GeometryCollection":
        for geometry in node.get("geometries") or []:
            _collect(geometry, rings)
    elif kind == "Polygon":
        _add_polygon(node.get("coordinates"), rings)
    elif kind == "MultiPolygon":
        polygons = node.get("coordinates")
        if isinstance(polygons, list):
            for polygon in polygons:
                _add_polygon(polygon, rings)
    else:
        logger.debug("Ignoring GeoJSON object of type %r", kind)


def _add_polygon(raw_rings: object, rings: list[Ring]) -> None:
    if not isinstance(raw_rings, list):
        return
    for raw_ring in raw_rings:
        if not isinstance(raw_ring, list):
            continue
        ring: Ring = []
        for pair in raw_ring:
            if not isinstance(pair, list) or len(pair) < 2:
                continue
            x = to_finite_float(pair[0])
            y = to_finite_float(pair[1])
            if x is None or y is None:
                continue
            ring.append((x, y))
        if len(ring) >= MIN_RING_POINTS:
            rings.append(ring)
