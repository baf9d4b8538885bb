"""Data models.

Defines the data structures used throughout ingestion:
- UploadedFile / ArchiveMember: request-scoped byte payloads
- Ring, CoordinateSystem, PolygonSource, LatLon: geometry primitives
- RasterAreaResult / PolygonAreaResult / FieldAreaResult: results
"""

from field_ingest.models.geometry import (
    CoordinateSystem,
    LatLon,
    Point,
    PolygonSource,
    Ring,
)
from field_ingest.models.results import (
    FieldAreaResult,
    ModelValidationError,
    PolygonAreaResult,
    RasterAreaResult,
)
from field_ingest.models.upload import ArchiveMember, UploadedFile

__all__ = [
    "ArchiveMember",
    "CoordinateSystem",
    "FieldAreaResult",
    "LatLon",
    "ModelValidationError",
    "Point",
    "PolygonAreaResult",
    "PolygonSource",
    "RasterAreaResult",
    "Ring",
    "UploadedFile",
]
