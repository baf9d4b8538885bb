"""Thin HTTP boundary helpers for the Azure Functions entrypoint.

Keeps ``function_app.py`` down to the trigger binding and handoff:

- **read_upload**: buffers one multipart file part into an
  ``UploadedFile``, enforcing the configured size limit.
- **parse_coordinate_system**: reads the optional ``coordinateSystem``
  form field.
- **handle_field_area_request**: validates the request, runs the
  orchestrator and maps the outcome to ``(status_code, body)``.

The core parsers never see a partial upload: size policing happens here.
"""

from __future__ import annotations

import logging
import posixpath
from collections.abc import Mapping
from typing import TYPE_CHECKING, Any, Protocol

from field_ingest.core.exceptions import IngestError, UploadError
from field_ingest.models.geometry import CoordinateSystem
from field_ingest.models.upload import UploadedFile
from field_ingest.orchestrators.field_area import estimate_field_area

if TYPE_CHECKING:
    from field_ingest.core.config import IngestConfig

logger = logging.getLogger("field_ingest.core.ingress")

RASTER_EXTENSIONS = frozenset({".tif", ".tiff"})
COORDINATE_SYSTEM_FIELD = "coordinateSystem"

HTTP_OK = 200
HTTP_BAD_REQUEST = 400


class FilePart(Protocol):
    """The subset of a multipart file part (werkzeug ``FileStorage``) used here."""

    filename: str | None

    def read(self, size: int = -1) -> bytes: ...


def read_upload(part: FilePart, *, field_name: str, max_bytes: int) -> UploadedFile:
    """Buffer a multipart file part, rejecting uploads over ``max_bytes``.

    Raises:
        UploadError: If the part exceeds the size limit.
    """
    content = part.read(max_bytes + 1)
    if len(content) > max_bytes:
        msg = f"Upload in form field {field_name!r} exceeds the {max_bytes}-byte limit."
        raise UploadError(msg)
    name = posixpath.basename((part.filename or "").replace("\\", "/"))
    return UploadedFile(name=name, content=bytes(content))


def parse_coordinate_system(value: str | None) -> CoordinateSystem | None:
    """Parse the optional coordinate-system form value.

    Raises:
        UploadError: If the value is not ``geographic`` or ``projected``.
    """
    if value is None or not value.strip():
        return None
    try:
        return CoordinateSystem(value.strip().lower())
    except ValueError as exc:
        allowed = ", ".join(cs.value for cs in CoordinateSystem)
        msg = f"Invalid {COORDINATE_SYSTEM_FIELD} {value!r}; expected one of: {allowed}."
        raise UploadError(msg) from exc


def handle_field_area_request(
    files: Mapping[str, FilePart],
    config: IngestConfig,
    *,
    form: Mapping[str, str] | None = None,
    correlation_id: str = "",
) -> tuple[int, dict[str, Any]]:
    """Validate a field-area submission and run the orchestrator.

    Args:
        files: Multipart file parts keyed by form field name.
        config: Ingestion configuration (field names, size limit).
        form: Non-file form fields.
        correlation_id: Request identifier echoed in error payloads.

    Returns:
        ``(status_code, body)``; 200 with the serialised
        ``FieldAreaResult`` on success, 400 with an ``error`` message
        and the structured error fields otherwise.
    """
    try:
        raster_part = files.get(config.raster_field_name)
        if raster_part is None:
            msg = f"Missing TIFF file in form field {config.raster_field_name!r}."
            raise UploadError(msg)
        polygon_part = files.get(config.polygon_field_name)
        if polygon_part is None:
            msg = f"Missing polygon file in form field {config.polygon_field_name!r}."
            raise UploadError(msg)

        raster = read_upload(
            raster_part, field_name=config.raster_field_name, max_bytes=config.max_upload_bytes
        )
        if raster.extension not in RASTER_EXTENSIONS:
            msg = "TIFF input must be .tif or .tiff."
            raise UploadError(msg)
        polygon = read_upload(
            polygon_part, field_name=config.polygon_field_name, max_bytes=config.max_upload_bytes
        )
        coordinate_system = parse_coordinate_system((form or {}).get(COORDINATE_SYSTEM_FIELD))

        result = estimate_field_area(raster, polygon, coordinate_system=coordinate_system)
    except IngestError as exc:
        exc.correlation_id = exc.correlation_id or correlation_id
        logger.warning(
            "Field area request rejected | code=%s | stage=%s | correlation_id=%s | %s",
            exc.code,
            exc.stage,
            correlation_id,
            exc.message,
        )
        return HTTP_BAD_REQUEST, {"error": exc.message, **exc.to_error_dict()}

    return HTTP_OK, result.to_dict()
