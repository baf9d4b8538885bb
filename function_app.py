"""Azure Functions entry point: field-file ingestion.

Registers the HTTP function that accepts a GeoTIFF and a polygon file
and returns the estimated field area and centroid, using the Python v2
programming model.

All business logic lives in the field_ingest package. This file is purely
the wiring layer between the HTTP binding and application code.
"""

from __future__ import annotations

import json
import logging
import uuid

import azure.functions as func

from field_ingest.core.config import IngestConfig
from field_ingest.core.ingress import handle_field_area_request

app = func.FunctionApp(http_auth_level=func.AuthLevel.ANONYMOUS)

logger = logging.getLogger("field_ingest.function_app")


# ---------------------------------------------------------------------------
# HTTP: Field Area
# ---------------------------------------------------------------------------


@app.function_name("field_area")
@app.route(route="field-area", methods=["POST"])
def field_area(req: func.HttpRequest) -> func.HttpResponse:
    """HTTP trigger for ``POST /api/field-area``."""
    return respond_field_area(req)


def respond_field_area(req: func.HttpRequest) -> func.HttpResponse:
    """Estimate field area from a multipart upload.

    Form fields (names configurable, see ``IngestConfig``):
        - ``tiffFile``: GeoTIFF raster (``.tif`` / ``.tiff``).
        - ``polygonFile``: ``.zip``, ``.shp``, ``.geojson``, ``.json``,
          ``.csv``, ``.tsv`` or ``.txt`` polygon source.
        - ``coordinateSystem`` (optional): ``geographic`` or ``projected``.

    The request's ``x-correlation-id`` header, or a generated UUID, is
    echoed in the response headers and in error bodies.

    Returns:
        200 with the combined result, or 400 with ``{"error": ...}``.
    """
    correlation_id = req.headers.get("x-correlation-id") or str(uuid.uuid4())
    config = IngestConfig.from_env()

    logger.info("field_area request started | correlation_id=%s", correlation_id)

    try:
        status, body = handle_field_area_request(
            req.files,
            config,
            form=req.form,
            correlation_id=correlation_id,
        )
    except Exception:
        logger.exception("field_area request failed | correlation_id=%s", correlation_id)
        raise

    logger.info(
        "field_area request completed | status=%d | correlation_id=%s",
        status,
        correlation_id,
    )
    return func.HttpResponse(
        json.dumps(body),
        status_code=status,
        mimetype="application/json",
        headers={"x-correlation-id": correlation_id},
    )
