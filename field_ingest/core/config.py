"""Ingestion configuration loaded from environment variables.

Azure Functions app settings (or ``local.settings.json`` for local dev)
are the source of truth.

``from_env()`` raises ``ConfigValidationError`` if any value is out of
its valid range.
"""

from __future__ import annotations

import os
from dataclasses import dataclass

from field_ingest.core.exceptions import IngestError

DEFAULT_MAX_UPLOAD_BYTES = 50 * 1024 * 1024


class ConfigValidationError(IngestError):
    """Raised when configuration values are out of valid range.

    Attributes:
        key: The configuration key that failed validation.
        value: The invalid value.
        message: Human-readable description of the valid range.
    """

    default_stage = "config"
    default_code = "CONFIG_VALIDATION_FAILED"

    def __init__(self, key: str, value: object, message: str) -> None:
        self.key = key
        self.value = value
        super().__init__(f"Invalid configuration {key}={value!r}: {message}")


@dataclass(frozen=True, slots=True)
class IngestConfig:
    """Immutable ingestion configuration.

    Attributes:
        max_upload_bytes: Largest accepted upload, per file. The core
            parsers materialise whole buffers, so this is the only
            memory bound on a request.
        raster_field_name: Multipart form field carrying the raster.
        polygon_field_name: Multipart form field carrying the polygon source.
    """

    max_upload_bytes: int = DEFAULT_MAX_UPLOAD_BYTES
    raster_field_name: str = "tiffFile"
    polygon_field_name: str = "polygonFile"

    @classmethod
    def from_env(cls) -> IngestConfig:
        """Load and validate configuration from environment variables.

        Raises:
            ConfigValidationError: If a value is out of range or a
                required string value is empty.
            ValueError: If ``MAX_UPLOAD_BYTES`` cannot be parsed as an
                integer.
        """
        config = cls(
            max_upload_bytes=int(os.getenv("MAX_UPLOAD_BYTES", str(DEFAULT_MAX_UPLOAD_BYTES))),
            raster_field_name=os.getenv("RASTER_FIELD_NAME", "tiffFile"),
            polygon_field_name=os.getenv("POLYGON_FIELD_NAME", "polygonFile"),
        )
        _validate(config)
        return config


def _validate(config: IngestConfig) -> None:
    """Validate configuration ranges.  Raises ``ConfigValidationError``."""
    if config.max_upload_bytes <= 0:
        raise ConfigValidationError(
            "MAX_UPLOAD_BYTES",
            config.max_upload_bytes,
            "must be > 0 (bytes)",
        )

    if not config.raster_field_name:
        raise ConfigValidationError(
            "RASTER_FIELD_NAME",
            config.raster_field_name,
            "must not be empty",
        )

    if not config.polygon_field_name:
        raise ConfigValidationError(
            "POLYGON_FIELD_NAME",
            config.polygon_field_name,
            "must not be empty",
        )

    if config.raster_field_name == config.polygon_field_name:
        raise ConfigValidationError(
            "POLYGON_FIELD_NAME",
            config.polygon_field_name,
            "must differ from RASTER_FIELD_NAME",
        )
