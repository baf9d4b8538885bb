"""Unified ingestion exception taxonomy.

Every domain exception inherits from ``IngestError`` and carries
structured context fields so the HTTP boundary can report a specific,
human-readable message together with a stable machine-readable code.

Taxonomy
--------
- ``ValidationError``: the uploaded input is at fault, never retryable.
- ``FormatError``:     structural violation of a binary layout
  (bad magic number, truncated header, missing required tag).
- ``ParseError``:      structurally well-formed but semantically
  unusable content (unknown units, zero area, missing centroid source).
- ``UploadError``:     the request itself is incomplete or too large.

Every exception exposes ``to_error_dict()`` for a stable structured
error payload suitable for responses and logging.
"""

from __future__ import annotations


class IngestError(Exception):
    """Base exception for all ingestion errors.

    Attributes:
        message: Human-readable error description.
        stage: Stage where the error occurred
            (e.g. ``"estimate_raster_area"``, ``"parse_polygon"``).
        code: Machine-readable error code (e.g. ``"FORMAT_INVALID"``).
        retryable: Whether repeating the request could succeed.
        correlation_id: Request correlation identifier.
    """

    #: Default stage for subclasses (override via class attribute or kwarg).
    default_stage: str = ""
    #: Default code for subclasses (override via class attribute or kwarg).
    default_code: str = ""

    def __init__(
        self,
        message: str = "",
        *,
        stage: str = "",
        code: str = "",
        retryable: bool = False,
        correlation_id: str = "",
    ) -> None:
        self.message = message
        self.stage = stage or self.default_stage
        self.code = code or self.default_code
        self.retryable = retryable
        self.correlation_id = correlation_id
        super().__init__(message)

    @property
    def category(self) -> str:
        """Return the error category based on concrete class."""
        if isinstance(self, ValidationError):
            return "validation"
        return "transient" if self.retryable else "permanent"

    def to_error_dict(self) -> dict[str, object]:
        """Return a structured error payload with stable keys."""
        return {
            "category": self.category,
            "code": self.code,
            "stage": self.stage,
            "message": self.message,
            "retryable": self.retryable,
            "correlation_id": self.correlation_id,
        }


class ValidationError(IngestError):
    """Input validation failure. Never retryable."""

    def __init__(self, message: str = "", **kwargs: object) -> None:
        kwargs.setdefault("retryable", False)
        super().__init__(message, **kwargs)  # type: ignore[arg-type]


class FormatError(ValidationError):
    """Raised when a binary buffer violates its expected layout."""

    default_code = "FORMAT_INVALID"


class ParseError(ValidationError):
    """Raised when well-formed content cannot yield a usable area."""

    default_stage = "parse_polygon"
    default_code = "PARSE_FAILED"


class UploadError(ValidationError):
    """Raised when a request is missing or carries an unacceptable upload."""

    default_stage = "ingress"
    default_code = "UPLOAD_INVALID"
