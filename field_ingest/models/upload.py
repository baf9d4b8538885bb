"""Request-scoped byte payloads.

``UploadedFile`` is one part of a multipart submission; ``ArchiveMember``
is one decompressed file from a ZIP bundle. Neither is persisted.
"""

from __future__ import annotations

import posixpath
from dataclasses import dataclass


@dataclass(frozen=True, slots=True)
class UploadedFile:
    """A fully buffered uploaded file.

    Attributes:
        name: Client-supplied filename (e.g. ``"north_field.zip"``).
        content: Raw file bytes.
    """

    name: str
    content: bytes

    @property
    def extension(self) -> str:
        """Lowercased extension including the dot, or ``""``."""
        return posixpath.splitext(self.name.lower())[1]

    @property
    def size_bytes(self) -> int:
        return len(self.content)


@dataclass(frozen=True, slots=True)
class ArchiveMember:
    """A decompressed ZIP member.

    Attributes:
        name: Lowercased base filename, no directory part.
        content: Decompressed payload.
    """

    name: str
    content: bytes
