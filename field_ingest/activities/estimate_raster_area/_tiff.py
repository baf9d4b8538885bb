"""Minimal TIFF directory reader.

Reads the first image file directory (IFD) of a TIFF buffer and decodes
tag values through a type table keyed by TIFF field type. Values whose
encoded size fits in four bytes live inline in the entry itself; larger
values live at the offset the entry points to.

Only the field types GeoTIFF georeferencing needs are decoded: BYTE,
SHORT, LONG, RATIONAL and DOUBLE. Entries of any other type decode to
an empty tuple.
"""

from __future__ import annotations

import logging
import struct
from dataclasses import dataclass

from field_ingest.activities.estimate_raster_area._constants import (
    BIG_ENDIAN_MARKER,
    IFD_ENTRY_BYTES,
    LITTLE_ENDIAN_MARKER,
    MIN_HEADER_BYTES,
    TIFF_VERSION,
)
from field_ingest.core.exceptions import FormatError

logger = logging.getLogger("field_ingest.activities.estimate_raster_area")

STAGE = "estimate_raster_area"

TYPE_BYTE = 1
TYPE_SHORT = 3
TYPE_LONG = 4
TYPE_RATIONAL = 5
TYPE_DOUBLE = 12

# field type -> (element size in bytes, struct code)
_ELEMENT_TYPES: dict[int, tuple[int, str]] = {
    TYPE_BYTE: (1, "B"),
    TYPE_SHORT: (2, "H"),
    TYPE_LONG: (4, "I"),
    TYPE_RATIONAL: (8, "I"),
    TYPE_DOUBLE: (8, "d"),
}

_INLINE_VALUE_BYTES = 4


@dataclass(frozen=True, slots=True)
class TiffEntry:
    """One 12-byte IFD entry.

    Attributes:
        tag: Tag identifier.
        field_type: TIFF field type code.
        count: Number of values.
        value_offset: Offset of the values when they are not inline.
        entry_offset: Offset of the entry itself in the buffer.
    """

    tag: int
    field_type: int
    count: int
    value_offset: int
    entry_offset: int


class TiffReader:
    """Random-access reader over the first IFD of a TIFF buffer.

    Raises:
        FormatError: On construction, if the header or the directory is
            malformed or truncated.
    """

    def __init__(self, data: bytes) -> None:
        if len(data) < MIN_HEADER_BYTES:
            msg = (
                f"Invalid TIFF: file too small ({len(data)} bytes, "
                f"need at least {MIN_HEADER_BYTES})."
            )
            raise FormatError(msg, stage=STAGE)

        marker = bytes(data[:2])
        if marker == LITTLE_ENDIAN_MARKER:
            self.byte_order = "<"
        elif marker == BIG_ENDIAN_MARKER:
            self.byte_order = ">"
        else:
            msg = f"Invalid TIFF byte order marker {marker!r}; expected b'II' or b'MM'."
            raise FormatError(msg, stage=STAGE)

        self._data = data
        version, first_ifd_offset = self._unpack("HI", 2)
        if version != TIFF_VERSION:
            msg = f"Unsupported TIFF format: version {version}, expected {TIFF_VERSION}."
            raise FormatError(msg, stage=STAGE)

        self.entries = self._read_directory(first_ifd_offset)

    def values(self, tag: int) -> tuple[float, ...]:
        """Decode every value of ``tag``.

        Returns an empty tuple when the tag is absent or its field type
        is not supported. RATIONAL values decode to ``numerator /
        denominator`` with a zero denominator yielding ``0``.

        Raises:
            FormatError: If the values extend past the end of the buffer.
        """
        entry = self.entries.get(tag)
        if entry is None:
            return ()
        element = _ELEMENT_TYPES.get(entry.field_type)
        if element is None:
            logger.debug("Skipping tag %d with unsupported field type %d", tag, entry.field_type)
            return ()

        size, code = element
        total = size * entry.count
        if total <= _INLINE_VALUE_BYTES:
            offset = entry.entry_offset + 8
        else:
            offset = entry.value_offset

        if entry.field_type == TYPE_RATIONAL:
            raw = self._unpack(f"{entry.count * 2}{code}", offset, tag=tag)
            return tuple(
                0.0 if den == 0 else num / den for num, den in zip(raw[::2], raw[1::2], strict=True)
            )
        return self._unpack(f"{entry.count}{code}", offset, tag=tag)

    # ------------------------------------------------------------------
    # Internal helpers
    # ------------------------------------------------------------------

    def _read_directory(self, ifd_offset: int) -> dict[int, TiffEntry]:
        (entry_count,) = self._unpack("H", ifd_offset)
        entries: dict[int, TiffEntry] = {}
        for index in range(entry_count):
            entry_offset = ifd_offset + 2 + index * IFD_ENTRY_BYTES
            tag, field_type, count, value_offset = self._unpack("HHII", entry_offset)
            entries[tag] = TiffEntry(
                tag=tag,
                field_type=field_type,
                count=count,
                value_offset=value_offset,
                entry_offset=entry_offset,
            )
        logger.debug("Read %d IFD entries at offset %d", entry_count, ifd_offset)
        return entries

    def _unpack(self, fmt: str, offset: int, *, tag: int | None = None) -> tuple:
        layout = struct.Struct(self.byte_order + fmt)
        if offset < 0 or offset + layout.size > len(self._data):
            where = f"tag {tag}" if tag is not None else "directory"
            msg = (
                f"Invalid TIFF: {where} data at offset {offset} "
                f"({layout.size} bytes) is truncated (file is {len(self._data)} bytes)."
            )
            raise FormatError(msg, stage=STAGE)
        return layout.unpack_from(self._data, offset)
