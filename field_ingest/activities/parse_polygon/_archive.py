"""Minimal random-access ZIP reader.

Locates the end-of-central-directory record, walks the central
directory and decompresses each member from its local header. Only the
two methods shapefile bundles use in practice are supported: stored and
raw deflate. Members compressed any other way are skipped with a warning.
"""

from __future__ import annotations

import logging
import struct
import zlib
from collections.abc import Iterator

from field_ingest.activities.parse_polygon._constants import (
    ZIP_CENTRAL_HEADER_BYTES,
    ZIP_CENTRAL_SIGNATURE,
    ZIP_EOCD_BYTES,
    ZIP_EOCD_SIGNATURE,
    ZIP_LOCAL_HEADER_BYTES,
    ZIP_LOCAL_SIGNATURE,
    ZIP_MAX_COMMENT_BYTES,
    ZIP_METHOD_DEFLATED,
    ZIP_METHOD_STORED,
)
from field_ingest.core.exceptions import FormatError
from field_ingest.models.upload import ArchiveMember

logger = logging.getLogger("field_ingest.activities.parse_polygon")

STAGE = "read_archive"

_EOCD = struct.Struct("<IHHHHIIH")
_CENTRAL = struct.Struct("<IHHHHHHIIIHHHHHII")
_LOCAL = struct.Struct("<IHHHHHIIIHH")


def read_archive(data: bytes) -> dict[str, ArchiveMember]:
    """Read every supported member of a ZIP buffer.

    Returns:
        Mapping of lowercased base filename to ``ArchiveMember``. A later
        member with the same base name replaces an earlier one.

    Raises:
        FormatError: If no end-of-central-directory record is found, or
            a header is corrupt or truncated.
    """
    members = {member.name: member for member in iter_archive_members(data)}
    logger.info("Read %d archive member(s): %s", len(members), ", ".join(sorted(members)))
    return members


def iter_archive_members(data: bytes) -> Iterator[ArchiveMember]:
    """Yield decompressed members in central-directory order."""
    eocd_offset = _find_eocd(data)
    (_sig, _disk, _cd_disk, _disk_entries, total_entries, _cd_size, cd_offset, _comment) = (
        _EOCD.unpack_from(data, eocd_offset)
    )

    pointer = cd_offset
    for index in range(total_entries):
        header = _unpack(_CENTRAL, data, pointer, f"central directory entry {index}")
        signature = header[0]
        if signature != ZIP_CENTRAL_SIGNATURE:
            msg = f"Invalid ZIP file: corrupt central directory entry {index} at offset {pointer}."
            raise FormatError(msg, stage=STAGE)
        method = header[4]
        compressed_size = header[8]
        name_len, extra_len, comment_len = header[10], header[11], header[12]
        local_offset = header[16]

        name_start = pointer + ZIP_CENTRAL_HEADER_BYTES
        raw_name = _slice(data, name_start, name_len, f"name of entry {index}")
        pointer = name_start + name_len + extra_len + comment_len

        name = _base_name(raw_name)
        if not name:
            continue

        if method not in (ZIP_METHOD_STORED, ZIP_METHOD_DEFLATED):
            logger.warning(
                "Skipping archive member %s: unsupported compression method %d", name, method
            )
            continue

        payload = _read_local_payload(data, local_offset, compressed_size, name)
        if method == ZIP_METHOD_DEFLATED:
            payload = _inflate(payload, name)
        yield ArchiveMember(name=name, content=payload)


# ---------------------------------------------------------------------------
# Internal helpers
# ---------------------------------------------------------------------------


def _find_eocd(data: bytes) -> int:
    """Scan backwards for the end-of-central-directory signature."""
    offset = -1
    if len(data) >= ZIP_EOCD_BYTES:
        lower = max(0, len(data) - (ZIP_EOCD_BYTES + ZIP_MAX_COMMENT_BYTES))
        signature = struct.pack("<I", ZIP_EOCD_SIGNATURE)
        offset = data.rfind(signature, lower, len(data) - ZIP_EOCD_BYTES + 4)
    if offset < 0:
        msg = "Invalid ZIP file: end of central directory record not found."
        raise FormatError(msg, stage=STAGE)
    return offset


def _read_local_payload(data: bytes, offset: int, size: int, name: str) -> bytes:
    header = _unpack(_LOCAL, data, offset, f"local header of {name}")
    if header[0] != ZIP_LOCAL_SIGNATURE:
        msg = f"Invalid ZIP file: bad local header signature for {name} at offset {offset}."
        raise FormatError(msg, stage=STAGE)
    name_len, extra_len = header[9], header[10]
    start = offset + ZIP_LOCAL_HEADER_BYTES + name_len + extra_len
    return _slice(data, start, size, f"data of {name}")


def _inflate(payload: bytes, name: str) -> bytes:
    try:
        return zlib.decompress(payload, -zlib.MAX_WBITS)
    except zlib.error as exc:
        msg = f"Invalid ZIP file: cannot inflate {name}: {exc}"
        raise FormatError(msg, stage=STAGE) from exc


def _base_name(raw_name: bytes) -> str:
    name = raw_name.decode("utf-8", errors="replace").replace("\\", "/")
    return name.rsplit("/", 1)[-1].lower()


def _unpack(layout: struct.Struct, data: bytes, offset: int, what: str) -> tuple:
    if offset < 0 or offset + layout.size > len(data):
        msg = f"Invalid ZIP file: {what} at offset {offset} is truncated."
        raise FormatError(msg, stage=STAGE)
    return layout.unpack_from(data, offset)


def _slice(data: bytes, start: int, size: int, what: str) -> bytes:
    if start + size > len(data):
        msg = f"Invalid ZIP file: {what} at offset {start} is truncated."
        raise FormatError(msg, stage=STAGE)
    return bytes(data[start : start + size])
