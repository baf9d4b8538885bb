"""Tests for the ZIP bundle reader.

Covers:
- Stored and deflated members
- Unsupported compression methods skipped, not fatal
- Directory entries and nested paths flattened to lowercase base names
- Missing end-of-central-directory record and corrupt headers
"""

from __future__ import annotations

import struct
import zipfile
from collections.abc import Callable

import pytest

from field_ingest.activities.parse_polygon import iter_archive_members, read_archive
from field_ingest.core.exceptions import FormatError


class TestReadArchive:
    """Members are returned by lowercased base name."""

    def test_stored_members(self, make_zip: Callable[..., bytes]) -> None:
        data = make_zip({"a.txt": b"alpha", "b.txt": b"bravo"}, compression=zipfile.ZIP_STORED)
        members = read_archive(data)
        assert {name: m.content for name, m in members.items()} == {
            "a.txt": b"alpha",
            "b.txt": b"bravo",
        }

    def test_deflated_members(self, make_zip: Callable[..., bytes]) -> None:
        payload = b"field boundary " * 500
        members = read_archive(make_zip({"field.shp": payload}))
        assert members["field.shp"].content == payload

    def test_mixed_methods(self, make_zip: Callable[..., bytes]) -> None:
        data = make_zip(
            {"field.shp": b"shp" * 100, "field.prj": b"PROJCS"},
            methods={"field.prj": zipfile.ZIP_STORED},
        )
        members = read_archive(data)
        assert members["field.shp"].content == b"shp" * 100
        assert members["field.prj"].content == b"PROJCS"

    def test_unsupported_method_skipped(self, make_zip: Callable[..., bytes]) -> None:
        data = make_zip(
            {"field.shp": b"geometry", "notes.txt": b"notes " * 50},
            methods={"notes.txt": zipfile.ZIP_BZIP2},
        )
        members = read_archive(data)
        assert list(members) == ["field.shp"]

    def test_nested_paths_flattened_and_lowercased(self, make_zip: Callable[..., bytes]) -> None:
        data = make_zip({"Export/Fields/North.SHP": b"x", "Export/": b""})
        members = read_archive(data)
        assert list(members) == ["north.shp"]
        assert members["north.shp"].name == "north.shp"

    def test_iter_preserves_directory_order(self, make_zip: Callable[..., bytes]) -> None:
        data = make_zip({"b.dbf": b"1", "a.shp": b"2", "c.prj": b"3"})
        assert [m.name for m in iter_archive_members(data)] == ["b.dbf", "a.shp", "c.prj"]

    def test_archive_comment_tolerated(self, make_zip: Callable[..., bytes]) -> None:
        data = make_zip({"a.shp": b"x"})
        # Append a comment and patch the comment length in the EOCD record
        comment = b"exported by a field survey tool"
        data = data[:-2] + struct.pack("<H", len(comment)) + comment
        assert read_archive(data)["a.shp"].content == b"x"


class TestArchiveErrors:
    """Structural failures are FormatErrors."""

    def test_not_a_zip(self) -> None:
        with pytest.raises(FormatError, match="end of central directory"):
            read_archive(b"this is plainly not an archive at all")

    def test_empty(self) -> None:
        with pytest.raises(FormatError, match="end of central directory"):
            read_archive(b"")

    def test_corrupt_central_directory(self, make_zip: Callable[..., bytes]) -> None:
        data = bytearray(make_zip({"a.shp": b"x"}, compression=zipfile.ZIP_STORED))
        cd_offset = data.rfind(b"PK\x01\x02")
        data[cd_offset : cd_offset + 4] = b"XXXX"
        with pytest.raises(FormatError, match="central directory entry 0"):
            read_archive(bytes(data))

    def test_bad_local_header(self, make_zip: Callable[..., bytes]) -> None:
        data = bytearray(make_zip({"a.shp": b"x"}, compression=zipfile.ZIP_STORED))
        data[0:4] = b"XXXX"
        with pytest.raises(FormatError, match="local header"):
            read_archive(bytes(data))

    def test_corrupt_deflate_stream(self, make_zip: Callable[..., bytes]) -> None:
        payload = bytes(range(256)) * 8
        data = bytearray(make_zip({"a.shp": payload}))
        start = 30 + len("a.shp")
        data[start : start + 16] = b"\xff" * 16
        with pytest.raises(FormatError, match="cannot inflate"):
            read_archive(bytes(data))

    def test_errors_carry_stage(self) -> None:
        with pytest.raises(FormatError) as exc_info:
            read_archive(b"")
        assert exc_info.value.stage == "read_archive"
        assert exc_info.value.code == "FORMAT_INVALID"
