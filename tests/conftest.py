"""Shared pytest fixtures for the field ingestion test suite.

Every binary fixture is built in memory so each test states the exact
bytes it feeds the parsers.
"""

from __future__ import annotations

import io
import struct
import zipfile
from collections.abc import Callable, Sequence

import pytest

Ring = list[tuple[float, float]]

# ---------------------------------------------------------------------------
# TIFF / GeoTIFF
# ---------------------------------------------------------------------------

TIFF_BYTE = 1
TIFF_SHORT = 3
TIFF_LONG = 4
TIFF_RATIONAL = 5
TIFF_DOUBLE = 12

_TIFF_CODES = {TIFF_BYTE: "B", TIFF_SHORT: "H", TIFF_LONG: "I", TIFF_DOUBLE: "d"}


def build_tiff(
    entries: Sequence[tuple[int, int, Sequence[float]]],
    *,
    little_endian: bool = True,
    version: int = 42,
) -> bytes:
    """Build a single-IFD TIFF from ``(tag, field_type, values)`` entries.

    RATIONAL values are given as ``(numerator, denominator)`` pairs.
    """
    order = "<" if little_endian else ">"
    ifd_offset = 8
    data_offset = ifd_offset + 2 + 12 * len(entries) + 4

    ifd = bytearray(struct.pack(order + "H", len(entries)))
    extra = bytearray()
    for tag, field_type, values in sorted(entries, key=lambda e: e[0]):
        if field_type == TIFF_RATIONAL:
            flat = [int(v) for pair in values for v in pair]  # type: ignore[union-attr]
            payload = struct.pack(f"{order}{len(flat)}I", *flat)
        else:
            payload = struct.pack(f"{order}{len(values)}{_TIFF_CODES[field_type]}", *values)
        if len(payload) <= 4:
            value_field = payload.ljust(4, b"\x00")
        else:
            value_field = struct.pack(order + "I", data_offset + len(extra))
            extra += payload
            if len(extra) % 2:
                extra += b"\x00"
        ifd += struct.pack(order + "HHI", tag, field_type, len(values)) + value_field
    ifd += struct.pack(order + "I", 0)

    marker = b"II" if little_endian else b"MM"
    header = marker + struct.pack(order + "HI", version, ifd_offset)
    return header + bytes(ifd) + bytes(extra)


def build_geotiff(
    width: int | None = 100,
    height: int | None = 50,
    *,
    pixel_scale: Sequence[float] | None = (2.0, 3.0, 0.0),
    tiepoint: Sequence[float] | None = None,
    transform: Sequence[float] | None = None,
    geo_keys: dict[int, int] | None = None,
    little_endian: bool = True,
    dimension_type: int = TIFF_SHORT,
) -> bytes:
    """Build a GeoTIFF header carrying only georeferencing tags."""
    entries: list[tuple[int, int, Sequence[float]]] = []
    if width is not None:
        entries.append((256, dimension_type, [width]))
    if height is not None:
        entries.append((257, dimension_type, [height]))
    if pixel_scale is not None:
        entries.append((33550, TIFF_DOUBLE, list(pixel_scale)))
    if tiepoint is not None:
        entries.append((33922, TIFF_DOUBLE, list(tiepoint)))
    if transform is not None:
        entries.append((34264, TIFF_DOUBLE, list(transform)))
    if geo_keys is not None:
        directory = [1, 1, 0, len(geo_keys)]
        for key_id, value in geo_keys.items():
            directory += [key_id, 0, 1, value]
        entries.append((34735, TIFF_SHORT, directory))
    return build_tiff(entries, little_endian=little_endian)


# ---------------------------------------------------------------------------
# Shapefile (.shp) and dBASE (.dbf)
# ---------------------------------------------------------------------------


def _polygon_content(parts: Sequence[Ring], shape_type: int) -> bytes:
    points = [point for ring in parts for point in ring]
    xs = [x for x, _ in points] or [0.0]
    ys = [y for _, y in points] or [0.0]
    starts: list[int] = []
    index = 0
    for ring in parts:
        starts.append(index)
        index += len(ring)

    content = struct.pack(
        "<i4dii", shape_type, min(xs), min(ys), max(xs), max(ys), len(parts), len(points)
    )
    content += struct.pack(f"<{len(parts)}i", *starts)
    content += b"".join(struct.pack("<2d", x, y) for x, y in points)
    if shape_type in (15, 25):
        # Z (or M) range and values, which readers of X/Y must skip
        content += struct.pack("<2d", 0.0, 0.0)
        content += struct.pack(f"<{len(points)}d", *[0.0] * len(points))
    return content


def build_shp(records: Sequence[Sequence[Ring] | None], *, shape_type: int = 5) -> bytes:
    """Build a shapefile; each record is a list of rings, or ``None`` for a null shape."""
    body = bytearray()
    for number, parts in enumerate(records, start=1):
        content = struct.pack("<i", 0) if parts is None else _polygon_content(parts, shape_type)
        body += struct.pack(">ii", number, len(content) // 2) + content
    file_words = (100 + len(body)) // 2
    header = struct.pack(">7i", 9994, 0, 0, 0, 0, 0, file_words)
    header += struct.pack("<2i", 1000, shape_type) + struct.pack("<8d", *[0.0] * 8)
    return header + bytes(body)


def build_dbf(
    fields: Sequence[tuple[str, int]],
    records: Sequence[Sequence[str]],
    *,
    deleted: Sequence[int] = (),
) -> bytes:
    """Build a dBASE III table of character fields."""
    header_length = 32 + 32 * len(fields) + 1
    record_length = 1 + sum(length for _, length in fields)
    header = struct.pack("<B3BIHH20x", 0x03, 126, 1, 1, len(records), header_length, record_length)
    for name, length in fields:
        header += name.encode("ascii").ljust(11, b"\x00") + b"C" + b"\x00" * 4
        header += struct.pack("<BB", length, 0) + b"\x00" * 14
    header += b"\x0d"

    body = bytearray()
    for index, values in enumerate(records):
        body += b"*" if index in deleted else b" "
        for (_, length), value in zip(fields, values, strict=True):
            body += value.encode("ascii").rjust(length)[:length]
    return header + bytes(body) + b"\x1a"


# ---------------------------------------------------------------------------
# ZIP
# ---------------------------------------------------------------------------


def build_zip(
    members: dict[str, bytes],
    *,
    compression: int = zipfile.ZIP_DEFLATED,
    methods: dict[str, int] | None = None,
) -> bytes:
    """Build a ZIP archive; ``methods`` overrides compression per member."""
    buffer = io.BytesIO()
    with zipfile.ZipFile(buffer, "w") as archive:
        for name, data in members.items():
            method = (methods or {}).get(name, compression)
            archive.writestr(name, data, compress_type=method)
    return buffer.getvalue()


# ---------------------------------------------------------------------------
# Geometry helpers
# ---------------------------------------------------------------------------

# Degrees of arc spanning 1 km on the WGS 84 equator
KM_IN_DEGREES = 1000 / (6378137.0 * 3.141592653589793 / 180)


def square_ring(lon: float, lat: float, side: float) -> Ring:
    """Closed counter-clockwise square with its south-west corner at (lon, lat)."""
    return [
        (lon, lat),
        (lon + side, lat),
        (lon + side, lat + side),
        (lon, lat + side),
        (lon, lat),
    ]


# ---------------------------------------------------------------------------
# Fixtures
# ---------------------------------------------------------------------------


@pytest.fixture()
def make_tiff() -> Callable[..., bytes]:
    """Low-level TIFF builder from raw IFD entries."""
    return build_tiff


@pytest.fixture()
def make_geotiff() -> Callable[..., bytes]:
    """GeoTIFF builder with width/height, pixel scale, tie point and geo keys."""
    return build_geotiff


@pytest.fixture()
def make_shp() -> Callable[..., bytes]:
    """Shapefile builder."""
    return build_shp


@pytest.fixture()
def make_dbf() -> Callable[..., bytes]:
    """dBASE table builder."""
    return build_dbf


@pytest.fixture()
def make_zip() -> Callable[..., bytes]:
    """ZIP archive builder."""
    return build_zip


@pytest.fixture()
def make_square() -> Callable[[float, float, float], Ring]:
    """Square ring builder."""
    return square_ring


@pytest.fixture()
def km_in_degrees() -> float:
    """Degrees of longitude spanning 1 km at the equator."""
    return KM_IN_DEGREES


@pytest.fixture()
def projected_geotiff(make_geotiff: Callable[..., bytes]) -> bytes:
    """100 x 50 projected GeoTIFF with 2 m x 3 m pixels (30,000 m2)."""
    return make_geotiff(geo_keys={1024: 1, 3076: 9001})
