"""TIFF and GeoTIFF constants for raster area estimation."""

from __future__ import annotations

# Header
MIN_HEADER_BYTES = 8
TIFF_VERSION = 42
LITTLE_ENDIAN_MARKER = b"II"
BIG_ENDIAN_MARKER = b"MM"
IFD_ENTRY_BYTES = 12

# Baseline TIFF tags
TAG_IMAGE_WIDTH = 256
TAG_IMAGE_LENGTH = 257

# GeoTIFF tags
TAG_MODEL_PIXEL_SCALE = 33550
TAG_MODEL_TIEPOINT = 33922
TAG_MODEL_TRANSFORMATION = 34264
TAG_GEO_KEY_DIRECTORY = 34735

# GeoTIFF keys
KEY_GT_MODEL_TYPE = 1024
KEY_PROJ_LINEAR_UNITS = 3076

MODEL_TYPE_GEOGRAPHIC = 2

# EPSG linear unit codes
LINEAR_UNIT_METER = 9001
LINEAR_UNIT_FOOT = 9002
LINEAR_UNIT_US_SURVEY_FOOT = 9003

MIN_TIEPOINT_VALUES = 6
MIN_TRANSFORMATION_VALUES = 6
