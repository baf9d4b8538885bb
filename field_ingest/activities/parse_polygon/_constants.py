"""Shared constants for polygon file parsing."""

from __future__ import annotations

# Upload extensions, by sub-parser
GEOJSON_EXTENSIONS = frozenset({".geojson", ".json"})
TABLE_EXTENSIONS = frozenset({".csv", ".tsv", ".txt"})
SHAPEFILE_EXTENSION = ".shp"
ARCHIVE_EXTENSION = ".zip"
SUPPORTED_EXTENSIONS_LABEL = ".zip, .shp, .geojson, .json, .csv, .tsv, or .txt"

# Column header synonyms, compared after normalize_column_name()
LONGITUDE_COLUMNS = ("longitude", "lon", "lng", "x")
LATITUDE_COLUMNS = ("latitude", "lat", "y")

# Table delimiters, in detection order; comma is the fallback
TABLE_DELIMITERS = ("\t", ";")
DEFAULT_TABLE_DELIMITER = ","

MIN_RING_POINTS = 3

# Shapefile (.shp)
SHP_FILE_CODE = 9994
SHP_HEADER_BYTES = 100
SHP_RECORD_HEADER_BYTES = 8
SHP_POINT_BYTES = 16
SHP_POLYGON_TYPES = frozenset({5, 15, 25})  # Polygon, PolygonZ, PolygonM

# dBASE (.dbf)
DBF_MIN_BYTES = 33
DBF_HEADER_BYTES = 32
DBF_FIELD_DESCRIPTOR_BYTES = 32
DBF_FIELD_NAME_BYTES = 11
DBF_FIELD_LENGTH_OFFSET = 16
DBF_HEADER_TERMINATOR = 0x0D
DBF_DELETED_MARKER = 0x2A

# ZIP
ZIP_EOCD_SIGNATURE = 0x06054B50
ZIP_CENTRAL_SIGNATURE = 0x02014B50
ZIP_LOCAL_SIGNATURE = 0x04034B50
ZIP_EOCD_BYTES = 22
ZIP_CENTRAL_HEADER_BYTES = 46
ZIP_LOCAL_HEADER_BYTES = 30
ZIP_MAX_COMMENT_BYTES = 65535
ZIP_METHOD_STORED = 0
ZIP_METHOD_DEFLATED = 8

# Projection (.prj) unit hints, lowercase
PRJ_US_FOOT_HINTS = ("foot_us", "us survey foot", "us_survey_foot")
PRJ_FOOT_HINT = "foot"
PRJ_METER_HINTS = ("meter", "metre")
