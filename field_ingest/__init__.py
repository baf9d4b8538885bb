"""Field-file ingestion for nitrogen application risk estimates.

Extracts a field area and a centroid from user-uploaded files: a
georeferenced TIFF raster and a polygon source (GeoJSON, coordinate
table, shapefile or zipped shapefile bundle). No third-party geospatial
library is involved at runtime.
"""

__version__ = "0.1.0"
