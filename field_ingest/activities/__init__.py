"""Ingestion activities.

Each activity is a pure function over one uploaded buffer:
- estimate_raster_area: Pixel-area acreage from a GeoTIFF
- parse_polygon: Boundary acreage and centroid from a polygon file
"""
