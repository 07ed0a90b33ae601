"""Infrastructure adapters for the visibility bounded context.

This module provides the infrastructure layer implementations for loading
height maps from digit text files and single-band GeoTIFF rasters.
"""

from .geotiff_adapter import GeoTiffHeightMapAdapter
from .text_adapter import TextHeightMapAdapter, parse_height_map

__all__ = ["GeoTiffHeightMapAdapter", "TextHeightMapAdapter", "parse_height_map"]
