"""GeoTIFF adapter for HeightMapRepository.

Implements loading of elevation rasters from GeoTIFF using rasterio and
returning band 1 as a 2D height matrix for the visibility engine. Cell
coordinates are raster (row, col); no reprojection is performed because
directional visibility only depends on the pixel lattice.

Lifecycle (to avoid resource leaks):
1) Validate the path (existence, extension, symlink, empty file, size budget)
2) Enter rasterio.Env for GDAL configuration
3) Open dataset with context manager (rasterio.open)
4) Validate band count and memory budget before reading
5) Read band 1 masked; reject any NoData pixel
6) Exit contexts to release GDAL handles
7) Return the height array
"""

from __future__ import annotations

import logging
from pathlib import Path

import numpy as np
import rasterio
from numpy.typing import NDArray

from domain.visibility.errors import (
    InsufficientMemoryError,
    InvalidRasterError,
    NoDataHeightsError,
)
from infrastructure.forest.preflight import check_height_map_file

# Module-level logger (reused across all calls)
logger = logging.getLogger(__name__)

SUPPORTED_SUFFIXES = (".tif", ".tiff")


class GeoTiffHeightMapAdapter:
    """Infrastructure adapter for loading height maps from GeoTIFF files.

    Parameters
    ----------
    max_bytes: int | None
        Optional memory budget for the band read (height*width*itemsize).
        If exceeded, InsufficientMemoryError is raised before allocation.
    """

    def __init__(self, max_bytes: int | None = None) -> None:
        self.max_bytes = max_bytes

    def load_heights(self, file_path: Path | str) -> NDArray[np.generic]:
        """Load band 1 of a GeoTIFF and return it as a (rows, cols) array."""
        path = Path(file_path)

        # Fail fast before rasterio allocation; a file over 2x budget is
        # certainly too large
        check_height_map_file(
            path,
            suffixes=SUPPORTED_SUFFIXES,
            invalid=InvalidRasterError,
            max_file_bytes=None if self.max_bytes is None else self.max_bytes * 2,
        )

        try:
            with rasterio.Env():
                with rasterio.open(path) as src:
                    if src.count == 0:
                        raise InvalidRasterError("Empty or bandless file")
                    if src.count != 1:
                        raise InvalidRasterError(f"Expected 1 band, got {src.count}")

                    if self.max_bytes is not None:
                        itemsize = np.dtype(src.dtypes[0]).itemsize
                        est_bytes = src.width * src.height * itemsize
                        if est_bytes > self.max_bytes:
                            raise InsufficientMemoryError(
                                f"Estimated grid size {est_bytes}B exceeds budget {self.max_bytes}B"
                            )

                    data = src.read(1, masked=True)

                    if np.ma.is_masked(data):
                        nodata_count = int(np.ma.count_masked(data))
                    elif src.nodata is not None:
                        # Exact equality: GeoTIFF stores nodata verbatim
                        nodata_count = int(np.count_nonzero(data == src.nodata))
                    else:
                        nodata_count = 0
                    heights = np.asarray(np.ma.getdata(data))
                    if nodata_count == 0 and np.issubdtype(heights.dtype, np.floating):
                        nodata_count = int(np.count_nonzero(np.isnan(heights)))

                    if nodata_count:
                        raise NoDataHeightsError(
                            f"Raster has {nodata_count} NoData pixels; "
                            "every cell needs a height"
                        )

                    rows, cols = heights.shape
                    logger.debug(
                        "Height map %s: Loaded %dx%d grid (%s)",
                        path.name,
                        cols,
                        rows,
                        heights.dtype,
                    )
                    return heights

        except PermissionError as e:
            # Re-raise with filename only to avoid leaking full path in logs
            raise PermissionError(path.name) from e
        except rasterio.errors.RasterioError as e:
            raise InvalidRasterError(f"Corrupted or invalid raster: {e}") from e
        except MemoryError as e:
            raise InsufficientMemoryError("Insufficient memory to load raster") from e
