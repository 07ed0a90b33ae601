"""Command-line entry point for forest visibility analysis.

Usage:
    forest-sight input.txt              # both answers
    forest-sight input.txt --part 1     # visible cell count
    forest-sight dem.tif --part 2 -w 4  # best scenic score, 4 worker threads
"""

from __future__ import annotations

import argparse
import logging
from collections.abc import Sequence
from pathlib import Path

from domain.visibility.errors import ForestSightError
from domain.visibility.repositories import HeightMapRepository
from domain.visibility.services import (
    build_grid,
    count_visible_cells,
    max_scenic_score,
)
from infrastructure.forest import GeoTiffHeightMapAdapter, TextHeightMapAdapter
from infrastructure.forest.geotiff_adapter import SUPPORTED_SUFFIXES as RASTER_SUFFIXES

logger = logging.getLogger(__name__)


def select_repository(path: Path) -> HeightMapRepository:
    """Pick the adapter for ``path`` by extension (rasters vs digit text)."""
    if path.suffix.lower() in RASTER_SUFFIXES:
        return GeoTiffHeightMapAdapter()
    return TextHeightMapAdapter()


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="forest-sight",
        description="Count visible trees and find the best scenic score in a height map",
    )
    parser.add_argument("path", type=Path, help="Digit text height map or GeoTIFF")
    parser.add_argument(
        "-p",
        "--part",
        type=int,
        choices=(1, 2),
        default=None,
        help="1 = visible cell count, 2 = max scenic score (default: both)",
    )
    parser.add_argument(
        "-w",
        "--workers",
        type=int,
        default=None,
        help="Worker threads for per-cell evaluation (default: sequential)",
    )
    parser.add_argument(
        "--log-level",
        default="WARNING",
        choices=("DEBUG", "INFO", "WARNING", "ERROR"),
        help="Logging level (default: WARNING)",
    )
    return parser


def main(argv: Sequence[str] | None = None) -> int:
    """Run the analysis.

    Returns:
        0 on success, 1 on failure
    """
    args = build_parser().parse_args(argv)
    logging.basicConfig(
        level=args.log_level, format="%(levelname)s %(name)s: %(message)s"
    )

    if args.workers is not None and args.workers < 1:
        logger.error("--workers must be >= 1, got %d", args.workers)
        return 1

    try:
        matrix = select_repository(args.path).load_heights(args.path)
        grid = build_grid(matrix)
        logger.info("Analyzing %dx%d grid from %s", grid.rows, grid.cols, args.path.name)

        if args.part in (None, 1):
            print(f"Answer for part 1 is {count_visible_cells(grid, args.workers)}")
        if args.part in (None, 2):
            print(f"Answer for part 2 is {max_scenic_score(grid, args.workers)}")
    except FileNotFoundError:
        logger.error("Height map not found: %s", args.path.name)
        return 1
    except PermissionError:
        logger.error("Permission denied: %s", args.path.name)
        return 1
    except OSError as e:
        logger.error("Could not read %s (%s)", args.path.name, e.strerror)
        return 1
    except ForestSightError as e:
        logger.error("%s: %s", type(e).__name__, e)
        return 1

    return 0


if __name__ == "__main__":
    raise SystemExit(main())
