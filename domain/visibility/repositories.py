"""Domain Port(s) for Height Map I/O.

Defines interfaces (Protocols) that infrastructure adapters must implement.
No concrete I/O here.
"""

from __future__ import annotations

from pathlib import Path
from typing import Protocol

from .services import HeightMatrix


class HeightMapRepository(Protocol):
    """Port for obtaining height matrices from external sources.

    Implementations live in infrastructure (text and GeoTIFF adapters).
    The returned matrix is rectangular and non-empty; it is validated again
    by build_grid.
    """

    def load_heights(self, file_path: Path | str) -> HeightMatrix:
        """Load a height map and return it as a row-major matrix."""
        ...
