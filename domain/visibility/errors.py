"""Visibility Bounded Context - Error Hierarchy.

Custom exceptions for grid construction, analysis and height map loading.
"""

from __future__ import annotations


class ForestSightError(Exception):
    """Base error for forest visibility operations."""


class MalformedGridError(ForestSightError):
    """Height matrix is empty, ragged, or holds non-numeric/non-finite values."""


class EmptyGridError(ForestSightError):
    """Aggregate requested over a grid with zero cells."""


# ---------------------------------------------------------------------------
# Height map loading errors
# ---------------------------------------------------------------------------
class InvalidHeightMapError(ForestSightError):
    """Text height map is empty, has a bad extension, or holds non-digits.

    Attributes:
        line: 1-based line number of the offending character (if any)
        column: 1-based column of the offending character (if any)
    """

    def __init__(
        self, message: str, line: int | None = None, column: int | None = None
    ) -> None:
        self.line = line
        self.column = column
        if line is not None and column is not None:
            message = f"{message} (line {line}, column {column})"
        super().__init__(message)


class InvalidRasterError(ForestSightError):
    """File is not a valid raster, wrong format, or corrupted."""


class NoDataHeightsError(ForestSightError):
    """Raster contains NoData pixels, which have no height ordering."""


class InsufficientMemoryError(ForestSightError):
    """Operation requires more memory than allowed or available."""
