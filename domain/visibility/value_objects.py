"""Visibility Bounded Context - Value Objects.

Immutable data structures for the forest height grid.
All validation occurs at construction time via Pydantic.

The grid is an arena: ``ForestGrid.cells`` owns every ``HeightCell`` and the
cells reference their neighbours by arena index only, so there is no object
graph to keep alive or tear down.
"""

from __future__ import annotations

import math
import numbers
from decimal import Decimal
from enum import Enum
from typing import Any

import numpy as np
from numpy.typing import NDArray
from pydantic import BaseModel, ConfigDict, Field, field_validator, model_validator


class Direction(str, Enum):
    """Cardinal traversal direction across the grid."""

    ABOVE = "above"
    RIGHT = "right"
    BELOW = "below"
    LEFT = "left"

    @property
    def opposite(self) -> "Direction":
        return _OPPOSITES[self]


_OPPOSITES = {
    Direction.ABOVE: Direction.BELOW,
    Direction.BELOW: Direction.ABOVE,
    Direction.RIGHT: Direction.LEFT,
    Direction.LEFT: Direction.RIGHT,
}

# Canonical evaluation order (also the order of viewing_distances output)
DIRECTIONS: tuple[Direction, ...] = (
    Direction.ABOVE,
    Direction.RIGHT,
    Direction.BELOW,
    Direction.LEFT,
)

# (row delta, col delta) for one step in each direction
_STEPS: dict[Direction, tuple[int, int]] = {
    Direction.ABOVE: (-1, 0),
    Direction.RIGHT: (0, 1),
    Direction.BELOW: (1, 0),
    Direction.LEFT: (0, -1),
}


def lattice_neighbor(
    row: int, col: int, rows: int, cols: int, direction: Direction
) -> int | None:
    """Return the row-major index one step from (row, col), or None off-grid."""
    d_row, d_col = _STEPS[direction]
    n_row, n_col = row + d_row, col + d_col
    if 0 <= n_row < rows and 0 <= n_col < cols:
        return n_row * cols + n_col
    return None


# ---------------------------------------------------------------------------
# Height values
# ---------------------------------------------------------------------------
def height_problem(value: Any) -> str | None:
    """Return why ``value`` cannot be a height, or None if it can.

    Heights are real numbers compared as-is: ints of any size, floats,
    Fraction, Decimal and numpy scalars. Booleans and non-finite values are
    rejected. Integral and Rational values are always finite, so huge ints
    never go through a float conversion.
    """
    if isinstance(value, (bool, np.bool_)):
        return f"Height must be a number, got {type(value).__name__}"
    if isinstance(value, Decimal):
        return None if value.is_finite() else f"Height must be finite, got {value}"
    if not isinstance(value, numbers.Real):
        return f"Height must be a real number, got {type(value).__name__}"
    if isinstance(value, numbers.Rational):
        return None
    if not math.isfinite(value):
        return f"Height must be finite, got {value}"
    return None


# ---------------------------------------------------------------------------
# HeightCell
# ---------------------------------------------------------------------------
class HeightCell(BaseModel):
    """Single grid position with its height and neighbour links (Value Object).

    Invariants:
        HC-1: index, row, col >= 0
        HC-2: height is a finite number
        HC-3: at most one link per direction; None means grid boundary

    Links are arena indices into ForestGrid.cells, never references.
    """

    index: int = Field(ge=0)  # Position in ForestGrid.cells (row-major)
    row: int = Field(ge=0)
    col: int = Field(ge=0)
    height: Any  # Any finite real number, stored unconverted (see height_problem)
    above: int | None = None
    right: int | None = None
    below: int | None = None
    left: int | None = None

    model_config = ConfigDict(frozen=True)

    @field_validator("height")
    @classmethod
    def validate_height(cls, value: Any) -> Any:
        problem = height_problem(value)
        if problem is not None:
            raise ValueError(problem)
        return value

    def neighbor_index(self, direction: Direction) -> int | None:
        """Return the arena index of the neighbour in ``direction``."""
        return getattr(self, direction.value)


# ---------------------------------------------------------------------------
# ForestGrid
# ---------------------------------------------------------------------------
class ForestGrid(BaseModel):
    """Immutable arena of height cells wired as a 4-connected lattice.

    Invariants:
        FG-1: len(cells) == rows * cols
        FG-2: cells[i].index == i and (row, col) == divmod(i, cols)
        FG-3: every link matches the lattice neighbour exactly, so links are
              symmetric and there are no extra or missing edges

    A zero-cell grid (rows == cols == 0) is representable; build_grid never
    produces one.
    """

    cells: tuple[HeightCell, ...]  # Row-major scan order of the source matrix
    rows: int = Field(ge=0)
    cols: int = Field(ge=0)

    model_config = ConfigDict(frozen=True)

    @model_validator(mode="after")
    def validate_lattice(self) -> "ForestGrid":
        # FG-1
        if (self.rows == 0) != (self.cols == 0):
            raise ValueError(
                f"Dimensions must both be zero or both positive: "
                f"{self.rows}x{self.cols}"
            )
        if len(self.cells) != self.rows * self.cols:
            raise ValueError(
                f"Expected {self.rows * self.cols} cells for a "
                f"{self.rows}x{self.cols} grid, got {len(self.cells)}"
            )

        for i, cell in enumerate(self.cells):
            # FG-2
            if cell.index != i:
                raise ValueError(f"Cell at position {i} has index {cell.index}")
            if (cell.row, cell.col) != divmod(i, self.cols):
                raise ValueError(
                    f"Cell {i} has coordinates ({cell.row}, {cell.col}), "
                    f"expected {divmod(i, self.cols)}"
                )
            # FG-3
            for direction in DIRECTIONS:
                expected = lattice_neighbor(
                    cell.row, cell.col, self.rows, self.cols, direction
                )
                actual = cell.neighbor_index(direction)
                if actual != expected:
                    raise ValueError(
                        f"Cell ({cell.row}, {cell.col}) links {direction.value} "
                        f"to {actual}, expected {expected}"
                    )

        return self

    def __len__(self) -> int:
        return len(self.cells)

    def cell_at(self, row: int, col: int) -> HeightCell:
        """Return the cell at (row, col)."""
        if not (0 <= row < self.rows and 0 <= col < self.cols):
            raise IndexError(
                f"({row}, {col}) outside {self.rows}x{self.cols} grid"
            )
        return self.cells[row * self.cols + col]

    def neighbor(self, cell: HeightCell, direction: Direction) -> HeightCell | None:
        """Return the adjacent cell in ``direction``, or None at the boundary."""
        index = cell.neighbor_index(direction)
        if index is None:
            return None
        return self.cells[index]

    def heights(self) -> NDArray[np.generic]:
        """Return heights as a read-only (rows, cols) array.

        The dtype follows the stored heights; big ints, Fraction and Decimal
        give an object array.
        """
        data = np.array([cell.height for cell in self.cells]).reshape(
            self.rows, self.cols
        )
        data.flags.writeable = False
        return data


# ---------------------------------------------------------------------------
# ForestAnalysis
# ---------------------------------------------------------------------------
class ForestAnalysis(BaseModel):
    """Aggregate visibility results for one grid (Value Object)."""

    rows: int = Field(ge=0)
    cols: int = Field(ge=0)
    visible_count: int = Field(ge=0)  # Cells visible from at least one edge
    max_scenic_score: int = Field(ge=0)  # Best scenic score over all cells

    model_config = ConfigDict(frozen=True)

    @model_validator(mode="after")
    def validate_counts(self) -> "ForestAnalysis":
        if self.visible_count > self.rows * self.cols:
            raise ValueError(
                f"visible_count={self.visible_count} exceeds cell count "
                f"{self.rows * self.cols}"
            )
        return self
