"""Visibility Bounded Context - Domain Services.

Pure domain logic for directional visibility over a height grid.
NO I/O operations - height maps are loaded by infrastructure adapters
under `src/infrastructure/forest/` via domain ports.

Pipeline:
    height matrix -> build_grid -> ForestGrid
    ForestGrid -> walk_heights (lazy) -> is_visible_from / viewing_distance
    per-cell results -> count_visible_cells / max_scenic_score
"""

from __future__ import annotations

import math
from collections.abc import Callable, Iterator, Sequence
from concurrent.futures import ThreadPoolExecutor
from typing import Any, Union

import numpy as np
from numpy.typing import NDArray

from domain.visibility.errors import EmptyGridError, MalformedGridError
from domain.visibility.value_objects import (
    DIRECTIONS,
    Direction,
    ForestAnalysis,
    ForestGrid,
    HeightCell,
    height_problem,
)

Height = Any  # Any finite real number (see height_problem)
HeightMatrix = Union[Sequence[Sequence[Height]], NDArray[Any]]


# ---------------------------------------------------------------------------
# GridBuilder
# ---------------------------------------------------------------------------
def _validate_matrix(matrix: HeightMatrix) -> list[list[Height]]:
    """Check shape and element types; return the heights row by row.

    Python input keeps its original height objects, so big ints, Fraction and
    Decimal compare exactly. numpy input goes through tolist(), which maps
    each element to the matching native int or float without loss.
    """
    if isinstance(matrix, np.ndarray):
        if matrix.ndim != 2:
            raise MalformedGridError(f"Height matrix must be 2D, got {matrix.ndim}D")
        rows = matrix.tolist()
    else:
        try:
            rows = [list(row) for row in matrix]
        except TypeError as e:
            raise MalformedGridError(
                f"Height matrix rows must be sequences: {e}"
            ) from e

    if not rows:
        raise MalformedGridError("Height matrix is empty")

    width = len(rows[0])
    if width == 0:
        raise MalformedGridError("Height matrix row 0 is empty")
    for i, row in enumerate(rows):
        if len(row) != width:
            raise MalformedGridError(
                f"Height matrix row {i} has length {len(row)}, expected {width}"
            )

    for r, row in enumerate(rows):
        for c, value in enumerate(row):
            problem = height_problem(value)
            if problem is not None:
                raise MalformedGridError(f"{problem} at ({r}, {c})")

    return rows


def build_grid(matrix: HeightMatrix) -> ForestGrid:
    """Build a fully wired ForestGrid from a row-major height matrix.

    Each adjacency is wired exactly once: vertical links per pair of adjacent
    rows, horizontal links per pair of adjacent cells in a row. Both ends of a
    link are written together so the two directions can never drift apart.

    Args:
        matrix: Non-empty rectangular sequence of rows (or 2D numpy array)

    Returns:
        ForestGrid owning one HeightCell per matrix entry

    Raises:
        MalformedGridError: If the matrix is empty, ragged, or not numeric

    Example:
        >>> grid = build_grid([[3, 0, 3], [2, 5, 5]])
        >>> grid.cell_at(1, 1).above
        1
    """
    heights = _validate_matrix(matrix)
    rows, cols = len(heights), len(heights[0])

    links: list[dict[str, int]] = [{} for _ in range(rows * cols)]

    # Vertical: each cell links Below, the cell under it links back Above
    for r in range(rows - 1):
        for c in range(cols):
            upper, lower = r * cols + c, (r + 1) * cols + c
            links[upper][Direction.BELOW.value] = lower
            links[lower][Direction.ABOVE.value] = upper

    # Horizontal: each cell links Right, its right neighbour links back Left
    for r in range(rows):
        for c in range(cols - 1):
            west, east = r * cols + c, r * cols + c + 1
            links[west][Direction.RIGHT.value] = east
            links[east][Direction.LEFT.value] = west

    cells = tuple(
        HeightCell(
            index=r * cols + c,
            row=r,
            col=c,
            height=heights[r][c],
            **links[r * cols + c],
        )
        for r in range(rows)
        for c in range(cols)
    )

    return ForestGrid(cells=cells, rows=rows, cols=cols)


# ---------------------------------------------------------------------------
# DirectionalWalker
# ---------------------------------------------------------------------------
def walk_heights(
    grid: ForestGrid, cell: HeightCell, direction: Direction
) -> Iterator[Height]:
    """Lazily yield heights stepping outward from ``cell`` until the edge.

    The starting cell itself is not yielded. Each call is an independent
    generator; a step is only taken when the consumer asks for the next
    height, so short-circuiting consumers never walk to the edge.
    """
    current = grid.neighbor(cell, direction)
    while current is not None:
        yield current.height
        current = grid.neighbor(current, direction)


# ---------------------------------------------------------------------------
# VisibilityEvaluator
# ---------------------------------------------------------------------------
def is_visible_from(grid: ForestGrid, cell: HeightCell, direction: Direction) -> bool:
    """True if every height toward the edge is strictly lower than ``cell``.

    Equal heights block. Edge cells (empty walk) are vacuously visible.
    """
    return all(h < cell.height for h in walk_heights(grid, cell, direction))


def is_visible(grid: ForestGrid, cell: HeightCell) -> bool:
    """True if ``cell`` is visible from at least one grid edge."""
    return any(is_visible_from(grid, cell, d) for d in DIRECTIONS)


# ---------------------------------------------------------------------------
# ScenicScoreEvaluator
# ---------------------------------------------------------------------------
def viewing_distance(grid: ForestGrid, cell: HeightCell, direction: Direction) -> int:
    """Count cells seen from ``cell`` in ``direction``.

    Leading heights strictly below ``cell.height`` are counted; the first
    height >= ``cell.height`` is counted too and ends the view. Reaching the
    edge without a blocker gives the number of cells walked.
    """
    distance = 0
    for h in walk_heights(grid, cell, direction):
        distance += 1
        if h >= cell.height:
            break
    return distance


def viewing_distances(
    grid: ForestGrid, cell: HeightCell
) -> tuple[tuple[Direction, int], ...]:
    """Return (direction, distance) pairs in DIRECTIONS order."""
    return tuple((d, viewing_distance(grid, cell, d)) for d in DIRECTIONS)


def scenic_score(grid: ForestGrid, cell: HeightCell) -> int:
    """Product of the four viewing distances (0 for any edge cell)."""
    return math.prod(distance for _, distance in viewing_distances(grid, cell))


# ---------------------------------------------------------------------------
# ForestAnalyzer
# ---------------------------------------------------------------------------
def _chunk_bounds(n_cells: int, workers: int) -> list[tuple[int, int]]:
    """Split [0, n_cells) into at most ``workers`` contiguous ranges."""
    size = max(1, math.ceil(n_cells / workers))
    return [(lo, min(lo + size, n_cells)) for lo in range(0, n_cells, size)]


def _map_chunks(
    grid: ForestGrid,
    per_chunk: Callable[[Sequence[HeightCell]], int],
    workers: int | None,
) -> list[int]:
    """Evaluate ``per_chunk`` over disjoint cell ranges.

    Each chunk produces a private partial result; callers merge them with a
    commutative reduction (sum / max) so scheduling order cannot matter.
    """
    if workers is not None and workers < 1:
        raise ValueError(f"workers must be >= 1, got {workers}")
    if workers is None or workers == 1 or len(grid.cells) <= 1:
        return [per_chunk(grid.cells)]

    chunks = [grid.cells[lo:hi] for lo, hi in _chunk_bounds(len(grid.cells), workers)]
    with ThreadPoolExecutor(max_workers=workers) as pool:
        return list(pool.map(per_chunk, chunks))


def count_visible_cells(grid: ForestGrid, workers: int | None = None) -> int:
    """Count cells visible from at least one edge.

    Args:
        grid: Built ForestGrid
        workers: Thread count for chunked evaluation (None or 1 = sequential)

    Raises:
        ValueError: If workers < 1
    """

    def count_chunk(cells: Sequence[HeightCell]) -> int:
        return sum(1 for cell in cells if is_visible(grid, cell))

    return sum(_map_chunks(grid, count_chunk, workers))


def max_scenic_score(grid: ForestGrid, workers: int | None = None) -> int:
    """Return the best scenic score over all cells.

    Raises:
        EmptyGridError: If the grid has zero cells
        ValueError: If workers < 1
    """
    if not grid.cells:
        raise EmptyGridError("Cannot compute max scenic score of an empty grid")

    def max_chunk(cells: Sequence[HeightCell]) -> int:
        return max(scenic_score(grid, cell) for cell in cells)

    return max(_map_chunks(grid, max_chunk, workers))


def analyze_forest(matrix: HeightMatrix, workers: int | None = None) -> ForestAnalysis:
    """Build the grid once and compute both aggregates.

    Args:
        matrix: Row-major height matrix
        workers: Thread count for chunked evaluation (None or 1 = sequential)

    Returns:
        ForestAnalysis with visible_count and max_scenic_score

    Raises:
        MalformedGridError: If the matrix is empty, ragged, or not numeric

    Example:
        >>> analysis = analyze_forest([[3, 0, 3, 7, 3], [2, 5, 5, 1, 2]])
        >>> analysis.visible_count
        10
    """
    grid = build_grid(matrix)
    return ForestAnalysis(
        rows=grid.rows,
        cols=grid.cols,
        visible_count=count_visible_cells(grid, workers),
        max_scenic_score=max_scenic_score(grid, workers),
    )


# ---------------------------------------------------------------------------
# Raster outputs
# ---------------------------------------------------------------------------
def visibility_map(grid: ForestGrid) -> NDArray[np.bool_]:
    """Return a read-only (rows, cols) mask of visible cells."""
    mask = np.fromiter(
        (is_visible(grid, cell) for cell in grid.cells),
        dtype=np.bool_,
        count=len(grid.cells),
    ).reshape(grid.rows, grid.cols)
    mask.flags.writeable = False
    return mask


def scenic_score_map(grid: ForestGrid) -> NDArray[np.int64]:
    """Return a read-only (rows, cols) array of scenic scores."""
    scores = np.fromiter(
        (scenic_score(grid, cell) for cell in grid.cells),
        dtype=np.int64,
        count=len(grid.cells),
    ).reshape(grid.rows, grid.cols)
    scores.flags.writeable = False
    return scores
