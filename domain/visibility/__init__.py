"""Visibility Bounded Context.

Responsible for directional line of sight over a height grid:
- Value Objects: Direction, HeightCell, ForestGrid, ForestAnalysis
- Services: build_grid, walk_heights, is_visible, scenic_score,
  count_visible_cells, max_scenic_score
"""
