"""Forest Sight Domain Layer.

This package contains the core logic organized by bounded contexts:
- visibility: Height grids, directional line of sight, scenic scores
"""

from domain import visibility

__all__ = ["visibility"]
