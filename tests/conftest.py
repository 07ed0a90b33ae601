"""Root pytest configuration for all tests.

Provides the Scenario A sample grid used across the visibility, adapter
and CLI tests.
"""

from pathlib import Path

import pytest

from domain.visibility.services import build_grid
from domain.visibility.value_objects import ForestGrid
from tests.conftest_utils import SAMPLE_MATRIX, get_fixtures_dir


@pytest.fixture
def sample_matrix() -> list[list[int]]:
    """Fresh copy of the 5x5 sample matrix (safe to mutate in a test)."""
    return [row[:] for row in SAMPLE_MATRIX]


@pytest.fixture(scope="session")
def sample_grid() -> ForestGrid:
    """Built 5x5 sample grid (immutable, shared across the session)."""
    return build_grid(SAMPLE_MATRIX)


@pytest.fixture(scope="session")
def sample_path() -> Path:
    """Path to tests/fixtures/sample.txt."""
    return get_fixtures_dir() / "sample.txt"
