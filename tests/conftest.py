"""
Shared fixtures for the Splitter tests.
"""

import pytest

from Splitter.grid import build


# ============================================================================
# Grids
# ============================================================================

@pytest.fixture
def small_grid():
    """2x2 grid with pips [2, 1, 1, 0] (total 4)."""
    return build("21|1 ")


@pytest.fixture
def column_grid():
    """Two cells stacked vertically, one pip each."""
    return build("1|1")


@pytest.fixture
def square_grid():
    """2x2 grid of ones."""
    return build("11|11")


@pytest.fixture
def twos_grid():
    """3x3 grid from the built-in 'twos' set."""
    return build("21 |12 |  2")


@pytest.fixture
def long_row_grid():
    """1x72 row of ones: too big for a single-word cell set."""
    return build("1" * 72)
