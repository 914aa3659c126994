"""
Tests for the feasibility oracle.
"""

import pytest

from Splitter.errors import EmptyPuzzleError
from Splitter.feasibility import FeasibilitySet, derive
from Splitter.grid import build


def test_small_grid_has_single_total(small_grid):
    fs = derive(small_grid)
    assert fs.total_pips == 4
    assert fs.max_pip == 2
    assert fs.totals() == [2]
    assert fs.biggest_required_pip_count() == 2
    assert fs.smallest_required_pip_count() == 2


def test_ones_allow_every_divisor_up_to_half(square_grid):
    fs = derive(square_grid)
    assert fs.totals() == [1, 2]
    assert fs.biggest_required_pip_count() == 2
    assert 1 in fs
    assert 3 not in fs
    assert len(fs) == 2


def test_totals_between_max_pip_and_half():
    fs = derive(build("4224|2112|2112|4224"))
    assert fs.total_pips == 36
    assert fs.totals() == [4, 6, 9, 12, 18]
    assert fs.biggest_required_pip_count() == 18
    assert fs.smallest_required_pip_count() == 4


def test_mask_bits_match_totals(square_grid):
    fs = derive(square_grid)
    assert fs.mask == (1 << 1) | (1 << 2)


@pytest.mark.parametrize("layout", ["3|1", "5", "91"])
def test_no_feasible_total(layout):
    fs = derive(build(layout))
    assert fs.is_empty()
    assert fs.totals() == []
    assert fs.biggest_required_pip_count() is None
    assert fs.smallest_required_pip_count() is None


@pytest.mark.parametrize("layout", ["00", "  |  ", "."])
def test_grid_without_pips_is_rejected(layout):
    with pytest.raises(EmptyPuzzleError):
        derive(build(layout))


def test_empty_puzzle_error_is_a_value_error():
    with pytest.raises(ValueError):
        derive(build("0"))


def test_classmethod_matches_function(small_grid):
    assert FeasibilitySet.derive(small_grid) == derive(small_grid)


def test_negative_total_is_not_contained(small_grid):
    assert -2 not in derive(small_grid)
