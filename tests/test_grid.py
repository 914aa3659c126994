"""
Tests for layout parsing and the grid model.
"""

import json

import numpy as np
import pytest

from Splitter.errors import MalformedLayoutError
from Splitter.grid import Grid, build, load_grid


# ============================================================================
# Parsing
# ============================================================================

def test_build_small_grid(small_grid):
    assert small_grid.width == 2
    assert small_grid.height == 2
    assert small_grid.pips == (2, 1, 1, 0)
    assert small_grid.total_pips == 4
    assert small_grid.max_pip == 2


def test_newline_rows_and_dot_blanks_match_pipe_layout():
    assert build("21\n1.").pips == build("21|1 ").pips


def test_single_column_layout(column_grid):
    assert column_grid.width == 1
    assert column_grid.height == 2
    assert column_grid.pips == (1, 1)


def test_zero_digit_is_a_blank_cell():
    assert build("20|02").pips == (2, 0, 0, 2)


@pytest.mark.parametrize("layout, row, col", [
    ("12|1", 1, None),
    ("1x", 0, 1),
    ("11|1-", 1, 1),
])
def test_malformed_layouts_report_position(layout, row, col):
    with pytest.raises(MalformedLayoutError) as excinfo:
        build(layout)
    assert excinfo.value.row == row
    assert excinfo.value.col == col


@pytest.mark.parametrize("layout", ["", "|", "\n", "1|"])
def test_empty_rows_are_rejected(layout):
    with pytest.raises(MalformedLayoutError):
        build(layout)


def test_malformed_layout_is_a_value_error():
    with pytest.raises(ValueError):
        build("1?")


def test_from_pips_checks_cell_count():
    with pytest.raises(MalformedLayoutError):
        Grid.from_pips(2, 2, [1, 2, 3])


def test_from_pips_rejects_negative_pips():
    with pytest.raises(MalformedLayoutError):
        Grid.from_pips(2, 1, [1, -1])


# ============================================================================
# Adjacency
# ============================================================================

def test_corner_adjacency(small_grid):
    assert small_grid.adjacency(0) == {1, 2}
    assert small_grid.adjacency(3) == {1, 2}


def test_interior_cell_has_four_neighbours():
    grid = build("111|111|111")
    assert grid.adjacency(4) == {1, 3, 5, 7}
    assert grid.adjacency(1) == {0, 2, 4}


def test_adjacency_is_symmetric_and_irreflexive():
    grid = build("1234|5678|9012")
    for cell in range(grid.num_cells):
        assert cell not in grid.adjacency(cell)
        for n in grid.adjacency(cell):
            assert cell in grid.adjacency(n)


def test_neighbour_masks_match_neighbours():
    grid = build("123|456")
    for cell in range(grid.num_cells):
        expected = sum(1 << n for n in grid.adjacency(cell))
        assert grid.neighbour_masks[cell] == expected


def test_out_of_range_cell_fails_fast(small_grid):
    with pytest.raises(IndexError):
        small_grid.adjacency(4)
    with pytest.raises(IndexError):
        small_grid.pip_count(-1)


# ============================================================================
# Conversions and helpers
# ============================================================================

def test_coords_and_index_round_trip():
    grid = build("123|456")
    assert grid.coords(4) == (1, 1)
    assert grid.index(1, 2) == 5
    with pytest.raises(IndexError):
        grid.index(2, 0)


def test_to_layout_uses_spaces_for_blanks():
    assert build("2.1|...").to_layout() == "2 1|   "


def test_pip_array_shape_and_values():
    arr = build("2 1|3 4").pip_array()
    assert arr.shape == (2, 3)
    assert np.array_equal(arr, np.array([[2, 0, 1], [3, 0, 4]]))


def test_region_is_connected(small_grid):
    assert small_grid.region_is_connected([0, 1, 3])
    assert not small_grid.region_is_connected([0, 3])
    assert not small_grid.region_is_connected([])


# ============================================================================
# Loading from files
# ============================================================================

def test_load_grid_from_json(tmp_path):
    path = tmp_path / "puzzle.json"
    path.write_text(json.dumps({"layout": "21|1 "}))
    assert load_grid(path).pips == (2, 1, 1, 0)


def test_load_grid_from_text_file(tmp_path):
    path = tmp_path / "puzzle.txt"
    path.write_text("21\n1.\n")
    assert load_grid(str(path)).pips == (2, 1, 1, 0)


def test_load_grid_json_without_layout(tmp_path):
    path = tmp_path / "puzzle.json"
    path.write_text(json.dumps({"rows": ["21", "1 "]}))
    with pytest.raises(MalformedLayoutError):
        load_grid(path)
