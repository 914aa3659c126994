"""
Tests for the two CellSet backings.
"""

import pytest

from Splitter.cellset import ArrayCellSet, WordCellSet, cellset_type_for


BACKINGS = [WordCellSet, ArrayCellSet]


# ============================================================================
# Basic membership
# ============================================================================

@pytest.mark.parametrize("kind", BACKINGS)
def test_empty_set(kind):
    s = kind.empty(10)
    assert s.is_empty()
    assert len(s) == 0
    assert s.lowest_member() is None
    assert list(s) == []


@pytest.mark.parametrize("kind", BACKINGS)
def test_insert_remove_contains(kind):
    s = kind.singleton(10, 4)
    assert 4 in s
    assert s.contains(4)
    assert not s.contains(5)

    s.insert(7)
    assert sorted(s) == [4, 7]
    s.remove(4)
    s.remove(4)  # absent: no error
    assert list(s) == [7]
    assert len(s) == 1


@pytest.mark.parametrize("kind", BACKINGS)
def test_out_of_range_cells_fail_fast(kind):
    s = kind.empty(10)
    with pytest.raises(IndexError):
        s.insert(10)
    with pytest.raises(IndexError):
        s.contains(-1)
    with pytest.raises(IndexError):
        kind.from_mask(10, 1 << 10)


@pytest.mark.parametrize("kind", BACKINGS)
def test_lowest_member(kind):
    assert kind.from_cells(10, [9, 3, 6]).lowest_member() == 3
    assert kind.singleton(10, 0).lowest_member() == 0


# ============================================================================
# Set algebra
# ============================================================================

@pytest.mark.parametrize("kind", BACKINGS)
def test_union_intersect_difference(kind):
    a = kind.from_cells(10, [1, 3, 5])
    b = kind.from_cells(10, [3, 4])
    assert list(a.union(b)) == [1, 3, 4, 5]
    assert list(a.intersect(b)) == [3]
    assert list(a.difference(b)) == [1, 5]
    assert list(a | b) == [1, 3, 4, 5]
    assert list(a & b) == [3]
    assert list(a - b) == [1, 5]
    assert not a.isdisjoint(b)
    assert a.isdisjoint(kind.from_cells(10, [0, 2]))


@pytest.mark.parametrize("kind", BACKINGS)
def test_complement_stays_within_capacity(kind):
    a = kind.from_cells(10, [1, 3, 5])
    assert list(a.complement()) == [0, 2, 4, 6, 7, 8, 9]
    assert list(~kind.empty(10)) == list(range(10))
    assert kind.from_mask(10, (1 << 10) - 1).complement().is_empty()


@pytest.mark.parametrize("kind", BACKINGS)
def test_below(kind):
    assert list(kind.below(10, 4)) == [0, 1, 2, 3]
    assert kind.below(10, 0).is_empty()
    assert len(kind.below(10, 10)) == 10
    with pytest.raises(IndexError):
        kind.below(10, 11)


@pytest.mark.parametrize("kind", BACKINGS)
def test_operations_do_not_mutate_operands(kind):
    a = kind.from_cells(10, [1, 2])
    b = kind.from_cells(10, [2, 3])
    a.union(b)
    a.difference(b)
    a.complement()
    assert list(a) == [1, 2]
    assert list(b) == [2, 3]


@pytest.mark.parametrize("kind", BACKINGS)
def test_copy_is_independent(kind):
    a = kind.from_cells(10, [1, 2])
    b = a.copy()
    b.insert(8)
    assert list(a) == [1, 2]
    assert list(b) == [1, 2, 8]


@pytest.mark.parametrize("kind", BACKINGS)
def test_mixing_capacities_is_rejected(kind):
    with pytest.raises(ValueError):
        kind.empty(10).union(kind.empty(12))


def test_mixing_backings_is_rejected():
    with pytest.raises(ValueError):
        WordCellSet.empty(10).union(ArrayCellSet.empty(10))


def test_equality_compares_members_across_backings():
    assert WordCellSet.from_cells(10, [2, 5]) == ArrayCellSet.from_cells(10, [2, 5])
    assert WordCellSet.from_cells(10, [2]) != WordCellSet.from_cells(11, [2])


# ============================================================================
# Capacity limits
# ============================================================================

def test_word_backing_is_limited_to_64_cells():
    assert len(WordCellSet.empty(64).complement()) == 64
    with pytest.raises(ValueError):
        WordCellSet.empty(65)


def test_array_backing_spans_several_words():
    s = ArrayCellSet.from_cells(130, [129, 64, 0])
    assert len(s.words) == 3
    assert list(s) == [0, 64, 129]
    assert len(s) == 3
    assert s.to_mask() == (1 << 129) | (1 << 64) | 1

    s.remove(0)
    assert s.lowest_member() == 64

    comp = s.complement()
    assert len(comp) == 128
    assert 129 not in comp
    assert 128 in comp


def test_array_complement_on_word_boundary():
    s = ArrayCellSet.from_cells(128, [0, 127])
    comp = s.complement()
    assert len(comp) == 126
    assert comp.lowest_member() == 1


def test_array_below_crosses_word_boundary():
    s = ArrayCellSet.below(130, 70)
    assert len(s) == 70
    assert 69 in s
    assert 70 not in s


@pytest.mark.parametrize("num_cells, expected", [
    (1, WordCellSet),
    (64, WordCellSet),
    (65, ArrayCellSet),
    (400, ArrayCellSet),
])
def test_cellset_type_for(num_cells, expected):
    assert cellset_type_for(num_cells) is expected
