"""
Fixed-capacity sets of grid cells

Two backings share one interface:
 - WordCellSet: a single 64-bit word, for grids of up to 64 cells
 - ArrayCellSet: an array of 64-bit words (numpy), for any grid size

Callers pick a backing with `cellset_type_for(num_cells)` and only use the
CellSet interface afterwards.
"""

from __future__ import annotations

from abc import ABC, abstractmethod
from typing import Iterable, Iterator, Optional, Type

import numpy as np

WORD_BITS = 64


class CellSet(ABC):
    """Set of cell indices in [0, capacity)."""

    capacity: int

    # ---------- constructors ----------

    @classmethod
    @abstractmethod
    def empty(cls, capacity: int) -> "CellSet":
        ...

    @classmethod
    @abstractmethod
    def from_mask(cls, capacity: int, mask: int) -> "CellSet":
        """Build from an integer bitmask (bit i set => cell i present)."""

    @classmethod
    def singleton(cls, capacity: int, cell: int) -> "CellSet":
        s = cls.empty(capacity)
        s.insert(cell)
        return s

    @classmethod
    def below(cls, capacity: int, cell: int) -> "CellSet":
        """All cells with an index strictly lower than `cell`."""
        if not 0 <= cell <= capacity:
            raise IndexError(f"Cell {cell} is outside capacity {capacity}")
        return cls.from_mask(capacity, (1 << cell) - 1)

    @classmethod
    def from_cells(cls, capacity: int, cells: Iterable[int]) -> "CellSet":
        s = cls.empty(capacity)
        for cell in cells:
            s.insert(cell)
        return s

    # ---------- abstract operations ----------

    @abstractmethod
    def contains(self, cell: int) -> bool:
        ...

    @abstractmethod
    def insert(self, cell: int) -> None:
        ...

    @abstractmethod
    def remove(self, cell: int) -> None:
        """Remove `cell` if present (no error if absent)."""

    @abstractmethod
    def union(self, other: "CellSet") -> "CellSet":
        ...

    @abstractmethod
    def intersect(self, other: "CellSet") -> "CellSet":
        ...

    @abstractmethod
    def difference(self, other: "CellSet") -> "CellSet":
        ...

    @abstractmethod
    def complement(self) -> "CellSet":
        ...

    @abstractmethod
    def lowest_member(self) -> Optional[int]:
        ...

    @abstractmethod
    def is_empty(self) -> bool:
        ...

    @abstractmethod
    def copy(self) -> "CellSet":
        ...

    @abstractmethod
    def to_mask(self) -> int:
        ...

    @abstractmethod
    def __len__(self) -> int:
        ...

    # ---------- shared helpers ----------

    def isdisjoint(self, other: "CellSet") -> bool:
        return self.intersect(other).is_empty()

    def __iter__(self) -> Iterator[int]:
        mask = self.to_mask()
        while mask:
            low = mask & -mask
            yield low.bit_length() - 1
            mask ^= low

    def __contains__(self, cell: int) -> bool:
        return self.contains(cell)

    def __or__(self, other: "CellSet") -> "CellSet":
        return self.union(other)

    def __and__(self, other: "CellSet") -> "CellSet":
        return self.intersect(other)

    def __sub__(self, other: "CellSet") -> "CellSet":
        return self.difference(other)

    def __invert__(self) -> "CellSet":
        return self.complement()

    def __eq__(self, other):
        return (
            isinstance(other, CellSet)
            and self.capacity == other.capacity
            and self.to_mask() == other.to_mask()
        )

    __hash__ = None  # mutable

    def _check_cell(self, cell: int) -> None:
        if not 0 <= cell < self.capacity:
            raise IndexError(f"Cell {cell} is outside capacity {self.capacity}")

    def _check_compatible(self, other: "CellSet") -> None:
        if type(other) is not type(self) or other.capacity != self.capacity:
            raise ValueError(
                f"Cannot combine {type(self).__name__}({self.capacity}) "
                f"with {type(other).__name__}({other.capacity})"
            )

    def __repr__(self):
        return f"{type(self).__name__}({sorted(self)}, capacity={self.capacity})"


# -----------------------------------------------------------------------------
# Single machine word
# -----------------------------------------------------------------------------
class WordCellSet(CellSet):
    """CellSet held in one 64-bit word."""

    __slots__ = ("capacity", "bits", "_full")

    MAX_CAPACITY = WORD_BITS

    def __init__(self, capacity: int, bits: int = 0) -> None:
        if not 0 <= capacity <= self.MAX_CAPACITY:
            raise ValueError(f"WordCellSet supports at most {self.MAX_CAPACITY} cells, got {capacity}")
        self.capacity = capacity
        self._full = (1 << capacity) - 1
        if bits & ~self._full:
            raise IndexError(f"Mask {bits:#x} has cells outside capacity {capacity}")
        self.bits = bits

    @classmethod
    def empty(cls, capacity: int) -> "WordCellSet":
        return cls(capacity)

    @classmethod
    def from_mask(cls, capacity: int, mask: int) -> "WordCellSet":
        return cls(capacity, mask)

    def _new(self, bits: int) -> "WordCellSet":
        s = WordCellSet.__new__(WordCellSet)
        s.capacity = self.capacity
        s._full = self._full
        s.bits = bits
        return s

    def contains(self, cell: int) -> bool:
        self._check_cell(cell)
        return (self.bits >> cell) & 1 == 1

    def insert(self, cell: int) -> None:
        self._check_cell(cell)
        self.bits |= 1 << cell

    def remove(self, cell: int) -> None:
        self._check_cell(cell)
        self.bits &= ~(1 << cell)

    def union(self, other: "WordCellSet") -> "WordCellSet":
        self._check_compatible(other)
        return self._new(self.bits | other.bits)

    def intersect(self, other: "WordCellSet") -> "WordCellSet":
        self._check_compatible(other)
        return self._new(self.bits & other.bits)

    def difference(self, other: "WordCellSet") -> "WordCellSet":
        self._check_compatible(other)
        return self._new(self.bits & ~other.bits)

    def complement(self) -> "WordCellSet":
        return self._new(~self.bits & self._full)

    def lowest_member(self) -> Optional[int]:
        if not self.bits:
            return None
        return (self.bits & -self.bits).bit_length() - 1

    def is_empty(self) -> bool:
        return self.bits == 0

    def isdisjoint(self, other: "WordCellSet") -> bool:
        self._check_compatible(other)
        return self.bits & other.bits == 0

    def copy(self) -> "WordCellSet":
        return self._new(self.bits)

    def to_mask(self) -> int:
        return self.bits

    def __len__(self) -> int:
        return bin(self.bits).count("1")


# -----------------------------------------------------------------------------
# Array of words
# -----------------------------------------------------------------------------
class ArrayCellSet(CellSet):
    """CellSet held in a numpy array of 64-bit words, for grids of any size."""

    __slots__ = ("capacity", "words")

    def __init__(self, capacity: int, words: Optional[np.ndarray] = None) -> None:
        if capacity < 0:
            raise ValueError(f"Capacity must be non-negative, got {capacity}")
        self.capacity = capacity
        num_words = max(1, -(-capacity // WORD_BITS))
        if words is None:
            words = np.zeros(num_words, dtype=np.uint64)
        elif words.shape != (num_words,):
            raise ValueError(f"Expected {num_words} words for capacity {capacity}, got {words.shape}")
        self.words = words

    @classmethod
    def empty(cls, capacity: int) -> "ArrayCellSet":
        return cls(capacity)

    @classmethod
    def from_mask(cls, capacity: int, mask: int) -> "ArrayCellSet":
        if mask < 0 or mask >> capacity:
            raise IndexError(f"Mask {mask:#x} has cells outside capacity {capacity}")
        s = cls(capacity)
        word_mask = (1 << WORD_BITS) - 1
        for i in range(len(s.words)):
            s.words[i] = (mask >> (i * WORD_BITS)) & word_mask
        return s

    def _new(self, words: np.ndarray) -> "ArrayCellSet":
        return ArrayCellSet(self.capacity, words)

    @staticmethod
    def _locate(cell: int):
        word, bit = divmod(cell, WORD_BITS)
        return word, np.uint64(1 << bit)

    def contains(self, cell: int) -> bool:
        self._check_cell(cell)
        word, bit = self._locate(cell)
        return bool(self.words[word] & bit)

    def insert(self, cell: int) -> None:
        self._check_cell(cell)
        word, bit = self._locate(cell)
        self.words[word] |= bit

    def remove(self, cell: int) -> None:
        self._check_cell(cell)
        word, bit = self._locate(cell)
        self.words[word] &= ~bit

    def union(self, other: "ArrayCellSet") -> "ArrayCellSet":
        self._check_compatible(other)
        return self._new(np.bitwise_or(self.words, other.words))

    def intersect(self, other: "ArrayCellSet") -> "ArrayCellSet":
        self._check_compatible(other)
        return self._new(np.bitwise_and(self.words, other.words))

    def difference(self, other: "ArrayCellSet") -> "ArrayCellSet":
        self._check_compatible(other)
        return self._new(np.bitwise_and(self.words, np.invert(other.words)))

    def complement(self) -> "ArrayCellSet":
        words = np.invert(self.words)
        tail = self.capacity % WORD_BITS
        if tail:
            words[-1] &= np.uint64((1 << tail) - 1)
        elif self.capacity == 0:
            words[:] = 0
        return self._new(words)

    def lowest_member(self) -> Optional[int]:
        nonzero = np.flatnonzero(self.words)
        if nonzero.size == 0:
            return None
        i = int(nonzero[0])
        w = int(self.words[i])
        return i * WORD_BITS + (w & -w).bit_length() - 1

    def is_empty(self) -> bool:
        return not self.words.any()

    def copy(self) -> "ArrayCellSet":
        return self._new(self.words.copy())

    def to_mask(self) -> int:
        mask = 0
        for i, w in enumerate(self.words):
            mask |= int(w) << (i * WORD_BITS)
        return mask

    def __len__(self) -> int:
        return sum(bin(int(w)).count("1") for w in self.words)


def cellset_type_for(num_cells: int) -> Type[CellSet]:
    """Smallest backing able to hold `num_cells` cells."""
    if num_cells <= WordCellSet.MAX_CAPACITY:
        return WordCellSet
    return ArrayCellSet
