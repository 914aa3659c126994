"""
Feasibility oracle: which region totals could possibly solve a grid

A total `p` is feasible when it is at least the biggest single-cell pip count
(no region can hold less than its biggest cell), at most half of the grid's
pips (at least two regions must carry pips) and divides the total evenly.
"""
from dataclasses import dataclass
from typing import List, Optional

from .errors import EmptyPuzzleError
from .grid import Grid


@dataclass(frozen=True)
class FeasibilitySet:
    """Bitmask over region totals: bit p set iff p is a feasible total"""
    total_pips: int
    max_pip: int
    mask: int

    @classmethod
    def derive(cls, grid: Grid) -> "FeasibilitySet":
        return derive(grid)

    def biggest_required_pip_count(self) -> Optional[int]:
        """Highest feasible total, or None when no total is feasible"""
        if not self.mask:
            return None
        return self.mask.bit_length() - 1

    def smallest_required_pip_count(self) -> Optional[int]:
        if not self.mask:
            return None
        return (self.mask & -self.mask).bit_length() - 1

    def totals(self) -> List[int]:
        """Feasible totals, ascending"""
        return [p for p in range(self.mask.bit_length()) if (self.mask >> p) & 1]

    def is_empty(self) -> bool:
        return self.mask == 0

    def __contains__(self, total: int) -> bool:
        return total >= 0 and (self.mask >> total) & 1 == 1

    def __len__(self) -> int:
        return bin(self.mask).count("1")

    def __repr__(self):
        return f"FeasibilitySet(total_pips={self.total_pips}, max_pip={self.max_pip}, totals={self.totals()})"


def derive(grid: Grid) -> FeasibilitySet:
    """
    Derive the feasible region totals of a grid.

    Raises EmptyPuzzleError if no cell carries any pips.
    """
    nonzero = [p for p in grid.pips if p > 0]
    if not nonzero:
        raise EmptyPuzzleError(f"Grid {grid.to_layout()!r} has no pips; no region total exists")

    total = sum(nonzero)
    max_pip = max(nonzero)

    mask = 0
    for p in range(max_pip, total // 2 + 1):
        if total % p == 0:
            mask |= 1 << p

    return FeasibilitySet(total_pips=total, max_pip=max_pip, mask=mask)
