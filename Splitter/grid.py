"""
Core grid representation for Split puzzles

A layout such as ``"21|1 "`` describes a rectangular grid row by row: every
character is a digit (pip count) or a blank marker (zero pips).
"""
import json
from collections import deque
from dataclasses import dataclass
from pathlib import Path
from typing import FrozenSet, Iterable, List, Tuple, Union

import numpy as np

from .errors import MalformedLayoutError

ROW_DELIMITERS = "|\n"
BLANK_MARKERS = " ."
DIGITS = "0123456789"


@dataclass(frozen=True)
class Grid:
    """Immutable grid: pip counts plus precomputed 4-connected adjacency"""
    width: int
    height: int
    pips: Tuple[int, ...]  # Row-major, indexed by cell
    neighbours: Tuple[FrozenSet[int], ...]
    neighbour_masks: Tuple[int, ...]  # Same relation as `neighbours`, as bitmasks

    @classmethod
    def from_layout(cls, layout: str) -> "Grid":
        return build(layout)

    @classmethod
    def from_pips(cls, width: int, height: int, pips: Iterable[int]) -> "Grid":
        """Build a grid directly from row-major pip counts"""
        pips = tuple(int(p) for p in pips)
        if width <= 0 or height <= 0:
            raise MalformedLayoutError(f"Grid must be at least 1x1, got {width}x{height}")
        if len(pips) != width * height:
            raise MalformedLayoutError(
                f"Expected {width * height} pip counts for a {width}x{height} grid, got {len(pips)}"
            )
        if any(p < 0 for p in pips):
            raise MalformedLayoutError("Pip counts must be non-negative")

        neighbours = _build_adjacency(width, height)
        masks = tuple(sum(1 << n for n in adj) for adj in neighbours)
        return cls(width=width, height=height, pips=pips, neighbours=neighbours, neighbour_masks=masks)

    # -------------------------------------------------------------------------
    # Basic queries
    # -------------------------------------------------------------------------
    @property
    def num_cells(self) -> int:
        return len(self.pips)

    @property
    def total_pips(self) -> int:
        return sum(self.pips)

    @property
    def max_pip(self) -> int:
        return max(self.pips)

    def pip_count(self, cell: int) -> int:
        self._check_cell(cell)
        return self.pips[cell]

    def adjacency(self, cell: int) -> FrozenSet[int]:
        """Cells sharing an edge with `cell` (up to 4)"""
        self._check_cell(cell)
        return self.neighbours[cell]

    def coords(self, cell: int) -> Tuple[int, int]:
        """(row, col) of a cell"""
        self._check_cell(cell)
        return divmod(cell, self.width)

    def index(self, row: int, col: int) -> int:
        if not (0 <= row < self.height and 0 <= col < self.width):
            raise IndexError(f"({row},{col}) is outside a {self.width}x{self.height} grid")
        return row * self.width + col

    def _check_cell(self, cell: int) -> None:
        if not 0 <= cell < len(self.pips):
            raise IndexError(f"Cell {cell} is outside a grid of {len(self.pips)} cells")

    # -------------------------------------------------------------------------
    # Conversions
    # -------------------------------------------------------------------------
    def to_layout(self) -> str:
        """Canonical single-line layout, using ' ' for empty cells"""
        rows = []
        for r in range(self.height):
            row = self.pips[r * self.width:(r + 1) * self.width]
            rows.append("".join(str(p) if p else " " for p in row))
        return "|".join(rows)

    def pip_array(self) -> np.ndarray:
        """Pip counts as a (height, width) array"""
        return np.array(self.pips, dtype=np.int64).reshape(self.height, self.width)

    def region_is_connected(self, cells: Iterable[int]) -> bool:
        """True if `cells` form one 4-connected group"""
        cells = set(cells)
        if not cells:
            return False
        start = min(cells)
        seen = {start}
        queue = deque([start])
        while queue:
            cell = queue.popleft()
            for n in self.neighbours[cell]:
                if n in cells and n not in seen:
                    seen.add(n)
                    queue.append(n)
        return seen == cells

    def __repr__(self):
        return f"Grid({self.width}x{self.height}, total_pips={self.total_pips}, layout={self.to_layout()!r})"


def _build_adjacency(width: int, height: int) -> Tuple[FrozenSet[int], ...]:
    """4-connected neighbours for every cell of a width x height rectangle"""
    neighbours: List[FrozenSet[int]] = []
    for r in range(height):
        for c in range(width):
            adj = set()
            for nr, nc in [(r - 1, c), (r + 1, c), (r, c - 1), (r, c + 1)]:
                if 0 <= nr < height and 0 <= nc < width:
                    adj.add(nr * width + nc)
            neighbours.append(frozenset(adj))
    return tuple(neighbours)


def _split_rows(layout: str) -> List[str]:
    rows = [layout]
    for delimiter in ROW_DELIMITERS:
        rows = [part for row in rows for part in row.split(delimiter)]
    return rows


def build(layout: str) -> Grid:
    """
    Parse a layout string into a Grid.

    Rows are separated by '|' or newlines. Each character is a digit (its pip
    count) or one of BLANK_MARKERS (zero pips). All rows must share a length.
    """
    if not isinstance(layout, str):
        raise MalformedLayoutError(f"Layout must be a string, got {type(layout).__name__}")
    if layout.strip(ROW_DELIMITERS) == "":
        raise MalformedLayoutError("Layout is empty", layout=layout)

    rows = _split_rows(layout)
    width = len(rows[0])
    if width == 0:
        raise MalformedLayoutError("First row of layout is empty", row=0, layout=layout)

    pips: List[int] = []
    for r, row in enumerate(rows):
        if len(row) != width:
            raise MalformedLayoutError(
                f"Row {r} has length {len(row)}, expected {width} (layout {layout!r})",
                row=r,
                layout=layout,
            )
        for c, ch in enumerate(row):
            if ch in DIGITS:
                pips.append(int(ch))
            elif ch in BLANK_MARKERS:
                pips.append(0)
            else:
                raise MalformedLayoutError(
                    f"Invalid char {ch!r} at ({r},{c}) in layout {layout!r}",
                    row=r,
                    col=c,
                    layout=layout,
                )

    return Grid.from_pips(width, len(rows), pips)


def load_grid(path: Union[str, Path]) -> Grid:
    """
    Load a grid from a file.

    JSON files must contain an object with a "layout" string; anything else is
    read as raw layout text.
    """
    path = Path(path)
    text = path.read_text(encoding="utf-8").replace("\r\n", "\n")
    if path.suffix.lower() == ".json":
        data = json.loads(text)
        if not isinstance(data, dict) or not isinstance(data.get("layout"), str):
            raise MalformedLayoutError(f"{path} has no 'layout' string")
        return build(data["layout"])
    return build(text.rstrip("\r\n"))
