"""
Result reporting for region searches

A reporter receives every candidate the search finds and decides when the
search should stop. Formatting helpers turn candidates into text or JSON.
"""
from __future__ import annotations

import json
from abc import ABC, abstractmethod
from datetime import datetime
from typing import TYPE_CHECKING, Callable, Dict, Iterable, List, Optional, Sequence, Tuple

if TYPE_CHECKING:
    from .grid import Grid
    from .search import Candidate

DEFAULT_MAX_CANDIDATES = 10000


class ResultReporter(ABC):
    """Receives candidates from a search and owns the stop decision"""

    def __init__(self, max_candidates: Optional[int] = None):
        if max_candidates is not None and max_candidates < 0:
            raise ValueError(f"max_candidates must be non-negative, got {max_candidates}")
        self.max_candidates = max_candidates
        self.count = 0

    def report(self, candidate: "Candidate") -> None:
        """Record one candidate; ignored once the limit has been reached"""
        if self.should_stop():
            return
        self.count += 1
        self._handle(candidate)

    def should_stop(self) -> bool:
        return self.max_candidates is not None and self.count >= self.max_candidates

    @abstractmethod
    def _handle(self, candidate: "Candidate") -> None:
        ...


class CandidateCollector(ResultReporter):
    """Accumulates candidates in memory"""

    def __init__(self, max_candidates: Optional[int] = None):
        super().__init__(max_candidates)
        self.candidates: List["Candidate"] = []

    def _handle(self, candidate: "Candidate") -> None:
        self.candidates.append(candidate)

    def by_total(self) -> Dict[int, List["Candidate"]]:
        """Candidates grouped by pip sum"""
        grouped: Dict[int, List["Candidate"]] = {}
        for c in self.candidates:
            grouped.setdefault(c.pip_sum, []).append(c)
        return grouped


class CallbackReporter(ResultReporter):
    """Streams each candidate to a callback"""

    def __init__(self, callback: Callable[["Candidate"], None], max_candidates: Optional[int] = None):
        super().__init__(max_candidates)
        self.callback = callback

    def _handle(self, candidate: "Candidate") -> None:
        self.callback(candidate)


class PrintingReporter(ResultReporter):
    """Prints each candidate as a small cell map"""

    def __init__(self, grid: "Grid", max_candidates: Optional[int] = None):
        super().__init__(max_candidates)
        self.grid = grid

    def _handle(self, candidate: "Candidate") -> None:
        print(f"Candidate #{self.count}:")
        print(CandidateFormatter.format_candidate(self.grid, candidate))
        print()


class CandidateFormatter:
    """Formats candidates for output"""

    @staticmethod
    def format_bitmap(grid: "Grid", marks: Sequence[Tuple[Iterable[int], str]]) -> str:
        """
        Draw one character per cell.

        `marks` is a list of (cells, char); the first mark containing a cell
        wins, and unmarked cells are drawn as '-'.
        """
        chars = ['-'] * grid.num_cells
        for cells, ch in reversed(list(marks)):
            for cell in cells:
                chars[cell] = ch
        rows = [
            "".join(chars[r * grid.width:(r + 1) * grid.width])
            for r in range(grid.height)
        ]
        return "\n".join(rows)

    @staticmethod
    def format_candidate(grid: "Grid", candidate: "Candidate") -> str:
        bitmap = CandidateFormatter.format_bitmap(grid, [(candidate.cells, 'I')])
        return f"{bitmap}\n(seed {candidate.seed}, {len(candidate.cells)} cells, pip sum {candidate.pip_sum})"

    @staticmethod
    def format_summary(grid: "Grid", candidates: Sequence["Candidate"]) -> str:
        """
        Human-readable summary of a search
        """
        lines = []
        lines.append("=" * 60)
        lines.append("SPLIT CANDIDATE REGIONS")
        lines.append("=" * 60)
        lines.append(f"\nGrid: {grid.width}x{grid.height}, layout {grid.to_layout()!r}")
        lines.append(f"Total pips: {grid.total_pips}")
        lines.append(f"Found {len(candidates)} candidate regions\n")

        totals: Dict[int, int] = {}
        for c in candidates:
            totals[c.pip_sum] = totals.get(c.pip_sum, 0) + 1
        lines.append("BY PIP SUM:")
        lines.append("-" * 60)
        for total, count in sorted(totals.items()):
            lines.append(f"  {total:3d} pips -> {count} regions")

        lines.append("=" * 60)
        return "\n".join(lines)

    @staticmethod
    def to_dict(candidate: "Candidate") -> Dict:
        return {
            'seed': candidate.seed,
            'cells': list(candidate.cells),
            'pip_sum': candidate.pip_sum,
        }

    @staticmethod
    def format_results_json(grid: "Grid", candidates: Sequence["Candidate"], stats: Optional[Dict] = None) -> Dict:
        """
        Format search results as JSON-ready data
        """
        stats = dict(stats or {})
        per_seed = stats.pop('per_seed', None)
        if per_seed is not None:
            stats['per_seed'] = {str(seed): s for seed, s in per_seed.items()}
        return {
            'puzzle_info': {
                'layout': grid.to_layout(),
                'width': grid.width,
                'height': grid.height,
                'total_pips': grid.total_pips,
                'timestamp': datetime.now().isoformat(),
            },
            'search_stats': stats,
            'candidates': [CandidateFormatter.to_dict(c) for c in candidates],
        }

    @staticmethod
    def save_results(grid: "Grid", candidates: Sequence["Candidate"], output_path: str,
                     stats: Optional[Dict] = None, verbose: bool = True) -> None:
        """
        Save search results to a JSON file
        """
        data = CandidateFormatter.format_results_json(grid, candidates, stats)
        with open(output_path, 'w') as f:
            json.dump(data, f, indent=2)
        if verbose:
            print(f"\n✓ Results saved to: {output_path}")
