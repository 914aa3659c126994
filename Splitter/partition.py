"""
Full-puzzle solving: partition every cell into equal-pip regions

A single candidate region only shows that one piece of a solution could
exist. A full solution for total `p` partitions ALL cells into connected
regions that each hold exactly `p` pips (or, optionally, zero pips).

Partitions are built region by region. The next region is always grown from
the lowest unassigned cell with every assigned cell blocked, which makes
each partition come out exactly once.

Zero-pip regions are off by default: any zero region can be merged into a
neighbouring region without changing its sum, so they never decide whether
a total is solvable, they only multiply the number of partitions. Splits
that must be drawn with one closed line are solved in `line.py`.
"""

import itertools
import time
from collections import deque
from dataclasses import dataclass
from typing import Dict, FrozenSet, Iterable, Iterator, List, Optional, Sequence, Tuple, Type

from .cellset import CellSet, cellset_type_for
from .feasibility import FeasibilitySet, derive
from .grid import Grid
from .search import adjacency_sets, enumerate_regions

Region = Tuple[int, ...]
Partition = Tuple[Region, ...]


@dataclass(frozen=True)
class PartitionSolution:
    """Witness partitions for one solvable total"""
    total: int
    partitions: Tuple[Partition, ...]


@dataclass(frozen=True)
class RegionInfo:
    cells: Region
    pip_sum: int


@dataclass(frozen=True)
class PartitionCheck:
    """Result of splitting a grid along a set of cut edges"""
    is_correct: bool
    pip_group_size: Optional[int]
    regions: Tuple[RegionInfo, ...]


class PartitionSolver:
    def __init__(
        self,
        grid: Grid,
        verbose: bool = False,
        cellset_type: Optional[Type[CellSet]] = None,
        max_partitions_per_total: int = 1,
        allow_empty_regions: bool = False,
        timeout_seconds: Optional[float] = None,
    ):
        self.grid = grid
        self.feasibility: FeasibilitySet = derive(grid)
        self.verbose = verbose
        self.cellset_type = cellset_type or cellset_type_for(grid.num_cells)
        self.max_partitions_per_total = max_partitions_per_total
        self.allow_empty_regions = allow_empty_regions
        self.timeout_seconds = timeout_seconds
        self.adjacency = adjacency_sets(grid, self.cellset_type)
        self._deadline: Optional[float] = None
        self.stats = {
            'nodes': 0,
            'prunes': 0,
            'closed': 0,
            'component_prunes': 0,
            'partitions': 0,
            'totals_tried': 0,
            'timed_out': False,
            'elapsed': 0.0,
        }

    # -------------------------------------------------------------------------
    # Main solving driver
    # -------------------------------------------------------------------------
    def solve(self) -> List[PartitionSolution]:
        """Find witness partitions for every feasible total, ascending"""
        start = time.time()
        if self.timeout_seconds is not None:
            self._deadline = start + self.timeout_seconds

        if self.verbose:
            print(f"Partitioning {self.grid}")
            print(f"Feasible totals: {self.feasibility.totals()}")

        results: List[PartitionSolution] = []
        for total in self.feasibility.totals():
            if self._timed_out():
                break
            self.stats['totals_tried'] += 1
            found = tuple(itertools.islice(self.partitions(total), self.max_partitions_per_total))
            if self.verbose:
                status = "✓" if found else "✗"
                print(f"  {status} total {total}: {len(found)} partition(s)")
            if found:
                results.append(PartitionSolution(total=total, partitions=found))

        self.stats['elapsed'] = time.time() - start
        if self.verbose:
            self._print_stats()
        return results

    def solution_totals(self) -> List[int]:
        """Totals for which at least one full partition exists"""
        return [s.total for s in self.solve()]

    def partitions(self, total: int) -> Iterator[Partition]:
        """Every partition of the grid into connected regions summing to `total`"""
        if total not in self.feasibility:
            raise ValueError(f"{total} is not a feasible total for {self.grid.to_layout()!r}")
        assigned = self.cellset_type.empty(self.grid.num_cells)
        for partition in self._extend(assigned, (), total):
            self.stats['partitions'] += 1
            yield partition

    def _extend(self, assigned: CellSet, regions: Partition, total: int) -> Iterator[Partition]:
        seed = assigned.complement().lowest_member()
        if seed is None:
            yield regions
            return

        for inside, pip_sum in enumerate_regions(
            self.grid,
            seed,
            total,
            self.cellset_type,
            blocked=assigned,
            should_stop=self._timed_out,
            stats=self.stats,
            adjacency=self.adjacency,
        ):
            if pip_sum != total and not (self.allow_empty_regions and pip_sum == 0):
                continue
            now_assigned = assigned.union(inside)
            if not self._remaining_components_ok(now_assigned, total):
                self.stats['component_prunes'] += 1
                continue
            yield from self._extend(now_assigned, regions + (tuple(inside),), total)

    def _remaining_components_ok(self, assigned: CellSet, total: int) -> bool:
        """Every unassigned component must hold a whole number of regions"""
        for cells in _components(self.grid, assigned.complement()):
            pips = sum(self.grid.pips[c] for c in cells)
            if pips % total != 0:
                return False
            if pips == 0 and not self.allow_empty_regions:
                return False
        return True

    def _timed_out(self) -> bool:
        if self._deadline is not None and time.time() >= self._deadline:
            self.stats['timed_out'] = True
            return True
        return False

    def _print_stats(self) -> None:
        print("\nPartition Statistics:")
        print(f"  Totals tried: {self.stats['totals_tried']}")
        print(f"  Nodes: {self.stats['nodes']}")
        print(f"  Prunes: {self.stats['prunes']} (+{self.stats['component_prunes']} component)")
        print(f"  Partitions found: {self.stats['partitions']}")
        if self.stats['timed_out']:
            print("  Stopped early: timeout")
        print(f"  Elapsed: {self.stats['elapsed']:.3f}s")


def _components(grid: Grid, cells: Iterable[int], cuts: FrozenSet[FrozenSet[int]] = frozenset()) -> List[Region]:
    """Connected components of `cells`, not crossing any cut edge"""
    remaining = set(cells)
    components: List[Region] = []
    while remaining:
        start = min(remaining)
        remaining.discard(start)
        found = [start]
        queue = deque([start])
        while queue:
            cell = queue.popleft()
            for n in grid.neighbours[cell]:
                if n in remaining and frozenset((cell, n)) not in cuts:
                    remaining.discard(n)
                    found.append(n)
                    queue.append(n)
        components.append(tuple(sorted(found)))
    return components


# -----------------------------------------------------------------------------
# Checking a drawn line
# -----------------------------------------------------------------------------
def evaluate_cuts(grid: Grid, cuts: Iterable[Sequence[int]]) -> PartitionCheck:
    """
    Split `grid` along cut edges and check whether the result is a solution.

    Each cut is a pair of adjacent cells. The split is correct when more than
    one region carries pips and all of those regions carry the same amount.
    """
    cut_set = set()
    for cut in cuts:
        a, b = cut
        if b not in grid.adjacency(a):
            raise ValueError(f"Cells {a} and {b} are not adjacent")
        cut_set.add(frozenset((a, b)))

    regions = tuple(
        RegionInfo(cells=cells, pip_sum=sum(grid.pips[c] for c in cells))
        for cells in _components(grid, range(grid.num_cells), frozenset(cut_set))
    )
    pip_counts = [r.pip_sum for r in regions if r.pip_sum > 0]
    pip_group_size = pip_counts[0] if pip_counts else None
    is_correct = len(pip_counts) > 1 and all(p == pip_group_size for p in pip_counts)
    return PartitionCheck(is_correct=is_correct, pip_group_size=pip_group_size, regions=regions)


def cuts_for_partition(grid: Grid, partition: Sequence[Iterable[int]]) -> List[Tuple[int, int]]:
    """Cut edges separating the regions of a partition"""
    label: Dict[int, int] = {}
    for i, region in enumerate(partition):
        for cell in region:
            if cell in label:
                raise ValueError(f"Cell {cell} appears in more than one region")
            label[cell] = i
    if len(label) != grid.num_cells:
        missing = sorted(set(range(grid.num_cells)) - set(label))
        raise ValueError(f"Partition does not cover cells {missing}")

    cuts = []
    for cell in range(grid.num_cells):
        for n in sorted(grid.neighbours[cell]):
            if n > cell and label[n] != label[cell]:
                cuts.append((cell, n))
    return cuts
