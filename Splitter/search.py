"""
Region search for Split puzzles

Enumerates connected regions of a grid by growing them cell-by-cell from a
canonical seed. Every region is found from exactly one seed (its lowest cell):
the search for seed `s` starts with every cell below `s` committed outside.

At each node the lowest frontier cell is committed inside first, then
outside. Committing inside is pruned once the region's pips exceed the
biggest feasible total, so the search never grows a region that could not be
part of a solution.
"""

from __future__ import annotations

import time
from concurrent.futures import Future, ProcessPoolExecutor
from concurrent.futures import TimeoutError as FutureTimeoutError
from concurrent.futures.process import BrokenProcessPool
from dataclasses import dataclass
from typing import Callable, Dict, Iterator, List, Optional, Sequence, Tuple, Type, Union

from .cellset import CellSet, cellset_type_for
from .errors import SearchInvariantError
from .feasibility import FeasibilitySet, derive
from .grid import Grid, build
from .reporting import CandidateCollector, ResultReporter


@dataclass(frozen=True)
class Candidate:
    """A completed region whose pip sum divides the grid's total"""
    seed: int
    cells: Tuple[int, ...]  # Ascending; cells[0] == seed
    pip_sum: int

    def __contains__(self, cell: int) -> bool:
        return cell in self.cells

    def __len__(self) -> int:
        return len(self.cells)

    def __repr__(self):
        return f"Candidate(seed={self.seed}, cells={list(self.cells)}, pip_sum={self.pip_sum})"


# -----------------------------------------------------------------------------
# Search nodes
# -----------------------------------------------------------------------------
@dataclass
class PartialAssignment:
    """One node of the search tree"""
    inside: CellSet
    outside: CellSet
    frontier: CellSet
    region_pip_sum: int

    @classmethod
    def root(
        cls,
        grid: Grid,
        seed: int,
        adjacency: Sequence[CellSet],
        cellset_type: Type[CellSet],
        blocked: Optional[CellSet] = None,
    ) -> "PartialAssignment":
        """Node with only `seed` inside and every lower (or blocked) cell outside"""
        n = grid.num_cells
        inside = cellset_type.singleton(n, seed)
        outside = cellset_type.below(n, seed)
        if blocked is not None:
            if blocked.contains(seed):
                raise ValueError(f"Seed {seed} is blocked")
            outside = outside.union(blocked)
        return cls(
            inside=inside,
            outside=outside,
            frontier=adjacency[seed].difference(outside),
            region_pip_sum=grid.pips[seed],
        )

    def clone(self) -> "PartialAssignment":
        return PartialAssignment(
            inside=self.inside.copy(),
            outside=self.outside.copy(),
            frontier=self.frontier.copy(),
            region_pip_sum=self.region_pip_sum,
        )

    def is_closed(self) -> bool:
        return self.frontier.is_empty()

    def commit_inside(self, cell: int, pips: int, neighbours: CellSet) -> None:
        self.inside.insert(cell)
        self.frontier.remove(cell)
        self.frontier = self.frontier.union(neighbours.difference(self.inside.union(self.outside)))
        self.region_pip_sum += pips

    def commit_outside(self, cell: int) -> None:
        self.outside.insert(cell)
        self.frontier.remove(cell)

    def check_invariants(self, seed: int) -> None:
        if not self.inside.isdisjoint(self.outside):
            raise SearchInvariantError(
                f"Cells {sorted(self.inside & self.outside)} are both inside and outside", seed=seed
            )
        if not self.frontier.isdisjoint(self.inside.union(self.outside)):
            raise SearchInvariantError("Frontier contains committed cells", seed=seed)
        if self.inside.lowest_member() != seed:
            raise SearchInvariantError(
                f"Region lowest cell is {self.inside.lowest_member()}, expected seed {seed}", seed=seed
            )


def adjacency_sets(grid: Grid, cellset_type: Type[CellSet]) -> Tuple[CellSet, ...]:
    """Each cell's neighbours as a CellSet"""
    n = grid.num_cells
    return tuple(cellset_type.from_mask(n, mask) for mask in grid.neighbour_masks)


def enumerate_regions(
    grid: Grid,
    seed: int,
    bound: Optional[int],
    cellset_type: Optional[Type[CellSet]] = None,
    blocked: Optional[CellSet] = None,
    should_stop: Optional[Callable[[], bool]] = None,
    stats: Optional[Dict[str, int]] = None,
    adjacency: Optional[Sequence[CellSet]] = None,
) -> Iterator[Tuple[CellSet, int]]:
    """
    Yield (inside, pip_sum) for every closed node rooted at `seed`.

    Closed nodes are connected regions containing `seed` whose every
    neighbour is committed outside. Regions are produced inside-first, so
    larger regions come out before their subsets. Branches whose pip sum
    would exceed `bound` are pruned; a `bound` of None yields nothing.
    `should_stop` is polled before every node.
    """
    if bound is None:
        return
    if cellset_type is None:
        cellset_type = cellset_type_for(grid.num_cells)
    if adjacency is None:
        adjacency = adjacency_sets(grid, cellset_type)
    if stats is None:
        stats = {}
    for key in ("nodes", "prunes", "closed"):
        stats.setdefault(key, 0)

    stack: List[PartialAssignment] = [
        PartialAssignment.root(grid, seed, adjacency, cellset_type, blocked)
    ]
    while stack:
        if should_stop is not None and should_stop():
            return
        node = stack.pop()
        stats["nodes"] += 1
        node.check_invariants(seed)

        cell = node.frontier.lowest_member()
        if cell is None:
            stats["closed"] += 1
            yield node.inside, node.region_pip_sum
            continue

        # LIFO: push outside first so the inside branch is explored first
        outside_child = node.clone()
        outside_child.commit_outside(cell)
        stack.append(outside_child)

        pips = grid.pips[cell]
        if node.region_pip_sum + pips > bound:
            stats["prunes"] += 1
            continue
        inside_child = node.clone()
        inside_child.commit_inside(cell, pips, adjacency[cell])
        stack.append(inside_child)


# -----------------------------------------------------------------------------
# Driver
# -----------------------------------------------------------------------------
class RegionSearch:
    def __init__(
        self,
        grid: Grid,
        reporter: Optional[ResultReporter] = None,
        verbose: bool = False,
        cellset_type: Optional[Type[CellSet]] = None,
        timeout_seconds: Optional[float] = None,
    ):
        self.grid = grid
        self.feasibility: FeasibilitySet = derive(grid)  # Raises EmptyPuzzleError up front
        self.reporter = reporter if reporter is not None else CandidateCollector()
        self.verbose = verbose
        self.cellset_type = cellset_type or cellset_type_for(grid.num_cells)
        self.timeout_seconds = timeout_seconds
        self.adjacency = adjacency_sets(grid, self.cellset_type)
        self.candidates: List[Candidate] = []
        self._deadline: Optional[float] = None
        self.stats = {
            'nodes': 0,
            'prunes': 0,
            'closed': 0,
            'candidates': 0,
            'seeds_searched': 0,
            'stopped': False,
            'timed_out': False,
            'elapsed': 0.0,
            'per_seed': {},
        }

    @property
    def bound(self) -> Optional[int]:
        return self.feasibility.biggest_required_pip_count()

    # -------------------------------------------------------------------------
    # Main search driver
    # -------------------------------------------------------------------------
    def run(self, seeds: Optional[Sequence[int]] = None, workers: Optional[int] = None) -> List[Candidate]:
        """
        Search every seed (or the given ones) and return the reported candidates.

        Stops early, without error, once the reporter asks to stop or the
        timeout expires.
        """
        start = time.time()
        self._start()
        seeds = list(range(self.grid.num_cells)) if seeds is None else list(seeds)

        if self.verbose:
            print(f"Searching {self.grid}")
            print(f"Feasible totals: {self.feasibility.totals()} (bound={self.bound})")

        if self.bound is None:
            if self.verbose:
                print("No feasible region total; nothing to search")
        elif workers is not None and workers > 1 and len(seeds) > 1:
            self._run_parallel(seeds, workers)
        else:
            self._run_sequential(seeds)

        self.stats['elapsed'] = time.time() - start
        if self.verbose:
            self._print_stats()
        return list(self.candidates)

    def _start(self) -> None:
        if self.timeout_seconds is not None:
            self._deadline = time.time() + self.timeout_seconds

    def search_seed(self, seed: int) -> int:
        """Run the search rooted at `seed`; returns the number of candidates reported"""
        if not 0 <= seed < self.grid.num_cells:
            raise IndexError(f"Seed {seed} is outside a grid of {self.grid.num_cells} cells")
        per_seed = {'nodes': 0, 'prunes': 0, 'closed': 0, 'candidates': 0}
        total = self.feasibility.total_pips

        for inside, pip_sum in enumerate_regions(
            self.grid,
            seed,
            self.bound,
            self.cellset_type,
            should_stop=self._should_stop,
            stats=per_seed,
            adjacency=self.adjacency,
        ):
            if pip_sum == 0 or total % pip_sum != 0:
                continue
            if self._should_stop():
                break
            self._emit(Candidate(seed=seed, cells=tuple(inside), pip_sum=pip_sum))
            per_seed['candidates'] += 1

        self._merge_seed_stats(seed, per_seed)
        if self.verbose:
            print(f"  seed {seed:3d}: {per_seed['candidates']} candidates, "
                  f"{per_seed['nodes']} nodes, {per_seed['prunes']} prunes")
        return per_seed['candidates']

    def _emit(self, candidate: Candidate) -> None:
        self.candidates.append(candidate)
        self.stats['candidates'] += 1
        self.reporter.report(candidate)

    def _should_stop(self) -> bool:
        if self.reporter.should_stop():
            self.stats['stopped'] = True
            return True
        if self._deadline is not None and time.time() >= self._deadline:
            self.stats['timed_out'] = True
            return True
        return False

    def _merge_seed_stats(self, seed: int, per_seed: Dict[str, int]) -> None:
        for key in ('nodes', 'prunes', 'closed'):
            self.stats[key] += per_seed[key]
        self.stats['seeds_searched'] += 1
        self.stats['per_seed'][seed] = per_seed

    def _run_sequential(self, seeds: Sequence[int]) -> None:
        for seed in seeds:
            if self._should_stop():
                break
            self.search_seed(seed)

    # -------------------------------------------------------------------------
    # Process pool
    # -------------------------------------------------------------------------
    def _run_parallel(self, seeds: List[int], workers: int) -> None:
        """Search seeds on a process pool, reporting results in seed order"""
        try:
            executor = ProcessPoolExecutor(max_workers=workers)
        except (PermissionError, OSError, NotImplementedError):
            if self.verbose:
                print("Process pool unavailable; searching sequentially")
            self._run_sequential(seeds)
            return

        cap = getattr(self.reporter, 'max_candidates', None)
        futures: List[Future] = []
        merged = 0
        try:
            for seed in seeds:
                futures.append(executor.submit(
                    _search_seed_worker, self.grid, seed, cap, self.cellset_type, self._deadline
                ))
            for seed, future in zip(seeds, futures):
                if self._should_stop():
                    break
                remaining = None
                if self._deadline is not None:
                    remaining = max(0.0, self._deadline - time.time())
                try:
                    candidates, per_seed, timed_out = future.result(timeout=remaining)
                except FutureTimeoutError:
                    self.stats['timed_out'] = True
                    break
                if timed_out:
                    self.stats['timed_out'] = True
                reported = 0
                for candidate in candidates:
                    if self._should_stop():
                        break
                    self._emit(candidate)
                    reported += 1
                per_seed['candidates'] = reported
                self._merge_seed_stats(seed, per_seed)
                merged += 1
                if self.verbose:
                    print(f"  seed {seed:3d}: {reported} candidates, "
                          f"{per_seed['nodes']} nodes, {per_seed['prunes']} prunes")
        except BrokenProcessPool:
            if self.verbose:
                print("Process pool broke; searching remaining seeds sequentially")
            self._run_sequential(seeds[merged:])
        finally:
            # Running workers stop at the shared deadline
            for future in futures:
                future.cancel()
            executor.shutdown(wait=True)

    # -------------------------------------------------------------------------
    # Stats
    # -------------------------------------------------------------------------
    def _print_stats(self) -> None:
        print("\nSearch Statistics:")
        print(f"  Seeds searched: {self.stats['seeds_searched']}/{self.grid.num_cells}")
        print(f"  Nodes: {self.stats['nodes']}")
        print(f"  Prunes: {self.stats['prunes']}")
        print(f"  Closed regions: {self.stats['closed']}")
        print(f"  Candidates: {self.stats['candidates']}")
        if self.stats['stopped']:
            print("  Stopped early: candidate limit reached")
        if self.stats['timed_out']:
            print("  Stopped early: timeout")
        print(f"  Elapsed: {self.stats['elapsed']:.3f}s")


def _search_seed_worker(
    grid: Grid,
    seed: int,
    max_candidates: Optional[int],
    cellset_type: Type[CellSet],
    deadline: Optional[float],
):
    search = RegionSearch(
        grid,
        CandidateCollector(max_candidates),
        cellset_type=cellset_type,
    )
    search._deadline = deadline
    search.search_seed(seed)
    return search.candidates, search.stats['per_seed'][seed], search.stats['timed_out']


def find_candidates(
    layout: Union[str, Grid],
    max_candidates: Optional[int] = None,
    verbose: bool = False,
    workers: Optional[int] = None,
    timeout_seconds: Optional[float] = None,
) -> List[Candidate]:
    """Search a layout (or grid) for candidate regions"""
    grid = layout if isinstance(layout, Grid) else build(layout)
    search = RegionSearch(
        grid,
        CandidateCollector(max_candidates),
        verbose=verbose,
        timeout_seconds=timeout_seconds,
    )
    return search.run(workers=workers)
