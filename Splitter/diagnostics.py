"""
Diagnostics: understand where a region search spends its time
"""
import time
from typing import Dict, Optional, Union

from .grid import Grid, build
from .reporting import CandidateCollector
from .search import RegionSearch


class SearchDiagnostics:
    """Summaries of a finished RegionSearch"""

    @staticmethod
    def busiest_seed(search: RegionSearch) -> Optional[int]:
        """Seed whose search tree visited the most nodes"""
        per_seed = search.stats['per_seed']
        if not per_seed:
            return None
        return max(per_seed, key=lambda seed: per_seed[seed]['nodes'])

    @staticmethod
    def prune_ratio(search: RegionSearch) -> float:
        nodes = search.stats['nodes']
        return search.stats['prunes'] / nodes if nodes else 0.0

    @staticmethod
    def print_summary(search: RegionSearch) -> None:
        grid = search.grid
        stats = search.stats
        print(f"\n{'=' * 70}")
        print("SEARCH DIAGNOSTICS")
        print(f"{'=' * 70}")
        print(f"Grid: {grid.width}x{grid.height} ({grid.num_cells} cells), total pips {grid.total_pips}")
        print(f"Feasible totals: {search.feasibility.totals()}")
        print(f"Seeds searched: {stats['seeds_searched']}/{grid.num_cells}")
        print(f"Nodes: {stats['nodes']}, prunes: {stats['prunes']} ({SearchDiagnostics.prune_ratio(search):.1%})")
        print(f"Candidates: {stats['candidates']}")

        print("\n--- PER SEED ---")
        for seed, s in sorted(stats['per_seed'].items()):
            row, col = grid.coords(seed)
            print(f"  seed {seed:3d} ({row},{col}) pips={grid.pips[seed]}: "
                  f"{s['nodes']:6d} nodes, {s['prunes']:5d} prunes, {s['candidates']:4d} candidates")

        busiest = SearchDiagnostics.busiest_seed(search)
        if busiest is not None:
            print(f"\nBusiest seed: {busiest}")
        if stats['stopped']:
            print("\n⚠️  STOPPED - candidate limit reached before all seeds were searched")
        if stats['timed_out']:
            print("\n⚠️  TIMEOUT - search space was not exhausted")
        print(f"{'=' * 70}\n")


def analyze_layout(
    layout: Union[str, Grid],
    max_candidates: Optional[int] = None,
    timeout_seconds: Optional[float] = None,
    verbose: bool = True,
) -> Dict:
    """Run a full search over a layout and summarise it"""
    grid = layout if isinstance(layout, Grid) else build(layout)
    search = RegionSearch(grid, CandidateCollector(max_candidates), timeout_seconds=timeout_seconds)

    start = time.time()
    candidates = search.run()
    elapsed = time.time() - start

    if verbose:
        SearchDiagnostics.print_summary(search)

    return {
        'cells': grid.num_cells,
        'total_pips': grid.total_pips,
        'feasible_totals': search.feasibility.totals(),
        'candidates': len(candidates),
        'nodes': search.stats['nodes'],
        'prunes': search.stats['prunes'],
        'elapsed': elapsed,
        'busiest_seed': SearchDiagnostics.busiest_seed(search),
    }
