#!/usr/bin/env python3
"""
Split Solver - Main Entry Point

Usage:
    python -m Splitter.main "21|1 "               # candidate regions of one layout
    python -m Splitter.main puzzle.json --partition
    python -m Splitter.main --all                  # check the built-in puzzle set
    python -m Splitter.main                        # uses the CONFIGURATION below

Options:
    --partition      solve the full puzzle with one closed line, not just single regions
    --regions-only   with --partition, accept any equal split even if no single line draws it
    --diagnose      print per-seed search diagnostics
    --max N          stop after N candidate regions
    --workers K      search seeds on K worker processes
    --json PATH      save candidates to a JSON file
"""

import os
import sys
from typing import Dict, List, Optional, Tuple

from .diagnostics import SearchDiagnostics
from .errors import SplitterError
from .grid import Grid, build, load_grid
from .line import LineSolver
from .partition import PartitionSolver, cuts_for_partition
from .puzzles import load_puzzle_set
from .reporting import DEFAULT_MAX_CANDIDATES, CandidateCollector, CandidateFormatter
from .search import RegionSearch

# ============================================================================
# CONFIGURATION
# ============================================================================
LAYOUT = "21  |12  |  2 |    "   # Puzzle to solve by default
SOLVE_ALL = False                 # Set True to check the whole built-in puzzle set
MAX_CANDIDATES = DEFAULT_MAX_CANDIDATES
# Hard cap on reported candidate regions; the search stops cleanly once reached

TIMEOUT_SECONDS = 60
# Maximum time to spend on a single search

WORKERS = None
# Worker processes for the per-seed searches (None or 1: sequential)

OUTPUT_DIR = None
# Directory for JSON results (None: don't save)
# ============================================================================


def _resolve_grid(arg: str) -> Grid:
    """Treat `arg` as a file path if one exists, otherwise as a layout string"""
    if os.path.isfile(arg):
        return load_grid(arg)
    return build(arg)


def solve_layout(grid: Grid, verbose: bool = True,
                 max_candidates: Optional[int] = MAX_CANDIDATES,
                 timeout_seconds: Optional[float] = TIMEOUT_SECONDS,
                 workers: Optional[int] = WORKERS,
                 diagnose: bool = False,
                 json_path: Optional[str] = None) -> Tuple[RegionSearch, List]:
    """
    Search one grid for candidate regions and print them.

    Args:
        grid: Parsed puzzle grid
        verbose: Print every candidate and the search statistics
        max_candidates: Stop after this many candidates (None: no limit)
        timeout_seconds: Maximum search time (None: no limit)
        workers: Worker processes for the per-seed searches
        diagnose: Print per-seed diagnostics afterwards
        json_path: Save candidates to this JSON file
    """
    print(f"\n{'=' * 60}")
    print(f"Searching: {grid.to_layout()!r}")
    print(f"{'=' * 60}")

    collector = CandidateCollector(max_candidates)
    search = RegionSearch(grid, collector, verbose=verbose, timeout_seconds=timeout_seconds)
    candidates = search.run(workers=workers)

    if verbose:
        for i, candidate in enumerate(candidates, 1):
            print(f"\nCandidate #{i}:")
            print(CandidateFormatter.format_candidate(grid, candidate))
    print("\n" + CandidateFormatter.format_summary(grid, candidates))

    if diagnose:
        SearchDiagnostics.print_summary(search)
    if json_path:
        CandidateFormatter.save_results(grid, candidates, json_path, search.stats)

    return search, candidates


def solve_partitions(grid: Grid, verbose: bool = True,
                     timeout_seconds: Optional[float] = TIMEOUT_SECONDS,
                     single_line: bool = True) -> List:
    """
    Solve the full puzzle: print one witness split for every solvable total.

    With single_line=False any split into equal connected regions counts,
    even one that no single closed line can draw.
    """
    print(f"\n{'=' * 60}")
    print(f"Partitioning: {grid.to_layout()!r}")
    print(f"{'=' * 60}")

    if single_line:
        solver = LineSolver(grid, verbose=verbose, timeout_seconds=timeout_seconds)
        solutions = solver.solve()
        witnesses = [(s.total, list(s.line.regions)) for s in solutions]
    else:
        solver = PartitionSolver(grid, verbose=verbose, timeout_seconds=timeout_seconds)
        solutions = solver.solve()
        witnesses = [(s.total, s.partitions[0]) for s in solutions]

    if not solutions:
        print("\n✗ No full solution exists")
    labels = "ABCDEFGHIJKLMNOPQRSTUVWXYZabcdefghijklmnopqrstuvwxyz"
    for (total, partition), solution in zip(witnesses, solutions):
        print(f"\n✓ Total {total}: {len(partition)} regions")
        marks = [(region, labels[i % len(labels)]) for i, region in enumerate(partition)]
        print(CandidateFormatter.format_bitmap(grid, marks))
        if verbose:
            if single_line:
                print(f"  Line: {len(solution.line.edges)} edges around {list(solution.line.shaded)}")
            else:
                print(f"  Cuts: {cuts_for_partition(grid, partition)}")

    return solutions


def solve_all_puzzles(verbose: bool = False,
                      timeout_seconds: Optional[float] = TIMEOUT_SECONDS) -> List[Dict]:
    """
    Solve every puzzle in the built-in set and compare against its declared solution count.
    """
    entries = load_puzzle_set()
    print(f"\nChecking {len(entries)} built-in puzzle(s)")

    results = []
    for i, (entry, grid) in enumerate(entries, 1):
        solver = LineSolver(grid, verbose=verbose, timeout_seconds=timeout_seconds)
        totals = solver.solution_totals()
        matches = len(totals) == entry.num_solutions
        results.append({
            'pattern': entry.pattern,
            'group': entry.group,
            'declared': entry.num_solutions,
            'totals': totals,
            'matches': matches,
            'timed_out': solver.stats['timed_out'],
        })
        status = "✓" if matches else "✗"
        print(f"[{i:2d}/{len(entries)}] {status} {entry.pattern!r:32s} totals={totals} (declared {entry.num_solutions})")

    print(f"\n{'=' * 60}")
    print("SUMMARY")
    print(f"{'=' * 60}")
    matched = sum(1 for r in results if r['matches'])
    rate = (matched / len(results) * 100) if results else 0
    print(f"Matching declared counts: {matched}/{len(results)} ({rate:.1f}%)")
    for r in results:
        if not r['matches']:
            note = " (timed out)" if r['timed_out'] else ""
            print(f"  ✗ {r['pattern']!r}: found {len(r['totals'])}, declared {r['declared']}{note}")
    print(f"{'=' * 60}\n")

    return results


def _parse_args(argv: List[str]) -> Dict:
    options = {
        'input': None,
        'all': SOLVE_ALL,
        'partition': False,
        'regions_only': False,
        'diagnose': False,
        'max': MAX_CANDIDATES,
        'workers': WORKERS,
        'json': None,
    }
    args = list(argv)
    while args:
        arg = args.pop(0)
        if arg in ("--all", "-a"):
            options['all'] = True
        elif arg in ("--partition", "-p"):
            options['partition'] = True
        elif arg == "--regions-only":
            options['regions_only'] = True
        elif arg in ("--diagnose", "-d"):
            options['diagnose'] = True
        elif arg in ("--max", "--workers", "--json"):
            if not args:
                raise ValueError(f"{arg} needs a value")
            value = args.pop(0)
            key = arg[2:]
            options[key] = value if key == 'json' else int(value)
        elif arg.startswith("--"):
            raise ValueError(f"Unknown option: {arg}")
        elif options['input'] is None:
            options['input'] = arg
        else:
            raise ValueError(f"Unexpected argument: {arg}")

    if options['max'] is not None and options['max'] < 0:
        raise ValueError(f"--max must be 0 or more, got {options['max']}")
    if options['workers'] is not None and options['workers'] < 1:
        raise ValueError(f"--workers must be 1 or more, got {options['workers']}")
    return options


def main(argv: Optional[List[str]] = None) -> int:
    """Main entry point"""
    argv = sys.argv[1:] if argv is None else argv
    try:
        options = _parse_args(argv)
    except ValueError as e:
        print(f"Error: {e}")
        print(__doc__)
        return 1

    if options['input'] is None and options['all']:
        print("SOLVE_ALL mode - checking the built-in puzzle set")
        solve_all_puzzles()
        return 0

    source = options['input'] if options['input'] is not None else LAYOUT
    json_path = options['json']
    if json_path is None and OUTPUT_DIR is not None:
        os.makedirs(OUTPUT_DIR, exist_ok=True)
        json_path = os.path.join(OUTPUT_DIR, "candidates.json")

    try:
        grid = _resolve_grid(source)
        if options['partition']:
            solve_partitions(grid, single_line=not options['regions_only'])
        else:
            solve_layout(
                grid,
                max_candidates=options['max'],
                workers=options['workers'],
                diagnose=options['diagnose'],
                json_path=json_path,
            )
    except SplitterError as e:
        print(f"\nError while solving {source!r}: {e}")
        return 1
    except KeyboardInterrupt:
        print(f"\n\n{'=' * 60}")
        print("⚠ Search interrupted by user (Ctrl+C)")
        print(f"{'=' * 60}")
        return 1

    return 0


if __name__ == "__main__":
    sys.exit(main())
