"""
Split Puzzle Solver Package

Bitmask-based enumeration of connected regions with equal pip totals.
"""

from .errors import SplitterError, MalformedLayoutError, EmptyPuzzleError, SearchInvariantError
from .grid import Grid, build, load_grid
from .cellset import CellSet, WordCellSet, ArrayCellSet, cellset_type_for
from .feasibility import FeasibilitySet, derive
from .search import Candidate, PartialAssignment, RegionSearch, enumerate_regions, find_candidates
from .reporting import ResultReporter, CandidateCollector, CallbackReporter, PrintingReporter, CandidateFormatter
from .partition import PartitionSolver, PartitionSolution, PartitionCheck, evaluate_cuts, cuts_for_partition
from .line import LineSolver, LineSolution, DrawnLine, outline, is_single_line, partition_line

__version__ = "1.0.0"
__all__ = [
    'SplitterError',
    'MalformedLayoutError',
    'EmptyPuzzleError',
    'SearchInvariantError',
    'Grid',
    'build',
    'load_grid',
    'CellSet',
    'WordCellSet',
    'ArrayCellSet',
    'cellset_type_for',
    'FeasibilitySet',
    'derive',
    'Candidate',
    'PartialAssignment',
    'RegionSearch',
    'enumerate_regions',
    'find_candidates',
    'ResultReporter',
    'CandidateCollector',
    'CallbackReporter',
    'PrintingReporter',
    'CandidateFormatter',
    'PartitionSolver',
    'PartitionSolution',
    'PartitionCheck',
    'evaluate_cuts',
    'cuts_for_partition',
    'LineSolver',
    'LineSolution',
    'DrawnLine',
    'outline',
    'is_single_line',
    'partition_line',
]
