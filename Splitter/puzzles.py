"""
Built-in Split puzzle catalogue

`num_solutions` is the number of distinct region totals the puzzle accepts
when the split is drawn with one closed line.
"""
from dataclasses import dataclass
from typing import List, Optional, Tuple

from .grid import Grid, build


@dataclass(frozen=True)
class PuzzleEntry:
    pattern: str
    num_solutions: int
    group: str = ""


PUZZLE_SET: List[PuzzleEntry] = [
    # Intro
    PuzzleEntry("11", 1, "intro"),
    PuzzleEntry("211", 1, "intro"),
    PuzzleEntry("123", 1, "intro"),
    PuzzleEntry("21|1 ", 1, "intro"),
    PuzzleEntry("11|11", 2, "intro"),
    PuzzleEntry("11|1 ", 1, "intro"),
    PuzzleEntry(" 1 |1 1| 1 ", 2, "intro"),
    PuzzleEntry("11|11|11", 3, "intro"),
    PuzzleEntry("111|111|111", 2, "intro"),

    # Twos and ones
    PuzzleEntry("21|12", 1, "twos"),
    PuzzleEntry("21 |12 |   ", 2, "twos"),
    PuzzleEntry("21 |12 |  2", 1, "twos"),
    PuzzleEntry("21  |12  |  2 |    ", 2, "twos"),
    PuzzleEntry("21  |12  |    |   2", 2, "twos"),
    PuzzleEntry("2 1|1 2", 2, "twos"),
    PuzzleEntry("2 2|1 1", 2, "twos"),
    PuzzleEntry("   |2 2|1 1", 2, "twos"),
    PuzzleEntry("2 2|   |1 1", 2, "twos"),
    PuzzleEntry("  2| 2 |1 1", 2, "twos"),
    PuzzleEntry("  2|12 |  1", 2, "twos"),
    PuzzleEntry("2 2|1  |  1", 2, "twos"),
    PuzzleEntry("22 |1  |  1", 2, "twos"),
    PuzzleEntry("222|1  |  1", 2, "twos"),
    PuzzleEntry("222|1 1|   ", 2, "twos"),

    # Threes
    PuzzleEntry(" 31|31 |1  ", 1, "threes"),
    PuzzleEntry("331|31 |1  ", 2, "threes"),
    PuzzleEntry(" 31|31 |1 3", 3, "threes"),
    PuzzleEntry(" 31|33 |1 1", 2, "threes"),

    # Mixed
    PuzzleEntry("123|2 1", 1, "mixed"),
    PuzzleEntry(" 2 |1 3|2 1", 1, "mixed"),
    PuzzleEntry(" 1 |2 3|2 1", 1, "mixed"),
    PuzzleEntry("1 1|2 2|1 1", 1, "mixed"),
    PuzzleEntry("   |1 1|2 2|1 1", 2, "mixed"),
    PuzzleEntry("21|21", 1, "mixed"),
    PuzzleEntry(" 21| 21", 1, "mixed"),
    PuzzleEntry("221|  1", 2, "mixed"),

    # Columns
    PuzzleEntry(" 2 | 2 | 2 ", 1, "columns"),
    PuzzleEntry(" 2 | 2 |1 1", 2, "columns"),
    PuzzleEntry("1 1| 2 |1 1", 2, "columns"),
    PuzzleEntry("1 1|  2|1 1", 2, "columns"),
    PuzzleEntry("1 1|1 2|  1", 2, "columns"),

    # Corners
    PuzzleEntry("  2|2  |11 ", 2, "corners"),
    PuzzleEntry("  2|   |112", 2, "corners"),
    PuzzleEntry("2 2|   |112", 2, "corners"),
    PuzzleEntry("2 2|   |121", 2, "corners"),
    PuzzleEntry("313|   |131", 2, "corners"),
    PuzzleEntry("113|   |331", 3, "corners"),
    PuzzleEntry("111|   |333", 3, "corners"),
    PuzzleEntry("131|   |331", 2, "corners"),

    # Twizzly
    PuzzleEntry("1  3|  5 |    |  4 |2   ", 1, "twizzly"),
    PuzzleEntry("1   3| 2   |   4 |5   6", 1, "twizzly"),
    PuzzleEntry("1   3| 4   |   2 |5   6", 1, "twizzly"),

    # Misc
    PuzzleEntry("1 2| 2 |  1", 2, "misc"),
    PuzzleEntry("1 2 |3 4 |    ", 1, "misc"),
    PuzzleEntry("1 2|34 |   ", 1, "misc"),
    PuzzleEntry("121|2 2|121", 2, "misc"),
    PuzzleEntry(" 33|   |114", 2, "misc"),
    PuzzleEntry(" 1 |1 1|111", 3, "misc"),
    PuzzleEntry("     |12 21", 2, "misc"),
    PuzzleEntry("111|181|111", 1, "misc"),
    PuzzleEntry("1 41|4   |   4|14 1", 3, "misc"),
    PuzzleEntry("2  2| 11 | 11 |2  2", 4, "misc"),
    PuzzleEntry("4224|2112|2112|4224", 3, "misc"),
    PuzzleEntry("2 1 2|     |1 2 1|     |2 1 2", 1, "misc"),
    PuzzleEntry("2 1 2|     |1 2 1|  2  |2 1 2", 2, "misc"),
]


def load_puzzle_set(group: Optional[str] = None) -> List[Tuple[PuzzleEntry, Grid]]:
    """Parse every catalogue entry (optionally only one group)"""
    return [
        (entry, build(entry.pattern))
        for entry in PUZZLE_SET
        if group is None or entry.group == group
    ]
