"""
Errors raised by the Splitter package.

Configuration errors (bad layouts, pip-less grids) are raised once, before any
search starts. SearchInvariantError marks a broken search node and is fatal.
"""

from __future__ import annotations

from typing import Optional


class SplitterError(Exception):
    """Base class for recoverable Splitter errors."""


class MalformedLayoutError(SplitterError, ValueError):
    """
    Raised when a layout string cannot be turned into a grid.
    """

    def __init__(
        self,
        message: str,
        *,
        row: Optional[int] = None,
        col: Optional[int] = None,
        layout: Optional[str] = None,
    ) -> None:
        super().__init__(message)
        self.row = row
        self.col = col
        self.layout = layout


class EmptyPuzzleError(SplitterError, ValueError):
    """Raised when every cell of a grid has zero pips."""


class SearchInvariantError(AssertionError):
    """
    Raised when a search node breaks the inside/outside/frontier invariants.

    This always indicates a logic bug in the search and is never caught.
    """

    def __init__(self, message: str, *, seed: Optional[int] = None) -> None:
        super().__init__(message)
        self.seed = seed
