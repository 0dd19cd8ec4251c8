#  Copyright (c) 2025 Tom Villani, Ph.D.
#
# src/mdaudit/positions.py
"""Translate flat character offsets into line/column positions.

A single audit issues many position lookups against the same buffer, so the
newline offsets of a buffer are indexed once in :class:`LineIndex` and every
lookup is a binary search over that index.

Positions are 1-based. A newline character belongs to the line it
terminates: in ``"a\\nb"`` offset 1 (the newline) is ``1:2`` and offset 2
is ``2:1``.
"""

from __future__ import annotations

from bisect import bisect_left
from dataclasses import dataclass
from typing import Optional


@dataclass(frozen=True, slots=True)
class Position:
    """A 1-based line/column location in a text buffer.

    Parameters
    ----------
    line : int or None
        Line number, starting at 1
    column : int or None
        Column number, starting at 1

    Notes
    -----
    ``Position(None, None)`` (see :data:`END_OF_BUFFER`) is a sentinel meaning
    "no defined end extent". It is attached as the end of pure insertions and
    callers may test for it with :attr:`is_unset`.

    """

    line: Optional[int]
    column: Optional[int]

    @property
    def is_unset(self) -> bool:
        """Return True for the sentinel position."""
        return self.line is None and self.column is None

    def to_dict(self) -> dict[str, Optional[int]]:
        """Return the position as a plain dictionary."""
        return {"line": self.line, "column": self.column}

    def __str__(self) -> str:
        if self.is_unset:
            return ""
        return f"{self.line}:{self.column}"


END_OF_BUFFER = Position(None, None)


class LineIndex:
    """Newline index over a single text buffer.

    Parameters
    ----------
    text : str
        The buffer to index. The index is built eagerly in one pass.

    Examples
    --------
    >>> index = LineIndex("ab\\ncd")
    >>> index.position_at(4)
    Position(line=2, column=2)

    """

    __slots__ = ("text", "_newlines")

    def __init__(self, text: str) -> None:
        self.text = text
        self._newlines = [i for i, char in enumerate(text) if char == "\n"]

    @property
    def line_count(self) -> int:
        """Number of lines in the buffer (a trailing newline opens a new, empty line)."""
        return len(self._newlines) + 1

    def position_at(self, offset: int) -> Position:
        """Resolve ``offset`` to a position.

        Parameters
        ----------
        offset : int
            Zero-based character offset, ``0 <= offset <= len(text)``

        Returns
        -------
        Position
            The 1-based line and column of ``offset``

        Raises
        ------
        ValueError
            If ``offset`` is negative or past the end of the buffer

        """
        if offset < 0 or offset > len(self.text):
            raise ValueError(f"Offset {offset} is outside of buffer of length {len(self.text)}")

        # Newlines strictly before offset
        preceding = bisect_left(self._newlines, offset)
        if preceding == 0:
            return Position(1, offset + 1)
        line_start = self._newlines[preceding - 1] + 1
        return Position(preceding + 1, offset - line_start + 1)


def position_at(text: str, offset: int) -> Position:
    """Resolve a single offset without keeping an index around."""
    return LineIndex(text).position_at(offset)
