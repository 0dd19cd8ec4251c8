#  Copyright (c) 2025 Tom Villani, Ph.D.
#
# src/mdaudit/invisibles.py
"""Render whitespace and control characters as visible glyphs."""

from __future__ import annotations

from mdaudit.constants import INVISIBLE_GLYPHS

_INVISIBLES_TABLE = str.maketrans(INVISIBLE_GLYPHS)


def show_invisibles(fragment: str) -> str:
    """Replace invisible characters in ``fragment`` with visible glyphs.

    Spaces become ``·``, line feeds ``⏎``, tabs ``↹`` and carriage returns
    ``␍``. Every other character is left untouched, so the function is
    idempotent.

    Parameters
    ----------
    fragment : str
        Text to render

    Returns
    -------
    str
        The rendered text

    Examples
    --------
    >>> show_invisibles("-  foo\\n")
    '-··foo⏎'

    """
    return fragment.translate(_INVISIBLES_TABLE)
