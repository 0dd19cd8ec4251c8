#  Copyright (c) 2025 Tom Villani, Ph.D.
#
# src/mdaudit/formatter.py
"""Canonical-text formatters.

A formatter is any callable ``(text, options) -> text`` returning the
canonical form of a document. The audit core treats it as an opaque oracle;
this module only provides a registry keyed by parser name and a default
Markdown formatter built on mistune's Markdown renderer.

Formatter errors are never caught by the audit core.
"""

from __future__ import annotations

import logging
import re
from typing import Any, Dict, Optional

import mistune
from mistune.renderers.markdown import MarkdownRenderer

from mdaudit.config import FormatOptions
from mdaudit.constants import DEFAULT_PARSER, END_OF_LINE_SEQUENCES
from mdaudit.diagnostics import Formatter
from mdaudit.exceptions import UnsupportedParserError

logger = logging.getLogger(__name__)

_LINE_ENDING_RE = re.compile(r"\r\n|\r|\n")


class CanonicalMarkdownRenderer(MarkdownRenderer):
    """Markdown renderer that normalizes unordered list markers.

    Parameters
    ----------
    bullet : str, optional
        Marker used for every unordered list. None keeps the input's markers.

    """

    def __init__(self, bullet: Optional[str] = None) -> None:
        super().__init__()
        self.bullet = bullet

    def list(self, token: Dict[str, Any], state: Any) -> str:
        if self.bullet and not token.get("attrs", {}).get("ordered") and "bullet" in token:
            token["bullet"] = self.bullet
        return super().list(token, state)


def _detect_line_ending(text: str) -> str:
    match = _LINE_ENDING_RE.search(text)
    return match.group(0) if match else "\n"


def format_markdown(text: str, options: Optional[FormatOptions] = None) -> str:
    """Return the canonical form of a Markdown document.

    Parameters
    ----------
    text : str
        Markdown source
    options : FormatOptions, optional
        Formatting options; defaults are used when omitted

    Returns
    -------
    str
        Canonical Markdown. Documents containing only whitespace become ``''``.

    """
    options = options or FormatOptions()

    if not text.strip():
        return ""

    normalized = text.replace("\r\n", "\n").replace("\r", "\n")
    markdown = mistune.create_markdown(renderer=CanonicalMarkdownRenderer(bullet=options.bullet))
    formatted = markdown(normalized)
    if not isinstance(formatted, str):  # pragma: no cover
        raise TypeError(f"Markdown renderer returned {type(formatted).__name__}, expected str")

    if options.end_of_line == "auto":
        line_ending = _detect_line_ending(text)
    else:
        line_ending = END_OF_LINE_SEQUENCES[options.end_of_line]
    if line_ending != "\n":
        formatted = formatted.replace("\n", line_ending)
    return formatted


_FORMATTERS: Dict[str, Formatter] = {
    DEFAULT_PARSER: format_markdown,
}


def register_formatter(parser: str, formatter: Formatter) -> None:
    """Register ``formatter`` for documents using ``parser``.

    An existing registration for the same name is replaced.
    """
    if parser in _FORMATTERS:
        logger.debug("Replacing formatter registered for parser '%s'", parser)
    _FORMATTERS[parser] = formatter


def available_parsers() -> list[str]:
    """Return the names of all registered parsers."""
    return sorted(_FORMATTERS)


def get_formatter(parser: str) -> Formatter:
    """Return the formatter registered for ``parser``.

    Raises
    ------
    UnsupportedParserError
        If no formatter is registered under that name

    """
    try:
        return _FORMATTERS[parser]
    except KeyError:
        raise UnsupportedParserError(parser, available=available_parsers()) from None


def format_text(text: str, options: Optional[FormatOptions] = None) -> str:
    """Format ``text`` with the formatter selected by ``options.parser``."""
    options = options or FormatOptions()
    return get_formatter(options.parser)(text, options)
