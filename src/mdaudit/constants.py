#  Copyright (c) 2025 Tom Villani, Ph.D.
#
# src/mdaudit/constants.py
"""Constants shared across the mdaudit package.

This module centralizes the labels attached to every diagnostic, the glyphs
used to make whitespace visible in messages, and the file names consulted
while resolving formatting configuration.
"""

from __future__ import annotations

import re
from typing import Final, Literal

# =============================================================================
# Diagnostic labels
# =============================================================================

SOURCE: Final = "mdaudit"
"""Value of the ``source`` field on every emitted diagnostic."""

REFERENCE_URL: Final = "https://github.com/thomas-villani/mdaudit"
"""Value of the ``reference_url`` field on every emitted diagnostic."""

DEFAULT_SEVERITY: Final = "warning"

DiagnosticCategory = Literal["delete", "insert", "replace"]

# =============================================================================
# Invisible character glyphs
# =============================================================================

INVISIBLE_GLYPHS: Final[dict[str, str]] = {
    " ": "·",  # middle dot
    "\n": "⏎",  # return symbol
    "\t": "↹",  # tab arrows
    "\r": "␍",  # symbol for carriage return
}

# Line endings that terminate a batch of edits
LINE_ENDING_RE: Final = re.compile(r"\r\n|[\r\n\u2028\u2029]")

# =============================================================================
# Formatting defaults
# =============================================================================

DEFAULT_PARSER: Final = "markdown"
DEFAULT_END_OF_LINE: Final = "lf"
DEFAULT_FILENAME: Final = "readme.md"

EndOfLine = Literal["lf", "crlf", "cr", "auto"]
BulletChar = Literal["-", "*", "+"]

END_OF_LINE_SEQUENCES: Final[dict[str, str]] = {
    "lf": "\n",
    "crlf": "\r\n",
    "cr": "\r",
}

VALID_BULLETS: Final = ("-", "*", "+")

# File extension to formatter parser name
PARSER_EXTENSIONS: Final[dict[str, str]] = {
    ".md": "markdown",
    ".markdown": "markdown",
    ".mdown": "markdown",
    ".mkd": "markdown",
    ".mkdn": "markdown",
}

MARKDOWN_EXTENSIONS: Final = tuple(PARSER_EXTENSIONS)

# =============================================================================
# Configuration discovery
# =============================================================================

CONFIG_FILENAMES: Final = (".mdaudit.toml", ".mdaudit.yaml", ".mdaudit.yml", ".mdaudit.json")
PYPROJECT_FILENAME: Final = "pyproject.toml"
PYPROJECT_SECTION: Final = "mdaudit"
IGNORE_FILENAME: Final = ".mdauditignore"
EDITORCONFIG_FILENAME: Final = ".editorconfig"

# =============================================================================
# CLI exit codes
# =============================================================================

EXIT_SUCCESS: Final = 0
EXIT_DIAGNOSTICS: Final = 1
EXIT_VALIDATION_ERROR: Final = 3
EXIT_FILE_ERROR: Final = 4
EXIT_PARSING_ERROR: Final = 6
