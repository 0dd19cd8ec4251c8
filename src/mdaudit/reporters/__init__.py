#  Copyright (c) 2025 Tom Villani, Ph.D.
#
# src/mdaudit/reporters/__init__.py
"""Reporters for diagnostic output.

Available Reporters
-------------------
- TextReporter: Aligned, optionally colorized terminal output
- JsonReporter: Structured JSON output for programmatic access

Examples
--------
Print diagnostics for a document:
    >>> from mdaudit.config import StaticConfigResolver
    >>> from mdaudit.pipeline import DocumentFile, report_document
    >>> from mdaudit.reporters import TextReporter
    >>> doc = DocumentFile(path="README.md", contents="Hello")
    >>> _ = report_document(doc, StaticConfigResolver())
    >>> for line in TextReporter().render([doc]):
    ...     print(line)
    README.md
      1:6  warning  Insert `⏎`  insert  mdaudit
    <BLANKLINE>
    1 warning

"""

from mdaudit.reporters.json import JsonReporter
from mdaudit.reporters.text import TextReporter, format_location

__all__ = [
    "JsonReporter",
    "TextReporter",
    "format_location",
]
