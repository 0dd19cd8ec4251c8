#  Copyright (c) 2025 Tom Villani, Ph.D.
#
# src/mdaudit/diagnostics.py
"""Turn formatting differences into diagnostics.

:func:`emit_diagnostics` drives the audit of a single text: it asks the
formatter for the canonical form of the text, computes the edit script
between the two and builds one :class:`Diagnostic` per operation, with
positions resolved against the original text and invisible characters
rendered in the message.

Two outcomes are silent no-ops: a file the configuration marks as skipped,
and a text that is already canonical. A formatter that raises is not handled
here; the exception reaches the caller unchanged.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import TYPE_CHECKING, Any, Callable, Optional

from mdaudit.constants import DEFAULT_SEVERITY, REFERENCE_URL, SOURCE, DiagnosticCategory
from mdaudit.diff.edit_script import EditOperation, generate_differences
from mdaudit.invisibles import show_invisibles
from mdaudit.positions import END_OF_BUFFER, LineIndex, Position

if TYPE_CHECKING:
    from mdaudit.config import FormatOptions, ResolvedConfig

logger = logging.getLogger(__name__)

Formatter = Callable[[str, Optional["FormatOptions"]], str]


@dataclass(frozen=True, slots=True)
class Diagnostic:
    """A formatting violation reported against the original text.

    Parameters
    ----------
    message : str
        Human-readable description, e.g. ``Delete `⏎⏎⏎` ``
    start : Position
        Start of the affected span in the original text
    end : Position
        End of the affected span, or :data:`~mdaudit.positions.END_OF_BUFFER`
        for insertions
    category : {'delete', 'insert', 'replace'}
        Kind of edit the formatter wants
    source : str
        Label of the tool reporting the diagnostic
    reference_url : str
        Link to documentation about the diagnostic
    severity : str, default 'warning'
        Severity label

    """

    message: str
    start: Position
    end: Position
    category: DiagnosticCategory
    source: str = SOURCE
    reference_url: str = REFERENCE_URL
    severity: str = DEFAULT_SEVERITY

    @property
    def rule_id(self) -> str:
        """Rule identifier, identical to the category."""
        return self.category

    def to_dict(self) -> dict[str, Any]:
        """Return a JSON-serialisable representation."""
        return {
            "message": self.message,
            "start": self.start.to_dict(),
            "end": self.end.to_dict(),
            "category": self.category,
            "rule_id": self.rule_id,
            "source": self.source,
            "reference_url": self.reference_url,
            "severity": self.severity,
        }


def _quote(text: str) -> str:
    return f"`{show_invisibles(text)}`"


def build_diagnostic(operation: EditOperation, index: LineIndex) -> Diagnostic:
    """Build the diagnostic describing one edit operation.

    Parameters
    ----------
    operation : EditOperation
        The edit to describe
    index : LineIndex
        Newline index of the original text the operation refers to

    Returns
    -------
    Diagnostic
        The diagnostic for ``operation``

    """
    start = index.position_at(operation.offset)

    if operation.operation == "insert":
        # Insertions have no extent in the original text
        return Diagnostic(
            message=f"Insert {_quote(operation.insert_text)}",
            start=start,
            end=END_OF_BUFFER,
            category="insert",
        )

    end = index.position_at(operation.end_offset)
    if operation.operation == "delete":
        message = f"Delete {_quote(operation.delete_text)}"
    else:
        message = f"Replace {_quote(operation.delete_text)} with {_quote(operation.insert_text)}"
    return Diagnostic(message=message, start=start, end=end, category=operation.operation)


def diagnose(original: str, canonical: str) -> list[Diagnostic]:
    """Build diagnostics for every difference between two texts.

    Parameters
    ----------
    original : str
        Text as found in the document
    canonical : str
        Text as produced by the formatter

    Returns
    -------
    list of Diagnostic
        One diagnostic per edit operation, in ascending offset order

    """
    operations = generate_differences(original, canonical)
    if not operations:
        return []
    index = LineIndex(original)
    return [build_diagnostic(operation, index) for operation in operations]


def emit_diagnostics(original: str, formatter: Formatter, resolved: ResolvedConfig) -> list[Diagnostic]:
    """Audit ``original`` against the canonical form produced by ``formatter``.

    Parameters
    ----------
    original : str
        Text to audit
    formatter : callable
        Canonical-text oracle called as ``formatter(original, options)``
    resolved : ResolvedConfig
        Configuration resolved for the document; ``resolved.skip`` suppresses
        the audit entirely

    Returns
    -------
    list of Diagnostic
        Diagnostics in ascending offset order, empty when the document is
        skipped or already canonical

    """
    if resolved.skip:
        logger.debug("Skipping audit: document is ignored")
        return []

    canonical = formatter(original, resolved.options)
    if canonical == original:
        logger.debug("Document is already formatted")
        return []

    diagnostics = diagnose(original, canonical)
    logger.debug("Emitted %d diagnostic(s)", len(diagnostics))
    return diagnostics
