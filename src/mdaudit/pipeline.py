#  Copyright (c) 2025 Tom Villani, Ph.D.
#
# src/mdaudit/pipeline.py
"""Entry points for auditing and formatting documents.

The pipeline exposes two independent steps and a driver composing them:

- :func:`report_document` audits a document and appends one diagnostic per
  formatting difference to the document's message list.
- :func:`serialize_document` produces the text written out for a document:
  the formatter's output for a draft, or the draft itself when the document
  is ignored.
- :func:`process_document` runs either or both steps on a document.

Configuration is never looked up implicitly: every call receives the
:class:`~mdaudit.config.ConfigResolver` to use.

Examples
--------
Audit a string against the bundled Markdown formatter:

    >>> from mdaudit.config import StaticConfigResolver
    >>> from mdaudit.pipeline import DocumentFile, report_document
    >>> doc = DocumentFile(path="README.md", contents="Hello")
    >>> [d.message for d in report_document(doc, StaticConfigResolver())]
    ['Insert `⏎`']

"""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from pathlib import Path
from typing import Optional, Union

from mdaudit.config import ConfigResolver, ResolvedConfig
from mdaudit.constants import DEFAULT_FILENAME, DEFAULT_PARSER
from mdaudit.diagnostics import Diagnostic, Formatter, diagnose, emit_diagnostics
from mdaudit.exceptions import FileError
from mdaudit.formatter import get_formatter

logger = logging.getLogger(__name__)


@dataclass
class DocumentFile:
    """A document being processed and the diagnostics reported against it.

    Parameters
    ----------
    path : str or Path, optional
        Location of the document. Used to resolve configuration and ignore
        rules; documents without a path are treated as ``readme.md``.
    contents : str, default ''
        The document text
    cwd : Path, optional
        Directory relative paths are resolved against (defaults to the
        current directory)

    """

    path: Optional[Union[str, Path]] = None
    contents: str = ""
    cwd: Optional[Path] = None
    messages: list[Diagnostic] = field(default_factory=list)

    @property
    def file_path(self) -> Path:
        """Absolute path used for configuration lookups."""
        base = Path(self.cwd) if self.cwd is not None else Path.cwd()
        return base / (self.path if self.path else DEFAULT_FILENAME)

    @property
    def display_name(self) -> str:
        """Name shown in reports."""
        return Path(self.path).as_posix() if self.path else "<stdin>"

    @property
    def has_messages(self) -> bool:
        """True when at least one diagnostic was reported."""
        return bool(self.messages)

    def message(self, diagnostic: Diagnostic) -> Diagnostic:
        """Append ``diagnostic`` to the document's messages and return it."""
        self.messages.append(diagnostic)
        return diagnostic

    @classmethod
    def from_path(cls, path: Union[str, Path], cwd: Optional[Path] = None, encoding: str = "utf-8") -> "DocumentFile":
        """Read a document from disk.

        Line endings are preserved exactly so that they can be audited.

        Raises
        ------
        FileError
            If the file cannot be read or decoded

        """
        base = Path(cwd) if cwd is not None else Path.cwd()
        try:
            with open(base / path, encoding=encoding, newline="") as f:
                contents = f.read()
        except (OSError, UnicodeDecodeError) as e:
            raise FileError(f"Cannot read {path}: {e}", file_path=str(path), original_error=e) from e
        return cls(path=path, contents=contents, cwd=cwd)


@dataclass
class ProcessResult:
    """Outcome of :func:`process_document`.

    Parameters
    ----------
    file : DocumentFile
        The processed document, with diagnostics appended when reporting
    diagnostics : list of Diagnostic
        Diagnostics reported during this run
    output : str
        Serialized document text (the unchanged contents when formatting is off)
    skipped : bool
        True when ignore rules exempted the document

    """

    file: DocumentFile
    diagnostics: list[Diagnostic]
    output: str
    skipped: bool = False

    @property
    def changed(self) -> bool:
        """True when the output differs from the document's contents."""
        return self.output != self.file.contents


def _select_formatter(resolved: ResolvedConfig, formatter: Optional[Formatter]) -> Formatter:
    if formatter is not None:
        return formatter
    parser = resolved.options.parser if resolved.options is not None else DEFAULT_PARSER
    return get_formatter(parser)


def report_document(
    file: DocumentFile,
    resolver: ConfigResolver,
    formatter: Optional[Formatter] = None,
    resolved: Optional[ResolvedConfig] = None,
) -> list[Diagnostic]:
    """Audit a document and append diagnostics to its message list.

    Parameters
    ----------
    file : DocumentFile
        Document to audit
    resolver : ConfigResolver
        Resolves ignore state and formatting options for the document
    formatter : callable, optional
        Canonical-text oracle. Defaults to the formatter registered for the
        resolved parser.
    resolved : ResolvedConfig, optional
        Configuration resolved beforehand; skips calling ``resolver``

    Returns
    -------
    list of Diagnostic
        The diagnostics that were appended

    """
    resolved = resolved if resolved is not None else resolver.resolve(file.file_path)
    if resolved.skip:
        logger.debug("Not reporting on ignored document %s", file.display_name)
        return []

    diagnostics = emit_diagnostics(file.contents, _select_formatter(resolved, formatter), resolved)
    for diagnostic in diagnostics:
        file.message(diagnostic)
    return diagnostics


def serialize_document(
    draft: str,
    file: DocumentFile,
    resolver: ConfigResolver,
    formatter: Optional[Formatter] = None,
    resolved: Optional[ResolvedConfig] = None,
) -> str:
    """Return the text to write out for a document.

    Parameters
    ----------
    draft : str
        Serialized document before formatting
    file : DocumentFile
        Document the draft belongs to (used for configuration lookup)
    resolver : ConfigResolver
        Resolves ignore state and formatting options for the document
    formatter : callable, optional
        Canonical-text oracle
    resolved : ResolvedConfig, optional
        Configuration resolved beforehand; skips calling ``resolver``

    Returns
    -------
    str
        The draft unchanged for ignored documents, otherwise its canonical form

    """
    resolved = resolved if resolved is not None else resolver.resolve(file.file_path)
    if resolved.skip:
        return draft
    return _select_formatter(resolved, formatter)(draft, resolved.options)


def process_document(
    file: DocumentFile,
    resolver: ConfigResolver,
    formatter: Optional[Formatter] = None,
    *,
    format: bool = True,
    report: bool = True,
) -> ProcessResult:
    """Audit and/or format a document.

    Configuration is resolved once and shared by both steps, and the formatter
    runs at most once: the canonical text that the report is computed against
    is the output. Reporting runs against the original contents.

    Parameters
    ----------
    file : DocumentFile
        Document to process
    resolver : ConfigResolver
        Resolves ignore state and formatting options for the document
    formatter : callable, optional
        Canonical-text oracle
    format : bool, default True
        Produce the formatted text as output
    report : bool, default True
        Report formatting differences as diagnostics

    Returns
    -------
    ProcessResult
        Diagnostics and output for the document

    """
    resolved = resolver.resolve(file.file_path)
    diagnostics: list[Diagnostic] = []
    output = file.contents
    if resolved.skip or not (format or report):
        return ProcessResult(file=file, diagnostics=diagnostics, output=output, skipped=resolved.skip)

    canonical = _select_formatter(resolved, formatter)(file.contents, resolved.options)
    if report:
        diagnostics = diagnose(file.contents, canonical)
        for diagnostic in diagnostics:
            file.message(diagnostic)
    if format:
        output = canonical

    return ProcessResult(file=file, diagnostics=diagnostics, output=output, skipped=resolved.skip)
