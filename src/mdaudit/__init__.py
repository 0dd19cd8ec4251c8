"""mdaudit - report formatting differences in Markdown documents as diagnostics.

mdaudit compares a document with the canonical text produced by a formatter,
computes a compact edit script between the two and reports every edit as a
diagnostic with 1-based line/column positions. Invisible characters in
messages are rendered as glyphs (``·`` for spaces, ``⏎`` for line feeds,
``↹`` for tabs, ``␍`` for carriage returns) so that whitespace-only problems
stay readable.

Key Features
------------
- Character-level shortest edit script, batched per line into delete,
  insert and replace operations
- Offset to line/column translation with a reusable newline index
- Pluggable formatter; a Markdown formatter built on mistune is bundled
- Configuration from ``.mdaudit.toml``/``.yaml``/``.json``,
  ``pyproject.toml`` and ``.editorconfig``, with ``.mdauditignore`` rules
- Text and JSON reporters and a ``mdaudit`` command line tool

Examples
--------
Audit a string with explicit options:

    >>> from mdaudit import FormatOptions, ResolvedConfig, emit_diagnostics, format_text
    >>> diagnostics = emit_diagnostics("Hello", format_text, ResolvedConfig.of(FormatOptions()))
    >>> diagnostics[0].message
    'Insert `⏎`'

Audit a file on disk, honouring ignore rules and configuration files:

    >>> from mdaudit import DocumentFile, FileSystemConfigResolver, report_document
    >>> doc = DocumentFile.from_path("README.md")
    >>> for diagnostic in report_document(doc, FileSystemConfigResolver()):
    ...     print(diagnostic.start, diagnostic.message)

"""

from mdaudit.config import (
    ConfigResolver,
    FileSystemConfigResolver,
    FormatOptions,
    ResolvedConfig,
    StaticConfigResolver,
)
from mdaudit.diagnostics import Diagnostic, build_diagnostic, diagnose, emit_diagnostics
from mdaudit.diff import EditOperation, apply_operations, generate_differences
from mdaudit.exceptions import (
    ConfigError,
    FileError,
    FormatterError,
    MdAuditError,
    UnsupportedParserError,
    ValidationError,
)
from mdaudit.formatter import format_markdown, format_text, get_formatter, register_formatter
from mdaudit.invisibles import show_invisibles
from mdaudit.pipeline import DocumentFile, ProcessResult, process_document, report_document, serialize_document
from mdaudit.positions import END_OF_BUFFER, LineIndex, Position, position_at

__version__ = "0.1.0"

__all__ = [
    "__version__",
    # Positions and rendering
    "END_OF_BUFFER",
    "LineIndex",
    "Position",
    "position_at",
    "show_invisibles",
    # Edit scripts and diagnostics
    "Diagnostic",
    "EditOperation",
    "apply_operations",
    "build_diagnostic",
    "diagnose",
    "emit_diagnostics",
    "generate_differences",
    # Configuration
    "ConfigResolver",
    "FileSystemConfigResolver",
    "FormatOptions",
    "ResolvedConfig",
    "StaticConfigResolver",
    # Formatters
    "format_markdown",
    "format_text",
    "get_formatter",
    "register_formatter",
    # Pipeline
    "DocumentFile",
    "ProcessResult",
    "process_document",
    "report_document",
    "serialize_document",
    # Exceptions
    "ConfigError",
    "FileError",
    "FormatterError",
    "MdAuditError",
    "UnsupportedParserError",
    "ValidationError",
]
