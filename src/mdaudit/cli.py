#  Copyright (c) 2025 Tom Villani, Ph.D.

# src/mdaudit/cli.py
"""Command-line interface for mdaudit.

Audits Markdown documents against their canonical formatting and reports one
diagnostic per difference. With ``--write`` documents are rewritten in their
canonical form.

Examples
--------
Report formatting problems::

    $ mdaudit README.md docs/

Rewrite files in place::

    $ mdaudit --write docs/

Audit standard input::

    $ cat notes.md | mdaudit - --stdin-filepath notes.md

Emit JSON for tooling::

    $ mdaudit docs/ --reporter json --output report.json

Exit Codes
----------
0 no diagnostics, 1 diagnostics reported, 3 invalid options or configuration,
4 unreadable input, 6 formatter failure.
"""

from __future__ import annotations

import argparse
import logging
import sys
from importlib.metadata import version
from pathlib import Path
from typing import Any, Iterable, List, Optional

from rich.console import Console

from mdaudit.config import FileSystemConfigResolver, FormatOptions
from mdaudit.constants import (
    EXIT_DIAGNOSTICS,
    EXIT_FILE_ERROR,
    EXIT_PARSING_ERROR,
    EXIT_SUCCESS,
    EXIT_VALIDATION_ERROR,
    MARKDOWN_EXTENSIONS,
)
from mdaudit.exceptions import ConfigError, FileError, FormatterError
from mdaudit.logging_utils import configure_logging
from mdaudit.pipeline import DocumentFile, process_document
from mdaudit.reporters import JsonReporter, TextReporter
from mdaudit.reporters.json import render_to_file

logger = logging.getLogger(__name__)


def get_version() -> str:
    """Get the version of the mdaudit package."""
    try:
        return version("mdaudit")
    except Exception:
        return "unknown"


def _parse_option(value: str) -> tuple[str, str]:
    """Parse a ``KEY=VALUE`` formatting override.

    Raises
    ------
    argparse.ArgumentTypeError
        If the value has no ``=`` or an empty key

    """
    key, sep, option_value = value.partition("=")
    if not sep or not key.strip():
        raise argparse.ArgumentTypeError(f"options must be given as KEY=VALUE, got '{value}'")
    return key.strip(), option_value.strip()


def create_parser() -> argparse.ArgumentParser:
    """Create the argument parser for the mdaudit command.

    Returns
    -------
    argparse.ArgumentParser
        Configured parser

    """
    parser = argparse.ArgumentParser(
        prog="mdaudit",
        description="Report (and optionally fix) Markdown formatting differences",
    )
    parser.add_argument(
        "paths",
        nargs="+",
        help="Files, directories or glob patterns to audit (use '-' for stdin)",
    )

    mode = parser.add_mutually_exclusive_group()
    mode.add_argument("--write", "-w", action="store_true", help="Rewrite documents in their canonical form")
    mode.add_argument("--check", action="store_true", help="Only report differences, never write (default)")
    parser.add_argument("--no-report", dest="report", action="store_false", help="Do not report diagnostics")
    parser.add_argument("--stdin-filepath", help="Path used to resolve configuration for stdin input")

    # Output options
    parser.add_argument(
        "--reporter",
        "-r",
        choices=["text", "json"],
        default="text",
        help="Report format: text (default) or json",
    )
    parser.add_argument("--output", "-o", help="Write the report to a file (default: stdout)")
    parser.add_argument(
        "--color",
        dest="color",
        choices=["auto", "always", "never"],
        default="auto",
        help="Colorize output: auto (default, if terminal), always, never",
    )
    parser.add_argument("--quiet", "-q", action="store_true", help="Do not list documents without diagnostics")

    # Configuration options
    parser.add_argument("--config", type=Path, help="Project configuration file (disables discovery)")
    parser.add_argument("--ignore-path", type=Path, help="Ignore file to use (default: ./.mdauditignore)")
    parser.add_argument(
        "--no-editorconfig", dest="editorconfig", action="store_false", help="Do not read .editorconfig files"
    )
    parser.add_argument(
        "--option",
        dest="options",
        action="append",
        type=_parse_option,
        default=[],
        metavar="KEY=VALUE",
        help="Formatting option overriding any configuration file (repeatable)",
    )

    # Logging options
    parser.add_argument(
        "--log-level",
        choices=["DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"],
        default="WARNING",
        help="Set logging level (default: WARNING)",
    )
    parser.add_argument("--log-file", help="Also write log messages to this file")
    parser.add_argument("--verbose", "-v", action="store_true", help="Enable debug logging")
    parser.add_argument("--trace", action="store_true", help="Debug logging with timestamps and logger names")
    parser.add_argument("--version", action="version", version=f"%(prog)s {get_version()}")

    return parser


def _setup_logging_level(parsed_args: argparse.Namespace) -> None:
    """Set up logging level based on command-line arguments."""
    # --trace takes highest precedence, then --verbose, then --log-level
    if parsed_args.trace:
        log_level = logging.DEBUG
    elif parsed_args.verbose and parsed_args.log_level == "WARNING":
        log_level = logging.DEBUG
    else:
        log_level = getattr(logging, parsed_args.log_level.upper())

    configure_logging(log_level, log_file=parsed_args.log_file, trace_mode=parsed_args.trace)


def collect_input_files(input_paths: Iterable[str], extensions: Iterable[str] = MARKDOWN_EXTENSIONS) -> List[Path]:
    """Expand CLI path arguments into a sorted, deduplicated list of files.

    Explicit files are always included. Directories are searched recursively
    and, like glob matches, filtered by ``extensions``.

    Parameters
    ----------
    input_paths : iterable of str
        Path arguments (``'-'`` entries are ignored)
    extensions : iterable of str
        Allowed suffixes for directory and glob matches

    Returns
    -------
    list of Path
        Files to process

    Raises
    ------
    FileNotFoundError
        If an argument matches nothing

    """
    allowed = {ext.lower() for ext in extensions}
    candidates: List[Path] = []

    for raw_argument in input_paths:
        if raw_argument == "-":
            continue
        input_path = Path(raw_argument)
        if any(char in raw_argument for char in "*?["):
            if input_path.is_absolute():
                base = Path(input_path.anchor)
                pattern = str(input_path.relative_to(base))
            else:
                base, pattern = Path.cwd(), raw_argument
            matches = [p for p in base.glob(pattern) if p.is_file() and p.suffix.lower() in allowed]
            if not matches:
                raise FileNotFoundError(f"No files match pattern: {raw_argument}")
            candidates.extend(p if input_path.is_absolute() else p.relative_to(base) for p in matches)
        elif input_path.is_file():
            candidates.append(input_path)
        elif input_path.is_dir():
            candidates.extend(p for p in input_path.rglob("*") if p.is_file() and p.suffix.lower() in allowed)
        else:
            raise FileNotFoundError(f"No such file or directory: {raw_argument}")

    unique: dict[str, Path] = {}
    for candidate in candidates:
        try:
            key = str(candidate.resolve())
        except OSError:
            key = str(candidate)
        unique.setdefault(key, candidate)
    return sorted(unique.values())


def _should_use_color(choice: str, stream: Any) -> bool:
    if choice == "always":
        return True
    if choice == "never":
        return False
    isatty = getattr(stream, "isatty", None)
    return bool(callable(isatty) and isatty())


def _write_output(path: Path, text: str) -> None:
    with open(path, "w", encoding="utf-8", newline="") as f:
        f.write(text)


def _emit_report(parsed: argparse.Namespace, files: List[DocumentFile], to_stderr: bool) -> None:
    """Write the report in the requested format."""
    if parsed.reporter == "json":
        if parsed.output:
            render_to_file(files, parsed.output)
        else:
            print(JsonReporter().render(files), file=sys.stderr if to_stderr else sys.stdout)
        return

    reporter = TextReporter(quiet=parsed.quiet)
    if parsed.output:
        Path(parsed.output).write_text("\n".join(reporter.render(files)) + "\n", encoding="utf-8")
        return

    stream = sys.stderr if to_stderr else sys.stdout
    reporter.use_color = _should_use_color(parsed.color, stream)
    console = Console(
        file=stream,
        highlight=False,
        soft_wrap=True,
        force_terminal=True if parsed.color == "always" else None,
        no_color=not reporter.use_color,
    )
    reporter.print(files, console=console)


def main(argv: Optional[List[str]] = None) -> int:
    """Run the mdaudit command.

    Parameters
    ----------
    argv : list of str, optional
        Command line arguments (defaults to ``sys.argv[1:]``)

    Returns
    -------
    int
        Exit code

    """
    parser = create_parser()
    try:
        parsed = parser.parse_args(argv)
    except SystemExit as e:
        return e.code if isinstance(e.code, int) else 0

    _setup_logging_level(parsed)

    overrides = dict(parsed.options)
    try:
        FormatOptions.from_mapping(overrides)
    except ConfigError as e:
        print(f"Error: {e.message}", file=sys.stderr)
        return EXIT_VALIDATION_ERROR

    cwd = Path.cwd()
    resolver = FileSystemConfigResolver(
        cwd=cwd,
        overrides=overrides,
        ignore_path=parsed.ignore_path,
        config_path=parsed.config,
        editorconfig=parsed.editorconfig,
    )

    try:
        paths = collect_input_files(parsed.paths)
    except FileNotFoundError as e:
        print(f"Error: {e}", file=sys.stderr)
        return EXIT_FILE_ERROR

    documents: List[DocumentFile] = []
    exit_code = EXIT_SUCCESS

    stdin_document: Optional[DocumentFile] = None
    if "-" in parsed.paths:
        stdin_document = DocumentFile(path=parsed.stdin_filepath, contents=sys.stdin.read(), cwd=cwd)
        documents.append(stdin_document)
    for path in paths:
        try:
            documents.append(DocumentFile.from_path(path, cwd=cwd))
        except FileError as e:
            print(f"Error: {e.message}", file=sys.stderr)
            exit_code = EXIT_FILE_ERROR

    processed: List[DocumentFile] = []
    for document in documents:
        try:
            result = process_document(document, resolver, format=parsed.write, report=parsed.report)
        except ConfigError as e:
            print(f"Error: {document.display_name}: {e.message}", file=sys.stderr)
            exit_code = EXIT_VALIDATION_ERROR
            continue
        except FormatterError as e:
            print(f"Error: {document.display_name}: {e.message}", file=sys.stderr)
            exit_code = EXIT_PARSING_ERROR
            continue
        except Exception as e:
            logger.debug("Formatter failure", exc_info=True)
            print(f"Error: {document.display_name}: formatter failed: {e}", file=sys.stderr)
            exit_code = EXIT_PARSING_ERROR
            continue

        if parsed.write:
            # Formatted stdin goes to stdout, ignored documents pass through unchanged
            if document is stdin_document:
                sys.stdout.write(result.output)
            elif result.changed:
                _write_output(document.file_path, result.output)
                logger.info("Formatted %s", document.display_name)

        if result.skipped:
            logger.info("Ignored %s", document.display_name)
            continue
        processed.append(document)

    if parsed.report:
        _emit_report(parsed, processed, to_stderr=stdin_document is not None and parsed.write)
        if exit_code == EXIT_SUCCESS and any(document.has_messages for document in processed):
            exit_code = EXIT_DIAGNOSTICS

    return exit_code


if __name__ == "__main__":
    sys.exit(main())
