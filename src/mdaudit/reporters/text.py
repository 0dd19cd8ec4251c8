#  Copyright (c) 2025 Tom Villani, Ph.D.
#
# src/mdaudit/reporters/text.py
"""Human-readable diagnostic report for terminals.

Each document gets a header line followed by one line per diagnostic::

    README.md
      1:6      warning  Insert `⏎`              insert   mdaudit
      3:1-4:1  warning  Delete `⏎`              delete   mdaudit

    2 warnings

Colors are applied with Rich styles when enabled.
"""

from __future__ import annotations

from typing import Iterable, Iterator, Optional

from rich.console import Console
from rich.text import Text

from mdaudit.diagnostics import Diagnostic
from mdaudit.pipeline import DocumentFile

_CATEGORY_STYLES = {
    "delete": "red",
    "insert": "green",
    "replace": "cyan",
}


def format_location(diagnostic: Diagnostic) -> str:
    """Format the location of a diagnostic as ``line:col`` or ``line:col-line:col``."""
    if diagnostic.end.is_unset:
        return str(diagnostic.start)
    return f"{diagnostic.start}-{diagnostic.end}"


class TextReporter:
    """Render diagnostics as aligned text lines.

    Parameters
    ----------
    use_color : bool, default False
        Apply Rich styles when printing
    quiet : bool, default False
        Omit documents that have no diagnostics

    """

    def __init__(self, use_color: bool = False, quiet: bool = False):
        """Initialize the text reporter."""
        self.use_color = use_color
        self.quiet = quiet

    def _render_file(self, file: DocumentFile) -> Iterator[Text]:
        if not file.messages:
            if not self.quiet:
                yield Text.assemble((file.display_name, "bold"), ": no issues found")
            return

        yield Text(file.display_name, style="bold underline")

        rows = [
            (format_location(d), d.severity, d.message, d.rule_id, d.source, d.category) for d in file.messages
        ]
        widths = [max(len(row[column]) for row in rows) for column in range(4)]
        for location, severity, message, rule_id, source, category in rows:
            line = Text("  ")
            line.append(location.ljust(widths[0]), style="dim")
            line.append("  ")
            line.append(severity.ljust(widths[1]), style="yellow")
            line.append("  ")
            line.append(message.ljust(widths[2]), style=_CATEGORY_STYLES.get(category, ""))
            line.append("  ")
            line.append(rule_id.ljust(widths[3]), style="dim")
            line.append("  ")
            line.append(source, style="dim")
            yield line

    def render_text(self, files: Iterable[DocumentFile]) -> Iterator[Text]:
        """Yield styled report lines for ``files``."""
        total = 0
        first = True
        for file in files:
            if self.quiet and not file.messages:
                continue
            if not first and file.messages:
                yield Text("")
            first = False
            total += len(file.messages)
            yield from self._render_file(file)

        if total:
            yield Text("")
            noun = "warning" if total == 1 else "warnings"
            yield Text(f"{total} {noun}", style="bold yellow")

    def render(self, files: Iterable[DocumentFile]) -> Iterator[str]:
        """Yield plain report lines for ``files``.

        Parameters
        ----------
        files : iterable of DocumentFile
            Processed documents

        Yields
        ------
        str
            Report lines without styling

        """
        for line in self.render_text(files):
            yield line.plain

    def print(self, files: Iterable[DocumentFile], console: Optional[Console] = None) -> None:
        """Print the report to ``console`` (stdout by default)."""
        if console is None:
            console = Console(highlight=False, no_color=not self.use_color, soft_wrap=True)
        for line in self.render_text(files):
            if self.use_color:
                console.print(line)
            else:
                console.print(line.plain, markup=False)
