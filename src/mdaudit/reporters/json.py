#  Copyright (c) 2025 Tom Villani, Ph.D.
#
# src/mdaudit/reporters/json.py
"""JSON diagnostic reporter for structured output.

This reporter serializes the diagnostics of every processed document into a
machine-readable JSON document suitable for CI annotations and editor
integrations.
"""

from __future__ import annotations

import json
from typing import Any, Dict, Iterable

from mdaudit.pipeline import DocumentFile


class JsonReporter:
    """Render diagnostics as structured JSON.

    The output has the shape::

        {
          "type": "mdaudit_report",
          "files": [{"path": "README.md", "messages": [...]}],
          "statistics": {"delete": 0, "insert": 1, "replace": 0, "total": 1, "files_with_issues": 1}
        }

    Parameters
    ----------
    pretty_print : bool, default = True
        If True, format JSON with indentation
    indent : int, default = 2
        Number of spaces for indentation (if pretty_print=True)

    """

    def __init__(
        self,
        pretty_print: bool = True,
        indent: int = 2,
    ):
        """Initialize the JSON reporter."""
        self.pretty_print = pretty_print
        self.indent = indent

    def build(self, files: Iterable[DocumentFile]) -> Dict[str, Any]:
        """Build the report as a dictionary.

        Parameters
        ----------
        files : iterable of DocumentFile
            Processed documents

        Returns
        -------
        dict
            Report data with per-file messages and statistics

        """
        statistics: Dict[str, int] = {"delete": 0, "insert": 0, "replace": 0, "total": 0, "files_with_issues": 0}
        entries = []
        for file in files:
            messages = [diagnostic.to_dict() for diagnostic in file.messages]
            for diagnostic in file.messages:
                statistics[diagnostic.category] += 1
            statistics["total"] += len(messages)
            if messages:
                statistics["files_with_issues"] += 1
            entries.append({"path": file.display_name, "messages": messages})

        return {
            "type": "mdaudit_report",
            "files": entries,
            "statistics": statistics,
        }

    def render(self, files: Iterable[DocumentFile]) -> str:
        """Render the report to a JSON string."""
        data = self.build(files)
        if self.pretty_print:
            return json.dumps(data, indent=self.indent, ensure_ascii=False)
        else:
            return json.dumps(data, ensure_ascii=False)


def render_to_file(files: Iterable[DocumentFile], output_path: str, **kwargs: Any) -> None:
    """Render a JSON report to a file.

    Parameters
    ----------
    files : iterable of DocumentFile
        Processed documents
    output_path : str
        Destination path for the generated JSON file
    **kwargs
        Additional keyword arguments forwarded to :class:`JsonReporter`

    """
    reporter = JsonReporter(**kwargs)
    json_output = reporter.render(files)

    with open(output_path, "w", encoding="utf-8") as f:
        f.write(json_output)
