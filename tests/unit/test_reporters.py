"""Unit tests for the text and JSON reporters."""

import io
import json

import pytest
from rich.console import Console

from mdaudit.diagnostics import diagnose
from mdaudit.pipeline import DocumentFile
from mdaudit.reporters import JsonReporter, TextReporter, format_location
from mdaudit.reporters.json import render_to_file


def _document(path, original, canonical):
    document = DocumentFile(path=path, contents=original)
    for diagnostic in diagnose(original, canonical):
        document.message(diagnostic)
    return document


@pytest.fixture
def documents():
    return [
        _document("README.md", "Hello", "Hello\n"),
        _document("docs/clean.md", "ok\n", "ok\n"),
        _document("docs/blank.md", "a\n\n\n", "a\n"),
    ]


@pytest.mark.unit
class TestFormatLocation:
    """Tests for format_location."""

    def test_insert_has_start_only(self):
        (diagnostic,) = diagnose("Hello", "Hello\n")
        assert format_location(diagnostic) == "1:6"

    def test_range(self):
        (diagnostic,) = diagnose("a\n\n\n", "a\n")
        assert format_location(diagnostic) == "2:1-4:1"


@pytest.mark.unit
class TestTextReporter:
    """Tests for TextReporter."""

    def test_render(self, documents):
        lines = list(TextReporter().render(documents))
        assert lines[0] == "README.md"
        assert lines[1].split() == ["1:6", "warning", "Insert", "`⏎`", "insert", "mdaudit"]
        assert "docs/clean.md: no issues found" in lines
        assert "docs/blank.md" in lines
        assert lines[-1] == "2 warnings"

    def test_quiet_omits_clean_documents(self, documents):
        lines = list(TextReporter(quiet=True).render(documents))
        assert not any("clean.md" in line for line in lines)

    def test_single_warning_summary(self, documents):
        lines = list(TextReporter().render(documents[:1]))
        assert lines[-1] == "1 warning"

    def test_no_summary_without_diagnostics(self, documents):
        assert list(TextReporter().render([documents[1]])) == ["docs/clean.md: no issues found"]

    def test_columns_are_aligned(self, documents):
        document = _document("a.md", "x \ny  \n", "x\ny\n")
        lines = list(TextReporter().render([document]))
        severities = [line.index("warning") for line in lines[1:3]]
        assert severities[0] == severities[1]

    def test_print_without_color(self, documents):
        buffer = io.StringIO()
        console = Console(file=buffer, no_color=True, highlight=False, soft_wrap=True)
        TextReporter().print(documents, console=console)
        output = buffer.getvalue()
        assert "README.md" in output
        assert "\x1b[" not in output


@pytest.mark.unit
class TestJsonReporter:
    """Tests for JsonReporter."""

    def test_build(self, documents):
        data = JsonReporter().build(documents)
        assert data["type"] == "mdaudit_report"
        assert [entry["path"] for entry in data["files"]] == ["README.md", "docs/clean.md", "docs/blank.md"]
        assert data["statistics"] == {"delete": 1, "insert": 1, "replace": 0, "total": 2, "files_with_issues": 2}

    def test_message_shape(self, documents):
        message = JsonReporter().build(documents)["files"][0]["messages"][0]
        assert message["message"] == "Insert `⏎`"
        assert message["end"] == {"line": None, "column": None}

    def test_render_is_valid_json(self, documents):
        output = JsonReporter(pretty_print=False).render(documents)
        assert "\n" not in output
        assert json.loads(output)["statistics"]["total"] == 2

    def test_render_keeps_glyphs(self, documents):
        assert "⏎" in JsonReporter().render(documents)

    def test_render_to_file(self, documents, temp_dir):
        output_path = temp_dir / "report.json"
        render_to_file(documents, str(output_path), indent=4)
        assert json.loads(output_path.read_text(encoding="utf-8"))["statistics"]["files_with_issues"] == 2
