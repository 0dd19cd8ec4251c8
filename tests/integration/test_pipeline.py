"""Integration tests for the audit and formatting pipeline.

These tests run documents through configuration resolution, the bundled
Markdown formatter and the diagnostic core together.
"""

from pathlib import Path

import pytest
from utils import write_tree

from mdaudit.config import FileSystemConfigResolver, FormatOptions, StaticConfigResolver
from mdaudit.exceptions import FileError, UnsupportedParserError
from mdaudit.pipeline import DocumentFile, ProcessResult, process_document, report_document, serialize_document
from mdaudit.positions import Position


def upper_formatter(text, options):
    return text.upper()


@pytest.mark.integration
class TestDocumentFile:
    """Tests for DocumentFile."""

    def test_defaults_for_unnamed_documents(self, tmp_path):
        document = DocumentFile(contents="x", cwd=tmp_path)
        assert document.file_path == tmp_path / "readme.md"
        assert document.display_name == "<stdin>"
        assert not document.has_messages

    def test_from_path_preserves_line_endings(self, tmp_path):
        write_tree(tmp_path, {"docs/a.md": "one\r\ntwo\r\n"})
        document = DocumentFile.from_path(Path("docs/a.md"), cwd=tmp_path)
        assert document.contents == "one\r\ntwo\r\n"
        assert document.display_name == "docs/a.md"
        assert document.file_path == tmp_path / "docs" / "a.md"

    def test_from_path_missing_file(self, tmp_path):
        with pytest.raises(FileError) as exc_info:
            DocumentFile.from_path("missing.md", cwd=tmp_path)
        assert exc_info.value.file_path == "missing.md"
        assert isinstance(exc_info.value.original_error, OSError)

    def test_from_path_undecodable(self, tmp_path):
        (tmp_path / "bad.md").write_bytes(b"\xff\xfe\xfa")
        with pytest.raises(FileError):
            DocumentFile.from_path("bad.md", cwd=tmp_path)


@pytest.mark.integration
class TestReportDocument:
    """Tests for report_document."""

    def test_appends_messages(self):
        document = DocumentFile(path="README.md", contents="Hello")
        diagnostics = report_document(document, StaticConfigResolver())
        assert document.messages == diagnostics
        assert diagnostics[0].message == "Insert `⏎`"
        assert diagnostics[0].start == Position(1, 6)

    def test_clean_document(self):
        document = DocumentFile(path="README.md", contents="# Title\n\nText\n")
        assert report_document(document, StaticConfigResolver()) == []
        assert not document.has_messages

    def test_ignored_document(self):
        document = DocumentFile(path="CHANGELOG.md", contents="\n\n\n")
        assert report_document(document, StaticConfigResolver(ignored=["CHANGELOG.md"])) == []

    def test_explicit_formatter(self):
        document = DocumentFile(path="a.md", contents="abc")
        (diagnostic,) = report_document(document, StaticConfigResolver(), formatter=upper_formatter)
        assert diagnostic.message == "Replace `abc` with `ABC`"

    def test_unknown_parser(self):
        document = DocumentFile(path="a.md", contents="abc")
        with pytest.raises(UnsupportedParserError):
            report_document(document, StaticConfigResolver(FormatOptions(parser="rst")))

    def test_formatter_error_propagates(self):
        def broken(text, options):
            raise RuntimeError("formatter crashed")

        document = DocumentFile(path="a.md", contents="abc")
        with pytest.raises(RuntimeError, match="formatter crashed"):
            report_document(document, StaticConfigResolver(), formatter=broken)
        assert document.messages == []


@pytest.mark.integration
class TestSerializeDocument:
    """Tests for serialize_document."""

    def test_formats_draft(self):
        document = DocumentFile(path="a.md")
        assert serialize_document("Hello", document, StaticConfigResolver()) == "Hello\n"

    def test_ignored_document_passes_through(self):
        document = DocumentFile(path="vendor/a.md")
        resolver = StaticConfigResolver(ignored=["vendor/*"])
        assert serialize_document("\n\n\n", document, resolver, formatter=upper_formatter) == "\n\n\n"

    def test_uses_resolved_options(self):
        document = DocumentFile(path="a.md")
        resolver = StaticConfigResolver(FormatOptions(end_of_line="crlf"))
        assert serialize_document("Hello", document, resolver) == "Hello\r\n"


@pytest.mark.integration
class TestProcessDocument:
    """Tests for process_document."""

    def test_report_and_format(self):
        document = DocumentFile(path="a.md", contents="Hello")
        result = process_document(document, StaticConfigResolver())
        assert isinstance(result, ProcessResult)
        assert result.output == "Hello\n"
        assert result.changed
        assert len(result.diagnostics) == 1
        assert document.messages == result.diagnostics

    def test_report_only(self):
        document = DocumentFile(path="a.md", contents="Hello")
        result = process_document(document, StaticConfigResolver(), format=False)
        assert result.output == "Hello"
        assert not result.changed
        assert len(result.diagnostics) == 1

    def test_format_only(self):
        document = DocumentFile(path="a.md", contents="Hello")
        result = process_document(document, StaticConfigResolver(), report=False)
        assert result.output == "Hello\n"
        assert result.diagnostics == []
        assert not document.has_messages

    def test_resolves_configuration_once(self):
        calls = []

        class CountingResolver(StaticConfigResolver):
            def resolve(self, path):
                calls.append(path)
                return super().resolve(path)

        process_document(DocumentFile(path="a.md", contents="x"), CountingResolver())
        assert len(calls) == 1

    def test_formats_once_when_reporting_and_formatting(self):
        calls = []

        def counting_formatter(text, options):
            calls.append(text)
            return text.upper()

        document = DocumentFile(path="a.md", contents="abc")
        result = process_document(document, StaticConfigResolver(), counting_formatter)
        assert calls == ["abc"]
        assert result.output == "ABC"
        assert [d.category for d in result.diagnostics] == ["replace"]

    def test_neither_step_skips_formatter(self):
        def failing_formatter(text, options):
            raise AssertionError("formatter should not run")

        document = DocumentFile(path="a.md", contents="abc")
        result = process_document(document, StaticConfigResolver(), failing_formatter, format=False, report=False)
        assert result.output == "abc"
        assert result.diagnostics == []

    def test_skipped(self):
        document = DocumentFile(path="a.md", contents="\n\n\n")
        result = process_document(document, StaticConfigResolver(ignored=["*.md"]))
        assert result.skipped
        assert result.output == "\n\n\n"
        assert result.diagnostics == []

    def test_with_project_configuration(self, tmp_path):
        write_tree(
            tmp_path,
            {
                ".editorconfig": "root = true\n[*.md]\nend_of_line = crlf\n",
                ".mdaudit.toml": 'bullet = "-"\n',
                ".mdauditignore": "generated/\n",
                "docs/list.md": "* one\r\n* two\r\n",
                "generated/api.md": "\n\n\n",
            },
        )
        resolver = FileSystemConfigResolver(cwd=tmp_path)

        document = DocumentFile.from_path("docs/list.md", cwd=tmp_path)
        result = process_document(document, resolver)
        assert result.output == "- one\r\n- two\r\n"
        assert [d.category for d in result.diagnostics] == ["replace", "replace"]
        assert [d.start for d in result.diagnostics] == [Position(1, 1), Position(2, 1)]

        generated = DocumentFile.from_path("generated/api.md", cwd=tmp_path)
        assert process_document(generated, resolver).skipped
