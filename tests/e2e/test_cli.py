"""End-to-end tests for the mdaudit command line.

These tests drive :func:`mdaudit.cli.main` in-process against document trees
in a temporary directory and check reports, rewritten files and exit codes.
"""

import io
import json
import os
import subprocess
import sys

import pytest
from utils import write_tree

from mdaudit.cli import collect_input_files, create_parser, main
from mdaudit.constants import (
    EXIT_DIAGNOSTICS,
    EXIT_FILE_ERROR,
    EXIT_PARSING_ERROR,
    EXIT_SUCCESS,
    EXIT_VALIDATION_ERROR,
)


CLEAN = "# Title\n\nText\n"


@pytest.fixture
def project(tmp_path, monkeypatch):
    """Create a small project and make it the working directory."""
    write_tree(
        tmp_path,
        {
            ".editorconfig": "root = true\n",
            "README.md": "Hello",
            "docs/clean.md": CLEAN,
            "docs/blank.md": "Text\n\n\n",
            "docs/notes.txt": "not markdown",
        },
    )
    monkeypatch.chdir(tmp_path)
    return tmp_path


@pytest.mark.e2e
@pytest.mark.cli
class TestCollectInputFiles:
    """Tests for expanding path arguments."""

    def test_directory_is_filtered_by_extension(self, project):
        assert [p.as_posix() for p in collect_input_files(["docs"])] == ["docs/blank.md", "docs/clean.md"]

    def test_explicit_file_is_kept(self, project):
        assert [p.as_posix() for p in collect_input_files(["docs/notes.txt"])] == ["docs/notes.txt"]

    def test_glob(self, project):
        assert [p.as_posix() for p in collect_input_files(["docs/*.md"])] == ["docs/blank.md", "docs/clean.md"]

    def test_duplicates_removed(self, project):
        assert len(collect_input_files(["README.md", "./README.md", "*.md"])) == 1

    def test_stdin_marker_ignored(self, project):
        assert collect_input_files(["-"]) == []

    def test_missing_path(self, project):
        with pytest.raises(FileNotFoundError):
            collect_input_files(["nope.md"])


@pytest.mark.e2e
@pytest.mark.cli
class TestMain:
    """Tests for report output and exit codes."""

    def test_clean_file(self, project, capsys):
        assert main(["docs/clean.md"]) == EXIT_SUCCESS
        assert "no issues found" in capsys.readouterr().out

    def test_diagnostics_reported(self, project, capsys):
        assert main(["README.md", "--color", "never"]) == EXIT_DIAGNOSTICS
        out = capsys.readouterr().out
        assert "README.md" in out
        assert "1:6" in out
        assert "Insert `⏎`" in out
        assert "1 warning" in out

    def test_json_reporter(self, project, capsys):
        assert main(["README.md", "docs", "--reporter", "json"]) == EXIT_DIAGNOSTICS
        data = json.loads(capsys.readouterr().out)
        assert data["statistics"]["files_with_issues"] == 2
        paths = [entry["path"] for entry in data["files"]]
        assert paths == ["README.md", "docs/blank.md", "docs/clean.md"]

    def test_report_to_file(self, project):
        assert main(["README.md", "-r", "json", "-o", "report.json"]) == EXIT_DIAGNOSTICS
        data = json.loads((project / "report.json").read_text(encoding="utf-8"))
        assert data["files"][0]["messages"][0]["start"] == {"line": 1, "column": 6}

    def test_quiet(self, project, capsys):
        main(["docs", "--quiet", "--color", "never"])
        assert "clean.md" not in capsys.readouterr().out

    def test_missing_file(self, project, capsys):
        assert main(["missing.md"]) == EXIT_FILE_ERROR
        assert "missing.md" in capsys.readouterr().err

    def test_invalid_option_value(self, project, capsys):
        assert main(["README.md", "--option", "bullet=x"]) == EXIT_VALIDATION_ERROR
        assert "bullet" in capsys.readouterr().err

    def test_unknown_option(self, project, capsys):
        assert main(["README.md", "--option", "tabWidth=4"]) == EXIT_VALIDATION_ERROR
        assert "tabWidth" in capsys.readouterr().err

    def test_malformed_option_argument(self, project):
        assert main(["README.md", "--option", "bullet"]) == 2

    def test_invalid_configuration_file(self, project, capsys):
        write_tree(project, {".mdaudit.toml": "bullet = "})
        assert main(["README.md"]) == EXIT_VALIDATION_ERROR
        assert "Invalid TOML" in capsys.readouterr().err

    def test_invalid_configuration_does_not_stop_other_documents(self, project, capsys):
        write_tree(project, {"broken/.mdaudit.toml": "bullet = ", "broken/a.md": CLEAN})
        assert main(["broken/a.md", "README.md", "-r", "json"]) == EXIT_VALIDATION_ERROR
        captured = capsys.readouterr()
        assert "broken/a.md" in captured.err
        data = json.loads(captured.out)
        assert [entry["path"] for entry in data["files"]] == ["README.md"]
        assert data["files"][0]["messages"]

    def test_unknown_parser_is_formatter_error(self, project, capsys):
        assert main(["README.md", "--option", "parser=rst"]) == EXIT_PARSING_ERROR
        assert "rst" in capsys.readouterr().err

    def test_ignored_files_are_not_reported(self, project, capsys):
        write_tree(project, {".mdauditignore": "README.md\n"})
        assert main(["README.md", "docs/clean.md", "-r", "json"]) == EXIT_SUCCESS
        data = json.loads(capsys.readouterr().out)
        assert [entry["path"] for entry in data["files"]] == ["docs/clean.md"]

    def test_configuration_is_applied(self, project, capsys):
        write_tree(project, {"list.md": "* a\n* b\n", ".mdaudit.yaml": "bullet: '-'\n"})
        assert main(["list.md", "-r", "json"]) == EXIT_DIAGNOSTICS
        messages = json.loads(capsys.readouterr().out)["files"][0]["messages"]
        assert [m["message"] for m in messages] == ["Replace `*` with `-`", "Replace `*` with `-`"]

    def test_no_report(self, project, capsys):
        assert main(["README.md", "--no-report"]) == EXIT_SUCCESS
        assert capsys.readouterr().out == ""


@pytest.mark.e2e
@pytest.mark.cli
class TestWrite:
    """Tests for rewriting documents."""

    def test_write_formats_in_place(self, project):
        main(["README.md", "docs", "--write", "--no-report"])
        assert (project / "README.md").read_text(encoding="utf-8") == "Hello\n"
        assert (project / "docs" / "blank.md").read_text(encoding="utf-8") == "Text\n"

    def test_write_reports_original_diagnostics(self, project, capsys):
        assert main(["README.md", "--write", "--color", "never"]) == EXIT_DIAGNOSTICS
        assert "Insert `⏎`" in capsys.readouterr().out

    def test_write_keeps_ignored_files(self, project):
        write_tree(project, {".mdauditignore": "docs/\n"})
        main(["docs", "--write", "--no-report"])
        assert (project / "docs" / "blank.md").read_text(encoding="utf-8") == "Text\n\n\n"

    def test_write_preserves_crlf(self, project):
        write_tree(project, {"crlf.md": "Title\r\n=====\r\n"})
        main(["crlf.md", "--write", "--no-report", "--option", "end_of_line=auto"])
        with open(project / "crlf.md", encoding="utf-8", newline="") as f:
            assert f.read() == "# Title\r\n"

    def test_check_and_write_are_exclusive(self, project):
        assert main(["README.md", "--check", "--write"]) == 2


@pytest.mark.e2e
@pytest.mark.cli
class TestStdin:
    """Tests for reading documents from standard input."""

    def test_report_stdin(self, project, monkeypatch, capsys):
        monkeypatch.setattr(sys, "stdin", io.StringIO("Hello"))
        assert main(["-", "--color", "never"]) == EXIT_DIAGNOSTICS
        out = capsys.readouterr().out
        assert "<stdin>" in out
        assert "Insert `⏎`" in out

    def test_write_stdin_goes_to_stdout(self, project, monkeypatch, capsys):
        monkeypatch.setattr(sys, "stdin", io.StringIO("Hello"))
        main(["-", "--write", "--stdin-filepath", "notes.md", "--color", "never"])
        captured = capsys.readouterr()
        assert captured.out == "Hello\n"
        assert "notes.md" in captured.err

    def test_stdin_filepath_uses_ignore_rules(self, project, monkeypatch, capsys):
        write_tree(project, {".mdauditignore": "vendor/\n"})
        monkeypatch.setattr(sys, "stdin", io.StringIO("\n\n\n"))
        assert main(["-", "--stdin-filepath", "vendor/a.md", "--write", "--no-report"]) == EXIT_SUCCESS
        assert capsys.readouterr().out == "\n\n\n"


@pytest.mark.e2e
@pytest.mark.cli
@pytest.mark.slow
class TestModuleEntryPoint:
    """Tests for running ``python -m mdaudit`` as a subprocess."""

    def test_version(self):
        result = subprocess.run([sys.executable, "-m", "mdaudit", "--version"], capture_output=True, text=True)
        assert result.returncode == 0
        assert result.stdout.startswith("mdaudit ")

    def test_exit_code(self, project):
        result = subprocess.run(
            [sys.executable, "-m", "mdaudit", "README.md", "--color", "never"],
            cwd=project,
            capture_output=True,
            text=True,
            encoding="utf-8",
            env={**os.environ, "PYTHONIOENCODING": "utf-8"},
        )
        assert result.returncode == EXIT_DIAGNOSTICS
        assert "Insert" in result.stdout


@pytest.mark.unit
@pytest.mark.cli
def test_parser_defaults():
    parsed = create_parser().parse_args(["README.md"])
    assert parsed.reporter == "text"
    assert parsed.report is True
    assert parsed.write is False
    assert parsed.editorconfig is True
    assert parsed.options == []
