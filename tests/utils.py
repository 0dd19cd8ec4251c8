"""Test utilities for the mdaudit test suite.

This module provides helpers for creating scratch directories and document
trees used by the configuration, pipeline and CLI tests.
"""

import shutil
import tempfile
from pathlib import Path
from typing import Mapping


def create_test_temp_dir() -> Path:
    """Create a temporary directory for test files."""
    return Path(tempfile.mkdtemp())


def cleanup_test_dir(temp_dir: Path) -> None:
    """Clean up test directory and files."""
    if temp_dir.exists():
        shutil.rmtree(temp_dir)


def write_tree(root: Path, files: Mapping[str, str]) -> dict[str, Path]:
    """Write ``files`` (relative path -> contents) below ``root``.

    Contents are written byte for byte so that line endings survive.

    Returns
    -------
    dict
        The written paths keyed by their relative names

    """
    written = {}
    for relative, contents in files.items():
        path = root / relative
        path.parent.mkdir(parents=True, exist_ok=True)
        with open(path, "w", encoding="utf-8", newline="") as f:
            f.write(contents)
        written[relative] = path
    return written
