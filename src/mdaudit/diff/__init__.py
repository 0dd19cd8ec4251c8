#  Copyright (c) 2025 Tom Villani, Ph.D.
#
# src/mdaudit/diff/__init__.py
"""Edit scripts between a document and its canonical form.

Examples
--------
Compute the operations that turn a document into its formatted version:
    >>> from mdaudit.diff import generate_differences
    >>> generate_differences("Hello", "Hello\\n")
    [EditOperation(operation='insert', offset=5, delete_text='', insert_text='\\n')]

"""

from mdaudit.diff.edit_script import (
    EditOperation,
    Operation,
    apply_operations,
    diff_characters,
    generate_differences,
)

__all__ = [
    "EditOperation",
    "Operation",
    "apply_operations",
    "diff_characters",
    "generate_differences",
]
