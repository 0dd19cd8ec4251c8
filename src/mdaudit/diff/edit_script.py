#  Copyright (c) 2025 Tom Villani, Ph.D.
#
# src/mdaudit/diff/edit_script.py
"""Compute the edit script that turns a document into its canonical form.

The comparison runs at character granularity with diff-match-patch, without
a time limit so that the result is always a shortest edit script. The raw
character script is then batched into operations the way a reader expects
to see them: changes separated only by unchanged text on the same line are
reported as a single operation, while an unchanged run that contains a line
ending closes the current operation.

Offsets of every :class:`EditOperation` index the *original* text.

Examples
--------
>>> generate_differences("\\n-  foo", "- foo\\n")
[EditOperation(operation='replace', offset=0, delete_text='\\n-  foo', insert_text='- foo\\n')]

"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Literal, Sequence

from diff_match_patch import diff_match_patch

from mdaudit.constants import LINE_ENDING_RE

logger = logging.getLogger(__name__)

Operation = Literal["delete", "insert", "replace"]
Tag = Literal["equal", "delete", "insert"]
Segment = tuple[Tag, str]


@dataclass(frozen=True, slots=True)
class EditOperation:
    """A single delete, insert or replace operation.

    Parameters
    ----------
    operation : {'delete', 'insert', 'replace'}
        Kind of edit
    offset : int
        Offset in the original text where the edit starts
    delete_text : str, default ''
        Text removed from the original (empty for inserts)
    insert_text : str, default ''
        Text added from the canonical form (empty for deletes)

    """

    operation: Operation
    offset: int
    delete_text: str = ""
    insert_text: str = ""

    @property
    def end_offset(self) -> int:
        """Offset in the original text just past the deleted span."""
        return self.offset + len(self.delete_text)


# =============================================================================
# Character diff
# =============================================================================

_TAGS: dict[int, Tag] = {
    diff_match_patch.DIFF_EQUAL: "equal",
    diff_match_patch.DIFF_DELETE: "delete",
    diff_match_patch.DIFF_INSERT: "insert",
}


def _create_differ() -> diff_match_patch:
    differ = diff_match_patch()
    # Zero disables the deadline
    differ.Diff_Timeout = 0
    return differ


def diff_characters(a: str, b: str) -> list[Segment]:
    """Compute a character-level shortest edit script between two strings.

    Parameters
    ----------
    a : str
        Source text
    b : str
        Target text

    Returns
    -------
    list of (tag, text)
        Runs tagged ``'equal'``, ``'delete'`` or ``'insert'``. Consecutive runs
        never share a tag, and inside a block of changes the deletion comes
        before the insertion.

    """
    diffs = _create_differ().diff_main(a, b, False)
    return [(_TAGS[op], text) for op, text in diffs if text]


# =============================================================================
# Edit operations
# =============================================================================


def _flush_batch(batch: list[Segment], offset: int, operations: list[EditOperation]) -> int:
    """Turn a batch of runs into one operation and return the next offset."""
    delete_text = "".join(text for tag, text in batch if tag != "insert")
    insert_text = "".join(text for tag, text in batch if tag != "delete")
    batch.clear()

    if delete_text and insert_text:
        operations.append(EditOperation("replace", offset, delete_text, insert_text))
    elif insert_text:
        operations.append(EditOperation("insert", offset, insert_text=insert_text))
    elif delete_text:
        operations.append(EditOperation("delete", offset, delete_text=delete_text))

    return offset + len(delete_text)


def generate_differences(original: str, canonical: str) -> list[EditOperation]:
    """Compute the operations that transform ``original`` into ``canonical``.

    Parameters
    ----------
    original : str
        Text as found in the document
    canonical : str
        Text as produced by the formatter

    Returns
    -------
    list of EditOperation
        Non-overlapping operations in ascending offset order. Empty when both
        texts are identical.

    """
    if original == canonical:
        return []

    segments = diff_characters(original, canonical)
    operations: list[EditOperation] = []
    batch: list[Segment] = []
    offset = 0

    for index, (tag, text) in enumerate(segments):
        is_last = index == len(segments) - 1
        if tag != "equal":
            batch.append((tag, text))
        elif not is_last:
            if not batch:
                offset += len(text)
            elif LINE_ENDING_RE.search(text):
                offset = _flush_batch(batch, offset, operations)
                offset += len(text)
            else:
                batch.append((tag, text))

        if batch and is_last:
            offset = _flush_batch(batch, offset, operations)

    logger.debug("Generated %d edit operation(s) from %d diff segment(s)", len(operations), len(segments))
    return operations


def apply_operations(original: str, operations: Sequence[EditOperation]) -> str:
    """Apply an edit script to the text it was computed from.

    Parameters
    ----------
    original : str
        The original text the offsets refer to
    operations : sequence of EditOperation
        Operations in ascending offset order

    Returns
    -------
    str
        The edited text

    Raises
    ------
    ValueError
        If operations overlap or a deleted span does not match the original

    """
    parts: list[str] = []
    cursor = 0
    for operation in operations:
        if operation.offset < cursor:
            raise ValueError(f"Operation at offset {operation.offset} overlaps a previous operation")
        if original[operation.offset : operation.end_offset] != operation.delete_text:
            raise ValueError(f"Deleted text does not match the original at offset {operation.offset}")
        parts.append(original[cursor : operation.offset])
        parts.append(operation.insert_text)
        cursor = operation.end_offset
    parts.append(original[cursor:])
    return "".join(parts)
