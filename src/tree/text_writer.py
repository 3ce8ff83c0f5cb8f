"""Serialization of entry trees back to records and text."""

from __future__ import annotations

from typing import Iterable

from core.constants import (
    COMMENT_PREFIX,
    DEPTH_MARKER,
    KEY_VALUE_ENCLOSURE,
    KEY_VALUE_SEPARATOR,
    NEW_LINE,
)
from core.types import RawRecord
from tree.entry_tree import EntryTree


def flatten_tree(tree: EntryTree) -> list[RawRecord]:
    """Return the tree as records in pre-order, ready for encoding."""
    records: list[RawRecord] = []
    for depth, index in tree.walk():
        node = tree.node(index)
        records.append(
            RawRecord(
                depth=depth,
                key=node.local_key or "",
                value=node.value,
                comments=node.comments,
            )
        )
    return records


def format_records(records: Iterable[RawRecord]) -> str:
    """Render records in the text format.

    Comments come first as ``#`` lines, followed by the tab-indented
    quoted key and, when present, ``="value"``. Every line ends in a
    newline.
    """
    lines: list[str] = []
    for record in records:
        lines.extend(f"{COMMENT_PREFIX}{comment}" for comment in record.comments)
        line = f"{DEPTH_MARKER * record.depth}{_quoted(record.key)}"
        if record.value is not None:
            line += f"{KEY_VALUE_SEPARATOR}{_quoted(record.value)}"
        lines.append(line)
    return "".join(line + NEW_LINE for line in lines)


def render_text(tree: EntryTree) -> str:
    """Render a whole tree in the text format."""
    return format_records(flatten_tree(tree))


def _quoted(text: str) -> str:
    return f"{KEY_VALUE_ENCLOSURE}{text}{KEY_VALUE_ENCLOSURE}"
