"""Tree reconstruction from ordered flat records.

Records arrive as a pre-order traversal. Relative to the previous record,
a record's depth may stay equal (sibling), grow by exactly one (child),
or shrink by any amount (sibling of an ancestor). Any larger jump, and
any key repeated among siblings, fails the whole load.
"""

from __future__ import annotations

from typing import Iterable

from core.constants import PATH_SEPARATOR, ROOT_DEPTH
from core.errors import DuplicateKeyError, IllegalDepthError
from core.logging_config import get_logger
from core.types import RawRecord
from tree.entry_tree import EntryTree

_LOGGER = get_logger(__name__)


def load_tree(records: Iterable[RawRecord]) -> EntryTree:
    """Build an entry tree from records in document order.

    Args:
        records: Records from the text parser or the binary codec.

    Returns:
        The fully built tree.

    Raises:
        IllegalDepthError: If a record is nested more than one level below
            its predecessor, or has a negative depth.
        DuplicateKeyError: If a record repeats a sibling's local key.
    """
    tree = EntryTree()
    previous_depth = ROOT_DEPTH
    previous_entry = tree.root
    for record in records:
        parent = _attachment_parent(tree, record, previous_depth, previous_entry)
        if tree.find_child(parent, record.key) is not None:
            raise DuplicateKeyError(
                f"Duplicate key '{_global_key(tree, parent, record.key)}' at "
                f"{_location(record)}: a sibling with the same key already exists. "
                "Rename or merge one of the entries.",
                line=record.line,
                key=_global_key(tree, parent, record.key),
            )
        previous_entry = tree.add_child(parent, record.key, record.value, record.comments)
        previous_depth = record.depth
    _LOGGER.debug("tree_loaded", entry_count=len(tree))
    return tree


def _attachment_parent(
    tree: EntryTree,
    record: RawRecord,
    previous_depth: int,
    previous_entry: int,
) -> int:
    """Return the index the record must be attached to.

    Raises:
        IllegalDepthError: If the depth does not continue the previous one.
    """
    if record.depth < 0 or record.depth > previous_depth + 1:
        raise IllegalDepthError(
            f"Illegal depth {record.depth} for key '{record.key}' at {_location(record)}: "
            f"expected a depth between 0 and {previous_depth + 1}. "
            "Remove the extra leading tabs.",
            line=record.line,
            key=record.key,
        )
    if record.depth == previous_depth + 1:
        return previous_entry
    # Same depth or shallower: climb from the previous entry's parent.
    return _ancestor(tree, previous_entry, previous_depth - record.depth + 1)


def _ancestor(tree: EntryTree, index: int, steps: int) -> int:
    current = index
    for _ in range(steps):
        parent = tree.parent_of(current)
        if parent is None:
            break
        current = parent
    return current


def _global_key(tree: EntryTree, parent: int, local_key: str) -> str:
    parent_key = tree.global_key(parent)
    return f"{parent_key}{PATH_SEPARATOR}{local_key}" if parent_key else local_key


def _location(record: RawRecord) -> str:
    return f"line {record.line}" if record.line is not None else "unknown line"
