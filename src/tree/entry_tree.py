"""Arena-backed entry tree.

All entries live in one list owned by :class:`EntryTree`. Parent and
child links are list indices, so entries never hold references to each
other. Index 0 is the root sentinel, which has no key and no value.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Iterator

from core.constants import KEY_VALUE_ENCLOSURE, NEW_LINE, PATH_SEPARATOR, ROOT_DEPTH
from core.errors import StorageKeyError

ROOT_INDEX = 0


@dataclass
class EntryNode:
    """One tree entry.

    Attributes:
        local_key: Key relative to the parent; None only for the root.
        value: Entry value, or None for a grouping-only entry.
        comments: Comment lines written above the entry.
        parent: Index of the parent entry; None only for the root.
        children: Child indices in document order.
    """

    local_key: str | None
    value: str | None
    comments: tuple[str, ...]
    parent: int | None
    children: list[int] = field(default_factory=list)


class EntryTree:
    """Ordered tree of entries addressed by integer index."""

    def __init__(self) -> None:
        self._nodes: list[EntryNode] = [
            EntryNode(local_key=None, value=None, comments=(), parent=None)
        ]

    def __len__(self) -> int:
        """Return the number of entries, excluding the root."""
        return len(self._nodes) - 1

    @property
    def root(self) -> int:
        return ROOT_INDEX

    def node(self, index: int) -> EntryNode:
        """Return the entry stored at ``index``."""
        return self._nodes[index]

    def add_child(
        self,
        parent: int,
        local_key: str,
        value: str | None = None,
        comments: tuple[str, ...] = (),
    ) -> int:
        """Append a new child entry under ``parent``.

        Callers check :meth:`find_child` first; sibling keys must stay unique.

        Returns:
            Index of the new entry.
        """
        index = len(self._nodes)
        self._nodes.append(
            EntryNode(local_key=local_key, value=value, comments=comments, parent=parent)
        )
        self._nodes[parent].children.append(index)
        return index

    def find_child(self, parent: int, local_key: str) -> int | None:
        """Return the child of ``parent`` with ``local_key``, if any."""
        for child in self._nodes[parent].children:
            if self._nodes[child].local_key == local_key:
                return child
        return None

    def parent_of(self, index: int) -> int | None:
        return self._nodes[index].parent

    def children_of(self, index: int) -> tuple[int, ...]:
        return tuple(self._nodes[index].children)

    def depth_of(self, index: int) -> int:
        """Return the number of ancestors below the root; the root is -1."""
        depth = ROOT_DEPTH
        parent = self._nodes[index].parent
        while parent is not None:
            depth += 1
            parent = self._nodes[parent].parent
        return depth

    def global_key(self, index: int) -> str:
        """Join the local keys from the top-level ancestor down to ``index``."""
        local_keys: list[str] = []
        current: int | None = index
        while current is not None and current != ROOT_INDEX:
            node = self._nodes[current]
            local_keys.append(node.local_key or "")
            current = node.parent
        return PATH_SEPARATOR.join(reversed(local_keys))

    def walk(self) -> Iterator[tuple[int, int]]:
        """Yield ``(depth, index)`` for every entry in pre-order."""
        stack = [(0, child) for child in reversed(self._nodes[ROOT_INDEX].children)]
        while stack:
            depth, index = stack.pop()
            yield depth, index
            stack.extend((depth + 1, child) for child in reversed(self._nodes[index].children))

    def resolve(self, dotted_key: str, create: bool = False) -> int | None:
        """Find the entry addressed by a dotted key.

        Args:
            dotted_key: Local keys joined by the path separator.
            create: Append missing entries (without values) while descending.

        Returns:
            Index of the addressed entry, or None when it does not exist
            and ``create`` is False. Lookups of malformed keys find nothing.

        Raises:
            StorageKeyError: If ``create`` is True and the key is empty or
                has an empty or unrepresentable segment.
        """
        if create:
            local_keys = split_dotted_key(dotted_key)
        else:
            local_keys = dotted_key.split(PATH_SEPARATOR)
        current = ROOT_INDEX
        for local_key in local_keys:
            child = self.find_child(current, local_key)
            if child is None:
                if not create:
                    return None
                child = self.add_child(current, local_key)
            current = child
        return current


def split_dotted_key(dotted_key: str) -> list[str]:
    """Split and validate a dotted key.

    Raises:
        StorageKeyError: If any segment is empty or contains a quote or
            line break.
    """
    local_keys = dotted_key.split(PATH_SEPARATOR)
    for local_key in local_keys:
        if not local_key:
            raise StorageKeyError(
                f"Invalid key '{dotted_key}': local keys must not be empty. "
                f"Remove leading, trailing, or doubled '{PATH_SEPARATOR}'."
            )
        if KEY_VALUE_ENCLOSURE in local_key or NEW_LINE in local_key or "\r" in local_key:
            raise StorageKeyError(
                f"Invalid key '{dotted_key}': local keys must not contain quotes or line breaks."
            )
    return local_keys
