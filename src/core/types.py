"""Shared typed models.

This module defines the flat record model shared by the text parser,
the binary codec, the tree loader, and the storage facade.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Literal

StorageFormat = Literal["text", "binary"]


@dataclass(frozen=True)
class RawRecord:
    """One entry in document order, before tree reconstruction.

    Attributes:
        depth: Number of ancestors between the entry and the root.
        key: Local key; never empty and never contains the path separator.
        value: Entry value, or None for a grouping-only entry.
        comments: Comment lines attached to the entry, in source order.
        line: Source line (text) or record ordinal (binary). Only used
            for error reporting; ignored by equality.
    """

    depth: int
    key: str
    value: str | None = None
    comments: tuple[str, ...] = ()
    line: int | None = field(default=None, compare=False)

    @property
    def has_value(self) -> bool:
        """Return whether the record carries a value."""
        return self.value is not None
