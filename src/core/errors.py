"""kvtree exception hierarchy.

This module defines traceable domain errors with clear boundaries.
Syntax errors carry a source position, structural errors carry the
offending record line and key, and I/O failures form their own branch.
"""

from __future__ import annotations


class StorageError(Exception):
    """Base exception for all kvtree failures."""


class StorageConfigError(StorageError):
    """Raised for invalid runtime configuration."""


class StorageIOError(StorageError):
    """Raised for missing files, OS failures, and truncated binary data."""


class StorageKeyError(StorageError):
    """Raised when a dotted key passed to the facade is malformed."""


class StorageValueError(StorageError):
    """Raised when a value cannot be represented in the text format."""


class StorageDependencyError(StorageError):
    """Raised when an optional runtime dependency is missing."""


class StorageRunSpecError(StorageError):
    """Raised for invalid or unsupported run-spec configuration."""


class StorageParseError(StorageError):
    """Base class for positioned syntax errors in the text format.

    Attributes:
        line: One-based line number of the failing line.
        column: One-based column of the inspected character. A tab counts
            as a single column.
        character: Offending character, or None at end of line.
    """

    reason = "invalid syntax"

    def __init__(self, line: int, column: int, character: str | None) -> None:
        self.line = line
        self.column = column
        self.character = character
        found = repr(character) if character is not None else "end of line"
        super().__init__(f"Parse error at {line}:{column}: {self.reason}, found {found}.")


class InvalidKeyEnclosureError(StorageParseError):
    """Raised when an opening or closing quote is expected but missing."""

    reason = 'expected \'"\' enclosing a key or value'


class InvalidKeyCharacterError(StorageParseError):
    """Raised when a key contains the path separator."""

    reason = "keys must not contain '.'"


class EmptyKeyError(StorageParseError):
    """Raised when a key has no characters between its quotes."""

    reason = "keys must not be empty"


class InvalidSeparatorError(StorageParseError):
    """Raised when '=' is expected between key and value but missing."""

    reason = "expected '=' between key and value"


class InvalidTrailingCharacterError(StorageParseError):
    """Raised when non-whitespace content follows a complete entry."""

    reason = "unexpected content after entry"


class StorageLoadError(StorageError):
    """Base class for structural errors found while rebuilding the tree.

    Attributes:
        line: Source line (text) or record ordinal (binary), when known.
        key: Global key of the record that could not be attached.
    """

    def __init__(self, message: str, line: int | None, key: str) -> None:
        self.line = line
        self.key = key
        super().__init__(message)


class IllegalDepthError(StorageLoadError):
    """Raised when a record is nested more than one level below its predecessor."""


class DuplicateKeyError(StorageLoadError):
    """Raised when two sibling records share the same local key."""

