"""Public SDK surface for kvtree.

This module provides a stable import path for library users.
It re-exports the storage facade, the format pipeline, and the errors.
"""

from __future__ import annotations

from codec.binary_codec import decode_records, encode_records
from core.config import StorageConfig
from core.errors import (
    DuplicateKeyError,
    EmptyKeyError,
    IllegalDepthError,
    InvalidKeyCharacterError,
    InvalidKeyEnclosureError,
    InvalidSeparatorError,
    InvalidTrailingCharacterError,
    StorageError,
    StorageIOError,
    StorageKeyError,
    StorageLoadError,
    StorageParseError,
    StorageValueError,
)
from core.types import RawRecord
from parse.text_parser import parse_lines, parse_text
from store.storage_file import StorageFile, load
from tree.entry_tree import EntryTree
from tree.text_writer import flatten_tree, format_records
from tree.tree_loader import load_tree

__all__ = [
    "DuplicateKeyError",
    "EmptyKeyError",
    "EntryTree",
    "IllegalDepthError",
    "InvalidKeyCharacterError",
    "InvalidKeyEnclosureError",
    "InvalidSeparatorError",
    "InvalidTrailingCharacterError",
    "RawRecord",
    "StorageConfig",
    "StorageError",
    "StorageFile",
    "StorageIOError",
    "StorageKeyError",
    "StorageLoadError",
    "StorageParseError",
    "StorageValueError",
    "decode_records",
    "encode_records",
    "flatten_tree",
    "format_records",
    "load",
    "load_tree",
    "parse_lines",
    "parse_text",
]
