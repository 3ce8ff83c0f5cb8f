"""Storage file facade.

This module ties parsing, decoding, and tree loading to dotted-key
access and persistence. A StorageFile owns one entry tree for its
whole lifetime; entries can be added or updated but never removed.
"""

from __future__ import annotations

from pathlib import Path
from typing import Iterable, cast

from codec.binary_codec import decode_records, encode_records, read_binary_file
from core.config import StorageConfig
from core.constants import KEY_VALUE_ENCLOSURE, NEW_LINE
from core.errors import StorageIOError, StorageValueError
from core.logging_config import get_logger
from core.types import RawRecord, StorageFormat
from parse.text_parser import parse_file, parse_text
from tree.entry_tree import EntryTree
from tree.text_writer import flatten_tree, render_text
from tree.tree_loader import load_tree

_LOGGER = get_logger(__name__)


class StorageFile:
    """Hierarchical key/value store backed by a text or binary file."""

    def __init__(
        self,
        tree: EntryTree | None = None,
        path: Path | None = None,
        config: StorageConfig | None = None,
        storage_format: StorageFormat = "text",
    ) -> None:
        """Create a store around an existing tree.

        Args:
            tree: Loaded entry tree; an empty tree when omitted.
            path: File the store is bound to for :meth:`save`.
            config: Runtime configuration.
            storage_format: Format used when saving to the bound path.
        """
        self._tree = tree if tree is not None else EntryTree()
        self._path = path
        self._config = config or StorageConfig()
        self._format: StorageFormat = storage_format

    @classmethod
    def load(
        cls,
        path: str | Path,
        config: StorageConfig | None = None,
        storage_format: StorageFormat = "text",
    ) -> "StorageFile":
        """Load a store from disk.

        Args:
            path: Storage file path.
            config: Runtime configuration; defaults to environment values.
            storage_format: ``text`` or ``binary``.

        Returns:
            Store bound to ``path``.

        Raises:
            StorageIOError: If the file is missing, a directory, or unreadable.
            StorageParseError: If the text contains a syntax error.
            StorageLoadError: If the records do not form a valid tree.
        """
        resolved_config = config or StorageConfig.from_env()
        file_path = Path(path).expanduser()
        if file_path.is_dir():
            raise StorageIOError(
                f"Failed to load storage file at {file_path}: path is a directory. "
                "Provide a file path."
            )
        if not file_path.exists():
            if not resolved_config.create_missing:
                raise StorageIOError(
                    f"Failed to load storage file at {file_path}: file does not exist. "
                    "Create it or set KVTREE_CREATE_MISSING=true."
                )
            _create_empty_file(file_path)
        if storage_format == "binary":
            records = read_binary_file(file_path, resolved_config.encoding)
        else:
            records = parse_file(file_path, resolved_config.encoding)
        tree = load_tree(records)
        _LOGGER.info(
            "storage_file_loaded",
            path=str(file_path),
            storage_format=storage_format,
            entry_count=len(tree),
        )
        return cls(tree, file_path, resolved_config, storage_format)

    @classmethod
    def from_text(cls, text: str, config: StorageConfig | None = None) -> "StorageFile":
        """Build an unbound store from text-format content."""
        return cls(load_tree(parse_text(text)), config=config)

    @classmethod
    def from_bytes(cls, data: bytes, config: StorageConfig | None = None) -> "StorageFile":
        """Build an unbound store from binary-format content."""
        resolved_config = config or StorageConfig()
        records = decode_records(data, resolved_config.encoding)
        return cls(load_tree(records), config=resolved_config, storage_format="binary")

    @classmethod
    def from_records(
        cls,
        records: Iterable[RawRecord],
        config: StorageConfig | None = None,
    ) -> "StorageFile":
        """Build an unbound store from records in document order."""
        return cls(load_tree(records), config=config)

    @property
    def path(self) -> Path | None:
        return self._path

    @property
    def storage_format(self) -> StorageFormat:
        return self._format

    @property
    def tree(self) -> EntryTree:
        return self._tree

    def get(self, key: str) -> str | None:
        """Return the value at ``key``, or None if missing or value-less."""
        index = self._tree.resolve(key)
        if index is None:
            return None
        return self._tree.node(index).value

    def set(self, key: str, value: str) -> None:
        """Set the value at ``key``, creating missing entries on the way.

        Raises:
            StorageKeyError: If the key is malformed.
            StorageValueError: If the value contains a quote or line break.
        """
        _validate_value(key, value)
        index = cast(int, self._tree.resolve(key, create=True))
        self._tree.node(index).value = value

    def contains(self, key: str) -> bool:
        """Return whether an entry exists at ``key``, with or without a value."""
        return self._tree.resolve(key) is not None

    def __contains__(self, key: object) -> bool:
        return isinstance(key, str) and self.contains(key)

    def comments(self, key: str) -> tuple[str, ...]:
        """Return the comment lines attached to ``key``; empty if missing."""
        index = self._tree.resolve(key)
        if index is None:
            return ()
        return self._tree.node(index).comments

    def keys(self) -> list[str]:
        """Return the global key of every entry in document order."""
        return [self._tree.global_key(index) for _, index in self._tree.walk()]

    def __len__(self) -> int:
        return len(self._tree)

    def to_records(self) -> list[RawRecord]:
        return flatten_tree(self._tree)

    def to_text(self) -> str:
        """Return the store in the text format, as :meth:`save` writes it."""
        return render_text(self._tree)

    def to_bytes(self) -> bytes:
        return encode_records(self.to_records(), self._config.encoding)

    def __str__(self) -> str:
        return self.to_text()

    def save(self, path: str | Path | None = None) -> Path:
        """Write the store to ``path`` or to the bound path.

        The bound format is used for the bound path; explicit paths are
        always written as text.

        Returns:
            The path written.

        Raises:
            StorageIOError: If no path is known or writing fails.
        """
        if path is None:
            target = self._require_path()
            if self._format == "binary":
                return self.save_binary(target)
        else:
            target = Path(path).expanduser()
        try:
            target.write_text(self.to_text(), encoding=self._config.encoding)
        except (OSError, UnicodeEncodeError) as error:
            raise StorageIOError(
                f"Failed to save storage file at {target}: {error}."
            ) from error
        _LOGGER.info("storage_file_saved", path=str(target), storage_format="text")
        return target

    def save_binary(self, path: str | Path | None = None) -> Path:
        """Write the store in the binary format.

        Raises:
            StorageIOError: If no path is known or writing fails.
        """
        target = self._require_path() if path is None else Path(path).expanduser()
        try:
            target.write_bytes(self.to_bytes())
        except (OSError, UnicodeEncodeError) as error:
            raise StorageIOError(
                f"Failed to save binary storage file at {target}: {error}."
            ) from error
        _LOGGER.info("storage_file_saved", path=str(target), storage_format="binary")
        return target

    def _require_path(self) -> Path:
        if self._path is None:
            raise StorageIOError(
                "Cannot save storage file: no path was given and the store is not "
                "bound to a file. Pass a path to save()."
            )
        return self._path


def load(
    path: str | Path,
    config: StorageConfig | None = None,
    storage_format: StorageFormat = "text",
) -> StorageFile:
    """Load a storage file from disk; see :meth:`StorageFile.load`."""
    return StorageFile.load(path, config, storage_format)


def _create_empty_file(file_path: Path) -> None:
    try:
        file_path.parent.mkdir(parents=True, exist_ok=True)
        file_path.touch()
    except OSError as error:
        raise StorageIOError(
            f"Failed to create storage file at {file_path}: {error}."
        ) from error


def _validate_value(key: str, value: str) -> None:
    if KEY_VALUE_ENCLOSURE in value or NEW_LINE in value or "\r" in value:
        raise StorageValueError(
            f"Invalid value for '{key}': values must not contain quotes or line breaks."
        )
