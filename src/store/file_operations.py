"""File-level operations shared by the CLI and run-spec execution.

Every operation validates the full record stream, including the tree
rules, before anything is written, so a failing conversion leaves
the destination untouched.
"""

from __future__ import annotations

from pathlib import Path

from codec.binary_codec import read_binary_file, write_binary_file
from core.config import StorageConfig
from core.errors import StorageIOError
from core.logging_config import get_logger
from core.types import StorageFormat
from parse.text_parser import parse_file
from store.storage_file import StorageFile
from tree.text_writer import format_records
from tree.tree_loader import load_tree

_LOGGER = get_logger(__name__)


def check_file(path: str | Path, config: StorageConfig, storage_format: StorageFormat) -> int:
    """Parse and load a storage file without keeping it.

    Returns:
        Number of entries in the file.

    Raises:
        StorageError: On the first I/O, syntax, or structural error.
    """
    return len(StorageFile.load(path, config, storage_format))


def compile_file(source: str | Path, destination: str | Path, config: StorageConfig) -> int:
    """Convert a text storage file into the binary format.

    Returns:
        Number of records written.
    """
    source_path = _existing_file(source)
    records = parse_file(source_path, config.encoding)
    load_tree(records)
    destination_path = Path(destination).expanduser()
    write_binary_file(destination_path, records, config.encoding)
    _LOGGER.info(
        "storage_file_compiled",
        source=str(source_path),
        destination=str(destination_path),
        record_count=len(records),
    )
    return len(records)


def decompile_file(source: str | Path, destination: str | Path, config: StorageConfig) -> int:
    """Convert a binary storage file into the text format.

    Returns:
        Number of records written.
    """
    source_path = _existing_file(source)
    records = read_binary_file(source_path, config.encoding)
    load_tree(records)
    destination_path = Path(destination).expanduser()
    try:
        destination_path.write_text(format_records(records), encoding=config.encoding)
    except (OSError, UnicodeEncodeError) as error:
        raise StorageIOError(
            f"Failed to write storage file at {destination_path}: {error}."
        ) from error
    _LOGGER.info(
        "storage_file_decompiled",
        source=str(source_path),
        destination=str(destination_path),
        record_count=len(records),
    )
    return len(records)


def _existing_file(path: str | Path) -> Path:
    file_path = Path(path).expanduser()
    if not file_path.is_file():
        raise StorageIOError(
            f"Failed to read storage file at {file_path}: file does not exist. "
            "Provide an existing file."
        )
    return file_path
