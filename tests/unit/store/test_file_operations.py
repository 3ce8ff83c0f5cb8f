"""Unit tests for file-level check and conversion operations."""

from __future__ import annotations

from pathlib import Path

import pytest

from core.config import StorageConfig
from core.errors import DuplicateKeyError, StorageIOError
from store.file_operations import check_file, compile_file, decompile_file
from tests.fixture_paths import fixture_path


def test_check_file_counts_entries() -> None:
    """A valid file should report its entry count."""
    assert check_file(fixture_path("storage/valid.kvt"), StorageConfig(), "text") == 4


def test_compile_then_decompile_preserves_content(tmp_path: Path) -> None:
    """Converting to binary and back should keep every entry and comment."""
    binary_path = tmp_path / "valid.bin"
    text_path = tmp_path / "valid.kvt"
    config = StorageConfig()

    compile_file(fixture_path("storage/valid.kvt"), binary_path, config)
    decompile_file(binary_path, text_path, config)

    assert text_path.read_text(encoding="utf-8") == (
        '# Server settings\n"server"\n\t"host"="localhost"\n'
        '# Default port\n\t"port"="8080"\n"name"="demo"\n'
    )


def test_compile_returns_record_count(tmp_path: Path) -> None:
    """Compile reports how many records it wrote."""
    count = compile_file(fixture_path("storage/valid.kvt"), tmp_path / "out.bin", StorageConfig())

    assert count == 4


def test_compile_invalid_tree_writes_nothing(tmp_path: Path) -> None:
    """Structural errors should stop the conversion before writing."""
    destination = tmp_path / "out.bin"

    with pytest.raises(DuplicateKeyError):
        compile_file(fixture_path("storage/duplicate_key.kvt"), destination, StorageConfig())

    assert not destination.exists()


def test_decompile_missing_source_raises(tmp_path: Path) -> None:
    """Missing conversion sources are I/O errors."""
    with pytest.raises(StorageIOError) as error_info:
        decompile_file(tmp_path / "missing.bin", tmp_path / "out.kvt", StorageConfig())

    assert "does not exist" in str(error_info.value)
