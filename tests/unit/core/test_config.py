"""Unit tests for core config parsing."""

from __future__ import annotations

import os

import pytest

from core.config import StorageConfig, parse_encoding
from core.errors import StorageConfigError


def test_from_env_uses_defaults() -> None:
    """Config should fall back to UTF-8, no creation, and info logs."""
    config = StorageConfig.from_env()

    assert config == StorageConfig(encoding="utf-8", create_missing=False, log_level="info")


def test_from_env_normalizes_encoding(monkeypatch: pytest.MonkeyPatch) -> None:
    """Codec aliases should resolve to their canonical name."""
    monkeypatch.setenv("KVTREE_ENCODING", "Latin-1")

    config = StorageConfig.from_env()

    assert config.encoding == "iso8859-1"


def test_from_env_raises_for_unknown_encoding(monkeypatch: pytest.MonkeyPatch) -> None:
    """Unknown codecs should fail with the variable name."""
    monkeypatch.setenv("KVTREE_ENCODING", "not-a-codec")

    with pytest.raises(StorageConfigError) as error_info:
        StorageConfig.from_env()

    assert "KVTREE_ENCODING" in str(error_info.value)


@pytest.mark.parametrize("raw_value", ["1", "true", "YES", " on "])
def test_from_env_reads_create_missing_flag(
    monkeypatch: pytest.MonkeyPatch,
    raw_value: str,
) -> None:
    """Truthy flag spellings should enable file creation."""
    monkeypatch.setenv("KVTREE_CREATE_MISSING", raw_value)

    assert StorageConfig.from_env().create_missing is True


def test_from_env_raises_for_invalid_flag(monkeypatch: pytest.MonkeyPatch) -> None:
    """Unrecognized flag values should fail."""
    monkeypatch.setenv("KVTREE_CREATE_MISSING", "maybe")

    with pytest.raises(StorageConfigError):
        StorageConfig.from_env()

    assert os.getenv("KVTREE_CREATE_MISSING") == "maybe"


def test_from_env_raises_for_invalid_log_level(monkeypatch: pytest.MonkeyPatch) -> None:
    """Only supported log levels should be accepted."""
    monkeypatch.setenv("KVTREE_LOG_LEVEL", "verbose")

    with pytest.raises(StorageConfigError) as error_info:
        StorageConfig.from_env()

    assert "debug, info, warning, error" in str(error_info.value)


def test_parse_encoding_strips_whitespace() -> None:
    """Surrounding whitespace should not affect codec lookup."""
    assert parse_encoding(" utf8 ") == "utf-8"
