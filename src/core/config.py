"""Runtime configuration model for kvtree.

This module owns all environment variable parsing and validation.
Other modules consume a typed config object instead of raw env reads.
"""

from __future__ import annotations

import codecs
import os
from dataclasses import dataclass

from core.constants import (
    DEFAULT_LOG_LEVEL,
    DEFAULT_TEXT_ENCODING,
    FALSE_FLAG_VALUES,
    SUPPORTED_LOG_LEVELS,
    TRUE_FLAG_VALUES,
)
from core.errors import StorageConfigError


@dataclass(frozen=True)
class StorageConfig:
    """Validated runtime configuration.

    Attributes:
        encoding: Text encoding for storage files and binary string fields.
        create_missing: Whether loading a missing file yields an empty store.
        log_level: Minimum structured log level.
    """

    encoding: str = DEFAULT_TEXT_ENCODING
    create_missing: bool = False
    log_level: str = DEFAULT_LOG_LEVEL

    @classmethod
    def from_env(cls) -> "StorageConfig":
        """Build config from process environment variables.

        Returns:
            A validated config object.

        Raises:
            StorageConfigError: If environment values are invalid.
        """
        encoding = parse_encoding(os.getenv("KVTREE_ENCODING", DEFAULT_TEXT_ENCODING))
        create_missing = _parse_flag(
            "KVTREE_CREATE_MISSING",
            os.getenv("KVTREE_CREATE_MISSING", "false"),
        )
        log_level = _parse_log_level(os.getenv("KVTREE_LOG_LEVEL", DEFAULT_LOG_LEVEL))
        return cls(encoding=encoding, create_missing=create_missing, log_level=log_level)


def parse_encoding(raw_value: str) -> str:
    """Validate a codec name.

    Args:
        raw_value: Raw string from environment.

    Returns:
        Canonical codec name.

    Raises:
        StorageConfigError: If the codec is unknown.
    """
    try:
        return codecs.lookup(raw_value.strip()).name
    except LookupError as error:
        raise StorageConfigError(
            "Invalid KVTREE_ENCODING value: "
            f"unknown codec '{raw_value}'. "
            "Set KVTREE_ENCODING to a Python codec name such as utf-8."
        ) from error


def _parse_flag(env_name: str, raw_value: str) -> bool:
    """Parse a boolean environment flag.

    Args:
        env_name: Variable name used in error messages.
        raw_value: Raw string from environment.

    Returns:
        Parsed boolean.

    Raises:
        StorageConfigError: If the value is not a recognized flag.
    """
    normalized_value = raw_value.strip().lower()
    if normalized_value in TRUE_FLAG_VALUES:
        return True
    if normalized_value in FALSE_FLAG_VALUES:
        return False
    raise StorageConfigError(
        f"Invalid {env_name} value: expected one of "
        f"{', '.join(TRUE_FLAG_VALUES + FALSE_FLAG_VALUES[:-1])}, got '{raw_value}'."
    )


def _parse_log_level(raw_value: str) -> str:
    normalized_value = raw_value.strip().lower()
    if normalized_value not in SUPPORTED_LOG_LEVELS:
        raise StorageConfigError(
            f"Invalid KVTREE_LOG_LEVEL value '{raw_value}'. "
            f"Use one of: {', '.join(SUPPORTED_LOG_LEVELS)}."
        )
    return normalized_value
