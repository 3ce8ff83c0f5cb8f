"""Type-safe field parsing helpers for run-spec execution.

This module centralizes primitive parsing so run-spec executors can stay
concise and produce consistent validation errors across CLI and SDK flows.
"""

from __future__ import annotations

from typing import Mapping

from core.errors import StorageRunSpecError


def required_string(args: Mapping[str, object], field_name: str) -> str:
    """Read a required string field from a run-spec step."""
    value = optional_string(args, field_name)
    if value is None:
        raise StorageRunSpecError(f"Run-spec step is missing required field '{field_name}'.")
    return value


def optional_string(args: Mapping[str, object], field_name: str) -> str | None:
    """Read an optional string field from a run-spec step."""
    value = args.get(field_name)
    if value is None:
        return None
    if isinstance(value, str):
        stripped = value.strip()
        return stripped if stripped else None
    raise StorageRunSpecError(f"Run-spec field '{field_name}' must be a string when provided.")


def raw_string(args: Mapping[str, object], field_name: str) -> str:
    """Read a required string field without trimming; empty strings are kept."""
    value = args.get(field_name)
    if isinstance(value, str):
        return value
    if value is None:
        raise StorageRunSpecError(f"Run-spec step is missing required field '{field_name}'.")
    raise StorageRunSpecError(
        f"Run-spec field '{field_name}' must be a string. Quote numbers and booleans."
    )


def optional_bool(
    args: Mapping[str, object],
    field_name: str,
    default_value: bool,
) -> bool:
    """Read an optional boolean field from a run-spec step."""
    value = args.get(field_name)
    if value is None:
        return default_value
    if isinstance(value, bool):
        return value
    raise StorageRunSpecError(f"Run-spec field '{field_name}' must be true/false.")
