"""Shared run-spec execution engine for CLI and SDK workflows.

This module maps validated run-spec steps to storage-file operations so
different entry points execute one declarative batch path without drift.
Steps that address the same file share one in-memory store for the run.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from pathlib import Path

from core.config import StorageConfig
from core.errors import StorageRunSpecError
from core.logging_config import get_logger
from core.run_spec import RunSpec, RunSpecStep, load_run_spec
from core.run_spec_fields import optional_bool, optional_string, raw_string, required_string
from core.types import StorageFormat
from store.file_operations import compile_file, decompile_file
from store.storage_file import StorageFile

_LOGGER = get_logger(__name__)


@dataclass
class RunSpecExecutionContext:
    """In-memory context used to execute run-spec steps."""

    config: StorageConfig
    default_file: str | None
    default_binary: bool
    stores: dict[tuple[Path, StorageFormat], StorageFile] = field(default_factory=dict)


def execute_run_spec_file(spec_file: str, config: StorageConfig) -> tuple[str, ...]:
    """Load and execute a run-spec file, returning printable output lines."""
    spec = load_run_spec(spec_file)
    return execute_run_spec(spec, config)


def execute_run_spec(spec: RunSpec, config: StorageConfig) -> tuple[str, ...]:
    """Execute a parsed run-spec object and return output lines."""
    context = RunSpecExecutionContext(
        config=config,
        default_file=spec.defaults.file,
        default_binary=spec.defaults.binary,
    )
    output_lines: list[str] = []
    for step_number, step in enumerate(spec.steps, 1):
        output_lines.extend(_execute_step(context, step))
        _LOGGER.debug("run_spec_step_executed", step=step_number, command=step.command)
    return tuple(output_lines)


def _execute_step(context: RunSpecExecutionContext, step: RunSpecStep) -> tuple[str, ...]:
    if step.command == "check":
        return (f"ok entries={len(_store(context, step))}",)
    if step.command == "get":
        return (_execute_get_step(context, step),)
    if step.command == "set":
        return _execute_set_step(context, step)
    if step.command == "keys":
        return tuple(_store(context, step).keys())
    if step.command == "compile":
        return (_execute_compile_step(context, step),)
    if step.command == "decompile":
        return (_execute_decompile_step(context, step),)
    raise StorageRunSpecError(f"Unsupported run-spec command '{step.command}'.")


def _execute_get_step(context: RunSpecExecutionContext, step: RunSpecStep) -> str:
    key = required_string(step.args, "key")
    value = _store(context, step).get(key)
    if value is not None:
        return value
    if "default" in step.args:
        return raw_string(step.args, "default")
    raise StorageRunSpecError(
        f"Run-spec get step found no value for '{key}'. Add a 'default' or set the key first."
    )


def _execute_set_step(context: RunSpecExecutionContext, step: RunSpecStep) -> tuple[str, ...]:
    store = _store(context, step)
    store.set(required_string(step.args, "key"), raw_string(step.args, "value"))
    store.save()
    return ()


def _execute_compile_step(context: RunSpecExecutionContext, step: RunSpecStep) -> str:
    source = optional_string(step.args, "source") or _resolve_file(context, step)
    destination = required_string(step.args, "destination")
    compile_file(source, destination, context.config)
    return destination


def _execute_decompile_step(context: RunSpecExecutionContext, step: RunSpecStep) -> str:
    source = optional_string(step.args, "source") or _resolve_file(context, step)
    destination = required_string(step.args, "destination")
    decompile_file(source, destination, context.config)
    return destination


def _store(context: RunSpecExecutionContext, step: RunSpecStep) -> StorageFile:
    """Return the shared store for the step's file, loading it on first use."""
    file_path = Path(_resolve_file(context, step)).expanduser().resolve()
    binary = optional_bool(step.args, "binary", default_value=context.default_binary)
    storage_format: StorageFormat = "binary" if binary else "text"
    cache_key = (file_path, storage_format)
    if cache_key not in context.stores:
        context.stores[cache_key] = StorageFile.load(file_path, context.config, storage_format)
    return context.stores[cache_key]


def _resolve_file(context: RunSpecExecutionContext, step: RunSpecStep) -> str:
    file_path = optional_string(step.args, "file") or context.default_file
    if file_path is None:
        raise StorageRunSpecError(
            f"Run-spec step '{step.command}' requires 'file' or defaults.file."
        )
    return file_path
