"""kvtree CLI entry points.

This module exposes commands for checking, querying, editing, and
converting storage files. It maps argparse commands onto the facade.
"""

from __future__ import annotations

import argparse
from dataclasses import replace
from typing import Any, Sequence

from cli.run_spec_command import add_run_spec_command, run_run_spec_command
from core.config import StorageConfig, parse_encoding
from core.constants import SUPPORTED_LOG_LEVELS
from core.errors import StorageError
from core.logging_config import configure_logging
from core.types import StorageFormat
from store.file_operations import check_file, compile_file, decompile_file
from store.storage_file import StorageFile


def build_parser() -> argparse.ArgumentParser:
    """Build the top-level CLI parser.

    Returns:
        Configured argument parser.
    """
    parser = argparse.ArgumentParser(prog="kvtree", description="Storage file CLI")
    parser.add_argument("--encoding", help="Override KVTREE_ENCODING for this command")
    parser.add_argument(
        "--log-level",
        choices=SUPPORTED_LOG_LEVELS,
        help="Override KVTREE_LOG_LEVEL for this command",
    )
    subparsers = parser.add_subparsers(dest="command", required=True)
    _add_check_command(subparsers)
    _add_get_command(subparsers)
    _add_set_command(subparsers)
    _add_keys_command(subparsers)
    _add_convert_command(subparsers, "compile", "Convert a text storage file to binary")
    _add_convert_command(subparsers, "decompile", "Convert a binary storage file to text")
    add_run_spec_command(subparsers)
    return parser


def main(argv: Sequence[str] | None = None) -> int:
    """Run the kvtree CLI.

    Args:
        argv: Optional argument vector.

    Returns:
        Process exit code.
    """
    parser = build_parser()
    args = parser.parse_args(argv)
    try:
        config = _build_config(args)
        configure_logging(config.log_level)
        return _dispatch(parser, config, args)
    except StorageError as error:
        print(f"error={error}")
        return 1


def _dispatch(
    parser: argparse.ArgumentParser,
    config: StorageConfig,
    args: argparse.Namespace,
) -> int:
    if args.command == "check":
        entry_count = check_file(args.file, config, _storage_format(args))
        print(f"ok entries={entry_count}")
        return 0
    if args.command == "get":
        return _run_get_command(config, args)
    if args.command == "set":
        return _run_set_command(config, args)
    if args.command == "keys":
        for key in StorageFile.load(args.file, config, _storage_format(args)).keys():
            print(key)
        return 0
    if args.command == "compile":
        compile_file(args.source, args.destination, config)
        return 0
    if args.command == "decompile":
        decompile_file(args.source, args.destination, config)
        return 0
    if args.command == "run-spec":
        return run_run_spec_command(config, args)
    parser.error(f"Unsupported command: {args.command}")
    return 2


def _build_config(args: argparse.Namespace) -> StorageConfig:
    """Build config from the environment with optional CLI overrides.

    Args:
        args: Parsed CLI args.

    Returns:
        Configured runtime config.
    """
    config = StorageConfig.from_env()
    if args.encoding:
        config = replace(config, encoding=parse_encoding(args.encoding))
    if args.log_level:
        config = replace(config, log_level=args.log_level)
    return config


def _run_get_command(config: StorageConfig, args: argparse.Namespace) -> int:
    """Handle get command.

    Args:
        config: Runtime config.
        args: Parsed CLI args.

    Returns:
        Exit code; 1 when the key is missing or has no value.
    """
    value = StorageFile.load(args.file, config, _storage_format(args)).get(args.key)
    if value is None:
        print(f"missing={args.key}")
        return 1
    print(value)
    return 0


def _run_set_command(config: StorageConfig, args: argparse.Namespace) -> int:
    """Handle set command, creating the file when it does not exist yet.

    Args:
        config: Runtime config.
        args: Parsed CLI args.

    Returns:
        Exit code.
    """
    store = StorageFile.load(
        args.file,
        replace(config, create_missing=True),
        _storage_format(args),
    )
    store.set(args.key, args.value)
    store.save()
    return 0


def _storage_format(args: argparse.Namespace) -> StorageFormat:
    return "binary" if args.binary else "text"


def _add_file_arguments(parser: argparse.ArgumentParser) -> None:
    parser.add_argument("file", help="Storage file path")
    parser.add_argument("--binary", action="store_true", help="Read the file as binary")


def _add_check_command(subparsers: Any) -> None:
    """Register check subcommand."""
    parser = subparsers.add_parser("check", help="Validate a storage file")
    _add_file_arguments(parser)


def _add_get_command(subparsers: Any) -> None:
    """Register get subcommand."""
    parser = subparsers.add_parser("get", help="Print the value stored at a dotted key")
    _add_file_arguments(parser)
    parser.add_argument("key", help="Dotted key, e.g. server.port")


def _add_set_command(subparsers: Any) -> None:
    """Register set subcommand."""
    parser = subparsers.add_parser("set", help="Set a value and save the file in place")
    _add_file_arguments(parser)
    parser.add_argument("key", help="Dotted key, e.g. server.port")
    parser.add_argument("value", help="New value")


def _add_keys_command(subparsers: Any) -> None:
    """Register keys subcommand."""
    parser = subparsers.add_parser("keys", help="List every dotted key in document order")
    _add_file_arguments(parser)


def _add_convert_command(subparsers: Any, name: str, help_text: str) -> None:
    parser = subparsers.add_parser(name, help=help_text)
    parser.add_argument("source", help="Input file")
    parser.add_argument("destination", help="Output file")
