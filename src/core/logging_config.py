"""Structured logging configuration.

This module initializes structlog with a stable JSON event format.
Events are written to the current stderr so command output stays clean.
"""

from __future__ import annotations

import logging
import sys
from typing import Any

import structlog

from core.constants import DEFAULT_LOG_LEVEL

_CONFIGURED = False


def configure_logging(level_name: str = DEFAULT_LOG_LEVEL) -> None:
    """Configure structlog processors and minimum level.

    Args:
        level_name: Lower-case level name such as ``info``.
    """
    global _CONFIGURED
    level = logging.getLevelName(level_name.upper())
    if not isinstance(level, int):
        level = logging.INFO
    structlog.configure(
        processors=[
            structlog.processors.TimeStamper(fmt="iso"),
            structlog.processors.add_log_level,
            structlog.processors.JSONRenderer(),
        ],
        wrapper_class=structlog.make_filtering_bound_logger(level),
        logger_factory=_stderr_logger_factory,
        cache_logger_on_first_use=False,
    )
    _CONFIGURED = True


def get_logger(name: str) -> Any:
    """Return a module logger instance.

    Args:
        name: Logger name, usually __name__.

    Returns:
        A lazy structlog logger carrying the module name.
    """
    if not _CONFIGURED:
        configure_logging()
    return structlog.get_logger(name, logger_name=name)


def _stderr_logger_factory(*_args: object) -> structlog.PrintLogger:
    # Resolve sys.stderr per call so redirected streams are honored.
    return structlog.PrintLogger(file=sys.stderr)
