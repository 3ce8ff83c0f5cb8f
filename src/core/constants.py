"""Core constants used across kvtree modules.

This module centralizes reserved format characters and defaults.
Keeping values here avoids magic literals in parser and codec logic.
"""

from __future__ import annotations

COMMENT_PREFIX = "#"
PATH_SEPARATOR = "."
KEY_VALUE_SEPARATOR = "="
KEY_VALUE_ENCLOSURE = '"'
DEPTH_MARKER = "\t"
INLINE_WHITESPACE = (" ", "\t")
NEW_LINE = "\n"
ROOT_DEPTH = -1
BYTE_TYPE_NO_VALUE = 0
BYTE_TYPE_VALUE = 1
INT_SIZE_BYTES = 4
INT_STRUCT_FORMAT = "<i"
DEFAULT_TEXT_ENCODING = "utf-8"
DEFAULT_LOG_LEVEL = "info"
SUPPORTED_LOG_LEVELS = ("debug", "info", "warning", "error")
TRUE_FLAG_VALUES = ("1", "true", "yes", "on")
FALSE_FLAG_VALUES = ("0", "false", "no", "off", "")
