"""Recursive-descent parser for the storage-file text format.

Each non-blank, non-comment line is one entry:

    <tabs>"key"                 grouping entry without a value
    <tabs>"key" = "value"       entry with a value

Leading tabs give the depth. Comment lines start with '#' in column 1 and
attach, in order, to the next entry. Every grammar rule receives the line
cursor and an immutable record draft and returns the updated draft, so
the parse state is never shared across lines.
"""

from __future__ import annotations

from dataclasses import dataclass, replace
from pathlib import Path
from typing import Iterable

from core.constants import (
    COMMENT_PREFIX,
    DEFAULT_TEXT_ENCODING,
    DEPTH_MARKER,
    INLINE_WHITESPACE,
    KEY_VALUE_ENCLOSURE,
    KEY_VALUE_SEPARATOR,
    NEW_LINE,
    PATH_SEPARATOR,
)
from core.errors import (
    EmptyKeyError,
    InvalidKeyCharacterError,
    InvalidKeyEnclosureError,
    InvalidSeparatorError,
    InvalidTrailingCharacterError,
    StorageIOError,
    StorageParseError,
)
from core.logging_config import get_logger
from core.types import RawRecord
from parse.line_cursor import LineCursor

_LOGGER = get_logger(__name__)


@dataclass(frozen=True)
class _RecordDraft:
    """Record fields accumulated while one line is being parsed."""

    depth: int = 0
    key: str = ""
    value: str | None = None


def parse_text(text: str) -> list[RawRecord]:
    """Parse a complete storage-file document.

    Args:
        text: Document text.

    Returns:
        Records in document order.

    Raises:
        StorageParseError: On the first syntax error.
    """
    return parse_lines(text.split(NEW_LINE))


def parse_file(path: Path, encoding: str = DEFAULT_TEXT_ENCODING) -> list[RawRecord]:
    """Parse a storage file from disk.

    Lines end at a line feed only, exactly as in :func:`parse_text`. A
    carriage return right before the line feed is dropped; any other
    carriage return is line content.

    Args:
        path: Text file path.
        encoding: File encoding.

    Returns:
        Records in document order.

    Raises:
        StorageIOError: If the file cannot be read.
        StorageParseError: On the first syntax error.
    """
    try:
        with path.open("r", encoding=encoding, newline=NEW_LINE) as source:
            return parse_lines(source)
    except (OSError, UnicodeDecodeError) as error:
        raise StorageIOError(
            f"Failed to read storage file at {path}: {error}. "
            "Check the path, permissions, and KVTREE_ENCODING."
        ) from error


def parse_lines(lines: Iterable[str]) -> list[RawRecord]:
    """Parse an iterable of lines into flat records.

    Args:
        lines: Source lines; trailing line terminators are ignored.

    Returns:
        Records in document order, each carrying its buffered comments.

    Raises:
        StorageParseError: On the first syntax error. Nothing is returned
            for lines before the failing one.
    """
    records: list[RawRecord] = []
    comment_buffer: list[str] = []
    line_count = 0
    for line_number, raw_line in enumerate(lines, 1):
        line_count = line_number
        line_text = raw_line.rstrip("\r\n")
        if not line_text.strip():
            continue
        if line_text.startswith(COMMENT_PREFIX):
            comment_buffer.append(line_text[len(COMMENT_PREFIX):])
            continue
        draft = _parse_entry_line(line_text, line_number)
        records.append(
            RawRecord(
                depth=draft.depth,
                key=draft.key,
                value=draft.value,
                comments=tuple(comment_buffer),
                line=line_number,
            )
        )
        comment_buffer.clear()
    if comment_buffer:
        _LOGGER.debug("trailing_comments_dropped", comment_count=len(comment_buffer))
    _LOGGER.debug("text_parsed", line_count=line_count, record_count=len(records))
    return records


def _parse_entry_line(line_text: str, line_number: int) -> _RecordDraft:
    """Parse one entry line, trying the value form before the bare form."""
    draft = _value_entry(LineCursor(line_text), line_number)
    if draft is None:
        draft = _no_value_entry(LineCursor(line_text), line_number)
    return draft


def _value_entry(cursor: LineCursor, line_number: int) -> _RecordDraft | None:
    """Parse ``tabs key ws '=' ws value ws EOL``.

    Returns:
        The completed draft, or None when the line ends where the separator
        was expected, meaning the entry has no value.
    """
    draft = _entry_start(cursor, _RecordDraft(), line_number)
    _skip_inline_whitespace(cursor)
    if cursor.at_end():
        return None
    _key_value_separator(cursor, line_number)
    _skip_inline_whitespace(cursor)
    draft = _value(cursor, draft, line_number)
    _skip_inline_whitespace(cursor)
    _line_end(cursor, line_number)
    return draft


def _no_value_entry(cursor: LineCursor, line_number: int) -> _RecordDraft:
    """Parse ``tabs key ws EOL``."""
    draft = _entry_start(cursor, _RecordDraft(), line_number)
    _skip_inline_whitespace(cursor)
    _line_end(cursor, line_number)
    return draft


def _entry_start(cursor: LineCursor, draft: _RecordDraft, line_number: int) -> _RecordDraft:
    draft = _leading_tabs(cursor, draft)
    return _key(cursor, draft, line_number)


def _leading_tabs(cursor: LineCursor, draft: _RecordDraft) -> _RecordDraft:
    depth = 0
    while cursor.peek() == DEPTH_MARKER:
        cursor.pop()
        depth += 1
    return replace(draft, depth=depth)


def _key(cursor: LineCursor, draft: _RecordDraft, line_number: int) -> _RecordDraft:
    _enclosure(cursor, line_number)
    draft = _key_body(cursor, draft, line_number)
    _enclosure(cursor, line_number)
    return draft


def _key_body(cursor: LineCursor, draft: _RecordDraft, line_number: int) -> _RecordDraft:
    characters: list[str] = []
    while cursor.peek() is not None and cursor.peek() != KEY_VALUE_ENCLOSURE:
        if cursor.peek() == PATH_SEPARATOR:
            raise _positioned(InvalidKeyCharacterError, cursor, line_number)
        characters.append(cursor.pop())
    if not characters and cursor.peek() == KEY_VALUE_ENCLOSURE:
        raise _positioned(EmptyKeyError, cursor, line_number)
    return replace(draft, key="".join(characters))


def _value(cursor: LineCursor, draft: _RecordDraft, line_number: int) -> _RecordDraft:
    _enclosure(cursor, line_number)
    characters: list[str] = []
    while cursor.peek() is not None and cursor.peek() != KEY_VALUE_ENCLOSURE:
        characters.append(cursor.pop())
    _enclosure(cursor, line_number)
    return replace(draft, value="".join(characters))


def _enclosure(cursor: LineCursor, line_number: int) -> None:
    if cursor.peek() != KEY_VALUE_ENCLOSURE:
        raise _positioned(InvalidKeyEnclosureError, cursor, line_number)
    cursor.pop()


def _key_value_separator(cursor: LineCursor, line_number: int) -> None:
    if cursor.peek() != KEY_VALUE_SEPARATOR:
        raise _positioned(InvalidSeparatorError, cursor, line_number)
    cursor.pop()


def _line_end(cursor: LineCursor, line_number: int) -> None:
    if not cursor.at_end():
        raise _positioned(InvalidTrailingCharacterError, cursor, line_number)


def _skip_inline_whitespace(cursor: LineCursor) -> None:
    while cursor.peek() in INLINE_WHITESPACE:
        cursor.pop()


def _positioned(
    error_type: type[StorageParseError],
    cursor: LineCursor,
    line_number: int,
) -> StorageParseError:
    """Build a parse error at the cursor's current position."""
    return error_type(line_number, cursor.column(), cursor.peek())
