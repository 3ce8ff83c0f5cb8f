"""Binary encoding of flat record streams.

Each record is laid out as::

    type      1 byte   0 = no value, 1 = value
    depth     int
    key       string
    value     string   only when type == 1
    comments  int count, then count strings

Integers are 4-byte little-endian signed values. Strings are a byte
length followed by the encoded bytes, with no terminator. The stream has
no header or record count; it ends where the input ends.
"""

from __future__ import annotations

import struct
from pathlib import Path
from typing import Iterable

from core.constants import (
    BYTE_TYPE_NO_VALUE,
    BYTE_TYPE_VALUE,
    DEFAULT_TEXT_ENCODING,
    INT_SIZE_BYTES,
    INT_STRUCT_FORMAT,
    PATH_SEPARATOR,
)
from core.errors import StorageIOError
from core.logging_config import get_logger
from core.types import RawRecord

_LOGGER = get_logger(__name__)
_INT_STRUCT = struct.Struct(INT_STRUCT_FORMAT)


def encode_records(
    records: Iterable[RawRecord],
    encoding: str = DEFAULT_TEXT_ENCODING,
) -> bytes:
    """Serialize records into the binary layout.

    Args:
        records: Records in document order.
        encoding: Codec for key, value, and comment strings.

    Returns:
        Encoded byte string.
    """
    buffer = bytearray()
    for record in records:
        record_type = BYTE_TYPE_VALUE if record.value is not None else BYTE_TYPE_NO_VALUE
        buffer.append(record_type)
        buffer += _INT_STRUCT.pack(record.depth)
        _write_string(buffer, record.key, encoding)
        if record.value is not None:
            _write_string(buffer, record.value, encoding)
        buffer += _INT_STRUCT.pack(len(record.comments))
        for comment in record.comments:
            _write_string(buffer, comment, encoding)
    return bytes(buffer)


def decode_records(
    data: bytes,
    encoding: str = DEFAULT_TEXT_ENCODING,
) -> list[RawRecord]:
    """Deserialize records from the binary layout.

    The input is trusted to come from :func:`encode_records`; only
    truncation, unreadable type bytes, and keys the text format cannot
    hold are detected.

    Args:
        data: Encoded byte string.
        encoding: Codec for key, value, and comment strings.

    Returns:
        Records in stream order. ``line`` holds the one-based ordinal.

    Raises:
        StorageIOError: If the stream is truncated or malformed.
    """
    reader = _ByteReader(data)
    records: list[RawRecord] = []
    while not reader.at_end():
        ordinal = len(records) + 1
        record_type = reader.read_exact(1)[0]
        if record_type not in (BYTE_TYPE_NO_VALUE, BYTE_TYPE_VALUE):
            raise StorageIOError(
                f"Failed to decode binary record #{ordinal}: unknown type byte "
                f"{record_type} at offset {reader.offset - 1}. "
                "Regenerate the file from its text form."
            )
        depth = reader.read_int()
        key_offset = reader.offset
        key = reader.read_string(encoding)
        if not key or PATH_SEPARATOR in key:
            raise StorageIOError(
                f"Failed to decode binary record #{ordinal}: invalid key {key!r} at offset "
                f"{key_offset}. Keys must be non-empty and must not contain '{PATH_SEPARATOR}'."
            )
        value = reader.read_string(encoding) if record_type == BYTE_TYPE_VALUE else None
        comment_count = reader.read_count()
        comments = tuple(reader.read_string(encoding) for _ in range(comment_count))
        records.append(
            RawRecord(depth=depth, key=key, value=value, comments=comments, line=ordinal)
        )
    _LOGGER.debug("binary_decoded", byte_count=len(data), record_count=len(records))
    return records


def write_binary_file(
    path: Path,
    records: Iterable[RawRecord],
    encoding: str = DEFAULT_TEXT_ENCODING,
) -> None:
    """Encode records and write them to a file.

    Raises:
        StorageIOError: If the file cannot be written.
    """
    payload = encode_records(records, encoding)
    try:
        path.write_bytes(payload)
    except OSError as error:
        raise StorageIOError(
            f"Failed to write binary storage file at {path}: {error}."
        ) from error


def read_binary_file(
    path: Path,
    encoding: str = DEFAULT_TEXT_ENCODING,
) -> list[RawRecord]:
    """Read and decode a binary storage file.

    Raises:
        StorageIOError: If the file is missing, unreadable, or truncated.
    """
    try:
        payload = path.read_bytes()
    except OSError as error:
        raise StorageIOError(
            f"Failed to read binary storage file at {path}: {error}. "
            "Provide an existing file."
        ) from error
    return decode_records(payload, encoding)


def _write_string(buffer: bytearray, text: str, encoding: str) -> None:
    encoded = text.encode(encoding)
    buffer += _INT_STRUCT.pack(len(encoded))
    buffer += encoded


class _ByteReader:
    """Sequential reader over an immutable byte string."""

    def __init__(self, data: bytes) -> None:
        self._data = memoryview(data)
        self.offset = 0

    def at_end(self) -> bool:
        return self.offset >= len(self._data)

    def read_exact(self, size: int) -> bytes:
        end = self.offset + size
        if end > len(self._data):
            raise StorageIOError(
                f"Binary storage data is truncated: needed {size} bytes at offset "
                f"{self.offset}, only {len(self._data) - self.offset} left."
            )
        chunk = bytes(self._data[self.offset:end])
        self.offset = end
        return chunk

    def read_int(self) -> int:
        (value,) = _INT_STRUCT.unpack(self.read_exact(INT_SIZE_BYTES))
        return int(value)

    def read_count(self) -> int:
        start = self.offset
        count = self.read_int()
        if count < 0:
            raise StorageIOError(
                f"Binary storage data is corrupt: negative length {count} at offset {start}."
            )
        return count

    def read_string(self, encoding: str) -> str:
        raw = self.read_exact(self.read_count())
        try:
            return raw.decode(encoding)
        except UnicodeDecodeError as error:
            raise StorageIOError(
                f"Binary storage string at offset {self.offset - len(raw)} "
                f"is not valid {encoding}: {error.reason}."
            ) from error
