"""Per-line character cursor used by the text grammar."""

from __future__ import annotations


class LineCursor:
    """FIFO view over the characters of one line.

    The cursor never moves backwards. Grammar alternatives that need to
    re-read a line start again from a fresh cursor.
    """

    def __init__(self, text: str) -> None:
        self._text = text
        self._position = 0

    @property
    def text(self) -> str:
        """Return the full line text."""
        return self._text

    def peek(self) -> str | None:
        """Return the next character without consuming it, or None at end."""
        if self._position >= len(self._text):
            return None
        return self._text[self._position]

    def pop(self) -> str:
        """Consume and return the next character.

        Raises:
            IndexError: If the cursor is already at end of line.
        """
        if self._position >= len(self._text):
            raise IndexError("pop from exhausted line cursor")
        character = self._text[self._position]
        self._position += 1
        return character

    def remaining(self) -> int:
        """Return how many characters are still unconsumed."""
        return len(self._text) - self._position

    def at_end(self) -> bool:
        """Return whether every character has been consumed."""
        return self._position >= len(self._text)

    def column(self) -> int:
        """Return the one-based column of the character under inspection."""
        return len(self._text) - self.remaining() + 1
