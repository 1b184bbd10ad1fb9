"""Code-point cursor over an immutable source string."""

from __future__ import annotations

from bisect import bisect_right

from dtdx.errors import CursorError
from dtdx.tokens import Position

# Pseudo code point returned by Cursor.next() at the end of the source.
# The empty string is never a member of a character set built by the
# accept helpers, and never equal to a real character.
EOF = ""


class Cursor:
    """Track the pending token window ``[token_start, position)`` over a source.

    State functions read with next/peek/accept*, step back with backup,
    and close the window with ignore (or the engine's emit).
    """

    def __init__(self, source: str) -> None:
        self.source = source
        self.token_start = 0
        self.position = 0
        self.at_eof = False
        self._line_starts: list[int] | None = None

    def next(self) -> str:
        """Return the next code point, or EOF once the source is exhausted."""
        if self.position >= len(self.source):
            if self.at_eof:
                raise CursorError("next() attempted to move past end of source")
            self.at_eof = True
            return EOF
        ch = self.source[self.position]
        self.position += 1
        return ch

    def backup(self) -> None:
        """Undo the last next(). Never back up past the last emit/ignore."""
        if self.at_eof:
            self.at_eof = False
            return
        if self.position <= self.token_start:
            raise CursorError("backup() attempted to move before token start")
        self.position -= 1

    def peek(self) -> str:
        ch = self.next()
        self.backup()
        return ch

    def accept(self, chars: str) -> bool:
        """Consume one code point if it appears in *chars*."""
        if _member(self.next(), chars):
            return True
        self.backup()
        return False

    def accept_run(self, chars: str) -> None:
        """Consume a maximal run of code points appearing in *chars*."""
        while _member(self.next(), chars):
            pass
        self.backup()

    def accept_to(self, chars: str) -> None:
        """Consume code points up to one in *chars*, a newline, NUL, or EOF."""
        stop = chars + "\n\0"
        while True:
            ch = self.next()
            if ch == EOF or ch in stop:
                break
        self.backup()

    def looking_at(self, prefix: str) -> bool:
        return self.source.startswith(prefix, self.position)

    def current(self) -> str:
        return self.source[self.token_start : self.position]

    def ignore(self) -> None:
        """Drop the pending text without emitting it."""
        self.token_start = self.position

    def position_at(self, offset: int) -> Position:
        """Return the 1-based line/column position of *offset*."""
        if self._line_starts is None:
            self._line_starts = [0]
            self._line_starts.extend(i + 1 for i, ch in enumerate(self.source) if ch == "\n")
        line = bisect_right(self._line_starts, offset)
        column = offset - self._line_starts[line - 1] + 1
        return Position(line, column, offset)


def _member(ch: str, chars: str) -> bool:
    return ch != EOF and ch in chars
