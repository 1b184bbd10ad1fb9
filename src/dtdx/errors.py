"""Error types with formatted source context."""

from __future__ import annotations

from typing import TYPE_CHECKING

from dtdx.tokens import Position, Span

if TYPE_CHECKING:
    from dtdx.tokens import Token


class CursorError(RuntimeError):
    """A state function broke the cursor contract (a bug, not bad input)."""


class LexError(Exception):
    """A lexical error reported by the scanner, with position and source context."""

    def __init__(
        self,
        message: str,
        position: Position,
        source: str,
        span: Span | None = None,
        filename: str = "input.dtdx",
    ) -> None:
        self.message = message
        self.position = position
        self.source = source
        self.span = span
        self.filename = filename
        super().__init__(self.format(filename))

    @classmethod
    def from_token(cls, token: Token, source: str, filename: str = "input.dtdx") -> LexError:
        """Build the error carried in-band by an ERROR token."""
        if token.span is not None:
            return cls(token.value, token.span.start, source, token.span, filename)
        return cls(token.value, Position(1, 1, 0), source, None, filename)

    def format(self, filename: str | None = None) -> str:
        if filename is None:
            filename = self.filename
        lines = self.source.splitlines(keepends=True)
        line_idx = self.position.line - 1
        col = self.position.column

        # Build the source line (strip trailing newline for display)
        if 0 <= line_idx < len(lines):
            source_line = lines[line_idx].rstrip("\n").rstrip("\r")
        else:
            source_line = ""

        # Underline the span when it stays on one line, otherwise to end of line
        if self.span is not None and self.span.end.line == self.position.line:
            underline_len = max(1, self.span.end.column - col)
        else:
            underline_len = max(1, len(source_line) - col + 1)

        pad = " " * (col - 1)
        carets = "^" * underline_len

        line_num = str(self.position.line)
        gutter_width = len(line_num) + 1

        blank_gutter = " " * gutter_width + "|"
        line_gutter = f"{line_num:>{gutter_width - 1}} |"

        return (
            f"error: {self.message}\n"
            f"{' ' * gutter_width}--> {filename}:{self.position.line}:{col}\n"
            f"{blank_gutter}\n"
            f"{line_gutter} {source_line}\n"
            f"{blank_gutter} {pad}{carets}"
        )
