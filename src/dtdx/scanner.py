"""DTDX scanner: token types and lexical states for the DTDX grammar.

Like Python, indentation matters. newline_state is the initial state: it
scans the leading whitespace of each non-blank line and emits an indent or
dedent token(s) when the indentation increases or decreases, then hands
off to outer_state.

In outer_state whitespace is ignored and single-character tokens are
emitted directly. The state changes to

- newline_state       after a newline
- directive_state     after a # followed by an uppercase letter
- comment_state       after any other #
- double_quote_state  after "
- single_quote_state  after '
- reference_state     after .
- identifier_state    after a letter, _ or :

Every state returns to outer_state once its token is emitted. Errors stop
the scan.
"""

from __future__ import annotations

from enum import IntEnum, auto

from dtdx.cursor import EOF
from dtdx.lexer import Lexer, StateFn
from dtdx.tokens import TokenNames

TAB_WIDTH = 4
UPPERCASE = "ABCDEFGHIJKLMNOPQRSTUVWXYZ"


class TokenType(IntEnum):
    INDENT = auto()  # increased whitespace at start of line
    DEDENT = auto()  # decreased whitespace at start of line
    EQUALS = auto()  # =
    OPEN = auto()  # (
    CLOSE = auto()  # )
    SEPARATOR = auto()  # , or | or &
    MULTIPLICITY = auto()  # * or + or ?
    IDENTIFIER = auto()  # name
    QUOTE = auto()  # 'value' or "value"
    REFERENCE = auto()  # ...
    DIRECTIVE = auto()  # #VALUE
    COMMENT = auto()  # # text
    EOF = auto()  # end of input


TOKEN_NAMES = TokenNames(
    {
        TokenType.INDENT: "indentTok",
        TokenType.DEDENT: "dedentTok",
        TokenType.EQUALS: "equalsTok",
        TokenType.OPEN: "openTok",
        TokenType.CLOSE: "closeTok",
        TokenType.SEPARATOR: "separatorTok",
        TokenType.MULTIPLICITY: "multiplicityTok",
        TokenType.IDENTIFIER: "identifierTok",
        TokenType.QUOTE: "quoteTok",
        TokenType.REFERENCE: "referenceTok",
        TokenType.DIRECTIVE: "directiveTok",
        TokenType.COMMENT: "commentTok",
        TokenType.EOF: "eofTok",
    }
)

_SINGLE_CHAR = {
    "=": TokenType.EQUALS,
    "(": TokenType.OPEN,
    ")": TokenType.CLOSE,
    ",": TokenType.SEPARATOR,
    "|": TokenType.SEPARATOR,
    "&": TokenType.SEPARATOR,
    "*": TokenType.MULTIPLICITY,
    "+": TokenType.MULTIPLICITY,
    "?": TokenType.MULTIPLICITY,
}


class IndentStack(list[int]):
    """Indentation widths seen so far, strictly increasing from the base 0."""

    def __init__(self) -> None:
        super().__init__([0])

    @property
    def top(self) -> int:
        return self[-1]


DtdxLexer = Lexer[IndentStack]


def new_lexer(
    source: str,
    start_state: StateFn[IndentStack] | None = None,
    *,
    buffer_size: int = 2,
    source_file: str | None = None,
) -> DtdxLexer:
    """Return an unstarted DTDX lexer, beginning in newline_state by default."""
    return Lexer(
        source,
        start_state if start_state is not None else newline_state,
        IndentStack(),
        names=TOKEN_NAMES,
        buffer_size=buffer_size,
        source_file=source_file,
    )


def outer_state(lx: DtdxLexer) -> StateFn[IndentStack] | None:
    """Dispatch on the next character, emitting single-character tokens."""
    while True:
        ch = lx.next()
        if ch in (" ", "\t"):
            lx.ignore()
        elif ch == "\n":
            return newline_state
        elif ch in _SINGLE_CHAR:
            lx.emit(_SINGLE_CHAR[ch])
        elif ch == '"':
            return double_quote_state
        elif ch == "'":
            return single_quote_state
        elif ch == ".":
            return reference_state
        elif ch == "#":
            if _member(lx.peek(), UPPERCASE):
                return directive_state
            return comment_state
        elif ch == EOF:
            # Close any open indentation levels before the final token.
            if update_indent(lx) is None:
                return None
            lx.emit(TokenType.EOF)
            return None
        elif ch.isalpha() or ch in "_:":
            return identifier_state
        else:
            return lx.errorf(
                "Unexpected unicode character (U+%04X '%s') in outer context.", ord(ch), ch
            )


def newline_state(lx: DtdxLexer) -> StateFn[IndentStack] | None:
    """Measure the indentation of the next non-blank line."""
    while True:
        lx.ignore()  # drop the newline (if any)
        lx.accept_run(" \t")
        if lx.looking_at("\n"):
            lx.next()
            continue
        return update_indent(lx)


def update_indent(lx: DtdxLexer) -> StateFn[IndentStack] | None:
    """Compare the pending whitespace against the indent stack."""
    indents = lx.state
    size = measure(lx.current())
    if size == indents.top:
        lx.ignore()
    elif size > indents.top:
        lx.emit(TokenType.INDENT)
        indents.append(size)
    else:
        while size < indents.top:
            lx.emit(TokenType.DEDENT)
            indents.pop()
        if indents.top != size:
            return lx.errorf(
                "Inconsistent dedent. Expecting %d but found %d.", indents.top, size
            )
    return outer_state


def measure(whitespace: str) -> int:
    """Return the column width of leading whitespace, with tab stops every 4."""
    width = 0
    for ch in whitespace:
        if ch == " ":
            width += 1
        elif ch == "\t":
            width += TAB_WIDTH - width % TAB_WIDTH
        else:
            raise ValueError(f"bad character in indent: {ch!r}")
    return width


def double_quote_state(lx: DtdxLexer) -> StateFn[IndentStack] | None:
    return _quote(lx, '"')


def single_quote_state(lx: DtdxLexer) -> StateFn[IndentStack] | None:
    return _quote(lx, "'")


def _quote(lx: DtdxLexer, delimiter: str) -> StateFn[IndentStack] | None:
    lx.ignore()  # drop the opening quote
    lx.accept_to(delimiter)
    if lx.looking_at(delimiter):
        lx.emit(TokenType.QUOTE)
        lx.next()
        lx.ignore()  # drop the closing quote
        return outer_state
    return lx.errorf("Runaway quote: %s", lx.current())


def directive_state(lx: DtdxLexer) -> StateFn[IndentStack] | None:
    """Scan #UPPERCASE directives."""
    lx.accept_run(UPPERCASE)
    lx.emit(TokenType.DIRECTIVE)
    return outer_state


def comment_state(lx: DtdxLexer) -> StateFn[IndentStack] | None:
    """Scan a # comment up to the end of the line."""
    lx.accept_to("")
    lx.emit(TokenType.COMMENT)
    return outer_state


def identifier_state(lx: DtdxLexer) -> StateFn[IndentStack] | None:
    while True:
        ch = lx.next()
        if not is_name_char(ch):
            lx.backup()
            break
    lx.emit(TokenType.IDENTIFIER)
    return outer_state


def reference_state(lx: DtdxLexer) -> StateFn[IndentStack] | None:
    """Scan a reference ellipsis (...)."""
    lx.accept_run(".")
    if lx.current() == "...":
        lx.emit(TokenType.REFERENCE)
        return outer_state
    return lx.errorf("Malformed reference ellipsis: %s", lx.current())


def is_name_char(ch: str) -> bool:
    """Return True if ch may continue an identifier."""
    return ch != EOF and (ch == "_" or ch.isalpha() or ch.isdecimal())


def _member(ch: str, chars: str) -> bool:
    return ch != EOF and ch in chars
