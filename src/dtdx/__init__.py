"""DTDX tokenizer: a state-machine lexer for the DTDX document-model grammar."""

from __future__ import annotations

from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from dtdx.tokens import Token

__version__ = "0.1.0"


def tokenize(source: str, filename: str = "input.dtdx", buffer_size: int = 2) -> list[Token]:
    """Scan DTDX source and return every token, ending with the EOF token.

    Raises LexError if the scanner reports a lexical error.
    """
    from dtdx.errors import LexError
    from dtdx.scanner import new_lexer

    tokens: list[Token] = []
    with new_lexer(source, buffer_size=buffer_size, source_file=filename).start() as lx:
        for tok in lx:
            if tok.is_error:
                raise LexError.from_token(tok, source, filename)
            tokens.append(tok)
    return tokens
