"""Shared test fixtures and helpers."""

from __future__ import annotations

import pytest

from dtdx import tokenize
from dtdx.lexer import StateFn
from dtdx.scanner import IndentStack, TokenType, new_lexer
from dtdx.tokens import Token


@pytest.fixture
def lex():
    """Return a helper that tokenizes source and returns tokens (excluding EOF)."""

    def _lex(source: str) -> list[Token]:
        tokens = tokenize(source)
        # Strip trailing EOF for convenience
        return [t for t in tokens if t.type != TokenType.EOF]

    return _lex


@pytest.fixture
def scan():
    """Return a helper that drains a DTDX lexer, keeping EOF and error tokens."""

    def _scan(source: str, start_state: StateFn[IndentStack] | None = None) -> list[Token]:
        with new_lexer(source, start_state).start() as lx:
            return list(lx)

    return _scan


def assert_types(tokens: list[Token], expected: list[int]) -> None:
    """Assert that the token types match the expected list."""
    actual = [t.type for t in tokens]
    assert actual == expected, f"Expected {expected}, got {actual}"


def assert_values(tokens: list[Token], expected: list[str]) -> None:
    """Assert that the token values match the expected list."""
    actual = [t.value for t in tokens]
    assert actual == expected, f"Expected {expected}, got {actual}"


def find_tokens(tokens: list[Token], tt: int) -> list[Token]:
    """Return all tokens of the given type."""
    return [t for t in tokens if t.type == tt]
