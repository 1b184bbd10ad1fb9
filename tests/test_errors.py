"""Test lexical error tokens, LexError positions, and context snippets."""

import pytest

from dtdx import tokenize
from dtdx.errors import LexError
from dtdx.scanner import TokenType, outer_state
from dtdx.tokens import ERROR, Token


class TestErrorTokens:
    def test_unexpected_character(self, scan):
        tokens = scan("a !")
        assert tokens[-1] == Token(
            ERROR, "Unexpected unicode character (U+0021 '!') in outer context."
        )

    def test_runaway_quote(self, scan):
        tokens = scan("attr1=\"one attr2='2' attr3=", outer_state)
        assert tokens == [
            Token(TokenType.IDENTIFIER, "attr1"),
            Token(TokenType.EQUALS, "="),
            Token(ERROR, "Runaway quote: one attr2='2' attr3="),
        ]

    def test_runaway_quote_at_newline(self, scan):
        tokens = scan("a='open\nb='x'")
        assert tokens[-1] == Token(ERROR, "Runaway quote: open")

    def test_error_is_final_token(self, scan):
        tokens = scan("a\nb ! c\nd")
        assert [t.type for t in tokens].count(ERROR) == 1
        assert tokens[-1].type == ERROR

    def test_carriage_return_is_unexpected(self, scan):
        tokens = scan("a\r\nb")
        assert "U+000D" in tokens[-1].value


class TestErrorPositions:
    def test_unexpected_character_position(self):
        with pytest.raises(LexError) as exc_info:
            tokenize("abc $ rest")
        err = exc_info.value
        assert err.position.line == 1
        assert err.position.column == 5

    def test_error_on_second_line(self):
        with pytest.raises(LexError) as exc_info:
            tokenize("line one\n..")
        err = exc_info.value
        assert err.position.line == 2
        assert err.position.column == 1
        assert err.message == "Malformed reference ellipsis: .."

    def test_runaway_quote_points_at_value(self):
        with pytest.raises(LexError) as exc_info:
            tokenize('x="abc')
        assert exc_info.value.position.column == 4

    def test_dedent_error_position(self):
        with pytest.raises(LexError, match="Inconsistent dedent") as exc_info:
            tokenize("a\n    b\n  c")
        assert exc_info.value.position.line == 3


class TestErrorFormatting:
    def test_format_contains_line(self):
        with pytest.raises(LexError) as exc_info:
            tokenize("some text $ more text")
        formatted = exc_info.value.format()
        assert "some text $ more text" in formatted

    def test_format_contains_carets(self):
        with pytest.raises(LexError) as exc_info:
            tokenize("....")
        formatted = exc_info.value.format()
        assert formatted.splitlines()[-1].endswith("^^^^")

    def test_format_contains_error_prefix(self):
        with pytest.raises(LexError) as exc_info:
            tokenize("$")
        assert exc_info.value.format().startswith("error:")

    def test_format_contains_position(self):
        with pytest.raises(LexError) as exc_info:
            tokenize("$")
        assert "1:1" in exc_info.value.format()

    def test_format_with_custom_filename(self):
        with pytest.raises(LexError) as exc_info:
            tokenize("$", filename="schema.dtdx")
        assert "schema.dtdx" in exc_info.value.format()

    def test_from_token_without_span(self):
        err = LexError.from_token(Token(ERROR, "boom"), "src")
        assert err.position.line == 1
        assert "boom" in str(err)
