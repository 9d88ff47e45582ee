"""Unit tests for tomltree.lexer — tokenization of TOML source text."""
from __future__ import annotations

import pytest

from tomltree.grammar.tokens import TokenType
from tomltree.lexer.lexer import Lexer, tokenize, unescape
from tomltree.tree.nodes import Position


# ---------------------------------------------------------------------------
# Helpers
# ---------------------------------------------------------------------------


def types_of(source: str) -> list[TokenType]:
    """Return just the token types, excluding EOF."""
    return [t.type for t in tokenize(source) if t.type is not TokenType.EOF]


def values_of(source: str) -> list[str]:
    return [t.value for t in tokenize(source) if t.type is not TokenType.EOF]


def error_of(source: str) -> str:
    tokens = tokenize(source)
    assert tokens[-1].type is TokenType.ERROR
    return tokens[-1].value


# ---------------------------------------------------------------------------
# Empty and whitespace-only inputs
# ---------------------------------------------------------------------------


class TestEmptyInputs:
    def test_empty_string_produces_only_eof(self) -> None:
        tokens = tokenize("")
        assert len(tokens) == 1
        assert tokens[0].type is TokenType.EOF

    def test_comments_and_blank_lines_are_skipped(self) -> None:
        assert types_of("# comment\n\n   \n\t# another\n") == []

    def test_lexer_class_matches_function(self) -> None:
        assert Lexer("a = 1").tokenize() == tokenize("a = 1")


# ---------------------------------------------------------------------------
# Statements
# ---------------------------------------------------------------------------


class TestStatements:
    def test_simple_assignment(self) -> None:
        assert types_of('title = "x"') == [TokenType.KEY, TokenType.EQUAL, TokenType.STRING]
        assert values_of('title = "x"') == ["title", "=", "x"]

    def test_table_header(self) -> None:
        assert types_of("[a.b]") == [
            TokenType.LEFT_BRACKET,
            TokenType.KEY_GROUP,
            TokenType.RIGHT_BRACKET,
        ]
        assert values_of("[ a.b ]")[1] == "a.b"

    def test_table_array_header(self) -> None:
        assert types_of("[[a]]") == [
            TokenType.DOUBLE_LEFT_BRACKET,
            TokenType.KEY_GROUP_ARRAY,
            TokenType.DOUBLE_RIGHT_BRACKET,
        ]

    def test_dotted_and_quoted_keys_kept_raw(self) -> None:
        assert values_of('a."b.c" = 1')[0] == 'a."b.c"'
        assert values_of("'x=y' = 1")[0] == "'x=y'"

    def test_header_key_may_contain_brackets_in_quotes(self) -> None:
        assert values_of('["a]b"]')[1] == '"a]b"'

    def test_comment_after_value(self) -> None:
        assert types_of("a = 1 # trailing") == [
            TokenType.KEY,
            TokenType.EQUAL,
            TokenType.INTEGER,
        ]

    def test_positions_are_recorded(self) -> None:
        tokens = tokenize("a = 1\n  b = 2")
        keys = [t for t in tokens if t.type is TokenType.KEY]
        assert keys[0].position == Position(1, 1)
        assert keys[1].position == Position(2, 3)

    def test_eof_follows_last_token(self) -> None:
        assert tokenize("a = 1")[-1].type is TokenType.EOF


# ---------------------------------------------------------------------------
# Literals
# ---------------------------------------------------------------------------


class TestLiterals:
    @pytest.mark.parametrize("source, expected_type", [
        ("x = 42", TokenType.INTEGER),
        ("x = -17", TokenType.INTEGER),
        ("x = 1_000", TokenType.INTEGER),
        ("x = _100", TokenType.INTEGER),
        ("x = 0xDEAD_beef", TokenType.INTEGER),
        ("x = 0o755", TokenType.INTEGER),
        ("x = 0b1101", TokenType.INTEGER),
        ("x = 3.14", TokenType.FLOAT),
        ("x = -2e-3", TokenType.FLOAT),
        ("x = 6.626e34", TokenType.FLOAT),
        ("x = true", TokenType.TRUE),
        ("x = false", TokenType.FALSE),
        ("x = inf", TokenType.INF),
        ("x = -inf", TokenType.INF),
        ("x = +inf", TokenType.INF),
        ("x = nan", TokenType.NAN),
        ("x = 1979-05-27T07:32:00Z", TokenType.DATE),
        ("x = 1979-05-27T00:32:00.999999-07:00", TokenType.DATE),
    ])
    def test_value_token_type(self, source: str, expected_type: TokenType) -> None:
        assert types_of(source)[-1] is expected_type

    def test_number_text_keeps_separators(self) -> None:
        assert values_of("x = 1_000")[-1] == "1_000"

    def test_inf_keeps_sign(self) -> None:
        assert values_of("x = -inf")[-1] == "-inf"

    def test_datetime_with_space_separator(self) -> None:
        assert values_of("x = 1979-05-27 07:32:00Z")[-1] == "1979-05-27 07:32:00Z"

    def test_basic_string_escapes_decoded(self) -> None:
        assert values_of(r'x = "tab\there \"q\" \u00e9"')[-1] == 'tab\there "q" é'

    def test_literal_string_is_verbatim(self) -> None:
        assert values_of(r"x = 'C:\Users\nodejs'")[-1] == r"C:\Users\nodejs"

    def test_multiline_basic_string_trims_first_newline(self) -> None:
        assert values_of('x = """\nRoses\nViolets"""')[-1] == "Roses\nViolets"

    def test_multiline_basic_string_line_ending_backslash(self) -> None:
        source = 'x = """\nThe quick \\\n    brown fox"""'
        assert values_of(source)[-1] == "The quick brown fox"

    def test_multiline_literal_string(self) -> None:
        assert values_of("x = '''\nraw \\n text'''")[-1] == "raw \\n text"

    def test_multiline_string_with_quotes_before_delimiter(self) -> None:
        assert values_of('x = """a""""')[-1] == 'a"'


# ---------------------------------------------------------------------------
# Arrays and inline tables
# ---------------------------------------------------------------------------


class TestCompoundValues:
    def test_array_tokens(self) -> None:
        assert types_of("x = [1, 2]") == [
            TokenType.KEY,
            TokenType.EQUAL,
            TokenType.LEFT_BRACKET,
            TokenType.INTEGER,
            TokenType.COMMA,
            TokenType.INTEGER,
            TokenType.RIGHT_BRACKET,
        ]

    def test_array_may_span_lines(self) -> None:
        source = "x = [\n  1, # one\n  2,\n]\ny = 3"
        assert types_of(source).count(TokenType.KEY) == 2

    def test_inline_table_tokens(self) -> None:
        assert types_of("t = {a = 1, b.c = 2}") == [
            TokenType.KEY,
            TokenType.EQUAL,
            TokenType.LEFT_CURLY_BRACE,
            TokenType.KEY,
            TokenType.EQUAL,
            TokenType.INTEGER,
            TokenType.COMMA,
            TokenType.KEY,
            TokenType.EQUAL,
            TokenType.INTEGER,
            TokenType.RIGHT_CURLY_BRACE,
        ]

    def test_empty_inline_table(self) -> None:
        assert types_of("t = {}")[-2:] == [
            TokenType.LEFT_CURLY_BRACE,
            TokenType.RIGHT_CURLY_BRACE,
        ]

    def test_inline_tables_in_array(self) -> None:
        types = types_of("x = [{a = 1}, {a = 2}]")
        assert types.count(TokenType.LEFT_CURLY_BRACE) == 2
        assert types[-1] is TokenType.RIGHT_BRACKET


# ---------------------------------------------------------------------------
# Errors
# ---------------------------------------------------------------------------


class TestLexErrors:
    def test_error_token_ends_stream(self) -> None:
        tokens = tokenize('a = "open')
        assert tokens[-1].type is TokenType.ERROR
        assert all(t.type is not TokenType.EOF for t in tokens)

    def test_unterminated_string(self) -> None:
        assert "unterminated string" in error_of('a = "open\nb = 1')

    def test_invalid_escape(self) -> None:
        assert "invalid escape" in error_of(r'a = "\q"')

    def test_leading_zero(self) -> None:
        assert "leading zeros" in error_of("a = 007")

    def test_unknown_bare_value(self) -> None:
        assert "invalid value" in error_of("a = yes")

    def test_two_statements_on_one_line(self) -> None:
        assert "expected end of line" in error_of("a = 1 b = 2")

    def test_missing_equal(self) -> None:
        assert "expected '='" in error_of("a 1")

    def test_unterminated_table_key(self) -> None:
        assert "unterminated table key" in error_of("[a\nb = 1")

    def test_unclosed_table_array_header(self) -> None:
        assert "]]" in error_of("[[a]\n")

    def test_error_position(self) -> None:
        tokens = tokenize('a = 1\nb = "x')
        assert tokens[-1].position == Position(2, 5)


class TestUnescape:
    def test_all_simple_escapes(self) -> None:
        assert unescape(r"\b\t\n\f\r\"\\") == '\b\t\n\f\r"\\'

    def test_long_unicode_escape(self) -> None:
        assert unescape(r"\U0001F600") == "\U0001F600"

    def test_surrogate_rejected(self) -> None:
        with pytest.raises(ValueError):
            unescape(r"\uD800")

    def test_truncated_escape_rejected(self) -> None:
        with pytest.raises(ValueError):
            unescape("abc\\")
