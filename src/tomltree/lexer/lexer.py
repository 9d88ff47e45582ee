"""TOML lexer: converts raw source text into a flat list of tokens.

The lexer is a single-pass character scanner driven by a small mode
switch.  What a character means depends on where it appears: ``[`` at the
start of a line opens a table header, while after ``=`` it opens an
array.  The mode tracks this, and a stack of open brackets tracks
whether newlines are significant (they are not inside arrays).

Produced token values:
    - keys carry their raw text (quotes and dots included); the parser
      splits them into segments;
    - strings carry their decoded contents;
    - numbers carry their literal text with ``_`` separators intact so
      the parser can validate separator placement.

The lexer never raises.  On the first problem it appends a single
``ERROR`` token whose value is the message and stops scanning; a clean
scan ends with an ``EOF`` token.
"""
from __future__ import annotations

import re
import string
from enum import Enum, auto
from typing import Final

from tomltree.grammar.tokens import Token, TokenType
from tomltree.tree.nodes import Position

# ---------------------------------------------------------------------------
# Constants
# ---------------------------------------------------------------------------

_ESCAPE_MAP: Final[dict[str, str]] = {
    "b": "\b",
    "t": "\t",
    "n": "\n",
    "f": "\f",
    "r": "\r",
    '"': '"',
    "\\": "\\",
}

_HEX_DIGITS: Final[re.Pattern[str]] = re.compile(r"[0-9A-Fa-f]+")
_NUMBER_CHARS: Final[frozenset[str]] = frozenset(
    string.ascii_letters + string.digits + "_+-.:"
)
_KEY_STOPS: Final[frozenset[str]] = frozenset("=[]{},#\n")

_DATE_ONLY: Final[re.Pattern[str]] = re.compile(r"\d{4}-\d{2}-\d{2}")
_HEX_INT: Final[re.Pattern[str]] = re.compile(r"0x[0-9A-Fa-f_]+")
_OCT_INT: Final[re.Pattern[str]] = re.compile(r"0o[0-7_]+")
_BIN_INT: Final[re.Pattern[str]] = re.compile(r"0b[01_]+")
_DEC_INT: Final[re.Pattern[str]] = re.compile(r"[+-]?[0-9_]+")
_FLOAT: Final[re.Pattern[str]] = re.compile(
    r"[+-]?[0-9_]+(?:\.[0-9_]+)?(?:[eE][+-]?[0-9_]+)?"
)
_LEADING_ZERO: Final[re.Pattern[str]] = re.compile(r"[+-]?0[0-9_]")

_WORDS: Final[dict[str, TokenType]] = {
    "true": TokenType.TRUE,
    "false": TokenType.FALSE,
    "inf": TokenType.INF,
    "nan": TokenType.NAN,
}


def unescape(body: str, multiline: bool = False) -> str:
    """Decode the escape sequences of a basic string body.

    Parameters
    ----------
    body:
        The text between the quotes.
    multiline:
        When True a backslash at the end of a line removes the newline
        and all whitespace that follows it.

    Raises
    ------
    ValueError
        On an unknown or truncated escape sequence.
    """
    out: list[str] = []
    i = 0
    n = len(body)
    while i < n:
        ch = body[i]
        if ch != "\\":
            out.append(ch)
            i += 1
            continue
        i += 1
        if i >= n:
            raise ValueError("unterminated escape sequence")
        esc = body[i]
        if esc in _ESCAPE_MAP:
            out.append(_ESCAPE_MAP[esc])
            i += 1
        elif esc in "uU":
            width = 4 if esc == "u" else 8
            digits = body[i + 1 : i + 1 + width]
            if len(digits) != width or not _HEX_DIGITS.fullmatch(digits):
                raise ValueError(f"invalid unicode escape \\{esc}{digits}")
            code = int(digits, 16)
            if code > 0x10FFFF or 0xD800 <= code <= 0xDFFF:
                raise ValueError(f"invalid unicode scalar \\{esc}{digits}")
            out.append(chr(code))
            i += 1 + width
        elif multiline and esc in " \t\r\n":
            j = i
            while j < n and body[j] in " \t":
                j += 1
            if j >= n or body[j] not in "\r\n":
                raise ValueError("invalid escape sequence \\ (space)")
            while j < n and body[j] in " \t\r\n":
                j += 1
            i = j
        else:
            raise ValueError(f"invalid escape sequence \\{esc}")
    return "".join(out)


class _LexMode(Enum):
    """Where the scanner is within a statement."""

    KEY = auto()         # start of a top-level line
    AFTER_KEY = auto()   # key scanned, ``=`` expected
    VALUE = auto()       # right-hand side or array element
    INLINE_KEY = auto()  # inside ``{}``: key, ``,`` or ``}``
    LINE_END = auto()    # statement complete


class _LexFailure(Exception):
    def __init__(self, message: str, position: Position) -> None:
        super().__init__(message)
        self.message = message
        self.position = position


class Lexer:
    """Single-pass TOML lexer.

    Parameters
    ----------
    source:
        The complete TOML document to tokenize.
    """

    __slots__ = (
        "_source",
        "_pos",
        "_line",
        "_col",
        "_tokens",
        "_token_line",
        "_token_col",
        "_mode",
        "_brackets",
    )

    def __init__(self, source: str) -> None:
        self._source: str = source
        self._pos: int = 0
        self._line: int = 1
        self._col: int = 1
        self._tokens: list[Token] = []
        self._token_line: int = 1
        self._token_col: int = 1
        self._mode: _LexMode = _LexMode.KEY
        self._brackets: list[str] = []

    # ------------------------------------------------------------------
    # Public API
    # ------------------------------------------------------------------

    def tokenize(self) -> list[Token]:
        """Scan the entire source and return the token list.

        Returns
        -------
        list[Token]
            Ordered tokens ending with ``EOF``, or with a single
            ``ERROR`` token when the source is lexically invalid.
        """
        try:
            while self._pos < len(self._source):
                self._scan_one()
        except _LexFailure as exc:
            self._tokens.append(Token(TokenType.ERROR, exc.message, exc.position))
            return self._tokens
        self._mark()
        self._emit(TokenType.EOF, "")
        return self._tokens

    # ------------------------------------------------------------------
    # Internal scanner
    # ------------------------------------------------------------------

    def _current(self) -> str:
        """Return the character at the current position without advancing."""
        return self._source[self._pos] if self._pos < len(self._source) else ""

    def _peek(self, offset: int = 1) -> str:
        """Return the character at ``pos + offset`` without advancing."""
        idx = self._pos + offset
        return self._source[idx] if idx < len(self._source) else ""

    def _advance(self) -> str:
        """Consume and return the current character, updating line/col."""
        ch = self._source[self._pos]
        self._pos += 1
        if ch == "\n":
            self._line += 1
            self._col = 1
        else:
            self._col += 1
        return ch

    def _mark(self) -> None:
        """Record the current location as the start of the next token."""
        self._token_line = self._line
        self._token_col = self._col

    def _emit(self, token_type: TokenType, value: str) -> None:
        self._tokens.append(
            Token(
                type=token_type,
                value=value,
                position=Position(self._token_line, self._token_col),
            )
        )

    def _fail(self, message: str) -> _LexFailure:
        return _LexFailure(message, Position(self._token_line, self._token_col))

    def _skip_blanks(self) -> None:
        while self._current() in (" ", "\t"):
            self._advance()

    def _after_value(self) -> None:
        if not self._brackets:
            self._mode = _LexMode.LINE_END
        elif self._brackets[-1] == "[":
            self._mode = _LexMode.VALUE
        else:
            self._mode = _LexMode.INLINE_KEY

    def _scan_one(self) -> None:
        """Scan exactly one token (or skip whitespace/comments)."""
        self._mark()
        ch = self._current()

        if ch in (" ", "\t", "\r"):
            self._advance()
            return

        if ch == "#":
            while self._pos < len(self._source) and self._current() != "\n":
                self._advance()
            return

        if ch == "\n":
            self._advance()
            if not self._brackets:
                self._mode = _LexMode.KEY
            return

        if self._mode is _LexMode.KEY:
            if ch == "[":
                self._scan_table_header()
            else:
                self._scan_key()
        elif self._mode is _LexMode.AFTER_KEY:
            if ch != "=":
                raise self._fail(f"expected '=' after key, found {ch!r}")
            self._advance()
            self._emit(TokenType.EQUAL, "=")
            self._mode = _LexMode.VALUE
        elif self._mode is _LexMode.VALUE:
            self._scan_value(ch)
        elif self._mode is _LexMode.INLINE_KEY:
            if ch == "}":
                self._close_bracket("{", TokenType.RIGHT_CURLY_BRACE)
            elif ch == ",":
                self._advance()
                self._emit(TokenType.COMMA, ",")
            else:
                self._scan_key()
        else:
            raise self._fail(f"expected end of line, found {ch!r}")

    # ------------------------------------------------------------------
    # Keys and table headers
    # ------------------------------------------------------------------

    def _read_key_text(self) -> str:
        """Consume raw key text up to the next structural character.

        Quoted segments are consumed whole so that dots, brackets and
        equal signs inside them are part of the key.  Whitespace may
        surround the dots; a second segment without a dot ends the key.
        """
        start = self._pos
        need_dot = False
        while self._pos < len(self._source):
            ch = self._current()
            if ch in _KEY_STOPS:
                break
            if ch in (" ", "\t"):
                self._advance()
                continue
            if ch == ".":
                need_dot = False
                self._advance()
                continue
            if need_dot:
                break
            if ch in ('"', "'"):
                self._read_quoted_key(ch)
            else:
                while self._current() and self._current() not in _KEY_STOPS and (
                    self._current() not in " \t.\"'"
                ):
                    self._advance()
            need_dot = True
        return self._source[start : self._pos].rstrip()

    def _read_quoted_key(self, quote: str) -> None:
        self._advance()
        while self._current() not in (quote, "\n", ""):
            if quote == '"' and self._current() == "\\":
                self._advance()
                if self._current() in ("\n", ""):
                    break
            self._advance()
        if self._current() != quote:
            raise self._fail("unterminated quoted key")
        self._advance()

    def _scan_key(self) -> None:
        raw = self._read_key_text()
        if not raw:
            raise self._fail(f"unexpected character {self._current()!r}")
        self._emit(TokenType.KEY, raw)
        self._mode = _LexMode.AFTER_KEY

    def _scan_table_header(self) -> None:
        """Scan ``[key]`` or ``[[key]]`` into three tokens."""
        self._advance()
        is_array = self._current() == "["
        if is_array:
            self._advance()
            self._emit(TokenType.DOUBLE_LEFT_BRACKET, "[[")
        else:
            self._emit(TokenType.LEFT_BRACKET, "[")

        self._skip_blanks()
        self._mark()
        raw = self._read_key_text()
        if self._current() != "]":
            raise self._fail("unterminated table key")
        if not raw:
            raise self._fail("empty table key")
        self._emit(TokenType.KEY_GROUP_ARRAY if is_array else TokenType.KEY_GROUP, raw)

        self._mark()
        self._advance()
        if is_array:
            if self._current() != "]":
                raise self._fail("expected ']]' to close table array key")
            self._advance()
            self._emit(TokenType.DOUBLE_RIGHT_BRACKET, "]]")
        else:
            self._emit(TokenType.RIGHT_BRACKET, "]")
        self._mode = _LexMode.LINE_END

    # ------------------------------------------------------------------
    # Values
    # ------------------------------------------------------------------

    def _close_bracket(self, opener: str, token_type: TokenType) -> None:
        closer = self._current()
        if not self._brackets or self._brackets[-1] != opener:
            raise self._fail(f"unexpected {closer!r}")
        self._advance()
        self._emit(token_type, closer)
        self._brackets.pop()
        self._after_value()

    def _scan_value(self, ch: str) -> None:
        if ch == "[":
            self._advance()
            self._emit(TokenType.LEFT_BRACKET, "[")
            self._brackets.append("[")
        elif ch == "]":
            self._close_bracket("[", TokenType.RIGHT_BRACKET)
        elif ch == "{":
            self._advance()
            self._emit(TokenType.LEFT_CURLY_BRACE, "{")
            self._brackets.append("{")
            self._mode = _LexMode.INLINE_KEY
        elif ch == "}":
            self._close_bracket("{", TokenType.RIGHT_CURLY_BRACE)
        elif ch == ",":
            if not self._brackets:
                raise self._fail("unexpected ','")
            self._advance()
            self._emit(TokenType.COMMA, ",")
            self._after_value()
        elif ch == "=":
            self._advance()
            self._emit(TokenType.EQUAL, "=")
        elif ch in ('"', "'"):
            self._scan_string(ch)
            self._after_value()
        elif ch in "+-" and self._source[self._pos + 1 : self._pos + 4] in ("inf", "nan"):
            text = self._source[self._pos : self._pos + 4]
            for _ in range(4):
                self._advance()
            self._emit(_WORDS[text[1:]], text)
            self._after_value()
        elif ch.isalpha():
            self._scan_word()
            self._after_value()
        elif ch in "0123456789+-_":
            self._scan_number_or_date()
            self._after_value()
        else:
            raise self._fail(f"unexpected character {ch!r}")

    def _scan_word(self) -> None:
        start = self._pos
        while self._current().isalpha():
            self._advance()
        word = self._source[start : self._pos]
        if word not in _WORDS:
            raise self._fail(f"invalid value {word!r}")
        self._emit(_WORDS[word], word)

    def _consume_number_chars(self) -> None:
        while self._current() and self._current() in _NUMBER_CHARS:
            self._advance()

    def _scan_number_or_date(self) -> None:
        start = self._pos
        self._consume_number_chars()
        text = self._source[start : self._pos]

        if _DATE_ONLY.match(text):
            # a space may separate the date from the time
            if _DATE_ONLY.fullmatch(text) and self._current() == " " and self._peek().isdigit():
                self._advance()
                self._consume_number_chars()
                text = self._source[start : self._pos]
            self._emit(TokenType.DATE, text)
            return

        if _HEX_INT.fullmatch(text) or _OCT_INT.fullmatch(text) or _BIN_INT.fullmatch(text):
            self._emit(TokenType.INTEGER, text)
        elif _DEC_INT.fullmatch(text):
            if _LEADING_ZERO.match(text):
                raise self._fail(f"leading zeros are not allowed: {text!r}")
            self._emit(TokenType.INTEGER, text)
        elif _FLOAT.fullmatch(text):
            if _LEADING_ZERO.match(text):
                raise self._fail(f"leading zeros are not allowed: {text!r}")
            self._emit(TokenType.FLOAT, text)
        else:
            raise self._fail(f"invalid number {text!r}")

    def _scan_string(self, quote: str) -> None:
        """Consume a basic, literal or multi-line string literal."""
        multiline = self._source.startswith(quote * 3, self._pos)
        if multiline:
            for _ in range(3):
                self._advance()
            # a newline right after the opening delimiter is trimmed
            if self._current() == "\n":
                self._advance()
            elif self._current() == "\r" and self._peek() == "\n":
                self._advance()
                self._advance()
            body = self._read_string_body(quote, multiline=True)
            for _ in range(3):
                self._advance()
        else:
            self._advance()
            body = self._read_string_body(quote, multiline=False)
            self._advance()

        if quote == "'":
            self._emit(TokenType.STRING, body)
            return
        try:
            value = unescape(body, multiline=multiline)
        except ValueError as exc:
            raise self._fail(str(exc)) from exc
        self._emit(TokenType.STRING, value)

    def _read_string_body(self, quote: str, multiline: bool) -> str:
        """Consume up to (not including) the closing delimiter."""
        basic = quote == '"'
        closer = quote * 3 if multiline else quote
        start = self._pos
        while True:
            ch = self._current()
            if ch == "":
                raise self._fail("unterminated string")
            if ch == "\n" and not multiline:
                raise self._fail("unterminated string")
            if basic and ch == "\\":
                self._advance()
                if self._current() == "":
                    raise self._fail("unterminated string")
                self._advance()
                continue
            if self._source.startswith(closer, self._pos):
                if multiline:
                    # up to two quotes directly before the delimiter belong to the body
                    extra = 0
                    while extra < 2 and self._source.startswith(quote * 4, self._pos):
                        self._advance()
                        extra += 1
                return self._source[start : self._pos]
            self._advance()


# ---------------------------------------------------------------------------
# Module-level convenience function
# ---------------------------------------------------------------------------


def tokenize(source: str) -> list[Token]:
    """Tokenize a TOML document and return the complete token list.

    Parameters
    ----------
    source:
        TOML source text.

    Returns
    -------
    list[Token]
        All tokens terminated by ``EOF``, or by a single ``ERROR`` token
        when the source is lexically invalid.

    Example
    -------
    ::

        from tomltree.lexer import tokenize
        tokens = tokenize('title = "TOML"')
    """
    return Lexer(source).tokenize()
