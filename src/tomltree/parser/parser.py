"""TOML parser: a token-driven state machine feeding a ``TreeBuilder``.

The top level of a TOML document is a flat sequence of statements, so
the parser is an explicit state machine.  Each state handler consumes
the tokens of one statement and returns the tag of the next state:

    START        dispatch on the next token
    GROUP_ARRAY  ``[[ key ]]``
    GROUP        ``[ key ]``
    ASSIGN       ``key = value``
    DONE         end of the token stream

Right-hand sides nest (arrays inside arrays, inline tables inside
arrays) and are parsed by ordinary recursive descent.

The parser never mutates the tree.  Every structural event is reported
to the builder, which enforces the tree invariants.  The first problem
found anywhere aborts the parse with a ``ParseError``; nothing built so
far is returned.
"""
from __future__ import annotations

import logging
import math
import re
from datetime import datetime, timezone
from enum import Enum, auto
from typing import Callable, Final, Sequence

from tomltree.builder.builder import TreeBuilder
from tomltree.errors import ErrorKind, ParseError
from tomltree.grammar.tokens import Token, TokenType
from tomltree.lexer.lexer import tokenize
from tomltree.parser.keys import split_key
from tomltree.tree.nodes import Position, Scalar, Tree, ValueKind

logger = logging.getLogger(__name__)

# ---------------------------------------------------------------------------
# Literal validation
# ---------------------------------------------------------------------------

_NUMBER_UNDERSCORE_INVALID: Final[re.Pattern[str]] = re.compile(r"([^\d]_|_[^\d])|_$|^_")
_HEX_NUMBER_UNDERSCORE_INVALID: Final[re.Pattern[str]] = re.compile(
    r"(^0x_)|([^\da-fA-F]_|_[^\da-fA-F])|_$|^_"
)
_RFC3339: Final[re.Pattern[str]] = re.compile(
    r"(?P<date>\d{4}-\d{2}-\d{2})[Tt ](?P<time>\d{2}:\d{2}:\d{2})"
    r"(?:\.(?P<fraction>\d+))?(?P<offset>[Zz]|[+-]\d{2}:\d{2})"
)
_INT64_MIN: Final[int] = -(2**63)
_INT64_MAX: Final[int] = 2**63 - 1
_BASES: Final[dict[str, int]] = {"x": 16, "o": 8, "b": 2}

_LITERAL_KINDS: Final[dict[TokenType, ValueKind]] = {
    TokenType.STRING: ValueKind.STRING,
    TokenType.TRUE: ValueKind.BOOLEAN,
    TokenType.FALSE: ValueKind.BOOLEAN,
}


def parse_integer(text: str) -> int:
    """Convert an integer literal to an ``int``.

    ``_`` separators must sit between two digits.  ``0x``, ``0o`` and
    ``0b`` prefixes select base 16, 8 and 2.  The result must fit in a
    signed 64-bit integer.

    Raises
    ------
    ValueError
        On misplaced separators, invalid digits or overflow.
    """
    cleaned = text.replace("_", "")
    if len(cleaned) >= 3 and cleaned[0] == "0" and cleaned[1] in _BASES:
        pattern = (
            _HEX_NUMBER_UNDERSCORE_INVALID if cleaned[1] == "x" else _NUMBER_UNDERSCORE_INVALID
        )
        if pattern.search(text):
            kind = "hex number" if cleaned[1] == "x" else "number"
            raise ValueError(f"invalid use of _ in {kind}")
        value = int(cleaned[2:], _BASES[cleaned[1]])
    else:
        if _NUMBER_UNDERSCORE_INVALID.search(text):
            raise ValueError("invalid use of _ in number")
        value = int(cleaned, 10)
    if not _INT64_MIN <= value <= _INT64_MAX:
        raise ValueError(f"integer {text} is out of the 64-bit range")
    return value


def parse_float(text: str) -> float:
    """Convert a float literal to a ``float`` after separator validation."""
    if _NUMBER_UNDERSCORE_INVALID.search(text):
        raise ValueError("invalid use of _ in number")
    value = float(text.replace("_", ""))
    if math.isinf(value):
        raise ValueError(f"float {text} is out of range")
    return value


def parse_datetime(text: str) -> datetime:
    """Parse an RFC 3339 date-time and normalize it to UTC.

    Any number of fractional-second digits is accepted; digits beyond
    microseconds are truncated.
    """
    match = _RFC3339.fullmatch(text)
    if match is None:
        raise ValueError(f"invalid RFC 3339 date-time {text!r}")
    fraction = (match.group("fraction") or "")[:6].ljust(6, "0")
    offset = match.group("offset").upper()
    if offset == "Z":
        offset = "+00:00"
    value = datetime.fromisoformat(
        f"{match.group('date')}T{match.group('time')}.{fraction}{offset}"
    )
    return value.astimezone(timezone.utc)


# ---------------------------------------------------------------------------
# Parser
# ---------------------------------------------------------------------------


class ParserState(Enum):
    """Top-level states of the parser state machine."""

    START = auto()
    GROUP_ARRAY = auto()
    GROUP = auto()
    ASSIGN = auto()
    DONE = auto()


class Parser:
    """State-machine parser that builds a ``Tree`` from tokens.

    Parameters
    ----------
    tokens:
        The token sequence, normally produced by the lexer.  It should
        end with an ``EOF`` token; a stream that simply runs out is
        treated the same way.
    builder:
        The builder receiving structural events.  A fresh one is created
        when omitted.
    """

    def __init__(self, tokens: Sequence[Token], builder: TreeBuilder | None = None) -> None:
        self._tokens: Sequence[Token] = tokens
        self._pos: int = 0
        self._builder: TreeBuilder = builder or TreeBuilder()
        self._handlers: dict[ParserState, Callable[[], ParserState]] = {
            ParserState.START: self._parse_start,
            ParserState.GROUP_ARRAY: self._parse_group_array,
            ParserState.GROUP: self._parse_group,
            ParserState.ASSIGN: self._parse_assign,
        }

    # ------------------------------------------------------------------
    # Navigation helpers
    # ------------------------------------------------------------------

    def _peek(self) -> Token | None:
        """Return the next token without consuming it, None past the end.

        An ``ERROR`` token aborts the parse with the lexer's message.
        """
        if self._pos >= len(self._tokens):
            return None
        tok = self._tokens[self._pos]
        if tok.type is TokenType.ERROR:
            raise ParseError(message=tok.value, position=tok.position, kind=ErrorKind.LEXICAL)
        return tok

    def _advance(self) -> Token | None:
        """Consume and return the next token."""
        tok = self._peek()
        if tok is not None:
            self._pos += 1
        return tok

    def _end_position(self) -> Position:
        if self._tokens:
            return self._tokens[-1].position
        return Position.start()

    def _error(
        self, tok: Token | None, message: str, kind: ErrorKind = ErrorKind.GRAMMAR
    ) -> ParseError:
        position = tok.position if tok is not None else self._end_position()
        return ParseError(message=message, position=position, kind=kind)

    def _expect(self, token_type: TokenType) -> Token:
        """Consume the next token, which must be of ``token_type``."""
        tok = self._advance()
        if tok is None:
            raise self._error(
                tok, f"was expecting token {token_type.name}, but token stream is empty"
            )
        if tok.type is not token_type:
            raise self._error(
                tok, f"was expecting token {token_type.name}, but got {tok} instead"
            )
        return tok

    def _split(self, tok: Token, what: str) -> list[str]:
        try:
            return split_key(tok.value)
        except ValueError as exc:
            raise self._error(tok, f"invalid {what}: {exc}") from exc

    # ------------------------------------------------------------------
    # Top-level parse
    # ------------------------------------------------------------------

    def parse(self) -> Tree:
        """Run the state machine over the whole stream and return the root.

        Raises
        ------
        ParseError
            On the first lexical, grammar, numeric or structural error.
        """
        state = ParserState.START
        while state is not ParserState.DONE:
            state = self._handlers[state]()
        return self._builder.tree

    def _parse_start(self) -> ParserState:
        tok = self._peek()
        if tok is None or tok.type is TokenType.EOF:
            return ParserState.DONE
        if tok.type is TokenType.DOUBLE_LEFT_BRACKET:
            return ParserState.GROUP_ARRAY
        if tok.type is TokenType.LEFT_BRACKET:
            return ParserState.GROUP
        if tok.type is TokenType.KEY:
            return ParserState.ASSIGN
        raise self._error(tok, f"unexpected token {tok}")

    def _parse_group_array(self) -> ParserState:
        start_tok = self._advance()  # consume [[
        key = self._advance()
        if key is None or key.type is not TokenType.KEY_GROUP_ARRAY:
            raise self._error(key, f"unexpected token {key}, was expecting a table array key")
        keys = self._split(key, "table array key")
        self._builder.enter_group_array(key.value, keys, start_tok.position)
        self._expect(TokenType.DOUBLE_RIGHT_BRACKET)
        return ParserState.START

    def _parse_group(self) -> ParserState:
        start_tok = self._advance()  # consume [
        key = self._advance()
        if key is None or key.type is not TokenType.KEY_GROUP:
            raise self._error(key, f"unexpected token {key}, was expecting a table key")
        keys = self._split(key, "table key")
        self._builder.enter_group(key.value, keys, start_tok.position)
        self._expect(TokenType.RIGHT_BRACKET)
        return ParserState.START

    def _parse_assign(self) -> ParserState:
        self._parse_key_value()
        return ParserState.START

    def _parse_key_value(self) -> None:
        """Parse ``KEY '=' rvalue``; shared by statements and inline tables."""
        key = self._advance()
        self._expect(TokenType.EQUAL)
        keys = self._split(key, "key")
        self._builder.enter_assign(key.value, keys, key.position)
        self._parse_rvalue()

    # ------------------------------------------------------------------
    # Right-hand sides
    # ------------------------------------------------------------------

    def _found(self, kind: ValueKind, value: object, tok: Token) -> None:
        self._builder.found_value(Scalar(kind, value, tok.position), tok.position)

    def _parse_rvalue(self) -> None:
        """Parse one value and report it to the builder."""
        tok = self._advance()
        if tok is None or tok.type is TokenType.EOF:
            raise self._error(tok, "expecting a value")

        if tok.type in _LITERAL_KINDS:
            kind = _LITERAL_KINDS[tok.type]
            value: object = tok.value if kind is ValueKind.STRING else tok.type is TokenType.TRUE
            self._found(kind, value, tok)
        elif tok.type is TokenType.INF:
            self._found(ValueKind.FLOAT, -math.inf if tok.value[0] == "-" else math.inf, tok)
        elif tok.type is TokenType.NAN:
            self._found(ValueKind.FLOAT, math.nan, tok)
        elif tok.type is TokenType.INTEGER:
            try:
                integer = parse_integer(tok.value)
            except ValueError as exc:
                raise self._error(tok, str(exc), ErrorKind.NUMBER) from exc
            self._found(ValueKind.INTEGER, integer, tok)
        elif tok.type is TokenType.FLOAT:
            try:
                number = parse_float(tok.value)
            except ValueError as exc:
                raise self._error(tok, str(exc), ErrorKind.NUMBER) from exc
            self._found(ValueKind.FLOAT, number, tok)
        elif tok.type is TokenType.DATE:
            try:
                moment = parse_datetime(tok.value)
            except ValueError as exc:
                raise self._error(tok, str(exc)) from exc
            self._found(ValueKind.DATETIME, moment, tok)
        elif tok.type is TokenType.LEFT_BRACKET:
            self._parse_array(tok)
        elif tok.type is TokenType.LEFT_CURLY_BRACE:
            self._parse_inline_table(tok)
        elif tok.type is TokenType.EQUAL:
            raise self._error(tok, "cannot have multiple equals for the same key")
        else:
            raise self._error(tok, f"unexpected token {tok}, was expecting a value")

    def _parse_array(self, open_tok: Token) -> None:
        """Parse array elements up to the closing ``]``.

        A single trailing comma is accepted; empty elements are not.
        """
        self._builder.enter_array(open_tok.position)
        follow = self._peek()
        if follow is not None and follow.type is TokenType.COMMA:
            raise self._error(follow, "array cannot start with a comma")

        while True:
            follow = self._peek()
            if follow is None or follow.type is TokenType.EOF:
                raise self._error(follow, "unterminated array")
            if follow.type is TokenType.RIGHT_BRACKET:
                self._advance()
                break

            self._parse_rvalue()

            follow = self._peek()
            if follow is None or follow.type is TokenType.EOF:
                raise self._error(follow, "unterminated array")
            if follow.type not in (TokenType.RIGHT_BRACKET, TokenType.COMMA):
                raise self._error(follow, "missing comma")
            if follow.type is TokenType.COMMA:
                self._advance()
                after = self._peek()
                if after is not None and after.type is TokenType.COMMA:
                    raise self._error(after, "need field between two commas in array")
        self._builder.exit_array()

    def _parse_inline_table(self, open_tok: Token) -> None:
        """Parse ``key = value`` pairs up to the closing ``}``."""
        self._builder.enter_inline_table(open_tok.position)
        previous: Token | None = None
        while True:
            follow = self._peek()
            if follow is None or follow.type is TokenType.EOF:
                raise self._error(follow, "unterminated inline table")
            if follow.type is TokenType.RIGHT_CURLY_BRACE:
                self._advance()
                break
            if follow.type is TokenType.KEY:
                if previous is not None and previous.type is not TokenType.COMMA:
                    raise self._error(follow, "comma expected between fields in inline table")
                self._parse_key_value()
            elif follow.type is TokenType.COMMA:
                if previous is None:
                    raise self._error(follow, "inline table cannot start with a comma")
                if previous.type is TokenType.COMMA:
                    raise self._error(follow, "need field between two commas in inline table")
                self._advance()
            else:
                raise self._error(follow, f"unexpected token type in inline table: {follow}")
            previous = follow
        if previous is not None and previous.type is TokenType.COMMA:
            raise self._error(previous, "trailing comma at the end of inline table")
        self._builder.exit_inline_table()


# ---------------------------------------------------------------------------
# Module-level convenience functions
# ---------------------------------------------------------------------------


def parse_tokens(tokens: Sequence[Token]) -> Tree:
    """Build a tree from an already materialized token stream.

    Raises
    ------
    ParseError
        On the first error in the stream.
    """
    logger.debug("parsing %d tokens", len(tokens))
    tree = Parser(tokens).parse()
    logger.debug("parsed tree with %d top-level keys", len(tree))
    return tree


def parse(source: str) -> Tree:
    """Parse a TOML document and return the root ``Tree``.

    Parameters
    ----------
    source:
        Complete TOML source text.

    Returns
    -------
    Tree
        The root table of the document.

    Raises
    ------
    ParseError
        If the source is lexically, grammatically or structurally
        invalid.  ``str(error)`` reads ``"<line>:<col>: <message>"``.

    Example
    -------
    ::

        from tomltree.parser import parse
        tree = parse('title = "TOML"')
        tree.to_dict()
        {'title': 'TOML'}
    """
    return parse_tokens(tokenize(source))
