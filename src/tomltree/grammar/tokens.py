"""Token definitions for the TOML token stream.

Every punctuation mark, key form and literal kind the parser consumes is
a member of ``TokenType``.  Every scanned token is a ``Token`` dataclass
carrying its type, its literal text and the ``Position`` where it starts.
"""
from __future__ import annotations

from dataclasses import dataclass
from enum import Enum, auto

from tomltree.tree.nodes import Position


class TokenType(Enum):
    """Exhaustive enumeration of TOML token types."""

    # -----------------------------------------------------------------
    # Keys
    # -----------------------------------------------------------------
    KEY = auto()              # left-hand side of ``key = value``
    KEY_GROUP = auto()        # name inside ``[ ]``
    KEY_GROUP_ARRAY = auto()  # name inside ``[[ ]]``

    # -----------------------------------------------------------------
    # Punctuation
    # -----------------------------------------------------------------
    EQUAL = auto()
    LEFT_BRACKET = auto()
    RIGHT_BRACKET = auto()
    DOUBLE_LEFT_BRACKET = auto()
    DOUBLE_RIGHT_BRACKET = auto()
    LEFT_CURLY_BRACE = auto()
    RIGHT_CURLY_BRACE = auto()
    COMMA = auto()

    # -----------------------------------------------------------------
    # Literals
    # -----------------------------------------------------------------
    STRING = auto()
    INTEGER = auto()
    FLOAT = auto()
    TRUE = auto()
    FALSE = auto()
    DATE = auto()
    INF = auto()
    NAN = auto()

    # -----------------------------------------------------------------
    # Stream control
    # -----------------------------------------------------------------
    ERROR = auto()
    EOF = auto()


@dataclass(frozen=True, slots=True)
class Token:
    """A single scanned token with source-location metadata.

    Parameters
    ----------
    type:
        The ``TokenType`` variant for this token.
    value:
        The literal text.  Strings hold their decoded contents, keys
        hold the raw key text, ERROR tokens hold the lexer's message.
    position:
        Where the first character of the token was found.
    """

    type: TokenType
    value: str
    position: Position

    def __repr__(self) -> str:
        return f"Token({self.type.name}, {self.value!r}, {self.position})"

    def __str__(self) -> str:
        if self.type is TokenType.EOF:
            return "EOF"
        if self.type is TokenType.ERROR:
            return self.value
        return f"{self.type.name} {self.value!r}"
