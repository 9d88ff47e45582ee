"""Parse error types for tomltree.

Parsing is fail-fast: the first problem aborts the whole parse with a
single ``ParseError``.  Every error carries the ``Position`` of the
offending token so that messages read ``line:col: description``.
"""
from __future__ import annotations

from dataclasses import dataclass
from enum import Enum, auto

from tomltree.tree.nodes import Position


class ErrorKind(Enum):
    """Which stage detected the error.

    LEXICAL
        The token stream carried an ``ERROR`` token; the lexer's message
        is propagated verbatim.
    GRAMMAR
        A token of the wrong kind appeared where a specific kind was
        required, or a construct was left unterminated.
    NUMBER
        A numeric literal has misplaced ``_`` separators or does not
        parse in its base or format.
    STRUCTURE
        The tokens are well formed but violate a tree rule: duplicate
        key, duplicate table, mixed array, or a path that collides with
        a value of another kind.
    """

    LEXICAL = auto()
    GRAMMAR = auto()
    NUMBER = auto()
    STRUCTURE = auto()


@dataclass(frozen=True)
class ParseError(Exception):
    """A single fatal parse error with location.

    Parameters
    ----------
    message:
        Human-readable description of the error.
    position:
        Source location of the offending token.
    kind:
        The error category.
    """

    message: str
    position: Position
    kind: ErrorKind

    def __str__(self) -> str:
        return f"{self.position}: {self.message}"

    # dataclass(frozen=True) doesn't call Exception.__init__ automatically
    def __post_init__(self) -> None:
        object.__setattr__(self, "args", (str(self),))
