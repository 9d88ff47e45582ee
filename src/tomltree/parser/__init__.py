"""tomltree parser module.

Exports the ``Parser`` state machine, the ``parse`` and ``parse_tokens``
convenience functions and key splitting.
"""
from __future__ import annotations

from tomltree.parser.keys import split_key
from tomltree.parser.parser import Parser, ParserState, parse, parse_tokens

__all__ = [
    "Parser",
    "ParserState",
    "parse",
    "parse_tokens",
    "split_key",
]
