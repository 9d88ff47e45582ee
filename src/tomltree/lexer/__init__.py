"""tomltree lexer module.

Exports the ``Lexer`` class, the ``tokenize`` convenience function and
the basic-string ``unescape`` helper.
"""
from __future__ import annotations

from tomltree.lexer.lexer import Lexer, tokenize, unescape

__all__ = ["Lexer", "tokenize", "unescape"]
