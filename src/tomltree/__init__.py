"""tomltree — parse TOML documents into a tree of typed values.

Public API
----------
The stable public surface is everything exported from this module.
Anything inside submodules not re-exported here is considered private
and may change without notice.

Example
-------
::

    import tomltree

    tree = tomltree.parse('''
        title = "example"

        [server]
        ports = [8001, 8002]

        [[server.backends]]
        host = "alpha"
    ''')

    tree["title"].value
    'example'
    tree.to_dict()["server"]["backends"][0]["host"]
    'alpha'

    tomltree.__version__
    '0.1.0'
"""
from __future__ import annotations

from pathlib import Path
from typing import TYPE_CHECKING, Sequence

from tomltree.errors import ErrorKind, ParseError

__version__: str = "0.1.0"

if TYPE_CHECKING:
    from tomltree.grammar.tokens import Token
    from tomltree.tree.nodes import Tree


def parse(source: str) -> "Tree":
    """Parse a TOML source string into its root ``Tree``.

    Raises
    ------
    tomltree.ParseError
        On the first lexical, grammar, numeric or structural error.
    """
    from tomltree.parser.parser import parse as _parse

    return _parse(source)


def parse_tokens(tokens: Sequence["Token"]) -> "Tree":
    """Build a ``Tree`` from an already tokenized document."""
    from tomltree.parser.parser import parse_tokens as _parse_tokens

    return _parse_tokens(tokens)


def load(path: str | Path) -> "Tree":
    """Read a UTF-8 TOML file and parse it.

    Raises
    ------
    OSError
        If the file cannot be read.
    tomltree.ParseError
        If the contents are not valid.
    """
    return parse(Path(path).read_text(encoding="utf-8"))


__all__ = [
    "__version__",
    "parse",
    "parse_tokens",
    "load",
    "ParseError",
    "ErrorKind",
]
