"""Decomposition of raw key text into path segments.

Keys reach the parser as raw text such as ``a . "b.c" . 'd'``.  A dot
outside quotes separates segments; whitespace around a segment is
ignored.
"""
from __future__ import annotations

import re
from typing import Final

from tomltree.lexer.lexer import unescape

_BARE_KEY: Final[re.Pattern[str]] = re.compile(r"[A-Za-z0-9_-]+")


def _skip_blanks(raw: str, i: int) -> int:
    while i < len(raw) and raw[i] in " \t":
        i += 1
    return i


def split_key(raw: str) -> list[str]:
    """Split ``raw`` into its key segments.

    Raises
    ------
    ValueError
        If the key is empty, a segment is empty or contains characters
        not allowed in bare keys, or a quoted segment is unterminated.

    Example
    -------
    ::

        >>> split_key('server."alpha.beta" . port')
        ['server', 'alpha.beta', 'port']
    """
    if not raw.strip():
        raise ValueError("empty key")
    segments: list[str] = []
    i = _skip_blanks(raw, 0)
    n = len(raw)
    while True:
        if i >= n:
            raise ValueError("empty key segment")
        ch = raw[i]
        if ch == '"':
            j = i + 1
            while j < n and raw[j] != '"':
                j += 2 if raw[j] == "\\" else 1
            if j >= n:
                raise ValueError("unterminated quoted key")
            segments.append(unescape(raw[i + 1 : j]))
            i = j + 1
        elif ch == "'":
            j = raw.find("'", i + 1)
            if j == -1:
                raise ValueError("unterminated quoted key")
            segments.append(raw[i + 1 : j])
            i = j + 1
        else:
            match = _BARE_KEY.match(raw, i)
            if match is None:
                if ch == ".":
                    raise ValueError("empty key segment")
                raise ValueError(f"invalid bare key character {ch!r}")
            segments.append(match.group())
            i = match.end()

        i = _skip_blanks(raw, i)
        if i >= n:
            return segments
        if raw[i] != ".":
            raise ValueError(f"expected '.' between key segments, found {raw[i]!r}")
        i = _skip_blanks(raw, i + 1)
