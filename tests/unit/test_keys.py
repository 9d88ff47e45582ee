"""Unit tests for tomltree.parser.keys — splitting raw key text."""
from __future__ import annotations

import pytest

from tomltree.parser.keys import split_key


class TestSplitKey:
    @pytest.mark.parametrize("raw, expected", [
        ("title", ["title"]),
        ("bare-key_1", ["bare-key_1"]),
        ("1234", ["1234"]),
        ("a.b.c", ["a", "b", "c"]),
        ("a . b\t.c", ["a", "b", "c"]),
        ('"quoted key"', ["quoted key"]),
        ('site."google.com"', ["site", "google.com"]),
        ("'lit.eral'.x", ["lit.eral", "x"]),
        ('"tab\\tkey"', ["tab\tkey"]),
        ('""', [""]),
    ])
    def test_segments(self, raw: str, expected: list[str]) -> None:
        assert split_key(raw) == expected

    def test_literal_segment_keeps_backslashes(self) -> None:
        assert split_key(r"'C:\dir'") == [r"C:\dir"]

    @pytest.mark.parametrize("raw, message", [
        ("", "empty key"),
        ("   ", "empty key"),
        ("a..b", "empty key segment"),
        ("a.", "empty key segment"),
        (".a", "empty key segment"),
        ("$a", "invalid bare key character"),
        ('"open', "unterminated quoted key"),
        ("'open", "unterminated quoted key"),
        ('"a"b', "expected '.'"),
    ])
    def test_invalid_keys(self, raw: str, message: str) -> None:
        with pytest.raises(ValueError, match=message):
            split_key(raw)
