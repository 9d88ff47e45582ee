"""Test that the quickstart API works for tomltree."""
from __future__ import annotations


def test_quickstart_parse_import() -> None:
    import tomltree

    assert callable(tomltree.parse)
    assert callable(tomltree.parse_tokens)
    assert callable(tomltree.load)


def test_version_matches_fixture(expected_version: str) -> None:
    import tomltree

    assert tomltree.__version__ == expected_version


def test_package_name(package_name: str) -> None:
    import importlib

    module = importlib.import_module(package_name)
    assert module.__name__ == "tomltree"


def test_quickstart_parse_returns_tree() -> None:
    import tomltree

    tree = tomltree.parse('title = "x"')
    assert tree.to_dict() == {"title": "x"}


def test_quickstart_load_reads_file(tmp_path) -> None:
    import tomltree

    path = tmp_path / "config.toml"
    path.write_text("[server]\nport = 8080\n", encoding="utf-8")
    tree = tomltree.load(path)
    assert tree.to_dict() == {"server": {"port": 8080}}


def test_quickstart_errors_exported() -> None:
    import pytest

    import tomltree

    with pytest.raises(tomltree.ParseError) as info:
        tomltree.parse("a = 1\na = 2")
    assert info.value.kind is tomltree.ErrorKind.STRUCTURE
