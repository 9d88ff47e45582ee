"""Shared test fixtures for tomltree.

Fixtures defined here are available to all tests in the suite without
needing an explicit import. Add project-wide fixtures here; keep
domain-specific fixtures close to the tests that use them.
"""
from __future__ import annotations

from pathlib import Path

import pytest


@pytest.fixture()
def package_name() -> str:
    """Return the importable package name for assertions."""
    return "tomltree"


@pytest.fixture()
def expected_version() -> str:
    """Return the current expected version string.

    Update this fixture when cutting a release so that the version
    test immediately catches stale ``__version__`` values.
    """
    return "0.1.0"


@pytest.fixture()
def sample_document() -> str:
    """A small document touching every statement and value form."""
    return (
        '# sample\n'
        'title = "TOML Example"\n'
        'enabled = true\n'
        'released = 1979-05-27T07:32:00-08:00\n'
        '\n'
        '[owner]\n'
        'name = "Tom"\n'
        'dob.year = 1979\n'
        '\n'
        '[database]\n'
        'ports = [ 8001, 8001, 8002 ]\n'
        'limits = { cpu = 2, memory = 1.5 }\n'
        '\n'
        '[[products]]\n'
        'name = "Hammer"\n'
        'sku = 738_594_937\n'
        '\n'
        '[[products]]\n'
        'name = "Nail"\n'
        'sku = 0x1A\n'
    )


@pytest.fixture()
def write_toml(tmp_path: Path, monkeypatch: pytest.MonkeyPatch):
    """Write a document into the temporary directory and return its name.

    The working directory is switched to ``tmp_path`` so CLI output can
    refer to short relative file names.
    """
    monkeypatch.chdir(tmp_path)

    def _write(text: str, name: str = "doc.toml") -> str:
        (tmp_path / name).write_text(text, encoding="utf-8")
        return name

    return _write
