"""Integration tests.

These drive the ``tomltree`` command line through Click's test runner,
reading and writing real files in a temporary directory.  Run only the
fast unit tests with ``pytest tests/unit/``.
"""
from __future__ import annotations
