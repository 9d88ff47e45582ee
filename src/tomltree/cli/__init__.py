"""Command line interface for tomltree.

The ``tomltree`` console script is the Click group defined in
:mod:`tomltree.cli.main`.  Commands import the library lazily so that
``tomltree --help`` stays fast.
"""
from __future__ import annotations
