"""tomltree builder module.

Exports the ``TreeBuilder`` that turns parser events into tree mutations.
"""
from __future__ import annotations

from tomltree.builder.builder import TreeBuilder

__all__ = ["TreeBuilder"]
