"""tomltree tree module.

Exports the value model, the ``Tree`` container and the serializer that
converts finished trees to plain data, JSON and YAML.
"""
from __future__ import annotations

from tomltree.tree.nodes import (
    Array,
    Position,
    Scalar,
    TableArray,
    Tree,
    Value,
    ValueKind,
    value_kind,
)
from tomltree.tree.serializer import TreeSerializer

__all__ = [
    # Source location
    "Position",
    # Value model
    "ValueKind",
    "Scalar",
    "Array",
    "TableArray",
    "Tree",
    "Value",
    "value_kind",
    # Serializer
    "TreeSerializer",
]
