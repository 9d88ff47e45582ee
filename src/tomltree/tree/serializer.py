"""Serialization of parsed trees to plain Python data, JSON and YAML.

Two shapes are supported:

plain
    Tables become dicts, arrays and table arrays become lists and
    scalars become their Python payload.
typed
    Every scalar becomes ``{"type": <kind>, "value": <text>}`` so that
    the kind survives formats without native datetimes or integers of
    arbitrary width.  This mirrors the tagged JSON used by TOML
    conformance suites.

Usage
-----
::

    from tomltree.tree.serializer import TreeSerializer

    serializer = TreeSerializer()
    json_text = serializer.to_json(tree, typed=True)
"""
from __future__ import annotations

import json
import math
from datetime import datetime
from typing import Any

import yaml

from tomltree.tree.nodes import Array, Scalar, TableArray, Tree, Value, ValueKind

_TYPE_NAMES: dict[ValueKind, str] = {
    ValueKind.BOOLEAN: "bool",
    ValueKind.INTEGER: "integer",
    ValueKind.FLOAT: "float",
    ValueKind.STRING: "string",
    ValueKind.DATETIME: "datetime",
}


def format_datetime(value: datetime) -> str:
    """Render a UTC datetime in RFC 3339 form with a ``Z`` suffix."""
    return value.isoformat().replace("+00:00", "Z")


def _format_float(value: float) -> str:
    if math.isnan(value):
        return "nan"
    if math.isinf(value):
        return "inf" if value > 0 else "-inf"
    return repr(value)


class TreeSerializer:
    """Converts a ``Tree`` into plain or typed Python data."""

    # ------------------------------------------------------------------
    # Dict conversion
    # ------------------------------------------------------------------

    def to_dict(self, tree: Tree, typed: bool = False) -> dict[str, Any]:
        """Convert ``tree`` to nested dicts and lists."""
        return {key: self.to_data(value, typed=typed) for key, value in tree.items()}

    def to_data(self, value: Value, typed: bool = False) -> Any:
        """Convert any stored value to plain or typed Python data."""
        if isinstance(value, Scalar):
            if not typed:
                return value.value
            return {"type": _TYPE_NAMES[value.kind], "value": self.scalar_text(value)}
        if isinstance(value, Array):
            return [self.to_data(item, typed=typed) for item in value.items]
        if isinstance(value, TableArray):
            return [self.to_dict(table, typed=typed) for table in value.tables]
        return self.to_dict(value, typed=typed)

    def scalar_text(self, scalar: Scalar) -> str:
        """Render a scalar the way TOML would spell it, without quotes."""
        if scalar.kind is ValueKind.BOOLEAN:
            return "true" if scalar.value else "false"
        if scalar.kind is ValueKind.FLOAT:
            return _format_float(scalar.value)
        if scalar.kind is ValueKind.DATETIME:
            return format_datetime(scalar.value)
        return str(scalar.value)

    # ------------------------------------------------------------------
    # Text formats
    # ------------------------------------------------------------------

    def to_json(self, value: Value, typed: bool = False, indent: int = 2) -> str:
        """Serialize a tree or any stored value to a JSON string."""
        return json.dumps(
            _json_safe(self.to_data(value, typed=typed)),
            indent=indent,
            ensure_ascii=False,
            default=_json_default,
            allow_nan=False,
        )

    def to_yaml(self, value: Value, typed: bool = False) -> str:
        """Serialize a tree or any stored value to a YAML string."""
        return yaml.safe_dump(
            self.to_data(value, typed=typed),
            default_flow_style=False,
            allow_unicode=True,
            sort_keys=False,
        )


def _json_default(obj: object) -> str:
    if isinstance(obj, datetime):
        return format_datetime(obj)
    raise TypeError(f"Object of type {type(obj).__name__} is not JSON serializable")


def _json_safe(data: Any) -> Any:
    """Render non-finite floats as ``nan``, ``inf`` and ``-inf`` strings."""
    if isinstance(data, float) and not math.isfinite(data):
        return _format_float(data)
    if isinstance(data, dict):
        return {key: _json_safe(item) for key, item in data.items()}
    if isinstance(data, list):
        return [_json_safe(item) for item in data]
    return data
