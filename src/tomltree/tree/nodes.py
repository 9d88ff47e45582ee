"""Value model and tree container for parsed TOML documents.

Every value stored in a ``Tree`` is one of the closed set of variants
``Scalar``, ``Array``, ``Tree`` (a table) or ``TableArray``.  Scalars are
frozen dataclasses whose Python payload is checked against their
``ValueKind`` at construction time, so a value of the wrong shape can
never be stored.

All values carry a ``Position`` that records where they were found in the
source text.  Positions are used for diagnostics only.
"""
from __future__ import annotations

import weakref
from dataclasses import dataclass, field
from datetime import datetime, timedelta
from enum import Enum, auto
from typing import Any, Iterator, Sequence, Union


# ---------------------------------------------------------------------------
# Source location
# ---------------------------------------------------------------------------


@dataclass(frozen=True, slots=True)
class Position:
    """A 1-based ``line:col`` coordinate in the source text.

    Parameters
    ----------
    line:
        1-based line number.
    col:
        1-based column number.
    """

    line: int
    col: int

    def __str__(self) -> str:
        return f"{self.line}:{self.col}"

    def __repr__(self) -> str:
        return f"Position({self.line}:{self.col})"

    @classmethod
    def start(cls) -> "Position":
        """Return the position of the first character of a document."""
        return cls(line=1, col=1)


# ---------------------------------------------------------------------------
# Kinds
# ---------------------------------------------------------------------------


class ValueKind(Enum):
    """Kind tag of a stored value, used for array homogeneity checks."""

    BOOLEAN = auto()
    INTEGER = auto()
    FLOAT = auto()
    STRING = auto()
    DATETIME = auto()
    ARRAY = auto()
    TABLE = auto()

    @property
    def is_scalar(self) -> bool:
        """Return True for the five scalar kinds."""
        return self not in (ValueKind.ARRAY, ValueKind.TABLE)


_SCALAR_TYPES: dict[ValueKind, type] = {
    ValueKind.BOOLEAN: bool,
    ValueKind.INTEGER: int,
    ValueKind.FLOAT: float,
    ValueKind.STRING: str,
    ValueKind.DATETIME: datetime,
}


# ---------------------------------------------------------------------------
# Scalars and arrays
# ---------------------------------------------------------------------------


@dataclass(frozen=True, slots=True)
class Scalar:
    """A single non-container value.

    Parameters
    ----------
    kind:
        One of the scalar ``ValueKind`` members.
    value:
        The Python payload.  Its type must match ``kind``; datetimes must
        be timezone-aware and normalized to UTC.
    position:
        Where the literal was found.
    """

    kind: ValueKind
    value: Any
    position: Position = field(compare=False)

    def __post_init__(self) -> None:
        if not self.kind.is_scalar:
            raise TypeError(f"{self.kind.name} is not a scalar kind")
        expected = _SCALAR_TYPES[self.kind]
        # bool is a subclass of int; integers must not accept it
        if type(self.value) is not expected and not (
            expected is datetime and isinstance(self.value, datetime)
        ):
            raise TypeError(
                f"{self.kind.name} scalar cannot hold {type(self.value).__name__}"
            )
        if self.kind is ValueKind.DATETIME and self.value.utcoffset() != timedelta(0):
            raise TypeError("DATETIME scalars must be normalized to UTC")


@dataclass(slots=True)
class Array:
    """An ordered sequence of values that all share one ``ValueKind``."""

    items: list["Value"]
    position: Position = field(compare=False)

    @property
    def kind(self) -> ValueKind | None:
        """Kind of the elements, or None for an empty array."""
        if not self.items:
            return None
        return value_kind(self.items[0])

    def __len__(self) -> int:
        return len(self.items)

    def __iter__(self) -> Iterator["Value"]:
        return iter(self.items)

    def __getitem__(self, index: int) -> "Value":
        return self.items[index]


@dataclass(slots=True)
class TableArray:
    """An append-only sequence of tables declared with ``[[name]]``.

    Arrays of inline tables normalize to this type as well.
    """

    tables: list["Tree"]
    position: Position = field(compare=False)

    def append(self, tree: "Tree") -> None:
        """Append a new element table."""
        self.tables.append(tree)

    def __len__(self) -> int:
        return len(self.tables)

    def __iter__(self) -> Iterator["Tree"]:
        return iter(self.tables)

    def __getitem__(self, index: int) -> "Tree":
        return self.tables[index]


# ---------------------------------------------------------------------------
# Tree
# ---------------------------------------------------------------------------


class Tree:
    """An ordered mapping from a single key segment to a ``Value``.

    Parameters
    ----------
    parent:
        The enclosing tree, held weakly.  ``None`` for the root and for
        inline tables that have not been stored yet.
    position:
        Where the table was opened.
    inline:
        True for tables written as ``{...}``; those cannot be extended
        after they are closed.
    """

    __slots__ = ("_values", "_parent", "position", "inline", "__weakref__")

    def __init__(
        self,
        parent: "Tree | None" = None,
        position: Position | None = None,
        inline: bool = False,
    ) -> None:
        self._values: dict[str, Value] = {}
        self._parent: weakref.ReferenceType[Tree] | None = None
        self.position: Position = position or Position.start()
        self.inline: bool = inline
        self.parent = parent

    # ------------------------------------------------------------------
    # Parent link
    # ------------------------------------------------------------------

    @property
    def parent(self) -> "Tree | None":
        """The enclosing tree, or None once it has been garbage collected."""
        if self._parent is None:
            return None
        return self._parent()

    @parent.setter
    def parent(self, tree: "Tree | None") -> None:
        self._parent = weakref.ref(tree) if tree is not None else None

    # ------------------------------------------------------------------
    # Mapping protocol
    # ------------------------------------------------------------------

    def __contains__(self, key: object) -> bool:
        return key in self._values

    def __getitem__(self, key: str) -> "Value":
        return self._values[key]

    def __iter__(self) -> Iterator[str]:
        return iter(self._values)

    def __len__(self) -> int:
        return len(self._values)

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, Tree):
            return NotImplemented
        return self._values == other._values

    def __repr__(self) -> str:
        return f"Tree({list(self._values)!r}, {self.position!r})"

    def keys(self) -> list[str]:
        return list(self._values)

    def items(self) -> list[tuple[str, "Value"]]:
        return list(self._values.items())

    def get(self, key: str, default: "Value | None" = None) -> "Value | None":
        return self._values.get(key, default)

    # ------------------------------------------------------------------
    # Mutation
    # ------------------------------------------------------------------

    def insert(self, key: str, value: "Value") -> None:
        """Store ``value`` under a key that must not exist yet.

        Raises
        ------
        KeyError
            If ``key`` is already present.
        """
        if key in self._values:
            raise KeyError(key)
        self._values[key] = value

    def create_sub_tree(self, keys: Sequence[str], position: Position) -> "Tree":
        """Walk ``keys`` from this tree, creating missing tables.

        A table array met on the way resolves to its last element.

        Raises
        ------
        ValueError
            If a segment holds a non-table value or an inline table.
        """
        subtree = self
        for index, key in enumerate(keys):
            node = subtree._values.get(key)
            if node is None:
                node = Tree(parent=subtree, position=position)
                subtree._values[key] = node
            if isinstance(node, TableArray):
                node = node.tables[-1]
            if isinstance(node, Tree):
                if node.inline:
                    raise ValueError(
                        f"cannot extend inline table {'.'.join(keys[: index + 1])}"
                    )
                subtree = node
            else:
                raise ValueError(
                    f"key {'.'.join(keys[: index + 1])} is already assigned "
                    "and not of type table"
                )
        return subtree

    # ------------------------------------------------------------------
    # Lookup
    # ------------------------------------------------------------------

    def get_path(self, keys: Sequence[str]) -> "Value | None":
        """Return the value at ``keys`` or None when any segment is missing."""
        if not keys:
            return self
        subtree: Tree = self
        for key in keys[:-1]:
            node = subtree._values.get(key)
            if isinstance(node, TableArray):
                if not node.tables:
                    return None
                subtree = node.tables[-1]
            elif isinstance(node, Tree):
                subtree = node
            else:
                return None
        return subtree._values.get(keys[-1])

    def to_dict(self) -> dict[str, Any]:
        """Return the tree as plain Python dicts, lists and scalars."""
        return {key: _plain(value) for key, value in self._values.items()}


Value = Union[Scalar, Array, Tree, TableArray]


def value_kind(value: Value) -> ValueKind:
    """Return the ``ValueKind`` tag of any stored value."""
    if isinstance(value, Scalar):
        return value.kind
    if isinstance(value, (Array, TableArray)):
        return ValueKind.ARRAY
    if isinstance(value, Tree):
        return ValueKind.TABLE
    raise TypeError(f"not a tree value: {value!r}")


def _plain(value: Value) -> Any:
    if isinstance(value, Scalar):
        return value.value
    if isinstance(value, Array):
        return [_plain(item) for item in value.items]
    if isinstance(value, TableArray):
        return [tree.to_dict() for tree in value.tables]
    return value.to_dict()
