"""Tree builder: the enforcement point for TOML structural rules.

The parser never touches the tree directly.  It reports what it sees
(a table header, a key, a value, an array or inline table opening or
closing) and the ``TreeBuilder`` turns those events into tree mutations,
rejecting anything that would break an invariant:

- a key is defined at most once per table;
- a ``[table]`` header is declared at most once;
- array elements all share one kind;
- a table array only grows by appending at its declaration point;
- dotted paths only traverse tables.

Nested right-hand sides are tracked on an explicit stack of contexts.
Each pending assignment, open array and open inline table is one frame,
and a finished array or inline table is delivered to whatever frame is
below it.  Arrays of arrays and inline tables inside arrays inside arrays
therefore need no special handling.
"""
from __future__ import annotations

import logging
from dataclasses import dataclass, field
from typing import Sequence, Union

from tomltree.errors import ErrorKind, ParseError
from tomltree.tree.nodes import (
    Array,
    Position,
    TableArray,
    Tree,
    Value,
    ValueKind,
    value_kind,
)

logger = logging.getLogger(__name__)


# ---------------------------------------------------------------------------
# Context frames
# ---------------------------------------------------------------------------


@dataclass(slots=True)
class _PendingAssign:
    """A key waiting for its right-hand side."""

    table: Tree
    key: str
    path: tuple[str, ...]
    position: Position


@dataclass(slots=True)
class _OpenArray:
    """An array accumulating its elements."""

    path: tuple[str, ...]
    position: Position
    items: list[Value] = field(default_factory=list)
    kind: ValueKind | None = None


@dataclass(slots=True)
class _OpenInlineTable:
    """An inline table collecting its own assignments."""

    tree: Tree
    path: tuple[str, ...]


_Frame = Union[_PendingAssign, _OpenArray, _OpenInlineTable]


class TreeBuilder:
    """Stateful mutator that owns the tree of one parse session.

    A builder is not reusable: create one per document.
    """

    def __init__(self) -> None:
        self._tree: Tree = Tree(position=Position.start())
        self._current_tree: Tree = self._tree
        self._current_table: tuple[str, ...] = ()
        self._seen_table_keys: list[tuple[str, ...]] = []
        self._frames: list[_Frame] = []

    @property
    def tree(self) -> Tree:
        """The root of the tree being built."""
        return self._tree

    @property
    def current_table(self) -> tuple[str, ...]:
        """Key path of the table that receives top-level assignments."""
        return self._current_table

    def _structure_error(self, position: Position, message: str) -> ParseError:
        return ParseError(message=message, position=position, kind=ErrorKind.STRUCTURE)

    # ------------------------------------------------------------------
    # Table headers
    # ------------------------------------------------------------------

    def enter_group_array(self, key: str, keys: Sequence[str], position: Position) -> None:
        """Append a new element to the table array at ``keys``.

        ``key`` is the raw header text, used for messages only.
        """
        path = tuple(keys)
        try:
            parent_tree = self._tree.create_sub_tree(path[:-1], position)
        except ValueError as exc:
            raise self._structure_error(position, str(exc)) from exc

        dest = parent_tree.get(path[-1])
        if dest is None:
            dest = TableArray(tables=[], position=position)
            parent_tree.insert(path[-1], dest)
        elif not isinstance(dest, TableArray):
            raise self._structure_error(
                position,
                f"key {key} is already assigned and not of type table array",
            )
        elif dest.tables and dest.tables[-1].inline:
            raise self._structure_error(position, f"cannot append to static array {key}")

        new_tree = Tree(parent=parent_tree, position=position)
        dest.append(new_tree)
        self._current_tree = new_tree
        self._current_table = path

        # tables declared under the previous element may be declared again
        depth = len(path)
        self._seen_table_keys = [
            seen
            for seen in self._seen_table_keys
            if not (len(seen) > depth and seen[:depth] == path)
        ]
        # keep this path from being declared as a plain table
        if path not in self._seen_table_keys:
            self._seen_table_keys.append(path)
        logger.debug("entered table array %s element %d", key, len(dest))

    def enter_group(self, key: str, keys: Sequence[str], position: Position) -> None:
        """Make the table at ``keys`` the current table."""
        path = tuple(keys)
        if path in self._seen_table_keys or isinstance(self._tree.get_path(path), TableArray):
            raise self._structure_error(position, "duplicated tables")
        self._seen_table_keys.append(path)

        try:
            new_tree = self._tree.create_sub_tree(path, position)
        except ValueError as exc:
            raise self._structure_error(position, str(exc)) from exc

        self._current_tree = new_tree
        self._current_table = path
        logger.debug("entered table %s", key)

    # ------------------------------------------------------------------
    # Assignments and values
    # ------------------------------------------------------------------

    def enter_assign(self, key: str, keys: Sequence[str], position: Position) -> None:
        """Begin the assignment of ``keys`` in the current context.

        Intermediate segments of a dotted key are created as tables, or
        reused when they already are plain tables.
        """
        inline = bool(self._frames) and isinstance(self._frames[-1], _OpenInlineTable)
        if inline:
            frame = self._frames[-1]
            table, base = frame.tree, frame.path
        else:
            table, base = self._current_tree, self._current_table

        path = tuple(keys)
        if len(path) > 1:
            try:
                table = table.create_sub_tree(path[:-1], position)
            except ValueError as exc:
                raise self._structure_error(position, str(exc)) from exc
            if not inline:
                # tables defined by dotted keys cannot be declared again by a header
                for depth in range(1, len(path)):
                    defined = base + path[:depth]
                    if defined not in self._seen_table_keys:
                        self._seen_table_keys.append(defined)

        if path[-1] in table:
            raise self._structure_error(
                position,
                f"The following key was defined twice: {'.'.join(base + path)}",
            )
        self._frames.append(
            _PendingAssign(table=table, key=path[-1], path=base + path, position=position)
        )

    def found_value(self, value: Value, position: Position) -> None:
        """Deliver a finished value to the innermost open context."""
        frame = self._frames[-1] if self._frames else None

        if isinstance(frame, _OpenArray):
            kind = value_kind(value)
            if frame.kind is None:
                frame.kind = kind
            elif kind is not frame.kind:
                raise self._structure_error(position, "mixed types in array")
            frame.items.append(value)
            return

        if not isinstance(frame, _PendingAssign):
            raise ParseError(
                message="value found without a key to assign it to",
                position=position,
                kind=ErrorKind.GRAMMAR,
            )

        self._frames.pop()
        _adopt(value, frame.table)
        frame.table.insert(frame.key, value)

    # ------------------------------------------------------------------
    # Arrays
    # ------------------------------------------------------------------

    def enter_array(self, position: Position) -> None:
        self._frames.append(_OpenArray(path=self._context_path(), position=position))

    def exit_array(self) -> None:
        """Close the innermost array and deliver it.

        An array of tables is the inline spelling of a table array and
        is stored as a ``TableArray`` so both notations give one shape.
        """
        frame = self._pop_frame(_OpenArray, "array")
        if frame.kind is ValueKind.TABLE:
            value: Value = TableArray(tables=list(frame.items), position=frame.position)
        else:
            value = Array(items=frame.items, position=frame.position)
        self.found_value(value, frame.position)

    # ------------------------------------------------------------------
    # Inline tables
    # ------------------------------------------------------------------

    def enter_inline_table(self, position: Position) -> None:
        self._frames.append(
            _OpenInlineTable(
                tree=Tree(position=position, inline=True),
                path=self._context_path(),
            )
        )

    def exit_inline_table(self) -> None:
        frame = self._pop_frame(_OpenInlineTable, "inline table")
        self.found_value(frame.tree, frame.tree.position)

    # ------------------------------------------------------------------
    # Frame helpers
    # ------------------------------------------------------------------

    def _context_path(self) -> tuple[str, ...]:
        """Key path that names the innermost open context in messages."""
        if self._frames:
            return self._frames[-1].path
        return self._current_table

    def _pop_frame(self, frame_type: type, what: str):
        if not self._frames or not isinstance(self._frames[-1], frame_type):
            raise ParseError(
                message=f"{what} closed while no {what} is open",
                position=self._current_tree.position,
                kind=ErrorKind.GRAMMAR,
            )
        return self._frames.pop()


def _adopt(value: Value, table: Tree) -> None:
    """Point the tables held by ``value``, directly or inside arrays, at ``table``."""
    if isinstance(value, Tree):
        value.parent = table
    elif isinstance(value, TableArray):
        for tree in value.tables:
            tree.parent = table
    elif isinstance(value, Array):
        for item in value.items:
            _adopt(item, table)
