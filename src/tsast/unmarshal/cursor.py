"""Read-only view over tree-sitter nodes and tree cursors.

``NodeInfo`` snapshots the metadata the unmarshaller needs from a native
``tree_sitter.Node``; ``Cursor`` wraps a ``tree_sitter.TreeCursor`` and exposes
exactly the primitives the engine uses. Nothing here mutates the tree.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any, NamedTuple

from tsast.unmarshal.fields import FieldName, normalize_field_name


class Pos(NamedTuple):
    """Zero-based line/column position (column counted in bytes)."""

    line: int
    column: int


@dataclass(frozen=True, slots=True)
class NodeInfo:
    """Immutable snapshot of a parse tree node's metadata."""

    symbol: int
    kind: str
    named: bool
    extra: bool
    start_byte: int
    end_byte: int
    start_point: Pos
    end_point: Pos
    handle: Any = field(default=None, repr=False, compare=False)  # native node, for reset

    @classmethod
    def from_ts(cls, node: Any) -> NodeInfo:
        """Snapshot a ``tree_sitter.Node`` (or anything with the same attributes)."""
        start_row, start_col = node.start_point
        end_row, end_col = node.end_point
        return cls(
            symbol=node.kind_id,
            kind=node.type,
            named=node.is_named,
            extra=node.is_extra,
            start_byte=node.start_byte,
            end_byte=node.end_byte,
            start_point=Pos(start_row, start_col),
            end_point=Pos(end_row, end_col),
            handle=node,
        )


class Cursor:
    """Traversal handle bound to one tree.

    Owned by a single build; ``goto_parent`` is only called to undo a
    successful ``goto_first_child``.
    """

    __slots__ = ("_cursor",)

    def __init__(self, ts_cursor: Any) -> None:
        self._cursor = ts_cursor

    @classmethod
    def from_node(cls, node: Any) -> Cursor:
        """Allocate a fresh cursor positioned at ``node``."""
        return cls(node.walk())

    def node(self) -> NodeInfo:
        return NodeInfo.from_ts(self._cursor.node)

    def field_name(self) -> FieldName | None:
        name = self._cursor.field_name
        if name is None:
            return None
        return normalize_field_name(name)

    def goto_first_child(self) -> bool:
        return bool(self._cursor.goto_first_child())

    def goto_next_sibling(self) -> bool:
        return bool(self._cursor.goto_next_sibling())

    def goto_parent(self) -> None:
        self._cursor.goto_parent()

    def reset(self, node: NodeInfo) -> None:
        self._cursor.reset(node.handle)

    def close(self) -> None:
        """Release the native cursor; the wrapper is unusable afterwards."""
        self._cursor = None

    def __enter__(self) -> Cursor:
        return self

    def __exit__(self, *exc_info: object) -> None:
        self.close()
