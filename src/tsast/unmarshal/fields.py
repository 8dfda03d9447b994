"""Single-pass collection of a node's children by field name."""

from __future__ import annotations

import keyword
from typing import TYPE_CHECKING, NewType

from tsast.config.constants import EXTRA_CHILDREN_FIELD

if TYPE_CHECKING:
    from tsast.unmarshal.cursor import Cursor, NodeInfo

FieldName = NewType("FieldName", str)

EXTRA_CHILDREN = FieldName(EXTRA_CHILDREN_FIELD)

Fields = dict[FieldName, list["NodeInfo"]]


def normalize_field_name(name: str) -> FieldName:
    """Map a grammar field name onto a Python attribute name.

    Grammar fields are snake_case already; keywords get a trailing underscore
    (``async`` -> ``async_``) so they can be declared as dataclass fields.
    """
    if keyword.iskeyword(name):
        return FieldName(f"{name}_")
    return FieldName(name)


def grammar_field_name(attr: str) -> str:
    """Inverse of :func:`normalize_field_name`."""
    if attr.endswith("_"):
        stem = attr[:-1]
        if keyword.iskeyword(stem):
            return stem
    return attr


def collect_fields(cursor: Cursor, *, keep_fielded_extras: bool = False) -> Fields:
    """Bucket the current node and its following siblings by field name.

    The cursor must already sit on the first child. Children with a field
    name go under that name; named children without one go under
    ``extra_children``; anonymous children are dropped. Extra nodes are
    dropped too, unless ``keep_fielded_extras`` is set and the grammar gave
    them a field name. Order within each bucket is sibling order.
    """
    fields: Fields = {}
    while True:
        node = cursor.node()
        name = cursor.field_name()
        if name is not None:
            if not node.extra or keep_fielded_extras:
                fields.setdefault(name, []).append(node)
        elif node.named and not node.extra:
            fields.setdefault(EXTRA_CHILDREN, []).append(node)
        if not cursor.goto_next_sibling():
            return fields


def lookup_field(fields: Fields, name: FieldName) -> list[NodeInfo]:
    return fields.get(name, [])
