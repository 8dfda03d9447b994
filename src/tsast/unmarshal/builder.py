"""Generic construction of typed ASTs from a tree cursor.

Products are built by collecting the node's children into field buckets
(one pass over the siblings), then filling each declared field from its
bucket according to its cardinality. Sums are built by looking the node's
symbol up in the target's dispatch table. Annotation fields come from the
node's own metadata.

Every failure raises and aborts the whole build.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Any

from tsast.config.models import UnmarshalConfig
from tsast.core.errors import UnmarshalError
from tsast.unmarshal.annotations import Extractor, TextDecoder
from tsast.unmarshal.cursor import Cursor, NodeInfo
from tsast.unmarshal.fields import Fields, collect_fields, lookup_field
from tsast.unmarshal.schema import AnnotationField, Cardinality, Slot, Syntax, field_plan
from tsast.unmarshal.symbols import SymbolTable


@dataclass
class BuildContext:
    """Everything a build threads through its recursive calls."""

    cursor: Cursor
    source: bytes
    symbols: SymbolTable
    annotation: Extractor
    decoder: TextDecoder
    options: UnmarshalConfig


def unmarshal_node(target: type, node: NodeInfo, ctx: BuildContext) -> Any:
    """Build a value of ``target`` from ``node``.

    Raises:
        UnmarshalError: If the node's symbol matches no variant of ``target``,
            or a field of the chosen variant has the wrong number of children.
    """
    table = ctx.symbols.dispatch_for(target)
    variant = table.get(node.symbol)
    if variant is None:
        raise UnmarshalError.no_match(target.__name__, ctx.symbols.expected(table), node)
    ctx.cursor.reset(node)
    return build_product(variant, node, ctx)


def build_product(cls: type[Syntax], node: NodeInfo, ctx: BuildContext) -> Syntax:
    """Build a product whose cursor position is ``node``."""
    if ctx.options.validate_field_names:
        ctx.symbols.check_fields(cls)
    plan = field_plan(cls)
    fields = _children(ctx) if plan.has_children else {}

    values: dict[str, Any] = {}
    for slot in plan.slots:
        if isinstance(slot.spec, AnnotationField):
            extract = slot.extractor or ctx.annotation
            values[slot.attr] = extract(node, ctx.source, ctx.decoder)
        else:
            values[slot.attr] = _unmarshal_field(slot, lookup_field(fields, slot.bucket), node, ctx)
    return cls(**values)


def _children(ctx: BuildContext) -> Fields:
    cursor = ctx.cursor
    if not cursor.goto_first_child():
        return {}
    fields = collect_fields(cursor, keep_fielded_extras=ctx.options.keep_fielded_extras)
    cursor.goto_parent()
    return fields


def _unmarshal_field(
    slot: Slot, nodes: list[NodeInfo], parent: NodeInfo, ctx: BuildContext
) -> Any:
    cardinality = slot.spec.cardinality
    element = slot.element

    if cardinality is Cardinality.REQUIRED:
        if not nodes:
            raise UnmarshalError.missing_field(slot.attr, parent)
        if len(nodes) > 1:
            raise UnmarshalError.multiple_nodes(slot.attr, cardinality.value, len(nodes), parent)
        return unmarshal_node(element, nodes[0], ctx)

    if cardinality is Cardinality.OPTIONAL:
        if not nodes:
            return None
        if len(nodes) > 1:
            raise UnmarshalError.multiple_nodes(slot.attr, cardinality.value, len(nodes), parent)
        return unmarshal_node(element, nodes[0], ctx)

    if cardinality is Cardinality.NON_EMPTY and not nodes:
        raise UnmarshalError.empty_non_empty(slot.attr, parent)
    return tuple(unmarshal_node(element, child, ctx) for child in nodes)
