"""Tests for the generic constructor (builder.py)."""

from __future__ import annotations

from collections.abc import Callable
from dataclasses import dataclass
from typing import Any

import pytest

from tests.unmarshal import arith
from tests.unmarshal.fakes import FakeNode, node, tok
from tsast.config.models import UnmarshalConfig
from tsast.core.errors import ErrorCode, SchemaError, UnmarshalError
from tsast.unmarshal.annotations import Range
from tsast.unmarshal.builder import BuildContext, unmarshal_node
from tsast.unmarshal.cursor import NodeInfo
from tsast.unmarshal.schema import Syntax, required

MakeCtx = Callable[..., BuildContext]


def _run(make_ctx: MakeCtx, target: type, root: FakeNode, source: bytes, **kwargs: Any) -> Any:
    ctx = make_ctx(root, source, **kwargs)
    return unmarshal_node(target, ctx.cursor.node(), ctx)


def _if(*children: FakeNode | tuple[str, FakeNode]) -> FakeNode:
    return node("if_statement", 0, 30, tok("if", 0), *children)


def _block(start: int, *children: FakeNode) -> FakeNode:
    return node("block", start, start + 5, *children)


class TestProducts:
    """Fields filled from buckets."""

    def test_one_plus_two(self, make_ctx: MakeCtx, one_plus_two: tuple[bytes, FakeNode]) -> None:
        """Left/right operands and the operator token get their own ranges."""
        source, tree = one_plus_two

        program = _run(make_ctx, arith.Program, tree, source, annotation=(Range, str))

        assert program.ann == (Range(0, 5), "1 + 2")
        (expr,) = program.extra_children
        assert isinstance(expr, arith.BinaryExpression)
        assert expr.left == arith.Number(ann=(Range(0, 1), "1"), text="1")
        assert expr.operator == arith.Plus(ann=(Range(2, 3), "+"))
        assert expr.right == arith.Number(ann=(Range(4, 5), "2"), text="2")

    def test_nested_products(self, make_ctx: MakeCtx) -> None:
        """Operands recurse through the sum type."""
        source = b"a - 1 + b"
        inner = node(
            "binary_expression",
            0,
            5,
            ("left", node("identifier", 0, 1)),
            ("operator", tok("-", 2)),
            ("right", node("number", 4, 5)),
        )
        tree = node(
            "binary_expression",
            0,
            9,
            ("left", inner),
            ("operator", tok("+", 6)),
            ("right", node("identifier", 8, 9)),
        )

        expr = _run(make_ctx, arith.Expression, tree, source)

        assert isinstance(expr.left, arith.BinaryExpression)
        assert isinstance(expr.left.operator, arith.Minus)
        assert expr.left.left.text == "a"
        assert expr.right.text == "b"

    def test_leaf_consumes_no_children(self, make_ctx: MakeCtx) -> None:
        tree = node("number", 0, 3, node("identifier", 0, 1))
        ctx = make_ctx(tree, b"1e5")

        value = unmarshal_node(arith.Number, ctx.cursor.node(), ctx)

        assert value == arith.Number(ann=Range(0, 3), text="1e5")
        assert ctx.cursor._cursor.first_child_calls == 0

    def test_childless_product_gets_empty_fields(self, make_ctx: MakeCtx) -> None:
        program = _run(make_ctx, arith.Program, node("program", 0, 0), b"")
        assert program.extra_children == ()

    def test_extras_skipped(self, make_ctx: MakeCtx) -> None:
        source = b"# c\n1"
        tree = node("program", 0, 5, node("comment", 0, 3, extra=True), node("number", 4, 5))

        program = _run(make_ctx, arith.Program, tree, source)

        assert [type(s) for s in program.extra_children] == [arith.Number]


class TestCardinality:
    """Required, optional, repeated and non-empty fields."""

    def test_required_missing(self, make_ctx: MakeCtx) -> None:
        tree = node(
            "binary_expression",
            0,
            3,
            ("operator", tok("+", 0)),
            ("right", node("number", 2, 3)),
        )

        with pytest.raises(UnmarshalError) as exc_info:
            _run(make_ctx, arith.BinaryExpression, tree, b"+ 1")

        assert exc_info.value.code == ErrorCode.UNMARSHAL_MISSING_FIELD
        assert "'left'" in exc_info.value.message
        assert "binary_expression" in exc_info.value.message

    def test_required_multiple(self, make_ctx: MakeCtx) -> None:
        tree = node(
            "binary_expression",
            0,
            7,
            ("left", node("number", 0, 1)),
            ("left", node("number", 2, 3)),
            ("operator", tok("+", 4)),
            ("right", node("number", 6, 7)),
        )

        with pytest.raises(UnmarshalError) as exc_info:
            _run(make_ctx, arith.BinaryExpression, tree, b"1 2 + 3")

        assert exc_info.value.code == ErrorCode.UNMARSHAL_MULTIPLE_NODES
        assert exc_info.value.details == {"field": "left", "cardinality": "required", "count": 2}

    def test_optional_absent(self, make_ctx: MakeCtx) -> None:
        tree = _if(("condition", node("identifier", 3, 4)), ("consequence", _block(5, node("number", 6, 7))))

        stmt = _run(make_ctx, arith.IfStatement, tree, b" " * 30)

        assert stmt.alternative is None
        assert isinstance(stmt.consequence, arith.Block)

    def test_optional_present(self, make_ctx: MakeCtx) -> None:
        tree = _if(
            ("condition", node("identifier", 3, 4)),
            ("consequence", _block(5, node("number", 6, 7))),
            ("alternative", node("else_clause", 12, 25, tok("else", 12), _block(18, node("number", 19, 20)))),
        )

        stmt = _run(make_ctx, arith.IfStatement, tree, b" " * 30)

        assert isinstance(stmt.alternative, arith.ElseClause)
        assert stmt.alternative.ann == Range(12, 25)
        (block,) = stmt.alternative.extra_children
        assert block.extra_children[0].ann == Range(19, 20)

    def test_optional_multiple(self, make_ctx: MakeCtx) -> None:
        tree = _if(
            ("condition", node("identifier", 3, 4)),
            ("consequence", _block(5, node("number", 6, 7))),
            ("alternative", node("else_clause", 12, 16)),
            ("alternative", node("else_clause", 17, 21)),
        )

        with pytest.raises(UnmarshalError) as exc_info:
            _run(make_ctx, arith.IfStatement, tree, b" " * 30)

        assert exc_info.value.code == ErrorCode.UNMARSHAL_MULTIPLE_NODES
        assert exc_info.value.details["cardinality"] == "optional"

    @pytest.mark.parametrize("count", [0, 1, 4])
    def test_repeated_exact_size_in_order(self, make_ctx: MakeCtx, count: int) -> None:
        args = [("arguments", node("number", 2 + 2 * i, 3 + 2 * i)) for i in range(count)]
        tree = node("call", 0, 12, ("function", node("identifier", 0, 1)), tok("(", 1), *args)

        call = _run(make_ctx, arith.Call, tree, b"f(1,2,3,4)  ")

        assert [a.ann for a in call.arguments] == [Range(2 + 2 * i, 3 + 2 * i) for i in range(count)]
        assert isinstance(call.arguments, tuple)

    def test_non_empty_rejects_zero(self, make_ctx: MakeCtx) -> None:
        with pytest.raises(UnmarshalError) as exc_info:
            _run(make_ctx, arith.Block, node("block", 0, 2), b"{}")

        assert exc_info.value.code == ErrorCode.UNMARSHAL_EMPTY_NON_EMPTY
        assert "empty list" in exc_info.value.message


class TestSums:
    """Dispatch on the node's symbol."""

    def test_variant_chosen_by_symbol(self, make_ctx: MakeCtx) -> None:
        value = _run(make_ctx, arith.Expression, node("identifier", 0, 3), b"foo")
        assert value == arith.Identifier(ann=Range(0, 3), text="foo")

    def test_no_match_names_expected_and_observed(self, make_ctx: MakeCtx) -> None:
        with pytest.raises(UnmarshalError) as exc_info:
            _run(make_ctx, arith.Operator, node("number", 0, 1), b"1")

        error = exc_info.value
        assert error.code == ErrorCode.UNMARSHAL_NO_MATCH
        assert "Plus (+, symbol 5)" in error.message
        assert "Minus (-, symbol 6)" in error.message
        assert "got number (symbol 3)" in error.message
        assert error.details["symbol"] == 3

    def test_failure_deep_in_tree_aborts_build(self, make_ctx: MakeCtx) -> None:
        """A mismatch in a grandchild fails the whole build."""
        tree = node(
            "program",
            0,
            5,
            node(
                "binary_expression",
                0,
                5,
                ("left", node("number", 0, 1)),
                ("operator", node("number", 2, 3)),
                ("right", node("number", 4, 5)),
            ),
        )

        with pytest.raises(UnmarshalError, match="Operator"):
            _run(make_ctx, arith.Program, tree, b"1 2 3")

    def test_cursor_reset_before_each_branch(self, make_ctx: MakeCtx, one_plus_two: tuple[bytes, FakeNode]) -> None:
        source, tree = one_plus_two
        ctx = make_ctx(tree, source)

        unmarshal_node(arith.Program, ctx.cursor.node(), ctx)

        # program, binary_expression, two numbers and the operator
        assert ctx.cursor._cursor.resets == 5


class TestFieldValidation:
    """Declared field names are checked against the grammar."""

    @dataclass(frozen=True)
    class Typo(Syntax):
        kind = "binary_expression"
        lhs: Any = required(arith.Expression)

    def test_unknown_field_fails_immediately(self, make_ctx: MakeCtx, one_plus_two: tuple[bytes, FakeNode]) -> None:
        source, tree = one_plus_two
        inner = tree.children[0]

        with pytest.raises(SchemaError) as exc_info:
            _run(make_ctx, self.Typo, inner, source)
        assert exc_info.value.code == ErrorCode.SCHEMA_UNKNOWN_FIELD

    def test_validation_can_be_disabled(self, make_ctx: MakeCtx, one_plus_two: tuple[bytes, FakeNode]) -> None:
        """Without validation the misspelt field is simply missing."""
        source, tree = one_plus_two
        inner = tree.children[0]

        with pytest.raises(UnmarshalError, match="'lhs'"):
            _run(
                make_ctx,
                self.Typo,
                inner,
                source,
                config=UnmarshalConfig(validate_field_names=False),
            )


class TestSnapshots:
    """Inputs are never mutated."""

    def test_node_info_from_fields_is_stable(self, make_ctx: MakeCtx, one_plus_two: tuple[bytes, FakeNode]) -> None:
        source, tree = one_plus_two
        before = NodeInfo.from_ts(tree)

        _run(make_ctx, arith.Program, tree, source)

        assert NodeInfo.from_ts(tree) == before
