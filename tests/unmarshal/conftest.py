"""Shared fixtures for unmarshal tests."""

from __future__ import annotations

from collections.abc import Callable
from typing import Any

import pytest

from tests.unmarshal.fakes import FakeLanguage, FakeNode, node, tok
from tsast.config.models import UnmarshalConfig
from tsast.unmarshal.annotations import Range, TextDecoder, compile_annotation
from tsast.unmarshal.builder import BuildContext
from tsast.unmarshal.cursor import Cursor
from tsast.unmarshal.symbols import SymbolTable


@pytest.fixture
def language() -> FakeLanguage:
    return FakeLanguage()


@pytest.fixture
def symbols(language: FakeLanguage) -> SymbolTable:
    """A fresh (unshared) symbol table over the fake grammar."""
    return SymbolTable(language)


@pytest.fixture
def one_plus_two() -> tuple[bytes, FakeNode]:
    """``1 + 2`` as program > binary_expression(left, operator, right)."""
    source = b"1 + 2"
    tree = node(
        "program",
        0,
        5,
        node(
            "binary_expression",
            0,
            5,
            ("left", node("number", 0, 1)),
            ("operator", tok("+", 2)),
            ("right", node("number", 4, 5)),
        ),
    )
    return source, tree


@pytest.fixture
def make_ctx(symbols: SymbolTable) -> Callable[..., BuildContext]:
    """Build a context over a fake tree, rooted at ``root``."""

    def _make(
        root: FakeNode,
        source: bytes,
        annotation: Any = Range,
        config: UnmarshalConfig | None = None,
    ) -> BuildContext:
        options = config or UnmarshalConfig()
        return BuildContext(
            cursor=Cursor.from_node(root),
            source=source,
            symbols=symbols,
            annotation=compile_annotation(annotation),
            decoder=TextDecoder(options.encoding, options.decode_errors),
            options=options,
        )

    return _make
