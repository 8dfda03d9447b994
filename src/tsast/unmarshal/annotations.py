"""Annotations derived from node metadata alone.

An annotation spec names what to attach to every AST node:

- ``Range``: byte range ``[start, end)``
- ``Span``: start/end line-column positions
- ``Loc``: both of the above
- ``Pos``: start position only
- ``str``: the node's source text, decoded leniently
- ``None``: nothing (the annotation is ``None``)
- a class with a ``from_node(node, source)`` classmethod
- a tuple of specs, extracted positionally into a tuple

Extraction never looks at children and never fails for a supported spec.
"""

from __future__ import annotations

from collections.abc import Callable
from dataclasses import dataclass
from functools import lru_cache
from typing import Any

from tsast.config.constants import DEFAULT_ENCODING
from tsast.core.errors import SchemaError
from tsast.unmarshal.cursor import NodeInfo, Pos


@dataclass(frozen=True, slots=True)
class Range:
    """Half-open byte range."""

    start: int
    end: int

    @classmethod
    def from_node(cls, node: NodeInfo, source: bytes) -> Range:  # noqa: ARG003
        return cls(node.start_byte, node.end_byte)

    def slice(self, source: bytes) -> bytes:
        return source[self.start : self.end]


@dataclass(frozen=True, slots=True)
class Span:
    """Start and end line/column positions."""

    start: Pos
    end: Pos

    @classmethod
    def from_node(cls, node: NodeInfo, source: bytes) -> Span:  # noqa: ARG003
        return cls(node.start_point, node.end_point)


@dataclass(frozen=True, slots=True)
class Loc:
    """Byte range plus line/column span."""

    range: Range
    span: Span

    @classmethod
    def from_node(cls, node: NodeInfo, source: bytes) -> Loc:
        return cls(Range.from_node(node, source), Span.from_node(node, source))


@dataclass(frozen=True, slots=True)
class TextDecoder:
    """Lenient decoder for node text."""

    encoding: str = DEFAULT_ENCODING
    errors: str = "replace"

    def __call__(self, data: bytes) -> str:
        return data.decode(self.encoding, self.errors)


DEFAULT_DECODER = TextDecoder()

Extractor = Callable[[NodeInfo, bytes, TextDecoder], Any]


def _text(node: NodeInfo, source: bytes, decoder: TextDecoder) -> str:
    return decoder(source[node.start_byte : node.end_byte])


def _unit(node: NodeInfo, source: bytes, decoder: TextDecoder) -> None:  # noqa: ARG001
    return None


def _start(node: NodeInfo, source: bytes, decoder: TextDecoder) -> Pos:  # noqa: ARG001
    return node.start_point


@lru_cache(maxsize=None)
def compile_annotation(spec: Any) -> Extractor:
    """Turn an annotation spec into an extractor function.

    Raises:
        SchemaError: If the spec is not one of the supported forms.
    """
    if spec is None or spec is type(None):
        return _unit
    if spec is str:
        return _text
    if spec is Pos:
        return _start
    if isinstance(spec, tuple):
        parts = tuple(compile_annotation(s) for s in spec)

        def _composite(node: NodeInfo, source: bytes, decoder: TextDecoder) -> tuple[Any, ...]:
            return tuple(part(node, source, decoder) for part in parts)

        return _composite
    from_node = getattr(spec, "from_node", None)
    if isinstance(spec, type) and callable(from_node):

        def _custom(node: NodeInfo, source: bytes, decoder: TextDecoder) -> Any:  # noqa: ARG001
            return from_node(node, source)

        return _custom
    raise SchemaError.unsupported_annotation(spec)


def extract_annotation(
    spec: Any, node: NodeInfo, source: bytes, decoder: TextDecoder = DEFAULT_DECODER
) -> Any:
    """Extract the annotation ``spec`` describes for ``node``."""
    return compile_annotation(spec)(node, source, decoder)
