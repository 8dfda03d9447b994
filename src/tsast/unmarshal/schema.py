"""Declaring AST types that can be unmarshalled from a parse tree.

Three shapes are supported:

- **Products**: frozen dataclasses subclassing :class:`Syntax`. ``kind`` names
  the grammar node type they match. Every dataclass field is declared with
  one of the helpers below, which records how the field is filled in.
- **Leaves**: :class:`Leaf` (named token with ``ann`` and ``text``) and
  :class:`Token` (anonymous token with ``ann`` only). They consume no children.
- **Sums**: subclasses of :class:`Choice` listing ``variants``. Unmarshalling
  a sum yields the instance of whichever variant matched the node's symbol.
  Nested sums are flattened.

Example::

    @dataclass(frozen=True)
    class Integer(Leaf):
        kind = "integer"

    class Operand(Choice):
        variants = (Integer, lambda: BinaryOperator)

    @dataclass(frozen=True)
    class BinaryOperator(Syntax):
        kind = "binary_operator"
        left: Operand = required(Operand)
        operator: Operators = required(Operators)
        right: Operand = required(Operand)

Variants and field element types may be zero-argument callables returning the
type, for references to classes declared later in the module.
"""

from __future__ import annotations

import dataclasses
from collections.abc import Callable, Iterator
from dataclasses import dataclass
from enum import Enum
from functools import lru_cache
from typing import Any, ClassVar

from tsast.core.errors import SchemaError
from tsast.unmarshal.annotations import Extractor, compile_annotation
from tsast.unmarshal.fields import FieldName, grammar_field_name, normalize_field_name

_SPEC_KEY = "tsast"

TypeRef = type | Callable[[], type]


class Cardinality(str, Enum):
    """How many child nodes a field accepts."""

    REQUIRED = "required"  # exactly one
    OPTIONAL = "optional"  # zero or one
    REPEATED = "repeated"  # zero or more
    NON_EMPTY = "non_empty"  # one or more


class _Requested(Enum):
    ANNOTATION = "annotation"


REQUESTED = _Requested.ANNOTATION
"""Marks a field that receives the annotation type chosen by the caller."""


@dataclass(frozen=True)
class ChildField:
    """A field filled from the children bucketed under one field name."""

    element: TypeRef
    cardinality: Cardinality
    name: str | None = None  # grammar field name, when it differs from the attribute


@dataclass(frozen=True)
class AnnotationField:
    """A field filled from the node's own metadata."""

    spec: Any


def _declare(spec: ChildField | AnnotationField) -> Any:
    return dataclasses.field(metadata={_SPEC_KEY: spec})


def annotation() -> Any:
    """The annotation chosen by the caller of the unmarshaller."""
    return _declare(AnnotationField(REQUESTED))


def source_text() -> Any:
    """The node's source text, decoded leniently."""
    return _declare(AnnotationField(str))


def meta(spec: Any) -> Any:
    """A fixed annotation (``Range``, ``Span``, ``Loc``, ...) regardless of the caller's."""
    return _declare(AnnotationField(spec))


def required(element: TypeRef, *, name: str | None = None) -> Any:
    return _declare(ChildField(element, Cardinality.REQUIRED, name))


def optional(element: TypeRef, *, name: str | None = None) -> Any:
    return _declare(ChildField(element, Cardinality.OPTIONAL, name))


def repeated(element: TypeRef, *, name: str | None = None) -> Any:
    return _declare(ChildField(element, Cardinality.REPEATED, name))


def non_empty(element: TypeRef, *, name: str | None = None) -> Any:
    return _declare(ChildField(element, Cardinality.NON_EMPTY, name))


# =============================================================================
# Type shapes
# =============================================================================


@dataclass(frozen=True)
class Syntax:
    """Base class for product node types."""

    kind: ClassVar[str] = ""
    named: ClassVar[bool] = True

    ann: Any = annotation()


@dataclass(frozen=True)
class Leaf(Syntax):
    """Named token: annotation plus source text, no children."""

    text: str = source_text()


@dataclass(frozen=True)
class Token(Syntax):
    """Anonymous token such as ``+`` or ``if``."""

    named: ClassVar[bool] = False


class Choice:
    """Base class for sum types. Never instantiated."""

    variants: ClassVar[tuple[TypeRef, ...]] = ()

    def __new__(cls, *args: Any, **kwargs: Any) -> Choice:  # noqa: ARG003
        raise TypeError(f"{cls.__name__} is a sum type; unmarshal one of its variants")


def token(kind: str, name: str | None = None) -> type[Token]:
    """Declare an anonymous token type for ``kind`` (e.g. ``token("+")``)."""
    cls_name = name or f"Token_{'_'.join(f'{ord(c):x}' for c in kind)}"
    cls = type(cls_name, (Token,), {"kind": kind, "__qualname__": cls_name})
    return dataclass(frozen=True)(cls)


def resolve_type(ref: TypeRef) -> type:
    """Resolve a type reference that may be a forward-reference callable."""
    if isinstance(ref, type):
        return ref
    if callable(ref):
        resolved = ref()
        if isinstance(resolved, type):
            return resolved
    raise SchemaError.unsupported_target(ref, "expected a class or a callable returning one")


def iter_variants(target: type) -> Iterator[type[Syntax]]:
    """Yield every product class a target can produce, flattening nested sums."""
    seen: set[type] = set()

    def _walk(t: type) -> Iterator[type[Syntax]]:
        if t in seen:
            return
        seen.add(t)
        if issubclass(t, Choice):
            for ref in t.variants:
                yield from _walk(resolve_type(ref))
        elif issubclass(t, Syntax):
            if not t.kind:
                raise SchemaError.unsupported_target(t, "no grammar kind declared")
            yield t
        else:
            raise SchemaError.unsupported_target(t, "not a Syntax or Choice subclass")

    yield from _walk(target)


# =============================================================================
# Field plans
# =============================================================================


@dataclass(frozen=True)
class Slot:
    """One dataclass field of a product, with how to fill it."""

    attr: str
    spec: ChildField | AnnotationField
    bucket: FieldName | None = None  # child fields only
    element: type | None = None  # child fields only
    extractor: Extractor | None = None  # fixed-spec annotation fields only

    @property
    def grammar_name(self) -> str:
        """The field name as the grammar spells it."""
        if isinstance(self.spec, ChildField) and self.spec.name:
            return self.spec.name
        return grammar_field_name(self.attr)


@dataclass(frozen=True)
class FieldPlan:
    """Ordered slots of a product type."""

    target: type[Syntax]
    slots: tuple[Slot, ...]

    @property
    def has_children(self) -> bool:
        return any(isinstance(s.spec, ChildField) for s in self.slots)

    def child_slots(self) -> Iterator[Slot]:
        return (s for s in self.slots if isinstance(s.spec, ChildField))


@lru_cache(maxsize=None)
def field_plan(cls: type[Syntax]) -> FieldPlan:
    """Compile the ordered field plan of a product type.

    Raises:
        SchemaError: If the class is not a dataclass of its own, a field was
            declared without a helper, or an annotation spec is unsupported.
    """
    if "__dataclass_fields__" not in cls.__dict__:
        raise SchemaError.unsupported_target(cls, "subclasses must be decorated with @dataclass")

    slots: list[Slot] = []
    for f in dataclasses.fields(cls):
        spec = f.metadata.get(_SPEC_KEY)
        if isinstance(spec, ChildField):
            bucket = normalize_field_name(spec.name) if spec.name else FieldName(f.name)
            slots.append(Slot(f.name, spec, bucket=bucket, element=resolve_type(spec.element)))
        elif isinstance(spec, AnnotationField):
            extractor = None if spec.spec is REQUESTED else compile_annotation(spec.spec)
            slots.append(Slot(f.name, spec, extractor=extractor))
        else:
            raise SchemaError.undeclared_field(cls.__name__, f.name)
    return FieldPlan(cls, tuple(slots))
