"""Unmarshalling tree-sitter parse trees into typed ASTs."""

from tsast.unmarshal.annotations import (
    Loc,
    Range,
    Span,
    TextDecoder,
    compile_annotation,
    extract_annotation,
)
from tsast.unmarshal.builder import BuildContext, build_product, unmarshal_node
from tsast.unmarshal.cursor import Cursor, NodeInfo, Pos
from tsast.unmarshal.driver import Outcome, build, parse_byte_string, unmarshal
from tsast.unmarshal.fields import (
    EXTRA_CHILDREN,
    FieldName,
    Fields,
    collect_fields,
    lookup_field,
    normalize_field_name,
)
from tsast.unmarshal.schema import (
    Cardinality,
    Choice,
    Leaf,
    Syntax,
    Token,
    annotation,
    meta,
    non_empty,
    optional,
    repeated,
    required,
    source_text,
    token,
)
from tsast.unmarshal.symbols import SymbolTable

__all__ = [
    # Entry points
    "parse_byte_string",
    "unmarshal",
    "build",
    "Outcome",
    # Declarations
    "Syntax",
    "Leaf",
    "Token",
    "Choice",
    "Cardinality",
    "token",
    "annotation",
    "source_text",
    "meta",
    "required",
    "optional",
    "repeated",
    "non_empty",
    # Annotations
    "Range",
    "Span",
    "Loc",
    "Pos",
    "TextDecoder",
    "compile_annotation",
    "extract_annotation",
    # Engine
    "BuildContext",
    "build_product",
    "unmarshal_node",
    "Cursor",
    "NodeInfo",
    "SymbolTable",
    "EXTRA_CHILDREN",
    "FieldName",
    "Fields",
    "collect_fields",
    "lookup_field",
    "normalize_field_name",
]
