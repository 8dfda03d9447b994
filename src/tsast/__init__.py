"""tsast - typed ASTs from tree-sitter parse trees."""

from tsast.core.errors import (
    ParseError,
    SchemaError,
    TsAstError,
    UnmarshalError,
)
from tsast.unmarshal import (
    Choice,
    Leaf,
    Loc,
    Outcome,
    Pos,
    Range,
    Span,
    Syntax,
    Token,
    annotation,
    meta,
    non_empty,
    optional,
    parse_byte_string,
    repeated,
    required,
    source_text,
    token,
    unmarshal,
)

__version__ = "0.1.0"

__all__ = [
    "parse_byte_string",
    "unmarshal",
    "Outcome",
    "Syntax",
    "Leaf",
    "Token",
    "Choice",
    "token",
    "annotation",
    "source_text",
    "meta",
    "required",
    "optional",
    "repeated",
    "non_empty",
    "Range",
    "Span",
    "Loc",
    "Pos",
    "TsAstError",
    "ParseError",
    "UnmarshalError",
    "SchemaError",
]
