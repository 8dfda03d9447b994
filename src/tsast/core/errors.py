"""tsast error types with typed error codes.

Error code ranges:
- 1xxx: Parse (no tree, grammar unavailable)
- 2xxx: Config
- 3xxx: Unmarshal (node/type mismatch found while walking a tree)
- 4xxx: Schema (defects in AST declarations, found before walking)
"""

from collections.abc import Iterable
from dataclasses import dataclass, field
from enum import IntEnum
from typing import Any


class ErrorCode(IntEnum):
    """Typed error codes for programmatic handling."""

    # Parse (1xxx)
    PARSE_NO_ROOT = 1001
    PARSE_LANGUAGE_UNAVAILABLE = 1002

    # Config (2xxx)
    CONFIG_PARSE_ERROR = 2001
    CONFIG_INVALID_VALUE = 2002
    CONFIG_FILE_NOT_FOUND = 2004

    # Unmarshal (3xxx)
    UNMARSHAL_NO_MATCH = 3001
    UNMARSHAL_MISSING_FIELD = 3002
    UNMARSHAL_MULTIPLE_NODES = 3003
    UNMARSHAL_EMPTY_NON_EMPTY = 3004
    UNMARSHAL_TOO_DEEP = 3005

    # Schema (4xxx)
    SCHEMA_DUPLICATE_SYMBOL = 4001
    SCHEMA_UNKNOWN_KIND = 4002
    SCHEMA_UNKNOWN_FIELD = 4003
    SCHEMA_UNDECLARED_FIELD = 4004
    SCHEMA_UNSUPPORTED_ANNOTATION = 4005
    SCHEMA_UNSUPPORTED_TARGET = 4006


@dataclass(frozen=True, slots=True)
class TsAstError(Exception):
    """Base error with structured context."""

    code: ErrorCode
    message: str
    retryable: bool = False
    details: dict[str, Any] = field(default_factory=dict)

    @property
    def error_name(self) -> str:
        """String identifier for logging (e.g., 'UNMARSHAL_NO_MATCH')."""
        return self.code.name

    def to_dict(self) -> dict[str, Any]:
        """Serialize for JSON output."""
        return {
            "code": self.code.value,
            "error": self.error_name,
            "message": self.message,
            "retryable": self.retryable,
            "details": self.details,
        }

    def __str__(self) -> str:
        return f"[{self.code.value}] {self.error_name}: {self.message}"


def _where(node: Any) -> str:
    # node is a NodeInfo; kept untyped to avoid an import cycle with unmarshal
    return f"{node.kind} at {node.start_point.line}:{node.start_point.column}"


class ParseError(TsAstError):
    """The external parser produced nothing to unmarshal."""

    @classmethod
    def no_root(cls) -> "ParseError":
        from tsast.config.constants import NO_ROOT_MESSAGE

        return cls(code=ErrorCode.PARSE_NO_ROOT, message=NO_ROOT_MESSAGE)

    @classmethod
    def language_unavailable(cls, name: str) -> "ParseError":
        return cls(
            code=ErrorCode.PARSE_LANGUAGE_UNAVAILABLE,
            message=f"Language not available: {name}",
            details={"language": name},
        )


class ConfigError(TsAstError):
    """Configuration-related errors."""

    @classmethod
    def parse_error(cls, path: str, reason: str) -> "ConfigError":
        return cls(
            code=ErrorCode.CONFIG_PARSE_ERROR,
            message=f"Failed to parse config at {path}: {reason}",
            details={"path": path, "reason": reason},
        )

    @classmethod
    def invalid_value(cls, field: str, value: Any, reason: str) -> "ConfigError":
        return cls(
            code=ErrorCode.CONFIG_INVALID_VALUE,
            message=f"Invalid value for '{field}': {reason}",
            details={"field": field, "value": str(value), "reason": reason},
        )

    @classmethod
    def file_not_found(cls, path: str) -> "ConfigError":
        return cls(
            code=ErrorCode.CONFIG_FILE_NOT_FOUND,
            message=f"Config file not found: {path}",
            details={"path": path},
        )


class UnmarshalError(TsAstError):
    """The parse tree does not have the shape the target type declares."""

    @classmethod
    def no_match(cls, target: str, expected: Iterable[str], node: Any) -> "UnmarshalError":
        expected = sorted(expected)
        return cls(
            code=ErrorCode.UNMARSHAL_NO_MATCH,
            message=(
                f"expected one of {', '.join(expected)} for {target} "
                f"but got {node.kind} (symbol {node.symbol}) at "
                f"{node.start_point.line}:{node.start_point.column}"
            ),
            details={"target": target, "expected": expected, "symbol": node.symbol},
        )

    @classmethod
    def missing_field(cls, field: str, node: Any) -> "UnmarshalError":
        return cls(
            code=ErrorCode.UNMARSHAL_MISSING_FIELD,
            message=f"expected a node '{field}' but didn't get one ({_where(node)})",
            details={"field": field, "cardinality": "required", "node": node.kind},
        )

    @classmethod
    def multiple_nodes(
        cls, field: str, cardinality: str, count: int, node: Any
    ) -> "UnmarshalError":
        return cls(
            code=ErrorCode.UNMARSHAL_MULTIPLE_NODES,
            message=(
                f"expected a node of type ({cardinality}) '{field}' "
                f"but got {count} ({_where(node)})"
            ),
            details={"field": field, "cardinality": cardinality, "count": count},
        )

    @classmethod
    def empty_non_empty(cls, field: str, node: Any) -> "UnmarshalError":
        return cls(
            code=ErrorCode.UNMARSHAL_EMPTY_NON_EMPTY,
            message=(
                f"expected a node of type (non_empty) '{field}' "
                f"but got an empty list ({_where(node)})"
            ),
            details={"field": field, "cardinality": "non_empty", "node": node.kind},
        )

    @classmethod
    def too_deep(cls, target: str, limit: int) -> "UnmarshalError":
        return cls(
            code=ErrorCode.UNMARSHAL_TOO_DEEP,
            message=(
                f"tree nests too deeply to build {target} "
                f"(Python recursion limit is {limit}; raise it with sys.setrecursionlimit)"
            ),
            details={"target": target, "recursion_limit": limit},
        )


class SchemaError(TsAstError):
    """An AST declaration disagrees with itself or with its grammar."""

    @classmethod
    def duplicate_symbol(cls, target: str, symbol: int, first: str, second: str) -> "SchemaError":
        return cls(
            code=ErrorCode.SCHEMA_DUPLICATE_SYMBOL,
            message=f"{target}: symbol {symbol} is claimed by both {first} and {second}",
            details={"target": target, "symbol": symbol, "variants": [first, second]},
        )

    @classmethod
    def unknown_kind(cls, target: str, kind: str, named: bool) -> "SchemaError":
        flavor = "named" if named else "anonymous"
        return cls(
            code=ErrorCode.SCHEMA_UNKNOWN_KIND,
            message=f"{target}: grammar has no {flavor} node kind {kind!r}",
            details={"target": target, "kind": kind, "named": named},
        )

    @classmethod
    def unknown_field(cls, target: str, field: str) -> "SchemaError":
        return cls(
            code=ErrorCode.SCHEMA_UNKNOWN_FIELD,
            message=f"{target}: grammar has no field named {field!r}",
            details={"target": target, "field": field},
        )

    @classmethod
    def undeclared_field(cls, target: str, field: str) -> "SchemaError":
        return cls(
            code=ErrorCode.SCHEMA_UNDECLARED_FIELD,
            message=f"{target}.{field} was not declared with a tsast field helper",
            details={"target": target, "field": field},
        )

    @classmethod
    def unsupported_annotation(cls, spec: Any) -> "SchemaError":
        return cls(
            code=ErrorCode.SCHEMA_UNSUPPORTED_ANNOTATION,
            message=f"Cannot extract an annotation of type {spec!r}",
            details={"spec": repr(spec)},
        )

    @classmethod
    def unsupported_target(cls, target: Any, reason: str) -> "SchemaError":
        return cls(
            code=ErrorCode.SCHEMA_UNSUPPORTED_TARGET,
            message=f"Cannot unmarshal into {target!r}: {reason}",
            details={"target": repr(target), "reason": reason},
        )

