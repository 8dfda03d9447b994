"""Top-level entry points: parse source bytes and unmarshal the tree.

Usage::

    from tsast import Loc, parse_byte_string

    outcome = parse_byte_string("python", b"1 + 2", Module, Loc)
    if outcome.ok:
        module = outcome.value
    else:
        print(outcome.error)
"""

from __future__ import annotations

import sys
from dataclasses import dataclass
from typing import Any, Generic, TypeVar

import structlog
import tree_sitter

from tsast.config.models import UnmarshalConfig
from tsast.core.errors import ParseError, TsAstError, UnmarshalError
from tsast.core.logging import clear_build_id, set_build_id
from tsast.grammars import load_language
from tsast.unmarshal.annotations import Range, TextDecoder, compile_annotation
from tsast.unmarshal.builder import BuildContext, unmarshal_node
from tsast.unmarshal.cursor import Cursor
from tsast.unmarshal.symbols import SymbolTable

log = structlog.get_logger(__name__)

T = TypeVar("T")


@dataclass(frozen=True, slots=True)
class Outcome(Generic[T]):
    """Result of one build: a value, or the failure that aborted it."""

    value: T | None = None
    failure: TsAstError | None = None

    @property
    def ok(self) -> bool:
        return self.failure is None

    @property
    def error(self) -> str | None:
        """The failure's descriptive message, if the build failed."""
        return self.failure.message if self.failure is not None else None

    def unwrap(self) -> T:
        """Return the value, or raise the failure."""
        if self.failure is not None:
            raise self.failure
        return self.value  # type: ignore[return-value]


def build(
    target: type[T],
    root: Any,
    source: bytes,
    *,
    symbols: SymbolTable,
    annotation: Any = Range,
    config: UnmarshalConfig | None = None,
) -> Outcome[T]:
    """Unmarshal the tree under ``root`` into ``target``.

    Args:
        target: A ``Syntax`` or ``Choice`` subclass the root must match.
        root: Root ``tree_sitter.Node``, or None when the parse produced nothing.
        source: The bytes that were parsed.
        symbols: Symbol table of the grammar that produced the tree.
        annotation: Annotation spec attached to every node (see ``annotations``).
        config: Unmarshal options, e.g. ``load_config().unmarshal``. Defaults to
            ``UnmarshalConfig()``; environment and YAML settings are not read here.

    Returns:
        An Outcome holding the AST or the first failure.

    Raises:
        SchemaError: If ``target`` or the types it references are ill-declared.
    """
    if root is None:
        return Outcome(failure=ParseError.no_root())

    options = config or UnmarshalConfig()
    extractor = compile_annotation(annotation)
    with Cursor.from_node(root) as cursor:
        ctx = BuildContext(
            cursor=cursor,
            source=source,
            symbols=symbols,
            annotation=extractor,
            decoder=TextDecoder(options.encoding, options.decode_errors),
            options=options,
        )
        try:
            value = unmarshal_node(target, cursor.node(), ctx)
        except RecursionError:
            failure = UnmarshalError.too_deep(target.__name__, sys.getrecursionlimit())
        except UnmarshalError as e:
            failure = e
        else:
            return Outcome(value=value)
    log.debug(
        "build_failed", target=target.__name__, error=failure.error_name, reason=failure.message
    )
    return Outcome(failure=failure)


def parse_byte_string(
    language: tree_sitter.Language | str,
    source: bytes,
    target: type[T],
    annotation: Any = Range,
    *,
    config: UnmarshalConfig | None = None,
) -> Outcome[T]:
    """Parse ``source`` with ``language`` and unmarshal it into ``target``.

    Args:
        language: A tree-sitter Language, or a grammar name from ``tsast.grammars``.
        source: Source code bytes.
        target: Root AST type.
        annotation: Annotation spec attached to every node.
        config: Unmarshal options, e.g. ``load_config().unmarshal``. Defaults to
            ``UnmarshalConfig()``; environment and YAML settings are not read here.

    Returns:
        An Outcome holding the AST, or the failure message.

    Raises:
        ParseError: If a grammar name cannot be loaded.
        SchemaError: If the AST declarations are ill-formed.
    """
    if isinstance(language, str):
        language = load_language(language)
    symbols = SymbolTable.for_language(language)

    set_build_id()
    try:
        log.debug("parse_started", target=target.__name__, size=len(source))
        tree = tree_sitter.Parser(language).parse(source)
        root = tree.root_node if tree is not None else None
        outcome = build(target, root, source, symbols=symbols, annotation=annotation, config=config)
        log.debug("parse_finished", target=target.__name__, ok=outcome.ok)
        return outcome
    finally:
        clear_build_id()


def unmarshal(
    language: tree_sitter.Language | str,
    source: bytes,
    target: type[T],
    annotation: Any = Range,
    *,
    config: UnmarshalConfig | None = None,
) -> T:
    """Like :func:`parse_byte_string` but raises the failure instead of returning it.

    Raises:
        ParseError: If parsing produced no root node or the grammar is unavailable.
        UnmarshalError: If the tree does not match ``target``.
        SchemaError: If the AST declarations are ill-formed.
    """
    return parse_byte_string(language, source, target, annotation, config=config).unwrap()
