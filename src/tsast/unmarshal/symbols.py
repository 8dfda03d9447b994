"""Grammar symbol lookup and per-type dispatch tables.

A :class:`SymbolTable` wraps one ``tree_sitter.Language``. It resolves the
``kind`` declared by each node class to the grammar's numeric symbol and
caches, per target type, the mapping from symbol to the product class that
handles it. Tables are built lazily, once, and never mutated afterwards.
"""

from __future__ import annotations

import threading
from collections.abc import Mapping
from types import MappingProxyType
from typing import Any, ClassVar

import structlog

from tsast.core.errors import SchemaError
from tsast.unmarshal.fields import EXTRA_CHILDREN
from tsast.unmarshal.schema import Syntax, field_plan, iter_variants

log = structlog.get_logger(__name__)

DispatchTable = Mapping[int, type[Syntax]]


class SymbolTable:
    """Name/symbol lookups for one grammar, plus the dispatch tables built on it."""

    _instances: ClassVar[dict[Any, SymbolTable]] = {}
    _instances_lock: ClassVar[threading.Lock] = threading.Lock()

    def __init__(self, language: Any) -> None:
        self._language = language
        self._lock = threading.Lock()
        self._dispatch: dict[type, DispatchTable] = {}
        self._checked: set[type] = set()

    @classmethod
    def for_language(cls, language: Any) -> SymbolTable:
        """Return the shared table for ``language``, creating it on first use.

        Tables are keyed by the language itself: ``tree_sitter.Language``
        compares equal for the same grammar pointer, so re-wrapping a grammar
        reuses its table and the cache holds one entry per grammar.
        """
        with cls._instances_lock:
            table = cls._instances.get(language)
            if table is None:
                table = cls(language)
                cls._instances[language] = table
        return table

    @classmethod
    def reset(cls) -> None:
        """Drop all shared tables (mainly for testing)."""
        with cls._instances_lock:
            cls._instances.clear()

    @property
    def language(self) -> Any:
        return self._language

    # ------------------------------------------------------------------
    # Grammar lookups
    # ------------------------------------------------------------------

    def symbol_for(self, target: type[Syntax]) -> int:
        """Resolve a node class's declared kind to its grammar symbol."""
        symbol = self._language.id_for_node_kind(target.kind, target.named)
        if not symbol:
            raise SchemaError.unknown_kind(target.__name__, target.kind, target.named)
        return int(symbol)

    def name_for(self, symbol: int) -> str:
        return self._language.node_kind_for_id(symbol) or f"#{symbol}"

    def has_field(self, name: str) -> bool:
        return bool(self._language.field_id_for_name(name))

    # ------------------------------------------------------------------
    # Dispatch
    # ------------------------------------------------------------------

    def dispatch_for(self, target: type) -> DispatchTable:
        """Symbol -> product class for every variant ``target`` can produce.

        Raises:
            SchemaError: If a kind is unknown to the grammar, or two different
                classes claim the same symbol.
        """
        table = self._dispatch.get(target)
        if table is not None:
            return table
        with self._lock:
            table = self._dispatch.get(target)
            if table is None:
                table = self._build_dispatch(target)
                self._dispatch[target] = table
        return table

    def _build_dispatch(self, target: type) -> DispatchTable:
        entries: dict[int, type[Syntax]] = {}
        for variant in iter_variants(target):
            symbol = self.symbol_for(variant)
            existing = entries.get(symbol)
            if existing is not None and existing is not variant:
                raise SchemaError.duplicate_symbol(
                    target.__name__, symbol, existing.__name__, variant.__name__
                )
            entries[symbol] = variant
        log.debug("dispatch_table_built", target=target.__name__, symbols=len(entries))
        return MappingProxyType(entries)

    def expected(self, table: DispatchTable) -> list[str]:
        """Human-readable names of every symbol in a dispatch table."""
        return [f"{cls.__name__} ({self.name_for(sym)}, symbol {sym})" for sym, cls in table.items()]

    def check_fields(self, target: type[Syntax]) -> None:
        """Fail if ``target`` declares a child field the grammar does not define.

        Raises:
            SchemaError: On the first unknown field name.
        """
        if target in self._checked:
            return
        for slot in field_plan(target).child_slots():
            if slot.bucket == EXTRA_CHILDREN:
                continue
            if not self.has_field(slot.grammar_name):
                raise SchemaError.unknown_field(target.__name__, slot.grammar_name)
        with self._lock:
            self._checked.add(target)
