"""Loading tree-sitter grammars by name.

Grammar packages are ordinary wheels (``tree-sitter-python`` and friends)
exposing a function that returns a language pointer. Only the packages the
caller actually uses need to be installed.
"""

from __future__ import annotations

import importlib
import threading
from dataclasses import dataclass
from importlib.util import find_spec

import structlog
import tree_sitter

from tsast.core.errors import ParseError

log = structlog.get_logger(__name__)


@dataclass(frozen=True)
class GrammarPackage:
    """Where to find one grammar."""

    name: str  # grammar name ("python", "tsx", ...)
    package: str  # PyPI package ("tree-sitter-python")
    module: str  # Python import ("tree_sitter_python")
    language_func: str = "language"  # non-standard for typescript/tsx/php


_PACKAGES: tuple[GrammarPackage, ...] = (
    GrammarPackage("python", "tree-sitter-python", "tree_sitter_python"),
    GrammarPackage("javascript", "tree-sitter-javascript", "tree_sitter_javascript"),
    GrammarPackage(
        "typescript", "tree-sitter-typescript", "tree_sitter_typescript", "language_typescript"
    ),
    GrammarPackage("tsx", "tree-sitter-typescript", "tree_sitter_typescript", "language_tsx"),
    GrammarPackage("go", "tree-sitter-go", "tree_sitter_go"),
    GrammarPackage("rust", "tree-sitter-rust", "tree_sitter_rust"),
    GrammarPackage("java", "tree-sitter-java", "tree_sitter_java"),
    GrammarPackage("c", "tree-sitter-c", "tree_sitter_c"),
    GrammarPackage("cpp", "tree-sitter-cpp", "tree_sitter_cpp"),
    GrammarPackage("c_sharp", "tree-sitter-c-sharp", "tree_sitter_c_sharp"),
    GrammarPackage("ruby", "tree-sitter-ruby", "tree_sitter_ruby"),
    GrammarPackage("php", "tree-sitter-php", "tree_sitter_php", "language_php"),
    GrammarPackage("haskell", "tree-sitter-haskell", "tree_sitter_haskell"),
    GrammarPackage("bash", "tree-sitter-bash", "tree_sitter_bash"),
    GrammarPackage("json", "tree-sitter-json", "tree_sitter_json"),
)

GRAMMARS: dict[str, GrammarPackage] = {p.name: p for p in _PACKAGES}

_languages: dict[str, tree_sitter.Language] = {}
_languages_lock = threading.Lock()


def is_grammar_installed(name: str) -> bool:
    """Check if the package for a grammar is importable."""
    pack = GRAMMARS.get(name)
    return pack is not None and find_spec(pack.module) is not None


def load_language(name: str) -> tree_sitter.Language:
    """Get or load a tree-sitter language by grammar name.

    Raises:
        ParseError: If the grammar is unknown or its package is not installed.
    """
    lang = _languages.get(name)
    if lang is not None:
        return lang

    pack = GRAMMARS.get(name)
    if pack is None:
        raise ParseError.language_unavailable(name)
    try:
        mod = importlib.import_module(pack.module)
        lang_fn = getattr(mod, pack.language_func)
    except (ImportError, AttributeError) as err:
        raise ParseError.language_unavailable(name) from err

    with _languages_lock:
        lang = _languages.get(name)
        if lang is None:
            lang = tree_sitter.Language(lang_fn())
            _languages[name] = lang
            log.debug("grammar_loaded", grammar=name, module=pack.module)
    return lang
