"""Tree-sitter JavaScript parser singleton with parse tree caching.

Editors re-send the same script contents over and over (every keystroke in the
surrounding HTML re-analyzes the document), so parse trees are cached by a hash
of the source.
"""

from __future__ import annotations

import hashlib
import os
from collections import OrderedDict
from typing import TYPE_CHECKING

from tree_sitter import Language, Parser
from tree_sitter_javascript import language

if TYPE_CHECKING:
    from tree_sitter import Tree

_parser: Parser | None = None

# hash(source) -> (Tree, source_bytes), oldest first
_parse_cache: OrderedDict[str, tuple[Tree, bytes]] = OrderedDict()

_CACHE_ENABLED = os.environ.get("POLYMER_LSP_DISABLE_CACHE", "").lower() not in ("1", "true", "yes")
_MAX_CACHE_SIZE = int(os.environ.get("POLYMER_LSP_CACHE_SIZE", "100"))


def _get_parser() -> Parser:
    """Get or create the tree-sitter JavaScript parser singleton."""
    global _parser  # noqa: PLW0603
    if _parser is None:
        _parser = Parser(Language(language()))
    return _parser


def configure_cache(enabled: bool | None = None, max_size: int | None = None) -> None:
    """Override the cache settings read from the environment."""
    global _CACHE_ENABLED, _MAX_CACHE_SIZE  # noqa: PLW0603
    if enabled is not None:
        _CACHE_ENABLED = enabled
    if max_size is not None:
        _MAX_CACHE_SIZE = max_size
    _evict()


def _evict() -> None:
    while len(_parse_cache) > _MAX_CACHE_SIZE:
        _parse_cache.popitem(last=False)


def clear_cache() -> None:
    """Clear the parse tree cache."""
    _parse_cache.clear()


def get_cache_stats() -> dict[str, int]:
    """Get cache statistics.

    Returns:
        Dictionary with cache size, capacity and whether caching is enabled
    """
    return {
        "size": len(_parse_cache),
        "capacity": _MAX_CACHE_SIZE,
        "enabled": _CACHE_ENABLED,
    }


def parse(source_code: str) -> Tree:
    """Parse JavaScript source code using tree-sitter with caching.

    Args:
        source_code: JavaScript source code to parse

    Returns:
        Tree-sitter Tree object. Syntax errors show up as ERROR or MISSING nodes.
    """
    source_bytes = source_code.encode("utf-8")
    cache_key = hashlib.sha256(source_bytes).hexdigest()

    if _CACHE_ENABLED and cache_key in _parse_cache:
        cached_tree, cached_bytes = _parse_cache[cache_key]
        # Hash collision protection
        if cached_bytes == source_bytes:
            _parse_cache.move_to_end(cache_key)
            return cached_tree

    tree = _get_parser().parse(source_bytes)
    if _CACHE_ENABLED:
        _parse_cache[cache_key] = (tree, source_bytes)
        _evict()
    return tree
