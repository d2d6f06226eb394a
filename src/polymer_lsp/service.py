"""
In-process editor service answering completion and reference queries.

All public coroutines absorb failures: analysis errors fall back to the last
good feature graph, and anything else is logged and answered with ``None``.
"""

from __future__ import annotations

import logging

from .analyzer import Analyzer, PolymerAnalyzer
from .cache import DocumentCache
from .completion import CompletionEngine
from .context import classify
from .errors import LoadError, PositionOutOfRange
from .loader import UrlLoader
from .models import CompletionResult, FeatureGraph, Position, SourceRange
from .positions import to_offset
from .references import ReferenceEngine

logger = logging.getLogger(__name__)


class LocalEditorService:
    """Editor service over an in-memory document cache.

    Args:
        loader: Loads documents that were never passed to ``file_changed``,
            including the imports followed by the default analyzer
        analyzer: Builds feature graphs; defaults to a ``PolymerAnalyzer``
            over ``loader``
    """

    def __init__(self, loader: UrlLoader | None = None, analyzer: Analyzer | None = None):
        self.loader = loader
        self.analyzer = analyzer if analyzer is not None else PolymerAnalyzer(loader)
        self.cache = DocumentCache(self.analyzer)
        self.completion_engine = CompletionEngine()
        self.reference_engine = ReferenceEngine()

    async def file_changed(self, url: str, new_contents: str) -> None:
        """Replace the contents of ``url`` and re-analyze it. Never raises."""
        logger.debug(f"File changed: {url}")
        await self.cache.update(url, new_contents)

    async def get_typeahead_completions_at_position(
        self, url: str, position: Position
    ) -> CompletionResult | None:
        """Complete whatever is being typed at ``position`` in ``url``."""
        try:
            text = await self._get_text(url)
            if text is None:
                return None
            offset = to_offset(text, position)
            context = classify(text, offset)
            logger.debug(f"Completing {type(context).__name__} at {url}:{position.line}:{position.column}")
            return self.completion_engine.complete(context, self.cache.package_graph(url))
        except PositionOutOfRange as e:
            logger.debug(f"Cannot complete at {url}: {e}")
            return None
        except Exception:
            logger.exception(f"Unexpected error while completing at {url}")
            return None

    async def get_references_for_feature_at_position(
        self, url: str, position: Position
    ) -> list[SourceRange] | None:
        """Find every occurrence of the element or property at ``position`` in ``url``."""
        try:
            text = await self._get_text(url)
            if text is None:
                return None
            offset = to_offset(text, position)
            return self.reference_engine.find(url, offset, self.cache)
        except PositionOutOfRange as e:
            logger.debug(f"Cannot find references at {url}: {e}")
            return None
        except Exception:
            logger.exception(f"Unexpected error while finding references at {url}")
            return None

    async def get_document_text(self, url: str) -> str | None:
        """Return the current text of ``url``, loading it if it is not cached."""
        try:
            return await self._get_text(url)
        except Exception:
            logger.exception(f"Unexpected error while loading {url}")
            return None

    def get_graph(self, url: str) -> FeatureGraph | None:
        """Return the last successfully analyzed graph of ``url``."""
        return self.cache.get_graph(url)

    async def _get_text(self, url: str) -> str | None:
        if url not in self.cache:
            await self._load(url)
        await self.cache.wait_for(url)
        return self.cache.get_text(url)

    async def _load(self, url: str) -> None:
        if self.loader is None or not self.loader.can_load(url):
            logger.debug(f"No loader for {url}")
            return
        try:
            contents = self.loader.load(url)
        except LoadError as e:
            logger.debug(f"Could not load {url}: {e.message}")
            return
        await self.cache.update(url, contents)
