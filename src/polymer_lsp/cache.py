"""Per-document cache of the last successfully analyzed feature graph."""

from __future__ import annotations

import asyncio
import logging
from dataclasses import dataclass, field
from typing import TYPE_CHECKING

from .errors import AnalysisError
from .models import FeatureGraph

if TYPE_CHECKING:
    from .analyzer import Analyzer

logger = logging.getLogger(__name__)


@dataclass
class DocumentSlot:
    """Current text of one document plus its last good graph."""

    url: str
    text: str = ""
    graph: FeatureGraph | None = None
    last_error: Exception | None = None
    version: int = 0
    written_version: int = 0
    lock: asyncio.Lock = field(default_factory=asyncio.Lock, repr=False)


class DocumentCache:
    """Maps urls to their current text and last successfully analyzed graph.

    A failed analysis keeps the previous graph, so half-typed documents keep
    serving the last valid semantic model.
    """

    def __init__(self, analyzer: Analyzer):
        self.analyzer = analyzer
        self._slots: dict[str, DocumentSlot] = {}

    def __contains__(self, url: str) -> bool:
        return url in self._slots

    def urls(self) -> list[str]:
        return list(self._slots)

    def get_slot(self, url: str) -> DocumentSlot | None:
        return self._slots.get(url)

    def get_text(self, url: str) -> str | None:
        slot = self._slots.get(url)
        return slot.text if slot else None

    def get_graph(self, url: str) -> FeatureGraph | None:
        slot = self._slots.get(url)
        return slot.graph if slot else None

    async def update(self, url: str, text: str) -> None:
        """Replace the text of ``url`` and re-analyze it. Never raises.

        When the new text analyzes cleanly, cached documents importing ``url``
        are re-analyzed too so their graphs pick up the new definitions.
        """
        if not await self._write(url, text):
            return
        for dependent in self.dependents(url):
            logger.debug(f"Re-analyzing {dependent}, which imports {url}")
            await self._write(dependent, self._slots[dependent].text)

    def dependents(self, url: str) -> list[str]:
        """Cached urls whose last good graph imports ``url``, directly or transitively."""
        return [
            other
            for other, slot in self._slots.items()
            if other != url and slot.graph is not None and url in slot.graph.imports
        ]

    async def _write(self, url: str, text: str) -> bool:
        """Analyze ``text`` and store it; True if a new graph was stored."""
        slot = self._slots.get(url)
        if slot is None:
            slot = self._slots[url] = DocumentSlot(url=url)
        slot.version += 1
        version = slot.version

        async with slot.lock:
            try:
                graph = self.analyzer.analyze(url, text)
            except AnalysisError as e:
                logger.warning(f"Analysis of {url} failed, keeping last good result: {e.message}")
                graph, error = None, e
            except Exception as e:
                logger.exception(f"Unexpected error while analyzing {url}")
                graph, error = None, e
            else:
                error = None

            if version <= slot.written_version:
                logger.debug(f"Discarding analysis of superseded version {version} of {url}")
                return False
            slot.written_version = version
            slot.text = text
            slot.last_error = error
            if graph is None:
                return False
            slot.graph = graph
            return True

    async def wait_for(self, url: str) -> None:
        """Wait until writes to ``url`` that are in flight have completed."""
        slot = self._slots.get(url)
        if slot is not None:
            async with slot.lock:
                pass

    def package_graph(self, first_url: str | None = None) -> FeatureGraph:
        """Merge all cached graphs, the graph of ``first_url`` taking precedence."""
        graphs = []
        first = self.get_graph(first_url) if first_url else None
        if first is not None:
            graphs.append(first)
        graphs.extend(
            slot.graph
            for slot in self._slots.values()
            if slot.graph is not None and slot.graph is not first
        )
        return FeatureGraph.merge(graphs, url=first_url or "")
