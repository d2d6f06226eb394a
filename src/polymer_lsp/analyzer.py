"""
Feature graph construction for Polymer-style HTML and JavaScript documents.

The editor service only depends on the narrow ``Analyzer`` protocol; the
``PolymerAnalyzer`` implementation follows HTML imports and script sources
transitively and isolates failures of imported documents from the document
being analyzed.
"""

from __future__ import annotations

import logging
from collections import deque
from dataclasses import dataclass, field
from typing import Protocol

from ._analyzer import extract_script, scan_html
from .errors import AnalysisError
from .loader import InMemoryOverlayUrlLoader, UrlLoader
from .models import AnalysisWarning, Behavior, Element, FeatureGraph

logger = logging.getLogger(__name__)


class Analyzer(Protocol):
    """Turns document text into a feature graph."""

    def analyze(self, url: str, text: str) -> FeatureGraph:
        """Analyze ``text`` as the contents of ``url``.

        Raises:
            AnalysisError: If the document itself cannot be analyzed
        """
        ...


@dataclass
class DocumentFeatures:
    """Features declared directly in one document."""

    url: str
    elements: list[Element] = field(default_factory=list)
    behaviors: list[Behavior] = field(default_factory=list)
    imports: list[str] = field(default_factory=list)


class PolymerAnalyzer:
    """Analyzes Polymer elements, behaviors and vanilla custom elements."""

    def __init__(self, loader: UrlLoader | None = None):
        self.loader = InMemoryOverlayUrlLoader(loader)

    def analyze(self, url: str, text: str) -> FeatureGraph:
        """Analyze a document and everything it imports.

        Args:
            url: Url of the document
            text: Current contents of the document, which later imports of
                ``url`` will also see

        Returns:
            The features of the document followed by those of its imports

        Raises:
            AnalysisError: If the document itself cannot be analyzed. Problems
                with imported documents are reported as graph warnings.
        """
        self.loader.set_contents(url, text)
        root = self.analyze_document(url, text)

        graph = FeatureGraph(url=url)
        self._add_features(graph, root)

        visited = {url}
        pending = deque(root.imports)
        while pending:
            imported = pending.popleft()
            if imported in visited:
                continue
            visited.add(imported)
            graph.imports.append(imported)
            try:
                features = self.analyze_document(imported, self.loader.load(imported))
            except AnalysisError as e:
                logger.debug(f"Skipping {imported} imported from {url}: {e}")
                graph.warnings.append(AnalysisWarning(url=imported, message=e.message))
                continue
            self._add_features(graph, features)
            pending.extend(features.imports)

        logger.debug(
            f"Analyzed {url}: {len(graph.elements)} elements, {len(graph.behaviors)} behaviors, "
            f"{len(graph.imports)} imports, {len(graph.warnings)} warnings"
        )
        return graph

    def analyze_document(self, url: str, text: str) -> DocumentFeatures:
        """Extract the features declared directly in one document."""
        if url.endswith((".js", ".mjs")):
            script = extract_script(url, text)
            return DocumentFeatures(url=url, elements=script.elements, behaviors=script.behaviors)

        html = scan_html(url, text)
        features = DocumentFeatures(url=url, imports=html.imports)
        for source in html.scripts:
            script = extract_script(url, source)
            features.elements.extend(script.elements)
            features.behaviors.extend(script.behaviors)

        for element in features.elements:
            module = html.dom_modules.get(element.tagname or "")
            if module is None:
                continue
            if not element.slots:
                element.slots = list(module.slots)
            if not element.description:
                element.description = module.description
        return features

    def _add_features(self, graph: FeatureGraph, features: DocumentFeatures) -> None:
        for element in features.elements:
            graph.add_element(element)
        for behavior in features.behaviors:
            graph.add_behavior(behavior)
