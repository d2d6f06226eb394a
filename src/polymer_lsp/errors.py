"""Exceptions raised inside polymer-lsp.

None of these cross the public ``LocalEditorService`` surface; they are caught
at the document cache or service boundary and turned into ``None`` results.
"""

from __future__ import annotations


class PolymerLspError(Exception):
    """Base class for all polymer-lsp errors."""


class AnalysisError(PolymerLspError):
    """A document could not be parsed or resolved."""

    def __init__(self, url: str, message: str):
        super().__init__(f"{url}: {message}")
        self.url = url
        self.message = message


class LoadError(AnalysisError):
    """A url could not be loaded."""


class PositionOutOfRange(PolymerLspError, ValueError):
    """A line/column or offset lies outside of the document text."""
