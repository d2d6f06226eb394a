"""Code intelligence for Polymer-style HTML documents."""

from __future__ import annotations

from .__version import __version__
from .models import Position, SourceRange
from .service import LocalEditorService

__all__ = ["LocalEditorService", "Position", "SourceRange", "__version__"]
