"""Loading of document contents by url."""

from __future__ import annotations

import logging
import posixpath
from pathlib import Path
from typing import Protocol
from urllib.parse import urlsplit

from .errors import LoadError

logger = logging.getLogger(__name__)


class UrlLoader(Protocol):
    """Loads the text of documents by url."""

    def can_load(self, url: str) -> bool: ...

    def load(self, url: str) -> str: ...


def resolve_url(base_url: str, href: str) -> str | None:
    """Resolve ``href`` relative to the document at ``base_url``.

    Returns None for hrefs with a scheme or a network location, which are never
    loadable from a package.
    """
    parts = urlsplit(href)
    if parts.scheme or parts.netloc:
        return None
    path = parts.path
    if not path:
        return None
    if path.startswith("/"):
        return posixpath.normpath(path)
    return posixpath.normpath(posixpath.join(posixpath.dirname(base_url), path))


class FSUrlLoader:
    """Loads urls as paths relative to a root directory."""

    def __init__(self, root: str | Path = "."):
        self.root = Path(root).resolve()

    def _get_path(self, url: str) -> Path | None:
        if urlsplit(url).scheme:
            return None
        path = Path(url)
        if not path.is_absolute():
            path = self.root / path
        path = path.resolve()
        if not path.is_relative_to(self.root):
            return None
        return path

    def can_load(self, url: str) -> bool:
        return self._get_path(url) is not None

    def load(self, url: str) -> str:
        path = self._get_path(url)
        if path is None:
            raise LoadError(url, f"outside of {self.root}")
        try:
            return path.read_text(encoding="utf-8")
        except (OSError, UnicodeDecodeError) as e:
            raise LoadError(url, str(e)) from e


class InMemoryOverlayUrlLoader:
    """Serves in-memory contents first, falling back to another loader."""

    def __init__(self, fallback: UrlLoader | None = None):
        self.fallback = fallback
        self.url_contents_map: dict[str, str] = {}

    def set_contents(self, url: str, contents: str) -> None:
        self.url_contents_map[url] = contents

    def can_load(self, url: str) -> bool:
        if url in self.url_contents_map:
            return True
        return self.fallback is not None and self.fallback.can_load(url)

    def load(self, url: str) -> str:
        if url in self.url_contents_map:
            return self.url_contents_map[url]
        if self.fallback is None:
            raise LoadError(url, "no such document")
        return self.fallback.load(url)
