"""Shared fixtures for polymer-lsp tests."""

from __future__ import annotations

from pathlib import Path

import pytest

from polymer_lsp import LocalEditorService
from polymer_lsp._analyzer import ts_parser
from polymer_lsp.analyzer import PolymerAnalyzer
from polymer_lsp.errors import LoadError
from polymer_lsp.loader import FSUrlLoader
from polymer_lsp.positions import to_position

STATIC_DIR = Path(__file__).parent / "static"


class DictUrlLoader:
    """Serves documents from a dict, for tests that don't need files on disk."""

    def __init__(self, files: dict[str, str]):
        self.files = dict(files)

    def can_load(self, url: str) -> bool:
        return url in self.files

    def load(self, url: str) -> str:
        try:
            return self.files[url]
        except KeyError as e:
            raise LoadError(url, "no such document") from e


@pytest.fixture(autouse=True)
def clear_parse_cache():
    ts_parser.clear_cache()
    yield
    ts_parser.clear_cache()


@pytest.fixture
def static_loader():
    return FSUrlLoader(STATIC_DIR)


@pytest.fixture
def static_text():
    """Read a fixture document from tests/static."""

    def read(name: str) -> str:
        return (STATIC_DIR / name).read_text(encoding="utf-8")

    return read


@pytest.fixture
def service(static_loader):
    return LocalEditorService(loader=static_loader)


@pytest.fixture
def analyzer(static_loader):
    return PolymerAnalyzer(static_loader)


@pytest.fixture
def make_service():
    """Build a service over in-memory documents."""

    def make(files: dict[str, str] | None = None) -> LocalEditorService:
        return LocalEditorService(loader=DictUrlLoader(files or {}))

    return make


@pytest.fixture
def cursor():
    """Position right after ``needle`` in ``text``, or ``delta`` characters into it."""

    def find(text: str, needle: str, delta: int | None = None):
        offset = text.index(needle)
        offset += len(needle) if delta is None else delta
        return to_position(text, offset)

    return find
