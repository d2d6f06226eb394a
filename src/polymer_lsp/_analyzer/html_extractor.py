"""Scanning of HTML documents for imports, inline scripts and dom-modules."""

from __future__ import annotations

import logging
from dataclasses import dataclass, field

from polymer_lsp._lexer import Comment, EndTag, RawText, StartTag, Text, tokenize
from polymer_lsp.loader import resolve_url
from polymer_lsp.models import Slot

logger = logging.getLogger(__name__)

JAVASCRIPT_TYPES = frozenset({"", "text/javascript", "application/javascript", "module"})


@dataclass
class DomModule:
    id: str
    description: str = ""
    slots: list[Slot] = field(default_factory=list)


@dataclass
class HtmlScan:
    imports: list[str] = field(default_factory=list)
    scripts: list[str] = field(default_factory=list)
    dom_modules: dict[str, DomModule] = field(default_factory=dict)


def _is_import_link(tag: StartTag) -> bool:
    rel = (tag.get_attr_value("rel") or "").lower()
    return "import" in rel.split()


def _is_javascript(tag: StartTag) -> bool:
    return (tag.get_attr_value("type") or "").strip().lower() in JAVASCRIPT_TYPES


def scan_html(url: str, text: str) -> HtmlScan:
    """Collect the imports, inline scripts and dom-modules of an HTML document."""
    scan = HtmlScan()
    modules: list[DomModule] = []
    comment: str | None = None
    script_tag: StartTag | None = None

    def add_import(href: str | None) -> None:
        if not href:
            return
        resolved = resolve_url(url, href)
        if resolved is None:
            logger.debug(f"Not following external import {href} in {url}")
        elif resolved not in scan.imports:
            scan.imports.append(resolved)

    for token in tokenize(text):
        if isinstance(token, StartTag):
            name = token.name.lower()
            script_tag = None
            if name == "link" and _is_import_link(token):
                add_import(token.get_attr_value("href"))
            elif name == "script":
                src = token.get_attr_value("src")
                if src is not None:
                    add_import(src)
                elif _is_javascript(token):
                    script_tag = token
            elif name == "dom-module":
                module = DomModule(id=token.get_attr_value("id") or "", description=comment or "")
                if module.id:
                    scan.dom_modules.setdefault(module.id, module)
                if not token.self_closing:
                    modules.append(module)
            elif name == "slot" and modules:
                modules[-1].slots.append(Slot(name=token.get_attr_value("name") or ""))
            comment = None
        elif isinstance(token, EndTag):
            if token.name.lower() == "dom-module" and modules:
                modules.pop()
            comment = None
        elif isinstance(token, RawText):
            if script_tag is not None:
                scan.scripts.append(text[token.start : token.end])
            script_tag = None
        elif isinstance(token, Comment):
            body = text[token.start : token.end]
            if body.startswith("<!--"):
                comment = body[4:].removesuffix("-->").strip()
        elif isinstance(token, Text) and text[token.start : token.end].strip():
            comment = None

    return scan
