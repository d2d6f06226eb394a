"""Find-references for element tags and properties used in bindings."""

from __future__ import annotations

import logging
import re
from collections.abc import Iterator
from typing import TYPE_CHECKING

from ._lexer import Binding, EndTag, StartTag, Text, iter_bindings, start_tags, tokenize
from .context import (
    AttributeValueContext,
    DatabindingExpressionContext,
    TagNameContext,
    classify,
)
from .inheritance import InheritanceResolver
from .positions import to_range

if TYPE_CHECKING:
    from .cache import DocumentCache
    from .models import SourceRange

logger = logging.getLogger(__name__)

_re_identifier = re.compile(r"[A-Za-z_$][\w$]*")


class ReferenceEngine:
    """Resolves the feature under the cursor and collects its occurrences."""

    def find(self, url: str, offset: int, cache: DocumentCache) -> list[SourceRange] | None:
        """Find every occurrence of the feature at ``offset`` in ``url``.

        Returns:
            Ranges ordered by first appearance, the requesting document first,
            or None when no feature can be resolved at ``offset``
        """
        text = cache.get_text(url)
        if text is None:
            return None

        context = classify(text, offset)
        if isinstance(context, TagNameContext):
            if not context.has_open_bracket or not context.tag_name:
                return None
            return self._element_references(url, context.tag_name, cache)
        if isinstance(context, DatabindingExpressionContext):
            return self._property_references(url, text, offset, context.scope_element, cache)
        if isinstance(context, AttributeValueContext) and context.binding_style != "none":
            return self._property_references(url, text, offset, context.scope_element, cache)
        return None

    def _element_references(
        self, url: str, tagname: str, cache: DocumentCache
    ) -> list[SourceRange] | None:
        if cache.package_graph(url).get_element(tagname) is None:
            logger.debug(f"No element known for <{tagname}>")
            return None

        urls = [url]
        for other in cache.urls():
            graph = cache.get_graph(other)
            if other != url and graph is not None and graph.get_element(tagname) is not None:
                urls.append(other)

        ranges: list[SourceRange] = []
        for document in urls:
            text = cache.get_text(document) or ""
            for tag in start_tags(text):
                if tag.name == tagname:
                    ranges.append(to_range(document, text, tag.start, tag.end))
        return _dedupe(ranges)

    def _property_references(
        self,
        url: str,
        text: str,
        offset: int,
        scope: str | None,
        cache: DocumentCache,
    ) -> list[SourceRange] | None:
        if scope is None:
            return None
        name = _identifier_at(text, offset)
        if name is None:
            return None

        capabilities = InheritanceResolver(cache.package_graph(url)).resolve_tag(scope)
        if capabilities is None or name not in capabilities.properties:
            logger.debug(f"{name} is not a property of {scope}")
            return None

        pattern = re.compile(rf"(?<![\w$.]){re.escape(name)}(?![\w$])")
        ranges = []
        for binding in _scoped_bindings(text, scope):
            for match in pattern.finditer(text, binding.expression_start, binding.expression_end):
                ranges.append(to_range(url, text, match.start(), match.end()))
        return _dedupe(ranges)


def _identifier_at(text: str, offset: int) -> str | None:
    """Return the root of the dotted path touching ``offset``."""
    start = offset
    while start > 0 and (text[start - 1].isalnum() or text[start - 1] in "_$."):
        start -= 1
    for match in _re_identifier.finditer(text, start):
        if match.start() > offset:
            break
        if match.end() >= offset or text[match.end() : match.end() + 1] == ".":
            return match.group()
    return None


def _scoped_bindings(text: str, module_id: str) -> Iterator[Binding]:
    """Yield the bindings in text and attribute values whose innermost ``<dom-module>`` is ``module_id``."""
    modules: list[str | None] = []
    for token in tokenize(text):
        if isinstance(token, StartTag):
            if token.name.lower() == "dom-module" and not token.self_closing:
                modules.append(token.get_attr_value("id"))
                continue
            if not modules or modules[-1] != module_id:
                continue
            for attr in token.attrs:
                if attr.value_start is not None and attr.value_end is not None:
                    yield from iter_bindings(text, attr.value_start, attr.value_end)
        elif isinstance(token, EndTag):
            if token.name.lower() == "dom-module" and modules:
                modules.pop()
        elif isinstance(token, Text) and modules and modules[-1] == module_id:
            yield from iter_bindings(text, token.start, token.end)


def _dedupe(ranges: list[SourceRange]) -> list[SourceRange]:
    return list(dict.fromkeys(ranges))
