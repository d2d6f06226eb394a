"""Cursor context classification.

``classify`` looks only at the current document text, so it keeps working while
the document is half typed and no longer analyzes.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Literal

from ._lexer import Comment, EndTag, RawText, StartTag, Text, open_binding, tokenize

BindingStyle = Literal["none", "one-way", "two-way"]


@dataclass(frozen=True)
class TagNameContext:
    """The cursor is on a start tag name, or on a blank line where a tag could start."""

    partial: str
    tag_name: str
    insertion_range: tuple[int, int]
    has_open_bracket: bool = True


@dataclass(frozen=True)
class AttributeNameContext:
    element: str
    existing_attribute_names: frozenset[str] = field(default_factory=frozenset)
    attribute_name: str | None = None


@dataclass(frozen=True)
class AttributeValueContext:
    element: str
    attribute_name: str
    binding_style: BindingStyle = "none"
    scope_element: str | None = None
    expression: str = ""


@dataclass(frozen=True)
class DatabindingExpressionContext:
    scope_element: str | None
    expression: str = ""


@dataclass(frozen=True)
class SuppressedContext:
    """Inside script or style content."""


@dataclass(frozen=True)
class NoContext:
    pass


Context = (
    TagNameContext
    | AttributeNameContext
    | AttributeValueContext
    | DatabindingExpressionContext
    | SuppressedContext
    | NoContext
)


def classify(text: str, offset: int) -> Context:
    """Classify the lexical context at ``offset`` in ``text``."""
    modules: list[StartTag] = []

    for token in tokenize(text):
        if token.start > offset:
            break
        if token.start == offset and isinstance(token, (StartTag, EndTag, Comment)):
            break
        if isinstance(token, StartTag):
            if token.contains(offset):
                return _classify_in_tag(text, token, offset, _scope(modules))
            if token.name.lower() == "dom-module" and not token.self_closing:
                modules.append(token)
        elif isinstance(token, EndTag):
            if token.start < offset < token.end:
                return NoContext()
            if token.name.lower() == "dom-module" and modules:
                modules.pop()
        elif isinstance(token, RawText):
            if token.start <= offset <= token.end:
                return SuppressedContext()
        elif isinstance(token, Comment):
            if token.start < offset < token.end:
                return NoContext()
        elif token.start <= offset <= token.end:
            return _classify_in_text(text, token, offset, _scope(modules))

    # Between two adjacent tags or at the very end of the text
    return _classify_in_text(text, Text(offset, offset), offset, _scope(modules))


def enclosing_scope(text: str, offset: int) -> str | None:
    """Return the id of the innermost ``<dom-module>`` open at ``offset``."""
    modules: list[StartTag] = []
    for token in tokenize(text):
        if token.start >= offset:
            break
        if isinstance(token, StartTag) and token.name.lower() == "dom-module":
            if not token.self_closing:
                modules.append(token)
        elif isinstance(token, EndTag) and token.name.lower() == "dom-module" and modules:
            modules.pop()
    return _scope(modules)


def _scope(modules: list[StartTag]) -> str | None:
    if not modules:
        return None
    return modules[-1].get_attr_value("id")


def _classify_in_tag(text: str, tag: StartTag, offset: int, scope: str | None) -> Context:
    if offset <= tag.name_end:
        return TagNameContext(
            partial=text[tag.start + 1 : offset],
            tag_name=tag.name,
            insertion_range=(tag.start, tag.name_end),
        )

    editing = None
    for attr in tag.attrs:
        if attr.eq is not None and attr.value_end is not None and attr.eq < offset <= attr.value_end:
            return _classify_in_value(text, tag, attr.name, attr.value_start, offset, scope)
        if attr.name_start < offset <= attr.name_end:
            editing = attr

    existing = frozenset(attr.name for attr in tag.attrs if attr is not editing)
    return AttributeNameContext(
        element=tag.name,
        existing_attribute_names=existing,
        attribute_name=editing.name if editing else None,
    )


def _classify_in_value(
    text: str, tag: StartTag, attribute: str, value_start: int | None, offset: int, scope: str | None
) -> AttributeValueContext:
    start = offset if value_start is None else value_start
    binding = open_binding(text, start, offset)
    if binding is None:
        return AttributeValueContext(
            element=tag.name,
            attribute_name=attribute,
            scope_element=scope,
            expression=text[start:offset] if start <= offset else "",
        )
    style, expression_start = binding
    return AttributeValueContext(
        element=tag.name,
        attribute_name=attribute,
        binding_style=style,
        scope_element=scope,
        expression=text[expression_start:offset],
    )


def _classify_in_text(text: str, token: Text, offset: int, scope: str | None) -> Context:
    binding = open_binding(text, token.start, offset)
    if binding is not None:
        _, expression_start = binding
        return DatabindingExpressionContext(
            scope_element=scope, expression=text[expression_start:offset]
        )

    line_start = max(text.rfind("\n", 0, offset) + 1, token.start)
    if text[line_start:offset].strip():
        return NoContext()
    return TagNameContext(
        partial="", tag_name="", insertion_range=(offset, offset), has_open_bracket=False
    )
