"""Extraction of elements and behaviors from JavaScript source.

Recognized declarations:

* ``Polymer({is: 'x-foo', properties: {...}, behaviors: [...]})``
* objects and arrays documented with ``@polymerBehavior``
* ``customElements.define('x-foo', SomeClass)`` for class declarations, class
  expressions and classes declared after the registration, including
  ``static get is()``, ``static get properties()`` and
  ``static get observedAttributes()``
"""

from __future__ import annotations

import logging
import re
from dataclasses import dataclass, field
from typing import TYPE_CHECKING

from polymer_lsp.errors import AnalysisError
from polymer_lsp.models import Attribute, Behavior, Element, Event, Property

from . import ts_parser

if TYPE_CHECKING:
    from tree_sitter import Node

logger = logging.getLogger(__name__)

_re_jsdoc_line_prefix = re.compile(r"^\s*\*\s?")
_re_jsdoc_tag = re.compile(r"^@(\w+)\s*(.*)$")
_re_jsdoc_type = re.compile(r"^\{([^}]*)\}\s*")

CONSTRUCTOR_TYPES = {
    "String": "string",
    "Number": "number",
    "Boolean": "boolean",
    "Array": "Array",
    "Object": "Object",
    "Date": "Date",
    "Function": "Function",
}

DEFINE_FUNCTIONS = frozenset({"customElements.define", "window.customElements.define"})

# Nodes a declaration's leading comment may be attached to
_COMMENT_CARRIERS = frozenset(
    {
        "expression_statement",
        "lexical_declaration",
        "variable_declaration",
        "variable_declarator",
        "assignment_expression",
        "export_statement",
        "call_expression",
        "arguments",
    }
)


@dataclass
class Jsdoc:
    description: str = ""
    tags: list[tuple[str, str]] = field(default_factory=list)

    def get_tag(self, name: str) -> str | None:
        for tag, value in self.tags:
            if tag == name:
                return value
        return None

    def has_tag(self, name: str) -> bool:
        return any(tag == name for tag, _ in self.tags)


@dataclass
class ScriptFeatures:
    """Elements and behaviors declared by one script."""

    elements: list[Element] = field(default_factory=list)
    behaviors: list[Behavior] = field(default_factory=list)


def parse_jsdoc(comment: str) -> Jsdoc | None:
    """Parse a ``/** ... */`` comment. Other comments return None."""
    if not comment.startswith("/**"):
        return None
    body = comment[3:-2] if comment.endswith("*/") else comment[3:]

    description_lines: list[str] = []
    tags: list[tuple[str, str]] = []
    for raw_line in body.splitlines():
        line = _re_jsdoc_line_prefix.sub("", raw_line, count=1).rstrip()
        match = _re_jsdoc_tag.match(line.strip())
        if match:
            tags.append((match.group(1), match.group(2).strip()))
        elif tags:
            if line.strip():
                tag, value = tags[-1]
                tags[-1] = (tag, f"{value} {line.strip()}".strip())
        else:
            description_lines.append(line)
    return Jsdoc(description="\n".join(description_lines).strip(), tags=tags)


def _text(node: Node | None) -> str:
    if node is None or node.text is None:
        return ""
    return node.text.decode("utf-8")


def _string_value(node: Node | None) -> str | None:
    if node is None or node.type != "string":
        return None
    return _text(node)[1:-1]


def _leading_jsdoc(node: Node) -> Jsdoc | None:
    current: Node | None = node
    while current is not None:
        previous = current.prev_named_sibling
        if previous is not None and previous.type == "comment":
            jsdoc = parse_jsdoc(_text(previous))
            if jsdoc is not None:
                return jsdoc
        parent = current.parent
        if parent is None or parent.type not in _COMMENT_CARRIERS:
            break
        current = parent
    return None


def _iter_nodes(root: Node):
    stack = [root]
    while stack:
        node = stack.pop()
        yield node
        stack.extend(reversed(node.children))


def _object_pairs(node: Node) -> dict[str, Node]:
    pairs: dict[str, Node] = {}
    for child in node.named_children:
        if child.type != "pair":
            continue
        key = child.child_by_field_name("key")
        name = _string_value(key) if key is not None and key.type == "string" else _text(key)
        if name:
            pairs[name] = child
    return pairs


def _pair_value(pairs: dict[str, Node], name: str) -> Node | None:
    pair = pairs.get(name)
    return pair.child_by_field_name("value") if pair is not None else None


def _events_from_jsdoc(jsdoc: Jsdoc | None) -> list[Event]:
    if jsdoc is None:
        return []
    events = []
    for tag, value in jsdoc.tags:
        if tag not in ("event", "fires") or not value:
            continue
        name, _, description = value.partition(" ")
        events.append(Event(name=name, description=description.strip()))
    return events


def extract_properties(node: Node | None) -> list[Property]:
    """Read a Polymer ``properties`` object."""
    if node is None or node.type != "object":
        return []

    properties = []
    for name, pair in _object_pairs(node).items():
        value = pair.child_by_field_name("value")
        prop = Property(name=name)
        if value is not None and value.type == "identifier":
            prop.type = CONSTRUCTOR_TYPES.get(_text(value), _text(value))
        elif value is not None and value.type == "object":
            config = _object_pairs(value)
            type_node = _pair_value(config, "type")
            if type_node is not None:
                prop.type = CONSTRUCTOR_TYPES.get(_text(type_node), _text(type_node))
            prop.notify = _text(_pair_value(config, "notify")) == "true"
            prop.read_only = _text(_pair_value(config, "readOnly")) == "true"

        jsdoc = _leading_jsdoc(pair)
        if jsdoc is not None:
            prop.description = jsdoc.description
            declared_type = jsdoc.get_tag("type")
            if declared_type:
                match = _re_jsdoc_type.match(declared_type)
                if match:
                    prop.type = match.group(1)
        properties.append(prop)
    return properties


def _behavior_names(node: Node | None) -> list[str]:
    if node is None or node.type != "array":
        return []
    return [
        _text(child)
        for child in node.named_children
        if child.type in ("identifier", "member_expression")
    ]


class ScriptExtractor:
    """Extracts features from one JavaScript source."""

    def __init__(self, url: str, source: str):
        self.url = url
        self.source = source
        self.features = ScriptFeatures()
        self._classes: dict[str, Node] = {}
        self._defines: list[Node] = []

    def extract(self) -> ScriptFeatures:
        """Extract the features of the script.

        Raises:
            AnalysisError: If the script has syntax errors
        """
        tree = ts_parser.parse(self.source)
        root = tree.root_node
        if root.has_error:
            line = self._first_error_line(root)
            raise AnalysisError(self.url, f"JavaScript syntax error near line {line}")

        for node in _iter_nodes(root):
            if node.type == "call_expression":
                self._handle_call(node)
            elif node.type == "class_declaration":
                name = _text(node.child_by_field_name("name"))
                if name:
                    self._classes.setdefault(name, node)
            elif node.type == "variable_declarator":
                self._handle_declarator(node)
            elif node.type == "assignment_expression":
                self._handle_assignment(node)

        # Registrations may precede the class declaration
        for define in self._defines:
            self._handle_define(define)
        return self.features

    def _first_error_line(self, root: Node) -> int:
        for node in _iter_nodes(root):
            if node.type == "ERROR" or node.is_missing:
                return node.start_point[0] + 1
        return root.start_point[0] + 1

    def _handle_call(self, node: Node) -> None:
        function = _text(node.child_by_field_name("function"))
        if function in DEFINE_FUNCTIONS:
            self._defines.append(node)
            return
        if function != "Polymer":
            return
        arguments = node.child_by_field_name("arguments")
        config = arguments.named_children[0] if arguments and arguments.named_children else None
        if config is None or config.type != "object":
            return

        pairs = _object_pairs(config)
        tagname = _string_value(_pair_value(pairs, "is"))
        if not tagname:
            logger.debug(f"Polymer() call without a tag name in {self.url}")
            return
        jsdoc = _leading_jsdoc(node)
        self.features.elements.append(
            Element(
                name=tagname,
                tagname=tagname,
                description=jsdoc.description if jsdoc else "",
                properties=extract_properties(_pair_value(pairs, "properties")),
                events=_events_from_jsdoc(jsdoc),
                behaviors=_behavior_names(_pair_value(pairs, "behaviors")),
                url=self.url,
            )
        )

    def _handle_declarator(self, node: Node) -> None:
        name = _text(node.child_by_field_name("name"))
        value = node.child_by_field_name("value")
        if not name or value is None:
            return
        if value.type == "class":
            self._classes.setdefault(name, value)
        else:
            self._maybe_behavior(name, node, value)

    def _handle_assignment(self, node: Node) -> None:
        name = _text(node.child_by_field_name("left"))
        value = node.child_by_field_name("right")
        if name and value is not None:
            self._maybe_behavior(name, node, value)

    def _maybe_behavior(self, name: str, declaration: Node, value: Node) -> None:
        if value.type not in ("object", "array"):
            return
        jsdoc = _leading_jsdoc(declaration)
        if jsdoc is None or not jsdoc.has_tag("polymerBehavior"):
            return
        behavior = Behavior(
            name=jsdoc.get_tag("polymerBehavior") or name,
            description=jsdoc.description,
            events=_events_from_jsdoc(jsdoc),
            url=self.url,
        )
        objects = [value] if value.type == "object" else []
        if value.type == "array":
            behavior.behaviors = _behavior_names(value)
            objects = [child for child in value.named_children if child.type == "object"]
        for obj in objects:
            pairs = _object_pairs(obj)
            behavior.properties.extend(extract_properties(_pair_value(pairs, "properties")))
            behavior.behaviors.extend(_behavior_names(_pair_value(pairs, "behaviors")))
        self.features.behaviors.append(behavior)

    def _handle_define(self, node: Node) -> None:
        arguments = node.child_by_field_name("arguments")
        if arguments is None or len(arguments.named_children) < 2:
            return
        tag_node, class_node = arguments.named_children[:2]

        class_name = None
        if class_node.type == "identifier":
            class_name = _text(class_node)
            class_node = self._classes.get(class_name)
            if class_node is None:
                logger.debug(f"customElements.define with unknown class {class_name} in {self.url}")
                return
        elif class_node.type != "class":
            return

        getters = self._static_getters(class_node)
        tagname = _string_value(tag_node)
        if tagname is None and tag_node.type == "member_expression":
            tagname = _string_value(self._returned_value(getters.get("is")))
        if not tagname:
            return

        jsdoc = _leading_jsdoc(class_node) or _leading_jsdoc(node)
        attributes = [
            Attribute(name=value)
            for value in (
                _string_value(child)
                for child in self._returned_children(getters.get("observedAttributes"))
            )
            if value
        ]
        self.features.elements.append(
            Element(
                name=class_name or _text(class_node.child_by_field_name("name")) or tagname,
                class_name=class_name,
                tagname=tagname,
                description=jsdoc.description if jsdoc else "",
                properties=extract_properties(self._returned_value(getters.get("properties"))),
                attributes=attributes,
                events=_events_from_jsdoc(jsdoc),
                behaviors=self._mixed_in_behaviors(class_node),
                url=self.url,
            )
        )

    def _static_getters(self, class_node: Node) -> dict[str, Node]:
        body = class_node.child_by_field_name("body")
        getters: dict[str, Node] = {}
        if body is None:
            return getters
        for member in body.named_children:
            if member.type != "method_definition":
                continue
            keywords = {child.type for child in member.children}
            if "static" in keywords and "get" in keywords:
                getters[_text(member.child_by_field_name("name"))] = member
        return getters

    def _returned_value(self, method: Node | None) -> Node | None:
        if method is None:
            return None
        body = method.child_by_field_name("body")
        if body is None:
            return None
        for statement in body.named_children:
            if statement.type == "return_statement":
                values = [child for child in statement.named_children if child.type != "comment"]
                return values[0] if values else None
        return None

    def _returned_children(self, method: Node | None) -> list[Node]:
        value = self._returned_value(method)
        if value is None or value.type != "array":
            return []
        return list(value.named_children)

    def _mixed_in_behaviors(self, class_node: Node) -> list[str]:
        """Behaviors applied with ``Polymer.mixinBehaviors([...], Base)`` in the extends clause."""
        for child in class_node.children:
            if child.type != "class_heritage":
                continue
            for node in _iter_nodes(child):
                if node.type != "call_expression":
                    continue
                if not _text(node.child_by_field_name("function")).endswith("mixinBehaviors"):
                    continue
                arguments = node.child_by_field_name("arguments")
                if arguments is not None and arguments.named_children:
                    return _behavior_names(arguments.named_children[0])
        return []


def extract_script(url: str, source: str) -> ScriptFeatures:
    """Extract the elements and behaviors declared in ``source``."""
    return ScriptExtractor(url, source).extract()
