"""Data models for polymer-lsp."""

from __future__ import annotations

import re
from dataclasses import dataclass, field
from typing import Any, ClassVar

_re_upper = re.compile(r"([A-Z])")
_re_dash_letter = re.compile(r"-([a-z])")


def camel_to_dash(name: str) -> str:
    """Convert a property name like ``notifyingProperty`` to ``notifying-property``."""
    return _re_upper.sub(lambda m: "-" + m.group(1).lower(), name)


def dash_to_camel(name: str) -> str:
    """Convert an attribute name like ``notifying-property`` to ``notifyingProperty``."""
    return _re_dash_letter.sub(lambda m: m.group(1).upper(), name)


@dataclass(frozen=True)
class Position:
    """A zero-based line/column pair."""

    line: int
    column: int


@dataclass(frozen=True)
class SourceRange:
    """A range of text inside the document identified by ``url``."""

    url: str
    start: Position
    end: Position


@dataclass
class Property:
    """A property declared on an element or behavior."""

    name: str
    type: str | None = None
    description: str = ""
    notify: bool = False
    read_only: bool = False
    inherited_from: str | None = None

    @property
    def private(self) -> bool:
        return self.name.startswith("_")

    @property
    def attribute_name(self) -> str:
        return camel_to_dash(self.name)


@dataclass
class Attribute:
    """An attribute declared explicitly, e.g. through ``observedAttributes``."""

    name: str
    type: str | None = None
    description: str = ""
    inherited_from: str | None = None


@dataclass
class Event:
    """An event an element or behavior fires."""

    name: str
    type: str = "CustomEvent"
    description: str = ""
    inherited_from: str | None = None


@dataclass
class Slot:
    """A slot in an element's template. The default slot has an empty name."""

    name: str = ""


@dataclass
class CapabilityNode:
    """A node of the capability graph.

    Holds the capabilities declared directly on it plus the ordered names of the
    behaviors it composes. Behaviors are shared and resolved by name lookup.
    """

    name: str
    description: str = ""
    properties: list[Property] = field(default_factory=list)
    attributes: list[Attribute] = field(default_factory=list)
    events: list[Event] = field(default_factory=list)
    behaviors: list[str] = field(default_factory=list)
    url: str | None = None

    def get_property(self, name: str) -> Property | None:
        for prop in self.properties:
            if prop.name == name:
                return prop
        return None


@dataclass
class Behavior(CapabilityNode):
    """A reusable bundle of properties, attributes and events."""


@dataclass
class Element(CapabilityNode):
    """A custom element."""

    tagname: str | None = None
    class_name: str | None = None
    slots: list[Slot] = field(default_factory=list)


@dataclass
class AnalysisWarning:
    """A non-fatal problem found while analyzing a document or its imports."""

    url: str
    message: str


@dataclass
class FeatureGraph:
    """Features reachable from one document, including its transitive imports."""

    url: str
    elements: dict[str, Element] = field(default_factory=dict)
    behaviors: dict[str, Behavior] = field(default_factory=dict)
    imports: list[str] = field(default_factory=list)
    warnings: list[AnalysisWarning] = field(default_factory=list)

    def get_element(self, tagname: str) -> Element | None:
        return self.elements.get(tagname)

    def get_behavior(self, name: str) -> Behavior | None:
        return self.behaviors.get(name)

    def add_element(self, element: Element) -> None:
        """Add an element; the first element registered for a tag name wins."""
        if element.tagname and element.tagname not in self.elements:
            self.elements[element.tagname] = element

    def add_behavior(self, behavior: Behavior) -> None:
        """Add a behavior; the first behavior registered under a name wins."""
        if behavior.name not in self.behaviors:
            self.behaviors[behavior.name] = behavior

    def reaches(self, url: str) -> bool:
        return url == self.url or url in self.imports

    @classmethod
    def merge(cls, graphs: list[FeatureGraph], url: str = "") -> FeatureGraph:
        """Merge several graphs into one package view, earlier graphs taking precedence."""
        merged = cls(url=url)
        for graph in graphs:
            for element in graph.elements.values():
                merged.add_element(element)
            for behavior in graph.behaviors.values():
                merged.add_behavior(behavior)
            for imported in graph.imports:
                if imported not in merged.imports:
                    merged.imports.append(imported)
            merged.warnings.extend(graph.warnings)
        return merged


@dataclass(frozen=True)
class CapabilityDescriptor:
    """A completion entry describing one capability of an element."""

    name: str
    description: str
    type: str | None
    sort_key: str
    inherited_from: str | None = None

    def to_dict(self) -> dict[str, Any]:
        return {
            "name": self.name,
            "description": self.description,
            "type": self.type,
            "sortKey": self.sort_key,
            "inheritedFrom": self.inherited_from,
        }


@dataclass(frozen=True)
class AttributeDescriptor(CapabilityDescriptor):
    """An attribute name completion."""


@dataclass(frozen=True)
class PropertyDescriptor(CapabilityDescriptor):
    """A property usable inside a data-binding expression."""


@dataclass(frozen=True)
class AttributeValueDescriptor(CapabilityDescriptor):
    """A property offered as an attribute value, rendered for the binding style."""

    autocompletion: str = ""

    def to_dict(self) -> dict[str, Any]:
        data = super().to_dict()
        data["autocompletion"] = self.autocompletion
        return data


@dataclass(frozen=True)
class ElementDescriptor:
    """An element tag completion."""

    tagname: str
    description: str
    expand_to: str
    expand_to_snippet: str

    def to_dict(self) -> dict[str, Any]:
        return {
            "tagname": self.tagname,
            "description": self.description,
            "expandTo": self.expand_to,
            "expandToSnippet": self.expand_to_snippet,
        }


@dataclass
class ElementCompletion:
    elements: list[ElementDescriptor]
    kind: ClassVar[str] = "element-tags"

    def to_dict(self) -> dict[str, Any]:
        return {"kind": self.kind, "elements": [e.to_dict() for e in self.elements]}


@dataclass
class AttributesCompletion:
    attributes: list[AttributeDescriptor]
    kind: ClassVar[str] = "attributes"

    def to_dict(self) -> dict[str, Any]:
        return {"kind": self.kind, "attributes": [a.to_dict() for a in self.attributes]}


@dataclass
class AttributeValuesCompletion:
    attributes: list[AttributeValueDescriptor]
    kind: ClassVar[str] = "attribute-values"

    def to_dict(self) -> dict[str, Any]:
        return {"kind": self.kind, "attributes": [a.to_dict() for a in self.attributes]}


@dataclass
class DatabindingCompletion:
    properties: list[PropertyDescriptor]
    kind: ClassVar[str] = "properties-in-polymer-databinding"

    def to_dict(self) -> dict[str, Any]:
        return {"kind": self.kind, "properties": [p.to_dict() for p in self.properties]}


CompletionResult = (
    ElementCompletion | AttributesCompletion | AttributeValuesCompletion | DatabindingCompletion
)
