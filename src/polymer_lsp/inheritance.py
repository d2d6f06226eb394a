"""Flattening of element capabilities through the behaviors they compose."""

from __future__ import annotations

import logging
from dataclasses import dataclass, field, replace

from .models import (
    Attribute,
    AttributeDescriptor,
    CapabilityNode,
    Event,
    FeatureGraph,
    Property,
    PropertyDescriptor,
)

logger = logging.getLogger(__name__)

# Sort key prefixes: local before inherited before change events
LOCAL_GROUP = "aaa-"
INHERITED_GROUP = "ddd-"
EVENT_GROUP = "eee-"


@dataclass
class Capabilities:
    """Capabilities of a node after flattening, in declaration order."""

    properties: dict[str, Property] = field(default_factory=dict)
    attributes: dict[str, Attribute] = field(default_factory=dict)
    events: dict[str, Event] = field(default_factory=dict)

    def add(self, node: CapabilityNode, inherited_from: str | None) -> None:
        """Add the capabilities declared directly on ``node``; earlier declarations win."""
        for prop in node.properties:
            self.properties.setdefault(prop.name, replace(prop, inherited_from=inherited_from))
        for attr in node.attributes:
            self.attributes.setdefault(attr.name, replace(attr, inherited_from=inherited_from))
        for event in node.events:
            self.events.setdefault(event.name, replace(event, inherited_from=inherited_from))


class InheritanceResolver:
    """Resolves the full capability list of elements in a feature graph.

    Behaviors are visited depth-first in declaration order. A behavior that has
    already been visited is not visited again, which both collapses diamonds and
    drops cyclic edges.
    """

    def __init__(self, graph: FeatureGraph):
        self.graph = graph

    def resolve(self, node: CapabilityNode) -> Capabilities:
        capabilities = Capabilities()
        capabilities.add(node, None)
        self._add_behaviors(node, capabilities, visited={node.name})
        return capabilities

    def resolve_tag(self, tagname: str) -> Capabilities | None:
        element = self.graph.get_element(tagname)
        if element is None:
            return None
        return self.resolve(element)

    def _add_behaviors(
        self, node: CapabilityNode, capabilities: Capabilities, visited: set[str]
    ) -> None:
        for name in node.behaviors:
            if name in visited:
                logger.debug(f"Skipping already visited behavior {name} referenced by {node.name}")
                continue
            behavior = self.graph.get_behavior(name)
            if behavior is None:
                logger.debug(f"Unknown behavior {name} referenced by {node.name}")
                continue
            visited.add(name)
            capabilities.add(behavior, behavior.name)
            self._add_behaviors(behavior, capabilities, visited)


def _group(inherited_from: str | None) -> str:
    return LOCAL_GROUP if inherited_from is None else INHERITED_GROUP


def attribute_descriptors(capabilities: Capabilities) -> list[AttributeDescriptor]:
    """Build the sorted attribute completions of a resolved element."""
    entries: dict[str, AttributeDescriptor] = {}

    def add(name: str, description: str, type_: str | None, sort_key: str, origin: str | None):
        entries.setdefault(name, AttributeDescriptor(name, description, type_, sort_key, origin))

    properties = capabilities.properties.values()
    for prop in properties:
        if prop.private or (prop.type or "").lower() == "function":
            continue
        name = prop.attribute_name
        add(name, prop.description, prop.type, _group(prop.inherited_from) + name, prop.inherited_from)

    for attr in capabilities.attributes.values():
        add(
            attr.name,
            attr.description,
            attr.type,
            _group(attr.inherited_from) + attr.name,
            attr.inherited_from,
        )

    for prop in properties:
        if not prop.notify or prop.private:
            continue
        name = f"on-{prop.attribute_name}-changed"
        add(
            name,
            f"Fired when the `{prop.name}` property changes.",
            "CustomEvent",
            EVENT_GROUP + _group(prop.inherited_from) + name,
            prop.inherited_from,
        )

    for event in capabilities.events.values():
        name = f"on-{event.name}"
        add(
            name,
            event.description,
            event.type,
            EVENT_GROUP + _group(event.inherited_from) + name,
            event.inherited_from,
        )

    return sorted(entries.values(), key=lambda entry: entry.sort_key)


def property_descriptors(capabilities: Capabilities) -> list[PropertyDescriptor]:
    """Build the sorted property completions, private properties included."""
    descriptors = [
        PropertyDescriptor(
            name=prop.name,
            description=prop.description,
            type=prop.type,
            sort_key=_group(prop.inherited_from) + prop.name,
            inherited_from=prop.inherited_from,
        )
        for prop in capabilities.properties.values()
    ]
    return sorted(descriptors, key=lambda entry: entry.sort_key)
