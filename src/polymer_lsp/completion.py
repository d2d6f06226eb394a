"""Typeahead completion synthesis."""

from __future__ import annotations

import logging

from .context import (
    AttributeNameContext,
    AttributeValueContext,
    Context,
    DatabindingExpressionContext,
    TagNameContext,
)
from .inheritance import InheritanceResolver, attribute_descriptors, property_descriptors
from .models import (
    AttributesCompletion,
    AttributeValueDescriptor,
    AttributeValuesCompletion,
    CompletionResult,
    DatabindingCompletion,
    Element,
    ElementCompletion,
    ElementDescriptor,
    FeatureGraph,
)

logger = logging.getLogger(__name__)

_BINDING_TEMPLATES = {
    "two-way": "{{{{{name}}}}}",
    "one-way": "[[{name}]]",
    "none": "{name}",
}


class CompletionEngine:
    """Turns a classified cursor context into a completion result."""

    def complete(self, context: Context, graph: FeatureGraph) -> CompletionResult | None:
        """Complete ``context`` against the features of ``graph``.

        Args:
            context: Output of ``polymer_lsp.context.classify``
            graph: The package view of all known features

        Returns:
            The completion result, or None when nothing can be completed here
        """
        resolver = InheritanceResolver(graph)
        if isinstance(context, TagNameContext):
            return self._element_tags(context, graph, resolver)
        if isinstance(context, AttributeNameContext):
            return self._attributes(context, resolver)
        if isinstance(context, AttributeValueContext):
            return self._attribute_values(context, resolver)
        if isinstance(context, DatabindingExpressionContext):
            return self._databinding(context, resolver)
        return None

    def _element_tags(
        self, context: TagNameContext, graph: FeatureGraph, resolver: InheritanceResolver
    ) -> ElementCompletion:
        # Every known element, whatever has been typed so far
        elements = sorted(graph.elements.values(), key=lambda element: element.tagname or "")
        descriptors = []
        for element in elements:
            tagname = element.tagname or ""
            has_attributes = bool(attribute_descriptors(resolver.resolve(element)))
            space = " " if has_attributes else ""
            descriptors.append(
                ElementDescriptor(
                    tagname=tagname,
                    description=element.description,
                    expand_to=f"<{tagname}{space}></{tagname}>",
                    expand_to_snippet=self._element_snippet(element, has_attributes),
                )
            )
        return ElementCompletion(elements=descriptors)

    def _element_snippet(self, element: Element, has_attributes: bool) -> str:
        tagname = element.tagname
        snippet = f"<{tagname}"
        tab_stop = 1
        if has_attributes:
            snippet += f" ${tab_stop}"
            tab_stop += 1
        snippet += ">"

        slots = element.slots
        if len(slots) == 1 and not slots[0].name:
            snippet += f"${tab_stop}"
        else:
            for slot in slots:
                tag_stop, content_stop = tab_stop, tab_stop + 1
                tab_stop += 2
                slot_attribute = f' slot="{slot.name}"' if slot.name else ""
                snippet += (
                    f"\n\t<${{{tag_stop}:div}}{slot_attribute}>"
                    f"${content_stop}</${{{tag_stop}:div}}>"
                )
            if slots:
                snippet += "\n"
        return f"{snippet}</{tagname}>$0"

    def _attributes(
        self, context: AttributeNameContext, resolver: InheritanceResolver
    ) -> AttributesCompletion:
        capabilities = resolver.resolve_tag(context.element)
        if capabilities is None:
            logger.debug(f"No element known for <{context.element}>")
            return AttributesCompletion(attributes=[])
        attributes = [
            attribute
            for attribute in attribute_descriptors(capabilities)
            if attribute.name not in context.existing_attribute_names
        ]
        return AttributesCompletion(attributes=attributes)

    def _attribute_values(
        self, context: AttributeValueContext, resolver: InheritanceResolver
    ) -> AttributeValuesCompletion:
        scope = context.scope_element or context.element
        capabilities = resolver.resolve_tag(scope)
        if capabilities is None:
            logger.debug(f"No element known for scope {scope}")
            return AttributeValuesCompletion(attributes=[])

        target_type = self._target_attribute_type(context, resolver)
        template = _BINDING_TEMPLATES[context.binding_style]
        values = [
            AttributeValueDescriptor(
                name=prop.name,
                description=prop.description,
                type=prop.type,
                sort_key=prop.sort_key,
                inherited_from=prop.inherited_from,
                autocompletion=template.format(name=prop.name),
            )
            for prop in property_descriptors(capabilities)
            if _is_bindable(prop.type, target_type)
        ]
        return AttributeValuesCompletion(attributes=values)

    def _target_attribute_type(
        self, context: AttributeValueContext, resolver: InheritanceResolver
    ) -> str | None:
        capabilities = resolver.resolve_tag(context.element)
        if capabilities is None:
            return None
        for attribute in attribute_descriptors(capabilities):
            if attribute.name == context.attribute_name:
                return attribute.type
        return None

    def _databinding(
        self, context: DatabindingExpressionContext, resolver: InheritanceResolver
    ) -> DatabindingCompletion | None:
        if context.scope_element is None:
            return None
        capabilities = resolver.resolve_tag(context.scope_element)
        if capabilities is None:
            logger.debug(f"No element known for scope {context.scope_element}")
            return DatabindingCompletion(properties=[])
        return DatabindingCompletion(properties=property_descriptors(capabilities))


def _is_bindable(property_type: str | None, target_type: str | None) -> bool:
    """Whether a property of ``property_type`` can be bound to an attribute of ``target_type``."""
    if property_type is not None and property_type.lower() == "function":
        return False
    if property_type is None or target_type is None or target_type == "*":
        return True
    return property_type.lower() == target_type.lower()
