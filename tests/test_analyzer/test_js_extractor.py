"""Tests for extracting elements and behaviors from JavaScript."""

from __future__ import annotations

import pytest

from polymer_lsp._analyzer import extract_script, parse_jsdoc
from polymer_lsp._analyzer import ts_parser
from polymer_lsp.errors import AnalysisError
from polymer_lsp.models import Event


class TestJsdoc:
    """Test jsdoc comment parsing."""

    def test_description_and_tags(self):
        jsdoc = parse_jsdoc(
            """/**
             * First line.
             * Second line.
             *
             * @polymerBehavior Polymer.Named
             * @event ready Fired when
             *   everything is ready.
             */"""
        )
        assert jsdoc.description == "First line.\nSecond line."
        assert jsdoc.get_tag("polymerBehavior") == "Polymer.Named"
        assert jsdoc.get_tag("event") == "ready Fired when everything is ready."
        assert jsdoc.has_tag("event")
        assert not jsdoc.has_tag("type")

    def test_single_line(self):
        jsdoc = parse_jsdoc("/** @polymerBehavior */")
        assert jsdoc.description == ""
        assert jsdoc.has_tag("polymerBehavior")

    def test_plain_comment(self):
        assert parse_jsdoc("/* not documentation */") is None
        assert parse_jsdoc("// neither") is None


class TestPolymerCalls:
    """Test extraction of Polymer() calls."""

    def test_properties(self):
        code_js = """\
/**
 * A fancy element.
 * @event fancy-thing Fired when something fancy happens.
 */
Polymer({
  is: 'x-fancy',
  behaviors: [Polymer.SomeBehavior, MyNamespace.Other],
  properties: {
    /** The label. */
    label: String,
    count: {
      type: Number,
      notify: true,
      readOnly: true
    },
    /** @type {!Array<string>} */
    items: Array,
    'quoted-key': Boolean
  }
});
"""
        features = extract_script("x-fancy.js", code_js)
        (element,) = features.elements
        assert element.tagname == "x-fancy"
        assert element.description == "A fancy element."
        assert element.behaviors == ["Polymer.SomeBehavior", "MyNamespace.Other"]
        assert element.events == [
            Event(name="fancy-thing", description="Fired when something fancy happens.")
        ]
        assert element.url == "x-fancy.js"

        properties = {prop.name: prop for prop in element.properties}
        assert list(properties) == ["label", "count", "items", "quoted-key"]
        assert properties["label"].type == "string"
        assert properties["label"].description == "The label."
        assert properties["count"].type == "number"
        assert properties["count"].notify
        assert properties["count"].read_only
        assert properties["items"].type == "!Array<string>"
        assert properties["quoted-key"].type == "boolean"

    def test_call_without_tag_name(self):
        features = extract_script("anonymous.js", "Polymer({properties: {a: String}});")
        assert features.elements == []

    def test_syntax_error(self):
        with pytest.raises(AnalysisError) as excinfo:
            extract_script("broken.js", "Polymer({\n  is: 'x-broken',\n  properties: {\n")
        assert excinfo.value.url == "broken.js"
        assert "syntax error" in excinfo.value.message


class TestBehaviors:
    """Test extraction of @polymerBehavior declarations."""

    def test_object_behavior(self):
        code_js = """\
/**
 * Adds a value.
 * @polymerBehavior
 */
Polymer.ValueBehavior = {
  properties: {
    value: {type: String, notify: true}
  }
};
"""
        (behavior,) = extract_script("value.js", code_js).behaviors
        assert behavior.name == "Polymer.ValueBehavior"
        assert behavior.description == "Adds a value."
        assert [prop.name for prop in behavior.properties] == ["value"]
        assert behavior.properties[0].notify

    def test_array_behavior(self):
        code_js = """\
/** @polymerBehavior */
const Composed = [Polymer.ValueBehavior, {
  properties: {own: Number},
  behaviors: [Polymer.Extra]
}];
"""
        (behavior,) = extract_script("composed.js", code_js).behaviors
        assert behavior.name == "Composed"
        assert behavior.behaviors == ["Polymer.ValueBehavior", "Polymer.Extra"]
        assert [prop.name for prop in behavior.properties] == ["own"]

    def test_renamed_behavior(self):
        code_js = """\
/** @polymerBehavior Polymer.Public */
Polymer.PublicImpl = {properties: {a: String}};
"""
        (behavior,) = extract_script("renamed.js", code_js).behaviors
        assert behavior.name == "Polymer.Public"

    def test_undocumented_object_is_not_a_behavior(self):
        features = extract_script("plain.js", "window.Config = {properties: {a: String}};")
        assert features.behaviors == []


class TestCustomElements:
    """Test extraction of customElements.define registrations."""

    def test_class_declared_after_registration(self, static_text):
        features = extract_script("vanilla-elements.js", static_text("vanilla-elements.js"))
        elements = {element.tagname: element for element in features.elements}

        with_attributes = elements["vanilla-with-attributes"]
        assert with_attributes.class_name == "VanillaWithAttributes"
        assert [attr.name for attr in with_attributes.attributes] == ["attr1", "attr2"]
        assert with_attributes.description == (
            "A vanilla custom element registered before its class is declared."
        )
        assert [event.name for event in with_attributes.events] == ["value-changed"]

        no_attributes = elements["vanilla-no-attributes"]
        assert no_attributes.attributes == []
        assert no_attributes.description == "A class expression registered by name."

    def test_static_getters(self):
        code_js = """\
class XGetters extends Polymer.mixinBehaviors([Polymer.ValueBehavior], Polymer.Element) {
  static get is() { return 'x-getters'; }
  static get properties() {
    return {
      /** Shown to the user. */
      title: String
    };
  }
}
customElements.define(XGetters.is, XGetters);
"""
        (element,) = extract_script("getters.js", code_js).elements
        assert element.tagname == "x-getters"
        assert element.behaviors == ["Polymer.ValueBehavior"]
        assert [(prop.name, prop.type, prop.description) for prop in element.properties] == [
            ("title", "string", "Shown to the user.")
        ]

    def test_inline_class_expression(self):
        code_js = "customElements.define('x-inline', class extends HTMLElement {});"
        (element,) = extract_script("inline.js", code_js).elements
        assert element.tagname == "x-inline"
        assert element.class_name is None

    def test_unknown_class(self):
        code_js = "customElements.define('x-imported', ImportedClass);"
        assert extract_script("imported.js", code_js).elements == []


class TestParseCache:
    """Test the tree-sitter parse tree cache."""

    def test_same_source_is_parsed_once(self):
        code_js = "Polymer({is: 'x-cached'});"
        first = ts_parser.parse(code_js)
        second = ts_parser.parse(code_js)
        assert first is second
        assert ts_parser.get_cache_stats()["size"] == 1

    def test_eviction(self):
        ts_parser.configure_cache(max_size=2)
        try:
            for i in range(3):
                ts_parser.parse(f"var x = {i};")
            assert ts_parser.get_cache_stats()["size"] == 2
        finally:
            ts_parser.configure_cache(max_size=100)

    def test_disabled(self):
        ts_parser.configure_cache(enabled=False)
        try:
            code_js = "var y = 1;"
            assert ts_parser.parse(code_js) is not ts_parser.parse(code_js)
            assert ts_parser.get_cache_stats()["size"] == 0
        finally:
            ts_parser.configure_cache(enabled=True)
