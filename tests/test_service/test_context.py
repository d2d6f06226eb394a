"""Tests for the tolerant tokenizer and cursor context classification."""

from __future__ import annotations

from polymer_lsp._lexer import (
    Comment,
    EndTag,
    RawText,
    StartTag,
    Text,
    iter_bindings,
    open_binding,
    tokenize,
)
from polymer_lsp.context import (
    AttributeNameContext,
    AttributeValueContext,
    DatabindingExpressionContext,
    NoContext,
    SuppressedContext,
    TagNameContext,
    classify,
    enclosing_scope,
)


def classify_at_marker(text: str):
    """Classify the position of the ``|`` marker, which is removed from the text."""
    offset = text.index("|")
    return classify(text[:offset] + text[offset + 1 :], offset)


class TestTokenizer:
    """Test the tolerant HTML tokenizer."""

    def test_tokens_are_contiguous(self):
        text = '<!-- c --><div a="1" b>text<script>x < y</script></div><br/>tail'
        position = 0
        for token in tokenize(text):
            assert token.start == position
            position = token.end
        assert position == len(text)

    def test_token_types(self):
        text = '<!-- c --><div a="1">t</div><script>x</script>'
        kinds = [type(token) for token in tokenize(text)]
        assert kinds == [Comment, StartTag, Text, EndTag, StartTag, RawText, EndTag]

    def test_attributes(self):
        (tag,) = [t for t in tokenize("<x-foo bar='1' baz qux=two>") if isinstance(t, StartTag)]
        assert tag.name == "x-foo"
        assert tag.closed
        assert [(attr.name, attr.value) for attr in tag.attrs] == [
            ("bar", "1"),
            ("baz", None),
            ("qux", "two"),
        ]

    def test_unterminated_tag_stops_at_next_tag(self):
        tokens = list(tokenize("<x-foo bar\n<div>"))
        assert isinstance(tokens[0], StartTag)
        assert not tokens[0].closed
        assert tokens[0].end == len("<x-foo bar\n")
        assert isinstance(tokens[1], StartTag)
        assert tokens[1].name == "div"

    def test_unterminated_quote_runs_to_end(self):
        text = '<x-foo bar="{{value'
        (tag,) = tokenize(text)
        assert tag.end == len(text)
        assert tag.attrs[0].value == "{{value"

    def test_bare_bracket(self):
        (tag,) = tokenize("<")
        assert tag == StartTag(name="", start=0, name_end=1, end=1)

    def test_script_content_is_raw(self):
        tokens = list(tokenize("<script>if (a<b) {}</script>"))
        assert isinstance(tokens[1], RawText)
        assert tokens[1].start == len("<script>")
        assert isinstance(tokens[2], EndTag)

    def test_self_closing(self):
        (tag,) = tokenize("<x-foo/>")
        assert tag.self_closing

    def test_iter_bindings(self):
        text = "{{a}} [[b.c]] {{mismatched]] [[d]]"
        bindings = list(iter_bindings(text))
        assert [(b.style, text[b.expression_start : b.expression_end]) for b in bindings] == [
            ("two-way", "a"),
            ("one-way", "b.c"),
            ("one-way", "d"),
        ]

    def test_open_binding(self):
        assert open_binding("{{ab", 0, 4) == ("two-way", 2)
        assert open_binding("x [[a", 0, 5) == ("one-way", 4)
        assert open_binding("{{a}} b", 0, 7) is None
        assert open_binding("plain", 0, 5) is None


class TestClassify:
    """Test classification of the cursor position."""

    def test_bare_bracket(self):
        assert classify("<", 1) == TagNameContext(partial="", tag_name="", insertion_range=(0, 1))

    def test_partial_tag_name(self):
        assert classify_at_marker("<beh|") == TagNameContext(
            partial="beh", tag_name="beh", insertion_range=(0, 4)
        )

    def test_inside_tag_name(self):
        context = classify_at_marker("<beh|avior-test-elem></behavior-test-elem>")
        assert context == TagNameContext(
            partial="beh", tag_name="behavior-test-elem", insertion_range=(0, 19)
        )

    def test_blank_line(self):
        context = classify_at_marker("<div>\n  |\n</div>")
        assert context == TagNameContext(
            partial="", tag_name="", insertion_range=(8, 8), has_open_bracket=False
        )

    def test_text_is_not_completed(self):
        assert classify_at_marker("<div>hello wor|</div>") == NoContext()

    def test_attribute_name(self):
        context = classify_at_marker('<x-foo bar="1" |>')
        assert context == AttributeNameContext(
            element="x-foo", existing_attribute_names=frozenset({"bar"})
        )

    def test_attribute_name_being_typed(self):
        context = classify_at_marker("<x-foo bar ba|")
        assert context == AttributeNameContext(
            element="x-foo", existing_attribute_names=frozenset({"bar"}), attribute_name="ba"
        )

    def test_attribute_name_in_unclosed_tag_before_next_tag(self):
        context = classify_at_marker("<x-foo |\n<div></div>")
        assert context == AttributeNameContext(element="x-foo")

    def test_plain_attribute_value(self):
        context = classify_at_marker('<x-foo bar="ab|">')
        assert context == AttributeValueContext(
            element="x-foo", attribute_name="bar", binding_style="none", expression="ab"
        )

    def test_two_way_attribute_value(self):
        context = classify_at_marker('<x-foo bar="{{ab|}}">')
        assert context == AttributeValueContext(
            element="x-foo", attribute_name="bar", binding_style="two-way", expression="ab"
        )

    def test_one_way_attribute_value(self):
        context = classify_at_marker('<x-foo bar="[[|]]">')
        assert context == AttributeValueContext(
            element="x-foo", attribute_name="bar", binding_style="one-way"
        )

    def test_unterminated_attribute_value(self):
        context = classify_at_marker('<x-foo bar="{{|')
        assert context == AttributeValueContext(
            element="x-foo", attribute_name="bar", binding_style="two-way"
        )

    def test_attribute_value_scope(self):
        context = classify_at_marker(
            '<dom-module id="x-host"><template><x-foo bar="[[|]]"></x-foo></template></dom-module>'
        )
        assert context == AttributeValueContext(
            element="x-foo", attribute_name="bar", binding_style="one-way", scope_element="x-host"
        )

    def test_databinding_in_text(self):
        context = classify_at_marker(
            '<dom-module id="x-host"><template><div>[[na|</div></template></dom-module>'
        )
        assert context == DatabindingExpressionContext(scope_element="x-host", expression="na")

    def test_databinding_without_scope(self):
        assert classify_at_marker("<div>{{|}}</div>") == DatabindingExpressionContext(
            scope_element=None
        )

    def test_closed_binding_in_text(self):
        assert classify_at_marker("<div>{{a}} b|</div>") == NoContext()

    def test_inside_script(self):
        assert classify_at_marker("<script>var x = |1;</script>") == SuppressedContext()

    def test_inside_empty_script(self):
        assert classify_at_marker("<script>|</script>") == SuppressedContext()

    def test_inside_style(self):
        assert classify_at_marker("<style>:host { | }</style>") == SuppressedContext()

    def test_inside_unterminated_script(self):
        assert classify_at_marker("<script>Polymer({|") == SuppressedContext()

    def test_inside_comment(self):
        assert classify_at_marker("<!-- <x-foo | -->") == NoContext()

    def test_inside_end_tag(self):
        assert classify_at_marker("<div></di|v>") == NoContext()

    def test_enclosing_scope(self):
        text = (
            '<dom-module id="outer"><dom-module id="inner">A</dom-module>B</dom-module>C'
        )
        assert enclosing_scope(text, text.index("A")) == "inner"
        assert enclosing_scope(text, text.index("B")) == "outer"
        assert enclosing_scope(text, text.index("C")) is None
