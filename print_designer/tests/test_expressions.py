"""
Tests for the expression-preserving lexer and the per-format escapers.
"""

import pytest

from print_designer.core import expressions
from print_designer.core.expressions import (
    EXPR,
    LITERAL,
    Span,
    escape_control,
    escape_zpl,
    expression_body,
    has_expression,
    split_spans,
    zpl_needs_hex,
)


class TestSplitSpans:
    """Tests for span partitioning."""

    def test_plain_text(self):
        assert split_spans("Hello") == [Span(LITERAL, "Hello")]

    def test_empty(self):
        assert split_spans("") == []
        assert split_spans(None) == []

    def test_mixed(self):
        """Literals and expressions alternate in source order."""
        assert split_spans("Hello {{name}} & co") == [
            Span(LITERAL, "Hello "),
            Span(EXPR, "{{name}}"),
            Span(LITERAL, " & co"),
        ]

    def test_raw_expression(self):
        """Triple braces are kept as one span."""
        assert split_spans("a{{{html}}}b") == [
            Span(LITERAL, "a"),
            Span(EXPR, "{{{html}}}"),
            Span(LITERAL, "b"),
        ]

    def test_adjacent_expressions(self):
        spans = split_spans("{{a}}{{b}}")
        assert [s.value for s in spans] == ["{{a}}", "{{b}}"]
        assert all(s.is_expr for s in spans)

    def test_unclosed_braces_are_literal(self):
        assert split_spans("{{oops") == [Span(LITERAL, "{{oops")]

    @pytest.mark.parametrize("text", [
        "Order {{id}}",
        "{{#if paid}}PAID{{/if}}",
        "x {{ spaced.path }} y {{{raw}}} z",
        "no expressions at all",
    ])
    def test_spans_concatenate_to_input(self, text):
        """Span boundaries lose nothing."""
        assert "".join(s.value for s in split_spans(text)) == text

    def test_has_expression(self):
        assert has_expression("Total: {{total}}")
        assert not has_expression("Total: 10")
        assert not has_expression("")


class TestExpressionBody:
    def test_escaped(self):
        assert expression_body("{{ name }}") == (" name ", False)

    def test_raw(self):
        assert expression_body("{{{name}}}") == ("name", True)


class TestHtml:
    """Tests for markup escaping around expressions."""

    def test_literal_escaped_expression_kept(self):
        """Only literal text is escaped."""
        assert expressions.html("Hello {{name}} & co") == "Hello {{name}} &amp; co"

    def test_all_markup_characters(self):
        assert expressions.html('<b a="1">&</b>') == "&lt;b a=&quot;1&quot;&gt;&amp;&lt;/b&gt;"

    def test_expression_with_special_characters_untouched(self):
        """Characters inside an expression are never escaped."""
        assert expressions.html('{{lookup "a&b"}} <') == '{{lookup "a&b"}} &lt;'


class TestZpl:
    """Tests for ZPL field data escaping."""

    def test_needs_hex(self):
        assert zpl_needs_hex("a^b")
        assert zpl_needs_hex("~")
        assert zpl_needs_hex("snake_case")
        assert not zpl_needs_hex("plain text 123")

    def test_escape(self):
        assert escape_zpl("a^b~c_d") == "a_5Eb_7Ec_5Fd"

    def test_expression_untouched(self):
        assert expressions.zpl("^{{sku_code}}_") == "_5E{{sku_code}}_5F"


class TestControl:
    """Tests for device text sanitising."""

    def test_control_bytes_removed(self):
        assert escape_control("a\x1bE\x01b") == "aEb"

    def test_newline_and_tab_kept(self):
        assert escape_control("a\tb\nc") == "a\tb\nc"

    def test_device_text_keeps_expressions(self):
        assert expressions.device_text("\x1d{{name}}\x07") == "{{name}}"
