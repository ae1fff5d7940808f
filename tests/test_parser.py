"""Tests for the markup parser: elements, attributes, text, blocks and errors."""

from __future__ import annotations

import pytest

from typedhtml import diagnostics as d
from typedhtml.ast import Block, Element, ExprKind, Literal, Text
from typedhtml.errors import ParseError, TagMismatchError
from typedhtml.expr import EXPRESSION_NOT_UNDERSTOOD


class TestElements:
    def test_empty_element(self, parse_source):
        markup = parse_source("<div></div>")
        assert isinstance(markup.root, Element)
        assert markup.root.name == "div"
        assert markup.root.children == ()
        assert not markup.root.self_closing

    def test_self_closing(self, parse_source):
        root = parse_source("<br/>").root
        assert root.name == "br"
        assert root.self_closing

    def test_nested(self, parse_source):
        root = parse_source("<ul><li></li><li></li></ul>").root
        assert [child.name for child in root.children] == ["li", "li"]

    def test_closing_tag_case_insensitive(self, parse_source):
        root = parse_source("<div></DIV>").root
        assert root.name == "div"

    def test_dashed_element_name(self, parse_source):
        root = parse_source("<my-widget/>").root
        assert root.name == "my-widget"

    def test_spans_cover_element(self, parse_source):
        root = parse_source('<p>"x"</p>').root
        assert root.span.start.offset == 0
        assert root.span.end.offset == len('<p>"x"</p>')
        assert root.name_span.start.offset == 1


class TestText:
    def test_text_child(self, parse_source):
        root = parse_source('<p>"Hello Joe!"</p>').root
        (child,) = root.children
        assert isinstance(child, Text)
        assert child.value == "Hello Joe!"

    def test_text_root(self, parse_source):
        markup = parse_source('"just text"')
        assert isinstance(markup.root, Text)

    def test_bare_identifier_hint(self, parse_source):
        with pytest.raises(ParseError) as exc_info:
            parse_source("<p>Hello</p>")
        assert exc_info.value.hint == d.TEXT_HINT
        assert "found 'Hello'" in exc_info.value.message

    def test_number_child_hint(self, parse_source):
        with pytest.raises(ParseError) as exc_info:
            parse_source("<p>42</p>")
        assert exc_info.value.hint == d.TEXT_HINT


class TestAttributes:
    def test_literal_value(self, parse_source):
        (attr,) = parse_source('<a href="/home"></a>').root.attributes
        assert attr.name == "href"
        assert isinstance(attr.value, Literal)
        assert attr.value.value == "/home"
        assert attr.value.quoted

    def test_number_value(self, parse_source):
        (attr,) = parse_source("<td colspan=2></td>").root.attributes
        assert attr.value.value == "2"
        assert not attr.value.quoted

    def test_dashed_name(self, parse_source):
        (attr,) = parse_source('<meta http-equiv="refresh"/>').root.attributes
        assert attr.name == "http-equiv"

    def test_data_attribute(self, parse_source):
        (attr,) = parse_source('<div data-id="1234"></div>').root.attributes
        assert attr.name == "data-id"

    def test_name_expression(self, parse_source):
        (attr,) = parse_source("<a href=url></a>").root.attributes
        assert attr.value.kind == ExprKind.NAME
        assert attr.value.segments == ("url",)

    def test_path_expression(self, parse_source):
        (attr,) = parse_source("<a href=page.url></a>").root.attributes
        assert attr.value.kind == ExprKind.PATH
        assert attr.value.segments == ("page", "url")

    def test_double_colon_path(self, parse_source):
        (attr,) = parse_source("<link rel=LinkType::StyleSheet/>").root.attributes
        assert attr.value.kind == ExprKind.PATH
        assert attr.value.segments == ("LinkType", "StyleSheet")
        assert attr.value.code == "LinkType.StyleSheet"

    def test_call_expression(self, parse_source):
        (attr,) = parse_source("<a href=url_for(page, 2)></a>").root.attributes
        assert attr.value.kind == ExprKind.CALL
        assert attr.value.code == "url_for(page, 2)"

    def test_block_expression(self, parse_source):
        (attr,) = parse_source("<td colspan={ n + 1 }></td>").root.attributes
        assert attr.value.kind == ExprKind.BLOCK
        assert attr.value.code == "(\nn + 1\n)"

    def test_list_expression(self, parse_source):
        (attr,) = parse_source('<div class=["a", "b"]></div>').root.attributes
        assert attr.value.kind == ExprKind.LIST

    def test_repeated_attribute_last_wins(self, parse_source):
        attrs = parse_source('<p id="a" class="x" id="b"></p>').root.attributes
        assert [a.name for a in attrs] == ["id", "class"]
        assert attrs[0].value.value == "b"

    def test_missing_value(self, parse_source):
        with pytest.raises(ParseError, match="expected literal, identifier or group"):
            parse_source("<a href=></a>")

    def test_missing_equals(self, parse_source):
        with pytest.raises(ParseError, match="expected '='"):
            parse_source('<a href "x"></a>')

    def test_operator_not_understood(self, parse_source):
        with pytest.raises(ParseError, match="expected identifier, '/' or '>', found '\\+'"):
            parse_source("<td colspan=n + 1></td>")

    def test_expression_error_message(self):
        assert "wrap it in braces" in EXPRESSION_NOT_UNDERSTOOD


class TestBlocks:
    def test_block_child(self, parse_source):
        root = parse_source("<ul>{ items }</ul>").root
        (child,) = root.children
        assert isinstance(child, Block)
        assert child.expr.kind == ExprKind.BLOCK

    def test_block_root(self, parse_source):
        assert isinstance(parse_source("{ node }").root, Block)

    def test_multiline_block(self, parse_source):
        root = parse_source("<ul>{\n  [make(i)\n   for i in range(3)]\n}</ul>").root
        assert "for i in range(3)" in root.children[0].expr.code


class TestOutputAnnotation:
    def test_output_type(self, parse_source):
        markup = parse_source("<div></div> : String")
        assert markup.output == "String"
        assert markup.output_span is not None

    def test_no_output_type(self, parse_source):
        assert parse_source("<div></div>").output is None

    def test_superfluous_token(self, parse_source):
        with pytest.raises(ParseError, match="superfluous token"):
            parse_source("<div></div> <p></p>")


class TestStructuralErrors:
    def test_tag_mismatch(self, parse_source):
        with pytest.raises(TagMismatchError) as exc_info:
            parse_source("<div></span>")
        assert exc_info.value.open == "div"
        assert exc_info.value.close == "span"
        assert exc_info.value.notes[0].message == "opening tag is here:"

    def test_unclosed_element(self, parse_source):
        with pytest.raises(ParseError, match="unclosed element <div>") as exc_info:
            parse_source("<div>")
        assert exc_info.value.hint == "add a closing tag '</div>'"

    def test_empty_input(self, parse_source):
        with pytest.raises(ParseError, match="unexpected end of input") as exc_info:
            parse_source("")
        assert exc_info.value.hint.startswith("missing ")

    def test_missing_close_bracket(self, parse_source):
        with pytest.raises(ParseError, match="unexpected end of input"):
            parse_source("<div")

    def test_stray_punctuation(self, parse_source):
        with pytest.raises(ParseError, match="expected '<', code block or literal, found '>'"):
            parse_source(">")
