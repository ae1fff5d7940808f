"""Tests for typed elements, text nodes, escaping and virtual nodes."""

from __future__ import annotations

import pytest

from typedhtml.dom import (
    TextNode,
    TypedElement,
    UnsafeTextNode,
    VElement,
    VText,
    escape_attr,
    escape_html,
    text,
    unsafe_text,
)
from typedhtml.events import OutputType, bind
from typedhtml.types import Id


@pytest.fixture
def element(registry):
    def _element(name: str, output: OutputType | None = None) -> TypedElement:
        return TypedElement(registry[name], output)

    return _element


class TestEscaping:
    def test_html(self):
        assert escape_html("a < b & c > d") == "a &lt; b &amp; c &gt; d"

    def test_html_leaves_quotes(self):
        assert escape_html("\"it's\"") == "\"it's\""

    def test_attr(self):
        assert escape_attr("\"it's\" <&>") == "&quot;it&#x27;s&quot; &lt;&amp;&gt;"


class TestTextNodes:
    def test_text_escapes(self):
        assert TextNode("<b>").render() == "&lt;b&gt;"
        assert str(text("<b>")) == "&lt;b&gt;"

    def test_unsafe_text_verbatim(self):
        assert UnsafeTextNode("<b>").render() == "<b>"
        assert unsafe_text(1) == UnsafeTextNode("1")

    def test_text_helper_stringifies(self):
        assert text(3.5) == TextNode("3.5")

    def test_text_tags(self):
        assert "PhrasingContent" in TextNode("x").tags
        assert "TextNode" in UnsafeTextNode("x").tags


class TestAttributes:
    def test_slots_start_unset(self, element):
        a = element("a")
        assert a.get_attribute("href") is None
        assert a.attributes() == []

    def test_attribute_names(self, element):
        names = element("meta").attribute_names()
        assert "http-equiv" in names
        assert "id" in names

    def test_parse_attribute(self, element):
        a = element("a")
        a.parse_attribute("id", "top")
        assert a.get_attribute("id") == Id("top")

    def test_coerce_attribute(self, element):
        td = element("td")
        td.coerce_attribute("colspan", 3)
        assert td.render() == '<td colspan="3"></td>'

    def test_set_unknown_attribute(self, element):
        with pytest.raises(KeyError, match="<div> has no attribute 'href'"):
            element("div").set_attribute("href", "/x")

    def test_parse_unknown_attribute(self, element):
        with pytest.raises(KeyError, match="has no attribute 'href'"):
            element("div").parse_attribute("href", "/x")

    def test_attributes_pairs(self, element):
        inp = element("input")
        inp.parse_attribute("disabled", "true")
        inp.parse_attribute("name", "q")
        inp.set_data("role", "search")
        assert inp.attributes() == [("disabled", ""), ("name", "q"), ("data-role", "search")]

    def test_data_attributes(self, element):
        div = element("div")
        div.set_data("a", "1")
        div.set_data("b", "2")
        assert div.data_attributes == [("a", "1"), ("b", "2")]


class TestChildren:
    def test_required_children(self, element):
        head = element("head")
        title = element("title")
        title.append(TextNode("T"))
        head.set_required([title])
        assert head.required_children == (title,)
        assert head.render() == "<head><title>T</title></head>"

    def test_required_children_mismatch(self, element):
        with pytest.raises(ValueError, match="<head> requires children \\[title\\] but got \\[meta\\]"):
            element("head").set_required([element("meta")])

    def test_append_checks_constraint(self, element):
        with pytest.raises(TypeError, match="<ul> only accepts li children, got <p>"):
            element("ul").append(element("p"))

    def test_append_to_void(self, element):
        with pytest.raises(TypeError, match="<br> does not accept children"):
            element("br").append(TextNode("x"))

    def test_append_non_node(self, element):
        with pytest.raises(TypeError, match="cannot add a value of type int"):
            element("div").append(42)

    def test_extend(self, element):
        p = element("p")
        p.extend([TextNode("a"), UnsafeTextNode("<br/>")])
        assert p.render() == "<p>a<br/></p>"

    def test_children_order(self, element):
        details = element("details")
        summary = element("summary")
        details.set_required([summary])
        body = TextNode("x")
        details.append(body)
        assert details.children == (summary, body)


class TestRendering:
    def test_self_closing_when_empty(self, element):
        assert element("img").render() == "<img/>"

    def test_container_when_empty(self, element):
        assert element("div").render() == "<div></div>"

    def test_str_is_render(self, element):
        div = element("div")
        assert str(div) == div.render()

    def test_repr(self, element):
        assert repr(element("div")) == "<TypedElement div>"

    def test_string_event(self, element):
        button = element("button", OutputType.STRING)
        button.set_event(bind(OutputType.STRING, "click", 'alert("hi")'))
        assert button.render() == '<button onclick="alert(&quot;hi&quot;)"></button>'


class TestVirtualNodes:
    def test_vnode_tree(self, element):
        p = element("p")
        p.parse_attribute("id", "x")
        p.append(TextNode("hi"))
        assert p.vnode() == VElement("p", (("id", "x"),), (), (VText("hi"),))

    def test_vnode_keeps_dom_handlers(self, element):
        def handler(event):
            return None

        button = element("button", OutputType.DOM)
        button.set_event(bind(OutputType.DOM, "click", handler))
        (event,) = button.vnode().events
        assert event.handler is handler
