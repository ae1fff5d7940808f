"""Tests for Python source emission: the emitted build() matches Plan.build()."""

from __future__ import annotations

import pytest

from typedhtml import compile_markup
from typedhtml.emit import emit_python
from typedhtml.errors import ConstructionError
from typedhtml.html5 import default_registry


def load(source: str, **kwargs):
    """Compile markup, emit Python for it and return the emitted build()."""
    code = emit_python(compile_markup(source, **kwargs), "page.thtml")
    namespace: dict = {}
    exec(compile(code, "page.py", "exec"), namespace)
    return namespace["build"]


class TestEmittedSource:
    def test_header(self):
        code = emit_python(compile_markup("<br/>"), "page.thtml")
        assert code.startswith('"""Generated by typedhtml from page.thtml. Do not edit."""')
        assert "def build(scope=None, registry=None):" in code

    def test_free_names_looked_up_once(self):
        code = emit_python(compile_markup("<p>{ a + a }{ b }</p>"))
        assert code.count("a = _lookup(_ns, 'a')") == 1
        assert "b = _lookup(_ns, 'b')" in code

    def test_paths_resolved_through_scope(self):
        code = emit_python(compile_markup("<a href=page.url></a>"))
        assert "_resolve_path(_ns, ('page', 'url'))" in code
        assert "_lookup(_ns, 'page')" not in code

    def test_comprehension_variables_not_looked_up(self):
        code = emit_python(compile_markup("<ul>{ [li(x) for x in xs] }</ul>"))
        assert "_lookup(_ns, 'x')" not in code
        assert "_lookup(_ns, 'xs')" in code

    def test_reserved_name_rejected(self):
        with pytest.raises(ConstructionError, match="the name '_ns' is reserved in generated code"):
            emit_python(compile_markup("<p>{ _ns }</p>"))


class TestEmittedBuild:
    @pytest.mark.parametrize(
        "source, scope",
        [
            ("<br/>", {}),
            ('<div id="main" class="b a">"text"</div>', {}),
            ('<head><title>"T"</title><meta charset="utf-8"/></head>', {}),
            ("<a href=page.url data-n=n>{ label }</a>", {"page": {"url": "/x"}, "n": 3, "label": "go"}),
            ("<td colspan={ n * 2 }></td>", {"n": 2}),
            ('<link rel=[LinkType::Icon] href="/i.png"/>', {}),
            ('"just text"', {}),
            ("{ node }", {"node": "<root>"}),
        ],
    )
    def test_matches_plan(self, source, scope):
        expected = compile_markup(source).build(scope).render()
        assert load(source)(scope).render() == expected

    def test_string_events(self):
        source = '<button onclick="go()">"Go"</button> : String'
        assert load(source)().render() == '<button onclick="go()">Go</button>'

    def test_dom_events(self):
        def handler(event):
            return event

        el = load("<button onclick=handler></button> : Dom")({"handler": handler})
        assert el.events["click"].handler is handler

    def test_explicit_registry(self):
        registry = default_registry().merged("card in [FlowContent] with FlowContent;")
        build = load("<card></card>", registry=registry)
        assert build(registry=registry).render() == "<card></card>"

    def test_unknown_name(self):
        build = load("<p>{ missing }</p>")
        with pytest.raises(NameError, match="cannot find value 'missing'"):
            build()

    def test_invalid_block(self):
        with pytest.raises(ConstructionError, match="invalid expression"):
            emit_python(compile_markup("<p>{ 1 + }</p>"))

    def test_scope_names_do_not_shadow_internals(self):
        build = load("<p>{ bind + TextNode }{ splice_items }</p>")
        scope = {"bind": "a", "TextNode": "b", "splice_items": "c"}
        assert build(scope).render() == "<p>abc</p>"

    def test_lazy_block_error(self):
        build = load("<p>{ (x.upper() for x in xs) }</p>")
        with pytest.raises(ConstructionError, match="evaluating expression failed: AttributeError") as exc_info:
            build({"xs": [1]})
        assert exc_info.value.span.start.column == 4

    def test_dashed_element(self):
        registry = default_registry().merged("my_card in [FlowContent] with FlowContent;")
        build = load("<div><my-card></my-card></div>", registry=registry)
        assert build(registry=registry).render() == "<div><my-card></my-card></div>"
