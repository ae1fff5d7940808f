"""Tests for expression capture, scopes and evaluation."""

from __future__ import annotations

from types import SimpleNamespace

import pytest

from typedhtml.ast import ExprKind
from typedhtml.errors import ConstructionError, ParseError
from typedhtml.expr import (
    Scope,
    TokenCursor,
    evaluate,
    free_names,
    lookup,
    parse_expression,
    resolve_path,
)
from typedhtml.lexer import tokenize
from typedhtml.types import LinkType


def capture(source: str):
    return parse_expression(TokenCursor(tokenize(source), source))


class TestCapture:
    def test_name(self):
        expr = capture("title")
        assert expr.kind == ExprKind.NAME
        assert expr.code == "title"

    def test_path_with_dots_and_colons(self):
        expr = capture("a.b::c")
        assert expr.kind == ExprKind.PATH
        assert expr.segments == ("a", "b", "c")

    def test_spaced_colons_are_not_a_path(self):
        assert capture("a : : b").kind == ExprKind.NAME

    def test_call(self):
        expr = capture("fmt.date(d, 'short')")
        assert expr.kind == ExprKind.CALL
        assert expr.code == "fmt.date(d, 'short')"

    def test_tuple(self):
        assert capture("(1, 2)").kind == ExprKind.TUPLE

    def test_colons_rewritten_inside_groups(self):
        assert capture("[LinkType::Icon, x]").code == "[LinkType.Icon, x]"
        assert capture("{ f(InputType::Text) }").code == "(\nf(InputType.Text)\n)"

    def test_colons_rewritten_inside_call_arguments(self):
        expr = capture("f(LinkType::StyleSheet, g(InputType::Text))")
        assert expr.kind == ExprKind.CALL
        assert expr.code == "f(LinkType.StyleSheet, g(InputType.Text))"

    def test_slices_untouched(self):
        assert capture("{ xs[::2] }").code == "(\nxs[::2]\n)"

    def test_slices_with_name_bounds_untouched(self):
        assert capture("{ xs[a::b] }").code == "(\nxs[a::b]\n)"
        assert capture("{ f(x)[a::b] + ys [c::d] }").code == "(\nf(x)[a::b] + ys [c::d]\n)"

    def test_paths_inside_subscript_groups_rewritten(self):
        assert capture("{ xs[f(LinkType::Icon)] }").code == "(\nxs[f(LinkType.Icon)]\n)"

    def test_list_after_keyword_is_not_a_subscript(self):
        assert capture("{ x in [LinkType::Icon] }").code == "(\nx in [LinkType.Icon]\n)"

    def test_colons_in_strings_untouched(self):
        assert capture('{ "a::b" }').code == '(\n"a::b"\n)'

    def test_not_understood(self):
        with pytest.raises(ParseError, match="expression not understood; wrap it in braces"):
            capture("+")


class TestScope:
    def test_defaults(self):
        scope = Scope()
        assert scope["LinkType"] is LinkType
        assert "text" in scope
        assert "unsafe_text" in scope

    def test_values_shadow_defaults(self):
        assert Scope({"text": 1})["text"] == 1

    def test_child_shadows_parent(self):
        scope = Scope({"a": 1, "b": 2}).child(a=10)
        assert scope["a"] == 10
        assert scope["b"] == 2

    def test_read_only(self):
        with pytest.raises(TypeError):
            Scope()["x"] = 1  # type: ignore[index]


class TestResolution:
    def test_mapping_then_attribute(self):
        scope = {"page": {"meta": SimpleNamespace(title="T")}}
        assert resolve_path(scope, ("page", "meta", "title")) == "T"

    def test_missing_head(self):
        with pytest.raises(NameError, match="cannot find value 'page' in this scope"):
            resolve_path({}, ("page",))

    def test_missing_member(self):
        with pytest.raises(AttributeError, match="'page.meta' has no member 'x'"):
            resolve_path({"page": {"meta": {}}}, ("page", "meta", "x"))

    def test_lookup_falls_back_to_builtins(self):
        assert lookup({}, "len") is len
        assert lookup({"len": 1}, "len") == 1
        with pytest.raises(NameError):
            lookup({}, "nope")


class TestEvaluate:
    def test_name(self):
        assert evaluate(capture("x"), Scope({"x": 5})) == 5

    def test_enum_path(self):
        assert evaluate(capture("LinkType::StyleSheet"), Scope()) is LinkType.StyleSheet

    def test_block(self):
        assert evaluate(capture("{ x * 2 }"), Scope({"x": 4})) == 8

    def test_multiline_block_with_comment(self):
        expr = capture("{\n  x + 1  # bump\n\n}")
        assert evaluate(expr, Scope({"x": 1})) == 2

    def test_call_with_enum_argument(self):
        expr = capture("f(LinkType::StyleSheet)")
        assert evaluate(expr, Scope({"f": lambda x: [x]})) == [LinkType.StyleSheet]

    def test_slice_with_name_bounds(self):
        assert evaluate(capture("{ xs[a::b] }"), Scope({"xs": "abc", "a": 0, "b": 2})) == "ac"

    def test_builtins_available(self):
        assert evaluate(capture("{ len(xs) }"), Scope({"xs": [1, 2]})) == 2

    def test_unknown_name_in_block(self):
        with pytest.raises(ConstructionError, match="cannot find value 'y' in this scope"):
            evaluate(capture("{ y }"), Scope())

    def test_unknown_path(self):
        with pytest.raises(ConstructionError, match="cannot find value 'y'"):
            evaluate(capture("y.z"), Scope())

    def test_runtime_error(self):
        with pytest.raises(ConstructionError, match="evaluating expression failed: KeyError"):
            evaluate(capture("{ d['k'] }"), Scope({"d": {}}))


class TestFreeNames:
    def test_order_of_first_use(self):
        assert free_names(capture("{ b + a + b }")) == ["b", "a"]

    def test_bound_names_excluded(self):
        assert free_names(capture("{ [f(x) for x in xs] }")) == ["f", "xs"]

    def test_lambda_arguments_excluded(self):
        assert free_names(capture("{ map(lambda v: v + k, vs) }")) == ["map", "k", "vs"]

    def test_path_head(self):
        assert free_names(capture("a.b.c")) == ["a"]
