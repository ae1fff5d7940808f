"""Python source for a plan: a `build(scope, registry)` function using the dom API."""

from __future__ import annotations

from typedhtml.ast import Expr, ExprKind
from typedhtml.errors import ConstructionError
from typedhtml.expr import free_names
from typedhtml.generator import BlockPlan, ElementPlan, NodePlan, Plan, TextPlan
from typedhtml.tokens import Span

HEADER = '''\
"""Generated by typedhtml from {filename}. Do not edit."""

from typedhtml.dom import TextNode as _TextNode, TypedElement as _TypedElement
from typedhtml.events import OutputType as _OutputType, bind as _bind
from typedhtml.expr import Scope as _Scope, lookup as _lookup, resolve_path as _resolve_path
from typedhtml.generator import splice_items as _splice_items
from typedhtml.html5 import default_registry as _default_registry
from typedhtml.tokens import Position as _Position, Span as _Span

'''

# Names bound by generated code; markup expressions may not use them
RESERVED = frozenset(
    {
        "_TextNode",
        "_TypedElement",
        "_OutputType",
        "_bind",
        "_Scope",
        "_lookup",
        "_resolve_path",
        "_splice_items",
        "_default_registry",
        "_Position",
        "_Span",
        "_registry",
        "_ns",
    }
)

INDENT = "    "


class Emitter:
    def __init__(self, plan: Plan) -> None:
        self._plan = plan
        self._lines: list[str] = []
        self._counter = 0

    def emit(self, filename: str) -> str:
        result = self._node(self._plan.root)

        names: list[str] = []
        for expr in _expressions(self._plan.root):
            if expr.kind in (ExprKind.NAME, ExprKind.PATH):
                continue
            for name in free_names(expr):
                if _reserved(name):
                    raise ConstructionError(f"the name '{name}' is reserved in generated code", expr.span)
                if name not in names:
                    names.append(name)

        out = [HEADER.format(filename=filename)]
        out.append("\ndef build(scope=None, registry=None):\n")
        out.append(f"{INDENT}_registry = _default_registry() if registry is None else registry\n")
        out.append(f"{INDENT}_ns = scope if isinstance(scope, _Scope) else _Scope(scope)\n")
        for name in names:
            out.append(f"{INDENT}{name} = _lookup(_ns, {name!r})\n")
        out.extend(f"{INDENT}{line}\n" for line in self._lines)
        out.append(f"{INDENT}return {result}\n")
        return "".join(out)

    def _var(self) -> str:
        name = f"_e{self._counter}"
        self._counter += 1
        return name

    def _output(self) -> str:
        if self._plan.output is None:
            return "None"
        return f"_OutputType.{self._plan.output.name}"

    def _node(self, node: NodePlan) -> str:
        if isinstance(node, ElementPlan):
            return self._element(node)
        if isinstance(node, TextPlan):
            return f"_TextNode({node.text!r})"
        var = self._var()
        self._lines.append(f"({var},) = _splice_items({_code(node.expr)}, {_span(node.span)})")
        return var

    def _element(self, plan: ElementPlan) -> str:
        var = self._var()
        add = self._lines.append
        add(f"{var} = _TypedElement(_registry[{plan.schema.name!r}], {self._output()})")

        for attr in plan.attributes:
            if attr.expr is None:
                add(f"{var}.parse_attribute({attr.name!r}, {attr.literal!r})")
            else:
                add(f"{var}.coerce_attribute({attr.name!r}, {_code(attr.expr)})")
        for data in plan.data:
            value = repr(data.value) if data.expr is None else f"str({_code(data.expr)})"
            add(f"{var}.set_data({data.name!r}, {value})")
        for event in plan.events:
            value = repr(event.value) if event.expr is None else _code(event.expr)
            add(f"{var}.set_event(_bind({self._output()}, {event.event!r}, {value}))")

        if plan.required:
            children = [self._element(child) for child in plan.required]
            add(f"{var}.set_required([{', '.join(children)}])")

        for child in plan.optional:
            if isinstance(child, BlockPlan):
                add(f"{var}.extend(_splice_items({_code(child.expr)}, {_span(child.span)}))")
            else:
                add(f"{var}.append({self._node(child)})")
        return var


def _reserved(name: str) -> bool:
    return name in RESERVED or (name.startswith("_e") and name[2:].isdigit())


def _code(expr: Expr) -> str:
    if expr.kind in (ExprKind.NAME, ExprKind.PATH):
        return f"_resolve_path(_ns, {expr.segments!r})"
    return expr.code


def _span(span: Span) -> str:
    start, end = span.start, span.end
    return (
        f"_Span(_Position({start.line}, {start.column}, {start.offset}), "
        f"_Position({end.line}, {end.column}, {end.offset}))"
    )


def _expressions(node: NodePlan) -> list[Expr]:
    if isinstance(node, BlockPlan):
        return [node.expr]
    if isinstance(node, TextPlan):
        return []
    exprs = [a.expr for a in node.attributes if a.expr is not None]
    exprs += [d.expr for d in node.data if d.expr is not None]
    exprs += [e.expr for e in node.events if e.expr is not None]
    for child in node.required + node.optional:
        exprs.extend(_expressions(child))
    return exprs


def emit_python(plan: Plan, filename: str = "<markup>") -> str:
    """Emit a module whose `build()` constructs the same tree as `plan.build()`."""
    return Emitter(plan).emit(filename)
