"""Construction plans for checked trees, and building typed values from them.

``generate`` is pure: literal attributes are parsed here with their declared
parsers, so bad literals fail before anything runs. ``build`` evaluates the
expressions a plan holds against a scope and splices block values.
"""

from __future__ import annotations

import logging
from collections.abc import Iterable, Iterator, Mapping
from dataclasses import dataclass
from typing import Any

from typedhtml.ast import Block, Expr, Literal, Markup, Text
from typedhtml.dom import Child, TextNode, TypedElement, UnsafeTextNode
from typedhtml.errors import (
    AttributeValueError,
    CompileError,
    ConstructionError,
    MissingOutputTypeError,
    SchemaError,
)
from typedhtml.events import OutputType, bind, output_type
from typedhtml.expr import Scope, evaluate
from typedhtml.schema import ContentConstraint, ElementSchema
from typedhtml.tokens import Span
from typedhtml.validator import CheckedElement, CheckedNode, TypedAttribute

logger = logging.getLogger(__name__)


# ---------------------------------------------------------------------------
# Plan nodes
# ---------------------------------------------------------------------------


@dataclass(frozen=True, slots=True)
class AttributePlan:
    """A typed attribute: a parsed literal ``value`` or an ``expr`` to coerce."""

    name: str
    literal: str | None
    value: Any
    expr: Expr | None
    span: Span


@dataclass(frozen=True, slots=True)
class DataPlan:
    name: str
    value: str | None
    expr: Expr | None
    span: Span


@dataclass(frozen=True, slots=True)
class EventPlan:
    event: str
    value: str | None
    expr: Expr | None
    span: Span


@dataclass(frozen=True, slots=True)
class TextPlan:
    text: str
    span: Span


@dataclass(frozen=True, slots=True)
class BlockPlan:
    """A deferred child: every item the expression yields is checked and appended."""

    expr: Expr
    parent: str
    constraint: ContentConstraint | None
    span: Span


@dataclass(frozen=True, slots=True)
class ElementPlan:
    schema: ElementSchema
    attributes: tuple[AttributePlan, ...]
    data: tuple[DataPlan, ...]
    events: tuple[EventPlan, ...]
    required: tuple[ElementPlan, ...]
    optional: tuple[ElementPlan | TextPlan | BlockPlan, ...]
    span: Span

    @property
    def name(self) -> str:
        return self.schema.name


NodePlan = ElementPlan | TextPlan | BlockPlan


@dataclass(frozen=True, slots=True)
class Plan:
    """The plan for one compiled markup unit."""

    root: NodePlan
    output: OutputType | None
    source: str = ""

    def build(self, scope: Mapping[str, Any] | None = None) -> Child:
        return build(self, scope)


# ---------------------------------------------------------------------------
# Generation
# ---------------------------------------------------------------------------


class Generator:
    def __init__(self, output: OutputType | None, source: str = "") -> None:
        self._output = output
        self._source = source

    def generate(self, node: CheckedNode) -> NodePlan:
        if isinstance(node, CheckedElement):
            return self._element(node)
        if isinstance(node, Text):
            return TextPlan(node.value, node.span)
        return BlockPlan(node.expr, "", None, node.span)

    def _element(self, checked: CheckedElement) -> ElementPlan:
        name = checked.name
        attributes = tuple(self._attribute(name, typed) for typed in checked.attributes)

        data = []
        for key, attr in checked.data:
            if isinstance(attr.value, Literal):
                data.append(DataPlan(key, attr.value.value, None, attr.span))
            else:
                data.append(DataPlan(key, None, attr.value, attr.span))

        events = []
        for event, attr in checked.events:
            if self._output is None:
                raise MissingOutputTypeError(name, event, attr.name_span, self._source)
            if isinstance(attr.value, Literal):
                try:
                    self._output.check_handler(attr.value.value)
                except TypeError as exc:
                    raise AttributeValueError(
                        name, attr.name, attr.value.value, str(exc), attr.value.span, self._source
                    ) from None
                events.append(EventPlan(event, attr.value.value, None, attr.span))
            else:
                events.append(EventPlan(event, None, attr.value, attr.span))

        required = tuple(self._element(child) for child in checked.required)
        optional: list[NodePlan] = []
        for child in checked.optional:
            if isinstance(child, Block):
                optional.append(BlockPlan(child.expr, name, checked.schema.constraint, child.span))
            else:
                optional.append(self.generate(child))

        return ElementPlan(
            checked.schema,
            attributes,
            tuple(data),
            tuple(events),
            required,
            tuple(optional),
            checked.element.span,
        )

    def _attribute(self, element: str, typed: TypedAttribute) -> AttributePlan:
        attr, key = typed.attribute, typed.key
        value = attr.value
        if isinstance(value, Expr):
            return AttributePlan(key, None, None, value, attr.span)
        try:
            parsed = typed.descriptor.parse(value.value)
        except ValueError as exc:
            raise AttributeValueError(element, attr.name, value.value, str(exc), value.span, self._source) from None
        return AttributePlan(key, value.value, parsed, None, attr.span)


def generate(root: CheckedNode, output: OutputType | None = None, source: str = "") -> Plan:
    """Produce the construction plan for a checked tree."""
    plan = Plan(Generator(output, source).generate(root), output, source)
    logger.debug("generated plan for %s (output %s)", _plan_label(plan.root), output)
    return plan


def _plan_label(node: NodePlan) -> str:
    if isinstance(node, ElementPlan):
        return f"<{node.name}>"
    if isinstance(node, TextPlan):
        return "text"
    return "code block"


# ---------------------------------------------------------------------------
# Building
# ---------------------------------------------------------------------------


class Builder:
    def __init__(self, output: OutputType | None, scope: Mapping[str, Any]) -> None:
        self._output = output
        self._scope = scope

    def build(self, node: NodePlan) -> Child:
        if isinstance(node, ElementPlan):
            return self._element(node)
        if isinstance(node, TextPlan):
            return TextNode(node.text)
        items = list(self._splice(node))
        if len(items) != 1:
            raise ConstructionError(f"a code block at the root must produce one node, got {len(items)}", node.span)
        return items[0]

    def _element(self, plan: ElementPlan) -> TypedElement:
        el = TypedElement(plan.schema, self._output)

        for attr in plan.attributes:
            if attr.expr is None:
                el.set_attribute(attr.name, attr.value)
                continue
            value = evaluate(attr.expr, self._scope)
            try:
                el.coerce_attribute(attr.name, value)
            except (TypeError, ValueError) as exc:
                raise ConstructionError(
                    f"attribute '{attr.name}' on <{plan.name}>: {exc}", attr.expr.span
                ) from exc

        for data in plan.data:
            value = data.value if data.expr is None else str(evaluate(data.expr, self._scope))
            el.set_data(data.name, value)

        for event in plan.events:
            value = event.value if event.expr is None else evaluate(event.expr, self._scope)
            assert self._output is not None
            try:
                el.set_event(bind(self._output, event.event, value))
            except TypeError as exc:
                raise ConstructionError(f"on{event.event} on <{plan.name}>: {exc}", event.span) from exc

        if plan.required:
            el.set_required(self._element(child) for child in plan.required)

        for child in plan.optional:
            if isinstance(child, BlockPlan):
                for item in self._splice(child):
                    try:
                        el.append(item)
                    except TypeError as exc:
                        raise ConstructionError(str(exc), child.span) from exc
            else:
                el.append(self.build(child))
        return el

    def _splice(self, block: BlockPlan) -> Iterator[Child]:
        return splice_items(evaluate(block.expr, self._scope), block.span)


def splice_items(value: Any, span: Span) -> Iterator[Child]:
    """The nodes a block value stands for: one node, a string, or an iterable of those.

    Lazy iterables run here, so anything they raise is reported as a
    ConstructionError at `span`, the location of the block.
    """
    if isinstance(value, (TypedElement, TextNode, UnsafeTextNode)):
        yield value
        return
    if isinstance(value, str):
        yield TextNode(value)
        return
    if not isinstance(value, Iterable):
        raise ConstructionError(
            f"a code block produced a {type(value).__name__}, expected a node or an iterable of nodes", span
        )
    try:
        items = iter(value)
    except Exception as exc:
        raise _iteration_error(exc, span) from exc
    while True:
        try:
            item = next(items)
        except StopIteration:
            return
        except CompileError:
            raise
        except Exception as exc:
            raise _iteration_error(exc, span) from exc
        if isinstance(item, str):
            yield TextNode(item)
        elif isinstance(item, (TypedElement, TextNode, UnsafeTextNode)):
            yield item
        else:
            raise ConstructionError(f"a code block produced a {type(item).__name__}, expected a node", span)


def _iteration_error(exc: Exception, span: Span) -> ConstructionError:
    return ConstructionError(f"evaluating expression failed: {type(exc).__name__}: {exc}", span)


def build(plan: Plan, scope: Mapping[str, Any] | None = None) -> Child:
    """Execute a plan, evaluating its expressions against `scope`."""
    if not isinstance(scope, Scope):
        scope = Scope(scope)
    try:
        result = Builder(plan.output, scope).build(plan.root)
    except ConstructionError as exc:
        exc.with_source(plan.source)
        raise
    logger.debug("built %r", result)
    return result


def resolve_output(markup: Markup, output: OutputType | str | None, source: str = "") -> OutputType | None:
    """The output type for a unit: its `: Type` annotation, else the one passed in."""
    declared = None
    if markup.output is not None:
        try:
            declared = output_type(markup.output)
        except ValueError as exc:
            raise SchemaError(str(exc), markup.output_span or markup.span, source) from None
    if output is not None and not isinstance(output, OutputType):
        output = output_type(output)
    if declared is not None and output is not None and declared is not output:
        raise SchemaError(
            f"output type annotation '{declared}' conflicts with requested output '{output}'",
            markup.output_span or markup.span,
            source,
        )
    return declared or output
