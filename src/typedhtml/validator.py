"""Structural checks of a parsed element tree against the schema registry."""

from __future__ import annotations

from collections.abc import Mapping
from dataclasses import dataclass

from typedhtml.ast import Attribute, Block, Element, Markup, Node, Text
from typedhtml.config import TEXT_CATEGORIES
from typedhtml.errors import SchemaError
from typedhtml.events import event_name
from typedhtml.schema import ElementSchema, attribute_key
from typedhtml.types import AttributeType

DATA_PREFIX = "data-"


@dataclass(frozen=True, slots=True)
class TypedAttribute:
    """An attribute the schema declares, with its type descriptor."""

    attribute: Attribute
    key: str
    descriptor: AttributeType


@dataclass(frozen=True, slots=True)
class CheckedElement:
    """An element that passed validation, its attributes sorted into buckets."""

    element: Element
    schema: ElementSchema
    attributes: tuple[TypedAttribute, ...]
    data: tuple[tuple[str, Attribute], ...]
    events: tuple[tuple[str, Attribute], ...]
    required: tuple[CheckedElement, ...]
    optional: tuple[CheckedElement | Text | Block, ...]

    @property
    def name(self) -> str:
        return self.element.name


CheckedNode = CheckedElement | Text | Block


class Validator:
    """Checks elements recursively; the first violation raises SchemaError."""

    def __init__(self, registry: Mapping[str, ElementSchema], source: str = "") -> None:
        self._registry = registry
        self._source = source

    def check(self, node: Node) -> CheckedNode:
        if isinstance(node, Element):
            return self._check_element(node)
        return node

    def _schema(self, element: Element) -> ElementSchema:
        schema = self._registry.get(attribute_key(element.name))
        if schema is None:
            raise self._error(f"unknown element <{element.name}>", element)
        return schema

    def _check_element(self, element: Element) -> CheckedElement:
        schema = self._schema(element)
        children = element.children
        required_names = schema.required_children

        if len(children) < len(required_names):
            raise self._error(
                f"<{element.name}> requires {len(required_names)} children "
                f"but there are only {len(children)}",
                element,
            )

        split = len(required_names)
        required: list[CheckedElement] = []
        for index, (child, expected) in enumerate(zip(children[:split], required_names), start=1):
            if not isinstance(child, Element) or attribute_key(child.name) != expected:
                raise SchemaError(
                    f"<{element.name}> requires <{expected}> as child {index}, found {_describe(child)}",
                    child.span,
                    self._source,
                )
            required.append(self._check_element(child))

        optional = tuple(self._check_optional(element, schema, child) for child in children[split:])
        attributes, data, events = self._sort_attributes(element, schema)
        return CheckedElement(element, schema, attributes, data, events, tuple(required), optional)

    def _check_optional(self, parent: Element, schema: ElementSchema, child: Node) -> CheckedNode:
        constraint = schema.constraint
        if constraint is None:
            raise SchemaError(
                f"<{parent.name}> does not accept children, found {_describe(child)}", child.span, self._source
            )
        if isinstance(child, Block):
            # Checked item by item when the block is spliced
            return child
        if isinstance(child, Text):
            tags = TEXT_CATEGORIES
        else:
            tags = self._schema(child).tags
        if not constraint.accepts(tags):
            raise SchemaError(
                f"<{parent.name}> only accepts {constraint} children, found {_describe(child)}",
                child.span,
                self._source,
            )
        return self.check(child)

    def _sort_attributes(
        self, element: Element, schema: ElementSchema
    ) -> tuple[
        tuple[TypedAttribute, ...],
        tuple[tuple[str, Attribute], ...],
        tuple[tuple[str, Attribute], ...],
    ]:
        typed: list[TypedAttribute] = []
        data: list[tuple[str, Attribute]] = []
        events: list[tuple[str, Attribute]] = []
        for attr in element.attributes:
            if attr.name.startswith(DATA_PREFIX) and len(attr.name) > len(DATA_PREFIX):
                data.append((attr.name[len(DATA_PREFIX) :], attr))
                continue
            event = event_name(attr.name)
            if event is not None:
                events.append((event, attr))
                continue
            descriptor = schema.attribute(attr.name)
            if descriptor is None:
                raise SchemaError(
                    f"unknown attribute '{attr.name}' on <{element.name}>", attr.name_span, self._source
                )
            typed.append(TypedAttribute(attr, attribute_key(attr.name), descriptor))
        return tuple(typed), tuple(data), tuple(events)

    def _error(self, message: str, element: Element) -> SchemaError:
        return SchemaError(message, element.name_span, self._source)


def _describe(node: Node) -> str:
    if isinstance(node, Element):
        return f"<{node.name}>"
    if isinstance(node, Text):
        return "text"
    return "a code block"


def validate(markup: Markup, registry: Mapping[str, ElementSchema], source: str = "") -> CheckedNode:
    """Check a parsed markup unit; returns the checked root."""
    return Validator(registry, source).check(markup.root)
