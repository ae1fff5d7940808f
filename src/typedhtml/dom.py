"""Typed document values, their HTML serialization and virtual node views."""

from __future__ import annotations

from collections.abc import Iterable
from dataclasses import dataclass
from typing import Any, Union

from typedhtml.config import TEXT_CATEGORIES
from typedhtml.events import EVENTS, EventHandler, OutputType
from typedhtml.schema import ElementSchema, attribute_key
from typedhtml.types import AttributeType

# ---------------------------------------------------------------------------
# HTML escaping
# ---------------------------------------------------------------------------


def escape_html(text: str) -> str:
    """Escape text for HTML body content."""
    result: list[str] = []
    for ch in text:
        if ch == "&":
            result.append("&amp;")
        elif ch == "<":
            result.append("&lt;")
        elif ch == ">":
            result.append("&gt;")
        else:
            result.append(ch)
    return "".join(result)


def escape_attr(text: str) -> str:
    """Escape text for double-quoted HTML attribute values."""
    result: list[str] = []
    for ch in text:
        if ch == "&":
            result.append("&amp;")
        elif ch == "<":
            result.append("&lt;")
        elif ch == ">":
            result.append("&gt;")
        elif ch == '"':
            result.append("&quot;")
        elif ch == "'":
            result.append("&#x27;")
        else:
            result.append(ch)
    return "".join(result)


# ---------------------------------------------------------------------------
# Virtual nodes
# ---------------------------------------------------------------------------


@dataclass(frozen=True, slots=True)
class VText:
    text: str


@dataclass(frozen=True, slots=True)
class VUnsafeText:
    text: str


@dataclass(frozen=True, slots=True)
class VElement:
    """Untyped view of an element for adapters that build live trees."""

    name: str
    attributes: tuple[tuple[str, str], ...]
    events: tuple[EventHandler, ...]
    children: tuple[VNode, ...]


VNode = Union[VText, VUnsafeText, VElement]


# ---------------------------------------------------------------------------
# Text nodes
# ---------------------------------------------------------------------------


@dataclass(frozen=True, slots=True)
class TextNode:
    """Text content, escaped when rendered."""

    text: str

    tags = TEXT_CATEGORIES

    def render(self) -> str:
        return escape_html(self.text)

    def vnode(self) -> VText:
        return VText(self.text)

    def __str__(self) -> str:
        return self.render()


@dataclass(frozen=True, slots=True)
class UnsafeTextNode:
    """Text content rendered verbatim, markup and all."""

    text: str

    tags = TEXT_CATEGORIES

    def render(self) -> str:
        return self.text

    def vnode(self) -> VUnsafeText:
        return VUnsafeText(self.text)

    def __str__(self) -> str:
        return self.render()


def text(value: Any) -> TextNode:
    return TextNode(str(value))


def unsafe_text(value: Any) -> UnsafeTextNode:
    return UnsafeTextNode(str(value))


# ---------------------------------------------------------------------------
# Elements
# ---------------------------------------------------------------------------


class TypedElement:
    """One element built against its schema.

    Every schema attribute has a slot that starts unset. Required children
    are bound by position; optional children exist only when the schema
    accepts them and are checked against its content constraint on append.
    """

    def __init__(self, schema: ElementSchema, output: OutputType | None = None) -> None:
        self._schema = schema
        self._output = output
        self._attributes: dict[str, Any] = dict.fromkeys(schema.attributes)
        self._data: dict[str, str] = {}
        self._events: dict[str, EventHandler] = {}
        self._required: tuple[Child, ...] = ()
        self._children: list[Child] | None = [] if schema.constraint is not None else None

    @property
    def schema(self) -> ElementSchema:
        return self._schema

    @property
    def output(self) -> OutputType | None:
        return self._output

    @property
    def tags(self) -> frozenset[str]:
        return self._schema.tags

    # ------------------------------------------------------------------
    # Queries
    # ------------------------------------------------------------------

    def name(self) -> str:
        return _render_name(self._schema.name)

    def attribute_names(self) -> frozenset[str]:
        """Names of the typed attributes, in rendered form. Excludes data attributes."""
        return frozenset(_render_name(key) for key in self._attributes)

    def attributes(self) -> list[tuple[str, str]]:
        """Set attributes as rendered name/value pairs, data attributes last."""
        pairs = [(name, "" if value is True else str(value)) for name, value in self._typed_values()]
        pairs.extend((f"data-{key}", value) for key, value in self._data.items())
        return pairs

    def _typed_values(self) -> list[tuple[str, Any]]:
        # Sorted by name; unset and false attributes are left out
        return [
            (_render_name(key), value)
            for key, value in sorted(self._attributes.items())
            if value is not None and value is not False
        ]

    def required_child_names(self) -> tuple[str, ...]:
        return tuple(_render_name(name) for name in self._schema.required_children)

    def get_attribute(self, name: str) -> Any:
        return self._attributes.get(attribute_key(name))

    @property
    def data_attributes(self) -> list[tuple[str, str]]:
        return list(self._data.items())

    @property
    def events(self) -> dict[str, EventHandler]:
        return dict(self._events)

    @property
    def required_children(self) -> tuple[Child, ...]:
        return self._required

    @property
    def children(self) -> tuple[Child, ...]:
        """Required children followed by optional ones."""
        return self._required + tuple(self._children or ())

    # ------------------------------------------------------------------
    # Construction
    # ------------------------------------------------------------------

    def parse_attribute(self, name: str, literal: str) -> None:
        """Set an attribute from a literal using its declared parser."""
        self.set_attribute(name, self._descriptor(name).parse(literal))

    def coerce_attribute(self, name: str, value: Any) -> None:
        """Set an attribute from an arbitrary value using the generic coercion."""
        self.set_attribute(name, self._descriptor(name).coerce(value))

    def set_attribute(self, name: str, value: Any) -> None:
        key = attribute_key(name)
        if key not in self._attributes:
            raise KeyError(f"<{self.name()}> has no attribute '{name}'")
        self._attributes[key] = value

    def set_data(self, name: str, value: str) -> None:
        """Set a data attribute; `name` excludes the `data-` prefix."""
        self._data[name] = value

    def set_event(self, handler: EventHandler) -> None:
        self._events[handler.event] = handler

    def set_required(self, children: Iterable[Child]) -> None:
        children = tuple(children)
        expected = self._schema.required_children
        found = tuple(_child_name(child) for child in children)
        if found != expected:
            raise ValueError(
                f"<{self.name()}> requires children {_list_tags(expected)} but got {_list_tags(found)}"
            )
        self._required = children

    def append(self, child: Child) -> None:
        """Add an optional child, checking it against the content constraint."""
        constraint = self._schema.constraint
        if constraint is None or self._children is None:
            raise TypeError(f"<{self.name()}> does not accept children")
        if not isinstance(child, (TypedElement, TextNode, UnsafeTextNode)):
            raise TypeError(f"cannot add a value of type {type(child).__name__} as a child of <{self.name()}>")
        if not constraint.accepts(child.tags):
            raise TypeError(f"<{self.name()}> only accepts {constraint} children, got {_describe(child)}")
        self._children.append(child)

    def extend(self, children: Iterable[Child]) -> None:
        for child in children:
            self.append(child)

    def _descriptor(self, name: str) -> AttributeType:
        descriptor = self._schema.attribute(name)
        if descriptor is None:
            raise KeyError(f"<{self.name()}> has no attribute '{name}'")
        return descriptor

    # ------------------------------------------------------------------
    # Output
    # ------------------------------------------------------------------

    def render(self) -> str:
        name = self.name()
        parts = [f"<{name}"]
        for attr, value in self._typed_values():
            if value is True:
                parts.append(f" {attr}")
            else:
                parts.append(f' {attr}="{escape_attr(str(value))}"')
        for key, value in self._data.items():
            parts.append(f' data-{key}="{escape_attr(value)}"')
        for event in EVENTS:
            handler = self._events.get(event)
            if handler is None:
                continue
            rendered = handler.render()
            if rendered is not None:
                parts.append(f' on{event}="{escape_attr(rendered)}"')

        children = self.children
        if not self._schema.required_children and self._children is None:
            parts.append("/>")
        elif not children and self._schema.self_closing:
            parts.append("/>")
        else:
            parts.append(">")
            parts.extend(child.render() for child in children)
            parts.append(f"</{name}>")
        return "".join(parts)

    def vnode(self) -> VElement:
        return VElement(
            self.name(),
            tuple(self.attributes()),
            tuple(self._events[event] for event in EVENTS if event in self._events),
            tuple(child.vnode() for child in self.children),
        )

    def __str__(self) -> str:
        return self.render()

    def __repr__(self) -> str:
        return f"<TypedElement {self.name()}>"


Child = Union[TypedElement, TextNode, UnsafeTextNode]


def _render_name(key: str) -> str:
    return key.replace("_", "-")


def _child_name(child: Any) -> str:
    return child.schema.name if isinstance(child, TypedElement) else "text"


def _describe(child: Child) -> str:
    if isinstance(child, TypedElement):
        return f"<{child.name()}>"
    return "text"


def _list_tags(names: Iterable[str]) -> str:
    return "[" + ", ".join(names) + "]"
