"""AST node types for parsed markup."""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum

from typedhtml.tokens import Span


class ExprKind(Enum):
    NAME = "name"  # foo
    PATH = "path"  # foo.bar, LinkType::StyleSheet
    CALL = "call"  # foo.bar(...)
    LIST = "list"  # [...]
    TUPLE = "tuple"  # (...)
    BLOCK = "block"  # {...}


@dataclass(frozen=True, slots=True)
class Literal:
    """Literal attribute value; ``quoted`` is False for number literals."""

    value: str
    raw: str
    quoted: bool
    span: Span


@dataclass(frozen=True, slots=True)
class Expr:
    """Host expression captured without evaluation.

    ``segments`` holds the path for NAME/PATH kinds; ``code`` is the Python
    source used to evaluate every other kind.
    """

    kind: ExprKind
    segments: tuple[str, ...]
    code: str
    span: Span


RawValue = Literal | Expr


@dataclass(frozen=True, slots=True)
class Attribute:
    """Attribute name=value pair as written in markup."""

    name: str
    value: RawValue
    name_span: Span
    span: Span


@dataclass(frozen=True, slots=True)
class Text:
    """Quoted text node."""

    value: str
    span: Span


@dataclass(frozen=True, slots=True)
class Block:
    """Opaque `{...}` child expression, spliced at construction time."""

    expr: Expr
    span: Span


@dataclass(frozen=True, slots=True)
class Element:
    """An element with its attributes in source order and its children."""

    name: str
    attributes: tuple[Attribute, ...]
    children: tuple[Element | Text | Block, ...]
    self_closing: bool
    name_span: Span
    span: Span


Node = Element | Text | Block


@dataclass(frozen=True, slots=True)
class Markup:
    """Root of one markup unit, with its optional output type annotation."""

    root: Node
    output: str | None
    output_span: Span | None
    span: Span
