"""--debug AST dump to stderr."""

from __future__ import annotations

import sys
from typing import TextIO

from typedhtml.ast import Attribute, Block, Element, Expr, Literal, Markup, Node, Text


def dump_ast(markup: Markup, *, file: TextIO = sys.stderr) -> None:
    """Print a human-readable AST tree to *file*."""
    output = f" : {markup.output}" if markup.output else ""
    file.write(f"Markup{output}\n")
    _dump_node(markup.root, 1, file)


def _indent(depth: int) -> str:
    return "  " * depth


def _dump_node(node: Node, depth: int, f: TextIO) -> None:
    if isinstance(node, Element):
        _dump_element(node, depth, f)
    elif isinstance(node, Text):
        f.write(f"{_indent(depth)}Text({node.value!r})\n")
    elif isinstance(node, Block):
        f.write(f"{_indent(depth)}Block {{{node.expr.code.strip('()').strip()}}}\n")


def _dump_element(node: Element, depth: int, f: TextIO) -> None:
    closing = " /" if node.self_closing else ""
    f.write(f"{_indent(depth)}Element <{node.name}{closing}>\n")
    for attr in node.attributes:
        _dump_attribute(attr, depth + 1, f)
    for child in node.children:
        _dump_node(child, depth + 1, f)


def _dump_attribute(attr: Attribute, depth: int, f: TextIO) -> None:
    f.write(f"{_indent(depth)}Attr {attr.name}=")
    _dump_value_inline(attr.value, f)
    f.write("\n")


def _dump_value_inline(value: Literal | Expr, f: TextIO) -> None:
    if isinstance(value, Literal):
        f.write(f"Literal({value.raw})")
    else:
        f.write(f"{value.kind.name.title()}({value.code.strip()})")
