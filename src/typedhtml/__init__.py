"""Typed HTML markup compiler."""

from __future__ import annotations

from collections.abc import Mapping
from pathlib import Path
from typing import TYPE_CHECKING, Any

if TYPE_CHECKING:
    from typedhtml.events import OutputType
    from typedhtml.generator import Plan
    from typedhtml.schema import SchemaRegistry

__version__ = "0.1.0"


def load_registry(*paths: str | Path, html5: bool = True) -> SchemaRegistry:
    """Build a registry from declaration files, on top of the HTML5 subset by default."""
    from typedhtml.html5 import default_registry
    from typedhtml.schema import SchemaRegistry

    registry = default_registry() if html5 else SchemaRegistry()
    for path in paths:
        path = Path(path)
        registry = registry.merged(path.read_text(encoding="utf-8"), str(path))
    return registry


def compile_markup(
    source: str,
    filename: str = "input.thtml",
    registry: SchemaRegistry | None = None,
    output: OutputType | str | None = None,
) -> Plan:
    """Parse, validate, and generate the construction plan for one markup unit."""
    from typedhtml.generator import generate, resolve_output
    from typedhtml.html5 import default_registry
    from typedhtml.parser import parse
    from typedhtml.validator import validate

    if registry is None:
        registry = default_registry()
    markup = parse(source, filename)
    checked = validate(markup, registry, source)
    return generate(checked, resolve_output(markup, output, source), source)


def render(
    source: str,
    scope: Mapping[str, Any] | None = None,
    filename: str = "input.thtml",
    registry: SchemaRegistry | None = None,
    output: OutputType | str | None = None,
) -> str:
    """Compile markup, build it against `scope`, and serialize it to HTML."""
    return compile_markup(source, filename, registry, output).build(scope).render()
