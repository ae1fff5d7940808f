"""Shared test fixtures and helpers."""

from __future__ import annotations

import pytest

from typedhtml import compile_markup
from typedhtml.ast import Markup
from typedhtml.html5 import default_registry
from typedhtml.lexer import tokenize
from typedhtml.parser import parse
from typedhtml.schema import SchemaRegistry
from typedhtml.tokens import Token, TokenType


@pytest.fixture
def lex():
    """Return a helper that tokenizes source and returns tokens (excluding EOF)."""

    def _lex(source: str, deep: bool = False) -> list[Token]:
        tokens = tokenize(source, deep=deep)
        # Strip trailing EOF for convenience
        return [t for t in tokens if t.type != TokenType.EOF]

    return _lex


@pytest.fixture
def parse_source():
    """Return a helper that parses source and returns a Markup unit."""

    def _parse(source: str, filename: str = "test.thtml") -> Markup:
        return parse(source, filename)

    return _parse


@pytest.fixture
def registry() -> SchemaRegistry:
    return default_registry()


@pytest.fixture
def render_html():
    """Return a helper that compiles, builds and serializes markup."""

    def _render(source: str, scope=None, **kwargs) -> str:
        return compile_markup(source, **kwargs).build(scope).render()

    return _render


def assert_types(tokens: list[Token], expected: list[TokenType]) -> None:
    """Assert that the token types match the expected list."""
    actual = [t.type for t in tokens]
    assert actual == expected, f"Expected {expected}, got {actual}"


def assert_values(tokens: list[Token], expected: list[str]) -> None:
    """Assert that the token values match the expected list."""
    actual = [t.value for t in tokens]
    assert actual == expected, f"Expected {expected}, got {actual}"
