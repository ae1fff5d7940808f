"""Diagnostic records and human-readable descriptions of grammar expectations."""

from __future__ import annotations

from dataclasses import dataclass

from typedhtml.errors import CompileError
from typedhtml.tokens import Span, Token, TokenType

ERROR = "error"
WARNING = "warning"

# Expected-token labels shared by both grammars
LT = "'<'"
GT = "'>'"
SLASH = "'/'"
EQUALS = "'='"
SEMI = "';'"
COLON = "':'"
COMMA = "','"
IDENTIFIER = "identifier"
LITERAL = "literal"
CODE_BLOCK = "code block"
GROUP = "group"
LBRACE = "'{'"
RBRACE = "'}'"
LBRACKET = "'['"
RBRACKET = "']'"
IN = "'in'"
WITH = "'with'"

# When these are exactly the expected set, the parser is in node position
NODE_POSITION = frozenset({LT, CODE_BLOCK, LITERAL})

TEXT_HINT = 'text nodes need to be quoted, eg. <p>"Hello Joe!"</p>'


@dataclass(frozen=True, slots=True)
class Diagnostic:
    """One source-located message for a host to display."""

    span: Span
    severity: str
    message: str
    notes: tuple[tuple[Span, str], ...] = ()
    hint: str | None = None


def describe_expected(expected: list[str]) -> str:
    """Render a list of token labels as 'a, b or c'."""
    if not expected:
        return "nothing"
    if len(expected) == 1:
        return expected[0]
    return ", ".join(expected[:-1]) + " or " + expected[-1]


def describe_token(tok: Token) -> str:
    """Short description of a token for error messages."""
    if tok.type == TokenType.EOF:
        return "end of input"
    if tok.type == TokenType.GROUP:
        return CODE_BLOCK if tok.raw.startswith("{") else f"'{tok.raw[:1]}...{tok.raw[-1:]}'"
    if tok.type == TokenType.LITERAL:
        return f"literal {tok.raw}"
    return f"'{tok.raw}'"


def node_position_hint(expected: list[str], tok: Token) -> str | None:
    """Suggest quoting when a bare identifier appears where a node should be."""
    if NODE_POSITION.issubset(expected) and tok.type == TokenType.IDENT:
        return TEXT_HINT
    return None


def to_diagnostics(exc: CompileError) -> list[Diagnostic]:
    """Convert a compile error into diagnostic records."""
    notes = tuple((note.span, note.message) for note in exc.notes)
    return [Diagnostic(exc.span, exc.severity, exc.message, notes, exc.hint)]
