"""Expression mini-grammar, the shared token cursor, and scope evaluation."""

from __future__ import annotations

import ast as pyast
import builtins
import keyword
from collections import ChainMap
from collections.abc import Iterator, Mapping
from typing import Any

from typedhtml import diagnostics as d
from typedhtml.ast import Expr, ExprKind
from typedhtml.errors import ConstructionError, ParseError
from typedhtml.tokens import Delimiter, Span, Token, TokenType

EXPRESSION_NOT_UNDERSTOOD = "expression not understood; wrap it in braces"


class TokenCursor:
    """Position index over a token list, shared by both grammars."""

    def __init__(self, tokens: list[Token], source: str) -> None:
        self._tokens = tokens
        self._source = source
        self._pos = 0

    @property
    def source(self) -> str:
        return self._source

    # ------------------------------------------------------------------
    # Navigation
    # ------------------------------------------------------------------

    def peek(self, offset: int = 0) -> Token:
        idx = self._pos + offset
        if idx < len(self._tokens):
            return self._tokens[idx]
        return self._tokens[-1]  # EOF

    def at(self, *types: TokenType) -> bool:
        return self.peek().type in types

    def at_punct(self, ch: str, offset: int = 0) -> bool:
        return self.peek(offset).is_punct(ch)

    def at_eof(self) -> bool:
        return self.peek().type == TokenType.EOF

    def advance(self) -> Token:
        tok = self._tokens[self._pos]
        if tok.type != TokenType.EOF:
            self._pos += 1
        return tok

    def prev(self) -> Token:
        """The most recently consumed token."""
        return self._tokens[max(self._pos - 1, 0)]

    def adjacent(self, offset: int = 0) -> bool:
        """True if the token at `offset` directly follows the previous one."""
        if self._pos + offset == 0:
            return False
        before = self.peek(offset - 1) if offset else self.prev()
        return before.span.end.offset == self.peek(offset).span.start.offset

    def expect_punct(self, ch: str, expected: list[str]) -> Token:
        if not self.at_punct(ch):
            raise self.unexpected(expected)
        return self.advance()

    def expect(self, tt: TokenType, expected: list[str]) -> Token:
        if not self.at(tt):
            raise self.unexpected(expected)
        return self.advance()

    # ------------------------------------------------------------------
    # Errors
    # ------------------------------------------------------------------

    def error(self, message: str, span: Span | None = None, hint: str | None = None) -> ParseError:
        if span is None:
            span = self.peek().span
        return ParseError(message, span, self._source, hint=hint)

    def unexpected(self, expected: list[str]) -> ParseError:
        """Error for the current token given the set of acceptable labels."""
        tok = self.peek()
        wanted = d.describe_expected(expected)
        if tok.type == TokenType.EOF:
            first = self._tokens[0].span if self._tokens else tok.span
            return self.error("unexpected end of input", first.join(tok.span), hint=f"missing {wanted}")
        hint = d.node_position_hint(expected, tok)
        return self.error(f"expected {wanted}, found {d.describe_token(tok)}", tok.span, hint)

    def superfluous(self) -> ParseError:
        return self.error("superfluous token", self.peek().span)


# ---------------------------------------------------------------------------
# Mini-grammar
# ---------------------------------------------------------------------------


def at_expression(cursor: TokenCursor) -> bool:
    return cursor.at(TokenType.IDENT, TokenType.GROUP)


def parse_expression(cursor: TokenCursor) -> Expr:
    """Parse a name, a dotted or `::` path, a single call, or a bracketed group."""
    tok = cursor.peek()

    if tok.type == TokenType.GROUP:
        cursor.advance()
        return _group_expr(tok)

    if tok.type != TokenType.IDENT:
        raise cursor.error(EXPRESSION_NOT_UNDERSTOOD, tok.span)

    cursor.advance()
    segments = [tok.value]
    end = tok.span
    while True:
        if cursor.at_punct(".") and cursor.peek(1).type == TokenType.IDENT:
            cursor.advance()
        elif (
            cursor.at_punct(":")
            and cursor.at_punct(":", 1)
            and cursor.adjacent(1)
            and cursor.peek(2).type == TokenType.IDENT
        ):
            cursor.advance()
            cursor.advance()
        else:
            break
        seg = cursor.advance()
        segments.append(seg.value)
        end = seg.span

    path = ".".join(segments)
    span = Span(tok.span.start, end.end)

    args = cursor.peek()
    if args.is_group(Delimiter.PAREN):
        cursor.advance()
        return Expr(ExprKind.CALL, tuple(segments), path + _host_code(args), span.join(args.span))

    kind = ExprKind.NAME if len(segments) == 1 else ExprKind.PATH
    return Expr(kind, tuple(segments), path, span)


def _group_expr(tok: Token) -> Expr:
    code = _host_code(tok)
    if tok.delimiter == Delimiter.BRACE:
        # Parenthesised so that multi-line bodies and trailing comments evaluate
        return Expr(ExprKind.BLOCK, (), f"(\n{code[1:-1].strip()}\n)", tok.span)
    if tok.delimiter == Delimiter.BRACKET:
        return Expr(ExprKind.LIST, (), code, tok.span)
    return Expr(ExprKind.TUPLE, (), code, tok.span)


def _host_code(tok: Token) -> str:
    """The raw text of a group with `a::b` paths rewritten to `a.b`."""
    base = tok.span.start.offset
    code = tok.raw
    for offset in sorted(_path_separators(tok.children), reverse=True):
        i = offset - base
        code = code[:i] + "." + code[i + 2 :]
    return code


def _path_separators(tokens: tuple[Token, ...], subscript: bool = False) -> Iterator[int]:
    # `a::b` inside a subscript is a slice, not a path
    for i, tok in enumerate(tokens):
        if tok.type == TokenType.GROUP:
            yield from _path_separators(tok.children, _is_subscript(tokens, i))
        elif (
            not subscript
            and tok.is_punct(":")
            and 0 < i < len(tokens) - 2
            and tokens[i - 1].type == TokenType.IDENT
            and tokens[i + 1].is_punct(":")
            and tokens[i + 2].type == TokenType.IDENT
            and tokens[i - 1].span.end.offset == tok.span.start.offset
            and tok.span.end.offset == tokens[i + 1].span.start.offset
        ):
            yield tok.span.start.offset


def _is_subscript(tokens: tuple[Token, ...], i: int) -> bool:
    if not tokens[i].is_group(Delimiter.BRACKET) or i == 0:
        return False
    prev = tokens[i - 1]
    if prev.type == TokenType.IDENT:
        return not keyword.iskeyword(prev.value)
    if prev.type == TokenType.GROUP:
        return prev.delimiter != Delimiter.BRACE
    return prev.type == TokenType.LITERAL


# ---------------------------------------------------------------------------
# Evaluation
# ---------------------------------------------------------------------------


def _default_names() -> dict[str, Any]:
    from typedhtml import types
    from typedhtml.dom import text, unsafe_text

    names: dict[str, Any] = {enum.__name__: enum for enum in types.ENUMS}
    names.update(
        Id=types.Id,
        Class=types.Class,
        SpacedSet=types.SpacedSet,
        SpacedList=types.SpacedList,
        text=text,
        unsafe_text=unsafe_text,
    )
    return names


class Scope(Mapping[str, Any]):
    """Read-only names visible to markup expressions, layered over the defaults."""

    def __init__(self, values: Mapping[str, Any] | None = None, **kwargs: Any) -> None:
        layers: list[Mapping[str, Any]] = [dict(kwargs)]
        if values is not None:
            layers.append(values)
        layers.append(_default_names())
        self._names = ChainMap(*layers)

    def __getitem__(self, key: str) -> Any:
        return self._names[key]

    def __iter__(self) -> Iterator[str]:
        return iter(self._names)

    def __len__(self) -> int:
        return len(self._names)

    def child(self, **kwargs: Any) -> Scope:
        """A new scope with extra names shadowing this one."""
        return Scope(self, **kwargs)


def evaluate(expr: Expr, scope: Mapping[str, Any]) -> Any:
    """Evaluate a captured expression against a scope."""
    if expr.kind in (ExprKind.NAME, ExprKind.PATH):
        try:
            return resolve_path(scope, expr.segments)
        except (NameError, AttributeError) as exc:
            raise ConstructionError(str(exc), expr.span) from exc

    namespace: dict[str, Any] = {"__builtins__": builtins}
    namespace.update(scope)
    try:
        code = compile(expr.code, "<markup>", "eval")
    except SyntaxError as exc:
        raise ConstructionError(f"invalid expression: {exc.msg}", expr.span) from exc
    try:
        return eval(code, namespace)
    except NameError as exc:
        raise ConstructionError(f"cannot find value '{exc.name}' in this scope", expr.span) from exc
    except Exception as exc:
        raise ConstructionError(
            f"evaluating expression failed: {type(exc).__name__}: {exc}", expr.span
        ) from exc


def resolve_path(scope: Mapping[str, Any], segments: tuple[str, ...]) -> Any:
    """Walk `a.b.c` through mappings first, then attributes."""
    head, *rest = segments
    if head not in scope:
        raise NameError(f"cannot find value '{head}' in this scope")
    value = scope[head]
    walked = head
    for seg in rest:
        if isinstance(value, Mapping) and seg in value:
            value = value[seg]
        elif hasattr(value, seg):
            value = getattr(value, seg)
        else:
            raise AttributeError(f"'{walked}' has no member '{seg}'")
        walked = f"{walked}.{seg}"
    return value


def lookup(scope: Mapping[str, Any], name: str) -> Any:
    """A free name from the scope, falling back to builtins."""
    if name in scope:
        return scope[name]
    if hasattr(builtins, name):
        return getattr(builtins, name)
    raise NameError(f"cannot find value '{name}' in this scope")


def free_names(expr: Expr) -> list[str]:
    """Names an expression reads but does not bind, in order of first use."""
    if expr.kind in (ExprKind.NAME, ExprKind.PATH):
        return [expr.segments[0]]
    try:
        tree = pyast.parse(expr.code, mode="eval")
    except SyntaxError as exc:
        raise ConstructionError(f"invalid expression: {exc.msg}", expr.span) from exc

    bound: set[str] = set()
    loads: list[pyast.Name] = []
    for node in pyast.walk(tree):
        if isinstance(node, pyast.Name):
            if isinstance(node.ctx, pyast.Load):
                loads.append(node)
            else:
                bound.add(node.id)
        elif isinstance(node, pyast.arg):
            bound.add(node.arg)

    loads.sort(key=lambda n: (n.lineno, n.col_offset))
    names: list[str] = []
    for node in loads:
        if node.id not in bound and node.id not in names:
            names.append(node.id)
    return names
