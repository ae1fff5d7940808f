"""Markup parser: converts a token stream into a Markup AST."""

from __future__ import annotations

from typedhtml import diagnostics as d
from typedhtml.ast import Attribute, Block, Element, Literal, Markup, Node, RawValue, Text
from typedhtml.errors import DEFAULT_FILENAME, TagMismatchError
from typedhtml.expr import TokenCursor, at_expression, parse_expression
from typedhtml.lexer import tokenize
from typedhtml.schema import attribute_key
from typedhtml.tokens import Delimiter, Span, Token, TokenType

NODE_START = [d.LT, d.CODE_BLOCK, d.LITERAL]
ATTRIBUTE_OR_END = [d.IDENTIFIER, d.SLASH, d.GT]


class Parser:
    """Recursive descent parser for one markup unit."""

    def __init__(self, tokens: list[Token], source: str) -> None:
        self._cur = TokenCursor(tokens, source)
        self._source = source

    def parse(self) -> Markup:
        root = self._parse_node()
        output = None
        output_span = None
        if self._cur.at_punct(":"):
            self._cur.advance()
            tok = self._cur.expect(TokenType.IDENT, [d.IDENTIFIER])
            output, output_span = tok.value, tok.span
        if not self._cur.at_eof():
            raise self._cur.superfluous()
        return Markup(root, output, output_span, root.span.join(self._cur.prev().span))

    # ------------------------------------------------------------------
    # Nodes
    # ------------------------------------------------------------------

    def _parse_node(self) -> Node:
        tok = self._cur.peek()
        if tok.is_punct("<"):
            return self._parse_element()
        if tok.is_string:
            self._cur.advance()
            return Text(tok.value, tok.span)
        if tok.is_group(Delimiter.BRACE):
            expr = parse_expression(self._cur)
            return Block(expr, tok.span)
        if tok.type == TokenType.LITERAL:
            raise self._cur.error(
                f"expected {d.describe_expected(NODE_START)}, found {d.describe_token(tok)}",
                tok.span,
                hint=d.TEXT_HINT,
            )
        raise self._cur.unexpected(NODE_START)

    def _parse_element(self) -> Element:
        open_tok = self._cur.advance()
        name, name_span = self._parse_name()

        attrs: dict[str, Attribute] = {}
        while self._cur.at(TokenType.IDENT):
            attr = self._parse_attribute()
            # Last write wins; the first occurrence keeps its position
            attrs[attribute_key(attr.name)] = attr

        if self._cur.at_punct("/"):
            self._cur.advance()
            close = self._cur.expect_punct(">", [d.GT])
            return Element(name, tuple(attrs.values()), (), True, name_span, open_tok.span.join(close.span))
        if not self._cur.at_punct(">"):
            raise self._cur.unexpected(ATTRIBUTE_OR_END)
        self._cur.advance()

        children: list[Node] = []
        while not (self._cur.at_punct("<") and self._cur.at_punct("/", 1)):
            if self._cur.at_eof():
                raise self._cur.error(
                    f"unclosed element <{name}>", name_span, hint=f"add a closing tag '</{name}>'"
                )
            children.append(self._parse_node())

        self._cur.advance()
        self._cur.advance()
        close_name, close_span = self._parse_name()
        if close_name.lower() != name.lower():
            raise TagMismatchError(name, name_span, close_name, close_span, self._source)
        end = self._cur.expect_punct(">", [d.GT])
        return Element(name, tuple(attrs.values()), tuple(children), False, name_span, open_tok.span.join(end.span))

    # ------------------------------------------------------------------
    # Names and attributes
    # ------------------------------------------------------------------

    def _parse_name(self) -> tuple[str, Span]:
        """Parse `ident ('-' ident)*` with no spacing between the parts."""
        first = self._cur.expect(TokenType.IDENT, [d.IDENTIFIER])
        parts = [first.value]
        span = first.span
        while (
            self._cur.at_punct("-")
            and self._cur.adjacent()
            and self._cur.peek(1).type == TokenType.IDENT
            and self._cur.adjacent(1)
        ):
            self._cur.advance()
            tok = self._cur.advance()
            parts.append(tok.value)
            span = span.join(tok.span)
        return "-".join(parts), span

    def _parse_attribute(self) -> Attribute:
        name, name_span = self._parse_name()
        self._cur.expect_punct("=", [d.EQUALS])
        tok = self._cur.peek()
        if tok.type == TokenType.LITERAL:
            self._cur.advance()
            value: RawValue = Literal(tok.value, tok.raw, tok.is_string, tok.span)
        elif at_expression(self._cur):
            value = parse_expression(self._cur)
        else:
            raise self._cur.unexpected([d.LITERAL, d.IDENTIFIER, d.GROUP])
        return Attribute(name, value, name_span, name_span.join(value.span))


def parse(source: str, filename: str = DEFAULT_FILENAME) -> Markup:
    """Convenience function: tokenize and parse source text."""
    tokens = tokenize(source, filename)
    return Parser(tokens, source).parse()
