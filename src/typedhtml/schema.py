"""Element schema declarations: grammar, resolved records, and the registry.

A declaration reads::

    name {attr: Type, ...} in [Category, ...] with [required, ...] Constraint;

Every part after the name is optional. Declarations are resolved in a second
pass, so they may refer to elements and categories declared later.
"""

from __future__ import annotations

import logging
from collections.abc import Iterable, Iterator, Mapping
from dataclasses import dataclass, field
from types import MappingProxyType

from typedhtml import diagnostics as d
from typedhtml.config import GLOBAL_ATTRIBUTES, SELF_CLOSING, TEXT_NODE
from typedhtml.errors import DEFAULT_FILENAME, SchemaError
from typedhtml.expr import TokenCursor
from typedhtml.lexer import keywordise, tokenize
from typedhtml.tokens import Delimiter, Keyword, Span, Token, TokenType
from typedhtml.types import AttributeType, TypeSpec, resolve_type

logger = logging.getLogger(__name__)


def attribute_key(name: str) -> str:
    """Lookup form of an attribute or element name: dashes become underscores."""
    return name.replace("-", "_")


# ---------------------------------------------------------------------------
# Declarations as written
# ---------------------------------------------------------------------------


@dataclass(frozen=True, slots=True)
class AttributeDecl:
    name: str
    type: TypeSpec
    span: Span


@dataclass(frozen=True, slots=True)
class Declaration:
    """One parsed declaration, names not yet resolved."""

    name: str
    attributes: tuple[AttributeDecl, ...]
    categories: tuple[str, ...]
    required: tuple[tuple[str, Span], ...]
    constraint: tuple[str, Span] | None
    span: Span
    source: str = field(default="", repr=False, compare=False)


class _DeclarationParser:
    def __init__(self, tokens: list[Token], source: str) -> None:
        self.cur = TokenCursor(tokens, source)

    def parse(self) -> list[Declaration]:
        decls: list[Declaration] = []
        while not self.cur.at_eof():
            decls.append(self._declaration())
            if self.cur.at_punct(";"):
                self.cur.advance()
            elif not self.cur.at_eof():
                raise self.cur.unexpected([d.SEMI])
        return decls

    def _declaration(self) -> Declaration:
        name_tok = self.cur.expect(TokenType.IDENT, [d.IDENTIFIER])
        attrs: tuple[AttributeDecl, ...] = ()
        categories: tuple[str, ...] = ()
        required: tuple[tuple[str, Span], ...] = ()
        constraint = None

        if self._at_open(Delimiter.BRACE):
            attrs = self._attributes()
        if self._at_keyword(Keyword.IN):
            self.cur.advance()
            categories = tuple(name for name, _ in self._name_list())
        if self._at_keyword(Keyword.WITH):
            self.cur.advance()
            if self._at_open(Delimiter.BRACKET):
                required = tuple(self._name_list())
            if self.cur.at(TokenType.IDENT):
                tok = self.cur.advance()
                constraint = (tok.value, tok.span)
            elif not required:
                raise self.cur.unexpected([d.LBRACKET, d.IDENTIFIER])

        if not self._at_end_of_declaration():
            expected = [d.SEMI]
            if constraint is None and not required:
                expected.insert(0, d.WITH)
                if not categories:
                    expected.insert(0, d.IN)
                    if not attrs:
                        expected.insert(0, d.LBRACE)
            raise self.cur.unexpected(expected)

        return Declaration(
            name=name_tok.value,
            attributes=attrs,
            categories=categories,
            required=required,
            constraint=constraint,
            span=name_tok.span.join(self.cur.prev().span),
            source=self.cur.source,
        )

    # ------------------------------------------------------------------
    # Parts
    # ------------------------------------------------------------------

    def _attributes(self) -> tuple[AttributeDecl, ...]:
        self.cur.advance()
        attrs: list[AttributeDecl] = []
        while not self._at_close(Delimiter.BRACE):
            start = self.cur.peek().span
            name = self._dashed_name()
            self.cur.expect_punct(":", [d.COLON])
            spec = self._type_spec()
            attrs.append(AttributeDecl(name, spec, start.join(self.cur.prev().span)))
            if self.cur.at_punct(","):
                self.cur.advance()
            elif not self._at_close(Delimiter.BRACE):
                raise self.cur.unexpected([d.COMMA, d.RBRACE])
        self.cur.advance()
        return tuple(attrs)

    def _dashed_name(self) -> str:
        parts = [self.cur.expect(TokenType.IDENT, [d.IDENTIFIER]).value]
        while self.cur.at_punct("-") and self.cur.adjacent() and self.cur.peek(1).type == TokenType.IDENT:
            self.cur.advance()
            parts.append(self.cur.advance().value)
        return attribute_key("-".join(parts))

    def _type_spec(self) -> TypeSpec:
        name = self.cur.expect(TokenType.IDENT, [d.IDENTIFIER]).value
        # Only the last path segment names the type: `types::Uri` is `Uri`
        while self.cur.at_punct(":") and self.cur.at_punct(":", 1) and self.cur.adjacent(1):
            self.cur.advance()
            self.cur.advance()
            name = self.cur.expect(TokenType.IDENT, [d.IDENTIFIER]).value
        args: list[TypeSpec] = []
        if self.cur.at_punct("<"):
            self.cur.advance()
            args.append(self._type_spec())
            while self.cur.at_punct(","):
                self.cur.advance()
                args.append(self._type_spec())
            self.cur.expect_punct(">", [d.COMMA, d.GT])
        return TypeSpec(name, tuple(args))

    def _name_list(self) -> list[tuple[str, Span]]:
        if not self._at_open(Delimiter.BRACKET):
            raise self.cur.unexpected([d.LBRACKET])
        self.cur.advance()
        names: list[tuple[str, Span]] = []
        while not self._at_close(Delimiter.BRACKET):
            tok = self.cur.expect(TokenType.IDENT, [d.IDENTIFIER, d.RBRACKET])
            names.append((tok.value, tok.span))
            if self.cur.at_punct(","):
                self.cur.advance()
            elif not self._at_close(Delimiter.BRACKET):
                raise self.cur.unexpected([d.COMMA, d.RBRACKET])
        self.cur.advance()
        return names

    # ------------------------------------------------------------------
    # Lookahead
    # ------------------------------------------------------------------

    def _at_open(self, delim: Delimiter) -> bool:
        tok = self.cur.peek()
        return tok.type == TokenType.GROUP_OPEN and tok.delimiter == delim

    def _at_close(self, delim: Delimiter) -> bool:
        tok = self.cur.peek()
        return tok.type == TokenType.GROUP_CLOSE and tok.delimiter == delim

    def _at_keyword(self, kw: Keyword) -> bool:
        tok = self.cur.peek()
        return tok.type == TokenType.KEYWORD and tok.keyword == kw

    def _at_end_of_declaration(self) -> bool:
        return self.cur.at_punct(";") or self.cur.at_eof()


def parse_declarations(source: str, filename: str = DEFAULT_FILENAME) -> list[Declaration]:
    """Parse declaration text into unresolved declarations."""
    tokens = keywordise(tokenize(source, filename, deep=True))
    return _DeclarationParser(tokens, source).parse()


# ---------------------------------------------------------------------------
# Resolved schemas
# ---------------------------------------------------------------------------


@dataclass(frozen=True, slots=True)
class ContentConstraint:
    """What optional children an element accepts.

    ``name`` is a category, an element name (homogeneous children) or
    ``TextNode``. A child is accepted when ``name`` is among its tags.
    """

    name: str

    def accepts(self, tags: frozenset[str]) -> bool:
        return self.name in tags

    @property
    def is_text(self) -> bool:
        return self.name == TEXT_NODE

    def __str__(self) -> str:
        return self.name


@dataclass(frozen=True, slots=True, eq=False)
class ElementSchema:
    """The rules for one element name."""

    name: str
    attributes: Mapping[str, AttributeType]
    required_children: tuple[str, ...]
    constraint: ContentConstraint | None
    categories: frozenset[str]

    @property
    def tags(self) -> frozenset[str]:
        """Everything a constraint may name to accept this element."""
        return self.categories | {self.name}

    @property
    def self_closing(self) -> bool:
        return self.name in SELF_CLOSING

    def attribute(self, name: str) -> AttributeType | None:
        return self.attributes.get(attribute_key(name))


def _resolve(decls: list[Declaration]) -> dict[str, ElementSchema]:
    by_name: dict[str, Declaration] = {}
    for decl in decls:
        if decl.name in by_name:
            raise SchemaError(f"element '{decl.name}' is declared more than once", decl.span, decl.source)
        by_name[decl.name] = decl

    known_categories = {cat for decl in decls for cat in decl.categories}
    known_categories.add(TEXT_NODE)

    global_types = {key: resolve_type(spec) for key, spec in GLOBAL_ATTRIBUTES.items()}

    schemas: dict[str, ElementSchema] = {}
    for decl in decls:
        attributes = dict(global_types)
        for attr in decl.attributes:
            try:
                attributes[attr.name] = resolve_type(attr.type)
            except KeyError as exc:
                raise SchemaError(
                    f"attribute '{attr.name}' on '{decl.name}': {exc.args[0]}", attr.span, decl.source
                ) from None

        for child, span in decl.required:
            if child not in by_name:
                raise SchemaError(
                    f"required child '{child}' of '{decl.name}' is not a declared element", span, decl.source
                )

        constraint = None
        if decl.constraint is not None:
            cname, cspan = decl.constraint
            if cname not in by_name and cname not in known_categories:
                raise SchemaError(
                    f"'{cname}' is neither an element nor a content category", cspan, decl.source
                )
            constraint = ContentConstraint(cname)

        schemas[decl.name] = ElementSchema(
            name=decl.name,
            attributes=MappingProxyType(attributes),
            required_children=tuple(name for name, _ in decl.required),
            constraint=constraint,
            categories=frozenset(decl.categories),
        )
    return schemas


class SchemaRegistry(Mapping[str, ElementSchema]):
    """Read-only map from element name to its schema. Safe to share."""

    def __init__(self, declarations: Iterable[Declaration] = ()) -> None:
        self._declarations = tuple(declarations)
        self._schemas = MappingProxyType(_resolve(list(self._declarations)))
        logger.debug("resolved %d element schemas", len(self._schemas))

    @classmethod
    def from_source(cls, source: str, filename: str = DEFAULT_FILENAME) -> SchemaRegistry:
        return cls(parse_declarations(source, filename))

    def merged(self, source: str, filename: str = DEFAULT_FILENAME) -> SchemaRegistry:
        """A new registry holding these declarations plus those in `source`."""
        return SchemaRegistry(self._declarations + tuple(parse_declarations(source, filename)))

    def __getitem__(self, name: str) -> ElementSchema:
        return self._schemas[name]

    def __iter__(self) -> Iterator[str]:
        return iter(self._schemas)

    def __len__(self) -> int:
        return len(self._schemas)

    def required_children(self, name: str) -> tuple[str, ...]:
        return self._schemas[name].required_children

    @property
    def categories(self) -> frozenset[str]:
        return frozenset(cat for schema in self._schemas.values() for cat in schema.categories)

    def lookup(self, name: str) -> ElementSchema | None:
        return self._schemas.get(name)