"""Token types, data structures, and character classification helpers."""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum, auto


class TokenType(Enum):
    IDENT = auto()  # [A-Za-z_][A-Za-z0-9_]*
    LITERAL = auto()  # quoted string or number
    PUNCT = auto()  # single punctuation character
    KEYWORD = auto()  # `in` / `with`, schema grammar only

    # Bracketed groups: opaque (GROUP) or flattened (GROUP_OPEN ... GROUP_CLOSE)
    GROUP = auto()
    GROUP_OPEN = auto()
    GROUP_CLOSE = auto()

    EOF = auto()


class Delimiter(Enum):
    PAREN = "()"
    BRACKET = "[]"
    BRACE = "{}"

    @property
    def open(self) -> str:
        return self.value[0]

    @property
    def close(self) -> str:
        return self.value[1]


class Keyword(Enum):
    IN = "in"
    WITH = "with"


@dataclass(frozen=True, slots=True)
class Position:
    """Source position, 1-based line and column, 0-based offset."""

    line: int
    column: int
    offset: int


@dataclass(frozen=True, slots=True)
class Span:
    """Source range from start to end position."""

    start: Position
    end: Position

    def join(self, other: Span) -> Span:
        return Span(self.start, other.end)


@dataclass(frozen=True, slots=True)
class Token:
    """A single lexer token.

    ``value`` is the resolved value (decoded string contents for string
    literals, the character for punctuation), ``raw`` is the original source
    text. Opaque groups keep their inner tokens in ``children``.
    """

    type: TokenType
    value: str
    raw: str
    span: Span
    delimiter: Delimiter | None = None
    children: tuple[Token, ...] = ()
    keyword: Keyword | None = None

    def is_punct(self, ch: str) -> bool:
        return self.type == TokenType.PUNCT and self.value == ch

    def is_group(self, delimiter: Delimiter) -> bool:
        return self.type == TokenType.GROUP and self.delimiter == delimiter

    @property
    def is_string(self) -> bool:
        return self.type == TokenType.LITERAL and self.raw[:1] in ("'", '"')


def is_ident_start(ch: str) -> bool:
    """Return True if ch may begin an identifier."""
    return ch == "_" or ("a" <= ch <= "z") or ("A" <= ch <= "Z")


def is_ident_char(ch: str) -> bool:
    """Return True if ch may continue an identifier."""
    return is_ident_start(ch) or ("0" <= ch <= "9")


def is_hex_digit(ch: str) -> bool:
    """Return True if ch is a hexadecimal digit."""
    return ch != "" and ch in "0123456789abcdefABCDEF"


# Printable ASCII punctuation, minus quotes, delimiters and the comment marker #
PUNCT_CHARS = frozenset("!$%&*+,-./:;<=>?@\\^`|~")
OPEN_DELIMITERS = {"(": Delimiter.PAREN, "[": Delimiter.BRACKET, "{": Delimiter.BRACE}
CLOSE_DELIMITERS = {")": Delimiter.PAREN, "]": Delimiter.BRACKET, "}": Delimiter.BRACE}
