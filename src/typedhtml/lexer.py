"""Lexer: converts source text into token trees and flattened token streams."""

from __future__ import annotations

import dataclasses

from typedhtml.errors import DEFAULT_FILENAME, LexError
from typedhtml.tokens import (
    CLOSE_DELIMITERS,
    OPEN_DELIMITERS,
    PUNCT_CHARS,
    Delimiter,
    Keyword,
    Position,
    Span,
    Token,
    TokenType,
    is_hex_digit,
    is_ident_char,
    is_ident_start,
)

_SIMPLE_ESCAPES = {"\\": "\\", '"': '"', "'": "'", "n": "\n", "r": "\r", "t": "\t", "0": "\0"}


class Lexer:
    """Tokenize source text into a sequence of token trees.

    Bracketed groups are lexed recursively into GROUP tokens; ``unroll``
    decides whether callers see them as opaque trees or flattened.
    """

    def __init__(self, source: str, filename: str = DEFAULT_FILENAME) -> None:
        self._source = source
        self._filename = filename
        self._pos = 0
        self._line = 1
        self._col = 1

    def tokenize(self, deep: bool = False) -> list[Token]:
        """Tokenize the full source and return the token list, ending with EOF."""
        trees = self._lex_sequence(None)
        tokens = unroll(trees, deep)
        pos = self._current_pos()
        tokens.append(Token(TokenType.EOF, "", "", Span(pos, pos)))
        return tokens

    # ------------------------------------------------------------------
    # Position helpers
    # ------------------------------------------------------------------

    def _current_pos(self) -> Position:
        return Position(self._line, self._col, self._pos)

    def _peek(self, offset: int = 0) -> str:
        idx = self._pos + offset
        if idx < len(self._source):
            return self._source[idx]
        return ""

    def _at_end(self) -> bool:
        return self._pos >= len(self._source)

    def _advance(self) -> str:
        ch = self._source[self._pos]
        self._pos += 1
        if ch == "\n":
            self._line += 1
            self._col = 1
        else:
            self._col += 1
        return ch

    def _token(self, tt: TokenType, value: str, start: Position) -> Token:
        end = self._current_pos()
        raw = self._source[start.offset : end.offset]
        return Token(tt, value, raw, Span(start, end))

    def _error(self, message: str, pos: Position | None = None) -> LexError:
        if pos is None:
            pos = self._current_pos()
        return LexError(message, pos, self._source)

    # ------------------------------------------------------------------
    # Sequences and groups
    # ------------------------------------------------------------------

    def _lex_sequence(self, opener: tuple[Delimiter, Position] | None) -> list[Token]:
        """Lex tokens until the closing delimiter of `opener` (or EOF at top level)."""
        tokens: list[Token] = []
        while True:
            self._skip_trivia()
            if self._at_end():
                if opener is not None:
                    delimiter, open_pos = opener
                    raise self._error(f"unclosed '{delimiter.open}'", open_pos)
                return tokens

            ch = self._peek()

            if ch in CLOSE_DELIMITERS:
                closing = CLOSE_DELIMITERS[ch]
                if opener is None:
                    raise self._error(f"unexpected closing '{ch}'")
                if closing != opener[0]:
                    raise self._error(
                        f"mismatched closing delimiter: expected '{opener[0].close}', found '{ch}'"
                    )
                return tokens

            if ch in OPEN_DELIMITERS:
                tokens.append(self._lex_group())
            elif ch in "\"'":
                tokens.append(self._lex_string())
            elif "0" <= ch <= "9":
                tokens.append(self._lex_number())
            elif is_ident_start(ch):
                tokens.append(self._lex_identifier())
            elif ch in PUNCT_CHARS:
                start = self._current_pos()
                self._advance()
                tokens.append(self._token(TokenType.PUNCT, ch, start))
            elif ch == "\0":
                raise self._error("NUL character in source")
            else:
                raise self._error(f"invalid character {ch!r}")

    def _lex_group(self) -> Token:
        start = self._current_pos()
        delimiter = OPEN_DELIMITERS[self._advance()]
        inner_start = self._pos
        children = self._lex_sequence((delimiter, start))
        inner = self._source[inner_start : self._pos]
        self._advance()  # consume the closing delimiter
        tok = self._token(TokenType.GROUP, inner, start)
        return dataclasses.replace(tok, delimiter=delimiter, children=tuple(children))

    def _skip_trivia(self) -> None:
        while not self._at_end():
            ch = self._peek()
            if ch in " \t\r\n\f":
                self._advance()
            elif ch == "#":
                # Line comment
                while not self._at_end() and self._peek() != "\n":
                    self._advance()
            else:
                return

    # ------------------------------------------------------------------
    # Identifiers and numbers
    # ------------------------------------------------------------------

    def _lex_identifier(self) -> Token:
        start = self._current_pos()
        chars = []
        while not self._at_end() and is_ident_char(self._peek()):
            chars.append(self._advance())
        return self._token(TokenType.IDENT, "".join(chars), start)

    def _lex_number(self) -> Token:
        start = self._current_pos()
        chars = []
        while not self._at_end():
            ch = self._peek()
            if is_ident_char(ch) or (ch == "." and "0" <= self._peek(1) <= "9"):
                chars.append(self._advance())
            else:
                break
        return self._token(TokenType.LITERAL, "".join(chars), start)

    # ------------------------------------------------------------------
    # String literals
    # ------------------------------------------------------------------

    def _lex_string(self) -> Token:
        start = self._current_pos()
        quote = self._advance()
        chars: list[str] = []

        while True:
            if self._at_end():
                raise self._error("unterminated string literal", start)
            ch = self._peek()
            if ch == quote:
                self._advance()
                break
            if ch == "\\":
                chars.append(self._lex_escape())
            else:
                chars.append(self._advance())

        return self._token(TokenType.LITERAL, "".join(chars), start)

    def _lex_escape(self) -> str:
        start = self._current_pos()
        self._advance()  # consume backslash

        if self._at_end():
            raise self._error("unexpected end of input in string escape", start)

        ch = self._peek()

        if ch in _SIMPLE_ESCAPES:
            self._advance()
            return _SIMPLE_ESCAPES[ch]

        if ch == "x":
            self._advance()
            digits = []
            for i in range(2):
                if not is_hex_digit(self._peek()):
                    raise self._error(f"incomplete escape: expected 2 hex digits, got {i}", start)
                digits.append(self._advance())
            return chr(int("".join(digits), 16))

        if ch == "u":
            self._advance()
            if self._peek() != "{":
                raise self._error("expected '{' after '\\u'", start)
            self._advance()
            digits = []
            while is_hex_digit(self._peek()):
                digits.append(self._advance())
            if self._peek() != "}" or not 1 <= len(digits) <= 6:
                raise self._error("malformed unicode escape, expected '\\u{XXXX}'", start)
            self._advance()
            codepoint = int("".join(digits), 16)
            if codepoint > 0x10FFFF:
                raise self._error(f"Unicode codepoint U+{codepoint:X} is out of range", start)
            return chr(codepoint)

        raise self._error(f"invalid escape sequence '\\{ch}'", start)


def unroll(tokens: list[Token], deep: bool) -> list[Token]:
    """Flatten GROUP tokens into GROUP_OPEN/inner/GROUP_CLOSE when `deep` is set."""
    if not deep:
        return list(tokens)
    result: list[Token] = []
    for tok in tokens:
        if tok.type != TokenType.GROUP:
            result.append(tok)
            continue
        assert tok.delimiter is not None
        start, end = tok.span.start, tok.span.end
        open_end = Position(start.line, start.column + 1, start.offset + 1)
        close_start = Position(end.line, end.column - 1, end.offset - 1)
        result.append(
            Token(
                TokenType.GROUP_OPEN,
                tok.delimiter.open,
                tok.delimiter.open,
                Span(start, open_end),
                delimiter=tok.delimiter,
            )
        )
        result.extend(unroll(list(tok.children), deep))
        result.append(
            Token(
                TokenType.GROUP_CLOSE,
                tok.delimiter.close,
                tok.delimiter.close,
                Span(close_start, end),
                delimiter=tok.delimiter,
            )
        )
    return result


def keywordise(tokens: list[Token]) -> list[Token]:
    """Turn the identifiers `in` and `with` into KEYWORD tokens."""
    result = []
    for tok in tokens:
        if tok.type == TokenType.IDENT and tok.value in ("in", "with"):
            tok = dataclasses.replace(tok, type=TokenType.KEYWORD, keyword=Keyword(tok.value))
        result.append(tok)
    return result


def tokenize(source: str, filename: str = DEFAULT_FILENAME, deep: bool = False) -> list[Token]:
    """Convenience function: tokenize source text and return the token list."""
    return Lexer(source, filename).tokenize(deep)
