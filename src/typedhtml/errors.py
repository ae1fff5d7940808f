"""Error types with formatted source context."""

from __future__ import annotations

from dataclasses import dataclass

from typedhtml.tokens import Position, Span

DEFAULT_FILENAME = "input.thtml"


@dataclass(frozen=True, slots=True)
class Note:
    """A secondary message attached to another source location."""

    message: str
    span: Span


class CompileError(Exception):
    """Base class for every error raised while compiling a unit.

    Carries the primary span, the source it refers to, optional secondary
    notes, and an optional hint rendered as a help line.
    """

    severity = "error"

    def __init__(
        self,
        message: str,
        span: Span,
        source: str = "",
        notes: tuple[Note, ...] = (),
        hint: str | None = None,
    ) -> None:
        self.message = message
        self.span = span
        self.source = source
        self.notes = notes
        self.hint = hint
        super().__init__(self.format())

    def with_source(self, source: str) -> CompileError:
        """Attach source text to an error raised without it."""
        if not self.source:
            self.source = source
            self.args = (self.format(),)
        return self

    def format(self, filename: str = DEFAULT_FILENAME) -> str:
        result = f"{self.severity}: {self.message}\n" + _snippet(self.source, self.span, filename)
        for note in self.notes:
            result += f"\nnote: {note.message}\n" + _snippet(self.source, note.span, filename)
        if self.hint:
            result += f"\n  = help: {self.hint}"
        return result


class LexError(CompileError):
    """Raised on the first lexing error, with position and source context."""

    def __init__(self, message: str, position: Position, source: str) -> None:
        self.position = position
        end = Position(position.line, position.column + 1, position.offset + 1)
        super().__init__(message, Span(position, end), source)


class ParseError(CompileError):
    """Raised on the first grammar error: unexpected, missing or superfluous token."""


class TagMismatchError(ParseError):
    """Closing tag does not match the opening tag."""

    def __init__(self, open_name: str, open_span: Span, close_name: str, close_span: Span, source: str) -> None:
        self.open = open_name
        self.close = close_name
        self.open_span = open_span
        self.close_span = close_span
        super().__init__(
            f"expected closing tag '</{open_name}>', found '</{close_name}>'",
            close_span,
            source,
            notes=(Note("opening tag is here:", open_span),),
        )


class SchemaError(CompileError):
    """Structural violation: unknown element or attribute, child count, content category."""


class AttributeValueError(CompileError):
    """A literal attribute value was rejected by its type's parser."""

    def __init__(
        self,
        element: str,
        attribute: str,
        literal: str,
        reason: str,
        span: Span,
        source: str = "",
    ) -> None:
        self.element = element
        self.attribute = attribute
        self.literal = literal
        self.reason = reason
        super().__init__(
            f"invalid value {literal!r} for attribute '{attribute}' on <{element}>: {reason}",
            span,
            source,
        )


class MissingOutputTypeError(CompileError):
    """An event handler was used without declaring an output type."""

    def __init__(self, element: str, event: str, span: Span, source: str = "") -> None:
        self.element = element
        self.event = event
        super().__init__(
            f"event handler 'on{event}' on <{element}> needs a declared output type",
            span,
            source,
            hint="add an explicit output type annotation, eg. `<button ...>...</button> : String`",
        )


class ConstructionError(CompileError):
    """Raised while building a typed tree: expression evaluation, coercion or splicing."""


def _snippet(source: str, span: Span, filename: str) -> str:
    lines = source.splitlines(keepends=True)
    line_idx = span.start.line - 1
    col = span.start.column

    if 0 <= line_idx < len(lines):
        source_line = lines[line_idx].rstrip("\n").rstrip("\r")
    else:
        source_line = ""

    # Underline the full span when on one line, otherwise to end of line
    if span.end.line == span.start.line:
        underline_len = max(1, span.end.column - col)
    else:
        underline_len = max(1, len(source_line) - col + 1)

    pad = " " * (col - 1)
    carets = "^" * underline_len

    line_num = str(span.start.line)
    gutter_width = len(line_num) + 1

    blank_gutter = " " * gutter_width + "|"
    line_gutter = f"{line_num:>{gutter_width - 1}} |"

    return (
        f"{' ' * gutter_width}--> {filename}:{span.start.line}:{col}\n"
        f"{blank_gutter}\n"
        f"{line_gutter} {source_line}\n"
        f"{blank_gutter} {pad}{carets}"
    )
