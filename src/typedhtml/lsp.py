"""Minimal LSP server for typedhtml markup, diagnostics only."""

from __future__ import annotations

from lsprotocol.types import (
    TEXT_DOCUMENT_DID_CHANGE,
    TEXT_DOCUMENT_DID_OPEN,
    Diagnostic,
    DiagnosticRelatedInformation,
    DiagnosticSeverity,
    DidChangeTextDocumentParams,
    DidOpenTextDocumentParams,
    Location,
    Position,
    PublishDiagnosticsParams,
    Range,
    TextDocumentSyncKind,
)
from pygls.lsp.server import LanguageServer

from typedhtml import __version__, compile_markup
from typedhtml import diagnostics as d
from typedhtml.errors import CompileError
from typedhtml.tokens import Span

SOURCE = "typedhtml"

server = LanguageServer("typedhtml-lsp", __version__, text_document_sync_kind=TextDocumentSyncKind.Full)


def _range(span: Span) -> Range:
    return Range(
        start=Position(line=span.start.line - 1, character=span.start.column - 1),
        end=Position(line=span.end.line - 1, character=span.end.column - 1),
    )


def _to_lsp(uri: str, diag: d.Diagnostic) -> Diagnostic:
    message = diag.message
    if diag.hint:
        message += f"\nhelp: {diag.hint}"
    related = [
        DiagnosticRelatedInformation(location=Location(uri=uri, range=_range(span)), message=text)
        for span, text in diag.notes
    ]
    return Diagnostic(
        range=_range(diag.span),
        message=message,
        severity=DiagnosticSeverity.Error if diag.severity == d.ERROR else DiagnosticSeverity.Warning,
        source=SOURCE,
        related_information=related or None,
    )


def _validate(ls: LanguageServer, uri: str) -> None:
    """Run the compile pipeline and publish diagnostics."""
    doc = ls.workspace.get_text_document(uri)
    source = doc.source
    filename = uri.rsplit("/", 1)[-1] if "/" in uri else uri
    diagnostics: list[Diagnostic] = []

    try:
        compile_markup(source, filename)
    except CompileError as exc:
        diagnostics.extend(_to_lsp(uri, diag) for diag in d.to_diagnostics(exc))

    ls.text_document_publish_diagnostics(
        PublishDiagnosticsParams(uri=uri, diagnostics=diagnostics)
    )


@server.feature(TEXT_DOCUMENT_DID_OPEN)
def did_open(ls: LanguageServer, params: DidOpenTextDocumentParams) -> None:
    _validate(ls, params.text_document.uri)


@server.feature(TEXT_DOCUMENT_DID_CHANGE)
def did_change(ls: LanguageServer, params: DidChangeTextDocumentParams) -> None:
    _validate(ls, params.text_document.uri)


def main() -> None:
    server.start_io()
