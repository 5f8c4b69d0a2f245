"""LSP server for Papyrus — semantic tokens, folding ranges and property navigation."""

from __future__ import annotations

import logging
from typing import Any

from lsprotocol.types import (
    TEXT_DOCUMENT_DEFINITION,
    TEXT_DOCUMENT_DID_CHANGE,
    TEXT_DOCUMENT_DID_CLOSE,
    TEXT_DOCUMENT_DID_OPEN,
    TEXT_DOCUMENT_FOLDING_RANGE,
    TEXT_DOCUMENT_SEMANTIC_TOKENS_FULL,
    WORKSPACE_DID_CHANGE_CONFIGURATION,
    DefinitionParams,
    DidChangeConfigurationParams,
    DidChangeTextDocumentParams,
    DidCloseTextDocumentParams,
    DidOpenTextDocumentParams,
    FoldingRange,
    FoldingRangeKind,
    FoldingRangeParams,
    Location,
    Position,
    Range,
    SemanticTokens,
    SemanticTokensLegend,
    SemanticTokensParams,
    TextDocumentSyncKind,
)
from pygls.lsp.server import LanguageServer

from papylex import __version__
from papylex.document import Document
from papylex.editor import Editor
from papylex.errors import ConfigError
from papylex.folding import fold_regions
from papylex.lexer import Lexer
from papylex.properties import PropertyRecord
from papylex.styles import Style
from papylex.subscriptions import Subscriptions
from papylex.wordlists import WordLists

logger = logging.getLogger(__name__)

TOKEN_TYPES = [
    "operator",
    "keyword",
    "type",
    "modifier",
    "comment",
    "number",
    "string",
    "property",
    "class",
    "function",
]
TOKEN_MODIFIERS = ["documentation", "declaration"]

_DOCUMENTATION = 1 << TOKEN_MODIFIERS.index("documentation")
_DECLARATION = 1 << TOKEN_MODIFIERS.index("declaration")

# Style -> (token type index, modifier bits); DEFAULT is never sent
_STYLE_TOKENS: dict[Style, tuple[int, int]] = {
    Style.OPERATOR: (TOKEN_TYPES.index("operator"), 0),
    Style.FLOW_CONTROL: (TOKEN_TYPES.index("keyword"), 0),
    Style.TYPE: (TOKEN_TYPES.index("type"), 0),
    Style.KEYWORD: (TOKEN_TYPES.index("modifier"), 0),
    Style.KEYWORD2: (TOKEN_TYPES.index("keyword"), 0),
    Style.FOLD_OPEN: (TOKEN_TYPES.index("keyword"), 0),
    Style.FOLD_MIDDLE: (TOKEN_TYPES.index("keyword"), 0),
    Style.FOLD_CLOSE: (TOKEN_TYPES.index("keyword"), 0),
    Style.COMMENT: (TOKEN_TYPES.index("comment"), 0),
    Style.COMMENT_MULTILINE: (TOKEN_TYPES.index("comment"), 0),
    Style.COMMENT_DOC: (TOKEN_TYPES.index("comment"), _DOCUMENTATION),
    Style.NUMBER: (TOKEN_TYPES.index("number"), 0),
    Style.STRING: (TOKEN_TYPES.index("string"), 0),
    Style.PROPERTY: (TOKEN_TYPES.index("property"), 0),
    Style.CLASS: (TOKEN_TYPES.index("class"), 0),
    Style.FUNCTION: (TOKEN_TYPES.index("function"), 0),
}


class PapyrusLanguageServer(LanguageServer):
    """Language server keeping one lexed Editor per open document."""

    def __init__(self, *args: Any, **kwargs: Any) -> None:
        super().__init__(*args, **kwargs)
        self.word_lists = WordLists.defaults()
        self.subscriptions = Subscriptions()
        self.editors: dict[str, Editor] = {}


server = PapyrusLanguageServer(
    "papylex-lsp", __version__, text_document_sync_kind=TextDocumentSyncKind.Incremental
)


# ---------------------------------------------------------------------------
# Position conversion (byte offsets <-> UTF-16 columns)
# ---------------------------------------------------------------------------


def to_offset(document: Document, position: Position) -> int:
    """Convert an LSP position to a document byte offset."""
    if position.line >= document.line_count:
        return document.length
    text = document.line_text(position.line)
    units = 0
    for idx, ch in enumerate(text):
        if units >= position.character:
            return document.line_start(position.line) + len(text[:idx].encode("utf-8"))
        units += 2 if ord(ch) > 0xFFFF else 1
    return document.line_end(position.line)


def to_character(document: Document, line: int, pos: int) -> int:
    """Convert a byte offset on line to a UTF-16 column."""
    prefix = document.text_range(document.line_start(line), pos)
    return len(prefix.encode("utf-16-le")) // 2


# ---------------------------------------------------------------------------
# Document sync
# ---------------------------------------------------------------------------


def open_document(ls: PapyrusLanguageServer, uri: str, text: str) -> Editor:
    """Create, register and lex the editor for a newly opened document."""
    editor = Editor(Document(text), Lexer(ls.word_lists), ls.subscriptions, view=uri)
    ls.editors[uri] = editor
    if editor.open():
        ls.subscriptions.activate(uri)
    editor.colourise()
    logger.debug("opened %s (%d lines)", uri, editor.document.line_count)
    return editor


def apply_changes(ls: PapyrusLanguageServer, uri: str, changes: list[Any]) -> Editor | None:
    """Apply incremental or full content changes, then restyle from the first edit."""
    editor = ls.editors.get(uri)
    if editor is None:
        return None
    document = editor.document
    for change in changes:
        change_range = getattr(change, "range", None)
        if change_range is None:
            document.set_text(change.text)
        else:
            start = to_offset(document, change_range.start)
            end = to_offset(document, change_range.end)
            document.replace_range(start, end, change.text)
    editor.colourise()
    if uri in ls.subscriptions:
        ls.subscriptions.activate(uri)
    return editor


def close_document(ls: PapyrusLanguageServer, uri: str) -> None:
    editor = ls.editors.pop(uri, None)
    if editor is not None:
        editor.close()
        logger.debug("closed %s", uri)


def reload_configuration(ls: PapyrusLanguageServer, settings: Any) -> bool:
    """Rebuild word lists from client settings and restyle every open document."""
    section = settings.get("papylex") if isinstance(settings, dict) else None
    if not isinstance(section, dict):
        return False
    try:
        word_lists = WordLists.from_config(section, filename="settings")
    except ConfigError as exc:
        logger.warning("ignoring papylex settings: %s", exc.message)
        return False

    ls.word_lists = word_lists
    for uri, editor in ls.editors.items():
        editor.lexer.word_lists = word_lists
        if uri not in ls.subscriptions:
            ls.subscriptions.register(uri, editor)
    ls.subscriptions.reload(word_lists)
    logger.debug("reloaded word lists for %d document(s)", len(ls.editors))
    return True


# ---------------------------------------------------------------------------
# Features
# ---------------------------------------------------------------------------


def semantic_tokens(editor: Editor) -> list[int]:
    """Encode the document's styles as LSP semantic token data."""
    document = editor.document
    data: list[int] = []
    prev_line = 0
    prev_char = 0
    for line in range(document.line_count):
        declared = {r.name.lower() for r in editor.lexer.properties.records if r.line == line}
        for start, end, style in document.style_runs(line):
            mapped = _STYLE_TOKENS.get(style)
            if mapped is None:
                continue
            token_type, modifiers = mapped
            if style == Style.PROPERTY and document.text_range(start, end).lower() in declared:
                modifiers |= _DECLARATION
            char = to_character(document, line, start)
            length = to_character(document, line, end) - char
            delta_line = line - prev_line
            delta_char = char - prev_char if delta_line == 0 else char
            data.extend((delta_line, delta_char, length, token_type, modifiers))
            prev_line, prev_char = line, char
    return data


def folding_ranges(editor: Editor) -> list[FoldingRange]:
    document = editor.document
    ranges: list[FoldingRange] = []
    for header, last in fold_regions(document):
        opens_comment = document.line_state(header).in_comment and not document.line_state(
            header - 1
        ).in_comment
        ranges.append(
            FoldingRange(
                start_line=header,
                end_line=last,
                kind=FoldingRangeKind.Comment if opens_comment else FoldingRangeKind.Region,
            )
        )
    return ranges


def definition(editor: Editor, uri: str, position: Position) -> Location | None:
    """Resolve a property occurrence to its declaration."""
    document = editor.document
    run = document.style_run_at(to_offset(document, position))
    if run is None or run[2] != Style.PROPERTY:
        return None
    record = editor.lexer.properties.lookup(document.text_range(run[0], run[1]))
    if record is None:
        return None
    return Location(uri=uri, range=_declaration_range(document, record))


def _declaration_range(document: Document, record: PropertyRecord) -> Range:
    line = record.line
    for start, end, style in document.style_runs(line):
        if style == Style.PROPERTY and document.text_range(start, end).lower() == record.name.lower():
            return Range(
                start=Position(line=line, character=to_character(document, line, start)),
                end=Position(line=line, character=to_character(document, line, end)),
            )
    return Range(start=Position(line=line, character=0), end=Position(line=line, character=0))


@server.feature(TEXT_DOCUMENT_DID_OPEN)
def did_open(ls: PapyrusLanguageServer, params: DidOpenTextDocumentParams) -> None:
    open_document(ls, params.text_document.uri, params.text_document.text)


@server.feature(TEXT_DOCUMENT_DID_CHANGE)
def did_change(ls: PapyrusLanguageServer, params: DidChangeTextDocumentParams) -> None:
    apply_changes(ls, params.text_document.uri, list(params.content_changes))


@server.feature(TEXT_DOCUMENT_DID_CLOSE)
def did_close(ls: PapyrusLanguageServer, params: DidCloseTextDocumentParams) -> None:
    close_document(ls, params.text_document.uri)


@server.feature(
    TEXT_DOCUMENT_SEMANTIC_TOKENS_FULL,
    SemanticTokensLegend(token_types=TOKEN_TYPES, token_modifiers=TOKEN_MODIFIERS),
)
def semantic_tokens_full(ls: PapyrusLanguageServer, params: SemanticTokensParams) -> SemanticTokens:
    editor = ls.editors.get(params.text_document.uri)
    return SemanticTokens(data=semantic_tokens(editor) if editor is not None else [])


@server.feature(TEXT_DOCUMENT_FOLDING_RANGE)
def folding_range(ls: PapyrusLanguageServer, params: FoldingRangeParams) -> list[FoldingRange]:
    editor = ls.editors.get(params.text_document.uri)
    return folding_ranges(editor) if editor is not None else []


@server.feature(TEXT_DOCUMENT_DEFINITION)
def goto_definition(ls: PapyrusLanguageServer, params: DefinitionParams) -> Location | None:
    uri = params.text_document.uri
    editor = ls.editors.get(uri)
    if editor is None:
        return None
    return definition(editor, uri, params.position)


@server.feature(WORKSPACE_DID_CHANGE_CONFIGURATION)
def did_change_configuration(
    ls: PapyrusLanguageServer, params: DidChangeConfigurationParams
) -> None:
    if reload_configuration(ls, params.settings):
        ls.workspace_semantic_tokens_refresh(None)


def main() -> None:
    server.start_io()
