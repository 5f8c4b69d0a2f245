"""Papyrus lexer — styles document lines and keeps the property registry current."""

from __future__ import annotations

from papylex.document import Document, StyleWriter
from papylex.folding import fold
from papylex.properties import PropertyRegistry
from papylex.scanner import get_next_char, tokenize
from papylex.styles import DEFAULT_CARRY, CarryState, FoldState, Style
from papylex.tokens import Token, TokenType
from papylex.wordlists import WordLists

LEXER_NAME = "Papyrus Script"

# Identifier after this keyword on the same line is a property declaration
_PROPERTY_KEYWORD = "property"

# Identifier after one of these names a script or struct
_CLASS_KEYWORDS = frozenset({"scriptname", "extends", "struct"})

_COMMENT_OPENERS = {";/": Style.COMMENT_MULTILINE, "{": Style.COMMENT_DOC}
_COMMENT_CLOSERS = {Style.COMMENT_MULTILINE: b"/;", Style.COMMENT_DOC: b"}"}


class _LineContext:
    """Per-line flags set by keywords and consumed by the identifiers after them."""

    __slots__ = ("expect_class", "expect_property")

    def __init__(self) -> None:
        self.expect_class = False
        self.expect_property = False


class Lexer:
    """Style and fold Papyrus source held in a Document.

    One instance serves one document: it owns that document's property
    registry. Word lists are immutable and may be shared between instances.
    """

    name = LEXER_NAME

    def __init__(self, word_lists: WordLists | None = None) -> None:
        self.word_lists = word_lists if word_lists is not None else WordLists()
        self.properties = PropertyRegistry()
        self._document: Document | None = None

    @property
    def is_usable(self) -> bool:
        """A lexer without configured word lists styles nothing."""
        return self.word_lists.is_configured

    # ------------------------------------------------------------------
    # Document lifecycle
    # ------------------------------------------------------------------

    def attach(self, document: Document) -> None:
        """Follow edits of document so cached properties never go stale."""
        self.detach()
        self._document = document
        document.add_watcher(self._on_modified)

    def detach(self) -> None:
        if self._document is not None:
            self._document.remove_watcher(self._on_modified)
            self._document = None
        self.properties.clear()

    def _on_modified(self, line: int) -> None:
        self.properties.invalidate_from(line)

    # ------------------------------------------------------------------
    # Host entry points
    # ------------------------------------------------------------------

    def lex(self, start: int, length: int, initial: CarryState, document: Document) -> CarryState:
        """Style the whole lines covering [start, start + length).

        initial is the state carried over from the position just before
        start. When start is not at a line start, styling restarts at the
        beginning of its line from that line's stored predecessor state.
        Returns the state carried past the last styled line.
        """
        if not self.is_usable or length <= 0 or start >= document.length:
            return initial

        first_line = document.line_from_position(start)
        line_start = document.line_start(first_line)
        if start != line_start:
            initial = document.line_state(first_line - 1) if first_line > 0 else DEFAULT_CARRY
        end = min(start + length, document.length)
        last_line = _last_line(document, end)

        dropped = self.properties.invalidate_from(first_line)
        orphaned = any(record.line > last_line for record in dropped)

        writer = document.style_writer(line_start)
        state = initial
        for line in range(first_line, last_line + 1):
            state = self._lex_line(document, line, state, writer)
            document.set_line_state(line, state)

        if line_start <= document.end_styled:
            if orphaned:
                # later lines may still style names the registry no longer holds
                document.end_styled = writer.position
            else:
                document.end_styled = max(document.end_styled, writer.position)
        return state

    def fold(self, start: int, length: int, initial: CarryState, document: Document) -> FoldState:
        """Assign fold levels to the whole lines covering [start, start + length)."""
        if not self.is_usable:
            return FoldState(in_comment=initial.in_comment)
        return fold(start, length, initial, document, self.word_lists)

    # ------------------------------------------------------------------
    # Line styling
    # ------------------------------------------------------------------

    def _lex_line(
        self, document: Document, line: int, state: CarryState, writer: StyleWriter
    ) -> CarryState:
        pos = document.line_start(line)
        content_end = document.line_end(line)
        next_start = document.line_start(line + 1)

        if state.in_comment:
            close = _find_closer(document, pos, content_end, state.style)
            if close < 0:
                writer.colour_to(next_start, state.style)
                return state
            writer.colour_to(close, state.style)
            pos = close

        state = self._style_tokens(document, line, pos, content_end, writer)

        if state.in_comment:
            writer.colour_to(next_start, state.style)
        else:
            writer.colour_to(next_start, Style.DEFAULT)
        return state

    def _style_tokens(
        self, document: Document, line: int, pos: int, content_end: int, writer: StyleWriter
    ) -> CarryState:
        ctx = _LineContext()
        tokens = tokenize(document, line, pos)
        i = 0
        while i < len(tokens):
            token = tokens[i]
            writer.colour_to(token.start, Style.DEFAULT)

            if token.type is TokenType.SPECIAL:
                if token.content == ";":
                    writer.colour_to(content_end, Style.COMMENT)
                    return DEFAULT_CARRY

                if token.content == "/;":
                    # a closer outside a block comment is a slash then a line comment
                    slash = Token("/", TokenType.SPECIAL, token.start, token.start + 1)
                    writer.colour_to(slash.end, self._classify(slash, None, line, ctx))
                    writer.colour_to(content_end, Style.COMMENT)
                    return DEFAULT_CARRY

                opened = _COMMENT_OPENERS.get(token.content)
                if opened is not None:
                    close = _find_closer(document, token.end, content_end, opened)
                    if close < 0:
                        writer.colour_to(content_end, opened)
                        return CarryState(opened)
                    writer.colour_to(close, opened)
                    tokens, i = tokenize(document, line, close), 0
                    continue

                if token.content == '"':
                    end = _string_end(document, token.end, content_end)
                    writer.colour_to(end, Style.STRING)
                    tokens, i = tokenize(document, line, end), 0
                    continue

            following = tokens[i + 1] if i + 1 < len(tokens) else None
            writer.colour_to(token.end, self._classify(token, following, line, ctx))
            i += 1

        return DEFAULT_CARRY

    def _classify(
        self, token: Token, following: Token | None, line: int, ctx: _LineContext
    ) -> Style:
        if token.type is TokenType.NUMERIC:
            return Style.NUMBER

        marker = False
        if token.type is TokenType.IDENTIFIER:
            lowered = token.content.lower()
            if lowered == _PROPERTY_KEYWORD:
                ctx.expect_property = marker = True
            elif lowered in _CLASS_KEYWORDS:
                ctx.expect_class = marker = True

        category = self.word_lists.classify(token.content)
        if category is not None:
            return category.style

        if token.type is not TokenType.IDENTIFIER or marker:
            return Style.DEFAULT

        if ctx.expect_property:
            ctx.expect_property = False
            self.properties.register(token.content, line)
            return Style.PROPERTY
        if ctx.expect_class:
            ctx.expect_class = False
            return Style.CLASS
        if self.properties.is_known(token.content):
            return Style.PROPERTY
        if following is not None and following.content == "(":
            return Style.FUNCTION
        return Style.DEFAULT


def _last_line(document: Document, end: int) -> int:
    """Last line of a range ending at end, including a trailing empty line at the document end."""
    if end >= document.length:
        return document.line_count - 1
    return document.line_from_position(end - 1)


def _find_closer(document: Document, pos: int, content_end: int, style: Style) -> int:
    """Return the position just past the comment closer on this line, or -1."""
    closer = _COMMENT_CLOSERS[style]
    idx = document.raw_range(pos, content_end).find(closer)
    if idx < 0:
        return -1
    return pos + idx + len(closer)


def _string_end(document: Document, pos: int, content_end: int) -> int:
    """Return the position just past the closing quote, or the line end."""
    while pos < content_end:
        ch, pos = get_next_char(document, pos)
        if ch == "\\":
            if pos < content_end:
                _, pos = get_next_char(document, pos)
        elif ch == '"':
            return pos
    return min(pos, content_end)
