"""Editor glue — binds a Document to its Lexer and drives styling the way a host does."""

from __future__ import annotations

from collections.abc import Callable, Hashable
from typing import TYPE_CHECKING

from papylex.document import Document
from papylex.lexer import Lexer
from papylex.styles import DEFAULT_CARRY, CarryState

if TYPE_CHECKING:
    from papylex.subscriptions import Subscriptions


class Editor:
    """One displayed document with its own lexer instance."""

    def __init__(
        self,
        document: Document,
        lexer: Lexer,
        subscriptions: Subscriptions | None = None,
        view: Hashable = 0,
        navigate: Callable[[int], None] | None = None,
    ) -> None:
        self.document = document
        self.lexer = lexer
        self.subscriptions = subscriptions
        self.view = view
        self.caret_line = 0
        self._navigate = navigate

    def open(self) -> bool:
        """Attach the lexer and register the view; False when the lexer is unusable."""
        self.lexer.attach(self.document)
        if self.subscriptions is None:
            return self.lexer.is_usable
        return self.subscriptions.register(self.view, self)

    def close(self) -> None:
        if self.subscriptions is not None:
            self.subscriptions.unregister(self.view)
        self.lexer.detach()

    def colourise(self, end: int | None = None, chunk: int | None = None) -> CarryState:
        """Lex and fold from the styled end up to end, optionally in chunks of bytes."""
        document = self.document
        if end is None:
            end = document.length
        first_line = document.line_from_position(document.end_styled)
        start = document.line_start(first_line)
        if first_line > 0 and start >= end == document.length:
            # a trailing empty line is styled along with the line before it
            first_line -= 1
            start = document.line_start(first_line)
        initial = document.line_state(first_line - 1) if first_line > 0 else DEFAULT_CARRY
        if start >= end:
            return initial

        step = chunk if chunk and chunk > 0 else end - start
        state = initial
        pos = start
        while pos < end:
            length = min(step, end - pos)
            state = self.lexer.lex(pos, length, state, document)
            pos += length
        self.lexer.fold(start, end - start, initial, document)
        return state

    def restyle(self) -> None:
        """Discard all styling and lex and fold the whole document again."""
        self.document.end_styled = 0
        self.lexer.properties.clear()
        self.colourise()

    def goto_line(self, line: int) -> None:
        self.caret_line = line
        if self._navigate is not None:
            self._navigate(line)
