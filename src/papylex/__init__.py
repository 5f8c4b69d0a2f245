"""Papyrus script lexer and folding engine."""

from __future__ import annotations

from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from papylex.editor import Editor
    from papylex.wordlists import WordLists

__version__ = "0.1.0"


def highlight(
    source: str,
    word_lists: WordLists | None = None,
    chunk: int | None = None,
) -> Editor:
    """Lex and fold Papyrus source; return the editor holding the styled document."""
    from papylex.document import Document
    from papylex.editor import Editor
    from papylex.lexer import Lexer
    from papylex.wordlists import WordLists

    if word_lists is None:
        word_lists = WordLists.defaults()
    editor = Editor(Document(source), Lexer(word_lists))
    editor.open()
    editor.colourise(chunk=chunk)
    return editor
