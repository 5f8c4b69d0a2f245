"""Shared test fixtures and helpers."""

from __future__ import annotations

import pytest

from papylex import highlight
from papylex.document import Document
from papylex.editor import Editor
from papylex.scanner import tokenize
from papylex.styles import Style
from papylex.tokens import Token, TokenType
from papylex.wordlists import WordLists


@pytest.fixture
def word_lists() -> WordLists:
    return WordLists.defaults()


@pytest.fixture
def lex():
    """Return a helper that tokenizes the first line of source."""

    def _lex(source: str, start: int | None = None) -> list[Token]:
        return tokenize(Document(source), 0, start)

    return _lex


@pytest.fixture
def styled():
    """Return a helper that lexes and folds source and returns the Editor."""

    def _styled(source: str, word_lists: WordLists | None = None, chunk: int | None = None) -> Editor:
        return highlight(source, word_lists, chunk=chunk)

    return _styled


def assert_types(tokens: list[Token], expected: list[TokenType]) -> None:
    """Assert that the token types match the expected list."""
    actual = [t.type for t in tokens]
    assert actual == expected, f"Expected {expected}, got {actual}"


def assert_values(tokens: list[Token], expected: list[str]) -> None:
    """Assert that the token contents match the expected list."""
    actual = [t.content for t in tokens]
    assert actual == expected, f"Expected {expected}, got {actual}"


def style_of(editor: Editor, needle: str, nth: int = 0) -> Style:
    """Return the style of the nth occurrence of needle, asserting it is uniform."""
    document = editor.document
    data = document.raw_range(0, document.length)
    raw = needle.encode("utf-8")
    pos = -1
    for _ in range(nth + 1):
        pos = data.find(raw, pos + 1)
        assert pos >= 0, f"{needle!r} occurrence {nth} not found"
    styles = {document.style_at(p) for p in range(pos, pos + len(raw))}
    assert len(styles) == 1, f"{needle!r} has mixed styles {styles}"
    return styles.pop()


def levels(editor: Editor) -> list[tuple[int, bool]]:
    """Return (level, header) for every line."""
    document = editor.document
    return [
        (document.fold_level(line).level, document.fold_level(line).header)
        for line in range(document.line_count)
    ]
