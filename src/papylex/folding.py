"""Folding engine — fold levels and header flags from fold keywords and block comments.

A line's level is the running level minus the regions it closes; the
running level after it adds the regions it opens. Events per line:

- a block comment that started on an earlier line and ends here closes one
  region; one that starts here and is still open at the line end opens one;
- the first fold keyword among the line's leading words (return types,
  modifiers and ``[]`` may precede it) opens, closes, or for a middle
  keyword such as ``Else`` closes and reopens a region.

Lines holding only whitespace take the level of the next non-blank line.
"""

from __future__ import annotations

from papylex.document import Document
from papylex.scanner import tokenize
from papylex.styles import COMMENT_STYLES, CarryState, FoldLevel, FoldState, Style
from papylex.tokens import Token, TokenType
from papylex.wordlists import Category, WordLists

# A fold-open keyword followed by one of these declares something with no body
NON_FOLDING_MODIFIERS = frozenset({"native", "auto", "autoreadonly"})

_SKIPPED_STYLES = COMMENT_STYLES | {Style.STRING}
_WHITESPACE = frozenset(b" \t\v\f")


def fold(
    start: int,
    length: int,
    initial: CarryState,
    document: Document,
    word_lists: WordLists,
) -> FoldState:
    """Assign a FoldLevel to each whole line covering [start, start + length).

    Comment state for the first line of the range comes from initial;
    later lines use the per-line states stored by the lexer.
    """
    first_line = document.line_from_position(start)
    if length <= 0:
        return FoldState(_seed(document, first_line), initial.in_comment)
    end = min(start + length, document.length)
    if end >= document.length:
        last_line = document.line_count - 1
    else:
        last_line = document.line_from_position(max(end - 1, start))

    # Blank lines just above the range depend on the lines inside it
    line = first_line
    while line > 0 and document.fold_level(line - 1).blank:
        line -= 1
    running = _seed(document, line)

    blank_level: int | None = None
    for current in range(line, last_line + 1):
        starts_inside = (
            initial.in_comment if current == first_line else document.line_state(current - 1).in_comment
        )
        events = _line_events(document, current, starts_inside, word_lists)
        if events is None:
            if blank_level is None:
                blank_level = _lookahead_level(document, current + 1, running, word_lists)
            document.set_fold_level(current, FoldLevel(blank_level, blank=True))
            continue

        blank_level = None
        closes, opens = events
        level = max(0, running - closes)
        document.set_fold_level(current, FoldLevel(level, opens))
        running = level + opens

    return FoldState(running, document.line_state(last_line).in_comment)


def _seed(document: Document, line: int) -> int:
    """Running level in effect at the start of line."""
    while line > 0:
        previous = document.fold_level(line - 1)
        if not previous.blank:
            return previous.next_level
        line -= 1
    return 0


def _lookahead_level(document: Document, line: int, running: int, word_lists: WordLists) -> int:
    """Level the next non-blank line at or after line will receive."""
    while line < document.line_count:
        starts_inside = document.line_state(line - 1).in_comment
        events = _line_events(document, line, starts_inside, word_lists)
        if events is not None:
            return max(0, running - events[0])
        line += 1
    return running


def _line_events(
    document: Document, line: int, starts_inside: bool, word_lists: WordLists
) -> tuple[int, int] | None:
    """Return (closes, opens) for line, or None when the line is blank."""
    ends_inside = document.line_state(line).in_comment
    closes = opens = 0
    if starts_inside and not ends_inside:
        closes += 1
    elif ends_inside and not starts_inside:
        opens += 1

    start = document.line_start(line)
    end = document.line_end(line)
    significant: int | None = None
    whitespace_only = True
    for pos in range(start, end):
        if document.byte_at(pos) in _WHITESPACE:
            continue
        whitespace_only = False
        if document.style_at(pos) not in COMMENT_STYLES:
            significant = pos
            break

    if whitespace_only and not starts_inside:
        return None
    if significant is None:
        return closes, opens

    tokens = tokenize(document, line, significant)
    for idx, token in enumerate(tokens):
        if document.style_at(token.start) in _SKIPPED_STYLES:
            break
        if token.type is TokenType.IDENTIFIER:
            category = word_lists.fold_category(token.content)
            if category is Category.FOLD_OPEN:
                if not _has_non_folding_modifier(document, tokens[idx + 1 :]):
                    opens += 1
                break
            if category is Category.FOLD_MIDDLE:
                closes += 1
                opens += 1
                break
            if category is Category.FOLD_CLOSE:
                closes += 1
                break
            continue
        if token.content in ("[", "]"):
            continue
        break

    return closes, opens


def _has_non_folding_modifier(document: Document, tokens: list[Token]) -> bool:
    return any(
        token.type is TokenType.IDENTIFIER
        and token.content.lower() in NON_FOLDING_MODIFIERS
        and document.style_at(token.start) not in _SKIPPED_STYLES
        for token in tokens
    )


def fold_regions(document: Document) -> list[tuple[int, int]]:
    """Return (header_line, last_line) for every header that folds at least one line."""
    regions: list[tuple[int, int]] = []
    count = document.line_count
    for line in range(count):
        header = document.fold_level(line)
        if not header.header:
            continue
        last = line
        while last + 1 < count and document.fold_level(last + 1).level > header.level:
            last += 1
        if last > line:
            regions.append((line, last))
    return regions
