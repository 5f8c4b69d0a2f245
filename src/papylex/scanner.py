"""Line scanner — splits one document line into Identifier/Numeric/Special tokens."""

from __future__ import annotations

from papylex.document import Document
from papylex.tokens import (
    MULTI_CHAR_OPERATORS,
    Token,
    TokenType,
    is_digit,
    is_hex_digit,
    is_ident_char,
    is_ident_start,
    is_space,
    utf8_length,
)


def get_next_char(document: Document, index: int) -> tuple[str, int]:
    """Read one logical character at index; return it and the index after it.

    A multi-byte UTF-8 sequence is returned as a single character. A
    malformed sequence yields U+FFFD and advances by one byte.
    """
    lead = document.byte_at(index)
    size = utf8_length(lead)
    if size == 1:
        if lead >= 0x80:
            return "�", index + 1
        return chr(lead), index + 1
    raw = document.raw_range(index, index + size)
    try:
        return raw.decode("utf-8"), index + size
    except UnicodeDecodeError:
        return "�", index + 1


class LineScanner:
    """Tokenize a single line of a document, from a starting position to the line end."""

    def __init__(self, document: Document, start: int, end: int) -> None:
        self._document = document
        self._pos = start
        self._end = end
        self._tokens: list[Token] = []

    def tokenize(self) -> list[Token]:
        """Scan to the end of the line and return the token list."""
        while self._pos < self._end:
            ch, _ = self._peek()
            if is_space(ch):
                self._advance()
            elif is_ident_start(ch):
                self._lex_identifier()
            elif is_digit(ch):
                self._lex_number()
            else:
                self._lex_special()
        return self._tokens

    # ------------------------------------------------------------------
    # Position helpers
    # ------------------------------------------------------------------

    def _peek(self, pos: int | None = None) -> tuple[str, int]:
        """Return the character at pos (default: cursor) and the position after it."""
        if pos is None:
            pos = self._pos
        if pos >= self._end:
            return "", pos
        ch, nxt = get_next_char(self._document, pos)
        return ch, min(nxt, self._end)

    def _advance(self) -> str:
        ch, self._pos = self._peek()
        return ch

    def _emit(self, tt: TokenType, start: int, content: str) -> None:
        self._tokens.append(Token(content, tt, start, self._pos))

    # ------------------------------------------------------------------
    # Token kinds
    # ------------------------------------------------------------------

    def _lex_identifier(self) -> None:
        start = self._pos
        chars = [self._advance()]
        while self._pos < self._end and is_ident_char(self._peek()[0]):
            chars.append(self._advance())
        self._emit(TokenType.IDENTIFIER, start, "".join(chars))

    def _lex_number(self) -> None:
        start = self._pos
        chars = [self._advance()]

        if chars[0] == "0" and self._peek()[0] in ("x", "X"):
            after_x = self._peek()[1]
            if is_hex_digit(self._peek(after_x)[0]):
                chars.append(self._advance())
                while self._pos < self._end and is_hex_digit(self._peek()[0]):
                    chars.append(self._advance())
                self._emit(TokenType.NUMERIC, start, "".join(chars))
                return

        while self._pos < self._end and is_digit(self._peek()[0]):
            chars.append(self._advance())

        # Fractional part only when a digit follows the dot
        ch, after_dot = self._peek()
        if ch == "." and is_digit(self._peek(after_dot)[0]):
            chars.append(self._advance())
            while self._pos < self._end and is_digit(self._peek()[0]):
                chars.append(self._advance())

        self._emit(TokenType.NUMERIC, start, "".join(chars))

    def _lex_special(self) -> None:
        start = self._pos
        ch, after = self._peek()
        nxt, _ = self._peek(after)
        pair = ch + nxt
        if pair in MULTI_CHAR_OPERATORS:
            self._advance()
            self._advance()
            self._emit(TokenType.SPECIAL, start, pair)
            return
        self._advance()
        self._emit(TokenType.SPECIAL, start, ch)


def tokenize(document: Document, line: int, start: int | None = None) -> list[Token]:
    """Convenience function: tokenize one line, optionally from a position inside it."""
    line_start = document.line_start(line)
    if start is None or start < line_start:
        start = line_start
    return LineScanner(document, start, document.line_end(line)).tokenize()
