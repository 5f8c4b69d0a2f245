"""Token types, data structures, and character classification helpers."""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum, auto


class TokenType(Enum):
    IDENTIFIER = auto()  # letter or _, then letters, digits, _
    NUMERIC = auto()  # 123, 1.5, 0x1F
    SPECIAL = auto()  # operators and punctuation


@dataclass(frozen=True, slots=True)
class Token:
    """A single token of one line, positioned by document byte offsets."""

    content: str
    type: TokenType
    start: int
    end: int


# Longest first; each is emitted as one SPECIAL token
MULTI_CHAR_OPERATORS = (
    "==",
    "!=",
    "<=",
    ">=",
    "&&",
    "||",
    "+=",
    "-=",
    "*=",
    "/=",
    "%=",
    ";/",
    "/;",
)


def is_ident_start(ch: str) -> bool:
    """Return True if ch can start an identifier."""
    return ch == "_" or ch.isalpha()


def is_ident_char(ch: str) -> bool:
    """Return True if ch is a valid identifier character."""
    return ch == "_" or ch.isalpha() or ch.isdigit()


def is_digit(ch: str) -> bool:
    """Return True if ch is an ASCII decimal digit."""
    return "0" <= ch <= "9"


def is_hex_digit(ch: str) -> bool:
    """Return True if ch is a hexadecimal digit."""
    return len(ch) == 1 and ch in "0123456789abcdefABCDEF"


def is_space(ch: str) -> bool:
    """Return True for horizontal whitespace and line terminators."""
    return len(ch) == 1 and ch in " \t\v\f\r\n"


def utf8_length(lead: int) -> int:
    """Return the sequence length announced by a UTF-8 lead byte (1 if invalid)."""
    if lead < 0x80:
        return 1
    if 0xC2 <= lead <= 0xDF:
        return 2
    if 0xE0 <= lead <= 0xEF:
        return 3
    if 0xF0 <= lead <= 0xF4:
        return 4
    return 1
