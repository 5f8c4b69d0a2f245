"""Style states, carried-over scan state, and fold level values."""

from __future__ import annotations

from dataclasses import dataclass
from enum import IntEnum


class Style(IntEnum):
    DEFAULT = 0
    OPERATOR = 1
    FLOW_CONTROL = 2
    TYPE = 3
    KEYWORD = 4
    KEYWORD2 = 5
    FOLD_OPEN = 6
    FOLD_MIDDLE = 7
    FOLD_CLOSE = 8
    COMMENT = 9
    COMMENT_MULTILINE = 10
    COMMENT_DOC = 11
    NUMBER = 12
    STRING = 13
    PROPERTY = 14
    CLASS = 15
    FUNCTION = 16


COMMENT_STYLES = frozenset({Style.COMMENT, Style.COMMENT_MULTILINE, Style.COMMENT_DOC})

# Styles that may continue past the end of a line
BLOCK_COMMENT_STYLES = frozenset({Style.COMMENT_MULTILINE, Style.COMMENT_DOC})

# Clickable ranges; the click resolves to a property declaration
STYLE_HOTSPOTS = frozenset({Style.PROPERTY})


@dataclass(frozen=True, slots=True)
class CarryState:
    """State needed to resume styling at a line boundary."""

    style: Style = Style.DEFAULT

    @property
    def in_comment(self) -> bool:
        return self.style in BLOCK_COMMENT_STYLES


DEFAULT_CARRY = CarryState()


@dataclass(frozen=True, slots=True)
class FoldLevel:
    """Fold level of one line."""

    level: int = 0
    opens: int = 0
    blank: bool = False

    @property
    def header(self) -> bool:
        """The line starts at least one foldable region."""
        return self.opens > 0

    @property
    def next_level(self) -> int:
        """Running level for the line that follows."""
        return self.level + self.opens


@dataclass(frozen=True, slots=True)
class FoldState:
    """Snapshot returned by a fold pass."""

    level: int = 0
    in_comment: bool = False
