"""Word-list classifier — eight categorized word sets and their configuration."""

from __future__ import annotations

import re
import tomllib
from collections.abc import Iterable, Mapping
from dataclasses import dataclass, field, replace
from enum import Enum
from pathlib import Path
from typing import Any

from papylex.errors import ConfigError, Position
from papylex.styles import Style


class Category(Enum):
    """Word categories in classification precedence order."""

    OPERATOR = ("operators", Style.OPERATOR)
    FLOW_CONTROL = ("flow_control", Style.FLOW_CONTROL)
    TYPE = ("types", Style.TYPE)
    KEYWORD = ("keywords", Style.KEYWORD)
    KEYWORD2 = ("keywords2", Style.KEYWORD2)
    FOLD_OPEN = ("fold_open", Style.FOLD_OPEN)
    FOLD_MIDDLE = ("fold_middle", Style.FOLD_MIDDLE)
    FOLD_CLOSE = ("fold_close", Style.FOLD_CLOSE)

    def __init__(self, slot: str, style: Style) -> None:
        self.slot = slot
        self.style = style


SLOTS: tuple[str, ...] = tuple(c.slot for c in Category)


@dataclass(frozen=True, slots=True)
class WordList:
    """An immutable set of words, optionally compared case-insensitively."""

    words: frozenset[str] = frozenset()
    ignore_case: bool = True

    @classmethod
    def of(cls, words: str | Iterable[str], ignore_case: bool = True) -> WordList:
        """Build a list from a space-separated string or an iterable of words."""
        if isinstance(words, str):
            words = words.split()
        if ignore_case:
            return cls(frozenset(w.lower() for w in words), True)
        return cls(frozenset(words), False)

    def __contains__(self, word: object) -> bool:
        if not isinstance(word, str):
            return False
        return (word.lower() if self.ignore_case else word) in self.words

    def __len__(self) -> int:
        return len(self.words)


def _make_defaults() -> dict[str, str]:
    defs: dict[str, str] = {}

    def d(slot: str, words: str) -> None:
        defs[slot] = " ".join(words.split())

    d(
        "operators",
        """
        ( ) [ ] , . = + - * / % ! < >
        == != <= >= && || += -= *= /= %=
        as new is
        """,
    )
    d("flow_control", "if elseif else endif while endwhile return")
    d("types", "bool float int string var")
    d(
        "keywords",
        """
        auto autoreadonly betaonly collapsed collapsedonbase collapsedonref
        conditional const debugonly default extends false global hidden
        import mandatory native none parent self true
        """,
    )
    d("keywords2", "scriptname customevent length")
    d("fold_open", "function event state property group struct if while")
    d("fold_middle", "else elseif")
    d(
        "fold_close",
        "endfunction endevent endstate endproperty endgroup endstruct endif endwhile",
    )
    return defs


DEFAULT_WORDS: dict[str, str] = _make_defaults()


@dataclass(frozen=True, slots=True)
class WordLists:
    """The eight word-list slots a lexer classifies identifiers against.

    An instance built without any configuration is not configured, and a
    lexer holding it declines to style anything.
    """

    operators: WordList = field(default_factory=WordList)
    flow_control: WordList = field(default_factory=WordList)
    types: WordList = field(default_factory=WordList)
    keywords: WordList = field(default_factory=WordList)
    keywords2: WordList = field(default_factory=WordList)
    fold_open: WordList = field(default_factory=WordList)
    fold_middle: WordList = field(default_factory=WordList)
    fold_close: WordList = field(default_factory=WordList)
    configured: bool = False

    @property
    def is_configured(self) -> bool:
        return self.configured

    def classify(self, word: str) -> Category | None:
        """Return the first category containing word, in precedence order."""
        for category in Category:
            if word in getattr(self, category.slot):
                return category
        return None

    def fold_category(self, word: str) -> Category | None:
        """Classify word against the three fold-boundary slots only."""
        if word in self.fold_open:
            return Category.FOLD_OPEN
        if word in self.fold_middle:
            return Category.FOLD_MIDDLE
        if word in self.fold_close:
            return Category.FOLD_CLOSE
        return None

    def with_overrides(
        self,
        overrides: Mapping[str, str | Iterable[str]],
        case_sensitive: Iterable[str] = (),
    ) -> WordLists:
        """Return a configured copy with the given slots replaced.

        Slots named in case_sensitive become case-sensitive; every other
        slot keeps the sensitivity it already had.
        """
        sensitive = set(case_sensitive)
        unknown = (set(overrides) | sensitive) - set(SLOTS)
        if unknown:
            raise ConfigError(f"unknown word-list slot '{sorted(unknown)[0]}'")
        changes: dict[str, Any] = {"configured": True}
        for slot in SLOTS:
            current: WordList = getattr(self, slot)
            ignore_case = current.ignore_case and slot not in sensitive
            if slot in overrides:
                changes[slot] = WordList.of(overrides[slot], ignore_case)
            elif current.ignore_case != ignore_case:
                changes[slot] = WordList.of(current.words, ignore_case)
        return replace(self, **changes)

    @classmethod
    def defaults(cls) -> WordLists:
        """Built-in Papyrus word lists."""
        return cls().with_overrides(DEFAULT_WORDS)

    @classmethod
    def from_config(cls, config: Mapping[str, Any], filename: str = "papylex.toml") -> WordLists:
        """Build word lists from a parsed config mapping.

        Slots missing from ``[keywords]`` keep the built-in defaults.
        """
        section = config.get("keywords", {})
        if not isinstance(section, Mapping):
            raise ConfigError("[keywords] must be a table", filename=filename)

        overrides: dict[str, str | list[str]] = {}
        case_sensitive: list[str] = []
        for key, value in section.items():
            if key == "case_sensitive":
                if not isinstance(value, list) or not all(isinstance(v, str) for v in value):
                    raise ConfigError("case_sensitive must be a list of slot names", filename=filename)
                case_sensitive = value
            elif isinstance(value, str):
                overrides[key] = value
            elif isinstance(value, list) and all(isinstance(v, str) for v in value):
                overrides[key] = value
            else:
                raise ConfigError(
                    f"word list '{key}' must be a string or a list of strings", filename=filename
                )

        try:
            return cls.defaults().with_overrides(overrides, case_sensitive)
        except ConfigError as exc:
            raise ConfigError(exc.message, filename=filename) from None

    @classmethod
    def load(cls, path: Path) -> WordLists:
        """Read word lists from a TOML file."""
        source = path.read_text(encoding="utf-8")
        try:
            config = tomllib.loads(source)
        except tomllib.TOMLDecodeError as exc:
            raise ConfigError(_decode_message(exc), source, _decode_position(exc), str(path)) from None
        return cls.from_config(config, str(path))


_AT_LINE = re.compile(r"\s*\(at line (\d+), column (\d+)\)")


def _decode_message(exc: tomllib.TOMLDecodeError) -> str:
    msg = getattr(exc, "msg", None) or str(exc)
    return _AT_LINE.sub("", msg)


def _decode_position(exc: tomllib.TOMLDecodeError) -> Position | None:
    lineno = getattr(exc, "lineno", None)
    colno = getattr(exc, "colno", None)
    if lineno and colno:
        return Position(lineno, colno)
    m = _AT_LINE.search(str(exc))
    if m:
        return Position(int(m.group(1)), int(m.group(2)))
    return None
