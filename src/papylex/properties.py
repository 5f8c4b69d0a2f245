"""Property registry — declared property names and the lines declaring them."""

from __future__ import annotations

from dataclasses import dataclass


@dataclass(frozen=True, slots=True)
class PropertyRecord:
    """One property declaration: the declared name and its 0-based line."""

    name: str
    line: int


class PropertyRegistry:
    """Per-document index of declared properties.

    Records are kept in declaration order and a name may be declared more
    than once. Name lookups are case-insensitive, matching the language.
    """

    def __init__(self) -> None:
        self._records: list[PropertyRecord] = []
        self._names: set[str] = set()

    @property
    def records(self) -> tuple[PropertyRecord, ...]:
        return tuple(self._records)

    @property
    def names(self) -> frozenset[str]:
        return frozenset(self._names)

    def __len__(self) -> int:
        return len(self._records)

    def register(self, name: str, line: int) -> None:
        """Record a declaration; re-registering the same name on the same line is a no-op."""
        key = name.lower()
        for record in self._records:
            if record.line == line and record.name.lower() == key:
                return
        self._records.append(PropertyRecord(name, line))
        self._names.add(key)

    def is_known(self, name: str) -> bool:
        return name.lower() in self._names

    def lookup(self, name: str) -> PropertyRecord | None:
        """Return the earliest declaration of name, if any."""
        key = name.lower()
        found: PropertyRecord | None = None
        for record in self._records:
            if record.name.lower() == key and (found is None or record.line < found.line):
                found = record
        return found

    def invalidate_from(self, line: int) -> list[PropertyRecord]:
        """Drop every record declared at or after line and return the dropped records."""
        kept = [r for r in self._records if r.line < line]
        if len(kept) == len(self._records):
            return []
        dropped = [r for r in self._records if r.line >= line]
        self._records = kept
        self._names = {r.name.lower() for r in kept}
        return dropped

    def clear(self) -> None:
        self._records.clear()
        self._names.clear()
