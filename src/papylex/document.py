"""Document accessor — the text buffer the lexer reads and annotates.

Text is held as UTF-8 bytes and every position is a byte offset, so one
logical character may occupy several positions. Alongside the text the
document keeps one style per byte, one carry state per line (the scan state
at the end of that line) and one fold level per line.
"""

from __future__ import annotations

import re
from collections.abc import Callable, Iterator

from papylex.styles import DEFAULT_CARRY, CarryState, FoldLevel, Style

_EOL = re.compile(rb"\r\n|\r|\n")

# Called with the first line touched by an edit
Watcher = Callable[[int], None]


class StyleWriter:
    """Cursor that assigns styles to consecutive byte ranges."""

    def __init__(self, document: Document, start: int) -> None:
        self._document = document
        self.position = start

    def colour_to(self, end: int, style: Style) -> None:
        """Style everything from the cursor up to (not including) end."""
        end = min(end, self._document.length)
        if end <= self.position:
            return
        self._document._styles[self.position : end] = bytes((style,)) * (end - self.position)
        self.position = end


class Document:
    """A mutable UTF-8 buffer with per-byte styles and per-line lexer state."""

    def __init__(self, text: str | bytes = "") -> None:
        data = text.encode("utf-8") if isinstance(text, str) else bytes(text)
        self._data = bytearray(data)
        self._styles = bytearray(len(data))
        self._line_starts: list[int] = []
        self._compute_lines()
        self._line_states: list[CarryState] = [DEFAULT_CARRY] * self.line_count
        self._fold_levels: list[FoldLevel] = [FoldLevel()] * self.line_count
        self._watchers: list[Watcher] = []
        self.end_styled = 0

    # ------------------------------------------------------------------
    # Text access
    # ------------------------------------------------------------------

    @property
    def length(self) -> int:
        return len(self._data)

    @property
    def text(self) -> str:
        return self._data.decode("utf-8", errors="replace")

    def byte_at(self, pos: int) -> int:
        """Return the byte at pos, or 0 outside the document."""
        if 0 <= pos < len(self._data):
            return self._data[pos]
        return 0

    def text_range(self, start: int, end: int) -> str:
        return bytes(self._data[start:end]).decode("utf-8", errors="replace")

    def raw_range(self, start: int, end: int) -> bytes:
        return bytes(self._data[start:end])

    # ------------------------------------------------------------------
    # Line access
    # ------------------------------------------------------------------

    def _compute_lines(self) -> None:
        self._line_starts = [0] + [m.end() for m in _EOL.finditer(self._data)]

    @property
    def line_count(self) -> int:
        return len(self._line_starts)

    def line_start(self, line: int) -> int:
        if line <= 0:
            return 0
        if line >= len(self._line_starts):
            return len(self._data)
        return self._line_starts[line]

    def line_end(self, line: int) -> int:
        """Position just past the line's content, before its line terminator."""
        start = self.line_start(line)
        end = self.line_start(line + 1) if line + 1 < self.line_count else len(self._data)
        if end > start and self._data[end - 1] == 0x0A:
            end -= 1
        if end > start and self._data[end - 1] == 0x0D:
            end -= 1
        return end

    def line_from_position(self, pos: int) -> int:
        lo, hi = 0, len(self._line_starts) - 1
        while lo < hi:
            mid = (lo + hi + 1) // 2
            if self._line_starts[mid] <= pos:
                lo = mid
            else:
                hi = mid - 1
        return lo

    def line_text(self, line: int) -> str:
        return self.text_range(self.line_start(line), self.line_end(line))

    # ------------------------------------------------------------------
    # Styles
    # ------------------------------------------------------------------

    def style_at(self, pos: int) -> Style:
        if 0 <= pos < len(self._styles):
            return Style(self._styles[pos])
        return Style.DEFAULT

    def style_bytes(self) -> bytes:
        return bytes(self._styles)

    def style_writer(self, start: int) -> StyleWriter:
        return StyleWriter(self, start)

    def style_runs(self, line: int) -> Iterator[tuple[int, int, Style]]:
        """Yield (start, end, style) runs covering the content of one line."""
        start = self.line_start(line)
        end = self.line_end(line)
        run_start = start
        while run_start < end:
            style = self._styles[run_start]
            run_end = run_start + 1
            while run_end < end and self._styles[run_end] == style:
                run_end += 1
            yield run_start, run_end, Style(style)
            run_start = run_end

    def style_run_at(self, pos: int) -> tuple[int, int, Style] | None:
        """Return the run of identical styles containing pos, within its line."""
        if not 0 <= pos < len(self._data):
            return None
        line = self.line_from_position(pos)
        for run in self.style_runs(line):
            if run[0] <= pos < run[1]:
                return run
        return None

    # ------------------------------------------------------------------
    # Per-line lexer state
    # ------------------------------------------------------------------

    def line_state(self, line: int) -> CarryState:
        if 0 <= line < len(self._line_states):
            return self._line_states[line]
        return DEFAULT_CARRY

    def set_line_state(self, line: int, state: CarryState) -> None:
        if 0 <= line < len(self._line_states):
            self._line_states[line] = state

    def fold_level(self, line: int) -> FoldLevel:
        if 0 <= line < len(self._fold_levels):
            return self._fold_levels[line]
        return FoldLevel()

    def set_fold_level(self, line: int, level: FoldLevel) -> None:
        if 0 <= line < len(self._fold_levels):
            self._fold_levels[line] = level

    # ------------------------------------------------------------------
    # Modification
    # ------------------------------------------------------------------

    def add_watcher(self, watcher: Watcher) -> None:
        self._watchers.append(watcher)

    def remove_watcher(self, watcher: Watcher) -> None:
        if watcher in self._watchers:
            self._watchers.remove(watcher)

    def insert_text(self, pos: int, text: str) -> None:
        self._replace(pos, pos, text.encode("utf-8"))

    def delete_range(self, pos: int, length: int) -> None:
        self._replace(pos, pos + length, b"")

    def replace_range(self, start: int, end: int, text: str) -> None:
        self._replace(start, end, text.encode("utf-8"))

    def set_text(self, text: str) -> None:
        self._replace(0, len(self._data), text.encode("utf-8"))

    def _replace(self, start: int, end: int, data: bytes) -> None:
        start = max(0, min(start, len(self._data)))
        end = max(start, min(end, len(self._data)))
        first_line = self.line_from_position(start)
        if start > 0 and self._data[start - 1] == 0x0D:
            # the edit may join or split a CR LF pair ending the previous line
            first_line = self.line_from_position(start - 1)
        old_count = self.line_count

        self._data[start:end] = data
        self._styles[start:end] = bytes(len(data))
        self._compute_lines()

        added = self.line_count - old_count
        if added > 0:
            self._line_states[first_line + 1 : first_line + 1] = [DEFAULT_CARRY] * added
            self._fold_levels[first_line + 1 : first_line + 1] = [FoldLevel()] * added
        elif added < 0:
            del self._line_states[first_line + 1 : first_line + 1 - added]
            del self._fold_levels[first_line + 1 : first_line + 1 - added]
        self._line_states[first_line] = DEFAULT_CARRY
        self._fold_levels[first_line] = FoldLevel()

        self.end_styled = min(self.end_styled, self.line_start(first_line))
        for watcher in list(self._watchers):
            watcher(first_line)
