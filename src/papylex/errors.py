"""Error types with formatted source context."""

from __future__ import annotations

from dataclasses import dataclass


@dataclass(frozen=True, slots=True)
class Position:
    """Source position, 1-based line and column."""

    line: int
    column: int


class ConfigError(Exception):
    """Raised when a configuration file exists but cannot be used."""

    def __init__(
        self,
        message: str,
        source: str = "",
        position: Position | None = None,
        filename: str = "papylex.toml",
    ) -> None:
        self.message = message
        self.source = source
        self.position = position
        self.filename = filename
        super().__init__(self.format())

    def format(self, filename: str | None = None) -> str:
        """Render the message, its location and, when known, the offending line."""
        filename = filename or self.filename
        if self.position is None:
            return f"error: {self.message}\n  --> {filename}"

        line, column = self.position.line, self.position.column
        lines = self.source.splitlines()
        text = lines[line - 1] if 0 < line <= len(lines) else ""
        indent = " " * (len(str(line)) + 1)
        return "\n".join(
            [
                f"error: {self.message}",
                f"{indent}--> {filename}:{line}:{column}",
                f"{indent}|",
                f"{line} | {text}",
                f"{indent}| {' ' * (column - 1)}^",
            ]
        )


class WiringError(Exception):
    """Raised when a view or document is wired to the lexer inconsistently."""

    def __init__(self, message: str) -> None:
        self.message = message
        super().__init__(f"error: {message}")
