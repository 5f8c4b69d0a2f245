"""Human-readable dumps of styles, fold levels and the property registry."""

from __future__ import annotations

import sys
from typing import TextIO

from papylex.document import Document
from papylex.properties import PropertyRegistry


def dump_runs(document: Document, *, file: TextIO = sys.stdout) -> None:
    """Print one line per styled run: ``line:col-col STYLE 'text'``."""
    for line in range(document.line_count):
        line_start = document.line_start(line)
        for start, end, style in document.style_runs(line):
            col_start = len(document.text_range(line_start, start)) + 1
            col_end = len(document.text_range(line_start, end))
            text = document.text_range(start, end)
            file.write(f"{line + 1}:{col_start}-{col_end} {style.name} {text!r}\n")


def dump_folds(document: Document, *, file: TextIO = sys.stdout) -> None:
    """Print each source line prefixed by its fold level and a header marker."""
    width = len(str(document.line_count))
    for line in range(document.line_count):
        level = document.fold_level(line)
        marker = "+" if level.header else " "
        file.write(f"{line + 1:>{width}} {level.level:>2}{marker} {document.line_text(line)}\n")


def dump_properties(properties: PropertyRegistry, *, file: TextIO = sys.stderr) -> None:
    """Print the registry, one declaration per line."""
    file.write(f"Properties ({len(properties)})\n")
    for record in properties.records:
        file.write(f"  {record.name} @ line {record.line + 1}\n")
