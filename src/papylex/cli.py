"""Command-line interface for papylex."""

from __future__ import annotations

import argparse
import io
import sys
from dataclasses import dataclass
from pathlib import Path

from papylex.errors import ConfigError
from papylex.wordlists import SLOTS, WordLists

FORMATS = ("runs", "folds", "html")


@dataclass(frozen=True, slots=True)
class CliOptions:
    """Parsed CLI options."""

    input_file: Path
    output_file: Path | None
    config_file: Path | None
    keywords: dict[str, str]
    format: str
    chunk: int | None
    debug: bool


def build_parser() -> argparse.ArgumentParser:
    """Build the argument parser (separate function for testability)."""
    p = argparse.ArgumentParser(
        prog="papylex",
        description="Papyrus script highlighter and folding inspector",
    )
    p.add_argument("input", help="Input .psc file")
    p.add_argument("-o", "--output", help="Output file (default: stdout)")
    p.add_argument(
        "--config",
        metavar="FILE",
        help="Word-list config file (default: auto-discover papylex.toml)",
    )
    p.add_argument(
        "-k",
        "--keywords",
        action="append",
        default=[],
        metavar="SLOT=WORDS",
        help="Replace one word list with space-separated words (repeatable)",
    )
    p.add_argument(
        "-f",
        "--format",
        choices=FORMATS,
        default="runs",
        help="Output format (default: runs)",
    )
    p.add_argument(
        "--chunk",
        type=int,
        default=None,
        metavar="BYTES",
        help="Lex in chunks of this many bytes instead of one pass",
    )
    p.add_argument("--debug", action="store_true", help="Dump the property registry to stderr")
    return p


def parse_keywords_arg(s: str) -> tuple[str, str]:
    """Parse a SLOT=WORDS string into (slot, words)."""
    if "=" not in s:
        raise argparse.ArgumentTypeError(f"invalid keywords format (expected SLOT=WORDS): {s}")
    slot, _, words = s.partition("=")
    if slot not in SLOTS:
        raise argparse.ArgumentTypeError(
            f"unknown word-list slot '{slot}' (expected one of: {', '.join(SLOTS)})"
        )
    return slot, words


def find_config(config_path: Path | None, input_dir: Path) -> Path | None:
    """Return the config file to use, or None when there is none."""
    path = config_path if config_path is not None else input_dir / "papylex.toml"
    if not path.is_file():
        return None
    return path


def resolve_options(args: argparse.Namespace) -> CliOptions:
    """Turn parsed arguments into CliOptions."""
    keywords: dict[str, str] = {}
    for raw in args.keywords:
        slot, words = parse_keywords_arg(raw)
        keywords[slot] = words

    if args.chunk is not None and args.chunk <= 0:
        raise argparse.ArgumentTypeError(f"chunk size must be positive: {args.chunk}")

    return CliOptions(
        input_file=Path(args.input),
        output_file=Path(args.output) if args.output else None,
        config_file=Path(args.config) if args.config else None,
        keywords=keywords,
        format=args.format,
        chunk=args.chunk,
        debug=args.debug,
    )


def load_word_lists(options: CliOptions) -> WordLists:
    """Config file < CLI flags; built-in lists when there is no config file."""
    input_dir = options.input_file.parent
    if not input_dir.parts:
        input_dir = Path(".")

    path = find_config(options.config_file, input_dir)
    word_lists = WordLists.load(path) if path is not None else WordLists.defaults()
    if options.keywords:
        word_lists = word_lists.with_overrides(options.keywords)
    return word_lists


def highlight_file(options: CliOptions) -> str:
    """Read, lex, and fold a Papyrus file, returning the requested output."""
    from papylex import highlight
    from papylex.debug import dump_folds, dump_properties, dump_runs
    from papylex.render import render

    source = options.input_file.read_text(encoding="utf-8")
    editor = highlight(source, load_word_lists(options), chunk=options.chunk)

    if options.debug:
        dump_properties(editor.lexer.properties, file=sys.stderr)

    if options.format == "html":
        return render(editor.document, editor.lexer.properties, title=options.input_file.name)

    out = io.StringIO()
    if options.format == "folds":
        dump_folds(editor.document, file=out)
    else:
        dump_runs(editor.document, file=out)
    return out.getvalue()


def main(argv: list[str] | None = None) -> int:
    """CLI entry point. Returns exit code (0/1/2). Does not call sys.exit()."""
    parser = build_parser()
    args = parser.parse_args(argv)

    try:
        options = resolve_options(args)
    except argparse.ArgumentTypeError as exc:
        print(f"error: {exc}", file=sys.stderr)
        return 2

    try:
        output = highlight_file(options)
    except ConfigError as exc:
        print(str(exc), file=sys.stderr)
        return 1
    except OSError as exc:
        print(f"error: {exc}", file=sys.stderr)
        return 1

    if options.output_file:
        options.output_file.write_text(output, encoding="utf-8")
    else:
        sys.stdout.write(output)

    return 0
