"""Tests for the CLI module: arg parsing, exit codes, output formats, end-to-end."""

from __future__ import annotations

import argparse
from pathlib import Path

import pytest

from papylex.cli import (
    CliOptions,
    build_parser,
    highlight_file,
    main,
    parse_keywords_arg,
    resolve_options,
)

SOURCE = "ScriptName Demo\nInt Property Gold Auto\n\nFunction Pay()\n  Gold -= 1 ; spend\nEndFunction\n"

# ---------------------------------------------------------------------------
# Argument parsing helpers
# ---------------------------------------------------------------------------


class TestParseHelpers:
    def test_parse_keywords_arg_simple(self) -> None:
        assert parse_keywords_arg("types=Actor Quest") == ("types", "Actor Quest")

    def test_parse_keywords_arg_empty_words(self) -> None:
        assert parse_keywords_arg("fold_middle=") == ("fold_middle", "")

    def test_parse_keywords_arg_no_equals_raises(self) -> None:
        with pytest.raises(argparse.ArgumentTypeError):
            parse_keywords_arg("types")

    def test_parse_keywords_arg_unknown_slot_raises(self) -> None:
        with pytest.raises(argparse.ArgumentTypeError, match="unknown word-list slot"):
            parse_keywords_arg("colours=red")


# ---------------------------------------------------------------------------
# Arg parsing via build_parser
# ---------------------------------------------------------------------------


class TestArgParsing:
    def test_input_only(self) -> None:
        ns = build_parser().parse_args(["quest.psc"])
        assert ns.input == "quest.psc"
        assert ns.output is None
        assert ns.format == "runs"
        assert ns.chunk is None

    def test_output_flag(self) -> None:
        ns = build_parser().parse_args(["quest.psc", "-o", "out.html"])
        assert ns.output == "out.html"

    def test_keyword_flags(self) -> None:
        ns = build_parser().parse_args(["quest.psc", "-k", "types=A", "-k", "keywords=B"])
        assert ns.keywords == ["types=A", "keywords=B"]

    def test_format_and_chunk(self) -> None:
        ns = build_parser().parse_args(["quest.psc", "-f", "folds", "--chunk", "16", "--debug"])
        assert ns.format == "folds"
        assert ns.chunk == 16
        assert ns.debug is True

    def test_resolve_options(self, tmp_path: Path) -> None:
        ns = build_parser().parse_args([str(tmp_path / "q.psc"), "-k", "types=A", "-k", "types=B"])
        opts = resolve_options(ns)
        assert opts.input_file == tmp_path / "q.psc"
        assert opts.keywords == {"types": "B"}
        assert opts.config_file is None

    def test_resolve_rejects_bad_chunk(self) -> None:
        ns = build_parser().parse_args(["q.psc", "--chunk", "0"])
        with pytest.raises(argparse.ArgumentTypeError, match="chunk"):
            resolve_options(ns)


# ---------------------------------------------------------------------------
# Exit codes
# ---------------------------------------------------------------------------


class TestExitCodes:
    def test_success(self, tmp_path: Path) -> None:
        src = tmp_path / "ok.psc"
        src.write_text(SOURCE)
        assert main([str(src), "-o", str(tmp_path / "out.txt")]) == 0

    def test_missing_input_returns_1(self, tmp_path: Path, capsys: pytest.CaptureFixture[str]) -> None:
        assert main([str(tmp_path / "missing.psc")]) == 1
        assert capsys.readouterr().err.startswith("error:")

    def test_bad_keywords_returns_2(self, tmp_path: Path, capsys: pytest.CaptureFixture[str]) -> None:
        src = tmp_path / "ok.psc"
        src.write_text(SOURCE)
        assert main([str(src), "-k", "nonsense"]) == 2
        assert "SLOT=WORDS" in capsys.readouterr().err

    def test_bad_chunk_returns_2(self, tmp_path: Path) -> None:
        src = tmp_path / "ok.psc"
        src.write_text(SOURCE)
        assert main([str(src), "--chunk", "-3"]) == 2

    def test_bad_config_returns_1(self, tmp_path: Path, capsys: pytest.CaptureFixture[str]) -> None:
        (tmp_path / "papylex.toml").write_text("[keywords\n")
        src = tmp_path / "ok.psc"
        src.write_text(SOURCE)
        assert main([str(src)]) == 1
        err = capsys.readouterr().err
        assert err.startswith("error:")
        assert "papylex.toml" in err


# ---------------------------------------------------------------------------
# Output formats
# ---------------------------------------------------------------------------


class TestFormats:
    def test_runs_to_stdout(self, tmp_path: Path, capsys: pytest.CaptureFixture[str]) -> None:
        src = tmp_path / "demo.psc"
        src.write_text(SOURCE)
        assert main([str(src)]) == 0
        out = capsys.readouterr().out
        assert "1:1-10 KEYWORD2 'ScriptName'" in out
        assert "2:14-17 PROPERTY 'Gold'" in out
        assert "5:13-19 COMMENT '; spend'" in out

    def test_folds(self, tmp_path: Path) -> None:
        src = tmp_path / "demo.psc"
        src.write_text(SOURCE)
        out = tmp_path / "folds.txt"
        assert main([str(src), "-f", "folds", "-o", str(out)]) == 0
        lines = out.read_text().splitlines()
        assert lines[3] == "4  0+ Function Pay()"
        assert lines[4] == "5  1    Gold -= 1 ; spend"
        assert lines[5] == "6  0  EndFunction"

    def test_html(self, tmp_path: Path) -> None:
        src = tmp_path / "demo.psc"
        src.write_text(SOURCE)
        out = tmp_path / "demo.html"
        assert main([str(src), "-f", "html", "-o", str(out)]) == 0
        html = out.read_text()
        assert "<title>demo.psc</title>" in html
        assert '<a class="property" href="#L2">Gold</a>' in html
        assert '<span class="fold-open">Function</span>' in html

    def test_chunked_output_matches(self, tmp_path: Path) -> None:
        src = tmp_path / "demo.psc"
        src.write_text(SOURCE)
        whole = tmp_path / "whole.txt"
        chunked = tmp_path / "chunked.txt"
        assert main([str(src), "-o", str(whole)]) == 0
        assert main([str(src), "--chunk", "5", "-o", str(chunked)]) == 0
        assert whole.read_text() == chunked.read_text()

    def test_debug_dumps_properties(self, tmp_path: Path, capsys: pytest.CaptureFixture[str]) -> None:
        src = tmp_path / "demo.psc"
        src.write_text(SOURCE)
        assert main([str(src), "--debug", "-o", str(tmp_path / "o.txt")]) == 0
        err = capsys.readouterr().err
        assert "Properties (1)" in err
        assert "Gold @ line 2" in err

    def test_keyword_override(self, tmp_path: Path, capsys: pytest.CaptureFixture[str]) -> None:
        src = tmp_path / "demo.psc"
        src.write_text("Actor a\n")
        assert main([str(src), "-k", "types=Actor"]) == 0
        assert "1:1-5 TYPE 'Actor'" in capsys.readouterr().out


# ---------------------------------------------------------------------------
# highlight_file smoke test
# ---------------------------------------------------------------------------


class TestHighlightFile:
    def test_basic(self, tmp_path: Path) -> None:
        src = tmp_path / "simple.psc"
        src.write_text("Event OnInit()\nEndEvent\n")
        opts = CliOptions(
            input_file=src,
            output_file=None,
            config_file=None,
            keywords={},
            format="runs",
            chunk=None,
            debug=False,
        )
        out = highlight_file(opts)
        assert "1:1-5 FOLD_OPEN 'Event'" in out
        assert "1:7-12 FUNCTION 'OnInit'" in out
        assert "2:1-8 FOLD_CLOSE 'EndEvent'" in out
