"""Tests for the property registry and its upkeep across document edits."""

from __future__ import annotations

from papylex.properties import PropertyRecord, PropertyRegistry
from papylex.styles import DEFAULT_CARRY, Style

from tests.conftest import style_of


class TestRegistry:
    def test_register_and_lookup(self) -> None:
        reg = PropertyRegistry()
        reg.register("Health", 3)
        assert reg.is_known("Health")
        assert reg.is_known("HEALTH")
        assert reg.lookup("health") == PropertyRecord("Health", 3)

    def test_unknown(self) -> None:
        reg = PropertyRegistry()
        assert not reg.is_known("x")
        assert reg.lookup("x") is None

    def test_same_line_is_noop(self) -> None:
        reg = PropertyRegistry()
        reg.register("A", 1)
        reg.register("a", 1)
        assert len(reg) == 1

    def test_duplicates_kept(self) -> None:
        reg = PropertyRegistry()
        reg.register("A", 5)
        reg.register("A", 2)
        assert len(reg) == 2
        assert reg.lookup("A").line == 2

    def test_invalidate_from_line(self) -> None:
        reg = PropertyRegistry()
        reg.register("A", 1)
        reg.register("B", 4)
        reg.register("C", 7)
        dropped = reg.invalidate_from(4)
        assert dropped == [PropertyRecord("B", 4), PropertyRecord("C", 7)]
        assert reg.names == frozenset({"a"})
        assert [r.name for r in reg.records] == ["A"]

    def test_name_survives_while_any_record_remains(self) -> None:
        reg = PropertyRegistry()
        reg.register("A", 1)
        reg.register("A", 9)
        reg.invalidate_from(5)
        assert reg.is_known("A")
        reg.invalidate_from(0)
        assert not reg.is_known("A")

    def test_round_trip(self) -> None:
        reg = PropertyRegistry()
        reg.register("Foo", 3)
        reg.invalidate_from(3)
        assert not reg.is_known("Foo")
        reg.register("Foo", 5)
        assert reg.lookup("Foo").line == 5

    def test_clear(self) -> None:
        reg = PropertyRegistry()
        reg.register("A", 0)
        reg.clear()
        assert len(reg) == 0
        assert not reg.is_known("A")


class TestEdits:
    SOURCE = "Int Property A Auto\nInt Property B Auto\nx = B"

    def test_deleting_declaration_forgets_property(self, styled) -> None:
        ed = styled(self.SOURCE)
        doc = ed.document
        assert style_of(ed, "B", 1) is Style.PROPERTY

        doc.delete_range(doc.line_start(1), doc.line_start(2) - doc.line_start(1))
        assert not ed.lexer.properties.is_known("B")
        assert ed.lexer.properties.is_known("A")

        ed.colourise()
        assert doc.line_text(1) == "x = B"
        assert style_of(ed, "B") is Style.DEFAULT

    def test_inserting_above_shifts_lines(self, styled) -> None:
        ed = styled(self.SOURCE)
        ed.document.insert_text(0, "Int Property C Auto\n")
        ed.colourise()
        found = {(r.name, r.line) for r in ed.lexer.properties.records}
        assert found == {("C", 0), ("A", 1), ("B", 2)}

    def test_edit_below_keeps_earlier_records(self, styled) -> None:
        ed = styled(self.SOURCE)
        doc = ed.document
        doc.insert_text(doc.line_start(2), "y = 1\n")
        assert {r.name for r in ed.lexer.properties.records} == {"A", "B"}
        ed.colourise()
        assert style_of(ed, "B", 1) is Style.PROPERTY

    def test_redeclare_on_new_line(self, styled) -> None:
        ed = styled("Int Property A Auto")
        doc = ed.document
        doc.insert_text(0, "\n\n")
        ed.colourise()
        assert ed.lexer.properties.lookup("A").line == 2

    def test_rename_declaration(self, styled) -> None:
        ed = styled(self.SOURCE)
        doc = ed.document
        pos = doc.line_start(1) + len("Int Property ")
        doc.replace_range(pos, pos + 1, "Bee")
        ed.colourise()
        assert not ed.lexer.properties.is_known("B")
        assert ed.lexer.properties.is_known("Bee")
        assert style_of(ed, "B", 1) is Style.DEFAULT

    def test_detached_lexer_ignores_edits(self, styled) -> None:
        ed = styled(self.SOURCE)
        ed.close()
        assert len(ed.lexer.properties) == 0
        ed.document.insert_text(0, "x\n")
        assert len(ed.lexer.properties) == 0


class TestPartialLex:
    def test_dropped_declaration_reopens_styled_end(self, styled) -> None:
        ed = styled("a = 1\nb = 2\nInt Property Late Auto\nLate = 3")
        doc = ed.document
        assert doc.end_styled == doc.length

        ed.lexer.lex(0, 5, DEFAULT_CARRY, doc)
        assert not ed.lexer.properties.is_known("Late")
        assert doc.end_styled == doc.line_start(1)

        ed.colourise()
        assert doc.end_styled == doc.length
        assert ed.lexer.properties.lookup("Late") == PropertyRecord("Late", 2)
        assert style_of(ed, "Late", 1) is Style.PROPERTY

    def test_nothing_dropped_below_keeps_styled_end(self, styled) -> None:
        ed = styled("Int Property Early Auto\nx = 1\nEarly = 2")
        doc = ed.document
        ed.lexer.lex(0, 5, DEFAULT_CARRY, doc)
        assert doc.end_styled == doc.length
        assert ed.lexer.properties.is_known("Early")
