"""Tests for multi-cursor edit planning."""

import pytest

from smartkeys.document import Position, Selection, TextDocument, TextEdit
from smartkeys.handlers import plan_brace_expansion
from smartkeys.planner import (
    PlannedEdit,
    order_bottom_up,
    plan_batch,
    plan_per_cursor,
    remap,
    transform_position,
)


def P(line, character):
    return Position(line, character)


class TestOrderBottomUp:
    def test_order(self):
        positions = [P(0, 5), P(3, 1), P(3, 7), P(1, 0)]
        assert order_bottom_up(positions) == [2, 1, 3, 0]

    def test_empty(self):
        assert order_bottom_up([]) == []


class TestRemap:
    def test_edits_above_shift_lines(self):
        positions = [P(0, 0), P(2, 3), P(5, 1)]
        edits = [((P(1, 0), P(1, 0)), 2), ((P(2, 5), P(2, 5)), 1)]
        assert remap(positions, edits) == [P(0, 0), P(4, 3), P(8, 1)]

    def test_edit_on_same_line_does_not_shift(self):
        assert remap([P(2, 3)], [((P(2, 0), P(2, 9)), 4)]) == [P(2, 3)]

    def test_removed_lines(self):
        assert remap([P(6, 2)], [((P(1, 0), P(3, 0)), -2)]) == [P(4, 2)]

    def test_no_edits(self):
        assert remap([P(1, 1)], []) == [P(1, 1)]


class TestPlanBatch:
    def test_two_brace_expansions(self):
        lines = ["a {}", "b", "c {}"]
        origins = [P(0, 3), P(2, 3)]
        planned = [plan_brace_expansion(lines, p.line, p.character, "    ") for p in origins]
        batch = plan_batch(origins, planned)

        assert [e.start.line for e in batch.edits] == [2, 0]
        doc = TextDocument("\n".join(lines))
        doc.apply_edits(batch.edits)
        assert doc.lines == ["a {", "    ", "}", "b", "c {", "    ", "}"]
        # the lower cursor's brace line moved by the two lines inserted above it
        assert doc.lines[2 + 2] == "c {"
        assert batch.selections == [Selection.caret(1, 4), Selection.caret(5, 4)]

    def test_mismatched_lengths(self):
        with pytest.raises(ValueError):
            plan_batch([P(0, 0)], [])


class TestTransformPosition:
    def test_before_edit_is_unchanged(self):
        edit = TextEdit.insert(P(1, 4), "xy")
        assert transform_position(P(1, 2), edit) == P(1, 2)
        assert transform_position(P(0, 9), edit) == P(0, 9)

    def test_same_line_single_line_insert(self):
        assert transform_position(P(0, 5), TextEdit.insert(P(0, 2), "ab")) == P(0, 7)

    def test_same_line_multi_line_insert(self):
        assert transform_position(P(0, 5), TextEdit.insert(P(0, 2), "x\nyz")) == P(1, 5)

    def test_line_below(self):
        assert transform_position(P(2, 1), TextEdit.insert(P(0, 2), "x\nyz")) == P(3, 1)

    def test_deleting_line_break(self):
        edit = TextEdit.delete(P(0, 3), P(1, 0))
        assert transform_position(P(1, 2), edit) == P(0, 5)


class TestPlanPerCursor:
    def test_two_cursors_on_one_line(self):
        origins = [P(0, 1), P(0, 3)]
        planned = [
            PlannedEdit(TextEdit.insert(P(0, 1), "X"), P(0, 2)),
            PlannedEdit(TextEdit.insert(P(0, 3), "X"), P(0, 4)),
        ]
        batch = plan_per_cursor(origins, planned)
        doc = TextDocument("abc")
        doc.apply_edits(batch.edits)
        assert doc.lines == ["aXbcX"]
        assert [s.active for s in batch.selections] == [P(0, 2), P(0, 5)]

    def test_newlines_on_several_lines(self):
        origins = [P(0, 1), P(1, 1)]
        planned = [
            PlannedEdit(TextEdit.insert(P(0, 1), "\n"), P(1, 0)),
            PlannedEdit(TextEdit.insert(P(1, 1), "\n"), P(2, 0)),
        ]
        batch = plan_per_cursor(origins, planned)
        doc = TextDocument("ab\ncd")
        doc.apply_edits(batch.edits)
        assert doc.lines == ["a", "b", "c", "d"]
        assert [s.active for s in batch.selections] == [P(1, 0), P(3, 0)]
