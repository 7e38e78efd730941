"""Multi-cursor edit planning.

Every per-cursor edit is computed against the unmodified document. The
planner orders the edits, hands them over as one batch and works out where
each cursor ends up once the whole batch is in.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Iterable, Sequence

from smartkeys.document import Position, Selection, TextEdit

Range = tuple[Position, Position]


@dataclass(frozen=True)
class PlannedEdit:
    """One cursor's edit plus where that cursor should land.

    ``cursor`` is expressed against the original document with only this
    edit applied.
    """

    edit: TextEdit
    cursor: Position


@dataclass
class EditBatch:
    edits: list[TextEdit]  # bottom-to-top, right-to-left
    selections: list[Selection]  # original cursor order


def order_bottom_up(positions: Sequence[Position]) -> list[int]:
    """Indices of *positions* sorted bottom-to-top, then right-to-left."""
    return sorted(range(len(positions)), key=lambda i: positions[i], reverse=True)


def remap(
    original_positions: Sequence[Position],
    applied_edits: Iterable[tuple[Range, int]],
) -> list[Position]:
    """Shift positions by the lines inserted (or removed) above them.

    *applied_edits* holds ``(range, inserted_line_count)`` pairs in original
    coordinates. Only edits starting on a line strictly above a position move
    it; an edit on the position's own line or below never does.
    """
    edits = list(applied_edits)
    result: list[Position] = []
    for pos in original_positions:
        delta = sum(count for (start, _end), count in edits if start.line < pos.line)
        result.append(Position(pos.line + delta, pos.character))
    return result


def plan_batch(origins: Sequence[Position], planned: Sequence[PlannedEdit]) -> EditBatch:
    """Order *planned* edits for one atomic apply and remap their cursors.

    ``origins[i]`` is the cursor position that produced ``planned[i]``. Each
    cursor must sit on its own line.
    """
    if len(origins) != len(planned):
        raise ValueError("one planned edit per cursor expected")
    order = order_bottom_up(origins)
    shifted = remap(origins, ((p.edit.range, p.edit.inserted_line_count) for p in planned))
    selections = [
        Selection.caret(p.cursor.line + (moved.line - origin.line), p.cursor.character)
        for p, origin, moved in zip(planned, origins, shifted)
    ]
    return EditBatch([planned[i].edit for i in order], selections)


def transform_position(position: Position, edit: TextEdit) -> Position:
    """Where *position* (at or after ``edit.end``) ends up once *edit* is applied.

    Column-aware, so it also handles several cursors on one line.
    """
    if position < edit.end:
        return position
    inserted = edit.text.split("\n")
    if position.line > edit.end.line:
        return Position(position.line + edit.inserted_line_count, position.character)
    new_line = edit.start.line + len(inserted) - 1
    base = len(inserted[-1]) + (edit.start.character if len(inserted) == 1 else 0)
    return Position(new_line, base + position.character - edit.end.character)


def plan_per_cursor(
    origins: Sequence[Position], planned: Sequence[PlannedEdit]
) -> EditBatch:
    """Like :func:`plan_batch` but allows several cursors per line.

    Each cursor is carried through every edit that ends at or before its own
    edit starts.
    """
    order = order_bottom_up(origins)
    selections: list[Selection] = []
    for p in planned:
        pos = p.cursor
        earlier = [q.edit for q in planned if q.edit.end <= p.edit.start and q is not p]
        for edit in sorted(earlier, key=lambda e: e.start, reverse=True):
            pos = transform_position(pos, edit)
        selections.append(Selection.caret(pos))
    return EditBatch([planned[i].edit for i in order], selections)
