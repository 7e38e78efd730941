"""Shared fixtures: a recording host editor for the handlers."""

from __future__ import annotations

import pytest

from smartkeys.config import SmartKeysConfig
from smartkeys.document import FormattingOptions, Position, Selection, TextDocument
from smartkeys.state import EndToggleTracker

CURSOR = "|"


def parse_cursors(text: str) -> tuple[str, list[Position]]:
    """Strip ``|`` markers from *text*, returning content and cursor positions."""
    positions: list[Position] = []
    lines = text.split("\n")
    for line_no, line in enumerate(lines):
        while CURSOR in line:
            col = line.index(CURSOR)
            positions.append(Position(line_no, col))
            line = line[:col] + line[col + 1 :]
        lines[line_no] = line
    return "\n".join(lines), positions


class RecordingEditor:
    """Host editor double that records every forwarded default keystroke."""

    def __init__(
        self,
        text: str,
        *,
        language_id: str = "plaintext",
        tab_size: int = 4,
        insert_spaces: bool = True,
        tracker: EndToggleTracker | None = None,
    ) -> None:
        content, positions = parse_cursors(text)
        self.document = TextDocument(content, uri="file:///test", language_id=language_id)
        self.options = FormattingOptions(tab_size=tab_size, insert_spaces=insert_spaces)
        self.tracker = tracker or EndToggleTracker()
        self._selections = [Selection.caret(p) for p in positions] or [
            Selection.caret(0, 0)
        ]
        self.forwarded: list[str] = []
        self.revealed: list[Position] = []
        self.document.on_did_change(
            lambda doc: self.tracker.on_document_changed(doc.uri)
        )

    # SmartEditor

    @property
    def selections(self) -> list[Selection]:
        return self._selections[:]

    def set_selections(self, selections) -> None:
        self._selections = list(selections)
        self.tracker.on_selection_changed(self.document.uri, self._selections[0].active)

    def reveal(self, position: Position) -> None:
        self.revealed.append(position)

    # KeyForwarder

    def type_literal(self, text: str) -> None:
        self.forwarded.append(f"type:{text}")

    def forward_default_newline(self) -> None:
        self.forwarded.append("newline")

    def forward_default_delete(self) -> None:
        self.forwarded.append("delete")

    def forward_default_end(self) -> None:
        self.forwarded.append("end")

    # Helpers

    @property
    def lines(self) -> list[str]:
        return self.document.lines

    @property
    def cursor(self) -> Position:
        return self._selections[0].active

    @property
    def cursors(self) -> list[Position]:
        return [s.active for s in self._selections]

    def move_to(self, line: int, character: int) -> None:
        self.set_selections([Selection.caret(line, character)])


@pytest.fixture
def config() -> SmartKeysConfig:
    return SmartKeysConfig()


@pytest.fixture
def make_editor():
    return RecordingEditor
