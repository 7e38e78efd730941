"""Multi-cursor text editor widget driven by the smart-key handlers."""

from __future__ import annotations

from dataclasses import dataclass
from typing import Callable, Sequence

from rich.text import Text
from textual import events
from textual.message import Message
from textual.widget import Widget

from smartkeys.config import SmartKeysConfig
from smartkeys.document import (
    FormattingOptions,
    Position,
    Selection,
    TextDocument,
    TextEdit,
)
from smartkeys.handlers import (
    SmartBackspaceHandler,
    SmartEndHandler,
    SmartEnterHandler,
    SmartSeparatorHandler,
)
from smartkeys.indent import (
    first_non_whitespace_index,
    get_indent_from_line,
    indent_unit,
)
from smartkeys.planner import PlannedEdit, plan_per_cursor
from smartkeys.state import EndToggleTracker


class SmartKeysEditor(Widget, can_focus=True):
    """A plain-text editor Textual widget with smart End/Backspace/Enter.

    Keys:
      typing / Enter / Backspace / End / Home / arrows
      alt+up / alt+down   add a cursor above / below
      escape              back to a single cursor
      ctrl+z / ctrl+y     undo / redo
      ctrl+s / ctrl+q     save / quit
    """

    DEFAULT_CSS = """
    SmartKeysEditor {
        height: 1fr;
        background: $surface;
        padding: 0 1;
    }
    """

    # -- Messages ----------------------------------------------------------

    @dataclass
    class SaveRequested(Message):
        content: str

    @dataclass
    class Quit(Message):
        pass

    # -- Init --------------------------------------------------------------

    def __init__(
        self,
        initial_content: str = "",
        *,
        uri: str = "untitled:1",
        language_id: str = "plaintext",
        config: SmartKeysConfig | None = None,
        tab_size: int = 4,
        insert_spaces: bool = True,
        name: str | None = None,
        id: str | None = None,
        classes: str | None = None,
    ) -> None:
        super().__init__(name=name, id=id, classes=classes)
        self.document = TextDocument(initial_content, uri=uri, language_id=language_id)
        self.document.on_did_change(self._on_document_changed)
        self.options = FormattingOptions(tab_size=tab_size, insert_spaces=insert_spaces)
        self.tracker = EndToggleTracker()
        self._selections: list[Selection] = [Selection.caret(0, 0)]
        self.status_msg: str = ""
        self.undo_stack: list[tuple[list[str], list[Selection]]] = []
        self.redo_stack: list[tuple[list[str], list[Selection]]] = []
        self._scroll_top: int = 0
        self._viewport_height: int = 0  # known after the first render
        self.set_config(config or SmartKeysConfig())

    def set_config(self, config: SmartKeysConfig) -> None:
        self.config = config
        self._end = SmartEndHandler(self.tracker, config, self)
        self._backspace = SmartBackspaceHandler(config, self)
        self._enter = SmartEnterHandler(config, self)
        self._separator = SmartSeparatorHandler(config, self)

    # -- Host API used by the handlers -------------------------------------

    @property
    def lines(self) -> list[str]:
        return self.document.lines

    @property
    def selections(self) -> list[Selection]:
        return self._selections[:]

    @property
    def cursor(self) -> Position:
        """Primary cursor."""
        return self._selections[0].active

    def set_selections(self, selections: Sequence[Selection]) -> None:
        unique: list[Selection] = []
        for sel in selections:
            sel = Selection(self._clamp(sel.anchor), self._clamp(sel.active))
            if sel not in unique:
                unique.append(sel)
        self._selections = unique or [Selection.caret(0, 0)]
        self.tracker.on_selection_changed(self.document.uri, self._selections[0].active)

    def reveal(self, position: Position) -> None:
        if position.line < self._scroll_top:
            self._scroll_top = position.line
        elif self._viewport_height and position.line >= self._scroll_top + self._viewport_height:
            self._scroll_top = position.line - self._viewport_height + 1

    def _clamp(self, position: Position) -> Position:
        lines = self.document.lines
        line = max(0, min(position.line, len(lines) - 1))
        return Position(line, max(0, min(position.character, len(lines[line]))))

    def _on_document_changed(self, document: TextDocument) -> None:
        self.tracker.on_document_changed(document.uri)

    # -- Default keystrokes -------------------------------------------------

    def _apply_per_cursor(
        self, make_edit: Callable[[Position], PlannedEdit | None]
    ) -> None:
        """Run *make_edit* at every cursor and commit the results as one batch."""
        origins: list[Position] = []
        planned: list[PlannedEdit] = []
        untouched: list[Selection] = []
        for sel in self._selections:
            plan = make_edit(sel.active)
            if plan is None:
                untouched.append(sel)
            else:
                origins.append(sel.active)
                planned.append(plan)
        if not planned:
            return
        batch = plan_per_cursor(origins, planned)
        self.document.apply_edits(batch.edits)
        self.set_selections(batch.selections + untouched)
        self.reveal(self.cursor)

    def type_literal(self, text: str) -> None:
        def insert(pos: Position) -> PlannedEdit:
            parts = text.split("\n")
            if len(parts) == 1:
                cursor = Position(pos.line, pos.character + len(text))
            else:
                cursor = Position(pos.line + len(parts) - 1, len(parts[-1]))
            return PlannedEdit(TextEdit.insert(pos, text), cursor)

        self._apply_per_cursor(insert)

    def forward_default_newline(self) -> None:
        lines = self.document.lines

        def newline(pos: Position) -> PlannedEdit:
            indent = get_indent_from_line(lines[pos.line])[: pos.character]
            return PlannedEdit(
                TextEdit.insert(pos, "\n" + indent), Position(pos.line + 1, len(indent))
            )

        self._apply_per_cursor(newline)

    def forward_default_delete(self) -> None:
        lines = self.document.lines

        def delete_left(pos: Position) -> PlannedEdit | None:
            if pos.character > 0:
                start = Position(pos.line, pos.character - 1)
            elif pos.line > 0:
                start = Position(pos.line - 1, len(lines[pos.line - 1]))
            else:
                return None
            return PlannedEdit(TextEdit.delete(start, pos), start)

        self._apply_per_cursor(delete_left)

    def forward_default_end(self) -> None:
        lines = self.document.lines
        self.set_selections(
            [Selection.caret(s.active.line, len(lines[s.active.line])) for s in self._selections]
        )
        self.reveal(self.cursor)

    # -- Cursor movement ---------------------------------------------------

    def _move_cursors(self, move: Callable[[Position], Position]) -> None:
        self.set_selections([Selection.caret(move(s.active)) for s in self._selections])
        self.reveal(self.cursor)

    def _move_left(self, pos: Position) -> Position:
        if pos.character > 0:
            return Position(pos.line, pos.character - 1)
        if pos.line > 0:
            return Position(pos.line - 1, len(self.lines[pos.line - 1]))
        return pos

    def _move_right(self, pos: Position) -> Position:
        if pos.character < len(self.lines[pos.line]):
            return Position(pos.line, pos.character + 1)
        if pos.line < len(self.lines) - 1:
            return Position(pos.line + 1, 0)
        return pos

    def _home(self, pos: Position) -> Position:
        return Position(pos.line, first_non_whitespace_index(self.lines[pos.line]))

    def _add_cursor(self, direction: int) -> None:
        edge = (
            max(s.active for s in self._selections)
            if direction > 0
            else min(s.active for s in self._selections)
        )
        line = edge.line + direction
        if 0 <= line < len(self.lines):
            self.set_selections(self._selections + [Selection.caret(line, edge.character)])
            self.status_msg = f"{len(self._selections)} cursors"

    # -- Undo --------------------------------------------------------------

    def _save_undo(self) -> None:
        self.undo_stack.append((self.document.get_lines(), self.selections))
        if len(self.undo_stack) > 200:
            self.undo_stack.pop(0)

    def _restore(self, snapshot: tuple[list[str], list[Selection]]) -> None:
        lines, selections = snapshot
        self.document.set_text("\n".join(lines))
        self.set_selections(selections)

    def _undo(self) -> None:
        if not self.undo_stack:
            self.status_msg = "nothing to undo"
            return
        self.redo_stack.append((self.document.get_lines(), self.selections))
        self._restore(self.undo_stack.pop())
        self.status_msg = "undone"

    def _redo(self) -> None:
        if not self.redo_stack:
            self.status_msg = "nothing to redo"
            return
        self.undo_stack.append((self.document.get_lines(), self.selections))
        self._restore(self.redo_stack.pop())
        self.status_msg = "redone"

    def _edit(self, action: Callable[[], object]) -> None:
        """Run an editing action with an undo snapshot, kept only if text changed."""
        version = self.document.version
        self._save_undo()
        action()
        if self.document.version == version:
            self.undo_stack.pop()
        elif self.redo_stack:
            self.redo_stack.clear()

    # -- Public API --------------------------------------------------------

    def get_content(self) -> str:
        return self.document.get_text()

    def set_content(self, content: str) -> None:
        self.document.set_text(content)
        self._selections = [Selection.caret(0, 0)]
        self._scroll_top = 0
        self.undo_stack.clear()
        self.redo_stack.clear()
        self.refresh()

    # =====================================================================
    # Key handling
    # =====================================================================

    def on_key(self, event: events.Key) -> None:
        event.prevent_default()
        event.stop()
        self.handle_key(event.key, event.character)
        self.refresh()

    def handle_key(self, key: str, char: str | None = None) -> None:
        self.status_msg = ""

        if key == "enter":
            self._edit(lambda: self._enter.execute(self))
        elif key == "backspace":
            self._edit(lambda: self._backspace.execute(self))
        elif key == "end":
            self._edit(lambda: self._end.execute(self))
        elif key == "tab":
            unit = indent_unit(self.options.tab_size, self.options.insert_spaces)
            self._edit(lambda: self.type_literal(unit))
        elif key == "home":
            self._move_cursors(self._home)
        elif key == "left":
            self._move_cursors(self._move_left)
        elif key == "right":
            self._move_cursors(self._move_right)
        elif key == "up":
            self._move_cursors(lambda p: self._clamp(Position(p.line - 1, p.character)))
        elif key == "down":
            self._move_cursors(lambda p: self._clamp(Position(p.line + 1, p.character)))
        elif key in ("alt+up", "ctrl+up"):
            self._add_cursor(-1)
        elif key in ("alt+down", "ctrl+down"):
            self._add_cursor(1)
        elif key == "escape":
            self.set_selections(self._selections[:1])
        elif key == "ctrl+z":
            self._undo()
        elif key == "ctrl+y":
            self._redo()
        elif key == "ctrl+s":
            self.post_message(self.SaveRequested(self.get_content()))
        elif key == "ctrl+q":
            self.post_message(self.Quit())
        elif char == ":":
            self._edit(lambda: self._separator.execute(self))
        elif char and char.isprintable():
            self._edit(lambda: self.type_literal(char))

    # =====================================================================
    # Rendering
    # =====================================================================

    def render(self) -> Text:
        width = self.content_region.width
        height = self.content_region.height
        if height < 2 or width < 10:
            return Text("(too small)")

        lines = self.document.lines
        num_lines = len(lines)
        content_height = height - 1
        self._viewport_height = content_height
        ln_width = max(3, len(str(num_lines)))

        self.reveal(self.cursor)
        cursors_by_line: dict[int, set[int]] = {}
        for sel in self._selections:
            cursors_by_line.setdefault(sel.active.line, set()).add(sel.active.character)

        result = Text()
        result_append = Text.append
        rows_used = 0
        line_idx = self._scroll_top
        while rows_used < content_height and line_idx < num_lines:
            line = lines[line_idx]
            result_append(result, f"{line_idx + 1:>{ln_width}} ", style="dim cyan")
            cols = cursors_by_line.get(line_idx, ())
            # Render runs between cursor cells
            col = 0
            for c in sorted(cols):
                if c > col:
                    result_append(result, line[col:c])
                result_append(result, line[c] if c < len(line) else " ", style="reverse")
                col = c + 1
            if col < len(line):
                result_append(result, line[col:])
            result_append(result, "\n")
            rows_used += 1
            line_idx += 1

        while rows_used < content_height:
            result_append(result, f"{'~':>{ln_width}} \n", style="dim blue")
            rows_used += 1

        # status bar
        cursor = self.cursor
        label = f" {self.document.language_id.upper()} "
        count = len(self._selections)
        multi = f" {count} cursors " if count > 1 else ""
        pos = f" Ln {cursor.line + 1}/{num_lines}, Col {cursor.character + 1} "
        spacer_len = max(
            0, width - len(label) - len(multi) - len(pos) - len(self.status_msg) - 2
        )
        result_append(result, label, style="bold white on dark_blue")
        if multi:
            result_append(result, multi, style="bold white on dark_orange")
        result_append(result, f"  {self.status_msg}")
        result_append(result, " " * spacer_len)
        result_append(result, pos, style="bold")
        return result
