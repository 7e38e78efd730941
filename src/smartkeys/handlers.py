"""Smart End / Backspace / Enter / separator handlers.

A handler reads the document and cursors once, plans its edit and commits
it in one batch. Whenever a heuristic declines, the keystroke goes to the
injected :class:`~smartkeys.document.KeyForwarder` instead. ``execute``
returns True when a smart edit or move was made.
"""

from __future__ import annotations

import logging
from typing import Sequence

from smartkeys.braces import should_insert_closing_brace
from smartkeys.config import SmartKeysConfig
from smartkeys.document import (
    KeyForwarder,
    Position,
    Selection,
    SmartEditor,
    TextEdit,
)
from smartkeys.indent import (
    calculate_indent,
    first_non_whitespace_index,
    get_indent_from_line,
    indent_unit,
    is_in_indent_zone,
)
from smartkeys.planner import PlannedEdit, plan_batch
from smartkeys.state import EndToggleTracker
from smartkeys.structured import (
    SEPARATOR,
    TERMINATOR,
    find_property_name_before_cursor,
    has_separator_after_cursor,
    is_structured_document,
    line_needs_terminator,
    terminator_column,
)

logger = logging.getLogger(__name__)


def set_cursor_position(editor: SmartEditor, line: int, character: int) -> None:
    position = Position(line, character)
    editor.set_selections([Selection.caret(position)])
    editor.reveal(position)


def _all_empty(selections: Sequence[Selection]) -> bool:
    return bool(selections) and all(s.is_empty for s in selections)


def _indent_for(editor: SmartEditor, lines: Sequence[str], line: int) -> str:
    options = editor.options
    return calculate_indent(lines, line, options.tab_size, options.insert_spaces)


# =========================================================================
# End
# =========================================================================


class SmartEndHandler:
    """End toggles between a line's trimmed end and its full end.

    On a blank line End re-indents the line instead.
    """

    def __init__(
        self,
        tracker: EndToggleTracker,
        config: SmartKeysConfig,
        forwarder: KeyForwarder,
    ) -> None:
        self.tracker = tracker
        self.config = config
        self.forwarder = forwarder

    def execute(self, editor: SmartEditor) -> bool:
        selections = editor.selections
        document = editor.document
        if not _all_empty(selections):
            self.tracker.invalidate(document.uri)
            self.forwarder.forward_default_end()
            return False
        if len(selections) > 1:
            return self._execute_multi(editor, selections)

        active = selections[0].active
        lines = document.get_lines()
        if not 0 <= active.line < len(lines):
            self.forwarder.forward_default_end()
            return False
        line_text = lines[active.line]
        cfg = self.config.smart_end

        if not line_text.strip():
            if not cfg.indent_empty_line:
                return self._fallback(document.uri)
            self._handle_empty_line(editor, lines, active.line)
        else:
            if not cfg.toggle_trimmed_end:
                return self._fallback(document.uri)
            self._handle_non_empty_line(editor, active, line_text)
        return True

    def _fallback(self, uri: str) -> bool:
        self.tracker.invalidate(uri)
        self.forwarder.forward_default_end()
        return False

    def _handle_empty_line(
        self, editor: SmartEditor, lines: Sequence[str], line: int
    ) -> None:
        target = _indent_for(editor, lines, line)
        line_text = lines[line]
        if line_text != target:
            editor.document.apply_edits(
                [TextEdit(Position(line, 0), Position(line, len(line_text)), target)]
            )
        set_cursor_position(editor, line, len(target))
        self.tracker.record(editor.document.uri, line, len(target), False)
        logger.debug("end: indented blank line %d to %d columns", line, len(target))

    def _handle_non_empty_line(
        self, editor: SmartEditor, active: Position, line_text: str
    ) -> None:
        uri = editor.document.uri
        line, char = active.line, active.character
        trimmed = len(line_text.rstrip())
        full = len(line_text)
        state = self.tracker.lookup(uri, active)
        at_end = state is not None and state.line == line and char >= trimmed

        if at_end and state.at_trimmed_end and char == trimmed:
            target, at_trimmed_end = full, False
        elif at_end and not state.at_trimmed_end and char == full:
            target, at_trimmed_end = trimmed, True
        elif char == trimmed and trimmed < full:
            target, at_trimmed_end = full, False
        else:
            target, at_trimmed_end = trimmed, True

        set_cursor_position(editor, line, target)
        self.tracker.record(uri, line, target, at_trimmed_end)

    def _execute_multi(
        self, editor: SmartEditor, selections: Sequence[Selection]
    ) -> bool:
        """Every cursor goes to its trimmed end (or re-indents); no toggle state."""
        document = editor.document
        cfg = self.config.smart_end
        if not (cfg.indent_empty_line or cfg.toggle_trimmed_end):
            return self._fallback(document.uri)

        lines = document.get_lines()
        edits: dict[int, TextEdit] = {}
        targets: list[Selection] = []
        for sel in selections:
            line = sel.active.line
            if not 0 <= line < len(lines):
                targets.append(sel)
                continue
            text = lines[line]
            if not text.strip() and cfg.indent_empty_line:
                indent = _indent_for(editor, lines, line)
                if text != indent:
                    edits[line] = TextEdit(Position(line, 0), Position(line, len(text)), indent)
                col = len(indent)
            elif text.strip() and cfg.toggle_trimmed_end:
                col = len(text.rstrip())
            else:
                col = len(text)
            targets.append(Selection.caret(line, col))

        if edits:
            document.apply_edits(edits.values())
        self.tracker.invalidate(document.uri)
        editor.set_selections(targets)
        editor.reveal(targets[0].active)
        return True


# =========================================================================
# Backspace
# =========================================================================


class SmartBackspaceHandler:
    """Backspace that removes blank lines and collapses over-indentation."""

    def __init__(self, config: SmartKeysConfig, forwarder: KeyForwarder) -> None:
        self.config = config
        self.forwarder = forwarder

    def execute(self, editor: SmartEditor) -> bool:
        selections = editor.selections
        if len(selections) != 1 or not selections[0].is_empty:
            return self._fallback("selection or multiple cursors")

        active = selections[0].active
        lines = editor.document.get_lines()
        if not 0 <= active.line < len(lines):
            return self._fallback("cursor outside document")
        line, line_text = active.line, lines[active.line]
        cfg = self.config.smart_backspace

        if not line_text.strip():
            if cfg.handle_empty_line and line > 0:
                self._handle_empty_line(editor, lines, line)
                return True
        elif is_in_indent_zone(line_text, active.character):
            if cfg.handle_indent_zone and line > 0:
                self._handle_indent_zone(editor, lines, line)
                return True
        return self._fallback("no smart rule applies")

    def _fallback(self, reason: str) -> bool:
        logger.debug("backspace: default delete (%s)", reason)
        self.forwarder.forward_default_delete()
        return False

    def _handle_empty_line(
        self, editor: SmartEditor, lines: Sequence[str], line: int
    ) -> None:
        line_text = lines[line]
        prev_text = lines[line - 1]
        if not prev_text.strip():
            # Drop the blank line above, re-indent this one.
            target = _indent_for(editor, lines, line)
            edit = TextEdit(Position(line - 1, 0), Position(line, len(line_text)), target)
            cursor = Position(line - 1, len(target))
        else:
            # Drop this line and the trailing blanks of the one above.
            prev_trimmed = prev_text.rstrip()
            edit = TextEdit(
                Position(line - 1, len(prev_trimmed)), Position(line, len(line_text))
            )
            cursor = Position(line - 1, len(prev_trimmed))
        editor.document.apply_edits([edit])
        set_cursor_position(editor, cursor.line, cursor.character)

    def _handle_indent_zone(
        self, editor: SmartEditor, lines: Sequence[str], line: int
    ) -> None:
        line_text = lines[line]
        first = first_non_whitespace_index(line_text)
        correct = _indent_for(editor, lines, line)

        if first > len(correct):
            edit = TextEdit(Position(line, 0), Position(line, first), correct)
            cursor = Position(line, len(correct))
        else:
            prev_text = lines[line - 1]
            if not prev_text.strip():
                edit = TextEdit.delete(Position(line - 1, 0), Position(line, 0))
                cursor = Position(line - 1, first)
            else:
                prev_trimmed = prev_text.rstrip()
                edit = TextEdit(
                    Position(line - 1, len(prev_trimmed)),
                    Position(line, len(line_text)),
                    line_text.strip(),
                )
                cursor = Position(line - 1, len(prev_trimmed))
        editor.document.apply_edits([edit])
        set_cursor_position(editor, cursor.line, cursor.character)


# =========================================================================
# Enter
# =========================================================================


def plan_brace_expansion(
    lines: Sequence[str],
    line: int,
    cursor_char: int,
    unit: str,
    line_text: str | None = None,
) -> PlannedEdit | None:
    """Expand ``{|}`` into a three-line block when the brace needs closing.

    *line_text* overrides ``lines[line]`` (used when a terminator was just
    added to the line). The returned edit is in the coordinates of that text.
    """
    text = lines[line] if line_text is None else line_text
    prefix = text[:cursor_char].rstrip()
    if not prefix or prefix[-1] != "{":
        return None
    brace = len(prefix) - 1

    view = list(lines)
    view[line] = text[: brace + 1]
    if not should_insert_closing_brace(view, line, brace):
        return None

    base_indent = get_indent_from_line(text)
    inner_indent = base_indent + unit
    rest = text[brace + 1 :]
    close = rest.find("}")
    if close != -1:
        carried, suffix = "", rest[close + 1 :]
    else:
        carried, suffix = rest.strip(), ""

    replacement = f"\n{inner_indent}{carried}\n{base_indent}}}{suffix}"
    edit = TextEdit(Position(line, brace + 1), Position(line, len(text)), replacement)
    return PlannedEdit(edit, Position(line + 1, len(inner_indent)))


class SmartEnterHandler:
    """Enter that closes an opened brace and terminates finished values."""

    def __init__(self, config: SmartKeysConfig, forwarder: KeyForwarder) -> None:
        self.config = config
        self.forwarder = forwarder

    def execute(self, editor: SmartEditor) -> bool:
        selections = editor.selections
        if not _all_empty(selections):
            return self._fallback("non-empty selection")
        if len(selections) > 1:
            return self._execute_multi(editor, [s.active for s in selections])
        return self._execute_single(editor, selections[0].active)

    def _fallback(self, reason: str) -> bool:
        logger.debug("enter: default newline (%s)", reason)
        self.forwarder.forward_default_newline()
        return False

    def _unit(self, editor: SmartEditor) -> str:
        return indent_unit(editor.options.tab_size, editor.options.insert_spaces)

    def _terminator_edit(self, editor: SmartEditor, line_text: str, line: int) -> TextEdit | None:
        if not self.config.structured_value.insert_terminator_on_enter:
            return None
        if not is_structured_document(editor.document.language_id):
            return None
        if not line_needs_terminator(line_text):
            return None
        return TextEdit.insert(Position(line, terminator_column(line_text)), TERMINATOR)

    def _execute_single(self, editor: SmartEditor, active: Position) -> bool:
        document = editor.document
        lines = document.get_lines()
        if not 0 <= active.line < len(lines):
            return self._fallback("cursor outside document")
        line, char = active.line, min(active.character, len(lines[active.line]))
        original = lines[line]

        terminator = self._terminator_edit(editor, original, line)
        text = original
        if terminator is not None:
            col = terminator.start.character
            text = original[:col] + TERMINATOR + original[col:]
            if char >= col:
                char += len(TERMINATOR)

        planned = None
        if self.config.smart_enter.auto_insert_closing_brace:
            planned = plan_brace_expansion(lines, line, char, self._unit(editor), text)

        if planned is not None:
            # The terminator (if any) sits after the brace, inside the
            # replaced tail, so one edit over the original line covers both.
            edit = TextEdit(planned.edit.start, Position(line, len(original)), planned.edit.text)
            document.apply_edits([edit])
            set_cursor_position(editor, planned.cursor.line, planned.cursor.character)
            logger.debug("enter: expanded brace block at line %d", line)
            return True

        if terminator is not None:
            document.apply_edits([terminator])
            editor.set_selections([Selection.caret(line, char)])
            logger.debug("enter: added terminator at line %d", line)
            self.forwarder.forward_default_newline()
            return True

        return self._fallback("no brace to close")

    def _execute_multi(self, editor: SmartEditor, origins: list[Position]) -> bool:
        """Expand every cursor's brace in one batch, or none at all."""
        if not self.config.smart_enter.auto_insert_closing_brace:
            return self._fallback("brace insertion disabled")
        if len({pos.line for pos in origins}) != len(origins):
            return self._fallback("several cursors on one line")

        lines = editor.document.get_lines()
        unit = self._unit(editor)
        planned: list[PlannedEdit] = []
        for pos in origins:
            if not 0 <= pos.line < len(lines):
                return self._fallback("cursor outside document")
            char = min(pos.character, len(lines[pos.line]))
            plan = plan_brace_expansion(lines, pos.line, char, unit)
            if plan is None:
                return self._fallback(f"cursor at line {pos.line} has no brace to close")
            planned.append(plan)

        batch = plan_batch(origins, planned)
        editor.document.apply_edits(batch.edits)
        editor.set_selections(batch.selections)
        editor.reveal(batch.selections[0].active)
        logger.debug("enter: expanded %d brace blocks", len(planned))
        return True


# =========================================================================
# Separator (":")
# =========================================================================


class SmartSeparatorHandler:
    """Typing ``:`` after a property name quotes it and spaces the value."""

    def __init__(self, config: SmartKeysConfig, forwarder: KeyForwarder) -> None:
        self.config = config
        self.forwarder = forwarder

    def execute(self, editor: SmartEditor) -> bool:
        cfg = self.config.structured_value
        document = editor.document
        selections = editor.selections
        if not is_structured_document(document.language_id):
            return self._fallback()
        if not (cfg.add_quotes_to_keys or cfg.add_whitespace_after_separator):
            return self._fallback()
        if len(selections) != 1 or not selections[0].is_empty:
            return self._fallback()

        active = selections[0].active
        lines = document.get_lines()
        if not 0 <= active.line < len(lines):
            return self._fallback()
        line_text = lines[active.line]
        char = min(active.character, len(line_text))

        if has_separator_after_cursor(line_text, char):
            return self._fallback()
        prop = find_property_name_before_cursor(line_text, char)
        if prop is None:
            return self._fallback()

        if prop.quoted or not cfg.add_quotes_to_keys:
            name = line_text[prop.start : prop.end]
        else:
            name = f'"{prop.name}"'
        inserted = name + SEPARATOR + (" " if cfg.add_whitespace_after_separator else "")

        line = active.line
        document.apply_edits(
            [TextEdit(Position(line, prop.start), Position(line, char), inserted)]
        )
        set_cursor_position(editor, line, prop.start + len(inserted))
        return True

    def _fallback(self) -> bool:
        self.forwarder.type_literal(SEPARATOR)
        return False
