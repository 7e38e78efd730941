"""Document model shared by the smart-key handlers and their hosts."""

from __future__ import annotations

from dataclasses import dataclass
from typing import Callable, Iterable, Protocol, Sequence


@dataclass(frozen=True, order=True)
class Position:
    """(line, character) into a document, both 0-based."""

    line: int
    character: int


@dataclass(frozen=True)
class Selection:
    anchor: Position
    active: Position

    @classmethod
    def caret(cls, line: int | Position, character: int = 0) -> Selection:
        """Empty selection at *line*/*character* (or at a ``Position``)."""
        pos = line if isinstance(line, Position) else Position(line, character)
        return cls(pos, pos)

    @property
    def is_empty(self) -> bool:
        return self.anchor == self.active

    @property
    def start(self) -> Position:
        return min(self.anchor, self.active)

    @property
    def end(self) -> Position:
        return max(self.anchor, self.active)


@dataclass(frozen=True)
class TextEdit:
    """Replace the half-open range [start, end) with *text*."""

    start: Position
    end: Position
    text: str = ""

    @classmethod
    def insert(cls, position: Position, text: str) -> TextEdit:
        return cls(position, position, text)

    @classmethod
    def delete(cls, start: Position, end: Position) -> TextEdit:
        return cls(start, end, "")

    @property
    def range(self) -> tuple[Position, Position]:
        return (self.start, self.end)

    @property
    def inserted_line_count(self) -> int:
        """Net number of lines this edit adds (negative when it removes lines)."""
        return self.text.count("\n") - (self.end.line - self.start.line)


@dataclass
class FormattingOptions:
    tab_size: int = 4
    insert_spaces: bool = True


class TextDocument:
    """An in-memory, line-oriented document.

    All mutation goes through :meth:`apply_edits` (or :meth:`set_text`), which
    bumps :attr:`version` and notifies the listeners registered with
    :meth:`on_did_change`.
    """

    def __init__(
        self,
        content: str = "",
        *,
        uri: str = "untitled:1",
        language_id: str = "plaintext",
    ) -> None:
        self.lines: list[str] = content.split("\n") if content else [""]
        self.uri: str = uri
        self.language_id: str = language_id
        self.version: int = 0
        self._listeners: list[Callable[[TextDocument], None]] = []

    # -- Queries -----------------------------------------------------------

    @property
    def line_count(self) -> int:
        return len(self.lines)

    def line_at(self, index: int) -> str:
        if not 0 <= index < len(self.lines):
            raise IndexError(f"line {index} out of range (0..{len(self.lines) - 1})")
        return self.lines[index]

    def get_lines(self) -> list[str]:
        """Snapshot copy of the lines."""
        return self.lines[:]

    def get_text(self) -> str:
        return "\n".join(self.lines)

    def is_valid_position(self, position: Position) -> bool:
        return (
            0 <= position.line < len(self.lines)
            and 0 <= position.character <= len(self.lines[position.line])
        )

    # -- Mutation ----------------------------------------------------------

    def on_did_change(self, callback: Callable[[TextDocument], None]) -> None:
        self._listeners.append(callback)

    def set_text(self, content: str) -> None:
        self.lines = content.split("\n") if content else [""]
        self._changed()

    def apply_edits(self, edits: Iterable[TextEdit]) -> None:
        """Apply *edits* as one atomic batch.

        Every range is expressed against the document as it is before the
        batch. Ranges must lie inside the document and must not overlap.
        """
        ordered = sorted(edits, key=lambda e: (e.start, e.end))
        if not ordered:
            return
        prev_end: Position | None = None
        for edit in ordered:
            if edit.end < edit.start:
                raise ValueError(f"inverted range {edit.start} > {edit.end}")
            if not (
                self.is_valid_position(edit.start) and self.is_valid_position(edit.end)
            ):
                raise ValueError(f"edit range out of bounds: {edit.start}..{edit.end}")
            if prev_end is not None and edit.start < prev_end:
                raise ValueError(f"overlapping edits at {edit.start}")
            prev_end = edit.end
        # Bottom-up so earlier coordinates stay valid.
        for edit in reversed(ordered):
            self._replace(edit)
        self._changed()

    def _replace(self, edit: TextEdit) -> None:
        lines = self.lines
        head = lines[edit.start.line][: edit.start.character]
        tail = lines[edit.end.line][edit.end.character :]
        lines[edit.start.line : edit.end.line + 1] = (head + edit.text + tail).split(
            "\n"
        )

    def _changed(self) -> None:
        self.version += 1
        for callback in self._listeners:
            callback(self)


class SmartEditor(Protocol):
    """What a handler needs from the host editor."""

    document: TextDocument
    options: FormattingOptions

    @property
    def selections(self) -> Sequence[Selection]: ...

    def set_selections(self, selections: Sequence[Selection]) -> None: ...

    def reveal(self, position: Position) -> None: ...


class KeyForwarder(Protocol):
    """Default keystroke behavior a handler falls back to."""

    def type_literal(self, text: str) -> None: ...

    def forward_default_newline(self) -> None: ...

    def forward_default_delete(self) -> None: ...

    def forward_default_end(self) -> None: ...
