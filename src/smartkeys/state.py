"""Per-document End toggle state."""

from __future__ import annotations

import logging
from dataclasses import dataclass

from smartkeys.document import Position

logger = logging.getLogger(__name__)

# The End handler's own cursor placement may land one column away from the
# recorded position without invalidating it.
CURSOR_TOLERANCE = 1


@dataclass(frozen=True)
class EndToggleState:
    line: int
    character: int
    at_trimmed_end: bool


class EndToggleTracker:
    """Last End result per document, keyed by an opaque document id.

    Written by the End handler only. The host invalidates entries through
    :meth:`on_document_changed` and :meth:`on_selection_changed`.
    """

    def __init__(self) -> None:
        self._states: dict[str, EndToggleState] = {}

    def __len__(self) -> int:
        return len(self._states)

    def __contains__(self, document_id: object) -> bool:
        return document_id in self._states

    def get(self, document_id: str) -> EndToggleState | None:
        return self._states.get(document_id)

    def lookup(self, document_id: str, position: Position) -> EndToggleState | None:
        """State for *document_id*, or None if *position* has drifted away from it."""
        state = self._states.get(document_id)
        if state is None or self._is_stale(state, position):
            return None
        return state

    def record(
        self, document_id: str, line: int, character: int, at_trimmed_end: bool
    ) -> None:
        self._states[document_id] = EndToggleState(line, character, at_trimmed_end)

    def invalidate(self, document_id: str) -> None:
        if self._states.pop(document_id, None) is not None:
            logger.debug("end toggle state dropped for %s", document_id)

    def clear(self) -> None:
        self._states.clear()

    # -- Reset rule --------------------------------------------------------

    @staticmethod
    def _is_stale(state: EndToggleState, position: Position) -> bool:
        return (
            position.line != state.line
            or abs(position.character - state.character) > CURSOR_TOLERANCE
        )

    def should_reset_on_cursor_move(
        self, document_id: str, line: int, character: int
    ) -> bool:
        state = self._states.get(document_id)
        if state is None:
            return False
        return self._is_stale(state, Position(line, character))

    # -- Notification adapters ---------------------------------------------

    def on_selection_changed(self, document_id: str, active: Position) -> None:
        if self.should_reset_on_cursor_move(document_id, active.line, active.character):
            self.invalidate(document_id)

    def on_document_changed(self, document_id: str) -> None:
        self.invalidate(document_id)
