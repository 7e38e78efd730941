"""Curly brace balance checks over a snapshot of document lines.

The scan is purely textual: braces inside strings or comments count like any
other brace. Matching is LIFO, so a ``}`` always closes the most recently
opened brace that is still on the stack. A stray ``}`` below several nested
unmatched braces therefore "steals" the innermost one, leaving the outer
braces unmatched; a ``}`` with an empty stack is ignored.
"""

from __future__ import annotations

from typing import Sequence


def _unmatched_braces(lines: Sequence[str]) -> list[tuple[int, int]]:
    """Return ``(line, char)`` of every ``{`` left open after a full scan."""
    stack: list[tuple[int, int]] = []
    for line_no, text in enumerate(lines):
        for col, ch in enumerate(text):
            if ch == "{":
                stack.append((line_no, col))
            elif ch == "}" and stack:
                stack.pop()
    return stack


def count_unmatched_braces(lines: Sequence[str]) -> int:
    return len(_unmatched_braces(lines))


def is_brace_unmatched(
    lines: Sequence[str], target_line: int, target_char: int
) -> bool:
    """True if the ``{`` at (*target_line*, *target_char*) stays open."""
    return (target_line, target_char) in _unmatched_braces(lines)


def should_insert_closing_brace(
    lines: Sequence[str], target_line: int, target_char: int
) -> bool:
    """Decide whether the ``{`` at the target position needs a synthesized ``}``.

    Yes when the brace is unmatched, or when removing it lowers the unmatched
    count: the brace is then absorbing a ``}`` that belongs to an outer,
    earlier brace, so closing it restores the outer balance.
    """
    if not 0 <= target_line < len(lines):
        return False
    text = lines[target_line]
    if not 0 <= target_char < len(text) or text[target_char] != "{":
        return False

    if is_brace_unmatched(lines, target_line, target_char):
        return True

    before = count_unmatched_braces(lines)
    modified = list(lines)
    modified[target_line] = text[:target_char] + text[target_char + 1 :]
    return count_unmatched_braces(modified) < before
