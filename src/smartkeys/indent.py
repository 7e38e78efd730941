"""Indentation inference and indent-zone helpers."""

from __future__ import annotations

import re
from typing import Sequence

_INDENT_TRIGGER_RE = re.compile(r"[{:(\[]\s*$")
_OPENING_TAG_RE = re.compile(r"<[\w.:$-]+(?:\s[^>]*)?>\s*$")
_LEADING_WS_RE = re.compile(r"^\s*")
_NON_WS_RE = re.compile(r"\S")

# Prefixes that look like tags but never open a nested block.
_NON_OPENING_TAG_PREFIXES = ("</", "<!--", "<!", "<?")


def find_previous_non_empty_line(
    lines: Sequence[str], from_line: int
) -> tuple[int, str] | None:
    """Scan upward from the line above *from_line* for one with content."""
    line_no = min(from_line, len(lines)) - 1
    while line_no >= 0:
        text = lines[line_no]
        if text.strip():
            return line_no, text
        line_no -= 1
    return None


def is_opening_tag(trimmed: str) -> bool:
    """HTML/JSX-like tag that opens a nested level (``<div>``, ``<>``)."""
    if not trimmed.startswith("<"):
        return False
    if trimmed.startswith(_NON_OPENING_TAG_PREFIXES):
        return False
    if trimmed.endswith("/>"):
        return False
    if trimmed == "<>":
        return True
    return _OPENING_TAG_RE.search(trimmed) is not None


def should_increase_indent(line_text: str) -> bool:
    trimmed = line_text.strip()
    return bool(_INDENT_TRIGGER_RE.search(trimmed)) or is_opening_tag(trimmed)


def get_indent_from_line(line_text: str) -> str:
    return _LEADING_WS_RE.match(line_text).group(0)


def indent_unit(tab_size: int = 4, insert_spaces: bool = True) -> str:
    if insert_spaces:
        return " " * max(1, tab_size)
    return "\t"


def calculate_indent(
    lines: Sequence[str],
    current_line: int,
    tab_size: int = 4,
    insert_spaces: bool = True,
) -> str:
    """Indent a new line at *current_line* should get.

    The previous non-empty line's indent, plus one indent unit when that line
    opens a block (see :func:`should_increase_indent`).
    """
    if current_line <= 0:
        return ""
    previous = find_previous_non_empty_line(lines, current_line)
    if previous is None:
        return ""
    _, prev_text = previous
    prev_indent = get_indent_from_line(prev_text)
    if not should_increase_indent(prev_text):
        return prev_indent
    return prev_indent + indent_unit(tab_size, insert_spaces)


# -- Cursor helpers ----------------------------------------------------------


def first_non_whitespace_index(line_text: str) -> int:
    """Column of the first non-whitespace character, 0 for blank lines."""
    match = _NON_WS_RE.search(line_text)
    return match.start() if match else 0


def is_in_indent_zone(line_text: str, cursor_char: int) -> bool:
    """Cursor at or before the first non-whitespace character of a non-blank line."""
    match = _NON_WS_RE.search(line_text)
    return match is not None and cursor_char <= match.start()
