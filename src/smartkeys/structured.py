"""Punctuation heuristics for JSON-like key/value lines.

Each classification is a small predicate so it can be tested on its own.
Like the brace scan, none of this looks inside string literals.
"""

from __future__ import annotations

import re
from dataclasses import dataclass

STRUCTURED_LANGUAGES = frozenset({"json", "jsonc"})

TERMINATOR = ","
SEPARATOR = ":"
VALUE_KEYWORDS = ("true", "false", "null")

_QUOTED_NAME_RE = re.compile(r'"([^"]+)"(\s*)$')
_BARE_NAME_RE = re.compile(
    r"([a-zA-Z_$][a-zA-Z0-9_$]*(?:\.[a-zA-Z_$][a-zA-Z0-9_$]*)*)(\s*)$"
)


@dataclass(frozen=True)
class PropertyName:
    """A property name found right before the cursor."""

    name: str
    quoted: bool
    start: int  # column of the opening quote (or first char when bare)
    end: int  # column just past the closing quote (or last char)
    trailing_whitespace: int


def is_structured_document(language_id: str) -> bool:
    return language_id in STRUCTURED_LANGUAGES


def ends_with_value(trimmed: str) -> bool:
    """Trimmed line ends with a complete value: string, object, array, number or keyword."""
    if not trimmed:
        return False
    return (
        trimmed.endswith(('"', "}", "]"))
        or trimmed[-1] in "0123456789"
        or trimmed.endswith(VALUE_KEYWORDS)
    )


def line_needs_terminator(line_text: str) -> bool:
    trimmed = line_text.strip()
    if not trimmed or trimmed.endswith(TERMINATOR):
        return False
    if SEPARATOR not in trimmed:
        return False
    return ends_with_value(trimmed)


def terminator_column(line_text: str) -> int:
    """Where the terminator goes: right after the content, before trailing blanks."""
    return len(line_text.rstrip())


def has_separator_after_cursor(line_text: str, cursor_char: int) -> bool:
    return line_text[cursor_char:].strip().startswith(SEPARATOR)


def find_property_name_before_cursor(
    line_text: str, cursor_char: int
) -> PropertyName | None:
    """Quoted (``"name"``) or bare (``name``, ``a.b.c``) token ending at the cursor.

    Whitespace between the token and the cursor is allowed and reported in
    ``trailing_whitespace``.
    """
    before = line_text[:cursor_char]

    match = _QUOTED_NAME_RE.search(before)
    if match:
        name, trailing = match.group(1), match.group(2)
        start = match.start()
        return PropertyName(name, True, start, start + len(name) + 2, len(trailing))

    match = _BARE_NAME_RE.search(before)
    if match:
        name, trailing = match.group(1), match.group(2)
        start = match.start()
        return PropertyName(name, False, start, start + len(name), len(trailing))

    return None
