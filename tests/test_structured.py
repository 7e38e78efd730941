"""Tests for key/value punctuation predicates."""

from smartkeys.structured import (
    PropertyName,
    ends_with_value,
    find_property_name_before_cursor,
    has_separator_after_cursor,
    is_structured_document,
    line_needs_terminator,
    terminator_column,
)


class TestStructuredDocument:
    def test_json_variants(self):
        assert is_structured_document("json")
        assert is_structured_document("jsonc")

    def test_other_languages(self):
        assert not is_structured_document("plaintext")
        assert not is_structured_document("yaml")


class TestLineNeedsTerminator:
    def test_finished_values(self):
        for line in [
            '    "name": "value"',
            '"count": 42',
            '"ok": true',
            '"ok": false',
            '"nothing": null',
            '"obj": {}',
            '"arr": [1, 2]',
        ]:
            assert line_needs_terminator(line), line

    def test_already_terminated(self):
        assert not line_needs_terminator('"a": 1,')

    def test_without_separator(self):
        assert not line_needs_terminator('"just a string"')
        assert not line_needs_terminator("42")

    def test_unfinished_values(self):
        assert not line_needs_terminator('"obj": {')
        assert not line_needs_terminator('"arr": [')
        assert not line_needs_terminator('"a": ')

    def test_blank(self):
        assert not line_needs_terminator("")
        assert not line_needs_terminator("    ")

    def test_ends_with_value_empty(self):
        assert not ends_with_value("")

    def test_terminator_column_before_trailing_blanks(self):
        assert terminator_column('"a": 1   ') == 6


class TestPropertyName:
    def test_bare_name(self):
        assert find_property_name_before_cursor("  name", 6) == PropertyName(
            "name", False, 2, 6, 0
        )

    def test_bare_name_with_trailing_whitespace(self):
        prop = find_property_name_before_cursor("name  ", 6)
        assert prop == PropertyName("name", False, 0, 4, 2)

    def test_dotted_name(self):
        prop = find_property_name_before_cursor("workbench.statusBar.visible", 27)
        assert prop.name == "workbench.statusBar.visible"

    def test_quoted_name(self):
        prop = find_property_name_before_cursor('    "my key" ', 13)
        assert prop == PropertyName("my key", True, 4, 12, 1)

    def test_no_name(self):
        assert find_property_name_before_cursor("{", 1) is None
        assert find_property_name_before_cursor('"a": 12', 7) is None
        assert find_property_name_before_cursor("   ", 3) is None
        assert find_property_name_before_cursor("", 0) is None

    def test_only_text_before_cursor_counts(self):
        assert find_property_name_before_cursor("name", 2).name == "na"


class TestSeparatorAfterCursor:
    def test_present(self):
        assert has_separator_after_cursor('"a"  : 1', 3)
        assert has_separator_after_cursor('"a":', 3)

    def test_absent(self):
        assert not has_separator_after_cursor('"a"', 3)
        assert not has_separator_after_cursor('"a" x:', 3)
