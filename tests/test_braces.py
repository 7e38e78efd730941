"""Tests for the brace balance scan."""

from smartkeys.braces import (
    count_unmatched_braces,
    is_brace_unmatched,
    should_insert_closing_brace,
)


class TestCountUnmatched:
    def test_empty_document(self):
        assert count_unmatched_braces([]) == 0
        assert count_unmatched_braces([""]) == 0

    def test_balanced(self):
        assert count_unmatched_braces(["function a() {", "    return 1;", "}"]) == 0

    def test_unclosed(self):
        assert count_unmatched_braces(["if (a) {", "    if (b) {"]) == 2

    def test_extra_closing_is_ignored(self):
        assert count_unmatched_braces(["}}}", "{"]) == 1

    def test_invariant_under_matched_pairs(self):
        lines = ["a {", "b {", "}"]
        base = count_unmatched_braces(lines)
        assert count_unmatched_braces(["{}"] + lines) == base
        assert count_unmatched_braces(["a {{}", "b {", "}{}"]) == base

    def test_invariant_under_trailing_closers_when_balanced(self):
        lines = ["x {", "}"]
        assert count_unmatched_braces(lines + ["}}}"]) == 0

    def test_braces_in_strings_count(self):
        assert count_unmatched_braces(['const s = "{";']) == 1


class TestIsUnmatched:
    def test_both_nested_braces_unmatched(self):
        lines = ["function outer() {", "    function inner() {"]
        assert is_brace_unmatched(lines, 1, 21) is True
        assert is_brace_unmatched(lines, 0, 17) is True

    def test_matched_brace(self):
        lines = ["a {", "}"]
        assert is_brace_unmatched(lines, 0, 2) is False

    def test_lifo_steals_innermost(self):
        # The stray "}" closes the most recent brace (line 1), not line 0.
        lines = ["outer {", "    inner {", "}"]
        assert is_brace_unmatched(lines, 1, 10) is False
        assert is_brace_unmatched(lines, 0, 6) is True

    def test_out_of_range_target(self):
        assert is_brace_unmatched(["{"], 5, 0) is False
        assert is_brace_unmatched(["{"], 0, 9) is False


class TestShouldInsertClosing:
    def test_unmatched_brace(self):
        assert should_insert_closing_brace(["function test() {"], 0, 16) is True

    def test_balanced_block(self):
        lines = ["function test() {", "    return 1;", "}"]
        assert should_insert_closing_brace(lines, 0, 16) is False

    def test_brace_absorbing_outer_closer(self):
        # The inner brace takes the "}" meant for the outer block.
        lines = ["function outer() {", "    const inner = () => {", "}"]
        assert is_brace_unmatched(lines, 1, 24) is False
        assert should_insert_closing_brace(lines, 1, 24) is True

    def test_not_a_brace(self):
        assert should_insert_closing_brace(["abc"], 0, 1) is False

    def test_out_of_range(self):
        assert should_insert_closing_brace(["{"], -1, 0) is False
        assert should_insert_closing_brace(["{"], 1, 0) is False
        assert should_insert_closing_brace(["{"], 0, 1) is False

    def test_matches_definition(self):
        cases = [
            (["a {", "b {", "}", "}"], 1, 2),
            (["a {", "b {", "}"], 0, 2),
            (["{ { }"], 0, 0),
            (["x", "{", "}", "}"], 1, 0),
        ]
        for lines, line, char in cases:
            removed = list(lines)
            removed[line] = lines[line][:char] + lines[line][char + 1 :]
            expected = is_brace_unmatched(lines, line, char) or (
                count_unmatched_braces(removed) < count_unmatched_braces(lines)
            )
            assert should_insert_closing_brace(lines, line, char) is expected
