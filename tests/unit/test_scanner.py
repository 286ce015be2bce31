"""Tests for the line scanner — classification, indentation, line splitting."""

import pytest

from opmark.parsers.scanner import (
    MAX_INDENT_LEVEL,
    LineKind,
    classify,
    indent_level,
    scan,
    split_lines,
)


class TestClassify:
    @pytest.mark.parametrize(
        "raw, kind",
        [
            ("", LineKind.BLANK),
            ("   \t ", LineKind.BLANK),
            ("---", LineKind.PAGE_BREAK),
            ("  ---  ", LineKind.PAGE_BREAK),
            ("----", LineKind.SEPARATOR),
            ("----v", LineKind.SEPARATOR),
            ("---t", LineKind.TRANSITION),
            ("---t3", LineKind.TRANSITION),
            ("t---", LineKind.TRANSITION_END),
            ("```python", LineKind.FENCE),
            ("## Title", LineKind.HEADING),
            ("1. first", LineKind.ORDERED_ITEM),
            ("- item", LineKind.UNORDERED_ITEM),
            ("> quoted", LineKind.QUOTE),
            ("plain words", LineKind.TEXT),
        ],
    )
    def test_kinds(self, raw, kind):
        assert classify(raw).kind is kind

    @pytest.mark.parametrize(
        "raw",
        ["#hashtag", "-dash", "1.5 apples", "-----", "---x", "---tx", ">no space", "#"],
    )
    def test_lookalikes_fall_back_to_text(self, raw):
        line = classify(raw)
        assert line.kind is LineKind.TEXT
        assert line.text == raw

    def test_heading_level_and_text(self):
        line = classify("### Title here")
        assert line.value == "3"
        assert line.text == "Title here"

    def test_ordered_item_keeps_written_number(self):
        line = classify("12. twelfth")
        assert line.value == "12"
        assert line.text == "twelfth"

    def test_separator_direction(self):
        assert classify("----").value is None
        assert classify("----v").value == "v"

    def test_transition_order(self):
        assert classify("---t").value is None
        assert classify("---t7").value == "7"

    def test_fence_language(self):
        assert classify("```").value is None
        assert classify("```rust").value == "rust"

    def test_text_is_trimmed(self):
        line = classify("   some text  ")
        assert line.text == "some text"
        assert line.raw == "   some text  "

    def test_line_number_recorded(self):
        assert classify("x", 42).number == 42


class TestIndent:
    def test_two_spaces_per_level(self):
        assert indent_level("- a") == 0
        assert indent_level("  - a") == 1
        assert indent_level("    - a") == 2
        assert indent_level("   - a") == 1

    def test_tab_counts_as_one_level(self):
        assert indent_level("\t- a") == 1

    def test_capped(self):
        assert indent_level(" " * 40 + "- a") == MAX_INDENT_LEVEL

    def test_list_items_carry_indent(self):
        assert classify("    1. nested").indent == 2
        assert classify("  - nested").indent == 1


class TestScan:
    def test_empty_input(self):
        assert list(scan("")) == []

    def test_trailing_newline_adds_no_line(self):
        assert list(split_lines("a\nb\n")) == ["a", "b"]

    def test_mixed_line_endings(self):
        assert list(split_lines("a\r\nb\rc\nd")) == ["a", "b", "c", "d"]

    def test_blank_lines_preserved(self):
        assert list(split_lines("a\n\nb")) == ["a", "", "b"]

    def test_numbers_lines_from_one(self):
        lines = list(scan("# A\n\ntext"))
        assert [line.number for line in lines] == [1, 2, 3]
        assert [line.kind for line in lines] == [
            LineKind.HEADING,
            LineKind.BLANK,
            LineKind.TEXT,
        ]

    def test_is_lazy(self):
        lines = scan("a\nb\nc")
        assert next(lines).text == "a"
