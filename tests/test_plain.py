"""Tests for reflow.plain: the untimed line adapter."""

from __future__ import annotations

from reflow.core import visible_len
from reflow.models import Line
from reflow.plain import parse_lines, reformat_lines, serialize_lines

PLAIN_TEXT = "  first line  \n\nsecond line\r\nthird line\n"


class TestParseLines:

    def test_trims_and_drops_blank_lines(self):
        assert parse_lines(PLAIN_TEXT) == [
            Line("first line"),
            Line("second line"),
            Line("third line"),
        ]

    def test_whitespace_only(self):
        assert parse_lines(" \n\t\n") == []


class TestReformatLines:

    def test_long_line_splits_in_two(self):
        text = "aaaa bbbb cccc dddd eeee ffff gggg hhhhh"
        assert len(text) == 40
        result = reformat_lines([Line(text)], 10, 20)
        assert len(result) == 2
        assert all(visible_len(line.text) <= 20 for line in result)
        assert " ".join(line.text for line in result) == text

    def test_short_line_merged_with_previous(self):
        result = reformat_lines([Line("a sentence that goes"), Line("on")], 10, 32)
        assert result == [Line("a sentence that goes on")]

    def test_serialize_joins_with_newline(self):
        assert serialize_lines([Line("a"), Line("b")]) == "a\nb"
