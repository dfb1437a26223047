"""Tests for the reflow entry points: process_text, preview_text, mode_from_name."""

from __future__ import annotations

import pytest

from reflow import (
    EmptyInputError,
    Extract,
    Reformat,
    mode_from_name,
    preview_text,
    process_text,
    validate_bounds,
)


# ---------------------------------------------------------------------------
# process_text
# ---------------------------------------------------------------------------


class TestProcessText:

    def test_short_cues_merge(self, short_pair_srt):
        result = process_text(short_pair_srt, Reformat(min_length=10, max_length=32))
        assert result.is_subtitle
        assert result.unit_count == 1
        assert result.output_text == "1\n00:00:01,000 --> 00:00:05,000\nHi There"

    def test_extract_subtitle_one_line_per_cue(self, three_cue_srt):
        result = process_text(three_cue_srt, Extract())
        assert result.unit_count == 3
        assert result.output_text.split("\n") == [
            "Good evening.",
            "Welcome to the news",
            "Tonight's top story.",
        ]

    def test_extract_ignores_bounds(self, three_cue_srt):
        a = process_text(three_cue_srt, mode_from_name("extract", 1, 5))
        b = process_text(three_cue_srt, mode_from_name("extract", 20, 50))
        assert a.output_text == b.output_text

    def test_plain_reformat(self):
        result = process_text("aaaa bbbb cccc dddd eeee ffff gggg hhhhh", Reformat(10, 20))
        assert not result.is_subtitle
        assert result.output_text == "aaaa bbbb cccc dddd\neeee ffff gggg hhhhh"
        assert result.unit_count == 2

    def test_plain_extract_cleans_lines(self):
        result = process_text("  one  \n\n two \n", Extract())
        assert result.output_text == "one\ntwo"
        assert result.unit_count == 2

    def test_bom_stripped(self, short_pair_srt):
        result = process_text("\ufeff" + short_pair_srt, Reformat())
        assert result.output_text.startswith("1\n")

    def test_dropped_blocks_reported(self):
        content = "garbage block\n\n1\n00:00:01,000 --> 00:00:02,000\nkept line here"
        result = process_text(content, Reformat())
        assert result.dropped_blocks == 1
        assert result.unit_count == 1

    @pytest.mark.parametrize("raw", ["", "   \n\t", "\ufeff"])
    def test_empty_input_raises(self, raw):
        with pytest.raises(EmptyInputError, match="empty"):
            process_text(raw, Reformat())

    def test_empty_input_error_is_value_error(self):
        assert issubclass(EmptyInputError, ValueError)


# ---------------------------------------------------------------------------
# preview_text
# ---------------------------------------------------------------------------


class TestPreviewText:

    def test_empty_input_gives_empty_preview(self):
        assert preview_text("", Reformat()) == ""

    def test_short_output_not_truncated(self, three_cue_srt):
        assert preview_text(three_cue_srt, Extract()) == (
            "Good evening.\nWelcome to the news\nTonight's top story."
        )

    def test_truncates_to_five_lines_with_ellipsis(self):
        raw = "\n".join("line {}".format(n) for n in range(1, 11))
        assert preview_text(raw, Extract()) == (
            "line 1\nline 2\nline 3\nline 4\nline 5\n..."
        )

    def test_subtitle_preview_merges(self, short_pair_srt):
        preview = preview_text(short_pair_srt, Reformat())
        assert preview == "1\n00:00:01,000 --> 00:00:05,000\nHi There"

    def test_long_subtitle_preview_ends_with_ellipsis(self, three_cue_srt):
        lines = preview_text(three_cue_srt, Reformat()).split("\n")
        assert len(lines) == 6
        assert lines[-1] == "..."
        assert lines[0] == "1"

    def test_unit_cap_adds_ellipsis(self):
        # Only ab0..ab7 are processed; they merge into one 31-char line
        raw = "\n".join("ab{}".format(n) for n in range(100))
        assert preview_text(raw, Reformat(10, 32)) == "ab0 ab1 ab2 ab3 ab4 ab5 ab6 ab7\n..."

    def test_char_cut_adds_ellipsis(self, three_cue_srt):
        raw = three_cue_srt + "\n\n4\n00:00:06,000 --> 00:00:07,000\n" + "x" * 6000
        lines = preview_text(raw, Extract()).split("\n")
        assert lines[:3] == ["Good evening.", "Welcome to the news", "Tonight's top story."]
        assert len(lines) == 5
        assert lines[-1] == "..."

    def test_trailing_whitespace_after_cut_is_not_truncation(self):
        raw = "one line" + " " * 6000
        assert preview_text(raw, Extract()) == "one line"


# ---------------------------------------------------------------------------
# Modes and bounds
# ---------------------------------------------------------------------------


class TestModeFromName:

    def test_reformat(self):
        assert mode_from_name("Reformat", 8, 28) == Reformat(min_length=8, max_length=28)

    def test_extract(self):
        assert mode_from_name("EXTRACT") == Extract()

    def test_unknown(self):
        with pytest.raises(ValueError, match="Unknown mode"):
            mode_from_name("shuffle")


class TestValidateBounds:

    def test_valid(self):
        validate_bounds(10, 32)
        validate_bounds(50, 50)

    def test_min_below_one(self):
        with pytest.raises(ValueError, match="at least 1"):
            validate_bounds(0, 32)

    def test_max_above_limit(self):
        with pytest.raises(ValueError, match="at most 50"):
            validate_bounds(10, 51)

    def test_min_above_max(self):
        with pytest.raises(ValueError, match="must not exceed"):
            validate_bounds(20, 10)
