"""Tests for the processor registry and the three file tools."""

from __future__ import annotations

import gzip

import pytest

from reflow import EmptyInputError

from media_assistant.processors import PROCESSORS, create_processor
from media_assistant.processors.project_fixer import (
    FixDirection,
    ProjectFixError,
    ProjectFixProcessor,
    fix_project_bytes,
)
from media_assistant.processors.text_reflow import ExtractProcessor, ReformatProcessor


# ---------------------------------------------------------------------------
# Registry
# ---------------------------------------------------------------------------


class TestRegistry:

    def test_all_tools_registered(self):
        assert set(PROCESSORS) == {"reformat", "extract", "fix_project"}

    def test_create_reformat_with_bounds(self):
        processor = create_processor("reformat", min_length=5, max_length=20)
        assert processor.mode.min_length == 5
        assert processor.mode.max_length == 20

    def test_create_fix_project_direction(self):
        processor = create_processor("fix_project", direction="win_to_mac")
        assert processor.direction is FixDirection.WIN_TO_MAC

    def test_unknown_tool(self):
        with pytest.raises(ValueError, match="Unknown tool"):
            create_processor("transcode")

    def test_invalid_direction(self):
        with pytest.raises(ValueError):
            create_processor("fix_project", direction="sideways")

    def test_accepts_by_extension(self):
        assert ReformatProcessor().accepts("EPISODE.SRT")
        assert not ReformatProcessor().accepts("edit.prproj")
        assert ProjectFixProcessor().accepts("edit.prproj")


# ---------------------------------------------------------------------------
# Text tools
# ---------------------------------------------------------------------------


class TestReformatProcessor:

    def test_subtitle_output(self, short_pair_srt):
        out = ReformatProcessor().process("ep01.srt", short_pair_srt.encode("utf-8"))
        assert out.filename == "FIXED_ep01.srt"
        assert out.media_type == "application/x-subrip"
        assert out.count == 1
        assert out.message == "Subtitle reformatted (1 cues)"
        assert out.content == "1\n00:00:01,000 --> 00:00:05,000\nHi There"

    def test_plain_text_output(self):
        data = "aaaa bbbb cccc dddd eeee ffff gggg hhhhh".encode("utf-8")
        out = ReformatProcessor(max_length=20).process("notes.txt", data)
        assert out.filename == "FIXED_notes.txt"
        assert out.media_type == "text/plain"
        assert out.message == "Text reformatted (2 lines)"

    def test_detected_format_decides_extension(self, short_pair_srt):
        out = ReformatProcessor().process("export.txt", short_pair_srt.encode("utf-8"))
        assert out.filename == "FIXED_export.srt"

    def test_bom_accepted(self, short_pair_srt):
        out = ReformatProcessor().process("a.srt", b"\xef\xbb\xbf" + short_pair_srt.encode("utf-8"))
        assert out.count == 1

    def test_empty_file(self):
        with pytest.raises(EmptyInputError):
            ReformatProcessor().process("empty.srt", b"")

    def test_undecodable_bytes(self):
        with pytest.raises(UnicodeDecodeError):
            ReformatProcessor().process("bad.txt", b"\xff\xfe\x00bad")


class TestExtractProcessor:

    def test_output(self, three_cue_srt):
        out = ExtractProcessor().process("ep01.srt", three_cue_srt.encode("utf-8"))
        assert out.filename == "TEXT_ep01.txt"
        assert out.count == 3
        assert out.message == "Text extracted (3 lines)"
        assert out.content.split("\n")[0] == "Good evening."


# ---------------------------------------------------------------------------
# Project fixer
# ---------------------------------------------------------------------------


class TestFixProjectBytes:

    def test_mac_to_win_composes(self, mac_project_bytes, project_xml_nfc):
        fixed, changed = fix_project_bytes(mac_project_bytes, FixDirection.MAC_TO_WIN)
        assert changed == 1
        assert fixed[:2] == b"\x1f\x8b"
        assert gzip.decompress(fixed).decode("utf-8") == project_xml_nfc

    def test_win_to_mac_decomposes(self, project_xml_nfc, project_xml_nfd):
        data = gzip.compress(project_xml_nfc.encode("utf-8"))
        fixed, changed = fix_project_bytes(data, FixDirection.WIN_TO_MAC)
        assert changed == 1
        assert gzip.decompress(fixed).decode("utf-8") == project_xml_nfd

    def test_already_normalized_reports_no_change(self, project_xml_nfc):
        data = gzip.compress(project_xml_nfc.encode("utf-8"))
        _, changed = fix_project_bytes(data, FixDirection.MAC_TO_WIN)
        assert changed == 0

    def test_uncompressed_xml_stays_uncompressed(self, project_xml_nfc, project_xml_nfd):
        fixed, changed = fix_project_bytes(
            project_xml_nfd.encode("utf-8"), FixDirection.MAC_TO_WIN
        )
        assert changed == 1
        assert fixed.decode("utf-8") == project_xml_nfc

    def test_corrupted_gzip(self):
        with pytest.raises(ProjectFixError, match="corrupted"):
            fix_project_bytes(b"\x1f\x8b\x08\x00garbage", FixDirection.MAC_TO_WIN)

    def test_truncated_gzip(self, mac_project_bytes):
        with pytest.raises(ProjectFixError):
            fix_project_bytes(mac_project_bytes[:12], FixDirection.MAC_TO_WIN)

    def test_not_utf8(self):
        with pytest.raises(ProjectFixError, match="UTF-8"):
            fix_project_bytes(b"\xff\xfe<xml/>", FixDirection.MAC_TO_WIN)

    def test_error_is_value_error(self):
        assert issubclass(ProjectFixError, ValueError)


class TestProjectFixProcessor:

    def test_output_naming(self, mac_project_bytes):
        out = ProjectFixProcessor().process("edit.prproj", mac_project_bytes)
        assert out.filename == "FIXED_edit.prproj"
        assert out.media_type == "application/x-premiere-project"
        assert out.message == "Project converted (encoding fixed)"
        assert isinstance(out.content, bytes)
