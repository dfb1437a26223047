"""Shared test fixtures for the media_assistant / reflow test suite.

WHY: Several test modules need the same small subtitle and text documents.
Centralizing them here keeps expected values in one place.

HOW: Module-level constants hold the raw documents; fixtures return them
(or write them to tmp_path for file-system tests).

RULES:
- Sample documents use LF newlines unless a test is about CRLF handling.
- Expected outputs in tests are derived by hand from these samples.
"""

from __future__ import annotations

import gzip
from pathlib import Path

import pytest


# ---------------------------------------------------------------------------
# Sample documents
# ---------------------------------------------------------------------------

SHORT_PAIR_SRT = (
    "1\n00:00:01,000 --> 00:00:03,000\nHi\n\n"
    "2\n00:00:03,000 --> 00:00:05,000\nThere"
)

THREE_CUE_SRT = (
    "1\n00:00:01,000 --> 00:00:02,500\n<i>Good evening.</i>\n\n"
    "2\n00:00:02,500 --> 00:00:04,000\nWelcome to the\n<b>news</b>\n\n"
    "3\n00:00:04,000 --> 00:00:06,000\nTonight's top story."
)

# Hangul syllable "한" in composed (NFC) and decomposed (NFD) form
HAN_NFC = "\ud55c"
HAN_NFD = "\u1112\u1161\u11ab"

PROJECT_XML_NFD = '<?xml version="1.0"?><Project><Path>/media/{}.mov</Path></Project>'.format(HAN_NFD)
PROJECT_XML_NFC = '<?xml version="1.0"?><Project><Path>/media/{}.mov</Path></Project>'.format(HAN_NFC)


@pytest.fixture
def short_pair_srt():
    """Two short cues that merge into one."""
    return SHORT_PAIR_SRT


@pytest.fixture
def three_cue_srt():
    """Three cues with markup, one spread over two text lines."""
    return THREE_CUE_SRT


@pytest.fixture
def srt_file(tmp_path: Path) -> Path:
    """THREE_CUE_SRT written to tmp_path/episode.srt."""
    path = tmp_path / "episode.srt"
    path.write_text(THREE_CUE_SRT, encoding="utf-8")
    return path


@pytest.fixture
def txt_file(tmp_path: Path) -> Path:
    """A plain text transcript with one over-long line."""
    path = tmp_path / "notes.txt"
    path.write_text(
        "aaaa bbbb cccc dddd eeee ffff gggg hhhhh\nshort\n", encoding="utf-8"
    )
    return path


@pytest.fixture
def mac_project_bytes() -> bytes:
    """A gzipped .prproj whose media path is in NFD (saved on macOS)."""
    return gzip.compress(PROJECT_XML_NFD.encode("utf-8"))


@pytest.fixture
def prproj_file(tmp_path: Path, mac_project_bytes: bytes) -> Path:
    path = tmp_path / "edit.prproj"
    path.write_bytes(mac_project_bytes)
    return path


@pytest.fixture
def project_xml_nfc() -> str:
    """Project XML with the media path in composed (Windows) form."""
    return PROJECT_XML_NFC


@pytest.fixture
def project_xml_nfd() -> str:
    """Project XML with the media path in decomposed (macOS) form."""
    return PROJECT_XML_NFD
