"""Subtitle/text reformat and plain-text extraction processors.

WHY: The reflow library works on decoded text and returns text plus a unit
count. Users drop .srt and .txt files and expect a named output file and a
one-line summary. These processors are the bridge between the two.

HOW: Decodes the upload as UTF-8 (BOM tolerated), calls
reflow.process_text() with the processor's mode, and names the output
after the source file.

RULES:
- Reformat output: "FIXED_<stem>.srt" for subtitles, "FIXED_<stem>.txt" otherwise
- Extract output: always "TEXT_<stem>.txt"
- Undecodable bytes raise UnicodeDecodeError (a ValueError)
- Empty input raises reflow.EmptyInputError (a ValueError)
"""

from __future__ import annotations

from pathlib import Path

from reflow import Extract, Reformat, process_text
from reflow.presets import DEFAULT_MAX_LENGTH, DEFAULT_MIN_LENGTH

from media_assistant.config import TEXT_FORMATS
from media_assistant.processors.base import BaseProcessor, ProcessorOutput

SRT_MEDIA_TYPE = "application/x-subrip"
TEXT_MEDIA_TYPE = "text/plain"


def _decode(data: bytes) -> str:
    return data.decode("utf-8-sig")


class ReformatProcessor(BaseProcessor):
    """Merge short lines and split long ones, keeping subtitle timing.

    Args:
        min_length: Lines at or below this many characters are merged.
        max_length: Lines above this many characters are split.
    """

    def __init__(
        self,
        min_length: int = DEFAULT_MIN_LENGTH,
        max_length: int = DEFAULT_MAX_LENGTH,
    ) -> None:
        self.mode = Reformat(min_length=min_length, max_length=max_length)

    @property
    def name(self) -> str:
        return "Subtitle/Text Reformat"

    @property
    def extensions(self) -> set[str]:
        return TEXT_FORMATS

    def process(self, filename: str, data: bytes) -> ProcessorOutput:
        result = process_text(_decode(data), self.mode)
        stem = Path(filename).stem
        if result.is_subtitle:
            return ProcessorOutput(
                filename="FIXED_{}.srt".format(stem),
                content=result.output_text,
                media_type=SRT_MEDIA_TYPE,
                count=result.unit_count,
                message="Subtitle reformatted ({} cues)".format(result.unit_count),
            )
        return ProcessorOutput(
            filename="FIXED_{}.txt".format(stem),
            content=result.output_text,
            media_type=TEXT_MEDIA_TYPE,
            count=result.unit_count,
            message="Text reformatted ({} lines)".format(result.unit_count),
        )


class ExtractProcessor(BaseProcessor):
    """Strip timecodes and tags, leaving one line of text per cue."""

    mode = Extract()

    @property
    def name(self) -> str:
        return "Plain Text Extraction"

    @property
    def extensions(self) -> set[str]:
        return TEXT_FORMATS

    def process(self, filename: str, data: bytes) -> ProcessorOutput:
        result = process_text(_decode(data), self.mode)
        return ProcessorOutput(
            filename="TEXT_{}.txt".format(Path(filename).stem),
            content=result.output_text,
            media_type=TEXT_MEDIA_TYPE,
            count=result.unit_count,
            message="Text extracted ({} lines)".format(result.unit_count),
        )
