"""SubRip parsing, timed split pass, serialization and format detection.

WHY: Subtitle cues carry timing, so splitting or merging them must also
move their start/end times. This module wraps the shared engine in
core.py with everything that is specific to .srt files.

HOW: parse_srt() turns raw text into Cue objects (dropping unusable
blocks), split_long_cues() chunks over-long cues and interpolates their
times proportionally, reformat_cues() runs the split pass and the
merge/balance engine, and serialize_srt() renumbers and writes the result.

RULES:
- Output always uses a comma as millisecond separator, whatever the input.
- Child cues of a split partition the parent interval contiguously: the
  first starts at the parent's start, the last ends at the parent's end.
- Duration shares use stripped text length, like every other length check.
- Unparseable blocks are skipped and counted, never raised.
"""

import logging
import re
from typing import List, Tuple

from .core import chunk, format_time, optimize, parse_time, strip_tags, visible_len
from .models import Cue

logger = logging.getLogger(__name__)

TIMECODE_RE = re.compile(
    r"(\d{1,2}:\d{2}:\d{2}[,.]\d{3})\s*-->\s*(\d{1,2}:\d{2}:\d{2}[,.]\d{3})"
)
NUMBERED_BLOCK_RE = re.compile(
    r"^\d+\s*\n\s*\d{1,2}:\d{2}:\d{2}[,.]\d{3}\s*-->", re.MULTILINE
)
BLOCK_SEP_RE = re.compile(r"\n[ \t]*\n")
WHITESPACE_RE = re.compile(r"\s+")


def normalize_newlines(text: str) -> str:
    return text.replace("\r\n", "\n").replace("\r", "\n")


def is_subtitle(text: str) -> bool:
    """Best-effort check whether ``text`` is SubRip rather than plain text.

    True if a numbered block header is followed by a timecode line, or if
    the arrow token appears anywhere at all.
    """
    text = normalize_newlines(text)
    return bool(NUMBERED_BLOCK_RE.search(text)) or "-->" in text


# =============================================================================
# Parsing
# =============================================================================

def parse_srt(content: str) -> Tuple[List[Cue], int]:
    """Parse SubRip text into cues.

    WHY: Real-world subtitle files are messy (missing sequence numbers,
    period millisecond separators, stray blank lines). Parsing keeps
    everything usable and quietly skips the rest.

    HOW: Splits on blank lines. In each block the timecode line is either
    the first line (no sequence number) or the second (first line is the
    label). All following lines are joined with single spaces and
    whitespace-collapsed.

    RULES:
    - Blocks without a timecode in line 1 or 2 are dropped.
    - Blocks whose joined text is empty are dropped.
    - An end time before the start time is clamped to the start.

    Args:
        content: Raw file text.

    Returns:
        (cues, dropped_block_count)
    """
    cues = []  # type: List[Cue]
    dropped = 0

    for block in BLOCK_SEP_RE.split(normalize_newlines(content)):
        block = block.strip()
        if not block:
            continue
        lines = block.split("\n")

        label = None
        if TIMECODE_RE.search(lines[0]):
            time_idx = 0
        elif len(lines) > 1 and TIMECODE_RE.search(lines[1]):
            label = lines[0].strip()
            time_idx = 1
        else:
            logger.debug("Dropping subtitle block without timecode: %r", lines[0])
            dropped += 1
            continue

        match = TIMECODE_RE.search(lines[time_idx])
        text = WHITESPACE_RE.sub(" ", " ".join(lines[time_idx + 1:])).strip()
        if not text:
            logger.debug("Dropping subtitle block without text at %s", match.group(1))
            dropped += 1
            continue

        start_ms = parse_time(match.group(1))
        end_ms = parse_time(match.group(2))
        if end_ms < start_ms:
            logger.debug("Cue at %s ends before it starts, clamping end", match.group(1))
            end_ms = start_ms

        cues.append(Cue(
            start_ms=start_ms,
            end_ms=end_ms,
            text=text,
            label=label,
        ))

    return cues, dropped


def serialize_srt(cues: List[Cue]) -> str:
    """Renumber from 1 and write ``index / start --> end / text`` blocks."""
    return "\n\n".join(
        "{}\n{} --> {}\n{}".format(
            i, format_time(cue.start_ms), format_time(cue.end_ms), cue.text
        )
        for i, cue in enumerate(cues, 1)
    )


# =============================================================================
# Timed Split Pass
# =============================================================================

def split_cue(cue: Cue, max_length: int) -> List[Cue]:
    """Split one cue into chunks with proportionally interpolated times.

    WHY: A long cue split into word-wrapped pieces must still cover exactly
    the same time span, and each piece should stay on screen for a share
    of that span matching its share of the text.

    HOW: Each chunk but the last lasts floor(duration * chunk_len / total_len)
    from the previous boundary. The last chunk always ends at the original
    end, absorbing rounding. A boundary that would not advance past the
    previous one is pushed forward by 1 ms (but never past the cue's end).

    RULES:
    - Returns [cue] when no split is needed.
    - child[i].end_ms == child[i + 1].start_ms for every i.
    - An inverted cue (end before start) is treated as zero-length.
    """
    pieces = chunk(cue.text, max_length)
    if len(pieces) == 1:
        return [cue]

    total_len = visible_len(cue.text)
    start = cue.start_ms
    stop = max(cue.end_ms, start)
    duration = stop - start
    result = []  # type: List[Cue]

    for idx, piece in enumerate(pieces):
        if idx == len(pieces) - 1:
            end = stop
        else:
            end = start + (duration * visible_len(piece)) // total_len
            if end <= start:
                end = start + 1
            end = min(end, stop)
        result.append(Cue(start_ms=start, end_ms=end, text=piece))
        start = end

    return result


def split_long_cues(cues: List[Cue], max_length: int) -> List[Cue]:
    result = []  # type: List[Cue]
    for cue in cues:
        result.extend(split_cue(cue, max_length))
    return result


# =============================================================================
# Modes
# =============================================================================

def reformat_cues(cues: List[Cue], min_length: int, max_length: int) -> List[Cue]:
    """Split pass followed by the merge/balance engine."""
    return optimize(split_long_cues(cues, max_length), min_length, max_length)


def extract_cues(cues: List[Cue]) -> List[str]:
    """Markup-free text of every cue, one entry per cue."""
    return [strip_tags(cue.text) for cue in cues]
