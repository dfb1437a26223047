"""Line-length optimizer for SubRip subtitles and plain text.

WHY: Subtitles and transcripts exported from editing tools often contain
fragments that are too short to read and lines that are too long to fit.
This package reflows them: short units are merged with a neighbour, long
ones are word-wrapped, and subtitle timing is interpolated to match. The
host application (CLI, HTTP API) hands over raw file text and gets back
processed text plus a unit count.

HOW: process_text() detects the format once, parses into units, and
dispatches on the mode (Reformat or Extract). preview_text() runs the same
path on a bounded prefix of the input for quick interactive display.

RULES:
- process_text() and preview_text() are the public entry points.
- Modes: Reformat(min_length, max_length) or Extract(). Bounds are
  validated by callers (presets.validate_bounds), not here.
- Empty or whitespace-only input raises EmptyInputError.
- No global state: concurrent calls with different modes are independent.
"""

import logging
from typing import List, Tuple

from .core import (
    Direction,
    balanced_split,
    chunk,
    format_time,
    merge_direction,
    optimize,
    parse_time,
    strip_tags,
)
from .models import Cue, Extract, Line, Mode, ProcessResult, Reformat
from .plain import parse_lines, reformat_lines, serialize_lines
from .presets import (
    DEFAULT_MAX_LENGTH,
    DEFAULT_MIN_LENGTH,
    MODE_NAMES,
    PREVIEW_CHAR_LIMIT,
    PREVIEW_ELLIPSIS,
    PREVIEW_LINE_LIMIT,
    PREVIEW_UNIT_LIMIT,
    validate_bounds,
)
from .subtitles import extract_cues, is_subtitle, parse_srt, reformat_cues, serialize_srt

__all__ = [
    "process_text",
    "preview_text",
    "mode_from_name",
    "EmptyInputError",
    "Cue",
    "Line",
    "Reformat",
    "Extract",
    "Mode",
    "ProcessResult",
    "Direction",
    "chunk",
    "balanced_split",
    "merge_direction",
    "optimize",
    "parse_time",
    "format_time",
    "strip_tags",
    "validate_bounds",
]

logger = logging.getLogger(__name__)


class EmptyInputError(ValueError):
    """Raised when there is no content to process."""


def mode_from_name(
    name: str,
    min_length: int = DEFAULT_MIN_LENGTH,
    max_length: int = DEFAULT_MAX_LENGTH,
) -> Mode:
    """Resolve "reformat" / "extract" to a mode instance.

    Raises:
        ValueError: If the name is not recognized.
    """
    key = name.strip().lower()
    if key == "reformat":
        return Reformat(min_length=min_length, max_length=max_length)
    if key == "extract":
        return Extract()
    raise ValueError(
        "Unknown mode '{}'. Available: {}".format(name, ", ".join(MODE_NAMES))
    )


def process_text(raw_text: str, mode: Mode) -> ProcessResult:
    """Reformat or extract a subtitle or plain text document.

    WHY: This is the single entry point the host application calls for a
    whole file: it gets the processed text and the number of resulting
    cues/lines (shown to the user as a summary).

    HOW: Strips a BOM, rejects empty input, detects SubRip vs plain text,
    parses into units and dispatches once on the mode type.

    RULES:
    - Subtitle reformat → SubRip text, renumbered from 1.
    - Subtitle extract → one markup-free line per parsed cue.
    - Plain reformat → reflowed lines; plain extract → trimmed non-blank lines.
    - Parsing never fails; dropped subtitle blocks are reported in
      ProcessResult.dropped_blocks.

    Args:
        raw_text: Full file content.
        mode: Reformat(min_length, max_length) or Extract().

    Returns:
        ProcessResult with output_text and unit_count.

    Raises:
        EmptyInputError: If raw_text is empty or whitespace-only.
    """
    text = raw_text.lstrip("\ufeff")
    if not text.strip():
        raise EmptyInputError("The file is empty.")

    if is_subtitle(text):
        cues, dropped = parse_srt(text)
        if dropped:
            logger.debug("Dropped %d unparseable subtitle block(s)", dropped)
        output, count = _run_subtitle(cues, mode)
        return ProcessResult(
            output_text=output, unit_count=count, is_subtitle=True, dropped_blocks=dropped
        )

    output, count = _run_plain(parse_lines(text), mode)
    return ProcessResult(output_text=output, unit_count=count)


def preview_text(raw_text: str, mode: Mode) -> str:
    """Run the same processing on a small prefix for interactive display.

    HOW: Only the first PREVIEW_CHAR_LIMIT characters are parsed and only
    the first PREVIEW_UNIT_LIMIT units are processed. At most
    PREVIEW_LINE_LIMIT output lines are returned, followed by an ellipsis
    line when more output exists: either the output itself is longer, or
    the character or unit cap left part of the input unprocessed.

    RULES:
    - Empty input returns "" (no preview) instead of raising.
    """
    full = raw_text.lstrip("\ufeff")
    text = full[:PREVIEW_CHAR_LIMIT]
    if not text.strip():
        return ""
    truncated = bool(full[PREVIEW_CHAR_LIMIT:].strip())

    if is_subtitle(text):
        units, _ = parse_srt(text)
        truncated = truncated or len(units) > PREVIEW_UNIT_LIMIT
        output, _ = _run_subtitle(units[:PREVIEW_UNIT_LIMIT], mode)
    else:
        units = parse_lines(text)
        truncated = truncated or len(units) > PREVIEW_UNIT_LIMIT
        output, _ = _run_plain(units[:PREVIEW_UNIT_LIMIT], mode)

    lines = output.split("\n")
    if len(lines) > PREVIEW_LINE_LIMIT or truncated:
        return "\n".join(lines[:PREVIEW_LINE_LIMIT] + [PREVIEW_ELLIPSIS])
    return output


def _run_subtitle(cues: List[Cue], mode: Mode) -> Tuple[str, int]:
    if isinstance(mode, Extract):
        plain = extract_cues(cues)
        return "\n".join(plain), len(plain)
    result = reformat_cues(cues, mode.min_length, mode.max_length)
    return serialize_srt(result), len(result)


def _run_plain(lines: List[Line], mode: Mode) -> Tuple[str, int]:
    if isinstance(mode, Extract):
        return serialize_lines(lines), len(lines)
    result = reformat_lines(lines, mode.min_length, mode.max_length)
    return serialize_lines(result), len(result)
