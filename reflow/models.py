"""Data models for the line-length optimizer.

WHY: Subtitle cues and plain text lines are reflowed by the same
merge/split engine. Each needs a small, immutable representation so that
every pipeline stage can produce a new sequence instead of editing the
previous one in place.

HOW: Two unit dataclasses (Cue, Line) share the same duck-typed interface:
a ``text`` attribute plus ``joined()`` and ``rebalanced()``, which build the
replacement unit(s) when the engine merges or rebalances two neighbours.
The processing mode is a tagged variant (Reformat | Extract) dispatched once
at the top of process_text().

RULES:
- Units are frozen; stages build new units with dataclasses.replace().
- Cue times are integer milliseconds, start_ms <= end_ms.
- Unit text keeps its markup; lengths are always measured on stripped text.
- joined()/rebalanced() are always called on the EARLIER unit of a pair.
"""

from dataclasses import dataclass, replace
from typing import Optional, Tuple, Union

from .core import visible_len
from .presets import DEFAULT_MAX_LENGTH, DEFAULT_MIN_LENGTH


@dataclass(frozen=True)
class Cue:
    """One timed subtitle entry.

    Attributes:
        start_ms: Start time in milliseconds.
        end_ms: End time in milliseconds.
        text: Cue text on a single line (markup preserved).
        label: Original sequence-number line, if the block had one.
    """
    start_ms: int
    end_ms: int
    text: str
    label: Optional[str] = None

    @property
    def duration_ms(self) -> int:
        return self.end_ms - self.start_ms

    def joined(self, following: "Cue", text: str) -> "Cue":
        """Return one cue covering this cue and ``following`` with ``text``."""
        return replace(self, end_ms=following.end_ms, text=text)

    def rebalanced(
        self, following: "Cue", first_text: str, second_text: str
    ) -> Tuple["Cue", "Cue"]:
        """Return the pair with new texts and a re-interpolated shared edge.

        The edge sits at the share of the combined span that ``first_text``
        takes of ``first_text + " " + second_text`` (stripped lengths, floored).
        """
        span = following.end_ms - self.start_ms
        whole = visible_len("{} {}".format(first_text, second_text))
        boundary_ms = self.start_ms + (span * visible_len(first_text)) // whole
        return (
            replace(self, end_ms=boundary_ms, text=first_text),
            replace(following, start_ms=boundary_ms, text=second_text),
        )


@dataclass(frozen=True)
class Line:
    """One line of plain text (no timing)."""
    text: str

    def joined(self, following: "Line", text: str) -> "Line":
        return Line(text=text)

    def rebalanced(
        self, following: "Line", first_text: str, second_text: str
    ) -> Tuple["Line", "Line"]:
        return Line(text=first_text), Line(text=second_text)


@dataclass(frozen=True)
class Reformat:
    """Merge short units and split long ones.

    Attributes:
        min_length: Units at or below this stripped length are merged.
        max_length: Units above this stripped length are split.
    """
    min_length: int = DEFAULT_MIN_LENGTH
    max_length: int = DEFAULT_MAX_LENGTH


@dataclass(frozen=True)
class Extract:
    """Strip timing (and markup, for subtitles) and return the bare text."""


Mode = Union[Reformat, Extract]


@dataclass
class ProcessResult:
    """Output of process_text().

    Attributes:
        output_text: The processed document.
        unit_count: Number of cues or lines in the output.
        is_subtitle: True if the input was detected as SubRip.
        dropped_blocks: Subtitle blocks skipped during parsing (diagnostics only).
    """
    output_text: str
    unit_count: int
    is_subtitle: bool = False
    dropped_blocks: int = 0
