"""Core line-length logic: markup stripping, timecodes, chunking and balancing.

WHY: Subtitle cues and plain text lines are both hard to read when they are
very short (one or two words flashing by) or very long (wrapping badly).
This module holds the whole optimization pipeline that both document kinds
share, so the subtitle and plain-text adapters only add parsing, timing and
serialization around it.

HOW: The pipeline is built from small pure functions:
  1. chunk(): greedy word wrap of one text into pieces <= max_length.
  2. balanced_split(): splits an over-long combined text at the word
     boundary nearest its midpoint.
  3. merge_direction(): decides whether a short unit joins its previous
     or next neighbour, based on whether the previous one ends a sentence.
  4. optimize(): fixed-point loop that merges or rebalances short units
     until a pass makes no change (or the pass budget runs out).

RULES:
- All length checks use visible_len() to ignore markup tags.
- Words are split on single spaces; no word is ever dropped, reordered or
  broken in the middle.
- optimize() never edits its input; each pass builds a new list, and the
  units themselves are frozen dataclasses.
- Per-unit failures degrade to "leave the unit unchanged"; nothing raises
  out of the merge/balance loop.
"""

import enum
import logging
import re
from typing import List, Optional, Sequence, Tuple, TypeVar

from .presets import MAX_OPTIMIZE_PASSES, SENTENCE_END_CHARS, TRAILING_QUOTES

logger = logging.getLogger(__name__)

U = TypeVar("U")

# =============================================================================
# Text Utilities
# =============================================================================

TAG_RE = re.compile(r"<[^>]+>")
TIME_RE = re.compile(r"(\d{1,2}):(\d{2}):(\d{2})[,.](\d{3})")


def strip_tags(s: str) -> str:
    """Remove HTML/XML-style tags from a string."""
    return TAG_RE.sub("", s)


def visible_len(s: str) -> int:
    """Return character count after stripping tags. Used for all length checks."""
    return len(strip_tags(s))


# =============================================================================
# Time Codec
# =============================================================================

def parse_time(text: str) -> int:
    """Parse ``H:MM:SS,mmm`` (or ``.mmm``) into integer milliseconds.

    Malformed input degrades to 0 instead of raising, so one bad timestamp
    never aborts a whole file.
    """
    match = TIME_RE.search(text)
    if not match:
        logger.debug("Malformed timestamp %r, using 0", text)
        return 0
    hours, minutes, seconds, millis = (int(g) for g in match.groups())
    return hours * 3600000 + minutes * 60000 + seconds * 1000 + millis


def format_time(ms: int) -> str:
    """Render milliseconds as a SubRip timestamp: HH:MM:SS,mmm"""
    ms = max(0, int(ms))
    hours, rest = divmod(ms, 3600000)
    minutes, rest = divmod(rest, 60000)
    seconds, millis = divmod(rest, 1000)
    return "{:02d}:{:02d}:{:02d},{:03d}".format(hours, minutes, seconds, millis)


# =============================================================================
# Chunking and Balancing
# =============================================================================

def chunk(text: str, max_length: int) -> List[str]:
    """Greedily wrap ``text`` into word-bounded chunks of at most ``max_length``.

    WHY: A cue or line that is too long has to be broken into several, and
    a plain greedy word wrap keeps each piece as full as possible.

    HOW: Accumulates words into a running chunk. Before a word is added, if
    the chunk plus a separating space plus the word would exceed max_length,
    the chunk is closed and the word starts a new one.

    RULES:
    - Returns [text] unchanged when no split is needed (length 1 means
      "nothing to do" to callers).
    - A single word longer than max_length gets a chunk of its own.
    - Never produces an empty chunk.

    Args:
        text: Text to wrap (markup allowed).
        max_length: Maximum stripped length per chunk.

    Returns:
        Ordered list of chunk texts.
    """
    if visible_len(text) <= max_length:
        return [text]

    chunks = []  # type: List[str]
    current = []  # type: List[str]
    current_len = 0

    for word in text.split(" "):
        word_len = visible_len(word)
        sep = 1 if current else 0
        if current and current_len + sep + word_len > max_length:
            chunks.append(" ".join(current))
            current = [word]
            current_len = word_len
        else:
            current.append(word)
            current_len += sep + word_len

    if current:
        chunks.append(" ".join(current))
    return chunks


def balanced_split(text: str, max_length: int) -> Optional[Tuple[str, str]]:
    """Split ``text`` at the word boundary closest to its midpoint.

    WHY: When a short unit cannot simply be merged into its neighbour
    (the result would be too long), redistributing the words of both into
    two halves of similar length still removes the short unit.

    HOW: Sums the stripped length of every word, then scans the candidate
    boundaries after each word (except the last), keeping the first one
    whose running length is closest to half the total.

    RULES:
    - Needs at least two words.
    - Returns None if either half would exceed max_length.

    Args:
        text: Combined text of the two units.
        max_length: Maximum stripped length per half.

    Returns:
        (part1, part2) or None if no valid balanced split exists.
    """
    words = text.split(" ")
    if len(words) < 2:
        return None

    lengths = [visible_len(w) for w in words]
    half = sum(lengths) / 2.0

    best_idx = -1
    best_diff = float("inf")
    running = 0
    for idx in range(len(words) - 1):
        running += lengths[idx]
        diff = abs(running - half)
        if diff < best_diff:
            best_diff = diff
            best_idx = idx

    part1 = " ".join(words[:best_idx + 1])
    part2 = " ".join(words[best_idx + 1:])
    if visible_len(part1) > max_length or visible_len(part2) > max_length:
        return None
    return part1, part2


# =============================================================================
# Merge Direction
# =============================================================================

class Direction(enum.Enum):
    """Which neighbour a too-short unit should merge with."""

    PREV = "prev"
    NEXT = "next"
    NONE = "none"


def ends_sentence(text: str) -> bool:
    """True if text ends with . ? or ! (ignoring tags and closing quotes)."""
    tail = strip_tags(text).rstrip().rstrip(TRAILING_QUOTES)
    return bool(tail) and tail[-1] in SENTENCE_END_CHARS


def merge_direction(prev_text: Optional[str], next_text: Optional[str]) -> Direction:
    """Pick the neighbour a short unit should join.

    With only one neighbour, that one wins. With both, a previous unit that
    already closes a sentence sends the short unit forward (it starts the
    next block); otherwise it extends the previous block.
    """
    if prev_text is None and next_text is None:
        return Direction.NONE
    if prev_text is None:
        return Direction.NEXT
    if next_text is None:
        return Direction.PREV
    if ends_sentence(prev_text):
        return Direction.NEXT
    return Direction.PREV


# =============================================================================
# Merge/Balance Engine
# =============================================================================

def split_long(units: Sequence[U], max_length: int) -> List[U]:
    """Plain split pass: replace every over-long unit by its chunks.

    Units are rebuilt with ``type(unit)(text=...)``, so this suits untimed
    units only. Timed units go through the subtitle adapter's own split pass.
    """
    result = []  # type: List[U]
    for unit in units:
        pieces = chunk(unit.text, max_length)
        if len(pieces) == 1:
            result.append(unit)
        else:
            result.extend(type(unit)(text=piece) for piece in pieces)
    return result


def optimize(units: Sequence[U], min_length: int, max_length: int) -> List[U]:
    """Merge or rebalance short units until the sequence stops changing.

    WHY: After splitting, documents still contain fragments that are too
    short to read comfortably. Merging them with a neighbour (or evening
    out the pair when merging would be too long) removes the fragments
    without creating new over-long units.

    HOW: Runs _optimize_pass() repeatedly. Each pass returns a new list and
    a changed flag; the loop stops on the first pass without changes or
    after MAX_OPTIMIZE_PASSES passes.

    RULES:
    - Units must provide ``text``, ``joined()`` and ``rebalanced()``
      (see models.Cue and models.Line).
    - The input sequence is never modified.
    - Hitting the pass budget is accepted as final, not an error.

    Args:
        units: Ordered units (cues or lines).
        min_length: Units at or below this stripped length are merged.
        max_length: Merged or rebalanced units never exceed this length.

    Returns:
        New list of units.
    """
    current = list(units)
    for _ in range(MAX_OPTIMIZE_PASSES):
        current, changed = _optimize_pass(current, min_length, max_length)
        if not changed:
            return current
    logger.debug(
        "Merge/balance did not converge after %d passes (%d units)",
        MAX_OPTIMIZE_PASSES, len(current),
    )
    return current


def _optimize_pass(
    units: Sequence[U], min_length: int, max_length: int
) -> Tuple[List[U], bool]:
    """One left-to-right merge/balance scan. Returns (new units, changed)."""
    work = list(units)
    changed = False
    i = 0

    while i < len(work):
        current = work[i]
        if visible_len(current.text) > min_length:
            i += 1
            continue

        prev_text = work[i - 1].text if i > 0 else None
        next_text = work[i + 1].text if i + 1 < len(work) else None
        direction = merge_direction(prev_text, next_text)
        if direction is Direction.NONE:
            i += 1
            continue

        # The pair in document order: first is always the earlier unit
        first_idx = i - 1 if direction is Direction.PREV else i
        first, second = work[first_idx], work[first_idx + 1]
        combined = "{} {}".format(first.text, second.text)

        if visible_len(combined) <= max_length:
            work[first_idx:first_idx + 2] = [first.joined(second, combined)]
            changed = True
            # Whatever shifted into index i is examined next
            continue

        parts = balanced_split(combined, max_length)
        if parts is not None and parts != (first.text, second.text):
            work[first_idx:first_idx + 2] = list(first.rebalanced(second, *parts))
            changed = True
        i += 1

    return work, changed
