"""Default bounds and tuning constants for line-length optimization.

WHY: The merge threshold, split threshold, pass budget and preview sizes
are shared by the library, the CLI and the HTTP API. Keeping them in one
module means every surface agrees on the same defaults.

HOW: Plain module-level constants plus MODE_NAMES for callers that select
a mode by string, and validate_bounds() for callers that accept
user-supplied lengths.

RULES:
- Constants are frozen; never mutate them at runtime.
- The core never validates bounds itself; callers use validate_bounds().
- 1 <= min_length <= max_length <= LENGTH_LIMIT.
"""

from typing import FrozenSet

DEFAULT_MIN_LENGTH = 10
DEFAULT_MAX_LENGTH = 32
LENGTH_LIMIT = 50

# Merge/balance passes before a non-converged sequence is accepted as final
MAX_OPTIMIZE_PASSES = 5

# Preview: bounded input prefix, parsed units and output lines
PREVIEW_CHAR_LIMIT = 5000
PREVIEW_UNIT_LIMIT = 8
PREVIEW_LINE_LIMIT = 5
PREVIEW_ELLIPSIS = "..."

SENTENCE_END_CHARS: FrozenSet[str] = frozenset({".", "?", "!"})

# Closing quotes ignored when looking for sentence-ending punctuation
TRAILING_QUOTES = "\"'”’»」』"

MODE_NAMES = ("reformat", "extract")


def validate_bounds(min_length: int, max_length: int) -> None:
    """Raise ValueError unless 1 <= min_length <= max_length <= LENGTH_LIMIT."""
    if min_length < 1:
        raise ValueError("min_length must be at least 1 (got {})".format(min_length))
    if max_length > LENGTH_LIMIT:
        raise ValueError(
            "max_length must be at most {} (got {})".format(LENGTH_LIMIT, max_length)
        )
    if min_length > max_length:
        raise ValueError(
            "min_length ({}) must not exceed max_length ({})".format(min_length, max_length)
        )
