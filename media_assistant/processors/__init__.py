"""Processor registry: one entry per file tool.

WHY: The CLI, batch runner and API layers need a single lookup to find a
tool by name. A central dict makes it trivial to add new tools: create the
processor class, import it here, add one line.

HOW: PROCESSORS maps string keys to processor *classes* (not instances).
create_processor() instantiates one with only the options it understands.

RULES:
- Keys are snake_case identifiers (used in CLI commands and API form fields)
- Values are BaseProcessor subclasses (not instances)
- Every processor listed here must be importable without side effects
"""

from __future__ import annotations

from typing import TYPE_CHECKING

from media_assistant.processors.project_fixer import FixDirection, ProjectFixProcessor
from media_assistant.processors.text_reflow import ExtractProcessor, ReformatProcessor

if TYPE_CHECKING:
    from media_assistant.processors.base import BaseProcessor

PROCESSORS: dict[str, type[BaseProcessor]] = {
    "reformat": ReformatProcessor,
    "extract": ExtractProcessor,
    "fix_project": ProjectFixProcessor,
}


def create_processor(
    key: str,
    min_length: int | None = None,
    max_length: int | None = None,
    direction: str | None = None,
) -> BaseProcessor:
    """Instantiate the processor registered under ``key``.

    Raises:
        ValueError: If the key is unknown or the direction is invalid.
    """
    if key not in PROCESSORS:
        raise ValueError(
            "Unknown tool '{}'. Available: {}".format(key, ", ".join(sorted(PROCESSORS)))
        )
    if key == "reformat":
        kwargs = {}
        if min_length is not None:
            kwargs["min_length"] = min_length
        if max_length is not None:
            kwargs["max_length"] = max_length
        return ReformatProcessor(**kwargs)
    if key == "fix_project":
        return ProjectFixProcessor(FixDirection(direction) if direction else FixDirection.MAC_TO_WIN)
    return PROCESSORS[key]()
