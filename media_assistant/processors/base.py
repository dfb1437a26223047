"""Abstract base processor and output container.

WHY: Every tool (subtitle reformat, text extraction, project-file repair)
takes one uploaded file and produces one output file plus a short summary.
This base class enforces a consistent interface so the batch runner, CLI
and API layers can work with any tool generically.

HOW: BaseProcessor is an ABC with three requirements: a ``name`` property,
an ``extensions`` set and a ``process()`` method. ProcessorOutput is a plain
dataclass that bundles the output filename, content, MIME type, the unit
count and a human-readable result message.

RULES:
- Subclasses MUST implement ``name``, ``extensions`` and ``process()``
- ``process()`` receives raw bytes; decoding is the processor's job
- ``filename`` is the final download name (prefix + stem + extension)
- Processors never write to disk; callers save the output
"""

from __future__ import annotations

from abc import ABC, abstractmethod
from dataclasses import dataclass
from pathlib import Path


@dataclass
class ProcessorOutput:
    """One output file produced by a processor.

    Attributes:
        filename: Output filename, e.g. ``"FIXED_interview.srt"``.
        content: The file content as a string (SRT, text) or bytes (project).
        media_type: MIME type for the content, e.g. ``"application/x-subrip"``.
        count: Cues/lines produced, or changed-count for the project fixer.
        message: Short summary shown next to the finished file.
    """

    filename: str
    content: str | bytes
    media_type: str
    count: int
    message: str


class BaseProcessor(ABC):
    """Abstract base for all file processors.

    To add a new tool:
    1. Create a new file in processors/
    2. Subclass BaseProcessor
    3. Implement name, extensions and process()
    4. Register in PROCESSORS in processors/__init__.py
    """

    @property
    @abstractmethod
    def name(self) -> str:
        """Human-readable tool name, e.g. 'Subtitle Reformat'."""

    @property
    @abstractmethod
    def extensions(self) -> set[str]:
        """Accepted input extensions (lowercase, with dot)."""

    @abstractmethod
    def process(self, filename: str, data: bytes) -> ProcessorOutput:
        """Process one file.

        Args:
            filename: Original filename (used for output naming).
            data: Raw file content.

        Returns:
            The ProcessorOutput for this file.

        Raises:
            ValueError: If the content cannot be processed (empty, undecodable,
                        corrupted). The batch runner records it against the file.
        """

    def accepts(self, filename: str) -> bool:
        return Path(filename).suffix.lower() in self.extensions
