"""Premiere Pro project repair: NFC/NFD normalization of file paths.

WHY: macOS stores filenames in decomposed Unicode (NFD: each Hangul
syllable as separate jamo) while Windows uses composed form (NFC). A
.prproj file saved on one system references media paths the other system
cannot match, so the media shows as offline and names look broken.

HOW: A .prproj file is gzip-compressed XML. The fixer detects the gzip
magic bytes (1F 8B), decompresses, decodes UTF-8, normalizes the whole
document to the target form, and re-compresses if the input was
compressed. Uncompressed XML is handled the same way without gzip.

RULES:
- MAC_TO_WIN normalizes to NFC; WIN_TO_MAC normalizes to NFD
- The change count is 1 if anything changed, else 0
- Corrupted gzip data raises ProjectFixError (a ValueError)
- Output name: "FIXED_<original name>"
"""

from __future__ import annotations

import enum
import gzip
import logging
import unicodedata
import zlib

from media_assistant.config import PROJECT_FORMATS
from media_assistant.processors.base import BaseProcessor, ProcessorOutput

logger = logging.getLogger(__name__)

GZIP_MAGIC = b"\x1f\x8b"
PROJECT_MEDIA_TYPE = "application/x-premiere-project"


class ProjectFixError(ValueError):
    """Raised when a project file cannot be decompressed or decoded."""


class FixDirection(str, enum.Enum):
    """Which system the project file is being moved to.

    Inherits from str so values serialize cleanly to JSON and CLI flags.
    """

    MAC_TO_WIN = "mac_to_win"
    WIN_TO_MAC = "win_to_mac"

    @property
    def form(self) -> str:
        return "NFC" if self is FixDirection.MAC_TO_WIN else "NFD"


def fix_project_bytes(data: bytes, direction: FixDirection) -> tuple[bytes, int]:
    """Normalize a (possibly gzipped) project file to the target Unicode form.

    Args:
        data: Raw .prproj bytes.
        direction: MAC_TO_WIN (→ NFC) or WIN_TO_MAC (→ NFD).

    Returns:
        (fixed bytes, change count) where the count is 1 or 0.

    Raises:
        ProjectFixError: If gzip data is corrupted or the XML is not UTF-8.
    """
    is_gzipped = data[:2] == GZIP_MAGIC

    if is_gzipped:
        try:
            raw = gzip.decompress(data)
        except (OSError, EOFError, zlib.error) as exc:
            raise ProjectFixError(
                "Failed to decompress project file. It might be corrupted."
            ) from exc
    else:
        raw = data

    try:
        xml = raw.decode("utf-8")
    except UnicodeDecodeError as exc:
        raise ProjectFixError("Project file is not valid UTF-8 XML.") from exc

    fixed = unicodedata.normalize(direction.form, xml)
    changed = 1 if fixed != xml else 0
    if not changed:
        logger.info("Project already in %s form, nothing to change", direction.form)

    out = fixed.encode("utf-8")
    if is_gzipped:
        out = gzip.compress(out)
    return out, changed


class ProjectFixProcessor(BaseProcessor):
    """Repair Korean filename encoding in Premiere Pro project files."""

    def __init__(self, direction: FixDirection = FixDirection.MAC_TO_WIN) -> None:
        self.direction = FixDirection(direction)

    @property
    def name(self) -> str:
        return "Premiere Project Fix"

    @property
    def extensions(self) -> set[str]:
        return PROJECT_FORMATS

    def process(self, filename: str, data: bytes) -> ProcessorOutput:
        fixed, changed = fix_project_bytes(data, self.direction)
        return ProcessorOutput(
            filename="FIXED_{}".format(filename),
            content=fixed,
            media_type=PROJECT_MEDIA_TYPE,
            count=changed,
            message="Project converted (encoding fixed)",
        )
