"""Sequential batch processing with per-file status tracking.

WHY: Users drop several files at once. Each file must be processed on its
own: one empty or corrupted file is reported against that file and the
rest of the queue still completes. Files are processed strictly one after
another so no two transforms ever run at the same time.

HOW: Each queued file is a FileTask dataclass. process_batch() walks the
PENDING tasks in order, moving each through PROCESSING to COMPLETED (output
saved, count and message recorded) or ERROR (message recorded).
save_output() writes a processor output without overwriting existing files.

RULES:
- Only PENDING tasks are processed; finished tasks are left untouched
- ValueError (empty input, bad encoding, corrupted project) and OSError
  (read/write failures) are caught per file; anything else propagates
- Output names never overwrite: "FIXED_a.srt" → "FIXED_a-2.srt" → ...
- Files with unsupported extensions are marked ERROR without being read
"""

from __future__ import annotations

import enum
import logging
import uuid
from dataclasses import dataclass, field
from pathlib import Path
from typing import Callable, List, Optional

from media_assistant.processors.base import BaseProcessor, ProcessorOutput

logger = logging.getLogger(__name__)


class FileStatus(str, enum.Enum):
    """Lifecycle of one queued file."""

    PENDING = "pending"
    PROCESSING = "processing"
    COMPLETED = "completed"
    ERROR = "error"


@dataclass
class FileTask:
    """One file in the processing queue.

    Attributes:
        path: Source file on disk.
        id: UUID4 hex, unique per task.
        status: Current FileStatus (starts as PENDING).
        output_path: Saved output file, set when COMPLETED.
        count: Unit (or change) count reported by the processor.
        result_message: Summary shown for a completed file.
        error_message: Failure reason, set when ERROR.
    """

    path: Path
    id: str = field(default_factory=lambda: uuid.uuid4().hex)
    status: FileStatus = FileStatus.PENDING
    output_path: Optional[Path] = None
    count: Optional[int] = None
    result_message: Optional[str] = None
    error_message: Optional[str] = None

    @property
    def original_name(self) -> str:
        return self.path.name


def resolve_output_path(filename: str, output_dir: Path) -> Path:
    """Return a path in ``output_dir`` that does not exist yet.

    First attempt is ``filename`` itself; on conflict a counter starting at
    2 is inserted before the extension.
    """
    base_path = output_dir / filename
    if not base_path.exists():
        return base_path

    stem = base_path.stem
    ext = base_path.suffix
    counter = 2
    while True:
        candidate = output_dir / "{}-{}{}".format(stem, counter, ext)
        if not candidate.exists():
            return candidate
        counter += 1


def save_output(output: ProcessorOutput, output_dir: Path) -> Path:
    """Write a processor output to ``output_dir`` and return its path."""
    path = resolve_output_path(output.filename, output_dir)
    if isinstance(output.content, bytes):
        path.write_bytes(output.content)
    else:
        path.write_text(output.content, encoding="utf-8")
    return path


def process_batch(
    tasks: List[FileTask],
    processor: BaseProcessor,
    output_dir: Optional[Path] = None,
    on_status: Optional[Callable[[FileTask], None]] = None,
) -> List[FileTask]:
    """Process every PENDING task in order with ``processor``.

    Args:
        tasks: Queue of FileTask objects (updated in place).
        processor: The tool to run on each file.
        output_dir: Where outputs are saved; defaults to each source's folder.
        on_status: Optional callback invoked after every status change.

    Returns:
        The same task list.
    """
    for task in tasks:
        if task.status is not FileStatus.PENDING:
            continue

        task.status = FileStatus.PROCESSING
        if on_status:
            on_status(task)

        try:
            if not processor.accepts(task.original_name):
                raise ValueError(
                    "Unsupported file type '{}'. Supported formats: {}".format(
                        task.path.suffix.lower(), ", ".join(sorted(processor.extensions))
                    )
                )
            output = processor.process(task.original_name, task.path.read_bytes())
            target_dir = output_dir if output_dir is not None else task.path.parent
            task.output_path = save_output(output, target_dir)
        except (ValueError, OSError) as exc:
            task.status = FileStatus.ERROR
            task.error_message = str(exc) or type(exc).__name__
            logger.warning("Failed to process %s: %s", task.original_name, task.error_message)
        else:
            task.status = FileStatus.COMPLETED
            task.count = output.count
            task.result_message = output.message
            logger.info("Processed %s → %s", task.original_name, task.output_path.name)

        if on_status:
            on_status(task)

    return tasks
