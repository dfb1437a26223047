"""In-memory job store backing the HTTP API.

WHY: Every uploaded file becomes a job that clients poll and later download
from. Jobs live only as long as the server process (and the TTL); nothing
needs to survive a restart.

HOW: Job is a mutable dataclass owning a private scratch directory that
holds the upload and its processed copy. JobStore keeps jobs in a dict
guarded by one lock; filesystem work (mkdtemp, rmtree) happens outside it.

RULES:
- Lifecycle: pending → processing → completed | failed
- completed_at is stamped the first time a job enters a terminal state
- Finished jobs older than the TTL are purged together with their directory
- At most max_jobs jobs are held at once; create_job raises ValueError beyond
"""

from __future__ import annotations

import enum
import logging
import shutil
import tempfile
import threading
import time
import uuid
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any, Dict, List, Optional

from media_assistant.config import JOB_TTL_SECONDS, MAX_JOBS

logger = logging.getLogger(__name__)

SCRATCH_PREFIX = "media_assistant_job_"


class JobStatus(str, enum.Enum):
    """Job states; str-valued so they serialize as plain JSON strings."""

    PENDING = "pending"
    PROCESSING = "processing"
    COMPLETED = "completed"
    FAILED = "failed"

    @property
    def is_terminal(self) -> bool:
        return self in (JobStatus.COMPLETED, JobStatus.FAILED)


@dataclass
class Job:
    """One uploaded file and what happened to it.

    Attributes:
        id: UUID4 hex.
        status: Current JobStatus.
        filename: Basename of the upload; stored as output_dir/filename.
        output_dir: Scratch directory owned by this job.
        created_at / updated_at / completed_at: Unix timestamps.
        config: Tool key plus its options.
        output_file: Name of the processed file (completed jobs).
        count / message: Processor summary (completed jobs).
        error: Failure reason (failed jobs).
    """

    id: str
    status: JobStatus
    filename: str
    output_dir: Path
    created_at: float
    updated_at: float
    completed_at: Optional[float] = None
    error: Optional[str] = None
    config: Dict[str, Any] = field(default_factory=dict)
    output_file: Optional[str] = None
    count: Optional[int] = None
    message: Optional[str] = None

    @property
    def input_path(self) -> Path:
        return self.output_dir / self.filename

    def is_expired(self, now: float, ttl_seconds: float) -> bool:
        if not self.status.is_terminal or self.completed_at is None:
            return False
        return now - self.completed_at > ttl_seconds


def _remove_scratch(path: Path) -> None:
    try:
        shutil.rmtree(path)
    except FileNotFoundError:
        pass
    except OSError:
        logger.warning("Could not remove job directory %s", path)


class JobStore:
    """Registry of jobs keyed by id; safe to share between request threads."""

    def __init__(
        self,
        ttl_seconds: int = JOB_TTL_SECONDS,
        max_jobs: int = MAX_JOBS,
    ) -> None:
        self._jobs: Dict[str, Job] = {}
        self._lock = threading.Lock()
        self._ttl_seconds = ttl_seconds
        self.max_jobs = max_jobs

    def create_job(self, filename: str, config: Optional[Dict[str, Any]] = None) -> Job:
        """Register a PENDING job for ``filename`` with a fresh scratch directory.

        Raises:
            ValueError: If max_jobs jobs are already held.
        """
        with self._lock:
            if len(self._jobs) >= self.max_jobs:
                raise ValueError(
                    "Maximum number of concurrent jobs ({}) reached".format(self.max_jobs)
                )
            now = time.time()
            job = Job(
                id=uuid.uuid4().hex,
                status=JobStatus.PENDING,
                filename=filename,
                output_dir=Path(tempfile.mkdtemp(prefix=SCRATCH_PREFIX)),
                created_at=now,
                updated_at=now,
                config=dict(config or {}),
            )
            self._jobs[job.id] = job

        logger.info("Created job %s for file %s", job.id, filename)
        return job

    def get_job(self, job_id: str) -> Optional[Job]:
        with self._lock:
            return self._jobs.get(job_id)

    def list_jobs(self) -> List[Job]:
        """All jobs in creation order."""
        with self._lock:
            jobs = list(self._jobs.values())
        return sorted(jobs, key=lambda j: j.created_at)

    def update_job(self, job_id: str, status: Optional[JobStatus] = None, **fields: Any) -> Optional[Job]:
        """Set ``status`` and any of error/output_file/count/message.

        None values are ignored. Returns the job, or None for an unknown id.
        """
        with self._lock:
            job = self._jobs.get(job_id)
            if job is None:
                return None

            if status is not None:
                job.status = status
            for name in ("error", "output_file", "count", "message"):
                value = fields.pop(name, None)
                if value is not None:
                    setattr(job, name, value)
            if fields:
                raise TypeError("Unknown job fields: {}".format(", ".join(sorted(fields))))

            job.updated_at = time.time()
            if job.status.is_terminal and job.completed_at is None:
                job.completed_at = job.updated_at
            return job

    def delete_job(self, job_id: str) -> bool:
        """Forget a job and remove its scratch directory; False if unknown."""
        with self._lock:
            job = self._jobs.pop(job_id, None)
        if job is None:
            return False
        _remove_scratch(job.output_dir)
        logger.info("Deleted job %s", job_id)
        return True

    def cleanup_expired(self) -> int:
        """Purge finished jobs past the TTL; returns how many were removed."""
        now = time.time()
        with self._lock:
            expired = [j for j in self._jobs.values() if j.is_expired(now, self._ttl_seconds)]
            for job in expired:
                del self._jobs[job.id]

        for job in expired:
            _remove_scratch(job.output_dir)
            logger.info("Expired job %s", job.id)
        return len(expired)
