"""Unit tests for the in-memory job store and the background batch runner.

HOW: Tests are organized by class, one per JobStore concern:
  - TestJobCreation: create_job basics and limits
  - TestJobUpdate: status transitions and terminal states
  - TestJobDeletion: delete and temp dir cleanup
  - TestTTLCleanup: expiry logic
  - TestBatchRunner: sequential processing, success and failure

RULES:
- Each test creates its own JobStore instance (no shared mutable state)
- Time-dependent tests use monkeypatch to control time.time()
"""

from __future__ import annotations

import time

import pytest

from media_assistant.server.app import _run_batch_sync
from media_assistant.server.jobs import JobStatus, JobStore


@pytest.fixture
def store():
    s = JobStore(ttl_seconds=60, max_jobs=3)
    yield s
    for job in s.list_jobs():
        s.delete_job(job.id)


class TestJobCreation:

    def test_creates_pending_job_with_temp_dir(self, store):
        job = store.create_job("ep.srt", {"tool": "extract"})
        assert job.status is JobStatus.PENDING
        assert job.output_dir.is_dir()
        assert job.output_dir.name.startswith("media_assistant_job_")
        assert job.input_path == job.output_dir / "ep.srt"
        assert store.get_job(job.id) is job

    def test_unique_ids(self, store):
        assert store.create_job("a.srt").id != store.create_job("b.srt").id

    def test_max_jobs(self, store):
        for n in range(3):
            store.create_job("{}.srt".format(n))
        with pytest.raises(ValueError, match="Maximum number"):
            store.create_job("overflow.srt")

    def test_missing_job_is_none(self, store):
        assert store.get_job("nope") is None

    def test_list_oldest_first(self, store):
        a = store.create_job("a.srt")
        b = store.create_job("b.srt")
        assert [j.id for j in store.list_jobs()] == [a.id, b.id]


class TestJobUpdate:

    def test_processing_has_no_completed_at(self, store):
        job = store.create_job("a.srt")
        store.update_job(job.id, status=JobStatus.PROCESSING)
        assert job.completed_at is None

    def test_completed_sets_fields(self, store):
        job = store.create_job("a.srt")
        store.update_job(
            job.id, status=JobStatus.COMPLETED, output_file="FIXED_a.srt", count=4, message="done"
        )
        assert job.completed_at is not None
        assert (job.output_file, job.count, job.message) == ("FIXED_a.srt", 4, "done")

    def test_unknown_job(self, store):
        assert store.update_job("nope", status=JobStatus.FAILED) is None

    def test_completed_at_stamped_once(self, store, monkeypatch):
        job = store.create_job("a.srt")
        store.update_job(job.id, status=JobStatus.FAILED, error="boom")
        first = job.completed_at
        monkeypatch.setattr(time, "time", lambda: first + 30)
        store.update_job(job.id, message="late note")
        assert job.completed_at == first
        assert job.updated_at == first + 30

    def test_unknown_field_rejected(self, store):
        job = store.create_job("a.srt")
        with pytest.raises(TypeError, match="colour"):
            store.update_job(job.id, colour="red")

    @pytest.mark.parametrize("status,terminal", [
        (JobStatus.PENDING, False),
        (JobStatus.PROCESSING, False),
        (JobStatus.COMPLETED, True),
        (JobStatus.FAILED, True),
    ])
    def test_terminal_states(self, status, terminal):
        assert status.is_terminal is terminal


class TestJobDeletion:

    def test_delete_removes_temp_dir(self, store):
        job = store.create_job("a.srt")
        assert store.delete_job(job.id)
        assert not job.output_dir.exists()
        assert store.get_job(job.id) is None

    def test_delete_unknown(self, store):
        assert not store.delete_job("nope")


class TestTTLCleanup:

    def test_expired_finished_jobs_removed(self, store, monkeypatch):
        done = store.create_job("a.srt")
        pending = store.create_job("b.srt")
        store.update_job(done.id, status=JobStatus.COMPLETED)

        later = time.time() + 120
        monkeypatch.setattr(time, "time", lambda: later)

        assert store.cleanup_expired() == 1
        assert store.get_job(done.id) is None
        assert store.get_job(pending.id) is not None
        assert not done.output_dir.exists()

    def test_recent_jobs_kept(self, store):
        job = store.create_job("a.srt")
        store.update_job(job.id, status=JobStatus.FAILED, error="x")
        assert store.cleanup_expired() == 0


class TestBatchRunner:

    def test_processes_in_order(self, store, three_cue_srt):
        first = store.create_job("one.srt", {"tool": "extract"})
        second = store.create_job("two.srt", {"tool": "reformat", "min_length": 10, "max_length": 32})
        first.input_path.write_text(three_cue_srt, encoding="utf-8")
        second.input_path.write_text(three_cue_srt, encoding="utf-8")

        _run_batch_sync([first.id, second.id], store)

        assert first.status is JobStatus.COMPLETED
        assert first.output_file == "TEXT_one.txt"
        assert (first.output_dir / "TEXT_one.txt").exists()
        assert second.status is JobStatus.COMPLETED
        assert second.message == "Subtitle reformatted (3 cues)"
        assert first.completed_at <= second.completed_at

    def test_failure_isolated(self, store, three_cue_srt):
        bad = store.create_job("empty.srt", {"tool": "extract"})
        good = store.create_job("ok.srt", {"tool": "extract"})
        bad.input_path.write_bytes(b"")
        good.input_path.write_text(three_cue_srt, encoding="utf-8")

        _run_batch_sync([bad.id, good.id], store)

        assert bad.status is JobStatus.FAILED
        assert bad.error == "The file is empty."
        assert good.status is JobStatus.COMPLETED

    def test_deleted_job_skipped(self, store):
        job = store.create_job("a.srt", {"tool": "extract"})
        store.delete_job(job.id)
        _run_batch_sync([job.id], store)
        assert store.get_job(job.id) is None

    def test_project_fix(self, store, mac_project_bytes):
        job = store.create_job("edit.prproj", {"tool": "fix_project", "direction": "mac_to_win"})
        job.input_path.write_bytes(mac_project_bytes)
        _run_batch_sync([job.id], store)
        assert job.status is JobStatus.COMPLETED
        assert job.output_file == "FIXED_edit.prproj"
        assert job.count == 1
