"""Tests for the RQ task entrypoint."""
import pytest

from recruitops_core.candidates import CandidateRepository
from recruitops_core.jobs import JobStore
from recruitops_worker import tasks


@pytest.fixture
def sqlite_path(tmp_path, monkeypatch):
    path = str(tmp_path / "worker.db")
    monkeypatch.setenv("SQLITE_PATH", path)
    monkeypatch.setenv("BULK_ACTION_CONCURRENCY", "2")
    tasks.get_services.cache_clear()
    yield path
    tasks.get_services.cache_clear()


def test_run_bulk_job(sqlite_path):
    candidates = CandidateRepository(sqlite_path)
    for i in range(3):
        candidates.create(full_name=f"Worker{i}", candidate_id=f"w{i}")
    store = JobStore(sqlite_path)
    job = store.create_job("tag", ["w0", "w1", "w2", "gone"], {"tag": "sourced"}, "system")

    result = tasks.run_bulk_job(job.id)

    assert result == {"job_id": job.id, "status": "completed", "success_count": 3, "failed_count": 1}
    assert candidates.list_tags("w2") == ["sourced"]


def test_redelivery_is_a_no_op(sqlite_path):
    store = JobStore(sqlite_path)
    job = store.create_job("pipeline_move", ["nobody"], {}, "system")

    first = tasks.run_bulk_job(job.id)
    second = tasks.run_bulk_job(job.id)

    assert first == second
    assert store.get_job(job.id).processed_count == 1
