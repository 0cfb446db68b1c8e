"""Unit tests for the job worker."""

import asyncio
from unittest.mock import AsyncMock

import pytest

from media_pipeline.application.services.handlers import JobHandlerRegistry
from media_pipeline.application.services.worker import JobWorker
from media_pipeline.commons.settings.models import WorkerSettings
from media_pipeline.commons.telemetry import get_log_context
from media_pipeline.domain.models.job import Job, JobStatus, JobType


@pytest.fixture
def calls():
    return []


@pytest.fixture
def registry(calls):
    async def transcript(entity_id):
        calls.append(("transcript", entity_id, get_log_context().get("job_id")))

    async def thumbnail(entity_id):
        calls.append(("thumbnail", entity_id, None))
        raise RuntimeError(f"no frame for {entity_id}")

    return JobHandlerRegistry(
        {JobType.TRANSCRIPT: transcript, JobType.THUMBNAIL: thumbnail}
    )


@pytest.fixture
def worker(job_repository, registry):
    return JobWorker(
        job_repository,
        registry,
        WorkerSettings(poll_interval_seconds=0.01, error_backoff_seconds=0.01),
    )


async def _queue(job_repository, entity_id, job_type=JobType.TRANSCRIPT) -> Job:
    return await job_repository.create(
        Job(media_entity_id=entity_id, job_type=job_type)
    )


async def _wait_for(predicate, timeout: float = 2.0) -> None:
    async def poll():
        while not await predicate():
            await asyncio.sleep(0.01)

    await asyncio.wait_for(poll(), timeout)


class TestRunOnce:
    """Tests for a single drain of the queue."""

    async def test_empty_queue(self, worker):
        assert await worker.run_once() == 0

    async def test_runs_jobs_and_completes_them(self, worker, job_repository, calls):
        first = await _queue(job_repository, "e1")
        second = await _queue(job_repository, "e2")

        assert await worker.run_once() == 2

        assert [(kind, entity) for kind, entity, _ in calls] == [
            ("transcript", "e1"),
            ("transcript", "e2"),
        ]
        assert calls[0][2] == first.id
        for job in (first, second):
            stored = await job_repository.get(job.id)
            assert stored.status == JobStatus.COMPLETED
            assert stored.completed_at is not None

    async def test_failure_does_not_stop_other_jobs(
        self, worker, job_repository, calls
    ):
        failing = await _queue(job_repository, "e1", JobType.THUMBNAIL)
        ok = await _queue(job_repository, "e2")

        assert await worker.run_once() == 2

        failed = await job_repository.get(failing.id)
        assert failed.status == JobStatus.FAILED
        assert failed.error == "no frame for e1"
        assert (await job_repository.get(ok.id)).status == JobStatus.COMPLETED

    async def test_unregistered_type_fails_job(self, worker, job_repository):
        job = await _queue(job_repository, "e1", JobType.SUMMARY)

        await worker.run_once()

        stored = await job_repository.get(job.id)
        assert stored.status == JobStatus.FAILED
        assert stored.error == "Unknown job type: summary"

    async def test_error_without_message_uses_type_name(
        self, job_repository, registry
    ):
        registry.register(JobType.SUMMARY, AsyncMock(side_effect=KeyError()))
        worker = JobWorker(job_repository, registry)
        job = await _queue(job_repository, "e1", JobType.SUMMARY)

        await worker.run_once()

        assert (await job_repository.get(job.id)).error == "KeyError"

    async def test_claimed_elsewhere_is_skipped(self, worker, job_repository, calls):
        job = await _queue(job_repository, "e1")
        await job_repository.mark_processing(job.id)
        job_repository.list_by_status = AsyncMock(return_value=[job])

        assert await worker.run_once() == 0
        assert calls == []

    async def test_bounded_concurrency(self, job_repository):
        running = 0
        peak = 0

        async def slow(entity_id):
            nonlocal running, peak
            running += 1
            peak = max(peak, running)
            await asyncio.sleep(0.01)
            running -= 1

        worker = JobWorker(
            job_repository,
            JobHandlerRegistry({JobType.TRANSCRIPT: slow}),
            WorkerSettings(max_concurrency=2),
        )
        for i in range(5):
            await _queue(job_repository, f"e{i}")

        assert await worker.run_once() == 5
        assert peak == 2

    async def test_store_failure_settles_sibling_jobs(self, job_repository):
        done: list[str] = []

        async def handle(entity_id):
            await asyncio.sleep(0.01 if entity_id == "e0" else 0.03)
            done.append(entity_id)

        worker = JobWorker(
            job_repository,
            JobHandlerRegistry({JobType.TRANSCRIPT: handle}),
            WorkerSettings(max_concurrency=3),
        )
        jobs = [await _queue(job_repository, f"e{i}") for i in range(3)]
        original = job_repository.mark_completed

        async def mark_completed(job_id):
            if job_id == jobs[0].id:
                raise ConnectionError("database unavailable")
            return await original(job_id)

        job_repository.mark_completed = mark_completed

        with pytest.raises(ConnectionError):
            await worker.run_once()

        assert sorted(done) == ["e0", "e1", "e2"]
        stuck = await job_repository.get(jobs[0].id)
        assert stuck.status == JobStatus.PROCESSING
        for job in jobs[1:]:
            assert (await job_repository.get(job.id)).status == JobStatus.COMPLETED

        removed = await job_repository.delete_active("e0", JobType.TRANSCRIPT)
        assert [job.id for job in removed] == [jobs[0].id]

    async def test_store_failure_on_failed_job_propagates(
        self, worker, job_repository
    ):
        job = await _queue(job_repository, "e1", JobType.THUMBNAIL)
        job_repository.mark_failed = AsyncMock(
            side_effect=ConnectionError("database unavailable")
        )

        with pytest.raises(ConnectionError):
            await worker.run_once()
        assert (await job_repository.get(job.id)).status == JobStatus.PROCESSING


class TestLoop:
    """Tests for the background polling loop."""

    async def test_start_is_idempotent(self, worker):
        assert worker.start()
        assert not worker.start()
        assert worker.is_running

        worker.stop()
        await asyncio.wait_for(worker.wait_closed(), 1.0)
        assert not worker.is_running

    async def test_picks_up_jobs_queued_later(self, worker, job_repository):
        worker.start()
        job = await _queue(job_repository, "e1")

        async def completed():
            stored = await job_repository.get(job.id)
            return stored.status == JobStatus.COMPLETED

        await _wait_for(completed)
        worker.stop()
        await worker.wait_closed()

    async def test_stop_wakes_sleeping_loop(self, job_repository, registry):
        worker = JobWorker(
            job_repository, registry, WorkerSettings(poll_interval_seconds=60)
        )
        worker.start()
        await asyncio.sleep(0.05)

        worker.stop()

        await asyncio.wait_for(worker.wait_closed(), 1.0)

    async def test_iteration_error_backs_off_and_continues(self, worker):
        attempts = 0

        async def flaky_run_once():
            nonlocal attempts
            attempts += 1
            if attempts == 1:
                raise ConnectionError("database unavailable")
            return 0

        worker.run_once = flaky_run_once
        worker.start()

        async def retried():
            return attempts >= 3

        await _wait_for(retried)
        worker.stop()
        await worker.wait_closed()

    async def test_restart_after_stop(self, worker):
        worker.start()
        worker.stop()
        assert worker.start()
        worker.stop()
        await asyncio.wait_for(worker.wait_closed(), 1.0)
