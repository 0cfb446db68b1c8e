"""Background worker that drains the job queue."""

import asyncio

from media_pipeline.application.repositories.jobs import JobRepository
from media_pipeline.application.services.handlers import JobHandlerRegistry
from media_pipeline.commons.settings.models import WorkerSettings
from media_pipeline.commons.telemetry import LogContext, get_logger
from media_pipeline.domain.models.job import Job, JobStatus


class JobWorker:
    """Polls for pending jobs and runs them one at a time.

    Jobs are taken oldest first and claimed with a conditional update, so a
    job deleted or claimed elsewhere is skipped. A failing job is marked
    failed with its error message and never stops the loop; failed jobs
    are not retried automatically.

    If the job store cannot record an outcome, the job stays in
    ``processing`` and blocks admission of its type for that entity. An
    operator clears it with ``JobAdmissionService.cancel_jobs``, after which
    the job can be queued again.
    """

    def __init__(
        self,
        jobs: JobRepository,
        handlers: JobHandlerRegistry,
        settings: WorkerSettings | None = None,
    ) -> None:
        """Initialize worker.

        Args:
            jobs: Job store.
            handlers: Handler per job type.
            settings: Poll interval, error backoff and concurrency.
        """
        self._jobs = jobs
        self._handlers = handlers
        self._settings = settings or WorkerSettings()
        self._running = False
        self._task: asyncio.Task[None] | None = None
        self._wakeup = asyncio.Event()
        self._semaphore = (
            asyncio.Semaphore(self._settings.max_concurrency)
            if self._settings.max_concurrency > 1
            else None
        )
        self._logger = get_logger(__name__)

    @property
    def is_running(self) -> bool:
        return self._running

    def start(self) -> bool:
        """Start the polling loop in the background.

        Returns:
            False if the worker was already running.
        """
        if self._running:
            return False
        self._running = True
        self._wakeup.clear()
        # A loop still winding down after stop() is reused.
        if self._task is None or self._task.done():
            self._task = asyncio.get_running_loop().create_task(
                self._loop(), name="job-worker"
            )
        self._logger.info(
            "Job worker started",
            extra={"poll_interval_seconds": self._settings.poll_interval_seconds},
        )
        return True

    def stop(self) -> None:
        """Ask the loop to exit once the current batch finishes."""
        if not self._running:
            return
        self._running = False
        self._wakeup.set()
        self._logger.info("Job worker stopping")

    async def wait_closed(self) -> None:
        if self._task is not None:
            await self._task
            self._task = None

    async def run_once(self) -> int:
        """Process every job that is pending right now.

        Returns:
            Number of jobs this call claimed and ran.

        Raises:
            Exception: The first job store failure, once every job of this
                round has settled.
        """
        pending = await self._jobs.list_by_status(JobStatus.PENDING)
        if not pending:
            return 0

        if self._semaphore is None:
            return sum([await self._process(job) for job in pending])

        outcomes = await asyncio.gather(
            *(self._process_bounded(job) for job in pending),
            return_exceptions=True,
        )
        errors: list[BaseException] = []
        for job, outcome in zip(pending, outcomes, strict=True):
            if isinstance(outcome, BaseException):
                self._logger.error(
                    "Job raised outside its handler",
                    extra={
                        "job_id": job.id,
                        "error": str(outcome),
                        "error_type": type(outcome).__name__,
                    },
                )
                errors.append(outcome)
        if errors:
            raise errors[0]
        return sum(outcome is True for outcome in outcomes)

    async def _process_bounded(self, job: Job) -> bool:
        assert self._semaphore is not None
        async with self._semaphore:
            return await self._process(job)

    async def _process(self, job: Job) -> bool:
        claimed = await self._jobs.mark_processing(job.id)
        if claimed is None:
            self._logger.debug(
                "Job no longer pending, skipped", extra={"job_id": job.id}
            )
            return False

        with LogContext(
            new_correlation_id=True,
            job_id=claimed.id,
            job_type=claimed.job_type.value,
            media_entity_id=claimed.media_entity_id,
        ):
            self._logger.info("Job started")
            try:
                handler = self._handlers.get(claimed.job_type)
                await handler(claimed.media_entity_id)
            except Exception as e:
                self._logger.error(
                    "Job failed",
                    extra={"error": str(e), "error_type": type(e).__name__},
                    exc_info=True,
                )
                await self._record_outcome(claimed, str(e) or type(e).__name__)
            else:
                await self._record_outcome(claimed, None)
                self._logger.info("Job completed")
        return True

    async def _record_outcome(self, job: Job, error: str | None) -> None:
        try:
            if error is None:
                await self._jobs.mark_completed(job.id)
            else:
                await self._jobs.mark_failed(job.id, error)
        except Exception:
            self._logger.error(
                "Job outcome not recorded, job left processing",
                extra={"outcome": "completed" if error is None else "failed"},
                exc_info=True,
            )
            raise

    async def _loop(self) -> None:
        while self._running:
            try:
                processed = await self.run_once()
            except Exception:
                self._logger.exception(
                    "Worker iteration failed, backing off",
                    extra={"backoff_seconds": self._settings.error_backoff_seconds},
                )
                await self._sleep(self._settings.error_backoff_seconds)
                continue
            if processed == 0:
                await self._sleep(self._settings.poll_interval_seconds)
        self._logger.info("Job worker stopped")

    async def _sleep(self, seconds: float) -> None:
        """Sleep, waking early when :meth:`stop` is called."""
        try:
            await asyncio.wait_for(self._wakeup.wait(), timeout=seconds)
        except TimeoutError:
            pass
