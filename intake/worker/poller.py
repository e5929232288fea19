"""
Worker Loop

Polls the processing queue and dispatches claimed jobs to the image
pipeline, with a bounded number of handlers in flight.

Polling Cycle:
==============
    free slots = concurrency - in flight
        │
        ├── no free slots        → sleep busy interval
        ├── claim min(batch, free) jobs (pending or lease expired)
        │       ├── query error  → log, sleep error interval
        │       ├── empty        → sleep idle interval
        │       └── jobs         → start one task per job, sleep busy interval
        └── repeat until stop()

Handlers are not awaited by the loop. On stop() the loop stops claiming,
waits up to the shutdown grace period for in-flight handlers, and cancels
the rest; their jobs stay processing and are reclaimed once the lease
expires.
"""

import asyncio
from dataclasses import dataclass
from datetime import datetime
from typing import Optional

from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker

from intake.config.settings import settings
from intake.shared.core.logging import get_logger
from intake.shared.db.session import session_scope
from intake.shared.models.base import utcnow
from intake.shared.models.processing_job import ProcessingJob
from intake.shared.repositories.processing_job_repository import ProcessingJobRepository
from intake.shared.schemas.common import WorkerHealthResponse
from intake.worker.pipelines.image_pipeline import ImagePipeline

logger = get_logger(__name__)


@dataclass
class WorkerStats:
    """Counters since the loop started."""

    jobs_claimed: int = 0
    jobs_completed: int = 0
    jobs_failed: int = 0
    last_poll_at: Optional[datetime] = None
    last_poll_error: Optional[str] = None


class WorkerLoop:
    """
    Polling dispatcher for processing jobs.

    Attributes:
        session_factory: Used for claim transactions
        pipeline: Per-job handler
        stats: WorkerStats for health reporting
    """

    def __init__(
        self,
        session_factory: async_sessionmaker[AsyncSession],
        pipeline: ImagePipeline,
        batch_size: int = settings.WORKER_BATCH_SIZE,
        concurrency: int = settings.WORKER_CONCURRENCY,
        idle_sleep_seconds: float = settings.WORKER_IDLE_SLEEP_SECONDS,
        busy_sleep_seconds: float = settings.WORKER_BUSY_SLEEP_SECONDS,
        error_sleep_seconds: float = settings.WORKER_ERROR_SLEEP_SECONDS,
        lease_seconds: int = settings.JOB_LEASE_SECONDS,
        shutdown_grace_seconds: float = settings.WORKER_SHUTDOWN_GRACE_SECONDS,
    ):
        self.session_factory = session_factory
        self.pipeline = pipeline
        self.batch_size = batch_size
        self.concurrency = max(1, concurrency)
        self.idle_sleep_seconds = idle_sleep_seconds
        self.busy_sleep_seconds = busy_sleep_seconds
        self.error_sleep_seconds = error_sleep_seconds
        self.lease_seconds = lease_seconds
        self.shutdown_grace_seconds = shutdown_grace_seconds

        self.stats = WorkerStats()
        self._stop_event = asyncio.Event()
        self._in_flight: set[asyncio.Task] = set()
        self._running = False

    # ═══════════════════════════════════════════════════════════════════════════
    # STATE
    # ═══════════════════════════════════════════════════════════════════════════

    @property
    def in_flight(self) -> int:
        return len(self._in_flight)

    @property
    def free_slots(self) -> int:
        return max(0, self.concurrency - len(self._in_flight))

    @property
    def running(self) -> bool:
        return self._running

    def health(self) -> WorkerHealthResponse:
        """Snapshot for the worker health endpoint."""
        return WorkerHealthResponse(
            status="healthy" if self._running else "stopped",
            running=self._running,
            in_flight=self.in_flight,
            capacity=self.concurrency,
            jobs_claimed=self.stats.jobs_claimed,
            jobs_completed=self.stats.jobs_completed,
            jobs_failed=self.stats.jobs_failed,
            last_poll_at=self.stats.last_poll_at,
            last_poll_error=self.stats.last_poll_error,
        )

    # ═══════════════════════════════════════════════════════════════════════════
    # LIFECYCLE
    # ═══════════════════════════════════════════════════════════════════════════

    def stop(self) -> None:
        """Stop claiming new jobs; run() returns after draining."""
        if not self._stop_event.is_set():
            logger.info("Worker stop requested", in_flight=self.in_flight)
        self._stop_event.set()

    async def run(self) -> None:
        """Poll until stop() is called, then drain in-flight handlers."""
        self._running = True
        logger.info(
            "Worker loop started",
            batch_size=self.batch_size,
            concurrency=self.concurrency,
            lease_seconds=self.lease_seconds,
        )
        try:
            while not self._stop_event.is_set():
                delay = await self.poll_once()
                await self._sleep(delay)
        finally:
            await self._drain()
            self._running = False
            logger.info("Worker loop stopped", **self._stats_fields())

    async def poll_once(self) -> float:
        """
        Run one polling cycle.

        Returns:
            Seconds to sleep before the next cycle
        """
        limit = min(self.batch_size, self.free_slots)
        if limit <= 0:
            return self.busy_sleep_seconds

        try:
            async with session_scope(self.session_factory) as session:
                jobs = await ProcessingJobRepository(session).claim_jobs(
                    limit=limit,
                    lease_seconds=self.lease_seconds,
                )
        except Exception as e:
            logger.error("Failed to query processing jobs", error=str(e))
            self.stats.last_poll_error = str(e)
            return self.error_sleep_seconds

        self.stats.last_poll_at = utcnow()
        self.stats.last_poll_error = None

        if not jobs:
            return self.idle_sleep_seconds

        logger.info("Jobs claimed", count=len(jobs))
        self.stats.jobs_claimed += len(jobs)
        for job in jobs:
            self._dispatch(job)

        return self.busy_sleep_seconds

    async def wait_idle(self, timeout: Optional[float] = None) -> bool:
        """
        Wait for the handlers currently in flight.

        Returns:
            True if all of them finished within the timeout
        """
        if not self._in_flight:
            return True
        _, pending = await asyncio.wait(set(self._in_flight), timeout=timeout)
        return not pending

    # ═══════════════════════════════════════════════════════════════════════════
    # INTERNALS
    # ═══════════════════════════════════════════════════════════════════════════

    def _dispatch(self, job: ProcessingJob) -> None:
        task = asyncio.create_task(self._handle(job), name=f"job-{job.id}")
        self._in_flight.add(task)
        task.add_done_callback(self._in_flight.discard)

    async def _handle(self, job: ProcessingJob) -> None:
        try:
            result = await self.pipeline.process(job)
        except Exception:
            logger.exception("Unhandled error in job handler", job_id=str(job.id))
            self.stats.jobs_failed += 1
            return

        if result.success:
            self.stats.jobs_completed += 1
        else:
            self.stats.jobs_failed += 1

    async def _sleep(self, delay: float) -> None:
        """Sleep for `delay` seconds, waking early on stop()."""
        try:
            await asyncio.wait_for(self._stop_event.wait(), timeout=delay)
        except asyncio.TimeoutError:
            return

    async def _drain(self) -> None:
        if not self._in_flight:
            return

        logger.info(
            "Draining in-flight jobs",
            in_flight=self.in_flight,
            grace_seconds=self.shutdown_grace_seconds,
        )
        finished = await self.wait_idle(timeout=self.shutdown_grace_seconds)
        if finished:
            return

        remaining = list(self._in_flight)
        for task in remaining:
            task.cancel()
        await asyncio.gather(*remaining, return_exceptions=True)
        logger.warning("Cancelled in-flight jobs after grace period", cancelled=len(remaining))

    def _stats_fields(self) -> dict:
        return {
            "jobs_claimed": self.stats.jobs_claimed,
            "jobs_completed": self.stats.jobs_completed,
            "jobs_failed": self.stats.jobs_failed,
        }
