"""
ProcessingJob Repository

Database operations for the durable processing queue.

Common Operations:
==================
- create_job()          → Append a pending job
- claim_jobs()          → Atomically move claimable jobs to processing
- mark_done()           → Terminal success
- mark_failed()         → Terminal failure with diagnostic text
- get_by_target()       → Job history for an artwork / frame
- count_by_status()     → Queue depth per status (worker health)

Claiming:
=========
A job is claimable when it is pending, or processing with an expired lease
(its handler crashed or the worker died). Claiming happens in the same
transaction as the SELECT; on PostgreSQL the rows are locked with
FOR UPDATE SKIP LOCKED so concurrent workers never claim the same job.

Each claim increments `attempts`. A handler finishes its job with the
attempt it claimed, so a handler whose lease expired cannot overwrite the
outcome of the claim that replaced it.
"""

from datetime import timedelta
from typing import Any, Optional
from uuid import UUID

from sqlalchemy import and_, or_, select
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy.sql.functions import count as sql_count

from intake.shared.core.logging import get_logger
from intake.shared.models.base import utcnow
from intake.shared.models.enums import JobStatus, TargetKind
from intake.shared.models.processing_job import ProcessingJob
from intake.shared.repositories.base import BaseRepository

logger = get_logger(__name__)


class ProcessingJobRepository(BaseRepository[ProcessingJob]):
    """
    Repository for ProcessingJob database operations.

    Handles job status tracking and queue management.
    """

    def __init__(self, session: AsyncSession) -> None:
        """
        Initialize ProcessingJobRepository.

        Args:
            session: Async database session
        """
        super().__init__(ProcessingJob, session)

    # ═══════════════════════════════════════════════════════════════════════════
    # READ OPERATIONS
    # ═══════════════════════════════════════════════════════════════════════════

    async def get_by_target(
        self,
        target_kind: TargetKind,
        target_id: UUID,
    ) -> list[ProcessingJob]:
        """
        Get all jobs for a specific target, newest first.

        Args:
            target_kind: artwork or frame
            target_id: Target UUID

        Returns:
            List of ProcessingJob for the target
        """
        result = await self.session.execute(
            select(ProcessingJob)
            .where(
                ProcessingJob.target_kind == target_kind,
                ProcessingJob.target_id == target_id,
            )
            .order_by(ProcessingJob.created_at.desc())
        )
        return list(result.scalars().all())

    async def count_by_status(self) -> dict[str, int]:
        """
        Count jobs grouped by status.

        Returns:
            Mapping of status value to count (statuses with no jobs are 0)
        """
        result = await self.session.execute(
            select(ProcessingJob.status, sql_count()).group_by(ProcessingJob.status)
        )
        counts = {status.value: 0 for status in JobStatus}
        for status, total in result.all():
            counts[status] = total
        return counts

    # ═══════════════════════════════════════════════════════════════════════════
    # QUEUE OPERATIONS
    # ═══════════════════════════════════════════════════════════════════════════

    async def claim_jobs(
        self,
        limit: int,
        lease_seconds: int,
    ) -> list[ProcessingJob]:
        """
        Claim up to `limit` jobs for processing.

        Selected jobs move to processing with a fresh lease, started_at and
        an incremented attempt counter. The caller commits.

        Args:
            limit: Maximum jobs to claim
            lease_seconds: How long the claim is valid

        Returns:
            Claimed jobs (may be empty)
        """
        if limit <= 0:
            return []

        now = utcnow()
        query = (
            select(ProcessingJob)
            .where(
                or_(
                    ProcessingJob.status == JobStatus.PENDING.value,
                    and_(
                        ProcessingJob.status == JobStatus.PROCESSING.value,
                        ProcessingJob.lease_expires_at < now,
                    ),
                )
            )
            .order_by(ProcessingJob.created_at.asc())
            .limit(limit)
            .with_for_update(skip_locked=True)
        )

        result = await self.session.execute(query)
        jobs = list(result.scalars().all())

        for job in jobs:
            job.status = JobStatus.PROCESSING.value
            job.started_at = now
            job.lease_expires_at = now + timedelta(seconds=lease_seconds)
            job.attempts = (job.attempts or 0) + 1
            job.error = None

        await self.session.flush()
        return jobs

    # ═══════════════════════════════════════════════════════════════════════════
    # UPDATE OPERATIONS
    # ═══════════════════════════════════════════════════════════════════════════

    async def update_job_status(
        self,
        job_id: UUID,
        status: JobStatus,
        error: Optional[str] = None,
        attempt: Optional[int] = None,
    ) -> Optional[ProcessingJob]:
        """
        Move a job to a terminal status.

        With `attempt`, the update only applies while that claim still owns
        the job: the job is processing and has not been reclaimed since.

        Args:
            job_id: Job UUID
            status: JobStatus.DONE or JobStatus.FAILED
            error: Diagnostic text, stored only when status is FAILED
            attempt: Attempt number the caller claimed the job with

        Returns:
            Updated job, or None if not found or the claim was superseded
        """
        job = await self.get(job_id)
        if not job:
            return None

        if attempt is not None and (job.attempts != attempt or job.status != JobStatus.PROCESSING.value):
            logger.warning(
                "Job claim superseded",
                job_id=str(job_id),
                claimed_attempt=attempt,
                current_attempt=job.attempts,
                current_status=job.status,
            )
            return None

        job.status = status.value
        job.finished_at = utcnow()
        job.lease_expires_at = None
        job.error = error if status == JobStatus.FAILED else None

        await self.session.flush()
        return job

    async def mark_done(self, job_id: UUID, attempt: Optional[int] = None) -> Optional[ProcessingJob]:
        """Mark a job done."""
        return await self.update_job_status(job_id, JobStatus.DONE, attempt=attempt)

    async def mark_failed(
        self,
        job_id: UUID,
        error: str,
        attempt: Optional[int] = None,
    ) -> Optional[ProcessingJob]:
        """Mark a job failed with the triggering error."""
        return await self.update_job_status(
            job_id, JobStatus.FAILED, error=error or "unknown error", attempt=attempt
        )

    # ═══════════════════════════════════════════════════════════════════════════
    # CREATE OPERATIONS
    # ═══════════════════════════════════════════════════════════════════════════

    async def create_job(
        self,
        target_kind: TargetKind,
        target_id: UUID,
        source_image: dict[str, Any],
    ) -> ProcessingJob:
        """
        Create a new pending processing job.

        Args:
            target_kind: artwork or frame
            target_id: Target to process
            source_image: {url, external_id, storage_folder}

        Returns:
            Created ProcessingJob
        """
        return await self.create(
            target_kind=target_kind,
            target_id=target_id,
            source_image=source_image,
            status=JobStatus.PENDING.value,
            attempts=0,
        )
