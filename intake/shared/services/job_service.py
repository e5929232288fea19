"""
Job Service

Business logic for the processing queue: enqueueing work on behalf of the
upload handlers and reading job state.

Flow:
=====
    Upload handler stores the image and creates the target (pending)
        → JobService.enqueue_from_payload(payload)
        → ProcessingJob(status=pending)
        → worker claims it

Duplicate jobs for the same target are accepted; the most recent
completed job wins.

Usage:
======
    from intake.shared.services.job_service import JobService

    service = JobService(db)
    job = await service.enqueue(TargetKind.ARTWORK, artwork_id, SourceImage(url=url))
"""

from typing import Any, Union
from uuid import UUID

import pydantic
from sqlalchemy.ext.asyncio import AsyncSession

from intake.shared.core.exceptions import JobNotFoundError, ValidationError
from intake.shared.core.logging import get_logger
from intake.shared.models.enums import TargetKind
from intake.shared.models.processing_job import ProcessingJob
from intake.shared.repositories.processing_job_repository import ProcessingJobRepository
from intake.shared.schemas.processing import EnqueueRequest, SourceImage

logger = get_logger(__name__)


class JobService:
    """
    Service for processing-queue operations.

    Handles:
    - Enqueueing jobs (typed call or raw upload payload)
    - Job lookup and per-target history
    - Queue depth for health reporting
    """

    def __init__(self, session: AsyncSession) -> None:
        """
        Initialize JobService.

        Args:
            session: Async database session
        """
        self.session = session
        self.job_repo = ProcessingJobRepository(session)

    # ═══════════════════════════════════════════════════════════════════════════
    # ENQUEUE
    # ═══════════════════════════════════════════════════════════════════════════

    async def enqueue(
        self,
        target_kind: TargetKind,
        target_id: UUID,
        source_image: Union[SourceImage, dict[str, Any]],
    ) -> ProcessingJob:
        """
        Append a pending job for a target.

        Args:
            target_kind: artwork or frame
            target_id: Target UUID
            source_image: Stored image reference (url required)

        Returns:
            Created ProcessingJob

        Raises:
            ValidationError: If the image reference has no url
        """
        if isinstance(source_image, dict):
            try:
                source_image = SourceImage.model_validate(source_image)
            except pydantic.ValidationError as e:
                raise ValidationError(
                    "Invalid source image",
                    details={"errors": e.errors(include_url=False, include_context=False)},
                ) from e

        job = await self.job_repo.create_job(
            target_kind=TargetKind(target_kind),
            target_id=target_id,
            source_image=source_image.to_document(),
        )

        logger.info(
            "Processing job enqueued",
            job_id=str(job.id),
            target_kind=job.target_kind.value,
            target_id=str(target_id),
        )
        return job

    async def enqueue_from_payload(
        self,
        payload: Union[EnqueueRequest, dict[str, Any]],
    ) -> ProcessingJob:
        """
        Enqueue from an upload-handler payload.

        The target kind is inferred from whether artworkId or frameId is set.

        Raises:
            ValidationError: If the payload is malformed or ambiguous
        """
        if not isinstance(payload, EnqueueRequest):
            try:
                payload = EnqueueRequest.model_validate(payload)
            except pydantic.ValidationError as e:
                raise ValidationError(
                    "Invalid enqueue payload",
                    details={"errors": e.errors(include_url=False, include_context=False)},
                ) from e

        return await self.enqueue(payload.target_kind, payload.target_id, payload.image)

    # ═══════════════════════════════════════════════════════════════════════════
    # READ
    # ═══════════════════════════════════════════════════════════════════════════

    async def get_job(self, job_id: UUID) -> ProcessingJob:
        """
        Get a job by id.

        Raises:
            JobNotFoundError: If the job does not exist
        """
        job = await self.job_repo.get(job_id)
        if job is None:
            raise JobNotFoundError(job_id)
        return job

    async def list_jobs_for_target(
        self,
        target_kind: TargetKind,
        target_id: UUID,
    ) -> list[ProcessingJob]:
        """All jobs for a target, newest first."""
        return await self.job_repo.get_by_target(target_kind, target_id)

    async def queue_stats(self) -> dict[str, int]:
        """Job counts by status."""
        return await self.job_repo.count_by_status()
