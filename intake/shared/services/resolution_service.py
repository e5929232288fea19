"""
Resolution Service

Admin overrides for moderation outcomes.

Actions:
========
┌───────────┬──────────────────────┬──────────────────────────────────────┐
│ action    │ processing_status    │ side effects                         │
├───────────┼──────────────────────┼──────────────────────────────────────┤
│ approve   │ ready                │ errors kept as they are              │
│ reject    │ failed               │ errors = ["rejected_by_admin"]       │
│ reprocess │ pending              │ errors cleared, new pending job with │
│           │                      │ the currently stored image           │
└───────────┴──────────────────────┴──────────────────────────────────────┘

Every action records admin_resolution {action, resolved_by, resolved_at, note}.
"""

from dataclasses import dataclass
from typing import Any, Optional, Union
from uuid import UUID

from sqlalchemy.ext.asyncio import AsyncSession

from intake.shared.core.exceptions import ValidationError
from intake.shared.core.logging import get_logger
from intake.shared.models.base import utcnow
from intake.shared.models.enums import (
    ProcessingErrorCode,
    ProcessingStatus,
    ResolutionAction,
    TargetKind,
)
from intake.shared.models.processing_job import ProcessingJob
from intake.shared.repositories.target_repository import get_target_repository
from intake.shared.schemas.processing import SourceImage
from intake.shared.services.job_service import JobService

logger = get_logger(__name__)


@dataclass
class ResolutionResult:
    """Target after the action, plus the job created by reprocess."""

    target_kind: TargetKind
    target: Any
    job: Optional[ProcessingJob] = None


class ResolutionService:
    """
    Service for admin moderation actions.

    Handles:
    - approve / reject / reprocess
    - Admin listing and lookup of targets by processing status
    """

    def __init__(self, session: AsyncSession) -> None:
        """
        Initialize ResolutionService.

        Args:
            session: Async database session
        """
        self.session = session
        self.job_service = JobService(session)

    # ═══════════════════════════════════════════════════════════════════════════
    # READ
    # ═══════════════════════════════════════════════════════════════════════════

    async def get_target(self, target_kind: TargetKind, target_id: UUID) -> Any:
        """
        Get an artwork / frame.

        Raises:
            TargetNotFoundError: If it does not exist
        """
        return await get_target_repository(target_kind, self.session).get_or_raise(target_id)

    async def list_targets(
        self,
        target_kind: TargetKind,
        status: Optional[ProcessingStatus] = None,
        limit: int = 100,
    ) -> list[Any]:
        """Targets of a kind, newest first, optionally filtered by status."""
        repo = get_target_repository(target_kind, self.session)
        return await repo.list_by_status(status=status, limit=limit)

    # ═══════════════════════════════════════════════════════════════════════════
    # RESOLVE
    # ═══════════════════════════════════════════════════════════════════════════

    async def resolve(
        self,
        target_kind: TargetKind,
        target_id: UUID,
        action: Union[ResolutionAction, str],
        note: Optional[str] = None,
        resolved_by: Optional[str] = None,
    ) -> ResolutionResult:
        """
        Apply an admin action to a target.

        Args:
            target_kind: artwork or frame
            target_id: Target UUID
            action: approve, reject or reprocess
            note: Free-text reason
            resolved_by: Admin identifier

        Returns:
            ResolutionResult (job is set for reprocess)

        Raises:
            ValidationError: Unknown action, or reprocess without a stored image
            TargetNotFoundError: If the target does not exist
        """
        try:
            action = ResolutionAction(action)
        except ValueError as e:
            raise ValidationError(
                f"Unknown action '{action}'",
                details={"allowed": [a.value for a in ResolutionAction]},
            ) from e

        target_kind = TargetKind(target_kind)
        repo = get_target_repository(target_kind, self.session)
        target = await repo.get_or_raise(target_id)

        resolution = {
            "action": action.value,
            "resolved_by": resolved_by,
            "resolved_at": utcnow().isoformat(),
            "note": note,
        }

        job: Optional[ProcessingJob] = None

        if action == ResolutionAction.APPROVE:
            await repo.apply_resolution(target_id, ProcessingStatus.READY, resolution)

        elif action == ResolutionAction.REJECT:
            await repo.apply_resolution(
                target_id,
                ProcessingStatus.FAILED,
                resolution,
                errors=[ProcessingErrorCode.REJECTED_BY_ADMIN.value],
            )

        else:
            if not target.image_url:
                raise ValidationError(
                    "Target has no stored image to reprocess",
                    details={"target_kind": target_kind.value, "target_id": str(target_id)},
                )
            await repo.apply_resolution(target_id, ProcessingStatus.PENDING, resolution, errors=[])
            job = await self.job_service.enqueue(
                target_kind,
                target_id,
                SourceImage(
                    url=target.image_url,
                    external_id=target.image_external_id,
                    storage_folder=target.image_folder,
                ),
            )

        await self.session.refresh(target)

        logger.info(
            "Target resolved by admin",
            target_kind=target_kind.value,
            target_id=str(target_id),
            action=action.value,
            resolved_by=resolved_by,
            job_id=str(job.id) if job else None,
        )
        return ResolutionResult(target_kind=target_kind, target=target, job=job)
