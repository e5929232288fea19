"""
Target Repositories

Database operations on the records the pipeline moderates.

The CRUD layer owns artworks and frames. These repositories only write the
processing columns (analysis, processing_status, processing_errors) and
admin_resolution, with column-scoped UPDATE statements so title, name,
prices and other unrelated fields are never overwritten.

Usage:
======
    repo = get_target_repository(TargetKind.FRAME, session)
    await repo.apply_processing_result(frame_id, analysis, ProcessingStatus.READY, [])
"""

from typing import Any, Optional, Type, TypeVar
from uuid import UUID

from sqlalchemy import select, update
from sqlalchemy.ext.asyncio import AsyncSession

from intake.shared.core.exceptions import TargetNotFoundError
from intake.shared.models.artwork import Artwork
from intake.shared.models.enums import ProcessingStatus, TargetKind
from intake.shared.models.frame import Frame
from intake.shared.repositories.base import BaseRepository


TargetModel = TypeVar("TargetModel", Artwork, Frame)

# Hard cap on admin listings
MAX_LIST_LIMIT = 500


class TargetRepository(BaseRepository[TargetModel]):
    """
    Shared processing-field operations for artworks and frames.

    Subclasses only bind the model and the target kind.
    """

    kind: TargetKind

    def __init__(self, model: Type[TargetModel], session: AsyncSession) -> None:
        super().__init__(model, session)

    # ═══════════════════════════════════════════════════════════════════════════
    # READ OPERATIONS
    # ═══════════════════════════════════════════════════════════════════════════

    async def get_or_raise(self, target_id: UUID) -> TargetModel:
        """
        Get a target or raise TargetNotFoundError.

        Args:
            target_id: Target UUID

        Returns:
            The artwork / frame row
        """
        target = await self.get(target_id)
        if target is None:
            raise TargetNotFoundError(self.kind.value, str(target_id))
        return target

    async def list_by_status(
        self,
        status: Optional[ProcessingStatus] = None,
        limit: int = 100,
        offset: int = 0,
    ) -> list[TargetModel]:
        """
        List targets, newest first, optionally filtered by processing status.

        Args:
            status: Only return targets in this status (None = all)
            limit: Max results (clamped to 1..500)
            offset: Pagination offset

        Returns:
            List of targets
        """
        limit = max(1, min(limit, MAX_LIST_LIMIT))

        query = select(self.model)
        if status is not None:
            query = query.where(self.model.processing_status == status)

        query = query.order_by(self.model.created_at.desc()).offset(offset).limit(limit)

        result = await self.session.execute(query)
        return list(result.scalars().all())

    # ═══════════════════════════════════════════════════════════════════════════
    # PROCESSING WRITES
    # ═══════════════════════════════════════════════════════════════════════════

    async def _update_fields(self, target_id: UUID, values: dict[str, Any]) -> None:
        """Column-scoped UPDATE; raises TargetNotFoundError when no row matched."""
        result = await self.session.execute(
            update(self.model).where(self.model.id == target_id).values(**values)
        )
        if result.rowcount == 0:
            raise TargetNotFoundError(self.kind.value, str(target_id))
        await self.session.flush()

    async def apply_processing_result(
        self,
        target_id: UUID,
        analysis: dict[str, Any],
        status: ProcessingStatus,
        errors: list[str],
    ) -> None:
        """
        Merge a pipeline verdict into the target.

        Only analysis, processing_status and processing_errors are written.

        Args:
            target_id: Target UUID
            analysis: Analysis document
            status: ready or failed
            errors: Ordered error codes (empty when ready)

        Raises:
            TargetNotFoundError: If the target row does not exist
        """
        await self._update_fields(
            target_id,
            {
                "analysis": analysis,
                "processing_status": status,
                "processing_errors": list(errors),
            },
        )

    async def apply_resolution(
        self,
        target_id: UUID,
        status: ProcessingStatus,
        admin_resolution: dict[str, Any],
        errors: Optional[list[str]] = None,
    ) -> None:
        """
        Write an admin decision.

        Args:
            target_id: Target UUID
            status: New processing status
            admin_resolution: {action, resolved_by, resolved_at, note}
            errors: Replacement error list, or None to keep the current one

        Raises:
            TargetNotFoundError: If the target row does not exist
        """
        values: dict[str, Any] = {
            "processing_status": status,
            "admin_resolution": admin_resolution,
        }
        if errors is not None:
            values["processing_errors"] = list(errors)

        await self._update_fields(target_id, values)


class ArtworkRepository(TargetRepository[Artwork]):
    """Repository for artwork processing fields."""

    kind = TargetKind.ARTWORK

    def __init__(self, session: AsyncSession) -> None:
        super().__init__(Artwork, session)


class FrameRepository(TargetRepository[Frame]):
    """Repository for frame processing fields."""

    kind = TargetKind.FRAME

    def __init__(self, session: AsyncSession) -> None:
        super().__init__(Frame, session)


def get_target_repository(kind: TargetKind, session: AsyncSession) -> TargetRepository:
    """
    Pick the repository for a target kind.

    Args:
        kind: artwork or frame
        session: Async database session

    Returns:
        ArtworkRepository or FrameRepository
    """
    if kind == TargetKind.ARTWORK:
        return ArtworkRepository(session)
    return FrameRepository(session)
