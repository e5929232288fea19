"""
Target Store Writer

Persists a verdict onto the artwork / frame record.

Only analysis, processing_status and processing_errors are written; all
other target fields are left as they are. The caller owns the session
and transaction, so the worker can commit the target write and the job
completion together.
"""

from typing import Any
from uuid import UUID

from sqlalchemy.ext.asyncio import AsyncSession

from intake.shared.core.logging import get_logger
from intake.shared.models.enums import TargetKind
from intake.shared.repositories.target_repository import get_target_repository
from intake.shared.services.decision_engine import Verdict

logger = get_logger(__name__)


class TargetWriter:
    """Writes pipeline verdicts onto targets."""

    def __init__(self, session: AsyncSession):
        self.session = session

    async def write_verdict(
        self,
        target_kind: TargetKind,
        target_id: UUID,
        analysis: dict[str, Any],
        verdict: Verdict,
    ) -> None:
        """
        Merge analysis, status and errors into the target.

        Raises:
            TargetNotFoundError: If the target does not exist
        """
        repo = get_target_repository(target_kind, self.session)
        await repo.apply_processing_result(
            target_id,
            analysis=analysis,
            status=verdict.status,
            errors=verdict.errors,
        )

        logger.info(
            "Target verdict written",
            target_kind=target_kind.value,
            target_id=str(target_id),
            processing_status=verdict.status.value,
            processing_errors=verdict.errors,
        )
