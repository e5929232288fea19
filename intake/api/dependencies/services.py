"""
Service Dependencies

FastAPI dependencies for service injection.

Services are created per-request with the request's db session:
- Services are stateless (only hold db session reference)
- Each request gets its own db session

Usage:
======
    from intake.api.dependencies.services import ResolutionServiceDep

    @router.post("/{target_id}/resolve")
    async def resolve(target_id: UUID, body: ResolutionRequest, service: ResolutionServiceDep):
        return await service.resolve(...)
"""

from typing import Annotated

from fastapi import Depends
from sqlalchemy.ext.asyncio import AsyncSession

from intake.api.dependencies.database import get_db
from intake.shared.services.job_service import JobService
from intake.shared.services.resolution_service import ResolutionService


async def get_job_service(
    db: AsyncSession = Depends(get_db),
) -> JobService:
    """
    Dependency to get JobService instance.
    """
    return JobService(db)


async def get_resolution_service(
    db: AsyncSession = Depends(get_db),
) -> ResolutionService:
    """
    Dependency to get ResolutionService instance.
    """
    return ResolutionService(db)


JobServiceDep = Annotated[JobService, Depends(get_job_service)]
ResolutionServiceDep = Annotated[ResolutionService, Depends(get_resolution_service)]
