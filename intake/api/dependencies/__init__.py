"""
API Dependencies

FastAPI dependencies for injection into route handlers.

Dependencies:
=============
- Database: get_db(), DbSession
- Services: get_job_service(), get_resolution_service()

Type Aliases:
=============
Type aliases provide cleaner route signatures:

    # Instead of this:
    async def handler(service: JobService = Depends(get_job_service)):

    # Write this:
    async def handler(service: JobServiceDep):
"""

from intake.api.dependencies.database import (
    get_db,
    DbSession,
)
from intake.api.dependencies.services import (
    get_job_service,
    get_resolution_service,
    JobServiceDep,
    ResolutionServiceDep,
)

__all__ = [
    # Database
    "get_db",
    "DbSession",
    # Services
    "get_job_service",
    "get_resolution_service",
    "JobServiceDep",
    "ResolutionServiceDep",
]
