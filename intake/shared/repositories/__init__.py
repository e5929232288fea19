"""
Repository Pattern Implementations

This module provides the Repository pattern for database operations.
Repositories encapsulate database queries and provide a clean API for data access.

Repository Hierarchy:
=====================
    BaseRepository[ModelType]           ← Generic CRUD operations
         │
         ├── ProcessingJobRepository    ← Durable queue: enqueue, claim, finish
         └── TargetRepository           ← Processing-field writes
                ├── ArtworkRepository
                └── FrameRepository

Usage Example:
==============
    from intake.shared.repositories import ProcessingJobRepository, get_target_repository

    async def finish(db: AsyncSession, job: ProcessingJob, analysis, verdict):
        targets = get_target_repository(job.target_kind, db)
        await targets.apply_processing_result(job.target_id, analysis, verdict.status, verdict.errors)
        await ProcessingJobRepository(db).mark_done(job.id)
"""

from intake.shared.repositories.base import BaseRepository
from intake.shared.repositories.processing_job_repository import ProcessingJobRepository
from intake.shared.repositories.target_repository import (
    ArtworkRepository,
    FrameRepository,
    TargetRepository,
    get_target_repository,
)

__all__ = [
    # Base class
    "BaseRepository",
    # Entity-specific repositories
    "ProcessingJobRepository",
    "TargetRepository",
    "ArtworkRepository",
    "FrameRepository",
    "get_target_repository",
]
