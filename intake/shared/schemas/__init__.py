"""
Pydantic Schemas

Request and response models for the API and worker health.

Schema Categories:
==================
- common: Base schema, error and health responses
- processing: Enqueue payload, job / target views, admin resolution

Usage:
======
    from intake.shared.schemas import EnqueueRequest, JobResponse
    from intake.shared.schemas.common import ErrorResponse
"""

from intake.shared.schemas.common import (
    BaseSchema,
    ErrorDetail,
    ErrorResponse,
    HealthResponse,
    WorkerHealthResponse,
)
from intake.shared.schemas.processing import (
    SourceImage,
    CloudinaryReference,
    EnqueueRequest,
    JobResponse,
    JobListResponse,
    TargetStatusResponse,
    TargetListResponse,
    ResolutionRequest,
    ResolutionResponse,
)

__all__ = [
    # Common
    "BaseSchema",
    "ErrorDetail",
    "ErrorResponse",
    "HealthResponse",
    "WorkerHealthResponse",
    # Processing
    "SourceImage",
    "CloudinaryReference",
    "EnqueueRequest",
    "JobResponse",
    "JobListResponse",
    "TargetStatusResponse",
    "TargetListResponse",
    "ResolutionRequest",
    "ResolutionResponse",
]
