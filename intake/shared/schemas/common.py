"""
Common Schemas

Shared schemas used across the application for consistent API responses.

Schema Types:
=============
- BaseSchema: Base with common config (from_attributes, populate_by_name)
- Errors: ErrorDetail, ErrorResponse (documented on every router)
- Health: HealthResponse (API), WorkerHealthResponse (worker process)

Usage:
======
    from intake.shared.schemas.common import BaseSchema, ErrorResponse

    class JobResponse(BaseSchema):
        id: UUID
        status: str
"""

from datetime import datetime, timezone
from typing import Any, Optional

from pydantic import BaseModel, ConfigDict, Field


class BaseSchema(BaseModel):
    """
    Base schema with common configuration.

    All response schemas should inherit from this class.
    Provides:
    - from_attributes: Allow creating from ORM models
    - populate_by_name: Allow field population by name or alias
    """

    model_config = ConfigDict(
        from_attributes=True,
        populate_by_name=True,
    )


# ═══════════════════════════════════════════════════════════════════════════════
# STANDARD RESPONSES
# ═══════════════════════════════════════════════════════════════════════════════


class ErrorDetail(BaseModel):
    """Error detail structure in error responses."""

    code: str = Field(description="Machine-readable error code")
    message: str = Field(description="Human-readable error message")
    details: Optional[dict[str, Any]] = Field(
        default=None,
        description="Additional error context",
    )


class ErrorResponse(BaseModel):
    """
    Standard error response schema.

    All API errors return this format for consistency.

    Example:
        {
            "error": {
                "code": "NOT_FOUND",
                "message": "Artwork with id 'abc-123' not found",
                "details": {"target_kind": "artwork"}
            }
        }
    """

    error: ErrorDetail


# ═══════════════════════════════════════════════════════════════════════════════
# HEALTH CHECK
# ═══════════════════════════════════════════════════════════════════════════════


def _now() -> datetime:
    return datetime.now(timezone.utc)


class HealthResponse(BaseModel):
    """Health check response schema."""

    status: str = "healthy"
    service: str = "intake"
    version: str = "1.0.0"
    timestamp: datetime = Field(default_factory=_now)


class WorkerHealthResponse(HealthResponse):
    """
    Worker process health.

    in_flight / capacity describe the handler pool; the counters are
    totals since the worker started.
    """

    service: str = "intake-worker"
    running: bool = True
    in_flight: int = 0
    capacity: int = 0
    jobs_claimed: int = 0
    jobs_completed: int = 0
    jobs_failed: int = 0
    last_poll_at: Optional[datetime] = None
    last_poll_error: Optional[str] = None
