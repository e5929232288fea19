"""
Admin handler.
Moderation review: list targets by processing status, inspect one, and
resolve it (approve / reject / reprocess).

Routes (prefix /admin/targets):
    GET  /{target_kind}                       → list by processing_status
    GET  /{target_kind}/{target_id}           → processing view of one target
    GET  /{target_kind}/{target_id}/jobs      → job history, newest first
    POST /{target_kind}/{target_id}/resolve   → admin action

target_kind is "artwork" or "frame". Authentication is handled in front of
this service; resolvedBy is taken from the request body.
"""

from typing import Optional
from uuid import UUID

from fastapi import APIRouter, Query

from ...shared.models.enums import ProcessingStatus, TargetKind
from ...shared.schemas.processing import (
    JobListResponse,
    JobResponse,
    ResolutionRequest,
    ResolutionResponse,
    TargetListResponse,
    TargetStatusResponse,
)
from ..dependencies.services import JobServiceDep, ResolutionServiceDep

router = APIRouter()


@router.get("/{target_kind}", response_model=TargetListResponse)
async def list_targets(
    target_kind: TargetKind,
    resolution_service: ResolutionServiceDep,
    status: Optional[ProcessingStatus] = Query(None, description="Filter by processing status"),
    limit: int = Query(100, ge=1, le=500, description="Maximum targets to return"),
):
    """
    List artworks or frames, newest first.

    Typically used with status=failed to build the review queue.
    """
    targets = await resolution_service.list_targets(target_kind, status=status, limit=limit)
    items = [TargetStatusResponse.from_target(target_kind, t) for t in targets]
    return TargetListResponse(items=items, count=len(items))


@router.get("/{target_kind}/{target_id}", response_model=TargetStatusResponse)
async def get_target(
    target_kind: TargetKind,
    target_id: UUID,
    resolution_service: ResolutionServiceDep,
):
    """Processing status, errors and analysis for one target."""
    target = await resolution_service.get_target(target_kind, target_id)
    return TargetStatusResponse.from_target(target_kind, target)


@router.get("/{target_kind}/{target_id}/jobs", response_model=JobListResponse)
async def list_target_jobs(
    target_kind: TargetKind,
    target_id: UUID,
    job_service: JobServiceDep,
):
    """All processing jobs recorded for a target."""
    jobs = await job_service.list_jobs_for_target(target_kind, target_id)
    return JobListResponse(
        items=[JobResponse.model_validate(job) for job in jobs],
        total=len(jobs),
    )


@router.post("/{target_kind}/{target_id}/resolve", response_model=ResolutionResponse)
async def resolve_target(
    target_kind: TargetKind,
    target_id: UUID,
    body: ResolutionRequest,
    resolution_service: ResolutionServiceDep,
):
    """
    Apply an admin decision.

    - approve: processing_status=ready
    - reject: processing_status=failed, errors=["rejected_by_admin"]
    - reprocess: processing_status=pending and a new job is queued
    """
    result = await resolution_service.resolve(
        target_kind,
        target_id,
        body.action,
        note=body.note,
        resolved_by=body.resolved_by,
    )
    return ResolutionResponse(
        target=TargetStatusResponse.from_target(result.target_kind, result.target),
        job=JobResponse.model_validate(result.job) if result.job else None,
    )
