"""
Job handler.
Enqueue endpoint for upload handlers and read access to job state.

Routes (prefix /jobs):
    POST /            → enqueue from an upload payload (201)
    GET  /stats       → job counts by status
    GET  /{job_id}    → one job
"""

from uuid import UUID

from fastapi import APIRouter, status

from ...shared.schemas.processing import EnqueueRequest, JobResponse
from ..dependencies.services import JobServiceDep

router = APIRouter()


@router.post("", response_model=JobResponse, status_code=status.HTTP_201_CREATED)
async def enqueue_job(
    body: EnqueueRequest,
    job_service: JobServiceDep,
):
    """
    Queue a processing job for a freshly uploaded image.

    Exactly one of artworkId / frameId must be given.
    """
    job = await job_service.enqueue_from_payload(body)
    return JobResponse.model_validate(job)


@router.get("/stats", response_model=dict[str, int])
async def job_stats(job_service: JobServiceDep):
    """Job counts by status."""
    return await job_service.queue_stats()


@router.get("/{job_id}", response_model=JobResponse)
async def get_job(
    job_id: UUID,
    job_service: JobServiceDep,
):
    """Get a processing job by id."""
    job = await job_service.get_job(job_id)
    return JobResponse.model_validate(job)
