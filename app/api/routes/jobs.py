from __future__ import annotations

from fastapi import APIRouter, Depends, HTTPException

from app.api.deps import get_job_queue, get_store
from app.models.schemas import EnrichPersonResponse, JobResponse, JobsResponse
from app.services.entity_store import EntityStore
from app.services.job_queue import JobQueue

router = APIRouter(prefix="/api", tags=["jobs"])


@router.post("/enrich/{person_id}", response_model=EnrichPersonResponse)
async def enrich_person(
    person_id: str,
    store: EntityStore = Depends(get_store),
    job_queue: JobQueue = Depends(get_job_queue),
):
    """Queue a research job for a person. Returns the job id to poll or stream."""
    if not store.get_person(person_id):
        raise HTTPException(status_code=404, detail="Person not found")

    job_id = job_queue.enqueue(person_id)
    return EnrichPersonResponse(
        job_id=job_id,
        status="queued",
        message="Research job queued successfully",
    )


@router.get("/jobs", response_model=JobsResponse)
async def list_jobs(job_queue: JobQueue = Depends(get_job_queue)):
    return {"jobs": [job.to_dict() for job in job_queue.list_jobs()]}


@router.get("/jobs/{job_id}", response_model=JobResponse)
async def get_job(job_id: str, job_queue: JobQueue = Depends(get_job_queue)):
    job = job_queue.get_job(job_id)
    if not job:
        raise HTTPException(status_code=404, detail="Job not found")
    return job.to_dict()
