"""
Job Routes

GET /jobs - List jobs with search and pagination
GET /jobs/{job_id} - Get job details
"""

from typing import Optional
from fastapi import APIRouter, Depends, Query

from portal.api.deps import get_job_store
from portal.core.errors import NotFoundError
from portal.services.mongo_service import JobStore
from portal.schemas.schemas import JobDetail, JobListResponse, envelope

router = APIRouter(prefix="/jobs", tags=["Jobs"])


@router.get("")
def list_jobs(
    page: int = Query(1, ge=1),
    page_size: int = Query(10, ge=1, le=50),
    search: Optional[str] = Query(None, description="Search in title"),
    jobs: JobStore = Depends(get_job_store),
):
    """List job postings, newest first."""
    result = jobs.list_summaries(page=page, page_size=page_size, search=search)
    return envelope(200, JobListResponse.model_validate(result), "Jobs fetched successfully")


@router.get("/{job_id}")
def get_job(job_id: str, jobs: JobStore = Depends(get_job_store)):
    """Get details of a specific job."""
    job = jobs.get_by_id(job_id)
    if not job:
        raise NotFoundError("Job not found")
    return envelope(200, JobDetail.model_validate(job), "Job fetched successfully")
