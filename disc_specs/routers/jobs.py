from fastapi import APIRouter, Depends, HTTPException, Query
from sqlalchemy.orm import Session

from disc_specs.core.database import get_db
from disc_specs.dtos.scrape_job_dto import (
    BatchSummary,
    JobStatus,
    QueueStats,
    ScrapeJobCreate,
    ScrapeJobRead,
)
from disc_specs.routers.deps import verify_api_key
from disc_specs.services.scrape_worker_service import ScrapeWorkerService
from disc_specs.services.spec_request_service import SpecRequestService

router = APIRouter(prefix="/jobs", tags=["jobs"])


@router.post("", response_model=ScrapeJobRead)
async def submit_job(
    body: ScrapeJobCreate,
    db: Session = Depends(get_db),
    _: None = Depends(verify_api_key),
):
    return SpecRequestService(db).submit_job(body)


@router.get("", response_model=list[ScrapeJobRead])
async def list_jobs(
    status: JobStatus | None = None,
    limit: int = Query(default=100, ge=1, le=500),
    db: Session = Depends(get_db),
):
    return SpecRequestService(db).list_jobs(status=status, limit=limit)


@router.get("/stats", response_model=QueueStats)
async def queue_stats(db: Session = Depends(get_db)):
    return SpecRequestService(db).queue_stats()


@router.post("/process", response_model=BatchSummary)
async def process_batch(
    db: Session = Depends(get_db),
    _: None = Depends(verify_api_key),
):
    return await ScrapeWorkerService(db).process_batch()


@router.get("/collection/{collection_item_id}", response_model=ScrapeJobRead)
async def latest_job_for_collection_item(collection_item_id: int, db: Session = Depends(get_db)):
    job = SpecRequestService(db).get_latest_for_collection_item(collection_item_id)
    if job is None:
        raise HTTPException(
            status_code=404, detail=f"No job for collection item {collection_item_id}"
        )
    return job


@router.get("/{job_id}", response_model=ScrapeJobRead)
async def get_job(job_id: int, db: Session = Depends(get_db)):
    job = SpecRequestService(db).get_job_status(job_id)
    if job is None:
        raise HTTPException(status_code=404, detail=f"Job {job_id} not found")
    return job
