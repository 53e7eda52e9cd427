from datetime import date
from typing import List, Optional
from fastapi import APIRouter, Depends, Query

from .. import schemas
from ..enums import JobStatus
from ..services.job_service import JobService
from ..services.storage import TenantContext
from .surface import Surface


def build_router(surface: Surface) -> APIRouter:
    router = APIRouter(prefix="/jobs", tags=["Jobs"])

    @router.get("", response_model=surface.response_model(List[schemas.Job]))
    def list_jobs(
        client_id: Optional[int] = Query(None, description="Filter by client ID"),
        on_date: Optional[date] = Query(None, alias="date", description="Jobs scheduled on this day (YYYY-MM-DD)"),
        status: Optional[JobStatus] = Query(None, description="Filter by job status"),
        ctx: TenantContext = Depends(surface.tenant),
    ):
        jobs = [
            schemas.Job.model_validate(job)
            for job in JobService.list_jobs(ctx.storage, client_id=client_id, status=status, on_date=on_date)
        ]
        return surface.respond(ctx, jobs, f"Found {len(jobs)} jobs")

    @router.post("", response_model=surface.response_model(schemas.Job))
    def create_job(job: schemas.JobCreate, ctx: TenantContext = Depends(surface.tenant)):
        """Create a job; recurring jobs also get their future instances."""
        db_job = JobService.create_job(ctx.storage, job)
        return surface.respond(ctx, schemas.Job.model_validate(db_job), "Job created")

    @router.get("/{job_id}", response_model=surface.response_model(schemas.Job))
    def get_job(job_id: int, ctx: TenantContext = Depends(surface.tenant)):
        return surface.respond(ctx, schemas.Job.model_validate(JobService.get_job(ctx.storage, job_id)))

    @router.put("/{job_id}", response_model=surface.response_model(schemas.Job))
    def update_job(job_id: int, update: schemas.JobUpdate, ctx: TenantContext = Depends(surface.tenant)):
        db_job = JobService.update_job(ctx.storage, job_id, update)
        return surface.respond(ctx, schemas.Job.model_validate(db_job), "Job updated")

    @router.delete("/{job_id}", response_model=surface.response_model(schemas.MessageResponse))
    def delete_job(job_id: int, ctx: TenantContext = Depends(surface.tenant)):
        JobService.delete_job(ctx.storage, job_id)
        return surface.respond(ctx, schemas.MessageResponse(message="Job deleted"))

    return router
