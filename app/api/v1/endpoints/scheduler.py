from datetime import datetime
from typing import Optional, List

from fastapi import APIRouter, Depends, HTTPException
from pydantic import BaseModel, Field

from app.dependencies import require_roles
from core.config import settings
from core.security import ROLE_ADMIN
from services.auth_service import SessionUser
from services.scheduler import (
    JOB_IDS,
    JOB_RUN_DAILY,
    JOB_SEND_REMINDERS,
    get_job_info,
    get_scheduler,
    job_run_daily,
    job_send_reminders,
    schedule_job,
    shutdown_scheduler,
    start_scheduler,
)


router = APIRouter(dependencies=[Depends(require_roles(ROLE_ADMIN))])


class SchedulerConfigIn(BaseModel):
    enabled: Optional[bool] = Field(default=None, description="Enable/disable the in-process scheduler")


class SchedulerConfigOut(BaseModel):
    enabled: bool
    running: bool
    jobs: List[dict]


class JobConfigIn(BaseModel):
    cron: str = Field(description="Cron expression, e.g. */15 * * * *")


class JobConfigOut(BaseModel):
    job_id: str
    cron: str
    exists: bool
    next_run_time: Optional[datetime]


def _config() -> SchedulerConfigOut:
    return SchedulerConfigOut(
        enabled=settings.scheduler_enabled,
        running=get_scheduler().running,
        jobs=[get_job_info(job_id) for job_id in JOB_IDS],
    )


@router.get("/", response_model=SchedulerConfigOut, summary="Scheduler state and jobs")
def get_scheduler_config() -> SchedulerConfigOut:
    return _config()


@router.put("/", response_model=SchedulerConfigOut, summary="Enable or disable the scheduler")
def update_scheduler_config(payload: SchedulerConfigIn) -> SchedulerConfigOut:
    scheduler = get_scheduler()

    if payload.enabled is not None:
        settings.scheduler_enabled = payload.enabled  # type: ignore[attr-defined]

    if not settings.scheduler_enabled:
        shutdown_scheduler(scheduler)
        return _config()

    if not scheduler.running:
        start_scheduler(scheduler)
    return _config()


@router.get("/jobs", response_model=List[JobConfigOut])
def list_jobs() -> List[JobConfigOut]:
    return [JobConfigOut(**get_job_info(job_id)) for job_id in JOB_IDS]


@router.get("/jobs/{job_id}", response_model=JobConfigOut)
def get_job_config(job_id: str) -> JobConfigOut:
    if job_id not in JOB_IDS:
        raise HTTPException(status_code=404, detail=f"Job {job_id} not found")
    return JobConfigOut(**get_job_info(job_id))


@router.put("/jobs/{job_id}", response_model=JobConfigOut, summary="Set the cron of one job")
def update_job_config(job_id: str, payload: JobConfigIn) -> JobConfigOut:
    if job_id not in JOB_IDS:
        raise HTTPException(status_code=404, detail=f"Job {job_id} not found")

    scheduler = get_scheduler()
    if not scheduler.running:
        raise HTTPException(status_code=400, detail="Scheduler is not running. Enable it first via PUT /scheduler")

    if job_id == JOB_SEND_REMINDERS:
        settings.schedule_cron_reminders = payload.cron  # type: ignore[attr-defined]
    elif job_id == JOB_RUN_DAILY:
        settings.schedule_cron_daily = payload.cron  # type: ignore[attr-defined]

    try:
        schedule_job(job_id, payload.cron)
    except ValueError as ex:
        raise HTTPException(status_code=400, detail=f"Invalid cron expression: {ex}")
    return JobConfigOut(**get_job_info(job_id))


@router.post("/run-now/{job_id}", summary="Run a job immediately")
def run_job_now(job_id: str, force: bool = False) -> dict:
    if job_id == JOB_SEND_REMINDERS:
        return {"status": "triggered", "sent": job_send_reminders()}
    if job_id == JOB_RUN_DAILY:
        return {"status": "triggered", "ran": job_run_daily(force=force)}
    raise HTTPException(status_code=404, detail=f"Job {job_id} not found")
