from __future__ import annotations
from apscheduler.schedulers.background import BackgroundScheduler
from apscheduler.triggers.cron import CronTrigger
from loguru import logger

from core.clock import local_now
from core.config import settings
from db.session import get_session
from services.daily_service import run_daily
from services.reminder_service import ReminderService
from services.settings_service import load_settings, mail_service_for

JOB_SEND_REMINDERS = "send_reminders"
JOB_RUN_DAILY = "run_daily"
JOB_IDS = (JOB_SEND_REMINDERS, JOB_RUN_DAILY)

_scheduler: BackgroundScheduler | None = None


def get_scheduler() -> BackgroundScheduler:
    global _scheduler
    if _scheduler is None:
        _scheduler = BackgroundScheduler(timezone=settings.timezone)
    return _scheduler


def job_send_reminders() -> int:
    logger.info("Running scheduled reminders job")
    with get_session() as session:
        service = ReminderService(session, mail_service_for(session))
        result = service.send_due_reminders()
    return result.sent


def job_run_daily(force: bool = False) -> bool:
    """Run the daily mails when the local hour matches the configured send hour."""
    now = local_now()
    with get_session() as session:
        setting = load_settings(session)
        if not force and now.hour != setting.daily_send_hour:
            logger.debug("Daily run skipped: hour {} != send hour {}", now.hour, setting.daily_send_hour)
            return False
        run_daily(session, mail_service_for(session), now.date())
    return True


def _cron_for(job_id: str) -> str | None:
    if job_id == JOB_SEND_REMINDERS:
        return settings.schedule_cron_reminders
    if job_id == JOB_RUN_DAILY:
        return settings.schedule_cron_daily
    return None


def _func_for(job_id: str):
    if job_id == JOB_SEND_REMINDERS:
        return job_send_reminders
    if job_id == JOB_RUN_DAILY:
        return job_run_daily
    return None


def start_scheduler(scheduler: BackgroundScheduler) -> None:
    if not settings.scheduler_enabled:
        logger.info("Scheduler disabled by settings")
        return
    if not scheduler.running:
        for job_id in JOB_IDS:
            cron = _cron_for(job_id)
            scheduler.add_job(
                _func_for(job_id),
                CronTrigger.from_crontab(cron, timezone=settings.timezone),
                id=job_id,
                replace_existing=True,
                max_instances=1,
                coalesce=True,
            )
            logger.info("Scheduled job {} with cron: {}", job_id, cron)
        scheduler.start()
        logger.info("Scheduler started")


def schedule_job(job_id: str, cron: str) -> None:
    """Schedule or reschedule a specific job with given cron."""
    scheduler = get_scheduler()
    if not scheduler.running:
        logger.warning("Scheduler not running, cannot schedule job")
        return

    func = _func_for(job_id)
    if func is None:
        logger.error("Unknown job_id: {}", job_id)
        return

    trigger = CronTrigger.from_crontab(cron, timezone=settings.timezone)
    if scheduler.get_job(job_id) is None:
        scheduler.add_job(func, trigger, id=job_id, replace_existing=True, max_instances=1, coalesce=True)
        logger.info("Scheduled job {} with cron: {}", job_id, cron)
    else:
        scheduler.reschedule_job(job_id, trigger=trigger)
        logger.info("Rescheduled job {} with cron: {}", job_id, cron)


def get_job_info(job_id: str) -> dict:
    scheduler = get_scheduler()
    job = scheduler.get_job(job_id) if scheduler.running else None
    cron = _cron_for(job_id)
    if cron is None:
        return {"job_id": job_id, "cron": "", "exists": False, "next_run_time": None}
    return {
        "job_id": job_id,
        "cron": cron,
        "exists": job is not None,
        "next_run_time": job.next_run_time if job else None,
    }


def shutdown_scheduler(scheduler: BackgroundScheduler) -> None:
    if scheduler.running:
        scheduler.shutdown(wait=False)
        logger.info("Scheduler shutdown")
