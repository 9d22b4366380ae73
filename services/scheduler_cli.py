import argparse

from dotenv import load_dotenv
from apscheduler.schedulers.blocking import BlockingScheduler
from apscheduler.triggers.cron import CronTrigger
from loguru import logger


def main(argv=None):
    load_dotenv()

    # Imported after load_dotenv so .env values reach the settings object
    from core.config import settings
    from core.logging import configure_logging
    from services.scheduler import job_run_daily, job_send_reminders

    configure_logging()

    parser = argparse.ArgumentParser(description="Run reminder and daily mail jobs")
    parser.add_argument("--once", action="store_true", help="run one cycle and exit (for external cron)")
    parser.add_argument("--force-daily", action="store_true", help="run the daily mails regardless of the send hour")
    args = parser.parse_args(argv)

    if args.once:
        sent = job_send_reminders()
        ran_daily = job_run_daily(force=args.force_daily)
        logger.info("One-shot run finished: reminders_sent={} daily_ran={}", sent, ran_daily)
        return 0

    scheduler = BlockingScheduler(timezone=settings.timezone)
    logger.info("Starting scheduler with CRON reminders={} daily={}", settings.schedule_cron_reminders, settings.schedule_cron_daily)
    scheduler.add_job(job_send_reminders, CronTrigger.from_crontab(settings.schedule_cron_reminders, timezone=settings.timezone), max_instances=1, coalesce=True)
    scheduler.add_job(job_run_daily, CronTrigger.from_crontab(settings.schedule_cron_daily, timezone=settings.timezone), max_instances=1, coalesce=True)

    try:
        scheduler.start()
    except (KeyboardInterrupt, SystemExit):
        logger.info("Scheduler stopped.")
    return 0


if __name__ == "__main__":
    raise SystemExit(main())
