from apscheduler.schedulers.asyncio import AsyncIOScheduler
from apscheduler.triggers.cron import CronTrigger
from apscheduler.triggers.interval import IntervalTrigger
from apscheduler.jobstores.base import JobLookupError
from timesheets.utils.logging_config import cleanup_old_logs
from typing import Callable
import logging

logger = logging.getLogger(__name__)


class TaskScheduler:
    """Owns the AsyncIOScheduler: one-second timer ticks and housekeeping jobs."""

    def __init__(self, log_dir: str = "logs", log_retention_days: int = 30):
        self.scheduler = AsyncIOScheduler()
        self.log_dir = log_dir
        self.log_retention_days = log_retention_days

    def start(self):
        # Daily at 3 AM: drop rotated log files past retention
        self.scheduler.add_job(
            cleanup_old_logs,
            CronTrigger(hour=3, minute=0),
            kwargs={"log_dir": self.log_dir, "days_to_keep": self.log_retention_days},
            id='log_cleanup',
            replace_existing=True
        )

        self.scheduler.start()
        logger.info(f"Scheduler started - log cleanup daily at 3 AM (keep {self.log_retention_days} days)")

    def stop(self):
        if self.scheduler.running:
            self.scheduler.shutdown(wait=False)
        logger.info("Scheduler stopped")

    def schedule_ticks(self, job_id: str, callback: Callable[[], None]):
        """Call ``callback`` once per second until cancelled. One job per id."""
        self.scheduler.add_job(
            callback,
            IntervalTrigger(seconds=1),
            id=job_id,
            replace_existing=True,
            max_instances=1
        )
        logger.debug(f"Tick job {job_id} scheduled")

    def cancel_ticks(self, job_id: str):
        try:
            self.scheduler.remove_job(job_id)
            logger.debug(f"Tick job {job_id} cancelled")
        except JobLookupError:
            pass
