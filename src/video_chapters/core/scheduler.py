"""Scheduler for cleanup tasks."""

from __future__ import annotations

import asyncio
import logging

from apscheduler.schedulers.asyncio import AsyncIOScheduler
from apscheduler.triggers.cron import CronTrigger

from ..config import get_cleanup_config
from .cleanup import cleanup_stale_completions

logger = logging.getLogger(__name__)


class CleanupScheduler:
    """
    Manages scheduled pruning of completion records using APScheduler.

    Lifecycle:
    - start(): Initialize scheduler and add cleanup job
    - stop(): Gracefully shutdown scheduler
    """

    def __init__(self):
        """Initialize the scheduler."""
        self.scheduler = AsyncIOScheduler()
        self._job_id = "cleanup_stale_completions"

    async def start(self):
        """Start the scheduler with current config."""
        config = get_cleanup_config()

        if not config["enabled"]:
            logger.info("Cleanup scheduler disabled in config")
            return

        schedule = config["schedule"]
        try:
            trigger = CronTrigger.from_crontab(schedule)
        except ValueError as e:
            logger.error(f"Invalid cron expression '{schedule}': {e}")
            return

        self.scheduler.add_job(
            self._run_cleanup,
            trigger=trigger,
            id=self._job_id,
            replace_existing=True,
            max_instances=1,
        )

        self.scheduler.start()

        job = self.scheduler.get_job(self._job_id)
        if job:
            logger.info(f"Cleanup scheduler started, next run: {job.next_run_time}")
        else:
            logger.warning("Cleanup scheduler started but job not found")

    async def _run_cleanup(self):
        """Execute cleanup (internal wrapper with logging)."""
        config = get_cleanup_config()
        retention_days = config["retention_days"]
        max_videos = config["max_videos"]

        logger.info(f"Starting scheduled cleanup (retention: {retention_days} days, max: {max_videos})")

        try:
            # File I/O runs in a worker thread to keep the event loop free
            result = await asyncio.to_thread(cleanup_stale_completions, retention_days, max_videos)

            logger.info(
                f"Cleanup completed: {result['expired_count']} expired, "
                f"{result['evicted_count']} evicted, {result['remaining_count']} remaining"
            )

            if result["errors"]:
                logger.warning(f"Cleanup had {len(result['errors'])} errors:")
                for error in result["errors"]:
                    logger.warning(f"  - {error['key']}: {error['error']}")

        except Exception as e:
            logger.error(f"Cleanup failed with exception: {e}", exc_info=True)

    async def stop(self):
        """Stop the scheduler gracefully."""
        if self.scheduler.running:
            self.scheduler.shutdown(wait=True)
            logger.info("Cleanup scheduler stopped")
