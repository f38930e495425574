"""APScheduler wrapper for periodic snapshot refreshes."""

from __future__ import annotations

import logging
from typing import Optional

from apscheduler.schedulers.asyncio import AsyncIOScheduler

from .tracker import PriceTracker

logger = logging.getLogger(__name__)

JOB_ID = "refresh-snapshot"


def start_scheduler(tracker: PriceTracker, interval_minutes: int) -> Optional[AsyncIOScheduler]:
    """
    Schedule ``tracker.scheduled_refresh`` every ``interval_minutes`` on the running loop.
    Returns None when the interval is 0 (timer disabled).
    """
    if interval_minutes <= 0:
        logger.info("Scheduled refresh disabled")
        return None

    scheduler = AsyncIOScheduler()
    scheduler.add_job(
        tracker.scheduled_refresh,
        "interval",
        minutes=interval_minutes,
        id=JOB_ID,
        max_instances=1,
        coalesce=True,
        replace_existing=True,
    )
    scheduler.start()
    logger.info("Scheduled refresh every %d minutes", interval_minutes)
    return scheduler


def stop_scheduler(scheduler: Optional[AsyncIOScheduler]) -> None:
    if scheduler is not None and scheduler.running:
        scheduler.shutdown(wait=False)
        logger.info("Scheduler stopped")
