"""
Background scheduler for periodic maintenance.

Currently runs a single job: sweeping expired entries out of the shared
TTL cache so entries that are never read again do not accumulate.
"""

import logging
from typing import Optional

from apscheduler.schedulers.asyncio import AsyncIOScheduler

from config import CACHE_CLEANUP_INTERVAL
from services.cache import TTLCache, cache as shared_cache

logger = logging.getLogger(__name__)

CACHE_CLEANUP_JOB_ID = "cache-cleanup"

_scheduler: Optional[AsyncIOScheduler] = None


def _cleanup_cache(target: TTLCache):
    removed = target.cleanup()
    logger.debug(f"Scheduled cache sweep finished, {removed} entries removed, {len(target)} remaining")


async def start_scheduler(target: Optional[TTLCache] = None, interval: int = CACHE_CLEANUP_INTERVAL):
    """Start the scheduler on application startup."""
    global _scheduler
    if _scheduler is not None:
        return _scheduler

    _scheduler = AsyncIOScheduler()
    _scheduler.add_job(
        _cleanup_cache,
        "interval",
        seconds=interval,
        id=CACHE_CLEANUP_JOB_ID,
        kwargs={"target": shared_cache if target is None else target},
        replace_existing=True,
    )
    _scheduler.start()
    logger.info(f"Scheduler started (cache cleanup every {interval}s)")
    return _scheduler


async def stop_scheduler():
    """Shutdown the scheduler gracefully."""
    global _scheduler
    if _scheduler is not None:
        _scheduler.shutdown(wait=False)
        logger.info("Scheduler stopped")
        _scheduler = None
