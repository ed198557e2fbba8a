"""
Scheduler service for the periodic cache sweep using APScheduler.
"""
import logging
from typing import Optional
from apscheduler.schedulers.asyncio import AsyncIOScheduler
from apscheduler.triggers.interval import IntervalTrigger
from stockwatch.services.cache import CacheStore

logger = logging.getLogger(__name__)

SWEEP_JOB_ID = "cache_sweep"

# Global scheduler instance
_scheduler: Optional[AsyncIOScheduler] = None


def get_scheduler() -> AsyncIOScheduler:
    """Get or create the global scheduler instance."""
    global _scheduler
    if _scheduler is None:
        _scheduler = AsyncIOScheduler()
    return _scheduler


def run_cache_sweep(cache: CacheStore) -> int:
    """Delete expired cache rows. Errors are logged so the job keeps its schedule."""
    try:
        removed = cache.sweep_expired()
        logger.info(f"Cache sweep removed {removed} expired entries")
        return removed
    except Exception as e:
        logger.error(f"Cache sweep failed: {e}", exc_info=True)
        return 0


def start_cache_sweeper(cache: CacheStore, interval_hours: float) -> AsyncIOScheduler:
    """Register the sweep job and start the scheduler.

    Must be called from within a running event loop.

    Args:
        cache: Cache store to sweep
        interval_hours: Hours between sweeps
    """
    scheduler = get_scheduler()
    scheduler.add_job(
        run_cache_sweep,
        trigger=IntervalTrigger(hours=interval_hours),
        args=[cache],
        id=SWEEP_JOB_ID,
        replace_existing=True,
        max_instances=1,
        coalesce=True,
    )
    if not scheduler.running:
        scheduler.start()
        logger.info(f"Cache sweeper started (every {interval_hours}h)")
    else:
        logger.debug("Scheduler already running")
    return scheduler


def stop_cache_sweeper():
    """Stop the scheduler."""
    global _scheduler
    if _scheduler and _scheduler.running:
        _scheduler.shutdown(wait=False)
        logger.info("Cache sweeper stopped")
    _scheduler = None
