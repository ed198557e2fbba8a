"""
Scheduler service for periodic maintenance jobs.
"""
from stockwatch.services.scheduler.scheduler_service import (
    get_scheduler,
    run_cache_sweep,
    start_cache_sweeper,
    stop_cache_sweeper,
)

__all__ = [
    "get_scheduler",
    "run_cache_sweep",
    "start_cache_sweeper",
    "stop_cache_sweeper",
]
