"""
Periodic cache sweep using APScheduler.
The sweep runs on a background thread so expired payloads are released even
when nothing reads them.
"""

from __future__ import annotations

import logging
from typing import Optional

from apscheduler.schedulers.background import BackgroundScheduler
from apscheduler.triggers.interval import IntervalTrigger

from folio_geo.cache import ResponseCache
from folio_geo.config import get_settings

logger = logging.getLogger(__name__)

_scheduler: BackgroundScheduler | None = None


def _sweep_job(cache: ResponseCache) -> None:
    """Wrapper that catches exceptions so the scheduler doesn't die on failure."""
    try:
        removed = cache.sweep()
        if removed:
            logger.info("Cache sweep removed %d expired entries", removed)
    except Exception as e:
        logger.error("Cache sweep failed: %s", e, exc_info=True)


def create_scheduler(cache: ResponseCache, interval_seconds: Optional[float] = None) -> BackgroundScheduler:
    """Create and configure the APScheduler instance."""
    global _scheduler
    interval = interval_seconds or get_settings().cache.sweep_interval

    _scheduler = BackgroundScheduler()
    _scheduler.add_job(
        _sweep_job,
        trigger=IntervalTrigger(seconds=interval),
        args=[cache],
        id="folio_geo_cache_sweep",
        name="Response cache sweep",
        replace_existing=True,
        max_instances=1,
    )

    logger.info("Scheduler configured: cache sweep every %.0f seconds", interval)
    return _scheduler


def start_cache_sweeper(cache: ResponseCache, interval_seconds: Optional[float] = None) -> Optional[BackgroundScheduler]:
    """Start the sweeper (non-blocking). Returns None when disabled via config."""
    if not get_settings().scheduler.enabled:
        logger.info("Scheduler disabled via config")
        return None

    scheduler = create_scheduler(cache, interval_seconds)
    scheduler.start()
    logger.info("Scheduler started")
    return scheduler


def stop_cache_sweeper() -> None:
    """Stop the sweeper gracefully."""
    global _scheduler
    if _scheduler is not None and _scheduler.running:
        _scheduler.shutdown(wait=True)
        logger.info("Scheduler stopped")
    _scheduler = None
