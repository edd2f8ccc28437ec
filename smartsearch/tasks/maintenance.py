"""Periodic index maintenance."""

import asyncio
import logging

from apscheduler.schedulers.asyncio import AsyncIOScheduler

from smartsearch.services.search_engine import SmartSearchEngine
from smartsearch.utils.events import event_manager

logger = logging.getLogger(__name__)

OPTIMIZE_JOB_ID = "optimize-index"


async def optimize_index(engine: SmartSearchEngine) -> None:
    """Scheduled job: optimize the index and notify subscribers."""
    try:
        report = await asyncio.to_thread(engine.optimize_index)
    except Exception as e:
        logger.error(f"Index optimization failed: {e}")
        return

    await event_manager.broadcast("index-optimized", report.model_dump_json())


def schedule_maintenance(
    scheduler: AsyncIOScheduler, engine: SmartSearchEngine, interval_seconds: int
) -> None:
    """Register the optimize job, replacing an existing one."""
    scheduler.add_job(
        optimize_index,
        "interval",
        seconds=interval_seconds,
        args=[engine],
        id=OPTIMIZE_JOB_ID,
        replace_existing=True,
    )
    logger.info(f"Scheduled index optimization every {interval_seconds}s")
