"""Process-wide handle on the maintenance scheduler."""

from datetime import datetime

from apscheduler.schedulers.asyncio import AsyncIOScheduler

from smartsearch.tasks.maintenance import OPTIMIZE_JOB_ID

_scheduler: AsyncIOScheduler | None = None


def get_scheduler() -> AsyncIOScheduler:
    if _scheduler is None:
        raise RuntimeError("Scheduler not initialized")
    return _scheduler


def set_scheduler(sched: AsyncIOScheduler | None) -> None:
    global _scheduler
    _scheduler = sched


def next_optimization() -> datetime | None:
    """When the optimize job runs next, or None outside the app lifespan."""
    if _scheduler is None:
        return None
    job = _scheduler.get_job(OPTIMIZE_JOB_ID)
    return job.next_run_time if job else None
