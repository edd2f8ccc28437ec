"""Background tasks module."""

from smartsearch.tasks.maintenance import optimize_index, schedule_maintenance

__all__ = ["optimize_index", "schedule_maintenance"]
