"""Debounced search-as-you-type."""

import asyncio
import logging
from collections.abc import Awaitable, Callable

from smartsearch.models.note import Note
from smartsearch.models.search import SearchResults
from smartsearch.services.search_engine import SmartSearchEngine

logger = logging.getLogger(__name__)

Publisher = Callable[[SearchResults], Awaitable[None]]


class LiveSearch:
    """
    Runs the latest submitted query after a quiet period.

    Each submission supersedes the previous one: a pending or in-flight
    search is cancelled and never publishes its results.
    """

    def __init__(self, engine: SmartSearchEngine, publish: Publisher, debounce_ms: int = 300):
        self.engine = engine
        self.publish = publish
        self.debounce_ms = debounce_ms
        self._task: asyncio.Task | None = None
        self._generation = 0

    @property
    def pending(self) -> bool:
        return self._task is not None and not self._task.done()

    def submit(
        self,
        raw_query: str,
        notes: list[Note] | None = None,
        max_results: int | None = None,
    ) -> asyncio.Task:
        """
        Schedule a search, cancelling any superseded one.

        Must be called from a running event loop.

        Returns:
            The task running the debounced search
        """
        self.cancel()
        self._generation += 1
        task = asyncio.create_task(self._run(self._generation, raw_query, notes, max_results))
        task.add_done_callback(_log_failure)
        self._task = task
        return task

    def cancel(self) -> bool:
        """Cancel the pending search, if any."""
        task = self._task
        if task is None or task.done():
            return False
        task.cancel()
        return True

    async def _run(
        self,
        generation: int,
        raw_query: str,
        notes: list[Note] | None,
        max_results: int | None,
    ) -> SearchResults | None:
        await asyncio.sleep(self.debounce_ms / 1000)
        results = await asyncio.to_thread(self.engine.search, raw_query, notes, max_results)
        if generation != self._generation:
            logger.debug(f"Dropping superseded live search '{raw_query}'")
            return None
        await self.publish(results)
        return results


def _log_failure(task: asyncio.Task) -> None:
    if task.cancelled():
        return
    error = task.exception()
    if error is not None:
        logger.error(f"Live search failed: {error}", exc_info=error)

