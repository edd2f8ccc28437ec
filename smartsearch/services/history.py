"""Search history and analytics.

History feeds query suggestions and reporting; it never influences scoring.
Persistence belongs to the caller, which can round-trip the state through
:meth:`SearchHistory.export_json` and :meth:`SearchHistory.load_json`.
"""

import logging
import threading
from collections import Counter
from collections.abc import Callable

from pydantic import BaseModel, Field, ValidationError

from smartsearch.models.query import SmartSearchQuery
from smartsearch.utils.datetime import now_millis

logger = logging.getLogger(__name__)

POPULAR_TERMS_LIMIT = 50
FAILED_QUERIES_LIMIT = 50


class HistoryEntry(BaseModel):
    query: str
    timestamp: int
    result_count: int
    usage_count: int = 1


class SearchAnalytics(BaseModel):
    total_searches: int = 0
    successful_searches: int = 0
    average_results: float = 0.0
    average_search_time_ms: float = 0.0
    popular_terms: dict[str, int] = Field(default_factory=dict)
    failed_queries: list[str] = Field(default_factory=list)

    @property
    def success_rate(self) -> float:
        if not self.total_searches:
            return 0.0
        return self.successful_searches / self.total_searches


class HistoryState(BaseModel):
    entries: list[HistoryEntry] = Field(default_factory=list)
    analytics: SearchAnalytics = Field(default_factory=SearchAnalytics)


def _running_mean(current: float, count: int, value: float) -> float:
    return value if count == 0 else (current * count + value) / (count + 1)


class SearchHistory:
    """Most-recent-first list of distinct queries with usage analytics."""

    def __init__(self, limit: int = 50, clock: Callable[[], int] = now_millis):
        self.limit = limit
        self.clock = clock
        self._state = HistoryState()
        self._lock = threading.Lock()

    def record(self, query: SmartSearchQuery, result_count: int, search_time_ms: int) -> None:
        """
        Record one executed search.

        Args:
            query: Parsed query
            result_count: Total number of matching notes
            search_time_ms: Wall-clock latency of the call
        """
        text = query.raw_query.strip()
        if not text:
            return

        with self._lock:
            entries = self._state.entries
            previous = next((entry for entry in entries if entry.query == text), None)
            if previous is not None:
                entries.remove(previous)
            entries.insert(
                0,
                HistoryEntry(
                    query=text,
                    timestamp=self.clock(),
                    result_count=result_count,
                    usage_count=(previous.usage_count + 1) if previous else 1,
                ),
            )
            del entries[self.limit :]

            analytics = self._state.analytics
            count = analytics.total_searches
            analytics.average_results = _running_mean(
                analytics.average_results, count, result_count
            )
            analytics.average_search_time_ms = _running_mean(
                analytics.average_search_time_ms, count, search_time_ms
            )
            analytics.total_searches = count + 1
            if result_count > 0:
                analytics.successful_searches += 1
            else:
                analytics.failed_queries = [text] + [
                    failed for failed in analytics.failed_queries if failed != text
                ][: FAILED_QUERIES_LIMIT - 1]

            terms = Counter(analytics.popular_terms)
            terms.update(query.search_terms)
            analytics.popular_terms = dict(terms.most_common(POPULAR_TERMS_LIMIT))

    def recent(self, limit: int = 10) -> list[HistoryEntry]:
        with self._lock:
            return [entry.model_copy() for entry in self._state.entries[:limit]]

    def popular(self, limit: int = 10) -> list[HistoryEntry]:
        with self._lock:
            ranked = sorted(
                self._state.entries,
                key=lambda entry: (-entry.usage_count, -entry.timestamp),
            )
            return [entry.model_copy() for entry in ranked[:limit]]

    def matching(self, partial: str, limit: int = 5) -> list[HistoryEntry]:
        """Entries containing the partial text, most used first."""
        needle = partial.strip().lower()
        if not needle:
            return []
        return [entry for entry in self.popular(self.limit) if needle in entry.query.lower()][
            :limit
        ]

    def analytics(self) -> SearchAnalytics:
        with self._lock:
            return self._state.analytics.model_copy(deep=True)

    def clear(self) -> None:
        with self._lock:
            self._state = HistoryState()

    def export_json(self) -> str:
        with self._lock:
            return self._state.model_dump_json()

    def load_json(self, data: str | bytes | None) -> bool:
        """
        Replace the state with previously exported JSON.

        Undecodable input resets to an empty history instead of failing.

        Returns:
            True when the data was loaded
        """
        if not data:
            self.clear()
            return False
        try:
            state = HistoryState.model_validate_json(data)
        except ValidationError as e:
            logger.warning(f"Discarding unreadable search history: {e}")
            self.clear()
            return False

        with self._lock:
            state.entries = state.entries[: self.limit]
            self._state = state
        return True
