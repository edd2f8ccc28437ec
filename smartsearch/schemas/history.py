"""Search history schemas."""

from pydantic import BaseModel

from smartsearch.services.history import HistoryEntry, SearchAnalytics


class HistoryResponse(BaseModel):
    """Schema for recent and popular searches."""

    recent: list[HistoryEntry]
    popular: list[HistoryEntry]


class AnalyticsResponse(BaseModel):
    """Schema for search analytics."""

    total_searches: int
    successful_searches: int
    success_rate: float
    average_results: float
    average_search_time_ms: float
    popular_terms: dict[str, int]
    failed_queries: list[str]

    @classmethod
    def from_analytics(cls, analytics: SearchAnalytics) -> "AnalyticsResponse":
        return cls(**analytics.model_dump(), success_rate=analytics.success_rate)
