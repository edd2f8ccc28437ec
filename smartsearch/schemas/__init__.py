"""Pydantic schemas for request/response validation."""

from smartsearch.schemas.history import AnalyticsResponse, HistoryResponse
from smartsearch.schemas.index import RebuildRequest
from smartsearch.schemas.presets import PresetCreate, PresetListResponse, PresetRunRequest
from smartsearch.schemas.search import (
    LiveSearchAccepted,
    SearchRequest,
    SuggestionsResponse,
)

__all__ = [
    "AnalyticsResponse",
    "HistoryResponse",
    "RebuildRequest",
    "PresetCreate",
    "PresetListResponse",
    "PresetRunRequest",
    "LiveSearchAccepted",
    "SearchRequest",
    "SuggestionsResponse",
]
