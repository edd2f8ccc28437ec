"""Search request and response schemas."""

from pydantic import BaseModel, Field

from smartsearch.models.note import Note
from smartsearch.models.search import SearchSuggestion


class SearchRequest(BaseModel):
    """Schema for a search request."""

    query: str = ""
    limit: int | None = Field(default=None, ge=1)
    notes: list[Note] | None = None


class LiveSearchAccepted(BaseModel):
    """Schema for an accepted live search; results arrive as an SSE event."""

    query: str
    status: str = "accepted"


class SuggestionsResponse(BaseModel):
    """Schema for query suggestions."""

    suggestions: list[SearchSuggestion]
