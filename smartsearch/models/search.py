"""Search result, suggestion and index health models."""

from enum import Enum

from pydantic import BaseModel, Field

from smartsearch.models.note import Note
from smartsearch.models.query import SmartSearchQuery


class FieldType(str, Enum):
    TITLE = "TITLE"
    CONTENT = "CONTENT"
    TAGS = "TAGS"
    CATEGORY = "CATEGORY"


class HighlightType(str, Enum):
    EXACT_MATCH = "EXACT_MATCH"
    PARTIAL_MATCH = "PARTIAL_MATCH"
    FUZZY_MATCH = "FUZZY_MATCH"


class MatchedField(BaseModel):
    field_name: str
    field_type: FieldType
    match_strength: float
    exact_match: bool = False


class SearchHighlight(BaseModel):
    """A matched span; offsets index into the original (cased) field text."""

    text: str
    start: int
    end: int
    field_type: FieldType
    match_type: HighlightType = HighlightType.EXACT_MATCH


class SearchResult(BaseModel):
    note: Note
    score: float
    matched_fields: list[MatchedField] = Field(default_factory=list)
    highlights: list[SearchHighlight] = Field(default_factory=list)
    context_snippets: list[str] = Field(default_factory=list)
    semantic_similarity: float = 0.0


class SuggestionType(str, Enum):
    QUERY_COMPLETION = "QUERY_COMPLETION"
    QUERY_REFINEMENT = "QUERY_REFINEMENT"
    SAVED_SEARCH = "SAVED_SEARCH"
    RECENT_SEARCH = "RECENT_SEARCH"
    POPULAR_SEARCH = "POPULAR_SEARCH"
    SEMANTIC_EXPANSION = "SEMANTIC_EXPANSION"
    FILTER_SUGGESTION = "FILTER_SUGGESTION"


class SearchSuggestion(BaseModel):
    text: str
    type: SuggestionType
    confidence: float
    usage_count: int = 0
    last_used: int = 0


class SearchResults(BaseModel):
    """Response of a single search call."""

    query: SmartSearchQuery
    results: list[SearchResult]
    total_results: int
    search_time_ms: int
    from_cache: bool = False
    suggestions: list[SearchSuggestion] = Field(default_factory=list)


class IndexStats(BaseModel):
    total_notes: int = 0
    vocabulary_size: int = 0
    total_categories: int = 0
    total_tags: int = 0
    last_indexed: int = 0
    last_optimized: int = 0
    build_duration_ms: int = 0
    cache_size: int = 0


class IndexHealth(BaseModel):
    is_healthy: bool
    index_age_ms: int
    cache_hit_rate: float
    avg_words_per_note: float
    memory_estimate: int
    recommendations: list[str] = Field(default_factory=list)


class OptimizeReport(BaseModel):
    """What an optimize pass cleaned up."""

    pruned_postings: int = 0
    expired_cache_entries: int = 0
    evicted_cache_entries: int = 0
    stats: IndexStats = Field(default_factory=IndexStats)
