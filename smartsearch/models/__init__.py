"""Domain models."""

from smartsearch.models.note import Note
from smartsearch.models.query import (
    DateRange,
    NoteType,
    RelativeDateType,
    SearchFilters,
    SearchType,
    SemanticIntent,
    SmartSearchQuery,
)
from smartsearch.models.search import (
    FieldType,
    HighlightType,
    IndexHealth,
    IndexStats,
    MatchedField,
    OptimizeReport,
    SearchHighlight,
    SearchResult,
    SearchResults,
    SearchSuggestion,
    SuggestionType,
)

__all__ = [
    "Note",
    "DateRange",
    "NoteType",
    "RelativeDateType",
    "SearchFilters",
    "SearchType",
    "SemanticIntent",
    "SmartSearchQuery",
    "FieldType",
    "HighlightType",
    "IndexHealth",
    "IndexStats",
    "MatchedField",
    "OptimizeReport",
    "SearchHighlight",
    "SearchResult",
    "SearchResults",
    "SearchSuggestion",
    "SuggestionType",
]
