"""Service modules for search logic."""

from smartsearch.services.cache import ResultCache
from smartsearch.services.history import SearchHistory
from smartsearch.services.index import IndexEntry, InvertedIndex
from smartsearch.services.live_search import LiveSearch
from smartsearch.services.presets import SavedSearchManager
from smartsearch.services.query_parser import QueryParser
from smartsearch.services.ranking import RankingEngine
from smartsearch.services.search_engine import SmartSearchEngine
from smartsearch.services.suggestions import SuggestionGenerator

__all__ = [
    "IndexEntry",
    "InvertedIndex",
    "LiveSearch",
    "QueryParser",
    "RankingEngine",
    "ResultCache",
    "SavedSearchManager",
    "SearchHistory",
    "SmartSearchEngine",
    "SuggestionGenerator",
]
