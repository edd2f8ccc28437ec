"""Query suggestions: completions, filters, history and refinements."""

import re
from collections import Counter
from collections.abc import Iterable, Sequence

from smartsearch.models.query import SemanticIntent, SmartSearchQuery
from smartsearch.models.search import SearchResult, SearchSuggestion, SuggestionType
from smartsearch.services.history import SearchHistory
from smartsearch.services.index import InvertedIndex
from smartsearch.services.presets import SavedSearchManager

FILTER_MATCH_LIMIT = 2
HISTORY_MATCH_LIMIT = 3
RESULT_TAG_LIMIT = 3

# (suffix, type, confidence) appended to the partial text per detected intent
INTENT_REFINEMENTS: dict[SemanticIntent, tuple[tuple[str, SuggestionType, float], ...]] = {
    SemanticIntent.FIND_RECENT: (
        ("from this week", SuggestionType.QUERY_REFINEMENT, 0.6),
        ("this month", SuggestionType.QUERY_REFINEMENT, 0.5),
    ),
    SemanticIntent.FIND_BY_TOPIC: (
        ("related", SuggestionType.SEMANTIC_EXPANSION, 0.5),
    ),
    SemanticIntent.FIND_BY_DATE: (
        ("pinned", SuggestionType.QUERY_REFINEMENT, 0.4),
    ),
    SemanticIntent.FIND_BY_TYPE: (
        ("from this week", SuggestionType.QUERY_REFINEMENT, 0.45),
    ),
    SemanticIntent.FIND_IMPORTANT: (
        ("from this month", SuggestionType.QUERY_REFINEMENT, 0.45),
    ),
}


def completion_confidence(partial: str, completion: str) -> float:
    """Shorter completions of the same prefix are more likely."""
    return 0.5 + 0.4 * len(partial) / max(len(completion), 1)


def merge_suggestions(
    suggestions: Iterable[SearchSuggestion], top_k: int
) -> list[SearchSuggestion]:
    """Deduplicate by text (keeping the most confident) and order by confidence."""
    best: dict[str, SearchSuggestion] = {}
    for suggestion in suggestions:
        key = suggestion.text.lower()
        current = best.get(key)
        if current is None or suggestion.confidence > current.confidence:
            best[key] = suggestion
    ranked = sorted(best.values(), key=lambda suggestion: -suggestion.confidence)
    return ranked[:top_k]


class SuggestionGenerator:
    """Builds ranked suggestions from the index, history and saved presets."""

    def __init__(
        self,
        history: SearchHistory | None = None,
        presets: SavedSearchManager | None = None,
    ):
        self.history = history
        self.presets = presets

    def suggest(
        self,
        partial: str,
        index: InvertedIndex,
        top_k: int = 8,
        intent: SemanticIntent = SemanticIntent.UNKNOWN,
    ) -> list[SearchSuggestion]:
        """
        Suggest completions and refinements for partially typed text.

        Args:
            partial: Text typed so far
            index: Index to draw vocabulary, categories and tags from; the
                caller holds the index read lock
            top_k: Maximum number of suggestions
            intent: Intent detected for the surrounding query context

        Returns:
            Suggestions ordered by descending confidence
        """
        text = partial.strip()
        if not text or top_k <= 0:
            return []

        words = text.split()
        last_word = words[-1].lower()
        head = " ".join(words[:-1])
        suggestions: list[SearchSuggestion] = []

        suggestions.extend(self._completions(head, last_word, index, max(1, top_k // 2)))
        suggestions.extend(self._filters(last_word, index))
        suggestions.extend(self._history(text))
        suggestions.extend(self._presets(text))
        suggestions.extend(refinements(text, intent))

        return merge_suggestions(suggestions, top_k)

    def for_results(
        self,
        query: SmartSearchQuery,
        results: Sequence[SearchResult],
        top_k: int = 8,
    ) -> list[SearchSuggestion]:
        """Follow-up suggestions attached to a search response."""
        tag_counts = Counter(
            tag.lower() for result in results for tag in dict.fromkeys(result.note.tags)
        )
        wanted = {tag.lower() for tag in query.filters.tags}
        suggestions = [
            SearchSuggestion(
                text=f"#{tag}",
                type=SuggestionType.FILTER_SUGGESTION,
                confidence=0.5,
                usage_count=count,
            )
            for tag, count in tag_counts.most_common()
            if tag not in wanted
        ][:RESULT_TAG_LIMIT]
        if query.processed_query:
            suggestions.extend(refinements(query.processed_query, query.semantic_intent))
        return merge_suggestions(suggestions, top_k)

    def _completions(
        self, head: str, prefix: str, index: InvertedIndex, limit: int
    ) -> list[SearchSuggestion]:
        matches = sorted(
            (word for word in index.terms if word.startswith(prefix) and len(word) > len(prefix)),
            key=lambda word: (len(word), word),
        )[:limit]
        return [
            SearchSuggestion(
                text=f"{head} {word}".strip(),
                type=SuggestionType.QUERY_COMPLETION,
                confidence=completion_confidence(prefix, word),
                usage_count=len(index.terms[word]),
            )
            for word in matches
        ]

    def _filters(self, needle: str, index: InvertedIndex) -> list[SearchSuggestion]:
        needle = needle.lstrip("#")
        if not needle:
            return []
        categories = sorted(name for name in index.categories if needle in name)
        tags = sorted(name for name in index.tags if needle in name)
        return [
            SearchSuggestion(
                text=f"in {name}",
                type=SuggestionType.FILTER_SUGGESTION,
                confidence=0.65,
                usage_count=len(index.categories[name]),
            )
            for name in categories[:FILTER_MATCH_LIMIT]
        ] + [
            SearchSuggestion(
                text=f"#{name}",
                type=SuggestionType.FILTER_SUGGESTION,
                confidence=0.7,
                usage_count=len(index.tags[name]),
            )
            for name in tags[:FILTER_MATCH_LIMIT]
        ]

    def _history(self, text: str) -> list[SearchSuggestion]:
        if self.history is None:
            return []
        return [
            SearchSuggestion(
                text=entry.query,
                type=(
                    SuggestionType.POPULAR_SEARCH
                    if entry.usage_count > 1
                    else SuggestionType.RECENT_SEARCH
                ),
                confidence=0.6 + min(0.3, 0.05 * entry.usage_count),
                usage_count=entry.usage_count,
                last_used=entry.timestamp,
            )
            for entry in self.history.matching(text, HISTORY_MATCH_LIMIT)
            if entry.query.lower() != text.lower()
        ]

    def _presets(self, text: str) -> list[SearchSuggestion]:
        if self.presets is None:
            return []
        needle = text.lower()
        suggestions = []
        for preset in self.presets.list_presets():
            if preset.is_default:
                continue
            name_words = re.split(r"\W+", preset.name.lower())
            if not (
                any(word.startswith(needle) for word in name_words)
                or preset.raw_query.lower().startswith(needle)
            ):
                continue
            suggestions.append(
                SearchSuggestion(
                    text=preset.raw_query,
                    type=SuggestionType.SAVED_SEARCH,
                    confidence=0.75,
                    usage_count=preset.usage_count,
                    last_used=preset.last_used,
                )
            )
        return suggestions


def refinements(text: str, intent: SemanticIntent) -> list[SearchSuggestion]:
    """Canned refinements for a detected intent; none for UNKNOWN."""
    return [
        SearchSuggestion(text=f"{text} {suffix}", type=kind, confidence=confidence)
        for suffix, kind, confidence in INTENT_REFINEMENTS.get(intent, ())
    ]
