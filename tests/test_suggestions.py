"""Tests for query suggestions."""

import pytest
from conftest import NOW

from smartsearch.models.query import SemanticIntent, SmartSearchQuery
from smartsearch.models.search import SearchResult, SearchSuggestion, SuggestionType
from smartsearch.services.history import SearchHistory
from smartsearch.services.index import InvertedIndex
from smartsearch.services.presets import SavedSearchManager
from smartsearch.services.suggestions import (
    SuggestionGenerator,
    completion_confidence,
    merge_suggestions,
)


@pytest.fixture(name="history")
def history_fixture() -> SearchHistory:
    return SearchHistory(clock=lambda: NOW)


@pytest.fixture(name="presets")
def presets_fixture() -> SavedSearchManager:
    return SavedSearchManager(clock=lambda: NOW)


@pytest.fixture(name="generator")
def generator_fixture(history: SearchHistory, presets: SavedSearchManager) -> SuggestionGenerator:
    return SuggestionGenerator(history, presets)


@pytest.fixture(name="index")
def index_fixture(make_note) -> InvertedIndex:
    index = InvertedIndex(clock=lambda: NOW)
    index.build(
        [
            make_note("a", "Team offsite", "testing the new setup", tags=["travel"]),
            make_note("b", "Test plan", "more tests", category="Technical"),
        ]
    )
    return index


def test_empty_index_and_history_gives_nothing(generator: SuggestionGenerator):
    assert generator.suggest("te", InvertedIndex()) == []


def test_blank_input_gives_nothing(generator: SuggestionGenerator, index: InvertedIndex):
    assert generator.suggest("   ", index) == []
    assert generator.suggest("te", index, top_k=0) == []


def test_prefix_completions_prefer_short_words(
    generator: SuggestionGenerator, index: InvertedIndex
):
    suggestions = generator.suggest("te", index, top_k=8)
    completions = [s for s in suggestions if s.type == SuggestionType.QUERY_COMPLETION]

    assert [s.text for s in completions] == ["team", "test", "tests", "testing"]
    assert completions[0].confidence == pytest.approx(completion_confidence("te", "team"))


def test_completion_keeps_leading_words(generator: SuggestionGenerator, index: InvertedIndex):
    suggestions = generator.suggest("project tes", index)

    assert "project test" in [s.text for s in suggestions]


def test_category_and_tag_suggestions(generator: SuggestionGenerator, index: InvertedIndex):
    texts = {s.text: s.type for s in generator.suggest("tra", index)}
    assert texts["#travel"] == SuggestionType.FILTER_SUGGESTION

    texts = {s.text: s.type for s in generator.suggest("tech", index)}
    assert texts["in technical"] == SuggestionType.FILTER_SUGGESTION


def test_history_suggestions(
    generator: SuggestionGenerator, history: SearchHistory, index: InvertedIndex
):
    query = SmartSearchQuery(raw_query="roadmap review", search_terms=["roadmap", "review"])
    history.record(query, result_count=2, search_time_ms=1)

    suggestions = generator.suggest("road", index)
    assert suggestions[0].text == "roadmap review"
    assert suggestions[0].type == SuggestionType.RECENT_SEARCH

    history.record(query, result_count=2, search_time_ms=1)
    popular = generator.suggest("road", index)[0]
    assert popular.type == SuggestionType.POPULAR_SEARCH
    assert popular.usage_count == 2


def test_only_user_presets_are_suggested(
    generator: SuggestionGenerator, presets: SavedSearchManager, index: InvertedIndex
):
    assert all(s.type != SuggestionType.SAVED_SEARCH for s in generator.suggest("work", index))

    presets.save("Weekly review", "review this week")
    texts = {s.text: s.type for s in generator.suggest("wee", index)}

    assert texts["review this week"] == SuggestionType.SAVED_SEARCH


def test_intent_refinements(generator: SuggestionGenerator, index: InvertedIndex):
    recent = generator.suggest("zzz", index, intent=SemanticIntent.FIND_RECENT)
    assert [s.text for s in recent] == ["zzz from this week", "zzz this month"]

    topic = generator.suggest("zzz", index, intent=SemanticIntent.FIND_BY_TOPIC)
    assert [(s.text, s.type) for s in topic] == [("zzz related", SuggestionType.SEMANTIC_EXPANSION)]

    assert generator.suggest("zzz", index, intent=SemanticIntent.UNKNOWN) == []


def test_results_are_sorted_and_truncated(generator: SuggestionGenerator, index: InvertedIndex):
    suggestions = generator.suggest("te", index, top_k=2, intent=SemanticIntent.FIND_RECENT)

    assert [s.text for s in suggestions] == ["team", "in technical"]


def test_merge_keeps_most_confident_duplicate():
    suggestions = merge_suggestions(
        [
            SearchSuggestion(text="Budget", type=SuggestionType.RECENT_SEARCH, confidence=0.6),
            SearchSuggestion(text="budget", type=SuggestionType.QUERY_COMPLETION, confidence=0.8),
            SearchSuggestion(text="plan", type=SuggestionType.QUERY_COMPLETION, confidence=0.7),
        ],
        top_k=5,
    )

    assert [(s.text, s.confidence) for s in suggestions] == [("budget", 0.8), ("plan", 0.7)]


def test_for_results_suggests_unused_tags(generator: SuggestionGenerator, make_note):
    query = SmartSearchQuery(raw_query="plan #work", search_terms=["plan"])
    query.filters.tags = ["work"]
    results = [
        SearchResult(note=make_note("a", tags=["work", "ideas"]), score=1.0),
        SearchResult(note=make_note("b", tags=["ideas", "ideas"]), score=1.0),
    ]

    suggestions = generator.for_results(query, results)

    assert [s.text for s in suggestions] == ["#ideas"]
    assert suggestions[0].usage_count == 2
