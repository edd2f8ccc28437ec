"""Tests for relevance scoring and ordering."""

import pytest
from conftest import NOW, days_ago

from smartsearch.models.query import SearchFilters, SmartSearchQuery
from smartsearch.models.search import FieldType, HighlightType
from smartsearch.services.index import IndexEntry
from smartsearch.services.ranking import (
    MAX_NOTE_SCORE,
    RankingEngine,
    ScoringProfile,
    field_score,
    fuzzy_match,
)
from smartsearch.utils.text import levenshtein, similarity, tokenize


def terms_query(*terms: str, **filters) -> SmartSearchQuery:
    return SmartSearchQuery(
        raw_query=" ".join(terms),
        search_terms=list(terms),
        filters=SearchFilters(**filters),
    )


@pytest.fixture(name="ranking")
def ranking_fixture() -> RankingEngine:
    return RankingEngine(clock=lambda: NOW)


def test_levenshtein():
    assert levenshtein("kitten", "sitting") == 3
    assert levenshtein("", "abc") == 3
    assert levenshtein("same", "same") == 0
    assert similarity("roadmap", "roadmp") == pytest.approx(1 - 1 / 7)


def test_tokenize_lowercases_and_splits_on_punctuation():
    assert tokenize("Hello, World! a-b co-op") == {"hello", "world"}


def test_fuzzy_match_threshold():
    assert fuzzy_match("the roadmap review", "roadmp") == pytest.approx(1 - 1 / 7)
    assert fuzzy_match("the budget", "budgte") == 0.0
    assert fuzzy_match("ab cd", "ab") == 0.0


def test_field_score_components():
    # contains + word boundary + prefix + exact fuzzy similarity
    assert field_score("Budget review", ["budget"]) == pytest.approx(1.0 + 0.5 + 0.3 + 0.3)
    assert field_score("Annual budgeting", ["budget"]) == pytest.approx(1.0)
    assert field_score("", ["budget"]) == 0.0
    assert field_score("Budget", []) == 0.0


def test_title_match_outranks_content_match(ranking: RankingEngine, make_note):
    in_title = make_note("a", "Budget", "misc text")
    in_content = make_note("b", "Misc", "budget text")
    query = terms_query("budget")

    assert ranking.score(in_title, query) > ranking.score(in_content, query)


def test_pinned_outranks_identical_note(ranking: RankingEngine, make_note):
    plain = make_note("a", "Budget", "text")
    pinned = make_note("b", "Budget", "text", is_pinned=True)
    query = terms_query("budget")

    plain_score = ranking.score(plain, query)
    pinned_score = ranking.score(pinned, query)
    ordered = ranking.rank([(plain, plain_score, False, 0.0), (pinned, pinned_score, True, 0.0)])

    assert pinned_score > plain_score
    assert ordered[0][0] is pinned


def test_pinned_first_when_scores_are_capped(ranking: RankingEngine, make_note):
    text = "budget " * 20
    plain = make_note("a", "Budget budget", text, tags=["budget"], category="budget")
    pinned = plain.model_copy(update={"id": "b", "is_pinned": True})
    query = terms_query("budget")

    assert ranking.score(plain, query) == MAX_NOTE_SCORE
    assert ranking.score(pinned, query) == MAX_NOTE_SCORE
    ordered = ranking.rank(
        [(plain, MAX_NOTE_SCORE, False, 0.0), (pinned, MAX_NOTE_SCORE, True, 0.0)]
    )
    assert [note.id for note, _ in ordered] == ["b", "a"]


def test_rank_is_stable_for_ties():
    ordered = RankingEngine.rank(
        [("first", 1.0, False, 0.0), ("second", 1.0, False, 0.0), ("top", 2.0, False, 0.0)]
    )

    assert [item for item, _ in ordered] == ["top", "first", "second"]


def test_title_match_breaks_capped_ties(ranking: RankingEngine, make_note):
    content = "alpha bravo charlie delta echo foxtrot golf"
    plain = make_note("plain", "Misc", content)
    titled = make_note("titled", "Alpha bravo", content)
    query = terms_query(*content.split())

    assert ranking.score(plain, query) == ranking.score(titled, query) == MAX_NOTE_SCORE
    ordered = ranking.rank(
        [
            (note, ranking.score(note, query), False, ranking.title_relevance(note, query))
            for note in (plain, titled)
        ]
    )

    assert [note.id for note, _ in ordered] == ["titled", "plain"]


def test_recency(ranking: RankingEngine):
    assert ranking.recency(NOW) == 1.0
    assert ranking.recency(days_ago(15)) == pytest.approx(0.5)
    assert ranking.recency(days_ago(40)) == 0.0


def test_note_score_without_terms_is_status_and_recency(ranking: RankingEngine, make_note):
    note = make_note("a", "Anything", "at all", is_favorite=True)

    assert ranking.score(note, terms_query()) == pytest.approx(0.2 + 0.3)


def test_index_profile_scores_entries(make_note):
    ranking = RankingEngine(ScoringProfile.INDEX, clock=lambda: NOW)
    entry = IndexEntry.from_note(
        make_note("a", "Budget review", "The budget", category="Work", tags=["finance"]),
        NOW,
    )

    # title word + content word + one partially matching title word + full recency
    assert ranking.score(entry, terms_query("budget")) == pytest.approx(3 + 1 + 1.5 + 0.5)
    boosted = terms_query("budget", categories=["work"], tags=["finance"])
    assert ranking.score(entry, boosted) == pytest.approx(6.0 + 2 + 2)


def test_matched_fields(ranking: RankingEngine, make_note):
    note = make_note("a", "Budget", "the budget", tags=["budget", "misc"], category="Work")

    fields = ranking.matched_fields(note, terms_query("budget"))

    assert [field.field_type for field in fields] == [
        FieldType.TITLE,
        FieldType.CONTENT,
        FieldType.TAGS,
    ]
    assert all(field.exact_match for field in fields)


def test_highlights_use_original_offsets(ranking: RankingEngine, make_note):
    note = make_note("a", "Weekly Budget", "budget and more budget")

    highlights = ranking.highlights(note, terms_query("budget"))

    title = [h for h in highlights if h.field_type == FieldType.TITLE]
    content = [h for h in highlights if h.field_type == FieldType.CONTENT]
    assert [(h.text, h.start, h.end) for h in title] == [("Budget", 7, 13)]
    assert [(h.start, h.end) for h in content] == [(0, 6), (16, 22)]


def test_context_snippets_are_bounded(ranking: RankingEngine, make_note):
    content = " ".join(f"word{i}" for i in range(200)) + " alpha beta gamma delta"
    note = make_note("a", "Title", content)

    snippets = ranking.context_snippets(
        note, terms_query("alpha", "beta", "gamma", "delta", "missing")
    )

    assert 1 <= len(snippets) <= 3
    assert all(len(snippet) <= 160 for snippet in snippets)
    assert "alpha" in snippets[0]


def test_highlight_match_types(ranking: RankingEngine, make_note):
    note = make_note("a", "Roadmaps", "the roadmp draft")

    highlights = ranking.highlights(note, terms_query("roadmap"))

    assert [(h.field_type, h.match_type, h.text) for h in highlights] == [
        (FieldType.TITLE, HighlightType.PARTIAL_MATCH, "Roadmap"),
        (FieldType.CONTENT, HighlightType.FUZZY_MATCH, "roadmp"),
    ]


def test_exact_highlights_need_whole_words(ranking: RankingEngine, make_note):
    note = make_note("a", "Budget", "budget")

    highlights = ranking.highlights(note, terms_query("budget"))

    assert {h.match_type for h in highlights} == {HighlightType.EXACT_MATCH}
