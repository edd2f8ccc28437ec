"""Relevance scoring.

Two scoring profiles exist:

* ``note`` (canonical): field scores computed on the note text, weighted
  title 3.0, content 1.0, tags 2.0, category 1.5, plus a 0.2 recency boost and
  pinned/favorite boosts, capped at 10.
* ``index``: computed on an :class:`IndexEntry` word sets, with a 0.5 recency
  boost and filter-match boosts, unbounded.

They are never blended; the engine picks one per configuration.
"""

import re
from collections.abc import Callable, Sequence
from enum import Enum
from typing import TypeVar

from smartsearch.models.note import Note
from smartsearch.models.query import SmartSearchQuery
from smartsearch.models.search import (
    FieldType,
    HighlightType,
    MatchedField,
    SearchHighlight,
)
from smartsearch.services.index import IndexEntry
from smartsearch.utils.datetime import days_between, now_millis
from smartsearch.utils.text import MIN_TOKEN_LENGTH, similarity, split_words

TITLE_WEIGHT = 3.0
CONTENT_WEIGHT = 1.0
TAG_WEIGHT = 2.0
CATEGORY_WEIGHT = 1.5

CONTAINS_SCORE = 1.0
WORD_BOUNDARY_SCORE = 0.5
PREFIX_SCORE = 0.3
FUZZY_WEIGHT = 0.3
FUZZY_THRESHOLD = 0.7

NOTE_RECENCY_WEIGHT = 0.2
PINNED_BOOST = 0.5
FAVORITE_BOOST = 0.3
PINNED_MULTIPLIER = 1.3
MAX_NOTE_SCORE = 10.0

INDEX_RECENCY_WEIGHT = 0.5
INDEX_TITLE_SCORE = 3.0
INDEX_CONTENT_SCORE = 1.0
INDEX_PARTIAL_TITLE_SCORE = 1.5
INDEX_FILTER_BOOST = 2.0

SNIPPET_LENGTH = 150
MAX_SNIPPETS = 3

T = TypeVar("T")


class ScoringProfile(str, Enum):
    NOTE = "note"
    INDEX = "index"


def fuzzy_match(text: str, term: str) -> float:
    """
    Best normalized similarity between ``term`` and any word of ``text``.

    Only similarities above the threshold count; terms shorter than three
    characters never fuzzy-match.
    """
    if len(term) < MIN_TOKEN_LENGTH:
        return 0.0

    best = 0.0
    for word in split_words(text):
        if len(word) < len(term) - 1:
            continue
        score = similarity(word, term)
        if score > FUZZY_THRESHOLD and score > best:
            best = score
    return best


def field_score(field: str, terms: Sequence[str]) -> float:
    """Sum of per-term containment, boundary, prefix and fuzzy scores."""
    if not field.strip() or not terms:
        return 0.0

    lowered = field.lower()
    score = 0.0
    for term in terms:
        term = term.lower()
        if term in lowered:
            score += CONTAINS_SCORE
            if re.search(rf"\b{re.escape(term)}\b", lowered):
                score += WORD_BOUNDARY_SCORE
            if lowered.startswith(term):
                score += PREFIX_SCORE
        score += fuzzy_match(lowered, term) * FUZZY_WEIGHT
    return score


class RankingEngine:
    """Scores candidates against a parsed query and orders them."""

    def __init__(
        self,
        profile: ScoringProfile = ScoringProfile.NOTE,
        recency_window_days: int = 30,
        clock: Callable[[], int] = now_millis,
    ):
        self.profile = ScoringProfile(profile)
        self.recency_window_days = recency_window_days
        self.clock = clock

    def recency(self, last_modified: int) -> float:
        """1.0 for a note modified now, falling linearly to 0 over the window."""
        days = days_between(last_modified, self.clock())
        return max(0.0, 1.0 - days / self.recency_window_days)

    def score(self, target: Note | IndexEntry, query: SmartSearchQuery) -> float:
        if isinstance(target, IndexEntry):
            return self.score_entry(target, query)
        return self.score_note(target, query)

    def relevance(self, target: Note | IndexEntry, query: SmartSearchQuery) -> float:
        """Term-match part of the score, without recency or status boosts."""
        if isinstance(target, IndexEntry):
            return self._entry_relevance(target, query)
        return self._note_relevance(target, query)

    def score_note(self, note: Note, query: SmartSearchQuery) -> float:
        """Primary scorer; result lies in [0, 10]."""
        score = self._note_relevance(note, query)
        score += self.recency(note.updated_at) * NOTE_RECENCY_WEIGHT

        if note.is_pinned:
            score += PINNED_BOOST
        if note.is_favorite:
            score += FAVORITE_BOOST
        if note.is_pinned:
            score *= PINNED_MULTIPLIER

        return min(score, MAX_NOTE_SCORE)

    def score_entry(self, entry: IndexEntry, query: SmartSearchQuery) -> float:
        """Index-level scorer; unbounded, only meaningful within one query."""
        score = self._entry_relevance(entry, query)

        filters = query.filters
        if entry.category in {category.lower() for category in filters.categories}:
            score += INDEX_FILTER_BOOST
        wanted_tags = {tag.lower() for tag in filters.tags}
        score += INDEX_FILTER_BOOST * sum(1 for tag in entry.tags if tag in wanted_tags)

        score += self.recency(entry.last_modified) * INDEX_RECENCY_WEIGHT
        return score

    def _note_relevance(self, note: Note, query: SmartSearchQuery) -> float:
        terms = query.search_terms
        if not terms:
            return 0.0
        return (
            field_score(note.title, terms) * TITLE_WEIGHT
            + field_score(note.content, terms) * CONTENT_WEIGHT
            + sum(field_score(tag, terms) for tag in note.tags) * TAG_WEIGHT
            + field_score(note.category, terms) * CATEGORY_WEIGHT
        )

    def _entry_relevance(self, entry: IndexEntry, query: SmartSearchQuery) -> float:
        score = 0.0
        for term in query.search_terms:
            term = term.lower()
            if term in entry.title_words:
                score += INDEX_TITLE_SCORE
            if term in entry.content_words:
                score += INDEX_CONTENT_SCORE
            for word in entry.title_words:
                if term in word or word in term:
                    score += INDEX_PARTIAL_TITLE_SCORE
        return score

    def title_relevance(self, target: Note | IndexEntry, query: SmartSearchQuery) -> float:
        """Title part of the term match, used to break score ties."""
        if isinstance(target, IndexEntry):
            return INDEX_TITLE_SCORE * sum(
                1 for term in query.search_terms if term.lower() in target.title_words
            )
        return field_score(target.title, query.search_terms) * TITLE_WEIGHT

    @staticmethod
    def rank(scored: Sequence[tuple[T, float, bool, float]]) -> list[tuple[T, float]]:
        """
        Order (item, score, is_pinned, title_relevance) tuples.

        Descending score; on equal score pinned before unpinned, then the
        stronger title match, otherwise input order.
        """
        ordered = sorted(scored, key=lambda item: (-item[1], not item[2], -item[3]))
        return [(item, score) for item, score, _, _ in ordered]

    def matched_fields(self, note: Note, query: SmartSearchQuery) -> list[MatchedField]:
        terms = query.search_terms
        fields: list[MatchedField] = []

        def add(name: str, field_type: FieldType, text: str) -> None:
            strength = field_score(text, terms)
            if strength > 0:
                fields.append(
                    MatchedField(
                        field_name=name,
                        field_type=field_type,
                        match_strength=strength,
                        exact_match=any(term in text.lower() for term in terms),
                    )
                )

        add("title", FieldType.TITLE, note.title)
        add("content", FieldType.CONTENT, note.content)
        for tag in note.tags:
            add(tag, FieldType.TAGS, tag)
        add("category", FieldType.CATEGORY, note.category)
        return fields

    def highlights(self, note: Note, query: SmartSearchQuery) -> list[SearchHighlight]:
        highlights: list[SearchHighlight] = []
        for term in query.search_terms:
            highlights.extend(_find_spans(note.title, term, FieldType.TITLE))
            highlights.extend(_find_spans(note.content, term, FieldType.CONTENT))
        return highlights

    def context_snippets(self, note: Note, query: SmartSearchQuery) -> list[str]:
        """Windows of text around the first occurrence of each term."""
        content = note.content
        lowered = content.lower()
        snippets: list[str] = []
        for term in query.search_terms:
            index = lowered.find(term.lower())
            if index == -1:
                continue
            start = max(0, index - SNIPPET_LENGTH // 2)
            end = min(len(content), index + len(term) + SNIPPET_LENGTH // 2)
            snippet = content[start:end].strip()
            if snippet and snippet not in snippets:
                snippets.append(snippet)
            if len(snippets) == MAX_SNIPPETS:
                break
        return snippets


def _find_spans(text: str, term: str, field_type: FieldType) -> list[SearchHighlight]:
    """
    Every occurrence of the term in the field.

    Whole-word occurrences are exact matches and occurrences inside a longer
    word are partial. When the term does not occur at all, the most similar
    word above the fuzzy threshold is returned as a fuzzy match.
    """
    spans: list[SearchHighlight] = []
    lowered = text.lower()
    needle = term.lower()
    if not needle:
        return spans

    for match in re.finditer(re.escape(needle), lowered):
        start, end = match.span()
        exact = (start == 0 or not lowered[start - 1].isalnum()) and (
            end == len(lowered) or not lowered[end].isalnum()
        )
        spans.append(
            SearchHighlight(
                text=text[start:end],
                start=start,
                end=end,
                field_type=field_type,
                match_type=HighlightType.EXACT_MATCH if exact else HighlightType.PARTIAL_MATCH,
            )
        )
    if spans or len(needle) < MIN_TOKEN_LENGTH:
        return spans

    best: re.Match[str] | None = None
    best_score = FUZZY_THRESHOLD
    for word in re.finditer(r"\w+", lowered):
        if len(word.group()) < len(needle) - 1:
            continue
        score = similarity(word.group(), needle)
        if score > best_score:
            best, best_score = word, score
    if best is not None:
        spans.append(
            SearchHighlight(
                text=text[best.start() : best.end()],
                start=best.start(),
                end=best.end(),
                field_type=field_type,
                match_type=HighlightType.FUZZY_MATCH,
            )
        )
    return spans
