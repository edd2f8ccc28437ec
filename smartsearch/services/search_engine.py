"""Smart search engine: parse, retrieve, filter, rank, cache."""

import logging
import re
import time
from collections.abc import Callable, Iterable

from smartsearch.config import Settings
from smartsearch.models.note import Note
from smartsearch.models.query import SearchType, SmartSearchQuery
from smartsearch.models.search import (
    IndexHealth,
    IndexStats,
    OptimizeReport,
    SearchResult,
    SearchResults,
    SearchSuggestion,
)
from smartsearch.services.cache import ResultCache, cache_key
from smartsearch.services.history import SearchHistory
from smartsearch.services.index import InvertedIndex
from smartsearch.services.intent import detect_intent
from smartsearch.services.presets import SavedSearchManager
from smartsearch.services.query_parser import QueryParser
from smartsearch.services.ranking import MAX_NOTE_SCORE, RankingEngine, ScoringProfile
from smartsearch.services.suggestions import SuggestionGenerator
from smartsearch.utils.datetime import now_millis
from smartsearch.utils.locking import ReadWriteLock
from smartsearch.utils.text import tokenize

logger = logging.getLogger(__name__)

SEMANTIC_BOOST = 1.2
SLOW_BUILD_MS = 5000
LOW_HIT_RATE = 0.5
MIN_LOOKUPS_FOR_HIT_RATE = 10
CACHE_ENTRY_BYTES = 200

# Modes whose retrieval step already proves the match
_PREDICATE_MODES = {SearchType.EXACT_PHRASE, SearchType.REGEX}


def _snapshot_fingerprint(notes: Iterable[Note]) -> frozenset[tuple[str, int]]:
    return frozenset((note.id, note.updated_at) for note in notes)


def lexical_overlap(note: Note, terms: Iterable[str]) -> float:
    """Jaccard similarity between the query terms and the note's words."""
    note_words = tokenize(f"{note.title} {note.content}")
    query_words = set(terms)
    union = note_words | query_words
    if not union:
        return 0.0
    return len(note_words & query_words) / len(union)


class SmartSearchEngine:
    """
    Owns the index, the result cache and their synchronization.

    Searches and suggestions run concurrently under the read lock. Index
    mutations take the write lock and clear the result cache before
    releasing it, and a search writes its cache entry while still holding
    the read lock, so no stale entry can outlive a mutation.
    """

    def __init__(self, settings: Settings, clock: Callable[[], int] = now_millis):
        """
        Initialize the engine.

        Args:
            settings: Application settings
            clock: Source of the current time in epoch milliseconds
        """
        self.settings = settings
        self.clock = clock
        self.parser = QueryParser(settings.first_day_of_week, clock)
        self.ranking = RankingEngine(
            ScoringProfile(settings.scoring_profile), settings.recency_window_days, clock
        )
        self.cache = ResultCache(settings.cache_ttl_ms, settings.cache_max_entries, clock)
        self.history = SearchHistory(settings.history_limit, clock)
        self.presets = SavedSearchManager(clock)
        self.suggestions = SuggestionGenerator(self.history, self.presets)

        self.index = InvertedIndex(clock)
        self._notes: dict[str, Note] = {}
        self._fingerprint: frozenset[tuple[str, int]] | None = None
        self._lock = ReadWriteLock()

    # Indexing

    def build_index(self, notes: Iterable[Note]) -> IndexStats:
        """
        Rebuild the index from a full note snapshot.

        The new index is built without holding any lock and swapped in under
        the write lock, so searches keep using the old index meanwhile.

        Args:
            notes: Complete note snapshot

        Returns:
            Statistics of the new index
        """
        snapshot = {note.id: note for note in notes}
        fresh = InvertedIndex(self.clock)
        fresh.build(snapshot.values())

        with self._lock.write():
            fresh.last_optimized = self.index.last_optimized
            self.index = fresh
            self._notes = snapshot
            self._fingerprint = _snapshot_fingerprint(snapshot.values())
            self.cache.clear()
            return self._stats()

    def index_note(self, note: Note) -> IndexStats:
        """Add or replace a single note."""
        with self._lock.write():
            self._notes[note.id] = note
            self.index.upsert(note)
            self._fingerprint = None
            self.cache.clear()
            logger.debug(f"Indexed note {note.id}")
            return self._stats()

    def remove_note_from_index(self, note_id: str) -> bool:
        """
        Remove a note; unknown ids are ignored.

        Returns:
            True when the note was indexed
        """
        with self._lock.write():
            self._notes.pop(note_id, None)
            removed = self.index.remove(note_id)
            if removed:
                self._fingerprint = None
                self.cache.clear()
                logger.debug(f"Removed note {note_id} from index")
            return removed

    def sync(self, notes: list[Note]) -> bool:
        """Rebuild when the snapshot differs from what was last indexed."""
        fingerprint = _snapshot_fingerprint(notes)
        with self._lock.read():
            unchanged = fingerprint == self._fingerprint
        if unchanged:
            return False
        logger.info(f"Note snapshot changed, rebuilding index ({len(notes)} notes)")
        self.build_index(notes)
        return True

    # Searching

    def search(
        self,
        raw_query: str,
        notes: list[Note] | None = None,
        max_results: int | None = None,
    ) -> SearchResults:
        """
        Run a natural-language search.

        Args:
            raw_query: Query text as typed
            notes: Optional current note snapshot; the index is rebuilt first
                when it differs from the indexed one
            max_results: Maximum results to return, clamped to the configured cap

        Returns:
            SearchResults with the parsed query, ranked results and follow-up
            suggestions
        """
        started = time.perf_counter()
        if notes is not None:
            self.sync(notes)

        limit = self._clamp_limit(max_results)
        query = self.parser.parse(raw_query)
        key = cache_key(query)

        cached = self.cache.get(key)
        if cached is not None:
            results = list(cached.results[:limit])
            total = cached.total_results
            from_cache = True
        else:
            with self._lock.read():
                ranked = self._execute(query)
                total = len(ranked)
                details = [
                    self._build_result(note, score, query)
                    for note, score in ranked[: self.settings.max_results_cap]
                ]
                if query.search_type is SearchType.SEMANTIC:
                    details = self._enrich_semantic(details, query)
                self.cache.put(key, details, total, _elapsed_ms(started))
            results = details[:limit]
            from_cache = False

        elapsed = _elapsed_ms(started)
        self.history.record(query, total, elapsed)
        logger.debug(
            f"Search '{raw_query}' returned {len(results)}/{total} results "
            f"in {elapsed}ms (cached={from_cache})"
        )
        return SearchResults(
            query=query,
            results=results,
            total_results=total,
            search_time_ms=elapsed,
            from_cache=from_cache,
            suggestions=self.suggestions.for_results(
                query, results, self.settings.suggestion_limit
            ),
        )

    def run_preset(
        self,
        preset_id: str,
        notes: list[Note] | None = None,
        max_results: int | None = None,
    ) -> SearchResults:
        """
        Run a saved search; its raw text is parsed again so dates are current.

        Raises:
            NotFoundError: If no preset has this id
        """
        preset = self.presets.record_usage(preset_id)
        return self.search(preset.raw_query, notes, max_results)

    def get_suggestions(
        self, partial: str, limit: int | None = None, context: str | None = None
    ) -> list[SearchSuggestion]:
        """
        Suggestions for partially typed text.

        Args:
            partial: Text typed so far
            limit: Maximum suggestions, defaults to the configured limit
            context: Query already in the search box; its intent picks the
                refinements, falling back to the partial text itself

        Returns:
            Suggestions ordered by descending confidence
        """
        intent = detect_intent((context or partial).strip().lower())
        top_k = limit if limit is not None else self.settings.suggestion_limit
        with self._lock.read():
            return self.suggestions.suggest(partial, self.index, top_k, intent)

    # Maintenance

    def optimize_index(self) -> OptimizeReport:
        """Drop empty postings, purge expired cache entries and enforce capacity."""
        with self._lock.write():
            pruned = self.index.prune_empty()
            stats = self._stats()
        expired = self.cache.purge_expired()
        evicted = self.cache.enforce_capacity()
        stats.cache_size = len(self.cache)
        logger.info(
            f"Optimized index: pruned {pruned} postings, purged {expired} expired "
            f"and evicted {evicted} cached results"
        )
        return OptimizeReport(
            pruned_postings=pruned,
            expired_cache_entries=expired,
            evicted_cache_entries=evicted,
            stats=stats,
        )

    def get_index_health(self) -> IndexHealth:
        now = self.clock()
        with self._lock.read():
            note_count = len(self.index)
            last_indexed = self.index.last_indexed
            build_ms = self.index.build_duration_ms
            avg_words = self.index.average_word_count()
            index_bytes = self.index.size_estimate()

        cache_size = len(self.cache)
        hit_rate = self.cache.hit_rate
        age = now - last_indexed if last_indexed else 0

        recommendations: list[str] = []
        if note_count == 0:
            recommendations.append("Index is empty, build it from the current notes")
        if age > self.settings.stale_index_ms:
            recommendations.append("Index is stale, consider rebuilding it")
        if self.cache.lookups >= MIN_LOOKUPS_FOR_HIT_RATE and hit_rate < LOW_HIT_RATE:
            recommendations.append(
                "Low cache hit rate, consider a longer cache TTL or a larger cache"
            )
        if build_ms > SLOW_BUILD_MS:
            recommendations.append("Index build time is high, consider optimizing the index")

        return IndexHealth(
            is_healthy=not recommendations,
            index_age_ms=age,
            cache_hit_rate=hit_rate,
            avg_words_per_note=avg_words,
            memory_estimate=index_bytes + cache_size * CACHE_ENTRY_BYTES,
            recommendations=recommendations,
        )

    def stats(self) -> IndexStats:
        with self._lock.read():
            return self._stats()

    # Internals; callers hold the lock

    def _stats(self) -> IndexStats:
        stats = self.index.stats()
        stats.cache_size = len(self.cache)
        return stats

    def _clamp_limit(self, max_results: int | None) -> int:
        if max_results is None:
            max_results = self.settings.default_max_results
        return max(0, min(max_results, self.settings.max_results_cap))

    def _execute(self, query: SmartSearchQuery) -> list[tuple[Note, float]]:
        candidate_ids = self._candidates(query)
        filters = query.filters
        apply_threshold = bool(query.search_terms) and query.search_type not in _PREDICATE_MODES

        scored: list[tuple[Note, float, bool, float]] = []
        # Walk the snapshot so equal scores keep insertion order
        for note_id, note in self._notes.items():
            if note_id not in candidate_ids:
                continue
            entry = self.index.get(note_id)
            if entry is None or not self.index.matches_filters(entry, filters):
                continue
            target = entry if self.ranking.profile is ScoringProfile.INDEX else note
            if apply_threshold and self.ranking.relevance(target, query) <= self.settings.min_score:
                continue
            scored.append(
                (
                    note,
                    self.ranking.score(target, query),
                    note.is_pinned,
                    self.ranking.title_relevance(target, query),
                )
            )

        return self.ranking.rank(scored)

    def _candidates(self, query: SmartSearchQuery) -> set[str]:
        search_type = query.search_type

        if search_type is SearchType.EXACT_PHRASE and query.phrase:
            phrase = query.phrase.lower()
            return {
                note_id
                for note_id in self.index.candidates(query)
                if phrase in self._notes[note_id].title.lower()
                or phrase in self._notes[note_id].content.lower()
            }

        if search_type is SearchType.REGEX and query.pattern:
            try:
                pattern = re.compile(query.pattern, re.IGNORECASE)
            except re.error as e:
                logger.warning(f"Invalid search pattern '{query.pattern}': {e}")
                return self.index.candidates(query)
            return {
                note_id
                for note_id, note in self._notes.items()
                if note_id in self.index
                and (pattern.search(note.title) or pattern.search(note.content))
            }

        if search_type is SearchType.FUZZY:
            return set(self.index.entries)

        if search_type is SearchType.ADVANCED:
            if query.match_any and query.search_terms:
                ids = self.index.candidates_any(query.search_terms)
            else:
                ids = self.index.candidates(query)
            return ids - self.index.candidates_any(query.excluded_terms)

        return self.index.candidates(query)

    def _build_result(self, note: Note, score: float, query: SmartSearchQuery) -> SearchResult:
        return SearchResult(
            note=note,
            score=score,
            matched_fields=self.ranking.matched_fields(note, query),
            highlights=self.ranking.highlights(note, query),
            context_snippets=self.ranking.context_snippets(note, query),
        )

    def _enrich_semantic(
        self, results: list[SearchResult], query: SmartSearchQuery
    ) -> list[SearchResult]:
        """Lexical-overlap pass; any failure keeps the base ranking."""
        try:
            enriched = []
            for result in results:
                score = result.score * SEMANTIC_BOOST
                if self.ranking.profile is ScoringProfile.NOTE:
                    score = min(score, MAX_NOTE_SCORE)
                enriched.append(
                    result.model_copy(
                        update={
                            "score": score,
                            "semantic_similarity": lexical_overlap(
                                result.note, query.search_terms
                            ),
                        }
                    )
                )
            ranked = self.ranking.rank(
                [
                    (
                        result,
                        result.score,
                        result.note.is_pinned,
                        self.ranking.title_relevance(result.note, query),
                    )
                    for result in enriched
                ]
            )
            return [result for result, _ in ranked]
        except Exception as e:
            logger.warning(f"Semantic enrichment failed, using lexical ranking: {e}")
            return results


def _elapsed_ms(started: float) -> int:
    return int((time.perf_counter() - started) * 1000)
