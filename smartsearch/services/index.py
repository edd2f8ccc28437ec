"""In-memory inverted index over note snapshots.

The index maps terms, categories and tags to posting lists (sets of note ids)
and keeps one :class:`IndexEntry` of per-note metadata. It does no locking of
its own; the owning engine serializes writers against readers.
"""

import logging
import time
from collections.abc import Callable, Iterable
from dataclasses import dataclass

from smartsearch.models.note import Note
from smartsearch.models.query import SearchFilters, SmartSearchQuery
from smartsearch.models.search import IndexStats
from smartsearch.utils.datetime import now_millis
from smartsearch.utils.text import tokenize, word_count

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class IndexEntry:
    """Indexed view of one note."""

    note_id: str
    title_words: frozenset[str]
    content_words: frozenset[str]
    all_words: frozenset[str]
    category: str
    tags: frozenset[str]
    last_modified: int
    word_count: int
    last_indexed: int
    is_pinned: bool = False
    is_favorite: bool = False

    @classmethod
    def from_note(cls, note: Note, indexed_at: int) -> "IndexEntry":
        title_words = frozenset(tokenize(note.title))
        content_words = frozenset(tokenize(note.content))
        return cls(
            note_id=note.id,
            title_words=title_words,
            content_words=content_words,
            all_words=title_words | content_words,
            category=note.category.strip().lower(),
            tags=frozenset(tag.strip().lower() for tag in note.tags if tag.strip()),
            last_modified=note.updated_at,
            word_count=word_count(note.content),
            last_indexed=indexed_at,
            is_pinned=note.is_pinned,
            is_favorite=note.is_favorite,
        )


def _add_posting(postings: dict[str, set[str]], key: str, note_id: str) -> None:
    postings.setdefault(key, set()).add(note_id)


def _drop_posting(postings: dict[str, set[str]], key: str, note_id: str) -> None:
    ids = postings.get(key)
    if ids is None:
        return
    ids.discard(note_id)
    if not ids:
        del postings[key]


class InvertedIndex:
    """Term, category and tag posting lists plus per-note entries."""

    def __init__(self, clock: Callable[[], int] = now_millis):
        self.clock = clock
        self.entries: dict[str, IndexEntry] = {}
        self.terms: dict[str, set[str]] = {}
        self.categories: dict[str, set[str]] = {}
        self.tags: dict[str, set[str]] = {}
        self.last_indexed = 0
        self.last_optimized = 0
        self.build_duration_ms = 0

    def __len__(self) -> int:
        return len(self.entries)

    def __contains__(self, note_id: object) -> bool:
        return note_id in self.entries

    def build(self, notes: Iterable[Note]) -> IndexStats:
        """
        Rebuild from scratch.

        Clears every structure and indexes each note.

        Args:
            notes: Full note snapshot

        Returns:
            Statistics of the rebuilt index
        """
        started = time.perf_counter()
        self.entries.clear()
        self.terms.clear()
        self.categories.clear()
        self.tags.clear()

        for note in notes:
            self.upsert(note)

        self.build_duration_ms = int((time.perf_counter() - started) * 1000)
        self.last_indexed = self.clock()
        logger.info(
            f"Built index: {len(self.entries)} notes, {len(self.terms)} terms "
            f"in {self.build_duration_ms}ms"
        )
        return self.stats()

    def upsert(self, note: Note) -> IndexEntry:
        """Index a note, replacing any previous entry for the same id."""
        self.remove(note.id)

        entry = IndexEntry.from_note(note, self.clock())
        self.entries[note.id] = entry
        for word in entry.all_words:
            _add_posting(self.terms, word, note.id)
        if entry.category:
            _add_posting(self.categories, entry.category, note.id)
        for tag in entry.tags:
            _add_posting(self.tags, tag, note.id)

        self.last_indexed = entry.last_indexed
        return entry

    def remove(self, note_id: str) -> bool:
        """
        Remove a note and every posting that references it.

        Returns:
            False when the id was not indexed
        """
        entry = self.entries.pop(note_id, None)
        if entry is None:
            return False

        for word in entry.all_words:
            _drop_posting(self.terms, word, note_id)
        _drop_posting(self.categories, entry.category, note_id)
        for tag in entry.tags:
            _drop_posting(self.tags, tag, note_id)
        return True

    def get(self, note_id: str) -> IndexEntry | None:
        return self.entries.get(note_id)

    def posting(self, term: str) -> frozenset[str]:
        return frozenset(self.terms.get(term.lower(), ()))

    def candidates(self, query: SmartSearchQuery) -> set[str]:
        """
        Note ids containing every search term.

        Lookup is exact and case-insensitive; an empty term list matches all
        indexed notes.
        """
        if not query.search_terms:
            return set(self.entries)

        postings = sorted(
            (self.terms.get(term.lower(), set()) for term in query.search_terms),
            key=len,
        )
        result = set(postings[0])
        for ids in postings[1:]:
            if not result:
                break
            result &= ids
        return result

    def candidates_any(self, terms: Iterable[str]) -> set[str]:
        """Note ids containing at least one of the terms."""
        result: set[str] = set()
        for term in terms:
            result |= self.terms.get(term.lower(), set())
        return result

    def matches_filters(self, entry: IndexEntry, filters: SearchFilters) -> bool:
        """Return False on the first metadata constraint the entry fails."""
        if filters.date_range and not filters.date_range.contains(entry.last_modified):
            return False

        if filters.last_modified_range and not filters.last_modified_range.contains(
            entry.last_modified
        ):
            return False

        if filters.categories and entry.category not in {
            category.lower() for category in filters.categories
        }:
            return False

        if filters.tags and entry.tags.isdisjoint(tag.lower() for tag in filters.tags):
            return False

        if filters.is_pinned is not None and entry.is_pinned != filters.is_pinned:
            return False

        if filters.min_length is not None and entry.word_count < filters.min_length:
            return False

        if filters.max_length is not None and entry.word_count > filters.max_length:
            return False

        return True

    def prune_empty(self) -> int:
        """Drop posting lists that became empty; returns how many were dropped."""
        pruned = 0
        for postings in (self.terms, self.categories, self.tags):
            empty = [key for key, ids in postings.items() if not ids]
            for key in empty:
                del postings[key]
            pruned += len(empty)
        self.last_optimized = self.clock()
        return pruned

    def average_word_count(self) -> float:
        if not self.entries:
            return 0.0
        return sum(entry.word_count for entry in self.entries.values()) / len(self.entries)

    def size_estimate(self) -> int:
        """Rough byte estimate of the index structures."""
        return (
            len(self.entries) * 100
            + len(self.terms) * 50
            + len(self.categories) * 20
            + len(self.tags) * 20
        )

    def stats(self) -> IndexStats:
        return IndexStats(
            total_notes=len(self.entries),
            vocabulary_size=len(self.terms),
            total_categories=len(self.categories),
            total_tags=len(self.tags),
            last_indexed=self.last_indexed,
            last_optimized=self.last_optimized,
            build_duration_ms=self.build_duration_ms,
        )
