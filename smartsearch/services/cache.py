"""TTL and size bounded cache of ranked search results."""

import hashlib
import json
import logging
import threading
from collections import OrderedDict
from collections.abc import Callable
from dataclasses import dataclass

from smartsearch.models.query import DateRange, SearchFilters, SmartSearchQuery
from smartsearch.models.search import SearchResult
from smartsearch.utils.datetime import now_millis

logger = logging.getLogger(__name__)

DEFAULT_TTL_MS = 5 * 60 * 1000
DEFAULT_MAX_ENTRIES = 200


@dataclass(frozen=True)
class CachedResult:
    """Ranked results captured for one logical query."""

    key: str
    results: tuple[SearchResult, ...]
    total_results: int
    captured_at: int
    latency_ms: int

    def is_expired(self, now: int, ttl_ms: int) -> bool:
        return now - self.captured_at > ttl_ms


def _canonical_range(date_range: DateRange | None) -> object:
    if date_range is None:
        return None
    # Relative windows move with the clock; key them by their name
    if date_range.relative_type is not None:
        return date_range.relative_type.value
    return [date_range.start, date_range.end]


def filters_fingerprint(filters: SearchFilters) -> str:
    """Order-independent hash of a filter set."""
    canonical = {
        "date_range": _canonical_range(filters.date_range),
        "last_modified_range": _canonical_range(filters.last_modified_range),
        "categories": sorted({category.lower() for category in filters.categories}),
        "tags": sorted({tag.lower() for tag in filters.tags}),
        "note_types": sorted({note_type.value for note_type in filters.note_types}),
        "has_attachments": filters.has_attachments,
        "is_pinned": filters.is_pinned,
        "min_length": filters.min_length,
        "max_length": filters.max_length,
    }
    encoded = json.dumps(canonical, sort_keys=True, separators=(",", ":"))
    return hashlib.sha256(encoded.encode("utf-8")).hexdigest()


def cache_key(query: SmartSearchQuery) -> str:
    """Identical logical queries always map to the same key."""
    processed = " ".join(query.processed_query.lower().split())
    mode = [
        query.search_type.value,
        query.phrase or "",
        query.pattern or "",
        sorted(query.excluded_terms),
        query.match_any,
    ]
    mode_hash = hashlib.sha256(json.dumps(mode).encode("utf-8")).hexdigest()[:16]
    return f"{processed}|{mode_hash}|{filters_fingerprint(query.filters)}"


class ResultCache:
    """
    Result cache with write-order eviction.

    Entries expire ``ttl_ms`` after they were written. When full, the entry
    written longest ago is evicted regardless of how recently it was read.
    """

    def __init__(
        self,
        ttl_ms: int = DEFAULT_TTL_MS,
        max_entries: int = DEFAULT_MAX_ENTRIES,
        clock: Callable[[], int] = now_millis,
    ):
        self.ttl_ms = ttl_ms
        self.max_entries = max_entries
        self.clock = clock
        self._entries: OrderedDict[str, CachedResult] = OrderedDict()
        self._lock = threading.Lock()
        self.hits = 0
        self.misses = 0

    def __len__(self) -> int:
        with self._lock:
            return len(self._entries)

    def get(self, key: str) -> CachedResult | None:
        """Return a fresh entry or None; an expired entry is dropped and counts as a miss."""
        with self._lock:
            entry = self._entries.get(key)
            if entry is not None and entry.is_expired(self.clock(), self.ttl_ms):
                del self._entries[key]
                entry = None

            if entry is None:
                self.misses += 1
            else:
                self.hits += 1
            return entry

    def put(
        self,
        key: str,
        results: list[SearchResult],
        total_results: int,
        latency_ms: int,
    ) -> CachedResult:
        entry = CachedResult(
            key=key,
            results=tuple(results),
            total_results=total_results,
            captured_at=self.clock(),
            latency_ms=latency_ms,
        )
        with self._lock:
            # Re-writing a key makes it the newest entry
            self._entries.pop(key, None)
            self._entries[key] = entry
            self._evict_overflow()
        return entry

    def clear(self) -> int:
        with self._lock:
            count = len(self._entries)
            self._entries.clear()
        if count:
            logger.debug(f"Cleared {count} cached results")
        return count

    def purge_expired(self) -> int:
        now = self.clock()
        with self._lock:
            expired = [
                key
                for key, entry in self._entries.items()
                if entry.is_expired(now, self.ttl_ms)
            ]
            for key in expired:
                del self._entries[key]
        return len(expired)

    def enforce_capacity(self) -> int:
        with self._lock:
            return self._evict_overflow()

    def _evict_overflow(self) -> int:
        evicted = 0
        while len(self._entries) > self.max_entries:
            self._entries.popitem(last=False)
            evicted += 1
        return evicted

    @property
    def hit_rate(self) -> float:
        lookups = self.hits + self.misses
        return self.hits / lookups if lookups else 0.0

    @property
    def lookups(self) -> int:
        return self.hits + self.misses
