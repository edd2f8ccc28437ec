"""Natural-language query parsing.

Turns free text such as ``meeting notes from last week #work`` into a
:class:`SmartSearchQuery`: search terms, metadata filters, a search type and a
coarse semantic intent. Parsing never fails; anything that is not recognized
as a filter ends up as a plain search term.
"""

import logging
import re
from collections.abc import Callable
from datetime import timedelta

from smartsearch.models.query import (
    DateRange,
    NoteType,
    RelativeDateType,
    SearchFilters,
    SearchType,
    SmartSearchQuery,
)
from smartsearch.services.intent import detect_intent
from smartsearch.utils.datetime import (
    now_millis,
    previous_month_start,
    start_of_day,
    start_of_month,
    start_of_week,
    to_local,
    to_millis,
)
from smartsearch.utils.text import MIN_TOKEN_LENGTH, split_tokens

logger = logging.getLogger(__name__)

STOP_WORDS = frozenset(
    {
        "a", "an", "the", "and", "or", "not", "in", "on", "at", "to", "for", "of",
        "with", "without", "find", "search", "show", "me", "all", "my", "that",
        "this", "these", "those", "from", "since", "between", "before", "after",
        "last", "next", "type", "kind", "format", "has", "have", "had",
        "containing", "about", "regarding", "related", "similar", "like",
        "important", "pinned", "starred", "todo", "unfinished", "incomplete",
        "pending", "location", "place", "recent", "recently", "latest", "lately",
        "new", "any", "some", "are", "was", "were", "what", "which", "where",
    }
)  # fmt: skip

FILTER_KEYWORDS = frozenset(
    {
        "category", "tag", "type", "kind", "format", "from", "since", "between",
        "before", "after", "on", "last", "next", "this", "with", "without", "has",
        "have", "had", "containing", "about", "regarding", "related", "similar",
        "like", "important", "pinned", "starred", "todo", "unfinished",
        "incomplete", "pending", "location", "place",
    }
)  # fmt: skip

CATEGORY_KEYWORDS: dict[str, tuple[str, ...]] = {
    "work": ("work", "business", "office", "meeting", "project"),
    "personal": ("personal", "private", "diary", "journal"),
    "academic": ("study", "school", "university", "research", "academic"),
    "creative": ("creative", "art", "design", "writing", "ideas"),
    "health": ("health", "fitness", "medical", "doctor", "exercise"),
    "finance": ("money", "budget", "finance", "expense", "income"),
    "travel": ("travel", "trip", "vacation", "flight", "hotel"),
}

NOTE_TYPE_PATTERNS: tuple[tuple[NoteType, re.Pattern[str]], ...] = (
    (NoteType.VOICE, re.compile(r"\b(?:voice|audio|recording)")),
    (NoteType.IMAGE, re.compile(r"\b(?:image|photo|picture)")),
    (NoteType.DRAWING, re.compile(r"\b(?:drawing|sketch|draw)")),
    (NoteType.DOCUMENT, re.compile(r"\b(?:document|pdf|file)")),
    (NoteType.CHECKLIST, re.compile(r"\b(?:checklist|todo|to-do|task)")),
    (NoteType.MEETING, re.compile(r"\b(?:meeting|minutes)")),
    (NoteType.JOURNAL, re.compile(r"\b(?:journal|diary)")),
)

# Checked in order; the first phrase present decides the range
DATE_PHRASES: tuple[tuple[str, RelativeDateType], ...] = (
    ("today", RelativeDateType.TODAY),
    ("yesterday", RelativeDateType.YESTERDAY),
    ("this week", RelativeDateType.THIS_WEEK),
    ("last week", RelativeDateType.LAST_WEEK),
    ("this month", RelativeDateType.THIS_MONTH),
    ("last month", RelativeDateType.LAST_MONTH),
    ("this year", RelativeDateType.THIS_YEAR),
)
_DATE_WORDS = "|".join(phrase for phrase, _ in DATE_PHRASES)

_LAST_MODIFIED = re.compile(rf"\b(?:modified|updated|edited)\s+({_DATE_WORDS})\b")
_DATE_PHRASE = re.compile(rf"\b(?:(?:modified|updated|edited|created)\s+)?(?:{_DATE_WORDS})\b")
_QUALIFIER = re.compile(
    r"\b(?:category|tag|type|kind|format|from|since|between|before|after|on|last|next"
    r"|this|with|without|has|have|had|containing|about|regarding|related|similar|like"
    r"|important|pinned|starred|todo|unfinished|incomplete|pending|location|place)"
    r"\s*:\s*\S+"
)
_ATTACHMENT_PHRASE = re.compile(
    r"\b(?:with|without|has|no)\s+(?:an?\s+)?attachments?\b"
)
_PINNED_PHRASE = re.compile(r"\b(?:not\s+pinned|unpinned|pinned)\b")
_LENGTH_PHRASE = re.compile(r"\b(?:short|long)\s+notes\b")
_TAG = re.compile(r"#(\w+)")
_QUOTED = re.compile(r'"([^"]+)"')
_REGEX_META = re.compile(r"[\[\]*+?^$\{\}()|\\]")
_SEMANTIC_WORDS = re.compile(r"\b(?:similar|like|related)\b")
_EXCLUDED = re.compile(r"(?:^|(?<=\s))-(\w+)|\bNOT\s+(\w+)")
_BOOLEAN_WORDS = re.compile(r"\b(?:and|or|not)\b")

SHORT_NOTE_MAX_WORDS = 200
LONG_NOTE_MIN_WORDS = 500


def extract_date_range(
    query: str, now: int, first_day_of_week: int = 0
) -> DateRange | None:
    """
    Resolve the first relative date phrase in ``query`` to a window.

    "today", "this week", "this month" and "this year" end at ``now``;
    "yesterday", "last week" and "last month" cover the whole previous period.

    Args:
        query: Query text (any casing)
        now: Current time in epoch milliseconds
        first_day_of_week: 0 = Monday ... 6 = Sunday

    Returns:
        DateRange or None when no phrase is present
    """
    lowered = query.lower()
    for phrase, relative_type in DATE_PHRASES:
        if re.search(rf"\b{phrase}\b", lowered):
            return relative_date_range(relative_type, now, first_day_of_week)
    return None


def relative_date_range(
    relative_type: RelativeDateType, now: int, first_day_of_week: int = 0
) -> DateRange:
    """Compute the [start, end] window of a relative period around ``now``."""
    current = to_local(now)
    midnight = start_of_day(current)

    if relative_type is RelativeDateType.TODAY:
        start, end = to_millis(midnight), now
    elif relative_type is RelativeDateType.YESTERDAY:
        start, end = to_millis(midnight - timedelta(days=1)), to_millis(midnight) - 1
    elif relative_type is RelativeDateType.THIS_WEEK:
        start, end = to_millis(start_of_week(current, first_day_of_week)), now
    elif relative_type is RelativeDateType.LAST_WEEK:
        week_start = start_of_week(current, first_day_of_week)
        start = to_millis(week_start - timedelta(days=7))
        end = to_millis(week_start) - 1
    elif relative_type is RelativeDateType.THIS_MONTH:
        start, end = to_millis(start_of_month(current)), now
    elif relative_type is RelativeDateType.LAST_MONTH:
        start = to_millis(previous_month_start(current))
        end = to_millis(start_of_month(current)) - 1
    else:
        start, end = to_millis(midnight.replace(month=1, day=1)), now

    return DateRange(start=start, end=end, relative_type=relative_type)


def extract_last_modified_range(
    query: str, now: int, first_day_of_week: int = 0
) -> DateRange | None:
    """Range for phrases such as "modified today" or "updated last week"."""
    match = _LAST_MODIFIED.search(query.lower())
    if not match:
        return None
    return extract_date_range(match.group(1), now, first_day_of_week)


def extract_categories(query: str) -> list[str]:
    """Categories whose keywords occur anywhere in the query (substring match)."""
    lowered = query.lower()
    return [
        category
        for category, keywords in CATEGORY_KEYWORDS.items()
        if any(keyword in lowered for keyword in keywords)
    ]


def extract_tags(query: str) -> list[str]:
    tags: list[str] = []
    for tag in _TAG.findall(query):
        tag = tag.lower()
        if tag not in tags:
            tags.append(tag)
    return tags


def extract_note_types(query: str) -> list[NoteType]:
    lowered = query.lower()
    return [note_type for note_type, regex in NOTE_TYPE_PATTERNS if regex.search(lowered)]


def extract_attachment_filter(query: str) -> bool | None:
    lowered = query.lower()
    if re.search(r"\b(?:without|no)\s+attachments?\b", lowered):
        return False
    if re.search(r"\b(?:with|has)\s+(?:an?\s+)?attachments?\b", lowered):
        return True
    return None


def extract_pinned_filter(query: str) -> bool | None:
    lowered = query.lower()
    # Negative forms first: "not pinned" also contains "pinned"
    if re.search(r"\b(?:not\s+pinned|unpinned)\b", lowered):
        return False
    if re.search(r"\bpinned\b", lowered):
        return True
    return None


def extract_length_filters(query: str) -> tuple[int | None, int | None]:
    """Return (min_length, max_length) in words."""
    lowered = query.lower()
    if "short notes" in lowered:
        return None, SHORT_NOTE_MAX_WORDS
    if "long notes" in lowered:
        return LONG_NOTE_MIN_WORDS, None
    return None, None


def determine_search_type(query: str) -> SearchType:
    """Pick the matching strategy from the query's surface syntax."""
    if _QUOTED.search(query):
        return SearchType.EXACT_PHRASE
    if _REGEX_META.search(query):
        return SearchType.REGEX
    if "~" in query:
        return SearchType.FUZZY
    tokens = query.split()
    if any(token in ("AND", "OR", "NOT") for token in tokens) or any(
        len(token) > 1 and token[0] in "+-" for token in tokens
    ):
        return SearchType.ADVANCED
    if _SEMANTIC_WORDS.search(query.lower()):
        return SearchType.SEMANTIC
    return SearchType.GENERAL


def extract_exclusions(query: str) -> list[str]:
    """Terms negated with a leading ``-`` or a ``NOT`` operator."""
    excluded: list[str] = []
    for dash_term, not_term in _EXCLUDED.findall(query):
        term = (dash_term or not_term).lower()
        if term and term not in excluded:
            excluded.append(term)
    return excluded


def strip_filter_phrases(text: str) -> str:
    """Remove every recognized filter phrase from lowercased text."""
    text = _QUALIFIER.sub(" ", text)
    text = _DATE_PHRASE.sub(" ", text)
    text = _ATTACHMENT_PHRASE.sub(" ", text)
    text = _PINNED_PHRASE.sub(" ", text)
    text = _LENGTH_PHRASE.sub(" ", text)
    return _TAG.sub(" ", text)


def extract_search_terms(
    query: str,
    categories: list[str] | None = None,
    excluded: list[str] | None = None,
) -> list[str]:
    """
    Clean a query down to its content terms.

    Strips filter phrases, negated terms, boolean keywords and extracted
    category names, splits the rest the way note text is indexed, then
    drops stop words and tokens shorter than three characters. Order of
    first appearance is kept.
    """
    text = _EXCLUDED.sub(" ", query) if excluded else query
    text = strip_filter_phrases(text.lower())
    text = _BOOLEAN_WORDS.sub(" ", text)
    for category in categories or []:
        text = re.sub(rf"\b{re.escape(category)}\b", " ", text)

    excluded_set = set(excluded or [])
    terms: list[str] = []
    # Same word boundaries as the index: "e-mail" yields "mail"
    for token in split_tokens(text):
        if len(token) < MIN_TOKEN_LENGTH:
            continue
        if token in STOP_WORDS or token in FILTER_KEYWORDS or token in excluded_set:
            continue
        if token not in terms:
            terms.append(token)
    return terms


class QueryParser:
    """Parses raw query text into a structured query."""

    def __init__(
        self,
        first_day_of_week: int = 0,
        clock: Callable[[], int] = now_millis,
    ):
        self.first_day_of_week = first_day_of_week
        self.clock = clock

    def parse(self, raw: str) -> SmartSearchQuery:
        """
        Parse a natural-language query.

        Args:
            raw: Query text as typed by the user

        Returns:
            SmartSearchQuery; search_terms is empty when nothing but filters
            (or nothing at all) was typed
        """
        normalized = (raw or "").strip()
        now = self.clock()

        search_type = determine_search_type(normalized)
        categories = extract_categories(normalized)
        min_length, max_length = extract_length_filters(normalized)

        excluded: list[str] = []
        match_any = False
        if search_type is SearchType.ADVANCED:
            excluded = extract_exclusions(normalized)
            match_any = "OR" in normalized.split()

        phrase = None
        pattern = None
        if search_type is SearchType.EXACT_PHRASE:
            phrase = _QUOTED.search(normalized).group(1).strip().lower()  # type: ignore[union-attr]
        elif search_type is SearchType.REGEX:
            pattern = _TAG.sub(" ", _QUALIFIER.sub(" ", normalized)).strip() or None

        filters = SearchFilters(
            date_range=extract_date_range(normalized, now, self.first_day_of_week),
            last_modified_range=extract_last_modified_range(
                normalized, now, self.first_day_of_week
            ),
            categories=categories,
            tags=extract_tags(normalized),
            note_types=extract_note_types(normalized),
            has_attachments=extract_attachment_filter(normalized),
            is_pinned=extract_pinned_filter(normalized),
            min_length=min_length,
            max_length=max_length,
        )

        terms = extract_search_terms(normalized, categories, excluded)
        query = SmartSearchQuery(
            raw_query=raw,
            processed_query=" ".join(terms),
            search_terms=terms,
            filters=filters,
            search_type=search_type,
            semantic_intent=detect_intent(normalized),
            phrase=phrase,
            pattern=pattern,
            excluded_terms=excluded,
            match_any=match_any,
        )
        logger.debug(
            f"Parsed query '{normalized}': terms={terms} type={search_type.value} "
            f"intent={query.semantic_intent.value}"
        )
        return query
