"""Structured query model produced by the query parser."""

from enum import Enum

from pydantic import BaseModel, Field


class SearchType(str, Enum):
    GENERAL = "GENERAL"
    EXACT_PHRASE = "EXACT_PHRASE"
    FUZZY = "FUZZY"
    REGEX = "REGEX"
    ADVANCED = "ADVANCED"
    SEMANTIC = "SEMANTIC"


class SemanticIntent(str, Enum):
    """Coarse classification of what the user is looking for."""

    UNKNOWN = "UNKNOWN"
    FIND_RECENT = "FIND_RECENT"
    FIND_BY_TOPIC = "FIND_BY_TOPIC"
    FIND_BY_DATE = "FIND_BY_DATE"
    FIND_BY_TYPE = "FIND_BY_TYPE"
    FIND_RELATED = "FIND_RELATED"
    FIND_IMPORTANT = "FIND_IMPORTANT"
    FIND_UNFINISHED = "FIND_UNFINISHED"
    FIND_BY_LOCATION = "FIND_BY_LOCATION"


class NoteType(str, Enum):
    TEXT = "TEXT"
    VOICE = "VOICE"
    IMAGE = "IMAGE"
    DRAWING = "DRAWING"
    DOCUMENT = "DOCUMENT"
    CHECKLIST = "CHECKLIST"
    MEETING = "MEETING"
    JOURNAL = "JOURNAL"


class RelativeDateType(str, Enum):
    TODAY = "TODAY"
    YESTERDAY = "YESTERDAY"
    THIS_WEEK = "THIS_WEEK"
    LAST_WEEK = "LAST_WEEK"
    THIS_MONTH = "THIS_MONTH"
    LAST_MONTH = "LAST_MONTH"
    THIS_YEAR = "THIS_YEAR"


class DateRange(BaseModel):
    """Inclusive [start, end] window in epoch milliseconds."""

    start: int
    end: int
    relative_type: RelativeDateType | None = None

    def contains(self, millis: int) -> bool:
        return self.start <= millis <= self.end


class SearchFilters(BaseModel):
    """Metadata constraints extracted from a query."""

    date_range: DateRange | None = None
    last_modified_range: DateRange | None = None
    categories: list[str] = Field(default_factory=list)
    tags: list[str] = Field(default_factory=list)
    note_types: list[NoteType] = Field(default_factory=list)
    has_attachments: bool | None = None
    is_pinned: bool | None = None
    min_length: int | None = None
    max_length: int | None = None

    def is_empty(self) -> bool:
        return self == SearchFilters()


class SmartSearchQuery(BaseModel):
    """A parsed natural-language query."""

    raw_query: str
    processed_query: str = ""
    search_terms: list[str] = Field(default_factory=list)
    filters: SearchFilters = Field(default_factory=SearchFilters)
    search_type: SearchType = SearchType.GENERAL
    semantic_intent: SemanticIntent = SemanticIntent.UNKNOWN

    # Mode payloads
    phrase: str | None = None
    pattern: str | None = None
    excluded_terms: list[str] = Field(default_factory=list)
    match_any: bool = False
