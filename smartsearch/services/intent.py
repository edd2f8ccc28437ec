"""Semantic intent detection.

Intent is decided by an ordered list of rules; the first rule whose predicate
matches wins. Each rule can be exercised on its own.
"""

import re
from collections.abc import Callable, Sequence
from dataclasses import dataclass

from smartsearch.models.query import SemanticIntent
from smartsearch.utils.text import split_words

_MONTHS = "jan|feb|mar|apr|may|jun|jul|aug|sep|oct|nov|dec"

RECENCY_KEYWORDS = ("recent", "latest", "new", "recently", "lately")
SHORT_QUERY_WORDS = 4


def _any_pattern(*patterns: str) -> Callable[[str], bool]:
    compiled = [re.compile(pattern, re.IGNORECASE) for pattern in patterns]

    def predicate(query: str) -> bool:
        return any(regex.search(query) for regex in compiled)

    return predicate


@dataclass(frozen=True)
class IntentRule:
    """A predicate over the normalized query paired with the intent it signals."""

    name: str
    intent: SemanticIntent
    predicate: Callable[[str], bool]

    def matches(self, query: str) -> bool:
        return self.predicate(query)


def _short_recency_query(query: str) -> bool:
    if len(split_words(query)) > SHORT_QUERY_WORDS:
        return False
    lowered = query.lower()
    return any(re.search(rf"\b{keyword}\b", lowered) for keyword in RECENCY_KEYWORDS)


INTENT_RULES: tuple[IntentRule, ...] = (
    IntentRule(
        "date",
        SemanticIntent.FIND_BY_DATE,
        _any_pattern(
            rf"\b(?:find|show|search)\b.*?\b(?:from|since|between|before|after|on|last|next|this"
            rf"|tomorrow|yesterday|today|week|month|year|{_MONTHS})\b",
            r"\b(?:today|yesterday|this week|last week|this month|last month|this year)\b",
            r"\b(?:recent|latest|new) (?:notes|items|entries)\b",
            r"\b(?:created|modified|updated|edited) (?:before|after|on|between|today|yesterday"
            r"|this|last)\b",
        ),
    ),
    IntentRule(
        "topic",
        SemanticIntent.FIND_BY_TOPIC,
        _any_pattern(
            r"\b(?:about|regarding|related to|concerning|containing|that contains|including)\b",
            r"\b(?:find|search|show) (?:me )?(?:all )?(?:the )?(?:notes|items|entries)"
            r" (?:about|related to|containing)\b",
        ),
    ),
    IntentRule(
        "note-type",
        SemanticIntent.FIND_BY_TYPE,
        _any_pattern(
            r"\b(?:type|kind|format|that is|which is) (?:a )?(?:note|voice memo|image|drawing"
            r"|document|checklist|meeting notes|journal)\b",
            r"\b(?:voice|audio|image|photo|picture|drawing|sketch|document|pdf|checklist|todo"
            r"|meeting|journal) (?:note|entry|item)s?\b",
        ),
    ),
    IntentRule(
        "related",
        SemanticIntent.FIND_RELATED,
        _any_pattern(
            r"\b(?:similar|like|related|connected|relevant) (?:to|with|for)\b",
            r"\b(?:find|show|search) (?:me )?(?:similar|related|relevant) (?:notes|items|entries)\b",
        ),
    ),
    IntentRule(
        "important",
        SemanticIntent.FIND_IMPORTANT,
        _any_pattern(r"\b(?:important|pinned|starred|favou?rites?|priority|flagged)\b"),
    ),
    IntentRule(
        "unfinished",
        SemanticIntent.FIND_UNFINISHED,
        _any_pattern(
            r"\b(?:todo|to do|to-do|unfinished|incomplete|pending|not done|not completed)\b",
            r"\b(?:find|show|search) (?:me )?open\b",
        ),
    ),
    IntentRule(
        "location",
        SemanticIntent.FIND_BY_LOCATION,
        _any_pattern(
            r"\b(?:at|in|near|close to|around)\b.*?\b(?:location|place|address|area|city"
            r"|country|gps|coordinates)\b",
            r"\b(?:find|show|search) (?:me )?(?:notes|items|entries) (?:from|in|near|around)\b",
        ),
    ),
    IntentRule("recency", SemanticIntent.FIND_RECENT, _short_recency_query),
)


def detect_intent(
    query: str, rules: Sequence[IntentRule] = INTENT_RULES
) -> SemanticIntent:
    """
    Classify a query by its surface patterns.

    Args:
        query: Normalized (trimmed) query text
        rules: Ordered rules; the first match wins

    Returns:
        The detected intent, UNKNOWN when no rule matches
    """
    for rule in rules:
        if rule.matches(query):
            return rule.intent
    return SemanticIntent.UNKNOWN
