"""Text helpers shared by the parser, the index and the ranking engine."""

import re
import string

MIN_TOKEN_LENGTH = 3

_TOKEN_SPLIT = re.compile(r"[\s" + re.escape(string.punctuation) + r"]+")
_WHITESPACE = re.compile(r"\s+")


def split_tokens(text: str) -> list[str]:
    """Lowercase and split on whitespace and punctuation, keeping order."""
    return [token for token in _TOKEN_SPLIT.split(text.lower()) if token]


def tokenize(text: str) -> set[str]:
    """
    Split text into index terms.

    Lowercases, splits on whitespace and punctuation and drops tokens shorter
    than three characters.
    """
    if not text:
        return set()
    return {token for token in split_tokens(text) if len(token) >= MIN_TOKEN_LENGTH}


def split_words(text: str) -> list[str]:
    """Split on whitespace, discarding empty pieces."""
    return [word for word in _WHITESPACE.split(text.strip()) if word]


def word_count(text: str) -> int:
    return len(split_words(text))


def levenshtein(first: str, second: str) -> int:
    """Classic dynamic-programming edit distance."""
    if first == second:
        return 0
    if not first:
        return len(second)
    if not second:
        return len(first)

    previous = list(range(len(second) + 1))
    for i, left in enumerate(first, start=1):
        current = [i] + [0] * len(second)
        for j, right in enumerate(second, start=1):
            if left == right:
                current[j] = previous[j - 1]
            else:
                current[j] = 1 + min(previous[j], current[j - 1], previous[j - 1])
        previous = current
    return previous[-1]


def similarity(word: str, term: str) -> float:
    """Normalized edit-distance similarity in [0, 1]."""
    longest = max(len(word), len(term))
    if longest == 0:
        return 1.0
    return 1.0 - levenshtein(word, term) / longest
