"""Trigram similarity, computed the way the pg_trgm extension does."""

from functools import lru_cache
from typing import FrozenSet, Optional

# Similarity must be strictly greater than this to count as a fuzzy match
SIMILARITY_THRESHOLD = 0.3


@lru_cache(maxsize=16384)
def trigrams(text: Optional[str]) -> FrozenSet[str]:
    """
    Extract the trigram set of a string.

    Each run of alphanumeric characters is lower-cased and padded with two
    leading blanks and one trailing blank before taking every 3-character
    window.
    """
    if not text:
        return frozenset()

    words = []
    current = []
    for ch in text.lower():
        if ch.isalnum():
            current.append(ch)
        elif current:
            words.append("".join(current))
            current = []
    if current:
        words.append("".join(current))

    grams = set()
    for word in words:
        padded = f"  {word} "
        for i in range(len(padded) - 2):
            grams.add(padded[i:i + 3])
    return frozenset(grams)


def similarity(left: Optional[str], right: Optional[str]) -> float:
    """Shared trigrams divided by the union of both trigram sets (0..1)."""
    a = trigrams(left)
    b = trigrams(right)
    if not a or not b:
        return 0.0
    common = len(a & b)
    return common / (len(a) + len(b) - common)


def is_similar(left: Optional[str], right: Optional[str]) -> bool:
    return similarity(left, right) > SIMILARITY_THRESHOLD
