"""
Relevance ranking strategies.

``ExactMatch`` ranks full-text matches by cover density (the algorithm behind
PostgreSQL's ``ts_rank_cd``). ``FuzzyMatch`` ranks by the best trigram
similarity of the query against serial number, type name and description.
``select_strategy`` is the single place that decides between them.
"""

import logging
import math
from dataclasses import dataclass
from typing import Dict, FrozenSet, Iterator, List, Optional, Tuple
from storefront.models.gemstone import Gemstone
from storefront.search.query import QueryTerm
from storefront.search.trigram import SIMILARITY_THRESHOLD, similarity
from storefront.search.vector import SearchVector

logger = logging.getLogger(__name__)

# Weight multipliers indexed by weight letter
DEFAULT_RANK_WEIGHTS: Dict[str, float] = {"D": 0.1, "C": 0.2, "B": 0.4, "A": 1.0}

# Normalization flags, combinable with |
NORM_LOG_LENGTH = 1
NORM_LENGTH = 2
NORM_EXTENT_DISTANCE = 4
NORM_UNIQUE = 8
NORM_LOG_UNIQUE = 16
NORM_RANK_PLUS_ONE = 32


@dataclass(frozen=True)
class _Item:
    position: int
    weight: str
    lexemes: FrozenSet[str]


def _document_items(vector: SearchVector, lexemes: FrozenSet[str]) -> List[_Item]:
    """Occurrences of query lexemes in position order, merged per position."""
    by_position: Dict[int, Tuple[str, set]] = {}
    for lexeme in lexemes:
        for position, weight in vector.occurrences(lexeme):
            if position in by_position:
                by_position[position][1].add(lexeme)
            else:
                by_position[position] = (weight, {lexeme})
    return [
        _Item(position, weight, frozenset(found))
        for position, (weight, found) in sorted(by_position.items())
    ]


def _covers(items: List[_Item], query: QueryTerm) -> Iterator[Tuple[int, int]]:
    """Yield (begin, end) item indices of successive minimal covers."""
    start = 0
    while start < len(items):
        present: set = set()
        end = None
        for i in range(start, len(items)):
            present |= items[i].lexemes
            if query.satisfied_by(frozenset(present)):
                end = i
                break
        if end is None:
            return

        present = set()
        begin = end
        for i in range(end, start - 1, -1):
            present |= items[i].lexemes
            if query.satisfied_by(frozenset(present)):
                begin = i
                break

        yield begin, end
        start = begin + 1


def rank_cd(
    vector: SearchVector,
    query: QueryTerm,
    weights: Optional[Dict[str, float]] = None,
    normalization: int = 0
) -> float:
    """
    Cover-density rank of a vector for a query.

    Args:
        vector: Document vector
        query: Parsed query
        weights: Multiplier per weight letter (defaults to D=0.1 C=0.2 B=0.4 A=1.0)
        normalization: Bit mask of NORM_* flags

    Returns:
        Non-negative relevance score
    """
    weights = weights or DEFAULT_RANK_WEIGHTS
    items = _document_items(vector, query.lexemes())
    if not items:
        return 0.0

    score = 0.0
    sum_distance = 0.0
    previous_center = 0.0
    extents = 0

    for begin, end in _covers(items, query):
        covered = items[begin:end + 1]
        inverse_sum = sum(1.0 / weights[item.weight] for item in covered)
        density = len(covered) / inverse_sum

        noise = (items[end].position - items[begin].position) - (end - begin)
        if noise < 0:
            noise = (end - begin) // 2
        score += density / (1 + noise)

        center = (items[end].position + items[begin].position) / 2.0
        if extents > 0 and center > previous_center:
            sum_distance += 1.0 / (center - previous_center)
        previous_center = center
        extents += 1

    if normalization & NORM_LOG_LENGTH and len(vector) > 0:
        score /= math.log(vector.length() + 1)
    if normalization & NORM_LENGTH and vector.length() > 0:
        score /= vector.length()
    if normalization & NORM_EXTENT_DISTANCE and extents > 0 and sum_distance > 0:
        score /= extents / sum_distance
    if normalization & NORM_UNIQUE and len(vector) > 0:
        score /= len(vector)
    if normalization & NORM_LOG_UNIQUE and len(vector) > 0:
        score /= math.log(len(vector) + 1) / math.log(2.0)
    if normalization & NORM_RANK_PLUS_ONE:
        score /= score + 1

    return score


def effective_vector(gemstone: Gemstone, language: str, include_descriptions: bool) -> SearchVector:
    """The per-language vector, with the description vector appended when requested."""
    if language == "ru":
        base = SearchVector.parse(gemstone.search_vector_ru)
        extra = gemstone.description_vector_ru
    else:
        base = SearchVector.parse(gemstone.search_vector_en)
        extra = gemstone.description_vector_en
    if include_descriptions:
        return base | SearchVector.parse(extra)
    return base


class RankingStrategy:
    """Scores a gemstone for a query, or rejects it with None."""

    name = "base"
    fuzzy = False

    def score(self, gemstone: Gemstone) -> Optional[float]:
        raise NotImplementedError


class BrowseAll(RankingStrategy):
    """No search text: every candidate qualifies with a zero score."""

    name = "browse"

    def score(self, gemstone: Gemstone) -> Optional[float]:
        return 0.0


class ExactMatch(RankingStrategy):
    """Full-text match over the language vector, ranked by cover density."""

    name = "exact"

    def __init__(self, query: QueryTerm, include_descriptions: bool = False, normalization: int = 0):
        self.query = query
        self.include_descriptions = include_descriptions
        self.normalization = normalization

    def score(self, gemstone: Gemstone) -> Optional[float]:
        vector = effective_vector(gemstone, self.query.language, self.include_descriptions)
        if not self.query.matches(vector):
            return None
        return rank_cd(vector, self.query, normalization=self.normalization)


class FuzzyMatch(RankingStrategy):
    """Trigram similarity against serial number, type name and description."""

    name = "fuzzy"
    fuzzy = True

    def __init__(self, text: str, similarity_fn=similarity):
        self.text = text
        self.similarity_fn = similarity_fn

    def score(self, gemstone: Gemstone) -> Optional[float]:
        best = max(
            self.similarity_fn(gemstone.serial_number or "", self.text),
            self.similarity_fn(gemstone.name or "", self.text),
            self.similarity_fn(gemstone.description or "", self.text),
        )
        if best > SIMILARITY_THRESHOLD:
            return best
        return None


def select_strategy(
    query_text: Optional[str],
    language: str,
    use_fuzzy: bool = False,
    include_descriptions: bool = False,
    normalization: int = 0
) -> RankingStrategy:
    """
    Pick the ranking strategy for a request.

    Args:
        query_text: Raw query text
        language: Resolved search language
        use_fuzzy: Caller asked for trigram matching
        include_descriptions: Append description vectors in exact mode
        normalization: Rank normalization flags for exact mode

    Returns:
        BrowseAll for blank queries, otherwise FuzzyMatch or ExactMatch
    """
    if not query_text or not query_text.strip():
        return BrowseAll()

    if use_fuzzy:
        return FuzzyMatch(query_text.strip())

    query = QueryTerm.parse(query_text, language)
    if query.is_empty:
        logger.info(f"Query '{query_text}' has no searchable terms, browsing instead")
        return BrowseAll()
    return ExactMatch(query, include_descriptions=include_descriptions, normalization=normalization)
