import logging
from dataclasses import dataclass
from typing import Dict, Iterable, List, Optional, Tuple
from storefront.search.trigram import SIMILARITY_THRESHOLD, similarity

logger = logging.getLogger(__name__)

SERIAL_NUMBER_CATEGORY = "serial_number"


@dataclass(frozen=True)
class VocabularyEntry:
    """A localized term, the raw code it names, and its vocabulary family."""
    text: str
    category: str
    code: Optional[str] = None


@dataclass(frozen=True)
class ScoredSuggestion:
    suggestion: str
    similarity_score: float
    category: str


def _rank(scored: Dict[Tuple[str, str], float], limit: int) -> List[ScoredSuggestion]:
    ordered = sorted(scored.items(), key=lambda item: (-item[1], item[0][0], item[0][1]))
    return [
        ScoredSuggestion(suggestion=text, similarity_score=score, category=category)
        for (text, category), score in ordered[:limit]
    ]


class SuggestionEngine:
    """Did-you-mean and autocomplete over the controlled vocabularies."""

    def suggest(self, term: Optional[str], vocabulary: Iterable[VocabularyEntry], limit: int = 5) -> List[ScoredSuggestion]:
        """
        Propose vocabulary terms that look like a misspelled query.

        Args:
            term: User-entered text
            vocabulary: Localized names of every vocabulary family
            limit: Maximum number of suggestions

        Returns:
            Suggestions with similarity above the fuzzy threshold, best first,
            ties broken alphabetically
        """
        if not term or not term.strip() or limit <= 0:
            return []

        term = term.strip()
        scored: Dict[Tuple[str, str], float] = {}
        for entry in vocabulary:
            score = similarity(entry.text, term)
            if score <= SIMILARITY_THRESHOLD:
                continue
            key = (entry.text, entry.category)
            scored[key] = max(score, scored.get(key, 0.0))

        suggestions = _rank(scored, limit)
        logger.debug(f"Fuzzy suggestions for '{term}': {len(suggestions)}")
        return suggestions

    def autocomplete(
        self,
        term: Optional[str],
        vocabulary: Iterable[VocabularyEntry],
        serial_numbers: Iterable[str] = (),
        limit: int = 10
    ) -> List[ScoredSuggestion]:
        """
        Autocomplete against localized names and serial numbers.

        A localized term scores the better of its own similarity and the
        similarity of its raw code, so typing "ruby" in a Russian storefront
        still proposes the Russian name.

        Args:
            term: Partial user input
            vocabulary: Localized names with their raw codes
            serial_numbers: Known serial numbers
            limit: Maximum number of suggestions

        Returns:
            Suggestions above the fuzzy threshold, best first
        """
        if not term or not term.strip() or limit <= 0:
            return []

        term = term.strip()
        scored: Dict[Tuple[str, str], float] = {}

        for entry in vocabulary:
            score = similarity(entry.text, term)
            if entry.code:
                score = max(score, similarity(entry.code, term))
            if score <= SIMILARITY_THRESHOLD:
                continue
            key = (entry.text, entry.category)
            scored[key] = max(score, scored.get(key, 0.0))

        lowered = term.lower()
        for serial_number in serial_numbers:
            score = similarity(serial_number, term)
            if serial_number.lower().startswith(lowered):
                score = max(score, 1.0 if len(lowered) == len(serial_number) else 0.9)
            if score <= SIMILARITY_THRESHOLD:
                continue
            scored[(serial_number, SERIAL_NUMBER_CATEGORY)] = score

        return _rank(scored, limit)
