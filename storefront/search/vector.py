"""
Weighted positional search vectors.

A vector maps each lexeme to its sorted (position, weight) occurrences.
Weights are the letters A (highest) to D (default). The text form matches the
PostgreSQL ``tsvector`` literal syntax (``'lexeme':1A,4B 'other':2``), so the
serialized value can be stored in a ``TSVECTOR`` column and read back.
"""

import re
from functools import lru_cache
from typing import Dict, Iterable, List, Mapping, Optional, Tuple
from storefront.search.text import MAX_POSITION, Token, get_normalizer

WEIGHTS = ("A", "B", "C", "D")
DEFAULT_WEIGHT = "D"

# Occurrences kept per lexeme
MAX_POSITIONS_PER_LEXEME = 256

Occurrence = Tuple[int, str]

_ENTRY = re.compile(r"'((?:[^'\\]|''|\\.)*)'(?::([0-9A-Da-d,]+))?")


def _merge_positions(occurrences: Iterable[Occurrence]) -> Tuple[Occurrence, ...]:
    """Sort occurrences by position, keeping the heaviest weight per position."""
    best: Dict[int, str] = {}
    for position, weight in occurrences:
        current = best.get(position)
        if current is None or WEIGHTS.index(weight) < WEIGHTS.index(current):
            best[position] = weight
    merged = sorted(best.items())
    return tuple(merged[:MAX_POSITIONS_PER_LEXEME])


def _quote(lexeme: str) -> str:
    return "'" + lexeme.replace("\\", "\\\\").replace("'", "''") + "'"


def _unquote(raw: str) -> str:
    return re.sub(r"\\(.)", r"\1", raw.replace("''", "'"))


class SearchVector:
    """Immutable weighted lexeme index for one document."""

    __slots__ = ("_entries",)

    def __init__(self, entries: Optional[Mapping[str, Iterable[Occurrence]]] = None):
        self._entries: Dict[str, Tuple[Occurrence, ...]] = {}
        for lexeme, occurrences in (entries or {}).items():
            merged = _merge_positions(occurrences)
            if merged:
                self._entries[lexeme] = merged

    @classmethod
    def from_tokens(cls, tokens: Iterable[Token], weight: str = DEFAULT_WEIGHT) -> "SearchVector":
        entries: Dict[str, List[Occurrence]] = {}
        for token in tokens:
            if token.lexeme is None:
                continue
            entries.setdefault(token.lexeme, []).append((token.position, weight))
        return cls(entries)

    @classmethod
    def from_text(cls, text: Optional[str], language: str, weight: str = DEFAULT_WEIGHT) -> "SearchVector":
        """Equivalent of ``setweight(to_tsvector(language, text), weight)``."""
        return cls.from_tokens(get_normalizer(language).tokenize(text), weight)

    @classmethod
    def parse(cls, text: Optional[str]) -> "SearchVector":
        """Read the tsvector literal form produced by ``serialize``."""
        if not text:
            return cls()
        return _parse_cached(text)

    @property
    def entries(self) -> Dict[str, Tuple[Occurrence, ...]]:
        return dict(self._entries)

    @property
    def max_position(self) -> int:
        return max((occ[-1][0] for occ in self._entries.values()), default=0)

    def length(self) -> int:
        """Total number of occurrences."""
        return sum(len(occ) for occ in self._entries.values())

    def occurrences(self, lexeme: str) -> Tuple[Occurrence, ...]:
        return self._entries.get(lexeme, ())

    def setweight(self, weight: str) -> "SearchVector":
        if weight not in WEIGHTS:
            raise ValueError(f"Unknown weight: {weight}")
        return SearchVector({
            lexeme: [(position, weight) for position, _ in occ]
            for lexeme, occ in self._entries.items()
        })

    def concat(self, other: "SearchVector") -> "SearchVector":
        """``self || other``: other's positions are shifted past this vector's last position."""
        shift = self.max_position
        entries: Dict[str, List[Occurrence]] = {
            lexeme: list(occ) for lexeme, occ in self._entries.items()
        }
        for lexeme, occ in other._entries.items():
            shifted = [(min(position + shift, MAX_POSITION), weight) for position, weight in occ]
            entries.setdefault(lexeme, []).extend(shifted)
        return SearchVector(entries)

    __or__ = concat

    def serialize(self) -> str:
        parts = []
        for lexeme in sorted(self._entries, key=lambda item: item.encode("utf-8")):
            positions = ",".join(
                f"{position}{'' if weight == DEFAULT_WEIGHT else weight}"
                for position, weight in self._entries[lexeme]
            )
            parts.append(f"{_quote(lexeme)}:{positions}")
        return " ".join(parts)

    def __len__(self) -> int:
        return len(self._entries)

    def __contains__(self, lexeme: str) -> bool:
        return lexeme in self._entries

    def __eq__(self, other) -> bool:
        if not isinstance(other, SearchVector):
            return NotImplemented
        return self._entries == other._entries

    def __hash__(self) -> int:
        return hash(self.serialize())

    def __repr__(self) -> str:
        return f"SearchVector({self.serialize()!r})"


@lru_cache(maxsize=8192)
def _parse_cached(text: str) -> SearchVector:
    entries: Dict[str, List[Occurrence]] = {}
    for match in _ENTRY.finditer(text):
        lexeme = _unquote(match.group(1))
        occurrences = entries.setdefault(lexeme, [])
        if not match.group(2):
            continue
        for item in match.group(2).split(","):
            weight = item[-1].upper() if item[-1].isalpha() else DEFAULT_WEIGHT
            digits = item[:-1] if item[-1].isalpha() else item
            occurrences.append((int(digits), weight))
    return SearchVector(entries)
