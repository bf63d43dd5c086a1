import logging
import math
from dataclasses import dataclass, field
from typing import Iterable, List, Optional, Tuple
from storefront.models.gemstone import Gemstone
from storefront.schemas.search import SearchFilters
from storefront.search.filters import FilterCompositor
from storefront.search.locale import detect_query_locale
from storefront.search.ranking import RankingStrategy, select_strategy

logger = logging.getLogger(__name__)


@dataclass
class RankedGemstone:
    """A gemstone with its relevance score and the size of the full result set."""
    gemstone: Gemstone
    relevance_score: float
    total_count: int


@dataclass
class SearchPage:
    """One page of ranked results."""
    items: List[RankedGemstone]
    total: int
    page: int
    page_size: int
    locale: str
    strategy: str
    used_fuzzy: bool = False
    scored: List[Tuple[float, Gemstone]] = field(default_factory=list, repr=False)

    @property
    def total_pages(self) -> int:
        return math.ceil(self.total / self.page_size) if self.total else 0

    @property
    def has_next_page(self) -> bool:
        return self.page < self.total_pages

    @property
    def has_prev_page(self) -> bool:
        return self.page > 1


def sort_key(entry: Tuple[float, Gemstone]):
    """Relevance desc, newest first, then id for a stable total order."""
    score, gemstone = entry
    return (-score, -gemstone.created_at.timestamp(), str(gemstone.id))


def paginate(entries: List[Tuple[float, Gemstone]], page: int, page_size: int) -> List[RankedGemstone]:
    """
    Slice sorted entries for a 1-based page.

    Args:
        entries: Sorted (score, gemstone) pairs
        page: Page number starting at 1
        page_size: Rows per page

    Returns:
        Page rows carrying the unsliced total
    """
    if page < 1:
        raise ValueError("page must be >= 1")
    if page_size < 1:
        raise ValueError("page_size must be >= 1")

    total = len(entries)
    offset = (page - 1) * page_size
    return [
        RankedGemstone(gemstone=gemstone, relevance_score=score, total_count=total)
        for score, gemstone in entries[offset:offset + page_size]
    ]


class SearchEngine:
    """Ranks, filters, sorts and paginates candidate gemstones."""

    def search(
        self,
        candidates: Iterable[Gemstone],
        query: Optional[str],
        locale: Optional[str] = None,
        filters: Optional[SearchFilters] = None,
        page: int = 1,
        page_size: int = 24,
        include_descriptions: bool = False
    ) -> SearchPage:
        """
        Run a search over already-loaded candidates.

        Args:
            candidates: Gemstones to consider (may be a superset of the result)
            query: Free text; blank means browse
            locale: Explicit locale, or None to detect from the query
            filters: Structured filters
            page: 1-based page number
            page_size: Rows per page
            include_descriptions: Also match against description vectors

        Returns:
            SearchPage with the requested slice and the total count
        """
        filters = filters or SearchFilters()
        language = detect_query_locale(query, locale)
        strategy = select_strategy(
            query,
            language,
            use_fuzzy=filters.use_fuzzy,
            include_descriptions=include_descriptions or filters.search_descriptions,
        )
        return self.rank(candidates, strategy, language, filters, page, page_size)

    def rank(
        self,
        candidates: Iterable[Gemstone],
        strategy: RankingStrategy,
        language: str,
        filters: SearchFilters,
        page: int,
        page_size: int
    ) -> SearchPage:
        compositor = FilterCompositor(filters)
        predicates = compositor.predicates()

        scored: List[Tuple[float, Gemstone]] = []
        for gemstone in candidates:
            if not all(predicate.matches(gemstone) for predicate in predicates):
                continue
            score = strategy.score(gemstone)
            if score is None:
                continue
            scored.append((score, gemstone))

        scored.sort(key=sort_key)
        items = paginate(scored, page, page_size)

        logger.info(
            f"Search strategy={strategy.name} locale={language} "
            f"matched={len(scored)} page={page} returned={len(items)}"
        )

        return SearchPage(
            items=items,
            total=len(scored),
            page=page,
            page_size=page_size,
            locale=language,
            strategy=strategy.name,
            used_fuzzy=strategy.fuzzy,
            scored=scored,
        )
