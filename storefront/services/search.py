import logging
import re
from dataclasses import asdict
from typing import List, Optional
from storefront.config import Settings, get_settings
from storefront.schemas.search import (
    FilterCountsResponse,
    GemstoneSearchResult,
    Pagination,
    SearchFilters,
    SearchRequest,
    SearchResponse,
    Suggestion,
)
from storefront.search.engine import SearchEngine, SearchPage
from storefront.search.locale import detect_query_locale
from storefront.search.ranking import ExactMatch, FuzzyMatch, RankingStrategy, select_strategy
from storefront.search.suggestions import SuggestionEngine
from storefront.services.analytics import SearchAnalyticsService
from storefront.services.catalog import GemstoneCatalog

logger = logging.getLogger(__name__)

SEARCH_UNAVAILABLE_MESSAGE = "Search is temporarily unavailable"

_UNSAFE_QUERY_CHARS = re.compile(r"[<>&|!()]")


def sanitize_query(query: Optional[str]) -> str:
    """Drop characters with operator meaning in raw tsquery syntax."""
    return _UNSAFE_QUERY_CHARS.sub("", query or "").strip()


def build_pagination(page: int, page_size: int, total: int) -> Pagination:
    total_pages = -(-total // page_size) if total else 0
    return Pagination(
        page=page,
        page_size=page_size,
        total_count=total,
        total_pages=total_pages,
        has_next_page=page < total_pages,
        has_prev_page=page > 1,
    )


def empty_response(page: int, page_size: int, locale: str, message: Optional[str] = None) -> SearchResponse:
    """A zero-result page, used when search cannot run."""
    return SearchResponse(
        results=[],
        pagination=build_pagination(page, page_size, 0),
        used_fuzzy_search=False,
        locale=locale,
        message=message,
    )


class SearchService:
    """Multilingual gemstone search, suggestions and facet counts."""

    def __init__(
        self,
        catalog: GemstoneCatalog,
        analytics: Optional[SearchAnalyticsService] = None,
        engine: Optional[SearchEngine] = None,
        suggestion_engine: Optional[SuggestionEngine] = None,
        settings: Optional[Settings] = None
    ):
        self.catalog = catalog
        self.analytics = analytics
        self.engine = engine or SearchEngine()
        self.suggestion_engine = suggestion_engine or SuggestionEngine()
        self.settings = settings or get_settings()

    async def search(self, request: SearchRequest) -> SearchResponse:
        """
        Run a ranked, filtered, paginated search.

        Args:
            request: Query, locale, filters and page

        Returns:
            SearchResponse for the requested page
        """
        query = sanitize_query(request.query)
        filters = request.filters
        include_descriptions = request.search_descriptions or filters.search_descriptions
        page_size = min(request.page_size, self.settings.search_max_page_size)
        language = detect_query_locale(query, request.locale)

        strategy = select_strategy(
            query,
            language,
            use_fuzzy=filters.use_fuzzy,
            include_descriptions=include_descriptions,
        )
        result = await self._run(strategy, language, filters, request.page, page_size, include_descriptions)

        if (
            result.total == 0
            and isinstance(strategy, ExactMatch)
            and self.settings.search_auto_fuzzy_fallback
        ):
            logger.info(f"No exact matches for '{query}', trying fuzzy search")
            result = await self._run(FuzzyMatch(query), language, filters, request.page, page_size, False)

        logger.info(
            f"Search query='{query}' locale={language} strategy={result.strategy} "
            f"total={result.total}"
        )

        await self._track(request, query, filters, result)
        return self._response(result)

    async def search_fulltext(
        self,
        query: Optional[str],
        filters: Optional[SearchFilters] = None,
        page: int = 1,
        page_size: Optional[int] = None
    ) -> SearchResponse:
        """English-only search over the English vectors."""
        request = SearchRequest(
            query=query,
            locale="en",
            filters=filters or SearchFilters(),
            page=page,
            page_size=page_size or self.settings.search_default_page_size,
        )
        return await self.search(request)

    async def _run(
        self,
        strategy: RankingStrategy,
        language: str,
        filters: SearchFilters,
        page: int,
        page_size: int,
        include_descriptions: bool
    ) -> SearchPage:
        query_term = strategy.query if isinstance(strategy, ExactMatch) else None
        fuzzy_text = strategy.text if isinstance(strategy, FuzzyMatch) else None
        candidates = await self.catalog.load_candidates(filters, query_term, include_descriptions, fuzzy_text)
        return self.engine.rank(candidates, strategy, language, filters, page, page_size)

    async def _track(self, request: SearchRequest, query: str, filters: SearchFilters, result: SearchPage) -> None:
        if self.analytics is None or not self.settings.search_analytics_enabled:
            return
        try:
            await self.analytics.track(
                query=query,
                results_count=result.total,
                used_fuzzy_search=result.used_fuzzy,
                filters=filters.to_payload(),
                user_id=request.user_id,
                session_id=request.session_id,
            )
        except Exception as e:
            logger.error(f"Failed to track search '{query}': {str(e)}")
            await self.analytics.db.rollback()

    def _response(self, result: SearchPage) -> SearchResponse:
        return SearchResponse(
            results=[
                GemstoneSearchResult.from_ranked(item.gemstone, item.relevance_score, item.total_count)
                for item in result.items
            ],
            pagination=build_pagination(result.page, result.page_size, result.total),
            used_fuzzy_search=result.used_fuzzy,
            locale=result.locale,
        )

    async def fuzzy_suggestions(
        self,
        query: Optional[str],
        locale: Optional[str] = None,
        limit: Optional[int] = None
    ) -> List[Suggestion]:
        """Did-you-mean suggestions from the localized vocabularies."""
        language = detect_query_locale(query, locale)
        vocabulary = await self.catalog.load_vocabulary(language)
        found = self.suggestion_engine.suggest(
            query, vocabulary, limit or self.settings.fuzzy_suggestion_limit
        )
        return [Suggestion(**asdict(item)) for item in found]

    async def suggestions(
        self,
        query: Optional[str],
        locale: Optional[str] = None,
        limit: Optional[int] = None
    ) -> List[Suggestion]:
        """Autocomplete over localized vocabulary terms and serial numbers."""
        language = detect_query_locale(query, locale)
        vocabulary = await self.catalog.load_vocabulary(language)
        serial_numbers = await self.catalog.serial_numbers()
        found = self.suggestion_engine.autocomplete(
            query, vocabulary, serial_numbers, limit or self.settings.suggestion_limit
        )
        return [Suggestion(**asdict(item)) for item in found]

    async def filter_counts(self, filters: Optional[SearchFilters] = None) -> FilterCountsResponse:
        counts = await self.catalog.facet_counts(filters)
        return FilterCountsResponse(**counts)
