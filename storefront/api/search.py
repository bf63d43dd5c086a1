import logging
from typing import Optional
from fastapi import APIRouter, Depends, Query
from storefront.api.deps import get_search_service
from storefront.schemas.search import LocaleResponse, SearchRequest, SearchResponse, SuggestionsResponse
from storefront.search.locale import detect_query_locale
from storefront.services.search import SEARCH_UNAVAILABLE_MESSAGE, SearchService, empty_response

logger = logging.getLogger(__name__)

router = APIRouter()


@router.post("/search", response_model=SearchResponse, response_model_by_alias=True)
async def search_gemstones(
    request: SearchRequest,
    service: SearchService = Depends(get_search_service)
):
    """
    Search gemstones by free text and structured filters.

    The query language is detected from the text unless a locale is given.
    Results are ranked by relevance, then newest first.
    """
    try:
        return await service.search(request)
    except Exception as e:
        logger.error(f"Search failed for query '{request.query}': {str(e)}")
        locale = detect_query_locale(request.query, request.locale)
        return empty_response(request.page, request.page_size, locale, SEARCH_UNAVAILABLE_MESSAGE)


@router.get("/search/suggestions", response_model=SuggestionsResponse)
async def get_suggestions(
    query: str = Query(..., min_length=1, max_length=100, description="Partial search text"),
    locale: Optional[str] = Query(None, description="Locale override"),
    limit: Optional[int] = Query(None, ge=1, le=50),
    service: SearchService = Depends(get_search_service)
):
    """Autocomplete over type, color, cut and clarity names and serial numbers."""
    try:
        suggestions = await service.suggestions(query, locale, limit)
    except Exception as e:
        logger.error(f"Error retrieving suggestions for '{query}': {str(e)}")
        suggestions = []
    return SuggestionsResponse(suggestions=suggestions)


@router.get("/search/fuzzy-suggestions", response_model=SuggestionsResponse)
async def get_fuzzy_suggestions(
    query: str = Query(..., min_length=1, max_length=100, description="Possibly misspelled text"),
    locale: Optional[str] = Query(None, description="Locale override"),
    limit: Optional[int] = Query(None, ge=1, le=20),
    service: SearchService = Depends(get_search_service)
):
    """'Did you mean' suggestions for a query."""
    try:
        suggestions = await service.fuzzy_suggestions(query, locale, limit)
    except Exception as e:
        logger.error(f"Error retrieving fuzzy suggestions for '{query}': {str(e)}")
        suggestions = []
    return SuggestionsResponse(suggestions=suggestions)


@router.get("/search/locale", response_model=LocaleResponse)
async def get_query_locale(
    query: Optional[str] = Query(None, max_length=500),
    locale: Optional[str] = Query(None)
):
    """Report the language a query would be searched in."""
    return LocaleResponse(locale=detect_query_locale(query, locale))
