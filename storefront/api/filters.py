"""API endpoints for filter metadata."""

import logging
from typing import Optional
from fastapi import APIRouter, Body, Depends
from storefront.api.deps import get_search_service
from storefront.schemas.search import FilterCountsResponse, SearchFilters
from storefront.services.search import SearchService

logger = logging.getLogger(__name__)

router = APIRouter()


@router.post("/filters/counts", response_model=FilterCountsResponse, response_model_by_alias=True)
async def get_filter_counts(
    filters: Optional[SearchFilters] = Body(None),
    service: SearchService = Depends(get_search_service)
):
    """
    Get filter values with their counts.

    Counts only visible gemstones and apply the same filters as search, so the
    number next to each option is the number of results selecting it would
    leave.

    Returns:
        Counts per gemstone type, color, cut, clarity and origin, plus the total
    """
    try:
        counts = await service.filter_counts(filters)
        logger.info(f"Retrieved filter counts: {counts.total_count} gemstones")
        return counts
    except Exception as e:
        logger.error(f"Error retrieving filter counts: {str(e)}")
        return FilterCountsResponse()
