import logging
from typing import List, Optional
from uuid import UUID
from fastapi import APIRouter, Depends, HTTPException, Query
from storefront.api.deps import get_analytics_service, get_role
from storefront.exceptions import AccessDeniedError
from storefront.schemas.analytics import QuerySummary, SearchHistoryEntry, SearchMetrics, SearchTrend
from storefront.services.analytics import SearchAnalyticsService

logger = logging.getLogger(__name__)

router = APIRouter()


@router.get("/analytics/search/summary", response_model=List[QuerySummary])
async def get_search_summary(
    days_back: int = Query(30, ge=1, le=365),
    role: Optional[str] = Depends(get_role),
    analytics: SearchAnalyticsService = Depends(get_analytics_service)
):
    """Top queries over the window with result and fuzzy-usage aggregates (admin)."""
    try:
        return await analytics.summary(days_back, role)
    except AccessDeniedError as e:
        raise HTTPException(status_code=403, detail=str(e))


@router.get("/analytics/search/trends", response_model=List[SearchTrend])
async def get_search_trends(
    days_back: int = Query(30, ge=1, le=365),
    bucket: str = Query("day", pattern="^(hour|day|week)$"),
    role: Optional[str] = Depends(get_role),
    analytics: SearchAnalyticsService = Depends(get_analytics_service)
):
    """Search volume per hour, day or week (admin)."""
    try:
        return await analytics.trends(days_back, bucket, role)
    except AccessDeniedError as e:
        raise HTTPException(status_code=403, detail=str(e))


@router.get("/analytics/search/metrics", response_model=SearchMetrics, response_model_by_alias=True)
async def get_search_metrics(
    days_back: int = Query(30, ge=1, le=365),
    role: Optional[str] = Depends(get_role),
    analytics: SearchAnalyticsService = Depends(get_analytics_service)
):
    """Headline search metrics (admin)."""
    try:
        return await analytics.metrics(days_back, role)
    except AccessDeniedError as e:
        raise HTTPException(status_code=403, detail=str(e))


@router.get("/analytics/search/history/{user_id}", response_model=List[SearchHistoryEntry], response_model_by_alias=True)
async def get_search_history(
    user_id: UUID,
    limit: int = Query(50, ge=1, le=200),
    analytics: SearchAnalyticsService = Depends(get_analytics_service)
):
    """A user's own recent searches."""
    return await analytics.user_history(user_id, limit)
