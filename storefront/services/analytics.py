import logging
from datetime import timedelta
from typing import Dict, List, Optional
from uuid import UUID
from sqlalchemy import func, select
from sqlalchemy.ext.asyncio import AsyncSession
from storefront.exceptions import AccessDeniedError
from storefront.models.analytics import SearchAnalytics
from storefront.models.base import utcnow
from storefront.schemas.analytics import (
    QuerySummary,
    SearchHistoryEntry,
    SearchMetrics,
    SearchTrend,
    ZeroResultQuery,
)

logger = logging.getLogger(__name__)

ADMIN_ROLE = "admin"
TREND_BUCKETS = ("hour", "day", "week")

# Rows returned by the per-query summary
SUMMARY_LIMIT = 100
TOP_QUERIES_LIMIT = 50
ZERO_RESULT_QUERIES_LIMIT = 20


def normalize_query(query: Optional[str]) -> str:
    """Analytics key for a query: lower-cased and trimmed."""
    return (query or "").lower().strip()


def _require_admin(role: Optional[str]) -> None:
    if role != ADMIN_ROLE:
        raise AccessDeniedError()


def _percentage(part: int, whole: int) -> int:
    return round(part / whole * 100) if whole > 0 else 0


class SearchAnalyticsService:
    """Records searches and reports on them for administrators."""

    def __init__(self, db: AsyncSession):
        self.db = db

    async def track(
        self,
        query: Optional[str],
        results_count: int,
        used_fuzzy_search: bool,
        filters: Optional[Dict] = None,
        user_id: Optional[UUID] = None,
        session_id: Optional[str] = None
    ) -> SearchAnalytics:
        """
        Append one search record.

        Args:
            query: Raw query text, stored normalized
            results_count: Total matches of the search
            used_fuzzy_search: Whether trigram matching produced the results
            filters: Client-facing filter payload
            user_id: Optional user
            session_id: Optional client session

        Returns:
            The stored record
        """
        record = SearchAnalytics(
            search_query=normalize_query(query),
            filters=filters or None,
            results_count=results_count,
            used_fuzzy_search=used_fuzzy_search,
            user_id=user_id,
            session_id=session_id,
        )
        self.db.add(record)
        await self.db.commit()
        return record

    async def summary(self, days_back: int = 30, role: Optional[str] = None) -> List[QuerySummary]:
        """
        Per-query aggregates over the last days, most frequent first.

        Raises:
            AccessDeniedError: Caller is not an administrator
        """
        _require_admin(role)
        since = utcnow() - timedelta(days=days_back)

        zero_results = func.count().filter(SearchAnalytics.results_count == 0)
        fuzzy_usage = func.count().filter(SearchAnalytics.used_fuzzy_search.is_(True))
        search_count = func.count().label("search_count")

        result = await self.db.execute(
            select(
                SearchAnalytics.search_query,
                search_count,
                func.avg(SearchAnalytics.results_count),
                zero_results,
                fuzzy_usage,
            )
            .where(SearchAnalytics.created_at >= since)
            .group_by(SearchAnalytics.search_query)
            .order_by(search_count.desc(), SearchAnalytics.search_query)
            .limit(SUMMARY_LIMIT)
        )
        return [
            QuerySummary(
                search_query=query,
                search_count=count,
                avg_results=round(float(avg or 0)),
                zero_result_count=zero,
                fuzzy_usage_count=fuzzy,
            )
            for query, count, avg, zero, fuzzy in result.all()
        ]

    async def trends(self, days_back: int = 30, bucket: str = "day", role: Optional[str] = None) -> List[SearchTrend]:
        """
        Search volume per time bucket, newest bucket first.

        Args:
            days_back: Window size in days
            bucket: "hour", "day" or "week"; anything else means "day"
            role: Caller role

        Raises:
            AccessDeniedError: Caller is not an administrator
        """
        _require_admin(role)
        if bucket not in TREND_BUCKETS:
            bucket = "day"
        since = utcnow() - timedelta(days=days_back)

        time_bucket = func.date_trunc(bucket, SearchAnalytics.created_at).label("time_bucket")
        result = await self.db.execute(
            select(
                time_bucket,
                func.count(),
                func.avg(SearchAnalytics.results_count),
                func.count().filter(SearchAnalytics.results_count == 0),
                func.count().filter(SearchAnalytics.used_fuzzy_search.is_(True)),
            )
            .where(SearchAnalytics.created_at >= since)
            .group_by(time_bucket)
            .order_by(time_bucket.desc())
        )
        return [
            SearchTrend(
                time_bucket=moment,
                search_count=count,
                avg_results=round(float(avg or 0), 2),
                zero_result_count=zero,
                fuzzy_usage_count=fuzzy,
            )
            for moment, count, avg, zero, fuzzy in result.all()
        ]

    async def metrics(self, days_back: int = 30, role: Optional[str] = None) -> SearchMetrics:
        """Headline metrics computed from the per-query summary."""
        summary = await self.summary(days_back, role)
        return compute_metrics(summary)

    async def user_history(self, user_id: UUID, limit: int = 50) -> List[SearchHistoryEntry]:
        """A user's own most recent searches."""
        result = await self.db.execute(
            select(SearchAnalytics)
            .where(SearchAnalytics.user_id == user_id)
            .order_by(SearchAnalytics.created_at.desc())
            .limit(limit)
        )
        return [
            SearchHistoryEntry(
                query=record.search_query,
                results_count=record.results_count,
                used_fuzzy=bool(record.used_fuzzy_search),
                timestamp=record.created_at,
                session_id=record.session_id,
            )
            for record in result.scalars().all()
        ]


def compute_metrics(summary: List[QuerySummary]) -> SearchMetrics:
    """
    Fold per-query rows into totals and percentages.

    Args:
        summary: Rows from SearchAnalyticsService.summary, most frequent first

    Returns:
        SearchMetrics with whole-number averages and percentages
    """
    total_searches = sum(row.search_count for row in summary)
    total_results = sum(row.search_count * row.avg_results for row in summary)
    total_zero = sum(row.zero_result_count for row in summary)
    total_fuzzy = sum(row.fuzzy_usage_count for row in summary)

    zero_result_queries = sorted(
        (ZeroResultQuery(query=row.search_query, count=row.zero_result_count)
         for row in summary if row.zero_result_count > 0),
        key=lambda item: -item.count,
    )[:ZERO_RESULT_QUERIES_LIMIT]

    return SearchMetrics(
        total_searches=total_searches,
        unique_queries=len(summary),
        avg_results_per_search=round(total_results / total_searches) if total_searches > 0 else 0,
        zero_result_percentage=_percentage(total_zero, total_searches),
        fuzzy_search_usage=_percentage(total_fuzzy, total_searches),
        top_queries=summary[:TOP_QUERIES_LIMIT],
        zero_result_queries=zero_result_queries,
    )
