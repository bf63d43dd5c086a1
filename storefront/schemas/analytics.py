from datetime import datetime
from typing import List, Optional
from pydantic import BaseModel, ConfigDict, Field


class QuerySummary(BaseModel):
    """Aggregates for one normalized search query."""
    search_query: str
    search_count: int
    avg_results: int
    zero_result_count: int
    fuzzy_usage_count: int


class SearchTrend(BaseModel):
    """Search volume for one time bucket."""
    time_bucket: datetime
    search_count: int
    avg_results: float
    zero_result_count: int
    fuzzy_usage_count: int


class ZeroResultQuery(BaseModel):
    query: str
    count: int


class SearchMetrics(BaseModel):
    """Headline numbers derived from the per-query summary."""

    model_config = ConfigDict(populate_by_name=True)

    total_searches: int = Field(0, alias="totalSearches")
    unique_queries: int = Field(0, alias="uniqueQueries")
    avg_results_per_search: int = Field(0, alias="avgResultsPerSearch")
    zero_result_percentage: int = Field(0, alias="zeroResultPercentage")
    fuzzy_search_usage: int = Field(0, alias="fuzzySearchUsage")
    top_queries: List[QuerySummary] = Field(default_factory=list, alias="topQueries")
    zero_result_queries: List[ZeroResultQuery] = Field(default_factory=list, alias="zeroResultQueries")


class SearchHistoryEntry(BaseModel):
    """One past search of a user."""

    model_config = ConfigDict(populate_by_name=True)

    query: str
    results_count: int = Field(..., alias="resultsCount")
    used_fuzzy: bool = Field(False, alias="usedFuzzy")
    timestamp: datetime
    session_id: Optional[str] = Field(None, alias="sessionId")
