from storefront.schemas.search import (
    FilterCountsResponse,
    GemstoneSearchResult,
    LocaleResponse,
    Pagination,
    SearchFilters,
    SearchRequest,
    SearchResponse,
    Suggestion,
    SuggestionsResponse,
)
from storefront.schemas.gemstone import GemstoneCreate, GemstoneResponse, GemstoneUpdate
from storefront.schemas.order import (
    CartItemCreate,
    CartItemUpdate,
    CartResponse,
    OrderCreate,
    OrderEventResponse,
    OrderResponse,
    OrderStatusUpdate,
)
from storefront.schemas.analytics import QuerySummary, SearchHistoryEntry, SearchMetrics, SearchTrend

__all__ = [
    "FilterCountsResponse",
    "GemstoneSearchResult",
    "LocaleResponse",
    "Pagination",
    "SearchFilters",
    "SearchRequest",
    "SearchResponse",
    "Suggestion",
    "SuggestionsResponse",
    "GemstoneCreate",
    "GemstoneResponse",
    "GemstoneUpdate",
    "CartItemCreate",
    "CartItemUpdate",
    "CartResponse",
    "OrderCreate",
    "OrderEventResponse",
    "OrderResponse",
    "OrderStatusUpdate",
    "QuerySummary",
    "SearchHistoryEntry",
    "SearchMetrics",
    "SearchTrend",
]
