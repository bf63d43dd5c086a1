from storefront.services.analytics import SearchAnalyticsService
from storefront.services.cart import CartService
from storefront.services.catalog import GemstoneCatalog
from storefront.services.orders import OrderService
from storefront.services.search import SearchService

__all__ = [
    "SearchAnalyticsService",
    "CartService",
    "GemstoneCatalog",
    "OrderService",
    "SearchService",
]
