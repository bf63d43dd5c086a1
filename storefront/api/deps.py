"""Service providers for route dependencies. Tests override these."""

from typing import Optional
from fastapi import Depends, Header
from sqlalchemy.ext.asyncio import AsyncSession
from storefront.config import get_settings
from storefront.database import get_db
from storefront.services.analytics import ADMIN_ROLE, SearchAnalyticsService
from storefront.services.cart import CartService
from storefront.services.catalog import GemstoneCatalog
from storefront.services.orders import OrderService
from storefront.services.search import SearchService


def get_catalog(db: AsyncSession = Depends(get_db)) -> GemstoneCatalog:
    return GemstoneCatalog(db)


def get_analytics_service(db: AsyncSession = Depends(get_db)) -> SearchAnalyticsService:
    return SearchAnalyticsService(db)


def get_search_service(
    catalog: GemstoneCatalog = Depends(get_catalog),
    analytics: SearchAnalyticsService = Depends(get_analytics_service)
) -> SearchService:
    return SearchService(catalog, analytics)


def get_cart_service(db: AsyncSession = Depends(get_db)) -> CartService:
    return CartService(db)


def get_order_service(db: AsyncSession = Depends(get_db)) -> OrderService:
    return OrderService(db)


def get_role(x_admin_token: Optional[str] = Header(None)) -> Optional[str]:
    """Resolve the caller role from the X-Admin-Token header."""
    token = get_settings().admin_api_token
    if token and x_admin_token == token:
        return ADMIN_ROLE
    return None
