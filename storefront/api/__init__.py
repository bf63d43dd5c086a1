from fastapi import APIRouter
from storefront.api import analytics, cart, filters, gemstones, orders, search

api_router = APIRouter()

api_router.include_router(search.router, tags=["search"])
api_router.include_router(filters.router, tags=["filters"])
api_router.include_router(gemstones.router, tags=["gemstones"])
api_router.include_router(cart.router, tags=["cart"])
api_router.include_router(orders.router, tags=["orders"])
api_router.include_router(analytics.router, tags=["analytics"])

__all__ = ["api_router"]
