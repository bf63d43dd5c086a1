from storefront.models.base import Base
from storefront.models.gemstone import Certification, Gemstone, GemstoneImage, Origin
from storefront.models.translation import (
    GemClarityTranslation,
    GemColorTranslation,
    GemCutTranslation,
    GemstoneTypeTranslation,
    TRANSLATION_MODELS,
)
from storefront.models.analytics import SearchAnalytics
from storefront.models.order import CartItem, EventSeverity, Order, OrderEvent, OrderItem, OrderStatus

__all__ = [
    "Base",
    "Certification",
    "Gemstone",
    "GemstoneImage",
    "Origin",
    "GemClarityTranslation",
    "GemColorTranslation",
    "GemCutTranslation",
    "GemstoneTypeTranslation",
    "TRANSLATION_MODELS",
    "SearchAnalytics",
    "CartItem",
    "EventSeverity",
    "Order",
    "OrderEvent",
    "OrderItem",
    "OrderStatus",
]
