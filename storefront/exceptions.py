"""Domain exceptions raised by services and translated to HTTP errors by the API."""


class StorefrontError(Exception):
    """Base class for storefront errors."""


class NotFoundError(StorefrontError):
    """Requested entity does not exist."""

    def __init__(self, entity: str, entity_id):
        self.entity = entity
        self.entity_id = entity_id
        super().__init__(f"{entity} {entity_id} not found")


class AccessDeniedError(StorefrontError):
    """Caller lacks the role required for an operation."""

    def __init__(self, message: str = "Access denied. Admin role required."):
        super().__init__(message)


class CartError(StorefrontError):
    """Cart operation cannot be applied (out of stock, bad quantity, empty cart)."""


class OrderStateError(StorefrontError):
    """Order status transition is not allowed."""


class ImmutableEventError(StorefrontError):
    """Order events are append-only."""
