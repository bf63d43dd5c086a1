"""
Order placement and the order audit log.

Every order gets an ``order_created`` event when it is placed and one
``order_<status>`` event per actual status change. Events are append-only.
"""

import logging
import secrets
from typing import List, Optional
from uuid import UUID
from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy.orm import selectinload
from storefront.exceptions import CartError, NotFoundError, OrderStateError
from storefront.models.base import utcnow
from storefront.models.gemstone import Gemstone
from storefront.models.order import EventSeverity, Order, OrderEvent, OrderItem, OrderStatus
from storefront.services.cart import CartService

logger = logging.getLogger(__name__)

# Forward moves per status; cancelling is allowed from any status
ALLOWED_TRANSITIONS = {
    OrderStatus.PENDING: frozenset({OrderStatus.CONFIRMED}),
    OrderStatus.CONFIRMED: frozenset({OrderStatus.PROCESSING}),
    OrderStatus.PROCESSING: frozenset({OrderStatus.SHIPPED}),
    OrderStatus.SHIPPED: frozenset({OrderStatus.DELIVERED}),
    OrderStatus.DELIVERED: frozenset(),
    OrderStatus.CANCELLED: frozenset(),
}

_STATUS_SEVERITY = {
    OrderStatus.DELIVERED: EventSeverity.SUCCESS,
    OrderStatus.CANCELLED: EventSeverity.ERROR,
    OrderStatus.PENDING: EventSeverity.WARNING,
}


def can_transition(old_status: Optional[OrderStatus], new_status: OrderStatus) -> bool:
    if new_status == OrderStatus.CANCELLED:
        return True
    return new_status in ALLOWED_TRANSITIONS.get(old_status, frozenset())


def generate_order_number() -> str:
    """Human-readable order number, e.g. ORD-20251016-4F2A9C."""
    return f"ORD-{utcnow():%Y%m%d}-{secrets.token_hex(3).upper()}"


def build_created_event(order: Order) -> OrderEvent:
    return OrderEvent(
        order_id=order.id,
        event_type="order_created",
        severity=EventSeverity.SUCCESS,
        title="Order Created",
        description="Order has been successfully created",
        event_metadata={
            "total_amount": order.total_amount,
            "currency_code": order.currency_code,
            "automated": True,
        },
        performed_at=order.created_at or utcnow(),
    )


def build_status_event(
    order: Order,
    old_status: Optional[OrderStatus],
    new_status: OrderStatus,
    performed_by: Optional[UUID] = None
) -> Optional[OrderEvent]:
    """
    Audit entry for a status change.

    Args:
        order: Order whose status changed
        old_status: Previous status, None for a first assignment
        new_status: Status being set
        performed_by: Acting user, None for automated changes

    Returns:
        The event, or None when the status did not change
    """
    if old_status == new_status:
        return None

    old_value = old_status.value if old_status is not None else None
    return OrderEvent(
        order_id=order.id,
        event_type=f"order_{new_status.value}",
        severity=_STATUS_SEVERITY.get(new_status, EventSeverity.INFO),
        title=f"Order {new_status.value.title()}",
        description=f"Order status changed from {old_value or 'none'} to {new_status.value}",
        event_metadata={
            "old_status": old_value,
            "new_status": new_status.value,
            "automated": True,
        },
        performed_by=performed_by,
        performed_at=utcnow(),
    )


class OrderService:
    """Places orders from carts and tracks their status history."""

    def __init__(self, db: AsyncSession):
        self.db = db
        self.cart = CartService(db)

    async def get(self, order_id: UUID) -> Order:
        result = await self.db.execute(
            select(Order).options(selectinload(Order.items)).where(Order.id == order_id)
        )
        order = result.scalar_one_or_none()
        if order is None:
            raise NotFoundError("Order", order_id)
        return order

    async def create_order(self, user_id: UUID, notes: Optional[str] = None) -> Order:
        """
        Turn the user's cart into an order with price snapshots.

        The order, its items, its created event and the emptied cart are
        committed together.

        Raises:
            CartError: Empty cart, unknown gemstone, out-of-stock gemstone or mixed currencies
        """
        cart_items = await self.cart.items(user_id)
        if not cart_items:
            raise CartError("Cart is empty")

        result = await self.db.execute(
            select(Gemstone).where(Gemstone.id.in_([item.gemstone_id for item in cart_items]))
        )
        gemstones = {gemstone.id: gemstone for gemstone in result.scalars().all()}

        order_items: List[OrderItem] = []
        currencies = set()
        for cart_item in cart_items:
            gemstone = gemstones.get(cart_item.gemstone_id)
            if gemstone is None:
                raise CartError(f"Gemstone {cart_item.gemstone_id} is no longer available")
            if not gemstone.in_stock:
                raise CartError(f"Gemstone {gemstone.serial_number} is out of stock")
            currencies.add(gemstone.price_currency)
            order_items.append(OrderItem(
                gemstone_id=gemstone.id,
                quantity=cart_item.quantity,
                unit_price=gemstone.price_amount,
                line_total=gemstone.price_amount * cart_item.quantity,
            ))

        if len(currencies) > 1:
            raise CartError(f"Cart mixes currencies: {sorted(currencies)}")

        order = Order(
            order_number=generate_order_number(),
            user_id=user_id,
            status=OrderStatus.PENDING,
            total_amount=sum(item.line_total for item in order_items),
            currency_code=currencies.pop(),
            notes=notes,
            items=order_items,
        )
        self.db.add(order)
        await self.db.flush()

        self.db.add(build_created_event(order))
        await self.cart.clear(user_id)
        await self.db.commit()

        logger.info(f"Created order {order.order_number} for user {user_id}: {order.total_amount} {order.currency_code}")
        return await self.get(order.id)

    async def change_status(
        self,
        order_id: UUID,
        new_status: OrderStatus,
        performed_by: Optional[UUID] = None
    ) -> Order:
        """
        Move an order to a new status and log the change.

        Setting the current status again is a no-op without an event.

        Raises:
            NotFoundError: Unknown order
            OrderStateError: The move is not allowed from the current status
        """
        order = await self.get(order_id)
        old_status = order.status

        event = build_status_event(order, old_status, new_status, performed_by)
        if event is None:
            return order

        if not can_transition(old_status, new_status):
            raise OrderStateError(
                f"Order {order.order_number} cannot move from {old_status.value} to {new_status.value}"
            )

        order.status = new_status
        self.db.add(event)
        await self.db.commit()

        logger.info(f"Order {order.order_number}: {old_status.value} -> {new_status.value}")
        return order

    async def list_events(self, order_id: UUID, include_internal: bool = True) -> List[OrderEvent]:
        """Audit entries of an order, oldest first."""
        await self.get(order_id)
        statement = select(OrderEvent).where(OrderEvent.order_id == order_id)
        if not include_internal:
            statement = statement.where(OrderEvent.is_internal.is_(False))
        result = await self.db.execute(statement.order_by(OrderEvent.performed_at, OrderEvent.created_at))
        return list(result.scalars().all())
