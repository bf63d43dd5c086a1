"""Tests for carts, order placement and the order audit log."""

import re
import uuid
import pytest
from storefront.exceptions import CartError, ImmutableEventError, NotFoundError, OrderStateError
from storefront.models.order import (
    CartItem,
    EventSeverity,
    Order,
    OrderEvent,
    OrderStatus,
    _reject_event_delete,
    _reject_event_update,
)
from storefront.services.cart import CartService
from storefront.services.orders import (
    OrderService,
    build_created_event,
    build_status_event,
    can_transition,
    generate_order_number,
)


def make_order(status=OrderStatus.PENDING):
    return Order(
        id=uuid.uuid4(),
        order_number="ORD-20251001-ABC123",
        user_id=uuid.uuid4(),
        status=status,
        total_amount=250000,
        currency_code="USD",
    )


class TestOrderEvents:
    """Test cases for order event construction."""

    def test_order_number_format(self):
        numbers = {generate_order_number() for _ in range(20)}

        assert all(re.fullmatch(r"ORD-\d{8}-[0-9A-F]{6}", number) for number in numbers)
        assert len(numbers) > 1

    def test_created_event(self):
        order = make_order()
        event = build_created_event(order)

        assert event.order_id == order.id
        assert event.event_type == "order_created"
        assert event.severity == EventSeverity.SUCCESS
        assert event.title == "Order Created"
        assert event.event_metadata == {"total_amount": 250000, "currency_code": "USD", "automated": True}

    def test_status_event(self):
        order = make_order()
        event = build_status_event(order, OrderStatus.PENDING, OrderStatus.SHIPPED)

        assert event.event_type == "order_shipped"
        assert event.title == "Order Shipped"
        assert event.description == "Order status changed from pending to shipped"
        assert event.event_metadata == {"old_status": "pending", "new_status": "shipped", "automated": True}

    def test_status_event_severity(self):
        order = make_order()
        test_cases = [
            (OrderStatus.DELIVERED, EventSeverity.SUCCESS),
            (OrderStatus.CANCELLED, EventSeverity.ERROR),
            (OrderStatus.PENDING, EventSeverity.WARNING),
            (OrderStatus.CONFIRMED, EventSeverity.INFO),
            (OrderStatus.SHIPPED, EventSeverity.INFO),
        ]

        for status, expected in test_cases:
            assert build_status_event(order, None, status).severity == expected, f"Failed for {status}"

    def test_first_assignment_describes_none(self):
        event = build_status_event(make_order(), None, OrderStatus.PENDING)
        assert event.description == "Order status changed from none to pending"

    def test_unchanged_status_has_no_event(self):
        assert build_status_event(make_order(), OrderStatus.SHIPPED, OrderStatus.SHIPPED) is None

    def test_events_are_append_only(self):
        event = build_created_event(make_order())

        with pytest.raises(ImmutableEventError):
            _reject_event_update(None, None, event)
        with pytest.raises(ImmutableEventError):
            _reject_event_delete(None, None, event)


class TestOrderService:
    """Test cases for OrderService."""

    async def test_change_status_records_event(self, make_session):
        order = make_order()
        db = make_session(order)

        updated = await OrderService(db).change_status(order.id, OrderStatus.CONFIRMED)

        assert updated.status == OrderStatus.CONFIRMED
        assert [e.event_type for e in db.added] == ["order_confirmed"]
        assert db.commits == 1

    async def test_same_status_is_noop(self, make_session):
        order = make_order(OrderStatus.SHIPPED)
        db = make_session(order)

        await OrderService(db).change_status(order.id, OrderStatus.SHIPPED)

        assert db.added == []
        assert db.commits == 0

    def test_can_transition(self):
        test_cases = [
            (OrderStatus.PENDING, OrderStatus.CONFIRMED, True),
            (OrderStatus.CONFIRMED, OrderStatus.PROCESSING, True),
            (OrderStatus.PROCESSING, OrderStatus.SHIPPED, True),
            (OrderStatus.SHIPPED, OrderStatus.DELIVERED, True),
            (OrderStatus.PENDING, OrderStatus.DELIVERED, False),
            (OrderStatus.PENDING, OrderStatus.SHIPPED, False),
            (OrderStatus.SHIPPED, OrderStatus.PROCESSING, False),
            (OrderStatus.DELIVERED, OrderStatus.PROCESSING, False),
            (OrderStatus.CANCELLED, OrderStatus.PENDING, False),
        ]

        for old, new, expected in test_cases:
            assert can_transition(old, new) is expected, f"Failed for {old.value} -> {new.value}"

    def test_cancel_is_allowed_from_any_status(self):
        for status in OrderStatus:
            assert can_transition(status, OrderStatus.CANCELLED), f"Failed for {status.value}"

    async def test_skipping_ahead_is_rejected(self, make_session):
        order = make_order(OrderStatus.PENDING)
        db = make_session(order)

        with pytest.raises(OrderStateError):
            await OrderService(db).change_status(order.id, OrderStatus.DELIVERED)
        assert order.status == OrderStatus.PENDING
        assert db.added == []
        assert db.commits == 0

    async def test_final_statuses_only_allow_cancel(self, make_session):
        order = make_order(OrderStatus.CANCELLED)
        db = make_session(order)
        with pytest.raises(OrderStateError):
            await OrderService(db).change_status(order.id, OrderStatus.PROCESSING)
        assert db.commits == 0

        order = make_order(OrderStatus.DELIVERED)
        db = make_session(order)
        updated = await OrderService(db).change_status(order.id, OrderStatus.CANCELLED)

        assert updated.status == OrderStatus.CANCELLED
        assert [e.event_type for e in db.added] == ["order_cancelled"]
        assert db.commits == 1

    async def test_unknown_order(self, make_session):
        with pytest.raises(NotFoundError):
            await OrderService(make_session(None)).change_status(uuid.uuid4(), OrderStatus.SHIPPED)

    async def test_empty_cart_cannot_be_ordered(self, make_session):
        with pytest.raises(CartError):
            await OrderService(make_session([])).create_order(uuid.uuid4())

    async def test_out_of_stock_gemstone_blocks_order(self, make_session, make_gemstone):
        user_id = uuid.uuid4()
        gemstone = make_gemstone("EM-0003", "emerald", in_stock=False)
        db = make_session([CartItem(user_id=user_id, gemstone_id=gemstone.id, quantity=1)], [gemstone])

        with pytest.raises(CartError):
            await OrderService(db).create_order(user_id)
        assert db.commits == 0

    async def test_mixed_currencies_block_order(self, make_session, make_gemstone):
        user_id = uuid.uuid4()
        dollars = make_gemstone("RB-0001")
        euros = make_gemstone("SP-0002", "sapphire")
        euros.price_currency = "EUR"
        cart = [
            CartItem(user_id=user_id, gemstone_id=dollars.id, quantity=1),
            CartItem(user_id=user_id, gemstone_id=euros.id, quantity=1),
        ]

        with pytest.raises(CartError):
            await OrderService(make_session(cart, [dollars, euros])).create_order(user_id)

    async def test_create_order_snapshots_prices(self, make_session, make_gemstone):
        user_id = uuid.uuid4()
        ruby = make_gemstone("RB-0001", price_amount=100000)
        sapphire = make_gemstone("SP-0002", "sapphire", price_amount=50000)
        cart = [
            CartItem(user_id=user_id, gemstone_id=ruby.id, quantity=1),
            CartItem(user_id=user_id, gemstone_id=sapphire.id, quantity=2),
        ]

        def placed_order(session):
            return next(obj for obj in session.added if isinstance(obj, Order))

        db = make_session(cart, [ruby, sapphire], None, placed_order)

        order = await OrderService(db).create_order(user_id, notes="Gift wrap")

        assert order.total_amount == 200000
        assert order.currency_code == "USD"
        assert order.status == OrderStatus.PENDING
        assert order.notes == "Gift wrap"
        assert sorted(item.line_total for item in order.items) == [100000, 100000]
        assert [type(obj) for obj in db.added] == [Order, OrderEvent]
        assert db.added[1].event_type == "order_created"
        assert db.flushes == 1
        assert db.commits == 1


class TestCartService:
    """Test cases for CartService."""

    async def test_add_rejects_bad_input(self, make_session, make_gemstone):
        out_of_stock = make_gemstone("EM-0003", in_stock=False)
        db = make_session(objects={out_of_stock.id: out_of_stock})
        cart = CartService(db)

        with pytest.raises(CartError):
            await cart.add(uuid.uuid4(), out_of_stock.id, quantity=0)
        with pytest.raises(NotFoundError):
            await cart.add(uuid.uuid4(), uuid.uuid4())
        with pytest.raises(CartError):
            await cart.add(uuid.uuid4(), out_of_stock.id)

    async def test_add_increments_existing_line(self, make_session, make_gemstone):
        user_id = uuid.uuid4()
        ruby = make_gemstone("RB-0001", price_amount=1000)
        line = CartItem(user_id=user_id, gemstone_id=ruby.id, quantity=1)
        db = make_session(line, [line], [ruby], objects={ruby.id: ruby})

        cart = await CartService(db).add(user_id, ruby.id, quantity=2)

        assert line.quantity == 3
        assert db.added == []
        assert cart.total_amount == 3000
        assert cart.items[0].line_total == 3000

    async def test_update_missing_line(self, make_session):
        with pytest.raises(NotFoundError):
            await CartService(make_session(None)).update(uuid.uuid4(), uuid.uuid4(), 2)

    async def test_update_to_zero_removes_line(self, make_session):
        db = make_session(None, [])

        cart = await CartService(db).update(uuid.uuid4(), uuid.uuid4(), 0)

        assert cart.items == []
        assert db.commits == 1
