"""Unit tests for the order status lifecycle."""

from datetime import datetime, timedelta, timezone

import pytest

from orderdesk.domain.exceptions import InvalidTransitionError
from orderdesk.domain.model.order import (
    ALLOWED_TRANSITIONS,
    Order,
    OrderItem,
    OrderStatus,
    can_transition,
)
from orderdesk.domain.model.value_objects import Money, Quantity

NOW = datetime(2026, 10, 18, 12, 0, tzinfo=timezone.utc)
LATER = NOW + timedelta(days=2)


def _order(status: OrderStatus = OrderStatus.PENDING) -> Order:
    return Order(
        id=1,
        order_number="ORD-202610-0001",
        user_id=1,
        items=[
            OrderItem(
                product_id=1,
                product_name="Widget",
                unit_price=Money.of("10.00"),
                quantity=Quantity(1),
                id=1,
            )
        ],
        shipping_address="1 Main St",
        status=status,
        order_date=NOW,
    )


class TestTransitionTable:

    @pytest.mark.parametrize("current, target", [
        (OrderStatus.PENDING, OrderStatus.PROCESSING),
        (OrderStatus.PENDING, OrderStatus.SHIPPED),
        (OrderStatus.PENDING, OrderStatus.CANCELLED),
        (OrderStatus.PROCESSING, OrderStatus.SHIPPED),
        (OrderStatus.PROCESSING, OrderStatus.CANCELLED),
        (OrderStatus.SHIPPED, OrderStatus.DELIVERED),
        (OrderStatus.DELIVERED, OrderStatus.RETURNED),
        (OrderStatus.DELIVERED, OrderStatus.REFUNDED),
    ])
    def test_allowed(self, current, target):
        assert can_transition(current, target)

    @pytest.mark.parametrize("current, target", [
        (OrderStatus.SHIPPED, OrderStatus.CANCELLED),
        (OrderStatus.DELIVERED, OrderStatus.CANCELLED),
        (OrderStatus.PROCESSING, OrderStatus.PENDING),
        (OrderStatus.PENDING, OrderStatus.DELIVERED),
        (OrderStatus.SHIPPED, OrderStatus.SHIPPED),
    ])
    def test_forbidden(self, current, target):
        assert not can_transition(current, target)

    @pytest.mark.parametrize("terminal", [
        OrderStatus.CANCELLED,
        OrderStatus.RETURNED,
        OrderStatus.REFUNDED,
    ])
    def test_terminal_statuses_have_no_exits(self, terminal):
        assert ALLOWED_TRANSITIONS[terminal] == frozenset()


class TestTransitionTo:

    def test_forbidden_move_raises_and_leaves_order_unchanged(self):
        order = _order(OrderStatus.SHIPPED)
        with pytest.raises(InvalidTransitionError) as exc_info:
            order.transition_to(OrderStatus.CANCELLED, LATER)
        assert exc_info.value.current == OrderStatus.SHIPPED
        assert exc_info.value.requested == OrderStatus.CANCELLED
        assert order.status == OrderStatus.SHIPPED

    def test_shipping_stamps_shipped_date(self):
        order = _order(OrderStatus.PROCESSING)
        order.transition_to(OrderStatus.SHIPPED, LATER)
        assert order.shipped_date == LATER
        assert order.delivered_date is None

    def test_delivery_stamps_delivered_date(self):
        order = _order()
        order.transition_to(OrderStatus.SHIPPED, NOW)
        order.transition_to(OrderStatus.DELIVERED, LATER)
        assert order.shipped_date == NOW
        assert order.delivered_date == LATER

    def test_notes_overwritten_only_when_given(self):
        order = _order()
        order.notes = "fragile"
        order.transition_to(OrderStatus.PROCESSING, NOW)
        assert order.notes == "fragile"
        order.transition_to(OrderStatus.SHIPPED, NOW, notes="Tracking 123")
        assert order.notes == "Tracking 123"

    def test_full_happy_path(self):
        order = _order()
        for status in (
            OrderStatus.PROCESSING,
            OrderStatus.SHIPPED,
            OrderStatus.DELIVERED,
            OrderStatus.REFUNDED,
        ):
            order.transition_to(status, LATER)
        assert order.status == OrderStatus.REFUNDED


class TestCancel:

    @pytest.mark.parametrize("status", [OrderStatus.PENDING, OrderStatus.PROCESSING])
    def test_cancellable(self, status):
        order = _order(status)
        assert order.can_be_cancelled
        order.cancel(NOW, "Customer changed their mind")
        assert order.status == OrderStatus.CANCELLED
        assert order.notes == "Customer changed their mind"

    @pytest.mark.parametrize("status", [
        OrderStatus.SHIPPED,
        OrderStatus.DELIVERED,
        OrderStatus.CANCELLED,
        OrderStatus.RETURNED,
    ])
    def test_not_cancellable(self, status):
        order = _order(status)
        assert not order.can_be_cancelled
        with pytest.raises(InvalidTransitionError, match="cannot be cancelled"):
            order.cancel(NOW)
        assert order.status == status
