"""Unit tests for the Order aggregate: creation rules and item editing."""

from datetime import datetime, timezone

import pytest

from orderdesk.domain.exceptions import OrderNotModifiableError, ValidationError
from orderdesk.domain.model.order import (
    MAX_ADDRESS_LENGTH,
    MAX_NOTES_LENGTH,
    Order,
    OrderItem,
    OrderStatus,
)
from orderdesk.domain.model.value_objects import Money, Quantity
from orderdesk.domain.service.order_pricing import totals_for_subtotal

NOW = datetime(2026, 10, 18, 12, 0, tzinfo=timezone.utc)


def _item(product_id: int = 1, qty: int = 2, price: str = "50.00", item_id=None) -> OrderItem:
    return OrderItem(
        product_id=product_id,
        product_name=f"Product {product_id}",
        unit_price=Money.of(price),
        quantity=Quantity(qty),
        id=item_id,
    )


def _order(*items: OrderItem, **kwargs) -> Order:
    items_list = list(items) or [_item(item_id=1)]
    subtotal = Money.zero()
    for item in items_list:
        subtotal = subtotal + item.gross_price
    return Order.create(
        order_number="ORD-202610-0001",
        user_id=7,
        items=items_list,
        shipping_address=kwargs.pop("shipping_address", "1 Main St"),
        totals=totals_for_subtotal(subtotal),
        now=NOW,
        **kwargs,
    )


class TestOrderItem:

    def test_total_price_takes_discount_off(self):
        item = OrderItem(
            product_id=1,
            product_name="Widget",
            unit_price=Money.of("10.00"),
            quantity=Quantity(3),
            discount_amount=Money.of("5.00"),
        )
        assert item.gross_price == Money.of("30.00")
        assert item.total_price == Money.of("25.00")

    def test_zero_unit_price_rejected(self):
        with pytest.raises(ValidationError, match="greater than zero"):
            _item(price="0")

    def test_discount_above_line_value_rejected(self):
        with pytest.raises(ValidationError, match="exceeds line value"):
            OrderItem(
                product_id=1,
                product_name="Widget",
                unit_price=Money.of("10.00"),
                quantity=Quantity(1),
                discount_amount=Money.of("10.01"),
            )


class TestOrderCreate:

    def test_new_order_is_pending_with_totals(self):
        order = _order()
        assert order.status == OrderStatus.PENDING
        assert order.order_date == NOW
        assert order.total_amount == Money.of("110.00")
        assert order.tax_amount == Money.of("10.00")
        assert order.shipped_date is None
        assert order.delivered_date is None

    def test_empty_items_rejected(self):
        with pytest.raises(ValidationError, match="at least one item"):
            Order.create("ORD-202610-0001", 7, [], "1 Main St", totals_for_subtotal(Money.zero()), NOW)

    def test_same_product_twice_rejected(self):
        with pytest.raises(ValidationError, match="more than once"):
            _order(_item(1), _item(1))

    def test_blank_address_rejected(self):
        with pytest.raises(ValidationError, match="Shipping address is required"):
            _order(shipping_address="   ")

    def test_address_is_trimmed(self):
        assert _order(shipping_address="  1 Main St ").shipping_address == "1 Main St"

    def test_overlong_address_rejected(self):
        with pytest.raises(ValidationError, match="cannot exceed"):
            _order(shipping_address="x" * (MAX_ADDRESS_LENGTH + 1))

    def test_overlong_notes_rejected(self):
        with pytest.raises(ValidationError, match="cannot exceed"):
            _order(notes="n" * (MAX_NOTES_LENGTH + 1))


class TestOrderEditing:

    def test_update_details(self):
        order = _order()
        order.update_details(notes="Leave at door", shipping_address="2 Side St")
        assert order.notes == "Leave at door"
        assert order.shipping_address == "2 Side St"

    def test_update_details_keeps_unspecified_fields(self):
        order = _order(notes="keep me")
        order.update_details(shipping_address="2 Side St")
        assert order.notes == "keep me"

    def test_add_item(self):
        order = _order()
        order.add_item(_item(2, qty=1, price="5.00"))
        assert [i.product_id for i in order.items] == [1, 2]

    def test_add_item_for_product_already_on_order_rejected(self):
        order = _order()
        with pytest.raises(ValidationError, match="already on order"):
            order.add_item(_item(1, qty=1))

    def test_replace_item_keeps_id(self):
        order = _order()
        old = order.replace_item(1, _item(1, qty=5))
        assert old.quantity.value == 2
        assert order.items[0].id == 1
        assert order.items[0].quantity.value == 5

    def test_replace_item_with_other_product_rejected(self):
        order = _order()
        with pytest.raises(ValidationError, match="another product"):
            order.replace_item(1, _item(2))

    def test_remove_item(self):
        order = _order(_item(1, item_id=1), _item(2, item_id=2))
        removed = order.remove_item(2)
        assert removed.product_id == 2
        assert len(order.items) == 1

    def test_remove_last_item_rejected(self):
        order = _order()
        with pytest.raises(ValidationError, match="last item"):
            order.remove_item(1)

    def test_unknown_item_rejected(self):
        order = _order()
        with pytest.raises(ValidationError, match="is not on order"):
            order.remove_item(99)

    def test_items_subtotal_uses_net_item_totals(self):
        discounted = OrderItem(
            product_id=2,
            product_name="Gadget",
            unit_price=Money.of("20.00"),
            quantity=Quantity(1),
            discount_amount=Money.of("5.00"),
        )
        order = _order(_item(1, qty=1, price="10.00"), discounted)
        assert order.items_subtotal == Money.of("25.00")

    @pytest.mark.parametrize("status", [
        OrderStatus.PROCESSING,
        OrderStatus.SHIPPED,
        OrderStatus.CANCELLED,
    ])
    def test_editing_outside_pending_rejected(self, status):
        order = _order()
        order.status = status
        assert not order.can_be_modified
        with pytest.raises(OrderNotModifiableError):
            order.update_details(notes="too late")
        with pytest.raises(OrderNotModifiableError):
            order.add_item(_item(2))
