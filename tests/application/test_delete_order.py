"""Integration tests for the DeleteOrder use case."""

import pytest

from orderdesk.application.create_order import CreateOrderHandler
from orderdesk.application.delete_order import DeleteOrderHandler
from orderdesk.application.dto import CreateOrderRequest, OrderItemSpec
from orderdesk.domain.exceptions import InvalidTransitionError
from orderdesk.domain.model.order import OrderStatus
from orderdesk.domain.model.product import Product
from orderdesk.domain.model.value_objects import Money
from tests.fakes import FakeUnitOfWork, FakeUserDirectory, FixedClock


def _setup() -> tuple[DeleteOrderHandler, FakeUnitOfWork, int]:
    uow = FakeUnitOfWork([
        Product(id=1, name="Widget", price=Money.of("10.00"), stock_quantity=10),
    ])
    clock = FixedClock()
    dto = CreateOrderHandler(uow, FakeUserDirectory([1]), clock).handle(
        CreateOrderRequest(
            user_id=1,
            items=[OrderItemSpec(1, 4, "10.00")],
            shipping_address="1 Main St",
        )
    )
    return DeleteOrderHandler(uow, clock), uow, dto.id


class TestDeleteOrder:

    def test_delete_pending_order_releases_stock(self):
        handler, uow, order_id = _setup()
        assert uow.products.get_by_id(1).stock_quantity == 6

        assert handler.handle(order_id) is True

        assert uow.orders.get_by_id(order_id) is None
        assert uow.products.get_by_id(1).stock_quantity == 10

    def test_delete_processing_order(self):
        handler, uow, order_id = _setup()
        uow.orders.get_by_id(order_id).status = OrderStatus.PROCESSING
        assert handler.handle(order_id)

    def test_missing_order_returns_false(self):
        handler, _, _ = _setup()
        assert handler.handle(12345) is False

    @pytest.mark.parametrize("status", [OrderStatus.SHIPPED, OrderStatus.CANCELLED])
    def test_non_cancellable_order_rejected(self, status):
        handler, uow, order_id = _setup()
        uow.orders.get_by_id(order_id).status = status

        with pytest.raises(InvalidTransitionError, match="cannot be deleted"):
            handler.handle(order_id)

        assert uow.orders.get_by_id(order_id) is not None
        assert uow.products.get_by_id(1).stock_quantity == 6
