"""Application services: order item management.

Items can only change while the order is PENDING.  Every change runs in
one transaction that also moves stock by the quantity delta (so a later
cancellation releases exactly what is held) and reprices the order, so
the stored totals never go stale with respect to the items.
"""

from __future__ import annotations

import logging
from decimal import Decimal

from orderdesk.application.clock import Clock, utc_now
from orderdesk.application.dto import OrderItemSpec
from orderdesk.domain.exceptions import ProductNotFoundError, ValidationError
from orderdesk.domain.model.order import Order, OrderItem
from orderdesk.domain.model.product import Product
from orderdesk.domain.model.value_objects import Money, Quantity
from orderdesk.domain.repository.unit_of_work import UnitOfWork
from orderdesk.domain.service.order_pricing import reprice_order
from orderdesk.domain.service.stock_ledger import StockLedger, StockLine

logger = logging.getLogger(__name__)


def parse_money(raw: str | Decimal | None, label: str) -> Money:
    if raw is None:
        return Money.zero()
    try:
        return Money.of(raw)
    except ValidationError as exc:
        raise ValidationError(f"Invalid {label}: {exc}") from exc


def build_item(spec: OrderItemSpec, product: Product) -> OrderItem:
    """Turn a requested line into an OrderItem, validating its values."""
    return OrderItem(
        product_id=product.id,  # type: ignore[arg-type]
        product_name=product.name,
        unit_price=parse_money(spec.unit_price, "unit price"),
        quantity=Quantity(spec.quantity),
        discount_amount=parse_money(spec.discount, "item discount"),
    )


def recalculate(order: Order) -> None:
    order.apply_totals(reprice_order(order))


class AddOrderItemHandler:

    def __init__(self, uow: UnitOfWork, clock: Clock = utc_now) -> None:
        self._uow = uow
        self._clock = clock

    def handle(self, order_id: int, spec: OrderItemSpec) -> bool:
        with self._uow:
            order = self._uow.orders.get_by_id(order_id)
            if order is None:
                logger.warning("Cannot add item: order %s not found", order_id)
                return False
            order.ensure_modifiable()

            product = self._uow.products.get_by_id(spec.product_id)
            if product is None:
                raise ProductNotFoundError(spec.product_id)

            order.add_item(build_item(spec, product))
            StockLedger(self._uow.products).reserve(
                [StockLine(spec.product_id, spec.quantity)], self._clock()
            )
            recalculate(order)
            self._uow.orders.save(order)

        logger.info("Order item added to order %s", order_id)
        return True


class UpdateOrderItemHandler:

    def __init__(self, uow: UnitOfWork, clock: Clock = utc_now) -> None:
        self._uow = uow
        self._clock = clock

    def handle(self, order_id: int, item_id: int, spec: OrderItemSpec) -> bool:
        """Replace quantity, unit price and discount of an existing item."""
        with self._uow:
            order = self._uow.orders.get_by_id(order_id)
            if order is None:
                logger.warning("Cannot update item: order %s not found", order_id)
                return False
            order.ensure_modifiable()

            if order.find_item(item_id) is None:
                logger.warning("Item %s not found in order %s", item_id, order_id)
                return False

            product = self._uow.products.get_by_id(spec.product_id)
            if product is None:
                raise ProductNotFoundError(spec.product_id)

            previous = order.replace_item(item_id, build_item(spec, product))
            self._adjust_stock(spec.product_id, spec.quantity - previous.quantity.value)
            recalculate(order)
            self._uow.orders.save(order)

        logger.info("Order item %s updated in order %s", item_id, order_id)
        return True

    def _adjust_stock(self, product_id: int, delta: int) -> None:
        ledger = StockLedger(self._uow.products)
        if delta > 0:
            ledger.reserve([StockLine(product_id, delta)], self._clock())
        elif delta < 0:
            ledger.release([StockLine(product_id, -delta)], self._clock())


class RemoveOrderItemHandler:

    def __init__(self, uow: UnitOfWork, clock: Clock = utc_now) -> None:
        self._uow = uow
        self._clock = clock

    def handle(self, order_id: int, item_id: int) -> bool:
        with self._uow:
            order = self._uow.orders.get_by_id(order_id)
            if order is None:
                logger.warning("Cannot remove item: order %s not found", order_id)
                return False
            order.ensure_modifiable()

            if order.find_item(item_id) is None:
                logger.warning("Item %s not found in order %s", item_id, order_id)
                return False

            removed = order.remove_item(item_id)
            StockLedger(self._uow.products).release(
                [StockLine(removed.product_id, removed.quantity.value)], self._clock()
            )
            recalculate(order)
            self._uow.orders.save(order)

        logger.info("Order item %s removed from order %s", item_id, order_id)
        return True


class RecalculateOrderTotalHandler:

    def __init__(self, uow: UnitOfWork) -> None:
        self._uow = uow

    def handle(self, order_id: int) -> bool:
        with self._uow:
            order = self._uow.orders.get_by_id(order_id)
            if order is None:
                return False
            recalculate(order)
            self._uow.orders.save(order)
        return True
