"""Application service: Create Order use case.

Orchestrates the flow between the identity collaborator, the stock
ledger, the order-number generator, the pricing engine and the order
repository.

Structural validation and the stock check happen before any transaction
starts.  Everything after that (number allocation, persisting the order
and its items, reserving stock) runs in one unit-of-work transaction:
on any failure it is rolled back and the error is re-raised, so a failed
creation leaves no order row and no stock decrement behind.
"""

from __future__ import annotations

import logging
from datetime import datetime

from orderdesk.application.clock import Clock, utc_now
from orderdesk.application.dto import CreateOrderRequest, OrderDTO, to_order_dto
from orderdesk.application.order_items import build_item, parse_money
from orderdesk.domain.exceptions import (
    DuplicateOrderNumberError,
    ProductNotFoundError,
    ValidationError,
)
from orderdesk.domain.model.order import (
    MAX_ADDRESS_LENGTH,
    MAX_NOTES_LENGTH,
    Order,
    OrderItem,
)
from orderdesk.domain.repository.unit_of_work import UnitOfWork
from orderdesk.domain.repository.user_directory import UserDirectory
from orderdesk.domain.service.order_number_generator import OrderNumberGenerator
from orderdesk.domain.service.order_pricing import OrderTotals, PriceLine, price_order
from orderdesk.domain.service.stock_ledger import StockLedger, stock_lines

logger = logging.getLogger(__name__)

MAX_ORDER_NUMBER_ATTEMPTS = 5


class CreateOrderHandler:

    def __init__(
        self,
        uow: UnitOfWork,
        users: UserDirectory,
        clock: Clock = utc_now,
    ) -> None:
        self._uow = uow
        self._users = users
        self._clock = clock

    def handle(self, request: CreateOrderRequest) -> OrderDTO:
        """Create a new pending order and reserve its stock.

        Steps:
        1. Validate the request (user, items, products, address) and price
           it, including the order discount.
        2. Check stock for every item.
        3. In one transaction: allocate an order number, persist the
           order, reserve stock, commit.
        """
        items = self._validate(request)
        totals = price_order(
            [PriceLine(item.unit_price, item.quantity.value) for item in items],
            parse_money(request.discount, "order discount"),
        )

        ledger = StockLedger(self._uow.products)
        ledger.ensure_available(stock_lines(items))

        now = self._clock()
        try:
            with self._uow:
                order = self._place(request, items, totals, now, ledger)
        except Exception:
            logger.exception("Error creating order for user %s", request.user_id)
            raise

        logger.info(
            "Order created successfully with ID %s and number %s",
            order.id,
            order.order_number,
        )
        return to_order_dto(order)

    # --- Steps ----------------------------------------------------------------

    def _validate(self, request: CreateOrderRequest) -> list[OrderItem]:
        if request.user_id <= 0 or not self._users.exists(request.user_id):
            raise ValidationError(f"User #{request.user_id} does not exist")
        if not request.items:
            raise ValidationError("Order must contain at least one item")
        if not request.shipping_address or not request.shipping_address.strip():
            raise ValidationError("Shipping address is required")
        if len(request.shipping_address) > MAX_ADDRESS_LENGTH:
            raise ValidationError(
                f"Shipping address cannot exceed {MAX_ADDRESS_LENGTH} characters"
            )
        if request.notes is not None and len(request.notes) > MAX_NOTES_LENGTH:
            raise ValidationError(f"Notes cannot exceed {MAX_NOTES_LENGTH} characters")

        items: list[OrderItem] = []
        seen: set[int] = set()
        for spec in request.items:
            if spec.product_id in seen:
                raise ValidationError(f"Product #{spec.product_id} is listed more than once")
            seen.add(spec.product_id)

            product = self._uow.products.get_by_id(spec.product_id)
            if product is None:
                raise ProductNotFoundError(spec.product_id)
            items.append(build_item(spec, product))
        return items

    def _place(
        self,
        request: CreateOrderRequest,
        items: list[OrderItem],
        totals: OrderTotals,
        now: datetime,
        ledger: StockLedger,
    ) -> Order:
        generator = OrderNumberGenerator(self._uow.orders)

        for attempt in range(1, MAX_ORDER_NUMBER_ATTEMPTS + 1):
            order = Order.create(
                order_number=generator.generate(now),
                user_id=request.user_id,
                items=items,
                shipping_address=request.shipping_address,
                totals=totals,
                now=now,
                notes=request.notes,
            )
            try:
                self._uow.orders.save(order)
                break
            except DuplicateOrderNumberError:
                if attempt == MAX_ORDER_NUMBER_ATTEMPTS:
                    raise
                logger.debug("Order number %s collided, retrying", order.order_number)

        ledger.reserve(stock_lines(items), now)
        return order
