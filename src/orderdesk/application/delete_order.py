"""Application service: Delete Order use case.

Only cancellable (PENDING / PROCESSING) orders can be deleted.  Reserved
stock is released, then the order is removed together with its items,
all in one transaction.
"""

from __future__ import annotations

import logging

from orderdesk.application.clock import Clock, utc_now
from orderdesk.domain.exceptions import InvalidTransitionError
from orderdesk.domain.repository.unit_of_work import UnitOfWork
from orderdesk.domain.service.stock_ledger import StockLedger, stock_lines

logger = logging.getLogger(__name__)


class DeleteOrderHandler:

    def __init__(self, uow: UnitOfWork, clock: Clock = utc_now) -> None:
        self._uow = uow
        self._clock = clock

    def handle(self, order_id: int) -> bool:
        with self._uow:
            order = self._uow.orders.get_by_id(order_id)
            if order is None:
                logger.warning("Order %s not found for deletion", order_id)
                return False
            if not order.can_be_cancelled:
                raise InvalidTransitionError(
                    f"Order {order.order_number} cannot be deleted in "
                    f"{order.status.value} status",
                    current=order.status,
                )

            StockLedger(self._uow.products).release(stock_lines(order.items), self._clock())
            self._uow.orders.delete(order_id)

        logger.info("Order %s deleted successfully", order_id)
        return True
