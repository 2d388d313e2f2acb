"""Application service: Cancel Order use cases.

Only PENDING and PROCESSING orders can be cancelled.  Stock for every
item was reserved when the order was created (and adjusted on every item
change), so cancelling releases each item's full quantity.  The status
change and the release commit together.
"""

from __future__ import annotations

import logging
from collections.abc import Iterable
from datetime import datetime

from orderdesk.application.clock import Clock, utc_now
from orderdesk.application.dto import BulkItemResult, BulkOperationResult, BulkOutcome
from orderdesk.domain.exceptions import DomainException
from orderdesk.domain.model.order import Order
from orderdesk.domain.repository.unit_of_work import UnitOfWork
from orderdesk.domain.service.stock_ledger import StockLedger, stock_lines

logger = logging.getLogger(__name__)

DEFAULT_CANCEL_REASON = "Order cancelled by system"


def cancel_and_release(
    uow: UnitOfWork,
    order: Order,
    now: datetime,
    reason: str | None = None,
) -> None:
    """Cancel *order* and give its stock back. Call inside a transaction."""
    order.cancel(now, reason or DEFAULT_CANCEL_REASON)
    StockLedger(uow.products).release(stock_lines(order.items), now)
    uow.orders.save(order)
    logger.info("Stock reservation released for order %s", order.id)


class CancelOrderHandler:

    def __init__(self, uow: UnitOfWork, clock: Clock = utc_now) -> None:
        self._uow = uow
        self._clock = clock

    def handle(self, order_id: int, reason: str | None = None) -> bool:
        """Cancel an order; False if it does not exist.

        Raises InvalidTransitionError if the order is past PROCESSING.
        """
        with self._uow:
            order = self._uow.orders.get_by_id(order_id)
            if order is None:
                logger.warning("Order %s not found for cancellation", order_id)
                return False
            cancel_and_release(self._uow, order, self._clock(), reason)

        logger.info("Order %s cancelled", order_id)
        return True


class BulkCancelOrdersHandler:
    """Cancel several orders, each in its own transaction.

    A rejected or missing order does not undo the ones already
    cancelled; the result reports the outcome for every id.
    """

    def __init__(self, uow: UnitOfWork, clock: Clock = utc_now) -> None:
        self._cancel = CancelOrderHandler(uow, clock)

    def handle(self, order_ids: Iterable[int], reason: str | None = None) -> BulkOperationResult:
        result = BulkOperationResult()
        for order_id in dict.fromkeys(order_ids):
            try:
                found = self._cancel.handle(order_id, reason)
            except DomainException as exc:
                logger.warning("Order %s not cancelled: %s", order_id, exc)
                result.results.append(BulkItemResult(order_id, BulkOutcome.REJECTED, str(exc)))
                continue
            outcome = BulkOutcome.SUCCEEDED if found else BulkOutcome.NOT_FOUND
            result.results.append(BulkItemResult(order_id, outcome))

        logger.info(
            "Bulk cancellation completed: %s of %s orders cancelled",
            len(result.succeeded),
            len(result.results),
        )
        return result
