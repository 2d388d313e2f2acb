"""Application service: status transitions.

``UpdateOrderStatusHandler`` applies the lifecycle table on the Order
aggregate; a move to CANCELLED goes through the cancellation path so
stock is released in the same transaction.  The shortcut handlers
(process / ship / deliver) supply default notes.
"""

from __future__ import annotations

import logging
from collections.abc import Iterable

from orderdesk.application.cancel_order import cancel_and_release
from orderdesk.application.clock import Clock, utc_now
from orderdesk.application.dto import BulkItemResult, BulkOperationResult, BulkOutcome
from orderdesk.domain.exceptions import DomainException
from orderdesk.domain.model.order import OrderStatus
from orderdesk.domain.repository.unit_of_work import UnitOfWork

logger = logging.getLogger(__name__)

DEFAULT_NOTES = {
    OrderStatus.PROCESSING: "Order is being processed",
    OrderStatus.SHIPPED: "Order shipped",
    OrderStatus.DELIVERED: "Order delivered",
}


class UpdateOrderStatusHandler:

    def __init__(self, uow: UnitOfWork, clock: Clock = utc_now) -> None:
        self._uow = uow
        self._clock = clock

    def handle(
        self,
        order_id: int,
        new_status: OrderStatus,
        notes: str | None = None,
    ) -> bool:
        """Move an order to *new_status*; False if the order does not exist.

        Raises InvalidTransitionError if the lifecycle forbids the move.
        """
        now = self._clock()
        with self._uow:
            order = self._uow.orders.get_by_id(order_id)
            if order is None:
                logger.warning("Order %s not found for status update", order_id)
                return False

            previous = order.status
            if new_status == OrderStatus.CANCELLED:
                cancel_and_release(self._uow, order, now, notes)
            else:
                order.transition_to(new_status, now, notes or DEFAULT_NOTES.get(new_status))
                self._uow.orders.save(order)

        logger.info(
            "Order %s moved from %s to %s", order_id, previous.value, new_status.value
        )
        return True


class _StatusShortcutHandler:

    target: OrderStatus

    def __init__(self, uow: UnitOfWork, clock: Clock = utc_now) -> None:
        self._update = UpdateOrderStatusHandler(uow, clock)

    def handle(self, order_id: int, notes: str | None = None) -> bool:
        return self._update.handle(order_id, self.target, notes)


class ProcessOrderHandler(_StatusShortcutHandler):
    target = OrderStatus.PROCESSING


class MarkShippedHandler(_StatusShortcutHandler):
    target = OrderStatus.SHIPPED


class MarkDeliveredHandler(_StatusShortcutHandler):
    target = OrderStatus.DELIVERED


class BulkUpdateOrderStatusHandler:
    """Apply one status change to many orders, each independently.

    Orders that are missing or whose lifecycle forbids the move are
    reported and skipped; the others are committed one by one.
    """

    def __init__(self, uow: UnitOfWork, clock: Clock = utc_now) -> None:
        self._update = UpdateOrderStatusHandler(uow, clock)

    def handle(
        self,
        order_ids: Iterable[int],
        new_status: OrderStatus,
        notes: str | None = None,
    ) -> BulkOperationResult:
        result = BulkOperationResult()
        for order_id in dict.fromkeys(order_ids):
            try:
                found = self._update.handle(order_id, new_status, notes)
            except DomainException as exc:
                logger.warning("Order %s not updated: %s", order_id, exc)
                result.results.append(BulkItemResult(order_id, BulkOutcome.REJECTED, str(exc)))
                continue
            outcome = BulkOutcome.SUCCEEDED if found else BulkOutcome.NOT_FOUND
            result.results.append(BulkItemResult(order_id, outcome))

        logger.info(
            "Bulk status update to %s: %s of %s orders updated",
            new_status.value,
            len(result.succeeded),
            len(result.results),
        )
        return result
