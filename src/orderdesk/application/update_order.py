"""Application service: Update Order use case (notes, shipping address)."""

from __future__ import annotations

import logging

from orderdesk.application.dto import OrderDTO, to_order_dto
from orderdesk.domain.repository.unit_of_work import UnitOfWork

logger = logging.getLogger(__name__)


class UpdateOrderHandler:

    def __init__(self, uow: UnitOfWork) -> None:
        self._uow = uow

    def handle(
        self,
        order_id: int,
        notes: str | None = None,
        shipping_address: str | None = None,
    ) -> OrderDTO | None:
        """Edit a pending order's own fields; None if it does not exist.

        Raises OrderNotModifiableError once the order has left PENDING.
        """
        with self._uow:
            order = self._uow.orders.get_by_id(order_id)
            if order is None:
                logger.warning("Order with ID %s not found", order_id)
                return None
            order.update_details(notes=notes, shipping_address=shipping_address)
            self._uow.orders.save(order)

        logger.info("Order with ID %s updated successfully", order_id)
        return to_order_dto(order)
