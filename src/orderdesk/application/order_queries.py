"""Application service: order queries (read-only).

Pass-through reads.  Absence is never an error: lookups return None and
listings return an empty list.  Listings are newest first.
"""

from __future__ import annotations

from collections.abc import Iterable
from datetime import datetime

from orderdesk.application.dto import OrderDTO, to_order_dto
from orderdesk.domain.exceptions import ValidationError
from orderdesk.domain.model.order import Order, OrderStatus
from orderdesk.domain.repository.order_repository import OrderRepository


def _newest_first(orders: list[Order]) -> list[OrderDTO]:
    return [to_order_dto(o) for o in sorted(orders, key=lambda o: o.order_date, reverse=True)]


class OrderQueries:

    def __init__(self, order_repo: OrderRepository) -> None:
        self._order_repo = order_repo

    def get(self, order_id: int) -> OrderDTO | None:
        order = self._order_repo.get_by_id(order_id)
        return to_order_dto(order) if order is not None else None

    def get_by_number(self, order_number: str) -> OrderDTO | None:
        order = self._order_repo.get_by_order_number(order_number)
        return to_order_dto(order) if order is not None else None

    def list_all(self) -> list[OrderDTO]:
        return _newest_first(self._order_repo.list_all())

    def list_by_ids(self, order_ids: Iterable[int]) -> list[OrderDTO]:
        return _newest_first(self._order_repo.list_by_ids(order_ids))

    def list_by_user(self, user_id: int, limit: int | None = None) -> list[OrderDTO]:
        orders = _newest_first(self._order_repo.list_by_user(user_id))
        return orders[:limit] if limit is not None else orders

    def list_by_status(self, status: OrderStatus) -> list[OrderDTO]:
        return _newest_first(self._order_repo.list_by_status(status))

    def list_placed_between(self, start: datetime, end: datetime) -> list[OrderDTO]:
        """Orders with ``start <= order_date < end``."""
        return _newest_first(self._order_repo.find(lambda o: start <= o.order_date < end))

    def recent(self, limit: int = 10) -> list[OrderDTO]:
        return self.list_all()[:limit]

    def list_page(self, page: int, page_size: int) -> tuple[list[OrderDTO], int]:
        """Return one page (1-based) of orders and the total order count."""
        if page < 1 or page_size < 1:
            raise ValidationError("Page number and page size must be positive")
        orders = self.list_all()
        start = (page - 1) * page_size
        return orders[start:start + page_size], len(orders)

    def can_be_cancelled(self, order_id: int) -> bool:
        order = self._order_repo.get_by_id(order_id)
        return order is not None and order.can_be_cancelled

    def can_be_modified(self, order_id: int) -> bool:
        order = self._order_repo.get_by_id(order_id)
        return order is not None and order.can_be_modified
