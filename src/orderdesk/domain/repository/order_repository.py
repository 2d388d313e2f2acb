"""Abstract repository for Order aggregate.

Items are part of the aggregate: they are always loaded and saved with
their order, and deleting an order deletes its items.
"""

from __future__ import annotations

from abc import ABC, abstractmethod
from collections.abc import Callable, Iterable
from datetime import datetime

from orderdesk.domain.model.order import Order, OrderStatus


class OrderRepository(ABC):

    @abstractmethod
    def get_by_id(self, order_id: int) -> Order | None:
        """Return an order by its ID, or None if not found."""

    @abstractmethod
    def find(self, predicate: Callable[[Order], bool]) -> list[Order]:
        """Return every order matching *predicate*."""

    @abstractmethod
    def save(self, order: Order) -> None:
        """Persist a new or updated order, assigning order and item IDs.

        Raises DuplicateOrderNumberError if another order already uses
        the same order number.
        """

    @abstractmethod
    def delete(self, order_id: int) -> None:
        """Remove an order together with its items."""

    # --- Derived queries ------------------------------------------------------

    def count(self, predicate: Callable[[Order], bool]) -> int:
        return len(self.find(predicate))

    def exists(self, predicate: Callable[[Order], bool]) -> bool:
        return self.count(predicate) > 0

    def get_by_order_number(self, order_number: str) -> Order | None:
        matches = self.find(lambda o: o.order_number == order_number)
        return matches[0] if matches else None

    def count_placed_between(self, start: datetime, end: datetime) -> int:
        """Count orders with ``start <= order_date < end``."""
        return self.count(lambda o: start <= o.order_date < end)

    def list_all(self) -> list[Order]:
        return self.find(lambda o: True)

    def list_by_ids(self, order_ids: Iterable[int]) -> list[Order]:
        wanted = set(order_ids)
        return self.find(lambda o: o.id in wanted)

    def list_by_user(self, user_id: int) -> list[Order]:
        return self.find(lambda o: o.user_id == user_id)

    def list_by_status(self, status: OrderStatus) -> list[Order]:
        return self.find(lambda o: o.status == status)
