"""Unit of Work: the transaction boundary of the storage collaborator.

All writes issued through ``orders`` and ``products`` between ``begin()``
and ``commit()`` become visible atomically; ``rollback()`` discards them.

Handlers normally use the context-manager form::

    with uow:
        ...  # commit on success, rollback (and re-raise) on any exception
"""

from __future__ import annotations

from abc import ABC, abstractmethod

from orderdesk.domain.repository.order_repository import OrderRepository
from orderdesk.domain.repository.product_repository import ProductRepository


class UnitOfWork(ABC):

    orders: OrderRepository
    products: ProductRepository

    @abstractmethod
    def begin(self) -> None:
        """Open a transaction. Raises StorageError if one is already open."""

    @abstractmethod
    def commit(self) -> None:
        """Make every staged write visible. Rolls back if the commit fails."""

    @abstractmethod
    def rollback(self) -> None:
        """Discard every staged write."""

    def __enter__(self) -> UnitOfWork:
        self.begin()
        return self

    def __exit__(self, exc_type, exc, tb) -> bool:
        if exc_type is None:
            self.commit()
        else:
            self.rollback()
        return False
