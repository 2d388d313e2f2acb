"""Domain service: Stock Ledger.

Reserve/release primitives over product stock, used by the order
workflow.  The ledger does not remember which order reserved what: the
caller hands it the lines to reserve or release and is responsible for
not releasing the same order twice.

Both operations use a two-phase approach (load and validate, then
mutate) so a batch is never half-applied when one product fails
validation.  Call them inside a unit-of-work transaction: the
decrement is a read-modify-write.
"""

from __future__ import annotations

import logging
from collections.abc import Iterable
from dataclasses import dataclass
from datetime import datetime

from orderdesk.domain.exceptions import InsufficientStockError, ProductNotFoundError
from orderdesk.domain.model.order import OrderItem
from orderdesk.domain.model.product import Product
from orderdesk.domain.repository.product_repository import ProductRepository

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class StockLine:
    product_id: int
    quantity: int


def stock_lines(items: Iterable[OrderItem]) -> list[StockLine]:
    return [StockLine(item.product_id, item.quantity.value) for item in items]


class StockLedger:

    def __init__(self, product_repo: ProductRepository) -> None:
        self._product_repo = product_repo

    def check_availability(self, product_id: int, quantity: int) -> bool:
        """False if the product is unknown or has fewer than *quantity* units."""
        product = self._product_repo.get_by_id(product_id)
        if product is None or not product.has_stock(quantity):
            logger.warning(
                "Insufficient stock for product %s. Required: %s, Available: %s",
                product_id,
                quantity,
                product.stock_quantity if product else 0,
            )
            return False
        return True

    def ensure_available(self, lines: Iterable[StockLine]) -> list[tuple[Product, int]]:
        """Validate a whole batch, returning each product with its total demand.

        Raises ProductNotFoundError or InsufficientStockError for the
        first line that cannot be satisfied.
        """
        demand = _merge(lines)
        loaded: list[tuple[Product, int]] = []
        for product_id, qty in demand.items():
            product = self._product_repo.get_by_id(product_id)
            if product is None:
                raise ProductNotFoundError(product_id)
            if not product.has_stock(qty):
                raise InsufficientStockError(product_id, qty, product.stock_quantity)
            loaded.append((product, qty))
        return loaded

    def reserve(self, lines: Iterable[StockLine], now: datetime) -> None:
        """Decrement stock for every line, or for none of them."""
        # Phase 1: load all products and validate
        loaded = self.ensure_available(lines)

        # Phase 2: mutate and persist
        for product, qty in loaded:
            product.reserve(qty, now)
            self._product_repo.save(product)
            logger.debug("Reserved %s of product %s", qty, product.id)

    def release(self, lines: Iterable[StockLine], now: datetime) -> None:
        """Increment stock for every line."""
        loaded: list[tuple[Product, int]] = []
        for product_id, qty in _merge(lines).items():
            product = self._product_repo.get_by_id(product_id)
            if product is None:
                raise ProductNotFoundError(product_id)
            loaded.append((product, qty))

        for product, qty in loaded:
            product.release(qty, now)
            self._product_repo.save(product)
            logger.debug("Released %s of product %s", qty, product.id)


def _merge(lines: Iterable[StockLine]) -> dict[int, int]:
    demand: dict[int, int] = {}
    for line in lines:
        demand[line.product_id] = demand.get(line.product_id, 0) + line.quantity
    return demand
