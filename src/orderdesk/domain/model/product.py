"""Product aggregate, seen from the stock side.

Products live independently of orders. The order workflow only ever
touches ``stock_quantity``, and only through ``reserve`` / ``release``
(driven by the stock ledger).
"""

from __future__ import annotations

from dataclasses import dataclass, field
from datetime import datetime, timezone

from orderdesk.domain.exceptions import InsufficientStockError, ValidationError
from orderdesk.domain.model.value_objects import Money


@dataclass
class Product:
    """A product in the catalog.

    Invariant: ``stock_quantity`` is never negative.
    """

    id: int | None
    name: str
    price: Money
    stock_quantity: int = 0
    updated_at: datetime = field(default_factory=lambda: datetime.now(timezone.utc))

    def __post_init__(self) -> None:
        if self.stock_quantity < 0:
            raise ValidationError("Stock quantity cannot be negative")

    def has_stock(self, quantity: int) -> bool:
        return self.stock_quantity >= quantity

    def reserve(self, quantity: int, now: datetime) -> None:
        """Take *quantity* units out of stock for an order."""
        if quantity <= 0:
            raise ValidationError("Reservation quantity must be positive")
        if quantity > self.stock_quantity:
            raise InsufficientStockError(self.id, quantity, self.stock_quantity)
        self.stock_quantity -= quantity
        self.updated_at = now

    def release(self, quantity: int, now: datetime) -> None:
        """Put *quantity* units back into stock (cancellation, deletion)."""
        if quantity <= 0:
            raise ValidationError("Release quantity must be positive")
        self.stock_quantity += quantity
        self.updated_at = now
