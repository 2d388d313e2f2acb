"""Data Transfer Objects: plain containers that cross layer boundaries.

DTOs carry data between the CLI and application layers without
exposing domain internals to the outside world.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from datetime import datetime
from decimal import Decimal
from enum import Enum

from orderdesk.domain.model.order import Order

# --- Input --------------------------------------------------------------------


@dataclass(frozen=True)
class OrderItemSpec:
    """Input: one requested line (product id, quantity, agreed unit price)."""

    product_id: int
    quantity: int
    unit_price: str | Decimal
    discount: str | Decimal | None = None


@dataclass(frozen=True)
class CreateOrderRequest:
    user_id: int
    items: list[OrderItemSpec]
    shipping_address: str
    discount: str | Decimal | None = None
    notes: str | None = None


# --- Output -------------------------------------------------------------------


@dataclass(frozen=True)
class OrderItemDTO:
    """Output: a single order item as displayed to the user."""

    id: int
    product_id: int
    product_name: str
    quantity: int
    unit_price: str  # formatted, e.g. "$15.00"
    discount: str
    total_price: str


@dataclass(frozen=True)
class OrderDTO:
    """Output: a complete order as displayed to the user."""

    id: int
    order_number: str
    user_id: int
    status: str
    items: list[OrderItemDTO]
    subtotal: str
    tax: str
    shipping: str
    discount: str
    total: str
    order_date: str
    shipped_date: str | None
    delivered_date: str | None
    shipping_address: str
    notes: str | None
    can_be_cancelled: bool

    @property
    def items_count(self) -> int:
        return len(self.items)


def _fmt(moment: datetime | None) -> str | None:
    return moment.strftime("%Y-%m-%d %H:%M UTC") if moment is not None else None


def to_order_dto(order: Order) -> OrderDTO:
    return OrderDTO(
        id=order.id,  # type: ignore[arg-type]
        order_number=order.order_number,
        user_id=order.user_id,
        status=order.status.value,
        items=[
            OrderItemDTO(
                id=item.id,  # type: ignore[arg-type]
                product_id=item.product_id,
                product_name=item.product_name,
                quantity=item.quantity.value,
                unit_price=str(item.unit_price),
                discount=str(item.discount_amount),
                total_price=str(item.total_price),
            )
            for item in order.items
        ],
        subtotal=str(order.subtotal_amount),
        tax=str(order.tax_amount),
        shipping=str(order.shipping_amount),
        discount=str(order.discount_amount),
        total=str(order.total_amount),
        order_date=_fmt(order.order_date),  # type: ignore[arg-type]
        shipped_date=_fmt(order.shipped_date),
        delivered_date=_fmt(order.delivered_date),
        shipping_address=order.shipping_address,
        notes=order.notes,
        can_be_cancelled=order.can_be_cancelled,
    )


# --- Bulk results -------------------------------------------------------------


class BulkOutcome(Enum):
    SUCCEEDED = "SUCCEEDED"
    NOT_FOUND = "NOT_FOUND"
    REJECTED = "REJECTED"


@dataclass(frozen=True)
class BulkItemResult:
    order_id: int
    outcome: BulkOutcome
    reason: str | None = None


@dataclass
class BulkOperationResult:
    """Per-order outcome of a best-effort bulk operation."""

    results: list[BulkItemResult] = field(default_factory=list)

    @property
    def succeeded(self) -> list[int]:
        return [r.order_id for r in self.results if r.outcome == BulkOutcome.SUCCEEDED]

    @property
    def failed(self) -> list[BulkItemResult]:
        return [r for r in self.results if r.outcome != BulkOutcome.SUCCEEDED]

    @property
    def all_succeeded(self) -> bool:
        return not self.failed
