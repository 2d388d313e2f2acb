"""Order aggregate, the core of the domain.

The Order is an aggregate root that owns its items.  It also owns the
status lifecycle: no other component assigns ``status`` directly, every
change goes through ``transition_to``.

Lifecycle (see ``ALLOWED_TRANSITIONS``)::

    PENDING    -> PROCESSING | SHIPPED | CANCELLED
    PROCESSING -> SHIPPED | CANCELLED
    SHIPPED    -> DELIVERED
    DELIVERED  -> RETURNED | REFUNDED
"""

from __future__ import annotations

from dataclasses import dataclass, field
from datetime import datetime, timezone
from enum import Enum
from typing import TYPE_CHECKING

from orderdesk.domain.exceptions import (
    InvalidTransitionError,
    OrderNotModifiableError,
    ValidationError,
)
from orderdesk.domain.model.value_objects import Money, Quantity

if TYPE_CHECKING:
    from orderdesk.domain.service.order_pricing import OrderTotals


class OrderStatus(Enum):
    PENDING = "PENDING"
    PROCESSING = "PROCESSING"
    SHIPPED = "SHIPPED"
    DELIVERED = "DELIVERED"
    CANCELLED = "CANCELLED"
    RETURNED = "RETURNED"
    REFUNDED = "REFUNDED"


ALLOWED_TRANSITIONS: dict[OrderStatus, frozenset[OrderStatus]] = {
    OrderStatus.PENDING: frozenset(
        {OrderStatus.PROCESSING, OrderStatus.SHIPPED, OrderStatus.CANCELLED}
    ),
    OrderStatus.PROCESSING: frozenset({OrderStatus.SHIPPED, OrderStatus.CANCELLED}),
    OrderStatus.SHIPPED: frozenset({OrderStatus.DELIVERED}),
    OrderStatus.DELIVERED: frozenset({OrderStatus.RETURNED, OrderStatus.REFUNDED}),
    OrderStatus.CANCELLED: frozenset(),
    OrderStatus.RETURNED: frozenset(),
    OrderStatus.REFUNDED: frozenset(),
}

CANCELLABLE_STATUSES = frozenset({OrderStatus.PENDING, OrderStatus.PROCESSING})


def can_transition(current: OrderStatus, target: OrderStatus) -> bool:
    return target in ALLOWED_TRANSITIONS[current]


# ---------------------------------------------------------------------------
# Constants for business rules
# ---------------------------------------------------------------------------
MAX_NOTES_LENGTH = 500
MAX_ADDRESS_LENGTH = 1000


@dataclass
class OrderItem:
    """A product line on an order.

    ``unit_price`` is supplied by the caller when the line is created;
    ``product_name`` is a snapshot of the catalog name at that time.
    """

    product_id: int
    product_name: str
    unit_price: Money
    quantity: Quantity
    discount_amount: Money = field(default_factory=Money.zero)
    id: int | None = None

    def __post_init__(self) -> None:
        if self.unit_price.amount <= 0:
            raise ValidationError("Unit price must be greater than zero")
        if self.discount_amount > self.gross_price:
            raise ValidationError(
                f"Item discount {self.discount_amount} exceeds line value {self.gross_price}"
            )

    @property
    def gross_price(self) -> Money:
        return self.unit_price * self.quantity.value

    @property
    def total_price(self) -> Money:
        return self.gross_price - self.discount_amount


@dataclass
class Order:
    """Aggregate root for customer orders.

    Use ``Order.create()`` for new orders; it enforces the creation
    rules.  ``__init__`` stays simple so repositories can reconstitute
    persisted orders without re-validating.
    """

    id: int | None
    order_number: str
    user_id: int
    items: list[OrderItem]
    shipping_address: str
    status: OrderStatus = OrderStatus.PENDING
    total_amount: Money = field(default_factory=Money.zero)
    discount_amount: Money = field(default_factory=Money.zero)
    tax_amount: Money = field(default_factory=Money.zero)
    subtotal_amount: Money = field(default_factory=Money.zero)
    shipping_amount: Money = field(default_factory=Money.zero)
    order_date: datetime = field(default_factory=lambda: datetime.now(timezone.utc))
    shipped_date: datetime | None = None
    delivered_date: datetime | None = None
    notes: str | None = None

    # --- Factory (used for NEW orders only) -----------------------------------

    @staticmethod
    def create(
        order_number: str,
        user_id: int,
        items: list[OrderItem],
        shipping_address: str,
        totals: OrderTotals,
        now: datetime,
        notes: str | None = None,
    ) -> Order:
        """Create a pending order, enforcing all creation invariants."""
        if not items:
            raise ValidationError("Order must contain at least one item")
        _ensure_distinct_products(items)
        _validate_notes(notes)

        order = Order(
            id=None,
            order_number=order_number,
            user_id=user_id,
            items=list(items),
            shipping_address=_clean_address(shipping_address),
            discount_amount=totals.discount,
            order_date=now,
            notes=notes,
        )
        order.apply_totals(totals)
        return order

    # --- Lifecycle ------------------------------------------------------------

    @property
    def can_be_cancelled(self) -> bool:
        return self.status in CANCELLABLE_STATUSES

    @property
    def can_be_modified(self) -> bool:
        return self.status == OrderStatus.PENDING

    def transition_to(
        self,
        new_status: OrderStatus,
        now: datetime,
        notes: str | None = None,
    ) -> None:
        """Move to *new_status*, stamping shipped/delivered dates.

        Stock side effects of cancellation are the caller's job (the
        workflow releases stock through the ledger in the same
        transaction).
        """
        if not can_transition(self.status, new_status):
            raise InvalidTransitionError(
                f"Cannot move order {self.order_number} from "
                f"{self.status.value} to {new_status.value}",
                current=self.status,
                requested=new_status,
            )
        _validate_notes(notes)

        if new_status == OrderStatus.SHIPPED:
            self.shipped_date = now
        elif new_status == OrderStatus.DELIVERED:
            self.delivered_date = now
            if self.shipped_date is None:
                self.shipped_date = now

        self.status = new_status
        if notes is not None:
            self.notes = notes

    def cancel(self, now: datetime, reason: str | None = None) -> None:
        if not self.can_be_cancelled:
            raise InvalidTransitionError(
                f"Order {self.order_number} cannot be cancelled in "
                f"{self.status.value} status",
                current=self.status,
                requested=OrderStatus.CANCELLED,
            )
        self.transition_to(OrderStatus.CANCELLED, now, notes=reason)

    def ensure_modifiable(self) -> None:
        if not self.can_be_modified:
            raise OrderNotModifiableError(
                f"Order {self.order_number} cannot be modified in "
                f"{self.status.value} status",
                current=self.status,
            )

    # --- Editing (PENDING only) -----------------------------------------------

    def update_details(
        self,
        notes: str | None = None,
        shipping_address: str | None = None,
    ) -> None:
        self.ensure_modifiable()
        if notes is not None:
            _validate_notes(notes)
            self.notes = notes
        if shipping_address is not None:
            self.shipping_address = _clean_address(shipping_address)

    def add_item(self, item: OrderItem) -> None:
        self.ensure_modifiable()
        if any(existing.product_id == item.product_id for existing in self.items):
            raise ValidationError(
                f"Product #{item.product_id} is already on order {self.order_number}"
            )
        self.items.append(item)

    def replace_item(self, item_id: int, replacement: OrderItem) -> OrderItem:
        """Swap the item with *item_id* for *replacement*; returns the old item."""
        self.ensure_modifiable()
        current = self.find_item(item_id)
        if current is None:
            raise ValidationError(f"Item #{item_id} is not on order {self.order_number}")
        if replacement.product_id != current.product_id:
            raise ValidationError("An order item cannot be moved to another product")
        replacement.id = current.id
        self.items[self.items.index(current)] = replacement
        return current

    def remove_item(self, item_id: int) -> OrderItem:
        self.ensure_modifiable()
        item = self.find_item(item_id)
        if item is None:
            raise ValidationError(f"Item #{item_id} is not on order {self.order_number}")
        if len(self.items) == 1:
            raise ValidationError("Cannot remove the last item of an order")
        self.items.remove(item)
        return item

    def find_item(self, item_id: int) -> OrderItem | None:
        for item in self.items:
            if item.id == item_id:
                return item
        return None

    # --- Totals ---------------------------------------------------------------

    def apply_totals(self, totals: OrderTotals) -> None:
        """Store the priced breakdown; the order discount is kept as is."""
        self.subtotal_amount = totals.subtotal
        self.tax_amount = totals.tax
        self.shipping_amount = totals.shipping
        self.total_amount = totals.total

    @property
    def items_subtotal(self) -> Money:
        result = Money.zero()
        for item in self.items:
            result = result + item.total_price
        return result


# --- Internal helpers ---------------------------------------------------------


def _ensure_distinct_products(items: list[OrderItem]) -> None:
    seen: set[int] = set()
    for item in items:
        if item.product_id in seen:
            raise ValidationError(f"Product #{item.product_id} is listed more than once")
        seen.add(item.product_id)


def _clean_address(address: str | None) -> str:
    if not address or not address.strip():
        raise ValidationError("Shipping address is required")
    if len(address) > MAX_ADDRESS_LENGTH:
        raise ValidationError(
            f"Shipping address cannot exceed {MAX_ADDRESS_LENGTH} characters"
        )
    return address.strip()


def _validate_notes(notes: str | None) -> None:
    if notes is not None and len(notes) > MAX_NOTES_LENGTH:
        raise ValidationError(f"Notes cannot exceed {MAX_NOTES_LENGTH} characters")
