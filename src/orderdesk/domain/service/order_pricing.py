"""Domain service: Order Pricing.

Pure functions: no repository access, no side effects.

    subtotal = sum of line values
    tax      = 10% of subtotal (half-up to cents)
    shipping = free from $100.00 subtotal, otherwise $15.00
    total    = subtotal + tax - order discount + shipping

For a new order the line value is ``unit_price * quantity``.  When an
existing order is repriced the line value is the item's ``total_price``,
which already has the item-level discount taken off.
"""

from __future__ import annotations

from collections.abc import Iterable
from dataclasses import dataclass
from decimal import Decimal
from typing import TYPE_CHECKING

from orderdesk.domain.exceptions import ValidationError
from orderdesk.domain.model.value_objects import Money

if TYPE_CHECKING:
    from orderdesk.domain.model.order import Order


TAX_RATE = Decimal("0.10")
FREE_SHIPPING_THRESHOLD = Money.of("100.00")
FLAT_SHIPPING = Money.of("15.00")


@dataclass(frozen=True)
class PriceLine:
    unit_price: Money
    quantity: int


@dataclass(frozen=True)
class OrderTotals:
    subtotal: Money
    tax: Money
    discount: Money
    shipping: Money
    total: Money


def shipping_for(subtotal: Money) -> Money:
    if subtotal >= FREE_SHIPPING_THRESHOLD:
        return Money.zero()
    return FLAT_SHIPPING


def totals_for_subtotal(subtotal: Money, discount: Money | None = None) -> OrderTotals:
    discount = discount if discount is not None else Money.zero()
    tax = subtotal.percent(TAX_RATE)
    shipping = shipping_for(subtotal)
    gross = subtotal + tax + shipping
    if discount > gross:
        raise ValidationError(f"Discount {discount} exceeds order value {gross}")
    return OrderTotals(
        subtotal=subtotal,
        tax=tax,
        discount=discount,
        shipping=shipping,
        total=gross - discount,
    )


def price_order(lines: Iterable[PriceLine], discount: Money | None = None) -> OrderTotals:
    """Price a proposed order from its raw lines."""
    subtotal = Money.zero()
    for line in lines:
        subtotal = subtotal + line.unit_price * line.quantity
    return totals_for_subtotal(subtotal, discount)


def reprice_order(order: Order) -> OrderTotals:
    """Price a persisted order from its current items."""
    return totals_for_subtotal(order.items_subtotal, order.discount_amount)
