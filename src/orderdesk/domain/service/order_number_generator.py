"""Domain service: Order Number Generator.

Order numbers look like ``ORD-202610-0042``: year and month of the order
date, then a four-digit sequence starting from (orders placed this
calendar month) + 1.

The sequence is derived from a live count, not a reserved counter, so
two concurrent creations can compute the same candidate.  The generator
skips numbers that are already taken, and ``CreateOrderHandler`` asks
for a fresh number if the store still reports a duplicate on save.
Under heavy contention this retries repeatedly; it never hands out a
number that is already committed.
"""

from __future__ import annotations

import logging
from datetime import datetime

from orderdesk.domain.repository.order_repository import OrderRepository

logger = logging.getLogger(__name__)

ORDER_NUMBER_PREFIX = "ORD"


def format_order_number(year: int, month: int, sequence: int) -> str:
    return f"{ORDER_NUMBER_PREFIX}-{year:04d}{month:02d}-{sequence:04d}"


def month_window(moment: datetime) -> tuple[datetime, datetime]:
    """Return ``[start of month, start of next month)`` for *moment*."""
    start = moment.replace(day=1, hour=0, minute=0, second=0, microsecond=0)
    if start.month == 12:
        end = start.replace(year=start.year + 1, month=1)
    else:
        end = start.replace(month=start.month + 1)
    return start, end


class OrderNumberGenerator:

    def __init__(self, order_repo: OrderRepository) -> None:
        self._order_repo = order_repo

    def generate(self, now: datetime) -> str:
        start, end = month_window(now)
        sequence = self._order_repo.count_placed_between(start, end) + 1
        candidate = format_order_number(now.year, now.month, sequence)

        while self._order_repo.get_by_order_number(candidate) is not None:
            logger.debug("Order number %s already taken, trying next", candidate)
            sequence += 1
            candidate = format_order_number(now.year, now.month, sequence)

        return candidate
