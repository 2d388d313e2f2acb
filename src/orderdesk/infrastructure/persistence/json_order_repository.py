"""JSON-backed implementation of OrderRepository.

Items are embedded in their order record, so deleting an order removes
its items with it.
"""

from __future__ import annotations

from collections.abc import Callable
from datetime import datetime

from orderdesk.domain.exceptions import DuplicateOrderNumberError
from orderdesk.domain.model.order import Order, OrderItem, OrderStatus
from orderdesk.domain.model.value_objects import Money, Quantity
from orderdesk.domain.repository.order_repository import OrderRepository
from orderdesk.infrastructure.persistence.json_store import JsonStore

TABLE = "orders"


class JsonOrderRepository(OrderRepository):

    def __init__(self, store: JsonStore) -> None:
        self._store = store

    # --- OrderRepository interface --------------------------------------------

    def get_by_id(self, order_id: int) -> Order | None:
        for raw in self._store.load(TABLE):
            if raw["id"] == order_id:
                return self._to_domain(raw)
        return None

    def find(self, predicate: Callable[[Order], bool]) -> list[Order]:
        orders = (self._to_domain(raw) for raw in self._store.load(TABLE))
        return [order for order in orders if predicate(order)]

    def save(self, order: Order) -> None:
        records = self._store.load(TABLE)

        for raw in records:
            if raw["order_number"] == order.order_number and raw["id"] != order.id:
                raise DuplicateOrderNumberError(order.order_number)

        if order.id is None:
            order.id = max((raw["id"] for raw in records), default=0) + 1
        next_item_id = max(
            (item["id"] for raw in records for item in raw["items"]), default=0
        ) + 1
        for item in order.items:
            if item.id is None:
                item.id = next_item_id
                next_item_id += 1

        # Upsert: replace if exists, otherwise append
        replaced = False
        for i, raw in enumerate(records):
            if raw["id"] == order.id:
                records[i] = self._to_raw(order)
                replaced = True
                break
        if not replaced:
            records.append(self._to_raw(order))

        self._store.persist(TABLE, records)

    def delete(self, order_id: int) -> None:
        records = [raw for raw in self._store.load(TABLE) if raw["id"] != order_id]
        self._store.persist(TABLE, records)

    # --- Serialization --------------------------------------------------------

    @staticmethod
    def _to_raw(order: Order) -> dict:
        return {
            "id": order.id,
            "order_number": order.order_number,
            "user_id": order.user_id,
            "status": order.status.value,
            "total_amount": str(order.total_amount.amount),
            "discount_amount": str(order.discount_amount.amount),
            "tax_amount": str(order.tax_amount.amount),
            "subtotal_amount": str(order.subtotal_amount.amount),
            "shipping_amount": str(order.shipping_amount.amount),
            "currency": order.total_amount.currency,
            "order_date": order.order_date.isoformat(),
            "shipped_date": _iso(order.shipped_date),
            "delivered_date": _iso(order.delivered_date),
            "shipping_address": order.shipping_address,
            "notes": order.notes,
            "items": [
                {
                    "id": item.id,
                    "product_id": item.product_id,
                    "product_name": item.product_name,
                    "quantity": item.quantity.value,
                    "unit_price": str(item.unit_price.amount),
                    "discount_amount": str(item.discount_amount.amount),
                }
                for item in order.items
            ],
        }

    @staticmethod
    def _to_domain(raw: dict) -> Order:
        currency = raw.get("currency", "USD")
        items = [
            OrderItem(
                id=i["id"],
                product_id=i["product_id"],
                product_name=i["product_name"],
                quantity=Quantity(i["quantity"]),
                unit_price=Money.of(i["unit_price"], currency),
                discount_amount=Money.of(i.get("discount_amount", "0"), currency),
            )
            for i in raw["items"]
        ]
        return Order(
            id=raw["id"],
            order_number=raw["order_number"],
            user_id=raw["user_id"],
            items=items,
            shipping_address=raw["shipping_address"],
            status=OrderStatus(raw["status"]),
            total_amount=Money.of(raw["total_amount"], currency),
            discount_amount=Money.of(raw["discount_amount"], currency),
            tax_amount=Money.of(raw["tax_amount"], currency),
            subtotal_amount=Money.of(raw["subtotal_amount"], currency),
            shipping_amount=Money.of(raw["shipping_amount"], currency),
            order_date=datetime.fromisoformat(raw["order_date"]),
            shipped_date=_parse(raw.get("shipped_date")),
            delivered_date=_parse(raw.get("delivered_date")),
            notes=raw.get("notes"),
        )


def _iso(moment: datetime | None) -> str | None:
    return moment.isoformat() if moment is not None else None


def _parse(raw: str | None) -> datetime | None:
    return datetime.fromisoformat(raw) if raw else None
