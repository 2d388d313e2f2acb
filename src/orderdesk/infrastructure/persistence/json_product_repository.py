"""JSON-backed implementation of ProductRepository."""

from __future__ import annotations

from datetime import datetime

from orderdesk.domain.model.product import Product
from orderdesk.domain.model.value_objects import Money
from orderdesk.domain.repository.product_repository import ProductRepository
from orderdesk.infrastructure.persistence.json_store import JsonStore

TABLE = "products"


class JsonProductRepository(ProductRepository):

    def __init__(self, store: JsonStore) -> None:
        self._store = store

    # --- ProductRepository interface ------------------------------------------

    def get_by_id(self, product_id: int) -> Product | None:
        for raw in self._store.load(TABLE):
            if raw["id"] == product_id:
                return self._to_domain(raw)
        return None

    def list_all(self) -> list[Product]:
        return [self._to_domain(raw) for raw in self._store.load(TABLE)]

    def save(self, product: Product) -> None:
        records = self._store.load(TABLE)
        if product.id is None:
            product.id = max((raw["id"] for raw in records), default=0) + 1

        replaced = False
        for i, raw in enumerate(records):
            if raw["id"] == product.id:
                records[i] = self._to_raw(product)
                replaced = True
                break
        if not replaced:
            records.append(self._to_raw(product))
        self._store.persist(TABLE, records)

    # --- Serialization helpers ------------------------------------------------

    @staticmethod
    def _to_raw(product: Product) -> dict:
        return {
            "id": product.id,
            "name": product.name,
            "price": str(product.price.amount),
            "currency": product.price.currency,
            "stock_quantity": product.stock_quantity,
            "updated_at": product.updated_at.isoformat(),
        }

    @staticmethod
    def _to_domain(raw: dict) -> Product:
        return Product(
            id=raw["id"],
            name=raw["name"],
            price=Money.of(raw["price"], raw.get("currency", "USD")),
            stock_quantity=raw.get("stock_quantity", 0),
            updated_at=datetime.fromisoformat(raw["updated_at"]),
        )
