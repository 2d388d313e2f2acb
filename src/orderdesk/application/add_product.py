"""Application service: Add Product use case (catalog seeding)."""

from __future__ import annotations

from orderdesk.domain.exceptions import ValidationError
from orderdesk.domain.model.product import Product
from orderdesk.domain.model.value_objects import Money
from orderdesk.domain.repository.product_repository import ProductRepository


class AddProductHandler:

    def __init__(self, product_repo: ProductRepository) -> None:
        self._product_repo = product_repo

    def handle(self, name: str, price: str, stock_quantity: int = 0) -> Product:
        """Add a new product to the catalog with an opening stock level."""
        if not name or not name.strip():
            raise ValidationError("Product name is required")

        existing = self._product_repo.get_by_name(name.strip())
        if existing is not None:
            raise ValidationError(f"Product '{name}' already exists")

        money = Money.of(price)
        if money.amount <= 0:
            raise ValidationError("Product price must be greater than zero")

        product = Product(
            id=None,
            name=name.strip(),
            price=money,
            stock_quantity=stock_quantity,
        )
        self._product_repo.save(product)
        return product
