"""CLI commands for the Product aggregate (catalog seeding and stock view)."""

from __future__ import annotations

import click

from orderdesk.application.add_product import AddProductHandler
from orderdesk.domain.exceptions import DomainException
from orderdesk.infrastructure.bootstrap import product_repository
from orderdesk.infrastructure.persistence.json_store import JsonStore


@click.command("add")
@click.option("--name", required=True, help="Product name.")
@click.option("--price", required=True, help="Price (e.g. 15.00).")
@click.option("--stock", default=0, type=int, help="Opening stock quantity.")
@click.pass_obj
def product_add(store: JsonStore, name: str, price: str, stock: int) -> None:
    """Add a new product to the catalog."""
    handler = AddProductHandler(product_repo=product_repository(store))

    try:
        product = handler.handle(name=name, price=price, stock_quantity=stock)
    except DomainException as exc:
        raise click.ClickException(str(exc))

    click.echo(
        f"Product #{product.id} '{product.name}' added at {product.price} "
        f"({product.stock_quantity} in stock)"
    )


@click.command("list")
@click.pass_obj
def product_list(store: JsonStore) -> None:
    """List all products with their current stock."""
    products = product_repository(store).list_all()

    if not products:
        click.echo("No products found.")
        return

    click.echo(f"{'ID':<6} {'Name':<20} {'Price':>10} {'Stock':>8}")
    click.echo("-" * 47)
    for p in products:
        click.echo(f"{p.id:<6} {p.name:<20} {str(p.price):>10} {p.stock_quantity:>8}")
