from __future__ import annotations

from pathlib import Path

import click

from orderdesk.infrastructure import bootstrap
from orderdesk.infrastructure.cli.order_commands import (
    order_add_item,
    order_bulk_cancel,
    order_bulk_status,
    order_cancel,
    order_create,
    order_delete,
    order_deliver,
    order_list,
    order_process,
    order_recalculate,
    order_remove_item,
    order_ship,
    order_show,
    order_status,
    order_update,
    order_update_item,
)
from orderdesk.infrastructure.cli.product_commands import product_add, product_list
from orderdesk.infrastructure.cli.user_commands import user_add


@click.group()
@click.option(
    "--data-dir",
    type=click.Path(file_okay=False, path_type=Path),
    default=None,
    help="Directory holding the data file (overrides ORDERDESK_DATA_DIR).",
)
@click.option("-v", "--verbose", is_flag=True, help="Log every workflow step.")
@click.pass_context
def cli(ctx: click.Context, data_dir: Path | None, verbose: bool) -> None:
    """orderdesk: orders, stock reservation and order lifecycle."""
    settings = bootstrap.load_settings(data_dir)
    bootstrap.configure_logging("DEBUG" if verbose else settings.log_level)
    ctx.obj = bootstrap.json_store(settings)


@cli.group()
def order() -> None:
    """Manage orders."""


@cli.group()
def product() -> None:
    """Manage the product catalog."""


@cli.group()
def user() -> None:
    """Manage users."""


# Register subcommands
order.add_command(order_add_item)
order.add_command(order_bulk_cancel)
order.add_command(order_bulk_status)
order.add_command(order_cancel)
order.add_command(order_create)
order.add_command(order_delete)
order.add_command(order_deliver)
order.add_command(order_list)
order.add_command(order_process)
order.add_command(order_recalculate)
order.add_command(order_remove_item)
order.add_command(order_ship)
order.add_command(order_show)
order.add_command(order_status)
order.add_command(order_update)
order.add_command(order_update_item)
product.add_command(product_add)
product.add_command(product_list)
user.add_command(user_add)
