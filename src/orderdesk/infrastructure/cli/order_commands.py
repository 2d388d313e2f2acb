"""CLI commands for the Order aggregate."""

from __future__ import annotations

import click

from orderdesk.application.cancel_order import BulkCancelOrdersHandler, CancelOrderHandler
from orderdesk.application.create_order import CreateOrderHandler
from orderdesk.application.delete_order import DeleteOrderHandler
from orderdesk.application.dto import (
    BulkOperationResult,
    CreateOrderRequest,
    OrderDTO,
    OrderItemSpec,
)
from orderdesk.application.order_items import (
    AddOrderItemHandler,
    RecalculateOrderTotalHandler,
    RemoveOrderItemHandler,
    UpdateOrderItemHandler,
)
from orderdesk.application.order_queries import OrderQueries
from orderdesk.application.update_order import UpdateOrderHandler
from orderdesk.application.update_order_status import (
    BulkUpdateOrderStatusHandler,
    MarkDeliveredHandler,
    MarkShippedHandler,
    ProcessOrderHandler,
    UpdateOrderStatusHandler,
)
from orderdesk.domain.exceptions import DomainException
from orderdesk.domain.model.order import OrderStatus
from orderdesk.infrastructure.bootstrap import (
    order_repository,
    unit_of_work,
    user_directory,
)
from orderdesk.infrastructure.persistence.json_store import JsonStore

STATUS_CHOICE = click.Choice([s.value for s in OrderStatus], case_sensitive=False)


def _parse_item(raw: str) -> OrderItemSpec:
    """Parse 'ProductId:Qty:UnitPrice[:Discount]' into an OrderItemSpec."""
    parts = [p.strip() for p in raw.strip().split(":")]
    if len(parts) not in (3, 4):
        raise click.BadParameter(
            f"Invalid item format '{raw}'. Expected 'ProductId:Quantity:UnitPrice[:Discount]'."
        )
    try:
        product_id, qty = int(parts[0]), int(parts[1])
    except ValueError:
        raise click.BadParameter(f"Invalid product id or quantity in '{raw}'.")
    discount = parts[3] if len(parts) == 4 else None
    return OrderItemSpec(product_id=product_id, quantity=qty, unit_price=parts[2], discount=discount)


def _parse_items(raw: str) -> list[OrderItemSpec]:
    """Parse '1:2:50.00,2:1:30' into OrderItemSpec list."""
    return [_parse_item(pair) for pair in raw.split(",") if pair.strip()]


def _parse_ids(raw: str) -> list[int]:
    try:
        return [int(part) for part in raw.split(",") if part.strip()]
    except ValueError:
        raise click.BadParameter(f"Invalid order id list '{raw}'.")


def _require_found(found: bool, order_id: int) -> None:
    if not found:
        raise click.ClickException(f"Order #{order_id} not found")


def _display_order(dto: OrderDTO) -> None:
    """Shared formatting for displaying an order."""
    click.echo(f"Order #{dto.id} {dto.order_number}  (status={dto.status})")
    click.echo(f"User:     #{dto.user_id}")
    click.echo(f"Placed:   {dto.order_date}")
    if dto.shipped_date:
        click.echo(f"Shipped:  {dto.shipped_date}")
    if dto.delivered_date:
        click.echo(f"Delivered: {dto.delivered_date}")
    click.echo(f"Ship to:  {dto.shipping_address}")
    if dto.notes:
        click.echo(f"Notes:    {dto.notes}")
    click.echo()
    click.echo(
        f"  {'Item':<5} {'Product':<20} {'Qty':>5} {'Price':>10} {'Disc.':>10} {'Total':>10}"
    )
    click.echo(f"  {'-'*65}")
    for item in dto.items:
        click.echo(
            f"  {item.id:<5} {item.product_name:<20} {item.quantity:>5} "
            f"{item.unit_price:>10} {item.discount:>10} {item.total_price:>10}"
        )
    click.echo(f"  {'-'*65}")
    click.echo(f"  {'Subtotal':<27} {dto.subtotal:>38}")
    click.echo(f"  {'Tax':<27} {dto.tax:>38}")
    click.echo(f"  {'Shipping':<27} {dto.shipping:>38}")
    click.echo(f"  {'Discount':<27} {dto.discount:>38}")
    click.echo(f"  {'Order Total':<27} {dto.total:>38}")


def _display_bulk(result: BulkOperationResult) -> None:
    for entry in result.results:
        line = f"  #{entry.order_id:<6} {entry.outcome.value}"
        if entry.reason:
            line += f"  {entry.reason}"
        click.echo(line)
    click.echo(f"{len(result.succeeded)} of {len(result.results)} orders updated.")


@click.command("create")
@click.option("--user", "user_id", required=True, type=int, help="Ordering user ID.")
@click.option("--items", required=True, help="Items as 'ProductId:Qty:Price[:Discount],...'.")
@click.option("--address", required=True, help="Shipping address.")
@click.option("--discount", default=None, help="Order-level discount (e.g. 5.00).")
@click.option("--notes", default=None, help="Free-text notes.")
@click.pass_obj
def order_create(
    store: JsonStore,
    user_id: int,
    items: str,
    address: str,
    discount: str | None,
    notes: str | None,
) -> None:
    """Create a new order (reserves stock)."""
    request = CreateOrderRequest(
        user_id=user_id,
        items=_parse_items(items),
        shipping_address=address,
        discount=discount,
        notes=notes,
    )
    handler = CreateOrderHandler(uow=unit_of_work(store), users=user_directory(store))

    try:
        dto = handler.handle(request)
    except DomainException as exc:
        raise click.ClickException(str(exc))

    click.echo(f"Order #{dto.id} created  (number={dto.order_number}, status={dto.status})")
    _display_order(dto)


@click.command("show")
@click.option("--id", "order_id", type=int, default=None, help="Order ID to display.")
@click.option("--number", "order_number", default=None, help="Order number to display.")
@click.pass_obj
def order_show(store: JsonStore, order_id: int | None, order_number: str | None) -> None:
    """Show details of an existing order."""
    if (order_id is None) == (order_number is None):
        raise click.UsageError("Give exactly one of --id or --number")

    queries = OrderQueries(order_repository(store))
    if order_id is not None:
        dto = queries.get(order_id)
    else:
        dto = queries.get_by_number(order_number)  # type: ignore[arg-type]

    if dto is None:
        raise click.ClickException(f"Order {order_id or order_number} not found")
    _display_order(dto)


@click.command("list")
@click.option("--user", "user_id", type=int, default=None, help="Only this user's orders.")
@click.option("--status", type=STATUS_CHOICE, default=None, help="Only orders in this status.")
@click.pass_obj
def order_list(store: JsonStore, user_id: int | None, status: str | None) -> None:
    """List orders, newest first."""
    queries = OrderQueries(order_repository(store))
    if user_id is not None:
        orders = queries.list_by_user(user_id)
    elif status is not None:
        orders = queries.list_by_status(OrderStatus(status.upper()))
    else:
        orders = queries.list_all()

    if status is not None and user_id is not None:
        orders = [o for o in orders if o.status == status.upper()]

    if not orders:
        click.echo("No orders found.")
        return

    click.echo(f"{'ID':<6} {'Number':<16} {'User':>6} {'Status':<12} {'Items':>5} {'Total':>12}")
    click.echo("-" * 62)
    for o in orders:
        click.echo(
            f"{o.id:<6} {o.order_number:<16} {o.user_id:>6} {o.status:<12} {o.items_count:>5} {o.total:>12}"
        )


@click.command("update")
@click.option("--id", "order_id", required=True, type=int, help="Order ID to edit.")
@click.option("--notes", default=None, help="New notes.")
@click.option("--address", default=None, help="New shipping address.")
@click.pass_obj
def order_update(store: JsonStore, order_id: int, notes: str | None, address: str | None) -> None:
    """Edit notes or shipping address of a pending order."""
    handler = UpdateOrderHandler(uow=unit_of_work(store))

    try:
        dto = handler.handle(order_id, notes=notes, shipping_address=address)
    except DomainException as exc:
        raise click.ClickException(str(exc))

    if dto is None:
        raise click.ClickException(f"Order #{order_id} not found")
    click.echo(f"Order #{order_id} updated.")


def _shortcut_command(name: str, handler_cls, done: str, help_text: str) -> click.Command:

    @click.command(name, help=help_text)
    @click.option("--id", "order_id", required=True, type=int, help="Order ID.")
    @click.option("--notes", default=None, help="Notes to record with the change.")
    @click.pass_obj
    def command(store: JsonStore, order_id: int, notes: str | None) -> None:
        handler = handler_cls(uow=unit_of_work(store))
        try:
            found = handler.handle(order_id, notes)
        except DomainException as exc:
            raise click.ClickException(str(exc))
        _require_found(found, order_id)
        click.echo(f"Order #{order_id} {done}.")

    return command


order_process = _shortcut_command(
    "process", ProcessOrderHandler, "is being processed", "Move a pending order to PROCESSING."
)
order_ship = _shortcut_command(
    "ship", MarkShippedHandler, "shipped", "Mark an order as SHIPPED."
)
order_deliver = _shortcut_command(
    "deliver", MarkDeliveredHandler, "delivered", "Mark a shipped order as DELIVERED."
)


@click.command("status")
@click.option("--id", "order_id", required=True, type=int, help="Order ID.")
@click.option("--to", "new_status", required=True, type=STATUS_CHOICE, help="Target status.")
@click.option("--notes", default=None, help="Notes to record with the change.")
@click.pass_obj
def order_status(store: JsonStore, order_id: int, new_status: str, notes: str | None) -> None:
    """Move an order to any status the lifecycle allows."""
    handler = UpdateOrderStatusHandler(uow=unit_of_work(store))

    try:
        found = handler.handle(order_id, OrderStatus(new_status.upper()), notes)
    except DomainException as exc:
        raise click.ClickException(str(exc))

    _require_found(found, order_id)
    click.echo(f"Order #{order_id} is now {new_status.upper()}.")


@click.command("cancel")
@click.option("--id", "order_id", required=True, type=int, help="Order ID to cancel.")
@click.option("--reason", default=None, help="Cancellation reason.")
@click.pass_obj
def order_cancel(store: JsonStore, order_id: int, reason: str | None) -> None:
    """Cancel an order (releases its reserved stock)."""
    handler = CancelOrderHandler(uow=unit_of_work(store))

    try:
        found = handler.handle(order_id, reason)
    except DomainException as exc:
        raise click.ClickException(str(exc))

    _require_found(found, order_id)
    click.echo(f"Order #{order_id} cancelled, stock released.")


@click.command("delete")
@click.option("--id", "order_id", required=True, type=int, help="Order ID to delete.")
@click.pass_obj
def order_delete(store: JsonStore, order_id: int) -> None:
    """Delete a pending or processing order (releases its reserved stock)."""
    handler = DeleteOrderHandler(uow=unit_of_work(store))

    try:
        found = handler.handle(order_id)
    except DomainException as exc:
        raise click.ClickException(str(exc))

    _require_found(found, order_id)
    click.echo(f"Order #{order_id} deleted.")


@click.command("add-item")
@click.option("--id", "order_id", required=True, type=int, help="Order ID.")
@click.option("--item", "item_raw", required=True, help="Item as 'ProductId:Qty:Price[:Discount]'.")
@click.pass_obj
def order_add_item(store: JsonStore, order_id: int, item_raw: str) -> None:
    """Add an item to a pending order."""
    handler = AddOrderItemHandler(uow=unit_of_work(store))

    try:
        found = handler.handle(order_id, _parse_item(item_raw))
    except DomainException as exc:
        raise click.ClickException(str(exc))

    _require_found(found, order_id)
    click.echo(f"Item added to order #{order_id}.")


@click.command("update-item")
@click.option("--id", "order_id", required=True, type=int, help="Order ID.")
@click.option("--item-id", required=True, type=int, help="Item ID within the order.")
@click.option("--item", "item_raw", required=True, help="Item as 'ProductId:Qty:Price[:Discount]'.")
@click.pass_obj
def order_update_item(store: JsonStore, order_id: int, item_id: int, item_raw: str) -> None:
    """Change quantity, price or discount of an item on a pending order."""
    handler = UpdateOrderItemHandler(uow=unit_of_work(store))

    try:
        found = handler.handle(order_id, item_id, _parse_item(item_raw))
    except DomainException as exc:
        raise click.ClickException(str(exc))

    if not found:
        raise click.ClickException(f"Item #{item_id} on order #{order_id} not found")
    click.echo(f"Item #{item_id} on order #{order_id} updated.")


@click.command("remove-item")
@click.option("--id", "order_id", required=True, type=int, help="Order ID.")
@click.option("--item-id", required=True, type=int, help="Item ID within the order.")
@click.pass_obj
def order_remove_item(store: JsonStore, order_id: int, item_id: int) -> None:
    """Remove an item from a pending order (releases its stock)."""
    handler = RemoveOrderItemHandler(uow=unit_of_work(store))

    try:
        found = handler.handle(order_id, item_id)
    except DomainException as exc:
        raise click.ClickException(str(exc))

    if not found:
        raise click.ClickException(f"Item #{item_id} on order #{order_id} not found")
    click.echo(f"Item #{item_id} removed from order #{order_id}.")


@click.command("recalculate")
@click.option("--id", "order_id", required=True, type=int, help="Order ID.")
@click.pass_obj
def order_recalculate(store: JsonStore, order_id: int) -> None:
    """Recompute an order's tax and total from its items."""
    handler = RecalculateOrderTotalHandler(uow=unit_of_work(store))

    try:
        found = handler.handle(order_id)
    except DomainException as exc:
        raise click.ClickException(str(exc))

    _require_found(found, order_id)
    click.echo(f"Order #{order_id} totals recalculated.")


@click.command("bulk-cancel")
@click.option("--ids", required=True, help="Comma-separated order IDs.")
@click.option("--reason", default=None, help="Cancellation reason.")
@click.pass_obj
def order_bulk_cancel(store: JsonStore, ids: str, reason: str | None) -> None:
    """Cancel several orders; each succeeds or fails on its own."""
    handler = BulkCancelOrdersHandler(uow=unit_of_work(store))
    _display_bulk(handler.handle(_parse_ids(ids), reason))


@click.command("bulk-status")
@click.option("--ids", required=True, help="Comma-separated order IDs.")
@click.option("--to", "new_status", required=True, type=STATUS_CHOICE, help="Target status.")
@click.option("--notes", default=None, help="Notes to record with the change.")
@click.pass_obj
def order_bulk_status(store: JsonStore, ids: str, new_status: str, notes: str | None) -> None:
    """Move several orders to one status; each succeeds or fails on its own."""
    handler = BulkUpdateOrderStatusHandler(uow=unit_of_work(store))
    _display_bulk(handler.handle(_parse_ids(ids), OrderStatus(new_status.upper()), notes))
