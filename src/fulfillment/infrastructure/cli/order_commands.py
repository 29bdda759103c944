"""CLI commands for buyers: checkout and their own orders."""

from __future__ import annotations

import json
from pathlib import Path

import click

from fulfillment.application.dto import Actor, CheckoutOptions
from fulfillment.domain.exceptions import DomainException
from fulfillment.domain.model.cart import CartSnapshot
from fulfillment.domain.model.state_machine import OrderStatus
from fulfillment.domain.model.value_objects import AddressSnapshot
from fulfillment.infrastructure.bootstrap import container
from fulfillment.infrastructure.cli.formatting import (
    STATUS_CHOICE,
    display_order,
    display_order_page,
)


def _options(
    payment_method: str | None,
    notes: str | None,
    discount_codes: tuple[str, ...],
    idempotency_key: str | None,
) -> CheckoutOptions:
    return CheckoutOptions(
        payment_method=payment_method,
        notes=notes,
        discount_codes=discount_codes,
        idempotency_key=idempotency_key,
    )


def _report_created(orders) -> None:
    click.echo(f"{len(orders)} order(s) created")
    for dto in orders:
        click.echo()
        display_order(dto)


checkout_options = [
    click.option("--payment-method", default=None, help="Payment method, e.g. 'cash_on_delivery'."),
    click.option("--notes", default=None, help="Notes for the seller."),
    click.option("--discount", "discount_codes", multiple=True, help="Discount code (repeatable)."),
    click.option("--idempotency-key", default=None, help="Key that makes retries safe."),
]


def _with_checkout_options(command):
    for option in reversed(checkout_options):
        command = option(command)
    return command


@click.command("create")
@click.option("--buyer", required=True, help="Buyer user id.")
@click.option("--address", "address_id", required=True, help="Shipping address id.")
@_with_checkout_options
def order_create(
    buyer: str,
    address_id: str,
    payment_method: str | None,
    notes: str | None,
    discount_codes: tuple[str, ...],
    idempotency_key: str | None,
) -> None:
    """Check out the buyer's selected cart items (one order per store)."""
    handler = container().create_order()

    try:
        orders = handler.handle(
            buyer_id=buyer,
            shipping_address_id=address_id,
            options=_options(payment_method, notes, discount_codes, idempotency_key),
        )
    except DomainException as exc:
        raise click.ClickException(str(exc))

    _report_created(orders)


@click.command("create-from-snapshot")
@click.option("--buyer", required=True, help="Buyer user id.")
@click.option(
    "--snapshot",
    "snapshot_path",
    required=True,
    type=click.Path(exists=True, dir_okay=False, path_type=Path),
    help="JSON file with 'items' and 'shipping_address'.",
)
@_with_checkout_options
def order_create_from_snapshot(
    buyer: str,
    snapshot_path: Path,
    payment_method: str | None,
    notes: str | None,
    discount_codes: tuple[str, ...],
    idempotency_key: str | None,
) -> None:
    """Check out a saved cart snapshot at current prices."""
    raw = json.loads(snapshot_path.read_text(encoding="utf-8"))
    handler = container().create_order_from_snapshot()

    try:
        address = raw.get("shipping_address")
        orders = handler.handle(
            buyer_id=buyer,
            cart_snapshot=CartSnapshot.from_dict(raw),
            shipping_address=AddressSnapshot.from_dict(address) if address else None,
            options=_options(payment_method, notes, discount_codes, idempotency_key),
        )
    except DomainException as exc:
        raise click.ClickException(str(exc))

    _report_created(orders)


@click.command("show")
@click.option("--buyer", required=True, help="Buyer user id.")
@click.option("--id", "order_id", required=True, type=int, help="Order ID to display.")
def order_show(buyer: str, order_id: int) -> None:
    """Show one of the buyer's orders."""
    handler = container().show_order()

    try:
        dto = handler.handle(order_id, Actor.buyer(buyer))
    except DomainException as exc:
        raise click.ClickException(str(exc))

    display_order(dto)


@click.command("list")
@click.option("--buyer", required=True, help="Buyer user id.")
@click.option("--status", type=STATUS_CHOICE, default=None, help="Only orders in this status.")
@click.option("--store", "store_id", default=None, help="Only orders from this store.")
@click.option("--page", type=int, default=1, show_default=True)
@click.option("--limit", type=int, default=10, show_default=True)
def order_list(
    buyer: str,
    status: str | None,
    store_id: str | None,
    page: int,
    limit: int,
) -> None:
    """List the buyer's orders, newest first."""
    handler = container().list_orders()

    try:
        result = handler.handle(
            Actor.buyer(buyer),
            status=OrderStatus(status) if status else None,
            store_id=store_id,
            page=page,
            limit=limit,
        )
    except DomainException as exc:
        raise click.ClickException(str(exc))

    display_order_page(result)


@click.command("cancel")
@click.option("--buyer", required=True, help="Buyer user id.")
@click.option("--id", "order_id", required=True, type=int, help="Order ID to cancel.")
def order_cancel(buyer: str, order_id: int) -> None:
    """Cancel an order (returns its stock)."""
    handler = container().cancel_order()

    try:
        handler.handle(order_id, Actor.buyer(buyer))
    except DomainException as exc:
        raise click.ClickException(str(exc))

    click.echo(f"Order #{order_id} cancelled.")


@click.command("complete")
@click.option("--buyer", required=True, help="Buyer user id.")
@click.option("--id", "order_id", required=True, type=int, help="Order ID to complete.")
def order_complete(buyer: str, order_id: int) -> None:
    """Confirm receipt of a delivered order."""
    handler = container().change_status()

    try:
        handler.handle(order_id, Actor.buyer(buyer), OrderStatus.COMPLETED)
    except DomainException as exc:
        raise click.ClickException(str(exc))

    click.echo(f"Order #{order_id} completed.")
