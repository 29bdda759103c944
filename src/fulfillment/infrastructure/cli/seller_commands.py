"""CLI commands for sellers working their store's orders."""

from __future__ import annotations

import click

from fulfillment.application.dto import Actor
from fulfillment.domain.exceptions import DomainException
from fulfillment.domain.model.state_machine import OrderStatus
from fulfillment.infrastructure.bootstrap import container
from fulfillment.infrastructure.cli.formatting import (
    STATUS_CHOICE,
    display_order,
    display_order_page,
)

seller_identity = [
    click.option("--user", "user_id", required=True, help="Seller's user id."),
    click.option("--seller", "seller_id", required=True, help="Seller id."),
]


def _as_seller(command):
    for option in reversed(seller_identity):
        command = option(command)
    return command


@click.command("list")
@_as_seller
@click.option("--status", type=STATUS_CHOICE, default=None, help="Only orders in this status.")
@click.option("--search", default=None, help="Order number contains.")
@click.option("--page", type=int, default=1, show_default=True)
@click.option("--limit", type=int, default=10, show_default=True)
def seller_list(
    user_id: str,
    seller_id: str,
    status: str | None,
    search: str | None,
    page: int,
    limit: int,
) -> None:
    """List orders placed with the seller's store."""
    handler = container().list_orders()

    try:
        result = handler.handle(
            Actor.seller(user_id, seller_id),
            status=OrderStatus(status) if status else None,
            search=search,
            page=page,
            limit=limit,
        )
    except DomainException as exc:
        raise click.ClickException(str(exc))

    display_order_page(result)


@click.command("show")
@_as_seller
@click.option("--id", "order_id", required=True, type=int, help="Order ID to display.")
def seller_show(user_id: str, seller_id: str, order_id: int) -> None:
    """Show an order of the seller's store."""
    handler = container().show_order()

    try:
        dto = handler.handle(order_id, Actor.seller(user_id, seller_id))
    except DomainException as exc:
        raise click.ClickException(str(exc))

    display_order(dto)


@click.command("status")
@_as_seller
@click.option("--id", "order_id", required=True, type=int, help="Order ID to update.")
@click.option("--to", "new_status", required=True, type=STATUS_CHOICE, help="Target status.")
def seller_status(user_id: str, seller_id: str, order_id: int, new_status: str) -> None:
    """Move an order forward (processing, shipped, delivered) or cancel it."""
    handler = container().change_status()

    try:
        dto = handler.handle(order_id, Actor.seller(user_id, seller_id), OrderStatus(new_status))
    except DomainException as exc:
        raise click.ClickException(str(exc))

    click.echo(f"Order #{order_id} is now {dto.status}.")


@click.command("cancel")
@_as_seller
@click.option("--id", "order_id", required=True, type=int, help="Order ID to cancel.")
def seller_cancel(user_id: str, seller_id: str, order_id: int) -> None:
    """Cancel an order of the seller's store."""
    handler = container().cancel_order()

    try:
        handler.handle(order_id, Actor.seller(user_id, seller_id))
    except DomainException as exc:
        raise click.ClickException(str(exc))

    click.echo(f"Order #{order_id} cancelled.")
