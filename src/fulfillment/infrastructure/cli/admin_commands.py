"""CLI commands for administrators and payment callbacks."""

from __future__ import annotations

from datetime import datetime

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


@click.command("list")
@click.option("--admin", "admin_id", required=True, help="Administrator user id.")
@click.option("--status", type=STATUS_CHOICE, default=None, help="Only orders in this status.")
@click.option("--store", "store_id", default=None, help="Only orders from this store.")
@click.option("--search", default=None, help="Order number contains.")
@click.option("--from", "created_from", type=click.DateTime(), default=None, help="Created on or after.")
@click.option("--to", "created_to", type=click.DateTime(), default=None, help="Created on or before.")
@click.option("--page", type=int, default=1, show_default=True)
@click.option("--limit", type=int, default=10, show_default=True)
def admin_list(
    admin_id: str,
    status: str | None,
    store_id: str | None,
    search: str | None,
    created_from: datetime | None,
    created_to: datetime | None,
    page: int,
    limit: int,
) -> None:
    """List all orders."""
    handler = container().list_orders()

    try:
        result = handler.handle(
            Actor.admin(admin_id),
            status=OrderStatus(status) if status else None,
            store_id=store_id,
            search=search,
            created_from=created_from,
            created_to=created_to,
            page=page,
            limit=limit,
        )
    except DomainException as exc:
        raise click.ClickException(str(exc))

    display_order_page(result)


@click.command("show")
@click.option("--admin", "admin_id", required=True, help="Administrator user id.")
@click.option("--id", "order_id", required=True, type=int, help="Order ID to display.")
def admin_show(admin_id: str, order_id: int) -> None:
    """Show any order."""
    handler = container().show_order()

    try:
        dto = handler.handle(order_id, Actor.admin(admin_id))
    except DomainException as exc:
        raise click.ClickException(str(exc))

    display_order(dto)


@click.command("status")
@click.option("--admin", "admin_id", required=True, help="Administrator user id.")
@click.option("--id", "order_id", required=True, type=int, help="Order ID to update.")
@click.option("--to", "new_status", required=True, type=STATUS_CHOICE, help="Target status.")
def admin_status(admin_id: str, order_id: int, new_status: str) -> None:
    """Move an order along any allowed transition."""
    handler = container().change_status()

    try:
        dto = handler.handle(order_id, Actor.admin(admin_id), OrderStatus(new_status))
    except DomainException as exc:
        raise click.ClickException(str(exc))

    click.echo(f"Order #{order_id} is now {dto.status}.")


@click.command("cancel")
@click.option("--admin", "admin_id", required=True, help="Administrator user id.")
@click.option("--id", "order_id", required=True, type=int, help="Order ID to cancel.")
@click.option("--reason", required=True, help="Why the order is cancelled.")
def admin_cancel(admin_id: str, order_id: int, reason: str) -> None:
    """Force-cancel an order with a reason."""
    handler = container().admin_cancel_order()

    try:
        handler.handle(order_id, Actor.admin(admin_id), reason)
    except DomainException as exc:
        raise click.ClickException(str(exc))

    click.echo(f"Order #{order_id} cancelled: {reason}")


@click.command("record-payment")
@click.option("--id", "order_id", required=True, type=int, help="Order ID that was paid.")
@click.option("--failed", is_flag=True, default=False, help="Record a failed payment.")
def admin_record_payment(order_id: int, failed: bool) -> None:
    """Record the payment provider's outcome for an order."""
    handler = container().record_payment()

    try:
        dto = handler.handle(order_id, succeeded=not failed)
    except DomainException as exc:
        raise click.ClickException(str(exc))

    click.echo(f"Order #{order_id} is now {dto.status}.")
