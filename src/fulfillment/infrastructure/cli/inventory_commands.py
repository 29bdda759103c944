"""CLI commands for inventory management."""

from __future__ import annotations

import click

from fulfillment.application.dto import Actor
from fulfillment.domain.exceptions import DomainException
from fulfillment.infrastructure.bootstrap import container


@click.command("set")
@click.option("--product", "product_id", required=True, help="Product id.")
@click.option("--quantity", required=True, type=int, help="Total quantity in stock.")
@click.option("--user", "user_id", required=True, help="Acting user id.")
@click.option("--seller", "seller_id", default=None, help="Act as this seller (otherwise as administrator).")
def inventory_set(product_id: str, quantity: int, user_id: str, seller_id: str | None) -> None:
    """Set inventory level for a product."""
    actor = Actor.seller(user_id, seller_id) if seller_id else Actor.admin(user_id)
    handler = container().set_inventory()

    try:
        dto = handler.handle(actor, product_id=product_id, quantity=quantity)
    except DomainException as exc:
        raise click.ClickException(str(exc))

    click.echo(
        f"Inventory for '{product_id}' set to {dto.quantity} "
        f"(reserved={dto.reserved}, available={dto.available})"
    )


@click.command("show")
@click.option("--product", "product_id", default=None, help="Only this product.")
def inventory_show(product_id: str | None) -> None:
    """Show current inventory levels."""
    handler = container().show_inventory()

    if product_id:
        try:
            lines = [handler.handle_one(product_id)]
        except DomainException as exc:
            raise click.ClickException(str(exc))
    else:
        lines = handler.handle()

    if not lines:
        click.echo("No inventory records found.")
        return

    click.echo(f"{'Product':<20} {'Total':>8} {'Reserved':>10} {'Available':>10}")
    click.echo("-" * 50)
    for line in lines:
        click.echo(
            f"{line.product_id:<20} {line.quantity:>8} {line.reserved:>10} {line.available:>10}"
        )
