"""Shared console formatting for orders."""

from __future__ import annotations

import click

from fulfillment.application.dto import OrderDTO, OrderPageDTO
from fulfillment.domain.model.state_machine import OrderStatus

STATUS_CHOICE = click.Choice([status.value for status in OrderStatus])


def display_order(dto: OrderDTO) -> None:
    click.echo(f"Order {dto.order_number} (#{dto.order_id})  (status={dto.status})")
    click.echo(f"Buyer:   {dto.user_id}")
    click.echo(f"Store:   {dto.store_id}")
    click.echo(f"Created: {dto.created_at}")
    click.echo()
    click.echo(f"  {'Product':<24} {'Qty':>5} {'Price':>10} {'Subtotal':>10}")
    click.echo(f"  {'-'*51}")
    for item in dto.items:
        click.echo(
            f"  {item.product_name:<24} {item.quantity:>5} {item.unit_price:>10} {item.subtotal:>10}"
        )
    click.echo(f"  {'-'*51}")
    click.echo(f"  {'Subtotal':<31} {dto.subtotal:>20}")
    click.echo(f"  {'Shipping':<31} {dto.shipping_fee:>20}")
    for discount in dto.discounts:
        label = f"Discount ({discount.discount_type})"
        click.echo(f"  {label:<31} {'-' + discount.discount_amount:>20}")
    click.echo(f"  {'Total (' + dto.currency + ')':<31} {dto.total_amount:>20}")


def display_order_page(page: OrderPageDTO) -> None:
    if not page.data:
        click.echo("No orders found.")
        return

    click.echo(f"{'ID':>6} {'Order number':<32} {'Store':<12} {'Status':<16} {'Total':>10}")
    click.echo("-" * 80)
    for dto in page.data:
        click.echo(
            f"{dto.order_id:>6} {dto.order_number:<32} {dto.store_id:<12} "
            f"{dto.status:<16} {dto.total_amount:>10}"
        )
    click.echo(f"Page {page.page} ({len(page.data)} of {page.total} orders)")
