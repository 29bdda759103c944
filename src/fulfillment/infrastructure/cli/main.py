import click

from fulfillment.infrastructure.bootstrap import container
from fulfillment.infrastructure.cli.admin_commands import (
    admin_cancel,
    admin_list,
    admin_record_payment,
    admin_show,
    admin_status,
)
from fulfillment.infrastructure.cli.inventory_commands import inventory_set, inventory_show
from fulfillment.infrastructure.cli.order_commands import (
    order_cancel,
    order_complete,
    order_create,
    order_create_from_snapshot,
    order_list,
    order_show,
)
from fulfillment.infrastructure.cli.seller_commands import (
    seller_cancel,
    seller_list,
    seller_show,
    seller_status,
)
from fulfillment.infrastructure.logging import configure_logging


@click.group()
def cli() -> None:
    """Order fulfillment: checkout, order lifecycle and stock."""
    configure_logging(container().settings)


@cli.group()
def order() -> None:
    """Buyer checkout and orders."""


@cli.group()
def seller() -> None:
    """Seller order handling."""


@cli.group()
def admin() -> None:
    """Administrator order handling."""


@cli.group()
def inventory() -> None:
    """Manage inventory."""


# Register subcommands
order.add_command(order_cancel)
order.add_command(order_complete)
order.add_command(order_create)
order.add_command(order_create_from_snapshot)
order.add_command(order_list)
order.add_command(order_show)
seller.add_command(seller_cancel)
seller.add_command(seller_list)
seller.add_command(seller_show)
seller.add_command(seller_status)
admin.add_command(admin_cancel)
admin.add_command(admin_list)
admin.add_command(admin_record_payment)
admin.add_command(admin_show)
admin.add_command(admin_status)
inventory.add_command(inventory_set)
inventory.add_command(inventory_show)
