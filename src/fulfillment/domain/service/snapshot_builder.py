"""Domain service: turn selected cart lines into per-store Order aggregates.

Prices and product display data are read from the live catalog view at
checkout time and frozen onto each OrderItem; the shipping address is
frozen onto the Order.  Nothing here touches inventory or persistence.
"""

from __future__ import annotations

from collections.abc import Sequence
from decimal import Decimal

from fulfillment.domain.model.cart import CartLine
from fulfillment.domain.model.order import Order, OrderItem
from fulfillment.domain.model.value_objects import DEFAULT_CURRENCY, AddressSnapshot, Money
from fulfillment.domain.service.order_numbers import OrderNumberGenerator

UNASSIGNED_STORE_ID = "unassigned"
DEFAULT_SHIPPING_FEE = Decimal("60")


def group_lines_by_store(lines: Sequence[CartLine]) -> dict[str, list[CartLine]]:
    """Group lines by owning store, preserving first-seen store order."""
    groups: dict[str, list[CartLine]] = {}
    for line in lines:
        store_id = line.product.store_id or UNASSIGNED_STORE_ID
        groups.setdefault(store_id, []).append(line)
    return groups


class OrderSnapshotBuilder:

    def __init__(
        self,
        number_generator: OrderNumberGenerator,
        shipping_fee: Money | None = None,
    ) -> None:
        self._number_generator = number_generator
        self._shipping_fee = shipping_fee or Money(DEFAULT_SHIPPING_FEE, DEFAULT_CURRENCY)

    def build(
        self,
        user_id: str,
        store_id: str,
        lines: Sequence[CartLine],
        shipping_address: AddressSnapshot,
        payment_method: str | None = None,
        notes: str | None = None,
        idempotency_key: str | None = None,
    ) -> Order:
        """Build one store's Order with a flat shipping fee.

        Each item's subtotal is ``unit_price * quantity`` at the live price.
        """
        items = [OrderItem.from_product(line.product, line.quantity) for line in lines]
        return Order.create(
            order_number=self._number_generator.next(),
            user_id=user_id,
            store_id=store_id,
            items=items,
            shipping_address=shipping_address,
            shipping_fee=self._shipping_fee,
            payment_method=payment_method,
            notes=notes,
            idempotency_key=(
                f"{idempotency_key}:{store_id}" if idempotency_key else None
            ),
        )
