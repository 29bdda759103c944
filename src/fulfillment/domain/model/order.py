"""Order aggregate: one store's share of a checkout.

The Order is an aggregate root that owns its line items and applied
discounts and enforces their invariants.  Status changes go through
``transition_to`` which consults the role-scoped transition tables.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from datetime import datetime, timezone
from enum import Enum

from fulfillment.domain.exceptions import InvalidTransitionError, ValidationError
from fulfillment.domain.model.cart import ProductView
from fulfillment.domain.model.state_machine import (
    TIMESTAMP_FIELDS,
    ActorRole,
    InventoryEffect,
    OrderStatus,
    allowed_next,
    inventory_effect,
)
from fulfillment.domain.model.value_objects import (
    AddressSnapshot,
    Money,
    ProductSnapshot,
    Quantity,
)

CASH_ON_DELIVERY = "cash_on_delivery"


def _now() -> datetime:
    return datetime.now(timezone.utc)


class DiscountType(Enum):
    SEASONAL = "seasonal"
    SHIPPING = "shipping"
    SPECIAL = "special"


@dataclass
class OrderItem:
    """Captures the product snapshot and price at order-creation time.

    Nothing on an item changes after creation (price lock preserved).
    ``product_id`` becomes None if the product is later deleted.
    """

    product_id: str | None
    product_snapshot: ProductSnapshot
    quantity: Quantity
    original_price: Money
    unit_price: Money
    item_discount: Money | None = None
    id: int | None = None

    def __post_init__(self) -> None:
        if self.item_discount is None:
            self.item_discount = Money.zero(self.unit_price.currency)

    @property
    def subtotal(self) -> Money:
        return self.unit_price * self.quantity.value

    @staticmethod
    def from_product(product: ProductView, quantity: int) -> OrderItem:
        return OrderItem(
            product_id=product.product_id,
            product_snapshot=product.snapshot(),
            quantity=Quantity(quantity),
            original_price=product.price,
            unit_price=product.price,  # live price, frozen here
        )


@dataclass
class OrderDiscount:
    discount_id: str
    discount_type: DiscountType
    discount_amount: Money
    applied_at: datetime = field(default_factory=_now)


@dataclass
class Order:
    """Aggregate root for one store's order.

    Use the ``Order.create()`` factory for new orders.  The ``__init__``
    is intentionally simple so the repository can reconstitute persisted
    orders without re-validating.
    """

    id: int | None
    order_number: str
    user_id: str
    store_id: str
    items: list[OrderItem]
    shipping_address: AddressSnapshot
    shipping_fee: Money
    status: OrderStatus = OrderStatus.PENDING_PAYMENT
    payment_method: str | None = None
    notes: str | None = None
    idempotency_key: str | None = None
    discounts: list[OrderDiscount] = field(default_factory=list)
    created_at: datetime = field(default_factory=_now)
    updated_at: datetime = field(default_factory=_now)
    paid_at: datetime | None = None
    shipped_at: datetime | None = None
    delivered_at: datetime | None = None
    completed_at: datetime | None = None
    cancelled_at: datetime | None = None

    # --- Factory (used for NEW orders only) -----------------------------------

    @staticmethod
    def create(
        order_number: str,
        user_id: str,
        store_id: str,
        items: list[OrderItem],
        shipping_address: AddressSnapshot,
        shipping_fee: Money,
        payment_method: str | None = None,
        notes: str | None = None,
        idempotency_key: str | None = None,
    ) -> Order:
        """Create a new order, enforcing all invariants.

        Cash-on-delivery orders skip the payment step and start as PAID.
        """
        if not user_id:
            raise ValidationError("Buyer id is required")
        if not items:
            raise ValidationError("Order must contain at least one item")

        now = _now()
        order = Order(
            id=None,
            order_number=order_number,
            user_id=user_id,
            store_id=store_id,
            items=list(items),
            shipping_address=shipping_address,
            shipping_fee=shipping_fee,
            payment_method=payment_method,
            notes=notes,
            idempotency_key=idempotency_key,
            created_at=now,
            updated_at=now,
        )
        if payment_method == CASH_ON_DELIVERY:
            order.status = OrderStatus.PAID
            order.paid_at = now
        return order

    # --- Discounts ------------------------------------------------------------

    def apply_discount(
        self,
        discount_id: str,
        discount_type: DiscountType,
        amount: Money,
    ) -> OrderDiscount:
        """Attach a validated discount, capped so the total never goes negative.

        Shipping discounts are capped at the shipping fee; every other type
        shares the subtotal.
        """
        if any(d.discount_type is discount_type for d in self.discounts):
            raise ValidationError(
                f"Order {self.order_number} already has a {discount_type.value} discount"
            )

        if discount_type is DiscountType.SHIPPING:
            ceiling = self.shipping_fee
        else:
            used = sum(
                (d.discount_amount for d in self.discounts
                 if d.discount_type is not DiscountType.SHIPPING),
                Money.zero(self.currency),
            )
            ceiling = self.subtotal - used

        discount = OrderDiscount(
            discount_id=discount_id,
            discount_type=discount_type,
            discount_amount=amount.capped_at(ceiling),
        )
        self.discounts.append(discount)
        return discount

    # --- State transitions ----------------------------------------------------

    def transition_to(
        self,
        target: OrderStatus,
        role: ActorRole,
        at: datetime | None = None,
    ) -> InventoryEffect:
        """Move to *target* if *role* may, stamping the matching timestamp.

        Returns the inventory operation the caller owes for this edge.
        """
        if target not in allowed_next(role, self.status):
            raise InvalidTransitionError(self.status.value, target.value, role.value)

        effect = inventory_effect(self.status, target)
        at = at or _now()
        self.status = target
        self.updated_at = at

        stamp = TIMESTAMP_FIELDS.get(target)
        if stamp is not None and getattr(self, stamp) is None:
            setattr(self, stamp, at)
        return effect

    # --- Computed properties --------------------------------------------------

    @property
    def currency(self) -> str:
        return self.shipping_fee.currency

    @property
    def subtotal(self) -> Money:
        result = Money.zero(self.currency)
        for item in self.items:
            result = result + item.subtotal
        return result

    @property
    def total_discount(self) -> Money:
        result = Money.zero(self.currency)
        for discount in self.discounts:
            result = result + discount.discount_amount
        return result

    @property
    def total_amount(self) -> Money:
        return self.subtotal + self.shipping_fee - self.total_discount

    @property
    def ledger_lines(self) -> list[tuple[str, int]]:
        """(product_id, quantity) pairs still tied to a catalog product."""
        return [
            (item.product_id, item.quantity.value)
            for item in self.items
            if item.product_id is not None
        ]

    @property
    def item_store_ids(self) -> set[str]:
        """Stores owning the products on this order's lines."""
        return {
            item.product_snapshot.store_id or self.store_id
            for item in self.items
        }
