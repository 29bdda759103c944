"""Inputs and outputs of the application handlers.

The CLI and HTTP layers only see these, never the aggregates.  Money is
rendered as a two-decimal string alongside its currency.
"""

from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime
from typing import Any

from fulfillment.domain.model.inventory import InventoryRecord
from fulfillment.domain.model.order import Order
from fulfillment.domain.model.state_machine import ActorRole
from fulfillment.domain.model.value_objects import Money


@dataclass(frozen=True)
class Actor:
    """Who is calling: an authenticated user acting in one role."""

    user_id: str
    role: ActorRole
    seller_id: str | None = None

    @staticmethod
    def buyer(user_id: str) -> Actor:
        return Actor(user_id=user_id, role=ActorRole.BUYER)

    @staticmethod
    def seller(user_id: str, seller_id: str) -> Actor:
        return Actor(user_id=user_id, role=ActorRole.SELLER, seller_id=seller_id)

    @staticmethod
    def admin(user_id: str) -> Actor:
        return Actor(user_id=user_id, role=ActorRole.ADMIN)

    @staticmethod
    def system() -> Actor:
        return Actor(user_id="system", role=ActorRole.SYSTEM)


@dataclass(frozen=True)
class CheckoutOptions:
    """Input: buyer choices that accompany a checkout."""

    payment_method: str | None = None
    notes: str | None = None
    discount_codes: tuple[str, ...] = ()
    idempotency_key: str | None = None


@dataclass(frozen=True)
class OrderItemDTO:
    order_item_id: int | None
    product_id: str | None
    product_name: str
    quantity: int
    original_price: str
    item_discount: str
    unit_price: str
    subtotal: str
    product_snapshot: dict[str, Any]


@dataclass(frozen=True)
class OrderDiscountDTO:
    discount_id: str
    discount_type: str
    discount_amount: str


@dataclass(frozen=True)
class OrderDTO:
    """Output: a complete order as displayed to the user."""

    order_id: int
    order_number: str
    user_id: str
    store_id: str
    status: str
    currency: str
    subtotal: str
    shipping_fee: str
    total_discount: str
    total_amount: str
    payment_method: str | None
    notes: str | None
    shipping_address: dict[str, Any]
    items: list[OrderItemDTO]
    discounts: list[OrderDiscountDTO]
    created_at: datetime
    paid_at: datetime | None = None
    shipped_at: datetime | None = None
    delivered_at: datetime | None = None
    completed_at: datetime | None = None
    cancelled_at: datetime | None = None


@dataclass(frozen=True)
class OrderPageDTO:
    data: list[OrderDTO]
    total: int
    page: int
    limit: int


@dataclass(frozen=True)
class InventoryDTO:
    product_id: str
    quantity: int
    reserved: int
    available: int
    last_updated: datetime


# --- Mapping ------------------------------------------------------------------


def _fmt(money: Money) -> str:
    return f"{money.amount:.2f}"


def to_order_dto(order: Order) -> OrderDTO:
    return OrderDTO(
        order_id=order.id,  # type: ignore[arg-type]
        order_number=order.order_number,
        user_id=order.user_id,
        store_id=order.store_id,
        status=order.status.value,
        currency=order.currency,
        subtotal=_fmt(order.subtotal),
        shipping_fee=_fmt(order.shipping_fee),
        total_discount=_fmt(order.total_discount),
        total_amount=_fmt(order.total_amount),
        payment_method=order.payment_method,
        notes=order.notes,
        shipping_address=order.shipping_address.to_dict(),
        items=[
            OrderItemDTO(
                order_item_id=item.id,
                product_id=item.product_id,
                product_name=item.product_snapshot.product_name,
                quantity=item.quantity.value,
                original_price=_fmt(item.original_price),
                item_discount=_fmt(item.item_discount),
                unit_price=_fmt(item.unit_price),
                subtotal=_fmt(item.subtotal),
                product_snapshot=item.product_snapshot.to_dict(),
            )
            for item in order.items
        ],
        discounts=[
            OrderDiscountDTO(
                discount_id=d.discount_id,
                discount_type=d.discount_type.value,
                discount_amount=_fmt(d.discount_amount),
            )
            for d in order.discounts
        ],
        created_at=order.created_at,
        paid_at=order.paid_at,
        shipped_at=order.shipped_at,
        delivered_at=order.delivered_at,
        completed_at=order.completed_at,
        cancelled_at=order.cancelled_at,
    )


def to_inventory_dto(record: InventoryRecord) -> InventoryDTO:
    return InventoryDTO(
        product_id=record.product_id,
        quantity=record.quantity,
        reserved=record.reserved,
        available=record.available_stock,
        last_updated=record.last_updated,
    )
