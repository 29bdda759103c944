"""SQLAlchemy-backed implementation of OrderRepository."""

from __future__ import annotations

from sqlalchemy import Select, func, literal, select
from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session

from fulfillment.domain.exceptions import ConcurrencyConflict
from fulfillment.domain.model.order import DiscountType, Order, OrderDiscount, OrderItem
from fulfillment.domain.model.state_machine import TIMESTAMP_FIELDS, OrderStatus
from fulfillment.domain.model.value_objects import (
    AddressSnapshot,
    Money,
    ProductSnapshot,
    Quantity,
)
from fulfillment.domain.repository.order_repository import OrderQuery, OrderRepository
from fulfillment.infrastructure.persistence.database import as_utc
from fulfillment.infrastructure.persistence.tables import (
    OrderDiscountRow,
    OrderItemRow,
    OrderRow,
)


class SqlOrderRepository(OrderRepository):

    def __init__(self, session: Session) -> None:
        self._session = session

    # --- OrderRepository interface --------------------------------------------

    def get_by_id(self, order_id: int) -> Order | None:
        row = self._session.execute(
            select(OrderRow)
            .where(OrderRow.order_id == order_id)
            .execution_options(populate_existing=True)
        ).scalar_one_or_none()
        return self._to_domain(row) if row is not None else None

    def get_for_update(self, order_id: int) -> Order | None:
        row = self._session.execute(
            select(OrderRow)
            .where(OrderRow.order_id == order_id)
            .with_for_update()
            .execution_options(populate_existing=True)
        ).scalar_one_or_none()
        return self._to_domain(row) if row is not None else None

    def find_by_idempotency_key(self, key: str) -> list[Order]:
        rows = self._session.execute(
            select(OrderRow)
            .where(
                OrderRow.idempotency_key.startswith(f"{key}:", autoescape=True),
                # The stored key is "<key>:<store_id>"; match the whole of it.
                OrderRow.idempotency_key == literal(f"{key}:") + OrderRow.store_id,
            )
            .order_by(OrderRow.order_id)
        ).scalars()
        return [self._to_domain(row) for row in rows]

    def search(self, query: OrderQuery) -> tuple[list[Order], int]:
        stmt = self._filtered(select(OrderRow), query)
        total = self._session.execute(
            self._filtered(select(func.count()).select_from(OrderRow), query)
        ).scalar_one()
        rows = self._session.execute(
            stmt.order_by(OrderRow.created_at.desc(), OrderRow.order_id.desc())
            .offset(query.offset)
            .limit(query.limit)
        ).scalars()
        return [self._to_domain(row) for row in rows], total

    def add(self, order: Order) -> None:
        row = self._to_row(order)
        self._session.add(row)
        try:
            self._session.flush()
        except IntegrityError as exc:
            raise ConcurrencyConflict(
                f"Order {order.order_number} conflicts with an existing order"
            ) from exc

        order.id = row.order_id
        for item, item_row in zip(order.items, row.items):
            item.id = item_row.order_item_id

    def save(self, order: Order) -> None:
        row = self._session.get(OrderRow, order.id)
        if row is None:
            raise ConcurrencyConflict(f"Order #{order.id} disappeared during update")
        row.status = order.status.value
        row.updated_at = order.updated_at
        for column in TIMESTAMP_FIELDS.values():
            setattr(row, column, getattr(order, column))
        self._session.flush()

    # --- Query helpers --------------------------------------------------------

    @staticmethod
    def _filtered(stmt: Select, query: OrderQuery) -> Select:
        if query.user_id is not None:
            stmt = stmt.where(OrderRow.user_id == query.user_id)
        if query.store_id is not None:
            stmt = stmt.where(OrderRow.store_id == query.store_id)
        if query.status is not None:
            stmt = stmt.where(OrderRow.status == query.status.value)
        if query.search:
            stmt = stmt.where(OrderRow.order_number.contains(query.search, autoescape=True))
        if query.created_from is not None:
            stmt = stmt.where(OrderRow.created_at >= query.created_from)
        if query.created_to is not None:
            stmt = stmt.where(OrderRow.created_at <= query.created_to)
        return stmt

    # --- Serialization --------------------------------------------------------

    @staticmethod
    def _to_row(order: Order) -> OrderRow:
        return OrderRow(
            order_number=order.order_number,
            user_id=order.user_id,
            store_id=order.store_id,
            status=order.status.value,
            currency=order.currency,
            subtotal=order.subtotal.amount,
            shipping_fee=order.shipping_fee.amount,
            total_discount=order.total_discount.amount,
            total_amount=order.total_amount.amount,
            payment_method=order.payment_method,
            idempotency_key=order.idempotency_key,
            shipping_address_snapshot=order.shipping_address.to_dict(),
            notes=order.notes,
            created_at=order.created_at,
            updated_at=order.updated_at,
            paid_at=order.paid_at,
            shipped_at=order.shipped_at,
            delivered_at=order.delivered_at,
            completed_at=order.completed_at,
            cancelled_at=order.cancelled_at,
            items=[
                OrderItemRow(
                    product_id=item.product_id,
                    product_snapshot=item.product_snapshot.to_dict(),
                    quantity=item.quantity.value,
                    original_price=item.original_price.amount,
                    item_discount=item.item_discount.amount,
                    unit_price=item.unit_price.amount,
                    subtotal=item.subtotal.amount,
                )
                for item in order.items
            ],
            discounts=[
                OrderDiscountRow(
                    discount_id=d.discount_id,
                    discount_type=d.discount_type.value,
                    discount_amount=d.discount_amount.amount,
                    applied_at=d.applied_at,
                )
                for d in order.discounts
            ],
        )

    @staticmethod
    def _to_domain(row: OrderRow) -> Order:
        currency = row.currency
        items = [
            OrderItem(
                id=i.order_item_id,
                product_id=i.product_id,
                product_snapshot=ProductSnapshot.from_dict(i.product_snapshot),
                quantity=Quantity(i.quantity),
                original_price=Money(i.original_price, currency),
                unit_price=Money(i.unit_price, currency),
                item_discount=Money(i.item_discount, currency),
            )
            for i in row.items
        ]
        discounts = [
            OrderDiscount(
                discount_id=d.discount_id,
                discount_type=DiscountType(d.discount_type),
                discount_amount=Money(d.discount_amount, currency),
                applied_at=as_utc(d.applied_at),
            )
            for d in row.discounts
        ]
        return Order(
            id=row.order_id,
            order_number=row.order_number,
            user_id=row.user_id,
            store_id=row.store_id,
            items=items,
            shipping_address=AddressSnapshot.from_dict(row.shipping_address_snapshot),
            shipping_fee=Money(row.shipping_fee, currency),
            status=OrderStatus(row.status),
            payment_method=row.payment_method,
            notes=row.notes,
            idempotency_key=row.idempotency_key,
            discounts=discounts,
            created_at=as_utc(row.created_at),
            updated_at=as_utc(row.updated_at),
            paid_at=as_utc(row.paid_at),
            shipped_at=as_utc(row.shipped_at),
            delivered_at=as_utc(row.delivered_at),
            completed_at=as_utc(row.completed_at),
            cancelled_at=as_utc(row.cancelled_at),
        )
