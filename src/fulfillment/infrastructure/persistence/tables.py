"""SQLAlchemy table mappings for orders and inventory.

Rows are persistence shapes only; repositories translate them to and
from the domain aggregates.
"""

from __future__ import annotations

from datetime import datetime
from decimal import Decimal
from typing import Any

from sqlalchemy import (
    JSON,
    BigInteger,
    DateTime,
    ForeignKey,
    Index,
    Integer,
    Numeric,
    String,
    Text,
    UniqueConstraint,
)
from sqlalchemy.orm import DeclarativeBase, Mapped, mapped_column, relationship

# BIGINT primary keys do not autoincrement on SQLite.
BigId = BigInteger().with_variant(Integer, "sqlite")
Amount = Numeric(10, 2, asdecimal=True)


class Base(DeclarativeBase):
    pass


class OrderRow(Base):
    __tablename__ = "orders"
    __table_args__ = (
        Index("idx_orders_user_created", "user_id", "created_at"),
        Index("idx_orders_store_created", "store_id", "created_at"),
        Index("idx_orders_status", "status"),
    )

    order_id: Mapped[int] = mapped_column(BigId, primary_key=True, autoincrement=True)
    order_number: Mapped[str] = mapped_column(String(50), unique=True)
    user_id: Mapped[str] = mapped_column(String(64))
    store_id: Mapped[str] = mapped_column(String(64))
    status: Mapped[str] = mapped_column(String(32))
    currency: Mapped[str] = mapped_column(String(3))
    subtotal: Mapped[Decimal] = mapped_column(Amount)
    shipping_fee: Mapped[Decimal] = mapped_column(Amount)
    total_discount: Mapped[Decimal] = mapped_column(Amount, default=Decimal("0"))
    total_amount: Mapped[Decimal] = mapped_column(Amount)
    payment_method: Mapped[str | None] = mapped_column(String(50), nullable=True)
    idempotency_key: Mapped[str | None] = mapped_column(String(128), unique=True, nullable=True)
    shipping_address_snapshot: Mapped[dict[str, Any]] = mapped_column(JSON)
    notes: Mapped[str | None] = mapped_column(Text, nullable=True)
    created_at: Mapped[datetime] = mapped_column(DateTime(timezone=True))
    updated_at: Mapped[datetime] = mapped_column(DateTime(timezone=True))
    paid_at: Mapped[datetime | None] = mapped_column(DateTime(timezone=True), nullable=True)
    shipped_at: Mapped[datetime | None] = mapped_column(DateTime(timezone=True), nullable=True)
    delivered_at: Mapped[datetime | None] = mapped_column(DateTime(timezone=True), nullable=True)
    completed_at: Mapped[datetime | None] = mapped_column(DateTime(timezone=True), nullable=True)
    cancelled_at: Mapped[datetime | None] = mapped_column(DateTime(timezone=True), nullable=True)

    items: Mapped[list[OrderItemRow]] = relationship(
        back_populates="order",
        cascade="all, delete-orphan",
        lazy="selectin",
        order_by="OrderItemRow.order_item_id",
    )
    discounts: Mapped[list[OrderDiscountRow]] = relationship(
        back_populates="order",
        cascade="all, delete-orphan",
        lazy="selectin",
        order_by="OrderDiscountRow.order_discount_id",
    )


class OrderItemRow(Base):
    __tablename__ = "order_items"

    order_item_id: Mapped[int] = mapped_column(BigId, primary_key=True, autoincrement=True)
    order_id: Mapped[int] = mapped_column(ForeignKey("orders.order_id", ondelete="CASCADE"), index=True)
    # Survives product deletion.
    product_id: Mapped[str | None] = mapped_column(String(64), nullable=True, index=True)
    product_snapshot: Mapped[dict[str, Any]] = mapped_column(JSON)
    quantity: Mapped[int] = mapped_column(Integer)
    original_price: Mapped[Decimal] = mapped_column(Amount)
    item_discount: Mapped[Decimal] = mapped_column(Amount, default=Decimal("0"))
    unit_price: Mapped[Decimal] = mapped_column(Amount)
    subtotal: Mapped[Decimal] = mapped_column(Amount)

    order: Mapped[OrderRow] = relationship(back_populates="items")


class OrderDiscountRow(Base):
    __tablename__ = "order_discounts"
    __table_args__ = (UniqueConstraint("order_id", "discount_type", name="uq_order_discount_type"),)

    order_discount_id: Mapped[int] = mapped_column(BigId, primary_key=True, autoincrement=True)
    order_id: Mapped[int] = mapped_column(ForeignKey("orders.order_id", ondelete="CASCADE"), index=True)
    discount_id: Mapped[str] = mapped_column(String(64), index=True)
    discount_type: Mapped[str] = mapped_column(String(16))
    discount_amount: Mapped[Decimal] = mapped_column(Amount)
    applied_at: Mapped[datetime] = mapped_column(DateTime(timezone=True))

    order: Mapped[OrderRow] = relationship(back_populates="discounts")


class InventoryRow(Base):
    __tablename__ = "inventory"

    inventory_id: Mapped[int] = mapped_column(BigId, primary_key=True, autoincrement=True)
    product_id: Mapped[str] = mapped_column(String(64), unique=True)
    quantity: Mapped[int] = mapped_column(Integer, default=0)
    reserved: Mapped[int] = mapped_column(Integer, default=0)
    last_updated: Mapped[datetime] = mapped_column(DateTime(timezone=True))
