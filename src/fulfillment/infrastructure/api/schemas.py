"""Pydantic request/response schemas for the order and inventory API.

These are external contracts, kept separate from the application DTOs.
Money travels as two-decimal strings.
"""

from __future__ import annotations

from datetime import datetime
from typing import Any

from pydantic import BaseModel, Field

from fulfillment.domain.model.state_machine import OrderStatus


# ---------------------------------------------------------------------------
# Shared sub-models
# ---------------------------------------------------------------------------
class AddressSchema(BaseModel):
    recipient_name: str
    phone: str
    city: str
    address_line1: str
    district: str | None = None
    postal_code: str | None = None
    address_line2: str | None = None


class CartSnapshotItemSchema(BaseModel):
    product_id: str
    quantity: int = Field(ge=1, default=1)


class CartSnapshotSchema(BaseModel):
    items: list[CartSnapshotItemSchema]


# ---------------------------------------------------------------------------
# Request Schemas
# ---------------------------------------------------------------------------
class CheckoutFields(BaseModel):
    payment_method: str | None = None
    notes: str | None = Field(default=None, max_length=1000)
    discount_codes: list[str] = Field(default_factory=list)
    idempotency_key: str | None = Field(default=None, max_length=100)


class CreateOrderRequest(CheckoutFields):
    shipping_address_id: str | None = None

    model_config = {
        "json_schema_extra": {
            "examples": [
                {
                    "shipping_address_id": "addr-1",
                    "payment_method": "credit_card",
                    "discount_codes": ["SPRING10"],
                    "idempotency_key": "6b1c8f0e-checkout-1",
                }
            ]
        }
    }


class CreateOrderFromSnapshotRequest(CheckoutFields):
    cart_snapshot: CartSnapshotSchema
    shipping_address: AddressSchema | None = None


class UpdateOrderStatusRequest(BaseModel):
    status: OrderStatus


class AdminCancelOrderRequest(BaseModel):
    reason: str = Field(min_length=1, max_length=500)


class RecordPaymentRequest(BaseModel):
    succeeded: bool


class SetInventoryRequest(BaseModel):
    quantity: int


# ---------------------------------------------------------------------------
# Response Schemas
# ---------------------------------------------------------------------------
class OrderItemResponse(BaseModel):
    order_item_id: int | None
    product_id: str | None
    product_name: str
    quantity: int
    original_price: str
    item_discount: str
    unit_price: str
    subtotal: str
    product_snapshot: dict[str, Any]


class OrderDiscountResponse(BaseModel):
    discount_id: str
    discount_type: str
    discount_amount: str


class OrderResponse(BaseModel):
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
    items: list[OrderItemResponse]
    discounts: list[OrderDiscountResponse]
    created_at: datetime
    paid_at: datetime | None = None
    shipped_at: datetime | None = None
    delivered_at: datetime | None = None
    completed_at: datetime | None = None
    cancelled_at: datetime | None = None


class CheckoutResponse(BaseModel):
    orders: list[OrderResponse]


class OrderPageResponse(BaseModel):
    data: list[OrderResponse]
    total: int
    page: int
    limit: int


class InventoryResponse(BaseModel):
    product_id: str
    quantity: int
    reserved: int
    available: int
    last_updated: datetime


class ErrorResponse(BaseModel):
    error: str
    detail: str
