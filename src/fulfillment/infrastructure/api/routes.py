"""FastAPI routes for orders and inventory.

Handlers are synchronous, so the routes are plain ``def`` functions and
run in the threadpool.
"""

from __future__ import annotations

from datetime import datetime

from fastapi import APIRouter, Depends, Query

from fulfillment.application.dto import Actor, CheckoutOptions
from fulfillment.domain.model.cart import CartSnapshot
from fulfillment.domain.model.state_machine import ActorRole, OrderStatus
from fulfillment.domain.model.value_objects import AddressSnapshot
from fulfillment.infrastructure.api.dependencies import (
    current_actor,
    get_container,
    require_role,
)
from fulfillment.infrastructure.api.schemas import (
    AdminCancelOrderRequest,
    CheckoutFields,
    CheckoutResponse,
    CreateOrderFromSnapshotRequest,
    CreateOrderRequest,
    InventoryResponse,
    OrderPageResponse,
    OrderResponse,
    RecordPaymentRequest,
    SetInventoryRequest,
    UpdateOrderStatusRequest,
)
from fulfillment.infrastructure.bootstrap import Container

MAX_LIMIT = 100


def _checkout_options(body: CheckoutFields) -> CheckoutOptions:
    return CheckoutOptions(
        payment_method=body.payment_method,
        notes=body.notes,
        discount_codes=tuple(body.discount_codes),
        idempotency_key=body.idempotency_key,
    )


# ---------------------------------------------------------------------------
# Buyer Router
# ---------------------------------------------------------------------------
order_router = APIRouter(prefix="/orders", tags=["orders"])


@order_router.post("", status_code=201, response_model=CheckoutResponse)
def create_order(
    body: CreateOrderRequest,
    actor: Actor = Depends(require_role(ActorRole.BUYER)),
    container: Container = Depends(get_container),
):
    orders = container.create_order().handle(
        buyer_id=actor.user_id,
        shipping_address_id=body.shipping_address_id,
        options=_checkout_options(body),
    )
    return {"orders": orders}


@order_router.post("/from-snapshot", status_code=201, response_model=CheckoutResponse)
def create_order_from_snapshot(
    body: CreateOrderFromSnapshotRequest,
    actor: Actor = Depends(require_role(ActorRole.BUYER)),
    container: Container = Depends(get_container),
):
    address = body.shipping_address
    orders = container.create_order_from_snapshot().handle(
        buyer_id=actor.user_id,
        cart_snapshot=CartSnapshot.from_dict(body.cart_snapshot.model_dump()),
        shipping_address=AddressSnapshot(**address.model_dump()) if address else None,
        options=_checkout_options(body),
    )
    return {"orders": orders}


@order_router.get("", response_model=OrderPageResponse)
def list_my_orders(
    status: OrderStatus | None = None,
    store_id: str | None = None,
    page: int = Query(1, ge=1),
    limit: int = Query(10, ge=1, le=MAX_LIMIT),
    actor: Actor = Depends(require_role(ActorRole.BUYER)),
    container: Container = Depends(get_container),
):
    return container.list_orders().handle(
        actor, status=status, store_id=store_id, page=page, limit=limit
    )


@order_router.get("/{order_id}", response_model=OrderResponse)
def get_my_order(
    order_id: int,
    actor: Actor = Depends(require_role(ActorRole.BUYER)),
    container: Container = Depends(get_container),
):
    return container.show_order().handle(order_id, actor)


@order_router.patch("/{order_id}/status", response_model=OrderResponse)
def update_my_order_status(
    order_id: int,
    body: UpdateOrderStatusRequest,
    actor: Actor = Depends(require_role(ActorRole.BUYER)),
    container: Container = Depends(get_container),
):
    return container.change_status().handle(order_id, actor, body.status)


@order_router.post("/{order_id}/cancel", response_model=OrderResponse)
def cancel_my_order(
    order_id: int,
    actor: Actor = Depends(require_role(ActorRole.BUYER)),
    container: Container = Depends(get_container),
):
    return container.cancel_order().handle(order_id, actor)


# ---------------------------------------------------------------------------
# Admin Router
# ---------------------------------------------------------------------------
admin_router = APIRouter(prefix="/orders/admin", tags=["admin"])


@admin_router.get("", response_model=OrderPageResponse)
def admin_list_orders(
    status: OrderStatus | None = None,
    store_id: str | None = None,
    search: str | None = None,
    start_date: datetime | None = None,
    end_date: datetime | None = None,
    page: int = Query(1, ge=1),
    limit: int = Query(10, ge=1, le=MAX_LIMIT),
    actor: Actor = Depends(require_role(ActorRole.ADMIN)),
    container: Container = Depends(get_container),
):
    return container.list_orders().handle(
        actor,
        status=status,
        store_id=store_id,
        search=search,
        created_from=start_date,
        created_to=end_date,
        page=page,
        limit=limit,
    )


@admin_router.get("/{order_id}", response_model=OrderResponse)
def admin_get_order(
    order_id: int,
    actor: Actor = Depends(require_role(ActorRole.ADMIN)),
    container: Container = Depends(get_container),
):
    return container.show_order().handle(order_id, actor)


@admin_router.patch("/{order_id}/status", response_model=OrderResponse)
def admin_update_order_status(
    order_id: int,
    body: UpdateOrderStatusRequest,
    actor: Actor = Depends(require_role(ActorRole.ADMIN)),
    container: Container = Depends(get_container),
):
    return container.change_status().handle(order_id, actor, body.status)


@admin_router.post("/{order_id}/cancel", response_model=OrderResponse)
def admin_cancel_order(
    order_id: int,
    body: AdminCancelOrderRequest,
    actor: Actor = Depends(require_role(ActorRole.ADMIN)),
    container: Container = Depends(get_container),
):
    return container.admin_cancel_order().handle(order_id, actor, body.reason)


# ---------------------------------------------------------------------------
# Seller Router
# ---------------------------------------------------------------------------
seller_router = APIRouter(prefix="/orders/seller", tags=["seller"])


@seller_router.get("/orders", response_model=OrderPageResponse)
def seller_list_orders(
    status: OrderStatus | None = None,
    search: str | None = None,
    page: int = Query(1, ge=1),
    limit: int = Query(10, ge=1, le=MAX_LIMIT),
    actor: Actor = Depends(require_role(ActorRole.SELLER)),
    container: Container = Depends(get_container),
):
    return container.list_orders().handle(
        actor, status=status, search=search, page=page, limit=limit
    )


@seller_router.get("/orders/{order_id}", response_model=OrderResponse)
def seller_get_order(
    order_id: int,
    actor: Actor = Depends(require_role(ActorRole.SELLER)),
    container: Container = Depends(get_container),
):
    return container.show_order().handle(order_id, actor)


@seller_router.patch("/orders/{order_id}/status", response_model=OrderResponse)
def seller_update_order_status(
    order_id: int,
    body: UpdateOrderStatusRequest,
    actor: Actor = Depends(require_role(ActorRole.SELLER)),
    container: Container = Depends(get_container),
):
    return container.change_status().handle(order_id, actor, body.status)


# ---------------------------------------------------------------------------
# Payment callbacks
# ---------------------------------------------------------------------------
system_router = APIRouter(prefix="/orders/system", tags=["system"])


@system_router.post("/{order_id}/payment", response_model=OrderResponse)
def record_payment(
    order_id: int,
    body: RecordPaymentRequest,
    actor: Actor = Depends(require_role(ActorRole.SYSTEM)),
    container: Container = Depends(get_container),
):
    return container.record_payment().handle(order_id, body.succeeded)


# ---------------------------------------------------------------------------
# Inventory Router
# ---------------------------------------------------------------------------
inventory_router = APIRouter(prefix="/inventory", tags=["inventory"])


@inventory_router.get("", response_model=list[InventoryResponse])
def list_inventory(
    actor: Actor = Depends(current_actor),
    container: Container = Depends(get_container),
):
    return container.show_inventory().handle()


@inventory_router.get("/{product_id}", response_model=InventoryResponse)
def get_inventory(
    product_id: str,
    actor: Actor = Depends(current_actor),
    container: Container = Depends(get_container),
):
    return container.show_inventory().handle_one(product_id)


@inventory_router.put("/{product_id}", response_model=InventoryResponse)
def set_inventory(
    product_id: str,
    body: SetInventoryRequest,
    actor: Actor = Depends(current_actor),
    container: Container = Depends(get_container),
):
    return container.set_inventory().handle(actor, product_id, body.quantity)
