"""Order status lifecycle.

The general transition table describes every edge an order may ever take.
Each actor role gets a narrowed view of that table; ``allowed_next`` is the
single place that answers "may this role move this order from here".
"""

from __future__ import annotations

from enum import Enum


class OrderStatus(Enum):
    PENDING_PAYMENT = "pending_payment"
    PAYMENT_FAILED = "payment_failed"
    PAID = "paid"
    PROCESSING = "processing"
    SHIPPED = "shipped"
    DELIVERED = "delivered"
    COMPLETED = "completed"
    CANCELLED = "cancelled"

    @property
    def is_terminal(self) -> bool:
        return not TRANSITIONS[self]


class ActorRole(Enum):
    BUYER = "buyer"
    SELLER = "seller"
    ADMIN = "admin"
    SYSTEM = "system"  # payment callbacks


class InventoryEffect(Enum):
    NONE = "none"
    COMMIT = "commit"
    RELEASE = "release"
    RESTOCK = "restock"


S = OrderStatus

TRANSITIONS: dict[OrderStatus, frozenset[OrderStatus]] = {
    S.PENDING_PAYMENT: frozenset({S.PAYMENT_FAILED, S.PAID, S.CANCELLED}),
    S.PAYMENT_FAILED: frozenset({S.PAID, S.CANCELLED}),
    S.PAID: frozenset({S.PROCESSING, S.CANCELLED}),
    S.PROCESSING: frozenset({S.SHIPPED, S.CANCELLED}),
    S.SHIPPED: frozenset({S.DELIVERED, S.CANCELLED}),
    S.DELIVERED: frozenset({S.COMPLETED, S.CANCELLED}),
    S.COMPLETED: frozenset(),
    S.CANCELLED: frozenset(),
}

_NON_TERMINAL = [status for status, targets in TRANSITIONS.items() if targets]

ROLE_TRANSITIONS: dict[ActorRole, dict[OrderStatus, frozenset[OrderStatus]]] = {
    ActorRole.BUYER: {
        **{status: frozenset({S.CANCELLED}) for status in _NON_TERMINAL},
        S.DELIVERED: frozenset({S.COMPLETED, S.CANCELLED}),
    },
    ActorRole.SELLER: {
        S.PAID: frozenset({S.PROCESSING, S.CANCELLED}),
        S.PROCESSING: frozenset({S.SHIPPED, S.CANCELLED}),
        S.SHIPPED: frozenset({S.DELIVERED, S.CANCELLED}),
        S.DELIVERED: frozenset({S.CANCELLED}),
    },
    ActorRole.ADMIN: TRANSITIONS,
    ActorRole.SYSTEM: {
        S.PENDING_PAYMENT: frozenset({S.PAID, S.PAYMENT_FAILED}),
        S.PAYMENT_FAILED: frozenset({S.PAID}),
    },
}

# Nullable order column stamped when the order enters each status.
TIMESTAMP_FIELDS: dict[OrderStatus, str] = {
    S.PAID: "paid_at",
    S.SHIPPED: "shipped_at",
    S.DELIVERED: "delivered_at",
    S.COMPLETED: "completed_at",
    S.CANCELLED: "cancelled_at",
}

_SHIPPED_STATES = frozenset({S.SHIPPED, S.DELIVERED})


def allowed_next(role: ActorRole, current: OrderStatus) -> frozenset[OrderStatus]:
    """Statuses *role* may move an order to from *current*.

    Role tables only ever narrow the general table.
    """
    return ROLE_TRANSITIONS[role].get(current, frozenset()) & TRANSITIONS[current]


def inventory_effect(current: OrderStatus, target: OrderStatus) -> InventoryEffect:
    """Ledger operation owed for the edge ``current -> target``."""
    if target is S.SHIPPED:
        return InventoryEffect.COMMIT
    if target is S.CANCELLED:
        if current in _SHIPPED_STATES:
            return InventoryEffect.RESTOCK
        return InventoryEffect.RELEASE
    return InventoryEffect.NONE
