"""Best-effort notification fan-out after a committed order change.

Delivery problems must never undo or fail an operation that already
committed, so every failure here is logged and swallowed.
"""

from __future__ import annotations

from typing import Any

import structlog

from fulfillment.application.dto import Actor
from fulfillment.application.ports import Notifier, StoreDirectory
from fulfillment.domain.model.order import Order
from fulfillment.domain.model.state_machine import OrderStatus

logger = structlog.get_logger(__name__)


class OrderNotifications:

    def __init__(self, notifier: Notifier, stores: StoreDirectory) -> None:
        self._notifier = notifier
        self._stores = stores

    def order_created(self, order: Order) -> None:
        self._send(order, {
            "event": "order_created",
            "order_number": order.order_number,
            "status": order.status.value,
            "total_amount": str(order.total_amount.amount),
        })

    def status_changed(
        self,
        order: Order,
        previous: OrderStatus,
        actor: Actor,
        reason: str | None = None,
    ) -> None:
        payload: dict[str, Any] = {
            "event": "order_status_changed",
            "order_number": order.order_number,
            "previous_status": previous.value,
            "status": order.status.value,
            "actor_role": actor.role.value,
        }
        if reason:
            payload["reason"] = reason
        self._send(order, payload)

    def seller_user_ids(self, order: Order) -> list[str]:
        """User ids of the sellers owning the stores on the order's lines."""
        user_ids = set()
        for store_id in order.item_store_ids:
            owner = self._stores.owner_of(store_id)
            if owner is not None:
                user_ids.add(owner.user_id)
        return sorted(user_ids)

    def _send(self, order: Order, payload: dict[str, Any]) -> None:
        try:
            self._notifier.notify(
                order.id,  # type: ignore[arg-type]
                order.user_id,
                self.seller_user_ids(order),
                payload,
            )
        except Exception:
            logger.warning(
                "notification.failed",
                order_id=order.id,
                notification=payload.get("event"),
                exc_info=True,
            )
