"""Application service: order status transitions.

Every transition is one unit of work: lock the order, check the actor may
see it, let the Order aggregate validate the edge for the actor's role,
apply the inventory side effect the edge requires, commit.  The
notification goes out only after the commit.
"""

from __future__ import annotations

import structlog

from fulfillment.application.authorization import OrderAccessPolicy
from fulfillment.application.dto import Actor, OrderDTO, to_order_dto
from fulfillment.application.notifications import OrderNotifications
from fulfillment.domain.exceptions import EntityNotFoundError, ForbiddenError, ValidationError
from fulfillment.domain.model.order import Order
from fulfillment.domain.model.state_machine import ActorRole, InventoryEffect, OrderStatus
from fulfillment.domain.repository.unit_of_work import UnitOfWork
from fulfillment.domain.service.inventory_ledger import InventoryLedger

logger = structlog.get_logger(__name__)


class ChangeOrderStatusHandler:

    def __init__(
        self,
        uow: UnitOfWork,
        access: OrderAccessPolicy,
        notifications: OrderNotifications,
    ) -> None:
        self._uow = uow
        self._access = access
        self._notifications = notifications

    def handle(
        self,
        order_id: int,
        actor: Actor,
        new_status: OrderStatus,
        reason: str | None = None,
    ) -> OrderDTO:
        with self._uow:
            order = self._uow.orders.get_for_update(order_id)
            if order is None:
                raise EntityNotFoundError(f"Order #{order_id} not found")
            self._access.ensure_can_access(actor, order)

            previous = order.status
            effect = order.transition_to(new_status, actor.role)
            self._apply_inventory_effect(effect, order)

            self._uow.orders.save(order)
            self._uow.commit()

        logger.info(
            "order.transitioned",
            order_id=order_id,
            order_number=order.order_number,
            previous_status=previous.value,
            status=order.status.value,
            actor_role=actor.role.value,
            inventory_effect=effect.value,
        )
        self._notifications.status_changed(order, previous, actor, reason)
        return to_order_dto(order)

    def _apply_inventory_effect(self, effect: InventoryEffect, order: Order) -> None:
        ledger = InventoryLedger(self._uow.inventory)
        if effect is InventoryEffect.COMMIT:
            ledger.commit_lines(order.ledger_lines)
        elif effect is InventoryEffect.RELEASE:
            ledger.release_lines(order.ledger_lines)
        elif effect is InventoryEffect.RESTOCK:
            ledger.restock_lines(order.ledger_lines)


class CancelOrderHandler:
    """Buyer or seller cancellation, limited by the actor's transition table."""

    def __init__(self, change_status: ChangeOrderStatusHandler) -> None:
        self._change_status = change_status

    def handle(self, order_id: int, actor: Actor) -> OrderDTO:
        return self._change_status.handle(order_id, actor, OrderStatus.CANCELLED)


class AdminCancelOrderHandler:
    """Administrator force-cancel.

    The reason travels with the notification; it is not stored on the order.
    """

    def __init__(self, change_status: ChangeOrderStatusHandler) -> None:
        self._change_status = change_status

    def handle(self, order_id: int, actor: Actor, reason: str) -> OrderDTO:
        if actor.role is not ActorRole.ADMIN:
            raise ForbiddenError("Only administrators can force-cancel orders")
        if not reason or not reason.strip():
            raise ValidationError("A cancellation reason is required")
        return self._change_status.handle(
            order_id, actor, OrderStatus.CANCELLED, reason=reason.strip()
        )


class RecordPaymentHandler:
    """Payment outcome reported by the payment side (PAID or PAYMENT_FAILED)."""

    def __init__(self, change_status: ChangeOrderStatusHandler) -> None:
        self._change_status = change_status

    def handle(self, order_id: int, succeeded: bool) -> OrderDTO:
        target = OrderStatus.PAID if succeeded else OrderStatus.PAYMENT_FAILED
        return self._change_status.handle(order_id, Actor.system(), target)
