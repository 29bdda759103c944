"""Application service: Show / List Orders use cases (queries)."""

from __future__ import annotations

from datetime import datetime

from fulfillment.application.authorization import OrderAccessPolicy
from fulfillment.application.dto import Actor, OrderDTO, OrderPageDTO, to_order_dto
from fulfillment.domain.exceptions import EntityNotFoundError, ValidationError
from fulfillment.domain.model.state_machine import ActorRole, OrderStatus
from fulfillment.domain.repository.order_repository import OrderQuery
from fulfillment.domain.repository.unit_of_work import UnitOfWork

MAX_PAGE_SIZE = 100


class ShowOrderHandler:

    def __init__(self, uow: UnitOfWork, access: OrderAccessPolicy) -> None:
        self._uow = uow
        self._access = access

    def handle(self, order_id: int, actor: Actor) -> OrderDTO:
        with self._uow:
            order = self._uow.orders.get_by_id(order_id)
        if order is None:
            raise EntityNotFoundError(f"Order #{order_id} not found")
        self._access.ensure_can_access(actor, order)
        return to_order_dto(order)


class ListOrdersHandler:
    """Paged order listing scoped by the actor's role.

    Buyers see their own orders, sellers the orders of their store,
    administrators everything (with order-number search and date range).
    """

    def __init__(self, uow: UnitOfWork, access: OrderAccessPolicy) -> None:
        self._uow = uow
        self._access = access

    def handle(
        self,
        actor: Actor,
        status: OrderStatus | None = None,
        store_id: str | None = None,
        search: str | None = None,
        created_from: datetime | None = None,
        created_to: datetime | None = None,
        page: int = 1,
        limit: int = 10,
    ) -> OrderPageDTO:
        if page < 1:
            raise ValidationError("Page must be 1 or greater")
        if not 1 <= limit <= MAX_PAGE_SIZE:
            raise ValidationError(f"Limit must be between 1 and {MAX_PAGE_SIZE}")

        if actor.role is ActorRole.BUYER:
            query = OrderQuery(
                user_id=actor.user_id, store_id=store_id, status=status,
                page=page, limit=limit,
            )
        elif actor.role is ActorRole.SELLER:
            query = OrderQuery(
                store_id=self._access.store_for_seller(actor), status=status,
                search=search, page=page, limit=limit,
            )
        else:
            query = OrderQuery(
                store_id=store_id, status=status, search=search,
                created_from=created_from, created_to=created_to,
                page=page, limit=limit,
            )

        with self._uow:
            orders, total = self._uow.orders.search(query)
        return OrderPageDTO(
            data=[to_order_dto(order) for order in orders],
            total=total,
            page=page,
            limit=limit,
        )
