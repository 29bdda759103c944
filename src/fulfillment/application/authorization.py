"""Who may see or act on an order.

Seller ownership is resolved through an explicit store-directory lookup
rather than by walking order -> store -> seller relations.
"""

from __future__ import annotations

from fulfillment.application.dto import Actor
from fulfillment.application.ports import StoreDirectory
from fulfillment.domain.exceptions import EntityNotFoundError, ForbiddenError
from fulfillment.domain.model.order import Order
from fulfillment.domain.model.state_machine import ActorRole


def resolve_seller_id_for_order(order: Order, stores: StoreDirectory) -> str | None:
    owner = stores.owner_of(order.store_id)
    return owner.seller_id if owner is not None else None


class OrderAccessPolicy:

    def __init__(self, stores: StoreDirectory) -> None:
        self._stores = stores

    def ensure_can_access(self, actor: Actor, order: Order) -> None:
        """Raise unless *actor* may read and transition *order*.

        Buyers get NotFound for other buyers' orders so order ids do not
        leak; sellers get Forbidden for orders of stores they do not own.
        """
        if actor.role is ActorRole.BUYER:
            if order.user_id != actor.user_id:
                raise EntityNotFoundError(f"Order #{order.id} not found")
        elif actor.role is ActorRole.SELLER:
            seller_id = resolve_seller_id_for_order(order, self._stores)
            if actor.seller_id is None or seller_id != actor.seller_id:
                raise ForbiddenError(f"Order #{order.id} does not belong to your store")

    def store_for_seller(self, actor: Actor) -> str:
        if actor.role is not ActorRole.SELLER or actor.seller_id is None:
            raise ForbiddenError("Not a seller account")
        store_id = self._stores.store_of_seller(actor.seller_id)
        if store_id is None:
            raise EntityNotFoundError(f"No store found for seller '{actor.seller_id}'")
        return store_id
