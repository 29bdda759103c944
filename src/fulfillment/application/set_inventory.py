"""Application service: Set Inventory use case.

Sellers may correct stock counts of their own store's products only;
administrators may correct any product.  A product without an inventory
record gets one created.
"""

from __future__ import annotations

import structlog

from fulfillment.application.dto import Actor, InventoryDTO, to_inventory_dto
from fulfillment.application.ports import ProductCatalog, StoreDirectory
from fulfillment.domain.exceptions import EntityNotFoundError, ForbiddenError
from fulfillment.domain.model.state_machine import ActorRole
from fulfillment.domain.repository.unit_of_work import UnitOfWork
from fulfillment.domain.service.inventory_ledger import InventoryLedger

logger = structlog.get_logger(__name__)


class SetInventoryHandler:

    def __init__(
        self,
        uow: UnitOfWork,
        catalog: ProductCatalog,
        stores: StoreDirectory,
    ) -> None:
        self._uow = uow
        self._catalog = catalog
        self._stores = stores

    def handle(self, actor: Actor, product_id: str, quantity: int) -> InventoryDTO:
        """Set the on-hand quantity for a product."""
        self._ensure_may_manage(actor, product_id)

        with self._uow:
            ledger = InventoryLedger(self._uow.inventory)
            if self._uow.inventory.get_by_product_id(product_id) is None:
                record = ledger.create_for_product(product_id, quantity)
            else:
                record = ledger.update_quantity(product_id, quantity)
            self._uow.commit()

        logger.info(
            "inventory.quantity_set",
            product_id=product_id,
            quantity=quantity,
            actor_role=actor.role.value,
        )
        return to_inventory_dto(record)

    def _ensure_may_manage(self, actor: Actor, product_id: str) -> None:
        product = self._catalog.get_product(product_id)
        if product is None:
            raise EntityNotFoundError(f"Product not found: '{product_id}'")
        if actor.role is ActorRole.ADMIN:
            return
        if actor.role is not ActorRole.SELLER:
            raise ForbiddenError("Only sellers and administrators can change stock")
        owner = self._stores.owner_of(product.store_id) if product.store_id else None
        if owner is None or owner.seller_id != actor.seller_id:
            raise ForbiddenError(f"Product '{product_id}' does not belong to your store")
