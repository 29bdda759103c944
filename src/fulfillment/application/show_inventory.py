"""Application service: Show Inventory use case (query)."""

from __future__ import annotations

from fulfillment.application.dto import InventoryDTO, to_inventory_dto
from fulfillment.domain.exceptions import EntityNotFoundError
from fulfillment.domain.repository.unit_of_work import UnitOfWork


class ShowInventoryHandler:

    def __init__(self, uow: UnitOfWork) -> None:
        self._uow = uow

    def handle(self) -> list[InventoryDTO]:
        with self._uow:
            records = self._uow.inventory.list_all()
        return [to_inventory_dto(record) for record in records]

    def handle_one(self, product_id: str) -> InventoryDTO:
        with self._uow:
            record = self._uow.inventory.get_by_product_id(product_id)
        if record is None:
            raise EntityNotFoundError(f"Inventory for product '{product_id}' not found")
        return to_inventory_dto(record)
