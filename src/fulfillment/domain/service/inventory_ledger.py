"""Domain service: Inventory Ledger.

The only component allowed to change ``quantity`` and ``reserved``.
Every operation reads the product's record for update, lets the
InventoryRecord aggregate enforce its invariants, then writes the
counters back in one conditional update.  Callers provide the
transaction (a unit of work); the ledger never commits on its own.
"""

from __future__ import annotations

from collections.abc import Iterable

import structlog

from fulfillment.domain.exceptions import EntityNotFoundError, ValidationError
from fulfillment.domain.model.inventory import InventoryRecord
from fulfillment.domain.repository.inventory_repository import InventoryRepository

logger = structlog.get_logger(__name__)


class InventoryLedger:

    def __init__(self, inventory_repo: InventoryRepository) -> None:
        self._inventory_repo = inventory_repo

    # --- Queries --------------------------------------------------------------

    def get_available_stock(self, product_id: str) -> int:
        return self._get(product_id).available_stock

    def check_stock_availability(self, product_id: str, requested_qty: int) -> bool:
        return self._get(product_id).can_supply(requested_qty)

    # --- Commands -------------------------------------------------------------

    def create_for_product(self, product_id: str, initial_quantity: int = 0) -> InventoryRecord:
        if self._inventory_repo.get_by_product_id(product_id) is not None:
            raise ValidationError(f"Inventory for product '{product_id}' already exists")
        record = InventoryRecord(product_id=product_id, quantity=initial_quantity)
        self._inventory_repo.add(record)
        logger.debug("inventory.created", product_id=product_id, quantity=initial_quantity)
        return record

    def reserve_stock(self, product_id: str, qty: int) -> InventoryRecord:
        record = self._get_for_update(product_id)
        record.reserve(qty)
        return self._save(record, "reserve", qty)

    def release_reserved(self, product_id: str, qty: int) -> InventoryRecord:
        record = self._get_for_update(product_id)
        record.release(qty)
        return self._save(record, "release", qty)

    def commit_reserved(self, product_id: str, qty: int) -> InventoryRecord:
        record = self._get_for_update(product_id)
        record.commit(qty)
        return self._save(record, "commit", qty)

    def restock(self, product_id: str, qty: int) -> InventoryRecord:
        record = self._get_for_update(product_id)
        record.restock(qty)
        return self._save(record, "restock", qty)

    def update_quantity(self, product_id: str, new_qty: int) -> InventoryRecord:
        record = self._get_for_update(product_id)
        record.set_quantity(new_qty)
        return self._save(record, "set_quantity", new_qty)

    # --- Bulk helpers used by order transitions -------------------------------

    def reserve_lines(self, lines: Iterable[tuple[str, int]]) -> None:
        for product_id, qty in lines:
            self.reserve_stock(product_id, qty)

    def release_lines(self, lines: Iterable[tuple[str, int]]) -> None:
        for product_id, qty in lines:
            self.release_reserved(product_id, qty)

    def commit_lines(self, lines: Iterable[tuple[str, int]]) -> None:
        for product_id, qty in lines:
            self.commit_reserved(product_id, qty)

    def restock_lines(self, lines: Iterable[tuple[str, int]]) -> None:
        for product_id, qty in lines:
            self.restock(product_id, qty)

    # --- Internal helpers -----------------------------------------------------

    def _get(self, product_id: str) -> InventoryRecord:
        record = self._inventory_repo.get_by_product_id(product_id)
        if record is None:
            raise EntityNotFoundError(f"Inventory for product '{product_id}' not found")
        return record

    def _get_for_update(self, product_id: str) -> InventoryRecord:
        record = self._inventory_repo.get_for_update(product_id)
        if record is None:
            raise EntityNotFoundError(f"Inventory for product '{product_id}' not found")
        return record

    def _save(self, record: InventoryRecord, operation: str, qty: int) -> InventoryRecord:
        self._inventory_repo.save(record)
        logger.debug(
            "inventory.updated",
            operation=operation,
            product_id=record.product_id,
            qty=qty,
            quantity=record.quantity,
            reserved=record.reserved,
        )
        return record
