"""Abstract repository for InventoryRecord aggregate."""

from __future__ import annotations

from abc import ABC, abstractmethod

from fulfillment.domain.model.inventory import InventoryRecord


class InventoryRepository(ABC):

    @abstractmethod
    def get_by_product_id(self, product_id: str) -> InventoryRecord | None:
        """Return the inventory record for a product, or None."""

    @abstractmethod
    def get_for_update(self, product_id: str) -> InventoryRecord | None:
        """Like ``get_by_product_id`` but locks the row until the transaction ends."""

    @abstractmethod
    def list_all(self) -> list[InventoryRecord]:
        """Return every inventory record."""

    @abstractmethod
    def add(self, record: InventoryRecord) -> None:
        """Persist a new inventory record."""

    @abstractmethod
    def save(self, record: InventoryRecord) -> None:
        """Persist changed counters of a record loaded for update.

        Raises ConcurrencyConflict if the row changed since it was read.
        """
