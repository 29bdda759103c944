"""Abstract unit of work.

A unit of work is one database transaction.  Everything done through its
repositories between ``__enter__`` and ``commit()`` becomes durable
together; leaving the block without committing, or with an exception,
rolls all of it back.
"""

from __future__ import annotations

from abc import ABC, abstractmethod

from fulfillment.domain.repository.inventory_repository import InventoryRepository
from fulfillment.domain.repository.order_repository import OrderRepository


class UnitOfWork(ABC):

    orders: OrderRepository
    inventory: InventoryRepository

    def __enter__(self) -> UnitOfWork:
        return self

    def __exit__(self, exc_type, exc, tb) -> None:
        self.rollback()

    @abstractmethod
    def commit(self) -> None:
        """Make every change in this unit durable."""

    @abstractmethod
    def rollback(self) -> None:
        """Discard uncommitted changes.  A no-op after ``commit()``."""
