"""Abstract repository for Order aggregate."""

from __future__ import annotations

from abc import ABC, abstractmethod
from dataclasses import dataclass
from datetime import datetime

from fulfillment.domain.model.order import Order
from fulfillment.domain.model.state_machine import OrderStatus


@dataclass(frozen=True)
class OrderQuery:
    """Filters shared by the buyer, seller and admin order listings."""

    user_id: str | None = None
    store_id: str | None = None
    status: OrderStatus | None = None
    search: str | None = None  # substring of the order number
    created_from: datetime | None = None
    created_to: datetime | None = None
    page: int = 1
    limit: int = 10

    @property
    def offset(self) -> int:
        return (self.page - 1) * self.limit


class OrderRepository(ABC):

    @abstractmethod
    def get_by_id(self, order_id: int) -> Order | None:
        """Return an order by its ID, or None if not found."""

    @abstractmethod
    def get_for_update(self, order_id: int) -> Order | None:
        """Like ``get_by_id`` but locks the order row until the transaction ends."""

    @abstractmethod
    def find_by_idempotency_key(self, key: str) -> list[Order]:
        """Return the orders created by the checkout carrying *key*."""

    @abstractmethod
    def search(self, query: OrderQuery) -> tuple[list[Order], int]:
        """Return one page of matching orders (newest first) and the total count."""

    @abstractmethod
    def add(self, order: Order) -> None:
        """Persist a new order with its items and discounts, assigning ids."""

    @abstractmethod
    def save(self, order: Order) -> None:
        """Persist status and timestamp changes of an existing order."""
