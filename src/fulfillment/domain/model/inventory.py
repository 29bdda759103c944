"""InventoryRecord aggregate: on-hand stock and reservations per product.

Each product has one InventoryRecord that knows how many units are
physically on hand (``quantity``) and how many of those are held against
orders that have not shipped yet (``reserved``).
"""

from __future__ import annotations

from dataclasses import dataclass, field
from datetime import datetime, timezone

from fulfillment.domain.exceptions import (
    InsufficientStockError,
    InvalidStateError,
    ValidationError,
)


def _now() -> datetime:
    return datetime.now(timezone.utc)


@dataclass
class InventoryRecord:
    """Aggregate root for inventory tracking.

    Invariants:
    - ``0 <= reserved <= quantity``
    - ``available_stock`` is always >= 0
    """

    product_id: str
    quantity: int
    reserved: int = 0
    last_updated: datetime = field(default_factory=_now)

    def __post_init__(self) -> None:
        if self.quantity < 0:
            raise InvalidStateError(
                f"Inventory quantity for product '{self.product_id}' cannot be negative"
            )
        if not 0 <= self.reserved <= self.quantity:
            raise InvalidStateError(
                f"Reserved units for product '{self.product_id}' must be between "
                f"0 and {self.quantity}, got {self.reserved}"
            )

    @property
    def available_stock(self) -> int:
        return self.quantity - self.reserved

    def can_supply(self, quantity: int) -> bool:
        return quantity <= self.available_stock

    def reserve(self, quantity: int) -> None:
        """Hold *quantity* units for an order that has not shipped yet."""
        self._require_positive(quantity, "Reservation")
        if not self.can_supply(quantity):
            raise InsufficientStockError(self.product_id, quantity, self.available_stock)
        self.reserved += quantity
        self._touch()

    def release(self, quantity: int) -> None:
        """Drop a reservation (order cancelled before shipment)."""
        self._require_positive(quantity, "Release")
        if quantity > self.reserved:
            raise InvalidStateError(
                f"Cannot release {quantity} of product '{self.product_id}' "
                f"- only {self.reserved} currently reserved"
            )
        self.reserved -= quantity
        self._touch()

    def commit(self, quantity: int) -> None:
        """Turn a reservation into a permanent decrement (order shipped).

        Both ``quantity`` and ``reserved`` decrease by the same amount.
        """
        self._require_positive(quantity, "Commit")
        if quantity > self.reserved:
            raise InvalidStateError(
                f"Cannot commit {quantity} of product '{self.product_id}' "
                f"- only {self.reserved} currently reserved"
            )
        if self.quantity - quantity < 0:
            raise InvalidStateError(
                f"Committing {quantity} of product '{self.product_id}' "
                f"would make on-hand quantity negative"
            )
        self.reserved -= quantity
        self.quantity -= quantity
        self._touch()

    def restock(self, quantity: int) -> None:
        """Return previously shipped units to sellable stock."""
        self._require_positive(quantity, "Restock")
        self.quantity += quantity
        self._touch()

    def set_quantity(self, quantity: int) -> None:
        """Correct the on-hand count.  Reservations are left untouched."""
        if quantity < 0:
            raise InvalidStateError("Inventory quantity cannot be negative")
        if quantity < self.reserved:
            raise InvalidStateError(
                f"Cannot set quantity of product '{self.product_id}' to {quantity} "
                f"- {self.reserved} units are reserved"
            )
        self.quantity = quantity
        self._touch()

    # --- Internal helpers -----------------------------------------------------

    @staticmethod
    def _require_positive(quantity: int, action: str) -> None:
        if quantity <= 0:
            raise ValidationError(f"{action} quantity must be positive")

    def _touch(self) -> None:
        self.last_updated = _now()
