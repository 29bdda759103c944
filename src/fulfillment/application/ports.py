"""Collaborator interfaces the order core depends on.

Carts, addresses, discounts, the catalog, store ownership and
notification delivery are owned by other services.  The application
layer talks to them only through these narrow abstractions; concrete
adapters live in the infrastructure layer.
"""

from __future__ import annotations

from abc import ABC, abstractmethod
from dataclasses import dataclass
from decimal import Decimal
from typing import Any

from fulfillment.domain.model.cart import CartLine, ProductView
from fulfillment.domain.model.order import DiscountType
from fulfillment.domain.model.value_objects import AddressSnapshot


class CartService(ABC):

    @abstractmethod
    def get_selected_lines(self, buyer_id: str) -> list[CartLine]:
        """Return the buyer's selected cart lines with live product data."""

    @abstractmethod
    def remove_selected_items(self, buyer_id: str) -> None:
        """Remove the buyer's selected lines from the cart."""


class AddressBook(ABC):

    @abstractmethod
    def resolve_address(self, address_id: str, buyer_id: str) -> AddressSnapshot | None:
        """Return the buyer's address, or None if it is missing or not theirs."""


@dataclass(frozen=True)
class DiscountValidation:
    valid: bool
    amount: Decimal = Decimal("0")
    reason: str | None = None
    discount_id: str | None = None
    discount_type: DiscountType | None = None
    # Set when the discount belongs to a single store.
    store_id: str | None = None


class DiscountService(ABC):

    @abstractmethod
    def validate(self, code: str, order_amount: Decimal) -> DiscountValidation:
        """Check *code* against a checkout whose subtotal is *order_amount*."""


class ProductCatalog(ABC):

    @abstractmethod
    def get_product(self, product_id: str) -> ProductView | None:
        """Return live product data, or None if the product no longer exists."""


@dataclass(frozen=True)
class StoreOwner:
    seller_id: str
    user_id: str


class StoreDirectory(ABC):

    @abstractmethod
    def owner_of(self, store_id: str) -> StoreOwner | None:
        """Return the seller owning *store_id*, or None."""

    @abstractmethod
    def store_of_seller(self, seller_id: str) -> str | None:
        """Return the id of the store run by *seller_id*, or None."""


class Notifier(ABC):

    @abstractmethod
    def notify(
        self,
        order_id: int,
        buyer_id: str,
        seller_ids: list[str],
        payload: dict[str, Any],
    ) -> None:
        """Deliver an order notification.  May raise; callers treat it as best-effort."""
