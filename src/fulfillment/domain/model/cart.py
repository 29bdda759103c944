"""Checkout inputs: live cart lines and saved cart snapshots.

Carts and the catalog live outside this package; these are the read
models the orchestrator needs from them.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any

from fulfillment.domain.exceptions import ValidationError
from fulfillment.domain.model.value_objects import Money, ProductSnapshot


@dataclass(frozen=True)
class ProductView:
    """Live catalog data for a product at the moment of checkout."""

    product_id: str
    name: str
    price: Money
    store_id: str | None = None
    images: tuple[str, ...] = field(default_factory=tuple)

    def snapshot(self) -> ProductSnapshot:
        return ProductSnapshot(
            product_id=self.product_id,
            product_name=self.name,
            price=self.price,
            store_id=self.store_id,
            images=self.images,
        )


@dataclass(frozen=True)
class CartLine:
    product: ProductView
    quantity: int
    selected: bool = True


@dataclass(frozen=True)
class CartSnapshotLine:
    product_id: str
    quantity: int


@dataclass(frozen=True)
class CartSnapshot:
    """A cart saved in order history, replayed by "buy again" flows."""

    lines: tuple[CartSnapshotLine, ...]

    @staticmethod
    def from_dict(raw: dict[str, Any]) -> CartSnapshot:
        """Parse ``{"items": [{"product_id": ..., "quantity": ...}, ...]}``.

        Items saved with a nested ``product`` object are accepted too.
        """
        lines: list[CartSnapshotLine] = []
        for item in raw.get("items") or []:
            product_id = item.get("product_id") or (item.get("product") or {}).get("product_id")
            if not product_id:
                raise ValidationError("Cart snapshot item is missing a product id")
            try:
                quantity = int(item.get("quantity", 1))
            except (TypeError, ValueError) as exc:
                raise ValidationError(
                    f"Invalid quantity in cart snapshot for product '{product_id}'"
                ) from exc
            lines.append(CartSnapshotLine(product_id=str(product_id), quantity=quantity))
        return CartSnapshot(lines=tuple(lines))
