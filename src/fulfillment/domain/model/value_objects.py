"""Immutable values used by orders and inventory.

Amounts, quantities and the snapshots frozen onto an order at checkout.
Constructors validate, so an instance is always well formed.  Snapshots
copy catalog and address data so later edits never rewrite order history.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from decimal import Decimal, InvalidOperation, ROUND_HALF_UP
from typing import Any

from fulfillment.domain.exceptions import ValidationError

DEFAULT_CURRENCY = "TWD"
_CENTS = Decimal("0.01")


@dataclass(frozen=True)
class Money:
    """A non-negative Decimal amount tagged with its currency."""

    amount: Decimal
    currency: str = DEFAULT_CURRENCY

    def __post_init__(self) -> None:
        if not isinstance(self.amount, Decimal):
            raise ValidationError(
                f"Money needs a Decimal amount, got {type(self.amount).__name__}"
            )
        if self.amount < 0:
            raise ValidationError(f"Money cannot be negative: {self.amount}")

    def __add__(self, other: Money) -> Money:
        self._same_currency(other)
        return Money(self.amount + other.amount, self.currency)

    def __sub__(self, other: Money) -> Money:
        self._same_currency(other)
        if other.amount > self.amount:
            raise ValidationError(
                f"Cannot subtract {other} from {self}: result would be negative"
            )
        return Money(self.amount - other.amount, self.currency)

    def __mul__(self, factor: int) -> Money:
        if isinstance(factor, bool) or not isinstance(factor, int):
            raise TypeError(f"Money can only be scaled by an int, not {type(factor).__name__}")
        return Money(self.amount * factor, self.currency)

    def capped_at(self, ceiling: Money) -> Money:
        """The smaller of this amount and *ceiling*."""
        self._same_currency(ceiling)
        return ceiling if self.amount > ceiling.amount else self

    def __str__(self) -> str:
        return f"{self.currency} {self.amount.quantize(_CENTS, ROUND_HALF_UP)}"

    def _same_currency(self, other: Money) -> None:
        if self.currency != other.currency:
            raise ValidationError(
                f"Currency mismatch: {self.currency} vs {other.currency}"
            )

    @staticmethod
    def of(amount: str | float | int | Decimal, currency: str = DEFAULT_CURRENCY) -> Money:
        """Build from anything ``Decimal(str(...))`` accepts."""
        try:
            return Money(Decimal(str(amount)), currency)
        except (InvalidOperation, ValueError) as exc:
            raise ValidationError(f"Not a money amount: {amount!r}") from exc

    @staticmethod
    def zero(currency: str = DEFAULT_CURRENCY) -> Money:
        return Money(Decimal("0"), currency)


@dataclass(frozen=True)
class Quantity:
    """Units of one product on an order line; always at least one."""

    value: int

    def __post_init__(self) -> None:
        if not isinstance(self.value, int) or isinstance(self.value, bool):
            raise ValidationError(
                f"Quantity needs an int, got {type(self.value).__name__}"
            )
        if self.value <= 0:
            raise ValidationError("Quantity must be positive")

    def __str__(self) -> str:
        return str(self.value)


@dataclass(frozen=True)
class AddressSnapshot:
    """Shipping address frozen onto an order at checkout time."""

    recipient_name: str
    phone: str
    city: str
    address_line1: str
    district: str | None = None
    postal_code: str | None = None
    address_line2: str | None = None

    def __post_init__(self) -> None:
        for name in ("recipient_name", "phone", "city", "address_line1"):
            value = getattr(self, name)
            if not value or not str(value).strip():
                raise ValidationError(f"Shipping address requires '{name}'")

    def to_dict(self) -> dict[str, Any]:
        return {
            "recipient_name": self.recipient_name,
            "phone": self.phone,
            "city": self.city,
            "district": self.district,
            "postal_code": self.postal_code,
            "address_line1": self.address_line1,
            "address_line2": self.address_line2,
        }

    @staticmethod
    def from_dict(raw: dict[str, Any]) -> AddressSnapshot:
        try:
            return AddressSnapshot(
                recipient_name=raw["recipient_name"],
                phone=raw["phone"],
                city=raw["city"],
                address_line1=raw["address_line1"],
                district=raw.get("district"),
                postal_code=raw.get("postal_code"),
                address_line2=raw.get("address_line2"),
            )
        except KeyError as exc:
            raise ValidationError(f"Shipping address requires '{exc.args[0]}'") from exc


@dataclass(frozen=True)
class ProductSnapshot:
    """Product display data frozen onto an order item."""

    product_id: str
    product_name: str
    price: Money
    store_id: str | None = None
    images: tuple[str, ...] = field(default_factory=tuple)

    def to_dict(self) -> dict[str, Any]:
        return {
            "product_id": self.product_id,
            "product_name": self.product_name,
            "price": str(self.price.amount),
            "currency": self.price.currency,
            "store_id": self.store_id,
            "images": list(self.images),
        }

    @staticmethod
    def from_dict(raw: dict[str, Any]) -> ProductSnapshot:
        return ProductSnapshot(
            product_id=str(raw["product_id"]),
            product_name=raw["product_name"],
            price=Money.of(raw["price"], raw.get("currency", DEFAULT_CURRENCY)),
            store_id=raw.get("store_id"),
            images=tuple(raw.get("images") or ()),
        )
