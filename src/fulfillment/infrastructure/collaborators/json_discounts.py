"""JSON-file-backed discount code validation.

Each entry looks like::

    {
      "code": "SPRING10", "discount_id": "d-1", "type": "seasonal",
      "rate": "0.10", "max_discount_amount": "200",
      "min_purchase_amount": "500", "is_active": true,
      "start": "2026-03-01T00:00:00+00:00", "end": "2026-06-01T00:00:00+00:00",
      "usage_limit": 100, "usage_count": 3
    }

Shipping discounts carry a fixed ``amount`` instead of a ``rate``.  Special
discounts may name the ``store_id`` they belong to.
"""

from __future__ import annotations

import json
from collections.abc import Callable
from datetime import datetime, timezone
from decimal import ROUND_FLOOR, Decimal
from pathlib import Path

from fulfillment.application.ports import DiscountService, DiscountValidation
from fulfillment.domain.model.order import DiscountType


def _now() -> datetime:
    return datetime.now(timezone.utc)


class JsonDiscountService(DiscountService):

    def __init__(self, file_path: Path, clock: Callable[[], datetime] = _now) -> None:
        self._file_path = file_path
        self._clock = clock
        if not self._file_path.exists():
            self._file_path.parent.mkdir(parents=True, exist_ok=True)
            self._file_path.write_text("[]", encoding="utf-8")

    def validate(self, code: str, order_amount: Decimal) -> DiscountValidation:
        raw = self._find(code)
        if raw is None:
            return DiscountValidation(valid=False, reason="Discount code not found")
        if not raw.get("is_active", True):
            return DiscountValidation(valid=False, reason="Discount is not active")

        now = self._clock()
        if raw.get("start") and now < datetime.fromisoformat(raw["start"]):
            return DiscountValidation(valid=False, reason="Discount has not started yet")
        if raw.get("end") and now > datetime.fromisoformat(raw["end"]):
            return DiscountValidation(valid=False, reason="Discount has expired")

        minimum = Decimal(str(raw.get("min_purchase_amount", "0")))
        if order_amount < minimum:
            return DiscountValidation(
                valid=False, reason=f"Minimum purchase amount is {minimum}"
            )

        limit = raw.get("usage_limit")
        if limit and raw.get("usage_count", 0) >= limit:
            return DiscountValidation(valid=False, reason="Discount usage limit reached")

        discount_type = DiscountType(raw["type"])
        return DiscountValidation(
            valid=True,
            amount=self._amount(raw, discount_type, order_amount),
            discount_id=str(raw.get("discount_id", code)),
            discount_type=discount_type,
            store_id=str(raw["store_id"]) if raw.get("store_id") else None,
        )

    @staticmethod
    def _amount(raw: dict, discount_type: DiscountType, order_amount: Decimal) -> Decimal:
        if discount_type is DiscountType.SHIPPING:
            return Decimal(str(raw.get("amount", "0")))
        amount = order_amount * Decimal(str(raw.get("rate", "0")))
        if raw.get("max_discount_amount") is not None:
            amount = min(amount, Decimal(str(raw["max_discount_amount"])))
        # Whole currency units, rounded down.
        return amount.to_integral_value(rounding=ROUND_FLOOR)

    def _find(self, code: str) -> dict | None:
        for raw in json.loads(self._file_path.read_text(encoding="utf-8")):
            if raw["code"] == code:
                return raw
        return None
