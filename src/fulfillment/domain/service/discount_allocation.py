"""Domain service: split one checkout-wide discount across store orders.

A code is redeemed once per checkout, so its amount is shared between
the orders in proportion to what each order contributes to the discount
base (its subtotal, or its shipping fee for shipping discounts).
"""

from __future__ import annotations

from collections.abc import Sequence
from decimal import ROUND_DOWN, Decimal

_CENT = Decimal("0.01")


def allocate_discount(amount: Decimal, weights: Sequence[Decimal]) -> list[Decimal]:
    """Shares of *amount* proportional to *weights*, in whole cents.

    Shares are rounded down; the leftover cents go to the heaviest weight
    so the shares always add up to *amount*.
    """
    if not weights:
        return []
    total = sum(weights, Decimal("0"))
    if total <= 0:
        return [Decimal("0")] * len(weights)

    shares = [(amount * weight / total).quantize(_CENT, rounding=ROUND_DOWN) for weight in weights]
    heaviest = max(range(len(weights)), key=lambda i: weights[i])
    shares[heaviest] += amount - sum(shares, Decimal("0"))
    return shares
