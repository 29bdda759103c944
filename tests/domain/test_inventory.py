"""Unit tests for the InventoryRecord aggregate."""

import pytest

from fulfillment.domain.exceptions import (
    InsufficientStockError,
    InvalidStateError,
    ValidationError,
)
from fulfillment.domain.model.inventory import InventoryRecord


class TestInventoryRecordInvariants:

    def test_negative_quantity_rejected(self):
        with pytest.raises(InvalidStateError, match="cannot be negative"):
            InventoryRecord(product_id="p-1", quantity=-1)

    def test_reserved_above_quantity_rejected(self):
        with pytest.raises(InvalidStateError, match="must be between"):
            InventoryRecord(product_id="p-1", quantity=5, reserved=6)

    def test_available_stock(self):
        inv = InventoryRecord(product_id="p-1", quantity=10, reserved=4)
        assert inv.available_stock == 6
        assert inv.can_supply(6)
        assert not inv.can_supply(7)


class TestInventoryRecordReserve:

    def test_reserve_increases_reserved(self):
        inv = InventoryRecord(product_id="p-1", quantity=10)
        inv.reserve(3)
        assert inv.reserved == 3
        assert inv.quantity == 10
        assert inv.available_stock == 7

    def test_reserve_all_available(self):
        inv = InventoryRecord(product_id="p-1", quantity=10, reserved=4)
        inv.reserve(6)
        assert inv.available_stock == 0

    def test_reserve_more_than_available_rejected(self):
        inv = InventoryRecord(product_id="p-1", quantity=10, reserved=8)
        with pytest.raises(InsufficientStockError) as exc_info:
            inv.reserve(3)
        assert exc_info.value.product_id == "p-1"
        assert exc_info.value.requested == 3
        assert exc_info.value.available == 2
        assert inv.reserved == 8

    @pytest.mark.parametrize("qty", [0, -5])
    def test_non_positive_rejected(self, qty):
        inv = InventoryRecord(product_id="p-1", quantity=10)
        with pytest.raises(ValidationError, match="must be positive"):
            inv.reserve(qty)

    def test_reserve_touches_last_updated(self):
        inv = InventoryRecord(product_id="p-1", quantity=10)
        before = inv.last_updated
        inv.reserve(1)
        assert inv.last_updated >= before


class TestInventoryRecordRelease:

    def test_release_decreases_reserved_only(self):
        inv = InventoryRecord(product_id="p-1", quantity=10, reserved=5)
        inv.release(2)
        assert inv.reserved == 3
        assert inv.quantity == 10

    def test_release_more_than_reserved_rejected(self):
        inv = InventoryRecord(product_id="p-1", quantity=10, reserved=2)
        with pytest.raises(InvalidStateError, match="only 2 currently reserved"):
            inv.release(3)


class TestInventoryRecordCommit:

    def test_commit_decrements_both_counters(self):
        inv = InventoryRecord(product_id="p-1", quantity=10, reserved=3)
        inv.commit(3)
        assert inv.quantity == 7
        assert inv.reserved == 0
        assert inv.available_stock == 7

    def test_commit_more_than_reserved_rejected(self):
        inv = InventoryRecord(product_id="p-1", quantity=10, reserved=1)
        with pytest.raises(InvalidStateError):
            inv.commit(2)
        assert inv.quantity == 10


class TestInventoryRecordRestockAndSet:

    def test_restock_adds_to_quantity(self):
        inv = InventoryRecord(product_id="p-1", quantity=7)
        inv.restock(3)
        assert inv.quantity == 10
        assert inv.reserved == 0

    def test_set_quantity_keeps_reservations(self):
        inv = InventoryRecord(product_id="p-1", quantity=10, reserved=4)
        inv.set_quantity(20)
        assert inv.quantity == 20
        assert inv.reserved == 4

    def test_set_quantity_below_reserved_rejected(self):
        inv = InventoryRecord(product_id="p-1", quantity=10, reserved=4)
        with pytest.raises(InvalidStateError, match="4 units are reserved"):
            inv.set_quantity(3)

    def test_set_negative_quantity_rejected(self):
        inv = InventoryRecord(product_id="p-1", quantity=10)
        with pytest.raises(InvalidStateError, match="cannot be negative"):
            inv.set_quantity(-1)
