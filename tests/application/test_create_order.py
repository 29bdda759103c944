"""Integration tests for checkout from the live cart."""

from decimal import Decimal

import pytest

from fulfillment.application.dto import CheckoutOptions
from fulfillment.application.create_order import CreateOrderHandler
from fulfillment.application.notifications import OrderNotifications
from fulfillment.application.ports import DiscountValidation
from fulfillment.domain.exceptions import (
    EmptySelectionError,
    EntityNotFoundError,
    InsufficientStockError,
    MissingAddressError,
    ValidationError,
)
from fulfillment.domain.model.cart import CartLine, ProductView
from fulfillment.domain.model.inventory import InventoryRecord
from fulfillment.domain.model.order import CASH_ON_DELIVERY, DiscountType
from fulfillment.domain.model.value_objects import AddressSnapshot, Money
from fulfillment.domain.service.order_numbers import SequentialOrderNumberGenerator
from fulfillment.domain.service.snapshot_builder import OrderSnapshotBuilder
from tests.fakes import (
    FailingNotifier,
    FakeAddressBook,
    FakeCartService,
    FakeDiscountService,
    FakeInventoryRepository,
    FakeStoreDirectory,
    FakeUnitOfWork,
    RecordingNotifier,
)

ADDRESS = AddressSnapshot(
    recipient_name="Amy Lin", phone="0912345678", city="Taipei", address_line1="No. 1, Sec. 1"
)
TEA = ProductView(product_id="p-tea", name="Oolong Tea", price=Money.of("120"), store_id="s-a")
MUG = ProductView(product_id="p-mug", name="Mug", price=Money.of("350"), store_id="s-a")
LAMP = ProductView(product_id="p-lamp", name="Desk Lamp", price=Money.of("900"), store_id="s-b")


def _setup(stock=None, cart_fails=False, notifier=None, discounts=None, discount_service=None):
    stock = stock or {"p-tea": 10, "p-mug": 5, "p-lamp": 3}
    uow = FakeUnitOfWork(inventory=FakeInventoryRepository([
        InventoryRecord(product_id=pid, quantity=qty) for pid, qty in stock.items()
    ]))
    carts = FakeCartService(fail_on_remove=cart_fails)
    addresses = FakeAddressBook()
    addresses.put("addr-1", "u-1", ADDRESS)
    stores = FakeStoreDirectory([("s-a", "seller-a", "u-sa"), ("s-b", "seller-b", "u-sb")])
    notifier = notifier or RecordingNotifier()
    handler = CreateOrderHandler(
        uow=uow,
        builder=OrderSnapshotBuilder(SequentialOrderNumberGenerator()),
        carts=carts,
        addresses=addresses,
        discounts=discount_service or FakeDiscountService(discounts),
        notifications=OrderNotifications(notifier, stores),
    )
    return handler, uow, carts, notifier


def _reserved(uow, product_id):
    return uow.inventory.get_by_product_id(product_id).reserved


class TestCreateOrderHappyPath:

    def test_single_store_checkout(self):
        handler, uow, carts, notifier = _setup()
        carts.put("u-1", [CartLine(TEA, 2), CartLine(MUG, 1)])

        [dto] = handler.handle("u-1", "addr-1")

        assert dto.status == "pending_payment"
        assert dto.store_id == "s-a"
        assert dto.subtotal == "590.00"
        assert dto.shipping_fee == "60.00"
        assert dto.total_amount == "650.00"
        assert dto.shipping_address["recipient_name"] == "Amy Lin"
        assert [i.product_name for i in dto.items] == ["Oolong Tea", "Mug"]
        assert _reserved(uow, "p-tea") == 2
        assert _reserved(uow, "p-mug") == 1
        assert uow.commits == 1

    def test_multi_store_checkout_creates_one_order_per_store(self):
        handler, uow, carts, notifier = _setup()
        carts.put("u-1", [CartLine(TEA, 2), CartLine(LAMP, 1)])

        orders = handler.handle("u-1", "addr-1")

        assert [o.store_id for o in orders] == ["s-a", "s-b"]
        assert orders[0].order_number != orders[1].order_number
        assert [o.total_amount for o in orders] == ["300.00", "960.00"]
        assert _reserved(uow, "p-tea") == 2
        assert _reserved(uow, "p-lamp") == 1
        assert uow.commits == 1

    def test_selected_items_removed_from_cart(self):
        handler, _, carts, _ = _setup()
        carts.put("u-1", [CartLine(TEA, 1), CartLine(MUG, 1, selected=False)])

        [dto] = handler.handle("u-1", "addr-1")

        assert [i.product_id for i in dto.items] == ["p-tea"]
        assert [line.product.product_id for line in carts.lines("u-1")] == ["p-mug"]

    def test_cash_on_delivery_orders_are_paid(self):
        handler, _, carts, _ = _setup()
        carts.put("u-1", [CartLine(TEA, 1)])

        [dto] = handler.handle("u-1", "addr-1", CheckoutOptions(payment_method=CASH_ON_DELIVERY))

        assert dto.status == "paid"
        assert dto.paid_at is not None

    def test_buyer_and_sellers_are_notified(self):
        handler, _, carts, notifier = _setup()
        carts.put("u-1", [CartLine(TEA, 1), CartLine(LAMP, 1)])

        handler.handle("u-1", "addr-1")

        assert [n["event"] for n in notifier.sent] == ["order_created", "order_created"]
        assert notifier.sent[0]["buyer_id"] == "u-1"
        assert notifier.sent[0]["seller_ids"] == ["u-sa"]
        assert notifier.sent[1]["seller_ids"] == ["u-sb"]


class TestCreateOrderAtomicity:

    def test_out_of_stock_in_second_store_rolls_back_everything(self):
        handler, uow, carts, notifier = _setup(stock={"p-tea": 10, "p-mug": 5, "p-lamp": 0})
        carts.put("u-1", [CartLine(TEA, 2), CartLine(LAMP, 1)])

        with pytest.raises(InsufficientStockError) as exc_info:
            handler.handle("u-1", "addr-1")

        assert exc_info.value.product_id == "p-lamp"
        assert uow.orders.all() == []
        assert _reserved(uow, "p-tea") == 0
        assert uow.commits == 0
        assert notifier.sent == []
        assert len(carts.lines("u-1")) == 2

    def test_missing_inventory_record_rolls_back(self):
        handler, uow, carts, _ = _setup(stock={"p-tea": 10})
        carts.put("u-1", [CartLine(TEA, 1), CartLine(MUG, 1)])

        with pytest.raises(EntityNotFoundError):
            handler.handle("u-1", "addr-1")

        assert uow.orders.all() == []
        assert _reserved(uow, "p-tea") == 0


class TestCreateOrderValidation:

    def test_empty_selection(self):
        handler, _, carts, _ = _setup()
        carts.put("u-1", [CartLine(TEA, 1, selected=False)])

        with pytest.raises(EmptySelectionError):
            handler.handle("u-1", "addr-1")

    def test_missing_address(self):
        handler, uow, carts, _ = _setup()
        carts.put("u-1", [CartLine(TEA, 1)])

        with pytest.raises(MissingAddressError):
            handler.handle("u-1", "addr-unknown")
        assert _reserved(uow, "p-tea") == 0

    def test_someone_elses_address(self):
        handler, _, carts, _ = _setup()
        carts.put("u-2", [CartLine(TEA, 1)])

        with pytest.raises(MissingAddressError):
            handler.handle("u-2", "addr-1")

    def test_no_address_id(self):
        handler, _, carts, _ = _setup()
        carts.put("u-1", [CartLine(TEA, 1)])

        with pytest.raises(MissingAddressError):
            handler.handle("u-1", None)


class TestCreateOrderDiscounts:

    def test_valid_discount_applied(self):
        handler, _, carts, _ = _setup(discounts={
            "SPRING": DiscountValidation(
                valid=True, amount=Decimal("59"), discount_id="d-1",
                discount_type=DiscountType.SEASONAL,
            ),
        })
        carts.put("u-1", [CartLine(TEA, 2), CartLine(MUG, 1)])

        [dto] = handler.handle("u-1", "addr-1", CheckoutOptions(discount_codes=("SPRING",)))

        assert dto.total_discount == "59.00"
        assert dto.total_amount == "591.00"
        assert [(d.discount_id, d.discount_type) for d in dto.discounts] == [("d-1", "seasonal")]

    def test_shipping_discount_capped(self):
        handler, _, carts, _ = _setup(discounts={
            "FREESHIP": DiscountValidation(
                valid=True, amount=Decimal("100"), discount_id="d-2",
                discount_type=DiscountType.SHIPPING,
            ),
        })
        carts.put("u-1", [CartLine(TEA, 1)])

        [dto] = handler.handle("u-1", "addr-1", CheckoutOptions(discount_codes=("FREESHIP",)))

        assert dto.total_discount == "60.00"
        assert dto.total_amount == "120.00"

    def test_invalid_code_aborts_checkout(self):
        handler, uow, carts, _ = _setup()
        carts.put("u-1", [CartLine(TEA, 1)])

        with pytest.raises(ValidationError, match="Discount code not found"):
            handler.handle("u-1", "addr-1", CheckoutOptions(discount_codes=("NOPE",)))

        assert uow.orders.all() == []
        assert _reserved(uow, "p-tea") == 0

    def test_capped_code_redeemed_once_for_whole_checkout(self):
        service = FakeDiscountService({
            "SPRING10": DiscountValidation(
                valid=True, amount=Decimal("50"), discount_id="d-1",
                discount_type=DiscountType.SEASONAL,
            ),
        })
        handler, _, carts, _ = _setup(discount_service=service)
        tea_set = ProductView(product_id="p-tea", name="Tea Set", price=Money.of("1000"), store_id="s-a")
        floor_lamp = ProductView(product_id="p-lamp", name="Floor Lamp", price=Money.of("1000"), store_id="s-b")
        carts.put("u-1", [CartLine(tea_set, 1), CartLine(floor_lamp, 1)])

        orders = handler.handle("u-1", "addr-1", CheckoutOptions(discount_codes=("SPRING10",)))

        assert service.calls == [("SPRING10", Decimal("2000"))]
        assert sorted(o.total_discount for o in orders) == ["25.00", "25.00"]
        assert sum(Decimal(o.total_discount) for o in orders) == Decimal("50")

    def test_store_scoped_code_lands_on_owning_store(self):
        handler, _, carts, _ = _setup(discounts={
            "LAMPDAY": DiscountValidation(
                valid=True, amount=Decimal("100"), discount_id="d-3",
                discount_type=DiscountType.SPECIAL, store_id="s-b",
            ),
        })
        carts.put("u-1", [CartLine(TEA, 2), CartLine(LAMP, 1)])

        orders = handler.handle("u-1", "addr-1", CheckoutOptions(discount_codes=("LAMPDAY",)))

        discounts = {o.store_id: o.total_discount for o in orders}
        assert discounts == {"s-a": "0.00", "s-b": "100.00"}

    def test_store_scoped_code_for_absent_store_rejected(self):
        handler, uow, carts, _ = _setup(discounts={
            "LAMPDAY": DiscountValidation(
                valid=True, amount=Decimal("100"), discount_id="d-3",
                discount_type=DiscountType.SPECIAL, store_id="s-b",
            ),
        })
        carts.put("u-1", [CartLine(TEA, 1)])

        with pytest.raises(ValidationError, match="does not apply to any store"):
            handler.handle("u-1", "addr-1", CheckoutOptions(discount_codes=("LAMPDAY",)))

        assert uow.orders.all() == []
        assert _reserved(uow, "p-tea") == 0

    def test_two_codes_of_one_type_rejected(self):
        seasonal = DiscountValidation(
            valid=True, amount=Decimal("10"), discount_id="d-1",
            discount_type=DiscountType.SEASONAL,
        )
        handler, uow, carts, _ = _setup(discounts={"A": seasonal, "B": seasonal})
        carts.put("u-1", [CartLine(TEA, 1)])

        with pytest.raises(ValidationError, match="Only one seasonal discount"):
            handler.handle("u-1", "addr-1", CheckoutOptions(discount_codes=("A", "B")))

        assert uow.orders.all() == []


class TestCreateOrderIdempotency:

    def test_retry_with_same_key_returns_original_orders(self):
        handler, uow, carts, _ = _setup()
        carts.put("u-1", [CartLine(TEA, 2), CartLine(LAMP, 1)])
        options = CheckoutOptions(idempotency_key="k-1")

        first = handler.handle("u-1", "addr-1", options)
        carts.put("u-1", [CartLine(TEA, 2), CartLine(LAMP, 1)])
        second = handler.handle("u-1", "addr-1", options)

        assert [o.order_id for o in second] == [o.order_id for o in first]
        assert len(uow.orders.all()) == 2
        assert _reserved(uow, "p-tea") == 2

    def test_key_from_another_buyer_rejected(self):
        handler, _, carts, _ = _setup()
        carts.put("u-1", [CartLine(TEA, 1)])
        handler.handle("u-1", "addr-1", CheckoutOptions(idempotency_key="k-1"))

        with pytest.raises(ValidationError, match="Idempotency key"):
            handler.handle("u-2", "addr-1", CheckoutOptions(idempotency_key="k-1"))

    def test_key_that_prefixes_a_stored_key_is_not_a_replay(self):
        handler, uow, carts, _ = _setup()
        carts.put("u-1", [CartLine(TEA, 1)])
        [first] = handler.handle("u-1", "addr-1", CheckoutOptions(idempotency_key="a:x"))

        carts.put("u-1", [CartLine(TEA, 1)])
        [second] = handler.handle("u-1", "addr-1", CheckoutOptions(idempotency_key="a"))

        assert second.order_id != first.order_id
        assert len(uow.orders.all()) == 2
        assert _reserved(uow, "p-tea") == 2


class TestCreateOrderPostCommitFailures:

    def test_cart_cleanup_failure_does_not_fail_checkout(self):
        handler, uow, carts, _ = _setup(cart_fails=True)
        carts.put("u-1", [CartLine(TEA, 1)])

        orders = handler.handle("u-1", "addr-1")

        assert len(orders) == 1
        assert len(uow.orders.all()) == 1

    def test_notification_failure_does_not_fail_checkout(self):
        notifier = FailingNotifier()
        handler, uow, carts, _ = _setup(notifier=notifier)
        carts.put("u-1", [CartLine(TEA, 1), CartLine(LAMP, 1)])

        orders = handler.handle("u-1", "addr-1")

        assert len(orders) == 2
        assert notifier.attempts == 2
        assert uow.commits == 1
