"""Application service: Create Order use cases (checkout).

Turns a buyer's selection into one Order per store.  Stock reservation,
order rows, items and discounts for every store are written in a single
unit of work: if any store's reservation fails, nothing from the whole
checkout is persisted.  Cart cleanup and notifications happen only after
the commit and never undo it.
"""

from __future__ import annotations

from collections.abc import Sequence
from decimal import Decimal

import structlog

from fulfillment.application.dto import CheckoutOptions, OrderDTO, to_order_dto
from fulfillment.application.notifications import OrderNotifications
from fulfillment.application.ports import (
    AddressBook,
    CartService,
    DiscountService,
    ProductCatalog,
)
from fulfillment.domain.exceptions import (
    EmptySelectionError,
    EntityNotFoundError,
    MissingAddressError,
    ValidationError,
)
from fulfillment.domain.model.cart import CartLine, CartSnapshot
from fulfillment.domain.model.order import DiscountType, Order
from fulfillment.domain.model.value_objects import AddressSnapshot, Money
from fulfillment.domain.repository.unit_of_work import UnitOfWork
from fulfillment.domain.service.discount_allocation import allocate_discount
from fulfillment.domain.service.inventory_ledger import InventoryLedger
from fulfillment.domain.service.snapshot_builder import (
    OrderSnapshotBuilder,
    group_lines_by_store,
)

logger = structlog.get_logger(__name__)


class _CheckoutHandler:
    """Shared per-store grouping, reservation and persistence."""

    def __init__(
        self,
        uow: UnitOfWork,
        builder: OrderSnapshotBuilder,
        discounts: DiscountService,
        notifications: OrderNotifications,
    ) -> None:
        self._uow = uow
        self._builder = builder
        self._discounts = discounts
        self._notifications = notifications

    def _replay(self, buyer_id: str, idempotency_key: str | None) -> list[OrderDTO] | None:
        """Return the orders of an earlier checkout sent with the same key."""
        if not idempotency_key:
            return None
        with self._uow:
            orders = self._uow.orders.find_by_idempotency_key(idempotency_key)
        if not orders:
            return None
        if any(order.user_id != buyer_id for order in orders):
            raise ValidationError("Idempotency key was already used by another checkout")
        logger.info(
            "checkout.replayed",
            buyer_id=buyer_id,
            order_numbers=[o.order_number for o in orders],
        )
        return [to_order_dto(order) for order in orders]

    def _place_orders(
        self,
        buyer_id: str,
        lines: Sequence[CartLine],
        address: AddressSnapshot,
        options: CheckoutOptions,
    ) -> list[Order]:
        """Create one order per store in a single transaction.

        Steps:
        1. Group lines by the product's store.
        2. Per store, build the order at live prices and reserve stock for
           every line (InsufficientStock aborts the whole checkout).
        3. Validate each discount code once against the whole checkout and
           share it between the orders it applies to.
        4. Persist every order, then commit once for all stores.
        """
        groups = group_lines_by_store(lines)

        with self._uow:
            ledger = InventoryLedger(self._uow.inventory)
            pending: list[Order] = []

            for store_id, store_lines in groups.items():
                order = self._builder.build(
                    user_id=buyer_id,
                    store_id=store_id,
                    lines=store_lines,
                    shipping_address=address,
                    payment_method=options.payment_method,
                    notes=options.notes,
                    idempotency_key=options.idempotency_key,
                )
                ledger.reserve_lines(order.ledger_lines)
                pending.append(order)

            self._apply_discounts(pending, options.discount_codes)
            for order in pending:
                self._uow.orders.add(order)
            order_ids = [order.id for order in pending]

            self._uow.commit()
            orders = [self._uow.orders.get_by_id(order_id) for order_id in order_ids]

        created = [order for order in orders if order is not None]
        logger.info(
            "checkout.completed",
            buyer_id=buyer_id,
            order_numbers=[o.order_number for o in created],
            store_ids=[o.store_id for o in created],
        )
        for order in created:
            self._notifications.order_created(order)
        return created

    def _apply_discounts(self, orders: Sequence[Order], codes: Sequence[str]) -> None:
        checkout_subtotal = sum((order.subtotal.amount for order in orders), Decimal("0"))
        seen_types: set[DiscountType] = set()

        for code in codes:
            result = self._discounts.validate(code, checkout_subtotal)
            if not result.valid:
                raise ValidationError(
                    f"Discount code '{code}' cannot be applied: {result.reason}"
                )
            discount_type = result.discount_type or DiscountType.SPECIAL
            if discount_type in seen_types:
                raise ValidationError(
                    f"Only one {discount_type.value} discount can be used per checkout"
                )
            seen_types.add(discount_type)

            targets = list(orders)
            if result.store_id is not None:
                targets = [order for order in orders if order.store_id == result.store_id]
                if not targets:
                    raise ValidationError(
                        f"Discount code '{code}' does not apply to any store in this checkout"
                    )

            if discount_type is DiscountType.SHIPPING:
                weights = [order.shipping_fee.amount for order in targets]
            else:
                weights = [order.subtotal.amount for order in targets]

            for order, share in zip(targets, allocate_discount(result.amount, weights)):
                if share > 0:
                    order.apply_discount(
                        discount_id=result.discount_id or code,
                        discount_type=discount_type,
                        amount=Money.of(share, order.currency),
                    )


class CreateOrderHandler(_CheckoutHandler):
    """Checkout from the buyer's live cart."""

    def __init__(
        self,
        uow: UnitOfWork,
        builder: OrderSnapshotBuilder,
        carts: CartService,
        addresses: AddressBook,
        discounts: DiscountService,
        notifications: OrderNotifications,
    ) -> None:
        super().__init__(uow, builder, discounts, notifications)
        self._carts = carts
        self._addresses = addresses

    def handle(
        self,
        buyer_id: str,
        shipping_address_id: str | None,
        options: CheckoutOptions | None = None,
    ) -> list[OrderDTO]:
        options = options or CheckoutOptions()

        replayed = self._replay(buyer_id, options.idempotency_key)
        if replayed is not None:
            return replayed

        lines = [line for line in self._carts.get_selected_lines(buyer_id) if line.selected]
        if not lines:
            raise EmptySelectionError("No cart items selected for checkout")

        address = None
        if shipping_address_id:
            address = self._addresses.resolve_address(shipping_address_id, buyer_id)
        if address is None:
            raise MissingAddressError(
                f"Shipping address '{shipping_address_id}' not found"
            )

        orders = self._place_orders(buyer_id, lines, address, options)
        self._clear_cart(buyer_id)
        return [to_order_dto(order) for order in orders]

    def _clear_cart(self, buyer_id: str) -> None:
        try:
            self._carts.remove_selected_items(buyer_id)
        except Exception:
            logger.warning("checkout.cart_cleanup_failed", buyer_id=buyer_id, exc_info=True)


class CreateOrderFromSnapshotHandler(_CheckoutHandler):
    """Checkout from a saved cart snapshot ("buy again").

    Snapshot lines are resolved against the live catalog so the buyer
    pays today's price.  The live cart is left alone.
    """

    def __init__(
        self,
        uow: UnitOfWork,
        builder: OrderSnapshotBuilder,
        catalog: ProductCatalog,
        discounts: DiscountService,
        notifications: OrderNotifications,
    ) -> None:
        super().__init__(uow, builder, discounts, notifications)
        self._catalog = catalog

    def handle(
        self,
        buyer_id: str,
        cart_snapshot: CartSnapshot,
        shipping_address: AddressSnapshot | None,
        options: CheckoutOptions | None = None,
    ) -> list[OrderDTO]:
        options = options or CheckoutOptions()

        replayed = self._replay(buyer_id, options.idempotency_key)
        if replayed is not None:
            return replayed

        if not cart_snapshot.lines:
            raise EmptySelectionError("Cart snapshot has no items")
        if shipping_address is None:
            raise MissingAddressError("Shipping address snapshot is required")

        lines: list[CartLine] = []
        for snap in cart_snapshot.lines:
            product = self._catalog.get_product(snap.product_id)
            if product is None:
                raise EntityNotFoundError(f"Product not found: '{snap.product_id}'")
            lines.append(CartLine(product=product, quantity=snap.quantity))

        orders = self._place_orders(buyer_id, lines, shipping_address, options)
        return [to_order_dto(order) for order in orders]
