"""Composition root: builds handlers from settings.

The SQL unit of work, JSON collaborators and notifier are chosen here so
the domain and application layers only ever see their ports.
"""

from __future__ import annotations

from functools import cached_property, lru_cache

from fulfillment.application.authorization import OrderAccessPolicy
from fulfillment.application.change_order_status import (
    AdminCancelOrderHandler,
    CancelOrderHandler,
    ChangeOrderStatusHandler,
    RecordPaymentHandler,
)
from fulfillment.application.create_order import (
    CreateOrderFromSnapshotHandler,
    CreateOrderHandler,
)
from fulfillment.application.notifications import OrderNotifications
from fulfillment.application.ports import Notifier
from fulfillment.application.set_inventory import SetInventoryHandler
from fulfillment.application.show_inventory import ShowInventoryHandler
from fulfillment.application.show_order import ListOrdersHandler, ShowOrderHandler
from fulfillment.domain.model.value_objects import Money
from fulfillment.domain.service.order_numbers import (
    OrderNumberGenerator,
    UlidOrderNumberGenerator,
)
from fulfillment.domain.service.snapshot_builder import OrderSnapshotBuilder
from fulfillment.infrastructure.collaborators.json_address_book import JsonAddressBook
from fulfillment.infrastructure.collaborators.json_cart import JsonCartService
from fulfillment.infrastructure.collaborators.json_catalog import (
    JsonProductCatalog,
    JsonStoreDirectory,
)
from fulfillment.infrastructure.collaborators.json_discounts import JsonDiscountService
from fulfillment.infrastructure.collaborators.logging_notifier import LoggingNotifier
from fulfillment.infrastructure.config import Settings
from fulfillment.infrastructure.persistence.database import (
    create_schema,
    make_engine,
    make_session_factory,
)
from fulfillment.infrastructure.persistence.unit_of_work import SqlAlchemyUnitOfWork


class Container:
    """Builds handlers from settings.

    Collaborators are shared; a fresh unit of work is handed to every
    handler.
    """

    def __init__(
        self,
        settings: Settings,
        number_generator: OrderNumberGenerator | None = None,
        notifier: Notifier | None = None,
    ) -> None:
        self.settings = settings
        self._number_generator = number_generator or UlidOrderNumberGenerator()
        self._notifier = notifier or LoggingNotifier()

    # --- Infrastructure -------------------------------------------------------

    @cached_property
    def engine(self):
        engine = make_engine(self.settings.database_url)
        create_schema(engine)
        return engine

    @cached_property
    def session_factory(self):
        return make_session_factory(self.engine)

    def unit_of_work(self) -> SqlAlchemyUnitOfWork:
        return SqlAlchemyUnitOfWork(self.session_factory)

    # --- Collaborators --------------------------------------------------------

    @cached_property
    def catalog(self) -> JsonProductCatalog:
        return JsonProductCatalog(
            self.settings.data_dir / "products.json", currency=self.settings.currency
        )

    @cached_property
    def stores(self) -> JsonStoreDirectory:
        return JsonStoreDirectory(self.settings.data_dir / "stores.json")

    @cached_property
    def carts(self) -> JsonCartService:
        return JsonCartService(self.settings.data_dir / "carts.json", self.catalog)

    @cached_property
    def addresses(self) -> JsonAddressBook:
        return JsonAddressBook(self.settings.data_dir / "addresses.json")

    @cached_property
    def discounts(self) -> JsonDiscountService:
        return JsonDiscountService(self.settings.data_dir / "discounts.json")

    @cached_property
    def builder(self) -> OrderSnapshotBuilder:
        return OrderSnapshotBuilder(
            self._number_generator,
            shipping_fee=Money.of(self.settings.shipping_fee, self.settings.currency),
        )

    @cached_property
    def notifications(self) -> OrderNotifications:
        return OrderNotifications(self._notifier, self.stores)

    @cached_property
    def access(self) -> OrderAccessPolicy:
        return OrderAccessPolicy(self.stores)

    # --- Handlers -------------------------------------------------------------

    def create_order(self) -> CreateOrderHandler:
        return CreateOrderHandler(
            uow=self.unit_of_work(),
            builder=self.builder,
            carts=self.carts,
            addresses=self.addresses,
            discounts=self.discounts,
            notifications=self.notifications,
        )

    def create_order_from_snapshot(self) -> CreateOrderFromSnapshotHandler:
        return CreateOrderFromSnapshotHandler(
            uow=self.unit_of_work(),
            builder=self.builder,
            catalog=self.catalog,
            discounts=self.discounts,
            notifications=self.notifications,
        )

    def change_status(self) -> ChangeOrderStatusHandler:
        return ChangeOrderStatusHandler(
            uow=self.unit_of_work(),
            access=self.access,
            notifications=self.notifications,
        )

    def cancel_order(self) -> CancelOrderHandler:
        return CancelOrderHandler(self.change_status())

    def admin_cancel_order(self) -> AdminCancelOrderHandler:
        return AdminCancelOrderHandler(self.change_status())

    def record_payment(self) -> RecordPaymentHandler:
        return RecordPaymentHandler(self.change_status())

    def show_order(self) -> ShowOrderHandler:
        return ShowOrderHandler(uow=self.unit_of_work(), access=self.access)

    def list_orders(self) -> ListOrdersHandler:
        return ListOrdersHandler(uow=self.unit_of_work(), access=self.access)

    def set_inventory(self) -> SetInventoryHandler:
        return SetInventoryHandler(
            uow=self.unit_of_work(), catalog=self.catalog, stores=self.stores
        )

    def show_inventory(self) -> ShowInventoryHandler:
        return ShowInventoryHandler(uow=self.unit_of_work())


@lru_cache(maxsize=1)
def container() -> Container:
    """The process-wide container built from environment settings."""
    return Container(Settings.from_env())
