"""SQLAlchemy-backed implementation of InventoryRepository."""

from __future__ import annotations

from sqlalchemy import select, update
from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session

from fulfillment.domain.exceptions import ConcurrencyConflict
from fulfillment.domain.model.inventory import InventoryRecord
from fulfillment.domain.repository.inventory_repository import InventoryRepository
from fulfillment.infrastructure.persistence.database import as_utc
from fulfillment.infrastructure.persistence.tables import InventoryRow


class SqlInventoryRepository(InventoryRepository):
    """Counters are written with a conditional UPDATE.

    The UPDATE only matches if ``quantity`` and ``reserved`` still hold
    the values read for update, so a concurrent writer can never be
    silently overwritten.
    """

    def __init__(self, session: Session) -> None:
        self._session = session
        self._seen: dict[str, tuple[int, int]] = {}

    # --- InventoryRepository interface ----------------------------------------

    def get_by_product_id(self, product_id: str) -> InventoryRecord | None:
        row = self._session.execute(
            select(InventoryRow)
            .where(InventoryRow.product_id == product_id)
            .execution_options(populate_existing=True)
        ).scalar_one_or_none()
        return self._to_domain(row) if row is not None else None

    def get_for_update(self, product_id: str) -> InventoryRecord | None:
        row = self._session.execute(
            select(InventoryRow)
            .where(InventoryRow.product_id == product_id)
            .with_for_update()
            .execution_options(populate_existing=True)
        ).scalar_one_or_none()
        if row is None:
            return None
        self._seen[product_id] = (row.quantity, row.reserved)
        return self._to_domain(row)

    def list_all(self) -> list[InventoryRecord]:
        rows = self._session.execute(
            select(InventoryRow)
            .order_by(InventoryRow.product_id)
            .execution_options(populate_existing=True)
        ).scalars()
        return [self._to_domain(row) for row in rows]

    def add(self, record: InventoryRecord) -> None:
        self._session.add(
            InventoryRow(
                product_id=record.product_id,
                quantity=record.quantity,
                reserved=record.reserved,
                last_updated=record.last_updated,
            )
        )
        try:
            self._session.flush()
        except IntegrityError as exc:
            raise ConcurrencyConflict(
                f"Inventory for product '{record.product_id}' already exists"
            ) from exc

    def save(self, record: InventoryRecord) -> None:
        stmt = update(InventoryRow).where(InventoryRow.product_id == record.product_id)
        seen = self._seen.get(record.product_id)
        if seen is not None:
            stmt = stmt.where(
                InventoryRow.quantity == seen[0],
                InventoryRow.reserved == seen[1],
            )
        result = self._session.execute(
            stmt.values(
                quantity=record.quantity,
                reserved=record.reserved,
                last_updated=record.last_updated,
            ).execution_options(synchronize_session=False)
        )
        if result.rowcount != 1:
            raise ConcurrencyConflict(
                f"Inventory for product '{record.product_id}' changed concurrently"
            )
        self._seen[record.product_id] = (record.quantity, record.reserved)

    # --- Serialization --------------------------------------------------------

    @staticmethod
    def _to_domain(row: InventoryRow) -> InventoryRecord:
        return InventoryRecord(
            product_id=row.product_id,
            quantity=row.quantity,
            reserved=row.reserved,
            last_updated=as_utc(row.last_updated),
        )
