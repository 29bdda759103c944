"""SQLAlchemy-backed unit of work: one session, one transaction."""

from __future__ import annotations

from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session, sessionmaker

from fulfillment.domain.exceptions import ConcurrencyConflict
from fulfillment.domain.repository.unit_of_work import UnitOfWork
from fulfillment.infrastructure.persistence.sql_inventory_repository import (
    SqlInventoryRepository,
)
from fulfillment.infrastructure.persistence.sql_order_repository import (
    SqlOrderRepository,
)


class SqlAlchemyUnitOfWork(UnitOfWork):

    def __init__(self, session_factory: sessionmaker[Session]) -> None:
        self._session_factory = session_factory
        self._session: Session | None = None

    def __enter__(self) -> SqlAlchemyUnitOfWork:
        self._session = self._session_factory()
        self.orders = SqlOrderRepository(self._session)
        self.inventory = SqlInventoryRepository(self._session)
        return self

    def __exit__(self, exc_type, exc, tb) -> None:
        try:
            super().__exit__(exc_type, exc, tb)
        finally:
            if self._session is not None:
                self._session.close()
                self._session = None

    def commit(self) -> None:
        try:
            self._session.commit()
        except IntegrityError as exc:
            self._session.rollback()
            raise ConcurrencyConflict("Transaction conflicted with a concurrent write") from exc

    def rollback(self) -> None:
        if self._session is not None:
            self._session.rollback()
