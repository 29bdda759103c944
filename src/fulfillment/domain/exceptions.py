"""Domain-level exceptions.

All business rule violations are expressed as subclasses of DomainException
so the CLI and HTTP layers can catch them uniformly and display
user-friendly messages.  Exceptions that callers need to render carry the
relevant identifiers as attributes as well as in the message.
"""

from __future__ import annotations


class DomainException(Exception):
    """Base class for all domain errors."""

    def context(self) -> dict[str, object]:
        """Structured details for error responses."""
        return {}


class ValidationError(DomainException):
    """A business rule or invariant was violated."""


class EntityNotFoundError(DomainException):
    """A requested entity does not exist."""


class ForbiddenError(DomainException):
    """The acting user does not own the requested resource."""


class InvalidStateError(DomainException):
    """An inventory counter operation would break the ledger invariants."""


class EmptySelectionError(DomainException):
    """Checkout was requested with no selected cart lines."""


class MissingAddressError(DomainException):
    """No shipping address could be resolved for a checkout."""


class ConcurrencyConflict(DomainException):
    """A concurrent writer changed a row between read and write."""


class InsufficientStockError(DomainException):

    def __init__(self, product_id: str, requested: int, available: int) -> None:
        self.product_id = product_id
        self.requested = requested
        self.available = available
        super().__init__(
            f"Insufficient stock for product '{product_id}' "
            f"(need {requested}, have {available} available)"
        )

    def context(self) -> dict[str, object]:
        return {
            "product_id": self.product_id,
            "requested": self.requested,
            "available": self.available,
        }


class InvalidTransitionError(DomainException):

    def __init__(self, current: str, requested: str, role: str | None = None) -> None:
        self.current = current
        self.requested = requested
        self.role = role
        who = f" as {role}" if role else ""
        super().__init__(f"Cannot transition from {current} to {requested}{who}")

    def context(self) -> dict[str, object]:
        return {
            "current_status": self.current,
            "requested_status": self.requested,
        }
