"""Translate domain exceptions into HTTP responses."""

from __future__ import annotations

from fastapi import FastAPI, Request
from fastapi.responses import JSONResponse

from fulfillment.domain.exceptions import (
    ConcurrencyConflict,
    DomainException,
    EntityNotFoundError,
    ForbiddenError,
    InsufficientStockError,
    InvalidStateError,
    InvalidTransitionError,
)

_STATUS_CODES: list[tuple[type[DomainException], int]] = [
    (EntityNotFoundError, 404),
    (ForbiddenError, 403),
    (InsufficientStockError, 409),
    (InvalidTransitionError, 409),
    (InvalidStateError, 409),
    (ConcurrencyConflict, 409),
]


def status_code_for(exc: DomainException) -> int:
    for exc_type, status_code in _STATUS_CODES:
        if isinstance(exc, exc_type):
            return status_code
    return 400


async def domain_exception_handler(request: Request, exc: DomainException) -> JSONResponse:
    return JSONResponse(
        status_code=status_code_for(exc),
        content={"error": type(exc).__name__, "detail": str(exc), **exc.context()},
    )


def register_exception_handlers(app: FastAPI) -> None:
    app.add_exception_handler(DomainException, domain_exception_handler)
