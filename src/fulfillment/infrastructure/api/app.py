"""Order fulfillment FastAPI application.

Usage:
    uvicorn fulfillment.infrastructure.api.app:create_app --factory --port 8000
"""

from __future__ import annotations

from fastapi import FastAPI

from fulfillment.infrastructure.api.errors import register_exception_handlers
from fulfillment.infrastructure.api.routes import (
    admin_router,
    inventory_router,
    order_router,
    seller_router,
    system_router,
)
from fulfillment.infrastructure.bootstrap import Container, container as default_container
from fulfillment.infrastructure.logging import configure_logging


def create_app(container: Container | None = None) -> FastAPI:
    container = container or default_container()
    configure_logging(container.settings)

    app = FastAPI(
        title="Order Fulfillment API",
        description="Checkout, order lifecycle and inventory",
    )
    app.state.container = container
    register_exception_handlers(app)

    # Fixed prefixes first so they win over /orders/{order_id}.
    app.include_router(admin_router)
    app.include_router(seller_router)
    app.include_router(system_router)
    app.include_router(order_router)
    app.include_router(inventory_router)

    @app.get("/health", tags=["health"])
    def health() -> dict:
        return {"status": "ok", "environment": container.settings.environment}

    return app
