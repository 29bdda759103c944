"""Request-scoped dependencies: the container and the calling actor.

Authentication happens upstream; the gateway forwards the user as
``X-User-Id``, ``X-User-Role`` and, for sellers, ``X-Seller-Id``.
"""

from __future__ import annotations

from collections.abc import Callable

from fastapi import Depends, Header, HTTPException, Request

from fulfillment.application.dto import Actor
from fulfillment.domain.exceptions import ForbiddenError
from fulfillment.domain.model.state_machine import ActorRole
from fulfillment.infrastructure.bootstrap import Container


def get_container(request: Request) -> Container:
    return request.app.state.container


def current_actor(
    x_user_id: str | None = Header(default=None),
    x_user_role: str = Header(default=ActorRole.BUYER.value),
    x_seller_id: str | None = Header(default=None),
) -> Actor:
    if not x_user_id:
        raise HTTPException(status_code=401, detail="Missing X-User-Id header")
    try:
        role = ActorRole(x_user_role.lower())
    except ValueError:
        raise HTTPException(status_code=401, detail=f"Unknown role '{x_user_role}'")
    if role is ActorRole.SELLER and not x_seller_id:
        raise HTTPException(status_code=401, detail="Missing X-Seller-Id header")
    return Actor(user_id=x_user_id, role=role, seller_id=x_seller_id)


def require_role(role: ActorRole) -> Callable[[Actor], Actor]:
    def dependency(actor: Actor = Depends(current_actor)) -> Actor:
        if actor.role is not role:
            raise ForbiddenError(f"This endpoint requires the {role.value} role")
        return actor

    return dependency
