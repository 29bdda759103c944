"""Notifier that writes notifications to the structured log."""

from __future__ import annotations

from typing import Any

import structlog

from fulfillment.application.ports import Notifier

logger = structlog.get_logger(__name__)


class LoggingNotifier(Notifier):

    def notify(
        self,
        order_id: int,
        buyer_id: str,
        seller_ids: list[str],
        payload: dict[str, Any],
    ) -> None:
        logger.info(
            "notification.sent",
            order_id=order_id,
            buyer_id=buyer_id,
            seller_ids=seller_ids,
            payload=payload,
        )
