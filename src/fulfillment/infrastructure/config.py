"""Runtime configuration read from environment variables."""

from __future__ import annotations

import os
from dataclasses import dataclass
from decimal import Decimal
from pathlib import Path

# When installed in editable mode the project root is the repo root.
_PROJECT_ROOT = Path(__file__).resolve().parents[3]


@dataclass(frozen=True)
class Settings:
    database_url: str
    data_dir: Path
    shipping_fee: Decimal
    currency: str
    environment: str
    log_level: str | None

    @staticmethod
    def from_env() -> Settings:
        data_dir = Path(os.environ.get("FULFILLMENT_DATA_DIR", _PROJECT_ROOT / "data"))
        return Settings(
            database_url=os.environ.get(
                "FULFILLMENT_DATABASE_URL", f"sqlite:///{data_dir / 'fulfillment.db'}"
            ),
            data_dir=data_dir,
            shipping_fee=Decimal(os.environ.get("FULFILLMENT_SHIPPING_FEE", "60")),
            currency=os.environ.get("FULFILLMENT_CURRENCY", "TWD"),
            environment=os.environ.get("FULFILLMENT_ENV", "development").lower(),
            log_level=os.environ.get("LOG_LEVEL"),
        )
