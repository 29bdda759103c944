"""JSON-file-backed product catalog and store directory."""

from __future__ import annotations

import json
from pathlib import Path

from fulfillment.application.ports import ProductCatalog, StoreDirectory, StoreOwner
from fulfillment.domain.model.cart import ProductView
from fulfillment.domain.model.value_objects import DEFAULT_CURRENCY, Money


class JsonProductCatalog(ProductCatalog):
    """Products without their own ``currency`` are priced in *currency*."""

    def __init__(self, file_path: Path, currency: str = DEFAULT_CURRENCY) -> None:
        self._file_path = file_path
        self._currency = currency
        _ensure_file(self._file_path)

    # --- ProductCatalog interface ---------------------------------------------

    def get_product(self, product_id: str) -> ProductView | None:
        return self._load().get(product_id)

    def list_all(self) -> list[ProductView]:
        return list(self._load().values())

    # --- Serialization helpers ------------------------------------------------

    def _load(self) -> dict[str, ProductView]:
        raw = json.loads(self._file_path.read_text(encoding="utf-8"))
        return {
            str(item["id"]): ProductView(
                product_id=str(item["id"]),
                name=item["name"],
                price=Money.of(item["price"], item.get("currency", self._currency)),
                store_id=item.get("store_id"),
                images=tuple(item.get("images") or ()),
            )
            for item in raw
        }


class JsonStoreDirectory(StoreDirectory):
    """Reads ``[{"id": ..., "seller_id": ..., "user_id": ...}, ...]``."""

    def __init__(self, file_path: Path) -> None:
        self._file_path = file_path
        _ensure_file(self._file_path)

    def owner_of(self, store_id: str) -> StoreOwner | None:
        for item in self._load_raw():
            if str(item["id"]) == store_id:
                return StoreOwner(seller_id=str(item["seller_id"]), user_id=str(item["user_id"]))
        return None

    def store_of_seller(self, seller_id: str) -> str | None:
        for item in self._load_raw():
            if str(item["seller_id"]) == seller_id:
                return str(item["id"])
        return None

    def _load_raw(self) -> list[dict]:
        return json.loads(self._file_path.read_text(encoding="utf-8"))


def _ensure_file(file_path: Path, empty: str = "[]") -> None:
    if not file_path.exists():
        file_path.parent.mkdir(parents=True, exist_ok=True)
        file_path.write_text(empty, encoding="utf-8")
