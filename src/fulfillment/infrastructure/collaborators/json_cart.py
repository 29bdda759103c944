"""JSON-file-backed shopping carts.

The file maps buyer ids to cart lines::

    {"u-1": [{"product_id": "p-1", "quantity": 2, "selected": true}]}

Lines whose product has left the catalog are skipped.
"""

from __future__ import annotations

import json
from pathlib import Path

from fulfillment.application.ports import CartService, ProductCatalog
from fulfillment.domain.model.cart import CartLine


class JsonCartService(CartService):

    def __init__(self, file_path: Path, catalog: ProductCatalog) -> None:
        self._file_path = file_path
        self._catalog = catalog
        self._ensure_file()

    # --- CartService interface ------------------------------------------------

    def get_selected_lines(self, buyer_id: str) -> list[CartLine]:
        lines: list[CartLine] = []
        for raw in self._load_raw().get(buyer_id, []):
            if not raw.get("selected", True):
                continue
            product = self._catalog.get_product(str(raw["product_id"]))
            if product is None:
                continue
            lines.append(CartLine(product=product, quantity=int(raw["quantity"])))
        return lines

    def remove_selected_items(self, buyer_id: str) -> None:
        carts = self._load_raw()
        remaining = [raw for raw in carts.get(buyer_id, []) if not raw.get("selected", True)]
        if remaining:
            carts[buyer_id] = remaining
        else:
            carts.pop(buyer_id, None)
        self._persist_raw(carts)

    # --- File helpers ---------------------------------------------------------

    def _load_raw(self) -> dict[str, list[dict]]:
        return json.loads(self._file_path.read_text(encoding="utf-8"))

    def _persist_raw(self, carts: dict[str, list[dict]]) -> None:
        self._file_path.write_text(
            json.dumps(carts, indent=2) + "\n", encoding="utf-8"
        )

    def _ensure_file(self) -> None:
        if not self._file_path.exists():
            self._file_path.parent.mkdir(parents=True, exist_ok=True)
            self._file_path.write_text("{}", encoding="utf-8")
