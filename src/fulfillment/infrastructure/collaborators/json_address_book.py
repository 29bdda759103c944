"""JSON-file-backed buyer address book."""

from __future__ import annotations

import json
from pathlib import Path

from fulfillment.application.ports import AddressBook
from fulfillment.domain.model.value_objects import AddressSnapshot


class JsonAddressBook(AddressBook):

    def __init__(self, file_path: Path) -> None:
        self._file_path = file_path
        if not self._file_path.exists():
            self._file_path.parent.mkdir(parents=True, exist_ok=True)
            self._file_path.write_text("[]", encoding="utf-8")

    def resolve_address(self, address_id: str, buyer_id: str) -> AddressSnapshot | None:
        raw = json.loads(self._file_path.read_text(encoding="utf-8"))
        for item in raw:
            if str(item["id"]) == address_id and str(item["user_id"]) == buyer_id:
                return AddressSnapshot.from_dict(item)
        return None
