from __future__ import annotations
import json
import logging
import uuid
from abc import ABC, abstractmethod
from pathlib import Path
from pydantic import ValidationError
from grocery_shelf.models import InventoryItem, Receipt

logger = logging.getLogger(__name__)


class StorageError(Exception):
    pass


def _new_id() -> str:
    return uuid.uuid4().hex


class InventoryStore(ABC):
    """Document store for receipts and inventory items."""

    @abstractmethod
    def save_receipt(self, receipt: Receipt) -> Receipt:
        """Persist receipt metadata and return it with its persisted id."""

    @abstractmethod
    def save_items(self, items: list[InventoryItem]) -> list[InventoryItem]:
        """Persist new items and return them with persisted ids."""

    @abstractmethod
    def update_item(self, item: InventoryItem) -> InventoryItem:
        ...

    @abstractmethod
    def get_item(self, item_id: str) -> InventoryItem:
        ...

    @abstractmethod
    def list_items(self) -> list[InventoryItem]:
        ...

    @abstractmethod
    def list_receipts(self) -> list[Receipt]:
        ...

    def items_by_receipt(self, receipt_id: str) -> list[InventoryItem]:
        return [item for item in self.list_items() if item.receipt_id == receipt_id]


class JsonInventoryStore(InventoryStore):
    def __init__(self, base_dir: Path | None = None):
        self.base_dir = base_dir or (Path.home() / ".grocery_shelf")
        self.base_dir.mkdir(parents=True, exist_ok=True)
        self._items_path = self.base_dir / "items.json"
        self._receipts_path = self.base_dir / "receipts.json"

    def _read(self, path: Path) -> list[dict]:
        if not path.exists():
            return []
        try:
            data = json.loads(path.read_text())
        except (OSError, json.JSONDecodeError) as e:
            raise StorageError(f"Could not read {path.name}: {e}") from e
        if not isinstance(data, list):
            raise StorageError(f"{path.name} does not contain a list of documents")
        return data

    def _write(self, path: Path, documents: list[dict]) -> None:
        tmp = path.with_suffix(".tmp")
        try:
            tmp.write_text(json.dumps(documents, indent=2))
            tmp.replace(path)
        except OSError as e:
            raise StorageError(f"Could not write {path.name}: {e}") from e

    def _load_items(self) -> list[InventoryItem]:
        items = []
        for doc in self._read(self._items_path):
            try:
                items.append(InventoryItem.model_validate(doc))
            except ValidationError:
                item_id = doc.get("itemId", "?") if isinstance(doc, dict) else "?"
                logger.warning("Skipping unreadable item document %s", item_id)
        return items

    def _dump(self, models) -> list[dict]:
        return [m.model_dump(mode="json", by_alias=True) for m in models]

    def save_receipt(self, receipt: Receipt) -> Receipt:
        saved = receipt.model_copy(update={"receipt_id": _new_id()})
        receipts = self._read(self._receipts_path)
        receipts.extend(self._dump([saved]))
        self._write(self._receipts_path, receipts)
        return saved

    def save_items(self, items: list[InventoryItem]) -> list[InventoryItem]:
        saved = [item.model_copy(update={"item_id": _new_id()}) for item in items]
        self._write(self._items_path, self._read(self._items_path) + self._dump(saved))
        return saved

    def update_item(self, item: InventoryItem) -> InventoryItem:
        docs = self._read(self._items_path)
        for index, doc in enumerate(docs):
            if isinstance(doc, dict) and doc.get("itemId") == item.item_id:
                docs[index] = self._dump([item])[0]
                self._write(self._items_path, docs)
                return item
        raise StorageError(f"Item '{item.item_id}' not found.")

    def get_item(self, item_id: str) -> InventoryItem:
        for item in self._load_items():
            if item.item_id == item_id:
                return item
        raise StorageError(f"Item '{item_id}' not found.")

    def list_items(self) -> list[InventoryItem]:
        return self._load_items()

    def list_receipts(self) -> list[Receipt]:
        receipts = [Receipt.model_validate(doc) for doc in self._read(self._receipts_path)]
        return sorted(receipts, key=lambda r: r.created_at, reverse=True)
