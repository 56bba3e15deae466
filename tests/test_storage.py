import json
import logging
from datetime import datetime, timezone
import pytest
from grocery_shelf.inventory import with_manual_expiration
from grocery_shelf.models import FoodCategory, InventoryItem, Receipt
from grocery_shelf.storage import JsonInventoryStore, StorageError

PURCHASED = datetime(2024, 1, 15, tzinfo=timezone.utc)


def make_item(name="Milk", item_id="temp_0_1", receipt_id="temp_1", days=7):
    return InventoryItem(
        item_id=item_id,
        receipt_id=receipt_id,
        name=name,
        quantity="1",
        category=FoodCategory.DAIRY,
        purchase_date=PURCHASED,
        auto_expiration_date=datetime(2024, 1, 15 + days, tzinfo=timezone.utc),
    )


@pytest.fixture
def store(tmp_path):
    return JsonInventoryStore(base_dir=tmp_path)


def test_save_receipt_assigns_id(store):
    saved = store.save_receipt(Receipt(purchase_date=PURCHASED, created_at=PURCHASED, item_count=2))
    assert saved.receipt_id
    assert store.list_receipts()[0].receipt_id == saved.receipt_id


def test_save_items_exchanges_temporary_ids(store):
    saved = store.save_items([make_item(), make_item("Bread", item_id="temp_1_1")])
    assert all(not i.item_id.startswith("temp_") for i in saved)
    assert {i.name for i in store.list_items()} == {"Milk", "Bread"}


def test_documents_use_camel_case_keys(store, tmp_path):
    store.save_items([make_item()])
    doc = json.loads((tmp_path / "items.json").read_text())[0]
    assert doc["purchaseDate"] == "2024-01-15T00:00:00.000Z"
    assert doc["autoExpirationDate"] == "2024-01-22T00:00:00.000Z"
    assert doc["manualExpirationDate"] is None
    assert doc["expirationSource"] == "auto"
    assert doc["category"] == "Dairy"


def test_update_item_is_full_replace(store):
    saved = store.save_items([make_item()])[0]
    edited = with_manual_expiration(saved, datetime(2024, 1, 30, tzinfo=timezone.utc))
    store.update_item(edited)

    reloaded = store.get_item(saved.item_id)
    assert reloaded.manual_expiration_date == datetime(2024, 1, 30, tzinfo=timezone.utc)
    assert reloaded.auto_expiration_date == saved.auto_expiration_date
    assert reloaded.expiration_source.value == "manual"


def test_update_missing_item_raises(store):
    with pytest.raises(StorageError, match="not found"):
        store.update_item(make_item(item_id="missing"))


def test_get_missing_item_raises(store):
    with pytest.raises(StorageError, match="missing"):
        store.get_item("missing")


def test_items_by_receipt(store):
    store.save_items([make_item(receipt_id="a"), make_item("Bread", receipt_id="b")])
    assert [i.name for i in store.items_by_receipt("b")] == ["Bread"]


def test_receipts_newest_first(store):
    store.save_receipt(Receipt(purchase_date=PURCHASED, created_at=datetime(2024, 1, 1, tzinfo=timezone.utc)))
    store.save_receipt(Receipt(purchase_date=PURCHASED, created_at=datetime(2024, 3, 1, tzinfo=timezone.utc)))
    created = [r.created_at.month for r in store.list_receipts()]
    assert created == [3, 1]


def test_corrupt_file_raises_storage_error(store, tmp_path):
    (tmp_path / "items.json").write_text("not valid json{")
    with pytest.raises(StorageError, match="items.json"):
        store.list_items()


def test_unreadable_document_is_skipped_with_warning(store, tmp_path, caplog):
    store.save_items([make_item()])
    docs = json.loads((tmp_path / "items.json").read_text())
    docs.append({"itemId": "broken"})
    (tmp_path / "items.json").write_text(json.dumps(docs))

    with caplog.at_level(logging.WARNING, logger="grocery_shelf.storage"):
        items = store.list_items()

    assert len(items) == 1
    assert any("broken" in msg for msg in caplog.messages)


def test_empty_store_lists_nothing(store):
    assert store.list_items() == []
    assert store.list_receipts() == []


def test_unreadable_document_survives_later_writes(store, tmp_path):
    saved = store.save_items([make_item()])[0]
    docs = json.loads((tmp_path / "items.json").read_text())
    docs += [{"itemId": "broken"}, "not a document"]
    (tmp_path / "items.json").write_text(json.dumps(docs))

    store.save_items([make_item("Bread")])
    store.update_item(with_manual_expiration(saved, datetime(2024, 1, 30, tzinfo=timezone.utc)))

    docs = json.loads((tmp_path / "items.json").read_text())
    assert {"itemId": "broken"} in docs
    assert "not a document" in docs
    assert len(docs) == 4
    assert {i.name for i in store.list_items()} == {"Milk", "Bread"}
