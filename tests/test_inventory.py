from datetime import datetime, timedelta, timezone
import pytest
from grocery_shelf.inventory import (
    describe_expiration,
    expiration_status,
    expiring_within,
    filter_by_category,
    sort_by_expiration,
    with_manual_expiration,
)
from grocery_shelf.models import ExpirationSource, FoodCategory, InventoryItem

NOW = datetime(2024, 5, 10, 9, 0, tzinfo=timezone.utc)


def item(name, auto_days, manual_days=None, category=FoodCategory.PRODUCE):
    return InventoryItem(
        item_id=name,
        receipt_id="r",
        name=name,
        category=category,
        purchase_date=NOW - timedelta(days=1),
        auto_expiration_date=NOW + timedelta(days=auto_days),
        manual_expiration_date=NOW + timedelta(days=manual_days) if manual_days is not None else None,
        expiration_source=ExpirationSource.MANUAL if manual_days is not None else ExpirationSource.AUTO,
    )


def test_effective_expiration_prefers_manual():
    overridden = item("Milk", auto_days=10, manual_days=2)
    assert overridden.effective_expiration == NOW + timedelta(days=2)
    assert item("Bread", auto_days=4).effective_expiration == NOW + timedelta(days=4)


def test_sort_uses_manual_date():
    items = [item("A", 1, manual_days=20), item("B", 5), item("C", 30, manual_days=3)]
    assert [i.name for i in sort_by_expiration(items)] == ["C", "B", "A"]


def test_expiring_within_uses_manual_date():
    items = [item("A", 1, manual_days=20), item("B", 5), item("C", 30, manual_days=3), item("D", -2)]
    assert [i.name for i in expiring_within(items, 7, NOW)] == ["C", "B"]


def test_filter_by_category():
    items = [item("A", 1), item("B", 1, category=FoodCategory.DAIRY)]
    assert [i.name for i in filter_by_category(items, FoodCategory.DAIRY)] == ["B"]


@pytest.mark.parametrize("days, status", [
    (-3, "expired"),
    (0, "today"),
    (1, "soon"),
    (2, "soon"),
    (4, "warning"),
    (5, "warning"),
    (6, "fresh"),
])
def test_expiration_status(days, status):
    assert expiration_status(item("X", days), NOW) == status


@pytest.mark.parametrize("days, text", [
    (-3, "Expired 3 days ago"),
    (-1, "Expired 1 day ago"),
    (0, "Expires today"),
    (1, "Expires tomorrow"),
    (9, "Expires in 9 days"),
])
def test_describe_expiration(days, text):
    assert describe_expiration(item("X", days), NOW) == text


def test_status_reads_manual_date():
    assert expiration_status(item("X", 30, manual_days=-1), NOW) == "expired"


def test_with_manual_expiration_keeps_auto_date():
    original = item("Milk", 7)
    edited = with_manual_expiration(original, NOW + timedelta(days=1))
    assert edited.auto_expiration_date == original.auto_expiration_date
    assert edited.expiration_source == ExpirationSource.MANUAL
    assert original.manual_expiration_date is None
