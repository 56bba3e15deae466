from __future__ import annotations
from datetime import datetime
from grocery_shelf.dates import days_until, now as _now
from grocery_shelf.models import ExpirationSource, FoodCategory, InventoryItem

SOON_DAYS = 2
WARNING_DAYS = 5


def with_manual_expiration(item: InventoryItem, expires: datetime) -> InventoryItem:
    """Copy of item whose manual date overrides the estimate; the estimate itself is kept."""
    return item.model_copy(
        update={"manual_expiration_date": expires, "expiration_source": ExpirationSource.MANUAL}
    )


def sort_by_expiration(items: list[InventoryItem]) -> list[InventoryItem]:
    return sorted(items, key=lambda item: item.effective_expiration)


def filter_by_category(items: list[InventoryItem], category: FoodCategory) -> list[InventoryItem]:
    return [item for item in items if item.category == category]


def expiring_within(
    items: list[InventoryItem], days: int, reference: datetime | None = None
) -> list[InventoryItem]:
    """Unexpired items whose effective expiration falls within the next ``days`` days."""
    reference = reference or _now()
    return sort_by_expiration(
        [item for item in items if 0 <= days_until(item.effective_expiration, reference) <= days]
    )


def expiration_status(item: InventoryItem, reference: datetime | None = None) -> str:
    remaining = days_until(item.effective_expiration, reference)
    if remaining < 0:
        return "expired"
    if remaining == 0:
        return "today"
    if remaining <= SOON_DAYS:
        return "soon"
    if remaining <= WARNING_DAYS:
        return "warning"
    return "fresh"


def describe_expiration(item: InventoryItem, reference: datetime | None = None) -> str:
    remaining = days_until(item.effective_expiration, reference)
    if remaining < 0:
        ago = abs(remaining)
        return f"Expired {ago} day{'s' if ago != 1 else ''} ago"
    if remaining == 0:
        return "Expires today"
    if remaining == 1:
        return "Expires tomorrow"
    return f"Expires in {remaining} days"
