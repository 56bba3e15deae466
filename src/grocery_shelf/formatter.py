from __future__ import annotations
from collections import defaultdict
from datetime import datetime
from grocery_shelf.inventory import expiration_status, sort_by_expiration
from grocery_shelf.models import FoodCategory, InventoryItem


def format_inventory(items: list[InventoryItem], reference: datetime | None = None) -> str:
    by_category: dict[FoodCategory, list[InventoryItem]] = defaultdict(list)
    for item in sort_by_expiration(items):
        by_category[item.category].append(item)

    lines: list[str] = []
    for category in FoodCategory:
        if category not in by_category:
            continue
        lines.append(f"\n{category.value}")
        lines.append("-" * len(category.value))
        for item in by_category[category]:
            quantity = f" ({item.quantity})" if item.quantity else ""
            status = expiration_status(item, reference)
            expires = item.effective_expiration.strftime("%Y-%m-%d")
            lines.append(f"[{status}] {item.name}{quantity} - expires {expires}")

    return "\n".join(lines).strip()
