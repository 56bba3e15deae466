from __future__ import annotations
from pathlib import Path
from pydantic import field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict
from grocery_shelf.models import FoodCategory

_PLACEHOLDER_KEYS = {"YOUR_API_KEY_HERE", "changeme"}


def _category_lines() -> str:
    return "\n".join(f"- {c.value}" for c in FoodCategory)


class Config(BaseSettings):
    model_config = SettingsConfigDict(env_file=".env", extra="ignore")

    anthropic_api_key: str = ""
    anthropic_model: str = "claude-sonnet-4-5-20250929"
    google_vision_api_key: str = ""
    inventory_dir: Path = Path.home() / ".grocery_shelf"
    use_llm: bool = True
    max_tokens: int = 2048
    temperature: float = 0.1
    expiring_soon_days: int = 7

    normalize_prompt: str = (
        "You are a grocery receipt parser. Extract items and the purchase date from the given text.\n\n"
        "Rules:\n"
        "- Extract only food/grocery items\n"
        "- Ignore prices, totals, subtotals, tax lines, store names, slogans and payment details\n"
        "- Extract the quantity if it is stated (e.g. '2 Apples' -> quantity '2')\n"
        "- Find the purchase date if present, in any written form, and convert it to ISO 8601\n\n"
        "Return ONLY a single JSON object:\n"
        '{"purchase_date": "ISO 8601 string or null", '
        '"items": [{"raw_name": "item name as written", "quantity": "number as string or null"}]}\n\n'
        "Examples:\n"
        "Input: '2 Apples $3.99'\n"
        'Output: {"purchase_date": null, "items": [{"raw_name": "Apples", "quantity": "2"}]}\n'
        "Input: 'Date: 01/15/2024\\nMilk\\nBread'\n"
        'Output: {"purchase_date": "2024-01-15T00:00:00.000Z", "items": '
        '[{"raw_name": "Milk", "quantity": null}, {"raw_name": "Bread", "quantity": null}]}'
    )
    classify_prompt: str = (
        "You are a grocery item classifier. Classify each item into exactly one category.\n\n"
        f"Categories (use exactly these values):\n{_category_lines()}\n\n"
        "Rules:\n"
        "- Preserve the exact order of the input items and return one result per item\n"
        "- Normalize names: proper capitalization, fix obvious typos\n"
        "- is_food is false only for Non-Food and Unknown\n\n"
        "Return ONLY a JSON array. Each object must have:\n"
        "  is_food: boolean\n"
        "  normalized_name: string\n"
        "  category: string (one of the categories above)"
    )
    estimate_prompt: str = (
        "You are a food expiration expert. Estimate how many days until a food item expires.\n\n"
        "Assumptions:\n"
        "- The item is stored properly at home (refrigerated if needed)\n"
        "- The item is unopened and fresh from the store\n"
        "- Average quality product\n\n"
        "Confidence levels:\n"
        "- high: very predictable items (milk, bread, fresh meat)\n"
        "- medium: somewhat variable (produce, cheese)\n"
        "- low: highly variable or uncertain\n\n"
        "Rules:\n"
        "- expiration_days is a positive whole number of days\n"
        "- Be conservative: when uncertain, prefer the shorter estimate\n\n"
        "Return ONLY a JSON object:\n"
        '{"expiration_days": number, "confidence": "high" | "medium" | "low"}\n\n'
        "Examples:\n"
        '- Fresh milk -> {"expiration_days": 7, "confidence": "high"}\n'
        '- Bananas -> {"expiration_days": 5, "confidence": "medium"}\n'
        '- Fresh salmon -> {"expiration_days": 2, "confidence": "high"}\n'
        '- Canned beans -> {"expiration_days": 730, "confidence": "medium"}'
    )

    @field_validator("anthropic_api_key", "google_vision_api_key", mode="after")
    @classmethod
    def blank_placeholder_keys(cls, v: str) -> str:
        v = v.strip()
        return "" if v in _PLACEHOLDER_KEYS else v

    @property
    def llm_enabled(self) -> bool:
        return self.use_llm and bool(self.anthropic_api_key)
