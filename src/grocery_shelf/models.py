from __future__ import annotations
from datetime import datetime
from enum import Enum
from typing import Annotated, Optional
from pydantic import BaseModel, ConfigDict, Field, PlainSerializer, field_validator
from pydantic.alias_generators import to_camel
from grocery_shelf.dates import to_iso

IsoDateTime = Annotated[datetime, PlainSerializer(to_iso, return_type=str)]


class FoodCategory(str, Enum):
    PRODUCE = "Produce"
    PROTEIN = "Protein"
    GRAINS = "Grains"
    DAIRY = "Dairy"
    SNACKS = "Snacks"
    CONDIMENTS = "Condiments"
    BEVERAGES = "Beverages"
    PREPARED = "Prepared"
    OTHER = "Other"
    NON_FOOD = "Non-Food"
    UNKNOWN = "Unknown"

    @property
    def is_food(self) -> bool:
        return self not in (FoodCategory.NON_FOOD, FoodCategory.UNKNOWN)

    @classmethod
    def parse(cls, value: object) -> Optional[FoodCategory]:
        """Case-insensitive lookup; None for anything outside the enumeration."""
        if not isinstance(value, str):
            return None
        wanted = value.strip().lower()
        for member in cls:
            if member.value.lower() == wanted:
                return member
        return None


DEFAULT_CATEGORY = FoodCategory.OTHER


class Confidence(str, Enum):
    HIGH = "high"
    MEDIUM = "medium"
    LOW = "low"


class ExpirationSource(str, Enum):
    AUTO = "auto"
    MANUAL = "manual"


class RawLine(BaseModel):
    raw_name: str = Field(min_length=1)
    quantity: Optional[str] = None

    @field_validator("quantity", mode="before")
    @classmethod
    def quantity_as_text(cls, v):
        if isinstance(v, (int, float)) and not isinstance(v, bool):
            return str(v)
        return v


class NormalizedInput(BaseModel):
    purchase_date: Optional[str] = None
    items: list[RawLine] = Field(default_factory=list)


class Classification(BaseModel):
    is_food: bool
    normalized_name: str
    category: FoodCategory


MAX_EXPIRATION_DAYS = 3650


class ExpirationEstimate(BaseModel):
    expiration_days: int = Field(ge=1, le=MAX_EXPIRATION_DAYS)
    confidence: Confidence


class InventoryItem(BaseModel):
    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)

    item_id: str
    receipt_id: str
    name: str
    quantity: Optional[str] = None
    category: FoodCategory
    purchase_date: IsoDateTime
    auto_expiration_date: IsoDateTime
    manual_expiration_date: Optional[IsoDateTime] = None
    expiration_source: ExpirationSource = ExpirationSource.AUTO

    @property
    def effective_expiration(self) -> datetime:
        return self.manual_expiration_date or self.auto_expiration_date


class Receipt(BaseModel):
    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)

    receipt_id: str = ""
    purchase_date: IsoDateTime
    created_at: IsoDateTime
    item_count: int = 0
    source: str = "manual"
