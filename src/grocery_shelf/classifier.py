from __future__ import annotations
import logging
from abc import ABC, abstractmethod
from grocery_shelf.backend import TextBackend, is_quota_error
from grocery_shelf.health import BackendHealth
from grocery_shelf.models import DEFAULT_CATEGORY, Classification, FoodCategory
from grocery_shelf.parsing import ParseError, extract_json
from grocery_shelf.rules import CATCH_ALL_CATEGORY, CATEGORY_MATCHERS

logger = logging.getLogger(__name__)


def title_case(name: str) -> str:
    return " ".join(word[:1].upper() + word[1:].lower() for word in name.split())


class Classifier(ABC):
    """Maps raw item names to display names and categories, one result per name, in order."""

    @abstractmethod
    async def classify(self, raw_names: list[str]) -> list[Classification]:
        ...


class KeywordClassifier(Classifier):
    async def classify(self, raw_names: list[str]) -> list[Classification]:
        return [self.classify_name(name) for name in raw_names]

    def classify_name(self, raw_name: str) -> Classification:
        lowered = raw_name.lower()
        category = next(
            (category for category, matcher in CATEGORY_MATCHERS if matcher.search(lowered)),
            CATCH_ALL_CATEGORY,
        )
        return Classification(
            is_food=category.is_food,
            normalized_name=title_case(raw_name),
            category=category,
        )


def _coerce_result(result: object, raw_name: str) -> Classification:
    if not isinstance(result, dict):
        raise ParseError(f"Classification entry is not an object: {result!r}")

    category = FoodCategory.parse(result.get("category")) or DEFAULT_CATEGORY
    is_food = result.get("is_food")
    if not isinstance(is_food, bool):
        is_food = category.is_food
    name = result.get("normalized_name")
    if not isinstance(name, str) or not name.strip():
        name = title_case(raw_name)
    return Classification(is_food=is_food, normalized_name=name.strip(), category=category)


def _parse_classifications(text: str, raw_names: list[str]) -> list[Classification]:
    data = extract_json(text)
    if isinstance(data, dict):
        data = data.get("items", data.get("classifications"))
    if not isinstance(data, list):
        raise ParseError("Response has no classification array")
    if len(data) != len(raw_names):
        raise ParseError(f"Got {len(data)} classifications for {len(raw_names)} items")
    return [_coerce_result(result, name) for result, name in zip(data, raw_names)]


class LLMClassifier(Classifier):
    def __init__(
        self,
        backend: TextBackend,
        instructions: str,
        health: BackendHealth,
        fallback: Classifier | None = None,
    ) -> None:
        self._backend = backend
        self._instructions = instructions
        self._health = health
        self._fallback = fallback or KeywordClassifier()

    async def classify(self, raw_names: list[str]) -> list[Classification]:
        if not raw_names:
            return []
        if not self._health.available:
            return await self._fallback.classify(raw_names)

        user_content = "Classify these items:\n" + "\n".join(
            f"{i}. {name}" for i, name in enumerate(raw_names, start=1)
        )
        try:
            response = await self._backend.complete(self._instructions, user_content)
        except Exception as e:
            if is_quota_error(e):
                self._health.mark_unavailable()
            logger.warning("Classification via text backend failed, using keywords for all %d items: %s", len(raw_names), e)
            return await self._fallback.classify(raw_names)

        try:
            return _parse_classifications(response, raw_names)
        except Exception as e:
            logger.warning("Unusable classification response, using keywords for all %d items: %s", len(raw_names), e)
        return await self._fallback.classify(raw_names)
