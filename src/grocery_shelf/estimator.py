from __future__ import annotations
import logging
import math
from abc import ABC, abstractmethod
from grocery_shelf.backend import TextBackend, is_quota_error
from grocery_shelf.health import BackendHealth
from grocery_shelf.models import MAX_EXPIRATION_DAYS, Confidence, ExpirationEstimate, FoodCategory
from grocery_shelf.parsing import ParseError, extract_json
from grocery_shelf.rules import SHELF_LIFE_DEFAULTS, SHELF_LIFE_OVERRIDES

logger = logging.getLogger(__name__)

DEFAULT_DAYS = 7
DEFAULT_CONFIDENCE = Confidence.MEDIUM


class Estimator(ABC):
    """Predicts days until an unopened, properly stored item expires."""

    @abstractmethod
    async def estimate(self, normalized_name: str, category: FoodCategory) -> ExpirationEstimate:
        ...


class RuleEstimator(Estimator):
    async def estimate(self, normalized_name: str, category: FoodCategory) -> ExpirationEstimate:
        return self.estimate_item(normalized_name, category)

    def estimate_item(self, normalized_name: str, category: FoodCategory) -> ExpirationEstimate:
        days, confidence = SHELF_LIFE_DEFAULTS.get(category, (DEFAULT_DAYS, Confidence.LOW))
        lowered = normalized_name.lower()
        for pattern, override_days, override_confidence in SHELF_LIFE_OVERRIDES.get(category, ()):
            if pattern.search(lowered):
                days, confidence = override_days, override_confidence
                break
        return ExpirationEstimate(expiration_days=days, confidence=confidence)


def _whole_days(value: object) -> int:
    if isinstance(value, bool) or not isinstance(value, (int, float)) or not math.isfinite(value):
        return DEFAULT_DAYS
    return min(MAX_EXPIRATION_DAYS, max(1, math.floor(value + 0.5)))


def _parse_estimate(text: str) -> ExpirationEstimate:
    data = extract_json(text, opening="{")
    if not isinstance(data, dict):
        raise ParseError("Response is not a JSON object")
    try:
        confidence = Confidence(data.get("confidence"))
    except ValueError:
        confidence = DEFAULT_CONFIDENCE
    return ExpirationEstimate(expiration_days=_whole_days(data.get("expiration_days")), confidence=confidence)


class LLMEstimator(Estimator):
    def __init__(
        self,
        backend: TextBackend,
        instructions: str,
        health: BackendHealth,
        fallback: Estimator | None = None,
    ) -> None:
        self._backend = backend
        self._instructions = instructions
        self._health = health
        self._fallback = fallback or RuleEstimator()

    async def estimate(self, normalized_name: str, category: FoodCategory) -> ExpirationEstimate:
        if not self._health.available:
            return await self._fallback.estimate(normalized_name, category)

        user_content = (
            f'Item: "{normalized_name}"\n'
            f"Category: {category.value}\n\n"
            "Estimate expiration days."
        )
        try:
            response = await self._backend.complete(self._instructions, user_content)
        except Exception as e:
            if is_quota_error(e):
                self._health.mark_unavailable()
            logger.warning("Expiration estimate via text backend failed for %r, using rules: %s", normalized_name, e)
            return await self._fallback.estimate(normalized_name, category)

        try:
            return _parse_estimate(response)
        except Exception as e:
            logger.warning("Unusable expiration estimate for %r, using rules: %s", normalized_name, e)
        return await self._fallback.estimate(normalized_name, category)
