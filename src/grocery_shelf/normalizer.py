from __future__ import annotations
import logging
from abc import ABC, abstractmethod
from datetime import datetime
from pydantic import ValidationError
from grocery_shelf.backend import TextBackend, is_quota_error
from grocery_shelf.dates import can_add_days, parse_iso, parse_receipt_date, to_iso
from grocery_shelf.health import BackendHealth
from grocery_shelf.models import MAX_EXPIRATION_DAYS, NormalizedInput, RawLine
from grocery_shelf.parsing import ParseError, extract_json
from grocery_shelf.rules import CURRENCY_AMOUNT, DATE_PATTERN, LEADING_QUANTITY, NOISE_PATTERNS

logger = logging.getLogger(__name__)


def _content_lines(raw_text: str) -> list[str]:
    return [line.strip() for line in raw_text.splitlines() if line.strip()]


def _purchase_date(value: datetime) -> str | None:
    if not can_add_days(value, MAX_EXPIRATION_DAYS):
        logger.info("Ignoring purchase date %s, too close to the end of the calendar", value.date())
        return None
    return to_iso(value)


class Normalizer(ABC):
    """Turns receipt or typed text into item lines plus an optional purchase date."""

    @abstractmethod
    async def normalize(self, raw_text: str) -> NormalizedInput:
        ...


class PatternNormalizer(Normalizer):
    async def normalize(self, raw_text: str) -> NormalizedInput:
        return self.normalize_text(raw_text)

    def normalize_text(self, raw_text: str) -> NormalizedInput:
        purchase_date: str | None = None
        items: list[RawLine] = []

        for line in _content_lines(raw_text or ""):
            date_match = DATE_PATTERN.search(line)
            if date_match and purchase_date is None:
                parsed = parse_receipt_date(date_match.group(0))
                if parsed is not None:
                    purchase_date = _purchase_date(parsed)
                continue

            if any(pattern.search(line) for pattern in NOISE_PATTERNS):
                continue

            text = " ".join(CURRENCY_AMOUNT.sub("", line).split())
            if not text:
                continue

            quantity_match = LEADING_QUANTITY.match(text)
            if quantity_match:
                items.append(RawLine(raw_name=quantity_match.group(2).strip(), quantity=quantity_match.group(1)))
            else:
                items.append(RawLine(raw_name=text, quantity=None))

        return NormalizedInput(purchase_date=purchase_date, items=items)


def _parse_normalized(text: str, line_count: int) -> NormalizedInput:
    data = extract_json(text, opening="{")
    if not isinstance(data, dict) or not isinstance(data.get("items"), list):
        raise ParseError("Response has no 'items' array")
    if len(data["items"]) > line_count:
        raise ParseError(f"Response lists {len(data['items'])} items for {line_count} lines of text")

    purchase_date = data.get("purchase_date")
    if purchase_date is not None:
        try:
            purchase_date = _purchase_date(parse_iso(str(purchase_date)))
        except (ValueError, OverflowError):
            logger.info("Ignoring unparseable purchase date %r", purchase_date)
            purchase_date = None

    try:
        items = [RawLine.model_validate(item) for item in data["items"]]
    except ValidationError as e:
        raise ParseError(f"Unexpected item format: {e}") from e
    return NormalizedInput(purchase_date=purchase_date, items=items)


class LLMNormalizer(Normalizer):
    def __init__(
        self,
        backend: TextBackend,
        instructions: str,
        health: BackendHealth,
        fallback: Normalizer | None = None,
    ) -> None:
        self._backend = backend
        self._instructions = instructions
        self._health = health
        self._fallback = fallback or PatternNormalizer()

    async def normalize(self, raw_text: str) -> NormalizedInput:
        line_count = len(_content_lines(raw_text or ""))
        if line_count == 0:
            return NormalizedInput()
        if not self._health.available:
            return await self._fallback.normalize(raw_text)

        try:
            response = await self._backend.complete(self._instructions, raw_text)
        except Exception as e:
            if is_quota_error(e):
                self._health.mark_unavailable()
            logger.warning("Normalization via text backend failed, using patterns: %s", e)
            return await self._fallback.normalize(raw_text)

        try:
            return _parse_normalized(response, line_count)
        except Exception as e:
            logger.warning("Unusable normalization response, using patterns: %s", e)
        return await self._fallback.normalize(raw_text)
