from __future__ import annotations
import logging
from datetime import datetime
from typing import Callable
from grocery_shelf.backend import AnthropicBackend
from grocery_shelf.classifier import Classifier, KeywordClassifier, LLMClassifier
from grocery_shelf.config import Config
from grocery_shelf.dates import add_days, now as _now, parse_date_input, parse_iso
from grocery_shelf.estimator import Estimator, LLMEstimator, RuleEstimator
from grocery_shelf.health import BackendHealth
from grocery_shelf.inventory import with_manual_expiration
from grocery_shelf.models import ExpirationSource, InventoryItem, Receipt
from grocery_shelf.normalizer import LLMNormalizer, Normalizer, PatternNormalizer
from grocery_shelf.storage import InventoryStore

logger = logging.getLogger(__name__)


class PipelineError(Exception):
    pass


class Pipeline:
    """Runs text through normalize -> classify -> estimate and holds the results until commit.

    Items produced by ``process`` carry temporary ids. They can be edited with
    ``update`` or ``set_manual_expiration`` and are handed to a store by
    ``commit``. A failed commit leaves ``pending`` untouched so it can be retried;
    a receipt already written by the failed attempt is reused rather than duplicated.
    """

    def __init__(
        self,
        normalizer: Normalizer,
        classifier: Classifier,
        estimator: Estimator,
        clock: Callable[[], datetime] = _now,
    ) -> None:
        self.normalizer = normalizer
        self.classifier = classifier
        self.estimator = estimator
        self._clock = clock
        self._pending: list[InventoryItem] = []
        self._temp_receipt_id = ""
        self._saved_receipt: Receipt | None = None

    @property
    def pending(self) -> list[InventoryItem]:
        return list(self._pending)

    async def process(self, raw_text: str) -> list[InventoryItem]:
        normalized = await self.normalizer.normalize(raw_text)
        raw_names = [line.raw_name for line in normalized.items]
        classified = await self.classifier.classify(raw_names)
        if len(classified) != len(normalized.items):
            raise PipelineError(
                f"Classifier returned {len(classified)} results for {len(normalized.items)} items"
            )

        started = self._clock()
        stamp = int(started.timestamp() * 1000)
        purchase_date = parse_iso(normalized.purchase_date) if normalized.purchase_date else started
        self._temp_receipt_id = f"temp_{stamp}"
        self._saved_receipt = None

        items: list[InventoryItem] = []
        for index, (line, classification) in enumerate(zip(normalized.items, classified)):
            estimate = await self.estimator.estimate(classification.normalized_name, classification.category)
            items.append(
                InventoryItem(
                    item_id=f"temp_{index}_{stamp}",
                    receipt_id=self._temp_receipt_id,
                    name=classification.normalized_name,
                    quantity=line.quantity,
                    category=classification.category,
                    purchase_date=purchase_date,
                    auto_expiration_date=add_days(purchase_date, estimate.expiration_days),
                )
            )

        logger.info("Processed %d items (purchase date %s)", len(items), purchase_date.date())
        self._pending = items
        return self.pending

    def _index_of(self, item_id: str) -> int:
        for index, item in enumerate(self._pending):
            if item.item_id == item_id:
                return index
        raise PipelineError(f"No pending item with id '{item_id}'")

    def update(self, item: InventoryItem) -> InventoryItem:
        """Replace a pending item by id. The original estimate is always preserved."""
        index = self._index_of(item.item_id)
        source = ExpirationSource.MANUAL if item.manual_expiration_date else ExpirationSource.AUTO
        replaced = item.model_copy(
            update={
                "auto_expiration_date": self._pending[index].auto_expiration_date,
                "expiration_source": source,
            }
        )
        self._pending[index] = replaced
        return replaced

    def set_manual_expiration(self, item_id: str, value: str) -> InventoryItem:
        """Override an item's expiration from user input; raises DateInputError on bad input."""
        expires = parse_date_input(value)
        return self.update(with_manual_expiration(self._pending[self._index_of(item_id)], expires))

    def commit(self, store: InventoryStore, source: str = "manual") -> list[InventoryItem]:
        if not self._pending:
            return []
        if self._saved_receipt is None:
            self._saved_receipt = store.save_receipt(
                Receipt(
                    purchase_date=self._pending[0].purchase_date,
                    created_at=self._clock(),
                    item_count=len(self._pending),
                    source=source,
                )
            )
        receipt = self._saved_receipt
        saved = store.save_items(
            [item.model_copy(update={"receipt_id": receipt.receipt_id}) for item in self._pending]
        )
        logger.info("Saved %d items under receipt %s", len(saved), receipt.receipt_id)
        self._pending = []
        self._saved_receipt = None
        return saved


def create_pipeline(config: Config, health: BackendHealth | None = None) -> Pipeline:
    """Build a pipeline, using the text backend only when an API key is configured."""
    normalizer: Normalizer = PatternNormalizer()
    classifier: Classifier = KeywordClassifier()
    estimator: Estimator = RuleEstimator()

    if not config.llm_enabled:
        logger.info("No text backend configured; using rule-based processing")
        return Pipeline(normalizer, classifier, estimator)

    health = health or BackendHealth()
    backend = AnthropicBackend(
        api_key=config.anthropic_api_key,
        model=config.anthropic_model,
        max_tokens=config.max_tokens,
        temperature=config.temperature,
    )
    return Pipeline(
        LLMNormalizer(backend, config.normalize_prompt, health, fallback=normalizer),
        LLMClassifier(backend, config.classify_prompt, health, fallback=classifier),
        LLMEstimator(backend, config.estimate_prompt, health, fallback=estimator),
    )
