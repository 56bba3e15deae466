from __future__ import annotations
import logging
from datetime import datetime
from grocery_shelf.dates import now as _now

logger = logging.getLogger(__name__)


class BackendHealth:
    """Availability flag for the text-generation backend.

    Starts available. Once a quota error trips it, every intelligent stage
    sharing this instance goes straight to its deterministic fallback until
    ``reset()`` is called.
    """

    def __init__(self) -> None:
        self._disabled_at: datetime | None = None

    @property
    def available(self) -> bool:
        return self._disabled_at is None

    @property
    def disabled_at(self) -> datetime | None:
        return self._disabled_at

    def mark_unavailable(self, when: datetime | None = None) -> None:
        if self._disabled_at is not None:
            return
        self._disabled_at = when or _now()
        logger.warning("Text backend quota exceeded; using rule-based processing from now on")

    def reset(self) -> None:
        self._disabled_at = None
