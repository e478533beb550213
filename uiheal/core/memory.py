from __future__ import annotations

import logging
from collections import deque
from datetime import UTC, datetime
from typing import Any

from uiheal.core.failures import HealingStrategy
from uiheal.core.metadata import HealingRecord
from uiheal.core.steps import TestStep

log = logging.getLogger(__name__)


class HealingMemory:
    """Process-local record of successful heals.

    History keeps the most recent ``max_history`` records in arrival order.
    The cache maps an original locator to each distinct substitute that healed it,
    oldest first; entries are appended, never reordered.
    """

    def __init__(self, max_history: int = 500) -> None:
        self._history: deque[HealingRecord] = deque(maxlen=max_history)
        self._cache: dict[str, list[str]] = {}

    @property
    def history(self) -> list[HealingRecord]:
        return list(self._history)

    @property
    def cache(self) -> dict[str, list[str]]:
        return {locator: list(alternatives) for locator, alternatives in self._cache.items()}

    def record_success(
        self,
        original: TestStep,
        healed: TestStep,
        strategy: HealingStrategy,
        page_context: dict[str, Any] | None = None,
    ) -> HealingRecord:
        record = HealingRecord(
            timestamp=datetime.now(UTC),
            original_step=original,
            healed_step=healed,
            strategy=strategy,
            success=True,
            page_context=dict(page_context or {}),
        )
        self._history.append(record)
        if original.locator and healed.locator and healed.locator != original.locator:
            alternatives = self._cache.setdefault(original.locator, [])
            if healed.locator not in alternatives:
                alternatives.append(healed.locator)
                log.debug("Cached %s as substitute for %s", healed.locator, original.locator)
        return record

    def lookup(self, locator: str | None) -> list[str]:
        if not locator:
            return []
        return list(self._cache.get(locator, []))
