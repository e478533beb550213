from __future__ import annotations

import json
from pathlib import Path

from uiheal.core.metadata import HealingOutcome
from uiheal.core.steps import TestStep


class HealingAuditLogger:
    """Appends every healing attempt to a JSON Lines audit trail."""

    def __init__(self, root: str | Path = "artifacts") -> None:
        self.root = Path(root)
        self.root.mkdir(parents=True, exist_ok=True)
        self.healed_elements_path = self.root / "healed_elements.jsonl"

    def write(self, original: TestStep, outcome: HealingOutcome, error: str, timestamp: str) -> None:
        healed = outcome.healed_step
        payload = {
            "timestamp": timestamp,
            "step_name": original.name,
            "old_locator": original.locator,
            "new_locator": healed.locator if healed else None,
            "failure": error,
            "strategy": outcome.strategy.value,
            "success": outcome.success,
            "confidence": outcome.confidence,
            "explanation": outcome.explanation,
            "attempted_locators": outcome.attempted_locators,
        }
        with self.healed_elements_path.open("a", encoding="utf-8") as handle:
            handle.write(json.dumps(payload) + "\n")

    def read_attempts(self) -> list[dict]:
        if not self.healed_elements_path.exists():
            return []
        attempts = []
        with self.healed_elements_path.open("r", encoding="utf-8") as handle:
            for line in handle:
                if line.strip():
                    attempts.append(json.loads(line))
        return attempts
