from __future__ import annotations

import logging

from uiheal.core.metadata import RobustLocatorSuggestion, RobustLocatorSuggestions, StabilityReport
from uiheal.core.page import PageQueryPort
from uiheal.utils.dom_extract import DESCRIBE_ELEMENT_SCRIPT, node_from_payload
from uiheal.utils.locators import (
    attribute_locator,
    class_locator,
    id_locator,
    is_aria_based,
    is_class_based,
    is_data_attribute_based,
    is_id_based,
    is_position_based,
)
from uiheal.utils.scoring import clamp

log = logging.getLogger(__name__)

GENERAL_BEST_PRACTICES = (
    "Use unique IDs whenever possible",
    "Prefer data attributes over class names for test selectors",
    "Use ARIA attributes for accessibility and testing",
    "Avoid CSS selectors that depend on styling",
    "Keep selectors as short and specific as possible",
    "Test selectors across different viewport sizes",
    "Document the purpose of custom data attributes",
)


class StabilityAnalyzer:
    """Estimates how likely a locator is to survive page changes.

    Scoring is purely lexical and never touches the page or healing memory;
    only :meth:`suggest_robust_locators` queries the page.
    """

    def __init__(self, page: PageQueryPort | None = None, text_limit: int = 100) -> None:
        self.page = page
        self.text_limit = text_limit

    @staticmethod
    def score(locator: str) -> int:
        stability = 50
        if is_id_based(locator):
            stability += 30
        if is_data_attribute_based(locator):
            stability += 25
        if is_aria_based(locator):
            stability += 20
        if is_position_based(locator):
            stability -= 20
        if is_class_based(locator):
            stability += 10
        return clamp(stability, 0, 100)

    @staticmethod
    def recommendations(score: int) -> list[str]:
        advice: list[str] = []
        if score < 50:
            advice.append("Consider using data attributes for more stable element identification")
            advice.append("Avoid position-based selectors like :nth-child")
            advice.append("Use semantic attributes (role, aria-label) when possible")
        if score < 30:
            advice.append("This selector is highly fragile and likely to break")
            advice.append("Consider adding unique IDs to target elements")
        return advice

    def analyze(self, locator: str) -> StabilityReport:
        score = self.score(locator)
        return StabilityReport(locator=locator, score=score, recommendations=self.recommendations(score))

    def suggest_robust_locators(self, locators: list[str]) -> RobustLocatorSuggestions:
        if self.page is None:
            raise ValueError("suggest_robust_locators requires a page")
        suggestions: list[RobustLocatorSuggestion] = []
        for locator in locators:
            try:
                handle = self.page.query_first(locator)
                if handle is None:
                    continue
                payload = self.page.evaluate(DESCRIBE_ELEMENT_SCRIPT, handle, self.text_limit)
            except Exception as exc:  # noqa: BLE001 - unresolvable locators are skipped.
                log.debug("Failed to analyze locator %s: %s", locator, exc)
                continue
            if not isinstance(payload, dict):
                continue
            report = self.analyze(locator)
            suggestions.append(
                RobustLocatorSuggestion(
                    original_locator=locator,
                    robust_alternatives=self._alternatives(payload),
                    stability_score=report.score,
                    recommendations=report.recommendations,
                )
            )
        return RobustLocatorSuggestions(
            suggestions=suggestions,
            general_recommendations=list(GENERAL_BEST_PRACTICES),
        )

    @staticmethod
    def _alternatives(payload: dict) -> list[str]:
        node = node_from_payload(payload)
        alternatives: list[str] = []
        if node.id:
            alternatives.append(id_locator(node.id))
        for name, value in node.attributes.items():
            if name.startswith("data-") or name.startswith("aria-"):
                alternatives.append(attribute_locator(name, value))
        first_class = class_locator(node.class_list, limit=1)
        if first_class:
            alternatives.append(first_class)
        return alternatives
