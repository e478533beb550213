from __future__ import annotations

import logging
from typing import Any, Iterable

from uiheal.config.schema import DetectionConfig
from uiheal.core.classifier import classify_element, is_clickable
from uiheal.core.dedup import deduplicate
from uiheal.core.metadata import InteractiveElement, NodeSnapshot
from uiheal.core.page import PageQueryPort
from uiheal.utils.dom_extract import DESCRIBE_ELEMENT_SCRIPT, DOM_SNAPSHOT_SCRIPT, node_from_payload, nodes_from_payload
from uiheal.utils.locators import build_xpath
from uiheal.utils.scoring import score_element_confidence

log = logging.getLogger(__name__)

STRUCTURAL_PATTERNS = (
    "button:not([disabled])",
    'input[type="button"]:not([disabled])',
    'input[type="submit"]:not([disabled])',
    'a[href]:not([aria-disabled="true"])',
    '[role="button"]:not([aria-disabled="true"])',
    '[role="link"]:not([aria-disabled="true"])',
    'input[type="text"]',
    'input[type="email"]',
    'input[type="password"]',
    'input[type="number"]',
    'input[type="tel"]',
    'input[type="checkbox"]',
    'input[type="radio"]',
    "select",
    "textarea",
    "form",
    '[contenteditable="true"]',
    "[onclick]",
    "[data-testid]",
)

ACCESSIBILITY_PATTERNS = (
    '[aria-label][role="button"]',
    '[aria-label][role="link"]',
    "[aria-pressed]",
    "[aria-expanded]",
    "[aria-selected]",
)


class ElementScanner:
    """Discovers interactive elements through structural, ARIA and behavioral passes."""

    def __init__(self, page: PageQueryPort, config: DetectionConfig | None = None) -> None:
        self.page = page
        self.config = config or DetectionConfig()

    def scan(self) -> list[InteractiveElement]:
        candidates: list[InteractiveElement] = []
        candidates.extend(self._pattern_pass(STRUCTURAL_PATTERNS))
        candidates.extend(self._pattern_pass(ACCESSIBILITY_PATTERNS))
        candidates.extend(self._behavioral_pass())
        elements = deduplicate(candidates)
        log.info("Scan found %d interactive elements (%d raw candidates)", len(elements), len(candidates))
        return elements

    def _pattern_pass(self, patterns: Iterable[str]) -> list[InteractiveElement]:
        found: list[InteractiveElement] = []
        for pattern in patterns:
            try:
                handles = self.page.query_all(pattern)
            except Exception as exc:  # noqa: BLE001 - unsupported patterns are skipped, never fatal.
                log.debug("Skipping pattern %s: %s", pattern, exc)
                continue
            for handle in handles or []:
                element = self._analyze_handle(handle)
                if element is not None:
                    found.append(element)
        return found

    def _behavioral_pass(self) -> list[InteractiveElement]:
        try:
            payload = self.page.evaluate(DOM_SNAPSHOT_SCRIPT, self.config.text_limit, self.config.snapshot_node_limit)
        except Exception as exc:  # noqa: BLE001 - the pass degrades to no candidates.
            log.debug("Behavioral pass failed: %s", exc)
            return []
        found: list[InteractiveElement] = []
        for node in nodes_from_payload(payload):
            if node.visible and node.pointer_cursor:
                found.append(self.build_element(node))
        return found

    def _analyze_handle(self, handle: Any) -> InteractiveElement | None:
        try:
            payload = self.page.evaluate(DESCRIBE_ELEMENT_SCRIPT, handle, self.config.text_limit)
        except Exception as exc:  # noqa: BLE001 - elements can go stale mid-scan.
            log.debug("Could not describe element: %s", exc)
            return None
        if not isinstance(payload, dict):
            return None
        node = node_from_payload(payload)
        if not node.visible:
            return None
        return self.build_element(node)

    def build_element(self, node: NodeSnapshot) -> InteractiveElement:
        element_type = classify_element(node)
        clickable = is_clickable(node)
        text = node.text[: self.config.text_limit]
        aria_label = node.attributes.get("aria-label") or None
        return InteractiveElement(
            tag=node.tag,
            type=node.type,
            text=text,
            locator=node.locator or None,
            xpath=build_xpath(node.tag, node.id, text, aria_label or ""),
            aria_label=aria_label,
            placeholder=node.attributes.get("placeholder") or None,
            name=node.attributes.get("name") or None,
            id=node.id or None,
            visible=node.visible,
            clickable=clickable,
            element_type=element_type,
            class_list=node.class_list,
            position=node.rect,
            confidence=score_element_confidence(node, element_type, clickable),
        )
