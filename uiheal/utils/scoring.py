from __future__ import annotations

from typing import TYPE_CHECKING

from uiheal.core.classifier import FORM_FIELD_TYPES, ElementType
from uiheal.utils.locators import (
    is_aria_based,
    is_class_based,
    is_data_attribute_based,
    is_id_based,
    is_position_based,
)

if TYPE_CHECKING:
    from uiheal.core.metadata import NodeSnapshot
    from uiheal.core.strategies import SelectorIntent


def score_element_confidence(node: NodeSnapshot, element_type: ElementType, clickable: bool) -> float:
    score = 0.5
    if node.id:
        score += 0.2
    if node.text:
        score += 0.15
    if node.attributes.get("aria-label"):
        score += 0.15
    if node.attributes.get("name") and element_type in FORM_FIELD_TYPES:
        score += 0.1
    if clickable:
        score += 0.1
    return round(min(score, 1.0), 4)


def score_semantic_match(intent: SelectorIntent, node: NodeSnapshot) -> int:
    score = 0
    if intent.type == ElementType.BUTTON and (node.tag == "button" or node.role == "button"):
        score += 50
    elif intent.type == ElementType.INPUT and node.tag == "input":
        score += 50
    elif intent.type == ElementType.LINK and node.tag == "a":
        score += 50
    if intent.text and intent.text.lower() in node.text.lower():
        score += 30
    for attribute, value in intent.attributes.items():
        if value in node.attributes.get(attribute, ""):
            score += 20
    return score


def score_healing_confidence(locator: str | None) -> int:
    """Rates a healed locator 0-100 by how it addresses its target."""

    confidence = 50
    if locator:
        if is_id_based(locator):
            confidence += 20
        if is_data_attribute_based(locator):
            confidence += 15
        if is_aria_based(locator):
            confidence += 10
        if is_position_based(locator):
            confidence -= 10
        if is_class_based(locator):
            confidence -= 5
    return clamp(confidence, 0, 100)


def clamp(value: int, lower: int, upper: int) -> int:
    return max(lower, min(value, upper))
