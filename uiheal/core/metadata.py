from __future__ import annotations

from dataclasses import dataclass, field
from datetime import datetime
from typing import Any

from uiheal.core.classifier import ElementType
from uiheal.core.failures import HealingStrategy
from uiheal.core.steps import TestStep


@dataclass(slots=True)
class BoundingBox:
    x: float = 0.0
    y: float = 0.0
    width: float = 0.0
    height: float = 0.0

    @property
    def has_area(self) -> bool:
        return self.width > 0 and self.height > 0


@dataclass(slots=True)
class NodeSnapshot:
    """Serializable description of one DOM element as reported by the page."""

    tag: str
    locator: str = ""
    type: str | None = None
    text: str = ""
    own_text: str = ""
    attributes: dict[str, str] = field(default_factory=dict)
    parent_tag: str = ""
    rect: BoundingBox = field(default_factory=BoundingBox)
    styles: dict[str, str] = field(default_factory=dict)

    @property
    def id(self) -> str:
        return self.attributes.get("id", "")

    @property
    def role(self) -> str:
        return self.attributes.get("role", "")

    @property
    def class_list(self) -> list[str]:
        return [item for item in self.attributes.get("class", "").split() if item]

    @property
    def visible(self) -> bool:
        return (
            self.rect.has_area
            and self.styles.get("display") != "none"
            and self.styles.get("visibility") != "hidden"
        )

    @property
    def pointer_cursor(self) -> bool:
        return self.styles.get("cursor") == "pointer"


@dataclass(slots=True)
class InteractiveElement:
    tag: str
    locator: str | None
    xpath: str | None
    element_type: ElementType
    visible: bool
    clickable: bool
    confidence: float
    type: str | None = None
    text: str = ""
    aria_label: str | None = None
    placeholder: str | None = None
    name: str | None = None
    id: str | None = None
    class_list: list[str] = field(default_factory=list)
    position: BoundingBox = field(default_factory=BoundingBox)

    @property
    def dedup_key(self) -> str:
        return self.locator or self.xpath or f"{self.tag}-{self.text}"


@dataclass(slots=True)
class HealingOutcome:
    success: bool
    strategy: HealingStrategy
    confidence: int
    explanation: str
    healed_step: TestStep | None = None
    attempted_locators: list[str] = field(default_factory=list)


@dataclass(slots=True)
class HealingRecord:
    timestamp: datetime
    original_step: TestStep
    healed_step: TestStep
    strategy: HealingStrategy
    success: bool
    page_context: dict[str, Any] = field(default_factory=dict)


@dataclass(slots=True)
class StabilityReport:
    locator: str
    score: int
    recommendations: list[str]


@dataclass(slots=True)
class RobustLocatorSuggestion:
    original_locator: str
    robust_alternatives: list[str]
    stability_score: int
    recommendations: list[str]


@dataclass(slots=True)
class RobustLocatorSuggestions:
    suggestions: list[RobustLocatorSuggestion]
    general_recommendations: list[str]
