"""Locator recovery strategies for the selector-healing chain.

Each strategy receives a :class:`StrategyContext` and returns candidate
locators, best first. Strategies never validate; the healer does that, so a
strategy is free to propose locators that match nothing.
"""

from __future__ import annotations

import logging
import re
from dataclasses import dataclass, field
from enum import Enum
from typing import Callable, Iterable, NamedTuple

from uiheal.config.schema import DetectionConfig
from uiheal.core.classifier import ElementType
from uiheal.core.metadata import NodeSnapshot
from uiheal.core.page import PageQueryPort
from uiheal.core.steps import ActionKind, TestStep
from uiheal.utils.dom_extract import DOM_SNAPSHOT_SCRIPT, nodes_from_payload
from uiheal.utils.locators import attribute_locator, class_locator, preferred_locator
from uiheal.utils.scoring import score_semantic_match

log = logging.getLogger(__name__)

_ATTRIBUTE_PAIR = re.compile(r"""\[\s*([^\s=\]~|^$*@]+)\s*[~|^$*]?=\s*["']([^"']+)["']\s*\]""")
_XPATH_ATTRIBUTE_PAIR = re.compile(r"""@([\w:-]+)\s*=\s*["']([^"']+)["']""")
_TEXT_PATTERNS = (
    re.compile(r"""text\(\)\s*=\s*["']([^"']+)["']"""),
    re.compile(r"""contains\(\s*(?:text\(\)|\.)\s*,\s*["']([^"']+)["']\s*\)"""),
    re.compile(r""":has-text\(\s*["']([^"']+)["']\s*\)"""),
    re.compile(r""":contains\(\s*["']([^"']+)["']\s*\)"""),
    re.compile(r"""^text=["']?(.+?)["']?$"""),
)
_TOKEN = re.compile(r"[a-z0-9]+")

BUTTON_PATTERNS = (
    '[class*="button"]',
    '[type="button"]',
    '[role="button"]',
    "button",
    ".btn",
    '[class*="btn"]',
)

HEALING_ATTRIBUTES = ("name", "id", "data-testid", "data-test", "aria-label", "role")

PARTIAL_TEXT_PREFIX = 10
PARTIAL_TEXT_MATCHES = 5


class TestPurpose(str, Enum):
    __test__ = False

    AUTHENTICATION = "authentication"
    FORM_INTERACTION = "form-interaction"
    NAVIGATION = "navigation"
    GENERAL = "general-interaction"


_PURPOSE_KEYWORDS: tuple[tuple[TestPurpose, frozenset[str]], ...] = (
    (TestPurpose.AUTHENTICATION, frozenset({"login", "signin", "authenticate"})),
    (TestPurpose.FORM_INTERACTION, frozenset({"form", "submit", "send"})),
    (TestPurpose.NAVIGATION, frozenset({"navigation", "navigate", "menu"})),
)


@dataclass(slots=True)
class SelectorIntent:
    type: ElementType | None = None
    text: str = ""
    attributes: dict[str, str] = field(default_factory=dict)


class StrategyContext:
    """Per-heal state shared by the strategies; the DOM snapshot is taken once."""

    def __init__(self, page: PageQueryPort, step: TestStep, detection: DetectionConfig | None = None) -> None:
        self.page = page
        self.step = step
        self.detection = detection or DetectionConfig()
        self._nodes: list[NodeSnapshot] | None = None

    @property
    def nodes(self) -> list[NodeSnapshot]:
        if self._nodes is None:
            try:
                payload = self.page.evaluate(
                    DOM_SNAPSHOT_SCRIPT,
                    self.detection.text_limit,
                    self.detection.snapshot_node_limit,
                )
            except Exception as exc:  # noqa: BLE001 - a failed snapshot leaves the strategies without candidates.
                log.debug("DOM snapshot failed: %s", exc)
                payload = []
            self._nodes = nodes_from_payload(payload)
        return self._nodes


class LocatorStrategy(NamedTuple):
    name: str
    find: Callable[[StrategyContext], list[str]]


def analyze_selector_intent(locator: str) -> SelectorIntent:
    intent = SelectorIntent()
    lowered = locator.lower()
    if "button" in lowered or "submit" in lowered:
        intent.type = ElementType.BUTTON
    elif "input" in lowered:
        intent.type = ElementType.INPUT
    elif "a[" in lowered or "link" in lowered:
        intent.type = ElementType.LINK
    for pattern in (_ATTRIBUTE_PAIR, _XPATH_ATTRIBUTE_PAIR):
        for attribute, value in pattern.findall(locator):
            intent.attributes[attribute] = value
    for pattern in _TEXT_PATTERNS:
        match = pattern.search(locator)
        if match:
            intent.text = match.group(1)
            break
    return intent


def infer_purpose(step_name: str) -> TestPurpose:
    tokens = set(_TOKEN.findall(step_name.lower()))
    for purpose, keywords in _PURPOSE_KEYWORDS:
        if tokens & keywords:
            return purpose
    return TestPurpose.GENERAL


def infer_target_type(step: TestStep) -> ElementType | None:
    locator = (step.locator or "").lower()
    if not locator:
        return None
    if "button" in locator or step.action == ActionKind.CLICK:
        return ElementType.BUTTON
    if "input" in locator or step.action == ActionKind.INPUT:
        return ElementType.INPUT
    if "a[" in locator or "link" in locator:
        return ElementType.LINK
    return None


def purpose_locators(purpose: TestPurpose) -> tuple[str, ...]:
    match purpose:
        case TestPurpose.AUTHENTICATION:
            return ('[name="username"]', '[name="email"]', '[name="password"]', "#login", ".login-form")
        case TestPurpose.FORM_INTERACTION:
            return ('form [type="submit"]', 'button[type="submit"]', 'input[type="submit"]')
        case TestPurpose.NAVIGATION:
            return ("nav a", '[role="navigation"] a', '[role="menu"]', '[role="menuitem"]')
        case TestPurpose.GENERAL:
            return ()


def target_type_locators(target_type: ElementType | None) -> tuple[str, ...]:
    match target_type:
        case ElementType.BUTTON:
            return ("button", '[role="button"]', '[type="submit"]', '[type="button"]')
        case ElementType.INPUT:
            return ("input", "textarea", '[role="textbox"]')
        case _:
            return ()


def find_by_semantic_similarity(context: StrategyContext, threshold: int = 40) -> list[str]:
    if not context.step.locator:
        return []
    intent = analyze_selector_intent(context.step.locator)
    scored = [
        (score_semantic_match(intent, node), node)
        for node in context.nodes
        if node.visible
    ]
    matches = [(score, node) for score, node in scored if score > threshold]
    matches.sort(key=lambda item: item[0], reverse=True)
    return _unique(preferred_locator(node) for _, node in matches)


def find_by_pattern(context: StrategyContext) -> list[str]:
    return list(BUTTON_PATTERNS)


def find_by_text_content(context: StrategyContext) -> list[str]:
    target = (context.step.expected or context.step.value or "").strip()
    if not target:
        return []
    exact = [node for node in context.nodes if node.own_text == target]
    prefix = target[:PARTIAL_TEXT_PREFIX]
    partial = [node for node in context.nodes if prefix in node.own_text][:PARTIAL_TEXT_MATCHES]
    return _unique(preferred_locator(node) for node in exact + partial)


def find_by_attributes(context: StrategyContext) -> list[str]:
    if not context.step.locator:
        return []
    candidates = []
    for attribute in HEALING_ATTRIBUTES:
        for node in context.nodes:
            value = node.attributes.get(attribute)
            if value:
                candidates.append(attribute_locator(attribute, value))
    return _unique(candidates)


def find_by_hierarchy(context: StrategyContext) -> list[str]:
    if not context.step.locator:
        return []
    candidates = []
    for node in context.nodes:
        if not node.parent_tag:
            continue
        candidates.append(f"{node.parent_tag} > {node.tag}")
        candidates.append(f"{node.parent_tag} {node.tag}")
        first_class = class_locator(node.class_list, limit=1)
        if first_class:
            candidates.append(f"{node.parent_tag} {first_class}")
    return _unique(candidates)


def find_by_intent_classification(context: StrategyContext) -> list[str]:
    purpose = infer_purpose(context.step.name)
    target_type = infer_target_type(context.step)
    log.debug("Step %r classified as %s targeting %s", context.step.name, purpose.value, target_type)
    return _unique([*target_type_locators(target_type), *purpose_locators(purpose)])


def default_strategies(semantic_threshold: int = 40) -> tuple[LocatorStrategy, ...]:
    return (
        LocatorStrategy(
            "semantic-similarity",
            lambda context: find_by_semantic_similarity(context, semantic_threshold),
        ),
        LocatorStrategy("pattern", find_by_pattern),
        LocatorStrategy("text-content", find_by_text_content),
        LocatorStrategy("attributes", find_by_attributes),
        LocatorStrategy("hierarchy", find_by_hierarchy),
        LocatorStrategy("intent-classification", find_by_intent_classification),
    )


def _unique(candidates: Iterable[str]) -> list[str]:
    return list(dict.fromkeys(candidate for candidate in candidates if candidate))
