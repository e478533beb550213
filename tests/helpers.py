from __future__ import annotations

from contextlib import contextmanager
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any, Iterator

import pytest
from selenium.common.exceptions import WebDriverException

from uiheal.core.browser import BrowserSession
from uiheal.core.exceptions import LocatorError
from uiheal.core.page import PageQueryPort, SeleniumPage
from uiheal.core.strategies import LocatorStrategy
from uiheal.utils.dom_extract import (
    DESCRIBE_ELEMENT_SCRIPT,
    DOM_SNAPSHOT_SCRIPT,
    ELEMENT_TEXT_SCRIPT,
    PAGE_CONTEXT_SCRIPT,
    PAGE_SOURCE_SCRIPT,
)

FIXTURES = Path(__file__).resolve().parent / "fixtures"


@dataclass
class FakeNode:
    tag: str
    attributes: dict[str, str] = field(default_factory=dict)
    text: str = ""
    own_text: str | None = None
    parent_tag: str = "body"
    locator: str = ""
    rect: dict[str, float] = field(default_factory=lambda: {"x": 10.0, "y": 10.0, "width": 120.0, "height": 32.0})
    styles: dict[str, str] = field(default_factory=lambda: {"display": "block", "visibility": "visible", "cursor": "auto"})
    stale: bool = False

    def describe(self) -> dict[str, Any]:
        if self.stale:
            raise LocatorError("stale element reference")
        return {
            "tag": self.tag,
            "locator": self.locator,
            "type": self.attributes.get("type") or ("text" if self.tag == "input" else None),
            "text": self.text,
            "own_text": self.text if self.own_text is None else self.own_text,
            "attributes": dict(self.attributes),
            "parent_tag": self.parent_tag,
            "rect": dict(self.rect),
            "styles": dict(self.styles),
        }


class FakePage(PageQueryPort):
    """In-memory page: locators resolve through an explicit table."""

    def __init__(
        self,
        nodes: list[FakeNode] | None = None,
        locators: dict[str, list[FakeNode]] | None = None,
        unsupported: tuple[str, ...] = (),
        url: str = "http://localhost/app",
        title: str = "App",
    ) -> None:
        self.nodes = list(nodes or [])
        self.locators: dict[str, list[FakeNode]] = {}
        for node in self.nodes:
            if node.locator:
                self.locators.setdefault(node.locator, [node])
        self.locators.update(locators or {})
        self.unsupported = set(unsupported)
        self.url = url
        self.title = title
        self.calls: list[tuple[str, str]] = []

    def resolve(self, locator: str, *nodes: FakeNode) -> None:
        self.locators[locator] = list(nodes)

    def query_all(self, locator: str) -> list[FakeNode]:
        self.calls.append(("query_all", locator))
        if locator in self.unsupported:
            raise LocatorError(f"Unsupported locator: {locator}")
        return list(self.locators.get(locator, []))

    def query_first(self, locator: str) -> FakeNode | None:
        matches = self.query_all(locator)
        return matches[0] if matches else None

    def evaluate(self, script: str, *args: Any) -> Any:
        if script == DESCRIBE_ELEMENT_SCRIPT:
            self.calls.append(("evaluate", "describe"))
            return args[0].describe()
        if script == DOM_SNAPSHOT_SCRIPT:
            self.calls.append(("evaluate", "snapshot"))
            return [node.describe() for node in self.nodes if not node.stale][: args[1]]
        if script == ELEMENT_TEXT_SCRIPT:
            self.calls.append(("evaluate", "text"))
            return args[0].text
        if script == PAGE_CONTEXT_SCRIPT:
            self.calls.append(("evaluate", "context"))
            return {"url": self.url, "title": self.title}
        if script == PAGE_SOURCE_SCRIPT:
            self.calls.append(("evaluate", "source"))
            return f"<html><head><title>{self.title}</title></head><body></body></html>"
        raise LocatorError("Unknown script")

    def queried(self, locator: str) -> bool:
        return ("query_all", locator) in self.calls


class CountingStrategy:
    """Wraps a strategy callable and counts how often the chain runs it."""

    def __init__(self, strategy: LocatorStrategy) -> None:
        self.strategy = strategy
        self.calls = 0

    def __call__(self, context) -> list[str]:
        self.calls += 1
        return self.strategy.find(context)

    def as_strategy(self) -> LocatorStrategy:
        return LocatorStrategy(self.strategy.name, self)


def instrument(strategies) -> list[CountingStrategy]:
    return [CountingStrategy(strategy) for strategy in strategies]


def pointer_styles() -> dict[str, str]:
    return {"display": "block", "visibility": "visible", "cursor": "pointer"}


def hidden_styles() -> dict[str, str]:
    return {"display": "none", "visibility": "visible", "cursor": "auto"}


@contextmanager
def managed_page(engine_config, browser_name: str, url: str) -> Iterator[SeleniumPage]:
    session = BrowserSession(engine_config.environment)
    try:
        page = session.open(browser_name, url)
    except WebDriverException as exc:
        pytest.skip(f"WebDriver could not start for {browser_name}: {exc}")
    try:
        yield page
    finally:
        page.close()


def fixture_url(name: str) -> str:
    return (FIXTURES / name).as_uri()
