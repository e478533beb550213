from __future__ import annotations

from abc import ABC, abstractmethod
from typing import Any

from selenium.common.exceptions import (
    InvalidSelectorException,
    JavascriptException,
    StaleElementReferenceException,
)
from selenium.webdriver.common.by import By

from uiheal.core.exceptions import LocatorError
from uiheal.utils.locators import infer_locator_type


class PageQueryPort(ABC):
    """Minimal live-page capability the engine depends on.

    Scripts passed to ``evaluate`` are function bodies that read their
    arguments from ``arguments`` and ``return`` a serializable value, which is
    the convention of Selenium's ``execute_script``. Element handles may be
    passed as arguments.
    """

    @abstractmethod
    def query_all(self, locator: str) -> list[Any]:
        raise NotImplementedError

    @abstractmethod
    def query_first(self, locator: str) -> Any | None:
        raise NotImplementedError

    @abstractmethod
    def evaluate(self, script: str, *args: Any) -> Any:
        raise NotImplementedError


class SeleniumPage(PageQueryPort):
    """PageQueryPort backed by a Selenium WebDriver."""

    def __init__(self, driver) -> None:
        self.driver = driver

    def close(self) -> None:
        self.driver.quit()

    def query_all(self, locator: str) -> list[Any]:
        try:
            return list(self.driver.find_elements(self._by(locator), locator))
        except InvalidSelectorException as exc:
            raise LocatorError(f"Unsupported locator: {locator}") from exc

    def query_first(self, locator: str) -> Any | None:
        matches = self.query_all(locator)
        return matches[0] if matches else None

    def evaluate(self, script: str, *args: Any) -> Any:
        try:
            return self.driver.execute_script(script, *args)
        except (JavascriptException, StaleElementReferenceException) as exc:
            raise LocatorError(f"Script evaluation failed: {exc.msg}") from exc

    @staticmethod
    def _by(locator: str) -> str:
        return By.XPATH if infer_locator_type(locator) == "xpath" else By.CSS_SELECTOR
