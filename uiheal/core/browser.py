from __future__ import annotations

import logging

from selenium import webdriver
from selenium.webdriver import ChromeOptions, FirefoxOptions

from uiheal.config.schema import EnvironmentConfig
from uiheal.core.page import SeleniumPage

log = logging.getLogger(__name__)


class BrowserSession:
    """Opens pages in the browsers of the configured matrix."""

    def __init__(self, environment: EnvironmentConfig) -> None:
        self.environment = environment

    def open(self, browser_name: str, url: str | None = None) -> SeleniumPage:
        """Starts ``browser_name`` and loads ``url`` (or the base url).

        The caller owns the returned page and must ``close`` it.
        """

        driver = self._driver(browser_name.lower())
        target = url or self.environment.base_url
        try:
            driver.get(target)
        except Exception:
            driver.quit()
            raise
        log.info("Opened %s in %s", target, browser_name)
        return SeleniumPage(driver)

    def _driver(self, browser_name: str):
        if browser_name not in self.environment.browser_matrix:
            raise ValueError(f"Browser {browser_name} is not in the configured matrix")
        match browser_name:
            case "chrome":
                options = ChromeOptions()
                if self.environment.headless:
                    options.add_argument("--headless=new")
                options.add_argument("--window-size=1440,1200")
                driver = webdriver.Chrome(options=options)
            case "firefox":
                options = FirefoxOptions()
                if self.environment.headless:
                    options.add_argument("-headless")
                driver = webdriver.Firefox(options=options)
            case _:
                raise ValueError(f"Unsupported browser: {browser_name}")
        driver.set_page_load_timeout(self.environment.default_timeout_seconds)
        driver.implicitly_wait(0)
        return driver
