from __future__ import annotations

import logging

from selenium import webdriver
from selenium.webdriver import ChromeOptions, FirefoxOptions

from healplay.config.schema import EnvironmentConfig

log = logging.getLogger(__name__)


class BrowserSession:
    """Starts local Chrome or Firefox drivers through Selenium Manager."""

    def __init__(self, environment: EnvironmentConfig) -> None:
        self.environment = environment

    def start(self, browser_name: str):
        normalized = browser_name.lower()
        width, height = self.environment.window_size
        if normalized == "chrome":
            chrome_options = ChromeOptions()
            if self.environment.headless:
                chrome_options.add_argument("--headless=new")
            chrome_options.add_argument(f"--window-size={width},{height}")
            driver = webdriver.Chrome(options=chrome_options)
        elif normalized == "firefox":
            firefox_options = FirefoxOptions()
            if self.environment.headless:
                firefox_options.add_argument("-headless")
            driver = webdriver.Firefox(options=firefox_options)
            driver.set_window_size(width, height)
        else:
            raise ValueError(f"Unsupported browser: {browser_name}")
        driver.set_page_load_timeout(self.environment.default_timeout_seconds)
        # Explicit polling in SafeFinder replaces implicit waits.
        driver.implicitly_wait(0)
        log.info("Started %s (headless=%s)", normalized, self.environment.headless)
        return driver

