from __future__ import annotations

import logging

from selenium.common.exceptions import InvalidSelectorException, TimeoutException
from selenium.webdriver.common.by import By

from healplay.config.schema import HealingOptions
from healplay.core.exceptions import HealingFailedError
from healplay.llm.parser import infer_selector_type
from healplay.utils.wait import wait_until

log = logging.getLogger(__name__)


class SafeFinder:
    """Element lookup that falls back to the healer when a selector stops resolving."""

    def __init__(self, driver, healer, timeout: float = 10, options: HealingOptions | None = None) -> None:
        self.driver = driver
        self.healer = healer
        self.timeout = timeout
        self.options = options
        self.healed: dict[str, str] = {}

    def find(self, selector: str, timeout: float | None = None):
        duration = self.timeout if timeout is None else timeout
        known = self.healed.get(selector)
        selectors = [known, selector] if known else [selector]
        element = self._first_match(selectors, duration)
        if element is not None:
            return element
        log.warning("Selector %r did not resolve within %ss; invoking healer", selector, duration)
        healed = self.heal(selector)
        if healed is None:
            raise HealingFailedError(selector) from TimeoutException(f"Timed out waiting for {selector}")
        return self.find_by_selector(healed, timeout=duration)

    def heal(self, selector: str) -> str | None:
        healed = self.healer.heal(selector, self.driver.page_source, self.options)
        if healed is not None:
            self.healed[selector] = healed
        return healed

    def find_by_selector(self, selector: str, timeout: float | None = None):
        duration = self.timeout if timeout is None else timeout
        element = self._first_match([selector], duration)
        if element is None:
            raise TimeoutException(f"Timed out waiting for {selector}")
        return element

    def _first_match(self, selectors: list[str], timeout: float):
        specs = [(By.XPATH if infer_selector_type(item) == "xpath" else By.CSS_SELECTOR, item) for item in selectors]

        def lookup():
            for by, selector in specs:
                try:
                    matches = self.driver.find_elements(by, selector)
                except InvalidSelectorException:
                    continue
                if matches:
                    return matches[0]
            return None

        return wait_until(lookup, timeout)
