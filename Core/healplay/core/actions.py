from __future__ import annotations

import logging

from selenium.common.exceptions import WebDriverException

from healplay.core.exceptions import HealingFailedError

log = logging.getLogger(__name__)


class SafeActions:
    """Clicks and typing routed through the healing finder."""

    def __init__(self, driver, finder, artifact_manager=None) -> None:
        self.driver = driver
        self.finder = finder
        self.artifact_manager = artifact_manager

    def click(self, selector: str) -> str:
        """Clicks ``selector`` and returns the selector that was actually clicked."""

        try:
            self.finder.find(selector).click()
            return selector
        except HealingFailedError:
            self._keep_snapshot(selector)
            raise
        except WebDriverException as exc:
            log.warning("Click on %r failed (%s); invoking healer", selector, type(exc).__name__)
            healed = self.finder.heal(selector)
            if healed is None or healed == selector:
                self._keep_snapshot(selector)
                raise HealingFailedError(selector) from exc
            self.finder.find_by_selector(healed).click()
            return healed

    def type(self, selector: str, value: str, clear_first: bool = True) -> None:
        element = self.finder.find(selector)
        if clear_first:
            element.clear()
        element.send_keys(value)

    def _keep_snapshot(self, selector: str) -> None:
        if self.artifact_manager is None:
            return
        path = self.artifact_manager.write_dom_snapshot(selector, self.driver.page_source)
        log.warning("Saved DOM snapshot for unhealed selector %r to %s", selector, path)
