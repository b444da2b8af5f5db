from __future__ import annotations

from contextlib import contextmanager
from dataclasses import dataclass, field
from typing import Any, Iterator
from urllib import error, request

import pytest
from selenium.common.exceptions import WebDriverException

from healplay.config.loader import ConfigLoader
from healplay.config.schema import HealingOptions
from healplay.core.actions import SafeActions
from healplay.core.browser import BrowserSession
from healplay.core.cache import JsonFileSelectorCache
from healplay.core.exceptions import RateLimitedError, SuggestionServiceError
from healplay.core.finder import SafeFinder
from healplay.core.healer import Healer
from healplay.llm.client import create_suggestion_client
from healplay.logging.artifacts import ArtifactManager
from healplay.logging.audit import HealingAuditLogger
from healplay.logging.setup import configure_logging

LOGIN_PAGE = """
<html>
  <body>
    <div class="login-container">
      <form id="login-form">
        <input type="text" id="user-name" data-test="username" name="user-name" placeholder="Username">
        <input type="password" id="password" data-test="password" name="password" placeholder="Password">
        <button id="login-button" data-test="login-button">Login</button>
      </form>
    </div>
    <a href="/help" class="link">Help</a>
  </body>
</html>
"""


def chat_response(content: str) -> dict[str, Any]:
    return {"choices": [{"message": {"role": "assistant", "content": content}}]}


@dataclass
class ScriptedTransport:
    """Replays queued answers; an exception instance in the queue is raised instead."""

    answers: list[Any]
    calls: list[dict[str, Any]] = field(default_factory=list)

    def __call__(self, url: str, payload: dict[str, Any], headers: dict[str, str], timeout: float) -> dict[str, Any]:
        self.calls.append({"url": url, "payload": payload, "headers": headers, "timeout": timeout})
        answer = self.answers.pop(0) if len(self.answers) > 1 else self.answers[0]
        if isinstance(answer, Exception):
            raise answer
        return chat_response(answer) if isinstance(answer, str) else answer


def rate_limited() -> RateLimitedError:
    return RateLimitedError()


def server_error(status: int = 500) -> SuggestionServiceError:
    return SuggestionServiceError(f"Suggestion request failed with status {status}", status=status)


class RecordingSuggestionClient:
    """Stands in for a remote client and remembers every call."""

    provider_name = "recording"

    def __init__(self, answer: str | None) -> None:
        self.answer = answer
        self.calls: list[dict[str, Any]] = []

    def suggest(self, failed_selector: str, html_snapshot: str, **kwargs: Any) -> str | None:
        self.calls.append({"failed_selector": failed_selector, **kwargs})
        return self.answer


@dataclass(slots=True)
class FrameworkRuntime:
    driver: object
    healer: Healer
    finder: SafeFinder
    actions: SafeActions
    audit_logger: HealingAuditLogger


def require_reachable_base_url(suite_config) -> None:
    try:
        with request.urlopen(suite_config.environment.base_url, timeout=5):
            return
    except (error.URLError, TimeoutError) as exc:
        pytest.skip(f"Target app is not reachable at {suite_config.environment.base_url}: {exc}")


@contextmanager
def managed_runtime(suite_config, browser_name: str, tmp_path) -> Iterator[FrameworkRuntime]:
    settings = ConfigLoader.from_env().model_copy(
        update={"cache_path": str(tmp_path / "healed-locators.json"), "audit_root": str(tmp_path / "audit")}
    )
    configure_logging(settings.log_level)
    try:
        driver = BrowserSession(suite_config.environment).start(browser_name)
    except WebDriverException as exc:
        pytest.skip(f"WebDriver could not start for {browser_name}: {exc}")
    audit_logger = HealingAuditLogger(settings.audit_root)
    healer = Healer(
        settings,
        JsonFileSelectorCache(settings.cache_path),
        create_suggestion_client(settings),
        audit_logger,
    )
    finder = SafeFinder(
        driver,
        healer,
        timeout=suite_config.environment.default_timeout_seconds,
        options=HealingOptions(allow_ai=False),
    )
    actions = SafeActions(driver, finder, ArtifactManager(settings.audit_root))
    try:
        yield FrameworkRuntime(driver=driver, healer=healer, finder=finder, actions=actions, audit_logger=audit_logger)
    finally:
        driver.quit()
