from __future__ import annotations

import http.client
import json
import logging
import time
from abc import ABC, abstractmethod
from collections.abc import Callable
from typing import Any
from urllib import error, request

from healplay.config.schema import HealingSettings
from healplay.core.exceptions import RateLimitedError, SelectorValidationError, SuggestionServiceError
from healplay.llm.parser import clean_selector_response
from healplay.llm.prompts import build_user_prompt

log = logging.getLogger(__name__)

Transport = Callable[[str, dict[str, Any], dict[str, str], float], dict[str, Any]]


class SelectorSuggestionClient(ABC):
    """Asks a remote model for a replacement selector, retrying on rate limits."""

    provider_name = "unknown"

    def __init__(
        self,
        model: str,
        max_retries: int = 6,
        backoff_ms: int = 500,
        max_snapshot_chars: int = 12000,
        sleep: Callable[[float], None] = time.sleep,
    ) -> None:
        self.model = model
        self.max_retries = max_retries
        self.backoff_ms = backoff_ms
        self.max_snapshot_chars = max_snapshot_chars
        self.sleep = sleep

    @abstractmethod
    def complete(self, prompt: str, model: str) -> str:
        """Sends one request and returns the raw text answer."""

    def suggest(
        self,
        failed_selector: str,
        html_snapshot: str,
        *,
        model: str | None = None,
        max_retries: int | None = None,
        backoff_ms: int | None = None,
    ) -> str | None:
        model = model or self.model
        attempts = max_retries or self.max_retries
        delay_ms = self.backoff_ms if backoff_ms is None else backoff_ms
        prompt = build_user_prompt(failed_selector, html_snapshot, self.max_snapshot_chars)

        for attempt in range(1, attempts + 1):
            try:
                raw = self.complete(prompt, model)
            except RateLimitedError:
                if attempt >= attempts:
                    log.warning("Rate-limited on final attempt %d/%d; giving up", attempt, attempts)
                    return None
                log.warning("Rate-limited. Retrying in %dms (attempt %d/%d)", delay_ms, attempt, attempts)
                self.sleep(delay_ms / 1000)
                delay_ms *= 2
                continue
            except SuggestionServiceError as exc:
                log.warning("Suggestion request failed: %s", exc)
                return None
            try:
                return clean_selector_response(raw)
            except SelectorValidationError as exc:
                log.warning("Discarding suggestion: %s", exc)
                return None
        return None


class OpenAISelectorSuggestionClient(SelectorSuggestionClient):
    provider_name = "openai"

    def __init__(
        self,
        api_key: str,
        model: str = "gpt-4o-mini",
        *,
        endpoint: str = "https://api.openai.com/v1/chat/completions",
        max_output_tokens: int = 50,
        timeout: float = 30.0,
        transport: Transport | None = None,
        **kwargs: Any,
    ) -> None:
        super().__init__(model, **kwargs)
        self.api_key = api_key
        self.endpoint = endpoint
        self.max_output_tokens = max_output_tokens
        self.timeout = timeout
        self.transport = transport or _post_json

    def complete(self, prompt: str, model: str) -> str:
        body = {
            "model": model,
            "messages": [{"role": "user", "content": prompt}],
            "temperature": 0,
            "max_tokens": self.max_output_tokens,
        }
        response = self.transport(
            self.endpoint,
            body,
            {
                "Authorization": f"Bearer {self.api_key}",
                "Content-Type": "application/json",
            },
            self.timeout,
        )
        try:
            return response["choices"][0]["message"]["content"] or ""
        except (KeyError, IndexError, TypeError) as exc:
            raise SuggestionServiceError("Suggestion service returned an unexpected payload") from exc


def create_suggestion_client(settings: HealingSettings, **kwargs: Any) -> SelectorSuggestionClient | None:
    if not settings.ai_enabled:
        return None
    return OpenAISelectorSuggestionClient(
        settings.api_key or "",
        settings.model,
        endpoint=settings.endpoint,
        max_output_tokens=settings.max_output_tokens,
        timeout=settings.request_timeout_seconds,
        max_retries=settings.max_ai_retries,
        backoff_ms=settings.backoff_ms,
        max_snapshot_chars=settings.max_snapshot_chars,
        **kwargs,
    )


def _post_json(url: str, payload: dict[str, Any], headers: dict[str, str], timeout: float) -> dict[str, Any]:
    encoded = json.dumps(payload).encode("utf-8")
    req = request.Request(url, data=encoded, headers=headers, method="POST")
    try:
        with request.urlopen(req, timeout=timeout) as response:
            body = response.read()
    except error.HTTPError as exc:
        if exc.code == 429:
            raise RateLimitedError() from exc
        detail = exc.read().decode("utf-8", errors="replace")
        raise SuggestionServiceError(f"Suggestion request failed with status {exc.code}: {detail}", status=exc.code) from exc
    except (error.URLError, http.client.HTTPException, OSError) as exc:
        reason = getattr(exc, "reason", exc)
        raise SuggestionServiceError(f"Suggestion request could not be completed: {reason}") from exc
    try:
        return json.loads(body.decode("utf-8"))
    except (UnicodeDecodeError, json.JSONDecodeError) as exc:
        raise SuggestionServiceError("Suggestion service returned invalid JSON") from exc
