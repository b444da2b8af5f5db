from __future__ import annotations

import logging

from healplay.config.schema import HealingOptions, HealingSettings, HealOrigin
from healplay.core.cache import SelectorCache
from healplay.core.dom_index import DomIndex
from healplay.core.metadata import HealAttempt
from healplay.llm.client import SelectorSuggestionClient
from healplay.logging.audit import HealingAuditLogger
from healplay.utils.scoring import DEFAULT_PROFILE, ScoringProfile, heuristic_heal

log = logging.getLogger(__name__)


class Healer:
    """Runs the cache -> heuristic -> AI cascade for one broken selector at a time.

    Every candidate, whatever its source, must pass ``DomIndex.is_clickable``
    against the snapshot being healed before it is returned or cached.
    """

    def __init__(
        self,
        settings: HealingSettings,
        cache: SelectorCache,
        suggestion_client: SelectorSuggestionClient | None = None,
        audit_logger: HealingAuditLogger | None = None,
        profile: ScoringProfile = DEFAULT_PROFILE,
    ) -> None:
        self.settings = settings
        self.cache = cache
        self.suggestion_client = suggestion_client
        self.audit_logger = audit_logger
        self.profile = profile

    def heal(self, broken_selector: str, html_snapshot: str, options: HealingOptions | None = None) -> str | None:
        options = options or HealingOptions()
        index = DomIndex(html_snapshot)
        attempt = HealAttempt(broken_selector=broken_selector)
        try:
            selector, origin = self._run_cascade(broken_selector, html_snapshot, index, options, attempt)
            attempt.healed_selector = selector
            attempt.origin = origin
            attempt.success = selector is not None
        finally:
            self._record(attempt)
        if selector is None:
            log.warning("Failed to heal selector %r", broken_selector)
        return selector

    def ai_enabled(self, options: HealingOptions) -> bool:
        if self.settings.ai_disabled or self.suggestion_client is None:
            return False
        allow_ai = self.settings.allow_ai_by_default if options.allow_ai is None else options.allow_ai
        return allow_ai and self.settings.ai_enabled

    def _run_cascade(
        self,
        broken_selector: str,
        html_snapshot: str,
        index: DomIndex,
        options: HealingOptions,
        attempt: HealAttempt,
    ) -> tuple[str | None, HealOrigin | None]:
        attempt.stages.append("cache")
        cached = self.cache.get(broken_selector)
        if cached is not None:
            if index.is_clickable(cached.selector):
                log.info("Using cached selector %s for %r", cached.selector, broken_selector)
                return cached.selector, "cache"
            log.info("Cached selector %s no longer resolves to a clickable element", cached.selector)

        if options.prefer_heuristic:
            attempt.stages.append("heuristic")
            log.info("Trying heuristic healing for %r", broken_selector)
            candidate = heuristic_heal(index, broken_selector, self.profile)
            if candidate and index.is_clickable(candidate):
                log.info("Heuristic found %s", candidate)
                self.cache.set(broken_selector, candidate, "heuristic")
                return candidate, "heuristic"
            log.info("Heuristic could not find a valid clickable target")

        if self.ai_enabled(options):
            attempt.stages.append("ai")
            log.info("Falling back to AI for %r", broken_selector)
            candidate = self.suggestion_client.suggest(
                broken_selector,
                html_snapshot,
                model=options.model,
                max_retries=options.max_ai_retries,
                backoff_ms=options.backoff_ms,
            )
            if candidate and index.is_clickable(candidate):
                log.info("AI found %s", candidate)
                self.cache.set(broken_selector, candidate, "ai")
                return candidate, "ai"
            log.warning("AI fallback failed or returned a non-clickable selector: %r", candidate)

        return None, None

    def _record(self, attempt: HealAttempt) -> None:
        if self.audit_logger is not None:
            self.audit_logger.write(attempt)
