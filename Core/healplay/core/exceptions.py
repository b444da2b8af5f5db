from __future__ import annotations


class HealingError(RuntimeError):
    """Raised when selector healing fails."""


class SelectorValidationError(HealingError):
    """Raised when a suggestion is not a usable selector."""


class SuggestionServiceError(HealingError):
    """Raised when the remote suggestion service cannot answer."""

    def __init__(self, message: str, status: int | None = None) -> None:
        super().__init__(message)
        self.status = status


class RateLimitedError(SuggestionServiceError):
    """Raised on HTTP 429 from the suggestion service."""

    def __init__(self, message: str = "Suggestion service rate limited the request") -> None:
        super().__init__(message, status=429)


class HealingFailedError(HealingError):
    """Raised by the action layer when an action failed and nothing could be healed."""

    def __init__(self, selector: str) -> None:
        super().__init__(f"Could not heal selector {selector!r}")
        self.selector = selector
