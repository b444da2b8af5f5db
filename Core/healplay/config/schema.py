from __future__ import annotations

import logging
from datetime import UTC, datetime
from typing import Literal

from pydantic import BaseModel, Field, field_validator

HealOrigin = Literal["cache", "heuristic", "ai"]


class HealedEntry(BaseModel):
    selector: str
    origin: HealOrigin
    healed_at: datetime = Field(default_factory=lambda: datetime.now(UTC))


class HealingOptions(BaseModel):
    """Per-call switches. Unset values fall back to ``HealingSettings``."""

    prefer_heuristic: bool = True
    allow_ai: bool | None = None
    model: str | None = None
    max_ai_retries: int | None = Field(default=None, ge=1)
    backoff_ms: int | None = Field(default=None, ge=0)


class HealingSettings(BaseModel):
    api_key: str | None = None
    model: str = "gpt-4o-mini"
    endpoint: str = "https://api.openai.com/v1/chat/completions"
    max_snapshot_chars: int = Field(default=12000, gt=0)
    max_ai_retries: int = Field(default=6, ge=1)
    backoff_ms: int = Field(default=500, ge=0)
    max_output_tokens: int = Field(default=50, gt=0)
    request_timeout_seconds: float = Field(default=30.0, gt=0)
    allow_ai_by_default: bool = True
    ai_disabled: bool = False
    cache_path: str = "healed-locators.json"
    audit_root: str = "artifacts"
    log_level: str = "INFO"

    @field_validator("log_level")
    @classmethod
    def validate_log_level(cls, value: str) -> str:
        normalized = value.upper()
        if not isinstance(logging.getLevelName(normalized), int):
            raise ValueError(f"Unknown log level: {value}")
        return normalized

    @property
    def ai_enabled(self) -> bool:
        return bool(self.api_key) and not self.ai_disabled


class EnvironmentConfig(BaseModel):
    base_url: str
    browser_matrix: list[str] = Field(default_factory=lambda: ["chrome"])
    default_timeout_seconds: int = 10
    headless: bool = False
    window_size: tuple[int, int] = (1280, 1024)

    @field_validator("browser_matrix")
    @classmethod
    def validate_browsers(cls, value: list[str]) -> list[str]:
        allowed = {"chrome", "firefox"}
        normalized = [item.lower() for item in value]
        invalid = [item for item in normalized if item not in allowed]
        if invalid:
            raise ValueError(f"Unsupported browsers: {', '.join(invalid)}")
        return normalized


class CredentialSet(BaseModel):
    username: str
    password: str


class ElementDefinition(BaseModel):
    key: str
    selector: str


class SuiteConfig(BaseModel):
    environment: EnvironmentConfig
    credentials: CredentialSet
    elements: list[ElementDefinition] = Field(default_factory=list)

    def get_element(self, key: str) -> ElementDefinition:
        for element in self.elements:
            if element.key == key:
                return element
        raise KeyError(f"Unknown element key: {key}")
