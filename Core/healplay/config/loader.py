from __future__ import annotations

import json
import os
from collections.abc import Mapping
from pathlib import Path
from typing import Any

from healplay.config.schema import HealingSettings, SuiteConfig

_ENV_FIELDS = {
    "OPENAI_API_KEY": "api_key",
    "OPENAI_MODEL": "model",
    "OPENAI_ENDPOINT": "endpoint",
    "HEAL_MAX_SNAPSHOT_CHARS": "max_snapshot_chars",
    "HEAL_MAX_AI_RETRIES": "max_ai_retries",
    "HEAL_BACKOFF_MS": "backoff_ms",
    "HEAL_ALLOW_AI": "allow_ai_by_default",
    "HEAL_DISABLE_AI": "ai_disabled",
    "HEAL_CACHE_PATH": "cache_path",
    "HEAL_AUDIT_ROOT": "audit_root",
    "HEAL_LOG_LEVEL": "log_level",
}


class ConfigLoader:
    """Loads the JSON suite configuration and the environment-driven healing settings."""

    @staticmethod
    def load(path: str | Path) -> SuiteConfig:
        config_path = Path(path)
        with config_path.open("r", encoding="utf-8") as handle:
            payload = json.load(handle)
        return SuiteConfig.model_validate(payload)

    @staticmethod
    def from_env(environ: Mapping[str, str] | None = None) -> HealingSettings:
        source = os.environ if environ is None else environ
        payload: dict[str, Any] = {}
        for variable, field_name in _ENV_FIELDS.items():
            value = source.get(variable)
            if value is None or not value.strip():
                continue
            payload[field_name] = value.strip()
        return HealingSettings.model_validate(payload)
