from __future__ import annotations

from pathlib import Path

import pytest

from healplay.config.loader import ConfigLoader
from healplay.config.schema import HealingSettings
from healplay.core.cache import JsonFileSelectorCache
from healplay.logging.artifacts import ArtifactManager
from tests.helpers import LOGIN_PAGE


@pytest.fixture(scope="session", autouse=True)
def reset_artifacts_for_test_run():
    artifacts_root = Path(__file__).resolve().parents[1] / "artifacts"
    manager = ArtifactManager(artifacts_root)
    manager.reset()
    return manager


@pytest.fixture()
def suite_config():
    config_path = Path(__file__).resolve().parents[1] / "config" / "test_suite.json"
    return ConfigLoader.load(config_path)


@pytest.fixture()
def login_page() -> str:
    return LOGIN_PAGE


@pytest.fixture()
def settings(tmp_path) -> HealingSettings:
    return HealingSettings(cache_path=str(tmp_path / "healed-locators.json"), audit_root=str(tmp_path / "audit"))


@pytest.fixture()
def file_cache(settings) -> JsonFileSelectorCache:
    return JsonFileSelectorCache(settings.cache_path)
