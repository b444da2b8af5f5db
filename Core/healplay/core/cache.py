"""Durable mapping from a broken selector to its last healed replacement.

The JSON file backend does a whole-file read-modify-write on every ``set``.
Writes inside one process are serialised and land through an atomic rename,
but there is no lock across processes: parallel test workers sharing one
file race, and the last writer wins.
"""

from __future__ import annotations

import json
import logging
import os
import tempfile
import threading
from abc import ABC, abstractmethod
from datetime import UTC, datetime
from pathlib import Path
from typing import Any

from pydantic import ValidationError

from healplay.config.schema import HealedEntry, HealOrigin

log = logging.getLogger(__name__)


class SelectorCache(ABC):
    """Store interface used by the healer."""

    @abstractmethod
    def get(self, broken_selector: str) -> HealedEntry | None:
        raise NotImplementedError

    @abstractmethod
    def set(self, broken_selector: str, selector: str, origin: HealOrigin) -> HealedEntry | None:
        raise NotImplementedError


class InMemorySelectorCache(SelectorCache):
    def __init__(self) -> None:
        self.entries: dict[str, HealedEntry] = {}

    def get(self, broken_selector: str) -> HealedEntry | None:
        return self.entries.get(broken_selector)

    def set(self, broken_selector: str, selector: str, origin: HealOrigin) -> HealedEntry:
        entry = HealedEntry(selector=selector, origin=origin, healed_at=datetime.now(UTC))
        self.entries[broken_selector] = entry
        return entry


class JsonFileSelectorCache(SelectorCache):
    def __init__(self, path: str | Path = "healed-locators.json") -> None:
        self.path = Path(path)
        self._lock = threading.Lock()

    def get(self, broken_selector: str) -> HealedEntry | None:
        return self.read_all().get(broken_selector)

    def set(self, broken_selector: str, selector: str, origin: HealOrigin) -> HealedEntry | None:
        entry = HealedEntry(selector=selector, origin=origin, healed_at=datetime.now(UTC))
        with self._lock:
            entries = self.read_all()
            entries[broken_selector] = entry
            if not self._write_all(entries):
                return None
        return entry

    def read_all(self) -> dict[str, HealedEntry]:
        try:
            if not self.path.exists():
                return {}
            raw = self.path.read_text(encoding="utf-8")
            payload = json.loads(raw) if raw.strip() else {}
        except (OSError, UnicodeDecodeError, json.JSONDecodeError) as exc:
            log.warning("Failed to read healed selector cache %s: %s", self.path, exc)
            return {}
        if not isinstance(payload, dict):
            log.warning("Healed selector cache %s is not a JSON object; ignoring it", self.path)
            return {}
        entries: dict[str, HealedEntry] = {}
        for key, value in payload.items():
            try:
                entries[key] = HealedEntry.model_validate(value)
            except ValidationError as exc:
                log.warning("Skipping malformed cache entry for %r: %s", key, exc.errors()[0]["msg"])
        return entries

    def _write_all(self, entries: dict[str, HealedEntry]) -> bool:
        payload: dict[str, Any] = {key: entry.model_dump(mode="json") for key, entry in entries.items()}
        try:
            self.path.parent.mkdir(parents=True, exist_ok=True)
            fd, temp_name = tempfile.mkstemp(prefix=f".{self.path.name}.", dir=self.path.parent)
            try:
                with os.fdopen(fd, "w", encoding="utf-8") as handle:
                    json.dump(payload, handle, indent=2, sort_keys=True)
                os.replace(temp_name, self.path)
            except BaseException:
                Path(temp_name).unlink(missing_ok=True)
                raise
        except OSError as exc:
            log.warning("Failed to write healed selector cache %s: %s", self.path, exc)
            return False
        log.info("Saved %d healed selector(s) to %s", len(entries), self.path)
        return True
