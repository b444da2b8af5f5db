from __future__ import annotations

import json
import logging
from pathlib import Path
from typing import Any

from healplay.core.metadata import HealAttempt

log = logging.getLogger(__name__)


class HealingAuditLogger:
    """Appends one JSON line per healing attempt."""

    def __init__(self, root: str | Path = "artifacts") -> None:
        self.root = Path(root)
        self.root.mkdir(parents=True, exist_ok=True)
        self.healed_elements_path = self.root / "healed_elements.jsonl"

    def write(self, attempt: HealAttempt) -> None:
        try:
            with self.healed_elements_path.open("a", encoding="utf-8") as handle:
                handle.write(json.dumps(attempt.to_payload()) + "\n")
        except OSError as exc:
            log.warning("Could not record heal attempt for %r: %s", attempt.broken_selector, exc)

    def read_attempts(self) -> list[dict[str, Any]]:
        if not self.healed_elements_path.exists():
            return []
        attempts = []
        with self.healed_elements_path.open("r", encoding="utf-8") as handle:
            for line in handle:
                if line.strip():
                    attempts.append(json.loads(line))
        return attempts
