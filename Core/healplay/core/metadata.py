from __future__ import annotations

from dataclasses import dataclass, field
from datetime import UTC, datetime
from typing import Any


@dataclass(frozen=True, slots=True)
class ElementRecord:
    tag: str
    id: str
    classes: tuple[str, ...]
    attributes: dict[str, str]
    data_attributes: dict[str, str]
    text: str

    def attr(self, name: str) -> str:
        return self.attributes.get(name, "")

    @property
    def class_text(self) -> str:
        return " ".join(self.classes)


@dataclass(slots=True)
class Candidate:
    element: ElementRecord
    selector: str
    score: float = 0.0


@dataclass(slots=True)
class HealAttempt:
    broken_selector: str
    stages: list[str] = field(default_factory=list)
    healed_selector: str | None = None
    origin: str | None = None
    success: bool = False
    timestamp: str = field(default_factory=lambda: datetime.now(UTC).isoformat())

    def to_payload(self) -> dict[str, Any]:
        return {
            "broken_selector": self.broken_selector,
            "stages": list(self.stages),
            "healed_selector": self.healed_selector,
            "origin": self.origin,
            "success": self.success,
            "timestamp": self.timestamp,
        }
