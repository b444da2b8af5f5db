from __future__ import annotations

import re
import shutil
from datetime import UTC, datetime
from pathlib import Path

_UNSAFE = re.compile(r"[^A-Za-z0-9_-]+")


class ArtifactManager:
    """Keeps DOM snapshots of heals that failed."""

    def __init__(self, root: str | Path = "artifacts") -> None:
        self.root = Path(root)
        self.dom_root = self.root / "dom_snapshots"
        self.dom_root.mkdir(parents=True, exist_ok=True)

    @staticmethod
    def timestamp() -> str:
        return datetime.now(UTC).strftime("%Y%m%dT%H%M%S%fZ")

    def write_dom_snapshot(self, selector: str, page_source: str, timestamp: str | None = None) -> Path:
        stamp = timestamp or self.timestamp()
        slug = _UNSAFE.sub("_", selector).strip("_") or "selector"
        path = self.dom_root / f"{stamp}_{slug[:60]}.html"
        path.write_text(page_source, encoding="utf-8")
        return path

    def reset(self) -> Path:
        if self.root.exists():
            for child in self.root.iterdir():
                if child.is_dir():
                    shutil.rmtree(child)
                elif child.name != ".gitkeep":
                    child.unlink()
        self.dom_root.mkdir(parents=True, exist_ok=True)
        return self.root
