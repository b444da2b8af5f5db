from __future__ import annotations

import re

from healplay.core.exceptions import SelectorValidationError

_CONTAINER_MARKER = re.compile(r"login-container|wrapper|container", re.IGNORECASE)


def infer_selector_type(selector: str) -> str:
    stripped = selector.strip()
    if stripped.startswith("/") or stripped.startswith("("):
        return "xpath"
    return "css"


def clean_selector_response(response: str) -> str:
    """Reduces a model answer to one bare selector line."""

    lines = response.strip().splitlines()
    selector = lines[0].strip() if lines else ""
    selector = selector.strip("`\"' \t")
    if not selector:
        raise SelectorValidationError("Suggestion service returned an empty selector")
    if _CONTAINER_MARKER.search(selector):
        raise SelectorValidationError(f"Suggestion {selector!r} points at a container")
    return selector
