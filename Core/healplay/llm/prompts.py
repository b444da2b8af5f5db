from __future__ import annotations

INSTRUCTIONS = """Return ONLY one line: a single CSS selector for the clickable element the failed selector was meant to hit (a button, a submit input or a button-styled link).
Rules:
1. Use only elements present in the HTML snapshot.
2. Prefer an id (#id) or a [data-test] attribute selector when one is available.
3. Never return a container, wrapper, form, panel or section element.
4. No explanation, no quotes, no markdown, no code fence."""


def build_user_prompt(failed_selector: str, html_snapshot: str, max_chars: int = 12000) -> str:
    """Builds the repair prompt with the snapshot truncated to ``max_chars``."""

    return (
        "You are helping fix a broken CSS selector in an end-to-end test.\n"
        f"Failed selector: {failed_selector}\n\n"
        "HTML snapshot (truncated):\n"
        f"{html_snapshot[:max_chars]}\n\n"
        f"{INSTRUCTIONS}"
    )
