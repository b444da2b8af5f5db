from __future__ import annotations

import logging
import re
from dataclasses import dataclass

from healplay.core.dom_index import DomIndex
from healplay.core.metadata import Candidate, ElementRecord

log = logging.getLogger(__name__)

CLICKABLE_SELECTORS = (
    "button",
    'input[type="submit"]',
    'input[type="button"]',
    '[role="button"]',
    "a.btn",
    'a[role="button"]',
)
STRUCTURAL_MARKERS = ("container", "wrapper", "form", "box", "panel", "section")
WRAPPER_MARKERS = ("container", "wrapper")

# Attribute name, points per matching token.
ATTRIBUTE_WEIGHTS = (
    ("id", 12),
    ("data-test", 14),
    ("data-testid", 10),
    ("name", 8),
    ("aria-label", 6),
    ("value", 4),
    ("class", 2),
)
TEXT_WEIGHT = 6

_SELECTOR_SYNTAX = re.compile(r"[#.\[\]=:\"']")
_NON_ALNUM = re.compile(r"[^a-zA-Z0-9]+")
_BARE_ID = re.compile(r"^#[-a-zA-Z0-9_]+$")
_CONTAINER_GUARD = re.compile(r"(^|[\"'\-\s])(login-container|wrapper|container)([\"'\-\s]|$)", re.IGNORECASE)


@dataclass(frozen=True, slots=True)
class ScoringProfile:
    """Site-specific nudges. ``canonical_targets`` are id/data-test values known to be right."""

    canonical_targets: tuple[str, ...] = ("login-button",)
    affinity_tokens: tuple[str, ...] = ("login", "button")


DEFAULT_PROFILE = ScoringProfile()


def heuristic_heal(index: DomIndex, broken_selector: str, profile: ScoringProfile = DEFAULT_PROFILE) -> str | None:
    tokens = extract_tokens(broken_selector, profile.affinity_tokens)
    log.info("Heuristic extracted tokens: %s", ", ".join(tokens) or "(none)")
    ranked = score_candidates(index, tokens, profile)
    if not ranked:
        return None
    best = ranked[0]
    if _CONTAINER_GUARD.search(best.selector):
        log.info("Best heuristic candidate %s looks like a container; rejecting it", best.selector)
        return None
    return best.selector


def extract_tokens(selector: str, affinity_tokens: tuple[str, ...] = DEFAULT_PROFILE.affinity_tokens) -> list[str]:
    raw = [part.lower() for part in _NON_ALNUM.split(_SELECTOR_SYNTAX.sub(" ", selector)) if part]
    tokens = [token for token in dict.fromkeys(raw) if len(token) >= 3]
    rank = {token: position - len(affinity_tokens) for position, token in enumerate(affinity_tokens)}
    return sorted(tokens, key=lambda token: rank.get(token, 0))


def score_candidates(
    index: DomIndex,
    tokens: list[str],
    profile: ScoringProfile = DEFAULT_PROFILE,
) -> list[Candidate]:
    """Scores clickable candidates, best first. Ties keep the order of ``CLICKABLE_SELECTORS``, so buttons beat inputs and links."""

    scored: list[Candidate] = []
    for element in index.candidates(CLICKABLE_SELECTORS):
        if _contains_any(f"{element.id} {element.class_text}".lower(), STRUCTURAL_MARKERS):
            continue
        selector = build_selector(element)
        scored.append(Candidate(element=element, selector=selector, score=score_element(element, selector, tokens, profile)))
    scored.sort(key=lambda item: item.score, reverse=True)
    return scored


def score_element(element: ElementRecord, selector: str, tokens: list[str], profile: ScoringProfile) -> float:
    score = 0.0
    if element.tag == "button":
        score += 8
    if element.tag == "input" and element.attr("type").lower() in {"submit", "button"}:
        score += 8
    if element.tag == "a":
        score += 3

    data_test = element.attr("data-test").lower()
    element_id = element.id.lower()
    canonical = {target.lower() for target in profile.canonical_targets}
    if data_test in canonical:
        score += 50
    if element_id in canonical:
        score += 50

    for name, weight in ATTRIBUTE_WEIGHTS:
        score += token_match_score(tokens, element.attr(name), weight)
    score += token_match_score(tokens, element.text, TEXT_WEIGHT)

    if _contains_any(data_test, WRAPPER_MARKERS):
        score -= 30
    if _contains_any(element_id, WRAPPER_MARKERS):
        score -= 30

    if profile.affinity_tokens and all(token in f"{element_id} {data_test}" for token in profile.affinity_tokens):
        score += 40

    if _BARE_ID.match(selector):
        score += 8
    if selector.startswith("[data-test="):
        score += 6
    return score


def token_match_score(tokens: list[str], value: str, weight: int) -> int:
    if not value:
        return 0
    haystack = value.lower()
    return sum(weight for token in tokens if token in haystack)


def build_selector(element: ElementRecord) -> str:
    """Addresses ``element`` by its most stable attribute: id > data-test > data-testid > name > aria-label > class > tag."""

    if element.id and not _contains_any(element.id.lower(), WRAPPER_MARKERS):
        return f"#{element.id}"
    data_test = element.attr("data-test")
    if data_test and not _contains_any(data_test.lower(), WRAPPER_MARKERS):
        return f'[data-test="{_escape(data_test)}"]'
    data_testid = element.attr("data-testid")
    if data_testid:
        return f'[data-testid="{_escape(data_testid)}"]'
    if element.attr("name"):
        return f'{element.tag}[name="{_escape(element.attr("name"))}"]'
    if element.attr("aria-label"):
        return f'{element.tag}[aria-label*="{_escape(element.attr("aria-label"))}"]'
    if element.classes and not _contains_any(element.classes[0].lower(), WRAPPER_MARKERS):
        return f".{element.classes[0]}"
    return element.tag


def _contains_any(haystack: str, needles: tuple[str, ...]) -> bool:
    return any(needle in haystack for needle in needles)


def _escape(value: str) -> str:
    return value.replace('"', '\\"')
