from __future__ import annotations

import re
from collections.abc import Iterable

from bs4 import BeautifulSoup, Tag
from soupsieve import SelectorSyntaxError

from healplay.core.metadata import ElementRecord

_BTN_CLASS = re.compile(r"\bbtn\b")


class DomIndex:
    """Queryable view of one DOM snapshot, parsed once per healing attempt."""

    def __init__(self, markup: str) -> None:
        self.markup = markup
        self._soup = BeautifulSoup(markup or "", "html.parser")

    def matches(self, selector: str) -> list[ElementRecord]:
        return [to_record(tag) for tag in self._select(selector)]

    def is_clickable(self, selector: str) -> bool:
        return any(_is_clickable_tag(tag) for tag in self._select(selector))

    def candidates(self, selectors: Iterable[str]) -> list[ElementRecord]:
        """Union of matches in ``selectors`` order (then document order), each element once."""

        seen: set[int] = set()
        tags: list[Tag] = []
        for selector in selectors:
            for tag in self._select(selector):
                if id(tag) in seen:
                    continue
                seen.add(id(tag))
                tags.append(tag)
        return [to_record(tag) for tag in tags]

    def _select(self, selector: str) -> list[Tag]:
        if not selector or not selector.strip():
            return []
        try:
            return [node for node in self._soup.select(selector) if isinstance(node, Tag)]
        except (SelectorSyntaxError, NotImplementedError, ValueError):
            return []


def to_record(tag: Tag) -> ElementRecord:
    attributes = {name: _attribute_text(value) for name, value in tag.attrs.items()}
    return ElementRecord(
        tag=tag.name.lower(),
        id=attributes.get("id", ""),
        classes=tuple(attributes.get("class", "").split()),
        attributes=attributes,
        data_attributes={name: value for name, value in attributes.items() if name.startswith("data-")},
        text=tag.get_text(" ", strip=True),
    )


def is_clickable_record(element: ElementRecord) -> bool:
    if element.tag == "button":
        return True
    if element.tag == "input" and element.attr("type").lower() in {"submit", "button"}:
        return True
    if element.tag == "a":
        return element.attr("role").lower() == "button" or bool(_BTN_CLASS.search(element.attr("class")))
    return False


def _is_clickable_tag(tag: Tag) -> bool:
    return is_clickable_record(to_record(tag))


def _attribute_text(value) -> str:
    if isinstance(value, (list, tuple)):
        return " ".join(str(item) for item in value)
    return str(value)
