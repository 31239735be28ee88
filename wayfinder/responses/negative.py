from __future__ import annotations

import re
from enum import Enum
from typing import Callable

from ..orchestration.entities import QueryEntities
from .snapshot import count_content_nodes

_EXPLICIT_NEGATIVE = re.compile(
    r"\bno\s+[^\n]*?\b(?:results?|found|match(?:es|ing)?|available|events?|concerts?)\b"
    r"|\b(?:didn't|did\s+not|couldn't|could\s+not)\s+find\b",
    re.IGNORECASE,
)
_DATE_SHAPE = re.compile(
    r'"(?:jan|feb|mar|apr|may|jun|jul|aug|sep|oct|nov|dec)"'
    r"|\b(?:jan|feb|mar|apr|may|jun|jul|aug|sep|sept|oct|nov|dec)[a-z]*\.?\s+\d{1,2}(?:st|nd|rd|th)?,?\s+\d{4}\b"
    r"|\b\d{4}-\d{2}-\d{2}\b",
    re.IGNORECASE,
)
_SEARCH_CONTROLS = ("sort by", "filter", "all locations")


class NegativeKind(str, Enum):
    NOTHING_FOUND = "nothing_found"
    LISTED_WITHOUT_DATES = "listed_without_dates"
    EMPTY_PAGE = "empty_page"


def _where(entities: QueryEntities) -> str:
    return f" in {entities.location}" if entities.location else ""


def _nothing_found(dump: str, entities: QueryEntities, min_content_nodes: int) -> str | None:
    if _EXPLICIT_NEGATIVE.search(dump) is None:
        return None
    subject = entities.subject or "events"
    return (
        f"I searched for **{subject}**{_where(entities)}, but the page shows no upcoming events "
        "matching your search."
    )


def _listed_without_dates(dump: str, entities: QueryEntities, min_content_nodes: int) -> str | None:
    if not entities.subject or entities.subject.lower() not in dump.lower():
        return None
    if _DATE_SHAPE.search(dump) is not None:
        return None
    return (
        f"I can see **{entities.subject}** is listed{_where(entities)}, but no specific dates are "
        "currently available. Events may be added later, so checking nearby areas or other dates could help."
    )


def _empty_page(dump: str, entities: QueryEntities, min_content_nodes: int) -> str | None:
    lowered = dump.lower()
    if not any(control in lowered for control in _SEARCH_CONTROLS):
        return None
    if count_content_nodes(dump) >= min_content_nodes:
        return None
    subject = entities.subject or "events"
    return (
        f"I completed the search for **{subject}**{_where(entities)}, but the results page appears to be "
        "loading or empty, so no events are currently displayed."
    )


_NEGATIVE_RULES: tuple[tuple[NegativeKind, Callable[[str, QueryEntities, int], str | None]], ...] = (
    (NegativeKind.NOTHING_FOUND, _nothing_found),
    (NegativeKind.LISTED_WITHOUT_DATES, _listed_without_dates),
    (NegativeKind.EMPTY_PAGE, _empty_page),
)


def detect_negative_result(dump: str, entities: QueryEntities, *, min_content_nodes: int = 10) -> str | None:
    """Return a prose "no results" message when the dump shows the search came back empty."""
    if not dump:
        return None
    for _kind, rule in _NEGATIVE_RULES:
        message = rule(dump, entities, min_content_nodes)
        if message is not None:
            return message
    return None


__all__ = ["NegativeKind", "detect_negative_result"]
