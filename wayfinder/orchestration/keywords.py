"""Fixed keyword and phrase tables used by the routing pipeline.

Tables are built once at import time and handed by reference to every
classification function. Nothing in the engine mutates them.
"""

from __future__ import annotations

import re
from dataclasses import dataclass, field
from types import MappingProxyType
from typing import Mapping

from ..schemas.capabilities import CapabilityCategory


def _keyword_pattern(keyword: str, *, plural: bool = True) -> re.Pattern[str]:
    body = r"\s+".join(re.escape(part) for part in keyword.split())
    suffix = r"(?:s|es)?" if plural else ""
    return re.compile(rf"(?<![\w]){body}{suffix}(?![\w])", re.IGNORECASE)


@dataclass(frozen=True, slots=True)
class KeywordSet:
    name: str
    keywords: tuple[str, ...]
    plural: bool = True
    _patterns: tuple[tuple[str, re.Pattern[str]], ...] = field(init=False, repr=False, compare=False)

    def __post_init__(self) -> None:
        patterns = tuple((keyword, _keyword_pattern(keyword, plural=self.plural)) for keyword in self.keywords)
        object.__setattr__(self, "_patterns", patterns)

    def matches(self, text: str) -> frozenset[str]:
        if not text:
            return frozenset()
        return frozenset(keyword for keyword, pattern in self._patterns if pattern.search(text))

    def confidence(self, text: str, *, normalizer: int) -> float:
        hits = len(self.matches(text))
        if hits == 0:
            return 0.0
        return min(hits / max(1, normalizer), 1.0)


@dataclass(frozen=True, slots=True)
class CategoryKeywords:
    category: CapabilityCategory
    keywords: KeywordSet


@dataclass(frozen=True, slots=True)
class KeywordTables:
    categories: tuple[CategoryKeywords, ...]
    search_signal: KeywordSet
    hard_search: re.Pattern[str]
    concert: re.Pattern[str]
    transition: re.Pattern[str]
    named_site: re.Pattern[str]
    website_check: re.Pattern[str]
    known_tools: tuple[tuple[re.Pattern[str], str], ...]
    location_synonyms: Mapping[str, tuple[str, ...]]
    browser_markers: tuple[str, ...]
    search_markers: tuple[str, ...]
    tool_markers: Mapping[CapabilityCategory, tuple[str, ...]]

    def keywords_for(self, category: CapabilityCategory) -> KeywordSet | None:
        for group in self.categories:
            if group.category is category:
                return group.keywords
        return None

    def tool_hint(self, text: str) -> str | None:
        for pattern, hint in self.known_tools:
            if pattern.search(text):
                return hint
        return None

    def site_in(self, text: str) -> str | None:
        match = self.named_site.search(text)
        if match is None:
            return None
        return match.group(0).lower()


SEARCH_SIGNAL_KEYWORDS: tuple[str, ...] = (
    "when",
    "where",
    "date",
    "time",
    "show",
    "ticket",
    "tickets",
    "concert",
    "event",
    "tour",
    "gig",
    "playing",
    "performing",
    "venue",
    "schedule",
    "price",
    "cost",
    "availability",
    "on sale",
    "booking",
    "lineup",
    "how to get",
    "closest",
    "find",
)

DESIGN_SIGNAL_KEYWORDS: tuple[str, ...] = (
    "design",
    "layout",
    "present",
    "showcase",
    "display",
    "story",
    "narrative",
    "plan",
    "strategy",
    "concept",
    "proposal",
    "mockup",
    "visual",
    "creative",
    "aesthetic",
    "illustrate",
    "diagram",
    "prototype",
)

SYNTHESIS_KEYWORDS: tuple[str, ...] = (
    "synthesize",
    "combine",
    "report",
    "calculate",
    "analyze",
    "compare",
    "summarize",
    "itinerary",
)

LOCATION_KEYWORDS: tuple[str, ...] = (
    "location",
    "place",
    "coordinates",
    "neighborhood",
    "vibe",
    "address",
    "map",
    "directions",
    "near",
    "nearby",
    "closest",
    "restaurant",
    "hotel",
    "parking",
    "car rental",
    "distance",
)

LIVE_EXTRACTION_KEYWORDS: tuple[str, ...] = (
    "price",
    "live",
    "current",
    "extract",
    "scrape",
    "contact",
    "phone",
    "email",
    "terms",
    "rules",
    "gig",
    "tour",
    "playwright",
    "browser",
    "navigate",
    "look for",
    "screenshot",
    "website",
)

NEWS_SEARCH_KEYWORDS: tuple[str, ...] = (
    "news",
    "trend",
    "alert",
    "sentiment",
    "search",
    "latest",
    "headline",
)

HARD_SEARCH_KEYWORDS: tuple[str, ...] = (
    "when",
    "where",
    "date",
    "ticket",
    "tickets",
    "show",
    "concert",
    "event",
    "tour",
    "gig",
    "venue",
    "playing",
)

TRANSITION_PHRASES: tuple[str, ...] = (
    r"once you (?:have|find|get)",
    r"then (?:use|find|get)",
    r"after (?:finding|getting|having)",
    r"followed by",
    r"and then",
)

TICKET_VENDORS: tuple[str, ...] = (
    "ticketmaster",
    "stubhub",
    "seatgeek",
    "livenation",
    "eventbrite",
    "axs",
    "vividseats",
)

KNOWN_TOOLS: tuple[tuple[str, str], ...] = (
    (r"google\s+maps", "google-maps"),
    (r"playwright", "playwright"),
    (r"puppeteer", "puppeteer"),
    (r"langchain", "langchain"),
    (r"exa", "exa"),
    (r"brave\s+search", "brave"),
)

LOCATION_SYNONYMS: Mapping[str, tuple[str, ...]] = {
    "iowa": ("IA", "Des Moines", "Cedar Rapids", "Iowa City", "Davenport"),
    "new york": ("NY", "NYC", "New York City", "Manhattan", "Brooklyn"),
    "california": ("CA", "Los Angeles", "LA", "San Francisco", "SF"),
}


def build_keyword_tables() -> KeywordTables:
    categories = (
        CategoryKeywords(CapabilityCategory.LOCATION, KeywordSet("location", LOCATION_KEYWORDS)),
        CategoryKeywords(CapabilityCategory.LIVE_EXTRACTION, KeywordSet("live_extraction", LIVE_EXTRACTION_KEYWORDS)),
        CategoryKeywords(CapabilityCategory.NEWS_SEARCH, KeywordSet("news_search", NEWS_SEARCH_KEYWORDS)),
        CategoryKeywords(
            CapabilityCategory.ORCHESTRATION,
            KeywordSet("orchestration", SYNTHESIS_KEYWORDS + DESIGN_SIGNAL_KEYWORDS),
        ),
    )
    vendors = "|".join(TICKET_VENDORS)
    return KeywordTables(
        categories=categories,
        search_signal=KeywordSet("search_signal", SEARCH_SIGNAL_KEYWORDS),
        hard_search=re.compile(r"\b(?:" + "|".join(HARD_SEARCH_KEYWORDS) + r")\b", re.IGNORECASE),
        concert=re.compile(
            r"\b(?:concerts?|tickets?|events?|gigs?|tours?|playing|plays|performs?|performing|live\s+shows?)\b",
            re.IGNORECASE,
        ),
        transition=re.compile(r"\b(?:" + "|".join(TRANSITION_PHRASES) + r")\b", re.IGNORECASE),
        named_site=re.compile(
            rf"\b(?:[a-z0-9-]+\.)+(?:com|org|net|io|co|us|live)\b|\b(?:{vendors})\b",
            re.IGNORECASE,
        ),
        website_check=re.compile(
            r"\bcheck\b.*\b(?:website|site|tickets?|concerts?)\b|\b(?:go|navigate)\s+to\s+\S+\.(?:com|org|net)\b",
            re.IGNORECASE,
        ),
        known_tools=tuple((re.compile(rf"\b{pattern}\b", re.IGNORECASE), hint) for pattern, hint in KNOWN_TOOLS),
        location_synonyms=MappingProxyType(dict(LOCATION_SYNONYMS)),
        browser_markers=("playwright", "browser", "puppeteer"),
        search_markers=("search", "exa", "brave", "news"),
        tool_markers=MappingProxyType(
            {
                CapabilityCategory.LIVE_EXTRACTION: ("navigate", "browser"),
                CapabilityCategory.LOCATION: ("search_places", "places", "geocode", "directions"),
                CapabilityCategory.NEWS_SEARCH: ("search", "news"),
                CapabilityCategory.ORCHESTRATION: ("agent_executor", "agent", "run"),
            }
        ),
    )


DEFAULT_KEYWORD_TABLES = build_keyword_tables()

__all__ = [
    "CategoryKeywords",
    "DEFAULT_KEYWORD_TABLES",
    "KeywordSet",
    "KeywordTables",
    "build_keyword_tables",
]
