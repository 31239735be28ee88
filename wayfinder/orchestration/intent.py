from __future__ import annotations

from dataclasses import dataclass, field
from types import MappingProxyType
from typing import Mapping

from ..core import metrics
from ..core.config import RoutingSettings, get_settings
from ..core.logging import get_logger
from ..schemas.capabilities import CapabilityCategory
from .keywords import DEFAULT_KEYWORD_TABLES, KeywordTables
from .normalizer import normalize_query

logger = get_logger(name=__name__)


@dataclass(frozen=True, slots=True)
class RoutingIntent:
    required_categories: tuple[CapabilityCategory, ...] = ()
    preferred_category: CapabilityCategory | None = None
    requires_multi_step: bool = False
    search_confidence: float = 0.0
    design_confidence: float = 0.0
    force_fast_search: bool = False
    category_confidence: Mapping[CapabilityCategory, float] = field(default_factory=lambda: MappingProxyType({}))
    has_transition: bool = False
    named_site: str | None = None
    tool_hint: str | None = None

    def resolved_category(self, default: CapabilityCategory) -> CapabilityCategory:
        return self.preferred_category or default


class IntentClassifier:
    """Keyword-confidence classifier deciding category, fast-search and multi-step routing."""

    def __init__(
        self,
        *,
        settings: RoutingSettings | None = None,
        tables: KeywordTables = DEFAULT_KEYWORD_TABLES,
    ) -> None:
        self._settings = settings or get_settings().routing
        self._tables = tables

    @property
    def tables(self) -> KeywordTables:
        return self._tables

    @property
    def default_category(self) -> CapabilityCategory:
        return self._settings.default_category

    def is_concert_query(self, text: str) -> bool:
        return bool(text) and self._tables.concert.search(text) is not None

    def has_transition(self, text: str) -> bool:
        return bool(text) and self._tables.transition.search(text) is not None

    def classify(self, text: str | None) -> RoutingIntent:
        normalized = normalize_query(text)
        if not normalized:
            return RoutingIntent()

        tables = self._tables
        normalizer = self._settings.keyword_score_normalizer

        confidences: dict[CapabilityCategory, float] = {}
        required: list[CapabilityCategory] = []
        for group in tables.categories:
            score = group.keywords.confidence(normalized, normalizer=normalizer)
            confidences[group.category] = score
            if score > 0:
                required.append(group.category)

        named_site = tables.site_in(normalized)
        concert = self.is_concert_query(normalized)
        website_check = tables.website_check.search(normalized) is not None
        if (named_site or concert or website_check) and CapabilityCategory.LIVE_EXTRACTION not in required:
            required.append(CapabilityCategory.LIVE_EXTRACTION)
            confidences[CapabilityCategory.LIVE_EXTRACTION] = max(
                confidences.get(CapabilityCategory.LIVE_EXTRACTION, 0.0), 1.0 / normalizer
            )
        ordered = tuple(group.category for group in tables.categories if group.category in required)

        search_confidence = tables.search_signal.confidence(normalized, normalizer=normalizer)
        design_confidence = confidences.get(CapabilityCategory.ORCHESTRATION, 0.0)
        has_transition = self.has_transition(normalized)
        force_fast_search = self._is_fast_search(
            normalized,
            search_confidence=search_confidence,
            design_confidence=design_confidence,
            has_transition=has_transition,
        )

        preferred = ordered[0] if ordered else None
        if concert:
            preferred = CapabilityCategory.LIVE_EXTRACTION

        intent = RoutingIntent(
            required_categories=ordered,
            preferred_category=preferred,
            requires_multi_step=not force_fast_search and (has_transition or len(ordered) > 1),
            search_confidence=search_confidence,
            design_confidence=design_confidence,
            force_fast_search=force_fast_search,
            category_confidence=MappingProxyType(confidences),
            has_transition=has_transition,
            named_site=named_site,
            tool_hint=tables.tool_hint(normalized),
        )
        metrics.record_intent(
            category=(preferred or self.default_category).value,
            fast_search=force_fast_search,
        )
        logger.debug(
            "intent_classified",
            preferred=preferred.value if preferred else None,
            required=[category.value for category in ordered],
            search_confidence=search_confidence,
            design_confidence=design_confidence,
            fast_search=force_fast_search,
            multi_step=intent.requires_multi_step,
        )
        return intent

    def _is_fast_search(
        self,
        text: str,
        *,
        search_confidence: float,
        design_confidence: float,
        has_transition: bool,
    ) -> bool:
        if has_transition:
            return False
        if design_confidence >= self._settings.max_design_confidence:
            return False
        if search_confidence < self._settings.min_fast_search_confidence:
            return False
        # Soft confidence alone lets generic words like "show" through; require a hard keyword.
        return self._tables.hard_search.search(text) is not None


__all__ = ["IntentClassifier", "RoutingIntent"]
