from __future__ import annotations

import difflib
import re
from enum import Enum
from typing import Callable, Sequence

from ..core import metrics
from ..core.config import read_default_capability_override
from ..core.logging import get_logger
from ..schemas.capabilities import CapabilityCategory, CapabilityDescriptor, ToolDescriptor
from ..tools.catalog_store import CatalogSnapshot, normalize_capability_id
from .keywords import DEFAULT_KEYWORD_TABLES, KeywordTables
from .planner import CapabilitySelection, WorkflowStep

logger = get_logger(name=__name__)

_WORD = re.compile(r"[a-z0-9]+")


class RoutingRule(str, Enum):
    OVERRIDE = "override"
    SITE_BROWSER = "site_browser"
    CATEGORY = "category"
    HINT = "hint"
    NONE = "none"


def _words(text: str) -> set[str]:
    return {word for word in _WORD.findall(text.lower()) if len(word) > 2}


class CapabilityRouter:
    """Resolves a workflow step to ``(server_id, tool_name)`` candidates from a catalog snapshot."""

    def __init__(
        self,
        *,
        tables: KeywordTables = DEFAULT_KEYWORD_TABLES,
        override_provider: Callable[[], str | None] = read_default_capability_override,
    ) -> None:
        self._tables = tables
        self._override_provider = override_provider

    def select(self, step: WorkflowStep, snapshot: CatalogSnapshot) -> list[CapabilitySelection]:
        rule, descriptors = self.resolve(step, snapshot)
        selections: list[CapabilitySelection] = []
        for descriptor in descriptors:
            tool = self.best_tool(descriptor, step)
            if tool is None:
                continue
            selections.append(CapabilitySelection(descriptor.server_id, tool.name))
        if not selections:
            rule = RoutingRule.NONE
        metrics.record_capability_selection(category=step.required_category.value, rule=rule.value)
        logger.debug(
            "capabilities_selected",
            step=step.index,
            category=step.required_category.value,
            rule=rule.value,
            candidates=[selection.server_id for selection in selections],
        )
        return selections

    def resolve(
        self, step: WorkflowStep, snapshot: CatalogSnapshot
    ) -> tuple[RoutingRule, list[CapabilityDescriptor]]:
        entries = list(snapshot.entries)
        if not entries:
            return RoutingRule.NONE, []

        override = self._resolve_override(entries)
        if override is not None:
            return RoutingRule.OVERRIDE, [override]

        pool = entries
        named_site = self._tables.site_in(step.text)
        if step.required_category is CapabilityCategory.LIVE_EXTRACTION or named_site:
            pool = [entry for entry in entries if not self.is_generic_search(entry)]
            browsers = [entry for entry in pool if self.is_browser(entry)]
            if browsers:
                return RoutingRule.SITE_BROWSER, self._hint_first(browsers, step.tool_hint)

        matched = [entry for entry in pool if entry.category is step.required_category]
        if matched:
            return RoutingRule.CATEGORY, self._hint_first(matched, step.tool_hint)

        hinted = self._match_hint(pool, step.tool_hint)
        if hinted:
            return RoutingRule.HINT, hinted

        return RoutingRule.NONE, []

    def is_generic_search(self, descriptor: CapabilityDescriptor) -> bool:
        if descriptor.category is CapabilityCategory.NEWS_SEARCH:
            return True
        return any(descriptor.mentions(marker) for marker in self._tables.search_markers)

    def is_browser(self, descriptor: CapabilityDescriptor) -> bool:
        return any(descriptor.mentions(marker) for marker in self._tables.browser_markers)

    def best_tool(self, descriptor: CapabilityDescriptor, step: WorkflowStep) -> ToolDescriptor | None:
        """Pick the tool whose name carries a category marker, then the best word overlap, then the first."""
        if not descriptor.tools:
            return None
        markers = self._tables.tool_markers.get(step.required_category, ())
        step_words = _words(step.text)

        def rank(item: tuple[int, ToolDescriptor]) -> tuple[int, int, int]:
            position, tool = item
            name = tool.name.lower()
            marker_hits = sum(1 for marker in markers if marker in name)
            overlap = len(step_words & _words(f"{tool.name} {tool.description}"))
            return marker_hits, overlap, -position

        _, tool = max(enumerate(descriptor.tools), key=rank)
        return tool

    def _resolve_override(self, entries: Sequence[CapabilityDescriptor]) -> CapabilityDescriptor | None:
        configured = self._override_provider()
        if not configured:
            return None
        key = normalize_capability_id(configured)
        if not key:
            return None
        for entry in entries:
            if normalize_capability_id(entry.server_id) == key:
                return entry
        for entry in entries:
            if key in normalize_capability_id(entry.server_id):
                return entry
        for entry in entries:
            if key in normalize_capability_id(entry.display_name):
                return entry
        logger.warning("capability_override_not_found", override=configured)
        return None

    def _hint_first(self, entries: list[CapabilityDescriptor], hint: str | None) -> list[CapabilityDescriptor]:
        if not hint:
            return entries
        hinted = self._match_hint(entries, hint)
        return hinted + [entry for entry in entries if entry not in hinted]

    def _match_hint(self, entries: Sequence[CapabilityDescriptor], hint: str | None) -> list[CapabilityDescriptor]:
        if not hint or not entries:
            return []
        key = normalize_capability_id(hint)
        if not key:
            return []
        matched = [
            entry
            for entry in entries
            if key in normalize_capability_id(entry.server_id)
            or key in normalize_capability_id(entry.display_name)
        ]
        if matched:
            return matched
        ids = {normalize_capability_id(entry.server_id): entry for entry in entries}
        close = difflib.get_close_matches(key, list(ids), n=len(ids), cutoff=0.75)
        return [ids[candidate] for candidate in close]


__all__ = ["CapabilityRouter", "RoutingRule"]
