from __future__ import annotations

from typing import Any, Iterable, Mapping

from ..core import metrics
from ..core.config import Settings, get_settings
from ..core.logging import get_logger
from ..orchestration.entities import QueryEntities, extract_entities
from ..orchestration.intent import IntentClassifier, RoutingIntent
from ..orchestration.keywords import DEFAULT_KEYWORD_TABLES, KeywordTables
from ..orchestration.normalizer import normalize_query
from ..orchestration.planner import CapabilitySelection, WorkflowPlan, WorkflowPlanner, WorkflowStep
from ..orchestration.routing import CapabilityRouter
from ..responses.extractor import ExtractionResult, analyze_response
from ..responses.formatter import render_result
from ..responses.guardrails import apply_guardrail
from ..responses.snapshot import coerce_tool_output, has_snapshot
from ..schemas.capabilities import CapabilityCategory, CapabilityDescriptor
from ..tools.catalog_store import CapabilityCatalog, CatalogSnapshot

logger = get_logger(name=__name__)

CapabilityInput = CapabilityDescriptor | Mapping[str, Any]


class RoutingEngine:
    """Plans tool workflows for free-text requests and turns tool output into answers."""

    def __init__(
        self,
        *,
        settings: Settings | None = None,
        catalog: CapabilityCatalog | None = None,
        tables: KeywordTables = DEFAULT_KEYWORD_TABLES,
        router: CapabilityRouter | None = None,
    ) -> None:
        self._settings = settings or get_settings()
        self._tables = tables
        self._catalog = catalog or CapabilityCatalog()
        self._classifier = IntentClassifier(settings=self._settings.routing, tables=tables)
        self._planner = WorkflowPlanner(classifier=self._classifier, settings=self._settings.planning)
        self._router = router or CapabilityRouter(tables=tables)

    @property
    def catalog(self) -> CapabilityCatalog:
        return self._catalog

    def register_capabilities(self, descriptors: Iterable[CapabilityInput]) -> CatalogSnapshot:
        return self._catalog.replace(descriptors)

    def upsert_capability(self, descriptor: CapabilityInput) -> CatalogSnapshot:
        return self._catalog.upsert(descriptor)

    def remove_capability(self, server_id: str) -> CatalogSnapshot:
        return self._catalog.remove(server_id)

    def classify(self, query: str | None) -> RoutingIntent:
        return self._classifier.classify(query)

    def plan_workflow(self, query: str | None) -> WorkflowPlan:
        plan = self._planner.plan(query)
        snapshot = self._catalog.snapshot()
        for step in plan.steps:
            selections = self._router.select(step, snapshot)
            if selections:
                step.assign(selections[0])
        return plan

    def select_capabilities_for_step(self, step: WorkflowStep) -> list[CapabilitySelection]:
        return self._router.select(step, self._catalog.snapshot())

    def analyze(
        self,
        query: str | None,
        raw_tool_output: Any,
        chosen_capability: CapabilityDescriptor | str | None = None,
    ) -> ExtractionResult:
        _, result = self._analyze(query, raw_tool_output, chosen_capability)
        return result

    def format_answer(
        self,
        query: str | None,
        raw_tool_output: Any,
        chosen_capability: CapabilityDescriptor | str | None = None,
    ) -> str:
        """Produce the user-facing answer for one tool's output; never raises."""
        guardrails = self._settings.guardrails
        try:
            entities, result = self._analyze(query, raw_tool_output, chosen_capability)
            answer = render_result(result, entities, max_results=self._settings.extraction.max_results)
            metrics.record_extraction_outcome(
                outcome=result.outcome,
                events=len(result.events) if result.events else None,
            )
        except Exception:  # noqa: BLE001
            logger.exception("format_answer_failed", capability=self._capability_id(chosen_capability))
            metrics.record_extraction_outcome(outcome="error")
            return apply_guardrail(guardrails.error_message, settings=guardrails)
        return apply_guardrail(answer, settings=guardrails)

    def status(self) -> dict[str, Any]:
        return self._catalog.status()

    def _analyze(
        self,
        query: str | None,
        raw_tool_output: Any,
        capability: CapabilityDescriptor | str | None,
    ) -> tuple[QueryEntities, ExtractionResult]:
        entities = extract_entities(normalize_query(query), tables=self._tables)
        text = coerce_tool_output(raw_tool_output)
        result = analyze_response(
            text,
            entities,
            snapshot_mode=self._reads_snapshot(capability, text),
            settings=self._settings.extraction,
        )
        return entities, result

    def _reads_snapshot(self, capability: CapabilityDescriptor | str | None, text: str) -> bool:
        if has_snapshot(text):
            return True
        if isinstance(capability, CapabilityDescriptor):
            if capability.category is CapabilityCategory.LIVE_EXTRACTION:
                return True
            return self._router.is_browser(capability)
        if isinstance(capability, str):
            lowered = capability.lower()
            return any(marker in lowered for marker in self._tables.browser_markers)
        return False

    @staticmethod
    def _capability_id(capability: CapabilityDescriptor | str | None) -> str | None:
        if isinstance(capability, CapabilityDescriptor):
            return capability.server_id
        return capability


routing_engine = RoutingEngine()

__all__ = ["RoutingEngine", "routing_engine"]
