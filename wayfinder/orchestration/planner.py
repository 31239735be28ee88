from __future__ import annotations

import re
from dataclasses import dataclass, field
from enum import Enum
from typing import NamedTuple

from ..core import metrics
from ..core.config import PlanningSettings, get_settings
from ..core.logging import get_logger
from ..schemas.capabilities import CapabilityCategory
from ..tools.exceptions import StepAlreadyAssignedError
from .intent import IntentClassifier, RoutingIntent
from .normalizer import normalize_query

logger = get_logger(name=__name__)


class CapabilitySelection(NamedTuple):
    """``(server_id, tool_name)`` pair chosen for a workflow step."""

    server_id: str
    tool_name: str


@dataclass(slots=True)
class WorkflowStep:
    index: int
    text: str
    required_category: CapabilityCategory
    assigned_capability: CapabilitySelection | None = None
    tool_hint: str | None = None

    @property
    def required_output(self) -> str:
        return self.required_category.output_context

    def assign(self, selection: CapabilitySelection) -> None:
        if self.assigned_capability is not None:
            raise StepAlreadyAssignedError(f"Step {self.index} already has capability {self.assigned_capability!r}")
        self.assigned_capability = selection


@dataclass(slots=True)
class WorkflowPlan:
    query: str
    steps: list[WorkflowStep] = field(default_factory=list)
    strategy: str = "single"
    step_duration_seconds: int = 30

    @property
    def requires_orchestration(self) -> bool:
        return len(self.steps) > 1

    @property
    def estimated_duration_seconds(self) -> int:
        return len(self.steps) * self.step_duration_seconds


class ClauseKind(str, Enum):
    HANDOFF = "handoff"
    FINALLY = "finally"
    THEN = "then"
    TOOL_MENTION = "tool_mention"
    SEARCH_LEAD = "search_lead"
    GENERIC = "generic"
    NOISE = "noise"


_SENTENCE_BOUNDARY = re.compile(r"(?<=[.!?])\s+(?=[A-Z])")
_INLINE_TRANSITION = re.compile(
    r"(?:,\s*|\s+)(?=(?:and\s+then|then\s*,?\s*(?:use|find|get)|once\s+you\s+(?:have|find|get)"
    r"|after\s+(?:finding|getting|having)|followed\s+by|finally)\b)",
    re.IGNORECASE,
)
_HANDOFF = re.compile(
    r"^(?P<antecedent>once\s+you\s+(?:have|find|get)\s+(?:the\s+)?\w+(?:\s+\w+)?)\s*,\s*(?P<action>use\s+.+)$",
    re.IGNORECASE,
)
_FINALLY = re.compile(r"^finally\s*,?\s*use\s+.+", re.IGNORECASE)
_THEN = re.compile(r"^(?:and\s+)?then\s*,?\s*use\s+.+", re.IGNORECASE)
_USE_TOOL = re.compile(r"\buse\s+.+?\s+(?:to|for)\b", re.IGNORECASE)
_SEARCH_LEAD = re.compile(r"\b(?:find\s+when|check\s+ticketing|look\s+for)\b", re.IGNORECASE)
_LEADING_CONNECTIVE = re.compile(r"^(?:and\s+)?(?:then|finally)\s*,?\s*", re.IGNORECASE)


class WorkflowPlanner:
    """Splits a request into ordered, categorized workflow steps."""

    def __init__(
        self,
        *,
        classifier: IntentClassifier | None = None,
        settings: PlanningSettings | None = None,
    ) -> None:
        self._classifier = classifier or IntentClassifier()
        self._settings = settings or get_settings().planning

    @property
    def classifier(self) -> IntentClassifier:
        return self._classifier

    def plan(self, query: str | None) -> WorkflowPlan:
        original = query or ""
        normalized = normalize_query(original)
        if not normalized:
            return self._single(original, intent=None)

        intent = self._classifier.classify(normalized)
        if not intent.requires_multi_step:
            return self._single(normalized, intent=intent)

        parts = self.split(normalized)
        if not parts:
            logger.debug("workflow_split_empty", query=normalized)
            return self._single(original.strip() or normalized, intent=None)

        steps: list[WorkflowStep] = []
        for index, part in enumerate(parts[: self._settings.max_steps]):
            sub_intent = self._classifier.classify(part)
            category = sub_intent.resolved_category(self._classifier.default_category)
            if index == 0 and self._classifier.is_concert_query(part):
                category = CapabilityCategory.LIVE_EXTRACTION
            steps.append(
                WorkflowStep(
                    index=index,
                    text=part,
                    required_category=category,
                    tool_hint=sub_intent.tool_hint,
                )
            )

        plan = WorkflowPlan(
            query=normalized,
            steps=steps,
            strategy="multi",
            step_duration_seconds=self._settings.step_duration_seconds,
        )
        metrics.record_plan_metrics(strategy=plan.strategy, steps=len(steps))
        logger.info(
            "workflow_planned",
            strategy=plan.strategy,
            steps=[(step.index, step.required_category.value) for step in steps],
        )
        return plan

    def split(self, query: str) -> list[str]:
        """Return the ordered step texts of a multi-step request (possibly empty)."""
        parts: list[str] = []
        for sentence in self._sentences(query):
            for clause in self._clauses(sentence):
                kind = self.classify_clause(clause)
                if kind is ClauseKind.NOISE:
                    continue
                if kind is ClauseKind.HANDOFF and not parts:
                    # Nothing earlier produces the hand-off noun, so fetching it is its own step.
                    match = _HANDOFF.match(clause)
                    if match is not None:
                        parts.append(match.group("antecedent").strip())
                        parts.append(match.group("action").strip())
                        continue
                if kind in (ClauseKind.FINALLY, ClauseKind.THEN):
                    clause = _LEADING_CONNECTIVE.sub("", clause).strip() or clause
                parts.append(clause)
        if parts:
            return parts
        return self._fallback_split(query)

    def classify_clause(self, clause: str) -> ClauseKind:
        text = clause.strip()
        if _HANDOFF.match(text):
            return ClauseKind.HANDOFF
        if _FINALLY.match(text):
            return ClauseKind.FINALLY
        if _THEN.match(text):
            return ClauseKind.THEN
        if _USE_TOOL.search(text) and self._classifier.tables.tool_hint(text) is not None:
            return ClauseKind.TOOL_MENTION
        if _SEARCH_LEAD.search(text):
            return ClauseKind.SEARCH_LEAD
        if len(text) > self._settings.min_clause_chars:
            return ClauseKind.GENERIC
        return ClauseKind.NOISE

    def _sentences(self, query: str) -> list[str]:
        return [sentence.strip() for sentence in _SENTENCE_BOUNDARY.split(query) if sentence.strip()]

    def _clauses(self, sentence: str) -> list[str]:
        clauses = [clause.strip(" ,") for clause in _INLINE_TRANSITION.split(sentence)]
        return [clause for clause in clauses if clause]

    def _fallback_split(self, query: str) -> list[str]:
        pieces = self._classifier.tables.transition.split(query)
        return [piece.strip(" ,.") for piece in pieces if piece and piece.strip(" ,.")]

    def _single(self, text: str, *, intent: RoutingIntent | None) -> WorkflowPlan:
        default = self._classifier.default_category
        category = intent.resolved_category(default) if intent is not None else default
        step = WorkflowStep(
            index=0,
            text=text,
            required_category=category,
            tool_hint=intent.tool_hint if intent is not None else None,
        )
        plan = WorkflowPlan(
            query=text,
            steps=[step],
            strategy="single",
            step_duration_seconds=self._settings.step_duration_seconds,
        )
        metrics.record_plan_metrics(strategy=plan.strategy, steps=1)
        logger.debug("workflow_planned", strategy=plan.strategy, category=category.value)
        return plan


__all__ = ["CapabilitySelection", "ClauseKind", "WorkflowPlan", "WorkflowPlanner", "WorkflowStep"]
