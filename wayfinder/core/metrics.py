from __future__ import annotations

from prometheus_client import CONTENT_TYPE_LATEST, Counter, Gauge, Histogram, generate_latest

INTENT_CLASSIFICATIONS_TOTAL = Counter(
    "wayfinder_intent_classifications_total",
    "Queries classified, grouped by preferred category and fast-search decision",
    labelnames=("category", "fast_search"),
)

PLANNER_STEPS = Histogram(
    "wayfinder_planner_plan_steps",
    "Number of steps produced per workflow plan",
    labelnames=("strategy",),
    buckets=(1, 2, 3, 4, 5, 8, 13),
)

CAPABILITY_SELECTIONS_TOTAL = Counter(
    "wayfinder_capability_selections_total",
    "Capability routing outcomes grouped by the rule that resolved the step",
    labelnames=("category", "rule"),
)

EXTRACTION_OUTCOMES_TOTAL = Counter(
    "wayfinder_extraction_outcomes_total",
    "Response extraction outcomes (events, negative, structured, fallback, error)",
    labelnames=("outcome",),
)

EXTRACTED_EVENTS = Histogram(
    "wayfinder_extracted_events",
    "Number of events extracted per anchor-windowed pass",
    buckets=(0, 1, 2, 3, 5, 8, 13, 21),
)

GUARDRAIL_INTERCEPTS_TOTAL = Counter(
    "wayfinder_guardrail_intercepts_total",
    "Formatted answers replaced by the output guardrail, grouped by leak kind",
    labelnames=("kind",),
)

CAPABILITY_CATALOG_ENTRIES = Gauge(
    "wayfinder_capability_catalog_entries",
    "Number of capabilities in the active catalog snapshot",
)


def record_intent(*, category: str, fast_search: bool) -> None:
    INTENT_CLASSIFICATIONS_TOTAL.labels(category=category, fast_search=str(fast_search).lower()).inc()


def record_plan_metrics(*, strategy: str, steps: int) -> None:
    PLANNER_STEPS.labels(strategy=strategy).observe(max(0, steps))


def record_capability_selection(*, category: str, rule: str) -> None:
    CAPABILITY_SELECTIONS_TOTAL.labels(category=category, rule=rule).inc()


def record_extraction_outcome(*, outcome: str, events: int | None = None) -> None:
    EXTRACTION_OUTCOMES_TOTAL.labels(outcome=outcome).inc()
    if events is not None:
        EXTRACTED_EVENTS.observe(max(0, events))


def increment_guardrail_intercept(*, kind: str) -> None:
    GUARDRAIL_INTERCEPTS_TOTAL.labels(kind=kind).inc()


def observe_capability_catalog_entries(count: int) -> None:
    CAPABILITY_CATALOG_ENTRIES.set(max(0, count))


def render_metrics() -> tuple[bytes, str]:
    return generate_latest(), CONTENT_TYPE_LATEST
