from __future__ import annotations

import pytest
from prometheus_client import REGISTRY
from pydantic import ValidationError

from tests.helpers.snapshots import (
    DISTANT_DATES_SNAPSHOT,
    IRATION_SNAPSHOT,
    LISTITEM_EVENTS_SNAPSHOT,
    NO_EVENTS_SNAPSHOT,
    SEARCH_TEXT_RESULT,
    capability_payloads,
)
from wayfinder.core.config import get_settings
from wayfinder.schemas.capabilities import CapabilityCategory, CapabilityDescriptor
from wayfinder.services import engine as engine_module
from wayfinder.services.engine import RoutingEngine
from wayfinder.tools.catalog_store import CapabilityCatalog

_OVERRIDE_ENV = ("WAYFINDER_DEFAULT_CAPABILITY_ID", "DEFAULT_CAPABILITY_ID", "DEFAULT_SEARCH_SERVER_ID")


@pytest.fixture(autouse=True)
def _clear_override(monkeypatch: pytest.MonkeyPatch) -> None:
    for name in _OVERRIDE_ENV:
        monkeypatch.delenv(name, raising=False)


@pytest.fixture()
def engine() -> RoutingEngine:
    routing_engine = RoutingEngine(settings=get_settings({"environment": "test"}), catalog=CapabilityCatalog())
    routing_engine.register_capabilities(capability_payloads())
    return routing_engine


@pytest.fixture()
def playwright(engine: RoutingEngine) -> CapabilityDescriptor:
    return engine.catalog.snapshot().require("playwright-mcp")


def test_plan_workflow_attaches_capabilities(engine: RoutingEngine) -> None:
    plan = engine.plan_workflow("Once you have the venue, use Google Maps to find the closest car rental")

    assert len(plan.steps) == 2
    assert plan.steps[0].assigned_capability == ("exa-search", "web_search_exa")
    assert plan.steps[1].assigned_capability == ("google-maps", "maps_search_places")


def test_plan_workflow_on_site_query_uses_browser(engine: RoutingEngine) -> None:
    plan = engine.plan_workflow("Check stubhub.com for Iration concert tickets")

    assert len(plan.steps) == 1
    assert plan.steps[0].required_category is CapabilityCategory.LIVE_EXTRACTION
    assert plan.steps[0].assigned_capability == ("playwright-mcp", "browser_navigate")


def test_plan_workflow_without_catalog_leaves_steps_unassigned() -> None:
    empty = RoutingEngine(catalog=CapabilityCatalog())

    plan = empty.plan_workflow("Find restaurants near Times Square")

    assert plan.steps[0].assigned_capability is None


def test_select_capabilities_for_step_reads_latest_snapshot(engine: RoutingEngine) -> None:
    plan = engine.plan_workflow("Find restaurants near Times Square")
    engine.remove_capability("google-maps")

    assert engine.select_capabilities_for_step(plan.steps[0]) == []


def test_format_answer_lists_extracted_events(engine: RoutingEngine, playwright: CapabilityDescriptor) -> None:
    answer = engine.format_answer("Find Iration concert tickets in Iowa", IRATION_SNAPSHOT, playwright)

    assert answer.startswith("I found 3 events for **Iration** in Iowa:")
    for date in ("May 14, 2026", "June 2, 2026", "July 19, 2026"):
        assert date in answer
    assert "```yaml" not in answer
    assert "[ref=" not in answer


def test_format_answer_reports_negative_result(engine: RoutingEngine, playwright: CapabilityDescriptor) -> None:
    answer = engine.format_answer("Find Iration concert tickets in Iowa", NO_EVENTS_SNAPSHOT, playwright)

    assert "no upcoming events" in answer
    assert "December" not in answer


def test_format_answer_accepts_mcp_envelope(engine: RoutingEngine) -> None:
    payload = {"content": [{"type": "text", "text": IRATION_SNAPSHOT}]}

    answer = engine.format_answer("When is Iration playing in Iowa", payload, "playwright-mcp")

    assert "May 14, 2026" in answer


def test_format_answer_uses_structure_for_search_output(engine: RoutingEngine) -> None:
    exa = engine.catalog.snapshot().require("exa-search")

    answer = engine.format_answer("Iration summer tour news", SEARCH_TEXT_RESULT, exa)

    assert answer.startswith("I found 2 relevant links:")


def test_format_answer_reads_list_item_events(engine: RoutingEngine) -> None:
    answer = engine.format_answer("Find Iration tour dates", LISTITEM_EVENTS_SNAPSHOT, None)

    assert "Fri, Aug 7 at 7:00 PM" in answer
    assert "Starlight Theatre, Kansas City" in answer


def test_format_answer_falls_back_when_output_is_unreadable(engine: RoutingEngine) -> None:
    answer = engine.format_answer("Find Iration concert tickets in Iowa", {"status": "ok", "items": []}, None)

    assert answer.startswith("I completed the search for **Iration** in Iowa")
    assert "{" not in answer


def test_format_answer_degrades_on_internal_error(
    engine: RoutingEngine, playwright: CapabilityDescriptor, monkeypatch: pytest.MonkeyPatch
) -> None:
    def _boom(*args, **kwargs):
        raise RuntimeError("parser exploded")

    monkeypatch.setattr(engine_module, "analyze_response", _boom)
    before = REGISTRY.get_sample_value("wayfinder_extraction_outcomes_total", {"outcome": "error"}) or 0.0

    answer = engine.format_answer("Find Iration tickets", IRATION_SNAPSHOT, playwright)

    assert answer == get_settings().guardrails.error_message
    after = REGISTRY.get_sample_value("wayfinder_extraction_outcomes_total", {"outcome": "error"})
    assert after == pytest.approx(before + 1.0)


def test_status_reports_catalog(engine: RoutingEngine) -> None:
    status = engine.status()

    assert status["capabilities"] == 4
    assert status["tools"] == 6
    assert status["version"] == 1


def test_upsert_capability_is_visible_to_routing(engine: RoutingEngine) -> None:
    engine.upsert_capability({"serverId": "puppeteer-browser", "tools": [{"name": "puppeteer_navigate"}]})

    plan = engine.plan_workflow("Check stubhub.com for Iration concert tickets")

    assert plan.steps[0].assigned_capability in (
        ("playwright-mcp", "browser_navigate"),
        ("puppeteer-browser", "puppeteer_navigate"),
    )


def test_classify_exposes_intent(engine: RoutingEngine) -> None:
    intent = engine.classify("Find restaurants near Times Square")

    assert intent.preferred_category is CapabilityCategory.LOCATION


def test_register_rejects_invalid_descriptors(engine: RoutingEngine) -> None:
    with pytest.raises(ValidationError):
        engine.register_capabilities([{"serverId": "  "}])

    assert engine.status()["capabilities"] == 4


def test_format_answer_lists_dates_far_from_the_subject(
    engine: RoutingEngine, playwright: CapabilityDescriptor
) -> None:
    answer = engine.format_answer("When is Iration playing in Iowa", DISTANT_DATES_SNAPSHOT, playwright)

    assert answer.startswith("I found 2 events for **Iration**")
    assert "May 14, 2026" in answer
    assert "June 2, 2026" in answer
