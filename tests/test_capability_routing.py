from __future__ import annotations

import pytest

from tests.helpers.snapshots import capability_payloads
from wayfinder.orchestration.planner import WorkflowStep
from wayfinder.orchestration.routing import CapabilityRouter, RoutingRule
from wayfinder.schemas.capabilities import CapabilityCategory
from wayfinder.tools.catalog_store import CapabilityCatalog, CatalogSnapshot

_OVERRIDE_ENV = ("WAYFINDER_DEFAULT_CAPABILITY_ID", "DEFAULT_CAPABILITY_ID", "DEFAULT_SEARCH_SERVER_ID")


@pytest.fixture(autouse=True)
def _clear_override(monkeypatch: pytest.MonkeyPatch) -> None:
    for name in _OVERRIDE_ENV:
        monkeypatch.delenv(name, raising=False)


@pytest.fixture()
def snapshot() -> CatalogSnapshot:
    return CapabilityCatalog().replace(capability_payloads())


def _step(text: str, category: CapabilityCategory, hint: str | None = None) -> WorkflowStep:
    return WorkflowStep(index=0, text=text, required_category=category, tool_hint=hint)


def test_category_match_picks_best_tool(snapshot: CatalogSnapshot) -> None:
    router = CapabilityRouter()

    selections = router.select(_step("find the closest car rental", CapabilityCategory.LOCATION), snapshot)

    assert selections == [("google-maps", "maps_search_places")]


def test_live_extraction_prefers_browser_and_excludes_search(snapshot: CatalogSnapshot) -> None:
    router = CapabilityRouter()

    rule, descriptors = router.resolve(
        _step("Check Iration concert tickets", CapabilityCategory.LIVE_EXTRACTION), snapshot
    )
    selections = router.select(_step("Check Iration concert tickets", CapabilityCategory.LIVE_EXTRACTION), snapshot)

    assert rule is RoutingRule.SITE_BROWSER
    assert [descriptor.server_id for descriptor in descriptors] == ["playwright-mcp"]
    assert selections == [("playwright-mcp", "browser_navigate")]


@pytest.mark.parametrize(
    "category",
    [CapabilityCategory.NEWS_SEARCH, CapabilityCategory.LIVE_EXTRACTION, CapabilityCategory.ORCHESTRATION],
)
def test_named_domain_never_selects_generic_search(snapshot: CatalogSnapshot, category: CapabilityCategory) -> None:
    router = CapabilityRouter()

    selections = router.select(_step("search the latest news on stubhub.com", category), snapshot)

    assert selections
    assert all(selection.server_id != "exa-search" for selection in selections)


def test_named_domain_without_browser_never_falls_back_to_search(snapshot: CatalogSnapshot) -> None:
    router = CapabilityRouter()
    catalog = CapabilityCatalog()
    catalog.replace([entry for entry in snapshot.entries if entry.server_id != "playwright-mcp"])

    selections = router.select(
        _step("search the latest news on stubhub.com", CapabilityCategory.NEWS_SEARCH), catalog.snapshot()
    )

    assert selections == []


def test_environment_override_wins(monkeypatch: pytest.MonkeyPatch, snapshot: CatalogSnapshot) -> None:
    router = CapabilityRouter()
    step = _step("find restaurants", CapabilityCategory.LOCATION)

    monkeypatch.setenv("DEFAULT_SEARCH_SERVER_ID", "exa")
    assert router.select(step, snapshot) == [("exa-search", "web_search_exa")]

    monkeypatch.delenv("DEFAULT_SEARCH_SERVER_ID")
    assert router.select(step, snapshot) == [("google-maps", "maps_search_places")]


def test_override_matches_display_name(snapshot: CatalogSnapshot) -> None:
    router = CapabilityRouter(override_provider=lambda: "Playwright Browser")

    rule, descriptors = router.resolve(_step("find restaurants", CapabilityCategory.LOCATION), snapshot)

    assert rule is RoutingRule.OVERRIDE
    assert descriptors[0].server_id == "playwright-mcp"


def test_unknown_override_is_ignored(snapshot: CatalogSnapshot) -> None:
    router = CapabilityRouter(override_provider=lambda: "does-not-exist")

    rule, _ = router.resolve(_step("find restaurants", CapabilityCategory.LOCATION), snapshot)

    assert rule is RoutingRule.CATEGORY


def test_tool_hint_matches_when_category_is_missing(snapshot: CatalogSnapshot) -> None:
    router = CapabilityRouter()

    selections = router.select(_step("use brave for this", CapabilityCategory.UNCLASSIFIED, hint="langchain"), snapshot)

    assert selections == [("langchain-agent", "agent_executor")]


def test_empty_catalog_returns_no_candidates() -> None:
    router = CapabilityRouter()

    assert router.select(_step("find parking", CapabilityCategory.LOCATION), CapabilityCatalog().snapshot()) == []


def test_router_does_not_mutate_snapshot(snapshot: CatalogSnapshot) -> None:
    router = CapabilityRouter()
    before = snapshot.entries

    router.select(_step("find parking", CapabilityCategory.LOCATION), snapshot)

    assert snapshot.entries is before
