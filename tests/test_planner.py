from __future__ import annotations

import pytest

from wayfinder.core.config import PlanningSettings
from wayfinder.orchestration.intent import IntentClassifier
from wayfinder.orchestration.planner import CapabilitySelection, ClauseKind, WorkflowPlanner, WorkflowStep
from wayfinder.schemas.capabilities import CapabilityCategory
from wayfinder.tools.exceptions import StepAlreadyAssignedError


@pytest.fixture()
def planner() -> WorkflowPlanner:
    return WorkflowPlanner(classifier=IntentClassifier(), settings=PlanningSettings())


def test_location_request_is_single_step(planner: WorkflowPlanner) -> None:
    plan = planner.plan("Find restaurants near Times Square")

    assert plan.strategy == "single"
    assert len(plan.steps) == 1
    assert plan.steps[0].required_category is CapabilityCategory.LOCATION
    assert plan.requires_orchestration is False


def test_handoff_opening_splits_into_two_steps(planner: WorkflowPlanner) -> None:
    plan = planner.plan("Once you have the venue, use Google Maps to find the closest car rental")

    assert [step.index for step in plan.steps] == [0, 1]
    assert plan.steps[0].text == "Once you have the venue"
    assert plan.steps[0].required_category is not CapabilityCategory.LOCATION
    assert plan.steps[1].required_category is CapabilityCategory.LOCATION
    assert plan.steps[1].tool_hint == "google-maps"
    assert plan.requires_orchestration is True
    assert plan.estimated_duration_seconds == 60


def test_concert_first_step_is_forced_to_live_extraction(planner: WorkflowPlanner) -> None:
    plan = planner.plan("Find when Iration is playing in Iowa and then use Google Maps to find hotels near the venue")

    assert len(plan.steps) == 2
    assert plan.steps[0].required_category is CapabilityCategory.LIVE_EXTRACTION
    assert plan.steps[1].text.startswith("use Google Maps")
    assert plan.steps[1].required_category is CapabilityCategory.LOCATION


def test_sentences_with_finally_clause_become_ordered_steps(planner: WorkflowPlanner) -> None:
    plan = planner.plan(
        "Look for Iration tour dates on stubhub.com. Then use Google Maps to find parking near the venue. "
        "Finally, use LangChain to summarize the itinerary."
    )

    categories = [step.required_category for step in plan.steps]
    assert categories == [
        CapabilityCategory.LIVE_EXTRACTION,
        CapabilityCategory.LOCATION,
        CapabilityCategory.ORCHESTRATION,
    ]
    assert plan.steps[2].text.startswith("use LangChain")


def test_steps_are_capped(planner: WorkflowPlanner) -> None:
    capped = WorkflowPlanner(classifier=planner.classifier, settings=PlanningSettings(max_steps=2))
    plan = capped.plan(
        "Look for Iration tour dates on stubhub.com. Then use Google Maps to find parking near the venue. "
        "Finally, use LangChain to summarize the itinerary."
    )

    assert len(plan.steps) == 2


@pytest.mark.parametrize("query", ["", "   ", None, "hi", "and then", "?!"])
def test_planner_never_returns_an_empty_plan(planner: WorkflowPlanner, query: str | None) -> None:
    plan = planner.plan(query)

    assert len(plan.steps) >= 1
    assert [step.index for step in plan.steps] == list(range(len(plan.steps)))


def test_empty_query_degrades_to_default_category(planner: WorkflowPlanner) -> None:
    plan = planner.plan("")

    assert plan.steps[0].required_category is CapabilityCategory.NEWS_SEARCH


def test_classify_clause_rule_order(planner: WorkflowPlanner) -> None:
    assert planner.classify_clause("Once you have the venue, use Google Maps") is ClauseKind.HANDOFF
    assert planner.classify_clause("Finally, use LangChain to summarize") is ClauseKind.FINALLY
    assert planner.classify_clause("then use Playwright to open the page") is ClauseKind.THEN
    assert planner.classify_clause("please use Google Maps for directions") is ClauseKind.TOOL_MENTION
    assert planner.classify_clause("look for tickets") is ClauseKind.SEARCH_LEAD
    assert planner.classify_clause("summarize the options") is ClauseKind.GENERIC
    assert planner.classify_clause("and") is ClauseKind.NOISE


def test_step_accepts_a_single_assignment() -> None:
    step = WorkflowStep(index=0, text="find parking", required_category=CapabilityCategory.LOCATION)
    step.assign(CapabilitySelection("google-maps", "maps_search_places"))

    assert step.assigned_capability == ("google-maps", "maps_search_places")
    assert step.required_output == "Place IDs, Coordinates, Neighborhood Vibe"
    with pytest.raises(StepAlreadyAssignedError):
        step.assign(CapabilitySelection("exa-search", "web_search_exa"))
