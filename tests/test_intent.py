from __future__ import annotations

import pytest

from wayfinder.core.config import RoutingSettings
from wayfinder.orchestration.intent import IntentClassifier
from wayfinder.schemas.capabilities import CapabilityCategory


@pytest.fixture()
def classifier() -> IntentClassifier:
    return IntentClassifier(settings=RoutingSettings())


def test_strong_search_signal_with_hard_keyword_takes_fast_path(classifier: IntentClassifier) -> None:
    intent = classifier.classify("When is the Iration concert and where can I buy tickets?")

    assert intent.force_fast_search is True
    assert intent.requires_multi_step is False
    assert intent.search_confidence >= 0.6


def test_soft_keywords_without_hard_keyword_do_not_take_fast_path(classifier: IntentClassifier) -> None:
    intent = classifier.classify("What is the price, cost and availability schedule?")

    assert intent.search_confidence == pytest.approx(1.0)
    assert intent.force_fast_search is False


def test_design_signal_blocks_fast_path(classifier: IntentClassifier) -> None:
    intent = classifier.classify("Design a concert poster layout and show the tour dates with ticket prices")

    assert intent.design_confidence >= 0.5
    assert intent.force_fast_search is False


def test_transition_phrase_blocks_fast_path_and_requires_multi_step(classifier: IntentClassifier) -> None:
    intent = classifier.classify("Find when Iration is playing and then use Google Maps to find hotels near the venue")

    assert intent.has_transition is True
    assert intent.force_fast_search is False
    assert intent.requires_multi_step is True


def test_location_keywords_prefer_location(classifier: IntentClassifier) -> None:
    intent = classifier.classify("Find restaurants near Times Square")

    assert intent.preferred_category is CapabilityCategory.LOCATION
    assert intent.required_categories == (CapabilityCategory.LOCATION,)
    assert intent.category_confidence[CapabilityCategory.LOCATION] == pytest.approx(0.5)


def test_concert_phrasing_overrides_preferred_category(classifier: IntentClassifier) -> None:
    intent = classifier.classify("Find Iration concert tickets near the closest hotel")

    assert CapabilityCategory.LOCATION in intent.required_categories
    assert intent.preferred_category is CapabilityCategory.LIVE_EXTRACTION


def test_named_site_is_reported(classifier: IntentClassifier) -> None:
    intent = classifier.classify("Check ticketmaster.com for Iration dates")

    assert intent.named_site == "ticketmaster.com"
    assert CapabilityCategory.LIVE_EXTRACTION in intent.required_categories


def test_known_tool_is_reported_as_hint(classifier: IntentClassifier) -> None:
    assert classifier.classify("use Google Maps to find parking").tool_hint == "google-maps"


def test_unmatched_text_resolves_to_default_category(classifier: IntentClassifier) -> None:
    intent = classifier.classify("hello there")

    assert intent.preferred_category is None
    assert intent.resolved_category(classifier.default_category) is CapabilityCategory.NEWS_SEARCH


def test_empty_query_yields_blank_intent(classifier: IntentClassifier) -> None:
    intent = classifier.classify("")

    assert intent.required_categories == ()
    assert intent.requires_multi_step is False
