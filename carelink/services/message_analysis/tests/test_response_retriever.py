"""Tests for knowledge-base response retrieval."""
import pytest

from carelink.shared.models import Entity, EntityType, Intent, IntentCategory, KnowledgeItem
from carelink.services.message_analysis.response_retriever import (
    find_relevant_items,
    retrieve_response,
)


def make_item(item_id, category, priority, keywords=(), responses=None):
    return KnowledgeItem(
        id=item_id,
        category=category,
        content=f"{category} guidance",
        keywords=tuple(keywords),
        responses=tuple(responses if responses is not None else [f"{item_id} response"]),
        priority=priority,
    )


def make_entity(value: str) -> Entity:
    return Entity(type=EntityType.BEHAVIOR, value=value, confidence=0.8, start=0, end=len(value))


@pytest.fixture
def catalog():
    return (
        make_item("crisis", "crisis", 10, keywords=["meltdown", "overwhelmed"]),
        make_item("behavioral", "behavioral", 8, keywords=["stimming", "sensory"]),
        make_item("academic", "academic", 6, keywords=["learning"]),
    )


class TestRetrieveResponse:
    """Tests for relevance and priority ordering."""

    def test_category_match(self, catalog):
        intent = Intent(type="behavior_report", confidence=0.8, category=IntentCategory.BEHAVIORAL)

        assert retrieve_response(intent, [], catalog) == "behavioral response"

    def test_keyword_match_outranks_category_match(self, catalog):
        """A higher-priority keyword hit beats a lower-priority category hit."""
        intent = Intent(type="academic_update", confidence=0.7, category=IntentCategory.ACADEMIC)

        response = retrieve_response(intent, [make_entity("Stimming")], catalog)

        assert response == "behavioral response"

    def test_keyword_is_substring_of_entity_value(self, catalog):
        intent = Intent(type="support_request", confidence=0.75, category=IntentCategory.SUPPORT)

        relevant = find_relevant_items(intent, [make_entity("sensory-seeking")], catalog)

        assert [item.id for item in relevant] == ["behavioral"]

    def test_keyword_case_insensitive(self):
        catalog = [make_item("k1", "social", 5, keywords=["PECS"])]
        intent = Intent(type="support_request", confidence=0.75, category=IntentCategory.SUPPORT)

        assert retrieve_response(intent, [make_entity("pecs")], catalog) == "k1 response"

    def test_no_match_returns_none(self, catalog):
        intent = Intent(type="support_request", confidence=0.75, category=IntentCategory.SUPPORT)

        assert retrieve_response(intent, [], catalog) is None

    def test_empty_catalog(self):
        intent = Intent(type="crisis_alert", confidence=0.9, category=IntentCategory.CRISIS)

        assert retrieve_response(intent, [], []) is None

    def test_equal_priority_keeps_catalog_order(self):
        catalog = [
            make_item("first", "routine", 4),
            make_item("second", "routine", 4),
        ]
        intent = Intent(type="routine_update", confidence=0.6, category=IntentCategory.ROUTINE)

        assert retrieve_response(intent, [], catalog) == "first response"
        assert [i.id for i in find_relevant_items(intent, [], catalog)] == ["first", "second"]

    def test_best_item_without_responses(self):
        catalog = [make_item("silent", "crisis", 10, responses=[])]
        intent = Intent(type="crisis_alert", confidence=0.9, category=IntentCategory.CRISIS)

        assert retrieve_response(intent, [], catalog) is None
