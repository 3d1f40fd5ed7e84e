"""Tests for message analysis domain models."""
import pytest

from carelink.shared.models import (
    AnalysisContext,
    AnalysisResult,
    Entity,
    EntityType,
    Intent,
    IntentCategory,
    KnowledgeItem,
    Sentiment,
)


class TestIntent:
    """Tests for Intent dataclass."""

    def test_valid_intent(self):
        intent = Intent(type="crisis_alert", confidence=0.9, category=IntentCategory.CRISIS)

        assert intent.category == IntentCategory.CRISIS
        assert intent.to_dict() == {
            "type": "crisis_alert",
            "confidence": 0.9,
            "category": "crisis",
        }

    def test_invalid_confidence_raises(self):
        with pytest.raises(ValueError):
            Intent(type="crisis_alert", confidence=1.5, category=IntentCategory.CRISIS)

    def test_from_dict_unknown_category_raises(self):
        with pytest.raises(ValueError):
            Intent.from_dict({"type": "x", "confidence": 0.5, "category": "gardening"})


class TestEntity:
    """Tests for Entity span validation."""

    def test_valid_entity(self):
        entity = Entity(type=EntityType.URGENCY, value="now", confidence=0.9, start=4, end=7)

        assert entity.to_dict()["type"] == "urgency"
        assert entity.end - entity.start == len(entity.value)

    def test_negative_start_raises(self):
        with pytest.raises(ValueError):
            Entity(type=EntityType.TIME, value="today", confidence=0.7, start=-1, end=4)

    def test_empty_span_raises(self):
        with pytest.raises(ValueError):
            Entity(type=EntityType.TIME, value="", confidence=0.7, start=3, end=3)

    def test_from_dict(self):
        entity = Entity.from_dict({
            "type": "emotion",
            "value": "calm",
            "confidence": 0.8,
            "start": 0,
            "end": 4,
        })

        assert entity.type == EntityType.EMOTION
        assert entity.value == "calm"


class TestAnalysisResult:
    """Tests for AnalysisResult."""

    def test_defaults_are_neutral(self):
        result = AnalysisResult()

        assert result.intents == []
        assert result.entities == []
        assert result.sentiment == Sentiment.NEUTRAL
        assert result.urgency_score == 5
        assert result.suggested_response is None
        assert result.required_actions == []
        assert result.primary_intent is None

    def test_urgency_out_of_range_raises(self):
        with pytest.raises(ValueError):
            AnalysisResult(urgency_score=11)

    def test_to_dict(self):
        intent = Intent(type="medical_concern", confidence=0.85, category=IntentCategory.MEDICAL)
        result = AnalysisResult(
            intents=[intent],
            sentiment=Sentiment.NEGATIVE,
            urgency_score=7,
            required_actions=["notify_school_nurse", "contact_parent"],
        )

        data = result.to_dict()

        assert data["intents"][0]["category"] == "medical"
        assert data["sentiment"] == "negative"
        assert data["urgency_score"] == 7
        assert data["suggested_response"] is None
        assert result.primary_intent == intent


class TestKnowledgeItem:
    """Tests for KnowledgeItem."""

    def test_priority_out_of_range_raises(self):
        with pytest.raises(ValueError):
            KnowledgeItem(id="k1", category="crisis", content="x", priority=12)

    def test_store_shape_round_trip(self):
        item = KnowledgeItem(
            id="k1",
            category="sensory",
            content="Sensory breaks",
            keywords=("sensory", "breaks"),
            responses=("Try a sensory break.",),
            priority=5,
        )

        assert KnowledgeItem.from_dict(item.to_dict()) == item


class TestAnalysisContext:
    """Tests for AnalysisContext parsing."""

    def test_none_gives_empty_context(self):
        context = AnalysisContext.from_dict(None)

        assert context.student_id is None
        assert context.previous_messages == ()

    def test_full_context(self):
        context = AnalysisContext.from_dict({
            "student_id": "student_123",
            "sender_role": "teacher",
            "previous_messages": ["earlier message"],
        })

        assert context.student_id == "student_123"
        assert context.sender_role == "teacher"
        assert context.previous_messages == ("earlier message",)

    def test_non_mapping_raises(self):
        with pytest.raises(TypeError):
            AnalysisContext.from_dict("student_123")

    def test_bad_previous_messages_raises(self):
        with pytest.raises(TypeError):
            AnalysisContext.from_dict({"previous_messages": "not a list"})
