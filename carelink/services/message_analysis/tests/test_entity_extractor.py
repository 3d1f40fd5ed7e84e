"""Tests for the entity extractor."""
import pytest

from carelink.shared.models import EntityType
from carelink.services.message_analysis.entity_extractor import EntityExtractor


@pytest.fixture
def extractor():
    return EntityExtractor()


class TestEntityExtractor:
    """Tests for lexicon entity extraction."""

    def test_urgency_entity_span(self, extractor):
        text = "The student is having a meltdown and needs immediate help"

        entities = extractor.extract(text)

        assert len(entities) == 1
        entity = entities[0]
        assert entity.type == EntityType.URGENCY
        assert entity.value == "immediate"
        assert entity.confidence == 0.9
        assert entity.start == text.index("immediate")
        assert entity.end == entity.start + len("immediate")

    def test_spans_index_source_text(self, extractor):
        texts = [
            "She was Angry this Morning and calm by lunch",
            "Come now, quickly!",
            "Tomorrow after recess",
        ]
        for text in texts:
            for entity in extractor.extract(text):
                assert text[entity.start:entity.end] == entity.value

    def test_original_casing_preserved(self, extractor):
        entities = extractor.extract("She was Angry this Morning")

        assert [(e.type, e.value) for e in entities] == [
            (EntityType.EMOTION, "Angry"),
            (EntityType.TIME, "Morning"),
        ]

    def test_word_in_two_lexicons(self, extractor):
        """'now' is both an urgency and a time word."""
        entities = extractor.extract("Please come now")

        assert [e.type for e in entities] == [EntityType.URGENCY, EntityType.TIME]
        assert entities[0].start == entities[1].start

    def test_lexicon_order_not_text_order(self, extractor):
        entities = extractor.extract("Today he was happy")

        assert [e.value for e in entities] == ["happy", "Today"]

    def test_every_occurrence(self, extractor):
        entities = extractor.extract("sad in the morning, sad again in the afternoon")

        emotions = [e for e in entities if e.type == EntityType.EMOTION]
        assert len(emotions) == 2
        assert emotions[0].start < emotions[1].start

    def test_whole_words_only(self, extractor):
        assert extractor.extract("nowhere, sadly, happyish") == []

    def test_empty_text(self, extractor):
        assert extractor.extract("") == []
