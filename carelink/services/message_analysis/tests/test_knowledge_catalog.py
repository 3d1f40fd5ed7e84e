"""Tests for the knowledge catalog and item processing."""
import threading
import pytest
from unittest.mock import MagicMock, patch

from carelink.shared.storage import InMemoryKeyValueStore, KeyValueStore, StorageUnavailableError
from carelink.services.message_analysis.config import FALLBACK_RESPONSES, RESPONSE_TEMPLATES
from carelink.services.message_analysis.knowledge_catalog import (
    KnowledgeCatalog,
    KnowledgeItemError,
    build_knowledge_item,
    calculate_priority,
    extract_keywords,
    generate_responses,
)

CATALOG_KEY = "autism_knowledge_base"


@pytest.fixture
def store():
    return InMemoryKeyValueStore()


@pytest.fixture
def catalog(store):
    catalog = KnowledgeCatalog(store, CATALOG_KEY)
    catalog.load()
    return catalog


class TestExtractKeywords:
    """Tests for keyword mining."""

    def test_strips_punctuation_and_short_words(self):
        keywords = extract_keywords("Meltdown management: Ensure safety, reduce stimuli!")

        assert keywords == ["meltdown", "management", "ensure", "safety", "reduce", "stimuli"]

    def test_stop_words_removed(self):
        assert extract_keywords("This is about time with them") == []

    def test_deduplicated_in_order(self):
        assert extract_keywords("Calm calm, CALM. Quiet calm") == ["calm", "quiet"]

    def test_hyphenated_words_joined(self):
        assert extract_keywords("self-regulation") == ["selfregulation"]


class TestGenerateResponses:

    def test_known_category(self):
        assert generate_responses("crisis") == RESPONSE_TEMPLATES["crisis"]
        assert len(generate_responses("crisis")) == 2

    def test_unknown_category_gets_fallback(self):
        assert generate_responses("sensory") == FALLBACK_RESPONSES


class TestCalculatePriority:
    """Tests for category priority and the urgency boost."""

    def test_category_priorities(self):
        assert calculate_priority("crisis", "plan") == 10
        assert calculate_priority("medical", "plan") == 9
        assert calculate_priority("behavioral", "plan") == 7
        assert calculate_priority("support", "plan") == 6
        assert calculate_priority("academic", "plan") == 5
        assert calculate_priority("routine", "plan") == 4

    def test_unknown_category_default(self):
        assert calculate_priority("sensory", "plan") == 5

    def test_urgent_content_boost(self):
        assert calculate_priority("routine", "Respond ASAP please") == 6
        assert calculate_priority("sensory", "Emergency plan") == 7

    def test_boost_capped(self):
        assert calculate_priority("crisis", "urgent") == 10
        assert calculate_priority("medical", "urgent care") == 10

    def test_marker_must_be_whole_word(self):
        assert calculate_priority("sensory", "respond urgently") == 5


class TestBuildKnowledgeItem:
    """Tests for ingest payload validation."""

    def test_derived_fields(self):
        item = build_knowledge_item({
            "content": "Quiet corner with headphones",
            "category": "sensory",
            "priority": 1,
            "responses": ["ignored"],
        })

        assert item.id
        assert item.keywords == ("quiet", "corner", "headphones")
        assert item.responses == FALLBACK_RESPONSES
        assert item.priority == 5

    def test_supplied_keywords_kept(self):
        item = build_knowledge_item({
            "content": "Visual schedules",
            "category": "transition",
            "keywords": ["schedule", "visual"],
        })

        assert item.keywords == ("schedule", "visual")

    def test_ids_are_unique(self):
        raw = {"content": "Same content", "category": "routine"}

        assert build_knowledge_item(raw).id != build_knowledge_item(raw).id

    def test_missing_content_raises(self):
        with pytest.raises(KnowledgeItemError):
            build_knowledge_item({"category": "crisis"})

    def test_blank_category_raises(self):
        with pytest.raises(KnowledgeItemError):
            build_knowledge_item({"content": "Plan", "category": "   "})

    def test_non_mapping_raises(self):
        with pytest.raises(KnowledgeItemError):
            build_knowledge_item("Plan")

    def test_error_is_value_error(self):
        with pytest.raises(ValueError):
            build_knowledge_item({})

    @pytest.mark.parametrize("keywords", [
        [1, 2],
        "noise",
        ["noise", ""],
        ["noise", None],
        {"noise": 1},
    ])
    def test_invalid_keywords_raise(self, keywords):
        """Keywords must be a list of non-empty strings."""
        with pytest.raises(KnowledgeItemError):
            build_knowledge_item({
                "content": "Noise-canceling headphones",
                "category": "sensory",
                "keywords": keywords,
            })

    def test_empty_keyword_list_falls_back_to_mining(self):
        item = build_knowledge_item({
            "content": "Quiet corner",
            "category": "sensory",
            "keywords": [],
        })

        assert item.keywords == ("quiet", "corner")

    def test_keyword_tuple_accepted(self):
        item = build_knowledge_item({
            "content": "Quiet corner",
            "category": "sensory",
            "keywords": ("quiet", "corner"),
        })

        assert item.keywords == ("quiet", "corner")


class TestKnowledgeCatalogLoad:
    """Tests for loading and seeding."""

    def test_empty_store_is_seeded(self, store):
        catalog = KnowledgeCatalog(store, CATALOG_KEY)

        catalog.load()

        assert catalog.is_loaded
        assert [item.category for item in catalog.items] == ["crisis", "behavioral", "academic"]
        assert [item.priority for item in catalog.items] == [10, 8, 6]
        assert len(store.get(CATALOG_KEY)) == 3

    def test_existing_catalog_not_reseeded(self):
        existing = build_knowledge_item({"content": "Existing plan", "category": "routine"})
        store = InMemoryKeyValueStore({CATALOG_KEY: [existing.to_dict()]})
        catalog = KnowledgeCatalog(store, CATALOG_KEY)

        catalog.load()

        assert catalog.items == (existing,)

    def test_read_failure_propagates(self):
        store = MagicMock(spec=KeyValueStore)
        store.get.side_effect = StorageUnavailableError("store down")
        catalog = KnowledgeCatalog(store, CATALOG_KEY)

        with pytest.raises(StorageUnavailableError):
            catalog.load()

        assert catalog.is_loaded is False
        assert catalog.items == ()

    def test_seed_persist_failure_propagates(self, store):
        catalog = KnowledgeCatalog(store, CATALOG_KEY)

        with patch.object(store, "set", side_effect=StorageUnavailableError("read only")):
            with pytest.raises(StorageUnavailableError):
                catalog.load()

        assert catalog.is_loaded is False
        assert catalog.items == ()


class TestKnowledgeCatalogIngest:
    """Tests for appending items."""

    def test_ingest_appends_and_persists(self, catalog, store):
        created = catalog.ingest([
            {"content": "Offer a movement break", "category": "sensory"},
            {"content": "Urgent: call nurse", "category": "medical"},
        ])

        assert len(created) == 2
        assert catalog.items[-2:] == tuple(created)
        assert len(catalog.items) == 5
        assert [entry["id"] for entry in store.get(CATALOG_KEY)] == [i.id for i in catalog.items]
        assert created[1].priority == 10

    def test_invalid_batch_writes_nothing(self, catalog, store):
        before = catalog.items

        with pytest.raises(KnowledgeItemError):
            catalog.ingest([
                {"content": "Valid item", "category": "routine"},
                {"category": "routine"},
            ])

        assert catalog.items == before
        assert len(store.get(CATALOG_KEY)) == 3

    def test_persist_failure_keeps_snapshot(self, catalog, store):
        before = catalog.items

        with patch.object(store, "set", side_effect=StorageUnavailableError("store down")):
            with pytest.raises(StorageUnavailableError):
                catalog.ingest([{"content": "New plan", "category": "routine"}])

        assert catalog.items == before
        assert len(store.get(CATALOG_KEY)) == 3

    def test_bad_keywords_write_nothing(self, catalog, store):
        with pytest.raises(KnowledgeItemError):
            catalog.ingest([{"content": "Numbers", "category": "sensory", "keywords": [1, 2]}])

        assert len(catalog.items) == 3
        assert len(store.get(CATALOG_KEY)) == 3

    def test_empty_batch(self, catalog):
        assert catalog.ingest([]) == []
        assert len(catalog.items) == 3

    def test_concurrent_ingests_are_not_lost(self, catalog, store):
        """Parallel appends all end up in the catalog and the store."""
        def worker(n):
            catalog.ingest([
                {"content": f"Plan {n}-{i}", "category": "routine"} for i in range(5)
            ])

        threads = [threading.Thread(target=worker, args=(n,)) for n in range(10)]
        for thread in threads:
            thread.start()
        for thread in threads:
            thread.join()

        assert len(catalog.items) == 53
        assert len(store.get(CATALOG_KEY)) == 53
