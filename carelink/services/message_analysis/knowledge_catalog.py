"""Knowledge catalog - append-only store of scored knowledge items.

The whole catalog lives under one store key as a JSON array and is always
written back in full. Appends are serialized by a single-writer lock and
the in-memory snapshot is swapped only after the store write succeeds, so
readers see either the old catalog or the new one, never a partial append.
"""
import logging
import re
import threading
import uuid
from typing import Any, Dict, Iterable, List, Mapping, Sequence, Tuple

from carelink.shared.models import KnowledgeItem
from carelink.shared.storage import KeyValueStore
from .config import (
    CATEGORY_PRIORITIES,
    DEFAULT_PRIORITY,
    FALLBACK_RESPONSES,
    KEYWORD_MIN_LENGTH,
    RESPONSE_TEMPLATES,
    SEED_KNOWLEDGE,
    STOP_WORDS,
    URGENT_CONTENT_BOOST,
    URGENT_CONTENT_MARKERS,
)
from .intent_recognizer import compile_terms

logger = logging.getLogger(__name__)

_PUNCTUATION = re.compile(r"[^\w\s]")
_URGENT_CONTENT = compile_terms(URGENT_CONTENT_MARKERS)

MAX_PRIORITY = 10


class KnowledgeItemError(ValueError):
    """An ingest payload item is missing required fields."""
    pass


def extract_keywords(content: str) -> List[str]:
    """Mine keywords from content.

    Lower-cases, strips punctuation, keeps tokens longer than three
    characters that are not stop words, de-duplicated in first-seen order.
    """
    tokens = _PUNCTUATION.sub("", content.lower()).split()
    keywords: Dict[str, None] = {}
    for token in tokens:
        if len(token) >= KEYWORD_MIN_LENGTH and token not in STOP_WORDS:
            keywords.setdefault(token, None)
    return list(keywords)


def generate_responses(category: str) -> Tuple[str, ...]:
    """Response templates for a category, generic pair when unknown."""
    return RESPONSE_TEMPLATES.get(category, FALLBACK_RESPONSES)


def calculate_priority(category: str, content: str) -> int:
    """Category priority, boosted when the content carries an urgency marker."""
    priority = CATEGORY_PRIORITIES.get(category, DEFAULT_PRIORITY)
    if _URGENT_CONTENT.search(content):
        priority = min(MAX_PRIORITY, priority + URGENT_CONTENT_BOOST)
    return priority


def _is_keyword_list(value: Any) -> bool:
    # A bare string would be split into single-character keywords
    return isinstance(value, (list, tuple)) and all(
        isinstance(keyword, str) and keyword.strip() for keyword in value
    )


def build_knowledge_item(raw: Mapping[str, Any]) -> KnowledgeItem:
    """Turn one ingest payload entry into a KnowledgeItem.

    Only content, category and keywords are read; responses and priority
    are always derived.

    Raises:
        KnowledgeItemError: If content or category is missing or empty,
            or keywords is given but not a list of non-empty strings
    """
    if not isinstance(raw, Mapping):
        raise KnowledgeItemError(f"Knowledge item must be a mapping, got {type(raw).__name__}")

    content = raw.get("content")
    category = raw.get("category")
    if not isinstance(content, str) or not content.strip():
        raise KnowledgeItemError("Knowledge item requires non-empty 'content'")
    if not isinstance(category, str) or not category.strip():
        raise KnowledgeItemError("Knowledge item requires non-empty 'category'")

    keywords = raw.get("keywords")
    if keywords is not None and not _is_keyword_list(keywords):
        raise KnowledgeItemError("Knowledge item 'keywords' must be a list of non-empty strings")
    if not keywords:
        keywords = extract_keywords(content)

    return KnowledgeItem(
        id=str(uuid.uuid4()),
        category=category,
        content=content,
        keywords=tuple(keywords),
        responses=generate_responses(category),
        priority=calculate_priority(category, content),
    )


class KnowledgeCatalog:
    """Scored knowledge items backed by a key-value store."""

    def __init__(self, store: KeyValueStore, catalog_key: str):
        self.store = store
        self.catalog_key = catalog_key
        self._items: Tuple[KnowledgeItem, ...] = ()
        self._loaded = False
        self._write_lock = threading.Lock()

    @property
    def items(self) -> Tuple[KnowledgeItem, ...]:
        """Current immutable snapshot of the catalog."""
        return self._items

    @property
    def is_loaded(self) -> bool:
        return self._loaded

    def load(self) -> None:
        """Load the catalog from the store, seeding it when empty.

        Raises:
            StorageUnavailableError: If the store cannot be read or the
                seed set cannot be persisted
        """
        with self._write_lock:
            stored = self.store.get(self.catalog_key) or []
            items = tuple(KnowledgeItem.from_dict(entry) for entry in stored)

            if not items:
                items = self._seed()

            self._items = items
            self._loaded = True

        logger.info(
            "KNOWLEDGE_CATALOG_LOADED",
            extra={"catalog_key": self.catalog_key, "catalog_size": len(self._items)}
        )

    def _seed(self) -> Tuple[KnowledgeItem, ...]:
        seeded = tuple(
            KnowledgeItem(
                id=str(uuid.uuid4()),
                category=entry["category"],
                content=entry["content"],
                keywords=tuple(entry["keywords"]),
                responses=tuple(entry["responses"]),
                priority=entry["priority"],
            )
            for entry in SEED_KNOWLEDGE
        )
        self._persist(seeded)

        logger.info(
            "KNOWLEDGE_CATALOG_SEEDED",
            extra={
                "catalog_key": self.catalog_key,
                "seeded_count": len(seeded),
                "categories": sorted({item.category for item in seeded}),
            }
        )
        return seeded

    def ingest(self, raw_items: Iterable[Mapping[str, Any]]) -> List[KnowledgeItem]:
        """Process payload items and append them to the catalog.

        The whole batch is validated before anything is written.

        Returns:
            The newly created items

        Raises:
            KnowledgeItemError: If any payload item is invalid
            StorageUnavailableError: If the catalog cannot be persisted
        """
        processed = [build_knowledge_item(raw) for raw in raw_items]

        with self._write_lock:
            updated = self._items + tuple(processed)
            self._persist(updated)
            self._items = updated

        logger.info(
            "KNOWLEDGE_ITEMS_INGESTED",
            extra={
                "items_processed": len(processed),
                "catalog_size": len(updated),
            }
        )
        return processed

    def _persist(self, items: Sequence[KnowledgeItem]) -> None:
        try:
            self.store.set(self.catalog_key, [item.to_dict() for item in items])
        except Exception as e:
            logger.error(
                "KNOWLEDGE_CATALOG_PERSIST_FAILED",
                extra={
                    "catalog_key": self.catalog_key,
                    "error": str(e),
                    "error_type": type(e).__name__,
                }
            )
            raise
