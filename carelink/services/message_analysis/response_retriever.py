"""Response retriever - picks a knowledge-base response for an intent.

An item is relevant when its category equals the intent's category, or
when any of its keywords is a case-insensitive substring of any entity
value. The highest-priority relevant item wins; equal priorities keep
catalog order. No match is a normal outcome and yields None.
"""
from typing import List, Optional, Sequence

from carelink.shared.models import Entity, Intent, KnowledgeItem


def find_relevant_items(
    intent: Intent,
    entities: Sequence[Entity],
    catalog: Sequence[KnowledgeItem],
) -> List[KnowledgeItem]:
    """Relevant items in descending priority, ties in catalog order."""
    entity_values = [entity.value.lower() for entity in entities]

    def is_relevant(item: KnowledgeItem) -> bool:
        if item.category == intent.category.value:
            return True
        return any(
            keyword.lower() in value
            for keyword in item.keywords
            for value in entity_values
        )

    relevant = [item for item in catalog if is_relevant(item)]
    # sorted() is stable with reverse=True as well
    return sorted(relevant, key=lambda item: item.priority, reverse=True)


def retrieve_response(
    intent: Intent,
    entities: Sequence[Entity],
    catalog: Sequence[KnowledgeItem],
) -> Optional[str]:
    """First response template of the best matching item, or None."""
    relevant = find_relevant_items(intent, entities, catalog)
    if not relevant:
        return None

    best = relevant[0]
    return best.responses[0] if best.responses else None
