"""Bulk ingestion of existing caregiver records into the knowledge catalog.

Message records and behavior logs already kept in the store become
knowledge items. Each run appends what it finds; callers decide when
migration happens (the bootstrap script runs it behind --migrate).
"""
import logging
from typing import Any, Dict, List, Sequence

from .knowledge_catalog import extract_keywords

logger = logging.getLogger(__name__)

MIN_MESSAGE_LENGTH = 10

# (message type, category) pairs checked after the urgent/safety rule
MESSAGE_TYPE_CATEGORIES: Dict[str, str] = {
    "health": "medical",
    "behavior": "behavioral",
    "academic": "academic",
    "incident": "crisis",
}
DEFAULT_MESSAGE_CATEGORY = "support"


def categorize_message(message_type: Any, priority: Any) -> str:
    """Catalog category for a stored message from its type and priority."""
    if priority == "urgent" or message_type == "safety":
        return "crisis"
    return MESSAGE_TYPE_CATEGORIES.get(message_type, DEFAULT_MESSAGE_CATEGORY)


def items_from_messages(messages: Sequence[Any]) -> List[Dict[str, Any]]:
    """Ingest payloads for messages with more than MIN_MESSAGE_LENGTH characters."""
    items = []
    for message in messages:
        if not isinstance(message, dict):
            continue
        content = message.get("content")
        if not isinstance(content, str) or len(content) <= MIN_MESSAGE_LENGTH:
            continue
        items.append({
            "content": content,
            "category": categorize_message(message.get("type"), message.get("priority")),
            "keywords": extract_keywords(content),
        })
    return items


def items_from_behavior_logs(behavior_logs: Sequence[Any]) -> List[Dict[str, Any]]:
    """Behavioral ingest payloads for logs that record an intervention."""
    items = []
    for log in behavior_logs:
        if not isinstance(log, dict):
            continue
        description = log.get("description")
        intervention = log.get("intervention")
        if not isinstance(description, str) or not description.strip():
            continue
        if not isinstance(intervention, str) or not intervention.strip():
            continue

        keywords = [
            value for value in (log.get("behavior"), log.get("trigger"), intervention)
            if isinstance(value, str) and value.strip()
        ]
        items.append({
            "content": f"{description} - Intervention: {intervention}",
            "category": "behavioral",
            "keywords": keywords,
        })
    return items


def collect_migration_items(
    messages: Sequence[Any],
    behavior_logs: Sequence[Any],
) -> List[Dict[str, Any]]:
    """Message-derived items followed by behavior-log items."""
    message_items = items_from_messages(messages)
    behavior_items = items_from_behavior_logs(behavior_logs)

    logger.debug(
        "MIGRATION_ITEMS_COLLECTED",
        extra={
            "message_items": len(message_items),
            "behavior_items": len(behavior_items),
            "skipped": len(messages) + len(behavior_logs) - len(message_items) - len(behavior_items),
        }
    )
    return message_items + behavior_items
