"""Catalog reporting: training-data export and analytics summary.

The export is framework-neutral (intents with example utterances, a
keyword entity list, per-intent responses); translating it into a given
chatbot framework's file format is left to the consumer.
"""
import logging
from collections import Counter
from datetime import datetime, timedelta, timezone
from typing import Any, Dict, List, Optional, Sequence

from carelink.shared.models import KnowledgeItem

logger = logging.getLogger(__name__)

RECENT_WINDOW = timedelta(hours=24)
TOP_INTENT_LIMIT = 5


def _intent_name(category: str) -> str:
    return f"{category}_intent"


def export_training_data(catalog: Sequence[KnowledgeItem]) -> Dict[str, List[Dict[str, Any]]]:
    """Export the catalog as intents, entities and responses.

    Intents group item contents by category in first-seen order. All
    keywords are pooled into one "keywords" entity; the entity list is
    empty when no item carries keywords.
    """
    examples: Dict[str, List[str]] = {}
    keywords: Dict[str, None] = {}

    for item in catalog:
        examples.setdefault(_intent_name(item.category), []).append(item.content)
        for keyword in item.keywords:
            keywords.setdefault(keyword, None)

    intents = [{"name": name, "examples": texts} for name, texts in examples.items()]
    entities = [{"name": "keywords", "values": list(keywords)}] if keywords else []
    responses = [
        {"intent": _intent_name(item.category), "text": list(item.responses)}
        for item in catalog
    ]

    return {"intents": intents, "entities": entities, "responses": responses}


def _parse_timestamp(value: Any) -> Optional[datetime]:
    if not isinstance(value, str):
        return None
    try:
        parsed = datetime.fromisoformat(value.replace("Z", "+00:00"))
    except ValueError:
        return None
    if parsed.tzinfo is None:
        parsed = parsed.replace(tzinfo=timezone.utc)
    return parsed


def _intent_list(analysis: Dict[str, Any]) -> List[Dict[str, Any]]:
    intents = analysis.get("intents")
    if not isinstance(intents, list):
        return []
    return [intent for intent in intents if isinstance(intent, dict)]


def build_analytics_report(
    catalog: Sequence[KnowledgeItem],
    messages: Sequence[Dict[str, Any]],
    now: Optional[datetime] = None,
) -> Dict[str, Any]:
    """Summarize the catalog and the analyses attached to message records.

    Args:
        catalog: Current catalog snapshot
        messages: Message records, each optionally carrying an
            "ml_analysis" AnalysisResult dict and an ISO "timestamp"
        now: Reference time for the recent window (default: utcnow)

    Returns:
        Dictionary with total_knowledge_items, category_counts,
        recent_analyses, top_intents and avg_confidence
    """
    now = now or datetime.now(timezone.utc)
    if now.tzinfo is None:
        now = now.replace(tzinfo=timezone.utc)
    cutoff = now - RECENT_WINDOW

    category_counts = dict(Counter(item.category for item in catalog))

    # Records without an analysis object are skipped
    analyzed = [
        m for m in messages
        if isinstance(m, dict) and isinstance(m.get("ml_analysis"), dict) and m["ml_analysis"]
    ]

    recent_analyses = 0
    for message in analyzed:
        timestamp = _parse_timestamp(message.get("timestamp"))
        if timestamp is not None and timestamp > cutoff:
            recent_analyses += 1

    all_intents = [
        intent
        for message in analyzed
        for intent in _intent_list(message["ml_analysis"])
    ]

    # Counter.most_common keeps first-seen order among equal counts
    intent_counts = Counter(intent.get("type") for intent in all_intents)
    top_intents = [
        {"intent": intent_type, "frequency": frequency}
        for intent_type, frequency in intent_counts.most_common(TOP_INTENT_LIMIT)
    ]

    avg_confidence = 0.0
    if all_intents:
        total = sum(float(intent.get("confidence", 0.0)) for intent in all_intents)
        avg_confidence = round(total / len(all_intents), 2)

    logger.info(
        "ANALYTICS_REPORT_GENERATED",
        extra={
            "total_knowledge_items": len(catalog),
            "analyzed_messages": len(analyzed),
            "recent_analyses": recent_analyses,
        }
    )

    return {
        "total_knowledge_items": len(catalog),
        "category_counts": category_counts,
        "recent_analyses": recent_analyses,
        "top_intents": top_intents,
        "avg_confidence": avg_confidence,
    }
