"""Message Analysis Service: rule-based caregiver message analysis.

Deterministic lexical pipeline, no statistical model:
- intent_recognizer.py: weighted intents from whole-word triggers
- entity_extractor.py: emotion, urgency and time spans
- sentiment_analyzer.py: lexicon-vote sentiment
- urgency_scorer.py: additive 0-10 urgency
- knowledge_catalog.py: scored knowledge items in the key-value store
- migration.py: stored messages and behavior logs as knowledge items
- response_retriever.py: best catalog response for an intent
- action_determiner.py: required follow-up actions
- engine.py: MessageAnalysisEngine orchestrating the above
- handler.py: Flask HTTP endpoints (/health, /ready, /analyze, ...)

Usage:
    from carelink.shared.storage import InMemoryKeyValueStore
    from carelink.services.message_analysis import MessageAnalysisEngine

    engine = MessageAnalysisEngine(store=InMemoryKeyValueStore())
    result = engine.analyze("The student is having a meltdown", {"student_id": "s1"})
"""

from .config import AnalysisConfig, UrgencyThresholds, IntentRule, EntityRule
from .engine import MessageAnalysisEngine, EngineState, fallback_result
from .knowledge_catalog import KnowledgeCatalog, KnowledgeItemError

__all__ = [
    "AnalysisConfig",
    "UrgencyThresholds",
    "IntentRule",
    "EntityRule",
    "MessageAnalysisEngine",
    "EngineState",
    "fallback_result",
    "KnowledgeCatalog",
    "KnowledgeItemError",
]
