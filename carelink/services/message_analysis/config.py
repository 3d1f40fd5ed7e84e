"""Message analysis configuration, rule tables and catalog tables.

Every classifier in this service is driven by the data tables below and
evaluated by one generic matcher per component. Extending the rule set
means editing a table, not control flow.
"""
import os
from dataclasses import dataclass
from typing import Dict, FrozenSet, Tuple

from carelink.shared.models import EntityType, IntentCategory


@dataclass(frozen=True)
class AnalysisConfig:
    """Configuration for the analysis engine and its store."""

    # Store key holding the full knowledge catalog
    catalog_key: str = "autism_knowledge_base"

    # Store key holding message records (written by the messaging feature)
    messages_key: str = "messages"

    # Store key holding behavior log records (written by behavior tracking)
    behavior_logs_key: str = "behavior-logs"

    # "memory" or "postgres"
    store_backend: str = "memory"

    # Version tracking for the rule tables
    rules_version: str = "2026.10.18"

    @classmethod
    def from_env(cls) -> "AnalysisConfig":
        """Create config from environment variables.

        Environment variables:
            CARELINK_CATALOG_KEY: Catalog store key
            CARELINK_MESSAGES_KEY: Message records store key
            CARELINK_BEHAVIOR_LOGS_KEY: Behavior log records store key
            CARELINK_STORE_BACKEND: memory | postgres (default memory)
            CARELINK_RULES_VERSION: Rule table version label
        """
        defaults = cls()
        return cls(
            catalog_key=os.getenv("CARELINK_CATALOG_KEY", defaults.catalog_key),
            messages_key=os.getenv("CARELINK_MESSAGES_KEY", defaults.messages_key),
            behavior_logs_key=os.getenv("CARELINK_BEHAVIOR_LOGS_KEY", defaults.behavior_logs_key),
            store_backend=os.getenv("CARELINK_STORE_BACKEND", defaults.store_backend).lower(),
            rules_version=os.getenv("CARELINK_RULES_VERSION", defaults.rules_version),
        )


@dataclass(frozen=True)
class UrgencyThresholds:
    """Urgency scale bounds and the action cut-offs derived from it."""
    BASE_SCORE: int = 5
    MIN_SCORE: int = 0
    MAX_SCORE: int = 10
    IMMEDIATE_RESPONSE_MIN: int = 8
    ESCALATION_MIN: int = 6


@dataclass(frozen=True)
class IntentRule:
    """One intent rule: any trigger present yields the tagged intent."""
    intent_type: str
    category: IntentCategory
    confidence: float
    triggers: Tuple[str, ...]


@dataclass(frozen=True)
class EntityRule:
    """One entity lexicon scanned globally over the raw text."""
    entity_type: EntityType
    confidence: float
    terms: Tuple[str, ...]


# Evaluated in this order; output order follows it
INTENT_RULES: Tuple[IntentRule, ...] = (
    IntentRule(
        intent_type="crisis_alert",
        category=IntentCategory.CRISIS,
        confidence=0.9,
        triggers=(
            "emergency", "crisis", "help", "urgent", "meltdown",
            "aggressive", "hurt", "danger",
        ),
    ),
    IntentRule(
        intent_type="behavior_report",
        category=IntentCategory.BEHAVIORAL,
        confidence=0.8,
        triggers=(
            "behavior", "acting out", "stimming", "tantrum",
            "disruptive", "calm", "focus",
        ),
    ),
    IntentRule(
        intent_type="medical_concern",
        category=IntentCategory.MEDICAL,
        confidence=0.85,
        triggers=(
            "medication", "sick", "tired", "pain", "headache",
            "stomach", "allergy",
        ),
    ),
    IntentRule(
        intent_type="academic_update",
        category=IntentCategory.ACADEMIC,
        confidence=0.7,
        triggers=(
            "learning", "homework", "assignment", "reading", "math",
            "progress", "goal",
        ),
    ),
    IntentRule(
        intent_type="support_request",
        category=IntentCategory.SUPPORT,
        confidence=0.75,
        triggers=(
            "need help", "support", "assistance", "guidance", "advice",
            "what should",
        ),
    ),
    IntentRule(
        intent_type="routine_update",
        category=IntentCategory.ROUTINE,
        confidence=0.6,
        triggers=(
            "schedule", "routine", "break", "lunch", "transition",
            "activity",
        ),
    ),
)

# Scanned in this order; output order follows it
ENTITY_RULES: Tuple[EntityRule, ...] = (
    EntityRule(
        entity_type=EntityType.EMOTION,
        confidence=0.8,
        terms=(
            "happy", "sad", "angry", "frustrated", "calm", "excited",
            "anxious", "overwhelmed",
        ),
    ),
    EntityRule(
        entity_type=EntityType.URGENCY,
        confidence=0.9,
        terms=("urgent", "immediate", "asap", "emergency", "now", "quickly"),
    ),
    EntityRule(
        entity_type=EntityType.TIME,
        confidence=0.7,
        terms=("morning", "afternoon", "lunch", "recess", "today", "tomorrow", "now"),
    ),
)

# Emotions that raise urgency by one point per occurrence
ESCALATING_EMOTIONS: FrozenSet[str] = frozenset({
    "angry",
    "frustrated",
    "anxious",
    "overwhelmed",
})

POSITIVE_WORDS: Tuple[str, ...] = (
    "good", "great", "happy", "calm", "success", "progress", "better",
    "improvement",
)

NEGATIVE_WORDS: Tuple[str, ...] = (
    "bad", "terrible", "angry", "upset", "problem", "issue", "difficult",
    "struggle",
)

# =============================================================================
# KNOWLEDGE CATALOG TABLES
# =============================================================================

CATEGORY_PRIORITIES: Dict[str, int] = {
    "crisis": 10,
    "medical": 9,
    "behavioral": 7,
    "support": 6,
    "academic": 5,
    "routine": 4,
}

DEFAULT_PRIORITY = 5
URGENT_CONTENT_BOOST = 2
URGENT_CONTENT_MARKERS: Tuple[str, ...] = ("urgent", "emergency", "immediate", "asap")

KEYWORD_MIN_LENGTH = 4
STOP_WORDS: FrozenSet[str] = frozenset({
    "this", "that", "with", "have", "will", "been", "from", "they",
    "them", "were", "said", "each", "which", "their", "time", "about",
})

RESPONSE_TEMPLATES: Dict[str, Tuple[str, ...]] = {
    "crisis": (
        "This appears to be an urgent situation requiring immediate attention.",
        "Please ensure safety protocols are followed and document the incident.",
    ),
    "medical": (
        "Medical concerns should be addressed promptly with appropriate staff.",
        "Please contact the school nurse and notify parents if necessary.",
    ),
    "behavioral": (
        "Behavioral observations are important for developing effective strategies.",
        "Consider documenting triggers and successful interventions.",
    ),
    "academic": (
        "Academic progress tracking helps identify effective teaching strategies.",
        "Regular assessment helps ensure student needs are being met.",
    ),
    "support": (
        "Support requests help ensure students receive appropriate assistance.",
        "Collaboration between team members improves student outcomes.",
    ),
    "routine": (
        "Routine updates help maintain consistency for students who need structure.",
        "Clear schedules and transitions support student success.",
    ),
}

FALLBACK_RESPONSES: Tuple[str, ...] = (
    "Thank you for this information. It will help improve student support.",
    "This feedback is valuable for ongoing care planning.",
)

# Written to the store the first time the engine starts against an empty catalog
SEED_KNOWLEDGE: Tuple[dict, ...] = (
    {
        "category": "crisis",
        "content": (
            "Meltdown management: Ensure safety, reduce stimuli, remain calm, "
            "use calming strategies"
        ),
        "keywords": ["meltdown", "overwhelmed", "crisis", "escalation"],
        "responses": [
            "I understand this is a challenging situation. Let me help you with some immediate strategies.",
            "Safety first - please ensure the student is in a safe environment and reduce any overwhelming stimuli.",
        ],
        "priority": 10,
    },
    {
        "category": "behavioral",
        "content": (
            "Sensory seeking behaviors: Provide alternative sensory input, use fidget tools, "
            "create sensory breaks"
        ),
        "keywords": ["stimming", "sensory", "fidgeting", "self-regulation"],
        "responses": [
            "Sensory behaviors often serve an important purpose. Consider providing alternative sensory tools.",
            "Regular sensory breaks can help prevent overwhelming behaviors.",
        ],
        "priority": 8,
    },
    {
        "category": "academic",
        "content": (
            "Learning support: Break tasks into smaller steps, use visual supports, "
            "provide processing time"
        ),
        "keywords": ["learning", "academic", "tasks", "processing", "comprehension"],
        "responses": [
            "Breaking complex tasks into smaller, manageable steps often helps with learning.",
            "Visual supports and extra processing time can make a significant difference.",
        ],
        "priority": 6,
    },
)
