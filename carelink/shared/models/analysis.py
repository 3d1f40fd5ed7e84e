"""Message analysis domain models.

Intents, entities and the assembled analysis result are produced per call
and never mutated afterward. Knowledge items are the records of the scored
knowledge catalog and round-trip through the key-value store as plain dicts.
"""
from dataclasses import dataclass, field
from enum import Enum
from typing import Any, Dict, List, Optional, Tuple


class IntentCategory(Enum):
    """Categories an intent can be classified into.

    Declaration order is the evaluation order of the intent rules.
    """
    CRISIS = "crisis"
    BEHAVIORAL = "behavioral"
    MEDICAL = "medical"
    ACADEMIC = "academic"
    SUPPORT = "support"
    ROUTINE = "routine"


class EntityType(Enum):
    """Kinds of spans the entity extractor can emit."""
    EMOTION = "emotion"
    URGENCY = "urgency"
    TIME = "time"
    STUDENT_NAME = "student_name"
    LOCATION = "location"
    BEHAVIOR = "behavior"


class Sentiment(Enum):
    """Coarse lexicon-vote sentiment."""
    POSITIVE = "positive"
    NEGATIVE = "negative"
    NEUTRAL = "neutral"


@dataclass(frozen=True)
class Intent:
    """A classified purpose of a message."""
    type: str
    confidence: float
    category: IntentCategory

    def __post_init__(self):
        if not 0.0 <= self.confidence <= 1.0:
            raise ValueError(f"Confidence must be 0.0-1.0, got {self.confidence}")

    def to_dict(self) -> Dict[str, Any]:
        return {
            "type": self.type,
            "confidence": self.confidence,
            "category": self.category.value,
        }

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "Intent":
        return cls(
            type=data.get("type", ""),
            confidence=float(data.get("confidence", 0.0)),
            category=IntentCategory(data["category"]),
        )


@dataclass(frozen=True)
class Entity:
    """A typed span of the source text.

    start/end form a half-open interval into the text the entity was
    extracted from.
    """
    type: EntityType
    value: str
    confidence: float
    start: int
    end: int

    def __post_init__(self):
        if not 0.0 <= self.confidence <= 1.0:
            raise ValueError(f"Confidence must be 0.0-1.0, got {self.confidence}")
        if self.start < 0 or self.end <= self.start:
            raise ValueError(f"Invalid entity span [{self.start}, {self.end})")

    def to_dict(self) -> Dict[str, Any]:
        return {
            "type": self.type.value,
            "value": self.value,
            "confidence": self.confidence,
            "start": self.start,
            "end": self.end,
        }

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "Entity":
        return cls(
            type=EntityType(data["type"]),
            value=data["value"],
            confidence=float(data.get("confidence", 0.0)),
            start=int(data["start"]),
            end=int(data["end"]),
        )


@dataclass(frozen=True)
class AnalysisResult:
    """Outcome of analyzing one caregiver message.

    Attached to the caller's message record and never mutated afterward.
    required_actions is intentionally not deduplicated across rules.
    """
    intents: List[Intent] = field(default_factory=list)
    entities: List[Entity] = field(default_factory=list)
    sentiment: Sentiment = Sentiment.NEUTRAL
    urgency_score: int = 5
    suggested_response: Optional[str] = None
    required_actions: List[str] = field(default_factory=list)

    def __post_init__(self):
        if not 0 <= self.urgency_score <= 10:
            raise ValueError(f"Urgency score must be 0-10, got {self.urgency_score}")

    @property
    def primary_intent(self) -> Optional[Intent]:
        """First detected intent, the one consulted for the suggested response."""
        return self.intents[0] if self.intents else None

    def to_dict(self) -> Dict[str, Any]:
        """Convert to dictionary for storage and API responses."""
        return {
            "intents": [i.to_dict() for i in self.intents],
            "entities": [e.to_dict() for e in self.entities],
            "sentiment": self.sentiment.value,
            "urgency_score": self.urgency_score,
            "suggested_response": self.suggested_response,
            "required_actions": list(self.required_actions),
        }


@dataclass(frozen=True)
class KnowledgeItem:
    """A catalog record pairing a category/keyword set with responses.

    Category is a free-form tag (crisis, sensory, transition, ...), not
    restricted to IntentCategory.
    """
    id: str
    category: str
    content: str
    keywords: Tuple[str, ...] = ()
    responses: Tuple[str, ...] = ()
    priority: int = 5

    def __post_init__(self):
        if not 0 <= self.priority <= 10:
            raise ValueError(f"Priority must be 0-10, got {self.priority}")

    def to_dict(self) -> Dict[str, Any]:
        return {
            "id": self.id,
            "category": self.category,
            "content": self.content,
            "keywords": list(self.keywords),
            "responses": list(self.responses),
            "priority": self.priority,
        }

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "KnowledgeItem":
        return cls(
            id=data["id"],
            category=data["category"],
            content=data["content"],
            keywords=tuple(data.get("keywords") or ()),
            responses=tuple(data.get("responses") or ()),
            priority=int(data.get("priority", 5)),
        )


@dataclass(frozen=True)
class AnalysisContext:
    """Caller-supplied context for an analysis call.

    sender_role and previous_messages are accepted but no rule consults
    them yet; they are the extension point for context-aware scoring.
    """
    student_id: Optional[str] = None
    sender_role: Optional[str] = None
    previous_messages: Tuple[str, ...] = ()

    @classmethod
    def from_dict(cls, data: Optional[Dict[str, Any]]) -> "AnalysisContext":
        """Build a context from a request payload.

        Raises:
            TypeError: If data is not a mapping or previous_messages is
                not a list of strings
        """
        if data is None:
            return cls()
        if not isinstance(data, dict):
            raise TypeError(f"Context must be a mapping, got {type(data).__name__}")

        previous = data.get("previous_messages") or []
        if not isinstance(previous, (list, tuple)) or not all(
            isinstance(m, str) for m in previous
        ):
            raise TypeError("previous_messages must be a list of strings")

        return cls(
            student_id=data.get("student_id"),
            sender_role=data.get("sender_role"),
            previous_messages=tuple(previous),
        )
