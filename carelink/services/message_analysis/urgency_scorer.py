"""Urgency scorer - additive 0-10 scale.

Starts from a neutral base and adds independent contributions:
    +4  any crisis intent
    +2  any medical intent
    +1  any behavioral intent
    +2  per urgency entity
    +1  per escalating emotion (angry, frustrated, anxious, overwhelmed)
The total is clamped to the scale bounds.
"""
from typing import Dict, Optional, Sequence

from carelink.shared.models import Entity, EntityType, Intent, IntentCategory
from .config import ESCALATING_EMOTIONS, UrgencyThresholds

CATEGORY_BOOSTS: Dict[IntentCategory, int] = {
    IntentCategory.CRISIS: 4,
    IntentCategory.MEDICAL: 2,
    IntentCategory.BEHAVIORAL: 1,
}

URGENCY_ENTITY_WEIGHT = 2
ESCALATING_EMOTION_WEIGHT = 1


class UrgencyScorer:
    """Combines intents and entities into a bounded urgency score."""

    def __init__(self, thresholds: Optional[UrgencyThresholds] = None):
        self.thresholds = thresholds or UrgencyThresholds()

    def score(
        self,
        text: str,
        intents: Sequence[Intent],
        entities: Sequence[Entity],
    ) -> int:
        """Score a message.

        Args:
            text: Lower-cased message text (kept in the signature for
                text-level rules; none currently read it)
            intents: Output of the intent recognizer
            entities: Output of the entity extractor

        Returns:
            Integer urgency within [MIN_SCORE, MAX_SCORE]
        """
        score = self.thresholds.BASE_SCORE

        categories = {intent.category for intent in intents}
        for category, boost in CATEGORY_BOOSTS.items():
            if category in categories:
                score += boost

        for entity in entities:
            if entity.type == EntityType.URGENCY:
                score += URGENCY_ENTITY_WEIGHT
            elif entity.type == EntityType.EMOTION and entity.value.lower() in ESCALATING_EMOTIONS:
                score += ESCALATING_EMOTION_WEIGHT

        return self.clamp(score)

    def clamp(self, score: int) -> int:
        return max(self.thresholds.MIN_SCORE, min(self.thresholds.MAX_SCORE, score))
