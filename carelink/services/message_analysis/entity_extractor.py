"""Entity extractor - global lexicon scans over the raw text.

Each EntityRule is scanned independently and every non-overlapping match
becomes an entity. A word present in two lexicons ("now" is both urgency
and time) yields two entities.
"""
import re
from typing import List, Optional, Sequence, Tuple

from carelink.shared.models import Entity
from .config import ENTITY_RULES, EntityRule
from .intent_recognizer import compile_terms


class EntityExtractor:
    """Produces emotion, urgency and time spans with fixed confidences."""

    def __init__(self, rules: Optional[Sequence[EntityRule]] = None):
        self.rules: Tuple[EntityRule, ...] = tuple(rules if rules is not None else ENTITY_RULES)
        self._patterns: List[Tuple[EntityRule, re.Pattern]] = [
            (rule, compile_terms(rule.terms)) for rule in self.rules
        ]

    def extract(self, text: str) -> List[Entity]:
        """Extract entities from text, preserving original casing in values.

        Spans index into text itself, so text[e.start:e.end] == e.value.
        """
        entities: List[Entity] = []
        for rule, pattern in self._patterns:
            for match in pattern.finditer(text):
                entities.append(Entity(
                    type=rule.entity_type,
                    value=match.group(0),
                    confidence=rule.confidence,
                    start=match.start(),
                    end=match.end(),
                ))
        return entities
