"""Intent recognizer - lexical rule matcher.

Each IntentRule is a disjunction of whole-word triggers. Rules are
independent: a message can raise several intents, and output order is
rule order (crisis, behavioral, medical, academic, support, routine).
"""
import logging
import re
from typing import List, Optional, Sequence, Tuple

from carelink.shared.models import Intent
from .config import INTENT_RULES, IntentRule

logger = logging.getLogger(__name__)


def compile_terms(terms: Sequence[str]) -> re.Pattern:
    """Compile terms into one alternation bounded by word boundaries.

    Longer terms are tried first so multi-word triggers win over their
    prefixes.
    """
    ordered = sorted(terms, key=len, reverse=True)
    alternation = "|".join(re.escape(t) for t in ordered)
    return re.compile(rf"\b(?:{alternation})\b", re.IGNORECASE)


class IntentRecognizer:
    """Applies the intent rule table to lower-cased message text."""

    def __init__(self, rules: Optional[Sequence[IntentRule]] = None):
        self.rules: Tuple[IntentRule, ...] = tuple(rules if rules is not None else INTENT_RULES)
        self._patterns: List[Tuple[IntentRule, re.Pattern]] = [
            (rule, compile_terms(rule.triggers)) for rule in self.rules
        ]

    def recognize(self, text: str) -> List[Intent]:
        """Return one intent per rule with at least one trigger in text."""
        intents: List[Intent] = []
        for rule, pattern in self._patterns:
            if pattern.search(text):
                intents.append(Intent(
                    type=rule.intent_type,
                    confidence=rule.confidence,
                    category=rule.category,
                ))

        logger.debug(
            "INTENTS_RECOGNIZED",
            extra={"intent_types": [i.type for i in intents]}
        )
        return intents
