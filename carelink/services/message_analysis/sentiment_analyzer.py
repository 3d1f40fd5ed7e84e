"""Lexicon-vote sentiment analyzer.

Counts how many positive and negative lexicon words occur in the text
(substring containment, so "progress" also hits "progressing") and lets
the larger side win. Ties, including no hits at all, are neutral.
"""
from typing import Optional, Sequence, Tuple

from carelink.shared.models import Sentiment
from .config import NEGATIVE_WORDS, POSITIVE_WORDS


class LexiconSentimentAnalyzer:
    """Deterministic positive/negative/neutral classifier."""

    def __init__(
        self,
        positive_words: Optional[Sequence[str]] = None,
        negative_words: Optional[Sequence[str]] = None,
    ):
        self.positive_words: Tuple[str, ...] = tuple(
            positive_words if positive_words is not None else POSITIVE_WORDS
        )
        self.negative_words: Tuple[str, ...] = tuple(
            negative_words if negative_words is not None else NEGATIVE_WORDS
        )

    def analyze(self, text: str) -> Sentiment:
        """Classify lower-cased text."""
        positive_count, negative_count = self.vote(text)

        if positive_count > negative_count:
            return Sentiment.POSITIVE
        if negative_count > positive_count:
            return Sentiment.NEGATIVE
        return Sentiment.NEUTRAL

    def vote(self, text: str) -> Tuple[int, int]:
        """Return (positive, negative) lexicon hit counts."""
        positive_count = sum(1 for word in self.positive_words if word in text)
        negative_count = sum(1 for word in self.negative_words if word in text)
        return positive_count, negative_count
