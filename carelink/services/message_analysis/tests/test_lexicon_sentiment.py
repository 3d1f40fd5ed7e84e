"""Tests for the lexicon-vote sentiment analyzer."""
import pytest

from carelink.shared.models import Sentiment
from carelink.services.message_analysis.sentiment_analyzer import LexiconSentimentAnalyzer


@pytest.fixture
def analyzer():
    return LexiconSentimentAnalyzer()


class TestLexiconSentimentAnalyzer:

    def test_positive(self, analyzer):
        text = "everything went well today, great progress with communication"

        assert analyzer.vote(text) == (2, 0)
        assert analyzer.analyze(text) == Sentiment.POSITIVE

    def test_negative(self, analyzer):
        assert analyzer.analyze("this is a terrible problem") == Sentiment.NEGATIVE

    def test_tie_is_neutral(self, analyzer):
        assert analyzer.analyze("good morning but a bad afternoon") == Sentiment.NEUTRAL

    def test_no_hits_is_neutral(self, analyzer):
        assert analyzer.analyze("") == Sentiment.NEUTRAL
        assert analyzer.analyze("arrived at nine") == Sentiment.NEUTRAL

    def test_substring_containment(self, analyzer):
        """Lexicon words count when contained in longer words."""
        assert analyzer.analyze("she is progressing") == Sentiment.POSITIVE
        assert analyzer.analyze("she earned a badge") == Sentiment.NEGATIVE

    def test_distinct_words_counted_once(self, analyzer):
        """Repeating a word does not outvote two different words."""
        text = "good good good, but upset and angry"

        assert analyzer.vote(text) == (1, 2)
        assert analyzer.analyze(text) == Sentiment.NEGATIVE

    def test_custom_lexicons(self):
        analyzer = LexiconSentimentAnalyzer(positive_words=["yay"], negative_words=["boo"])

        assert analyzer.analyze("yay") == Sentiment.POSITIVE
        assert analyzer.analyze("great") == Sentiment.NEUTRAL

    def test_empty_lexicons_are_kept(self):
        """An explicitly empty lexicon is not replaced by the defaults."""
        analyzer = LexiconSentimentAnalyzer(positive_words=[], negative_words=[])

        assert analyzer.positive_words == ()
        assert analyzer.vote("great progress, terrible problem") == (0, 0)
        assert analyzer.analyze("great progress") == Sentiment.NEUTRAL

    def test_empty_negative_lexicon_only(self):
        analyzer = LexiconSentimentAnalyzer(negative_words=[])

        assert analyzer.analyze("a terrible problem but good") == Sentiment.POSITIVE
