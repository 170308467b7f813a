"""Rule-based fallback analyzer used when the AI provider is unavailable."""
import logging
from typing import Dict

from config import Config, config as default_config
from schemas import ClassificationResult, Sentiment

logger = logging.getLogger(__name__)


class FallbackAnalyzer:
    """Deterministic keyword heuristic for sentiment and topic.

    Word lists are matched as raw substrings of the lowercased text, and each
    listed word counts at most once no matter how often it appears.
    """

    def __init__(self, settings: Config = default_config):
        """Initialize the fallback analyzer from configuration."""
        self.settings = settings
        self.positive_words = settings.POSITIVE_WORDS
        self.negative_words = settings.NEGATIVE_WORDS
        self.topics = settings.FALLBACK_TOPICS
        self.topic_keywords = settings.TOPIC_KEYWORDS
        self.default_topic = settings.DEFAULT_TOPIC
        self.suggestions = settings.FALLBACK_SUGGESTIONS

    def analyze(self, feedback_text: str) -> ClassificationResult:
        """Analyze feedback without any network call.

        Args:
            feedback_text: The student feedback to analyze

        Returns:
            ClassificationResult with processing_method "fallback"
        """
        text = feedback_text.lower()
        sentiment = self._analyze_sentiment(text)
        topic = self._analyze_topic(text)

        logger.debug(f"Fallback analysis: {sentiment}/{topic}")

        return ClassificationResult.model_validate(
            {
                "topic": topic,
                "sentiment": sentiment,
                "suggestions": self.suggestions[sentiment],
                "processing_method": "fallback"
            },
            context={"settings": self.settings}
        )

    def _analyze_sentiment(self, text: str) -> str:
        """Compare positive and negative word hits.

        Args:
            text: Lowercase text to analyze

        Returns:
            Sentiment: positive, negative, or neutral
        """
        positive_count = sum(1 for word in self.positive_words if word in text)
        negative_count = sum(1 for word in self.negative_words if word in text)

        if positive_count > negative_count:
            return Sentiment.POSITIVE.value
        if negative_count > positive_count:
            return Sentiment.NEGATIVE.value
        return Sentiment.NEUTRAL.value

    def _analyze_topic(self, text: str) -> str:
        """Determine primary topic based on keyword matching.

        Args:
            text: Lowercase text to analyze

        Returns:
            Topic category, the default topic when nothing matches
        """
        topic_scores: Dict[str, int] = {}

        for topic in self.topics:
            keywords = self.topic_keywords.get(topic, [])
            score = sum(1 for keyword in keywords if keyword in text)
            if score > 0:
                topic_scores[topic] = score

        if not topic_scores:
            return self.default_topic

        # max keeps the first topic on ties
        return max(topic_scores.items(), key=lambda x: x[1])[0]
