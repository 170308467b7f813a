"""Sentiment classifier: remote AI analysis with a local fallback."""
import logging

from ai_analyzer import AIAnalyzer
from config import Config, config as default_config
from exceptions import ClassificationUnavailable
from fallback_analyzer import FallbackAnalyzer
from schemas import ClassificationResult

logger = logging.getLogger(__name__)


class SentimentClassifier:
    """Classifies feedback text into topic, sentiment and suggestions.

    classify always completes with a valid result: any remote failure is
    logged and answered by the fallback heuristic.
    """

    def __init__(
        self,
        settings: Config = default_config,
        ai_analyzer: AIAnalyzer = None,
        fallback_analyzer: FallbackAnalyzer = None,
    ):
        self.settings = settings
        self.ai_analyzer = ai_analyzer or AIAnalyzer(settings)
        self.fallback_analyzer = fallback_analyzer or FallbackAnalyzer(settings)

    @property
    def ai_available(self) -> bool:
        return self.ai_analyzer.available

    async def classify(self, feedback_text: str) -> ClassificationResult:
        """Classify feedback text.

        Args:
            feedback_text: Trimmed feedback text

        Returns:
            ClassificationResult from the AI provider, or from the fallback
            heuristic when the provider is not configured or fails
        """
        if self.ai_available:
            try:
                logger.info("Attempting AI analysis")
                result = await self.ai_analyzer.analyze(feedback_text)
                logger.info(f"AI analysis successful: {result.sentiment}/{result.topic}")
                return result
            except ClassificationUnavailable as e:
                logger.warning(f"AI analysis failed: {e}. Using fallback analyzer")
        else:
            logger.info("AI provider not configured, using fallback analyzer")

        result = self.fallback_analyzer.analyze(feedback_text)
        logger.info(f"Fallback analysis: {result.sentiment}/{result.topic}")
        return result
