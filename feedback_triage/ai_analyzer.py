"""AI-powered feedback analyzer using OpenAI."""
import json
import asyncio
from typing import Dict, Any
from openai import AsyncOpenAI
from config import Config, config as default_config
from exceptions import ClassificationUnavailable
from schemas import ClassificationResult

REQUIRED_FIELDS = ["topic", "sentiment", "suggestions"]


class AIAnalyzer:
    """Handles AI-based topic, sentiment and suggestion analysis."""

    def __init__(self, settings: Config = default_config, client: AsyncOpenAI = None):
        """Initialize the AI analyzer.

        Args:
            settings: Configuration holding credentials and timeout
            client: Pre-built OpenAI client, built from settings when omitted
        """
        self.settings = settings
        self.model = settings.AI_MODEL
        self.timeout = settings.AI_TIMEOUT_SECONDS
        if client is None and settings.OPENAI_API_KEY:
            # Single bounded attempt; the fallback covers failures
            client = AsyncOpenAI(
                api_key=settings.OPENAI_API_KEY,
                timeout=self.timeout,
                max_retries=0
            )
        self.client = client

    @property
    def available(self) -> bool:
        """Whether a remote call should be attempted at all."""
        return self.client is not None and self.settings.AI_PROVIDER_ENABLED

    def _build_prompt(self, feedback_text: str) -> str:
        """Build the fixed instruction prompt around the feedback text."""
        return f"""Analyze this student feedback and return ONLY valid JSON with no additional text:

Feedback: "{feedback_text}"

Required JSON format:
{{
  "topic": "brief topic category (max {self.settings.MAX_TOPIC_LENGTH} chars)",
  "sentiment": "positive|negative|neutral",
  "suggestions": "2-3 actionable improvement suggestions (max {self.settings.MAX_SUGGESTIONS_LENGTH} chars)"
}}"""

    async def analyze(self, feedback_text: str) -> ClassificationResult:
        """Analyze feedback using OpenAI API.

        Args:
            feedback_text: The student feedback to analyze

        Returns:
            ClassificationResult with processing_method "ai"

        Raises:
            ClassificationUnavailable: If the provider is not configured, fails,
                times out, or returns something other than the expected JSON
        """
        if not self.client:
            raise ClassificationUnavailable("OpenAI client not configured")

        prompt = self._build_prompt(feedback_text)

        try:
            async with asyncio.timeout(self.timeout):
                response = await self.client.chat.completions.create(
                    model=self.model,
                    messages=[
                        {
                            "role": "system",
                            "content": "You are a student feedback analyzer. Always respond with valid JSON only."
                        },
                        {"role": "user", "content": prompt}
                    ],
                    temperature=0.3,
                    max_tokens=250
                )

            result_text = (response.choices[0].message.content or "").strip()
            result = self._parse_ai_response(result_text)

            return ClassificationResult.model_validate(
                {
                    "topic": result["topic"],
                    "sentiment": result["sentiment"],
                    "suggestions": result["suggestions"],
                    "processing_method": "ai"
                },
                context={"settings": self.settings}
            )

        except asyncio.TimeoutError as e:
            raise ClassificationUnavailable(f"AI provider timeout after {self.timeout}s") from e
        except json.JSONDecodeError as e:
            raise ClassificationUnavailable(f"Failed to parse AI response: {e}") from e
        except Exception as e:
            raise ClassificationUnavailable(f"AI provider error: {str(e)}") from e

    def _parse_ai_response(self, response_text: str) -> Dict[str, Any]:
        """Parse and validate AI response.

        Handles common AI output issues:
        - Markdown code fences around the JSON
        - Extra text around the JSON object
        - Missing, empty or non-string fields (rejected)
        """
        response_text = response_text.strip()
        if response_text.startswith("```"):
            response_text = response_text.replace("```json", "").replace("```", "").strip()

        try:
            result = json.loads(response_text)
        except json.JSONDecodeError:
            # Try to find JSON object in the text
            start = response_text.find("{")
            end = response_text.rfind("}") + 1
            if start != -1 and end > start:
                result = json.loads(response_text[start:end])
            else:
                raise

        if not isinstance(result, dict):
            raise ValueError("AI response is not a JSON object")

        for field in REQUIRED_FIELDS:
            value = result.get(field)
            if not isinstance(value, str) or not value.strip():
                raise ValueError(f"Missing required field: {field}")

        return result
