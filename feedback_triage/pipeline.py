"""Feedback triage pipeline: validate, classify, scan for alerts."""
import logging
from datetime import datetime, UTC
from typing import Callable, Optional

import alert_scanner
from classifier import SentimentClassifier
from config import Config
from exceptions import ValidationError, ValidationReason
from schemas import AlertDraft, FeedbackDraft, Submission

logger = logging.getLogger(__name__)


class FeedbackPipeline:
    """Turns a raw submission into drafts for storage.

    Built once per process with explicit configuration and shared across
    requests. It never writes to storage and keeps no state between calls.
    """

    def __init__(
        self,
        settings: Config,
        classifier: SentimentClassifier = None,
        clock: Callable[[], datetime] = None,
    ):
        self.settings = settings
        self.classifier = classifier or SentimentClassifier(settings)
        self.clock = clock or (lambda: datetime.now(UTC))

    def validate(self, raw_text: str) -> str:
        """Return the trimmed message or raise ValidationError."""
        text = (raw_text or "").strip()
        if not text:
            raise ValidationError(ValidationReason.EMPTY_MESSAGE, "Feedback message cannot be empty")
        if len(text) > self.settings.MAX_MESSAGE_LENGTH:
            raise ValidationError(
                ValidationReason.MESSAGE_TOO_LONG,
                f"Feedback message exceeds {self.settings.MAX_MESSAGE_LENGTH} characters"
            )
        return text

    async def submit(
        self,
        raw_text: str,
        is_anonymous: bool,
        student_name: Optional[str] = None,
        student_id: Optional[str] = None,
    ) -> Submission:
        """Run the triage pipeline on one submission.

        Args:
            raw_text: Feedback as typed by the student
            is_anonymous: Whether the student's name must be withheld
            student_name: Display name, ignored when anonymous
            student_id: Owner of the submission

        Returns:
            Submission holding the feedback draft and its alert drafts

        Raises:
            ValidationError: If the message is empty or too long
        """
        text = self.validate(raw_text)
        submitted_at = self.clock()

        classification = await self.classifier.classify(text)
        hits = alert_scanner.scan(
            text,
            self.settings.ALERT_KEYWORDS,
            self.settings.HIGH_SEVERITY_KEYWORDS
        )

        name = None
        if not is_anonymous and student_name:
            name = student_name.strip() or None

        feedback = FeedbackDraft(
            message=text,
            sentiment=classification.sentiment,
            topic=classification.topic,
            suggestions=classification.suggestions,
            is_anonymous=is_anonymous,
            student_name=name,
            student_id=student_id,
            processing_method=classification.processing_method
        )
        alerts = [
            AlertDraft(alert_type=hit.alert_type, severity=hit.severity, created_at=submitted_at)
            for hit in hits
        ]

        if alerts:
            logger.warning(
                f"Feedback raised {len(alerts)} alert(s): "
                f"{', '.join(alert.alert_type for alert in alerts)}"
            )

        return Submission(feedback=feedback, alerts=alerts, submitted_at=submitted_at)
