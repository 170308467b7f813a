"""Pydantic schemas for request/response validation."""
from datetime import date, datetime
from enum import StrEnum
from typing import List, Optional

from pydantic import BaseModel, ConfigDict, Field, ValidationInfo, field_validator, model_validator

from config import Config, config


class Sentiment(StrEnum):
    POSITIVE = "positive"
    NEGATIVE = "negative"
    NEUTRAL = "neutral"


class Severity(StrEnum):
    LOW = "low"
    MEDIUM = "medium"
    HIGH = "high"


class SenderType(StrEnum):
    STUDENT = "student"
    FACULTY = "faculty"


class FeedbackRequest(BaseModel):
    """Request schema for feedback submission.

    Length rules are enforced by the pipeline so that rejections carry a reason.
    """

    model_config = ConfigDict(
        json_schema_extra={
            "example": {
                "message": "The lectures are great but the assignments are confusing.",
                "is_anonymous": False,
                "student_name": "Alice",
                "student_id": "b6a1c1f2-0000-4000-8000-000000000001"
            }
        }
    )

    message: str = Field(..., description="Feedback text, at most 2000 characters once trimmed")
    is_anonymous: bool = Field(True, description="Hide the student's name from faculty")
    student_name: Optional[str] = Field(None, description="Display name, dropped when anonymous")
    student_id: Optional[str] = Field(None, description="Owner of the submission")


def _settings(info: ValidationInfo) -> Config:
    return (info.context or {}).get("settings") or config


class ClassificationResult(BaseModel):
    """Topic, sentiment and suggestions for one feedback text.

    Topic and suggestions are truncated and unknown sentiments become neutral,
    so every instance is a valid classification regardless of its source.
    Limits come from the "settings" validation context, else the process config.
    """

    model_config = ConfigDict(use_enum_values=True)

    topic: str
    sentiment: Sentiment
    suggestions: str
    processing_method: str = "ai"

    @field_validator("topic", mode="before")
    @classmethod
    def truncate_topic(cls, value, info: ValidationInfo):
        if isinstance(value, str):
            return value.strip()[:_settings(info).MAX_TOPIC_LENGTH]
        return value

    @field_validator("suggestions", mode="before")
    @classmethod
    def truncate_suggestions(cls, value, info: ValidationInfo):
        if isinstance(value, str):
            return value.strip()[:_settings(info).MAX_SUGGESTIONS_LENGTH]
        return value

    @field_validator("sentiment", mode="before")
    @classmethod
    def coerce_sentiment(cls, value):
        if isinstance(value, str):
            normalized = value.strip().lower()
            if normalized in {s.value for s in Sentiment}:
                return normalized
        return Sentiment.NEUTRAL


class AlertHit(BaseModel):
    """A keyword match produced by the alert scanner."""

    model_config = ConfigDict(use_enum_values=True)

    alert_type: str
    severity: Severity


class AlertDraft(AlertHit):
    """Alert ready to be stored alongside its feedback."""

    created_at: datetime


class FeedbackDraft(BaseModel):
    """Feedback ready to be stored; id and created_at are assigned by storage."""

    model_config = ConfigDict(use_enum_values=True)

    message: str
    sentiment: Sentiment
    topic: str
    suggestions: str
    is_anonymous: bool
    student_name: Optional[str] = None
    student_id: Optional[str] = None
    processing_method: str = "ai"

    @model_validator(mode="after")
    def drop_name_when_anonymous(self):
        if self.is_anonymous:
            self.student_name = None
        return self


class Submission(BaseModel):
    """Output of the triage pipeline for a single submission."""

    feedback: FeedbackDraft
    alerts: List[AlertDraft] = Field(default_factory=list)
    submitted_at: datetime


class FeedbackRecord(BaseModel):
    """Stored feedback as shown to faculty and students."""

    model_config = ConfigDict(from_attributes=True)

    id: str
    message: str
    sentiment: str
    topic: str
    suggestions: str
    is_anonymous: bool
    student_name: Optional[str] = None
    processing_method: str
    created_at: datetime
    viewed_at: Optional[datetime] = None
    viewed_by: Optional[str] = None


class AlertRecord(BaseModel):
    """Stored alert."""

    model_config = ConfigDict(from_attributes=True)

    id: str
    feedback_id: str
    alert_type: str
    severity: str
    created_at: datetime


class AlertWithFeedback(AlertRecord):
    """Alert listed on the faculty dashboard together with its feedback."""

    feedback: FeedbackRecord


class SubmissionResponse(BaseModel):
    """Response schema for feedback submission."""

    feedback: FeedbackRecord
    alerts: List[AlertRecord]


class ViewRequest(BaseModel):
    faculty_id: str = Field(..., min_length=1)


class MessageRequest(BaseModel):
    """A reply in the conversation attached to a feedback record."""

    sender_id: str = Field(..., min_length=1)
    sender_type: SenderType
    message: str = Field(..., min_length=1, max_length=2000)

    @field_validator("message")
    @classmethod
    def reject_blank(cls, value: str) -> str:
        if not value.strip():
            raise ValueError("Message cannot be blank")
        return value.strip()


class MessageRecord(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: str
    feedback_id: str
    sender_id: str
    sender_type: str
    message: str
    created_at: datetime


class SentimentDistribution(BaseModel):
    positive: int = 0
    negative: int = 0
    neutral: int = 0


class TopicCount(BaseModel):
    topic: str
    count: int


class DailyActivity(BaseModel):
    date: date
    count: int


class DashboardStats(BaseModel):
    """Dashboard metrics recomputed from a batch of feedback."""

    total_feedback: int = 0
    sentiment_distribution: SentimentDistribution = Field(default_factory=SentimentDistribution)
    top_topics: List[TopicCount] = Field(default_factory=list)
    recent_activity: List[DailyActivity] = Field(default_factory=list)


class ExportRow(BaseModel):
    """One row of the feedback export consumed by the CSV formatter."""

    date: str
    student: str
    topic: str
    sentiment: str
    message: str
    suggestions: str
