"""Database models for feedback storage."""
import uuid
from datetime import datetime, UTC
from sqlalchemy import Column, String, DateTime, Text, Boolean, ForeignKey
from sqlalchemy.orm import declarative_base, relationship

Base = declarative_base()


def _new_id() -> str:
    return str(uuid.uuid4())


def _now() -> datetime:
    return datetime.now(UTC)


class Feedback(Base):
    """Feedback database model."""

    __tablename__ = "feedback"

    id = Column(String(36), primary_key=True, default=_new_id)
    message = Column(Text, nullable=False)
    sentiment = Column(String(20), nullable=False)  # positive, negative, neutral
    topic = Column(String(50), nullable=False)
    suggestions = Column(String(300), nullable=False)
    is_anonymous = Column(Boolean, nullable=False, default=True)
    student_name = Column(String(100), nullable=True)
    student_id = Column(String(36), nullable=True, index=True)
    processing_method = Column(String(20), nullable=False)  # ai or fallback
    created_at = Column(DateTime, nullable=False, default=_now, index=True)
    viewed_at = Column(DateTime, nullable=True)
    viewed_by = Column(String(36), nullable=True)

    alerts = relationship("Alert", back_populates="feedback", cascade="all, delete-orphan")
    messages = relationship("Message", back_populates="feedback", cascade="all, delete-orphan")

    def to_dict(self):
        """Convert model to dictionary."""
        return {
            "id": self.id,
            "message": self.message,
            "sentiment": self.sentiment,
            "topic": self.topic,
            "suggestions": self.suggestions,
            "is_anonymous": self.is_anonymous,
            "student_name": self.student_name,
            "processing_method": self.processing_method,
            "created_at": self.created_at.isoformat() if self.created_at else None,
            "viewed_at": self.viewed_at.isoformat() if self.viewed_at else None,
            "viewed_by": self.viewed_by
        }


class Alert(Base):
    """Safety alert raised by the keyword scanner."""

    __tablename__ = "alerts"

    id = Column(String(36), primary_key=True, default=_new_id)
    feedback_id = Column(String(36), ForeignKey("feedback.id"), nullable=False, index=True)
    alert_type = Column(String(50), nullable=False)
    severity = Column(String(10), nullable=False)  # low, medium, high
    created_at = Column(DateTime, nullable=False, default=_now)

    feedback = relationship("Feedback", back_populates="alerts")

    def to_dict(self):
        """Convert model to dictionary."""
        return {
            "id": self.id,
            "feedback_id": self.feedback_id,
            "alert_type": self.alert_type,
            "severity": self.severity,
            "created_at": self.created_at.isoformat() if self.created_at else None
        }


class Message(Base):
    """Message in the conversation between a student and faculty."""

    __tablename__ = "messages"

    id = Column(String(36), primary_key=True, default=_new_id)
    feedback_id = Column(String(36), ForeignKey("feedback.id"), nullable=False, index=True)
    sender_id = Column(String(36), nullable=False)
    sender_type = Column(String(10), nullable=False)  # student or faculty
    message = Column(Text, nullable=False)
    created_at = Column(DateTime, nullable=False, default=_now)

    feedback = relationship("Feedback", back_populates="messages")

    def to_dict(self):
        """Convert model to dictionary."""
        return {
            "id": self.id,
            "feedback_id": self.feedback_id,
            "sender_id": self.sender_id,
            "sender_type": self.sender_type,
            "message": self.message,
            "created_at": self.created_at.isoformat() if self.created_at else None
        }
