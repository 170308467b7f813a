"""Database connection and operations."""
from datetime import datetime, UTC
from typing import List, Optional, Tuple

from sqlalchemy import select, update
from sqlalchemy.ext.asyncio import create_async_engine, AsyncSession, async_sessionmaker
from sqlalchemy.orm import selectinload
from sqlalchemy.pool import StaticPool
from config import config
from models import Base, Feedback, Alert, Message
from schemas import Submission


# Create async engine
# StaticPool for SQLite to avoid threading issues
engine = create_async_engine(
    config.DATABASE_URL,
    connect_args={"check_same_thread": False},
    poolclass=StaticPool,
    echo=False
)

# Create session factory
AsyncSessionLocal = async_sessionmaker(
    engine,
    class_=AsyncSession,
    expire_on_commit=False
)


async def init_db():
    """Initialize database tables."""
    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)


async def get_db():
    """Dependency to get database session."""
    async with AsyncSessionLocal() as session:
        yield session


def get_db_session():
    """Get database session as context manager (for CLI usage).

    Returns:
        Async context manager for database session
    """
    return AsyncSessionLocal()


async def save_submission(
    db: AsyncSession,
    submission: Submission
) -> Tuple[Feedback, List[Alert]]:
    """Save a triaged submission and its alerts in one transaction.

    Args:
        db: Database session
        submission: Pipeline output

    Returns:
        The saved Feedback and its saved Alerts
    """
    draft = submission.feedback
    feedback = Feedback(
        message=draft.message,
        sentiment=draft.sentiment,
        topic=draft.topic,
        suggestions=draft.suggestions,
        is_anonymous=draft.is_anonymous,
        student_name=None if draft.is_anonymous else draft.student_name,
        student_id=draft.student_id,
        processing_method=draft.processing_method,
        created_at=submission.submitted_at
    )
    db.add(feedback)
    # Flush to get the storage-assigned id for the alerts
    await db.flush()

    alerts = [
        Alert(
            feedback_id=feedback.id,
            alert_type=alert.alert_type,
            severity=alert.severity,
            created_at=alert.created_at
        )
        for alert in submission.alerts
    ]
    db.add_all(alerts)

    await db.commit()
    await db.refresh(feedback)
    for alert in alerts:
        await db.refresh(alert)

    return feedback, alerts


async def get_feedback(db: AsyncSession, feedback_id: str) -> Optional[Feedback]:
    """Fetch one feedback record by id."""
    return await db.get(Feedback, feedback_id)


async def list_feedback(db: AsyncSession, limit: int = None) -> List[Feedback]:
    """Latest feedback first."""
    limit = limit or config.FEEDBACK_PAGE_SIZE
    result = await db.execute(
        select(Feedback).order_by(Feedback.created_at.desc()).limit(limit)
    )
    return list(result.scalars().all())


async def list_student_feedback(db: AsyncSession, student_id: str) -> List[Feedback]:
    """Feedback submitted by one student, latest first."""
    result = await db.execute(
        select(Feedback)
        .where(Feedback.student_id == student_id)
        .order_by(Feedback.created_at.desc())
    )
    return list(result.scalars().all())


async def list_feedback_for_stats(db: AsyncSession) -> List[Feedback]:
    """All feedback in submission order, as input for aggregation."""
    result = await db.execute(
        select(Feedback).order_by(Feedback.created_at.asc())
    )
    return list(result.scalars().all())


async def mark_viewed(db: AsyncSession, feedback: Feedback, faculty_id: str) -> bool:
    """Record the first faculty view of a feedback record.

    Returns:
        True if the record was marked now, False if it was already viewed
    """
    if feedback.viewed_at is not None:
        return False

    # Conditional write so concurrent reviewers cannot overwrite the first view
    result = await db.execute(
        update(Feedback)
        .where(Feedback.id == feedback.id, Feedback.viewed_at.is_(None))
        .values(viewed_at=datetime.now(UTC), viewed_by=faculty_id)
    )
    await db.commit()
    await db.refresh(feedback)
    return result.rowcount == 1


async def add_message(
    db: AsyncSession,
    feedback_id: str,
    sender_id: str,
    sender_type: str,
    text: str
) -> Message:
    """Append a message to a feedback conversation."""
    message = Message(
        feedback_id=feedback_id,
        sender_id=sender_id,
        sender_type=sender_type,
        message=text.strip()
    )
    db.add(message)
    await db.commit()
    await db.refresh(message)
    return message


async def list_messages(db: AsyncSession, feedback_id: str) -> List[Message]:
    """Conversation for one feedback record, oldest first."""
    result = await db.execute(
        select(Message)
        .where(Message.feedback_id == feedback_id)
        .order_by(Message.created_at.asc())
    )
    return list(result.scalars().all())


async def list_alerts(db: AsyncSession) -> List[Alert]:
    """All alerts with their feedback loaded, latest first."""
    result = await db.execute(
        select(Alert)
        .options(selectinload(Alert.feedback))
        .order_by(Alert.created_at.desc())
    )
    return list(result.scalars().all())
