"""Main FastAPI application for student feedback triage."""
import logging
from contextlib import asynccontextmanager
from typing import List, Optional
from fastapi import FastAPI, Depends, HTTPException, Header, Query, status
from fastapi.responses import JSONResponse
from sqlalchemy.ext.asyncio import AsyncSession

import database
import stats
from alerting import AlertService
from config import config
from events import ChangeEvent, ChangeFeed
from exceptions import (
    FeedbackNotFoundException,
    UnauthorizedFeedbackAccessException,
    ValidationError,
)
from pipeline import FeedbackPipeline
from schemas import (
    AlertRecord,
    AlertWithFeedback,
    DashboardStats,
    ExportRow,
    FeedbackRecord,
    FeedbackRequest,
    MessageRecord,
    MessageRequest,
    SenderType,
    SubmissionResponse,
    ViewRequest,
)

# Configure logging
logging.basicConfig(
    level=logging.INFO,
    format='%(asctime)s - %(name)s - %(levelname)s - %(message)s'
)
logger = logging.getLogger(__name__)

# Initialize services, once per process
pipeline = FeedbackPipeline(config)
change_feed = ChangeFeed()
alert_service = AlertService(config)
change_feed.subscribe("alerts", alert_service.handle_alerts_created)


@asynccontextmanager
async def lifespan(app: FastAPI):
    """Startup and shutdown events."""
    logger.info("Initializing database...")
    await database.init_db()
    logger.info("Application started successfully")
    yield
    logger.info("Application shutting down")


app = FastAPI(
    title="Student Feedback Triage API",
    description="Student feedback classification, safety alerts and faculty analytics",
    version="1.0.0",
    lifespan=lifespan
)


async def verify_api_key(x_api_key: str = Header(...)) -> None:
    """Verify API key authentication.

    Stubbed authentication; user accounts and sessions live outside this service.
    """
    if x_api_key != config.API_KEY:
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="Invalid API key"
        )


def get_pipeline() -> FeedbackPipeline:
    return pipeline


def get_change_feed() -> ChangeFeed:
    return change_feed


async def load_feedback(feedback_id: str, db: AsyncSession):
    feedback = await database.get_feedback(db, feedback_id)
    if feedback is None:
        raise FeedbackNotFoundException(feedback_id)
    return feedback


@app.post("/feedback", response_model=SubmissionResponse, status_code=status.HTTP_201_CREATED)
async def submit_feedback(
    request: FeedbackRequest,
    db: AsyncSession = Depends(database.get_db),
    triage: FeedbackPipeline = Depends(get_pipeline),
    feed: ChangeFeed = Depends(get_change_feed),
    _: None = Depends(verify_api_key)
):
    """Triage and store one feedback submission.

    This endpoint:
    1. Validates the message (empty or too long is rejected with a reason)
    2. Classifies it, falling back to the local heuristic if the AI fails
    3. Scans it for safety alerts
    4. Stores the feedback and its alerts
    5. Publishes change events, which trigger alert notifications
    """
    try:
        submission = await triage.submit(
            request.message,
            request.is_anonymous,
            request.student_name,
            request.student_id
        )
    except ValidationError as e:
        logger.info(f"Rejected feedback submission: {e.reason}")
        return JSONResponse(
            status_code=422,
            content={"reason": str(e.reason), "detail": e.message}
        )

    feedback, alerts = await database.save_submission(db, submission)
    logger.info(f"Stored feedback {feedback.id} with {len(alerts)} alert(s)")

    await feed.publish(ChangeEvent(table="feedback", action="insert", records=[feedback.to_dict()]))
    if alerts:
        await feed.publish(ChangeEvent(
            table="alerts",
            action="insert",
            records=[{**alert.to_dict(), "feedback": feedback.to_dict()} for alert in alerts]
        ))

    return SubmissionResponse(
        feedback=FeedbackRecord.model_validate(feedback),
        alerts=[AlertRecord.model_validate(alert) for alert in alerts]
    )


@app.get("/feedback", response_model=List[FeedbackRecord])
async def list_feedback(
    limit: Optional[int] = Query(None, ge=1, le=500),
    db: AsyncSession = Depends(database.get_db),
    _: None = Depends(verify_api_key)
):
    """Latest feedback for the faculty dashboard."""
    return await database.list_feedback(db, limit)


@app.get("/feedback/export", response_model=List[ExportRow])
async def export_feedback(
    db: AsyncSession = Depends(database.get_db),
    _: None = Depends(verify_api_key)
):
    """Rows for the CSV export, latest first."""
    return stats.build_export_rows(await database.list_feedback(db))


@app.get("/students/{student_id}/feedback", response_model=List[FeedbackRecord])
async def list_student_feedback(
    student_id: str,
    db: AsyncSession = Depends(database.get_db),
    _: None = Depends(verify_api_key)
):
    """Feedback submitted by one student."""
    return await database.list_student_feedback(db, student_id)


@app.get("/feedback/{feedback_id}", response_model=FeedbackRecord)
async def get_feedback(
    feedback_id: str,
    student_id: Optional[str] = None,
    db: AsyncSession = Depends(database.get_db),
    _: None = Depends(verify_api_key)
):
    """One feedback record.

    When student_id is given, the record must belong to that student.
    """
    feedback = await load_feedback(feedback_id, db)
    if student_id is not None and feedback.student_id != student_id:
        raise UnauthorizedFeedbackAccessException()
    return feedback


@app.post("/feedback/{feedback_id}/view", response_model=FeedbackRecord)
async def mark_feedback_viewed(
    feedback_id: str,
    request: ViewRequest,
    db: AsyncSession = Depends(database.get_db),
    feed: ChangeFeed = Depends(get_change_feed),
    _: None = Depends(verify_api_key)
):
    """Mark feedback as viewed by faculty. Repeated calls keep the first view."""
    feedback = await load_feedback(feedback_id, db)
    if await database.mark_viewed(db, feedback, request.faculty_id):
        await feed.publish(ChangeEvent(table="feedback", action="update", records=[feedback.to_dict()]))
    return feedback


@app.get("/feedback/{feedback_id}/messages", response_model=List[MessageRecord])
async def list_messages(
    feedback_id: str,
    db: AsyncSession = Depends(database.get_db),
    _: None = Depends(verify_api_key)
):
    """Conversation about one feedback record, oldest first."""
    await load_feedback(feedback_id, db)
    return await database.list_messages(db, feedback_id)


@app.post(
    "/feedback/{feedback_id}/messages",
    response_model=MessageRecord,
    status_code=status.HTTP_201_CREATED
)
async def post_message(
    feedback_id: str,
    request: MessageRequest,
    db: AsyncSession = Depends(database.get_db),
    feed: ChangeFeed = Depends(get_change_feed),
    _: None = Depends(verify_api_key)
):
    """Add a message to the conversation.

    A faculty reply also marks the feedback as viewed.
    """
    feedback = await load_feedback(feedback_id, db)
    message = await database.add_message(
        db, feedback_id, request.sender_id, request.sender_type.value, request.message
    )
    await feed.publish(ChangeEvent(table="messages", action="insert", records=[message.to_dict()]))

    if request.sender_type == SenderType.FACULTY:
        if await database.mark_viewed(db, feedback, request.sender_id):
            await feed.publish(ChangeEvent(table="feedback", action="update", records=[feedback.to_dict()]))

    return message


@app.get("/alerts", response_model=List[AlertWithFeedback])
async def list_alerts(
    db: AsyncSession = Depends(database.get_db),
    _: None = Depends(verify_api_key)
):
    """Safety alerts with their feedback, latest first."""
    return await database.list_alerts(db)


@app.get("/dashboard/stats", response_model=DashboardStats)
async def dashboard_stats(
    db: AsyncSession = Depends(database.get_db),
    _: None = Depends(verify_api_key)
):
    """Dashboard metrics recomputed from all stored feedback."""
    return stats.aggregate(await database.list_feedback_for_stats(db))


@app.get("/health")
async def health_check(triage: FeedbackPipeline = Depends(get_pipeline)):
    """Health check endpoint.

    Returns system status including AI availability.
    """
    ai_status = "healthy" if triage.classifier.ai_available else "degraded"

    return {
        "status": "healthy",
        "ai_provider": ai_status
    }


@app.get("/")
async def root():
    """Root endpoint with API information."""
    return {
        "service": "Student Feedback Triage API",
        "version": "1.0.0",
        "endpoints": {
            "submit": "POST /feedback",
            "list": "GET /feedback",
            "export": "GET /feedback/export",
            "student": "GET /students/{student_id}/feedback",
            "detail": "GET /feedback/{id}",
            "view": "POST /feedback/{id}/view",
            "messages": "GET|POST /feedback/{id}/messages",
            "alerts": "GET /alerts",
            "stats": "GET /dashboard/stats",
            "health": "GET /health"
        }
    }


@app.exception_handler(Exception)
async def global_exception_handler(request, exc):
    """Global exception handler for unexpected errors."""
    logger.error(f"Unhandled exception: {exc}", exc_info=True)
    return JSONResponse(
        status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
        content={"detail": "Internal server error"}
    )
