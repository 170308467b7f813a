"""Exceptions raised by the triage pipeline and the HTTP layer."""
from enum import StrEnum
from fastapi import HTTPException, status


class ValidationReason(StrEnum):
    """Why a submission was rejected."""

    EMPTY_MESSAGE = "empty_message"
    MESSAGE_TOO_LONG = "message_too_long"


class ValidationError(Exception):
    """Raised when submitted feedback fails validation.

    This is the only error that crosses the pipeline boundary.
    """

    def __init__(self, reason: ValidationReason, message: str):
        super().__init__(message)
        self.reason = reason
        self.message = message


class ClassificationUnavailable(Exception):
    """Raised by the remote analyzer on any call or parse failure.

    Always recovered by the classifier through the fallback heuristic.
    """


class FeedbackNotFoundException(HTTPException):
    """Raised when feedback is not found"""
    def __init__(self, feedback_id: str):
        super().__init__(
            status_code=status.HTTP_404_NOT_FOUND,
            detail=f"Feedback with id {feedback_id} not found"
        )


class UnauthorizedFeedbackAccessException(HTTPException):
    """Raised when a student tries to access feedback they don't own"""
    def __init__(self):
        super().__init__(
            status_code=status.HTTP_403_FORBIDDEN,
            detail="You are not authorized to access this feedback"
        )
