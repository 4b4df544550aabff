"""
Description:
Request and response bodies of the interview routes.

Dependencies:
- pydantic: For data validation and settings management.

Author: @kcaparas1630
"""
from datetime import datetime
from enum import Enum
from typing import List, Optional
from pydantic import BaseModel, Field
from app.schemas.interview.interview_feedback import InterviewFeedback
from app.schemas.interview.interview_session import (
    EndedReason,
    GeneratedQuestion,
    InterviewDuration,
    InterviewSession,
    InterviewStatus,
)


class StartInterviewRequest(BaseModel):
    duration: InterviewDuration = 30


class SubmitAnswerRequest(BaseModel):
    answer: str = Field(default="", max_length=20000)


class EndInterviewRequest(BaseModel):
    reason: EndedReason = EndedReason.COMPLETED_BY_USER


class ProctoringEventKind(str, Enum):
    TAB_SWITCH = "tabSwitch"
    FACE_NOT_DETECTED = "faceNotDetected"
    TASK_INACTIVITY = "task_inactivity"
    DISTRACTION = "distraction"


class ProctoringEventRequest(BaseModel):
    kind: ProctoringEventKind


class ControllerState(str, Enum):
    LOADING = "loading"
    ACTIVE = "active"
    SUBMITTING = "submitting"
    FINALIZING = "finalizing"
    ENDED_SUCCESS = "ended_success"
    ENDED_ERROR = "ended_error"

    @property
    def is_ended(self) -> bool:
        return self in (ControllerState.ENDED_SUCCESS, ControllerState.ENDED_ERROR)


class Notice(BaseModel):
    """A user-facing notification produced by the session controller."""
    title: str
    description: str
    variant: str = Field(default="default", description="'default' or 'destructive'")


class ControllerView(BaseModel):
    """Snapshot of the session controller returned by the interview routes."""
    interview_id: str = Field(..., alias="interviewId")
    state: ControllerState
    status: InterviewStatus
    current_index: int = Field(..., alias="currentIndex")
    total_questions: int = Field(..., alias="totalQuestions")
    current_question: Optional[GeneratedQuestion] = Field(default=None, alias="currentQuestion")
    redirect_to: Optional[str] = Field(default=None, alias="redirectTo")
    notices: List[Notice] = Field(default_factory=list)

    class Config:
        populate_by_name = True


class InterviewSummary(BaseModel):
    """One row of the user's interview history."""
    id: str
    duration: int
    status: InterviewStatus
    created_at: datetime = Field(..., alias="createdAt")
    updated_at: Optional[datetime] = Field(default=None, alias="updatedAt")
    ended_reason: Optional[EndedReason] = Field(default=None, alias="endedReason")
    feedback_state: str = Field(..., alias="feedbackState")
    overall_score: Optional[float] = Field(default=None, alias="overallScore")
    question_count: int = Field(..., alias="questionCount")

    class Config:
        populate_by_name = True

    @classmethod
    def from_session(cls, session: InterviewSession) -> "InterviewSummary":
        return cls(
            id=session.id,
            duration=session.duration,
            status=session.status,
            created_at=session.created_at,
            updated_at=session.updated_at,
            ended_reason=session.ended_reason,
            feedback_state=session.feedback_state,
            overall_score=session.feedback.overall_score if session.feedback else None,
            question_count=len(session.questions),
        )


class FeedbackView(BaseModel):
    interview_id: str = Field(..., alias="interviewId")
    state: str = Field(..., description="'ready', 'pending' or 'unavailable'")
    feedback: Optional[InterviewFeedback] = None

    class Config:
        populate_by_name = True
