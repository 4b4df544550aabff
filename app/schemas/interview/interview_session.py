"""
Interview Session Schemas

This module defines the InterviewSession aggregate: the single document that holds
one interview attempt's configuration, generated questions, per-question answers,
transcript, status and (once produced) feedback.

Documents are stored with camelCase keys. Models accept both camelCase and
snake_case on input and should be dumped with ``by_alias=True``.

Dependencies:
- pydantic: For data validation and serialization
- app.schemas.interview.interview_feedback: For the feedback model

Author: @kcaparas1630
"""

import re
from datetime import datetime, timezone
from enum import Enum
from typing import List, Literal, Optional
from pydantic import BaseModel, Field
from app.schemas.interview.interview_feedback import InterviewFeedback


def utc_now() -> datetime:
    return datetime.now(timezone.utc)


class InterviewStatus(str, Enum):
    """Lifecycle status of an interview session."""
    PENDING = "pending"
    QUESTIONS_GENERATED = "questions_generated"
    STARTED = "started"
    COMPLETED = "completed"
    CANCELLED = "cancelled"

    @property
    def is_terminal(self) -> bool:
        return self in (InterviewStatus.COMPLETED, InterviewStatus.CANCELLED)


class QuestionStage(str, Enum):
    ORAL = "oral"
    TECHNICAL_WRITTEN = "technical_written"


class QuestionType(str, Enum):
    BEHAVIORAL = "behavioral"
    TECHNICAL = "technical"
    CODING = "coding"
    CONVERSATIONAL = "conversational"
    RESUME_BASED = "resume_based"


class EndedReason(str, Enum):
    """Why an interview session was finalized."""
    COMPLETED_BY_USER = "completed_by_user"
    TIME_UP = "time_up"
    PROLONGED_FACE_ABSENCE = "prolonged_face_absence"
    ALL_QUESTIONS_ANSWERED = "all_questions_answered"
    TAB_SWITCH_LIMIT = "tab_switch_limit"
    FACE_NOT_DETECTED_LIMIT = "face_not_detected_limit"


InterviewDuration = Literal[15, 30, 45]


class ProctoringIssues(BaseModel):
    """Counters of proctoring warnings raised during a session."""
    tab_switch: int = Field(default=0, ge=0, alias="tabSwitch")
    face_not_detected: int = Field(default=0, ge=0, alias="faceNotDetected")
    task_inactivity: int = Field(default=0, ge=0)
    distraction: int = Field(default=0, ge=0)

    class Config:
        populate_by_name = True


_QUESTION_NUMBER = re.compile(r"(\d+)$")


class GeneratedQuestion(BaseModel):
    """One generated interview question. Only ``answer`` changes after creation."""
    id: str = Field(..., description="Question identifier of the form q<N>")
    text: str = Field(..., min_length=1)
    stage: QuestionStage
    type: QuestionType
    answer: Optional[str] = Field(default=None, description="None until the question is answered")

    @property
    def number(self) -> int:
        """Numeric suffix of the id (q7 -> 7), 0 when the id carries none."""
        match = _QUESTION_NUMBER.search(self.id or "")
        return int(match.group(1)) if match else 0

    @property
    def is_answered(self) -> bool:
        return self.answer is not None


class InterviewSession(BaseModel):
    """The interview session aggregate stored at users/{uid}/interviews/{id}."""
    id: str
    user_id: str = Field(..., alias="userId")
    duration: InterviewDuration
    status: InterviewStatus = InterviewStatus.PENDING
    questions: List[GeneratedQuestion] = Field(default_factory=list)
    transcript: str = ""
    feedback: Optional[InterviewFeedback] = None
    created_at: datetime = Field(default_factory=utc_now, alias="createdAt")
    updated_at: Optional[datetime] = Field(default=None, alias="updatedAt")
    ended_reason: Optional[EndedReason] = Field(default=None, alias="endedReason")
    proctoring_issues: ProctoringIssues = Field(default_factory=ProctoringIssues, alias="proctoringIssues")

    class Config:
        populate_by_name = True

    @property
    def feedback_state(self) -> str:
        """``ready`` when feedback exists, ``pending``/``unavailable`` otherwise."""
        if self.feedback is not None:
            return "ready"
        if self.status == InterviewStatus.COMPLETED:
            return "unavailable"
        return "pending"

    def to_document(self) -> dict:
        return self.model_dump(mode="json", by_alias=True)
