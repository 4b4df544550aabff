"""Interview Repository Module

This module provides persistence operations for interview session documents at
``users/{uid}/interviews/{interviewId}``. Every write refreshes ``updatedAt``.

Status only moves forward through this repository: progress writes never touch
``status``, and completing or cancelling a session that is already completed or
cancelled is refused.

Dependencies:
- loguru: For logging operations.
- app.database: For the document store and its change feed.
- app.schemas.interview: For the aggregate and feedback models.
- app.errors.exceptions: For custom exception handling.

Author: @kcaparas1630
"""

import uuid
from typing import Callable, List, Optional
from loguru import logger
from app.database import ChangeListener, DocumentStore
from app.schemas.interview.interview_feedback import InterviewFeedback
from app.schemas.interview.interview_session import (
    EndedReason,
    GeneratedQuestion,
    InterviewSession,
    InterviewStatus,
    ProctoringIssues,
)
from app.services.repositories.user_repository import utc_timestamp
from app.errors.exceptions import InterviewEnded, InterviewNotFound


def interviews_collection(uid: str) -> str:
    return f"users/{uid}/interviews"


def interview_path(uid: str, interview_id: str) -> str:
    return f"{interviews_collection(uid)}/{interview_id}"


def dump_questions(questions: List[GeneratedQuestion]) -> list:
    return [question.model_dump(mode="json", by_alias=True) for question in questions]


class InterviewRepository:
    """Reads and writes interview session documents for one user."""

    def __init__(self, store: DocumentStore, uid: str):
        self.store = store
        self.uid = uid

    def path(self, interview_id: str) -> str:
        return interview_path(self.uid, interview_id)

    async def create(self, duration: int) -> InterviewSession:
        """Create a pending session with no questions yet."""
        session = InterviewSession(
            id=uuid.uuid4().hex,
            user_id=self.uid,
            duration=duration,
            status=InterviewStatus.PENDING,
        )
        await self.store.set(self.path(session.id), session.to_document())
        logger.info(f"Created interview {session.id} for user {self.uid}")
        return session

    async def get(self, interview_id: str) -> Optional[InterviewSession]:
        data = await self.store.get(self.path(interview_id))
        if data is None:
            return None
        return InterviewSession.model_validate(data)

    async def require(self, interview_id: str) -> InterviewSession:
        session = await self.get(interview_id)
        if session is None:
            raise InterviewNotFound(interview_id)
        return session

    async def list_for_user(self) -> List[InterviewSession]:
        """All of the user's interviews, newest first."""
        documents = await self.store.list_collection(interviews_collection(self.uid))
        sessions = [InterviewSession.model_validate(data) for data in documents]
        return sorted(sessions, key=lambda session: session.created_at, reverse=True)

    async def store_questions(self, interview_id: str, questions: List[GeneratedQuestion]) -> InterviewSession:
        data = await self.store.update(self.path(interview_id), {
            "questions": dump_questions(questions),
            "status": InterviewStatus.QUESTIONS_GENERATED.value,
            "updatedAt": utc_timestamp(),
        })
        return InterviewSession.model_validate(data)

    async def mark_started(self, interview_id: str) -> None:
        await self.store.update(self.path(interview_id), {
            "status": InterviewStatus.STARTED.value,
            "updatedAt": utc_timestamp(),
        })

    async def save_progress(self, interview_id: str, questions: List[GeneratedQuestion], transcript: str) -> None:
        """Persist the answered questions and transcript of an in-progress session."""
        await self.store.update(self.path(interview_id), {
            "questions": dump_questions(questions),
            "transcript": transcript,
            "updatedAt": utc_timestamp(),
        })

    async def mark_completed(
        self,
        interview_id: str,
        questions: List[GeneratedQuestion],
        transcript: str,
        ended_reason: EndedReason,
        proctoring_issues: ProctoringIssues,
    ) -> None:
        await self.store.update(self.path(interview_id), {
            "status": InterviewStatus.COMPLETED.value,
            "questions": dump_questions(questions),
            "transcript": transcript,
            "endedReason": ended_reason.value,
            "proctoringIssues": proctoring_issues.model_dump(mode="json", by_alias=True),
            "updatedAt": utc_timestamp(),
        })

    async def save_feedback(self, interview_id: str, feedback: InterviewFeedback) -> None:
        """Write the complete feedback object in a single write."""
        await self.store.update(self.path(interview_id), {
            "feedback": feedback.model_dump(mode="json", by_alias=True),
            "updatedAt": utc_timestamp(),
        })

    async def cancel(self, interview_id: str) -> InterviewSession:
        """Cancel an in-progress session.

        Raises:
            InterviewNotFound: If the session does not exist
            InterviewEnded: If the session is already completed or cancelled
        """
        session = await self.require(interview_id)
        if session.status.is_terminal:
            raise InterviewEnded(interview_id)
        data = await self.store.update(self.path(interview_id), {
            "status": InterviewStatus.CANCELLED.value,
            "updatedAt": utc_timestamp(),
        })
        logger.info(f"Interview {interview_id} cancelled by user {self.uid}")
        return InterviewSession.model_validate(data)

    def subscribe(self, interview_id: str, listener: ChangeListener) -> Callable[[], None]:
        return self.store.subscribe(self.path(interview_id), listener)
