"""Shared fakes and seed helpers for the test suite."""
import asyncio
from typing import List, Optional

from app.database import DocumentStore
from app.schemas.auth.user_auth_schemas import UserProfile
from app.schemas.interview.interview_feedback import (
    DetailedQuestionFeedbackItem,
    FeedbackOk,
    InterviewFeedback,
    SimpleFeedback,
)
from app.schemas.interview.interview_session import (
    GeneratedQuestion,
    InterviewSession,
    QuestionStage,
    QuestionType,
)
from app.services.repositories.interview_repository import InterviewRepository
from app.services.repositories.user_repository import user_path

TEST_UID = "user-123"


def make_feedback(questions: Optional[List[GeneratedQuestion]] = None) -> InterviewFeedback:
    return InterviewFeedback(
        overall_score=78,
        overall_feedback="Solid interview overall.",
        strengths_summary="Clear structure.",
        weaknesses_summary="Few concrete metrics.",
        overall_areas_for_improvement="Quantify impact.",
        detailed_question_feedback=[
            DetailedQuestionFeedbackItem(
                question_id=question.id,
                question_text=question.text,
                user_answer=question.answer,
                ideal_answer="A focused, specific answer.",
                refinement_suggestions="Add an example.",
                score=7,
            )
            for question in (questions or [])
        ],
    )


class FakeFeedbackGenerator:
    """Stands in for FeedbackGenerator. Returns ``result`` or raises ``error``."""

    def __init__(self, result=None, error: Optional[Exception] = None, gate: Optional[asyncio.Event] = None):
        self.result = result
        self.error = error
        self.gate = gate
        self.calls = []

    async def analyze_detailed(self, request, questions):
        questions = list(questions)
        self.calls.append((request, questions))
        if self.gate is not None:
            await self.gate.wait()
        if self.error is not None:
            raise self.error
        if self.result is not None:
            return self.result
        return FeedbackOk(make_feedback(questions))

    async def analyze_simple(self, request):
        self.calls.append((request, None))
        if self.error is not None:
            raise self.error
        if self.result is not None:
            return self.result
        return FeedbackOk(SimpleFeedback(
            overall_score=70,
            overall_feedback="Good.",
            correct_answers="Clear answers.",
            incorrect_answers="Missed details.",
            areas_for_improvement="Practice STAR.",
        ))


class FakeQuestionGenerator:
    def __init__(self, questions: Optional[List[GeneratedQuestion]] = None, error: Optional[Exception] = None):
        self.questions = questions if questions is not None else sample_questions()
        self.error = error
        self.calls = []

    async def generate(self, profile_field, role, duration):
        self.calls.append((profile_field, role, duration))
        if self.error is not None:
            raise self.error
        return [question.model_copy() for question in self.questions]


def sample_questions() -> List[GeneratedQuestion]:
    """Three questions stored out of order: one written, two oral."""
    return [
        GeneratedQuestion(id="q3", text="Write a function that reverses a string.", stage=QuestionStage.TECHNICAL_WRITTEN, type=QuestionType.CODING),
        GeneratedQuestion(id="q1", text="Tell me about yourself.", stage=QuestionStage.ORAL, type=QuestionType.CONVERSATIONAL),
        GeneratedQuestion(id="q2", text="Describe a time you resolved a conflict.", stage=QuestionStage.ORAL, type=QuestionType.BEHAVIORAL),
    ]



async def seed_user(store: DocumentStore, uid: str = TEST_UID, **fields) -> UserProfile:
    profile = UserProfile(uid=uid, email=f"{uid}@example.com", name="Test User", **fields)
    await store.set(user_path(uid), profile.model_dump(mode="json", by_alias=True))
    return profile


async def seed_interview(
    interviews: InterviewRepository,
    questions: Optional[List[GeneratedQuestion]] = None,
    duration: int = 15,
) -> InterviewSession:
    session = await interviews.create(duration)
    return await interviews.store_questions(session.id, sample_questions() if questions is None else questions)
