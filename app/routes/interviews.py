"""
Interview Routes

Description:
Endpoints that create interviews and drive a running interview through its
session controller: read the current question, submit answers, end early, report
proctoring events, cancel, and read the resulting feedback.

All routes require a valid Firebase token and the caller's session to be the
active one.

Dependencies:
- fastapi: For API routing and dependency injection.
- loguru: For logging information about requests and errors.
- app.services.interview_session: For the controller registry and interview start.

Author: @kcaparas1630
"""
from typing import List
from fastapi import APIRouter, Depends, HTTPException, Request
from loguru import logger
from app.core.dependencies import get_controller_registry, get_question_generator, get_user_repository, require_active_session
from app.core.route_limiters import limiter
from app.database import DocumentStore, get_document_store
from app.errors.exceptions import InternalServerError, InterviewEnded
from app.schemas.auth.user_auth_schemas import RequestContext
from app.schemas.interview.interview_requests import (
    ControllerView,
    EndInterviewRequest,
    FeedbackView,
    InterviewSummary,
    ProctoringEventRequest,
    StartInterviewRequest,
    SubmitAnswerRequest,
)
from app.schemas.interview.interview_session import InterviewSession, ProctoringIssues
from app.services.interview_session.answer_validation import validate_answer
from app.services.interview_session.controller_registry import ControllerRegistry
from app.services.interview_session.start_interview import start_interview
from app.services.question_generation.question_generator import QuestionGenerator
from app.services.repositories.interview_repository import InterviewRepository
from app.services.repositories.user_repository import UserRepository

router = APIRouter(
    prefix="/api/interviews",
    tags=["interviews"],
    responses={404: {"description": "Not found"}}
)


def get_interview_repository(
    context: RequestContext = Depends(require_active_session),
    store: DocumentStore = Depends(get_document_store),
) -> InterviewRepository:
    return InterviewRepository(store, context.uid)


@router.post("", response_model=InterviewSession, status_code=201)
@limiter.limit("5/minute")  # Custom limit for this endpoint
async def start_interview_route(
    request: Request,
    body: StartInterviewRequest,
    context: RequestContext = Depends(require_active_session),
    users: UserRepository = Depends(get_user_repository),
    interviews: InterviewRepository = Depends(get_interview_repository),
    question_generator: QuestionGenerator = Depends(get_question_generator),
):
    """
    Create an interview and generate its questions.

    Raises:
        InterviewLimitReached: 403 when a free user has no interviews left
        QuestionGenerationError: 502 when no questions could be generated
        ServiceOverloadedError: 503 when the AI service is overloaded
    """
    try:
        return await start_interview(context.uid, body.duration, users, interviews, question_generator)
    except HTTPException:
        raise
    except Exception as e:
        logger.exception("Unhandled exception in start interview endpoint")
        raise InternalServerError("An unexpected error occurred while starting the interview.") from e


@router.get("", response_model=List[InterviewSummary])
@limiter.limit("30/minute")  # Custom limit for this endpoint
async def list_interviews_route(request: Request, interviews: InterviewRepository = Depends(get_interview_repository)):
    """The caller's interview history, newest first."""
    sessions = await interviews.list_for_user()
    return [InterviewSummary.from_session(session) for session in sessions]


@router.get("/{interview_id}", response_model=ControllerView)
@limiter.limit("60/minute")  # Custom limit for this endpoint
async def get_interview_route(
    request: Request,
    interview_id: str,
    context: RequestContext = Depends(require_active_session),
    registry: ControllerRegistry = Depends(get_controller_registry),
):
    controller = await registry.get_or_load(context.uid, interview_id)
    return controller.view()


@router.post("/{interview_id}/answers", response_model=ControllerView)
@limiter.limit("60/minute")  # Custom limit for this endpoint
async def submit_answer_route(
    request: Request,
    interview_id: str,
    body: SubmitAnswerRequest,
    context: RequestContext = Depends(require_active_session),
    registry: ControllerRegistry = Depends(get_controller_registry),
):
    """
    Answer the current question and move to the next one (or finish).

    Raises:
        EmptyAnswerError: 400 for a blank written technical answer
        InterviewEnded: 409 once the interview is over
        SubmissionInProgress: 409 while another answer is being saved
    """
    try:
        controller = await registry.get_or_load(context.uid, interview_id)
        question = controller.current_question
        if question is None:
            raise InterviewEnded(interview_id)
        answer = validate_answer(question, body.answer)
        return await controller.advance(answer)
    except HTTPException:
        raise
    except Exception as e:
        logger.exception("Unhandled exception in submit answer endpoint")
        raise InternalServerError("An unexpected error occurred while submitting the answer.") from e


@router.post("/{interview_id}/end", response_model=ControllerView)
@limiter.limit("10/minute")  # Custom limit for this endpoint
async def end_interview_route(
    request: Request,
    interview_id: str,
    body: EndInterviewRequest,
    context: RequestContext = Depends(require_active_session),
    registry: ControllerRegistry = Depends(get_controller_registry),
):
    """End the interview early (user request, time up or proctoring limit)."""
    try:
        controller = await registry.get_or_load(context.uid, interview_id)
        return await controller.end(body.reason)
    except HTTPException:
        raise
    except Exception as e:
        logger.exception("Unhandled exception in end interview endpoint")
        raise InternalServerError("An unexpected error occurred while ending the interview.") from e


@router.post("/{interview_id}/proctoring", response_model=ProctoringIssues)
@limiter.limit("120/minute")  # Custom limit for this endpoint
async def proctoring_event_route(
    request: Request,
    interview_id: str,
    body: ProctoringEventRequest,
    context: RequestContext = Depends(require_active_session),
    registry: ControllerRegistry = Depends(get_controller_registry),
):
    controller = await registry.get_or_load(context.uid, interview_id)
    return controller.record_proctoring_event(body.kind)


@router.post("/{interview_id}/cancel", response_model=InterviewSession)
@limiter.limit("10/minute")  # Custom limit for this endpoint
async def cancel_interview_route(
    request: Request,
    interview_id: str,
    context: RequestContext = Depends(require_active_session),
    interviews: InterviewRepository = Depends(get_interview_repository),
    registry: ControllerRegistry = Depends(get_controller_registry),
):
    """
    Cancel an interview. A controller driving it stops on the status change.

    Raises:
        InterviewEnded: 409 if the interview is already completed or cancelled
    """
    session = await interviews.cancel(interview_id)
    registry.discard(context.uid, interview_id)
    return session


@router.get("/{interview_id}/feedback", response_model=FeedbackView)
@limiter.limit("30/minute")  # Custom limit for this endpoint
async def get_feedback_route(
    request: Request,
    interview_id: str,
    interviews: InterviewRepository = Depends(get_interview_repository),
):
    session = await interviews.require(interview_id)
    return FeedbackView(interview_id=session.id, state=session.feedback_state, feedback=session.feedback)
