"""
Start Interview Module

Creates a new interview session for a user: enforces the free-tier limit, creates
the pending session, generates its questions and stores them.

Author: @kcaparas1630
"""

import os
from dotenv import load_dotenv
from loguru import logger
from app.errors.exceptions import InterviewLimitReached, UserNotFound
from app.schemas.interview.interview_session import InterviewSession
from app.services.question_generation.question_generator import QuestionGenerator
from app.services.repositories.interview_repository import InterviewRepository
from app.services.repositories.user_repository import UserRepository

load_dotenv()

FREE_INTERVIEW_LIMIT = int(os.getenv("FREE_INTERVIEW_LIMIT", "3"))


async def start_interview(
    uid: str,
    duration: int,
    users: UserRepository,
    interviews: InterviewRepository,
    question_generator: QuestionGenerator,
    free_limit: int = FREE_INTERVIEW_LIMIT,
) -> InterviewSession:
    """
    Create an interview with generated questions.

    The session exists with status ``pending`` while questions are generated, so a
    generation failure leaves a pending session behind rather than nothing.

    Raises:
        UserNotFound: If the user has no profile
        InterviewLimitReached: If a free user has used all free interviews
        QuestionGenerationError: If no questions could be generated
        ServiceOverloadedError: If the AI service is overloaded
    """
    profile = await users.get_profile(uid)
    if profile is None:
        raise UserNotFound(uid)

    if not profile.is_plus_subscriber and profile.interviews_taken >= free_limit:
        logger.info(f"User {uid} reached the free interview limit ({profile.interviews_taken}/{free_limit})")
        raise InterviewLimitReached(free_limit)

    session = await interviews.create(duration)
    questions = await question_generator.generate(
        profile_field=profile.profile_field,
        role=profile.role,
        duration=duration,
    )
    session = await interviews.store_questions(session.id, questions)
    logger.info(f"Interview {session.id} ready with {len(questions)} questions")
    return session
