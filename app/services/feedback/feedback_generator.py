"""
Feedback Generator Module

This module implements the feedback generation capability: given an interview
transcript, the role and a candidate summary, it asks the AI service for
structured feedback and validates the answer.

Two variants are offered:
- ``analyze_simple``: whole-transcript analysis returning ``SimpleFeedback``.
- ``analyze_detailed``: whole-interview plus per-question feedback returning
  ``InterviewFeedback``, which is what a finished session stores.

Both return a ``FeedbackResult``. A response that is not valid JSON or does not
match the schema becomes ``FeedbackSchemaError``; transport failures raise.

Dependencies:
- openai: For AI client interactions.
- loguru: For logging.
- app.core.secure_prompt_manager: For prompt construction and sanitization.
- app.helper.ai_response_parser: For cleaning and validating the AI output.

Author: @kcaparas1630
"""

from typing import Iterable, Optional
from loguru import logger
from openai import AsyncOpenAI
from app.core.ai_client_manager import get_feedback_client
from app.core.secure_prompt_manager import secure_prompt_manager
from app.helper.ai_response_parser import parse_structured_response
from app.schemas.interview.interview_feedback import (
    FeedbackAnalysisRequest,
    FeedbackResult,
    FeedbackSchemaError,
    InterviewFeedback,
    SimpleFeedback,
)
from app.schemas.interview.interview_session import GeneratedQuestion
from app.services.ai_completion import OPENAI_MODEL, create_completion


class FeedbackGenerator:
    """
    Service class producing interview feedback with the AI service.
    """

    def __init__(self, client: Optional[AsyncOpenAI] = None, model: str = OPENAI_MODEL):
        """
        Args:
            client (Optional[AsyncOpenAI]): Client to use. Defaults to the
                dedicated feedback client, resolved on first call.
            model (str): Chat model name.
        """
        self._client = client
        self.model = model

    @property
    def client(self) -> AsyncOpenAI:
        if self._client is None:
            self._client = get_feedback_client()
        return self._client

    async def analyze_simple(self, request: FeedbackAnalysisRequest) -> FeedbackResult:
        """
        Analyze a transcript as a whole.

        Returns:
            FeedbackResult: ``FeedbackOk[SimpleFeedback]`` or ``FeedbackSchemaError``.

        Raises:
            ServiceOverloadedError: When the AI service is overloaded
            FeedbackServiceError: On any other transport failure
        """
        try:
            prompt = secure_prompt_manager.get_simple_feedback_prompt(
                job_description=request.job_description,
                candidate_profile=request.candidate_profile,
                transcript=request.interview_transcript,
                expected_answers=request.expected_answers,
            )
        except ValueError as e:
            return FeedbackSchemaError(reason=f"Invalid feedback input: {e}")

        content = await create_completion(self.client, prompt, model=self.model, label="Simple feedback")
        result = parse_structured_response(content, SimpleFeedback)
        if isinstance(result, FeedbackSchemaError):
            logger.warning(f"Simple feedback rejected: {result.reason}")
        return result

    async def analyze_detailed(self, request: FeedbackAnalysisRequest, questions: Iterable[GeneratedQuestion]) -> FeedbackResult:
        """
        Analyze a finished interview and every answered question.

        Returns:
            FeedbackResult: ``FeedbackOk[InterviewFeedback]`` or ``FeedbackSchemaError``.

        Raises:
            ServiceOverloadedError: When the AI service is overloaded
            FeedbackServiceError: On any other transport failure
        """
        question_payload = [
            {
                "id": question.id,
                "text": question.text,
                "stage": question.stage.value,
                "type": question.type.value,
                "answer": question.answer,
            }
            for question in questions
        ]
        try:
            prompt = secure_prompt_manager.get_detailed_feedback_prompt(
                job_description=request.job_description,
                candidate_profile=request.candidate_profile,
                transcript=request.interview_transcript,
                questions=question_payload,
                expected_answers=request.expected_answers,
            )
        except ValueError as e:
            return FeedbackSchemaError(reason=f"Invalid feedback input: {e}")

        content = await create_completion(self.client, prompt, model=self.model, label="Detailed feedback")
        result = parse_structured_response(content, InterviewFeedback)
        if isinstance(result, FeedbackSchemaError):
            logger.warning(f"Detailed feedback rejected: {result.reason}")
        return result
