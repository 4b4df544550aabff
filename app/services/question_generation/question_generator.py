"""
Question Generator Module

Generates the question set of a new interview from the candidate's profile field,
role and the chosen duration. Questions without an id get ``gen_q<N>``; the result
is ordered oral-first and then by question number.

Dependencies:
- openai: For AI client interactions.
- pydantic: For validating the generated questions.
- loguru: For logging.

Author: @kcaparas1630
"""

from typing import List, Optional
from loguru import logger
from openai import AsyncOpenAI
from pydantic import BaseModel, Field
from app.core.ai_client_manager import get_question_generation_client
from app.core.secure_prompt_manager import secure_prompt_manager
from app.errors.exceptions import QuestionGenerationError
from app.helper.ai_response_parser import parse_structured_response
from app.schemas.interview.interview_feedback import FeedbackSchemaError
from app.schemas.interview.interview_session import GeneratedQuestion, QuestionStage, QuestionType
from app.services.ai_completion import OPENAI_MODEL, create_completion
from app.services.interview_session.question_order import order_questions


class _RawQuestion(BaseModel):
    id: Optional[str] = None
    text: str = Field(..., min_length=1)
    stage: QuestionStage
    type: QuestionType


class _QuestionSet(BaseModel):
    questions: List[_RawQuestion] = Field(default_factory=list)


class QuestionGenerator:
    """Service class generating interview questions with the AI service."""

    def __init__(self, client: Optional[AsyncOpenAI] = None, model: str = OPENAI_MODEL):
        self._client = client
        self.model = model

    @property
    def client(self) -> AsyncOpenAI:
        if self._client is None:
            self._client = get_question_generation_client()
        return self._client

    async def generate(self, profile_field: str, role: str, duration: int) -> List[GeneratedQuestion]:
        """
        Generate an ordered question set.

        Raises:
            QuestionGenerationError: When the AI returns no usable questions
            ServiceOverloadedError: When the AI service is overloaded
        """
        logger.info(f"Generating questions for role={role!r}, field={profile_field!r}, duration={duration}")
        prompt = secure_prompt_manager.get_question_generation_prompt(
            profile_field=profile_field or "General",
            role=role or "General Role",
            duration=duration,
        )
        content = await create_completion(
            self.client,
            prompt,
            model=self.model,
            temperature=0.7,
            max_tokens=2000,
            on_error=QuestionGenerationError,
            label="Question generation",
        )

        result = parse_structured_response(content, _QuestionSet)
        if isinstance(result, FeedbackSchemaError):
            logger.error(f"Question generation response rejected: {result.reason}")
            raise QuestionGenerationError()

        questions = to_generated_questions(result.value.questions)
        if not questions:
            raise QuestionGenerationError()
        logger.info(f"Generated {len(questions)} questions")
        return questions


def to_generated_questions(raw_questions: List[_RawQuestion]) -> List[GeneratedQuestion]:
    questions = [
        GeneratedQuestion(
            id=raw.id or f"gen_q{index + 1}",
            text=raw.text.strip(),
            stage=raw.stage,
            type=raw.type,
            answer=None,
        )
        for index, raw in enumerate(raw_questions)
    ]
    return order_questions(questions)
