"""
Interview Feedback Schemas

This module defines the structured outputs of the AI feedback capability and the
tagged result type returned by the feedback generator.

A feedback response is either ``FeedbackOk`` carrying a fully validated model, or
``FeedbackSchemaError`` carrying the reason the raw response was rejected. The
generator never raises for malformed model output, so callers branch on the
result instead of catching parse errors.

Dependencies:
- pydantic: For data validation and serialization

Author: @kcaparas1630
"""

from dataclasses import dataclass
from typing import Generic, List, Optional, TypeVar, Union
from pydantic import BaseModel, Field


class DetailedQuestionFeedbackItem(BaseModel):
    question_id: str = Field(..., alias="questionId")
    question_text: str = Field(..., alias="questionText")
    user_answer: Optional[str] = Field(default=None, alias="userAnswer")
    ideal_answer: str = Field(..., alias="idealAnswer")
    refinement_suggestions: str = Field(..., alias="refinementSuggestions")
    score: float = Field(..., ge=0, le=10, description="Per-question score between 0 and 10")

    class Config:
        populate_by_name = True


class InterviewFeedback(BaseModel):
    """Detailed feedback for a whole interview, written to the session in one write."""
    overall_score: Optional[float] = Field(default=None, ge=0, le=100, alias="overallScore")
    overall_feedback: str = Field(..., alias="overallFeedback")
    strengths_summary: str = Field(..., alias="strengthsSummary")
    weaknesses_summary: str = Field(..., alias="weaknessesSummary")
    overall_areas_for_improvement: str = Field(..., alias="overallAreasForImprovement")
    detailed_question_feedback: List[DetailedQuestionFeedbackItem] = Field(default_factory=list, alias="detailedQuestionFeedback")

    class Config:
        populate_by_name = True


class SimpleFeedback(BaseModel):
    """Output of the simple transcript analyzer."""
    overall_score: Optional[float] = Field(default=None, ge=0, le=100, alias="overallScore")
    overall_feedback: str = Field(..., alias="overallFeedback")
    correct_answers: str = Field(..., alias="correctAnswers")
    incorrect_answers: str = Field(..., alias="incorrectAnswers")
    areas_for_improvement: str = Field(..., alias="areasForImprovement")

    class Config:
        populate_by_name = True


class FeedbackAnalysisRequest(BaseModel):
    """Input contract shared by both feedback variants."""
    interview_transcript: str = Field(..., min_length=1, alias="interviewTranscript")
    job_description: str = Field(..., min_length=1, alias="jobDescription")
    candidate_profile: str = Field(..., min_length=1, alias="candidateProfile")
    expected_answers: Optional[str] = Field(default=None, alias="expectedAnswers")

    class Config:
        populate_by_name = True


T = TypeVar("T", bound=BaseModel)


@dataclass(frozen=True)
class FeedbackOk(Generic[T]):
    value: T


@dataclass(frozen=True)
class FeedbackSchemaError:
    reason: str
    raw_content: Optional[str] = None


FeedbackResult = Union[FeedbackOk[T], FeedbackSchemaError]
