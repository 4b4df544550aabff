"""Question ordering and transcript formatting for interview sessions."""

from typing import List, Optional
from app.schemas.interview.interview_session import GeneratedQuestion, QuestionStage

STAGE_ORDER = {QuestionStage.ORAL: 0, QuestionStage.TECHNICAL_WRITTEN: 1}

NO_VERBAL_ANSWER = "[No verbal answer recorded]"
NO_WRITTEN_ANSWER = "[No answer provided]"


def order_questions(questions: List[GeneratedQuestion]) -> List[GeneratedQuestion]:
    """Oral questions first, then technical_written; within a stage by the number in the id."""
    return sorted(questions, key=lambda question: (STAGE_ORDER[question.stage], question.number))


def first_unanswered_index(questions: List[GeneratedQuestion]) -> Optional[int]:
    for index, question in enumerate(questions):
        if not question.is_answered:
            return index
    return None


def _single_line(text: str) -> str:
    return text.replace("\r\n", "\\n").replace("\r", "\\n").replace("\n", "\\n")


def transcript_lines(question: GeneratedQuestion, answer: str) -> List[str]:
    """The two transcript entries for one answered question."""
    if not answer:
        answer = NO_VERBAL_ANSWER if question.stage == QuestionStage.ORAL else NO_WRITTEN_ANSWER
    return [
        f"AI ({question.stage.value} - {question.type.value}): {_single_line(question.text)}",
        f"You: {_single_line(answer)}",
    ]


def append_transcript(transcript: str, lines: List[str]) -> str:
    entries = "\n".join(lines)
    if not transcript:
        return entries
    return f"{transcript}\n{entries}"
