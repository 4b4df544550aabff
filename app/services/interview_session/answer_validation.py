from app.errors.exceptions import EmptyAnswerError
from app.schemas.interview.interview_session import GeneratedQuestion, QuestionStage


def validate_answer(question: GeneratedQuestion, answer: str) -> str:
    """
    Normalize a submitted answer for ``question``.

    Oral answers may be empty (the candidate stayed silent); written technical
    answers may not.

    Returns:
        str: The trimmed answer.

    Raises:
        EmptyAnswerError: If a technical_written answer is blank
    """
    trimmed = (answer or "").strip()
    if not trimmed and question.stage == QuestionStage.TECHNICAL_WRITTEN:
        raise EmptyAnswerError()
    return trimmed
