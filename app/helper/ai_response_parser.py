"""
Description:
Parse raw generative-AI output into validated pydantic models.

Models sometimes wrap their JSON in reasoning text, ``<think>`` blocks or
markdown fences. ``clean_ai_response`` strips that wrapping and keeps the first
complete JSON object; ``parse_structured_response`` then validates it against a
schema and returns a tagged result instead of raising.

Dependencies:
- pydantic: For schema validation.
- re / json: For cleaning and parsing the raw text.
- loguru: For logging.

Author: @kcaparas1630
"""
import json
import re
from typing import Optional, Type
from loguru import logger
from pydantic import BaseModel, ValidationError
from app.schemas.interview.interview_feedback import FeedbackOk, FeedbackResult, FeedbackSchemaError


def _extract_first_json_object(content: str) -> Optional[str]:
    json_start = content.find('{')
    if json_start == -1:
        return None

    depth = 0
    in_string = False
    escaped = False
    for i in range(json_start, len(content)):
        char = content[i]
        if in_string:
            if escaped:
                escaped = False
            elif char == '\\':
                escaped = True
            elif char == '"':
                in_string = False
            continue
        if char == '"':
            in_string = True
        elif char == '{':
            depth += 1
        elif char == '}':
            depth -= 1
            if depth == 0:
                return content[json_start:i + 1]
    return None


def clean_ai_response(content: str) -> str:
    """
    Remove reasoning text and markdown wrapping around a JSON answer.

    Args:
        content (str): The raw AI response content

    Returns:
        str: The first complete JSON object, or the stripped input when none is found

    Example:
        >>> clean_ai_response('<think>reasoning...</think>{"score": 7}')
        '{"score": 7}'
        >>> clean_ai_response('```json\\n{"score": 7}\\n```')
        '{"score": 7}'
    """
    if not content or not isinstance(content, str):
        return content

    original_length = len(content)
    content = re.sub(r'<think>.*?</think>', '', content, flags=re.DOTALL | re.IGNORECASE)
    content = re.sub(r'</?think[^>]*>', '', content, flags=re.IGNORECASE)
    content = re.sub(r'```(?:json)?', '', content, flags=re.IGNORECASE).strip()

    extracted = _extract_first_json_object(content)
    if extracted is not None:
        content = extracted

    if len(content) != original_length:
        logger.debug(f"AI response cleaned: {original_length} -> {len(content)} chars")
    return content


def parse_structured_response(content: Optional[str], schema: Type[BaseModel]) -> FeedbackResult:
    """
    Validate raw AI output against ``schema``.

    Args:
        content: Raw message content returned by the model.
        schema: Pydantic model the output must satisfy.

    Returns:
        FeedbackOk wrapping the validated model, or FeedbackSchemaError with the
        reason the output was rejected. Never raises for malformed output.
    """
    if not content or not content.strip():
        return FeedbackSchemaError(reason="Empty response from AI service", raw_content=content)

    cleaned = clean_ai_response(content)
    try:
        payload = json.loads(cleaned)
    except json.JSONDecodeError as e:
        logger.error(f"JSON parsing error: {e}")
        return FeedbackSchemaError(reason=f"Response is not valid JSON: {e}", raw_content=content)

    if not isinstance(payload, dict):
        return FeedbackSchemaError(reason="Response JSON is not an object", raw_content=content)

    try:
        return FeedbackOk(schema.model_validate(payload))
    except ValidationError as e:
        logger.error(f"AI response failed {schema.__name__} validation: {e.error_count()} errors")
        return FeedbackSchemaError(reason=f"Response does not match {schema.__name__}: {e}", raw_content=content)
