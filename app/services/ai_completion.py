"""
AI Completion Module

Single entry point for chat completions used by the feedback and question
generation capabilities. Transport errors from the OpenAI SDK are translated
into the service's HTTP errors: overload (rate limiting, 503, 529) becomes
``ServiceOverloadedError`` and everything else ``FeedbackServiceError`` unless
the caller supplies its own error factory.

Dependencies:
- openai: For AI client interactions.
- loguru: For logging.

Author: @kcaparas1630
"""

import os
import time
from typing import Callable, Optional
from dotenv import load_dotenv
from fastapi import HTTPException
from loguru import logger
from openai import APIError, APIStatusError, AsyncOpenAI, RateLimitError
from app.errors.exceptions import FeedbackServiceError, ServiceOverloadedError

load_dotenv()

OPENAI_MODEL = os.getenv("OPENAI_MODEL", "gpt-4o-mini")

OVERLOADED_STATUS_CODES = (503, 529)


def is_overloaded(error: Exception) -> bool:
    if isinstance(error, RateLimitError):
        return True
    return isinstance(error, APIStatusError) and error.status_code in OVERLOADED_STATUS_CODES


async def create_completion(
    client: AsyncOpenAI,
    prompt: str,
    *,
    model: str = OPENAI_MODEL,
    temperature: float = 0.3,
    max_tokens: int = 4000,
    on_error: Callable[[str], HTTPException] = FeedbackServiceError,
    label: str = "completion",
) -> Optional[str]:
    """
    Send ``prompt`` as a single user message and return the message content.

    Raises:
        ServiceOverloadedError: When the provider reports it is overloaded
        HTTPException: Built by ``on_error`` for any other transport failure
    """
    start_time = time.time()
    try:
        response = await client.chat.completions.create(
            model=model,
            temperature=temperature,
            max_tokens=max_tokens,
            messages=[{"role": "user", "content": prompt}],
        )
    except APIError as e:
        if is_overloaded(e):
            logger.warning(f"AI service overloaded during {label}: {e}")
            raise ServiceOverloadedError() from e
        logger.error(f"AI service error during {label}: {e}")
        raise on_error(f"AI service error: {e}") from e

    logger.info(f"{label} completed in {time.time() - start_time:.2f}s")
    if not response.choices:
        return None
    return response.choices[0].message.content
