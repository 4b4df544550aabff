"""
Interview Feedback API Route

Description:
This module defines a FastAPI route for analyzing a complete interview transcript and
providing overall feedback.

Arguments:
- body: An instance of FeedbackAnalysisRequest containing the transcript, role and candidate profile.

Returns:
- An instance of SimpleFeedback containing structured feedback data.

Dependencies:
- fastapi: For creating the FastAPI application and defining routes.
- app.schemas.interview.interview_feedback: For the request and response schemas.
- app.services.feedback.feedback_generator: For generating the feedback.
- loguru: For logging information about the request and any errors that occur.

Author: @kcaparas1630

"""
from fastapi import APIRouter, Depends, HTTPException, Request
from loguru import logger
from app.core.dependencies import get_feedback_generator, get_request_context
from app.core.route_limiters import limiter
from app.errors.exceptions import FeedbackServiceError, InternalServerError
from app.schemas.auth.user_auth_schemas import RequestContext
from app.schemas.interview.interview_feedback import FeedbackAnalysisRequest, FeedbackSchemaError, SimpleFeedback
from app.services.feedback.feedback_generator import FeedbackGenerator

router = APIRouter(
    prefix="/api",
    tags=["interview-feedback"],
    responses={404: {"description": "Not found"}}
)


@router.post("/interview-feedback", response_model=SimpleFeedback)
@limiter.limit("5/minute")  # Custom limit for this endpoint
async def get_interview_feedback(
    request: Request,
    body: FeedbackAnalysisRequest,
    context: RequestContext = Depends(get_request_context),
    generator: FeedbackGenerator = Depends(get_feedback_generator),
):
    """
    Get overall feedback for an interview transcript
    """
    try:
        result = await generator.analyze_simple(body)
        if isinstance(result, FeedbackSchemaError):
            raise FeedbackServiceError("The AI service returned feedback in an unexpected format.")
        return result.value
    except HTTPException:
        raise
    except Exception as e:
        logger.error(f"Error getting interview feedback: {e}")
        raise InternalServerError("Failed to analyze interview feedback.") from e
