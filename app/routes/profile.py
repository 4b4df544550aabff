"""
Profile Routes

Description:
Read and update the signed-in user's profile, including the extracted resume text
that feeds the candidate summary used for feedback.

Author: @kcaparas1630
"""
from fastapi import APIRouter, Depends, HTTPException, Request
from loguru import logger
from app.core.dependencies import get_user_repository, require_active_session
from app.core.route_limiters import limiter
from app.errors.exceptions import InternalServerError
from app.schemas.auth.user_auth_schemas import ProfileUpdate, RequestContext, UserProfile
from app.services.repositories.user_repository import UserRepository

router = APIRouter(
    prefix="/api",
    tags=["profile"],
    responses={404: {"description": "Not found"}}
)

@router.get("/profile", response_model=UserProfile)
@limiter.limit("30/minute")  # Custom limit for this endpoint
async def get_profile_route(request: Request, context: RequestContext = Depends(require_active_session)):
    return context.profile

@router.put("/profile", response_model=UserProfile)
@limiter.limit("10/minute")  # Custom limit for this endpoint
async def update_profile_route(
    request: Request,
    updates: ProfileUpdate,
    context: RequestContext = Depends(require_active_session),
    users: UserRepository = Depends(get_user_repository),
):
    """
    Apply a partial profile update. Only fields present in the body are changed.
    """
    try:
        return await users.update_profile(context.uid, updates)
    except HTTPException:
        raise
    except Exception as e:
        logger.exception("Unhandled exception in update profile endpoint")
        raise InternalServerError("An unexpected error occurred while updating the profile.") from e
