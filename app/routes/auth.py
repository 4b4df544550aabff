"""Authentication Routes Module

This module defines the session fence endpoints. A client calls ``POST
/auth/session`` right after signing in with Firebase; the returned id (also set
as the ``sessionId`` cookie) must accompany every later request. Signing in on
another device replaces the id, and the old device's requests start failing
with 401.

Dependencies:
- fastapi: For API routing and dependency injection.
- loguru: For logging operations.
- app.core.route_limiters: For rate limiting middleware.
- app.core.dependencies: For the request context and the session fence.
- app.errors.exceptions: For custom exception handling.

Author: @kcaparas1630
"""

from fastapi import APIRouter, Depends, HTTPException, Request, Response
from fastapi.responses import JSONResponse
from loguru import logger
from app.core.route_limiters import limiter
from app.core.dependencies import get_request_context, get_session_fence, sync_session_cookie
from app.errors.exceptions import EmailNotVerified, InternalServerError
from app.schemas.auth.user_auth_schemas import RequestContext, SessionFenceResponse, SessionValidationResponse
from app.services.session_fence.session_fence_store import SessionFenceStore

router = APIRouter(
    prefix="/auth",
    tags=["auth"],
    responses={404: {"description": "Not found"}}
)

@router.post("/session", response_model=SessionFenceResponse)
@limiter.limit("10/minute")  # Custom limit for this endpoint
async def create_session_route(
    request: Request,
    response: Response,
    context: RequestContext = Depends(get_request_context),
    fence: SessionFenceStore = Depends(get_session_fence),
):
    """Start the caller's session, replacing any session active on another device.

    Accounts with an unverified email are signed out instead: the response is a
    403 that also clears the ``sessionId`` cookie.

    Returns:
        SessionFenceResponse: The new session id

    Raises:
        InternalServerError: If the session could not be stored

    Rate Limit:
        10 requests per minute per client
    """
    try:
        if context.token.get("email_verified") is False:
            logger.info(f"[SessionFence] Email not verified for {context.uid}; signing out")
            await fence.invalidate_session(context.uid)
            error = EmailNotVerified()
            rejected = JSONResponse(status_code=error.status_code, content={"detail": error.detail})
            sync_session_cookie(rejected, fence)
            return rejected

        session_id = await fence.create_session(context.uid, request.headers.get("User-Agent"))
        sync_session_cookie(response, fence)
        return SessionFenceResponse(session_id=session_id)
    except HTTPException:
        raise
    except Exception as e:
        logger.exception("Unhandled exception in create session endpoint")
        raise InternalServerError("An unexpected error occurred while starting the session.") from e

@router.post("/session/validate", response_model=SessionValidationResponse)
@limiter.limit("60/minute")  # Custom limit for this endpoint
async def validate_session_route(
    request: Request,
    response: Response,
    context: RequestContext = Depends(get_request_context),
    fence: SessionFenceStore = Depends(get_session_fence),
):
    """Check whether the caller still holds the active session. Never errors on mismatch.

    An invalid session also clears the caller's ``sessionId`` cookie.
    """
    valid = await fence.validate_session(context.uid, fence.get_local_session_id())
    if not valid:
        fence.client_storage.clear()
        sync_session_cookie(response, fence)
    return SessionValidationResponse(valid=valid)

@router.delete("/session")
@limiter.limit("10/minute")  # Custom limit for this endpoint
async def delete_session_route(
    request: Request,
    response: Response,
    context: RequestContext = Depends(get_request_context),
    fence: SessionFenceStore = Depends(get_session_fence),
):
    """Sign out: clear the active session and the caller's cookie."""
    try:
        await fence.invalidate_session(context.uid)
        sync_session_cookie(response, fence)
        return {"status": "signed_out"}
    except HTTPException:
        raise
    except Exception as e:
        logger.exception("Unhandled exception in delete session endpoint")
        raise InternalServerError("An unexpected error occurred while signing out.") from e
