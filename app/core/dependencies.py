"""
Description:
FastAPI dependencies shared by the routes: the document store, the authenticated
request context, the session fence guard and the AI service objects.

Every dependency is a plain function so tests can replace it through
``app.dependency_overrides``.

Dependencies:
- fastapi: For dependency injection.
- loguru: For logging.

Author: @kcaparas1630
"""
from typing import Dict, Optional
from fastapi import Depends, Request, Response
from loguru import logger
from app.database import DocumentStore, get_document_store
from app.errors.exceptions import SessionInvalidated
from app.schemas.auth.user_auth_schemas import RequestContext
from app.services.auth.firebase_auth import get_current_user_token
from app.services.feedback.feedback_generator import FeedbackGenerator
from app.services.interview_session.controller_registry import ControllerRegistry
from app.services.question_generation.question_generator import QuestionGenerator
from app.services.repositories.user_repository import UserRepository
from app.services.session_fence.session_fence_store import LOCAL_SESSION_KEY, SessionFenceStore

SESSION_HEADER = "X-Session-Id"
SESSION_COOKIE = LOCAL_SESSION_KEY

_feedback_generator: Optional[FeedbackGenerator] = None
_question_generator: Optional[QuestionGenerator] = None
_controller_registry: Optional[ControllerRegistry] = None


def get_feedback_generator() -> FeedbackGenerator:
    global _feedback_generator
    if _feedback_generator is None:
        _feedback_generator = FeedbackGenerator()
    return _feedback_generator


def get_question_generator() -> QuestionGenerator:
    global _question_generator
    if _question_generator is None:
        _question_generator = QuestionGenerator()
    return _question_generator


def get_controller_registry(store: DocumentStore = Depends(get_document_store)) -> ControllerRegistry:
    global _controller_registry
    if _controller_registry is None:
        _controller_registry = ControllerRegistry(store, feedback_generator_factory=get_feedback_generator)
    return _controller_registry


def reset_controller_registry() -> None:
    """Close every live controller and forget the registry (shutdown)."""
    global _controller_registry
    if _controller_registry is not None:
        _controller_registry.close_all()
        _controller_registry = None


def get_user_repository(store: DocumentStore = Depends(get_document_store)) -> UserRepository:
    return UserRepository(store)


async def get_request_context(
    token: dict = Depends(get_current_user_token),
    users: UserRepository = Depends(get_user_repository),
) -> RequestContext:
    """Authenticated user plus profile; the user record is created on first sign-in."""
    uid = token["uid"]
    profile = await users.ensure_profile(uid, email=token.get("email"), name=token.get("name"))
    return RequestContext(uid=uid, token=token, profile=profile)


def get_client_storage(request: Request) -> Dict[str, str]:
    """The client's cached session id, taken from the header or the cookie."""
    storage: Dict[str, str] = {}
    session_id = request.headers.get(SESSION_HEADER) or request.cookies.get(SESSION_COOKIE)
    if session_id:
        storage[LOCAL_SESSION_KEY] = session_id
    return storage


def get_session_fence(
    store: DocumentStore = Depends(get_document_store),
    client_storage: Dict[str, str] = Depends(get_client_storage),
) -> SessionFenceStore:
    return SessionFenceStore(store, client_storage)


async def require_active_session(
    context: RequestContext = Depends(get_request_context),
    fence: SessionFenceStore = Depends(get_session_fence),
) -> RequestContext:
    """
    Guard for routes that need the caller's session to be the active one.

    Raises:
        SessionInvalidated: If the caller was signed in elsewhere or has no session
    """
    if not await fence.validate_session(context.uid, fence.get_local_session_id()):
        logger.info(f"[SessionFence] Rejected request from inactive session of {context.uid}")
        raise SessionInvalidated()
    return context


def sync_session_cookie(response: Response, fence: SessionFenceStore) -> None:
    """Mirror the fence's client storage into the ``sessionId`` cookie."""
    session_id = fence.get_local_session_id()
    if session_id:
        response.set_cookie(SESSION_COOKIE, session_id, httponly=True, samesite="lax")
    else:
        response.delete_cookie(SESSION_COOKIE)
