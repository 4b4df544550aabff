"""Firebase Authentication Service Module

This module verifies Firebase ID tokens and exposes the FastAPI dependencies that
turn the ``Authorization`` header into an authenticated user.

The Firebase Admin SDK is initialized on the first token verification, not at
import, so the application can start (and be tested) without credentials.

Dependencies:
- firebase_admin: For Firebase token verification.
- loguru: For logging operations.
- app.errors.exceptions: For custom exception handling.

Author: @kcaparas1630
"""

import os
import threading
from typing import Optional, Tuple
import firebase_admin
from firebase_admin import auth, credentials
from fastapi import Request
from dotenv import load_dotenv
from loguru import logger
from app.errors.exceptions import InternalServerError, Unauthorized

load_dotenv()

_init_lock = threading.Lock()


def _firebase_initialized() -> bool:
    try:
        firebase_admin.get_app()
        return True
    except ValueError:
        return False


def initialize_firebase() -> None:
    """Initialize the default Firebase app once.

    Uses the service-account file at ``FIREBASE_CREDENTIALS_PATH`` when set,
    otherwise the application default credentials.

    Raises:
        FileNotFoundError: If the configured credentials file does not exist
    """
    if _firebase_initialized():
        return
    with _init_lock:
        if _firebase_initialized():
            return
        file_path = os.getenv("FIREBASE_CREDENTIALS_PATH")
        if file_path:
            if not os.path.exists(file_path):
                logger.error(f"Firebase credentials file not found at {file_path}")
                raise FileNotFoundError(f"Firebase credentials file not found at {file_path}")
            firebase_admin.initialize_app(credentials.Certificate(file_path))
        else:
            firebase_admin.initialize_app()
        logger.info("Firebase Admin SDK initialized")


def verify_id_token(id_token: str) -> Tuple[Optional[dict], Optional[str]]:
    """Verify Firebase ID token and extract user information.

    Args:
        id_token (str): Firebase ID token to verify

    Returns:
        tuple: (decoded_token, uid) if valid, (None, None) if invalid

    Note:
        Checks if token is revoked using check_revoked=True parameter
    """
    initialize_firebase()
    try:
        decoded_token = auth.verify_id_token(id_token, check_revoked=True)
        return decoded_token, decoded_token["uid"]
    except (auth.InvalidIdTokenError, auth.ExpiredIdTokenError, auth.RevokedIdTokenError, auth.UserDisabledError) as e:
        logger.info(f"Rejected Firebase ID token: {e}")
        return None, None
    except auth.CertificateFetchError as e:
        logger.error(f"Could not fetch Firebase certificates: {e}")
        raise InternalServerError("Authentication service unavailable.") from e


def get_bearer_token(request: Request) -> str:
    auth_header = request.headers.get("Authorization")
    if not auth_header or not auth_header.startswith("Bearer "):
        raise Unauthorized("Missing or invalid authorization header")
    return auth_header.split(" ", 1)[1].strip()


def get_current_user_token(request: Request) -> dict:
    """Extract and verify the Firebase ID token from the request headers.

    This function serves as a FastAPI dependency to authenticate users.

    Returns:
        dict: Decoded token claims (``uid``, ``email``, ``email_verified``, ...)

    Raises:
        Unauthorized: If the header is missing or the token is invalid, expired or revoked

    Example:
        Used as FastAPI dependency:
        @app.get("/protected")
        async def protected_route(token: dict = Depends(get_current_user_token)):
    """
    decoded_token, uid = verify_id_token(get_bearer_token(request))
    if not uid:
        raise Unauthorized("Invalid or expired token")
    return decoded_token


def get_current_user_uid(request: Request) -> str:
    return get_current_user_token(request)["uid"]
