"""
Session Fence Store Module

This module keeps at most one logical active login session per user. The user
record at ``users/{uid}`` holds the active session id; the client keeps its own
copy. A client whose copy no longer matches has been signed in somewhere else.

The fence is cooperative, not a security boundary: creating a session simply
overwrites the stored id (last writer wins), with no lock and no transaction.
Two near-simultaneous sign-ins race and the later write wins, which is enough
to detect "logged in elsewhere" and is not meant to serve as a mutex.

Dependencies:
- loguru: For logging operations.
- app.database: For the document store.
- app.services.session_fence.identity: For session ids and device fingerprints.

Author: @kcaparas1630
"""

from typing import MutableMapping, Optional
from loguru import logger
from app.database import DocumentStore
from app.services.repositories.user_repository import user_path, utc_timestamp
from app.services.session_fence.identity import generate_session_id, get_device_fingerprint

LOCAL_SESSION_KEY = "sessionId"

FENCE_FIELDS = ("activeSessionId", "sessionDeviceInfo", "sessionStartTime", "sessionLastActive")


class SessionFenceStore:
    """
    Creates, validates and clears the per-user session fence.

    Attributes:
        store (DocumentStore): Backing document store holding user records.
        client_storage (MutableMapping[str, str]): The client's persistent
            storage. Over HTTP this is the ``sessionId`` cookie jar of the
            current request.
    """

    def __init__(self, store: DocumentStore, client_storage: Optional[MutableMapping[str, str]] = None):
        self.store = store
        self.client_storage = client_storage if client_storage is not None else {}

    async def create_session(self, user_id: str, user_agent: Optional[str] = None) -> str:
        """
        Start a new session for the user, replacing whatever session was active.

        Args:
            user_id (str): Owner of the session.
            user_agent (Optional[str]): Client User-Agent used for the device fingerprint.

        Returns:
            str: The new session id, also written to client storage.

        Raises:
            DocumentNotFound: If the user record does not exist.
        """
        logger.info(f"[SessionFence] Creating new session for user: {user_id}")
        session_id = generate_session_id()
        now = utc_timestamp()

        try:
            await self.store.update(user_path(user_id), {
                "activeSessionId": session_id,
                "sessionDeviceInfo": get_device_fingerprint(user_agent),
                "sessionStartTime": now,
                "sessionLastActive": now,
            })
        except Exception as e:
            logger.error(f"[SessionFence] Error creating session for {user_id}: {e}")
            raise

        self.client_storage[LOCAL_SESSION_KEY] = session_id
        logger.info(f"[SessionFence] Session created successfully: {session_id}")
        return session_id

    async def validate_session(self, user_id: str, local_session_id: Optional[str]) -> bool:
        """
        Check the client's session id against the stored one. Fails closed.

        Returns False when the local id is missing, the user record or stored id
        is missing, the ids differ, or the store cannot be read. On a match the
        ``sessionLastActive`` timestamp is refreshed.

        Args:
            user_id (str): Owner of the session.
            local_session_id (Optional[str]): The id the client holds.

        Returns:
            bool: True only when both ids are present and equal.
        """
        if not local_session_id:
            logger.info("[SessionFence] No local session ID found")
            return False

        try:
            data = await self.store.get(user_path(user_id))
            if data is None:
                logger.info(f"[SessionFence] User document not found: {user_id}")
                return False

            active_session_id = data.get("activeSessionId")
            if not active_session_id:
                logger.info(f"[SessionFence] No active session stored for {user_id}")
                return False

            if active_session_id != local_session_id:
                logger.info(f"[SessionFence] Session mismatch. Local: {local_session_id}, stored: {active_session_id}")
                return False

            await self.store.update(user_path(user_id), {"sessionLastActive": utc_timestamp()})
            logger.debug(f"[SessionFence] Session validated successfully for {user_id}")
            return True

        except Exception as e:
            logger.error(f"[SessionFence] Error validating session for {user_id}: {e}")
            return False

    async def invalidate_session(self, user_id: str) -> None:
        """
        Clear the fence fields and the client's cached id (logout, forced sign-out).

        Raises:
            DocumentNotFound: If the user record does not exist.
        """
        logger.info(f"[SessionFence] Invalidating session for user: {user_id}")
        try:
            await self.store.update(user_path(user_id), {field: None for field in FENCE_FIELDS})
        except Exception as e:
            logger.error(f"[SessionFence] Error invalidating session for {user_id}: {e}")
            raise

        self.client_storage.pop(LOCAL_SESSION_KEY, None)
        logger.info("[SessionFence] Session invalidated successfully")

    def get_local_session_id(self) -> Optional[str]:
        return self.client_storage.get(LOCAL_SESSION_KEY)
