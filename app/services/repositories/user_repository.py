"""User Repository Module

This module provides persistence operations for user records stored at
``users/{uid}`` in the document store: profile reads and partial updates, the
first-sign-in record creation, and the lifetime interview counter.

Dependencies:
- loguru: For logging operations.
- app.database: For the document store.
- app.schemas.auth.user_auth_schemas: For the UserProfile model.
- app.errors.exceptions: For custom exception handling.

Author: @kcaparas1630
"""

from datetime import datetime, timezone
from typing import Optional
from loguru import logger
from app.database import DocumentStore
from app.schemas.auth.user_auth_schemas import UserProfile, ProfileUpdate
from app.errors.exceptions import UserNotFound


def user_path(uid: str) -> str:
    return f"users/{uid}"


def utc_timestamp() -> str:
    return datetime.now(timezone.utc).isoformat()


class UserRepository:
    """Reads and writes user documents."""

    def __init__(self, store: DocumentStore):
        self.store = store

    async def get_profile(self, uid: str) -> Optional[UserProfile]:
        data = await self.store.get(user_path(uid))
        if data is None:
            return None
        return UserProfile.model_validate(data)

    async def ensure_profile(self, uid: str, email: Optional[str] = None, name: Optional[str] = None) -> UserProfile:
        """Return the user's profile, creating the record on first sign-in."""
        profile = await self.get_profile(uid)
        if profile is not None:
            return profile

        profile = UserProfile(uid=uid, email=email, name=name)
        await self.store.set(user_path(uid), profile.model_dump(mode="json", by_alias=True))
        logger.info(f"Created user record for {uid}")
        return profile

    async def update_profile(self, uid: str, updates: ProfileUpdate) -> UserProfile:
        """Apply a partial profile update.

        Raises:
            UserNotFound: If the user record does not exist
        """
        if await self.get_profile(uid) is None:
            raise UserNotFound(uid)

        fields = updates.model_dump(mode="json", by_alias=True, exclude_unset=True)
        fields["updatedAt"] = utc_timestamp()
        data = await self.store.update(user_path(uid), fields)
        return UserProfile.model_validate(data)

    async def increment_interviews_taken(self, uid: str) -> int:
        """Add exactly one to the user's lifetime interview counter."""
        total = await self.store.increment(
            user_path(uid),
            "interviewsTaken",
            1,
            extra_fields={"updatedAt": utc_timestamp()},
        )
        logger.info(f"User {uid} has now taken {total} interviews")
        return total
