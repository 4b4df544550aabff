"""
Test Session Fence Module

Tests the session id and device fingerprint helpers and the per-user session
fence: overwrite on every sign-in and fail-closed validation.

Dependencies:
- pytest / pytest-asyncio: For testing framework
- app.services.session_fence: The modules being tested

Author: @kcaparas1630
"""

import re
import pytest
from app.errors.exceptions import DocumentNotFound
from app.services.repositories.user_repository import user_path
from app.services.session_fence import identity
from app.services.session_fence.identity import generate_session_id, get_device_fingerprint
from app.services.session_fence.session_fence_store import FENCE_FIELDS, LOCAL_SESSION_KEY, SessionFenceStore
from app.test.support import TEST_UID, seed_user

UUID4_PATTERN = re.compile(r"^[0-9a-f]{8}-[0-9a-f]{4}-4[0-9a-f]{3}-[89ab][0-9a-f]{3}-[0-9a-f]{12}$")

class TestIdentity:
    """Session ids and device fingerprints."""

    def test_session_id_is_uuid4(self):
        session_id = generate_session_id()
        assert len(session_id) == 36
        assert UUID4_PATTERN.match(session_id)

    def test_session_ids_are_unique(self):
        assert len({generate_session_id() for _ in range(200)}) == 200

    def test_session_id_fallback_without_os_random(self, monkeypatch):
        def no_random():
            raise NotImplementedError("no os random source")

        monkeypatch.setattr(identity.uuid, "uuid4", no_random)
        session_id = generate_session_id()
        assert UUID4_PATTERN.match(session_id)

    def test_fingerprint_known_values(self):
        assert get_device_fingerprint("a") == "device_61"
        assert get_device_fingerprint("ab") == "device_c21"
        assert get_device_fingerprint("") == "device_0"

    def test_fingerprint_is_stable(self):
        user_agent = "Mozilla/5.0 (X11; Linux x86_64) AppleWebKit/537.36 (KHTML, like Gecko) Chrome/120.0 Safari/537.36"
        first = get_device_fingerprint(user_agent)
        assert first == get_device_fingerprint(user_agent)
        assert re.match(r"^device_[0-9a-f]+$", first)

    def test_fingerprint_folds_to_32_bits(self):
        fingerprint = get_device_fingerprint("x" * 500)
        assert int(fingerprint[len("device_"):], 16) <= 0x80000000

    def test_fingerprint_without_user_agent(self):
        assert get_device_fingerprint(None) == "server-side"


class TestSessionFenceStore:
    """Creation overwrites, validation fails closed."""

    @pytest.mark.asyncio
    async def test_create_session_writes_fence_and_client_storage(self, store):
        await seed_user(store)
        fence = SessionFenceStore(store, {})

        session_id = await fence.create_session(TEST_UID, "a")

        data = await store.get(user_path(TEST_UID))
        assert data["activeSessionId"] == session_id
        assert data["sessionDeviceInfo"] == "device_61"
        assert data["sessionStartTime"] == data["sessionLastActive"]
        assert fence.get_local_session_id() == session_id
        assert fence.client_storage[LOCAL_SESSION_KEY] == session_id

    @pytest.mark.asyncio
    async def test_latest_session_wins(self, store):
        await seed_user(store)
        laptop = SessionFenceStore(store, {})
        phone = SessionFenceStore(store, {})

        first = await laptop.create_session(TEST_UID, "laptop")
        second = await phone.create_session(TEST_UID, "phone")

        assert first != second
        assert await laptop.validate_session(TEST_UID, first) is False
        assert await phone.validate_session(TEST_UID, second) is True

    @pytest.mark.asyncio
    async def test_create_session_for_missing_user_raises(self, store):
        fence = SessionFenceStore(store, {})
        with pytest.raises(DocumentNotFound):
            await fence.create_session("nobody")
        assert fence.get_local_session_id() is None

    @pytest.mark.asyncio
    async def test_validate_without_local_id(self, store):
        await seed_user(store)
        fence = SessionFenceStore(store, {})
        await fence.create_session(TEST_UID)
        assert await fence.validate_session(TEST_UID, None) is False
        assert await fence.validate_session(TEST_UID, "") is False

    @pytest.mark.asyncio
    async def test_validate_missing_user(self, store):
        fence = SessionFenceStore(store, {})
        assert await fence.validate_session("nobody", "some-id") is False

    @pytest.mark.asyncio
    async def test_validate_without_stored_session(self, store):
        await seed_user(store)
        fence = SessionFenceStore(store, {})
        assert await fence.validate_session(TEST_UID, "some-id") is False

    @pytest.mark.asyncio
    async def test_validate_fails_closed_on_store_error(self, store, monkeypatch):
        await seed_user(store)
        fence = SessionFenceStore(store, {})
        session_id = await fence.create_session(TEST_UID)

        async def broken_get(path):
            raise RuntimeError("database unavailable")

        monkeypatch.setattr(store, "get", broken_get)
        assert await fence.validate_session(TEST_UID, session_id) is False

    @pytest.mark.asyncio
    async def test_validate_refreshes_last_active(self, store):
        await seed_user(store)
        fence = SessionFenceStore(store, {})
        session_id = await fence.create_session(TEST_UID)
        await store.update(user_path(TEST_UID), {"sessionLastActive": "2000-01-01T00:00:00+00:00"})

        assert await fence.validate_session(TEST_UID, session_id) is True
        data = await store.get(user_path(TEST_UID))
        assert data["sessionLastActive"] != "2000-01-01T00:00:00+00:00"

    @pytest.mark.asyncio
    async def test_invalidate_clears_everything(self, store):
        await seed_user(store)
        fence = SessionFenceStore(store, {})
        session_id = await fence.create_session(TEST_UID, "a")

        await fence.invalidate_session(TEST_UID)

        data = await store.get(user_path(TEST_UID))
        assert all(data[field] is None for field in FENCE_FIELDS)
        assert fence.get_local_session_id() is None
        assert await fence.validate_session(TEST_UID, session_id) is False

    @pytest.mark.asyncio
    async def test_invalidate_missing_user_raises(self, store):
        fence = SessionFenceStore(store, {LOCAL_SESSION_KEY: "cached"})
        with pytest.raises(DocumentNotFound):
            await fence.invalidate_session("nobody")
        assert fence.get_local_session_id() == "cached"
