import asyncio
import json

import pytest

from doorknocking_tracker.errors import AuthenticationError
from doorknocking_tracker.models import UserProfile
from doorknocking_tracker.providers.demo import DEMO_USER, DemoIdentityProvider
from doorknocking_tracker.session import STORAGE_KEY, SessionStore
from doorknocking_tracker.storage import MemoryKeyValueStore


class GatedProvider(DemoIdentityProvider):
    """Provider whose sign-in responses are released by the test."""

    def __init__(self):
        super().__init__()
        self.pending = []

    async def sign_in(self):
        gate = asyncio.get_running_loop().create_future()
        self.pending.append(gate)
        return await gate


class BrokenSignOutProvider(DemoIdentityProvider):
    def sign_out(self):
        raise ConnectionError("offline")


def test_sign_in_sets_and_persists_profile():
    store = MemoryKeyValueStore()
    session = SessionStore(DemoIdentityProvider(), store)
    user = asyncio.run(session.sign_in())
    assert user == DEMO_USER
    assert session.is_signed_in
    assert not session.is_loading
    assert json.loads(store.get(STORAGE_KEY))["email"] == DEMO_USER.email


def test_sign_in_failure_sets_message_and_raises():
    session = SessionStore(DemoIdentityProvider(reject_reason="network down"), MemoryKeyValueStore())
    with pytest.raises(AuthenticationError):
        asyncio.run(session.sign_in())
    assert session.error_message == "Sign in failed: network down"
    assert not session.is_signed_in
    assert not session.is_loading


def test_sign_in_without_profile_is_an_error():
    session = SessionStore(DemoIdentityProvider(user=None), MemoryKeyValueStore())
    with pytest.raises(AuthenticationError):
        asyncio.run(session.sign_in())
    assert session.error_message == "Failed to get user information"


def test_saved_profile_is_loaded_on_construction():
    user = UserProfile(id="u9", email="nine@example.com", display_name="Nine")
    store = MemoryKeyValueStore({STORAGE_KEY: json.dumps(user.to_dict())})
    session = SessionStore(DemoIdentityProvider(), store)
    assert session.current_user == user


def test_corrupt_saved_profile_is_discarded():
    store = MemoryKeyValueStore({STORAGE_KEY: "garbage"})
    session = SessionStore(DemoIdentityProvider(), store)
    assert session.current_user is None
    assert store.get(STORAGE_KEY) is None


def test_start_restores_previous_sign_in():
    session = SessionStore(DemoIdentityProvider(remembered=True), MemoryKeyValueStore())
    assert asyncio.run(session.start()) == DEMO_USER
    assert session.is_signed_in


def test_start_without_previous_sign_in_is_noop():
    session = SessionStore(DemoIdentityProvider(remembered=False), MemoryKeyValueStore())
    assert asyncio.run(session.start()) is None
    assert not session.is_signed_in


def test_failed_restore_discards_saved_profile():
    store = MemoryKeyValueStore({STORAGE_KEY: json.dumps(DEMO_USER.to_dict())})
    provider = DemoIdentityProvider(remembered=True, reject_reason="token expired")
    session = SessionStore(provider, store)
    assert asyncio.run(session.restore_previous_sign_in()) is None
    assert session.current_user is None
    assert store.get(STORAGE_KEY) is None
    assert "token expired" in session.error_message


def test_restore_with_no_session_discards_saved_profile():
    store = MemoryKeyValueStore({STORAGE_KEY: json.dumps(DEMO_USER.to_dict())})
    session = SessionStore(DemoIdentityProvider(remembered=False), store)
    assert asyncio.run(session.restore_previous_sign_in()) is None
    assert store.get(STORAGE_KEY) is None


def test_sign_out_clears_even_when_remote_fails():
    store = MemoryKeyValueStore()
    session = SessionStore(BrokenSignOutProvider(), store)
    asyncio.run(session.sign_in())
    session.sign_out()
    assert session.current_user is None
    assert not session.is_signed_in
    assert store.get(STORAGE_KEY) is None


def test_stale_sign_in_response_is_discarded():
    provider = GatedProvider()
    session = SessionStore(provider, MemoryKeyValueStore())
    older = UserProfile(id="old", email="old@example.com", display_name="Old")
    newer = UserProfile(id="new", email="new@example.com", display_name="New")

    async def scenario():
        first = asyncio.ensure_future(session.sign_in())
        await asyncio.sleep(0)
        second = asyncio.ensure_future(session.sign_in())
        await asyncio.sleep(0)
        provider.pending[1].set_result(newer)
        provider.pending[0].set_result(older)
        return await first, await second

    first, second = asyncio.run(scenario())
    assert first is None
    assert second == newer
    assert session.current_user == newer


def test_sign_out_drops_in_flight_sign_in():
    provider = GatedProvider()
    session = SessionStore(provider, MemoryKeyValueStore())

    async def scenario():
        pending = asyncio.ensure_future(session.sign_in())
        await asyncio.sleep(0)
        session.sign_out()
        provider.pending[0].set_result(DEMO_USER)
        return await pending

    assert asyncio.run(scenario()) is None
    assert session.current_user is None
    assert not session.is_signed_in


def test_handle_callback_delegates_to_provider():
    session = SessionStore(DemoIdentityProvider(), MemoryKeyValueStore())
    assert session.handle_callback("doorknocking://oauth?code=1")
    assert not session.handle_callback("https://example.com")
