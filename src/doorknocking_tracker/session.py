from __future__ import annotations

import logging
from typing import Optional, Protocol

from .errors import AuthenticationError, PersistenceError
from .models import UserProfile
from .storage import KeyValueStore, load_json, save_json

logger = logging.getLogger("dkt.session")

STORAGE_KEY = "SavedUser"


class IdentityProvider(Protocol):
    """Third-party sign-in SDK boundary.

    ``sign_in`` and ``restore_session`` raise ``AuthenticationError`` when the
    provider rejects the request or cannot be reached.
    """

    name: str

    async def sign_in(self) -> Optional[UserProfile]:
        ...

    async def restore_session(self) -> Optional[UserProfile]:
        ...

    def has_previous_sign_in(self) -> bool:
        ...

    def sign_out(self) -> None:
        ...

    def handle_callback(self, url: str) -> bool:
        ...


class SessionStore:
    """Holds at most one signed-in profile, mirrored into local storage.

    Each provider call is tagged with a generation number. A response that
    arrives after a newer call (or a sign out) was issued is dropped.
    """

    def __init__(self, provider: IdentityProvider, store: KeyValueStore) -> None:
        self.provider = provider
        self._store = store
        self.current_user: Optional[UserProfile] = None
        self.is_signed_in = False
        self.is_loading = False
        self.error_message: Optional[str] = None
        self._generation = 0
        self._load_saved_user()

    def _next_generation(self) -> int:
        self._generation += 1
        return self._generation

    def _is_stale(self, generation: int) -> bool:
        return generation != self._generation

    def _load_saved_user(self) -> None:
        try:
            raw = load_json(self._store, STORAGE_KEY)
            if raw is None:
                return
            self.current_user = UserProfile.from_dict(raw)
        except PersistenceError as exc:
            logger.error("failed to load saved user: %s", exc.message)
            self._clear_saved_user()

    def _save_user(self, user: UserProfile) -> None:
        try:
            save_json(self._store, STORAGE_KEY, user.to_dict())
        except PersistenceError as exc:
            logger.error("failed to save user: %s", exc.message)

    def _clear_saved_user(self) -> None:
        self._store.delete(STORAGE_KEY)
        self.current_user = None

    def _accept(self, user: UserProfile) -> None:
        self.current_user = user
        self.is_signed_in = True
        self.error_message = None
        self._save_user(user)

    async def start(self) -> Optional[UserProfile]:
        """Restore the previous sign-in when the provider remembers one."""
        if not self.provider.has_previous_sign_in():
            logger.info("no previous sign in found")
            return None
        return await self.restore_previous_sign_in()

    async def sign_in(self) -> Optional[UserProfile]:
        generation = self._next_generation()
        self.is_loading = True
        self.error_message = None
        try:
            user = await self.provider.sign_in()
        except AuthenticationError as exc:
            if self._is_stale(generation):
                logger.debug("dropping stale sign in failure (generation %s)", generation)
                return None
            self.is_loading = False
            self.error_message = f"Sign in failed: {exc.message}"
            logger.warning("sign in failed: %s", exc.message)
            raise
        if self._is_stale(generation):
            logger.debug("dropping stale sign in response (generation %s)", generation)
            return None
        self.is_loading = False
        if user is None:
            self.error_message = "Failed to get user information"
            raise AuthenticationError(self.error_message)
        self._accept(user)
        logger.info("signed in via %s", self.provider.name)
        return user

    async def restore_previous_sign_in(self) -> Optional[UserProfile]:
        generation = self._next_generation()
        self.is_loading = True
        try:
            user = await self.provider.restore_session()
        except AuthenticationError as exc:
            if self._is_stale(generation):
                return None
            self.is_loading = False
            self.error_message = f"Failed to restore sign in: {exc.message}"
            logger.warning("failed to restore sign in: %s", exc.message)
            self._clear_saved_user()
            self.is_signed_in = False
            return None
        if self._is_stale(generation):
            logger.debug("dropping stale restore response (generation %s)", generation)
            return None
        self.is_loading = False
        if user is None:
            logger.info("no user found during restore")
            self._clear_saved_user()
            self.is_signed_in = False
            return None
        self._accept(user)
        logger.info("restored sign in via %s", self.provider.name)
        return user

    def sign_out(self) -> None:
        self._next_generation()
        try:
            self.provider.sign_out()
        except Exception:
            logger.warning("remote sign out failed; clearing local session", exc_info=True)
        self.is_signed_in = False
        self.is_loading = False
        self._clear_saved_user()
        logger.info("signed out")

    def handle_callback(self, url: str) -> bool:
        handled = bool(self.provider.handle_callback(url))
        logger.debug("callback handled=%s", handled)
        return handled

    def to_dict(self) -> dict:
        return {
            "is_signed_in": self.is_signed_in,
            "is_loading": self.is_loading,
            "error_message": self.error_message,
            "user": self.current_user.to_dict() if self.current_user else None,
        }
