"""
Auth Backend Interface
======================
Capability interface implemented by the local mock backend and by the
Supabase adapter. The orchestrator only talks to this interface; which
implementation it receives is decided once at startup by
``auth_factory.create_auth_backend``.

Also defines ``Subscription``, the cancellable handle returned for
push-based notifications (provider session changes, state observers).
"""

from __future__ import annotations

from abc import ABC, abstractmethod
from typing import Any, Callable, Optional

from app.schemas.auth import LoginForm, RegisterForm
from app.schemas.user import User


# Called with (event_name, provider_session_or_None)
SessionListener = Callable[[str, Any], None]


class Subscription:
    """Cancellable subscription handle.

    ``unsubscribe()`` runs the release callback at most once; later calls
    are no-ops.
    """

    def __init__(self, release: Callable[[], None]):
        self._release: Optional[Callable[[], None]] = release

    @property
    def active(self) -> bool:
        return self._release is not None

    def unsubscribe(self) -> None:
        release, self._release = self._release, None
        if release is not None:
            release()


class AuthBackend(ABC):
    """Abstract base class for auth backends.

    Subclasses must implement login, register, restore, logout and
    update_user. Push notifications and shutdown are optional.
    """

    #: Short name used in logs and health output.
    mode: str = "base"

    @abstractmethod
    async def login(self, form: LoginForm) -> User:
        """Authenticate with email/password and return the user."""

    @abstractmethod
    async def register(self, form: RegisterForm) -> User:
        """Create an account and return the signed-in user."""

    @abstractmethod
    async def restore(self) -> Optional[User]:
        """Return the user of the current session, if any."""

    @abstractmethod
    def logout(self) -> None:
        """Drop the current session.

        Synchronous for the caller. Remote sign-out, where one exists, is
        best-effort and never raises.
        """

    @abstractmethod
    async def update_user(self, user: User) -> None:
        """Persist an edited user."""

    def watch(self, listener: SessionListener) -> Optional[Subscription]:
        """Subscribe to session changes.

        Returns None when the backend has no push notifications.
        """
        return None

    async def close(self) -> None:
        """Wait for or cancel outstanding background work."""
        return None
