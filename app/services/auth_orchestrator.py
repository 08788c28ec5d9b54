"""
GymTracker Pro - Auth Orchestrator.

Single source of truth for the UI's authentication state. Holds an explicit
state value (anonymous / loading / authenticated), notifies observers on
every transition, and delegates all work to the ``AuthBackend`` chosen at
startup.
"""

import asyncio
from dataclasses import dataclass
from enum import Enum
from typing import Any, Callable, List, Optional, Set
import logging

from app.schemas.auth import LoginForm, RegisterForm
from app.schemas.user import User
from app.services.auth_backend import AuthBackend, Subscription

logger = logging.getLogger(__name__)


class AuthStatus(str, Enum):
    ANONYMOUS = "anonymous"
    LOADING = "loading"
    AUTHENTICATED = "authenticated"


@dataclass(frozen=True)
class AuthState:
    """
    Immutable snapshot of the authentication state.

    A ``loading`` state may still carry the previously authenticated user.
    """

    status: AuthStatus
    user: Optional[User] = None

    @property
    def is_loading(self) -> bool:
        return self.status == AuthStatus.LOADING

    @property
    def is_authenticated(self) -> bool:
        return self.status == AuthStatus.AUTHENTICATED

    @classmethod
    def for_user(cls, user: Optional[User]) -> "AuthState":
        if user is None:
            return cls(AuthStatus.ANONYMOUS)
        return cls(AuthStatus.AUTHENTICATED, user)


StateListener = Callable[[AuthState], None]


class AuthOrchestrator:
    """
    Authentication state machine exposed to the UI.

    Usage::

        orchestrator = AuthOrchestrator(backend)
        await orchestrator.start()
        await orchestrator.login(validate_form(LoginForm, data))
        ...
        await orchestrator.close()
    """

    def __init__(self, backend: AuthBackend):
        self.backend = backend
        self._state = AuthState(AuthStatus.LOADING)
        self._listeners: List[StateListener] = []
        self._provider_subscription: Optional[Subscription] = None
        self._pending: Set[asyncio.Task] = set()
        self._closed = False

    # ── State ─────────────────────────────────────────────────────

    @property
    def state(self) -> AuthState:
        return self._state

    @property
    def user(self) -> Optional[User]:
        return self._state.user

    @property
    def is_authenticated(self) -> bool:
        return self._state.is_authenticated

    @property
    def is_loading(self) -> bool:
        return self._state.is_loading

    def subscribe(self, listener: StateListener) -> Subscription:
        """Register ``listener`` for every subsequent state transition."""
        self._listeners.append(listener)

        def _release() -> None:
            if listener in self._listeners:
                self._listeners.remove(listener)

        return Subscription(_release)

    def _transition(self, state: AuthState) -> None:
        self._state = state
        for listener in list(self._listeners):
            listener(state)

    def set_user(self, user: Optional[User]) -> None:
        """Settle on authenticated (``user``) or anonymous (None)."""
        self._transition(AuthState.for_user(user))

    def _begin_loading(self) -> AuthState:
        previous = self._state
        self._transition(AuthState(AuthStatus.LOADING, previous.user))
        return previous

    def _settle_after_failure(self, previous: AuthState) -> None:
        # Restore whatever authentication the state had before the attempt
        self.set_user(previous.user if previous.is_authenticated else None)

    # ── Lifecycle ─────────────────────────────────────────────────

    async def start(self) -> AuthState:
        """
        Resolve the initial state.

        Subscribes to backend session changes when the backend supports
        them, then performs one restore. Both paths end in ``set_user``.
        """
        self._transition(AuthState(AuthStatus.LOADING))
        if self._provider_subscription is None:
            self._provider_subscription = self.backend.watch(self._on_session_change)

        try:
            user = await self.backend.restore()
        except Exception:
            self.set_user(None)
            raise
        self.set_user(user)
        logger.info(f"Auth started in {self.backend.mode} mode ({self._state.status.value})")
        return self._state

    async def close(self) -> None:
        """Release the provider subscription and pending notifications. Idempotent."""
        if self._closed:
            return
        self._closed = True
        if self._provider_subscription is not None:
            self._provider_subscription.unsubscribe()
            self._provider_subscription = None
        for task in list(self._pending):
            task.cancel()
        if self._pending:
            await asyncio.gather(*self._pending, return_exceptions=True)
        await self.backend.close()

    def _on_session_change(self, event: str, session: Any) -> None:
        provider_user = getattr(session, "user", None) if session else None
        if provider_user is not None and getattr(provider_user, "email", None):
            task = asyncio.get_running_loop().create_task(self._refresh_from_backend())
            self._pending.add(task)
            task.add_done_callback(self._pending.discard)
        else:
            self.set_user(None)

    async def _refresh_from_backend(self) -> None:
        try:
            user = await self.backend.restore()
        except Exception as e:
            logger.warning(f"Session refresh failed: {e}")
            return
        self.set_user(user)

    # ── Operations ────────────────────────────────────────────────

    async def login(self, form: LoginForm) -> User:
        """
        Sign in.

        Raises:
            Whatever the backend raises; the state falls back to its prior
            authentication before the error propagates.
        """
        previous = self._begin_loading()
        try:
            user = await self.backend.login(form)
        except Exception:
            self._settle_after_failure(previous)
            raise
        self.set_user(user)
        return user

    async def register(self, form: RegisterForm) -> User:
        """Create an account and sign in. Same failure semantics as ``login``."""
        previous = self._begin_loading()
        try:
            user = await self.backend.register(form)
        except Exception:
            self._settle_after_failure(previous)
            raise
        self.set_user(user)
        return user

    def logout(self) -> None:
        """Drop the session and become anonymous immediately."""
        email = self.user.email if self.user else "unknown"
        try:
            self.backend.logout()
        finally:
            self.set_user(None)
        logger.info(f"User logged out: {email}")

    async def update_user(self, user: User) -> None:
        """
        Persist ``user`` through the backend, then reflect it in the state.

        The state is only updated after the write succeeds and only when a
        user is currently set.
        """
        await self.backend.update_user(user)
        if self._state.user is not None:
            self._transition(AuthState(self._state.status, user))
