"""
GymTracker Pro - Supabase Auth Adapter.

Bridges Supabase Auth and the ``profiles`` table to the domain ``User``:
- Password sign-in / sign-up with user metadata
- Session retrieval and session-change subscription
- Profile row <-> ``UserProfile`` mapping
- Best-effort (non-blocking) sign-out and goal patch
"""

import asyncio
from datetime import datetime, timezone
from enum import Enum
from typing import Any, Dict, Optional, Set
import logging

from pydantic import ValidationError as PydanticValidationError

from app.schemas.auth import LoginForm, RegisterForm
from app.schemas.user import Goal, User, UserProfile
from app.services.auth_backend import AuthBackend, SessionListener, Subscription
from app.utils.errors import (
    ConfirmationRequired,
    EmailAlreadyInUse,
    InvalidCredentials,
    InvalidSession,
    ProviderError,
)

logger = logging.getLogger(__name__)

PROFILES_TABLE = "profiles"

# PostgREST code for ".single()" matching zero rows
ROW_NOT_FOUND = "PGRST116"

INVALID_LOGIN_MESSAGE = "Invalid login credentials"
DUPLICATE_EMAIL_MARKERS = ("already registered", "already exists")


def _error_message(exc: Exception) -> str:
    """Message carried by a provider error (``message`` attribute or str)."""
    return getattr(exc, "message", None) or str(exc)


def _blank_to_none(value: Any) -> Any:
    if value is None:
        return None
    if isinstance(value, (str, list)) and len(value) == 0:
        return None
    return value


def _field_or_none(field: str, value: Any) -> Any:
    """Validate one ``UserProfile`` field; values it rejects become unset."""
    value = _blank_to_none(value)
    if value is None:
        return None
    try:
        return getattr(UserProfile.model_validate({field: value}), field)
    except PydanticValidationError:
        logger.warning(f"Invalid {field} value in profile row: {value!r}")
        return None


def _enum_value(value: Any) -> Any:
    return value.value if isinstance(value, Enum) else value


# UserProfile field -> profiles column
PROFILE_COLUMNS = {
    "birth_date": "birth_date",
    "height": "height_cm",
    "goal": "goal",
    "gender": "gender",
    "avatar_url": "avatar_url",
    "plan_status": "plan_status",
    "weight_goal": "weight_goal_kg",
    "weekly_frequency": "weekly_frequency",
    "notes": "notes",
    "injuries": "injuries",
}


def profile_row_to_user_profile(row: Dict[str, Any]) -> UserProfile:
    """
    Map a ``profiles`` row (snake_case columns) to a ``UserProfile``.

    Never rejects a row: absent, empty or invalid columns become unset
    fields, invalid ones with a warning.
    """
    return UserProfile(**{
        field: _field_or_none(field, row.get(column))
        for field, column in PROFILE_COLUMNS.items()
    })


def user_to_profile_row(user: User) -> Dict[str, Any]:
    """
    Map a ``User`` to the column values written on profile updates.

    Every profile column is present; unset fields are written as null.
    """
    profile = user.profile or UserProfile()
    return {
        "name": user.name,
        "email": user.email,
        "goal": _enum_value(profile.goal),
        "height_cm": profile.height,
        "weight_goal_kg": profile.weight_goal,
        "weekly_frequency": profile.weekly_frequency,
        "plan_status": _enum_value(profile.plan_status),
        "notes": _blank_to_none(profile.notes),
        "injuries": _blank_to_none(profile.injuries),
        "avatar_url": _blank_to_none(profile.avatar_url),
        "gender": _enum_value(profile.gender),
        "birth_date": _blank_to_none(profile.birth_date),
    }


class SupabaseAuthAdapter(AuthBackend):
    """
    Auth backend delegating to Supabase.

    Expects an async Supabase client (``supabase.acreate_client``) or any
    object exposing the same ``auth`` and ``table`` surface.
    """

    mode = "supabase"

    def __init__(self, client):
        """
        Args:
            client: Async Supabase client.
        """
        self.client = client
        self._background: Set[asyncio.Task] = set()

    # ── Provider → domain ─────────────────────────────────────────

    async def fetch_profile_row(self, user_id: str) -> Optional[Dict[str, Any]]:
        """
        Fetch the ``profiles`` row of ``user_id``.

        A missing row means "no profile yet". Other fetch errors are logged
        and also treated as no profile.
        """
        try:
            response = await (
                self.client.table(PROFILES_TABLE)
                .select("*")
                .eq("id", user_id)
                .single()
                .execute()
            )
        except Exception as e:
            if getattr(e, "code", None) != ROW_NOT_FOUND:
                logger.warning(f"Failed to fetch profile for {user_id}: {_error_message(e)}")
            return None
        return response.data if response is not None else None

    async def build_user(self, provider_user: Any, fallback_name: Optional[str] = None) -> User:
        """Assemble the domain ``User`` from a provider user and its profile row."""
        metadata = getattr(provider_user, "user_metadata", None) or {}
        name = metadata.get("name") or fallback_name or provider_user.email
        created_at = getattr(provider_user, "created_at", None) or datetime.now(timezone.utc)

        row = await self.fetch_profile_row(provider_user.id)
        return User(
            id=provider_user.id,
            email=provider_user.email,
            name=name,
            created_at=created_at,
            profile=profile_row_to_user_profile(row) if row else None,
        )

    # ── AuthBackend ───────────────────────────────────────────────

    async def login(self, form: LoginForm) -> User:
        """
        Sign in with email and password.

        Raises:
            InvalidCredentials: Provider rejected the credentials.
            InvalidSession: Provider user has no email.
            ProviderError: Any other provider error, message forwarded.
        """
        try:
            response = await self.client.auth.sign_in_with_password({
                "email": form.email,
                "password": form.password,
            })
        except Exception as e:
            message = _error_message(e)
            if message == INVALID_LOGIN_MESSAGE:
                raise InvalidCredentials() from e
            raise ProviderError(message=message) from e

        provider_user = getattr(response, "user", None)
        if provider_user is None or not getattr(provider_user, "email", None):
            raise InvalidSession()

        user = await self.build_user(provider_user)
        logger.info(f"User logged in: {user.email}")
        return user

    async def register(self, form: RegisterForm) -> User:
        """
        Sign up with name and optional goal as user metadata.

        Raises:
            EmailAlreadyInUse: Provider reports the email as registered.
            InvalidSession: Provider returned no user email.
            ConfirmationRequired: Account created, email confirmation pending.
            ProviderError: Any other provider error, message forwarded.
        """
        goal = form.profile.goal if form.profile else None
        try:
            response = await self.client.auth.sign_up({
                "email": form.email,
                "password": form.password,
                "options": {
                    "data": {
                        "name": form.name,
                        "goal": _enum_value(goal),
                    },
                },
            })
        except Exception as e:
            message = _error_message(e)
            if any(marker in message for marker in DUPLICATE_EMAIL_MARKERS):
                raise EmailAlreadyInUse() from e
            raise ProviderError(message=message) from e

        provider_user = getattr(response, "user", None)
        if provider_user is None or not getattr(provider_user, "email", None):
            raise InvalidSession(
                message="Account created, but its data could not be loaded. Confirm your email if required."
            )
        if getattr(response, "session", None) is None:
            logger.info(f"Sign-up for {provider_user.email} awaiting email confirmation")
            raise ConfirmationRequired()

        user = await self.build_user(provider_user, fallback_name=form.name)
        if goal is not None:
            profile = user.profile or UserProfile()
            user = user.model_copy(update={"profile": profile.model_copy(update={"goal": goal})})
            self.patch_goal_best_effort(user.id, goal)

        logger.info(f"New user registered: {user.email}")
        return user

    async def get_session(self) -> Optional[User]:
        """Return the user of the provider's current session, if any."""
        session = await self.client.auth.get_session()
        provider_user = getattr(session, "user", None) if session else None
        if provider_user is None or not getattr(provider_user, "email", None):
            return None
        return await self.build_user(provider_user)

    async def restore(self) -> Optional[User]:
        return await self.get_session()

    def logout(self) -> None:
        """Start provider sign-out without waiting for it."""
        self.sign_out_best_effort()

    async def update_user(self, user: User) -> None:
        """Write name, email and all profile columns to the ``profiles`` row."""
        await (
            self.client.table(PROFILES_TABLE)
            .update(user_to_profile_row(user))
            .eq("id", user.id)
            .execute()
        )
        logger.info(f"Profile updated for {user.id}")

    def watch(self, listener: SessionListener) -> Subscription:
        """Subscribe ``listener`` to provider session changes."""
        provider_subscription = self.client.auth.on_auth_state_change(listener)
        return Subscription(provider_subscription.unsubscribe)

    async def close(self) -> None:
        """Wait for outstanding best-effort operations."""
        pending = list(self._background)
        if pending:
            await asyncio.gather(*pending, return_exceptions=True)

    # ── Best-effort operations ────────────────────────────────────

    def _spawn(self, coro) -> Optional[asyncio.Task]:
        try:
            loop = asyncio.get_running_loop()
        except RuntimeError:
            # Called from synchronous code: nothing can run the call
            coro.close()
            logger.warning(f"No running event loop - skipped {coro.__qualname__}")
            return None
        task = loop.create_task(coro)
        self._background.add(task)
        task.add_done_callback(self._background.discard)
        return task

    def sign_out_best_effort(self) -> Optional[asyncio.Task]:
        """Schedule provider sign-out. Failures are logged, never raised."""
        return self._spawn(self._sign_out())

    def patch_goal_best_effort(self, user_id: str, goal: Goal) -> Optional[asyncio.Task]:
        """Schedule the goal update of ``user_id``'s profile row. Failures are logged, never raised."""
        return self._spawn(self._patch_goal(user_id, goal))

    async def _sign_out(self) -> None:
        try:
            await self.client.auth.sign_out()
        except Exception as e:
            logger.warning(f"Provider sign-out failed: {_error_message(e)}")

    async def _patch_goal(self, user_id: str, goal: Goal) -> None:
        try:
            await (
                self.client.table(PROFILES_TABLE)
                .update({"goal": _enum_value(goal)})
                .eq("id", user_id)
                .execute()
            )
        except Exception as e:
            logger.warning(f"Goal patch failed for {user_id}: {_error_message(e)}")

    # ── Diagnostics ───────────────────────────────────────────────

    async def healthcheck(self) -> Dict[str, Any]:
        """Check that the ``profiles`` table is reachable."""
        try:
            response = await (
                self.client.table(PROFILES_TABLE)
                .select("id", count="exact")
                .limit(1)
                .execute()
            )
        except Exception as e:
            return {"ok": False, "message": f"Supabase error: {_error_message(e)}"}
        count = getattr(response, "count", None) or 0
        return {"ok": True, "message": f"Connection OK. profiles table reachable ({count} rows)."}
