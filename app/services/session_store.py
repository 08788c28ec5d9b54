"""
GymTracker Pro - Session Store.

Persists the signed-in ``AuthSession`` of the local auth backend:
- Serialized record under a fixed storage key
- Fixed validity window computed when the session is created
- Lazy expiry: expired or corrupt records are cleared on read
"""

import logging
import uuid
from datetime import datetime, timedelta, timezone
from typing import Callable, Optional

from pydantic import ValidationError as PydanticValidationError

from app.schemas.auth import AuthSession
from app.schemas.user import User
from app.services.storage import KeyValueStorage

logger = logging.getLogger(__name__)

SESSION_KEY = "gymtracker_session"
SESSION_DAYS = 7


def utc_now() -> datetime:
    return datetime.now(timezone.utc)


class SessionStore:
    """Store the current session in key/value storage."""

    def __init__(
        self,
        storage: KeyValueStorage,
        *,
        key: str = SESSION_KEY,
        ttl_days: int = SESSION_DAYS,
        clock: Callable[[], datetime] = utc_now
    ):
        """
        Args:
            storage: Backing key/value storage.
            key: Storage key of the serialized session.
            ttl_days: Validity window of new sessions.
            clock: Returns the current aware datetime.
        """
        self.storage = storage
        self.key = key
        self.ttl = timedelta(days=ttl_days)
        self._clock = clock

    def now(self) -> datetime:
        return self._clock()

    def new_session(self, user: User) -> AuthSession:
        """
        Create a session for ``user`` with a fresh token.

        The expiry is fixed here and stored verbatim; reads never recompute it.
        """
        return AuthSession(
            user=user,
            token=str(uuid.uuid4()),
            expires_at=self._clock() + self.ttl
        )

    def persist(self, session: AuthSession) -> None:
        """Serialize and store ``session``, overwriting any prior value."""
        self.storage.set_item(self.key, session.to_json())

    def read(self) -> Optional[AuthSession]:
        """
        Return the stored session if it is still valid.

        Corrupt or expired records are removed as a side effect.

        Returns:
            The session, or None when absent, unparsable or expired.
        """
        raw = self.storage.get_item(self.key)
        if not raw:
            return None

        try:
            session = AuthSession.model_validate_json(raw)
        except PydanticValidationError as e:
            logger.warning(f"Discarding unreadable session record: {e.error_count()} errors")
            self.clear()
            return None

        expires_at = session.expires_at
        if expires_at.tzinfo is None:
            expires_at = expires_at.replace(tzinfo=timezone.utc)
        if expires_at <= self._clock():
            logger.info(f"Session for {session.user.email} expired at {expires_at.isoformat()}")
            self.clear()
            return None

        return session

    def clear(self) -> None:
        """Remove the stored session unconditionally."""
        self.storage.remove_item(self.key)
