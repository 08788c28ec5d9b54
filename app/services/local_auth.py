"""
GymTracker Pro - Local Auth Backend.

Mock credential registry used when no external provider is configured.
Passwords are compared as plaintext; this registry is a stand-in for a
real credential store and not meant for production use.
"""

from typing import List, Optional
import json
import logging
import uuid

from pydantic import TypeAdapter
from pydantic import ValidationError as PydanticValidationError

from app.schemas.auth import AuthSession, LoginForm, RegisterForm, StoredUser
from app.schemas.user import User, UserProfile
from app.services.auth_backend import AuthBackend
from app.services.session_store import SESSION_DAYS, SESSION_KEY, SessionStore
from app.services.storage import KeyValueStorage
from app.utils.errors import EmailAlreadyInUse, InvalidCredentials

logger = logging.getLogger(__name__)

USERS_KEY = "gymtracker_demo_users"

_stored_users = TypeAdapter(List[StoredUser])


class LocalCredentialStore:
    """
    Storage-backed user registry.

    Every operation reads and writes the full registry as one unit.
    """

    def __init__(
        self,
        storage: KeyValueStorage,
        session_store: SessionStore,
        *,
        key: str = USERS_KEY
    ):
        self.storage = storage
        self.session_store = session_store
        self.key = key

    def load_users(self) -> List[StoredUser]:
        """Return the registry; an unreadable registry reads as empty."""
        raw = self.storage.get_item(self.key)
        if not raw:
            return []
        try:
            return _stored_users.validate_json(raw)
        except PydanticValidationError as e:
            logger.warning(f"Ignoring unreadable user registry: {e.error_count()} errors")
            return []

    def save_users(self, users: List[StoredUser]) -> None:
        payload = [entry.model_dump(mode="json", by_alias=True, exclude_none=True) for entry in users]
        self.storage.set_item(self.key, json.dumps(payload))

    def login(self, email: str, password: str) -> AuthSession:
        """
        Check credentials against the registry.

        Args:
            email: Exact email of the registered user.
            password: Plaintext password, compared case-sensitively.

        Returns:
            AuthSession: A new session (not yet persisted).

        Raises:
            InvalidCredentials: Unknown email or wrong password.
        """
        found = next((entry for entry in self.load_users() if entry.user.email == email), None)
        if found is None or found.password != password:
            logger.info(f"Local login rejected for {email}")
            raise InvalidCredentials()

        return self.session_store.new_session(found.user)

    def register(
        self,
        name: str,
        email: str,
        password: str,
        profile: Optional[UserProfile] = None
    ) -> AuthSession:
        """
        Add a user to the registry.

        Returns:
            AuthSession: A new session for the created user (not yet persisted).

        Raises:
            EmailAlreadyInUse: An entry with the same email exists.
        """
        users = self.load_users()
        if any(entry.user.email == email for entry in users):
            raise EmailAlreadyInUse()

        user = User(
            id=str(uuid.uuid4()),
            email=email,
            name=name,
            created_at=self.session_store.now(),
            profile=profile
        )
        users.append(StoredUser(user=user, password=password))
        self.save_users(users)
        logger.info(f"New local user registered: {email}")

        return self.session_store.new_session(user)

    def update_user(self, updated_user: User) -> None:
        """
        Replace a registered user's payload and the session's embedded user.

        No-op when no session exists. The first entry matching by id or by
        email wins; its password is kept.
        """
        session = self.session_store.read()
        if session is None:
            return

        users = self.load_users()
        for index, entry in enumerate(users):
            if entry.user.id == updated_user.id or entry.user.email == updated_user.email:
                users[index] = StoredUser(user=updated_user, password=entry.password)
                self.save_users(users)
                break

        self.session_store.persist(session.model_copy(update={"user": updated_user}))


class LocalAuthBackend(AuthBackend):
    """Auth backend combining the local registry with the session store."""

    mode = "local"

    def __init__(self, credentials: LocalCredentialStore, session_store: SessionStore):
        self.credentials = credentials
        self.session_store = session_store

    @classmethod
    def from_storage(
        cls,
        storage: KeyValueStorage,
        *,
        session_key: str = SESSION_KEY,
        users_key: str = USERS_KEY,
        ttl_days: int = SESSION_DAYS
    ) -> "LocalAuthBackend":
        session_store = SessionStore(storage, key=session_key, ttl_days=ttl_days)
        return cls(LocalCredentialStore(storage, session_store, key=users_key), session_store)

    async def login(self, form: LoginForm) -> User:
        session = self.credentials.login(form.email, form.password)
        self.session_store.persist(session)
        return session.user

    async def register(self, form: RegisterForm) -> User:
        session = self.credentials.register(form.name, form.email, form.password, form.profile)
        self.session_store.persist(session)
        return session.user

    async def restore(self) -> Optional[User]:
        session = self.session_store.read()
        return session.user if session else None

    def logout(self) -> None:
        self.session_store.clear()

    async def update_user(self, user: User) -> None:
        self.credentials.update_user(user)
