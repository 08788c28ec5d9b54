"""
Shared fixtures: controllable clock, in-memory storage, local backend and a
fake async Supabase client exposing the ``auth`` / ``table`` surface used by
the adapter.
"""

import uuid
from datetime import datetime, timedelta, timezone
from types import SimpleNamespace

import pytest

from app.services.local_auth import LocalAuthBackend, LocalCredentialStore
from app.services.session_store import SessionStore
from app.services.storage import MemoryStorage


class FakeClock:
    def __init__(self, now: datetime):
        self.now = now

    def __call__(self) -> datetime:
        return self.now

    def advance(self, **kwargs) -> None:
        self.now = self.now + timedelta(**kwargs)


# ====================================================================
# Fake Supabase client
# ====================================================================

class FakeProviderError(Exception):
    """Mimics supabase-py errors: ``message`` plus optional ``code``."""

    def __init__(self, message: str, code: str = None):
        super().__init__(message)
        self.message = message
        self.code = code


class FakeQuery:
    def __init__(self, client, table: str):
        self.client = client
        self.table = table
        self.op = None
        self.values = None
        self.filters = {}
        self.mode = None
        self.kwargs = {}

    def select(self, *columns, **kwargs):
        self.op = "select"
        self.kwargs = kwargs
        return self

    def update(self, values):
        self.op = "update"
        self.values = values
        return self

    def upsert(self, values, **kwargs):
        self.op = "upsert"
        self.values = values
        self.kwargs = kwargs
        return self

    def eq(self, column, value):
        self.filters[column] = value
        return self

    def single(self):
        self.mode = "single"
        return self

    def maybe_single(self):
        self.mode = "maybe_single"
        return self

    def limit(self, count):
        return self

    def _matches(self, row) -> bool:
        return all(row.get(column) == value for column, value in self.filters.items())

    async def execute(self):
        self.client.queries.append(self)
        error = self.client.table_errors.get((self.table, self.op))
        if error is not None:
            raise error

        rows = self.client.rows.setdefault(self.table, [])
        if self.op == "select":
            matched = [row for row in rows if self._matches(row)]
            if self.mode == "single":
                if len(matched) != 1:
                    raise FakeProviderError(
                        "JSON object requested, multiple (or no) rows returned",
                        code="PGRST116",
                    )
                return SimpleNamespace(data=dict(matched[0]), count=None)
            if self.mode == "maybe_single":
                return SimpleNamespace(data=dict(matched[0])) if matched else None
            return SimpleNamespace(data=[dict(row) for row in matched], count=len(matched))

        if self.op == "update":
            updated = []
            for row in rows:
                if self._matches(row):
                    row.update(self.values)
                    updated.append(dict(row))
            return SimpleNamespace(data=updated, count=None)

        if self.op == "upsert":
            conflict = self.kwargs.get("on_conflict", "id")
            for row in rows:
                if row.get(conflict) == self.values.get(conflict):
                    row.update(self.values)
                    return SimpleNamespace(data=[dict(row)], count=None)
            rows.append(dict(self.values))
            return SimpleNamespace(data=[dict(self.values)], count=None)

        raise AssertionError(f"Unsupported fake operation: {self.op}")


class FakeAuth:
    def __init__(self, client):
        self.client = client
        self.accounts = {}
        self.session = None
        self.listeners = []
        self.unsubscribe_calls = 0
        self.sign_in_error = None
        self.sign_up_error = None
        self.sign_out_error = None
        self.sign_out_calls = 0
        self.require_confirmation = False

    def add_account(self, email, password, name="Ana", with_profile=True, **profile_columns):
        user = SimpleNamespace(
            id=str(uuid.uuid4()),
            email=email,
            user_metadata={"name": name},
            created_at=datetime(2026, 1, 1, tzinfo=timezone.utc),
        )
        self.accounts[email] = (password, user)
        if with_profile:
            self.client.rows.setdefault("profiles", []).append(
                {"id": user.id, "email": email, "name": name, **profile_columns}
            )
        return user

    def sign_in(self, user):
        self.session = SimpleNamespace(user=user, access_token="access-token")
        return self.session

    async def sign_in_with_password(self, credentials):
        if self.sign_in_error is not None:
            raise self.sign_in_error
        account = self.accounts.get(credentials["email"])
        if account is None or account[0] != credentials["password"]:
            raise FakeProviderError("Invalid login credentials")
        session = self.sign_in(account[1])
        return SimpleNamespace(user=account[1], session=session)

    async def sign_up(self, credentials):
        if self.sign_up_error is not None:
            raise self.sign_up_error
        email = credentials["email"]
        if email in self.accounts:
            raise FakeProviderError("User already registered")
        metadata = credentials.get("options", {}).get("data", {})
        user = self.add_account(email, credentials["password"], name=metadata.get("name"))
        self.sign_up_metadata = metadata
        if self.require_confirmation:
            return SimpleNamespace(user=user, session=None)
        return SimpleNamespace(user=user, session=self.sign_in(user))

    async def get_session(self):
        return self.session

    def on_auth_state_change(self, callback):
        self.listeners.append(callback)

        def _unsubscribe():
            self.unsubscribe_calls += 1
            if callback in self.listeners:
                self.listeners.remove(callback)

        return SimpleNamespace(unsubscribe=_unsubscribe)

    def emit(self, event, session):
        for listener in list(self.listeners):
            listener(event, session)

    async def sign_out(self):
        self.sign_out_calls += 1
        if self.sign_out_error is not None:
            raise self.sign_out_error
        self.session = None


class FakeSupabaseClient:
    def __init__(self):
        self.rows = {}
        self.queries = []
        self.table_errors = {}
        self.auth = FakeAuth(self)

    def table(self, name):
        return FakeQuery(self, name)


# ====================================================================
# Fixtures
# ====================================================================

@pytest.fixture
def clock():
    return FakeClock(datetime(2026, 3, 1, 12, 0, tzinfo=timezone.utc))


@pytest.fixture
def storage():
    return MemoryStorage()


@pytest.fixture
def session_store(storage, clock):
    return SessionStore(storage, clock=clock)


@pytest.fixture
def credential_store(storage, session_store):
    return LocalCredentialStore(storage, session_store)


@pytest.fixture
def local_backend(credential_store, session_store):
    return LocalAuthBackend(credential_store, session_store)


@pytest.fixture
def supabase_client():
    return FakeSupabaseClient()
