"""Tests for the auth state machine over both backends."""

import asyncio

import pytest

from app.schemas.auth import LoginForm, RegisterForm, validate_form
from app.schemas.user import User
from app.services.auth_backend import AuthBackend
from app.services.auth_orchestrator import AuthOrchestrator, AuthState, AuthStatus
from app.services.session_store import SESSION_KEY
from app.services.supabase_auth import SupabaseAuthAdapter
from app.services.local_auth import USERS_KEY
from app.utils.errors import EmailAlreadyInUse, InvalidCredentials


def _register_form(**overrides):
    data = {
        "name": "Ana",
        "email": "ana@x.com",
        "password": "secret1",
        "confirm_password": "secret1",
    }
    data.update(overrides)
    return RegisterForm(**data)


@pytest.fixture
def orchestrator(local_backend):
    return AuthOrchestrator(local_backend)


class RecordingBackend(AuthBackend):
    """Backend whose calls are controlled by the test."""

    mode = "recording"

    def __init__(self):
        self.user = None
        self.login_error = None
        self.update_error = None
        self.updated = []
        self.logouts = 0

    async def login(self, form):
        if self.login_error is not None:
            raise self.login_error
        return User(id="u-1", email=form.email, name="Ana")

    async def register(self, form):
        return User(id="u-1", email=form.email, name=form.name)

    async def restore(self):
        return self.user

    def logout(self):
        self.logouts += 1

    async def update_user(self, user):
        if self.update_error is not None:
            raise self.update_error
        self.updated.append(user)


class TestInitialState:

    def test_starts_loading(self, orchestrator):
        assert orchestrator.is_loading
        assert not orchestrator.is_authenticated

    async def test_start_without_session(self, orchestrator):
        state = await orchestrator.start()
        assert state == AuthState(AuthStatus.ANONYMOUS)

    async def test_start_restores_session(self, local_backend, orchestrator):
        user = await local_backend.register(_register_form())
        state = await orchestrator.start()
        assert state.is_authenticated
        assert state.user == user

    async def test_start_with_expired_session(self, local_backend, orchestrator, clock):
        await local_backend.register(_register_form())
        clock.advance(days=7, seconds=1)
        state = await orchestrator.start()
        assert state.status == AuthStatus.ANONYMOUS


class TestLogin:

    async def test_transitions_through_loading(self, local_backend, orchestrator):
        await local_backend.register(_register_form())
        local_backend.logout()
        await orchestrator.start()

        seen = []
        orchestrator.subscribe(lambda state: seen.append(state.status))
        await orchestrator.login(LoginForm(email="ana@x.com", password="secret1"))

        assert seen == [AuthStatus.LOADING, AuthStatus.AUTHENTICATED]
        assert orchestrator.user.email == "ana@x.com"

    async def test_failure_rethrows_and_returns_to_anonymous(self, orchestrator, storage):
        await orchestrator.start()
        with pytest.raises(InvalidCredentials):
            await orchestrator.login(LoginForm(email="ana@x.com", password="nope"))

        assert orchestrator.state == AuthState(AuthStatus.ANONYMOUS)
        assert storage.get_item(SESSION_KEY) is None

    async def test_failure_keeps_prior_authentication(self):
        backend = RecordingBackend()
        backend.user = User(id="u-0", email="old@x.com", name="Old")
        orchestrator = AuthOrchestrator(backend)
        await orchestrator.start()

        backend.login_error = RuntimeError("offline")
        with pytest.raises(RuntimeError):
            await orchestrator.login(LoginForm(email="ana@x.com", password="secret1"))

        assert orchestrator.is_authenticated
        assert orchestrator.user.email == "old@x.com"
        assert not orchestrator.is_loading

    async def test_overlapping_logins_last_transition_wins(self):
        backend = RecordingBackend()
        orchestrator = AuthOrchestrator(backend)
        await orchestrator.start()

        _, second = await asyncio.gather(
            orchestrator.login(LoginForm(email="a@x.com", password="p")),
            orchestrator.login(LoginForm(email="b@x.com", password="p")),
        )
        assert orchestrator.user.email == second.email


class TestRegister:

    async def test_register_authenticates(self, orchestrator):
        await orchestrator.start()
        user = await orchestrator.register(_register_form())
        assert orchestrator.is_authenticated
        assert orchestrator.user == user

    async def test_duplicate_rethrows(self, local_backend, orchestrator):
        await local_backend.register(_register_form())
        local_backend.logout()
        await orchestrator.start()

        with pytest.raises(EmailAlreadyInUse):
            await orchestrator.register(_register_form(name="Other"))
        assert orchestrator.state.status == AuthStatus.ANONYMOUS


class TestUpdateUser:

    async def test_state_updated_after_write(self, orchestrator, credential_store):
        await orchestrator.start()
        user = await orchestrator.register(_register_form())

        updated = user.model_copy(update={"name": "Ana Maria"})
        await orchestrator.update_user(updated)

        assert orchestrator.user.name == "Ana Maria"
        assert credential_store.load_users()[0].user.name == "Ana Maria"

    async def test_failed_write_leaves_state(self):
        backend = RecordingBackend()
        backend.user = User(id="u-1", email="ana@x.com", name="Ana")
        orchestrator = AuthOrchestrator(backend)
        await orchestrator.start()

        backend.update_error = RuntimeError("write failed")
        with pytest.raises(RuntimeError):
            await orchestrator.update_user(backend.user.model_copy(update={"name": "New"}))
        assert orchestrator.user.name == "Ana"

    async def test_anonymous_state_not_populated(self):
        backend = RecordingBackend()
        orchestrator = AuthOrchestrator(backend)
        await orchestrator.start()

        await orchestrator.update_user(User(id="u-1", email="ana@x.com", name="Ana"))
        assert backend.updated
        assert orchestrator.user is None


class TestSubscribe:

    async def test_unsubscribe_stops_notifications(self, orchestrator):
        seen = []
        subscription = orchestrator.subscribe(seen.append)
        await orchestrator.start()
        count = len(seen)

        subscription.unsubscribe()
        subscription.unsubscribe()
        orchestrator.logout()

        assert len(seen) == count


class TestLocalScenario:

    async def test_register_logout_wrong_login(self, orchestrator, storage):
        await orchestrator.start()

        form = validate_form(RegisterForm, {
            "name": "Ana",
            "email": "ana@x.com",
            "password": "secret1",
            "confirmPassword": "secret1",
        })
        await orchestrator.register(form)
        assert orchestrator.is_authenticated
        assert orchestrator.user.email == "ana@x.com"

        orchestrator.logout()
        assert not orchestrator.is_authenticated
        assert storage.get_item(SESSION_KEY) is None
        assert "ana@x.com" in storage.get_item(USERS_KEY)

        with pytest.raises(InvalidCredentials):
            await orchestrator.login(LoginForm(email="ana@x.com", password="wrong"))
        assert not orchestrator.is_authenticated


class TestSupabaseMode:

    async def test_start_subscribes_and_restores(self, supabase_client):
        account = supabase_client.auth.add_account("ana@x.com", "secret1")
        supabase_client.auth.sign_in(account)
        orchestrator = AuthOrchestrator(SupabaseAuthAdapter(supabase_client))

        state = await orchestrator.start()

        assert state.is_authenticated
        assert state.user.id == account.id
        assert len(supabase_client.auth.listeners) == 1
        await orchestrator.close()

    async def test_session_change_notifications(self, supabase_client):
        orchestrator = AuthOrchestrator(SupabaseAuthAdapter(supabase_client))
        await orchestrator.start()
        assert not orchestrator.is_authenticated

        account = supabase_client.auth.add_account("ana@x.com", "secret1")
        session = supabase_client.auth.sign_in(account)
        supabase_client.auth.emit("SIGNED_IN", session)
        await asyncio.sleep(0)
        await asyncio.sleep(0)
        assert orchestrator.is_authenticated
        assert orchestrator.user.email == "ana@x.com"

        supabase_client.auth.emit("SIGNED_OUT", None)
        assert not orchestrator.is_authenticated
        await orchestrator.close()

    async def test_close_unsubscribes_once(self, supabase_client):
        orchestrator = AuthOrchestrator(SupabaseAuthAdapter(supabase_client))
        await orchestrator.start()

        await orchestrator.close()
        await orchestrator.close()

        assert supabase_client.auth.unsubscribe_calls == 1
        assert supabase_client.auth.listeners == []

    async def test_logout_is_immediate(self, supabase_client):
        account = supabase_client.auth.add_account("ana@x.com", "secret1")
        supabase_client.auth.sign_in(account)
        orchestrator = AuthOrchestrator(SupabaseAuthAdapter(supabase_client))
        await orchestrator.start()

        orchestrator.logout()

        assert orchestrator.state == AuthState(AuthStatus.ANONYMOUS)
        await orchestrator.close()
        assert supabase_client.auth.sign_out_calls == 1

    async def test_start_with_invalid_profile_columns(self, supabase_client):
        account = supabase_client.auth.add_account(
            "ana@x.com", "secret1", avatar_url="/avatars/a.png", weekly_frequency=10
        )
        supabase_client.auth.sign_in(account)
        orchestrator = AuthOrchestrator(SupabaseAuthAdapter(supabase_client))

        state = await orchestrator.start()

        assert state.status == AuthStatus.AUTHENTICATED
        assert state.user.profile.avatar_url is None
        await orchestrator.close()

    def test_logout_outside_event_loop(self, supabase_client):
        orchestrator = AuthOrchestrator(SupabaseAuthAdapter(supabase_client))
        orchestrator.set_user(User(id="u-1", email="ana@x.com", name="Ana"))

        orchestrator.logout()

        assert orchestrator.state == AuthState(AuthStatus.ANONYMOUS)
        assert supabase_client.auth.sign_out_calls == 0

    async def test_refresh_failure_is_logged(self, supabase_client, caplog):
        adapter = SupabaseAuthAdapter(supabase_client)
        orchestrator = AuthOrchestrator(adapter)
        await orchestrator.start()

        async def failing_restore():
            raise RuntimeError("profile service down")

        adapter.restore = failing_restore
        account = supabase_client.auth.add_account("ana@x.com", "secret1")
        supabase_client.auth.emit("SIGNED_IN", supabase_client.auth.sign_in(account))
        await asyncio.sleep(0)
        await asyncio.sleep(0)

        assert "Session refresh failed: profile service down" in caplog.text
        assert orchestrator.state == AuthState(AuthStatus.ANONYMOUS)
        await orchestrator.close()


class TestStartFailure:

    async def test_restore_error_settles_anonymous(self):
        backend = RecordingBackend()

        async def failing_restore():
            raise RuntimeError("storage offline")

        backend.restore = failing_restore
        orchestrator = AuthOrchestrator(backend)

        with pytest.raises(RuntimeError):
            await orchestrator.start()
        assert orchestrator.state == AuthState(AuthStatus.ANONYMOUS)
