"""Tests for startup backend selection."""

import logging

from settings import Settings
from app.services.auth_factory import create_auth_backend, storage_from_settings
from app.services.local_auth import LocalAuthBackend
from app.services.storage import JsonFileStorage, MemoryStorage
from app.services.supabase_auth import SupabaseAuthAdapter


def _settings(**overrides):
    values = {
        "SUPABASE_URL": None,
        "SUPABASE_ANON_KEY": None,
        "STORAGE_BACKEND": "memory",
        "SESSION_TTL_DAYS": 7,
    }
    values.update(overrides)
    return Settings(**values)


class TestSettings:

    def test_both_values_required(self):
        assert _settings().auth_mode == "local"
        assert _settings(SUPABASE_URL="https://p.supabase.co").auth_mode == "local"
        assert _settings(SUPABASE_ANON_KEY="anon").auth_mode == "local"
        configured = _settings(SUPABASE_URL="https://p.supabase.co", SUPABASE_ANON_KEY="anon")
        assert configured.supabase_configured
        assert configured.auth_mode == "supabase"


class TestCreateAuthBackend:

    async def test_local_when_unconfigured(self, caplog):
        with caplog.at_level(logging.WARNING):
            backend = await create_auth_backend(_settings())

        assert isinstance(backend, LocalAuthBackend)
        assert backend.mode == "local"
        assert "using local mock auth" in caplog.text

    async def test_local_uses_configured_keys(self, storage):
        backend = await create_auth_backend(
            _settings(SESSION_KEY="s", USERS_KEY="u", SESSION_TTL_DAYS=1),
            storage=storage,
        )
        assert backend.session_store.key == "s"
        assert backend.credentials.key == "u"
        assert backend.session_store.storage is storage

    async def test_supabase_when_configured(self, supabase_client):
        backend = await create_auth_backend(
            _settings(SUPABASE_URL="https://p.supabase.co", SUPABASE_ANON_KEY="anon"),
            client=supabase_client,
        )
        assert isinstance(backend, SupabaseAuthAdapter)
        assert backend.client is supabase_client


class TestStorageFromSettings:

    def test_file_backend(self, tmp_path):
        storage = storage_from_settings(
            _settings(STORAGE_BACKEND="file", STORAGE_PATH=str(tmp_path / "s.json"))
        )
        assert isinstance(storage, JsonFileStorage)

    def test_memory_backend(self):
        assert isinstance(storage_from_settings(_settings()), MemoryStorage)
