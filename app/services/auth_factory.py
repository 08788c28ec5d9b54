"""
Authentication Factory
======================
Resolves the auth backend once at startup from configuration.

Supabase is used when both ``SUPABASE_URL`` and ``SUPABASE_ANON_KEY`` are
set; otherwise the local mock backend is used and a warning is logged.
The resolved backend is injected into ``AuthOrchestrator`` and never
switched at runtime.

Usage::

    from app.services.auth_factory import create_auth_backend

    backend = await create_auth_backend(settings)
    orchestrator = AuthOrchestrator(backend)
"""

from __future__ import annotations

import logging
from typing import Optional

from app.services.auth_backend import AuthBackend
from app.services.local_auth import LocalAuthBackend
from app.services.storage import KeyValueStorage, create_storage
from app.services.supabase_auth import SupabaseAuthAdapter

logger = logging.getLogger(__name__)


def storage_from_settings(settings) -> KeyValueStorage:
    """Build the key/value storage selected by ``STORAGE_BACKEND``."""
    return create_storage(
        settings.STORAGE_BACKEND,
        path=settings.STORAGE_PATH,
        redis_url=settings.REDIS_URL,
        prefix=settings.REDIS_KEY_PREFIX,
    )


def local_backend_from_settings(settings, storage: Optional[KeyValueStorage] = None) -> LocalAuthBackend:
    return LocalAuthBackend.from_storage(
        storage or storage_from_settings(settings),
        session_key=settings.SESSION_KEY,
        users_key=settings.USERS_KEY,
        ttl_days=settings.SESSION_TTL_DAYS,
    )


async def create_auth_backend(
    settings,
    *,
    storage: Optional[KeyValueStorage] = None,
    client=None
) -> AuthBackend:
    """
    Select and build the auth backend.

    Args:
        settings: Application settings.
        storage: Storage for the local backend (default from settings).
        client: Pre-built Supabase client (default: created from settings).

    Returns:
        AuthBackend: ``SupabaseAuthAdapter`` or ``LocalAuthBackend``.
    """
    if not settings.supabase_configured:
        logger.warning(
            "SUPABASE_URL and SUPABASE_ANON_KEY not set - using local mock auth. "
            "Create a .env file with both values to enable Supabase."
        )
        return local_backend_from_settings(settings, storage)

    if client is None:
        from supabase import acreate_client
        client = await acreate_client(settings.SUPABASE_URL, settings.SUPABASE_ANON_KEY)

    logger.info("Supabase auth configured")
    return SupabaseAuthAdapter(client)
