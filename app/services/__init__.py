"""GymTracker Pro - Services Package."""

from .storage import KeyValueStorage, MemoryStorage, JsonFileStorage, RedisStorage
from .session_store import SessionStore
from .auth_backend import AuthBackend, Subscription
from .local_auth import LocalCredentialStore, LocalAuthBackend
from .supabase_auth import SupabaseAuthAdapter
from .auth_factory import create_auth_backend
from .auth_orchestrator import AuthOrchestrator, AuthState, AuthStatus
from .route_guard import RouteGuard, GuardAction, GuardDecision
from .anamnesis import AnamnesisService

__all__ = [
    "KeyValueStorage",
    "MemoryStorage",
    "JsonFileStorage",
    "RedisStorage",
    "SessionStore",
    "AuthBackend",
    "Subscription",
    "LocalCredentialStore",
    "LocalAuthBackend",
    "SupabaseAuthAdapter",
    "create_auth_backend",
    "AuthOrchestrator",
    "AuthState",
    "AuthStatus",
    "RouteGuard",
    "GuardAction",
    "GuardDecision",
    "AnamnesisService",
]
