"""GymTracker Pro - Utilities Package."""

from app.utils.errors import (
    GymTrackerException,
    AuthenticationError,
    InvalidCredentials,
    InvalidSession,
    ValidationError,
    ConflictError,
    EmailAlreadyInUse,
    ConfirmationRequired,
    ProviderError,
)

__all__ = [
    "GymTrackerException",
    "AuthenticationError",
    "InvalidCredentials",
    "InvalidSession",
    "ValidationError",
    "ConflictError",
    "EmailAlreadyInUse",
    "ConfirmationRequired",
    "ProviderError",
]
