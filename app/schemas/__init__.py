"""GymTracker Pro - Pydantic Schemas Package."""

from app.schemas.user import (
    Gender,
    Goal,
    PlanStatus,
    User,
    UserProfile,
)
from app.schemas.auth import (
    AuthSession,
    LoginForm,
    RegisterForm,
    StoredUser,
    validate_form,
)
from app.schemas.anamnesis import AnamnesisAnswers

__all__ = [
    "Gender",
    "Goal",
    "PlanStatus",
    "User",
    "UserProfile",
    "AuthSession",
    "LoginForm",
    "RegisterForm",
    "StoredUser",
    "validate_form",
    "AnamnesisAnswers",
]
