"""
GymTracker Pro - User Schemas.

Pydantic schemas for the authenticated user and the optional profile.
Serialized with camelCase keys so stored records keep the web client format.
"""

from datetime import datetime, timezone
from enum import Enum
from typing import Optional
from urllib.parse import urlparse

from pydantic import BaseModel, ConfigDict, EmailStr, Field, field_validator
from pydantic.alias_generators import to_camel


class Goal(str, Enum):
    """Primary training goal."""

    LOSE_WEIGHT = "emagrecer"
    GAIN_MASS = "ganhar_massa"
    CONDITIONING = "condicionamento"
    STRENGTH = "forca"
    OTHER = "outros"


class Gender(str, Enum):
    MALE = "M"
    FEMALE = "F"
    OTHER = "outro"


class PlanStatus(str, Enum):
    """Gym membership plan status."""

    ACTIVE = "active"
    LATE = "late"
    INACTIVE = "inactive"


class CamelModel(BaseModel):
    """Base model accepting both snake_case and camelCase keys."""

    model_config = ConfigDict(
        alias_generator=to_camel,
        populate_by_name=True,
        use_enum_values=False,
    )

    def to_json(self) -> str:
        """Serialize with camelCase keys, dropping unset optionals."""
        return self.model_dump_json(by_alias=True, exclude_none=True)


class UserProfile(CamelModel):
    """
    Optional attributes attached to a User.

    Attributes:
        birth_date: ISO date of birth.
        height: Height in centimetres.
        goal: Primary training goal.
        gender: Declared gender.
        avatar_url: Absolute URL of the avatar image.
        plan_status: Membership plan status.
        weight_goal: Target weight in kilograms.
        weekly_frequency: Planned workouts per week (0-7).
        notes: Free text notes.
        injuries: Known injuries.
    """

    birth_date: Optional[str] = None
    height: Optional[float] = Field(None, ge=0)
    goal: Optional[Goal] = None
    gender: Optional[Gender] = None
    avatar_url: Optional[str] = None
    plan_status: Optional[PlanStatus] = None
    weight_goal: Optional[float] = Field(None, ge=0)
    weekly_frequency: Optional[int] = Field(None, ge=0, le=7)
    notes: Optional[str] = None
    injuries: Optional[list[str]] = None

    @field_validator("avatar_url")
    @classmethod
    def _check_avatar_url(cls, value: Optional[str]) -> Optional[str]:
        if value is None:
            return value
        parsed = urlparse(value)
        if not parsed.scheme or not parsed.netloc:
            raise ValueError("Invalid avatar URL")
        return value


class User(CamelModel):
    """
    Authenticated application user.

    Attributes:
        id: Provider-issued or generated identifier.
        email: Unique email within the active backend.
        name: Display name.
        created_at: Account creation timestamp.
        profile: Optional profile attributes.
    """

    model_config = ConfigDict(
        json_schema_extra={
            "example": {
                "id": "550e8400-e29b-41d4-a716-446655440000",
                "email": "ana@example.com",
                "name": "Ana",
                "createdAt": "2026-01-01T12:00:00+00:00",
                "profile": {"goal": "forca", "weeklyFrequency": 3}
            }
        }
    )

    id: str
    email: EmailStr
    name: str = Field(..., min_length=1)
    created_at: datetime = Field(default_factory=lambda: datetime.now(timezone.utc))
    profile: Optional[UserProfile] = None
