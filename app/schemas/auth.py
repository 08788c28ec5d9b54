"""
GymTracker Pro - Authentication Schemas.

Pydantic schemas for login/register forms and persisted auth records.
"""

from datetime import datetime
from typing import Any, Mapping, Optional, Type, TypeVar

from pydantic import BaseModel, EmailStr, Field, ConfigDict, model_validator
from pydantic import ValidationError as PydanticValidationError

from app.schemas.user import CamelModel, User, UserProfile
from app.utils.errors import ValidationError

FormT = TypeVar("FormT", bound=BaseModel)


class LoginForm(CamelModel):
    """
    Schema for the login form.

    Attributes:
        email: User's email address.
        password: User's password (any non-empty value).
    """

    model_config = ConfigDict(
        json_schema_extra={
            "example": {
                "email": "ana@example.com",
                "password": "secret1"
            }
        }
    )

    email: EmailStr = Field(..., description="User's email address")
    password: str = Field(..., min_length=1, description="User's password")


class RegisterForm(CamelModel):
    """
    Schema for the registration form.

    Attributes:
        name: Display name (at least 2 characters).
        email: User's email address.
        password: Password (at least 6 characters).
        confirm_password: Must equal ``password``.
        profile: Optional initial profile (usually only the goal).
    """

    model_config = ConfigDict(
        json_schema_extra={
            "example": {
                "name": "Ana",
                "email": "ana@example.com",
                "password": "secret1",
                "confirmPassword": "secret1",
                "profile": {"goal": "forca"}
            }
        }
    )

    name: str = Field(..., min_length=2, description="User's display name")
    email: EmailStr = Field(..., description="User's email address")
    password: str = Field(
        ...,
        min_length=6,
        description="User's password (minimum 6 characters)"
    )
    confirm_password: str = Field(..., description="Password confirmation")
    profile: Optional[UserProfile] = None

    @model_validator(mode="after")
    def _passwords_match(self) -> "RegisterForm":
        if self.password != self.confirm_password:
            raise ValueError("Passwords do not match")
        return self


class AuthSession(CamelModel):
    """
    Signed-in session persisted by the local backend.

    Attributes:
        user: The authenticated user.
        token: Opaque session token.
        expires_at: Absolute expiry, fixed at creation.
    """

    user: User
    token: str
    expires_at: datetime


class StoredUser(CamelModel):
    """Mock registry entry of the local backend (plaintext password)."""

    user: User
    password: str


def _first_message(exc: PydanticValidationError) -> str:
    errors = exc.errors()
    if not errors:
        return "Invalid data."
    message = errors[0].get("msg", "Invalid data.")
    # Validators raising ValueError are reported as "Value error, <msg>"
    return message.removeprefix("Value error, ")


def validate_form(schema: Type[FormT], data: Mapping[str, Any]) -> FormT:
    """
    Validate raw form input against a schema.

    Args:
        schema: Form model class (``LoginForm``, ``RegisterForm``...).
        data: Raw form values, camelCase or snake_case keys.

    Returns:
        The validated form instance.

    Raises:
        ValidationError: With the first validation message as ``message``.

    Example:
        >>> validate_form(LoginForm, {"email": "ana@x.com", "password": "p"}).email
        'ana@x.com'
    """
    try:
        return schema.model_validate(dict(data))
    except PydanticValidationError as exc:
        raise ValidationError(message=_first_message(exc), detail=str(exc)) from exc
