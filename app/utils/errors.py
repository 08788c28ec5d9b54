"""
GymTracker Pro - Custom Exception Classes.

Exception hierarchy for authentication and form error handling.
"""

from typing import Optional


class GymTrackerException(Exception):
    """
    Base exception class for GymTracker application.

    All custom exceptions should inherit from this class.

    Attributes:
        message: Human-readable error message.
        status_code: HTTP-style status code for the error.
        detail: Additional error details.
    """

    def __init__(
        self,
        message: str = "An error occurred",
        status_code: int = 500,
        detail: Optional[str] = None
    ):
        """
        Initialize GymTrackerException.

        Args:
            message: Human-readable error message.
            status_code: HTTP-style status code (default 500).
            detail: Additional error details.
        """
        self.message = message
        self.status_code = status_code
        self.detail = detail or message
        super().__init__(self.message)


class AuthenticationError(GymTrackerException):
    """
    Exception raised for authentication failures.

    Used when:
    - Invalid credentials
    - Provider session without a usable identity
    """

    def __init__(
        self,
        message: str = "Authentication failed",
        detail: Optional[str] = None
    ):
        super().__init__(
            message=message,
            status_code=401,
            detail=detail
        )


class InvalidCredentials(AuthenticationError):
    """Wrong email or password, raised by either backend."""

    def __init__(
        self,
        message: str = "Invalid email or password.",
        detail: Optional[str] = None
    ):
        super().__init__(message=message, detail=detail)


class InvalidSession(AuthenticationError):
    """Provider returned a session whose user has no email."""

    def __init__(
        self,
        message: str = "Invalid session.",
        detail: Optional[str] = None
    ):
        super().__init__(message=message, detail=detail)


class ValidationError(GymTrackerException):
    """
    Exception raised for input validation failures.

    Used when:
    - Invalid email format
    - Password too short or confirmation mismatch
    - Mandatory questionnaire terms not accepted

    Never reaches a backend call.
    """

    def __init__(
        self,
        message: str = "Validation error",
        detail: Optional[str] = None
    ):
        super().__init__(
            message=message,
            status_code=400,
            detail=detail
        )


class ConflictError(GymTrackerException):
    """
    Exception raised for resource conflicts.

    Used when:
    - Duplicate entry
    - Resource already exists
    """

    def __init__(
        self,
        message: str = "Resource conflict",
        detail: Optional[str] = None
    ):
        super().__init__(
            message=message,
            status_code=409,
            detail=detail
        )


class EmailAlreadyInUse(ConflictError):
    """Registration attempted with an email that is already registered."""

    def __init__(
        self,
        message: str = "This email is already in use.",
        detail: Optional[str] = None
    ):
        super().__init__(message=message, detail=detail)


class ConfirmationRequired(GymTrackerException):
    """
    Account was created but the provider requires email confirmation.

    Informational failure: the caller is not authenticated and must sign in
    after confirming the address out of band.
    """

    def __init__(
        self,
        message: str = (
            "Account created! Confirm your email (check your inbox) and then sign in. "
            "To sign in without confirming, disable 'Confirm email' in "
            "Supabase > Authentication > Providers > Email."
        ),
        detail: Optional[str] = None
    ):
        super().__init__(
            message=message,
            status_code=202,
            detail=detail
        )


class ProviderError(GymTrackerException):
    """Unclassified error reported by the external auth provider."""

    def __init__(
        self,
        message: str = "Auth provider error",
        detail: Optional[str] = None
    ):
        super().__init__(
            message=message,
            status_code=502,
            detail=detail
        )
