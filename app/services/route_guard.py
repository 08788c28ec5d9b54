"""
GymTracker Pro - Route Guard.

Decides how a protected view is handled for a given auth state.
"""

from dataclasses import dataclass
from enum import Enum
from typing import Optional

from app.services.auth_orchestrator import AuthOrchestrator, AuthState

LOGIN_PATH = "/login"
HOME_PATH = "/"


class GuardAction(str, Enum):
    LOADING = "loading"
    REDIRECT = "redirect"
    RENDER = "render"


@dataclass(frozen=True)
class GuardDecision:
    """
    Outcome of a guard check.

    Attributes:
        action: What the view layer should do.
        redirect_to: Target path for ``REDIRECT``.
        from_path: Attempted destination, handed to the login flow.
    """

    action: GuardAction
    redirect_to: Optional[str] = None
    from_path: Optional[str] = None


def evaluate(state: AuthState, location: str, login_path: str = LOGIN_PATH) -> GuardDecision:
    """
    Gate access to ``location``.

    - loading: show a placeholder, no redirect
    - anonymous: redirect to login, remembering ``location``
    - authenticated: render unchanged
    """
    if state.is_loading:
        return GuardDecision(GuardAction.LOADING)
    if not state.is_authenticated:
        return GuardDecision(GuardAction.REDIRECT, redirect_to=login_path, from_path=location)
    return GuardDecision(GuardAction.RENDER)


def return_path(from_path: Optional[str]) -> str:
    """Where the login flow sends the user after success."""
    return from_path or HOME_PATH


class RouteGuard:
    """Route guard bound to an orchestrator's live state."""

    def __init__(self, orchestrator: AuthOrchestrator, login_path: str = LOGIN_PATH):
        self.orchestrator = orchestrator
        self.login_path = login_path

    def check(self, location: str) -> GuardDecision:
        return evaluate(self.orchestrator.state, location, self.login_path)
