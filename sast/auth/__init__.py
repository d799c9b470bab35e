"""Session authentication against the remote auth endpoint, with demo fallback."""

from .session import (
    DEMO_TOKEN,
    AuthAction,
    AuthResult,
    AuthState,
    Session,
    SessionAuthMachine,
    User,
    validate_signup,
)

__all__ = [
    "DEMO_TOKEN",
    "AuthAction",
    "AuthResult",
    "AuthState",
    "Session",
    "SessionAuthMachine",
    "User",
    "validate_signup",
]
