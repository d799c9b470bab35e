"""
Session Authentication State Machine.

Drives login / signup / logout / check against the remote auth endpoint.
When the endpoint cannot be reached the machine falls back to a demo
identity, so the dashboard can always be shown.

States:
    UNAUTHENTICATED -> CHECKING -> AUTHENTICATED
    AUTHENTICATED   -> UNAUTHENTICATED   (logout, rejected check)
"""
from __future__ import annotations

import enum
import logging
import re
from dataclasses import dataclass
from datetime import datetime, timedelta, timezone
from typing import Any, Callable, Dict, List, Optional

import httpx

from ..errors import (
    AuthorizationFailure,
    SastError,
    TransportFailure,
    UnknownActionError,
    ValidationFailure,
)
from ..state_store import TOKEN_KEY, ClientStateStore

logger = logging.getLogger("sast.auth.session")

DEMO_TOKEN = "demo"
DEMO_USERNAME = "Demo"
DEMO_EMAIL = "demo@sast.io"
SESSION_TTL = timedelta(hours=24)

EMAIL_PATTERN = re.compile(r"^[^@\s]+@[^@\s]+\.[^@\s]+$")

SIGNUP_SIMULATED_MESSAGE = "Account created. You can now log in."


class AuthAction(str, enum.Enum):
    LOGIN = "login"
    SIGNUP = "signup"
    LOGOUT = "logout"
    CHECK = "check"

    @classmethod
    def parse(cls, value) -> "AuthAction":
        try:
            return cls(str(value).strip().lower())
        except ValueError:
            raise UnknownActionError(value) from None


class AuthState(str, enum.Enum):
    UNAUTHENTICATED = "unauthenticated"
    CHECKING = "checking"
    AUTHENTICATED = "authenticated"


@dataclass(frozen=True)
class User:
    username: str
    email: str
    id: Optional[int] = None

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "User":
        raw_id = data.get("id")
        return cls(
            username=str(data.get("username") or ""),
            email=str(data.get("email") or ""),
            id=int(raw_id) if raw_id is not None else None,
        )


@dataclass(frozen=True)
class Session:
    token: Optional[str] = None
    user: Optional[User] = None
    expires_at: Optional[datetime] = None  # None for the demo token

    @property
    def is_demo(self) -> bool:
        return self.token == DEMO_TOKEN


@dataclass(frozen=True)
class AuthResult:
    """Outcome of one transition, shaped for the login/signup forms."""
    ok: bool
    state: AuthState
    user: Optional[User] = None
    message: Optional[str] = None
    error: Optional[str] = None
    failure: Optional[SastError] = None
    demo: bool = False


AuthListener = Callable[[AuthState, Session], None]


def validate_signup(username: str, email: str, password: str, min_password_length: int = 6) -> None:
    """Raises ValidationFailure for input the server would reject anyway."""
    if not username or not email or not password:
        raise ValidationFailure("All fields are required.")
    if not EMAIL_PATTERN.match(email):
        raise ValidationFailure("Invalid email format.")
    if len(password) < min_password_length:
        raise ValidationFailure(f"Password must be at least {min_password_length} characters.")


class SessionAuthMachine:
    """
    Owns the Session and the current AuthState.

    Args:
        base_url: Root of the remote API; requests go to ``{base_url}/auth?action=...``.
        store: Persisted client state; the token is kept under ``sast_token``.
        transport: Optional httpx transport (tests use ``httpx.MockTransport``).
        client: Optional pre-built client, used instead of a per-request one.
        timeout: Transport-level timeout. No retries are made.
    """

    def __init__(
        self,
        base_url: str,
        store: ClientStateStore,
        transport: Optional[httpx.BaseTransport] = None,
        client: Optional[httpx.Client] = None,
        timeout: float = 5.0,
        min_password_length: int = 6,
        path: str = "/auth",
    ):
        self.base_url = base_url.rstrip("/")
        self.path = path
        self.store = store
        self.timeout = timeout
        self.min_password_length = min_password_length
        self._transport = transport
        self._client = client
        self._listeners: List[AuthListener] = []
        self.state = AuthState.UNAUTHENTICATED
        self._settled = AuthState.UNAUTHENTICATED  # last non-CHECKING state
        self.session = Session(token=store.get(TOKEN_KEY))

    # -------------------------------------------------------------------------
    # State
    # -------------------------------------------------------------------------

    @property
    def is_authenticated(self) -> bool:
        return self.state == AuthState.AUTHENTICATED

    @property
    def user(self) -> Optional[User]:
        return self.session.user

    @property
    def token(self) -> Optional[str]:
        return self.session.token

    def subscribe(self, listener: AuthListener) -> None:
        """Called with (state, session) on every transition into or out of AUTHENTICATED."""
        self._listeners.append(listener)

    def _transition(self, state: AuthState, session: Session) -> None:
        previous = self._settled
        self.state = state
        self._settled = state
        self.session = session
        if session.token:
            self.store.set(TOKEN_KEY, session.token)
        else:
            self.store.remove(TOKEN_KEY)

        if previous != state:
            logger.info(f"Auth state {previous.value} -> {state.value}")
        if (previous == AuthState.AUTHENTICATED) != (state == AuthState.AUTHENTICATED):
            for listener in list(self._listeners):
                listener(state, session)

    def _authenticate(self, token: str, user: User, expires_at: Optional[datetime]) -> None:
        self._transition(AuthState.AUTHENTICATED, Session(token, user, expires_at))

    def _clear(self) -> None:
        self._transition(AuthState.UNAUTHENTICATED, Session())

    # -------------------------------------------------------------------------
    # Transport
    # -------------------------------------------------------------------------

    def _request(
        self,
        method: str,
        action: AuthAction,
        payload: Optional[Dict[str, Any]] = None,
        token: Optional[str] = None,
    ) -> httpx.Response:
        headers = {"Authorization": f"Bearer {token}"} if token else {}
        params = {"action": action.value}
        try:
            if self._client is not None:
                response = self._client.request(method, self.path, params=params, json=payload, headers=headers)
            else:
                with httpx.Client(base_url=self.base_url, timeout=self.timeout, transport=self._transport) as client:
                    response = client.request(method, self.path, params=params, json=payload, headers=headers)
        except httpx.HTTPError as exc:
            raise TransportFailure(f"{type(exc).__name__}: {exc}") from exc

        if response.status_code >= 500:
            raise TransportFailure(f"HTTP {response.status_code}")
        return response

    @staticmethod
    def _body(response: httpx.Response) -> Dict[str, Any]:
        try:
            body = response.json()
        except ValueError as exc:
            raise TransportFailure("body is not JSON") from exc
        if not isinstance(body, dict):
            raise TransportFailure("body is not a JSON object")
        return body

    # -------------------------------------------------------------------------
    # Transitions
    # -------------------------------------------------------------------------

    def login(self, email: str, password: str) -> AuthResult:
        email = (email or "").strip()
        if not email or not password:
            failure = ValidationFailure("Please fill in all fields.")
            return AuthResult(False, self.state, error=str(failure), failure=failure)

        try:
            body = self._body(self._request("POST", AuthAction.LOGIN, {"email": email, "password": password}))
        except TransportFailure as exc:
            logger.warning(f"Auth endpoint unavailable for login ({exc}); using demo identity")
            user = User(username=DEMO_USERNAME, email=email)
            self._authenticate(DEMO_TOKEN, user, None)
            return AuthResult(True, self.state, user=user, demo=True)

        if body.get("success") and body.get("token"):
            user = User.from_dict(body.get("user") or {"email": email})
            self._authenticate(str(body["token"]), user, datetime.now(timezone.utc) + SESSION_TTL)
            return AuthResult(True, self.state, user=user)

        failure = AuthorizationFailure(body.get("error") or "Login failed.")
        logger.info("Login rejected")
        return AuthResult(False, self.state, error=str(failure), failure=failure)

    def signup(self, username: str, email: str, password: str) -> AuthResult:
        username = (username or "").strip()
        email = (email or "").strip()
        try:
            validate_signup(username, email, password, self.min_password_length)
        except ValidationFailure as exc:
            return AuthResult(False, self.state, error=str(exc), failure=exc)

        payload = {"username": username, "email": email, "password": password}
        try:
            response = self._request("POST", AuthAction.SIGNUP, payload)
            body = self._body(response)
        except TransportFailure as exc:
            logger.warning(f"Auth endpoint unavailable for signup ({exc}); simulating success")
            return AuthResult(True, self.state, message=SIGNUP_SIMULATED_MESSAGE, demo=True)

        if body.get("success"):
            return AuthResult(True, self.state, message=body.get("message") or SIGNUP_SIMULATED_MESSAGE)

        error = body.get("error") or "Signup failed."
        if response.status_code == 400:
            failure: SastError = ValidationFailure(error)
        else:
            failure = AuthorizationFailure(error)
        return AuthResult(False, self.state, error=str(failure), failure=failure)

    def logout(self) -> AuthResult:
        session = self.session
        if session.token and not session.is_demo:
            try:
                self._request("POST", AuthAction.LOGOUT, token=session.token)
            except TransportFailure as exc:
                logger.debug(f"Remote logout skipped ({exc})")
        self._clear()
        return AuthResult(True, self.state)

    def check(self) -> AuthResult:
        """Resolve the held token (if any) into a state on startup."""
        session = self.session if self.session.token else Session(token=self.store.get(TOKEN_KEY))
        token = session.token
        if not token:
            self._clear()
            return AuthResult(False, self.state)

        if session.is_demo:
            user = session.user or User(username=DEMO_USERNAME, email=DEMO_EMAIL)
            self._authenticate(DEMO_TOKEN, user, None)
            return AuthResult(True, self.state, user=user, demo=True)

        self.state = AuthState.CHECKING
        try:
            body = self._body(self._request("GET", AuthAction.CHECK, token=token))
        except TransportFailure as exc:
            logger.warning(f"Auth endpoint unavailable for session check ({exc}); using demo identity")
            user = self.session.user or User(username=DEMO_USERNAME, email=DEMO_EMAIL)
            self._authenticate(token, user, self.session.expires_at)
            return AuthResult(True, self.state, user=user, demo=True)

        if body.get("authenticated"):
            user = User.from_dict(body.get("user") or {})
            self._authenticate(token, user, self.session.expires_at)
            return AuthResult(True, self.state, user=user)

        failure = AuthorizationFailure("Session expired or unknown.")
        self._clear()
        return AuthResult(False, self.state, error=str(failure), failure=failure)
