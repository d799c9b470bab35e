import json

import httpx
import pytest
from fastapi.testclient import TestClient

from sast.auth import DEMO_TOKEN, AuthAction, AuthState, SessionAuthMachine
from sast.errors import AuthorizationFailure, UnknownActionError, ValidationFailure
from sast.server import create_app
from sast.state_store import TOKEN_KEY, ClientStateStore

from .conftest import API_ROOT, CallCounter


def _machine(store, handler) -> SessionAuthMachine:
    return SessionAuthMachine(API_ROOT, store, transport=httpx.MockTransport(handler))


class TestCheck:
    def test_no_token_is_unauthenticated_without_network(self, store, offline_counter):
        machine = _machine(store, offline_counter)

        result = machine.check()

        assert machine.state == AuthState.UNAUTHENTICATED
        assert not result.ok
        assert offline_counter.calls == 0

    def test_rejected_token_clears_local_state(self, store):
        store.set(TOKEN_KEY, "stale")
        machine = _machine(store, lambda r: httpx.Response(401, json={"authenticated": False}))

        result = machine.check()

        assert machine.state == AuthState.UNAUTHENTICATED
        assert isinstance(result.failure, AuthorizationFailure)
        assert machine.token is None
        assert store.get(TOKEN_KEY) is None

    def test_valid_token_sends_bearer_header(self, store):
        store.set(TOKEN_KEY, "t0k3n")
        counter = CallCounter(lambda r: httpx.Response(
            200, json={"authenticated": True, "user": {"id": 3, "username": "ana", "email": "ana@x.io"}}
        ))
        machine = _machine(store, counter)

        machine.check()

        assert machine.state == AuthState.AUTHENTICATED
        assert machine.user.username == "ana"
        request = counter.requests[0]
        assert request.headers["Authorization"] == "Bearer t0k3n"
        assert request.url.params["action"] == "check"

    def test_unreachable_falls_back_to_demo_identity(self, store, offline_counter):
        store.set(TOKEN_KEY, "t0k3n")
        machine = _machine(store, offline_counter)

        result = machine.check()

        assert machine.state == AuthState.AUTHENTICATED
        assert result.demo
        assert machine.user.username == "Demo"
        assert machine.user.email == "demo@sast.io"
        assert machine.token == "t0k3n"

    def test_server_error_counts_as_transport_failure(self, store):
        store.set(TOKEN_KEY, "t0k3n")
        machine = _machine(store, lambda r: httpx.Response(502, text="bad gateway"))
        assert machine.check().demo
        assert machine.is_authenticated


class TestLogin:
    def test_success_stores_token_and_user(self, store):
        body = {"success": True, "token": "a" * 64, "user": {"id": 1, "username": "ana", "email": "ana@x.io"}}
        machine = _machine(store, lambda r: httpx.Response(200, json=body))

        result = machine.login("ana@x.io", "secret")

        assert result.ok and not result.demo
        assert machine.state == AuthState.AUTHENTICATED
        assert machine.token == "a" * 64
        assert machine.session.expires_at is not None
        assert store.get(TOKEN_KEY) == "a" * 64

    def test_rejection_surfaces_message(self, store):
        machine = _machine(store, lambda r: httpx.Response(401, json={"error": "Invalid email or password."}))

        result = machine.login("ana@x.io", "wrong")

        assert not result.ok
        assert result.error == "Invalid email or password."
        assert isinstance(result.failure, AuthorizationFailure)
        assert machine.state == AuthState.UNAUTHENTICATED
        assert store.get(TOKEN_KEY) is None

    def test_missing_fields_rejected_locally(self, store, offline_counter):
        result = _machine(store, offline_counter).login("", "secret")
        assert isinstance(result.failure, ValidationFailure)
        assert offline_counter.calls == 0

    def test_transport_failure_gives_demo_session(self, store, offline_counter):
        machine = _machine(store, offline_counter)

        result = machine.login("someone@x.io", "pw")

        assert result.ok and result.demo
        assert machine.state == AuthState.AUTHENTICATED
        assert machine.token
        assert machine.user.email == "someone@x.io"

    def test_demo_login_is_stable_across_check(self, store, offline_counter):
        machine = _machine(store, offline_counter)
        machine.login("demo@x.io", "secret")
        token = machine.token

        machine.check()

        assert machine.state == AuthState.AUTHENTICATED
        assert machine.user.email == "demo@x.io"
        assert machine.token == token == DEMO_TOKEN
        # the demo token is never sent to the remote endpoint
        assert offline_counter.calls == 1

    def test_demo_token_restored_after_restart(self, tmp_path, offline_counter):
        path = tmp_path / "state.json"
        _machine(ClientStateStore(path), offline_counter).login("demo@x.io", "secret")

        restarted = _machine(ClientStateStore(path), offline_counter)
        restarted.check()

        assert restarted.is_authenticated
        assert restarted.user.email == "demo@sast.io"


class TestSignup:
    def test_empty_username_caught_locally(self, store, offline_counter):
        result = _machine(store, offline_counter).signup("", "a@b.com", "abcdef")

        assert not result.ok
        assert isinstance(result.failure, ValidationFailure)
        assert offline_counter.calls == 0

    @pytest.mark.parametrize(
        "email,password",
        [("not-an-email", "abcdef"), ("a@b.com", "abc")],
    )
    def test_format_and_length_caught_locally(self, store, offline_counter, email, password):
        result = _machine(store, offline_counter).signup("ana", email, password)
        assert isinstance(result.failure, ValidationFailure)
        assert offline_counter.calls == 0

    def test_conflict_surfaces_error(self, store):
        machine = _machine(store, lambda r: httpx.Response(409, json={"error": "Username or email already taken."}))
        result = machine.signup("ana", "ana@x.io", "secret")
        assert not result.ok
        assert isinstance(result.failure, AuthorizationFailure)
        assert "taken" in result.error

    def test_transport_failure_simulates_success(self, store, offline_counter):
        machine = _machine(store, offline_counter)
        result = machine.signup("ana", "ana@x.io", "secret")
        assert result.ok and result.demo
        assert "log in" in result.message
        assert machine.state == AuthState.UNAUTHENTICATED

    def test_posts_credentials(self, store):
        counter = CallCounter(lambda r: httpx.Response(200, json={"success": True, "message": "ok"}))
        _machine(store, counter).signup("ana", "ana@x.io", "secret")
        request = counter.requests[0]
        assert request.method == "POST"
        assert json.loads(request.content) == {"username": "ana", "email": "ana@x.io", "password": "secret"}


class TestLogout:
    def test_logout_clears_even_when_unreachable(self, store, offline_counter):
        store.set(TOKEN_KEY, "t0k3n")
        machine = _machine(store, offline_counter)
        machine.check()

        machine.logout()

        assert machine.state == AuthState.UNAUTHENTICATED
        assert machine.token is None and machine.user is None
        assert store.get(TOKEN_KEY) is None

    def test_demo_session_logs_out_locally(self, store, offline_counter):
        machine = _machine(store, offline_counter)
        machine.login("demo@x.io", "secret")
        assert machine.session.is_demo

        machine.logout()

        assert offline_counter.calls == 1
        assert not machine.session.is_demo
        assert store.get(TOKEN_KEY) is None

    def test_real_session_logout_reaches_server(self, store):
        counter = CallCounter(lambda r: httpx.Response(200, json={"success": True}))
        store.set(TOKEN_KEY, "t0k3n")
        machine = _machine(store, counter)
        assert not machine.session.is_demo

        machine.logout()

        assert counter.requests[-1].url.params["action"] == "logout"
        assert counter.requests[-1].headers["Authorization"] == "Bearer t0k3n"

    def test_listeners_see_dashboard_visibility_changes(self, store, offline_counter):
        machine = _machine(store, offline_counter)
        seen = []
        machine.subscribe(lambda state, session: seen.append(state))

        machine.login("demo@x.io", "pw")
        machine.check()
        machine.logout()

        assert seen == [AuthState.AUTHENTICATED, AuthState.UNAUTHENTICATED]


def test_auth_action_parse():
    assert AuthAction.parse("LOGIN") is AuthAction.LOGIN
    with pytest.raises(UnknownActionError):
        AuthAction.parse("reset")


def test_full_flow_against_reference_server(settings):
    app = create_app(settings)
    with TestClient(app, base_url=API_ROOT) as client:
        machine = SessionAuthMachine(API_ROOT, ClientStateStore(), client=client)

        assert machine.signup("ana", "ana@x.io", "secret").ok
        duplicate = machine.signup("ana", "other@x.io", "secret")
        assert not duplicate.ok and "taken" in duplicate.error

        bad = machine.login("ana@x.io", "nope")
        assert not bad.ok and isinstance(bad.failure, AuthorizationFailure)

        good = machine.login("ana@x.io", "secret")
        assert good.ok and not good.demo
        assert len(machine.token) == 64
        assert machine.user.username == "ana"

        assert machine.check().ok

        token = machine.token
        machine.logout()
        assert machine.state == AuthState.UNAUTHENTICATED

        # the server no longer knows the old token
        stale_store = ClientStateStore()
        stale_store.set(TOKEN_KEY, token)
        other = SessionAuthMachine(API_ROOT, stale_store, client=client)
        assert not other.check().ok
