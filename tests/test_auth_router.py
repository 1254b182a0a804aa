from __future__ import annotations

from datetime import datetime, timedelta, timezone

import pytest
from fastapi.testclient import TestClient

from app.api.deps import _get_auth_policy, get_session_manager
from app.application.dto.auth import AuthTokensOutput, ConfirmEmailOutput, CurrentUserOutput, RegisterUserOutput
from app.domain.exceptions import (
    AccountBlockedError,
    EmailTakenError,
    InternalError,
    InvalidCredentialsError,
    PendingRegistrationNotFoundError,
    TokenExpiredError,
    ValidationError,
)
from app.main import app


class FakeSessionManager:
    def __init__(self, error: Exception | None = None):
        self.error = error
        self.calls: list[tuple[str, object]] = []

    def _record(self, name: str, value: object) -> None:
        self.calls.append((name, value))
        if self.error is not None:
            raise self.error

    def _tokens(self) -> AuthTokensOutput:
        return AuthTokensOutput(
            access_token="access-1",
            refresh_token="refresh-1",
            refresh_expires_at=datetime.now(timezone.utc) + timedelta(days=30),
        )

    def register(self, command):
        self._record("register", command)
        return RegisterUserOutput(email=command.email.strip().lower())

    def confirm_email(self, command):
        self._record("confirm_email", command)
        return ConfirmEmailOutput(user_id=1, email="a@x.com")

    def sign_in(self, command):
        self._record("sign_in", command)
        return self._tokens()

    def refresh_tokens(self, command):
        self._record("refresh_tokens", command)
        return self._tokens()

    def sign_out(self, command):
        self._record("sign_out", command)

    def current_user(self, *, access_token):
        self._record("current_user", access_token)
        return CurrentUserOutput(id=1, email="a@x.com", role="user")


@pytest.fixture
def fake():
    return FakeSessionManager()


@pytest.fixture
def client(fake):
    app.dependency_overrides[get_session_manager] = lambda: fake
    yield TestClient(app)
    app.dependency_overrides.clear()


REGISTER_BODY = {"name": "Alice", "email": "A@X.com", "phone": "+10001", "password": "Secret123"}


def test_register_returns_created(client, fake):
    response = client.post("/v1/auth/register", json=REGISTER_BODY)

    assert response.status_code == 201
    assert response.json() == {"message": "A confirmation code was sent to a@x.com."}
    assert fake.calls[0][0] == "register"


@pytest.mark.parametrize(
    "error, status_code",
    [
        (ValidationError("Invalid email address."), 400),
        (EmailTakenError("A user with this email already exists."), 409),
        (PendingRegistrationNotFoundError("Confirmation code not found or expired."), 404),
        (AccountBlockedError("Account is blocked."), 403),
        (InvalidCredentialsError("Incorrect email or password."), 401),
        (TokenExpiredError("Refresh token expired."), 401),
    ],
)
def test_domain_errors_map_to_status_codes(client, fake, error, status_code):
    fake.error = error

    response = client.post("/v1/auth/register", json=REGISTER_BODY)

    assert response.status_code == status_code
    assert response.json() == {"detail": str(error)}


def test_short_password_reaches_domain_validation(client, fake):
    fake.error = ValidationError("password must have at least 8 characters.")

    response = client.post("/v1/auth/register", json={**REGISTER_BODY, "password": "Ab1"})

    assert response.status_code == 400
    assert fake.calls[0][1].password == "Ab1"


def test_empty_confirmation_code_reaches_domain_validation(client, fake):
    fake.error = ValidationError("Confirmation code is required.")

    response = client.post("/v1/auth/confirm-email", json={"code": ""})

    assert response.status_code == 400


def test_internal_error_hides_details(client, fake):
    fake.error = InternalError("redis connection refused at 10.0.0.5")

    response = client.post("/v1/auth/register", json=REGISTER_BODY)

    assert response.status_code == 500
    assert response.json() == {"detail": "An internal error occurred."}


def test_confirm_email_accepts_body_and_query(client, fake):
    assert client.post("/v1/auth/confirm-email", json={"code": "abc"}).status_code == 200
    assert client.get("/v1/auth/confirm-email", params={"code": "xyz"}).status_code == 200

    codes = [command.code for name, command in fake.calls]
    assert codes == ["abc", "xyz"]


def test_sign_in_sets_http_only_refresh_cookie(client, fake):
    response = client.post("/v1/auth/sign-in", json={"email": "a@x.com", "password": "Secret123"})

    assert response.status_code == 200
    assert response.json() == {
        "access_token": "access-1",
        "refresh_token": "refresh-1",
        "token_type": "bearer",
    }
    set_cookie = response.headers["set-cookie"]
    assert set_cookie.startswith("refresh_token=refresh-1")
    assert "HttpOnly" in set_cookie
    assert "Path=/v1/auth" in set_cookie
    assert fake.calls[0][1].client_addr.endswith(":50000")


def test_refresh_reads_token_from_body(client, fake):
    response = client.post("/v1/auth/refresh", json={"refresh_token": "body-token"})

    assert response.status_code == 200
    assert fake.calls[0][1].refresh_token == "body-token"


def test_refresh_prefers_cookie(client, fake):
    client.cookies.set("refresh_token", "cookie-token")

    response = client.post("/v1/auth/refresh", json={"refresh_token": "body-token"})

    assert response.status_code == 200
    assert fake.calls[0][1].refresh_token == "cookie-token"


def test_refresh_without_token_is_unauthorized(client, fake):
    response = client.post("/v1/auth/refresh")

    assert response.status_code == 401
    assert fake.calls == []


def test_sign_out_clears_cookie(client, fake):
    response = client.post("/v1/auth/sign-out", json={"refresh_token": "refresh-1"})

    assert response.status_code == 200
    assert response.json() == {"message": "Signed out."}
    set_cookie = response.headers["set-cookie"]
    assert set_cookie.startswith("refresh_token=")
    assert "Max-Age=0" in set_cookie
    assert fake.calls[0][0] == "sign_out"


def test_me_requires_bearer_token(client, fake):
    assert client.get("/v1/auth/me").status_code == 401

    response = client.get("/v1/auth/me", headers={"Authorization": "Bearer access-1"})

    assert response.status_code == 200
    assert response.json() == {"id": 1, "email": "a@x.com", "role": "user"}
    assert fake.calls == [("current_user", "access-1")]


def test_health():
    response = TestClient(app).get("/health")

    assert response.status_code == 200
    assert response.json() == {"status": "ok"}


def test_auth_policy_is_loaded_once(monkeypatch):
    _get_auth_policy.cache_clear()
    monkeypatch.setenv("JWT_ACCESS_TTL_MINUTES", "5")
    try:
        first = _get_auth_policy()
        monkeypatch.setenv("JWT_ACCESS_TTL_MINUTES", "60")

        assert _get_auth_policy() is first
        assert first.access_ttl == timedelta(minutes=5)
    finally:
        _get_auth_policy.cache_clear()
