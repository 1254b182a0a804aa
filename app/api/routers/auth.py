from __future__ import annotations

from datetime import datetime, timezone

from fastapi import APIRouter, Cookie, Depends, Request, Response

from app.api.deps import get_current_user, get_session_manager
from app.api.schemas.auth import (
    ConfirmEmailRequest,
    CurrentUserResponse,
    MessageResponse,
    RefreshTokenRequest,
    RegisterRequest,
    SignInRequest,
    TokenPairResponse,
)
from app.application.dto.auth import (
    AuthTokensOutput,
    ConfirmEmailInput,
    CurrentUserOutput,
    RefreshTokensInput,
    RegisterUserInput,
    SignInInput,
    SignOutInput,
)
from app.application.session_manager import SessionManager
from app.domain.exceptions import InvalidTokenError
from app.shared.config import get_settings


router = APIRouter()

REFRESH_COOKIE_NAME = "refresh_token"
REFRESH_COOKIE_PATH = "/v1/auth"


def _set_refresh_cookie(response: Response, tokens: AuthTokensOutput) -> None:
    now = datetime.now(timezone.utc)
    response.set_cookie(
        key=REFRESH_COOKIE_NAME,
        value=tokens.refresh_token,
        httponly=True,
        samesite="lax",
        secure=get_settings().refresh_cookie_secure,
        max_age=max(int((tokens.refresh_expires_at - now).total_seconds()), 0),
        path=REFRESH_COOKIE_PATH,
    )


def _client_addr(request: Request) -> str:
    if request.client is None:
        return ""
    host, port = request.client.host, request.client.port
    if ":" in host:
        return f"[{host}]:{port}"
    return f"{host}:{port}"


def _refresh_token_from(cookie_value: str | None, req: RefreshTokenRequest | None) -> str:
    token = cookie_value or (req.refresh_token if req is not None else None)
    if not token:
        raise InvalidTokenError("Missing refresh token.")
    return token


def _token_pair(tokens: AuthTokensOutput) -> TokenPairResponse:
    return TokenPairResponse(access_token=tokens.access_token, refresh_token=tokens.refresh_token)


@router.post("/v1/auth/register", response_model=MessageResponse, status_code=201)
def register_user(
    req: RegisterRequest,
    session_manager: SessionManager = Depends(get_session_manager),
):
    output = session_manager.register(
        RegisterUserInput(
            name=req.name,
            email=req.email,
            phone=req.phone,
            password=req.password,
        )
    )
    return MessageResponse(message=f"A confirmation code was sent to {output.email}.")


@router.post("/v1/auth/confirm-email", response_model=MessageResponse)
def confirm_email(
    req: ConfirmEmailRequest,
    session_manager: SessionManager = Depends(get_session_manager),
):
    session_manager.confirm_email(ConfirmEmailInput(code=req.code))
    return MessageResponse(message="Email confirmed.")


@router.get("/v1/auth/confirm-email", response_model=MessageResponse)
def confirm_email_link(
    code: str = "",
    session_manager: SessionManager = Depends(get_session_manager),
):
    session_manager.confirm_email(ConfirmEmailInput(code=code))
    return MessageResponse(message="Email confirmed.")


@router.post("/v1/auth/sign-in", response_model=TokenPairResponse)
def sign_in(
    req: SignInRequest,
    request: Request,
    response: Response,
    session_manager: SessionManager = Depends(get_session_manager),
):
    tokens = session_manager.sign_in(
        SignInInput(
            email=req.email,
            password=req.password,
            client_addr=_client_addr(request),
        )
    )
    _set_refresh_cookie(response, tokens)
    return _token_pair(tokens)


@router.post("/v1/auth/refresh", response_model=TokenPairResponse)
def refresh_tokens(
    response: Response,
    req: RefreshTokenRequest | None = None,
    refresh_token_cookie: str | None = Cookie(default=None, alias=REFRESH_COOKIE_NAME),
    session_manager: SessionManager = Depends(get_session_manager),
):
    tokens = session_manager.refresh_tokens(
        RefreshTokensInput(refresh_token=_refresh_token_from(refresh_token_cookie, req))
    )
    _set_refresh_cookie(response, tokens)
    return _token_pair(tokens)


@router.post("/v1/auth/sign-out", response_model=MessageResponse)
def sign_out(
    response: Response,
    req: RefreshTokenRequest | None = None,
    refresh_token_cookie: str | None = Cookie(default=None, alias=REFRESH_COOKIE_NAME),
    session_manager: SessionManager = Depends(get_session_manager),
):
    session_manager.sign_out(SignOutInput(refresh_token=_refresh_token_from(refresh_token_cookie, req)))
    response.delete_cookie(key=REFRESH_COOKIE_NAME, path=REFRESH_COOKIE_PATH)
    return MessageResponse(message="Signed out.")


@router.get("/v1/auth/me", response_model=CurrentUserResponse)
def me(user: CurrentUserOutput = Depends(get_current_user)):
    return CurrentUserResponse(id=user.id, email=user.email, role=user.role)
