from __future__ import annotations

from functools import lru_cache

from fastapi import Depends, Header, HTTPException

from app.application.dto.auth import AuthPolicy, CurrentUserOutput
from app.application.session_manager import SessionManager
from app.infrastructure.cache.pending_registration_store import (
    RedisPendingRegistrationStore,
    create_redis_client,
)
from app.infrastructure.db.engine import get_engine
from app.infrastructure.db.repositories.accounts_repository import SqlAccountsRepository
from app.infrastructure.notifications.confirmation_dispatcher import BackgroundConfirmationDispatcher
from app.infrastructure.notifications.smtp_confirmation_sender import SmtpConfirmationSender
from app.infrastructure.security.password_hasher import PasswordHasher
from app.infrastructure.security.token_service import JwtTokenService
from app.shared.config import get_settings


def _get_db_engine():
    settings = get_settings()
    if not settings.postgres_dsn:
        raise HTTPException(status_code=500, detail="POSTGRES_DSN is required.")
    return get_engine(settings.postgres_dsn)


def _get_accounts_repository() -> SqlAccountsRepository:
    return SqlAccountsRepository(_get_db_engine())


@lru_cache(maxsize=1)
def _get_pending_registration_store() -> RedisPendingRegistrationStore:
    settings = get_settings()
    client = create_redis_client(
        settings.redis_url,
        socket_timeout=settings.redis_socket_timeout_seconds,
    )
    return RedisPendingRegistrationStore(client)


@lru_cache(maxsize=1)
def _get_password_hasher() -> PasswordHasher:
    return PasswordHasher()


@lru_cache(maxsize=1)
def _get_token_service() -> JwtTokenService:
    settings = get_settings()
    if not settings.jwt_secret:
        raise HTTPException(status_code=500, detail="JWT_SECRET is required.")
    return JwtTokenService(jwt_secret=settings.jwt_secret)


@lru_cache(maxsize=1)
def _get_auth_policy() -> AuthPolicy:
    return get_settings().auth_policy()


@lru_cache(maxsize=1)
def get_confirmation_dispatcher() -> BackgroundConfirmationDispatcher:
    settings = get_settings()
    sender = SmtpConfirmationSender(
        host=settings.mail_host or None,
        port=settings.mail_port,
        from_address=settings.mail_from or None,
        password=settings.mail_password or None,
        use_tls=settings.mail_use_tls,
        timeout_seconds=settings.mail_timeout_seconds,
    )
    return BackgroundConfirmationDispatcher(sender=sender)


def get_session_manager() -> SessionManager:
    return SessionManager(
        accounts_port=_get_accounts_repository(),
        pending_port=_get_pending_registration_store(),
        password_hasher=_get_password_hasher(),
        token_port=_get_token_service(),
        dispatcher=get_confirmation_dispatcher(),
        policy=_get_auth_policy(),
    )


def get_bearer_token(authorization: str | None = Header(default=None)) -> str:
    if not authorization or not authorization.startswith("Bearer "):
        raise HTTPException(status_code=401, detail="Invalid authorization header.")
    token = authorization.replace("Bearer ", "", 1).strip()
    if not token:
        raise HTTPException(status_code=401, detail="Missing access token.")
    return token


def get_current_user(
    token: str = Depends(get_bearer_token),
    session_manager: SessionManager = Depends(get_session_manager),
) -> CurrentUserOutput:
    return session_manager.current_user(access_token=token)
