from __future__ import annotations

import secrets
from datetime import datetime, timezone

from app.application.dto.auth import AuthPolicy, AuthTokensOutput
from app.application.ports.accounts_port import AccountsPort
from app.application.ports.token_port import TokenPort
from app.domain.entities.user import UserRole


CONFIRMATION_CODE_BYTES = 24


def utcnow() -> datetime:
    return datetime.now(timezone.utc)


def generate_confirmation_code() -> str:
    return secrets.token_urlsafe(CONFIRMATION_CODE_BYTES)


def issue_tokens(
    *,
    user_id: int,
    email: str,
    role: UserRole,
    accounts_port: AccountsPort,
    token_port: TokenPort,
    policy: AuthPolicy,
) -> AuthTokensOutput:
    now = utcnow()
    access_token = token_port.issue_access(
        user_id=user_id,
        email=email,
        role=role,
        ttl=policy.access_ttl,
        now=now,
    )
    refresh = token_port.issue_refresh(user_id=user_id, ttl=policy.refresh_ttl, now=now)
    accounts_port.upsert_refresh_token(
        user_id=user_id,
        token=refresh.token,
        token_id=refresh.token_id,
        expires_at=refresh.expires_at,
    )
    return AuthTokensOutput(
        access_token=access_token,
        refresh_token=refresh.token,
        refresh_expires_at=refresh.expires_at,
    )
