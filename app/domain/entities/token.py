from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime

from app.domain.entities.user import UserRole


@dataclass(frozen=True)
class AccessClaims:
    user_id: int
    email: str
    role: UserRole
    issued_at: datetime
    expires_at: datetime


@dataclass(frozen=True)
class RefreshClaims:
    user_id: int
    token_id: str
    issued_at: datetime
    expires_at: datetime


@dataclass(frozen=True)
class IssuedRefreshToken:
    token: str
    token_id: str
    expires_at: datetime
