from __future__ import annotations

from datetime import datetime, timedelta
from typing import Protocol

from app.domain.entities.token import AccessClaims, IssuedRefreshToken, RefreshClaims
from app.domain.entities.user import UserRole


class TokenPort(Protocol):
    def issue_access(
        self,
        *,
        user_id: int,
        email: str,
        role: UserRole,
        ttl: timedelta,
        now: datetime,
    ) -> str:
        ...

    def issue_refresh(self, *, user_id: int, ttl: timedelta, now: datetime) -> IssuedRefreshToken:
        ...

    def validate_refresh(self, *, token: str) -> None:
        ...

    def parse_refresh(self, *, token: str) -> RefreshClaims:
        ...

    def decode_access(self, *, token: str) -> AccessClaims:
        ...
