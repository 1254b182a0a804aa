from __future__ import annotations

from datetime import datetime
from typing import Protocol

from app.domain.entities.user import (
    LoginHistoryEntry,
    PublicUser,
    RefreshTokenRecord,
    UnconfirmedUser,
    User,
    UserCredentials,
    UserStatus,
)


class AccountsPort(Protocol):
    def ensure_email_and_phone_available(self, *, email: str, phone: str) -> None:
        ...

    def insert_user(self, *, user: UnconfirmedUser) -> User:
        ...

    def find_credentials_by_email(self, *, email: str) -> UserCredentials:
        ...

    def find_public_by_id(self, *, user_id: int) -> PublicUser:
        ...

    def set_status(self, *, user_id: int, status: UserStatus) -> None:
        ...

    def upsert_refresh_token(
        self,
        *,
        user_id: int,
        token: str,
        token_id: str,
        expires_at: datetime,
    ) -> None:
        ...

    def delete_refresh_token(self, *, user_id: int) -> None:
        ...

    def get_refresh_token_record(self, *, user_id: int) -> RefreshTokenRecord:
        ...

    def append_login_history(self, *, user_id: int, ip_address: str) -> LoginHistoryEntry:
        ...
