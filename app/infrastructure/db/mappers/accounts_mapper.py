from __future__ import annotations

from datetime import datetime, timezone
from typing import Any, Mapping

from app.domain.entities.user import (
    LoginHistoryEntry,
    PublicUser,
    RefreshTokenRecord,
    User,
    UserCredentials,
    UserRole,
    UserStatus,
)


def _as_utc(value: datetime) -> datetime:
    if value.tzinfo is None:
        return value.replace(tzinfo=timezone.utc)
    return value.astimezone(timezone.utc)


def map_row_to_user(row: Mapping[str, Any]) -> User:
    return User(
        id=int(row["id"]),
        name=row["firstname"],
        email=row["email"],
        password_hash=row["password_hash"],
        phone=row["phone"],
        created_at=_as_utc(row["created_at"]),
        status=UserStatus(row["status"]),
        role=UserRole(row["role"]),
    )


def map_row_to_user_credentials(row: Mapping[str, Any]) -> UserCredentials:
    return UserCredentials(
        id=int(row["id"]),
        password_hash=row["password_hash"],
        status=UserStatus(row["status"]),
        role=UserRole(row["role"]),
    )


def map_row_to_public_user(row: Mapping[str, Any]) -> PublicUser:
    return PublicUser(
        id=int(row["id"]),
        email=row["email"],
        role=UserRole(row["role"]),
    )


def map_row_to_refresh_token_record(row: Mapping[str, Any]) -> RefreshTokenRecord:
    return RefreshTokenRecord(
        user_id=int(row["user_id"]),
        token_id=row["token_id"],
        expires_at=_as_utc(row["expires_at"]),
    )


def map_row_to_login_history_entry(row: Mapping[str, Any]) -> LoginHistoryEntry:
    return LoginHistoryEntry(
        id=int(row["id"]),
        user_id=int(row["user_id"]),
        ip_address=row["ip_address"],
        logged_at=_as_utc(row["logged_at"]),
    )
