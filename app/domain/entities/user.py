from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime
from enum import Enum


class UserStatus(str, Enum):
    ACTIVE = "active"
    SUSPENDED = "suspended"
    BLOCKED = "blocked"
    REMOVED = "removed"


class UserRole(str, Enum):
    USER = "user"
    ADMIN = "admin"


TERMINAL_STATUSES = frozenset({UserStatus.BLOCKED, UserStatus.REMOVED})


@dataclass(frozen=True)
class User:
    id: int
    name: str
    email: str
    password_hash: str
    phone: str
    created_at: datetime
    status: UserStatus
    role: UserRole


@dataclass(frozen=True)
class UnconfirmedUser:
    """Registration input with the password already hashed; no id, status or role yet."""

    name: str
    email: str
    password_hash: str
    phone: str


@dataclass(frozen=True)
class PendingRegistration:
    code: str
    user: UnconfirmedUser


@dataclass(frozen=True)
class UserCredentials:
    id: int
    password_hash: str
    status: UserStatus
    role: UserRole


@dataclass(frozen=True)
class PublicUser:
    id: int
    email: str
    role: UserRole


@dataclass(frozen=True)
class RefreshTokenRecord:
    user_id: int
    token_id: str
    expires_at: datetime


@dataclass(frozen=True)
class LoginHistoryEntry:
    id: int
    user_id: int
    ip_address: str
    logged_at: datetime
