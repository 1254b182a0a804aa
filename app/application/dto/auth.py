from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime, timedelta


@dataclass(frozen=True)
class AuthPolicy:
    access_ttl: timedelta = timedelta(minutes=15)
    refresh_ttl: timedelta = timedelta(days=30)
    pending_registration_ttl: timedelta = timedelta(minutes=2)


@dataclass(frozen=True)
class RegisterUserInput:
    name: str
    email: str
    phone: str
    password: str


@dataclass(frozen=True)
class RegisterUserOutput:
    email: str


@dataclass(frozen=True)
class ConfirmEmailInput:
    code: str


@dataclass(frozen=True)
class ConfirmEmailOutput:
    user_id: int
    email: str


@dataclass(frozen=True)
class SignInInput:
    email: str
    password: str
    client_addr: str


@dataclass(frozen=True)
class RefreshTokensInput:
    refresh_token: str


@dataclass(frozen=True)
class SignOutInput:
    refresh_token: str


@dataclass(frozen=True)
class AuthTokensOutput:
    access_token: str
    refresh_token: str
    refresh_expires_at: datetime


@dataclass(frozen=True)
class CurrentUserOutput:
    id: int
    email: str
    role: str
