from __future__ import annotations

import os
from dataclasses import dataclass
from datetime import timedelta

from dotenv import load_dotenv

from app.application.dto.auth import AuthPolicy


load_dotenv()


def _env(name: str, default: str | None = None) -> str | None:
    return os.getenv(name, default)


def _bool(name: str, default: str = "false") -> bool:
    return (_env(name, default) or "").strip().lower() in {"1", "true", "yes", "on"}


@dataclass(frozen=True)
class Settings:
    postgres_dsn: str
    auto_create_schema: bool
    redis_url: str
    redis_socket_timeout_seconds: float
    jwt_secret: str
    jwt_access_ttl_minutes: int
    jwt_refresh_ttl_days: int
    pending_registration_ttl_seconds: int
    mail_host: str
    mail_port: int
    mail_from: str
    mail_password: str
    mail_use_tls: bool
    mail_timeout_seconds: float
    refresh_cookie_secure: bool
    log_level: str

    def auth_policy(self) -> AuthPolicy:
        return AuthPolicy(
            access_ttl=timedelta(minutes=self.jwt_access_ttl_minutes),
            refresh_ttl=timedelta(days=self.jwt_refresh_ttl_days),
            pending_registration_ttl=timedelta(seconds=self.pending_registration_ttl_seconds),
        )


def get_settings() -> Settings:
    return Settings(
        postgres_dsn=_env("POSTGRES_DSN", ""),
        auto_create_schema=_bool("AUTO_CREATE_SCHEMA"),
        redis_url=_env("REDIS_URL", "redis://localhost:6379/0"),
        redis_socket_timeout_seconds=float(_env("REDIS_SOCKET_TIMEOUT_SECONDS", "5")),
        jwt_secret=_env("JWT_SECRET", ""),
        jwt_access_ttl_minutes=int(_env("JWT_ACCESS_TTL_MINUTES", "15")),
        jwt_refresh_ttl_days=int(_env("JWT_REFRESH_TTL_DAYS", "30")),
        pending_registration_ttl_seconds=int(_env("PENDING_REGISTRATION_TTL_SECONDS", "120")),
        mail_host=_env("MAIL_HOST", ""),
        mail_port=int(_env("MAIL_PORT", "587")),
        mail_from=_env("MAIL_FROM", ""),
        mail_password=_env("MAIL_PASSWORD", ""),
        mail_use_tls=_bool("MAIL_USE_TLS", "true"),
        mail_timeout_seconds=float(_env("MAIL_TIMEOUT_SECONDS", "10")),
        refresh_cookie_secure=_bool("REFRESH_COOKIE_SECURE"),
        log_level=_env("LOG_LEVEL", "INFO"),
    )
