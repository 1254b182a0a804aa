from __future__ import annotations

import logging
from datetime import datetime, timedelta, timezone
from uuid import uuid4

import jwt

from app.application.ports.token_port import TokenPort
from app.domain.entities.token import AccessClaims, IssuedRefreshToken, RefreshClaims
from app.domain.entities.user import UserRole
from app.domain.exceptions import InternalError, InvalidTokenError, TokenExpiredError


logger = logging.getLogger(__name__)

ALGORITHM = "HS256"
ACCESS_TOKEN_TYPE = "access"
REFRESH_TOKEN_TYPE = "refresh"


class JwtTokenService(TokenPort):
    def __init__(self, *, jwt_secret: str):
        if not jwt_secret:
            raise ValueError("jwt_secret is required.")
        self._jwt_secret = jwt_secret

    def issue_access(
        self,
        *,
        user_id: int,
        email: str,
        role: UserRole,
        ttl: timedelta,
        now: datetime,
    ) -> str:
        payload = {
            "sub": str(user_id),
            "email": email,
            "role": UserRole(role).value,
            "type": ACCESS_TOKEN_TYPE,
            "iat": int(now.timestamp()),
            "exp": int((now + ttl).timestamp()),
        }
        return self._encode(payload)

    def issue_refresh(self, *, user_id: int, ttl: timedelta, now: datetime) -> IssuedRefreshToken:
        exp = int((now + ttl).timestamp())
        token_id = uuid4().hex
        payload = {
            "sub": str(user_id),
            "jti": token_id,
            "type": REFRESH_TOKEN_TYPE,
            "iat": int(now.timestamp()),
            "exp": exp,
        }
        return IssuedRefreshToken(
            token=self._encode(payload),
            token_id=token_id,
            expires_at=_from_timestamp(exp),
        )

    def validate_refresh(self, *, token: str) -> None:
        self._decode(token, expected_type=REFRESH_TOKEN_TYPE, verify_exp=True)

    def parse_refresh(self, *, token: str) -> RefreshClaims:
        payload = self._decode(token, expected_type=REFRESH_TOKEN_TYPE, verify_exp=False)
        token_id = payload.get("jti")
        if not token_id or not isinstance(token_id, str):
            raise InvalidTokenError("Invalid refresh token id.")
        return RefreshClaims(
            user_id=_subject(payload),
            token_id=token_id,
            issued_at=_from_timestamp(payload["iat"]),
            expires_at=_from_timestamp(payload["exp"]),
        )

    def decode_access(self, *, token: str) -> AccessClaims:
        payload = self._decode(token, expected_type=ACCESS_TOKEN_TYPE, verify_exp=True)
        try:
            role = UserRole(payload.get("role"))
        except ValueError as exc:
            raise InvalidTokenError("Invalid token role.") from exc
        email = payload.get("email")
        if not email or not isinstance(email, str):
            raise InvalidTokenError("Invalid token email.")
        return AccessClaims(
            user_id=_subject(payload),
            email=email,
            role=role,
            issued_at=_from_timestamp(payload["iat"]),
            expires_at=_from_timestamp(payload["exp"]),
        )

    def _encode(self, payload: dict) -> str:
        try:
            return jwt.encode(payload, self._jwt_secret, algorithm=ALGORITHM)
        except jwt.PyJWTError as exc:
            logger.exception("token_service: encode_failed type=%s", payload.get("type"))
            raise InternalError() from exc

    def _decode(self, token: str, *, expected_type: str, verify_exp: bool) -> dict:
        try:
            payload = jwt.decode(
                token,
                self._jwt_secret,
                algorithms=[ALGORITHM],
                options={"require": ["sub", "iat", "exp"], "verify_exp": verify_exp},
            )
        except jwt.ExpiredSignatureError as exc:
            raise TokenExpiredError(f"The {expected_type} token has expired.") from exc
        except jwt.PyJWTError as exc:
            raise InvalidTokenError(f"Invalid {expected_type} token.") from exc

        if payload.get("type") != expected_type:
            raise InvalidTokenError("Invalid token type.")
        return payload


def _subject(payload: dict) -> int:
    try:
        return int(payload["sub"])
    except (KeyError, TypeError, ValueError) as exc:
        raise InvalidTokenError("Invalid token subject.") from exc


def _from_timestamp(value) -> datetime:
    return datetime.fromtimestamp(int(value), tz=timezone.utc)
