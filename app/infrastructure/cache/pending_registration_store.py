from __future__ import annotations

import json
import logging
from dataclasses import asdict

from redis import Redis, RedisError

from app.application.ports.pending_registration_port import PendingRegistrationPort
from app.domain.entities.user import UnconfirmedUser
from app.domain.exceptions import InternalError, PendingRegistrationNotFoundError


logger = logging.getLogger(__name__)

KEY_PREFIX = "auth:pending:"
NOT_FOUND_MESSAGE = "Confirmation code not found or expired."


def create_redis_client(redis_url: str, *, socket_timeout: float = 5.0) -> Redis:
    return Redis.from_url(
        redis_url,
        decode_responses=True,
        socket_timeout=socket_timeout,
        socket_connect_timeout=socket_timeout,
    )


class RedisPendingRegistrationStore(PendingRegistrationPort):
    """Unconfirmed users keyed by confirmation code; Redis key expiry enforces the TTL."""

    def __init__(self, client: Redis):
        self._client = client

    def put(self, *, code: str, user: UnconfirmedUser, ttl_seconds: int) -> None:
        if ttl_seconds <= 0:
            raise ValueError("ttl_seconds must be positive.")
        try:
            stored = self._client.set(_key(code), json.dumps(asdict(user)), ex=ttl_seconds, nx=True)
        except RedisError as exc:
            logger.exception("pending_registration_store: put_failed")
            raise InternalError() from exc
        if not stored:
            logger.error("pending_registration_store: code_collision")
            raise InternalError()

    def get(self, *, code: str) -> UnconfirmedUser:
        try:
            raw = self._client.get(_key(code))
        except RedisError as exc:
            logger.exception("pending_registration_store: get_failed")
            raise InternalError() from exc
        return _decode(raw)

    def pop(self, *, code: str) -> UnconfirmedUser:
        try:
            raw = self._client.getdel(_key(code))
        except RedisError as exc:
            logger.exception("pending_registration_store: pop_failed")
            raise InternalError() from exc
        return _decode(raw)


def _key(code: str) -> str:
    return f"{KEY_PREFIX}{code}"


def _decode(raw) -> UnconfirmedUser:
    if raw is None:
        raise PendingRegistrationNotFoundError(NOT_FOUND_MESSAGE)
    if isinstance(raw, bytes):
        raw = raw.decode("utf-8")
    try:
        data = json.loads(raw)
        return UnconfirmedUser(
            name=data["name"],
            email=data["email"],
            password_hash=data["password_hash"],
            phone=data["phone"],
        )
    except (ValueError, KeyError, TypeError) as exc:
        logger.error("pending_registration_store: corrupt_entry error=%s", exc)
        raise InternalError() from exc
