from __future__ import annotations

import json

import pytest
from redis import RedisError

from app.domain.entities.user import UnconfirmedUser
from app.domain.exceptions import InternalError, PendingRegistrationNotFoundError
from app.infrastructure.cache.pending_registration_store import RedisPendingRegistrationStore


class FakeRedis:
    """Dict-backed stand-in; entries with a TTL vanish when ``expire_all`` is called."""

    def __init__(self):
        self.values: dict[str, str] = {}
        self.ttls: dict[str, int] = {}

    def set(self, key, value, ex=None, nx=False):
        if nx and key in self.values:
            return None
        self.values[key] = value
        self.ttls[key] = ex
        return True

    def get(self, key):
        return self.values.get(key)

    def getdel(self, key):
        self.ttls.pop(key, None)
        return self.values.pop(key, None)

    def expire_all(self):
        self.values.clear()
        self.ttls.clear()


class BrokenRedis:
    def set(self, *args, **kwargs):
        raise RedisError("connection refused")

    def get(self, key):
        raise RedisError("connection refused")

    def getdel(self, key):
        raise RedisError("connection refused")


USER = UnconfirmedUser(name="Alice", email="a@x.com", password_hash="hash", phone="+1000")


def test_put_stores_serialized_user_with_ttl():
    client = FakeRedis()
    store = RedisPendingRegistrationStore(client)

    store.put(code="abc", user=USER, ttl_seconds=120)

    assert client.ttls["auth:pending:abc"] == 120
    assert json.loads(client.values["auth:pending:abc"])["email"] == "a@x.com"
    assert store.get(code="abc") == USER


def test_pop_consumes_entry():
    store = RedisPendingRegistrationStore(FakeRedis())
    store.put(code="abc", user=USER, ttl_seconds=120)

    assert store.pop(code="abc") == USER
    with pytest.raises(PendingRegistrationNotFoundError):
        store.pop(code="abc")


def test_expired_entry_is_not_found():
    client = FakeRedis()
    store = RedisPendingRegistrationStore(client)
    store.put(code="abc", user=USER, ttl_seconds=120)

    client.expire_all()

    with pytest.raises(PendingRegistrationNotFoundError):
        store.get(code="abc")


def test_code_collision_is_internal_error():
    store = RedisPendingRegistrationStore(FakeRedis())
    store.put(code="abc", user=USER, ttl_seconds=120)

    with pytest.raises(InternalError):
        store.put(code="abc", user=USER, ttl_seconds=120)


def test_corrupt_entry_is_internal_error():
    client = FakeRedis()
    client.values["auth:pending:abc"] = "{not json"
    store = RedisPendingRegistrationStore(client)

    with pytest.raises(InternalError):
        store.get(code="abc")


def test_redis_failures_surface_as_internal_error():
    store = RedisPendingRegistrationStore(BrokenRedis())

    with pytest.raises(InternalError) as exc_info:
        store.put(code="abc", user=USER, ttl_seconds=120)
    assert "connection refused" not in str(exc_info.value)
    with pytest.raises(InternalError):
        store.pop(code="abc")


def test_non_positive_ttl_is_rejected():
    with pytest.raises(ValueError):
        RedisPendingRegistrationStore(FakeRedis()).put(code="abc", user=USER, ttl_seconds=0)
