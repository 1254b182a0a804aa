from __future__ import annotations

from typing import Protocol

from app.domain.entities.user import UnconfirmedUser


class PendingRegistrationPort(Protocol):
    def put(self, *, code: str, user: UnconfirmedUser, ttl_seconds: int) -> None:
        ...

    def get(self, *, code: str) -> UnconfirmedUser:
        ...

    def pop(self, *, code: str) -> UnconfirmedUser:
        ...
