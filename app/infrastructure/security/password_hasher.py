from __future__ import annotations

import logging

from passlib.context import CryptContext

from app.application.ports.password_hasher_port import PasswordHasherPort
from app.domain.exceptions import InternalError


logger = logging.getLogger(__name__)


class PasswordHasher(PasswordHasherPort):
    def __init__(self, *, time_cost: int = 3, memory_cost: int = 65536, parallelism: int = 4):
        self._ctx = CryptContext(
            schemes=["argon2"],
            deprecated="auto",
            argon2__time_cost=time_cost,
            argon2__memory_cost=memory_cost,
            argon2__parallelism=parallelism,
        )

    def hash(self, plain_password: str) -> str:
        try:
            return self._ctx.hash(plain_password)
        except Exception as exc:
            logger.exception("password_hasher: hash_failed")
            raise InternalError() from exc

    def verify(self, plain_password: str, password_hash: str) -> bool:
        try:
            return self._ctx.verify(plain_password, password_hash)
        except Exception:
            return False
