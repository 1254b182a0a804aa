from __future__ import annotations

import logging

from app.application.dto.auth import SignOutInput
from app.application.ports.accounts_port import AccountsPort
from app.application.ports.token_port import TokenPort
from app.domain.entities.user import UserStatus
from app.domain.exceptions import InvalidTokenError


logger = logging.getLogger(__name__)


class SignOutUseCase:
    def __init__(self, *, accounts_port: AccountsPort, token_port: TokenPort):
        self._accounts_port = accounts_port
        self._token_port = token_port

    def execute(self, command: SignOutInput) -> None:
        token = (command.refresh_token or "").strip()
        if not token:
            raise InvalidTokenError("Missing refresh token.")

        # Expiry is not checked so that an expired token can still end its session.
        claims = self._token_port.parse_refresh(token=token)
        self._accounts_port.set_status(user_id=claims.user_id, status=UserStatus.SUSPENDED)
        self._accounts_port.delete_refresh_token(user_id=claims.user_id)
        logger.info("sign_out: signed_out user_id=%s", claims.user_id)
