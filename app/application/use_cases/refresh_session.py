from __future__ import annotations

import logging

from app.application.dto.auth import AuthPolicy, AuthTokensOutput, RefreshTokensInput
from app.application.ports.accounts_port import AccountsPort
from app.application.ports.token_port import TokenPort
from app.domain.exceptions import InvalidTokenError, TokenExpiredError

from .auth_common import issue_tokens


logger = logging.getLogger(__name__)


class RefreshSessionUseCase:
    def __init__(
        self,
        *,
        accounts_port: AccountsPort,
        token_port: TokenPort,
        policy: AuthPolicy,
    ):
        self._accounts_port = accounts_port
        self._token_port = token_port
        self._policy = policy

    def execute(self, command: RefreshTokensInput) -> AuthTokensOutput:
        token = (command.refresh_token or "").strip()
        if not token:
            raise InvalidTokenError("Missing refresh token.")

        self._token_port.validate_refresh(token=token)
        claims = self._token_port.parse_refresh(token=token)

        record = self._accounts_port.get_refresh_token_record(user_id=claims.user_id)
        if record.expires_at != claims.expires_at or record.token_id != claims.token_id:
            logger.warning(
                "refresh_session: stale_refresh_token user_id=%s presented_jti=%s",
                claims.user_id,
                claims.token_id,
            )
            raise TokenExpiredError("Refresh token has expired or was rotated.")

        user = self._accounts_port.find_public_by_id(user_id=claims.user_id)
        return issue_tokens(
            user_id=user.id,
            email=user.email,
            role=user.role,
            accounts_port=self._accounts_port,
            token_port=self._token_port,
            policy=self._policy,
        )
