from __future__ import annotations

from app.application.dto.auth import CurrentUserOutput
from app.application.ports.accounts_port import AccountsPort
from app.application.ports.token_port import TokenPort


class GetCurrentUserUseCase:
    def __init__(self, *, accounts_port: AccountsPort, token_port: TokenPort):
        self._accounts_port = accounts_port
        self._token_port = token_port

    def execute(self, *, access_token: str) -> CurrentUserOutput:
        claims = self._token_port.decode_access(token=access_token)
        user = self._accounts_port.find_public_by_id(user_id=claims.user_id)
        return CurrentUserOutput(id=user.id, email=user.email, role=user.role.value)
