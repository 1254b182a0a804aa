from __future__ import annotations

import logging

from app.application.dto.auth import AuthPolicy, AuthTokensOutput, SignInInput
from app.application.ports.accounts_port import AccountsPort
from app.application.ports.password_hasher_port import PasswordHasherPort
from app.application.ports.token_port import TokenPort
from app.domain.entities.user import TERMINAL_STATUSES, UserStatus
from app.domain.exceptions import (
    AccountBlockedError,
    InvalidCredentialsError,
    UserNotFoundError,
)
from app.domain.services.registration_rules import normalize_email, resolve_client_ip
from app.shared.logging import redact_email

from .auth_common import issue_tokens


logger = logging.getLogger(__name__)

INCORRECT_CREDENTIALS_MESSAGE = "Incorrect email or password."
ACCOUNT_BLOCKED_MESSAGE = "Account is blocked or removed."


class SignInUseCase:
    def __init__(
        self,
        *,
        accounts_port: AccountsPort,
        password_hasher: PasswordHasherPort,
        token_port: TokenPort,
        policy: AuthPolicy,
    ):
        self._accounts_port = accounts_port
        self._password_hasher = password_hasher
        self._token_port = token_port
        self._policy = policy

    def execute(self, command: SignInInput) -> AuthTokensOutput:
        ip_address = resolve_client_ip(command.client_addr)
        email = normalize_email(command.email)

        try:
            credentials = self._accounts_port.find_credentials_by_email(email=email)
        except UserNotFoundError:
            raise InvalidCredentialsError(INCORRECT_CREDENTIALS_MESSAGE) from None

        if credentials.status in TERMINAL_STATUSES:
            logger.warning(
                "sign_in: rejected_terminal_status user_id=%s status=%s",
                credentials.id,
                credentials.status.value,
            )
            raise AccountBlockedError(ACCOUNT_BLOCKED_MESSAGE)

        if not self._password_hasher.verify(command.password, credentials.password_hash):
            raise InvalidCredentialsError(INCORRECT_CREDENTIALS_MESSAGE)

        # Not transactional: a later failure leaves the status flipped; the next sign-in re-sets it.
        self._accounts_port.set_status(user_id=credentials.id, status=UserStatus.ACTIVE)
        tokens = issue_tokens(
            user_id=credentials.id,
            email=email,
            role=credentials.role,
            accounts_port=self._accounts_port,
            token_port=self._token_port,
            policy=self._policy,
        )

        # Status and token above stay committed if this fails.
        self._accounts_port.append_login_history(user_id=credentials.id, ip_address=ip_address)

        logger.info("sign_in: signed_in user_id=%s email=%s", credentials.id, redact_email(email))
        return tokens
