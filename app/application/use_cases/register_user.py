from __future__ import annotations

import logging
from typing import Callable

from app.application.dto.auth import AuthPolicy, RegisterUserInput, RegisterUserOutput
from app.application.ports.accounts_port import AccountsPort
from app.application.ports.notification_port import ConfirmationDispatcherPort
from app.application.ports.password_hasher_port import PasswordHasherPort
from app.application.ports.pending_registration_port import PendingRegistrationPort
from app.domain.entities.user import UnconfirmedUser
from app.domain.services.registration_rules import (
    validate_email,
    validate_name,
    validate_password,
    validate_phone,
)
from app.shared.logging import redact_email

from .auth_common import generate_confirmation_code


logger = logging.getLogger(__name__)


class RegisterUserUseCase:
    def __init__(
        self,
        *,
        accounts_port: AccountsPort,
        pending_port: PendingRegistrationPort,
        password_hasher: PasswordHasherPort,
        dispatcher: ConfirmationDispatcherPort,
        policy: AuthPolicy,
        code_factory: Callable[[], str] = generate_confirmation_code,
    ):
        self._accounts_port = accounts_port
        self._pending_port = pending_port
        self._password_hasher = password_hasher
        self._dispatcher = dispatcher
        self._policy = policy
        self._code_factory = code_factory

    def execute(self, command: RegisterUserInput) -> RegisterUserOutput:
        name = validate_name(command.name)
        email = validate_email(command.email)
        phone = validate_phone(command.phone)
        password = validate_password(command.password)

        # Only confirmed users are visible here; a pending duplicate is caught at confirmation.
        self._accounts_port.ensure_email_and_phone_available(email=email, phone=phone)

        pending_user = UnconfirmedUser(
            name=name,
            email=email,
            password_hash=self._password_hasher.hash(password),
            phone=phone,
        )
        code = self._code_factory()
        self._pending_port.put(
            code=code,
            user=pending_user,
            ttl_seconds=int(self._policy.pending_registration_ttl.total_seconds()),
        )
        logger.info("register_user: pending_staged email=%s", redact_email(email))

        self._dispatcher.dispatch(address=email, code=code)
        return RegisterUserOutput(email=email)
