from __future__ import annotations

import logging

from app.application.dto.auth import ConfirmEmailInput, ConfirmEmailOutput
from app.application.ports.accounts_port import AccountsPort
from app.application.ports.pending_registration_port import PendingRegistrationPort
from app.domain.exceptions import ValidationError
from app.shared.logging import redact_email


logger = logging.getLogger(__name__)


class ConfirmEmailUseCase:
    def __init__(
        self,
        *,
        accounts_port: AccountsPort,
        pending_port: PendingRegistrationPort,
    ):
        self._accounts_port = accounts_port
        self._pending_port = pending_port

    def execute(self, command: ConfirmEmailInput) -> ConfirmEmailOutput:
        code = (command.code or "").strip()
        if not code:
            raise ValidationError("Confirmation code is required.")

        # Consumed on read: a second confirmation with the same code is NotFound.
        pending_user = self._pending_port.pop(code=code)
        user = self._accounts_port.insert_user(user=pending_user)
        logger.info("confirm_email: user_confirmed user_id=%s email=%s", user.id, redact_email(user.email))
        return ConfirmEmailOutput(user_id=user.id, email=user.email)
