from __future__ import annotations

import logging
import smtplib
import ssl
from email.message import EmailMessage

from app.application.ports.notification_port import ConfirmationSenderPort
from app.shared.logging import redact_email


logger = logging.getLogger(__name__)

SUBJECT = "Registration confirmation"


class SmtpConfirmationSender(ConfirmationSenderPort):
    def __init__(
        self,
        *,
        host: str | None,
        port: int = 587,
        from_address: str | None = None,
        password: str | None = None,
        use_tls: bool = True,
        timeout_seconds: float = 10.0,
    ):
        self._host = host
        self._port = port
        self._from_address = from_address
        self._password = password
        self._use_tls = use_tls
        self._timeout_seconds = timeout_seconds

    @property
    def is_configured(self) -> bool:
        return bool(self._host and self._from_address)

    def build_message(self, *, address: str, code: str) -> EmailMessage:
        message = EmailMessage()
        message["Subject"] = SUBJECT
        message["From"] = self._from_address or ""
        message["To"] = address
        message.set_content(f"Your confirmation code: {code}")
        return message

    def send(self, *, address: str, code: str) -> None:
        if not self.is_configured:
            logger.info(
                "smtp_confirmation_sender: dev_mode_not_sent to=%s",
                redact_email(address),
            )
            return

        message = self.build_message(address=address, code=code)
        context = ssl.create_default_context()
        if self._use_tls:
            with smtplib.SMTP(self._host, self._port, timeout=self._timeout_seconds) as server:
                server.starttls(context=context)
                self._login(server)
                server.send_message(message)
        else:
            with smtplib.SMTP_SSL(
                self._host, self._port, context=context, timeout=self._timeout_seconds
            ) as server:
                self._login(server)
                server.send_message(message)
        logger.info("smtp_confirmation_sender: sent to=%s", redact_email(address))

    def _login(self, server: smtplib.SMTP) -> None:
        if self._password:
            server.login(self._from_address, self._password)
