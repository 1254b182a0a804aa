from __future__ import annotations

import logging
from concurrent.futures import Future, ThreadPoolExecutor

from app.application.ports.notification_port import (
    ConfirmationDispatcherPort,
    ConfirmationSenderPort,
)
from app.shared.logging import redact_email


logger = logging.getLogger(__name__)

MAX_ATTEMPTS = 2


class BackgroundConfirmationDispatcher(ConfirmationDispatcherPort):
    """Delivers confirmation codes off the caller's thread.

    One retry after a failed send; the final failure is only logged.
    """

    def __init__(self, *, sender: ConfirmationSenderPort, max_workers: int = 2):
        self._sender = sender
        self._executor = ThreadPoolExecutor(max_workers=max_workers, thread_name_prefix="confirmation-mail")

    def dispatch(self, *, address: str, code: str) -> Future | None:
        try:
            return self._executor.submit(self._deliver, address, code)
        except RuntimeError:
            logger.error("confirmation_dispatcher: executor_unavailable to=%s", redact_email(address))
            return None

    def shutdown(self, *, wait: bool = True) -> None:
        self._executor.shutdown(wait=wait)

    def _deliver(self, address: str, code: str) -> bool:
        for attempt in range(1, MAX_ATTEMPTS + 1):
            try:
                self._sender.send(address=address, code=code)
                return True
            except Exception as exc:
                logger.warning(
                    "confirmation_dispatcher: send_failed attempt=%s/%s to=%s error=%s",
                    attempt,
                    MAX_ATTEMPTS,
                    redact_email(address),
                    exc,
                )
        logger.error("confirmation_dispatcher: gave_up to=%s", redact_email(address))
        return False
