from __future__ import annotations

from concurrent.futures import Future
from typing import Protocol


class ConfirmationSenderPort(Protocol):
    def send(self, *, address: str, code: str) -> None:
        ...


class ConfirmationDispatcherPort(Protocol):
    def dispatch(self, *, address: str, code: str) -> Future | None:
        """Schedules delivery; the returned future, when present, resolves to the delivery outcome."""
        ...
