"""
Notifier that writes confirmations to the log instead of sending them.
"""

import logging
from dataclasses import dataclass
from typing import List

from ..domain.exceptions import NotificationError
from ..services.ports import ConfirmationDetails
from .templates import render_confirmation

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class SentMessage:
    to: str
    subject: str
    body: str


class ConsoleNotifier:
    """
    Stand-in for an email provider.

    Useful when running without an email account: messages are logged and
    kept in ``sent``. Set ``fail`` to simulate a provider outage.
    """

    def __init__(self, fail: bool = False):
        self.fail = fail
        self.sent: List[SentMessage] = []

    def render(self, details: ConfirmationDetails) -> str:
        return render_confirmation(details)

    async def send(self, to: str, subject: str, body: str) -> None:
        if self.fail:
            raise NotificationError(f"Simulated delivery failure for {to}")

        self.sent.append(SentMessage(to=to, subject=subject, body=body))
        logger.info("Email to %s: %s\n%s", to, subject, body)
