"""
Plunk transactional email client for booking confirmations.
"""

import asyncio
from typing import Any, Dict

import requests

from ..domain.exceptions import NotificationError
from ..services.ports import ConfirmationDetails
from .templates import render_confirmation


class PlunkEmailClient:
    """
    Sends confirmations through the Plunk HTTP API.

    The blocking ``requests`` call runs in a worker thread so the event
    loop stays free while the message is in flight. Cancelling ``send``
    only stops the caller from waiting: a POST already handed to the
    worker still reaches Plunk, and it is never posted a second time.
    """

    API_ENDPOINT = "https://api.useplunk.com/v1"

    def __init__(self, api_key: str, timeout: float = 30):
        """
        Initialize the client.

        Args:
            api_key: Plunk secret API key
            timeout: Per-request timeout in seconds
        """
        if not api_key:
            raise ValueError("A Plunk API key is required")
        self.timeout = timeout
        self.headers = {
            "Authorization": f"Bearer {api_key}",
            "Content-Type": "application/json"
        }

    def render(self, details: ConfirmationDetails) -> str:
        return render_confirmation(details)

    async def send(self, to: str, subject: str, body: str) -> None:
        await asyncio.to_thread(self._post_message, to, subject, body)

    def _post_message(self, to: str, subject: str, body: str) -> Dict[str, Any]:
        """
        Post one message to ``/send``.

        Raises:
            NotificationError: If the request fails or Plunk rejects it
        """
        payload = {
            "to": to,
            "subject": subject,
            "body": body,
        }

        try:
            response = requests.post(
                f"{self.API_ENDPOINT}/send",
                headers=self.headers,
                json=payload,
                timeout=self.timeout
            )
            response.raise_for_status()
            data = response.json()

        except requests.exceptions.RequestException as e:
            raise NotificationError(f"Failed to send email through Plunk: {e}") from e
        except ValueError as e:
            raise NotificationError(f"Unexpected response from Plunk: {e}") from e

        if isinstance(data, dict) and data.get("success") is False:
            raise NotificationError(f"Plunk rejected the message: {data}")

        return data
