"""
Protocols for the collaborators the booking services depend on.

The services only talk to these protocols, so the JSON file store, the
in-memory store, a hosted document database or a test stub can be
plugged in interchangeably.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Any, Dict, List, Optional, Protocol, Sequence, Tuple

Predicate = Tuple[str, str, Any]

BOOKINGS_COLLECTION = "ScheduledMeetings"

# Fields a booking document must not share with another document
SLOT_KEY_FIELDS = ("meetingTypeId", "selectedDate", "selectedTime")


class BookingStoreProtocol(Protocol):
    """Document store with equality queries and conditional writes."""

    async def query(
        self,
        collection: str,
        predicates: Sequence[Predicate],
    ) -> List[Dict[str, Any]]:
        """Return every document matching all ``(field, "==", value)`` predicates."""

    async def write(
        self,
        collection: str,
        doc_id: str,
        document: Dict[str, Any],
        *,
        unique_on: Optional[Sequence[str]] = None,
    ) -> None:
        """
        Store ``document`` under ``doc_id``.

        With ``unique_on``, raise ``DocumentConflictError`` instead if a
        document with the same values for those fields already exists.
        """


@dataclass(frozen=True)
class ConfirmationDetails:
    """Inputs for the confirmation message template."""
    business_name: str
    date: str
    duration_minutes: int
    meeting_time: str
    meeting_url: str
    location_type: str
    visitor_first_name: str


class NotificationPortProtocol(Protocol):
    """Renders and delivers booking confirmations."""

    def render(self, details: ConfirmationDetails) -> str:
        """Return the message body for ``details``."""

    async def send(self, to: str, subject: str, body: str) -> None:
        """Deliver a message; raise ``NotificationError`` on failure."""
