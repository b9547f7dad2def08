"""
Availability lookup for a meeting type on a given date.

Day gating happens first so that disabled days never reach the store. The
bookings read here are advisory only: the authoritative collision check is
the conditional write made by ``BookingCoordinator``.
"""

from __future__ import annotations

import asyncio
import logging
from typing import List, Optional

from ..domain.exceptions import InvalidDateError, StoreQueryError
from ..domain.models import (
    AvailabilityResult,
    Booking,
    MeetingCatalog,
    ensure_calendar_date,
    weekday_name,
)
from .ports import BOOKINGS_COLLECTION, BookingStoreProtocol

logger = logging.getLogger(__name__)


class AvailabilityFilter:
    """Decides whether a day is bookable and which slots it offers."""

    def __init__(
        self,
        catalog: MeetingCatalog,
        store: BookingStoreProtocol,
        *,
        collection: str = BOOKINGS_COLLECTION,
        timeout_seconds: Optional[float] = None,
    ) -> None:
        self._catalog = catalog
        self._store = store
        self._collection = collection
        self._timeout = timeout_seconds

    async def check_availability(self, meeting_type_id: str, date) -> AvailabilityResult:
        """
        Compute availability for ``meeting_type_id`` on ``date``.

        Raises:
            InvalidDateError: If ``date`` is not a valid calendar date
            UnknownMeetingTypeError: If the meeting type is not published
        """
        day = ensure_calendar_date(date)
        meeting_type = self._catalog.get(meeting_type_id)

        weekday = weekday_name(day)
        if not meeting_type.is_available_on(weekday):
            logger.debug("%s is not bookable on %s", meeting_type_id, weekday)
            return AvailabilityResult.disabled(meeting_type_id, day)

        try:
            bookings = await self.fetch_bookings(meeting_type_id, day)
        except StoreQueryError as exc:
            logger.warning(
                "Could not load bookings for %s on %s, disabling the day: %s",
                meeting_type_id,
                day.to_date_string(),
                exc,
            )
            return AvailabilityResult.disabled(meeting_type_id, day)

        return AvailabilityResult.build(
            meeting_type_id,
            day,
            candidate_slots=meeting_type.slot_grid(),
            bookings=bookings,
        )

    async def fetch_bookings(self, meeting_type_id: str, date) -> List[Booking]:
        """
        Load bookings stored for a meeting type on a date.

        Raises:
            StoreQueryError: If the store fails, times out or returns
                documents that are not bookings
        """
        day = ensure_calendar_date(date)
        predicates = [
            ("selectedDate", "==", day.to_date_string()),
            ("meetingTypeId", "==", meeting_type_id),
        ]

        try:
            documents = await asyncio.wait_for(
                self._store.query(self._collection, predicates),
                timeout=self._timeout,
            )
        except StoreQueryError:
            raise
        except asyncio.TimeoutError as exc:
            raise StoreQueryError(f"Booking query timed out after {self._timeout}s") from exc
        except Exception as exc:
            raise StoreQueryError(f"Booking query failed: {exc}") from exc

        try:
            return [Booking.from_document(document) for document in documents]
        except (KeyError, TypeError, ValueError, InvalidDateError) as exc:
            raise StoreQueryError(f"Malformed booking document: {exc}") from exc
