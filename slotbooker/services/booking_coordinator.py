"""
Commit protocol for new bookings.

The coordinator validates a request locally, writes the booking with a
conditional write keyed by (meeting type, date, slot), and then hands the
confirmation email to a detached task. Once the write succeeds the booking
stands: notification problems are reported on the task's outcome, never as
a booking failure.
"""

from __future__ import annotations

import asyncio
import logging
from dataclasses import dataclass
from typing import Callable, List, Optional, Set, Tuple
from uuid import uuid4

import pendulum
from pendulum import Date

from ..domain.booking_flow import BookingAttempt, BookingStage, validate_email
from ..domain.exceptions import (
    DocumentConflictError,
    InvalidSlotError,
    MissingVisitorNameError,
    NoSlotSelectedError,
    NotificationError,
    SlotBookingError,
    SlotCollisionError,
    StoreWriteError,
)
from ..domain.models import (
    Booking,
    MeetingCatalog,
    MeetingType,
    Visitor,
    ensure_calendar_date,
    format_long_date,
)
from .ports import (
    BOOKINGS_COLLECTION,
    SLOT_KEY_FIELDS,
    BookingStoreProtocol,
    ConfirmationDetails,
    NotificationPortProtocol,
)

logger = logging.getLogger(__name__)

DEFAULT_SUBJECT = "Meeting Schedule Details"


@dataclass(frozen=True)
class NotificationOutcome:
    """Result of the best-effort confirmation for one booking."""
    booking_id: str
    delivered: bool
    attempt: BookingAttempt
    error: Optional[NotificationError] = None


@dataclass(frozen=True)
class BookingReceipt:
    """
    Returned for every committed booking.

    ``notification`` resolves to a ``NotificationOutcome``; it is cancelled
    rather than failed if the visitor navigates away.
    """
    booking: Booking
    attempt: BookingAttempt
    notification: "asyncio.Task[NotificationOutcome]"

    @property
    def booking_id(self) -> str:
        return self.booking.id


def _new_booking_id() -> str:
    return uuid4().hex


class BookingCoordinator:
    """
    Orchestrates validate -> commit -> notify for a single booking attempt.

    No store access happens before validation has passed, and no
    notification is started unless the write succeeded.
    """

    def __init__(
        self,
        catalog: MeetingCatalog,
        store: BookingStoreProtocol,
        notifier: NotificationPortProtocol,
        *,
        collection: str = BOOKINGS_COLLECTION,
        timezone: str = "UTC",
        subject: str = DEFAULT_SUBJECT,
        store_timeout_seconds: Optional[float] = None,
        notification_timeout_seconds: Optional[float] = None,
        id_factory: Callable[[], str] = _new_booking_id,
    ) -> None:
        self._catalog = catalog
        self._store = store
        self._notifier = notifier
        self._collection = collection
        self._timezone = timezone
        self._subject = subject
        self._store_timeout = store_timeout_seconds
        self._notification_timeout = notification_timeout_seconds
        self._id_factory = id_factory
        self._pending: Set[asyncio.Task] = set()

    @property
    def pending_notifications(self) -> int:
        return len(self._pending)

    async def commit_booking(
        self,
        meeting_type_id: str,
        date,
        time_slot: Optional[str],
        visitor: Optional[Visitor],
    ) -> BookingReceipt:
        """
        Validate and commit a booking, then schedule its confirmation.

        Raises:
            UnknownMeetingTypeError: If the meeting type is not published
            BookingValidationError: If a local check fails (no store access)
            SlotCollisionError: If the slot was taken before this write
            StoreWriteError: If the store failed or timed out
        """
        attempt = BookingAttempt(
            meeting_type_id=meeting_type_id,
            date=date,
            time_slot=time_slot,
            visitor=visitor,
        ).advance(BookingStage.VALIDATING)

        try:
            meeting_type, day = self._validate(meeting_type_id, date, time_slot, visitor)
        except SlotBookingError as exc:
            self._record_failure(attempt, exc)
            raise

        booking = self._build_booking(meeting_type, day, time_slot, visitor)
        attempt = attempt.advance(BookingStage.COMMITTING, date=day, booking=booking)

        try:
            await self._write(booking)
        except (SlotCollisionError, StoreWriteError) as exc:
            self._record_failure(attempt, exc)
            raise

        logger.info(
            "Booked %s on %s at %s (booking %s)",
            meeting_type_id,
            day.to_date_string(),
            time_slot,
            booking.id,
        )

        attempt = attempt.advance(BookingStage.NOTIFYING)
        task = asyncio.create_task(self._notify(attempt, meeting_type))
        self._pending.add(task)
        task.add_done_callback(self._pending.discard)

        return BookingReceipt(booking=booking, attempt=attempt, notification=task)

    def cancel_pending_notifications(self) -> int:
        """Cancel confirmations still in flight; they are not retried."""
        tasks = [task for task in self._pending if not task.done()]
        for task in tasks:
            task.cancel()
        return len(tasks)

    async def drain_notifications(self) -> List[NotificationOutcome]:
        """Wait for in-flight confirmations, skipping cancelled ones."""
        results = await asyncio.gather(*list(self._pending), return_exceptions=True)
        return [result for result in results if isinstance(result, NotificationOutcome)]

    def _validate(
        self,
        meeting_type_id: str,
        date,
        time_slot: Optional[str],
        visitor: Optional[Visitor],
    ) -> Tuple[MeetingType, Date]:
        meeting_type = self._catalog.get(meeting_type_id)
        day = ensure_calendar_date(date)
        validate_email(visitor.email if visitor else "")

        if not time_slot:
            raise NoSlotSelectedError("Select a time slot first")
        if time_slot not in meeting_type.slot_grid():
            raise InvalidSlotError(
                f"{time_slot!r} is not offered for '{meeting_type_id}'"
            )
        if not (visitor.name or "").strip():
            raise MissingVisitorNameError("Visitor name is required")

        return meeting_type, day

    def _build_booking(
        self,
        meeting_type: MeetingType,
        day: Date,
        time_slot: str,
        visitor: Visitor,
    ) -> Booking:
        start_of_day = pendulum.datetime(day.year, day.month, day.day, tz=self._timezone)
        return Booking(
            id=self._id_factory(),
            meeting_type_id=meeting_type.id,
            business=self._catalog.business,
            date=day,
            time_slot=time_slot,
            duration_minutes=meeting_type.duration_minutes,
            location_url=meeting_type.location_url,
            visitor=visitor,
            timestamp=start_of_day.int_timestamp,
        )

    async def _write(self, booking: Booking) -> None:
        document = booking.to_document()
        try:
            await asyncio.wait_for(
                self._store.write(
                    self._collection,
                    booking.id,
                    document,
                    unique_on=SLOT_KEY_FIELDS,
                ),
                timeout=self._store_timeout,
            )
        except DocumentConflictError as exc:
            raise SlotCollisionError(
                booking.meeting_type_id,
                document["selectedDate"],
                booking.time_slot,
            ) from exc
        except StoreWriteError:
            raise
        except asyncio.TimeoutError as exc:
            raise StoreWriteError(f"Booking write timed out after {self._store_timeout}s") from exc
        except Exception as exc:
            raise StoreWriteError(f"Booking write failed: {exc}") from exc

    async def _notify(self, attempt: BookingAttempt, meeting_type: MeetingType) -> NotificationOutcome:
        booking = attempt.booking
        try:
            await self._deliver(booking, meeting_type)
        except NotificationError as exc:
            logger.error("Confirmation for booking %s was not sent: %s", booking.id, exc)
            return NotificationOutcome(
                booking_id=booking.id,
                delivered=False,
                attempt=attempt.advance(BookingStage.DONE),
                error=exc,
            )
        except asyncio.CancelledError:
            logger.warning("Confirmation for booking %s cancelled", booking.id)
            raise

        logger.info("Confirmation for booking %s sent to %s", booking.id, booking.visitor.email)
        return NotificationOutcome(
            booking_id=booking.id,
            delivered=True,
            attempt=attempt.advance(BookingStage.DONE),
        )

    async def _deliver(self, booking: Booking, meeting_type: MeetingType) -> None:
        details = ConfirmationDetails(
            business_name=booking.business.name,
            date=format_long_date(booking.date),
            duration_minutes=booking.duration_minutes,
            meeting_time=booking.time_slot,
            meeting_url=booking.location_url,
            location_type=meeting_type.location_type,
            visitor_first_name=booking.visitor.first_name,
        )
        try:
            body = self._notifier.render(details)
            await asyncio.wait_for(
                self._notifier.send(booking.visitor.email, self._subject, body),
                timeout=self._notification_timeout,
            )
        except NotificationError:
            raise
        except asyncio.TimeoutError as exc:
            raise NotificationError(
                f"Sending timed out after {self._notification_timeout}s"
            ) from exc
        except Exception as exc:
            raise NotificationError(f"Sending failed: {exc}") from exc

    @staticmethod
    def _record_failure(attempt: BookingAttempt, exc: SlotBookingError) -> None:
        failed = attempt.fail(type(exc).__name__)
        logger.info(
            "Booking attempt for %s failed while %s: %s (%s)",
            failed.meeting_type_id,
            attempt.stage.value,
            failed.failure,
            exc,
        )
