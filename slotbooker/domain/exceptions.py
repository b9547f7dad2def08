"""
Domain-specific exception hierarchy for the slot booking engine.
"""


class SlotBookingError(Exception):
    """Base class for all application-level errors."""


class BookingValidationError(SlotBookingError):
    """Raised when a booking request fails a local check."""


class InvalidDateError(BookingValidationError):
    """Raised when a calendar date is missing or cannot be interpreted."""


class InvalidEmailError(BookingValidationError):
    """Raised when the visitor email does not look like an address."""


class NoSlotSelectedError(BookingValidationError):
    """Raised when a booking is submitted without a time slot."""


class InvalidSlotError(BookingValidationError):
    """Raised when a time slot is not part of the meeting type's grid."""


class MissingVisitorNameError(BookingValidationError):
    """Raised when a booking is submitted without a visitor name."""


class UnknownMeetingTypeError(SlotBookingError):
    """Raised when a meeting type id is not published."""


class StoreError(SlotBookingError):
    """Base class for document store failures."""


class StoreQueryError(StoreError):
    """Raised when bookings cannot be read from the store."""


class StoreWriteError(StoreError):
    """Raised when a booking cannot be written to the store."""


class DocumentConflictError(StoreError):
    """Raised by a store when a conditional write finds an existing match."""


class SlotCollisionError(SlotBookingError):
    """Raised when the requested slot was booked by someone else first."""

    def __init__(self, meeting_type_id: str, date: str, time_slot: str):
        super().__init__(
            f"{time_slot} on {date} is already booked for '{meeting_type_id}'"
        )
        self.meeting_type_id = meeting_type_id
        self.date = date
        self.time_slot = time_slot


class NotificationError(SlotBookingError):
    """Raised when a confirmation message cannot be rendered or delivered."""
