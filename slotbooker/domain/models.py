"""
Domain models for meeting types, bookings and availability results.
"""

from dataclasses import dataclass, field
from datetime import date as _date
from typing import Any, Dict, Mapping, Tuple

import pendulum
from pendulum import Date

from .exceptions import InvalidDateError, UnknownMeetingTypeError
from .slot_grid import SlotGrid, generate_slots, parse_slot_label

WEEKDAY_NAMES = (
    "Monday",
    "Tuesday",
    "Wednesday",
    "Thursday",
    "Friday",
    "Saturday",
    "Sunday",
)


def ensure_calendar_date(value: Any) -> Date:
    """
    Coerce a user supplied value to a calendar date.

    Accepts ``date``/``datetime`` objects (pendulum or stdlib) and ISO
    ``YYYY-MM-DD`` strings. Time of day is discarded.

    Raises:
        InvalidDateError: If the value is missing or not a real date
    """
    if isinstance(value, _date):
        return pendulum.date(value.year, value.month, value.day)

    if isinstance(value, str) and value.strip():
        try:
            parsed = pendulum.from_format(value.strip(), "YYYY-MM-DD")
        except ValueError as exc:
            raise InvalidDateError(f"Invalid date: {value!r}") from exc
        return parsed.date()

    raise InvalidDateError(f"Invalid date: {value!r}")


def weekday_name(day: _date) -> str:
    """English weekday name for a date, e.g. ``Tuesday``."""
    return WEEKDAY_NAMES[day.weekday()]


def format_long_date(day: Date) -> str:
    """Long display form, e.g. ``October 20th, 2026``."""
    return day.format("MMMM Do, YYYY", locale="en")


@dataclass(frozen=True)
class BusinessIdentity:
    """The business publishing meeting types."""
    name: str
    email: str


@dataclass(frozen=True)
class MeetingType:
    """
    A published, bookable meeting type.

    Immutable once published. Weekdays missing from
    ``weekly_availability`` are treated as unavailable.
    """
    id: str
    name: str
    duration_minutes: int
    weekly_availability: Mapping[str, bool] = field(default_factory=dict)
    location_type: str = ""
    location_url: str = ""

    def __post_init__(self):
        # Validates the duration eagerly
        generate_slots(self.duration_minutes)

    def is_available_on(self, weekday: str) -> bool:
        return bool(self.weekly_availability.get(weekday, False))

    def slot_grid(self) -> SlotGrid:
        return generate_slots(self.duration_minutes)

    @property
    def location_descriptor(self) -> str:
        if self.location_type and self.location_url:
            return f"{self.location_type} ({self.location_url})"
        return self.location_type or self.location_url


class MeetingCatalog:
    """Meeting types published by one business, indexed by id."""

    def __init__(self, business: BusinessIdentity, meeting_types: Mapping[str, MeetingType]):
        self.business = business
        self._meeting_types = dict(meeting_types)

    def get(self, meeting_type_id: str) -> MeetingType:
        try:
            return self._meeting_types[meeting_type_id]
        except KeyError:
            raise UnknownMeetingTypeError(
                f"Unknown meeting type: '{meeting_type_id}'"
            ) from None

    def __iter__(self):
        return iter(self._meeting_types.values())

    def __len__(self) -> int:
        return len(self._meeting_types)


@dataclass(frozen=True)
class Visitor:
    """The person booking a slot."""
    name: str
    email: str
    note: str = ""

    @property
    def first_name(self) -> str:
        parts = self.name.split()
        return parts[0] if parts else ""


@dataclass(frozen=True)
class Booking:
    """
    A committed booking.

    Created once per successful commit and never mutated afterwards.
    """
    id: str
    meeting_type_id: str
    business: BusinessIdentity
    date: Date
    time_slot: str
    duration_minutes: int
    location_url: str
    visitor: Visitor
    timestamp: int

    @property
    def formatted_date(self) -> str:
        return format_long_date(self.date)

    def to_document(self) -> Dict[str, Any]:
        """Serialize to the persisted document layout."""
        return {
            "id": self.id,
            "meetingTypeId": self.meeting_type_id,
            "businessName": self.business.name,
            "businessEmail": self.business.email,
            "selectedTime": self.time_slot,
            "selectedDate": self.date.to_date_string(),
            "formattedDate": self.formatted_date,
            "formattedTimeStamp": self.timestamp,
            "duration": self.duration_minutes,
            "locationUrl": self.location_url,
            "eventId": self.meeting_type_id,
            "userName": self.visitor.name,
            "userEmail": self.visitor.email,
            "userNote": self.visitor.note,
        }

    @classmethod
    def from_document(cls, document: Mapping[str, Any]) -> "Booking":
        """
        Rebuild a booking from its stored document.

        Raises:
            KeyError: If a required field is missing
            InvalidDateError: If ``selectedDate`` is malformed
        """
        return cls(
            id=document["id"],
            meeting_type_id=document.get("meetingTypeId") or document["eventId"],
            business=BusinessIdentity(
                name=document.get("businessName", ""),
                email=document.get("businessEmail", ""),
            ),
            date=ensure_calendar_date(document["selectedDate"]),
            time_slot=document["selectedTime"],
            duration_minutes=int(document.get("duration", 0)),
            location_url=document.get("locationUrl", ""),
            visitor=Visitor(
                name=document.get("userName", ""),
                email=document.get("userEmail", ""),
                note=document.get("userNote", ""),
            ),
            timestamp=int(document.get("formattedTimeStamp", 0)),
        )


def slot_sort_key(booking: Booking):
    try:
        return (parse_slot_label(booking.time_slot), booking.id)
    except ValueError:
        return (-1, booking.id)


@dataclass(frozen=True)
class AvailabilityResult:
    """
    Availability of one meeting type on one date.

    ``candidate_slots`` is the full grid; ``existing_bookings`` is what the
    store held when it was read and may already be stale.
    """
    meeting_type_id: str
    date: Date
    enabled: bool
    candidate_slots: Tuple[str, ...] = ()
    existing_bookings: Tuple[Booking, ...] = ()

    @classmethod
    def disabled(cls, meeting_type_id: str, date: Date) -> "AvailabilityResult":
        return cls(meeting_type_id=meeting_type_id, date=date, enabled=False)

    @classmethod
    def build(cls, meeting_type_id: str, date: Date, candidate_slots, bookings) -> "AvailabilityResult":
        return cls(
            meeting_type_id=meeting_type_id,
            date=date,
            enabled=True,
            candidate_slots=tuple(candidate_slots),
            existing_bookings=tuple(sorted(bookings, key=slot_sort_key)),
        )

    @property
    def booked_slots(self) -> frozenset:
        return frozenset(booking.time_slot for booking in self.existing_bookings)

    @property
    def open_slots(self) -> Tuple[str, ...]:
        """Candidate slots not taken by a known booking."""
        booked = self.booked_slots
        return tuple(slot for slot in self.candidate_slots if slot not in booked)
