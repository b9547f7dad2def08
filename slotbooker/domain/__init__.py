"""
Domain layer - Pure business logic without external dependencies.
"""

from .booking_flow import BookingAttempt, BookingStage, SelectionState, validate_email
from .models import (
    AvailabilityResult,
    Booking,
    BusinessIdentity,
    MeetingCatalog,
    MeetingType,
    Visitor,
    ensure_calendar_date,
    weekday_name,
)
from .slot_grid import SlotGrid, generate_slots

__all__ = [
    "AvailabilityResult",
    "Booking",
    "BookingAttempt",
    "BookingStage",
    "BusinessIdentity",
    "MeetingCatalog",
    "MeetingType",
    "SelectionState",
    "SlotGrid",
    "Visitor",
    "ensure_calendar_date",
    "generate_slots",
    "validate_email",
    "weekday_name",
]
