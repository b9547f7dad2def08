"""
Service layer helpers that orchestrate adapters and domain logic.
"""

from .availability import AvailabilityFilter
from .booking_coordinator import BookingCoordinator, BookingReceipt, NotificationOutcome
from .ports import (
    BookingStoreProtocol,
    ConfirmationDetails,
    NotificationPortProtocol,
)

__all__ = [
    "AvailabilityFilter",
    "BookingCoordinator",
    "BookingReceipt",
    "BookingStoreProtocol",
    "ConfirmationDetails",
    "NotificationOutcome",
    "NotificationPortProtocol",
]
