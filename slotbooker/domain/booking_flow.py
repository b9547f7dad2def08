"""
Explicit state for the booking flow.

Two immutable state objects live here:

- ``SelectionState`` models what the visitor has picked so far (date,
  slot, form fields, wizard step).
- ``BookingAttempt`` models one commit attempt as it moves through
  ``IDLE -> VALIDATING -> COMMITTING -> NOTIFYING -> DONE``.

Every transition returns a new instance; nothing is mutated in place.
"""

import re
from dataclasses import dataclass, replace
from enum import Enum
from typing import Optional

from pendulum import Date

from .exceptions import InvalidEmailError
from .models import Booking, Visitor

EMAIL_PATTERN = re.compile(r"^[a-zA-Z0-9._%+-]+@[a-zA-Z0-9.-]+\.[a-zA-Z]{2,4}$")


def validate_email(email: str) -> str:
    """
    Check that ``email`` has the ``local@domain.tld`` shape.

    Raises:
        InvalidEmailError: If the address does not match
    """
    if not isinstance(email, str) or not EMAIL_PATTERN.match(email):
        raise InvalidEmailError(f"Enter a valid email address, got {email!r}")
    return email


class BookingStage(str, Enum):
    IDLE = "idle"
    VALIDATING = "validating"
    COMMITTING = "committing"
    NOTIFYING = "notifying"
    DONE = "done"
    FAILED = "failed"


_NEXT_STAGE = {
    BookingStage.IDLE: BookingStage.VALIDATING,
    BookingStage.VALIDATING: BookingStage.COMMITTING,
    BookingStage.COMMITTING: BookingStage.NOTIFYING,
    BookingStage.NOTIFYING: BookingStage.DONE,
}


@dataclass(frozen=True)
class BookingAttempt:
    """One pass through the commit protocol."""
    meeting_type_id: str
    date: object = None
    time_slot: Optional[str] = None
    visitor: Optional[Visitor] = None
    stage: BookingStage = BookingStage.IDLE
    booking: Optional[Booking] = None
    failure: Optional[str] = None

    @property
    def is_terminal(self) -> bool:
        return self.stage in (BookingStage.DONE, BookingStage.FAILED)

    def advance(self, stage: BookingStage, **changes) -> "BookingAttempt":
        """
        Move to the next stage.

        Raises:
            ValueError: If ``stage`` does not directly follow the current one
        """
        if _NEXT_STAGE.get(self.stage) is not stage:
            raise ValueError(f"Cannot move booking attempt from {self.stage.value} to {stage.value}")
        return replace(self, stage=stage, **changes)

    def fail(self, reason: str) -> "BookingAttempt":
        if self.is_terminal:
            raise ValueError(f"Booking attempt already {self.stage.value}")
        return replace(self, stage=BookingStage.FAILED, failure=reason)


STEP_DATE_TIME = 1
STEP_DETAILS = 2


@dataclass(frozen=True)
class SelectionState:
    """
    What a visitor has selected on the booking page.

    Step 1 picks date and time, step 2 collects name, email and note.
    """
    meeting_type_id: str
    date: Optional[Date] = None
    day_enabled: bool = False
    time_slot: Optional[str] = None
    step: int = STEP_DATE_TIME
    visitor_name: str = ""
    visitor_email: str = ""
    visitor_note: str = ""

    def choose_date(self, date: Date, enabled: bool) -> "SelectionState":
        # A slot picked for another day no longer applies
        return replace(self, date=date, day_enabled=enabled, time_slot=None)

    def choose_slot(self, time_slot: str) -> "SelectionState":
        if not self.day_enabled:
            raise ValueError("No time slots can be chosen on a disabled day")
        return replace(self, time_slot=time_slot)

    @property
    def can_proceed(self) -> bool:
        return self.date is not None and bool(self.time_slot)

    def proceed(self) -> "SelectionState":
        if self.step != STEP_DATE_TIME:
            raise ValueError("Already on the details step")
        if not self.can_proceed:
            raise ValueError("Pick a date and a time slot first")
        return replace(self, step=STEP_DETAILS)

    def back(self) -> "SelectionState":
        return replace(self, step=STEP_DATE_TIME)

    def with_visitor(self, name: Optional[str] = None, email: Optional[str] = None,
                     note: Optional[str] = None) -> "SelectionState":
        return replace(
            self,
            visitor_name=self.visitor_name if name is None else name,
            visitor_email=self.visitor_email if email is None else email,
            visitor_note=self.visitor_note if note is None else note,
        )

    @property
    def can_submit(self) -> bool:
        return (
            self.step == STEP_DETAILS
            and self.can_proceed
            and bool(self.visitor_name)
            and bool(self.visitor_email)
        )

    def visitor(self) -> Visitor:
        return Visitor(
            name=self.visitor_name,
            email=self.visitor_email,
            note=self.visitor_note,
        )
