"""
Tests for the booking flow state objects.
"""

import pytest

from slotbooker.domain.booking_flow import (
    STEP_DATE_TIME,
    STEP_DETAILS,
    BookingAttempt,
    BookingStage,
    SelectionState,
    validate_email,
)
from slotbooker.domain.exceptions import InvalidEmailError

from .conftest import TUESDAY


class TestValidateEmail:

    @pytest.mark.parametrize("email", ["ada@example.com", "a.b+c@mail.example.org", "x_y@d.io"])
    def test_accepts_addresses(self, email):
        assert validate_email(email) == email

    @pytest.mark.parametrize(
        "email",
        ["not-an-email", "", "a@b", "a@b.c", "a@b.museum", "a b@example.com", None],
    )
    def test_rejects_malformed(self, email):
        """Test the local@domain.tld shape with a 2-4 letter TLD."""
        with pytest.raises(InvalidEmailError):
            validate_email(email)


class TestBookingAttempt:
    """Tests for the commit protocol state machine."""

    def test_happy_path(self):
        attempt = BookingAttempt(meeting_type_id="intro-call")

        for stage in (
            BookingStage.VALIDATING,
            BookingStage.COMMITTING,
            BookingStage.NOTIFYING,
            BookingStage.DONE,
        ):
            attempt = attempt.advance(stage)

        assert attempt.stage is BookingStage.DONE
        assert attempt.is_terminal

    def test_cannot_skip_stages(self):
        """Test committing straight from idle is illegal."""
        attempt = BookingAttempt(meeting_type_id="intro-call")

        with pytest.raises(ValueError, match="Cannot move"):
            attempt.advance(BookingStage.COMMITTING)

    def test_transitions_return_new_objects(self):
        idle = BookingAttempt(meeting_type_id="intro-call")
        validating = idle.advance(BookingStage.VALIDATING, time_slot="10:00 AM")

        assert idle.stage is BookingStage.IDLE
        assert idle.time_slot is None
        assert validating.time_slot == "10:00 AM"

    def test_fail_from_any_open_stage(self):
        attempt = BookingAttempt(meeting_type_id="intro-call").advance(BookingStage.VALIDATING)

        failed = attempt.fail("InvalidEmailError")

        assert failed.stage is BookingStage.FAILED
        assert failed.failure == "InvalidEmailError"
        with pytest.raises(ValueError):
            failed.fail("again")
        with pytest.raises(ValueError):
            failed.advance(BookingStage.COMMITTING)


class TestSelectionState:
    """Tests for the visitor selection state."""

    def test_full_selection(self):
        state = (
            SelectionState(meeting_type_id="intro-call")
            .choose_date(TUESDAY, enabled=True)
            .choose_slot("10:00 AM")
            .proceed()
            .with_visitor(name="Ada", email="ada@example.com", note="hi")
        )

        assert state.step == STEP_DETAILS
        assert state.can_submit
        assert state.visitor().note == "hi"

    def test_new_date_clears_slot(self):
        """Test a slot picked on one day does not carry over to another."""
        state = (
            SelectionState(meeting_type_id="intro-call")
            .choose_date(TUESDAY, enabled=True)
            .choose_slot("10:00 AM")
            .choose_date(TUESDAY.add(days=1), enabled=True)
        )

        assert state.time_slot is None
        assert not state.can_proceed

    def test_disabled_day_blocks_slot(self):
        state = SelectionState(meeting_type_id="intro-call").choose_date(TUESDAY, enabled=False)

        with pytest.raises(ValueError):
            state.choose_slot("10:00 AM")

    def test_proceed_requires_slot(self):
        state = SelectionState(meeting_type_id="intro-call").choose_date(TUESDAY, enabled=True)

        with pytest.raises(ValueError):
            state.proceed()

    def test_submit_requires_name_and_email(self):
        state = (
            SelectionState(meeting_type_id="intro-call")
            .choose_date(TUESDAY, enabled=True)
            .choose_slot("10:00 AM")
            .proceed()
            .with_visitor(email="ada@example.com")
        )

        assert not state.can_submit
        assert state.with_visitor(name="Ada").can_submit

    def test_back_keeps_details(self):
        state = (
            SelectionState(meeting_type_id="intro-call")
            .choose_date(TUESDAY, enabled=True)
            .choose_slot("10:00 AM")
            .proceed()
            .with_visitor(name="Ada")
            .back()
        )

        assert state.step == STEP_DATE_TIME
        assert state.visitor_name == "Ada"
        assert not state.can_submit
