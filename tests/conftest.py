"""
Shared fixtures: a small catalog with one weekday-only meeting type.
"""

import pendulum
import pytest

from slotbooker.domain.models import BusinessIdentity, MeetingCatalog, MeetingType, Visitor

WEEKDAYS = {
    "Monday": True,
    "Tuesday": True,
    "Wednesday": True,
    "Thursday": True,
    "Friday": True,
    "Saturday": False,
}

TUESDAY = pendulum.date(2026, 10, 20)
SATURDAY = pendulum.date(2026, 10, 24)
SUNDAY = pendulum.date(2026, 10, 25)


@pytest.fixture
def business():
    return BusinessIdentity(name="Acme Consulting", email="hello@acme.example")


@pytest.fixture
def intro_call():
    return MeetingType(
        id="intro-call",
        name="Intro Call",
        duration_minutes=30,
        weekly_availability=dict(WEEKDAYS),
        location_type="Zoom",
        location_url="https://zoom.us/j/123",
    )


@pytest.fixture
def catalog(business, intro_call):
    return MeetingCatalog(business=business, meeting_types={intro_call.id: intro_call})


@pytest.fixture
def visitor():
    return Visitor(name="Ada Lovelace", email="ada@example.com", note="About the roadmap")
