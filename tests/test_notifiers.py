"""
Tests for confirmation rendering and delivery adapters.
"""

import asyncio
import threading

import pytest
import requests

from slotbooker.adapters import plunk_client
from slotbooker.adapters.console_notifier import ConsoleNotifier
from slotbooker.adapters.plunk_client import PlunkEmailClient
from slotbooker.adapters.templates import render_confirmation
from slotbooker.domain.exceptions import NotificationError
from slotbooker.services.ports import ConfirmationDetails

DETAILS = ConfirmationDetails(
    business_name="Acme Consulting",
    date="October 20th, 2026",
    duration_minutes=30,
    meeting_time="10:00 AM",
    meeting_url="https://zoom.us/j/123",
    location_type="Zoom",
    visitor_first_name="Ada",
)


class FakeResponse:

    def __init__(self, status_code=200, payload=None):
        self.status_code = status_code
        self._payload = {"success": True} if payload is None else payload

    def raise_for_status(self):
        if self.status_code >= 400:
            raise requests.exceptions.HTTPError(f"{self.status_code} Client Error")

    def json(self):
        if isinstance(self._payload, Exception):
            raise self._payload
        return self._payload


def test_render_confirmation():
    body = render_confirmation(DETAILS)

    assert body.startswith("Hi Ada,\n")
    assert "Your meeting with Acme Consulting is scheduled." in body
    assert "Date: October 20th, 2026" in body
    assert "Time: 10:00 AM" in body
    assert "Duration: 30 min" in body
    assert "Location: Zoom meeting" in body
    assert "Join: https://zoom.us/j/123" in body


def test_render_without_url_or_name():
    details = ConfirmationDetails(
        business_name="Acme",
        date="October 20th, 2026",
        duration_minutes=60,
        meeting_time="09:00 AM",
        meeting_url="",
        location_type="",
        visitor_first_name="",
    )

    body = render_confirmation(details)

    assert body.startswith("Hi,\n")
    assert "Join:" not in body
    assert "Location: Online meeting" in body


def test_plunk_posts_message(monkeypatch):
    calls = []

    def fake_post(url, headers, json, timeout):
        calls.append({"url": url, "headers": headers, "json": json, "timeout": timeout})
        return FakeResponse()

    monkeypatch.setattr(plunk_client.requests, "post", fake_post)
    client = PlunkEmailClient(api_key="sk_test", timeout=5)

    asyncio.run(client.send("ada@example.com", "Meeting Schedule Details", "body"))

    assert calls == [
        {
            "url": "https://api.useplunk.com/v1/send",
            "headers": {"Authorization": "Bearer sk_test", "Content-Type": "application/json"},
            "json": {"to": "ada@example.com", "subject": "Meeting Schedule Details", "body": "body"},
            "timeout": 5,
        }
    ]


@pytest.mark.parametrize(
    "response",
    [
        FakeResponse(status_code=401),
        FakeResponse(payload={"success": False, "error": "invalid key"}),
        FakeResponse(payload=ValueError("no json")),
    ],
)
def test_plunk_errors_become_notification_errors(monkeypatch, response):
    monkeypatch.setattr(plunk_client.requests, "post", lambda *args, **kwargs: response)
    client = PlunkEmailClient(api_key="sk_test")

    with pytest.raises(NotificationError):
        asyncio.run(client.send("ada@example.com", "subject", "body"))


def test_plunk_transport_error(monkeypatch):
    def fake_post(*args, **kwargs):
        raise requests.exceptions.ConnectionError("no route to host")

    monkeypatch.setattr(plunk_client.requests, "post", fake_post)

    with pytest.raises(NotificationError, match="no route to host"):
        asyncio.run(PlunkEmailClient(api_key="sk_test").send("ada@example.com", "s", "b"))


def test_cancelled_send_is_not_posted_again(monkeypatch):
    release = threading.Event()
    posted = []

    def fake_post(url, headers, json, timeout):
        posted.append(json["to"])
        release.wait(5)
        return FakeResponse()

    monkeypatch.setattr(plunk_client.requests, "post", fake_post)
    client = PlunkEmailClient(api_key="sk_test")

    async def scenario():
        task = asyncio.create_task(client.send("ada@example.com", "subject", "body"))
        while not posted:
            await asyncio.sleep(0.01)
        task.cancel()
        with pytest.raises(asyncio.CancelledError):
            await task
        release.set()

    asyncio.run(scenario())

    assert posted == ["ada@example.com"]


def test_plunk_requires_key():
    with pytest.raises(ValueError):
        PlunkEmailClient(api_key="")


def test_console_notifier_records_messages():
    notifier = ConsoleNotifier()

    asyncio.run(notifier.send("ada@example.com", "subject", notifier.render(DETAILS)))

    assert len(notifier.sent) == 1
    assert notifier.sent[0].to == "ada@example.com"
    assert "10:00 AM" in notifier.sent[0].body


def test_console_notifier_can_fail():
    with pytest.raises(NotificationError):
        asyncio.run(ConsoleNotifier(fail=True).send("ada@example.com", "s", "b"))
