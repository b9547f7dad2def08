"""
Tests for configuration loading.
"""

from pathlib import Path

import pytest
from pydantic import ValidationError

from slotbooker.config import AppConfig

EXAMPLE_CONFIG = Path(__file__).parent.parent / "config.example.yaml"

MINIMAL = """
business:
  name: Acme
  email: hello@acme.example
meeting_types:
  - id: intro-call
    name: Intro Call
    duration_minutes: 30
"""


def _write(tmp_path, text: str) -> Path:
    path = tmp_path / "config.yaml"
    path.write_text(text, encoding="utf-8")
    return path


def test_example_config_loads():
    config = AppConfig.load_from_yaml(EXAMPLE_CONFIG)
    catalog = config.build_catalog()

    assert catalog.business.name == "Acme Consulting"
    assert catalog.get("intro-call").is_available_on("Monday")
    workshop = catalog.get("workshop")
    assert workshop.duration_minutes == 90
    assert workshop.is_available_on("Tuesday")
    assert not workshop.is_available_on("Monday")


def test_defaults(tmp_path):
    config = AppConfig.load_from_yaml(_write(tmp_path, MINIMAL))

    assert config.store.backend == "json"
    assert config.store.collection == "ScheduledMeetings"
    assert config.notification.provider == "console"
    assert config.notification.subject == "Meeting Schedule Details"
    meeting_type = config.build_catalog().get("intro-call")
    assert meeting_type.is_available_on("Friday")
    assert not meeting_type.is_available_on("Saturday")


def test_weekday_keys_are_normalized(tmp_path):
    text = MINIMAL + "days_available:\n  monday: true\n  SUNDAY: true\n"
    config = AppConfig.load_from_yaml(_write(tmp_path, text))

    assert config.days_available == {"Monday": True, "Sunday": True}


def test_missing_file(tmp_path):
    with pytest.raises(FileNotFoundError):
        AppConfig.load_from_yaml(tmp_path / "nope.yaml")


@pytest.mark.parametrize("text", ["business: [unclosed", "- just\n- a list\n"])
def test_invalid_yaml(tmp_path, text):
    with pytest.raises(ValueError):
        AppConfig.load_from_yaml(_write(tmp_path, text))


@pytest.mark.parametrize(
    "extra",
    [
        "days_available:\n  Funday: true\n",
        "store:\n  timeout_seconds: 0\n",
        "notification:\n  provider: pigeon\n",
    ],
)
def test_invalid_values(tmp_path, extra):
    with pytest.raises(ValidationError):
        AppConfig.load_from_yaml(_write(tmp_path, MINIMAL + extra))


def test_duplicate_meeting_type_ids(tmp_path):
    text = MINIMAL + "  - id: intro-call\n    name: Again\n"

    with pytest.raises(ValidationError, match="Duplicate meeting type id"):
        AppConfig.load_from_yaml(_write(tmp_path, text))


def test_zero_duration_rejected(tmp_path):
    text = MINIMAL.replace("duration_minutes: 30", "duration_minutes: 0")

    with pytest.raises(ValidationError):
        AppConfig.load_from_yaml(_write(tmp_path, text))


def test_find_meeting_type(tmp_path):
    config = AppConfig.load_from_yaml(_write(tmp_path, MINIMAL))

    assert config.find_meeting_type("intro-call").name == "Intro Call"
    assert config.find_meeting_type("missing") is None
