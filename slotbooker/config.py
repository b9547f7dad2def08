"""
Configuration management using Pydantic models loaded from YAML.
"""

import re
from pathlib import Path
from typing import Dict, List, Literal, Optional

import yaml
from pydantic import BaseModel, Field, field_validator

from .domain.models import (
    WEEKDAY_NAMES,
    BusinessIdentity,
    MeetingCatalog,
    MeetingType,
)
from .services.ports import BOOKINGS_COLLECTION

_EMAIL_PATTERN = re.compile(r"^[^@\s]+@[^@\s]+\.[^@\s]+$")


def _default_days() -> Dict[str, bool]:
    return {day: day not in ("Saturday", "Sunday") for day in WEEKDAY_NAMES}


def _normalize_days(value: Dict[str, bool]) -> Dict[str, bool]:
    """Capitalize weekday keys and reject anything that is not a weekday."""
    normalized: Dict[str, bool] = {}
    for day, enabled in value.items():
        name = str(day).strip().capitalize()
        if name not in WEEKDAY_NAMES:
            raise ValueError(f"Unknown weekday in days_available: {day!r}")
        normalized[name] = bool(enabled)
    return normalized


class BusinessConfig(BaseModel):
    """The business publishing meeting types."""
    name: str
    email: str

    @field_validator("email")
    @classmethod
    def validate_email(cls, value: str) -> str:
        if not _EMAIL_PATTERN.match(value):
            raise ValueError(f"Business email is not an address: {value!r}")
        return value


class MeetingTypeConfig(BaseModel):
    """A bookable meeting type."""
    id: str
    name: str
    duration_minutes: int = 30
    location_type: str = "Zoom"
    location_url: str = ""
    days_available: Optional[Dict[str, bool]] = None  # falls back to the business default

    @field_validator("duration_minutes")
    @classmethod
    def validate_duration(cls, value: int) -> int:
        """Ensure meeting duration is positive."""
        if value <= 0:
            raise ValueError("duration_minutes must be greater than zero")
        return value

    @field_validator("days_available")
    @classmethod
    def validate_days(cls, value: Optional[Dict[str, bool]]) -> Optional[Dict[str, bool]]:
        return None if value is None else _normalize_days(value)

    def to_meeting_type(self, default_days: Dict[str, bool]) -> MeetingType:
        return MeetingType(
            id=self.id,
            name=self.name,
            duration_minutes=self.duration_minutes,
            weekly_availability=dict(
                default_days if self.days_available is None else self.days_available
            ),
            location_type=self.location_type,
            location_url=self.location_url,
        )


class StoreConfig(BaseModel):
    """Where bookings are kept."""
    backend: Literal["memory", "json"] = "json"
    path: Path = Path("bookings.json")
    collection: str = BOOKINGS_COLLECTION
    timeout_seconds: float = 10.0

    @field_validator("timeout_seconds")
    @classmethod
    def validate_timeout(cls, value: float) -> float:
        if value <= 0:
            raise ValueError("timeout_seconds must be greater than zero")
        return value


class NotificationConfig(BaseModel):
    """How confirmations are delivered."""
    provider: Literal["console", "plunk"] = "console"
    api_key_env: str = "PLUNK_API_KEY"
    subject: str = "Meeting Schedule Details"
    timeout_seconds: float = 30.0

    @field_validator("timeout_seconds")
    @classmethod
    def validate_timeout(cls, value: float) -> float:
        if value <= 0:
            raise ValueError("timeout_seconds must be greater than zero")
        return value


class AppConfig(BaseModel):
    """Application configuration."""
    business: BusinessConfig
    days_available: Dict[str, bool] = Field(default_factory=_default_days)
    timezone: str = "UTC"
    meeting_types: List[MeetingTypeConfig] = Field(default_factory=list)
    store: StoreConfig = Field(default_factory=StoreConfig)
    notification: NotificationConfig = Field(default_factory=NotificationConfig)

    @field_validator("days_available")
    @classmethod
    def validate_days(cls, value: Dict[str, bool]) -> Dict[str, bool]:
        return _normalize_days(value)

    @field_validator("meeting_types")
    @classmethod
    def validate_meeting_types(cls, value: List[MeetingTypeConfig]) -> List[MeetingTypeConfig]:
        """Ensure meeting type ids are unique."""
        seen_ids: set[str] = set()
        for meeting_type in value:
            if meeting_type.id in seen_ids:
                raise ValueError(f"Duplicate meeting type id detected: {meeting_type.id}")
            seen_ids.add(meeting_type.id)
        return value

    @classmethod
    def load_from_yaml(cls, config_path: Path) -> "AppConfig":
        """
        Load configuration from YAML file.

        Args:
            config_path: Path to the YAML config file

        Returns:
            AppConfig instance

        Raises:
            FileNotFoundError: If config file doesn't exist
            ValueError: If config is invalid
        """
        if not config_path.exists():
            raise FileNotFoundError(
                f"Config file not found: {config_path}\n"
                f"Please create a config.yaml file. See config.example.yaml for reference."
            )

        try:
            with open(config_path, "r", encoding="utf-8") as f:
                data = yaml.safe_load(f) or {}
        except yaml.YAMLError as exc:
            raise ValueError(f"Invalid YAML in {config_path}: {exc}") from exc

        if not isinstance(data, dict):
            raise ValueError("Config file must contain a mapping at the root level.")

        return cls(**data)

    def find_meeting_type(self, meeting_type_id: str) -> Optional[MeetingTypeConfig]:
        for meeting_type in self.meeting_types:
            if meeting_type.id == meeting_type_id:
                return meeting_type
        return None

    def build_catalog(self) -> MeetingCatalog:
        """Turn the configured meeting types into the domain catalog."""
        business = BusinessIdentity(name=self.business.name, email=self.business.email)
        return MeetingCatalog(
            business=business,
            meeting_types={
                mt.id: mt.to_meeting_type(self.days_available) for mt in self.meeting_types
            },
        )


def get_default_config_path() -> Path:
    """Get the default configuration file path."""
    # Look for config.yaml in current directory
    current_dir = Path.cwd()
    config_path = current_dir / "config.yaml"

    if not config_path.exists():
        # Try in the project root (parent of the package)
        project_root = Path(__file__).parent.parent
        config_path = project_root / "config.yaml"

    return config_path
