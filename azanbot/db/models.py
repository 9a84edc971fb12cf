"""Data models."""

from dataclasses import dataclass, field
from datetime import datetime
from enum import Enum
from typing import Any

from azanbot.utils.constants import (
    ALL_PRAYERS,
    DEFAULT_LANGUAGE,
    DEFAULT_TIMEZONE,
    Language,
    Prayer,
)


class ConversationState(str, Enum):
    """Where a user is in the setup dialogue."""

    AWAITING_LANGUAGE = "awaiting_language"
    AWAITING_CITY = "awaiting_city"
    AWAITING_LOCATION_CONFIRMATION = "awaiting_location_confirmation"
    AWAITING_PRAYER = "awaiting_prayer"
    AWAITING_OFFSET = "awaiting_offset"


@dataclass
class User:
    """Telegram user with a confirmed location."""

    telegram_id: int
    city: str
    latitude: float
    longitude: float
    timezone: str = DEFAULT_TIMEZONE
    full_name: str | None = None
    username: str | None = None
    created_at: datetime | None = None
    updated_at: datetime | None = None
    id: int | None = None


@dataclass
class Reminder:
    """Notify `offset_minutes` before a prayer's Azan."""

    user_id: int
    prayer: Prayer
    offset_minutes: int
    id: int | None = None

    def summary(self) -> "ReminderSummary":
        return ReminderSummary(prayer=self.prayer, offset_minutes=self.offset_minutes)


@dataclass
class ReminderSummary:
    """Reminder as cached on the session."""

    prayer: Prayer
    offset_minutes: int

    def to_dict(self) -> dict[str, Any]:
        return {"prayer": self.prayer.value, "offset_minutes": self.offset_minutes}

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> "ReminderSummary":
        return cls(prayer=Prayer(data["prayer"]), offset_minutes=int(data["offset_minutes"]))


@dataclass
class ReminderWithOwner:
    """Reminder joined with its owner, for read-only listings."""

    id: int
    user_id: int
    prayer: Prayer
    offset_minutes: int
    telegram_id: int
    city: str


@dataclass
class PendingLocation:
    """Geocoded location waiting for the user to confirm it."""

    city: str
    latitude: float
    longitude: float
    timezone: str
    display_name: str

    def to_dict(self) -> dict[str, Any]:
        return {
            "city": self.city,
            "latitude": self.latitude,
            "longitude": self.longitude,
            "timezone": self.timezone,
            "display_name": self.display_name,
        }

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> "PendingLocation":
        return cls(
            city=data["city"],
            latitude=float(data["latitude"]),
            longitude=float(data["longitude"]),
            timezone=data["timezone"],
            display_name=data["display_name"],
        )


@dataclass
class Session:
    """Per-user conversation state.

    `last_prayer` is only set while awaiting an offset, and
    `pending_location` only while awaiting location confirmation. Use the
    transition methods below rather than assigning the fields directly.
    """

    telegram_id: int
    lang: Language = DEFAULT_LANGUAGE
    state: ConversationState = ConversationState.AWAITING_LANGUAGE
    last_prayer: str | None = None  # a Prayer value or ALL_PRAYERS
    pending_location: PendingLocation | None = None
    reminders: list[ReminderSummary] = field(default_factory=list)
    created_at: datetime | None = None
    updated_at: datetime | None = None

    def await_city(self) -> None:
        self.state = ConversationState.AWAITING_CITY
        self.last_prayer = None
        self.pending_location = None

    def await_confirmation(self, location: PendingLocation) -> None:
        self.state = ConversationState.AWAITING_LOCATION_CONFIRMATION
        self.last_prayer = None
        self.pending_location = location

    def await_prayer(self) -> None:
        self.state = ConversationState.AWAITING_PRAYER
        self.last_prayer = None
        self.pending_location = None

    def await_offset(self, prayer: str) -> None:
        if prayer != ALL_PRAYERS:
            prayer = Prayer(prayer).value
        self.state = ConversationState.AWAITING_OFFSET
        self.last_prayer = prayer
        self.pending_location = None

    def to_data(self) -> dict[str, Any]:
        """Serialize the JSON payload stored in sessions.data."""
        return {
            "lang": self.lang.value,
            "state": self.state.value,
            "lastPrayer": self.last_prayer,
            "pendingLocation": self.pending_location.to_dict()
            if self.pending_location
            else None,
            "reminders": [r.to_dict() for r in self.reminders],
        }

    @classmethod
    def from_data(cls, telegram_id: int, data: dict[str, Any]) -> "Session":
        """Rebuild a session from its stored JSON payload."""
        try:
            lang = Language(data.get("lang") or DEFAULT_LANGUAGE.value)
        except ValueError:
            lang = DEFAULT_LANGUAGE

        try:
            state = ConversationState(data.get("state") or ConversationState.AWAITING_LANGUAGE.value)
        except ValueError:
            state = ConversationState.AWAITING_LANGUAGE

        pending = data.get("pendingLocation")
        return cls(
            telegram_id=telegram_id,
            lang=lang,
            state=state,
            last_prayer=data.get("lastPrayer") or None,
            pending_location=PendingLocation.from_dict(pending) if pending else None,
            reminders=[ReminderSummary.from_dict(r) for r in data.get("reminders") or []],
        )


@dataclass
class GeocodeResult:
    """Best match for a free-text place query."""

    latitude: float
    longitude: float
    display_name: str


@dataclass
class PrayerTimes:
    """The six prayer instants for one day, all in UTC."""

    fajr: datetime
    sunrise: datetime
    dhuhr: datetime
    asr: datetime
    maghrib: datetime
    isha: datetime

    def get(self, prayer: Prayer) -> datetime:
        return getattr(self, prayer.value)

    def items(self) -> list[tuple[Prayer, datetime]]:
        return [(prayer, self.get(prayer)) for prayer in Prayer]
