"""Test doubles for the external collaborators."""

from datetime import date, datetime
from zoneinfo import ZoneInfo

from azanbot.db.models import GeocodeResult, PrayerTimes
from azanbot.utils.errors import UpstreamError
from azanbot.utils.time_utils import local_date

UTC = ZoneInfo("UTC")

# Riyadh is UTC+3 all year: fajr 05:00, dhuhr 12:30 local
DEFAULT_TIMES = {
    "fajr": (2, 0),
    "sunrise": (3, 20),
    "dhuhr": (9, 30),
    "asr": (12, 50),
    "maghrib": (15, 40),
    "isha": (17, 10),
}


class FakeResolver:
    """Location resolver with canned answers."""

    def __init__(self, places: dict[str, tuple[GeocodeResult, str]] | None = None):
        self.places = places or {
            "cairo": (GeocodeResult(30.0444, 31.2357, "Cairo, Egypt"), "Africa/Cairo"),
            "riyadh": (GeocodeResult(24.7136, 46.6753, "Riyadh, Saudi Arabia"), "Asia/Riyadh"),
        }
        self.queries: list[str] = []

    async def geocode(self, city: str) -> GeocodeResult | None:
        self.queries.append(city)
        place = self.places.get(city.lower())
        return place[0] if place else None

    async def timezone_for(self, latitude: float, longitude: float) -> str:
        for result, tz in self.places.values():
            if (result.latitude, result.longitude) == (latitude, longitude):
                return tz
        raise UpstreamError("no timezone")


class FakeCalculator:
    """Prayer time calculator returning fixed UTC clock times for any day.

    `times` maps prayer name to (hour, minute) in UTC. Latitudes listed in
    `failing_latitudes` raise UpstreamError.
    """

    def __init__(self, times: dict[str, tuple[int, int]], failing_latitudes=()):
        self.times = times
        self.failing_latitudes = set(failing_latitudes)

    def compute(self, latitude: float, longitude: float, day: date) -> PrayerTimes:
        if latitude in self.failing_latitudes:
            raise UpstreamError(f"bad coordinates {latitude}")
        return PrayerTimes(
            **{
                name: datetime(day.year, day.month, day.day, hour, minute, tzinfo=UTC)
                for name, (hour, minute) in self.times.items()
            }
        )

    def compute_for_user_day(self, latitude, longitude, now, tz) -> PrayerTimes:
        return self.compute(latitude, longitude, local_date(now, tz))
