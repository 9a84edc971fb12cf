"""Astronomical prayer time calculation."""

import logging
from datetime import date, datetime
from zoneinfo import ZoneInfo

from adhanpy.calculation.CalculationMethod import CalculationMethod
from adhanpy.PrayerTimes import PrayerTimes as AdhanPrayerTimes

from azanbot.db.models import PrayerTimes
from azanbot.utils.errors import UpstreamError
from azanbot.utils.time_utils import local_date

logger = logging.getLogger(__name__)

UTC = ZoneInfo("UTC")


class PrayerTimesCalculator:
    """Compute the six daily prayer instants for a location.

    Pure CPU work, cheap enough to run for every user on every tick.
    """

    def __init__(self, method: CalculationMethod = CalculationMethod.MUSLIM_WORLD_LEAGUE):
        self.method = method

    def compute(self, latitude: float, longitude: float, day: date) -> PrayerTimes:
        """Prayer times for `day` at the given coordinates, as UTC instants."""
        try:
            times = AdhanPrayerTimes(
                (latitude, longitude),
                datetime(day.year, day.month, day.day),
                calculation_method=self.method,
                time_zone=UTC,
            )
        except Exception as e:
            raise UpstreamError(
                f"Prayer time calculation failed for ({latitude}, {longitude}) on {day}: {e}"
            ) from e

        return PrayerTimes(
            fajr=_as_utc(times.fajr),
            sunrise=_as_utc(times.sunrise),
            dhuhr=_as_utc(times.dhuhr),
            asr=_as_utc(times.asr),
            maghrib=_as_utc(times.maghrib),
            isha=_as_utc(times.isha),
        )

    def compute_for_user_day(
        self, latitude: float, longitude: float, now: datetime, tz: str
    ) -> PrayerTimes:
        """Prayer times for the calendar day `now` falls on in the user's timezone."""
        return self.compute(latitude, longitude, local_date(now, tz))


def _as_utc(dt: datetime) -> datetime:
    if dt.tzinfo is None:
        return dt.replace(tzinfo=UTC)
    return dt.astimezone(UTC)
