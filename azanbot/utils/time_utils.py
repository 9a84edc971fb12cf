"""Time and timezone utilities."""

from datetime import date, datetime, timedelta
from zoneinfo import ZoneInfo

from azanbot.utils.constants import Language

_ARABIC_DIGITS = str.maketrans("0123456789", "٠١٢٣٤٥٦٧٨٩")


def to_utc(dt: datetime, tz: str) -> datetime:
    """Convert a timezone-aware datetime to UTC."""
    if dt.tzinfo is None:
        # Assume it's in the given timezone
        dt = dt.replace(tzinfo=ZoneInfo(tz))
    return dt.astimezone(ZoneInfo("UTC"))


def from_utc(dt: datetime, tz: str) -> datetime:
    """Convert a UTC datetime to the given timezone."""
    if dt.tzinfo is None:
        dt = dt.replace(tzinfo=ZoneInfo("UTC"))
    return dt.astimezone(ZoneInfo(tz))


def local_date(now: datetime, tz: str) -> date:
    """Calendar date of `now` as seen in the given timezone."""
    return from_utc(now, tz).date()


def same_local_minute(a: datetime, b: datetime, tz: str) -> bool:
    """Check whether two instants show the same wall-clock hour and minute.

    Both instants are converted to `tz` first. Seconds and the calendar date
    are ignored, so this is the trigger used by the per-minute sweep.
    """
    local_a = from_utc(a, tz)
    local_b = from_utc(b, tz)
    return (local_a.hour, local_a.minute) == (local_b.hour, local_b.minute)


def to_arabic_numerals(value: int | str) -> str:
    """Render Western digits as Arabic-Indic digits."""
    return str(value).translate(_ARABIC_DIGITS)


def localize_number(value: int | str, lang: Language) -> str:
    """Render a number for the given language."""
    if lang is Language.AR:
        return to_arabic_numerals(value)
    return str(value)


def format_clock(dt: datetime, tz: str, lang: Language) -> str:
    """Format an instant as a 12-hour local clock time.

    Examples:
        en -> "5:04 AM"
        ar -> "٥:٠٤ ص"
    """
    local_dt = from_utc(dt, tz)
    hour = local_dt.hour % 12 or 12
    is_morning = local_dt.hour < 12

    if lang is Language.AR:
        suffix = "ص" if is_morning else "م"
        return f"{to_arabic_numerals(hour)}:{to_arabic_numerals(f'{local_dt.minute:02d}')} {suffix}"

    suffix = "AM" if is_morning else "PM"
    return f"{hour}:{local_dt.minute:02d} {suffix}"


def seconds_until_next_minute(now: datetime | None = None) -> float:
    """Seconds from `now` until the next wall-clock minute boundary."""
    if now is None:
        now = datetime.now(ZoneInfo("UTC"))

    next_minute = now.replace(second=0, microsecond=0) + timedelta(minutes=1)
    return (next_minute - now).total_seconds()
